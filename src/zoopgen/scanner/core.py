"""Scanner core: token manipulation, error handling, and scan() entry point."""

from __future__ import annotations

from ..decls import SourceUnit, TypeRef, UnitScan
from ..errors import ParseError
from ..tokens import CLOSERS, OPENERS, Token, TokenType


class ScannerBase:
    def __init__(self, tokens: list[Token], unit: SourceUnit):
        self.tokens = tokens
        self.unit = unit
        self.pos = 0

    def scan(self) -> UnitScan:
        result = UnitScan(unit=self.unit, tokens=self.tokens)
        while not self._at_end():
            self._scan_top_level_item(result)
        return result

    # ---- Token helpers ----

    def _peek(self, offset: int = 0) -> Token:
        pos = self.pos + offset
        if pos < len(self.tokens):
            return self.tokens[pos]
        return self.tokens[-1]  # EOF

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TokenType.EOF:
            self.pos += 1
        return tok

    def _at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _check(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _check_ident(self, value: str, offset: int = 0) -> bool:
        tok = self._peek(offset)
        return tok.type == TokenType.IDENT and tok.value == value

    def _match(self, *types: TokenType) -> Token | None:
        if self._peek().type in types:
            return self._advance()
        return None

    def _expect(self, token_type: TokenType, msg: str = "") -> Token:
        tok = self._peek()
        if tok.type == token_type:
            return self._advance()
        expected = msg or token_type.name
        got = f"{tok.type.name} '{tok.value}'" if tok.value else tok.type.name
        raise self._error(f"Expected {expected}, got {got}", tok)

    def _error(self, msg: str, tok: Token | None = None, *,
               declaration: str = "") -> ParseError:
        tok = tok or self._peek()
        return ParseError(msg, tok.line, tok.col,
                          declaration=declaration, unit=self.unit.name)

    # ---- Balanced skipping ----

    def _skip_group(self) -> int:
        """Skip a bracketed group starting at the current opener.

        Returns the index of the matching closer.
        """
        open_tok = self._advance()
        depth = 1
        while depth > 0:
            tok = self._peek()
            if tok.type == TokenType.EOF:
                raise self._error(f"Unclosed '{open_tok.value}'", open_tok)
            if tok.type in OPENERS:
                depth += 1
            elif tok.type in CLOSERS:
                depth -= 1
            self._advance()
        return self.pos - 1

    def _skip_until(self, *stops: TokenType) -> int:
        """Advance to the first stop token at the current nesting level.

        The stop token itself is not consumed. Returns its index.
        """
        while not self._check(*stops):
            tok = self._peek()
            if tok.type == TokenType.EOF:
                raise self._error("Unexpected end of file", tok)
            if tok.type in CLOSERS:
                raise self._error(f"Unbalanced '{tok.value}'", tok)
            if tok.type in OPENERS:
                self._skip_group()
            else:
                self._advance()
        return self.pos

    def _parse_type_ref(self) -> TypeRef:
        first = self._expect(TokenType.IDENT, "declaration reference")
        parts = [first.value]
        while self._check(TokenType.DOT) and self._peek(1).type == TokenType.IDENT:
            self._advance()
            parts.append(self._advance().value)
        return TypeRef(parts=parts, line=first.line, col=first.col)
