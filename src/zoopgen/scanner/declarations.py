"""Top-level dispatch: imports, the marker import, and class/mixin declarations."""

from __future__ import annotations

from ..decls import DeclarationRecord, DeclKind, ImportDecl, UnitScan, resolve_import_path
from ..tokens import TokenType, leading_doc_comment

MARKER_MODULE = "zoop"

MARKER_KINDS = {
    "class": DeclKind.CLASS,
    "mixin": DeclKind.MIXIN,
}

# Imports that never contain declarations
_IGNORED_IMPORTS = {"std", "builtin", "root", MARKER_MODULE}


class DeclarationsMixin:

    def _scan_top_level_item(self, result: UnitScan):
        tok = self._peek()

        if tok.type in (TokenType.CONST, TokenType.PUB):
            offset = 1 if tok.type == TokenType.PUB else 0
            if (self._peek(offset).type == TokenType.CONST
                    and self._peek(offset + 1).type == TokenType.IDENT
                    and self._peek(offset + 2).type == TokenType.EQ):
                value = self._peek(offset + 3)
                if (self._check_ident(MARKER_MODULE, offset + 3)
                        and self._peek(offset + 4).type == TokenType.DOT
                        and self._peek(offset + 5).value in MARKER_KINDS
                        and self._peek(offset + 6).type == TokenType.LPAREN):
                    result.records.append(self._scan_declaration())
                    return
                if value.type == TokenType.BUILTIN and value.value == "@import":
                    self._scan_import(result)
                    return

        if tok.type in (TokenType.LPAREN, TokenType.LBRACKET, TokenType.LBRACE,
                        TokenType.DOT_LBRACE):
            self._skip_group()
        elif tok.type in (TokenType.RPAREN, TokenType.RBRACKET, TokenType.RBRACE):
            raise self._error(f"Unbalanced '{tok.value}'", tok)
        else:
            self._advance()

    # ---- Imports ----

    def _scan_import(self, result: UnitScan):
        start = self.pos
        self._match(TokenType.PUB)
        self._expect(TokenType.CONST)
        alias_tok = self._expect(TokenType.IDENT, "import alias")
        self._expect(TokenType.EQ)
        self._advance()  # @import
        self._expect(TokenType.LPAREN)
        path_tok = self._expect(TokenType.STRING_LIT, "import path")
        self._expect(TokenType.RPAREN)
        member = None
        while self._match(TokenType.DOT):
            member = self._expect(TokenType.IDENT, "imported declaration name").value
        if not self._check(TokenType.SEMICOLON):
            # Something like @import("x.zig").Foo.bar(); not an import alias
            self._skip_until(TokenType.SEMICOLON)
            self._advance()
            return
        self._advance()

        path = path_tok.value[1:-1]
        if path == MARKER_MODULE:
            result.marker_imports.append((start, self.pos))
            return
        if path in _IGNORED_IMPORTS:
            return
        result.imports[alias_tok.value] = ImportDecl(
            alias=alias_tok.value,
            path=resolve_import_path(self.unit.name, path),
            member=member,
            line=alias_tok.line,
            col=alias_tok.col,
        )

    # ---- Class / mixin declaration ----

    def _scan_declaration(self) -> DeclarationRecord:
        start = self.pos
        first = self._peek()
        is_pub = self._match(TokenType.PUB) is not None
        self._expect(TokenType.CONST)
        name_tok = self._expect(TokenType.IDENT, "declaration name")
        name = name_tok.value
        self._expect(TokenType.EQ)
        self._advance()  # zoop
        self._advance()  # .
        kind = MARKER_KINDS[self._advance().value]
        self._expect(TokenType.LPAREN)
        if not self._check(TokenType.STRUCT):
            raise self._error(
                f"Expected 'struct' body in {kind.value} '{name}'", declaration=name)
        self._advance()
        self._expect(TokenType.LBRACE, "'{' after struct")

        record = DeclarationRecord(
            name=name, kind=kind, unit=self.unit.name, is_pub=is_pub,
            doc=leading_doc_comment(first), line=name_tok.line, col=name_tok.col,
        )
        self._scan_body(record)

        close = self._expect(TokenType.RBRACE, f"'}}' closing '{name}'")
        self._expect(TokenType.RPAREN, f"')' closing zoop.{kind.value}(")
        self._expect(TokenType.SEMICOLON, f"';' after '{name}'")
        record.end_line = close.line
        record.span = (start, self.pos)
        return record
