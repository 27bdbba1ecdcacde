"""Lexer for the Zig subset zoopgen scans.

Whitespace and comments are not dropped: they are collected as trivia and
attached to the following token, so rendering a token slice reproduces the
original text byte for byte.
"""

from .lexer_literals import read_char, read_multiline_string, read_number, read_string
from .tokens import KEYWORDS, OPERATORS, Token, TokenType


class LexerError(Exception):
    def __init__(self, message: str, line: int, col: int):
        self.line = line
        self.col = col
        super().__init__(f"{message} at {line}:{col}")


class Lexer:
    def __init__(self, source: str, filename: str = "<stdin>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.col = 1
        self.tokens: list[Token] = []
        self._trivia_start = 0

        self._op_trie = _build_trie(list(OPERATORS))

    def tokenize(self) -> list[Token]:
        while self.pos < len(self.source):
            self._skip_whitespace_and_comments()
            if self.pos >= len(self.source):
                break

            ch = self.source[self.pos]

            if ch == '@':
                self._read_builtin()
            elif ch == '"':
                read_string(self)
            elif ch == "'":
                read_char(self)
            elif ch == '\\' and self._peek(1) == '\\':
                read_multiline_string(self)
            elif ch.isdigit():
                read_number(self)
            elif ch.isalpha() or ch == '_':
                self._read_identifier()
            else:
                self._read_operator()

        self._emit(TokenType.EOF, "", self.line, self.col)
        return self.tokens

    # --- Character helpers ---

    def _peek(self, offset: int = 0) -> str:
        pos = self.pos + offset
        if pos < len(self.source):
            return self.source[pos]
        return '\0'

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _emit(self, token_type: TokenType, value: str, line: int, col: int):
        # Trivia runs from the end of the previous token to this token's start
        token_start = self.pos - len(value)
        leading = self.source[self._trivia_start:token_start]
        self.tokens.append(Token(token_type, value, line, col, leading))
        self._trivia_start = self.pos

    # --- Whitespace and comments ---

    def _skip_whitespace_and_comments(self):
        while self.pos < len(self.source):
            ch = self._peek()
            if ch in (' ', '\t', '\n', '\r'):
                self._advance()
            elif ch == '/' and self._peek(1) == '/':
                while self.pos < len(self.source) and self._peek() != '\n':
                    self._advance()
            else:
                break

    # --- Builtins and quoted identifiers ---

    def _read_builtin(self):
        line, col = self.line, self.col
        if self._peek(1) == '"':
            self._advance()  # skip @
            read_string(self, TokenType.IDENT, prefix="@")
            return
        start = self.pos
        self._advance()  # skip @
        while self.pos < len(self.source) and (self._peek().isalnum() or self._peek() == '_'):
            self._advance()
        value = self.source[start:self.pos]
        if value == "@":
            raise LexerError("Expected builtin name after '@'", line, col)
        self._emit(TokenType.BUILTIN, value, line, col)

    # --- Identifier / keyword ---

    def _read_identifier(self):
        line, col = self.line, self.col
        start = self.pos
        while self.pos < len(self.source) and (self._peek().isalnum() or self._peek() == '_'):
            self._advance()
        value = self.source[start:self.pos]
        token_type = KEYWORDS.get(value, TokenType.IDENT)
        self._emit(token_type, value, line, col)

    # --- Operators and punctuation (trie-based longest match) ---

    def _read_operator(self):
        line, col = self.line, self.col

        node = self._op_trie
        best_match = None
        best_len = 0
        i = 0
        while self.pos + i < len(self.source):
            ch = self.source[self.pos + i]
            if ch not in node:
                break
            node = node[ch]
            i += 1
            if '' in node:  # terminal marker
                best_match = node['']
                best_len = i

        if best_match is not None:
            value = self.source[self.pos:self.pos + best_len]
            for _ in range(best_len):
                self._advance()
            self._emit(best_match, value, line, col)
            return

        ch = self._peek()
        raise LexerError(f"Unexpected character '{ch}'", line, col)


def _build_trie(operators: list[str]) -> dict:
    """Build a trie from operator strings for longest-match tokenization.

    Each node is a dict mapping character -> child node.
    Terminal nodes have '' -> TokenType entry.
    """
    root: dict = {}
    for op in operators:
        token_type = OPERATORS[op]
        node = root
        for ch in op:
            if ch not in node:
                node[ch] = {}
            node = node[ch]
        node[''] = token_type
    return root
