"""Literal tokenization: strings, chars, multiline strings, numbers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .tokens import TokenType

if TYPE_CHECKING:
    from .lexer import Lexer


def read_string(lex: Lexer, token_type: TokenType = TokenType.STRING_LIT,
                prefix: str = ""):
    """Read a double-quoted string literal (escapes are kept verbatim)."""
    from .lexer import LexerError
    line, col = lex.line, lex.col
    lex._advance()  # skip opening "
    chars: list[str] = []
    while lex.pos < len(lex.source):
        ch = lex._peek()
        if ch == '"':
            lex._advance()
            value = prefix + '"' + ''.join(chars) + '"'
            lex._emit(token_type, value, line, col)
            return
        elif ch == '\\':
            chars.append(lex._advance())
            if lex.pos < len(lex.source):
                chars.append(lex._advance())
        elif ch == '\n':
            raise LexerError("Unterminated string literal", line, col)
        else:
            chars.append(lex._advance())
    raise LexerError("Unterminated string literal", line, col)


def read_char(lex: Lexer):
    """Read a single-quoted char literal."""
    from .lexer import LexerError
    line, col = lex.line, lex.col
    lex._advance()  # skip opening '
    chars: list[str] = []
    while lex.pos < len(lex.source):
        ch = lex._peek()
        if ch == "'":
            lex._advance()
            if not chars:
                raise LexerError("Empty character literal", line, col)
            value = "'" + ''.join(chars) + "'"
            lex._emit(TokenType.CHAR_LIT, value, line, col)
            return
        elif ch == '\\':
            chars.append(lex._advance())
            if lex.pos < len(lex.source):
                chars.append(lex._advance())
        elif ch == '\n':
            break
        else:
            chars.append(lex._advance())
    raise LexerError("Unterminated character literal", line, col)


def read_multiline_string(lex: Lexer):
    """Read one `\\\\` multiline string line, up to (not including) the newline."""
    line, col = lex.line, lex.col
    start = lex.pos
    while lex.pos < len(lex.source) and lex._peek() != '\n':
        lex._advance()
    lex._emit(TokenType.MULTILINE_STRING_LIT, lex.source[start:lex.pos], line, col)


def read_number(lex: Lexer):
    """Read an integer or float literal (decimal, hex, octal, binary)."""
    line, col = lex.line, lex.col
    start = lex.pos
    is_float = False

    if lex._peek() == '0' and lex._peek(1) in ('x', 'X', 'o', 'O', 'b', 'B'):
        radix = lex._peek(1).lower()
        lex._advance()
        lex._advance()
        allowed = {
            'x': "0123456789abcdefABCDEF_",
            'o': "01234567_",
            'b': "01_",
        }[radix]
        while lex.pos < len(lex.source) and lex._peek() in allowed:
            lex._advance()
        # Hex floats: 0x1.8p3
        if radix == 'x' and lex._peek() == '.' and lex._peek(1) in allowed:
            is_float = True
            lex._advance()
            while lex.pos < len(lex.source) and lex._peek() in allowed:
                lex._advance()
        if radix == 'x' and lex._peek() in ('p', 'P'):
            is_float = True
            _read_exponent(lex)
    else:
        _read_digits(lex)
        # `1..5` is a range, not a float
        if lex._peek() == '.' and lex._peek(1).isdigit():
            is_float = True
            lex._advance()
            _read_digits(lex)
        if lex._peek() in ('e', 'E'):
            is_float = True
            _read_exponent(lex)

    value = lex.source[start:lex.pos]
    lex._emit(TokenType.FLOAT_LIT if is_float else TokenType.INT_LIT, value, line, col)


def _read_digits(lex: Lexer):
    while lex.pos < len(lex.source) and (lex._peek().isdigit() or lex._peek() == '_'):
        lex._advance()


def _read_exponent(lex: Lexer):
    lex._advance()  # e / p
    if lex._peek() in ('+', '-'):
        lex._advance()
    _read_digits(lex)
