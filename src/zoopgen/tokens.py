"""Token type definitions for the subset of Zig that zoopgen scans.

The scanner only needs declaration-level structure, so the token set is
small: identifiers, keywords, literals and punctuation. Every token keeps
the whitespace and comments that preceded it so a token slice can be
rendered back to the exact source text.
"""

from enum import Enum, auto
from dataclasses import dataclass


class TokenType(Enum):
    # Literals
    INT_LIT = auto()
    FLOAT_LIT = auto()
    STRING_LIT = auto()
    MULTILINE_STRING_LIT = auto()  # \\ line
    CHAR_LIT = auto()
    IDENT = auto()
    BUILTIN = auto()  # @import, @This, ...

    # Zig keywords the scanner looks at
    CONST = auto()
    VAR = auto()
    PUB = auto()
    FN = auto()
    INLINE = auto()
    EXPORT = auto()
    EXTERN = auto()
    STRUCT = auto()
    COMPTIME = auto()
    OTHER_KEYWORD = auto()

    # Operators
    DOT = auto()           # .
    DOT_LBRACE = auto()    # .{
    COMMA = auto()         # ,
    COLON = auto()         # :
    SEMICOLON = auto()     # ;
    EQ = auto()            # =
    STAR = auto()          # *
    BANG = auto()          # !
    QUESTION = auto()      # ?
    OPERATOR = auto()      # any other operator

    # Delimiters
    LPAREN = auto()        # (
    RPAREN = auto()        # )
    LBRACKET = auto()      # [
    RBRACKET = auto()      # ]
    LBRACE = auto()        # {
    RBRACE = auto()        # }

    EOF = auto()


@dataclass
class Token:
    type: TokenType
    value: str
    line: int
    col: int
    leading: str = ""

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.col})"

    @property
    def text(self) -> str:
        """Source text of this token including its leading trivia."""
        return self.leading + self.value


def render(tokens: list[Token], strip_leading: bool = True) -> str:
    """Render a token slice back to source text."""
    if not tokens:
        return ""
    parts = [t.text for t in tokens]
    if strip_leading:
        parts[0] = tokens[0].value
    return "".join(parts)


def leading_doc_comment(tok: Token) -> str | None:
    """Extract a `///` doc comment block directly attached to a token.

    Only the doc lines after the last blank line are considered attached.
    """
    # Last element is the indentation on the token's own line
    lines = tok.leading.split("\n")[:-1]
    doc: list[str] = []
    for raw in lines:
        line = raw.strip()
        if line.startswith("///") and not line.startswith("////"):
            doc.append(line[3:].removeprefix(" "))
        else:
            doc = []
    return "\n".join(doc) if doc else None


KEYWORDS: dict[str, TokenType] = {
    "const": TokenType.CONST,
    "var": TokenType.VAR,
    "pub": TokenType.PUB,
    "fn": TokenType.FN,
    "inline": TokenType.INLINE,
    "export": TokenType.EXPORT,
    "extern": TokenType.EXTERN,
    "struct": TokenType.STRUCT,
    "comptime": TokenType.COMPTIME,
}

# Remaining reserved words: never rewritten, never treated as names
for _kw in (
    "addrspace", "align", "allowzero", "and", "anyframe", "anytype", "asm",
    "async", "await", "break", "callconv", "catch", "continue", "defer",
    "else", "enum", "errdefer", "error", "for", "if", "linksection",
    "noalias", "noinline", "nosuspend", "opaque", "or", "orelse", "packed",
    "resume", "return", "suspend", "switch", "test", "threadlocal", "try",
    "union", "unreachable", "usingnamespace", "volatile", "while",
):
    KEYWORDS[_kw] = TokenType.OTHER_KEYWORD

# Operator lookup table: string -> TokenType (longest match wins in the lexer)
OPERATORS: dict[str, TokenType] = {
    ".": TokenType.DOT,
    ".{": TokenType.DOT_LBRACE,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
    ";": TokenType.SEMICOLON,
    "=": TokenType.EQ,
    "*": TokenType.STAR,
    "!": TokenType.BANG,
    "?": TokenType.QUESTION,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
}
for _op in (
    "+", "-", "/", "%", "&", "|", "^", "~", "<", ">", "==", "!=", "<=", ">=",
    "<<", ">>", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<=", ">>=",
    "+%", "-%", "*%", "+|", "-|", "*|", "<<|", "+%=", "-%=", "*%=", "+|=",
    "-|=", "*|=", "<<|=", "**", "++", "||", "=>", "..", "...", ".*", ".?",
):
    OPERATORS.setdefault(_op, TokenType.OPERATOR)

# Token types that open / close a nesting level
OPENERS: set[TokenType] = {
    TokenType.LPAREN, TokenType.LBRACKET, TokenType.LBRACE, TokenType.DOT_LBRACE,
}
CLOSERS: set[TokenType] = {
    TokenType.RPAREN, TokenType.RBRACKET, TokenType.RBRACE,
}
