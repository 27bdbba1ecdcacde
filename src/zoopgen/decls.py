"""Declaration records produced by the scanner.

A record is created once per `zoop.class(...)` / `zoop.mixin(...)` occurrence
and is never modified afterwards; every later stage reads it through the
registry.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .tokens import CLOSERS, OPENERS, Token, TokenType, render


class DeclKind(Enum):
    CLASS = "class"
    MIXIN = "mixin"


class AccessMode(Enum):
    READ_ONLY = "read_only"
    READ_WRITE = "read_write"


@dataclass
class SourceUnit:
    """One input file: `name` is its normalized relative path."""
    name: str
    text: str

    def __post_init__(self):
        self.name = normalize_unit_name(self.name)


@dataclass
class TypeRef:
    """A reference to another declaration: `Name` or `alias.Name`."""
    parts: list[str] = field(default_factory=list)
    line: int = 0
    col: int = 0

    @property
    def text(self) -> str:
        return ".".join(self.parts)

    @property
    def name(self) -> str:
        return self.parts[-1]

    @property
    def alias(self) -> Optional[str]:
        return self.parts[0] if len(self.parts) > 1 else None


@dataclass
class ImportDecl:
    alias: str = ""
    path: str = ""
    member: Optional[str] = None
    line: int = 0
    col: int = 0


@dataclass
class FieldDef:
    name: str = ""
    type_text: str = ""
    default_text: Optional[str] = None
    doc: Optional[str] = None
    line: int = 0
    col: int = 0


@dataclass
class PropertyDef:
    name: str = ""
    type_text: str = ""
    access: AccessMode = AccessMode.READ_ONLY
    doc: Optional[str] = None
    line: int = 0
    col: int = 0


@dataclass
class MethodDef:
    """A method kept as a token stream: signature tokens then body tokens.

    `name_index` points at the name token, `params_end` at the `)` closing
    the parameter list and `body_index` at the `{` that opens the body.
    """
    name: str = ""
    tokens: list[Token] = field(default_factory=list)
    name_index: int = 0
    params_end: int = 0
    body_index: int = 0
    is_static: bool = False
    doc: Optional[str] = None
    line: int = 0
    col: int = 0

    @property
    def signature_tokens(self) -> list[Token]:
        return self.tokens[:self.body_index]

    @property
    def body_tokens(self) -> list[Token]:
        return self.tokens[self.body_index:]

    @property
    def signature(self) -> str:
        return render(self.signature_tokens).rstrip()

    @property
    def body(self) -> str:
        return render(self.body_tokens)

    @property
    def text(self) -> str:
        return render(self.tokens)

    @property
    def params_text(self) -> str:
        """Parameter list including the parentheses."""
        return render(self.tokens[self.name_index + 1:self.params_end + 1])

    @property
    def return_type(self) -> str:
        return render(self.tokens[self.params_end + 1:self.body_index]).strip()

    def first_param_type(self) -> list[str]:
        """Type of the first parameter as token values, pointer qualifiers dropped."""
        param: list[Token] = []
        depth = 0
        for tok in self.tokens[self.name_index + 2:self.params_end]:
            if tok.type in OPENERS:
                depth += 1
            elif tok.type in CLOSERS:
                depth -= 1
            elif tok.type == TokenType.COMMA and depth == 0:
                break
            param.append(tok)
        colon = next((i for i, t in enumerate(param) if t.type == TokenType.COLON), None)
        if colon is None:
            return []
        return [t.value for t in param[colon + 1:]
                if t.type not in (TokenType.STAR, TokenType.CONST)]

    def takes_receiver(self, owner: str, self_aliases: set[str]) -> bool:
        """True iff the first parameter is typed `T`, `*T`, `*const T` or `@This()`.

        T is the owning declaration's name or one of its `@This()` aliases.
        """
        type_values = self.first_param_type()
        if len(type_values) == 1:
            return type_values[0] == owner or type_values[0] in self_aliases
        return type_values == ["@This", "(", ")"]


@dataclass
class NestedDecl:
    """A `const`/`var`/`test`/`comptime` member kept verbatim.

    Aliases of `@This()` are the only nested declarations that descendants
    inherit, since they stay valid in any struct.
    """
    name: str = ""
    tokens: list[Token] = field(default_factory=list)
    is_self_alias: bool = False
    doc: Optional[str] = None
    line: int = 0
    col: int = 0

    @property
    def text(self) -> str:
        return render(self.tokens)


@dataclass
class DeclarationRecord:
    name: str = ""
    kind: DeclKind = DeclKind.CLASS
    unit: str = ""
    parent: Optional[TypeRef] = None
    mixins: list[TypeRef] = field(default_factory=list)
    fields: list[FieldDef] = field(default_factory=list)
    properties: list[PropertyDef] = field(default_factory=list)
    methods: list[MethodDef] = field(default_factory=list)
    nested: list[NestedDecl] = field(default_factory=list)
    is_pub: bool = False
    doc: Optional[str] = None
    line: int = 0
    col: int = 0
    end_line: int = 0
    # Token index range [start, end) of the whole declaration in its unit
    span: tuple[int, int] = (0, 0)

    @property
    def qualified_name(self) -> str:
        return qualify(self.unit, self.name)

    @property
    def is_empty(self) -> bool:
        return not (self.parent or self.mixins or self.fields or self.properties
                    or self.methods or self.nested)


@dataclass
class UnitScan:
    """Everything the scanner extracted from one unit."""
    unit: SourceUnit
    tokens: list[Token] = field(default_factory=list)
    records: list[DeclarationRecord] = field(default_factory=list)
    imports: dict[str, ImportDecl] = field(default_factory=dict)
    # Token index ranges [start, end) of `const zoop = @import("zoop");`
    marker_imports: list[tuple[int, int]] = field(default_factory=list)
    errors: list = field(default_factory=list)


def normalize_unit_name(name: str) -> str:
    name = name.replace("\\", "/")
    return posixpath.normpath(name) if name else name


def qualify(unit: str, name: str) -> str:
    return f"{unit}:{name}"


def resolve_import_path(unit: str, path: str) -> str:
    """Resolve an `@import` path relative to the importing unit's directory."""
    return normalize_unit_name(posixpath.join(posixpath.dirname(unit), path))
