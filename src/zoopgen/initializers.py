"""Generated `init` for descendants that add members.

When a class extends a parent whose resolved method list has a static
`init`, does not write an `init` itself, and adds members without a
default, a copy of the parent's `init` could not set those members. The
descendant instead gets an `init` taking the parent's parameters followed by
one parameter per such member. Its body calls the parent's `init` and
copies every inherited member out of the result:

    pub fn init(name: []const u8, breed: []const u8) Dog {
        const inherited = base.Animal.init(name);
        return .{
            .name = inherited.name,
            .breed = breed,
        };
    }

A parent `init` returning an error union is called with `try` and the
generated `init` keeps the same error set.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .decls import DeclarationRecord, MethodDef
from .diagnostics import DiagnosticSink
from .lexer import Lexer
from .methods import RESERVED_PARAMS, find_init, rewrite_type_name
from .tokens import CLOSERS, OPENERS, Token, TokenType, render

if TYPE_CHECKING:
    from .flatten import FlattenedResult, Member

logger = logging.getLogger(__name__)

INDENT = "    "


def added_members(result: FlattenedResult, parent: FlattenedResult) -> list[Member]:
    """Members not carried over unchanged from the parent."""
    inherited = {(m.name, m.origin) for m in parent.members}
    return [m for m in result.members if (m.name, m.origin) not in inherited]


def smart_init(record: DeclarationRecord, parent_record: DeclarationRecord,
               result: FlattenedResult, parent: FlattenedResult,
               sink: DiagnosticSink) -> MethodDef | None:
    """The `init` to emit in place of the parent's, or None to copy it as is.

    `result` must already carry the flattened members and self aliases.
    """
    if record.parent is None or any(m.name == "init" for m in record.methods):
        return None
    base = find_init(parent)
    if base is None:
        return None
    added = added_members(result, parent)
    needed = [m for m in added if m.default_text is None]
    if not needed:
        return None

    method = base.method
    tokens = rewrite_type_name(method.tokens, parent_record.name, record.name)
    params = _split_params(tokens[method.name_index + 2:method.params_end])
    names = [_param_name(p) for p in params]
    if None in names:
        return _skip(record, sink, "a parameter of the parent's init has no name")

    ret = tokens[method.params_end + 1:method.body_index]
    bang = _error_union_split(ret)
    error_prefix = render(ret[:bang + 1]) if bang is not None else ""
    aliases = {a.name for a in result.self_aliases}
    if not _names_self(ret[bang + 1 if bang is not None else 0:], record.name, aliases):
        return _skip(record, sink,
                     f"the parent's init returns '{render(ret).strip()}', "
                     f"not '{parent_record.name}'")

    taken = set(names)
    param_of: dict[str, str] = {}
    for member in needed:
        name = member.name
        if name in RESERVED_PARAMS or name in taken:
            name += "_"
        while name in taken:
            name += "_"
        taken.add(name)
        param_of[member.name] = name
    local = "inherited"
    while local in taken:
        local += "_"

    fn_index = method.name_index - 1
    qualifiers = render(tokens[:fn_index]) + " " if fn_index > 0 else ""
    signature = ", ".join(
        [render(p).strip() for p in params]
        + [f"{param_of[m.name]}: {m.type_text}" for m in needed])
    call = (f"{'try ' if error_prefix else ''}{record.parent.text}.init"
            f"({', '.join(names)})")
    from_parent = [m for m in result.members if m not in added]

    body = INDENT * 2
    lines = [f"{qualifiers}fn init({signature}) {error_prefix}{record.name} {{"]
    if from_parent:
        lines.append(f"{body}const {local} = {call};")
    else:
        lines.append(f"{body}_ = {call};")
    lines.append(f"{body}return .{{")
    for member in result.members:
        if member.name in param_of:
            lines.append(f"{body}{INDENT}.{member.name} = {param_of[member.name]},")
        elif member in from_parent:
            lines.append(f"{body}{INDENT}.{member.name} = {local}.{member.name},")
    lines.append(f"{body}}};")
    lines.append(f"{INDENT}}}")

    logger.debug("%s: generated init with %d added parameter(s)", record.name, len(needed))
    return _method_from_text("\n".join(lines), method.doc, record)


def _skip(record: DeclarationRecord, sink: DiagnosticSink, reason: str) -> None:
    sink.warn(
        record.name, "SmartInitSkipped",
        f"Cannot generate init for '{record.name}': {reason}; "
        f"the parent's init is copied unchanged",
        unit=record.unit, line=record.line, col=record.col,
    )
    return None


def _split_params(tokens: list[Token]) -> list[list[Token]]:
    groups: list[list[Token]] = [[]]
    depth = 0
    for tok in tokens:
        if tok.type in OPENERS:
            depth += 1
        elif tok.type in CLOSERS:
            depth -= 1
        elif tok.type == TokenType.COMMA and depth == 0:
            groups.append([])
            continue
        groups[-1].append(tok)
    return [g for g in groups if g]


def _param_name(param: list[Token]) -> str | None:
    i = 0
    while i < len(param) and param[i].value in ("comptime", "noalias"):
        i += 1
    if (i + 1 < len(param) and param[i].type == TokenType.IDENT
            and param[i + 1].type == TokenType.COLON):
        return param[i].value
    return None


def _error_union_split(ret: list[Token]) -> int | None:
    """Index of the `!` separating an error set from the payload type."""
    depth = 0
    found = None
    for i, tok in enumerate(ret):
        if tok.type in OPENERS:
            depth += 1
        elif tok.type in CLOSERS:
            depth -= 1
        elif tok.type == TokenType.BANG and depth == 0:
            found = i
    return found


def _names_self(payload: list[Token], name: str, aliases: set[str]) -> bool:
    values = [t.value for t in payload]
    if len(values) == 1:
        return values[0] == name or values[0] in aliases
    return values == ["@This", "(", ")"]


def _method_from_text(text: str, doc: str | None, record: DeclarationRecord) -> MethodDef:
    tokens = Lexer(text, record.unit).tokenize()[:-1]
    fn_index = next(i for i, t in enumerate(tokens) if t.type == TokenType.FN)
    name_index = fn_index + 1
    params_end = _matching(tokens, name_index + 1)
    # The body opens at the brace matching the final `}`
    depth = 0
    body_index = len(tokens) - 1
    for i in range(len(tokens) - 1, params_end, -1):
        if tokens[i].type in CLOSERS:
            depth += 1
        elif tokens[i].type in OPENERS:
            depth -= 1
            if depth == 0:
                body_index = i
                break
    return MethodDef(
        name="init", tokens=tokens, name_index=name_index, params_end=params_end,
        body_index=body_index, is_static=True, doc=doc,
        line=record.line, col=record.col,
    )


def _matching(tokens: list[Token], start: int) -> int:
    depth = 0
    for i in range(start, len(tokens)):
        if tokens[i].type in OPENERS:
            depth += 1
        elif tokens[i].type in CLOSERS:
            depth -= 1
            if depth == 0:
                return i
    return len(tokens) - 1
