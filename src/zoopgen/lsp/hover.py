"""Hover provider: the fully resolved shape of a class or mixin."""

from __future__ import annotations

from typing import Optional

from lsprotocol import types as lsp

from ..decls import DeclarationRecord, TypeRef, qualify
from ..errors import UnknownDeclaration
from ..flatten import FlattenedResult, MemberKind, own_members
from ..tokens import Token, TokenType
from .diagnostics import AnalysisResult


def find_token_at_position(
    tokens: list[Token], position: lsp.Position
) -> Optional[Token]:
    """Find the token that covers the given 0-based LSP position."""
    target_line = position.line + 1
    target_col = position.character + 1

    for tok in tokens:
        if tok.type == TokenType.EOF:
            continue
        if tok.line != target_line:
            continue
        tok_end_col = tok.col + len(tok.value)
        if tok.col <= target_col < tok_end_col:
            return tok
    return None


def _format_header(record: DeclarationRecord) -> str:
    line = f"const {record.name} = zoop.{record.kind.value}"
    if record.parent:
        line += f"  // extends {record.parent.text}"
    if record.mixins:
        line += ("  // " if not record.parent else ", ") + "mixins " + ", ".join(
            m.text for m in record.mixins)
    return f"```zig\n{line}\n```"


def _format_resolved(record: DeclarationRecord, flat: FlattenedResult,
                     names: dict[int, str]) -> str:
    lines = [_format_header(record)]
    if flat.members:
        lines.append("\n**Members:**")
        for m in flat.members:
            suffix = ""
            if m.kind == MemberKind.PROPERTY:
                suffix = f" *({m.access.value} property)*"
            origin = names.get(m.origin, "")
            if origin and origin != record.name:
                suffix += f" from `{origin}`"
            lines.append(f"- `{m.name}: {m.type_text}`{suffix}")
    if flat.methods:
        lines.append("\n**Methods:**")
        for rm in flat.methods:
            note = " *(inherited)*" if rm.inherited else ""
            lines.append(f"- `{rm.method.signature}`{note}")
    if flat.accessors:
        lines.append("\n**Accessors:** " + ", ".join(f"`{a.name}`" for a in flat.accessors))
    return "\n".join(lines)


def _format_unresolved(record: DeclarationRecord) -> str:
    lines = [_format_header(record), "\n*Not resolved; showing own members only.*"]
    for m in own_members(record, -1):
        lines.append(f"- `{m.name}: {m.type_text}`")
    for method in record.methods:
        lines.append(f"- `{method.signature}`")
    return "\n".join(lines)


def _lookup(result: AnalysisResult, token: Token) -> Optional[str]:
    """Qualified name of the declaration a token names, if any."""
    generation = result.generation
    if generation and generation.registry:
        try:
            decl_id = generation.registry.resolve_reference(
                TypeRef([token.value], token.line, token.col), result.unit)
        except UnknownDeclaration:
            return None
        return generation.registry.get(decl_id).qualified_name
    if result.scan and any(r.name == token.value for r in result.scan.records):
        return qualify(result.unit, token.value)
    return None


def get_hover_info(
    result: AnalysisResult, position: lsp.Position
) -> Optional[lsp.Hover]:
    """Return hover information for the declaration name at the position."""
    if not result.scan or not result.scan.tokens:
        return None
    token = find_token_at_position(result.scan.tokens, position)
    if token is None or token.type != TokenType.IDENT:
        return None
    qualified = _lookup(result, token)
    if qualified is None:
        return None

    generation = result.generation
    flat = generation.results.get(qualified) if generation else None
    if flat is not None:
        registry = generation.registry
        names = {i: registry.display_name(i) for i in range(len(registry))}
        content = _format_resolved(registry.resolve(qualified), flat, names)
    else:
        record = next((r for r in result.scan.records
                       if r.qualified_name == qualified), None)
        if record is None:
            return None
        content = _format_unresolved(record)

    return lsp.Hover(
        contents=lsp.MarkupContent(kind=lsp.MarkupKind.Markdown, value=content),
        range=lsp.Range(
            start=lsp.Position(line=token.line - 1, character=token.col - 1),
            end=lsp.Position(line=token.line - 1,
                             character=token.col - 1 + len(token.value)),
        ),
    )
