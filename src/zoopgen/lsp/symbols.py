"""Document symbol provider: classes and mixins with their members."""

from __future__ import annotations

from lsprotocol import types as lsp

from ..decls import DeclarationRecord, DeclKind
from .diagnostics import AnalysisResult


def _pos(line: int, col: int) -> lsp.Position:
    """Convert 1-based position to 0-based LSP position."""
    return lsp.Position(line=max(0, line - 1), character=max(0, col - 1))


def _name_range(line: int, col: int, name: str) -> lsp.Range:
    start = _pos(line, col)
    return lsp.Range(start=start,
                     end=lsp.Position(line=start.line, character=start.character + len(name)))


def _line_range(line: int, col: int, source_lines: list[str]) -> lsp.Range:
    idx = max(0, line - 1)
    end_col = len(source_lines[idx]) if idx < len(source_lines) else 0
    return lsp.Range(start=_pos(line, col), end=lsp.Position(line=idx, character=end_col))


def _declaration_detail(record: DeclarationRecord) -> str:
    detail = record.kind.value
    if record.parent:
        detail += f" extends {record.parent.text}"
    if record.mixins:
        detail += " with " + ", ".join(m.text for m in record.mixins)
    return detail


def _children(record: DeclarationRecord, source_lines: list[str]) -> list[lsp.DocumentSymbol]:
    children = []
    for f in record.fields:
        children.append(lsp.DocumentSymbol(
            name=f.name, kind=lsp.SymbolKind.Field, detail=f.type_text,
            range=_line_range(f.line, f.col, source_lines),
            selection_range=_name_range(f.line, f.col, f.name),
        ))
    for p in record.properties:
        children.append(lsp.DocumentSymbol(
            name=p.name, kind=lsp.SymbolKind.Property,
            detail=f"{p.type_text} ({p.access.value})",
            range=_line_range(p.line, p.col, source_lines),
            selection_range=_name_range(p.line, p.col, p.name),
        ))
    for m in record.methods:
        first = m.tokens[0]
        last = m.tokens[-1]
        children.append(lsp.DocumentSymbol(
            name=m.name,
            kind=lsp.SymbolKind.Function if m.is_static else lsp.SymbolKind.Method,
            detail=m.signature,
            range=lsp.Range(start=_pos(first.line, first.col),
                            end=_pos(last.line, last.col + 1)),
            selection_range=_name_range(m.line, m.col, m.name),
        ))
    return children


def get_document_symbols(result: AnalysisResult) -> list[lsp.DocumentSymbol]:
    if not result.scan:
        return []
    source_lines = result.source.split("\n")
    symbols = []
    for record in result.scan.records:
        kind = (lsp.SymbolKind.Class if record.kind == DeclKind.CLASS
                else lsp.SymbolKind.Interface)
        end_idx = max(0, record.end_line - 1)
        end_col = len(source_lines[end_idx]) if end_idx < len(source_lines) else 0
        symbols.append(lsp.DocumentSymbol(
            name=record.name,
            kind=kind,
            detail=_declaration_detail(record),
            range=lsp.Range(start=_pos(record.line, 1),
                            end=lsp.Position(line=end_idx, character=end_col)),
            selection_range=_name_range(record.line, record.col, record.name),
            children=_children(record, source_lines),
        ))
    return symbols
