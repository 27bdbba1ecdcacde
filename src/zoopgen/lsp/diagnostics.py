"""Diagnostic computation for zoop documents.

Runs the generator over the open document plus every unit it imports
(read from disk, transitively) and converts the document's diagnostics into
LSP Diagnostic objects.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import unquote, urlparse

from lsprotocol import types as lsp

from ..decls import SourceUnit, UnitScan
from ..diagnostics import Diagnostic, Severity
from ..engine import GenerationResult, Generator
from ..scanner import scan_unit

# Units pulled in through imports, per document
MAX_IMPORTED_UNITS = 256


@dataclass
class AnalysisResult:
    """Cached result of analyzing a document."""

    uri: str
    source: str
    unit: str = ""
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)
    scan: Optional[UnitScan] = None
    generation: Optional[GenerationResult] = None


def uri_to_path(uri: str) -> str:
    """Convert file:// URI to filesystem path."""
    parsed = urlparse(uri)
    return unquote(parsed.path)


def _make_diagnostic(
    line: int,
    col: int,
    message: str,
    severity: lsp.DiagnosticSeverity = lsp.DiagnosticSeverity.Error,
    source: str = "zoopgen",
) -> lsp.Diagnostic:
    """Create an LSP Diagnostic.

    zoopgen uses 1-based line/col; LSP uses 0-based.
    """
    line_0 = max(0, line - 1)
    col_0 = max(0, col - 1)
    return lsp.Diagnostic(
        range=lsp.Range(
            start=lsp.Position(line=line_0, character=col_0),
            end=lsp.Position(line=line_0, character=col_0 + 1),
        ),
        message=message,
        severity=severity,
        source=source,
    )


def _to_lsp(diag: Diagnostic, unit: str) -> lsp.Diagnostic:
    severity = (lsp.DiagnosticSeverity.Error if diag.severity == Severity.ERROR
                else lsp.DiagnosticSeverity.Warning)
    message = f"{diag.kind}: {diag.message}"
    if diag.unit and diag.unit != unit:
        # Problem in an imported unit: pin it to the top of this document
        return _make_diagnostic(1, 1, f"{diag.unit}:{diag.line}:{diag.col}: {message}",
                                severity)
    return _make_diagnostic(diag.line, diag.col, message, severity)


def load_imported_units(root: str, document: SourceUnit) -> list[SourceUnit]:
    """The document plus every unit reachable through its imports."""
    units = [document]
    seen = {document.name}
    queue = [document]
    while queue and len(units) < MAX_IMPORTED_UNITS:
        scan = scan_unit(queue.pop(0))
        for imp in scan.imports.values():
            if imp.path in seen:
                continue
            seen.add(imp.path)
            path = os.path.join(root, *imp.path.split("/"))
            if not os.path.isfile(path):
                continue
            with open(path, "r", encoding="utf-8") as f:
                unit = SourceUnit(imp.path, f.read())
            units.append(unit)
            queue.append(unit)
    return units


def compute_diagnostics(uri: str, source: str) -> AnalysisResult:
    """Run the generator and return diagnostics for the document."""
    file_path = uri_to_path(uri)
    root = os.path.dirname(file_path)
    name = os.path.basename(file_path) or "untitled.zig"
    result = AnalysisResult(uri=uri, source=source, unit=name)

    document = SourceUnit(name, source)
    result.scan = scan_unit(document)
    units = load_imported_units(root, document)
    generation = Generator().run(units)
    result.generation = generation

    for diag in generation.diagnostics:
        result.diagnostics.append(_to_lsp(diag, name))
    return result
