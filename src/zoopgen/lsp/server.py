#!/usr/bin/env python3
"""zoop Language Server.

Provides diagnostics, document symbols and hover for zoop class/mixin
sources by reusing the generator's scanner and resolution engine.
"""

import sys
import logging

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from .diagnostics import AnalysisResult, compute_diagnostics
from .hover import get_hover_info
from .symbols import get_document_symbols

logger = logging.getLogger("zoop-lsp")

server = LanguageServer("zoop-lsp", "0.1.0")

# Cache: uri -> AnalysisResult (latest, may have errors)
_analysis_cache: dict[str, AnalysisResult] = {}


def _validate_document(uri: str, source: str):
    """Run the generator and publish diagnostics."""
    result = compute_diagnostics(uri, source)
    _analysis_cache[uri] = result
    logger.debug("%s: %d diagnostic(s)", uri, len(result.diagnostics))
    server.text_document_publish_diagnostics(
        lsp.PublishDiagnosticsParams(uri=uri, diagnostics=result.diagnostics)
    )


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams):
    _validate_document(
        params.text_document.uri,
        params.text_document.text,
    )


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams):
    doc = server.workspace.get_text_document(params.text_document.uri)
    _validate_document(params.text_document.uri, doc.source)


@server.feature(lsp.TEXT_DOCUMENT_DID_SAVE)
def did_save(params: lsp.DidSaveTextDocumentParams):
    doc = server.workspace.get_text_document(params.text_document.uri)
    _validate_document(params.text_document.uri, doc.source)


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams):
    uri = params.text_document.uri
    _analysis_cache.pop(uri, None)
    server.text_document_publish_diagnostics(
        lsp.PublishDiagnosticsParams(uri=uri, diagnostics=[])
    )


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(params: lsp.DocumentSymbolParams):
    result = _analysis_cache.get(params.text_document.uri)
    if result and result.scan:
        return get_document_symbols(result)
    return []


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams):
    result = _analysis_cache.get(params.text_document.uri)
    if result:
        return get_hover_info(result, params.position)
    return None


def main():
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    server.start_io()


if __name__ == "__main__":
    main()
