"""
Per-document state and the query boundary for CursorScript LSP.

The engine owns the open documents' text and their AST cache. Edits go
through ``open``/``change``/``close`` and return the diagnostics to publish;
queries build a fresh ``DocumentAnalyzer`` over the current text and the
last good Program.
"""

import logging
from typing import Optional

from lsprotocol import types

from cursorscript.compiler.parser import parse
from cursorscript.lsp.analyzer import DocumentAnalyzer
from cursorscript.lsp.cache import ASTCache
from cursorscript.lsp.completions import CompletionProvider
from cursorscript.lsp.diagnostics import DiagnosticProvider, ParseFunction
from cursorscript.lsp.formatting import FormatConfig, LSPFormatter

logger = logging.getLogger(__name__)


class CursorScriptEngine:
    """
    Language intelligence for a set of open CursorScript documents.

    A document whose latest text fails to parse keeps its previous Program
    for queries and reports exactly one diagnostic. Failure state is per
    document.
    """

    def __init__(self, parse_fn: ParseFunction = parse) -> None:
        """
        Initialize the engine.

        Args:
            parse_fn: Parser collaborator, called as ``parse_fn(text, uri)``
        """
        self.parse_fn = parse_fn
        self.cache = ASTCache()
        self._documents: dict[str, str] = {}
        self._completion_provider = CompletionProvider()

    # =========================================================================
    # Document Synchronization
    # =========================================================================

    def open(self, uri: str, text: str) -> list[types.Diagnostic]:
        """Track a newly opened document and return its diagnostics."""
        logger.info(f"Document opened: {uri}")
        return self._update(uri, text)

    def change(self, uri: str, text: str) -> list[types.Diagnostic]:
        """Replace a document's full text and return its diagnostics."""
        return self._update(uri, text)

    def close(self, uri: str) -> list[types.Diagnostic]:
        """Forget a document; the empty result clears its diagnostics."""
        logger.info(f"Document closed: {uri}")
        self._documents.pop(uri, None)
        self.cache.evict(uri)
        return []

    def get_text(self, uri: str) -> Optional[str]:
        return self._documents.get(uri)

    def _update(self, uri: str, text: str) -> list[types.Diagnostic]:
        """Store the text, reparse, and refresh the cache on success."""
        self._documents[uri] = text

        try:
            program = self.parse_fn(text, uri)
        except Exception as e:
            logger.info(f"Parse failed for {uri}, keeping last good AST: {e}")
            provider = DiagnosticProvider(text, uri, self.parse_fn)
            return [provider.from_error(e)]

        self.cache.store(uri, program)
        logger.debug(f"Parsed {uri}: {len(program.body)} top-level statements")
        return []

    def _analyzer(self, uri: str) -> Optional[DocumentAnalyzer]:
        text = self._documents.get(uri)
        if text is None:
            return None
        return DocumentAnalyzer(text, uri, self.cache.get(uri))

    # =========================================================================
    # Queries
    # =========================================================================

    def completion(self, uri: str, line: int, character: int) -> list[types.CompletionItem]:
        """Completion items at a position; empty for unknown documents."""
        analyzer = self._analyzer(uri)
        if analyzer is None:
            return []
        return analyzer.get_completions(line, character)

    def resolve_completion(self, item: types.CompletionItem) -> types.CompletionItem:
        return self._completion_provider.resolve(item)

    def hover(self, uri: str, line: int, character: int) -> Optional[types.Hover]:
        analyzer = self._analyzer(uri)
        if analyzer is None:
            return None
        return analyzer.get_hover(line, character)

    def definition(self, uri: str, line: int, character: int) -> Optional[types.Location]:
        analyzer = self._analyzer(uri)
        if analyzer is None:
            return None
        return analyzer.get_definition(line, character)

    def signature_help(
        self, uri: str, line: int, character: int
    ) -> Optional[types.SignatureHelp]:
        analyzer = self._analyzer(uri)
        if analyzer is None:
            return None
        return analyzer.get_signature_help(line, character)

    def document_symbols(self, uri: str) -> list[types.DocumentSymbol]:
        """Flat outline of the document's last good Program."""
        analyzer = self._analyzer(uri)
        if analyzer is None:
            return []
        return analyzer.get_document_symbols()

    def format(self, uri: str, tab_size: int = 4) -> list[types.TextEdit]:
        """
        Format a document.

        Args:
            uri: The document URI
            tab_size: Spaces per indentation level

        Returns:
            Edits replacing the whole document, or none when already formatted
        """
        text = self._documents.get(uri)
        if text is None:
            return []
        config = FormatConfig(tab_size=tab_size) if tab_size > 0 else FormatConfig()
        return LSPFormatter(config).format_document(text)
