"""
CursorScript Language Server Protocol (LSP) Server.

This module exposes the CursorScript engine over LSP using pygls (Python
Language Server). It provides IDE features including:

- Document synchronization (open, change, save, close)
- Diagnostics (parse errors)
- Completion suggestions
- Hover information
- Go-to-definition
- Signature help
- Document symbols (outline)
- Document formatting

Usage:
    # Start the server in stdio mode (for IDE integration)
    cursorscript-lsp

    # Start in TCP mode (for debugging)
    cursorscript-lsp --tcp --port 2087
"""

import argparse
import logging
from collections.abc import Callable
from typing import Any

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from cursorscript import __version__
from cursorscript.lsp.engine import CursorScriptEngine

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("cursorscript-lsp")


def _plain(handler: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Wrap a bound method in a plain function pygls can tag with attributes."""

    def _handler(params: Any) -> Any:
        return handler(params)

    _handler.__name__ = handler.__name__
    return _handler


class CursorScriptLanguageServer(LanguageServer):
    """
    Language Server Protocol implementation for CursorScript.

    Handlers translate LSP params into engine calls. A handler that raises
    is logged and answers with no result, so one bad request never takes
    the server down.
    """

    def __init__(self, engine: CursorScriptEngine | None = None) -> None:
        """Initialize the CursorScript language server."""
        super().__init__(
            name="cursorscript-lsp",
            version=f"v{__version__}",
            text_document_sync_kind=types.TextDocumentSyncKind.Full,
        )

        self.engine = engine or CursorScriptEngine()

        # Register all handlers
        self._register_handlers()

    def _register_handlers(self) -> None:
        """Register all LSP request and notification handlers."""
        # Document synchronization
        self.feature(types.TEXT_DOCUMENT_DID_OPEN)(_plain(self._on_did_open))
        self.feature(types.TEXT_DOCUMENT_DID_CHANGE)(_plain(self._on_did_change))
        self.feature(types.TEXT_DOCUMENT_DID_SAVE)(_plain(self._on_did_save))
        self.feature(types.TEXT_DOCUMENT_DID_CLOSE)(_plain(self._on_did_close))

        # Completion
        self.feature(
            types.TEXT_DOCUMENT_COMPLETION,
            types.CompletionOptions(
                trigger_characters=["."],
                resolve_provider=True,
            ),
        )(_plain(self._on_completion))
        self.feature(types.COMPLETION_ITEM_RESOLVE)(_plain(self._on_completion_resolve))

        # Hover
        self.feature(types.TEXT_DOCUMENT_HOVER)(_plain(self._on_hover))

        # Go to definition
        self.feature(types.TEXT_DOCUMENT_DEFINITION)(_plain(self._on_definition))

        # Signature help
        self.feature(
            types.TEXT_DOCUMENT_SIGNATURE_HELP,
            types.SignatureHelpOptions(trigger_characters=["(", ","]),
        )(_plain(self._on_signature_help))

        # Document symbols (outline)
        self.feature(types.TEXT_DOCUMENT_DOCUMENT_SYMBOL)(_plain(self._on_document_symbol))

        # Formatting
        self.feature(types.TEXT_DOCUMENT_FORMATTING)(_plain(self._on_formatting))

    def _publish_diagnostics(self, uri: str, diagnostics: list[types.Diagnostic]) -> None:
        """Publish diagnostics to the client."""
        self.text_document_publish_diagnostics(
            types.PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
        )

    def _sync_document(self, uri: str) -> None:
        """Reparse a document from the workspace and publish its diagnostics."""
        doc = self.workspace.get_text_document(uri)
        try:
            diagnostics = self.engine.change(uri, doc.source)
        except Exception:
            logger.exception(f"Failed to analyze {uri}")
            return
        self._publish_diagnostics(uri, diagnostics)

    # =========================================================================
    # Document Synchronization
    # =========================================================================

    def _on_did_open(self, params: types.DidOpenTextDocumentParams) -> None:
        """Handle document open notification."""
        document = params.text_document
        try:
            diagnostics = self.engine.open(document.uri, document.text)
        except Exception:
            logger.exception(f"Failed to analyze {document.uri}")
            return
        self._publish_diagnostics(document.uri, diagnostics)

    def _on_did_change(self, params: types.DidChangeTextDocumentParams) -> None:
        """Handle document change notification."""
        uri = params.text_document.uri
        logger.debug(f"Document changed: {uri}")
        self._sync_document(uri)

    def _on_did_save(self, params: types.DidSaveTextDocumentParams) -> None:
        """Handle document save notification."""
        uri = params.text_document.uri
        logger.info(f"Document saved: {uri}")
        self._sync_document(uri)

    def _on_did_close(self, params: types.DidCloseTextDocumentParams) -> None:
        """Handle document close notification."""
        uri = params.text_document.uri
        self._publish_diagnostics(uri, self.engine.close(uri))

    # =========================================================================
    # Completion
    # =========================================================================

    def _on_completion(
        self, params: types.CompletionParams
    ) -> types.CompletionList | None:
        """Handle completion request."""
        uri = params.text_document.uri
        position = params.position

        try:
            items = self.engine.completion(uri, position.line, position.character)
        except Exception:
            logger.exception(f"Completion failed for {uri}")
            return None

        return types.CompletionList(
            is_incomplete=False,
            items=items,
        )

    def _on_completion_resolve(self, item: types.CompletionItem) -> types.CompletionItem:
        """Handle completion item resolve request."""
        return self.engine.resolve_completion(item)

    # =========================================================================
    # Hover
    # =========================================================================

    def _on_hover(self, params: types.HoverParams) -> types.Hover | None:
        """Handle hover request."""
        uri = params.text_document.uri
        position = params.position

        try:
            return self.engine.hover(uri, position.line, position.character)
        except Exception:
            logger.exception(f"Hover failed for {uri}")
            return None

    # =========================================================================
    # Go to Definition
    # =========================================================================

    def _on_definition(
        self, params: types.DefinitionParams
    ) -> types.Location | None:
        """Handle go-to-definition request."""
        uri = params.text_document.uri
        position = params.position

        try:
            return self.engine.definition(uri, position.line, position.character)
        except Exception:
            logger.exception(f"Definition failed for {uri}")
            return None

    # =========================================================================
    # Signature Help
    # =========================================================================

    def _on_signature_help(
        self, params: types.SignatureHelpParams
    ) -> types.SignatureHelp | None:
        """Handle signature help request."""
        uri = params.text_document.uri
        position = params.position

        try:
            return self.engine.signature_help(uri, position.line, position.character)
        except Exception:
            logger.exception(f"Signature help failed for {uri}")
            return None

    # =========================================================================
    # Document Symbols
    # =========================================================================

    def _on_document_symbol(
        self, params: types.DocumentSymbolParams
    ) -> list[types.DocumentSymbol] | None:
        """Handle document symbols request (for outline view)."""
        uri = params.text_document.uri

        try:
            return self.engine.document_symbols(uri)
        except Exception:
            logger.exception(f"Document symbols failed for {uri}")
            return None

    # =========================================================================
    # Formatting
    # =========================================================================

    def _on_formatting(
        self, params: types.DocumentFormattingParams
    ) -> list[types.TextEdit] | None:
        """Handle document formatting request."""
        uri = params.text_document.uri

        try:
            return self.engine.format(uri, params.options.tab_size)
        except Exception:
            logger.exception(f"Formatting failed for {uri}")
            return None


# =============================================================================
# Server Creation and Main Entry Point
# =============================================================================


def create_server() -> CursorScriptLanguageServer:
    """Create and configure a CursorScript language server instance."""
    server = CursorScriptLanguageServer()

    @server.feature(types.INITIALIZED)
    def on_initialized(
        params: types.InitializedParams,  # noqa: ARG001
    ) -> None:
        """Handle initialized notification."""
        logger.info("CursorScript Language Server initialized successfully")

    @server.feature(types.SHUTDOWN)
    def on_shutdown(
        params: None,  # noqa: ARG001
    ) -> None:
        """Handle shutdown request."""
        logger.info("Shutting down CursorScript Language Server")

    return server


def main() -> None:
    """
    Main entry point for the CursorScript language server.

    Starts the server in stdio mode for IDE integration, or TCP with --tcp.
    """
    parser = argparse.ArgumentParser(
        description="CursorScript Language Server",
        prog="cursorscript-lsp",
    )
    parser.add_argument(
        "--tcp",
        action="store_true",
        help="Start server in TCP mode instead of stdio",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to in TCP mode (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=2087,
        help="Port to listen on in TCP mode (default: 2087)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="info",
        help="Logging level (default: info)",
    )

    args = parser.parse_args()

    # Configure logging level for the server and the engine modules
    log_level = getattr(logging, args.log_level.upper())
    logging.getLogger("cursorscript-lsp").setLevel(log_level)
    logging.getLogger("cursorscript").setLevel(log_level)

    server = create_server()

    if args.tcp:
        logger.info(f"Starting CursorScript LSP in TCP mode on {args.host}:{args.port}")
        server.start_tcp(args.host, args.port)
    else:
        logger.info("Starting CursorScript LSP in stdio mode")
        server.start_io()


if __name__ == "__main__":
    main()
