"""
Diagnostic generation for CursorScript LSP.

This module converts parser failures into LSP-compatible diagnostic
messages for display in editors. A document has at most one diagnostic:
the first failure the parser reports.
"""

import re
from collections.abc import Callable
from typing import Optional

from lsprotocol import types

from cursorscript.compiler.ast_nodes import Program
from cursorscript.compiler.parser import parse
from cursorscript.utils.errors import CursorScriptError

DIAGNOSTIC_SOURCE = "cursorscript"

# First ":<line>:<column>" in a failure message
MESSAGE_LOCATION_PATTERN = re.compile(r":(\d+):(\d+)")

# Characters that end the token underlined by a diagnostic
TOKEN_BOUNDARY_CHARS = "()[]{},:;"

ParseFunction = Callable[[str, str], Program]


class DiagnosticProvider:
    """
    Generates LSP diagnostics from CursorScript source code.

    Any exception raised by the parse function is a parse failure; failures
    carrying a ``SourceLocation`` are placed exactly, others are placed from
    the ``:<line>:<column>`` in their message, or at the document start.
    """

    def __init__(self, source: str, uri: str, parse_fn: ParseFunction = parse) -> None:
        """
        Initialize the diagnostic provider.

        Args:
            source: The CursorScript source code to analyze
            uri: The document URI, passed to the parser as the file name
            parse_fn: Parser collaborator
        """
        self.source = source
        self.uri = uri
        self.parse_fn = parse_fn

    def get_diagnostics(self) -> list[types.Diagnostic]:
        """
        Get all diagnostics for the document.

        Returns:
            An empty list when the document parses, else one error
        """
        try:
            self.parse_fn(self.source, self.uri)
        except Exception as e:
            return [self.from_error(e)]
        return []

    def from_error(self, error: Exception) -> types.Diagnostic:
        """
        Convert a parse failure into an LSP diagnostic.

        Args:
            error: The exception raised by the parser

        Returns:
            An Error diagnostic underlining the offending token
        """
        line, column = self._error_position(error)
        start_line = max(0, line - 1)
        start_char = max(0, column - 1)

        source_line = getattr(error, "source_line", None) or self._source_line(start_line)
        end_char = self._token_end(source_line, start_char)

        message = error.message if isinstance(error, CursorScriptError) else str(error)

        return types.Diagnostic(
            range=types.Range(
                start=types.Position(line=start_line, character=start_char),
                end=types.Position(line=start_line, character=end_char),
            ),
            message=message,
            severity=types.DiagnosticSeverity.Error,
            source=DIAGNOSTIC_SOURCE,
        )

    def _error_position(self, error: Exception) -> tuple[int, int]:
        """1-indexed (line, column) of a failure; (0, 0) when unknown."""
        location = getattr(error, "location", None)
        if location is not None:
            return location.line, location.column

        match = MESSAGE_LOCATION_PATTERN.search(str(error))
        if match:
            return int(match.group(1)), int(match.group(2))

        return 0, 0

    def _source_line(self, line: int) -> Optional[str]:
        lines = self.source.split("\n")
        if 0 <= line < len(lines):
            return lines[line]
        return None

    @staticmethod
    def _token_end(source_line: Optional[str], character: int) -> int:
        """End character of the token starting at ``character`` (at least one wide)."""
        if not source_line:
            return character + 1

        rest_of_line = source_line[character:]
        for i, c in enumerate(rest_of_line):
            if c.isspace() or c in TOKEN_BOUNDARY_CHARS:
                return character + max(1, i)
        return character + max(1, len(rest_of_line))


def diagnostic_from_error(error: Exception, source: str, uri: str = "") -> types.Diagnostic:
    """
    Convenience function converting one parse failure into a diagnostic.

    Args:
        error: The exception raised by the parser
        source: The document text the parser was given
        uri: The document URI

    Returns:
        The LSP diagnostic
    """
    return DiagnosticProvider(source, uri).from_error(error)


def get_diagnostics_for_document(
    source: str, uri: str, parse_fn: ParseFunction = parse
) -> list[types.Diagnostic]:
    """
    Convenience function to get diagnostics for a document.

    Args:
        source: The CursorScript source code
        uri: The document URI
        parse_fn: Parser collaborator

    Returns:
        List of LSP diagnostics
    """
    provider = DiagnosticProvider(source, uri, parse_fn)
    return provider.get_diagnostics()
