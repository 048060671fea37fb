"""
Position-based queries for CursorScript LSP.

This module answers the editor queries of a single request:
- Completion
- Hover information
- Go-to-definition
- Signature help
- Document symbols (outline)

An analyzer is built per request from the document text and the document's
last good Program; it holds no state between requests.
"""

import re
from typing import Optional

from lsprotocol import types

from cursorscript.compiler.ast_nodes import Program
from cursorscript.lsp.catalog import resolve_symbol
from cursorscript.lsp.completions import CompletionProvider, build_completion_context
from cursorscript.lsp.symbols import SymbolInfo, extract_symbols

# Maximal run of identifier characters
WORD_PATTERN = re.compile(r"[a-zA-Z0-9_$]+")

# Optionally dotted call target directly before an opening paren
CALL_TARGET_PATTERN = re.compile(r"([a-zA-Z0-9_$]+(\.[a-zA-Z0-9_$]+)?)\s*$")

# Innermost parenthesized list in a symbol's detail string. Nested parens are
# excluded so "(variable: fn(a, b))" yields "a, b" rather than "variable: fn(a".
PARAMETER_LIST_PATTERN = re.compile(r"\(([^()]*)\)")


def offset_at(text: str, line: int, character: int) -> int:
    """
    Convert a 0-indexed (line, character) position into a text offset.

    Positions past the end of a line clamp to the line end; lines past the
    end of the document clamp to the end of the text.
    """
    if line < 0:
        return 0

    line_start = 0
    for _ in range(line):
        newline = text.find("\n", line_start)
        if newline == -1:
            return len(text)
        line_start = newline + 1

    line_end = text.find("\n", line_start)
    if line_end == -1:
        line_end = len(text)
    return line_start + max(0, min(character, line_end - line_start))


def position_at(text: str, offset: int) -> types.Position:
    """Convert a text offset into a 0-indexed LSP position."""
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return types.Position(line=line, character=offset - line_start)


class DocumentAnalyzer:
    """
    Answers position-based queries for one CursorScript document.

    Local symbols come from the cached Program; built-ins come from the
    global catalog. When no Program has ever parsed, completion still offers
    the built-ins while hover, definition and signature help return nothing.
    """

    def __init__(self, source: str, uri: str, program: Optional[Program] = None) -> None:
        """
        Initialize the analyzer.

        Args:
            source: The current document text
            uri: The document URI
            program: The last successfully parsed Program, if any
        """
        self.source = source
        self.uri = uri
        self.program = program
        self.symbols: list[SymbolInfo] = extract_symbols(program) if program else []

        self._completion_provider = CompletionProvider()

    # =========================================================================
    # Completion
    # =========================================================================

    def get_completions(self, line: int, character: int) -> list[types.CompletionItem]:
        """
        Get completion items at a position.

        Args:
            line: 0-indexed line number
            character: 0-indexed character position

        Returns:
            List of completion items
        """
        offset = offset_at(self.source, line, character)
        context = build_completion_context(self.source, offset)
        return self._completion_provider.get_completions(context, self.symbols)

    # =========================================================================
    # Hover and definition
    # =========================================================================

    def get_hover(self, line: int, character: int) -> Optional[types.Hover]:
        """
        Get hover information at a position.

        Args:
            line: 0-indexed line number
            character: 0-indexed character position

        Returns:
            Hover information or None
        """
        if self.program is None:
            return None

        word, word_range = self._get_word_at_position(line, character)
        if not word:
            return None

        symbol = resolve_symbol(word, self.symbols)
        if symbol is None:
            return None

        parts = [f"**{word}**", symbol.detail]
        if symbol.documentation:
            parts.append(symbol.documentation)

        return types.Hover(
            contents=types.MarkupContent(
                kind=types.MarkupKind.Markdown,
                value="\n\n".join(parts),
            ),
            range=word_range,
        )

    def get_definition(self, line: int, character: int) -> Optional[types.Location]:
        """
        Get the definition location for the symbol at a position.

        Built-ins have no source position and never produce a location.

        Args:
            line: 0-indexed line number
            character: 0-indexed character position

        Returns:
            Definition location or None
        """
        if self.program is None:
            return None

        word, _ = self._get_word_at_position(line, character)
        if not word:
            return None

        symbol = resolve_symbol(word, self.symbols)
        if symbol is None or not symbol.is_navigable:
            return None

        start_line = symbol.line - 1
        start_char = max(0, symbol.column - 1)
        return types.Location(
            uri=self.uri,
            range=types.Range(
                start=types.Position(line=start_line, character=start_char),
                end=types.Position(line=start_line, character=start_char + len(word)),
            ),
        )

    def _get_word_at_position(
        self, line: int, character: int
    ) -> tuple[str, Optional[types.Range]]:
        """
        Get the identifier run touching a position.

        A run matches when the cursor sits anywhere from its first character
        up to just past its last one.

        Args:
            line: 0-indexed line number
            character: 0-indexed character position

        Returns:
            Tuple of (word, range) or ("", None) if no word found
        """
        offset = offset_at(self.source, line, character)
        line_start = self.source.rfind("\n", 0, offset) + 1
        line_end = self.source.find("\n", offset)
        if line_end == -1:
            line_end = len(self.source)

        for match in WORD_PATTERN.finditer(self.source, line_start, line_end):
            if match.start() <= offset <= match.end():
                range_ = types.Range(
                    start=position_at(self.source, match.start()),
                    end=position_at(self.source, match.end()),
                )
                return match.group(0), range_

        return "", None

    # =========================================================================
    # Signature help
    # =========================================================================

    def get_signature_help(self, line: int, character: int) -> Optional[types.SignatureHelp]:
        """
        Get signature help for the call surrounding a position.

        The call is found by scanning back to the nearest '(' and the active
        parameter is the number of commas after it. Neither scan tracks
        nesting, so inside ``f(g(a), |`` the help is for ``g``.

        Args:
            line: 0-indexed line number
            character: 0-indexed character position

        Returns:
            Signature help or None
        """
        if self.program is None:
            return None

        offset = offset_at(self.source, line, character)
        text_before = self.source[:offset]

        open_paren = text_before.rfind("(")
        if open_paren == -1:
            return None

        target_match = CALL_TARGET_PATTERN.search(text_before[:open_paren])
        if target_match is None:
            return None

        symbol = self._resolve_call_target(target_match.group(1))
        if symbol is None or "(" not in symbol.detail:
            return None

        parameters: list[types.ParameterInformation] = []
        params_match = PARAMETER_LIST_PATTERN.search(symbol.detail)
        if params_match and params_match.group(1):
            parameters = [
                types.ParameterInformation(label=param.strip())
                for param in params_match.group(1).split(",")
            ]

        return types.SignatureHelp(
            signatures=[
                types.SignatureInformation(
                    label=symbol.detail,
                    documentation=symbol.documentation,
                    parameters=parameters,
                )
            ],
            active_signature=0,
            active_parameter=text_before[open_paren:].count(","),
        )

    def _resolve_call_target(self, target: str) -> Optional[SymbolInfo]:
        """Resolve ``name`` or one-hop ``object.member`` call targets."""
        if "." in target:
            object_name, member_name = target.split(".", 1)
            owner = resolve_symbol(object_name, self.symbols)
            if owner is None:
                return None
            return owner.find_member(member_name)

        return resolve_symbol(target, self.symbols)

    # =========================================================================
    # Document symbols
    # =========================================================================

    def get_document_symbols(self) -> list[types.DocumentSymbol]:
        """
        Get the flat outline of the document.

        Returns:
            One entry per declared symbol with a source position
        """
        return [
            symbol.to_document_symbol()
            for symbol in self.symbols
            if symbol.is_navigable
        ]
