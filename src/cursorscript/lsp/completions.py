"""
Completion item provider for CursorScript LSP.

Completion has two modes:
- Member completion right after ``<identifier>.``: the members of the
  resolved object or namespace, and nothing else.
- General completion: every built-in plus the document symbols declared on
  earlier lines, one item per name.
"""

import re
from dataclasses import dataclass
from typing import Optional

from lsprotocol import types

from cursorscript.lsp.catalog import GLOBAL_SYMBOLS, resolve_symbol
from cursorscript.lsp.symbols import SymbolInfo

# Identifier immediately followed by a dot at the end of the text before the cursor
DOT_ACCESS_PATTERN = re.compile(r"([a-zA-Z0-9_$]+)\.$")

LINE_COMMENT_MARKER = "//"


@dataclass
class CompletionContext:
    """Context information for a completion request."""

    offset: int
    line: int  # 1-indexed line containing the cursor
    prefix: str  # Text from the start of the cursor's line to the cursor
    object_name: Optional[str]  # Identifier before a trailing dot, if any

    @property
    def is_in_comment(self) -> bool:
        """Whether a line comment starts before the cursor on its line."""
        return LINE_COMMENT_MARKER in self.prefix

    @property
    def is_after_dot(self) -> bool:
        return self.object_name is not None


def build_completion_context(text: str, offset: int) -> CompletionContext:
    """
    Build a completion context for a cursor offset.

    Args:
        text: Full document text
        offset: 0-indexed character offset of the cursor

    Returns:
        The completion context
    """
    offset = max(0, min(offset, len(text)))
    line_start = text.rfind("\n", 0, offset) + 1
    text_before = text[:offset]
    dot_match = DOT_ACCESS_PATTERN.search(text_before)

    return CompletionContext(
        offset=offset,
        line=text.count("\n", 0, offset) + 1,
        prefix=text[line_start:offset],
        object_name=dot_match.group(1) if dot_match else None,
    )


class CompletionProvider:
    """
    Provides completion items for CursorScript LSP.

    Stateless: every request recomputes its answer from the context and the
    document's symbol list.
    """

    def get_completions(
        self, context: CompletionContext, local_symbols: list[SymbolInfo]
    ) -> list[types.CompletionItem]:
        """
        Get completion items for a context.

        Args:
            context: The completion context
            local_symbols: Symbols declared in the document, in declaration order

        Returns:
            Ordered completion items
        """
        if context.is_in_comment:
            return []

        if context.is_after_dot:
            members = self.get_member_completions(context.object_name, local_symbols)
            if members is not None:
                return members

        return self.get_scope_completions(context.line, local_symbols)

    def get_member_completions(
        self, object_name: str, local_symbols: list[SymbolInfo]
    ) -> Optional[list[types.CompletionItem]]:
        """
        Get the members of a resolved object or namespace.

        Returns:
            The member items, or None when the name is unknown or has no
            members (the caller then falls back to general completion)
        """
        symbol = resolve_symbol(object_name, local_symbols)
        if symbol is None or not symbol.members:
            return None
        return [member.to_completion_item() for member in symbol.members]

    def get_scope_completions(
        self, line: int, local_symbols: list[SymbolInfo]
    ) -> list[types.CompletionItem]:
        """
        Get built-ins plus the locals declared before a line.

        Built-ins are inserted first; a local with the same name replaces
        the earlier entry's value but keeps its position.

        Args:
            line: 1-indexed line of the cursor
            local_symbols: Symbols declared in the document
        """
        visible: dict[str, SymbolInfo] = {}
        for symbol in GLOBAL_SYMBOLS:
            visible[symbol.name] = symbol
        for symbol in local_symbols:
            if symbol.line < line:
                visible[symbol.name] = symbol

        return [symbol.to_completion_item() for symbol in visible.values()]

    def resolve(self, item: types.CompletionItem) -> types.CompletionItem:
        """Completion items are sent fully populated; resolving is a no-op."""
        return item
