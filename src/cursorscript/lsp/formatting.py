"""
Code formatting for CursorScript LSP.

This module provides document formatting as a purely textual pass: it never
consults the parser, so a document that does not parse still formats.
"""

import re
from dataclasses import dataclass

from lsprotocol import types

DEFAULT_TAB_SIZE = 4

# A '{' followed by content on the same or a later line
OPEN_BRACE_PATTERN = re.compile(r"\{\s*(?=[^\s}])")
# Content followed by a '}'
CLOSE_BRACE_PATTERN = re.compile(r"([^\s{])\s*(?=\})")

LINE_SPLIT_PATTERN = re.compile(r"\r?\n")

# Spacing rules, applied in order
SPACING_RULES: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"\s*(==|!=|<=|>=|=)\s*"), r" \1 "),
    (re.compile(r"\s*,\s*"), ", "),
    (re.compile(r"\s*:\s*"), ": "),
    (re.compile(r"\)\s*\{"), ") {"),
    (re.compile(r"\b(if|while|fn|import)\s?\("), r"\1 ("),
)

BLOCK_OPENERS = ("{", "[")
BLOCK_CLOSERS = ("}", "]")
CONTROL_FLOW_HEADS = ("if", "while", "else")


@dataclass
class FormatConfig:
    """Configuration for the code formatter."""

    tab_size: int = DEFAULT_TAB_SIZE

    @classmethod
    def from_options(cls, options: types.FormattingOptions | None) -> "FormatConfig":
        """Build a config from the client's formatting options."""
        if options is None or options.tab_size <= 0:
            return cls()
        return cls(tab_size=options.tab_size)


def _needs_semicolon(line: str) -> bool:
    """Whether a trimmed, non-empty line is a statement missing its ';'."""
    if line.endswith((";", ",")):
        return False
    if line.endswith(BLOCK_OPENERS):
        return False
    if line.startswith(BLOCK_CLOSERS) or line.endswith("}"):
        return False
    if line.startswith(CONTROL_FLOW_HEADS):
        return False
    if line.startswith("fn ") or line.startswith("//"):
        return False
    # Object property lines
    if ":" in line and not line.startswith("import"):
        return False
    return True


def _normalize_spacing(line: str) -> str:
    for pattern, replacement in SPACING_RULES:
        line = pattern.sub(replacement, line)
    return line.strip()


def format_source(source: str, tab_size: int = DEFAULT_TAB_SIZE) -> str:
    """
    Format CursorScript source code.

    Braces are moved onto their own lines, statements gain a trailing ';',
    operators and separators get canonical spacing and blocks are indented
    by ``tab_size`` spaces per level. Formatting an already formatted text
    returns it unchanged.

    Args:
        source: The CursorScript source code to format
        tab_size: Spaces per indentation level; non-positive values use 4

    Returns:
        The formatted source code
    """
    if tab_size <= 0:
        tab_size = DEFAULT_TAB_SIZE

    text = OPEN_BRACE_PATTERN.sub("{\n", source)
    text = CLOSE_BRACE_PATTERN.sub("\\1\n", text)

    formatted_lines: list[str] = []
    indent_level = 0

    for raw_line in LINE_SPLIT_PATTERN.split(text):
        line = raw_line.strip()

        if not line:
            if formatted_lines and formatted_lines[-1] != "":
                formatted_lines.append("")
            continue

        if line.startswith(BLOCK_CLOSERS):
            indent_level = max(0, indent_level - 1)

        # The terminator is decided on the normalized text
        line = _normalize_spacing(line)
        if _needs_semicolon(line):
            line = _normalize_spacing(line + ";")

        formatted_lines.append(" " * (indent_level * tab_size) + line)

        if line.endswith(BLOCK_OPENERS):
            indent_level += 1

    return "\n".join(formatted_lines)


class LSPFormatter:
    """
    Provides code formatting for the CursorScript LSP server.

    Wraps ``format_source`` to produce LSP-compatible text edits.
    """

    def __init__(self, config: FormatConfig | None = None) -> None:
        """
        Initialize the formatter.

        Args:
            config: Optional formatting configuration
        """
        self.config = config or FormatConfig()

    def format_document(self, source: str) -> list[types.TextEdit]:
        """
        Format an entire document.

        Args:
            source: The CursorScript source code to format

        Returns:
            No edits when the document is already formatted, otherwise a
            single edit replacing the whole document
        """
        formatted = format_source(source, self.config.tab_size)

        if source == formatted:
            return []

        return [
            types.TextEdit(
                range=_full_document_range(source),
                new_text=formatted,
            )
        ]


def _full_document_range(source: str) -> types.Range:
    """Range from the start of the document to the end of its last line."""
    lines = LINE_SPLIT_PATTERN.split(source)
    return types.Range(
        start=types.Position(line=0, character=0),
        end=types.Position(line=len(lines) - 1, character=len(lines[-1])),
    )


def format_document(source: str, config: FormatConfig | None = None) -> list[types.TextEdit]:
    """
    Convenience function to format a document.

    Args:
        source: The CursorScript source code
        config: Optional formatting configuration

    Returns:
        List of text edits
    """
    formatter = LSPFormatter(config)
    return formatter.format_document(source)
