"""
CursorScript Lexer (Tokenizer).

Transforms CursorScript source code into a stream of tokens. Newlines are
insignificant in CursorScript and are skipped like any other whitespace.
"""

from typing import Iterator, Optional

from cursorscript.compiler.tokens import (
    DOUBLE_CHAR_TOKENS,
    KEYWORDS,
    SINGLE_CHAR_TOKENS,
    Token,
    TokenType,
)
from cursorscript.utils.errors import LexerError, SourceLocation


def is_identifier_start(char: str) -> bool:
    """Check whether a character may start an identifier."""
    return char.isalpha() or char in "_$"


def is_identifier_char(char: str) -> bool:
    """Check whether a character may continue an identifier."""
    return char.isalnum() or char in "_$"


class Lexer:
    """
    Tokenizer for CursorScript source code.

    The lexer supports:
    - Identifiers and keywords
    - Integer and floating-point literals
    - String literals (single and double quoted)
    - Comments (// single line, /* multi-line */)
    - Doc comments (///) that attach to the following declaration

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()
        # or iterate: for token in lexer: ...
    """

    def __init__(self, source: str, filename: Optional[str] = None) -> None:
        """
        Initialize the lexer with source code.

        Args:
            source: The CursorScript source code to tokenize
            filename: Optional filename for error reporting
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

        # Track the start of the current line for error reporting
        self._line_start = 0

    @property
    def _current_char(self) -> Optional[str]:
        """Return the current character or None if at end."""
        if self.pos >= len(self.source):
            return None
        return self.source[self.pos]

    @property
    def _peek_char(self) -> Optional[str]:
        """Return the next character without consuming it."""
        return self._peek_ahead(1)

    def _peek_ahead(self, n: int) -> Optional[str]:
        """Return the character n positions ahead."""
        peek_pos = self.pos + n
        if peek_pos >= len(self.source):
            return None
        return self.source[peek_pos]

    def _location(self) -> SourceLocation:
        """Create a SourceLocation for the current position."""
        return SourceLocation(
            line=self.line,
            column=self.column,
            offset=self.pos,
            filename=self.filename,
        )

    def _current_line_text(self) -> str:
        """Extract the current line of source for error messages."""
        end = self.source.find("\n", self._line_start)
        if end == -1:
            end = len(self.source)
        return self.source[self._line_start:end]

    def _advance(self) -> str:
        """Consume and return the current character."""
        char = self.source[self.pos]
        self.pos += 1

        if char == "\n":
            self.line += 1
            self.column = 1
            self._line_start = self.pos
        else:
            self.column += 1

        return char

    def _skip_whitespace(self) -> None:
        """Skip whitespace characters, newlines included."""
        while self._current_char is not None and self._current_char in " \t\r\n":
            self._advance()

    def _skip_line_comment(self) -> bool:
        """Skip a // comment that is not a /// doc comment.

        Returns True if a comment was skipped.
        """
        if self._current_char == "/" and self._peek_char == "/":
            if self._peek_ahead(2) == "/":
                return False
            while self._current_char is not None and self._current_char != "\n":
                self._advance()
            return True
        return False

    def _skip_multiline_comment(self) -> bool:
        """
        Skip multi-line comments /* ... */.

        Returns:
            True if a multi-line comment was skipped, False otherwise.
        """
        if self._current_char == "/" and self._peek_char == "*":
            start_loc = self._location()
            self._advance()  # /
            self._advance()  # *

            while True:
                if self._current_char is None:
                    raise LexerError(
                        "Unterminated multi-line comment",
                        start_loc,
                        self._current_line_text(),
                    )
                if self._current_char == "*" and self._peek_char == "/":
                    self._advance()  # *
                    self._advance()  # /
                    return True
                self._advance()

        return False

    def _read_doc_comment(self) -> Token:
        """
        Read consecutive /// lines into a single DOC_COMMENT token.

        Leading whitespace after the slashes is dropped; lines are joined
        with newlines.
        """
        start_loc = self._location()
        lines: list[str] = []

        while self._current_char == "/" and self._peek_char == "/" and self._peek_ahead(2) == "/":
            self._advance()
            self._advance()
            self._advance()
            if self._current_char == " ":
                self._advance()

            chars: list[str] = []
            while self._current_char is not None and self._current_char != "\n":
                chars.append(self._current_char)
                self._advance()
            lines.append("".join(chars).rstrip())

            # Continue only if the next non-blank line is another ///
            saved = (self.pos, self.line, self.column, self._line_start)
            if self._current_char == "\n":
                self._advance()
            while self._current_char is not None and self._current_char in " \t\r":
                self._advance()
            if not (
                self._current_char == "/"
                and self._peek_char == "/"
                and self._peek_ahead(2) == "/"
            ):
                self.pos, self.line, self.column, self._line_start = saved
                break

        return Token(TokenType.DOC_COMMENT, "\n".join(lines), start_loc)

    def _read_string(self, quote_char: str) -> Token:
        """
        Read a string literal.

        Args:
            quote_char: The opening quote character (' or ")

        Returns:
            A STRING token with the string value.
        """
        start_loc = self._location()
        self._advance()  # consume opening quote

        value_chars: list[str] = []
        escape_sequences = {
            "n": "\n",
            "t": "\t",
            "r": "\r",
            "\\": "\\",
            "'": "'",
            '"': '"',
            "0": "\0",
        }

        while True:
            if self._current_char is None:
                raise LexerError(
                    "Unterminated string literal",
                    start_loc,
                    self._current_line_text(),
                )

            if self._current_char == "\n":
                raise LexerError(
                    "Newline in string literal (use \\n for newlines)",
                    self._location(),
                    self._current_line_text(),
                )

            if self._current_char == quote_char:
                self._advance()  # consume closing quote
                break

            if self._current_char == "\\":
                self._advance()
                if self._current_char is None:
                    raise LexerError(
                        "Unterminated escape sequence",
                        self._location(),
                        self._current_line_text(),
                    )
                escaped = escape_sequences.get(self._current_char)
                if escaped is None:
                    raise LexerError(
                        f"Invalid escape sequence: \\{self._current_char}",
                        self._location(),
                        self._current_line_text(),
                    )
                value_chars.append(escaped)
                self._advance()
            else:
                value_chars.append(self._current_char)
                self._advance()

        return Token(TokenType.STRING, "".join(value_chars), start_loc)

    def _read_number(self) -> Token:
        """
        Read a numeric literal.

        Supports decimal integers (123), decimals (123.456) and underscores
        for readability (1_000_000). The value is always a float.
        """
        start_loc = self._location()
        num_chars: list[str] = []

        while self._current_char is not None and (
            self._current_char.isdigit() or self._current_char == "_"
        ):
            if self._current_char != "_":
                num_chars.append(self._current_char)
            self._advance()

        if self._current_char == "." and (
            self._peek_char is not None and self._peek_char.isdigit()
        ):
            num_chars.append(self._advance())
            while self._current_char is not None and (
                self._current_char.isdigit() or self._current_char == "_"
            ):
                if self._current_char != "_":
                    num_chars.append(self._current_char)
                self._advance()

        return Token(TokenType.NUMBER, float("".join(num_chars)), start_loc)

    def _read_identifier_or_keyword(self) -> Token:
        """
        Read an identifier or keyword.

        Identifiers start with a letter, underscore or dollar sign and
        contain letters, digits, underscores and dollar signs.
        """
        start_loc = self._location()
        id_chars: list[str] = []

        while self._current_char is not None and is_identifier_char(self._current_char):
            id_chars.append(self._current_char)
            self._advance()

        identifier = "".join(id_chars)
        token_type = KEYWORDS.get(identifier, TokenType.IDENTIFIER)
        return Token(token_type, identifier, start_loc)

    def _read_operator(self) -> Optional[Token]:
        """
        Read an operator token (single or double character).

        Returns:
            An operator token, or None if the current character is not an operator.
        """
        if self._current_char is None:
            return None

        start_loc = self._location()

        if self._peek_char is not None:
            two_char = self._current_char + self._peek_char
            if two_char in DOUBLE_CHAR_TOKENS:
                self._advance()
                self._advance()
                return Token(DOUBLE_CHAR_TOKENS[two_char], two_char, start_loc)

        if self._current_char in SINGLE_CHAR_TOKENS:
            char = self._advance()
            return Token(SINGLE_CHAR_TOKENS[char], char, start_loc)

        return None

    def _next_token(self) -> Token:
        """Extract the next token from the source."""
        while True:
            self._skip_whitespace()

            if self._current_char == "/" and self._peek_char == "/" and self._peek_ahead(2) == "/":
                return self._read_doc_comment()

            if self._skip_line_comment():
                continue

            if self._skip_multiline_comment():
                continue

            break

        if self._current_char is None:
            return Token(TokenType.EOF, None, self._location())

        if self._current_char in "\"'":
            return self._read_string(self._current_char)

        if self._current_char.isdigit():
            return self._read_number()

        if is_identifier_start(self._current_char):
            return self._read_identifier_or_keyword()

        op_token = self._read_operator()
        if op_token is not None:
            return op_token

        raise LexerError(
            f"Unexpected character: {self._current_char!r}",
            self._location(),
            self._current_line_text(),
        )

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source code.

        Returns:
            A list of all tokens including the final EOF token.
        """
        self.tokens = []
        self.pos = 0
        self.line = 1
        self.column = 1
        self._line_start = 0

        while True:
            token = self._next_token()
            self.tokens.append(token)
            if token.type == TokenType.EOF:
                break

        return self.tokens

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens (re-tokenizes if necessary)."""
        if not self.tokens:
            self.tokenize()
        return iter(self.tokens)


def tokenize(source: str, filename: Optional[str] = None) -> list[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: CursorScript source code
        filename: Optional filename for error reporting

    Returns:
        List of tokens
    """
    return Lexer(source, filename).tokenize()
