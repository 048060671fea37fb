"""
Token definitions for the CursorScript lexer.

This module defines all token types recognized by the CursorScript language:
keywords, operators, punctuation and literals.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from cursorscript.utils.errors import SourceLocation


class TokenType(Enum):
    """Enumeration of all token types in CursorScript."""

    # End of file
    EOF = auto()

    # Literals
    NUMBER = auto()
    STRING = auto()

    # Identifiers (true/false/null are identifiers too)
    IDENTIFIER = auto()

    # Keywords
    LET = auto()
    CONST = auto()
    FN = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    RETURN = auto()
    IMPORT = auto()
    FROM = auto()

    # Arithmetic
    PLUS = auto()          # +
    MINUS = auto()         # -
    STAR = auto()          # *
    SLASH = auto()         # /
    PERCENT = auto()       # %

    # Comparison
    EQ = auto()            # ==
    NE = auto()            # !=
    LT = auto()            # <
    GT = auto()            # >
    LE = auto()            # <=
    GE = auto()            # >=

    # Logical
    AND = auto()           # &&
    OR = auto()            # ||
    BANG = auto()          # !

    # Assignment
    ASSIGN = auto()        # =

    # Delimiters
    LPAREN = auto()        # (
    RPAREN = auto()        # )
    LBRACE = auto()        # {
    RBRACE = auto()        # }
    LBRACKET = auto()      # [
    RBRACKET = auto()      # ]

    # Punctuation
    COMMA = auto()         # ,
    DOT = auto()           # .
    COLON = auto()         # :
    SEMICOLON = auto()     # ;

    DOC_COMMENT = auto()   # ///


KEYWORDS: dict[str, TokenType] = {
    "let": TokenType.LET,
    "const": TokenType.CONST,
    "fn": TokenType.FN,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "return": TokenType.RETURN,
    "import": TokenType.IMPORT,
    "from": TokenType.FROM,
}

# Single character operators
SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    "<": TokenType.LT,
    ">": TokenType.GT,
    "=": TokenType.ASSIGN,
    "!": TokenType.BANG,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    ":": TokenType.COLON,
    ";": TokenType.SEMICOLON,
}

# Two character operators (checked before single char)
# Note: // is NOT here because it starts a comment
DOUBLE_CHAR_TOKENS: dict[str, TokenType] = {
    "==": TokenType.EQ,
    "!=": TokenType.NE,
    "<=": TokenType.LE,
    ">=": TokenType.GE,
    "&&": TokenType.AND,
    "||": TokenType.OR,
}


@dataclass(slots=True)
class Token:
    """
    Represents a single token from the source code.

    Attributes:
        type: The type of this token
        value: The literal value (for literals) or lexeme text
        location: Source location of this token
    """

    type: TokenType
    value: Any
    location: SourceLocation

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.location})"
        return f"Token({self.type.name}, {self.location})"
