"""
Token definitions for fnlang.

This module defines the token types the parser understands:
- Keywords (fn, ret, i32)
- Identifiers and integer literals
- Punctuation and arithmetic operators
- The end-of-stream marker

Token streams are produced by an external tokenizer as ordered
`(Token, Position)` pairs.

Author: xwest
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import List, Optional, Tuple


class TokenType(Enum):
    """
    Enumeration of all token types in fnlang.

    Organized by category for clarity and maintainability.
    """

    # ========================================================================
    # Special Tokens
    # ========================================================================
    EOF = auto()                    # End of stream

    # ========================================================================
    # Literals and Identifiers
    # ========================================================================
    NUMBER = auto()                 # 42
    IDENTIFIER = auto()             # add, x, Point

    # ========================================================================
    # Keywords
    # ========================================================================
    FN = auto()                     # fn
    RET = auto()                    # ret
    I32 = auto()                    # i32

    # ========================================================================
    # Punctuation
    # ========================================================================
    LEFT_PAREN = auto()             # (
    RIGHT_PAREN = auto()            # )
    LEFT_BRACE = auto()             # {
    RIGHT_BRACE = auto()            # }
    COLON = auto()                  # :
    COMMA = auto()                  # ,
    SEMICOLON = auto()              # ;
    ARROW = auto()                  # ->

    # ========================================================================
    # Arithmetic Operators
    # ========================================================================
    PLUS = auto()                   # +
    MINUS = auto()                  # -
    MULTIPLY = auto()               # *
    DIVIDE = auto()                 # /
    MODULO = auto()                 # %


# Keyword spelling -> token type
KEYWORDS = {
    "fn": TokenType.FN,
    "ret": TokenType.RET,
    "i32": TokenType.I32,
}

# Punctuation spelling -> token type
PUNCTUATION = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "->": TokenType.ARROW,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.MULTIPLY,
    "/": TokenType.DIVIDE,
    "%": TokenType.MODULO,
}

_SPELLINGS = {token_type: text for text, token_type in {**KEYWORDS, **PUNCTUATION}.items()}


@dataclass(frozen=True)
class Position:
    """
    Represents a location in the source code.

    Attached to every token; used purely for error reporting.
    """
    line: int
    index: int

    def __str__(self) -> str:
        return f"{self.line}:{self.index}"


@dataclass(frozen=True)
class SourceLocation:
    """A position qualified by the label of the file it belongs to."""
    filename: str
    line: int
    index: int

    @classmethod
    def at(cls, filename: str, position: Optional[Position]) -> 'SourceLocation':
        if position is None:
            return cls(filename, 0, 0)
        return cls(filename, position.line, position.index)

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.index}"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token in the fnlang language.

    `text` carries the raw text for identifiers and number literals and is
    None for keywords, punctuation and EOF.
    """
    type: TokenType
    text: Optional[str] = None

    def __str__(self) -> str:
        if self.text is not None:
            return f"{self.type.name}({self.text!r})"
        return self.type.name

    @property
    def spelling(self) -> str:
        """Source spelling of the token, as used in diagnostics."""
        if self.text is not None:
            return self.text
        return _SPELLINGS.get(self.type, self.type.name)

    @property
    def is_literal(self) -> bool:
        """Check if this token is a literal value."""
        return self.type == TokenType.NUMBER

    @property
    def is_keyword(self) -> bool:
        """Check if this token is a keyword."""
        return self.type in KEYWORDS.values()

    @property
    def is_eof(self) -> bool:
        return self.type == TokenType.EOF


TokenStream = List[Tuple[Token, Position]]
