"""
fnlang Token Model

Token and position types shared by the tokenizer (external) and the parser.
Every token in a stream travels with the `Position` it was read at; the
position is only used for diagnostics.

Author: xwest
"""

from .tokens import Token, TokenType, Position, SourceLocation, TokenStream, KEYWORDS, PUNCTUATION

__all__ = [
    "Token",
    "TokenType",
    "Position",
    "SourceLocation",
    "TokenStream",
    "KEYWORDS",
    "PUNCTUATION",
]
