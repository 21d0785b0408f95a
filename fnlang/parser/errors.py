"""
Error handling for the fnlang parser.

One exception class per kind of syntax failure. Every error carries the
source-file label and the position of the offending token, and wraps a
`Diagnostic` so the top-level loop can record it and keep going.

Author: xwest
"""

from typing import Optional, List

from ..lexer.tokens import Token, TokenType, Position, SourceLocation
from ..diagnostics import Diagnostic


class ParseError(Exception):
    """
    Base exception for syntax errors.

    Raised inside a declaration and caught by the parser's top-level loop,
    which records `diagnostic` and resumes at the next declaration.
    """

    code: Optional[str] = None

    def __init__(
        self,
        message: str,
        file: str,
        position: Optional[Position] = None,
        token: Optional[Token] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.message = message
        self.file = file
        self.position = position
        self.token = token
        self.diagnostic = Diagnostic(
            message=message,
            location=SourceLocation.at(file, position),
            severity="error",
            code=self.code,
            help_text=help_text,
            suggestions=suggestions
        )

    def __str__(self) -> str:
        return self.message


class UnexpectedTokenError(ParseError):
    """A concrete token was found where the grammar forbids it (including EOF)."""
    code = "P001"


class MissingTokenError(ParseError):
    """A specific token or token category was expected but absent."""
    code = "P002"

    def __init__(self, expected: str, file: str, position: Optional[Position] = None, **kwargs):
        self.expected = expected
        super().__init__(
            f"Missing token '{expected}', expected in file: {file} "
            f"on line {_line(position)} at position {_index(position)}",
            file, position, **kwargs
        )


class InvalidSyntaxError(ParseError):
    """A structural rule was violated; the message explains which."""
    code = "P003"


class InvalidParameterError(ParseError):
    """A parameter-specific well-formedness rule was violated."""
    code = "P004"


class GenericParseError(ParseError):
    """Catch-all for conditions not tied to a grammar rule."""
    code = "P005"

    def __init__(self, message: str, file: str, position: Optional[Position] = None, **kwargs):
        super().__init__(f"Error: {message}", file, position, **kwargs)


class UnsupportedConstructError(ParseError):
    """A top-level token that does not start a supported declaration."""
    code = "P006"


def _line(position: Optional[Position]) -> str:
    return str(position.line) if position is not None else "?"


def _index(position: Optional[Position]) -> str:
    return str(position.index) if position is not None else "?"


def suggest_missing_token(expected: TokenType) -> List[str]:
    """Suggest what token might be missing."""
    token_suggestions = {
        TokenType.SEMICOLON: ["Add a semicolon ';' to end the statement"],
        TokenType.RIGHT_PAREN: ["Add a closing parenthesis ')'"],
        TokenType.LEFT_PAREN: ["Add an opening parenthesis '(' after the function name"],
        TokenType.RIGHT_BRACE: ["Add a closing brace '}'"],
        TokenType.LEFT_BRACE: ["Add an opening brace '{' to start the function body"],
        TokenType.COLON: ["Add a colon ':' between the parameter name and its type"],
        TokenType.ARROW: ["Add an arrow '->' before the return type"],
    }
    return list(token_suggestions.get(expected, []))


# Helper functions for creating common parser errors

def create_unexpected_token_error(token: Token, file: str, position: Position,
                                  expected: Optional[str] = None) -> UnexpectedTokenError:
    """Create an error for an unexpected token."""
    message = (
        f"Unexpected token '{token.type.name}' in file: {file} "
        f"on line {position.line} at position {position.index}"
    )
    help_text = None
    if expected:
        help_text = f"The parser expected {expected} here, but found '{token.spelling}' instead."
    if token.is_eof:
        help_text = "The token stream ended in the middle of a declaration."
    return UnexpectedTokenError(message, file, position, token=token, help_text=help_text)


def create_missing_token_error(expected: str, file: str, position: Position,
                               token_type: Optional[TokenType] = None) -> MissingTokenError:
    """Create an error for a missing expected token."""
    return MissingTokenError(
        expected, file, position,
        help_text=f"The parser expected to see {expected} at this position.",
        suggestions=suggest_missing_token(token_type) if token_type else None
    )


def create_syntax_error(reason: str, file: str, position: Position,
                        token: Optional[Token] = None,
                        token_type: Optional[TokenType] = None) -> InvalidSyntaxError:
    """Create an error for a violated structural rule."""
    return InvalidSyntaxError(
        f"Syntax error in file {file} on line {position.line} "
        f"at position {position.index}: {reason}",
        file, position, token=token,
        suggestions=suggest_missing_token(token_type) if token_type else None
    )


def create_invalid_parameter_error(reason: str, file: str, position: Position) -> InvalidParameterError:
    """Create an error for a malformed parameter."""
    return InvalidParameterError(
        f"Invalid parameter: {reason} in file {file} "
        f"on line {position.line} at position {position.index}",
        file, position
    )


def create_unsupported_construct_error(token: Token, file: str, position: Position) -> UnsupportedConstructError:
    """Create an error for a top-level token that cannot start a declaration."""
    return UnsupportedConstructError(
        f"Unsupported top-level construct '{token.spelling}' in file: {file} "
        f"on line {position.line} at position {position.index}",
        file, position, token=token,
        help_text="Only function definitions ('fn') are allowed at the top level.",
        suggestions=["Did you mean 'fn'?"]
    )
