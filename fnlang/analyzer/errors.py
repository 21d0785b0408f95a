"""
Semantic analysis error handling for fnlang.

Provides error reporting for scope resolution, function signatures and
declared-type matching.

Author: xwest
"""

from typing import Optional, List, Any

from ..lexer.tokens import SourceLocation
from ..diagnostics import Diagnostic


class SemanticError(Exception):
    """
    Exception raised when a declaration fails semantic analysis.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        node: Optional[Any] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None,
        related_locations: Optional[List[SourceLocation]] = None
    ):
        super().__init__(message)
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )
        self.node = node
        self.related_locations = related_locations or []

    def __str__(self) -> str:
        result = str(self.diagnostic)

        if self.related_locations:
            result += "\nRelated locations:\n"
            for loc in self.related_locations:
                result += f"  --> {loc}\n"

        return result


class SemanticWarning:
    """
    Represents a semantic warning that doesn't stop compilation.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        node: Optional[Any] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="warning",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )
        self.node = node

    def __str__(self) -> str:
        return str(self.diagnostic)


# Semantic error codes for categorization
SEMANTIC_ERROR_CODES = {
    # Type errors
    "S001": "Type mismatch",
    "S002": "Undefined type",

    # Symbol resolution errors
    "S010": "Undefined symbol",
    "S011": "Symbol redefinition",
    "S015": "Undefined function",

    # Function errors
    "S050": "Arity mismatch",
    "S053": "Invalid return type",
    "S054": "Missing return statement",
    "S060": "Expression nesting too deep",

    # Internal errors
    "S090": "Scope stack underflow",
}


# Helper functions for creating specific semantic errors

def create_type_mismatch_error(
    expected: str,
    actual: str,
    context: str,
    location: SourceLocation,
    node: Optional[Any] = None
) -> SemanticError:
    """Create a type mismatch error."""
    return SemanticError(
        message=f"Type mismatch in {context}: expected {expected}, found {actual}",
        location=location,
        node=node,
        code="S001",
        help_text=f"The expression has type '{actual}' but '{expected}' was expected.",
        suggestions=[
            "Check the declared types of the parameters and return value",
        ]
    )


def create_undefined_type_warning(
    type_name: str,
    location: SourceLocation,
    node: Optional[Any] = None
) -> SemanticWarning:
    """Create a warning for a type referenced only by name."""
    return SemanticWarning(
        message=f"Unknown type '{type_name}'",
        location=location,
        node=node,
        code="S002",
        help_text=f"'{type_name}' is not a built-in type; it is treated as an opaque named type.",
        suggestions=["Use 'i32' for integer values"]
    )


def create_undefined_symbol_error(
    symbol: str,
    location: SourceLocation,
    node: Optional[Any] = None,
    similar_names: Optional[List[str]] = None
) -> SemanticError:
    """Create an undefined symbol error."""
    suggestions = []
    if similar_names:
        suggestions.extend([f"Did you mean '{name}'?" for name in similar_names[:3]])

    suggestions.extend([
        f"Declare '{symbol}' as a parameter before using it",
        "Check for typos in the symbol name",
    ])

    return SemanticError(
        message=f"Undefined symbol: '{symbol}'",
        location=location,
        node=node,
        code="S010",
        help_text=f"The symbol '{symbol}' is not defined in the current scope.",
        suggestions=suggestions
    )


def create_redefinition_error(
    symbol: str,
    location: SourceLocation,
    original_location: Optional[SourceLocation] = None,
    node: Optional[Any] = None
) -> SemanticError:
    """Create an error for a second top-level definition of the same name."""
    return SemanticError(
        message=f"Function '{symbol}' is already defined",
        location=location,
        node=node,
        code="S011",
        help_text=f"Top-level names must be unique; '{symbol}' was defined earlier.",
        suggestions=[f"Rename one of the definitions of '{symbol}'"],
        related_locations=[original_location] if original_location else None
    )


def create_undefined_function_error(
    function_name: str,
    location: SourceLocation,
    node: Optional[Any] = None
) -> SemanticError:
    """Create an error for a call to a function that was never declared."""
    return SemanticError(
        message=f"Undefined function: '{function_name}'",
        location=location,
        node=node,
        code="S015",
        help_text=f"No function named '{function_name}' is declared in this unit.",
        suggestions=[f"Define 'fn {function_name}(...)' or declare its prototype"]
    )


def create_arity_mismatch_error(
    function_name: str,
    expected_args: int,
    actual_args: int,
    location: SourceLocation,
    node: Optional[Any] = None
) -> SemanticError:
    """Create a function arity mismatch error."""
    return SemanticError(
        message=f"Function '{function_name}' expects {expected_args} arguments, got {actual_args}",
        location=location,
        node=node,
        code="S050",
        help_text="The function call has the wrong number of arguments.",
        suggestions=[
            f"Provide exactly {expected_args} arguments",
            "Check the function signature",
        ]
    )


def create_void_return_error(
    function_name: str,
    location: SourceLocation,
    node: Optional[Any] = None
) -> SemanticError:
    """Create an error for `ret <value>` inside a function declared without a return type."""
    return SemanticError(
        message=f"Function '{function_name}' returns a value but is declared void",
        location=location,
        node=node,
        code="S053",
        help_text="A function without '-> <type>' cannot return a value.",
        suggestions=[f"Declare a return type: 'fn {function_name}(...) -> i32'"]
    )


def create_missing_return_error(
    function_name: str,
    return_type: str,
    location: SourceLocation,
    node: Optional[Any] = None
) -> SemanticError:
    """Create an error for a non-void function whose body never returns."""
    return SemanticError(
        message=f"Function '{function_name}' must return a value of type {return_type}",
        location=location,
        node=node,
        code="S054",
        help_text="The function body contains no 'ret' statement.",
        suggestions=["Add 'ret <expression>;' to the function body"]
    )


def create_scope_underflow_error(location: SourceLocation) -> SemanticError:
    """Create an error for popping the global scope."""
    return SemanticError(
        message="Cannot exit the global scope",
        location=location,
        code="S090",
        help_text="enter_scope/exit_scope calls are unbalanced.",
    )


def create_nesting_too_deep_error(
    function_name: str,
    location: SourceLocation,
    node: Optional[Any] = None
) -> SemanticError:
    """Create an error for an expression nested beyond the checker's recursion limit."""
    return SemanticError(
        message=f"Expression in function '{function_name}' is nested too deeply to check",
        location=location,
        node=node,
        code="S060",
        help_text="Checking recursed past the interpreter's recursion limit.",
        suggestions=["Split the expression across several functions"]
    )
