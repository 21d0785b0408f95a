"""
fnlang Parser Package

Implements a recursive descent parser for the fnlang language.
Produces an AST whose nodes can render themselves, check themselves against a
`SemanticContext` and lower themselves to IR.

Key Features:
- Precedence climbing for arithmetic expressions
- Per-declaration error recovery
- Diagnostics collected on the AST rather than printed

Author: xwest
"""

from .ast_nodes import (
    ASTNode, ASTNodeType, Ast, Statement, Expression,
    FunctionDefinition, FunctionParameter, FunctionReturnType, FunctionBody,
    Return, Number, Identifier, BinaryExpr, FunctionCall, Operator,
)
from .parser import Parser, parse
from .errors import (
    ParseError, UnexpectedTokenError, MissingTokenError, InvalidSyntaxError,
    InvalidParameterError, GenericParseError, UnsupportedConstructError,
)

__all__ = [
    # Core parser
    "Parser", "parse",

    # AST nodes
    "ASTNode", "ASTNodeType", "Ast", "Statement", "Expression",
    "FunctionDefinition", "FunctionParameter", "FunctionReturnType", "FunctionBody",
    "Return", "Number", "Identifier", "BinaryExpr", "FunctionCall", "Operator",

    # Error handling
    "ParseError", "UnexpectedTokenError", "MissingTokenError", "InvalidSyntaxError",
    "InvalidParameterError", "GenericParseError", "UnsupportedConstructError",
]
