"""
fnlang Compiler Front-End

Parser and semantic analysis for the fnlang language: a small language of
function definitions, integer arithmetic, calls and `ret` statements.

Architecture:
    fnlang/
    ├── lexer/           # Token and source position model
    ├── parser/          # Syntax analysis and AST generation
    ├── analyzer/        # Scope resolution and type checking
    └── ir/              # Lowering call contract (instructions, context)

Author: xwest
License: MIT
"""

__version__ = "0.1.0"
__author__ = "xwest"
__email__ = "dev@fnlang.org"
__license__ = "MIT"

# analyzer before parser: AST nodes import the analyzer's types and context
from .analyzer import SemanticAnalyzer, SemanticContext
from .parser import Parser, parse
from .ir import IRContext, IRInstruction

__all__ = [
    # Core classes
    "Parser",
    "parse",
    "SemanticAnalyzer",
    "SemanticContext",
    "IRContext",
    "IRInstruction",

    # Version info
    "__version__",
    "__author__",
    "__email__",
    "__license__",
]
