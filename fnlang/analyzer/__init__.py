"""
fnlang Semantic Analyzer Package

Implements scope-stack symbol resolution and declared-type checking:
- A flat symbol table with a stack of lexical scopes
- Function signature collection and duplicate detection
- Per-declaration error isolation

Author: xwest
"""

from .types import Type, BasicType, FunctionSignature
from .errors import SemanticError, SemanticWarning
from .semantic_context import SemanticContext, Scope
from .semantic_analyzer import SemanticAnalyzer, AnalysisResult

__all__ = [
    # Main analyzer
    "SemanticAnalyzer", "AnalysisResult",

    # Scope management
    "SemanticContext", "Scope",

    # Types
    "Type", "BasicType", "FunctionSignature",

    # Error handling
    "SemanticError", "SemanticWarning",
]
