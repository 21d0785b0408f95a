"""
Main semantic analyzer for fnlang.

Coordinates the analysis passes over a parsed unit:
- Signature collection (function names, duplicate detection)
- Checking each declaration against the scope stack

The analyzer only walks the top-level declarations; each node kind's own
`check` recurses into its parameters, body and expressions.

Author: xwest
"""

from typing import List, Dict, Optional
from dataclasses import dataclass, field

from ..lexer.tokens import SourceLocation
from ..parser.ast_nodes import Ast, ASTNode, FunctionDefinition
from .semantic_context import SemanticContext
from .types import Type
from .errors import (
    SemanticError, SemanticWarning, create_redefinition_error,
    create_undefined_type_warning, create_nesting_too_deep_error
)


@dataclass
class AnalysisResult:
    """Results of semantic analysis."""
    ast: Ast
    context: SemanticContext
    errors: List[SemanticError] = field(default_factory=list)
    warnings: List[SemanticWarning] = field(default_factory=list)
    rejected: List[ASTNode] = field(default_factory=list)  # declarations that failed analysis

    def has_errors(self) -> bool:
        """Check if analysis found any errors."""
        return len(self.errors) > 0

    def has_warnings(self) -> bool:
        """Check if analysis found any warnings."""
        return len(self.warnings) > 0


class SemanticAnalyzer:
    """
    Semantic analyzer for fnlang.

    A declaration that fails analysis is reported and removed from the AST so
    later stages only see declarations that checked cleanly; its siblings are
    still analyzed.
    """

    def __init__(self):
        """Initialize the semantic analyzer."""
        self.errors: List[SemanticError] = []
        self.warnings: List[SemanticWarning] = []

    def analyze(self, ast: Ast, ctx: Optional[SemanticContext] = None) -> AnalysisResult:
        """
        Perform semantic analysis on the AST.

        Args:
            ast: The parsed unit to analyze
            ctx: Context shared with the parser; a fresh one is created if omitted

        Returns:
            AnalysisResult containing the analyzed AST and any errors/warnings
        """
        if ctx is None:
            ctx = SemanticContext(ast.file)

        self.errors = []
        self.warnings = []
        rejected: List[ASTNode] = []

        accepted = self._analyze_pass1_signature_collection(ast, ctx, rejected)
        accepted = self._analyze_pass2_checking(accepted, ctx, rejected)

        ast.declarations = accepted

        return AnalysisResult(
            ast=ast,
            context=ctx,
            errors=self.errors,
            warnings=self.warnings,
            rejected=rejected
        )

    # ========================================================================
    # Pass 1: Signature Collection
    # ========================================================================

    def _analyze_pass1_signature_collection(self, ast: Ast, ctx: SemanticContext,
                                            rejected: List[ASTNode]) -> List[ASTNode]:
        """
        Declare every function signature so calls may refer forward.

        A name may be declared once; a prototype may precede one definition
        with the same signature.
        """
        accepted: List[ASTNode] = []
        definitions: Dict[str, ASTNode] = {}
        ast.ids = {}

        for node in ast.declarations:
            if not isinstance(node, FunctionDefinition):
                accepted.append(node)
                continue

            try:
                self._collect_function(node, ast, ctx, definitions)
                accepted.append(node)
            except SemanticError as e:
                self.errors.append(e)
                rejected.append(node)

        return accepted

    def _collect_function(self, func: FunctionDefinition, ast: Ast, ctx: SemanticContext,
                          definitions: Dict[str, ASTNode]) -> None:
        location = func.location(ctx)
        existing = ast.ids.get(func.id)

        if existing is not None:
            previous = ctx.lookup_function(func.id)
            redeclaration_ok = (
                previous is not None and
                previous.matches(func.signature()) and
                (func.is_prototype or func.id not in definitions)
            )
            if not redeclaration_ok:
                raise create_redefinition_error(
                    func.id, location, SourceLocation.at(ctx.file, existing.position), func
                )

        for param in func.parameters:
            self._warn_if_unknown(param.type, param.location(ctx), param)
        self._warn_if_unknown(func.return_type.type, location, func.return_type)

        if not func.is_prototype:
            definitions[func.id] = func
            ast.ids[func.id] = func
            ctx.declare_function(func.signature())
        elif existing is None:
            ast.ids[func.id] = func
            ctx.declare_function(func.signature())

    def _warn_if_unknown(self, type_: Type, location: SourceLocation, node: ASTNode) -> None:
        if not type_.is_basic:
            self.warnings.append(create_undefined_type_warning(type_.name, location, node))

    # ========================================================================
    # Pass 2: Checking
    # ========================================================================

    def _analyze_pass2_checking(self, declarations: List[ASTNode], ctx: SemanticContext,
                                rejected: List[ASTNode]) -> List[ASTNode]:
        """Check each declaration; failing ones are reported and dropped."""
        accepted: List[ASTNode] = []

        for node in declarations:
            try:
                node.check(ctx)
                accepted.append(node)
            except RecursionError:
                self.errors.append(create_nesting_too_deep_error(
                    getattr(node, "id", "<unknown>"), node.location(ctx), node
                ))
                rejected.append(node)
            except SemanticError as e:
                self.errors.append(e)
                rejected.append(node)

        return accepted
