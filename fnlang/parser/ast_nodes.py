"""
Abstract Syntax Tree node definitions for fnlang.

Every node kind implements the same three capabilities:
- render: a human-readable nested dump of the node and its children
- check: resolution and type checking against a `SemanticContext`
- lower: translation to an ordered list of IR instructions

`ASTNode` declares all of them abstract, so a node kind that misses one
cannot be instantiated.

Author: xwest
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterator, List, Optional
from enum import Enum

from ..lexer.tokens import Position, SourceLocation, TokenType
from ..diagnostics import Diagnostic
from ..analyzer.types import Type, FunctionSignature
from ..analyzer.semantic_context import SemanticContext
from ..analyzer.errors import (
    create_type_mismatch_error, create_undefined_symbol_error,
    create_undefined_function_error, create_arity_mismatch_error,
    create_void_return_error, create_missing_return_error
)
from ..ir.ir_nodes import IRContext, IRInstruction, IROpcode


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""

    # Top-level
    AST = "Ast"

    # Declarations
    FUNCTION_DEFINITION = "FunctionDefinition"
    FUNCTION_PARAMETER = "FunctionParameter"
    FUNCTION_RETURN_TYPE = "FunctionReturnType"
    FUNCTION_BODY = "FunctionBody"

    # Statements
    RETURN = "Return"

    # Expressions
    NUMBER = "Number"
    IDENTIFIER = "Identifier"
    BINARY = "Binary"
    FUNCTION_CALL = "FunctionCall"


class Operator(Enum):
    """Binary arithmetic operators, valued by their source symbol."""
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"

    @classmethod
    def from_token_type(cls, token_type: TokenType) -> 'Operator':
        return _OPERATOR_TOKENS[token_type]

    def __str__(self) -> str:
        return self.value


_OPERATOR_TOKENS = {
    TokenType.PLUS: Operator.ADD,
    TokenType.MINUS: Operator.SUBTRACT,
    TokenType.MULTIPLY: Operator.MULTIPLY,
    TokenType.DIVIDE: Operator.DIVIDE,
    TokenType.MODULO: Operator.MODULO,
}


class ASTNode(ABC):
    """Base class for all AST nodes."""

    def __init__(self, node_type: ASTNodeType, position: Optional[Position] = None):
        self.node_type = node_type
        self.position = position

    @abstractmethod
    def render(self, indentation: int = 0) -> str:
        """Render this node and its children as an indented tree."""
        pass

    @abstractmethod
    def check(self, ctx: SemanticContext) -> Optional[Type]:
        """
        Check this node against the context.

        Returns the node's type for expressions and None otherwise.
        Raises SemanticError when the node is invalid.
        """
        pass

    @abstractmethod
    def lower(self, ctx: IRContext) -> List[IRInstruction]:
        """Lower this node to IR instructions, children first, in source order."""
        pass

    @abstractmethod
    def children(self) -> List['ASTNode']:
        """Get all child nodes."""
        pass

    def display(self, indentation: int = 0) -> None:
        print(self.render(indentation))

    def walk(self) -> Iterator['ASTNode']:
        """Yield this node and every descendant, pre-order."""
        yield self
        for child in self.children():
            yield from child.walk()

    def location(self, ctx: SemanticContext) -> SourceLocation:
        return SourceLocation.at(ctx.file, self.position)

    def _render_tree(self, indentation: int, label: str) -> str:
        lines = [" " * indentation + label]
        for child in self.children():
            lines.append(child.render(indentation + 2))
        return "\n".join(lines)


class Statement(ASTNode):
    """Base class for statements."""
    pass


class Expression(ASTNode):
    """Base class for expressions."""
    pass


# ============================================================================
# Expressions
# ============================================================================

class Number(Expression):
    """Integer literal."""

    def __init__(self, value: int, position: Optional[Position] = None):
        super().__init__(ASTNodeType.NUMBER, position)
        self.value = value

    def render(self, indentation: int = 0) -> str:
        return self._render_tree(indentation, f"Number {self.value}")

    def check(self, ctx: SemanticContext) -> Optional[Type]:
        return Type.i32()

    def lower(self, ctx: IRContext) -> List[IRInstruction]:
        return [IRInstruction(IROpcode.CONST, (self.value,), ctx.new_temp())]

    def children(self) -> List[ASTNode]:
        return []

    def __eq__(self, other) -> bool:
        return isinstance(other, Number) and self.value == other.value

    def __repr__(self) -> str:
        return f"Number({self.value})"


class Identifier(Expression):
    """Reference to a named value."""

    def __init__(self, name: str, position: Optional[Position] = None):
        super().__init__(ASTNodeType.IDENTIFIER, position)
        self.name = name

    def render(self, indentation: int = 0) -> str:
        return self._render_tree(indentation, f"Identifier {self.name}")

    def check(self, ctx: SemanticContext) -> Optional[Type]:
        symbol_type = ctx.lookup(self.name)
        if symbol_type is None:
            raise create_undefined_symbol_error(
                self.name, self.location(ctx), self, ctx.get_similar_names(self.name)
            )
        return symbol_type

    def lower(self, ctx: IRContext) -> List[IRInstruction]:
        return [IRInstruction(IROpcode.LOAD, (self.name,), ctx.new_temp())]

    def children(self) -> List[ASTNode]:
        return []

    def __eq__(self, other) -> bool:
        return isinstance(other, Identifier) and self.name == other.name

    def __repr__(self) -> str:
        return f"Identifier({self.name!r})"


class BinaryExpr(Expression):
    """Binary arithmetic operation."""

    def __init__(self, operator: Operator, left: Expression, right: Expression,
                 position: Optional[Position] = None):
        super().__init__(ASTNodeType.BINARY, position)
        self.operator = operator
        self.left = left
        self.right = right

    def render(self, indentation: int = 0) -> str:
        return self._render_tree(indentation, f"Binary {self.operator.name.lower()}")

    def check(self, ctx: SemanticContext) -> Optional[Type]:
        i32 = Type.i32()
        for operand in (self.left, self.right):
            operand_type = operand.check(ctx)
            if operand_type != i32:
                raise create_type_mismatch_error(
                    str(i32), str(operand_type), f"operand of '{self.operator}'",
                    operand.location(ctx), operand
                )
        return i32

    def lower(self, ctx: IRContext) -> List[IRInstruction]:
        left = self.left.lower(ctx)
        right = self.right.lower(ctx)
        result = IRInstruction(
            IROpcode.BINARY,
            (self.operator.value, left[-1].result, right[-1].result),
            ctx.new_temp()
        )
        return left + right + [result]

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]

    def __eq__(self, other) -> bool:
        return (isinstance(other, BinaryExpr) and self.operator == other.operator and
                self.left == other.left and self.right == other.right)

    def __repr__(self) -> str:
        return f"Binary({self.operator.name.lower()}, {self.left!r}, {self.right!r})"


class FunctionCall(Expression):
    """Call of a named function."""

    def __init__(self, function: str, arguments: List[Expression],
                 position: Optional[Position] = None):
        super().__init__(ASTNodeType.FUNCTION_CALL, position)
        self.function = function
        self.arguments = arguments

    def render(self, indentation: int = 0) -> str:
        return self._render_tree(indentation, f"FunctionCall {self.function}")

    def check(self, ctx: SemanticContext) -> Optional[Type]:
        signature = ctx.lookup_function(self.function)
        if signature is None:
            raise create_undefined_function_error(self.function, self.location(ctx), self)

        if len(self.arguments) != signature.arity:
            raise create_arity_mismatch_error(
                self.function, signature.arity, len(self.arguments), self.location(ctx), self
            )

        for index, (argument, expected) in enumerate(zip(self.arguments, signature.param_types)):
            actual = argument.check(ctx)
            if actual != expected:
                raise create_type_mismatch_error(
                    str(expected), str(actual),
                    f"argument {index + 1} of call to '{self.function}'",
                    argument.location(ctx), argument
                )

        return signature.return_type

    def lower(self, ctx: IRContext) -> List[IRInstruction]:
        instructions: List[IRInstruction] = []
        for argument in self.arguments:
            lowered = argument.lower(ctx)
            instructions.extend(lowered)
            instructions.append(IRInstruction(IROpcode.ARG, (lowered[-1].result,)))
        instructions.append(IRInstruction(
            IROpcode.CALL, (self.function, len(self.arguments)), ctx.new_temp()
        ))
        return instructions

    def children(self) -> List[ASTNode]:
        return list(self.arguments)

    def __eq__(self, other) -> bool:
        return (isinstance(other, FunctionCall) and self.function == other.function and
                self.arguments == other.arguments)

    def __repr__(self) -> str:
        return f"FunctionCall({self.function!r}, {self.arguments!r})"


# ============================================================================
# Statements
# ============================================================================

class Return(Statement):
    """`ret <expression>;`"""

    def __init__(self, value: Expression, position: Optional[Position] = None):
        super().__init__(ASTNodeType.RETURN, position)
        self.value = value

    def render(self, indentation: int = 0) -> str:
        return self._render_tree(indentation, "Return")

    def check(self, ctx: SemanticContext) -> Optional[Type]:
        value_type = self.value.check(ctx)
        expected = ctx.current_function_return

        if expected is None or expected.is_void:
            raise create_void_return_error(ctx.current_function or "<unknown>", self.location(ctx), self)

        if value_type != expected:
            raise create_type_mismatch_error(
                str(expected), str(value_type),
                f"return value of '{ctx.current_function}'",
                self.value.location(ctx), self.value
            )
        return None

    def lower(self, ctx: IRContext) -> List[IRInstruction]:
        value = self.value.lower(ctx)
        return value + [IRInstruction(IROpcode.RET, (value[-1].result,))]

    def children(self) -> List[ASTNode]:
        return [self.value]


# ============================================================================
# Function definitions
# ============================================================================

class FunctionParameter(ASTNode):
    """`name: type` in a parameter list."""

    def __init__(self, id: str, type: Type, position: Optional[Position] = None):
        super().__init__(ASTNodeType.FUNCTION_PARAMETER, position)
        self.id = id
        self.type = type

    def render(self, indentation: int = 0) -> str:
        return self._render_tree(indentation, f"Parameter {self.id}: {self.type}")

    def check(self, ctx: SemanticContext) -> Optional[Type]:
        ctx.add_symbol(self.id, self.type)
        return None

    def lower(self, ctx: IRContext) -> List[IRInstruction]:
        return [IRInstruction(IROpcode.PARAM, (self.id, self.type.name))]

    def children(self) -> List[ASTNode]:
        return []


class FunctionReturnType(ASTNode):
    """Declared return type; `void` when omitted."""

    def __init__(self, type: Optional[Type] = None, position: Optional[Position] = None):
        super().__init__(ASTNodeType.FUNCTION_RETURN_TYPE, position)
        self.type = type if type is not None else Type.void()

    def render(self, indentation: int = 0) -> str:
        return self._render_tree(indentation, f"ReturnType {self.type}")

    def check(self, ctx: SemanticContext) -> Optional[Type]:
        return None

    def lower(self, ctx: IRContext) -> List[IRInstruction]:
        return []

    def children(self) -> List[ASTNode]:
        return []


class FunctionBody(ASTNode):
    """Statements between `{` and `}`."""

    def __init__(self, statements: Optional[List[Statement]] = None,
                 position: Optional[Position] = None):
        super().__init__(ASTNodeType.FUNCTION_BODY, position)
        self.statements: List[Statement] = statements if statements is not None else []

    def render(self, indentation: int = 0) -> str:
        return self._render_tree(indentation, "Body")

    def check(self, ctx: SemanticContext) -> Optional[Type]:
        for statement in self.statements:
            statement.check(ctx)
        return None

    def lower(self, ctx: IRContext) -> List[IRInstruction]:
        instructions: List[IRInstruction] = []
        for statement in self.statements:
            instructions.extend(statement.lower(ctx))
        return instructions

    def children(self) -> List[ASTNode]:
        return list(self.statements)

    @property
    def has_return(self) -> bool:
        return any(isinstance(statement, Return) for statement in self.statements)


class FunctionDefinition(ASTNode):
    """
    A function definition, or a prototype when `body` is None.

    Checking opens a scope for the parameters, makes the declared return type
    current while the body is checked, and closes the scope again.
    """

    def __init__(self, id: str, parameters: List[FunctionParameter],
                 return_type: FunctionReturnType, body: Optional[FunctionBody],
                 position: Optional[Position] = None):
        super().__init__(ASTNodeType.FUNCTION_DEFINITION, position)
        self.id = id
        self.parameters = parameters
        self.return_type = return_type
        self.body = body

    @property
    def is_prototype(self) -> bool:
        return self.body is None

    def signature(self) -> FunctionSignature:
        return FunctionSignature(
            name=self.id,
            param_types=[param.type for param in self.parameters],
            return_type=self.return_type.type,
            has_body=not self.is_prototype,
        )

    def render(self, indentation: int = 0) -> str:
        kind = "FunctionPrototype" if self.is_prototype else "FunctionDefinition"
        return self._render_tree(indentation, f"{kind} {self.id}")

    def check(self, ctx: SemanticContext) -> Optional[Type]:
        if self.is_prototype:
            return None

        previous_return = ctx.current_function_return
        previous_function = ctx.current_function
        ctx.current_function_return = self.return_type.type
        ctx.current_function = self.id
        try:
            with ctx.scope(f"fn {self.id}"):
                for param in self.parameters:
                    param.check(ctx)
                self.return_type.check(ctx)
                self.body.check(ctx)

            if not self.return_type.type.is_void and not self.body.has_return:
                raise create_missing_return_error(
                    self.id, str(self.return_type.type), self.location(ctx), self
                )
        finally:
            ctx.current_function_return = previous_return
            ctx.current_function = previous_function
        return None

    def lower(self, ctx: IRContext) -> List[IRInstruction]:
        if self.is_prototype:
            return [IRInstruction(
                IROpcode.DECLARE, (self.id, len(self.parameters), self.return_type.type.name)
            )]

        ctx.begin_function(self.id)
        instructions = [IRInstruction(IROpcode.FUNCTION, (self.id, self.return_type.type.name))]
        for child in self.children():
            instructions.extend(child.lower(ctx))
        return instructions

    def children(self) -> List[ASTNode]:
        nodes: List[ASTNode] = list(self.parameters)
        nodes.append(self.return_type)
        if self.body is not None:
            nodes.append(self.body)
        return nodes


# ============================================================================
# Root
# ============================================================================

class Ast(ASTNode):
    """
    Root of a parsed compilation unit.

    `declarations` holds the successfully parsed top-level declarations in source
    order, `ids` maps declared names to their definition and `diagnostics`
    collects what went wrong while parsing.
    """

    def __init__(self, file: str = "<input>"):
        super().__init__(ASTNodeType.AST)
        self.file = file
        self.declarations: List[ASTNode] = []
        self.ids: Dict[str, ASTNode] = {}
        self.diagnostics: List[Diagnostic] = []

    def push_child(self, node: ASTNode) -> None:
        self.declarations.append(node)

    def render(self, indentation: int = 0) -> str:
        return self._render_tree(indentation, "Abstract Syntax Tree")

    def check(self, ctx: SemanticContext) -> Optional[Type]:
        for child in self.declarations:
            child.check(ctx)
        return None

    def lower(self, ctx: IRContext) -> List[IRInstruction]:
        instructions: List[IRInstruction] = []
        for child in self.declarations:
            instructions.extend(child.lower(ctx))
        return instructions

    def children(self) -> List[ASTNode]:
        return list(self.declarations)

    @property
    def has_errors(self) -> bool:
        return any(diagnostic.is_error for diagnostic in self.diagnostics)

    def __len__(self) -> int:
        return len(self.declarations)
