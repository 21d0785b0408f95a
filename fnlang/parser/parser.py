"""
fnlang Recursive Descent Parser

Builds an `Ast` from a `(Token, Position)` stream. One method per grammar
production:

    program    := item*
    item       := 'fn' function
    function   := IDENT params ['->' type] (body | ';')
    params     := '(' (param (',' param)*)? ')'
    param      := IDENT ':' type
    type       := 'i32' | IDENT
    body       := '{' statement* '}'
    statement  := 'ret' expression ';'
    expression := term (('+'|'-') term)*
    term       := factor (('*'|'/'|'%') factor)*
    factor     := NUMBER | call | IDENT | '(' expression ')'
    call       := IDENT '(' (expression (',' expression)*)? ')'

A syntax error aborts only the enclosing function definition. The top-level
loop records the error's diagnostic on the Ast and resumes at the next `fn`.

Author: xwest
"""

from typing import List, Optional, Tuple

from ..lexer.tokens import Token, TokenType, Position, TokenStream
from ..analyzer.types import Type, BasicType, I32_MAX
from ..analyzer.semantic_context import SemanticContext
from .ast_nodes import (
    Ast, FunctionDefinition, FunctionParameter, FunctionReturnType, FunctionBody,
    Statement, Return, Expression, Number, Identifier, BinaryExpr, FunctionCall,
    Operator
)
from .errors import (
    ParseError, GenericParseError, create_unexpected_token_error,
    create_missing_token_error, create_syntax_error,
    create_invalid_parameter_error, create_unsupported_construct_error
)


ADDITIVE_OPERATORS = {TokenType.PLUS, TokenType.MINUS}
MULTIPLICATIVE_OPERATORS = {TokenType.MULTIPLY, TokenType.DIVIDE, TokenType.MODULO}


class Parser:
    """
    fnlang recursive descent parser.

    Binary operators are parsed by precedence climbing over two tiers:
    additive binds looser than multiplicative, and both are left-associative.
    """

    def __init__(self, tokens: TokenStream, file: str = "<input>"):
        """
        Initialize parser with a token stream.

        Args:
            tokens: `(Token, Position)` pairs from the tokenizer, normally
                terminated by an EOF token
            file: Source-file label used in diagnostics
        """
        self.tokens = list(tokens)
        self.file = file
        self.current = 0
        self.errors: List[ParseError] = []

    def parse(self, ctx: SemanticContext) -> Ast:
        """
        Parse the token stream into an AST.

        Never raises for syntax errors: each failed declaration is dropped
        and its diagnostic appended to `Ast.diagnostics`.
        """
        ast = Ast(self.file)

        while not self._is_at_end():
            token, position = self._consume()

            if token.type == TokenType.FN:
                start = self.current
                try:
                    ast.push_child(self._parse_function(ctx, position))
                except RecursionError:
                    self._record(ast, GenericParseError(
                        "Expression nesting too deep in function definition.", self.file, position
                    ))
                    self._synchronize()
                except ParseError as e:
                    self._record(ast, e)
                    # Don't swallow the next declaration's 'fn'.
                    if (self.current > start and
                            self.tokens[self.current - 1][0].type == TokenType.FN):
                        self.current -= 1
                    self._synchronize()
            else:
                self._record(ast, create_unsupported_construct_error(token, self.file, position))
                self._synchronize()

        return ast

    def _record(self, ast: Ast, error: ParseError) -> None:
        self.errors.append(error)
        ast.diagnostics.append(error.diagnostic)

    def _synchronize(self) -> None:
        """Skip ahead to the next top-level 'fn' or the end of the stream."""
        while not self._is_at_end() and not self._check(TokenType.FN):
            self.current += 1

    # ========================================================================
    # Declarations
    # ========================================================================

    def _parse_function(self, ctx: SemanticContext, fn_position: Position) -> FunctionDefinition:
        """Parse a function definition; the 'fn' keyword is already consumed."""
        token, position = self._consume()
        if token.type != TokenType.IDENTIFIER:
            raise create_unexpected_token_error(token, self.file, position, "a function name")
        name = token.text

        with ctx.scope(f"fn {name}"):
            parameters = self._parse_parameters(ctx)
            return_type = self._parse_return_type()
            body = self._parse_body(ctx)

        return FunctionDefinition(name, parameters, return_type, body, fn_position)

    def _parse_parameters(self, ctx: SemanticContext) -> List[FunctionParameter]:
        """Parse a parenthesized parameter list, registering each parameter in scope."""
        parameters: List[FunctionParameter] = []

        token, position = self._consume()
        if token.type != TokenType.LEFT_PAREN:
            raise create_missing_token_error(
                "opening parenthesis '('", self.file, position, TokenType.LEFT_PAREN
            )

        if self._match(TokenType.RIGHT_PAREN):
            return parameters

        while True:
            token, position = self._consume()
            if token.type != TokenType.IDENTIFIER:
                raise create_unexpected_token_error(token, self.file, position, "a parameter name")
            name = token.text

            if ctx.is_declared_locally(name):
                raise create_invalid_parameter_error(
                    f"duplicate parameter name '{name}'", self.file, position
                )

            colon, colon_position = self._consume()
            if colon.type != TokenType.COLON:
                raise create_syntax_error(
                    "Expected ':' after parameter name.", self.file, colon_position,
                    colon, TokenType.COLON
                )

            param_type = self._parse_type("parameter type")
            if param_type.is_void:
                raise create_invalid_parameter_error(
                    f"parameter '{name}' cannot have type void", self.file, position
                )
            parameters.append(FunctionParameter(name, param_type, position))
            ctx.add_symbol(name, param_type)

            next_pair = self._peek()
            if next_pair is None:
                raise GenericParseError("expected ',' or ')'", self.file, position)

            next_token, next_position = next_pair
            if next_token.type == TokenType.COMMA:
                self._consume()
            elif next_token.type == TokenType.RIGHT_PAREN:
                self._consume()
                break
            else:
                raise create_missing_token_error(
                    "closing parenthesis ')'", self.file, next_position, TokenType.RIGHT_PAREN
                )

        return parameters

    def _parse_type(self, expected: str) -> Type:
        """Parse a type name: 'i32' and 'void' are basic, any other identifier is a named type."""
        token, position = self._consume()
        if token.type == TokenType.I32:
            return Type.i32()
        if token.type == TokenType.IDENTIFIER:
            if token.text == BasicType.VOID.value:
                return Type.void()
            return Type.named(token.text)
        raise create_missing_token_error(expected, self.file, position)

    def _parse_return_type(self) -> FunctionReturnType:
        """Parse an optional '-> type'; defaults to void before '{' or ';'."""
        next_pair = self._peek()
        if next_pair is None:
            raise GenericParseError("expected '->', '{' or ';' after parameters", self.file)

        token, position = next_pair
        if token.type == TokenType.ARROW:
            self._consume()
            return FunctionReturnType(self._parse_type("return type"), position)
        if token.type in (TokenType.LEFT_BRACE, TokenType.SEMICOLON):
            return FunctionReturnType(Type.void(), position)

        self._consume()
        raise create_unexpected_token_error(token, self.file, position, "'->', '{' or ';'")

    def _parse_body(self, ctx: SemanticContext) -> Optional[FunctionBody]:
        """Parse a braced body; a ';' instead declares a prototype and yields None."""
        token, position = self._consume()
        if token.type == TokenType.SEMICOLON:
            return None
        if token.type != TokenType.LEFT_BRACE:
            raise create_missing_token_error(
                "'{' to open the function body", self.file, position, TokenType.LEFT_BRACE
            )

        body = FunctionBody(position=position)
        while True:
            next_pair = self._peek()
            if next_pair is None or next_pair[0].is_eof:
                raise GenericParseError(
                    "Unexpected end of input in function body.",
                    self.file, next_pair[1] if next_pair else position
                )
            if self._match(TokenType.RIGHT_BRACE):
                break
            body.statements.append(self._parse_statement(ctx))

        return body

    # ========================================================================
    # Statements
    # ========================================================================

    def _parse_statement(self, ctx: SemanticContext) -> Statement:
        """Parse a statement. Only 'ret' statements exist."""
        token, position = self._consume()
        if token.type != TokenType.RET:
            raise create_unexpected_token_error(token, self.file, position, "a statement")

        value = self._parse_expression(ctx)

        terminator, terminator_position = self._consume()
        if terminator.type != TokenType.SEMICOLON:
            raise create_syntax_error(
                "Expected ';' after return expression.", self.file, terminator_position,
                terminator, TokenType.SEMICOLON
            )

        return Return(value, position)

    # ========================================================================
    # Expressions
    # ========================================================================

    def _parse_expression(self, ctx: SemanticContext) -> Expression:
        """Parse additive expressions: term (('+'|'-') term)*."""
        expr = self._parse_term(ctx)
        while self._peek_type() in ADDITIVE_OPERATORS:
            operator_token, position = self._consume()
            right = self._parse_term(ctx)
            expr = BinaryExpr(Operator.from_token_type(operator_token.type), expr, right, position)
        return expr

    def _parse_term(self, ctx: SemanticContext) -> Expression:
        """Parse multiplicative expressions: factor (('*'|'/'|'%') factor)*."""
        expr = self._parse_factor(ctx)
        while self._peek_type() in MULTIPLICATIVE_OPERATORS:
            operator_token, position = self._consume()
            right = self._parse_factor(ctx)
            expr = BinaryExpr(Operator.from_token_type(operator_token.type), expr, right, position)
        return expr

    def _parse_factor(self, ctx: SemanticContext) -> Expression:
        """Parse a number, a call, an identifier or a parenthesized expression."""
        token, position = self._consume()

        if token.type == TokenType.NUMBER:
            text = token.text or ""
            if not (text.isascii() and text.isdecimal()):
                raise create_syntax_error(
                    f"Invalid integer literal '{token.text}'.", self.file, position, token
                )
            value = int(text)
            if value > I32_MAX:
                raise create_syntax_error(
                    f"Integer literal '{text}' does not fit in i32.", self.file, position, token
                )
            return Number(value, position)

        if token.type == TokenType.IDENTIFIER:
            # An identifier immediately followed by '(' is a call.
            if self._check(TokenType.LEFT_PAREN):
                return self._parse_call(ctx, token.text, position)
            return Identifier(token.text, position)

        if token.type == TokenType.LEFT_PAREN:
            expr = self._parse_expression(ctx)
            closing, closing_position = self._consume()
            if closing.type != TokenType.RIGHT_PAREN:
                raise create_unexpected_token_error(closing, self.file, closing_position, "')'")
            return expr

        raise create_unexpected_token_error(token, self.file, position, "an expression")

    def _parse_call(self, ctx: SemanticContext, function: str, position: Position) -> FunctionCall:
        """Parse a call's argument list; the callee name is already consumed."""
        self._consume()
        arguments: List[Expression] = []

        if self._match(TokenType.RIGHT_PAREN):
            return FunctionCall(function, arguments, position)

        while True:
            arguments.append(self._parse_expression(ctx))

            next_pair = self._peek()
            if next_pair is None:
                raise create_missing_token_error(
                    "',' or ')' in function call", self.file, position, TokenType.RIGHT_PAREN
                )

            next_token, next_position = next_pair
            if next_token.type == TokenType.COMMA:
                self._consume()
            elif next_token.type == TokenType.RIGHT_PAREN:
                self._consume()
                break
            else:
                raise create_syntax_error(
                    "Expected ',' or ')' in function call", self.file, next_position,
                    next_token, TokenType.RIGHT_PAREN
                )

        return FunctionCall(function, arguments, position)

    # ========================================================================
    # Token cursor
    # ========================================================================

    def _peek(self) -> Optional[Tuple[Token, Position]]:
        """Return the current pair without advancing, or None when exhausted."""
        if self.current < len(self.tokens):
            return self.tokens[self.current]
        return None

    def _peek_type(self) -> Optional[TokenType]:
        pair = self._peek()
        return pair[0].type if pair is not None else None

    def _check(self, token_type: TokenType) -> bool:
        return self._peek_type() == token_type

    def _match(self, token_type: TokenType) -> Optional[Tuple[Token, Position]]:
        """Consume the current token if it has the given type."""
        if self._check(token_type):
            return self._consume()
        return None

    def _is_at_end(self) -> bool:
        pair = self._peek()
        return pair is None or pair[0].is_eof

    def _consume(self) -> Tuple[Token, Position]:
        """
        Return the current pair and advance.

        Raises UnexpectedTokenError at EOF and GenericParseError when the
        stream ends without an EOF token.
        """
        pair = self._peek()
        if pair is None:
            last_position = self.tokens[-1][1] if self.tokens else None
            raise GenericParseError(
                "Reached end of token stream without an EOF marker", self.file, last_position
            )

        token, position = pair
        if token.is_eof:
            raise create_unexpected_token_error(token, self.file, position)

        self.current += 1
        return pair


def parse(tokens: TokenStream, ctx: Optional[SemanticContext] = None,
          file: str = "<input>") -> Ast:
    """Parse a token stream; a fresh context is created when none is given."""
    if ctx is None:
        ctx = SemanticContext(file)
    return Parser(tokens, file).parse(ctx)
