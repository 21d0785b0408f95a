"""
Test helpers: token streams from compact source text.

The real tokenizer lives outside this package, so tests spell programs as
text and `tokens()` splits them into `(Token, Position)` pairs with 1-based
lines and 1-based indices.

Author: xwest
"""

import re
import sys
import os
from typing import List, Optional

project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from fnlang.lexer.tokens import Token, TokenType, Position, TokenStream, KEYWORDS, PUNCTUATION
from fnlang.analyzer.semantic_context import SemanticContext
from fnlang.parser.parser import Parser
from fnlang.parser.ast_nodes import (
    Ast, Expression, FunctionDefinition, Return, Number, Identifier, BinaryExpr,
    FunctionCall, Operator
)


_TOKEN_PATTERN = re.compile(r"->|[(){}:,;+\-*/%]|\d+|[A-Za-z_]\w*|\n|[ \t\r]+|.")


def tokens(source: str, eof: bool = True) -> TokenStream:
    """Split source text into a token stream, optionally terminated by EOF."""
    stream: TokenStream = []
    line, line_start = 1, 0

    for match in _TOKEN_PATTERN.finditer(source):
        text = match.group()
        position = Position(line, match.start() - line_start + 1)

        if text == "\n":
            line, line_start = line + 1, match.end()
        elif text.isspace():
            continue
        elif text in KEYWORDS:
            stream.append((Token(KEYWORDS[text]), position))
        elif text in PUNCTUATION:
            stream.append((Token(PUNCTUATION[text]), position))
        elif text.isdigit():
            stream.append((Token(TokenType.NUMBER, text), position))
        elif re.match(r"[A-Za-z_]", text):
            stream.append((Token(TokenType.IDENTIFIER, text), position))
        else:
            raise ValueError(f"unexpected character {text!r} at {position}")

    if eof:
        stream.append((Token(TokenType.EOF), Position(line, len(source) - line_start + 1)))
    return stream


def parse_source(source: str, ctx: Optional[SemanticContext] = None,
                 file: str = "test.fn") -> Ast:
    ctx = ctx if ctx is not None else SemanticContext(file)
    return Parser(tokens(source), file).parse(ctx)


def parse_return_value(expression: str) -> Expression:
    """Parse `expression` as the returned value of a one-line function."""
    ast = parse_source(f"fn f(x: i32) -> i32 {{ ret {expression}; }}")
    assert not ast.diagnostics, [d.summary() for d in ast.diagnostics]
    function: FunctionDefinition = ast.declarations[0]
    statement: Return = function.body.statements[0]
    return statement.value


def num(value: int) -> Number:
    return Number(value)


def ident(name: str) -> Identifier:
    return Identifier(name)


def binary(operator: Operator, left: Expression, right: Expression) -> BinaryExpr:
    return BinaryExpr(operator, left, right)


def call(function: str, arguments: List[Expression]) -> FunctionCall:
    return FunctionCall(function, arguments)
