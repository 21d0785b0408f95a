"""
Test suite for the fnlang parser.

Tests cover:
- Operator precedence, associativity and grouping
- Calls versus identifier references
- Function signatures (parameters, return types, prototypes)
- Error kinds and per-declaration recovery

Author: xwest
"""

import unittest

from helpers import (
    tokens, parse_source, parse_return_value, num, ident, binary, call
)
from fnlang.lexer.tokens import Token, TokenType, Position
from fnlang.analyzer.semantic_context import SemanticContext
from fnlang.analyzer.types import Type, BasicType
from fnlang.parser.parser import Parser, parse
from fnlang.parser.ast_nodes import Operator, Return
from fnlang.parser.errors import (
    MissingTokenError, UnexpectedTokenError, InvalidSyntaxError,
    InvalidParameterError, GenericParseError, UnsupportedConstructError
)


class TestExpressionParsing(unittest.TestCase):
    """Precedence climbing over the two binary operator tiers."""

    def test_multiplication_binds_tighter_than_addition(self):
        expr = parse_return_value("1 + 2 * 3")
        expected = binary(Operator.ADD, num(1), binary(Operator.MULTIPLY, num(2), num(3)))
        self.assertEqual(expr, expected)

    def test_subtraction_is_left_associative(self):
        expr = parse_return_value("1 - 2 - 3")
        expected = binary(Operator.SUBTRACT, binary(Operator.SUBTRACT, num(1), num(2)), num(3))
        self.assertEqual(expr, expected)

    def test_multiplicative_operators_are_left_associative(self):
        expr = parse_return_value("8 / 4 % 3 * 2")
        expected = binary(
            Operator.MULTIPLY,
            binary(Operator.MODULO, binary(Operator.DIVIDE, num(8), num(4)), num(3)),
            num(2),
        )
        self.assertEqual(expr, expected)

    def test_parentheses_override_precedence(self):
        expr = parse_return_value("(1 + 2) * 3")
        expected = binary(Operator.MULTIPLY, binary(Operator.ADD, num(1), num(2)), num(3))
        self.assertEqual(expr, expected)

    def test_call_without_arguments(self):
        self.assertEqual(parse_return_value("f()"), call("f", []))

    def test_bare_identifier_is_a_reference(self):
        self.assertEqual(parse_return_value("x"), ident("x"))

    def test_call_arguments_are_full_expressions(self):
        expr = parse_return_value("g(x, 1 + 2, h())")
        expected = call("g", [ident("x"), binary(Operator.ADD, num(1), num(2)), call("h", [])])
        self.assertEqual(expr, expected)

    def test_call_inside_arithmetic(self):
        expr = parse_return_value("x * f(x) - 1")
        expected = binary(
            Operator.SUBTRACT,
            binary(Operator.MULTIPLY, ident("x"), call("f", [ident("x")])),
            num(1),
        )
        self.assertEqual(expr, expected)

    def test_binary_node_records_operator_position(self):
        expr = parse_return_value("1 + 2")
        self.assertEqual(expr.position, Position(1, 29))


class TestFunctionParsing(unittest.TestCase):
    """Function signatures and bodies."""

    def test_parses_every_well_formed_function_in_order(self):
        source = """
        fn one() -> i32 { ret 1; }
        fn two() -> i32 { ret 2; }
        fn three() -> i32 { ret 3; }
        """
        ast = parse_source(source)

        self.assertEqual([f.id for f in ast.declarations], ["one", "two", "three"])
        self.assertEqual(ast.diagnostics, [])

    def test_empty_parameter_list(self):
        ast = parse_source("fn f() -> i32 { ret 1; }")
        self.assertEqual(ast.declarations[0].parameters, [])

    def test_parameters_keep_names_and_types(self):
        ast = parse_source("fn f(a: i32, p: Point) -> i32 { ret a; }")
        params = ast.declarations[0].parameters

        self.assertEqual([p.id for p in params], ["a", "p"])
        self.assertEqual(params[0].type, Type("i32", BasicType.I32))
        self.assertEqual(params[1].type, Type("Point", None))

    def test_omitted_return_type_defaults_to_void(self):
        ast = parse_source("fn f() { }")
        self.assertEqual(ast.declarations[0].return_type.type, Type("void", BasicType.VOID))

    def test_prototype_defaults_to_void(self):
        ast = parse_source("fn f();")
        function = ast.declarations[0]

        self.assertEqual(function.return_type.type, Type.void())
        self.assertTrue(function.is_prototype)
        self.assertIsNone(function.body)

    def test_prototype_with_return_type(self):
        ast = parse_source("fn f(a: i32) -> i32;")
        function = ast.declarations[0]

        self.assertTrue(function.is_prototype)
        self.assertEqual(function.return_type.type, Type.i32())

    def test_explicit_void_return_type(self):
        ast = parse_source("fn f() -> void { }")
        self.assertEqual(ast.diagnostics, [])
        self.assertEqual(ast.declarations[0].return_type.type, Type.void())

    def test_void_parameter_is_rejected(self):
        ast = parse_source("fn f(a: void) { }")

        self.assertEqual(ast.declarations, [])
        self.assertEqual(ast.diagnostics[0].code, InvalidParameterError.code)

    def test_named_return_type(self):
        ast = parse_source("fn f(p: Point) -> Point { ret p; }")
        self.assertEqual(ast.declarations[0].return_type.type, Type.named("Point"))

    def test_body_with_several_statements(self):
        ast = parse_source("fn f() -> i32 { ret 1; ret 2; }")
        statements = ast.declarations[0].body.statements

        self.assertEqual(len(statements), 2)
        self.assertTrue(all(isinstance(s, Return) for s in statements))

    def test_function_position_is_fn_keyword(self):
        ast = parse_source("\n  fn f() { }")
        self.assertEqual(ast.declarations[0].position, Position(2, 3))

    def test_parser_leaves_context_balanced(self):
        ctx = SemanticContext("test.fn")
        parse_source("fn f(a: i32, b: i32) -> i32 { ret a; } fn g(", ctx)

        self.assertEqual(ctx.depth, 1)
        self.assertEqual(ctx.symbol_table, {})

    def test_module_level_parse_creates_context(self):
        ast = parse(tokens("fn f() { }"), file="main.fn")

        self.assertEqual(ast.file, "main.fn")
        self.assertEqual(len(ast), 1)


class TestEmptyInput(unittest.TestCase):

    def test_eof_only(self):
        ast = parse_source("")
        self.assertEqual(ast.declarations, [])
        self.assertEqual(ast.diagnostics, [])

    def test_stream_without_eof_marker(self):
        ast = Parser([], "empty.fn").parse(SemanticContext())
        self.assertEqual(ast.declarations, [])
        self.assertEqual(ast.diagnostics, [])


class TestParseErrors(unittest.TestCase):
    """Each malformed declaration yields exactly one diagnostic."""

    def _single_error(self, source: str):
        parser = Parser(tokens(source), "test.fn")
        ast = parser.parse(SemanticContext("test.fn"))
        self.assertEqual(len(parser.errors), 1, [str(e) for e in parser.errors])
        self.assertEqual(len(ast.diagnostics), 1)
        return ast, parser.errors[0]

    def test_missing_closing_parenthesis_in_parameters(self):
        _, error = self._single_error("fn f(a: i32 { ret a; }")

        self.assertIsInstance(error, MissingTokenError)
        self.assertEqual(error.file, "test.fn")
        self.assertEqual(error.position, Position(1, 13))
        self.assertIn("test.fn", str(error))
        self.assertIn("on line 1 at position 13", str(error))

    def test_missing_opening_parenthesis(self):
        _, error = self._single_error("fn f { }")
        self.assertIsInstance(error, MissingTokenError)

    def test_missing_colon_is_syntax_error(self):
        _, error = self._single_error("fn f(a i32) { }")

        self.assertIsInstance(error, InvalidSyntaxError)
        self.assertIn("Expected ':' after parameter name.", str(error))

    def test_missing_parameter_type(self):
        _, error = self._single_error("fn f(a: ) { }")

        self.assertIsInstance(error, MissingTokenError)
        self.assertEqual(error.expected, "parameter type")

    def test_duplicate_parameter_name(self):
        _, error = self._single_error("fn f(a: i32, a: i32) { }")

        self.assertIsInstance(error, InvalidParameterError)
        self.assertEqual(error.position, Position(1, 14))

    def test_function_name_must_be_identifier(self):
        _, error = self._single_error("fn 42() { }")
        self.assertIsInstance(error, UnexpectedTokenError)

    def test_missing_semicolon_after_return(self):
        _, error = self._single_error("fn f() -> i32 { ret 1 }")
        self.assertIsInstance(error, InvalidSyntaxError)

    def test_unknown_statement(self):
        _, error = self._single_error("fn f() { x; }")
        self.assertIsInstance(error, UnexpectedTokenError)

    def test_unclosed_grouping(self):
        _, error = self._single_error("fn f() -> i32 { ret (1 + 2; }")
        self.assertIsInstance(error, UnexpectedTokenError)

    def test_bad_call_separator(self):
        _, error = self._single_error("fn f() -> i32 { ret g(1 2); }")
        self.assertIsInstance(error, InvalidSyntaxError)

    def test_unexpected_token_after_parameters(self):
        _, error = self._single_error("fn f() i32 { }")
        self.assertIsInstance(error, UnexpectedTokenError)

    def test_end_of_input_in_body(self):
        _, error = self._single_error("fn f() { ret 1;")

        self.assertIsInstance(error, GenericParseError)
        self.assertIn("Unexpected end of input in function body.", str(error))

    def test_end_of_input_in_expression_reports_eof(self):
        _, error = self._single_error("fn f() -> i32 { ret 1 +")

        self.assertIsInstance(error, UnexpectedTokenError)
        self.assertEqual(error.token.type, TokenType.EOF)

    def test_stream_ending_without_eof_marker(self):
        parser = Parser(tokens("fn f(", eof=False), "test.fn")
        ast = parser.parse(SemanticContext())

        self.assertIsInstance(parser.errors[0], GenericParseError)
        self.assertEqual(ast.declarations, [])

    def test_invalid_number_literal(self):
        stream = tokens("fn f() -> i32 { ret 0; }")
        index = next(i for i, (token, _) in enumerate(stream) if token.type == TokenType.NUMBER)
        stream[index] = (Token(TokenType.NUMBER, "12abc"), stream[index][1])

        parser = Parser(stream, "test.fn")
        parser.parse(SemanticContext())
        self.assertIsInstance(parser.errors[0], InvalidSyntaxError)

    def _parse_with_literal(self, text: str):
        stream = tokens("fn f() -> i32 { ret 0; }")
        index = next(i for i, (token, _) in enumerate(stream) if token.type == TokenType.NUMBER)
        stream[index] = (Token(TokenType.NUMBER, text), stream[index][1])

        parser = Parser(stream, "test.fn")
        ast = parser.parse(SemanticContext())
        return ast, parser.errors

    def test_number_literal_forms_outside_plain_decimal(self):
        for text in ["1_000", " 7", "١٢", "+3"]:
            with self.subTest(text=text):
                ast, errors = self._parse_with_literal(text)
                self.assertEqual(ast.declarations, [])
                self.assertIsInstance(errors[0], InvalidSyntaxError)

    def test_number_literal_out_of_i32_range(self):
        _, errors = self._parse_with_literal("2147483648")

        self.assertIsInstance(errors[0], InvalidSyntaxError)
        self.assertIn("does not fit in i32", str(errors[0]))

    def test_largest_i32_literal(self):
        ast, errors = self._parse_with_literal("2147483647")

        self.assertEqual(errors, [])
        self.assertEqual(ast.declarations[0].body.statements[0].value, num(2147483647))

    def test_diagnostic_summary_is_one_line(self):
        ast, _ = self._single_error("fn f(a i32) { }")
        summary = ast.diagnostics[0].summary()

        self.assertNotIn("\n", summary)
        self.assertTrue(summary.startswith("test.fn:1:8: error[P003]"))


class TestRecovery(unittest.TestCase):
    """A failed declaration is dropped; its siblings survive."""

    def test_bad_function_between_good_ones(self):
        source = (
            "fn good1() -> i32 { ret 1; }\n"
            "fn bad(a i32) -> i32 { ret a; }\n"
            "fn good2() -> i32 { ret 2; }\n"
        )
        ast = parse_source(source)

        self.assertEqual([f.id for f in ast.declarations], ["good1", "good2"])
        self.assertEqual(len(ast.diagnostics), 1)
        self.assertEqual(ast.diagnostics[0].location.line, 2)

    def test_next_function_keyword_is_not_swallowed(self):
        ast = parse_source("fn bad( fn good() { }")

        self.assertEqual([f.id for f in ast.declarations], ["good"])
        self.assertEqual(len(ast.diagnostics), 1)

    def test_unsupported_top_level_construct(self):
        ast = parse_source("ret 1; fn f() { }")

        self.assertEqual([f.id for f in ast.declarations], ["f"])
        self.assertEqual(len(ast.diagnostics), 1)
        self.assertEqual(ast.diagnostics[0].code, UnsupportedConstructError.code)

    def test_trailing_garbage_is_one_diagnostic(self):
        ast = parse_source("fn f() { } 1 2 3")

        self.assertEqual(len(ast.declarations), 1)
        self.assertEqual(len(ast.diagnostics), 1)

    def test_every_failure_is_reported(self):
        ast = parse_source("fn a( fn b(x) { } fn c() { }")

        self.assertEqual([f.id for f in ast.declarations], ["c"])
        self.assertEqual(len(ast.diagnostics), 2)
        self.assertTrue(ast.has_errors)

    def test_deeply_nested_expression_fails_only_its_declaration(self):
        depth = 1000
        source = (
            "fn good() -> i32 { ret 1; }\n"
            "fn deep() -> i32 { ret " + "(" * depth + "1" + ")" * depth + "; }\n"
            "fn after() -> i32 { ret 2; }\n"
        )
        ctx = SemanticContext("test.fn")
        ast = parse_source(source, ctx)

        self.assertEqual([f.id for f in ast.declarations], ["good", "after"])
        self.assertEqual(len(ast.diagnostics), 1)
        self.assertEqual(ast.diagnostics[0].code, GenericParseError.code)
        self.assertEqual(ast.diagnostics[0].location.line, 2)
        self.assertEqual(ctx.depth, 1)


if __name__ == "__main__":
    unittest.main()
