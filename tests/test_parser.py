"""
Test suite for the Bologna parser.

Tests cover:
- Operator precedence and associativity
- Calls, prototypes, definitions and externs
- Syntax errors and top-level recovery
- Custom precedence tables
- AST node behaviour and printing

Author: xwest
"""

import dataclasses
import os
import sys
import tempfile
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from bologna.lexer.lexer import Lexer
from bologna.parser.ast_nodes import (
    ANONYMOUS_FUNCTION_NAME, ASTNodeType, ASTVisitor, BinaryOp, Call, Function,
    NumberLiteral, Program, Prototype, VariableReference, dump
)
from bologna.parser.errors import ParseError, ParseErrorKind, RecoveryMode
from bologna.parser.parser import (
    CLASSIC_BINOP_PRECEDENCE, MAX_NESTING_DEPTH, Parser, parse_file, parse_string
)


def num(value):
    return NumberLiteral(float(value))


def var(name):
    return VariableReference(name)


class ParserTestCase(unittest.TestCase):

    def _parser(self, code: str, **kwargs) -> Parser:
        return Parser(Lexer(code, "<test>"), **kwargs)

    def _results(self, code: str, **kwargs):
        return list(self._parser(code, **kwargs))

    def _parse_expr(self, code: str, **kwargs):
        """Parse a single bare expression and return its body."""
        results = self._results(code, **kwargs)
        self.assertEqual(len(results), 1, results)
        self.assertTrue(results[0].ok, results[0].error)
        function = results[0].node
        self.assertTrue(function.is_anonymous)
        return function.body

    def _parse_error(self, code: str) -> ParseError:
        result = self._parser(code).parse_next_top_level_unit()
        self.assertIsNotNone(result)
        self.assertFalse(result.ok)
        return result.error


class TestExpressions(ParserTestCase):
    """Precedence climbing and primary expressions."""

    def test_multiplication_binds_tighter(self):
        self.assertEqual(
            self._parse_expr("1 + 2 * 3"),
            BinaryOp('+', num(1), BinaryOp('*', num(2), num(3)))
        )
        self.assertEqual(
            self._parse_expr("1 * 2 + 3"),
            BinaryOp('+', BinaryOp('*', num(1), num(2)), num(3))
        )

    def test_equal_precedence_is_left_associative(self):
        self.assertEqual(
            self._parse_expr("1 - 2 - 3"),
            BinaryOp('-', BinaryOp('-', num(1), num(2)), num(3))
        )
        self.assertEqual(
            self._parse_expr("a - b + c"),
            BinaryOp('+', BinaryOp('-', var('a'), var('b')), var('c'))
        )
        self.assertEqual(
            self._parse_expr("8 / 4 * 2"),
            BinaryOp('*', BinaryOp('/', num(8), num(4)), num(2))
        )

    def test_parentheses_override_precedence(self):
        self.assertEqual(
            self._parse_expr("(1 + 2) * 3"),
            BinaryOp('*', BinaryOp('+', num(1), num(2)), num(3))
        )
        self.assertEqual(self._parse_expr("((x))"), var('x'))

    def test_higher_then_lower_precedence(self):
        self.assertEqual(
            self._parse_expr("1 + 2 * 3 - 4"),
            BinaryOp('-', BinaryOp('+', num(1), BinaryOp('*', num(2), num(3))), num(4))
        )

    def test_comparison_has_lowest_precedence(self):
        self.assertEqual(
            self._parse_expr("1 < 2 + 3"),
            BinaryOp('<', num(1), BinaryOp('+', num(2), num(3)))
        )
        self.assertEqual(
            self._parse_expr("1 * 2 < 3 + 4 * 5"),
            BinaryOp('<', BinaryOp('*', num(1), num(2)),
                     BinaryOp('+', num(3), BinaryOp('*', num(4), num(5))))
        )

    def test_division_is_a_binary_operator(self):
        self.assertEqual(self._parse_expr("a / b"), BinaryOp('/', var('a'), var('b')))
        self.assertEqual(
            self._parse_expr("1 + 6 / 3"),
            BinaryOp('+', num(1), BinaryOp('/', num(6), num(3)))
        )

    def test_classic_table_has_no_division(self):
        """With the classic table '/' ends the expression."""
        results = self._results("a / b", precedence=CLASSIC_BINOP_PRECEDENCE)
        self.assertEqual(len(results), 3)
        self.assertEqual(results[0].node.body, var('a'))
        self.assertEqual(results[1].error.kind, ParseErrorKind.UNEXPECTED_TOKEN)
        self.assertEqual(results[1].error.position, 2)
        self.assertEqual(results[2].node.body, var('b'))

    def test_calls(self):
        self.assertEqual(self._parse_expr("foo(1, 2)"), Call("foo", [num(1), num(2)]))
        self.assertEqual(self._parse_expr("foo()"), Call("foo", []))
        self.assertEqual(
            self._parse_expr("f(g(x), 1 + 2)"),
            Call("f", [Call("g", [var('x')]), BinaryOp('+', num(1), num(2))])
        )

    def test_call_in_binary_expression(self):
        self.assertEqual(
            self._parse_expr("2 * sin(x) + 1"),
            BinaryOp('+', BinaryOp('*', num(2), Call("sin", [var('x')])), num(1))
        )

    def test_variable_reference(self):
        self.assertEqual(self._parse_expr("x"), var('x'))

    def test_custom_precedence_table(self):
        """Relative order in the table decides the tree shape."""
        self.assertEqual(
            self._parse_expr("1 + 2 * 3", precedence={'+': 30, '*': 5}),
            BinaryOp('*', BinaryOp('+', num(1), num(2)), num(3))
        )

    def test_custom_operator_character(self):
        """Characters outside the language's symbols can be operators."""
        self.assertEqual(
            self._parse_expr("a > b + 1", precedence={'>': 10, '+': 20}),
            BinaryOp('>', var('a'), BinaryOp('+', var('b'), num(1)))
        )

    def test_node_locations(self):
        expr = self._parse_expr("12 + x")
        self.assertEqual(expr.location.offset, 3)
        self.assertEqual(expr.left.location.offset, 0)
        self.assertEqual(expr.right.location.offset, 5)


class TestDeclarations(ParserTestCase):
    """Definitions, externs and top-level handling."""

    def test_extern(self):
        result = self._parser("extern sin(x)").parse_next_top_level_unit()
        self.assertTrue(result.ok)
        self.assertEqual(result.node, Prototype("sin", ["x"]))
        self.assertEqual(result.node.node_type, ASTNodeType.PROTOTYPE)
        self.assertEqual(result.node.arity, 1)

    def test_definition(self):
        result = self._parser("def add(a b) a + b").parse_next_top_level_unit()
        self.assertTrue(result.ok)
        function = result.node
        self.assertIsInstance(function, Function)
        self.assertEqual(function.prototype.parameter_names, ("a", "b"))
        self.assertEqual(function.body, BinaryOp('+', var('a'), var('b')))
        self.assertEqual(function.name, "add")
        self.assertFalse(function.is_anonymous)

    def test_definition_without_parameters(self):
        result = self._parser("def one() 1").parse_next_top_level_unit()
        self.assertEqual(result.node, Function(Prototype("one", []), num(1)))

    def test_duplicate_parameter_names_are_kept(self):
        result = self._parser("def f(a a) a").parse_next_top_level_unit()
        self.assertEqual(result.node.prototype.parameter_names, ("a", "a"))

    def test_top_level_expression_is_anonymous_function(self):
        result = self._parser("1 + 2").parse_next_top_level_unit()
        function = result.node
        self.assertEqual(function.prototype, Prototype(ANONYMOUS_FUNCTION_NAME, []))
        self.assertTrue(function.is_anonymous)

    def test_semicolons_separate_units(self):
        results = self._results(";;def f(x) x; extern g(); ;f(1);")
        self.assertTrue(all(r.ok for r in results))
        self.assertEqual(
            [type(r.node) for r in results], [Function, Prototype, Function]
        )

    def test_units_without_semicolons(self):
        results = self._results("def f(x) x extern g() 3")
        self.assertEqual(len(results), 3)
        self.assertEqual(results[1].node, Prototype("g", []))
        self.assertEqual(results[2].node.body, num(3))

    def test_end_of_input_returns_none(self):
        parser = self._parser("  # nothing here\n ;;")
        self.assertIsNone(parser.parse_next_top_level_unit())
        self.assertIsNone(parser.parse_next_top_level_unit())

    def test_parse_program(self):
        program = self._parser("def f(x) x * 2; extern sin(a); f(3)").parse()
        self.assertIsInstance(program, Program)
        self.assertEqual(len(program.items), 3)
        self.assertEqual(program.items[1], Prototype("sin", ["a"]))


class TestErrors(ParserTestCase):
    """Syntax errors are results, not crashes."""

    def test_unterminated_paren(self):
        error = self._parse_error("(")
        self.assertEqual(error.kind, ParseErrorKind.UNEXPECTED_TOKEN)
        self.assertEqual(error.message, "unknown token when expecting an expression")
        self.assertEqual(error.position, 1)

    def test_missing_close_paren(self):
        error = self._parse_error("(1 + 2")
        self.assertEqual(error.kind, ParseErrorKind.EXPECTED_CLOSE_PAREN)
        self.assertEqual(error.message, "expected ')'")

    def test_unterminated_argument_list(self):
        self.assertEqual(self._parse_error("foo(1,").kind, ParseErrorKind.UNEXPECTED_TOKEN)
        self.assertEqual(self._parse_error("foo(1").kind,
                         ParseErrorKind.EXPECTED_ARGUMENT_SEPARATOR)

    def test_missing_argument_separator(self):
        error = self._parse_error("foo(1 2)")
        self.assertEqual(error.kind, ParseErrorKind.EXPECTED_ARGUMENT_SEPARATOR)
        self.assertEqual(error.message, "expected ')' or ',' in argument list")
        self.assertEqual(error.position, 6)
        self.assertEqual(error.token.lexeme, "2")

    def test_deeply_nested_parentheses_are_an_error(self):
        """Nesting past the limit is reported, not a RecursionError."""
        code = "(" * 400 + "1" + ")" * 400
        results = self._results(code, recovery=RecoveryMode.SYNCHRONIZE)
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].error.kind, ParseErrorKind.NESTING_TOO_DEEP)
        self.assertEqual(results[0].error.kind.code, "P007")
        self.assertEqual(results[0].error.position, MAX_NESTING_DEPTH)

    def test_deeply_nested_unterminated_parentheses(self):
        results = self._results("(" * 400)
        self.assertTrue(results)
        self.assertFalse(any(result.ok for result in results))
        self.assertEqual(results[0].error.kind, ParseErrorKind.NESTING_TOO_DEEP)

    def test_deeply_nested_calls_are_an_error(self):
        error = self._parse_error("f(" * 400)
        self.assertEqual(error.kind, ParseErrorKind.NESTING_TOO_DEEP)

    def test_nesting_up_to_the_limit_parses(self):
        depth = MAX_NESTING_DEPTH - 1
        body = self._parse_expr("(" * depth + "1 + 2" + ")" * depth)
        self.assertEqual(body, BinaryOp('+', num(1), num(2)))

    def test_nesting_limit_is_configurable(self):
        self.assertTrue(self._results("((1))", max_depth=3)[0].ok)
        error = self._parser("(((1)))", max_depth=3).parse_next_top_level_unit().error
        self.assertEqual(error.kind, ParseErrorKind.NESTING_TOO_DEEP)
        self.assertEqual(error.position, 3)

    def test_missing_prototype(self):
        error = self._parse_error("def")
        self.assertEqual(error.kind, ParseErrorKind.EXPECTED_FUNCTION_NAME)
        self.assertEqual(error.position, 3)
        self.assertEqual(self._parse_error("extern 1").kind, ParseErrorKind.EXPECTED_FUNCTION_NAME)

    def test_prototype_shape_errors(self):
        self.assertEqual(self._parse_error("def foo x").kind, ParseErrorKind.EXPECTED_OPEN_PAREN)
        error = self._parse_error("def foo(a, b) a")
        self.assertEqual(error.kind, ParseErrorKind.EXPECTED_CLOSE_PAREN_IN_PROTOTYPE)
        self.assertEqual(error.position, 9)

    def test_definition_without_body(self):
        self.assertEqual(self._parse_error("def f(x)").kind, ParseErrorKind.UNEXPECTED_TOKEN)

    def test_operator_without_right_operand(self):
        error = self._parse_error("1 + )")
        self.assertEqual(error.kind, ParseErrorKind.UNEXPECTED_TOKEN)
        self.assertEqual(error.position, 4)

    def test_error_codes_and_diagnostic(self):
        error = self._parse_error("def")
        self.assertEqual(error.kind.code, "P004")
        self.assertEqual(error.diagnostic.code, "P004")
        text = str(error)
        self.assertIn("expected function name in prototype", text)
        self.assertIn("<test>:1:4", text)

    def test_errors_are_collected(self):
        parser = self._parser("def; (; 1")
        results = list(parser)
        self.assertEqual(len(parser.errors), 2)
        self.assertTrue(results[-1].ok)

    def test_error_cases_reach_end_of_input(self):
        for code in ["(", "foo(1,", "def", "def foo(", "extern", ")))"]:
            with self.subTest(code=code):
                parser = self._parser(code)
                results = list(parser)
                self.assertTrue(any(not r.ok for r in results))
                self.assertTrue(parser.current_token.is_eof)


class TestRecovery(ParserTestCase):
    """Top-level recovery strategies."""

    CODE = "def foo(a, b) a; 1 + 2"

    def test_skip_token_recovery(self):
        """The default drops one token and resumes right after it."""
        results = self._results(self.CODE)
        self.assertEqual([r.ok for r in results], [False, True, False, True, True])
        self.assertEqual(results[0].error.kind,
                         ParseErrorKind.EXPECTED_CLOSE_PAREN_IN_PROTOTYPE)
        self.assertEqual(results[1].node.body, var('b'))
        self.assertEqual(results[3].node.body, var('a'))
        self.assertEqual(results[4].node.body, BinaryOp('+', num(1), num(2)))

    def test_synchronize_recovery(self):
        """SYNCHRONIZE drops everything up to the next ';'."""
        results = self._results(self.CODE, recovery=RecoveryMode.SYNCHRONIZE)
        self.assertEqual([r.ok for r in results], [False, True])
        self.assertEqual(results[1].node.body, BinaryOp('+', num(1), num(2)))

    def test_synchronize_stops_at_eof(self):
        results = self._results("def f(, x y z", recovery=RecoveryMode.SYNCHRONIZE)
        self.assertEqual(len(results), 1)
        self.assertFalse(results[0].ok)

    def test_synchronize_when_error_is_at_semicolon(self):
        results = self._results("1 + ; 2", recovery=RecoveryMode.SYNCHRONIZE)
        self.assertEqual([r.ok for r in results], [False, True])


class TestConfiguration(ParserTestCase):

    def test_invalid_precedence_tables(self):
        for table in [{'+': 0}, {'+': -3}, {'ab': 1}, {'(': 5}, {'a': 5}, {'+': 1.5}, {'+': True}]:
            with self.subTest(table=table):
                with self.assertRaises(ValueError):
                    self._parser("1", precedence=table)

    def test_precedence_table_is_read_only(self):
        parser = self._parser("1")
        with self.assertRaises(TypeError):
            parser.precedence['+'] = 99

    def test_caller_table_is_copied(self):
        table = {'+': 20}
        parser = self._parser("1 * 2", precedence=table)
        table['*'] = 40
        self.assertNotIn('*', parser.precedence)


class TestConvenienceFunctions(unittest.TestCase):

    def test_parse_string(self):
        program = parse_string("def sq(x) x * x; sq(4)")
        self.assertEqual(len(program.items), 2)
        self.assertEqual(program.items[0].body, BinaryOp('*', var('x'), var('x')))

    def test_parse_string_raises_first_error(self):
        with self.assertRaises(ParseError) as ctx:
            parse_string("def f(x x; foo(1 2)")
        self.assertEqual(ctx.exception.kind, ParseErrorKind.EXPECTED_CLOSE_PAREN_IN_PROTOTYPE)

    def test_parse_file(self):
        with tempfile.NamedTemporaryFile('w', suffix='.bol', delete=False) as f:
            f.write("# library\nextern cos(x);\ncos(0) * 2\n")
            path = f.name
        try:
            program = parse_file(path)
        finally:
            os.unlink(path)
        self.assertEqual(program.items[0], Prototype("cos", ["x"]))
        self.assertEqual(program.items[1].body,
                         BinaryOp('*', Call("cos", [num(0)]), num(2)))
        self.assertEqual(program.items[0].location.filename, path)


class TestASTNodes(unittest.TestCase):

    def test_equality_ignores_location(self):
        parsed = parse_string("a + 1").items[0].body
        self.assertIsNotNone(parsed.location)
        self.assertEqual(parsed, BinaryOp('+', var('a'), num(1)))

    def test_nodes_are_immutable(self):
        node = num(1)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            node.value = 2.0
        call = Call("f", [num(1)])
        self.assertIsInstance(call.arguments, tuple)

    def test_dump(self):
        program = parse_string("def add(a b) a + b * 2; extern sin(x); foo(1, y)")
        self.assertEqual(dump(program.items[0]), "(def add (a b) (+ a (* b 2.0)))")
        self.assertEqual(dump(program.items[1]), "(extern sin (x))")
        self.assertEqual(dump(program.items[2]), "(def __anon_expr () (call foo 1.0 y))")
        self.assertEqual(str(program.items[1]), "(extern sin (x))")
        self.assertEqual(len(dump(program).splitlines()), 3)

    def test_walk_and_children(self):
        function = parse_string("def f(x) g(x, 1) + 2").items[0]
        kinds = [node.node_type for node in function.walk()]
        self.assertEqual(kinds, [
            ASTNodeType.FUNCTION, ASTNodeType.PROTOTYPE, ASTNodeType.BINARY_OP,
            ASTNodeType.CALL, ASTNodeType.VARIABLE_REFERENCE,
            ASTNodeType.NUMBER_LITERAL, ASTNodeType.NUMBER_LITERAL,
        ])

    def test_visitor_dispatch(self):
        class VariableCollector(ASTVisitor):
            def __init__(self):
                self.names = []

            def visit_VariableReference(self, node):
                self.names.append(node.name)

        collector = VariableCollector()
        parse_string("def f(a b) a * (b + c(d))").accept(collector)
        self.assertEqual(collector.names, ["a", "b", "d"])


if __name__ == '__main__':
    unittest.main()
