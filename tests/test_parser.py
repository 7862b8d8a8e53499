"""
Test suite for the Monkey parser.

Tests cover:
- let / return / expression statements
- Prefix and infix operator precedence
- Booleans, grouping, if/else, function literals and calls
- Diagnostics and error recovery
- Extending the handler tables
"""

import os
import sys
import tempfile
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from monkey.lexer import Diagnostic, Lexer, TokenType
from monkey.lexer.errors import ERROR_CODES
from monkey.parser import (
    Parser, Precedence, ParseError, parse, parse_string, parse_file,
    Program, LetStatement, ReturnStatement, ExpressionStatement, BlockStatement,
    Identifier, IntegerLiteral, BooleanLiteral, PrefixExpression, InfixExpression,
    IfExpression, FunctionLiteral, CallExpression, PrefixOperator, InfixOperator,
)
from monkey.parser.parser import MAX_NESTING_DEPTH


class ParserTestCase(unittest.TestCase):
    """Shared helpers."""

    def _parse_clean(self, source: str) -> Program:
        """Parse and fail the test on any diagnostic."""
        program, errors = parse(source)
        self.assertEqual(errors, [], "unexpected diagnostics:\n" + "".join(str(e) for e in errors))
        return program

    def _single_expression(self, source: str):
        program = self._parse_clean(source)
        self.assertEqual(len(program.statements), 1)
        statement = program.statements[0]
        self.assertIsInstance(statement, ExpressionStatement)
        return statement.expression


class TestStatements(ParserTestCase):

    def test_let_statements(self):
        program = self._parse_clean("let x = 5; let y = 10; let foobar = 838383;")

        self.assertEqual(len(program.statements), 3)
        for statement, (name, value) in zip(program.statements, [("x", 5), ("y", 10), ("foobar", 838383)]):
            self.assertIsInstance(statement, LetStatement)
            self.assertEqual(statement.name, Identifier(name))
            self.assertEqual(statement.value, IntegerLiteral(value))

    def test_let_with_expression_value(self):
        program = self._parse_clean("let y = true; let foobar = y;")
        self.assertEqual(program.statements, (
            LetStatement(Identifier("y"), BooleanLiteral(True)),
            LetStatement(Identifier("foobar"), Identifier("y")),
        ))

    def test_return_statements(self):
        program = self._parse_clean("return 5; return 10; return 993322;")

        self.assertEqual(len(program.statements), 3)
        for statement, value in zip(program.statements, [5, 10, 993322]):
            self.assertIsInstance(statement, ReturnStatement)
            self.assertEqual(statement.value, IntegerLiteral(value))

    def test_identifier_expressions_optional_semicolon(self):
        program = self._parse_clean("foobar; input")
        self.assertEqual(program.statements, (
            ExpressionStatement(Identifier("foobar")),
            ExpressionStatement(Identifier("input")),
        ))

    def test_semicolon_is_optional_everywhere(self):
        program = self._parse_clean("let a = 1\nreturn a")
        self.assertEqual(program.statements, (
            LetStatement(Identifier("a"), IntegerLiteral(1)),
            ReturnStatement(Identifier("a")),
        ))

    def test_empty_program(self):
        program = self._parse_clean("")
        self.assertEqual(program.statements, ())

    def test_statement_locations(self):
        program = self._parse_clean("let x = 5;\nreturn x;")
        self.assertEqual(program.statements[0].location.line, 1)
        self.assertEqual(program.statements[1].location.line, 2)
        self.assertEqual(program.statements[1].location.column, 1)


class TestExpressions(ParserTestCase):

    def test_integer_literal(self):
        self.assertEqual(self._single_expression("5;"), IntegerLiteral(5))

    def test_largest_integer(self):
        self.assertEqual(
            self._single_expression("18446744073709551615"),
            IntegerLiteral(18446744073709551615),
        )

    def test_boolean_literals(self):
        self.assertEqual(self._single_expression("true"), BooleanLiteral(True))
        self.assertEqual(self._single_expression("false;"), BooleanLiteral(False))

    def test_prefix_expressions(self):
        cases = [
            ("!5;", PrefixOperator.NOT, IntegerLiteral(5)),
            ("-15;", PrefixOperator.NEGATE, IntegerLiteral(15)),
            ("!true;", PrefixOperator.NOT, BooleanLiteral(True)),
            ("-a", PrefixOperator.NEGATE, Identifier("a")),
        ]
        for source, operator, operand in cases:
            with self.subTest(source=source):
                self.assertEqual(self._single_expression(source), PrefixExpression(operator, operand))

    def test_nested_prefix(self):
        self.assertEqual(
            self._single_expression("!-a;"),
            PrefixExpression(PrefixOperator.NOT, PrefixExpression(PrefixOperator.NEGATE, Identifier("a"))),
        )

    def test_prefix_binds_tighter_than_sum(self):
        self.assertEqual(
            self._single_expression("!a + b"),
            InfixExpression(
                PrefixExpression(PrefixOperator.NOT, Identifier("a")),
                InfixOperator.PLUS,
                Identifier("b"),
            ),
        )

    def test_infix_expressions(self):
        cases = [
            ("5 + 5;", InfixOperator.PLUS),
            ("5 - 5;", InfixOperator.MINUS),
            ("5 * 5;", InfixOperator.MULTIPLY),
            ("5 / 5;", InfixOperator.DIVIDE),
            ("5 > 5;", InfixOperator.GREATER_THAN),
            ("5 < 5;", InfixOperator.LESS_THAN),
            ("5 == 5;", InfixOperator.EQUAL),
            ("5 != 5;", InfixOperator.NOT_EQUAL),
        ]
        for source, operator in cases:
            with self.subTest(source=source):
                self.assertEqual(
                    self._single_expression(source),
                    InfixExpression(IntegerLiteral(5), operator, IntegerLiteral(5)),
                )

    def test_left_associativity(self):
        self.assertEqual(
            self._single_expression("a - b - c"),
            InfixExpression(
                InfixExpression(Identifier("a"), InfixOperator.MINUS, Identifier("b")),
                InfixOperator.MINUS,
                Identifier("c"),
            ),
        )

    def test_operator_precedence_rendering(self):
        cases = [
            ("-a * b", "((-a) * b)"),
            ("!-a", "(!(-a))"),
            ("a + b + c", "((a + b) + c)"),
            ("a + b - c", "((a + b) - c)"),
            ("a * b * c", "((a * b) * c)"),
            ("a * b / c", "((a * b) / c)"),
            ("a + b / c", "(a + (b / c))"),
            ("a + b * c + d / e - f", "(((a + (b * c)) + (d / e)) - f)"),
            ("3 + 4; -5 * 5", "(3 + 4) ((-5) * 5)"),
            ("5 > 4 == 3 < 4", "((5 > 4) == (3 < 4))"),
            ("5 < 4 != 3 > 4", "((5 < 4) != (3 > 4))"),
            ("3 + 4 * 5 == 3 * 1 + 4 * 5", "((3 + (4 * 5)) == ((3 * 1) + (4 * 5)))"),
            ("true", "true"),
            ("3 > 5 == false", "((3 > 5) == false)"),
            ("3 < 5 == true", "((3 < 5) == true)"),
            ("1 + (2 + 3) + 4", "((1 + (2 + 3)) + 4)"),
            ("(5 + 5) * 2", "((5 + 5) * 2)"),
            ("2 / (5 + 5)", "(2 / (5 + 5))"),
            ("-(5 + 5)", "(-(5 + 5))"),
            ("!(true == true)", "(!(true == true))"),
            ("a + add(b * c) + d", "((a + add((b * c))) + d)"),
            ("add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8))",
             "add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)))"),
            ("add(a + b + c * d / f + g)", "add((((a + b) + ((c * d) / f)) + g))"),
        ]
        for source, expected in cases:
            with self.subTest(source=source):
                self.assertEqual(str(self._parse_clean(source)), expected)

    def test_if_expression(self):
        expression = self._single_expression("if (x < y) { x }")
        self.assertEqual(expression, IfExpression(
            InfixExpression(Identifier("x"), InfixOperator.LESS_THAN, Identifier("y")),
            BlockStatement((ExpressionStatement(Identifier("x")),)),
        ))
        self.assertIsNone(expression.alternative)

    def test_if_else_expression(self):
        expression = self._single_expression("if (x < y) { x } else { y; }")
        self.assertEqual(expression.alternative, BlockStatement((ExpressionStatement(Identifier("y")),)))
        self.assertEqual(str(expression), "if (x < y) { x } else { y }")

    def test_empty_block(self):
        expression = self._single_expression("if (true) {}")
        self.assertEqual(expression.consequence, BlockStatement(()))

    def test_function_literal(self):
        expression = self._single_expression("fn(x, y) { x + y; }")
        self.assertEqual(expression, FunctionLiteral(
            (Identifier("x"), Identifier("y")),
            BlockStatement((ExpressionStatement(
                InfixExpression(Identifier("x"), InfixOperator.PLUS, Identifier("y"))
            ),)),
        ))

    def test_function_parameters(self):
        cases = [
            ("fn() {};", ()),
            ("fn(x) {};", ("x",)),
            ("fn(x, y, z) {};", ("x", "y", "z")),
        ]
        for source, names in cases:
            with self.subTest(source=source):
                expression = self._single_expression(source)
                self.assertEqual(tuple(p.name for p in expression.parameters), names)

    def test_call_expression(self):
        expression = self._single_expression("add(1, 2 * 3, 4 + 5);")
        self.assertIsInstance(expression, CallExpression)
        self.assertEqual(expression.function, Identifier("add"))
        self.assertEqual(len(expression.arguments), 3)
        self.assertEqual(str(expression.arguments[1]), "(2 * 3)")

    def test_call_without_arguments(self):
        self.assertEqual(self._single_expression("f()"), CallExpression(Identifier("f"), ()))

    def test_call_on_function_literal(self):
        expression = self._single_expression("fn(x) { x; }(5)")
        self.assertIsInstance(expression, CallExpression)
        self.assertIsInstance(expression.function, FunctionLiteral)
        self.assertEqual(expression.arguments, (IntegerLiteral(5),))

    def test_let_function_and_call(self):
        program = self._parse_clean("let add = fn(a, b) { a + b; }; add(1, 2 * 3);")
        self.assertEqual(str(program), "let add = fn(a, b) { (a + b) }; add(1, (2 * 3))")


class TestDiagnostics(ParserTestCase):

    def test_let_missing_identifier(self):
        program, errors = parse("let = 5;")

        self.assertFalse(any(isinstance(s, LetStatement) for s in program.statements))
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].expected, TokenType.IDENTIFIER)
        self.assertEqual(errors[0].found.type, TokenType.ASSIGN)
        self.assertEqual(errors[0].message, "expected next token to be IDENTIFIER, got ASSIGN('=') instead")
        self.assertEqual(errors[0].code, "P001")

    def test_let_missing_assign(self):
        _, errors = parse("let x 5;")
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].expected, TokenType.ASSIGN)
        self.assertEqual(errors[0].found.type, TokenType.INTEGER)

    def test_no_prefix_parse_function(self):
        program, errors = parse(")")
        self.assertEqual(program.statements, ())
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].message, "no prefix parse function for RIGHT_PAREN found")
        self.assertEqual(errors[0].code, "P002")

    def test_illegal_token(self):
        _, errors = parse("let x = @;")
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].message, "no prefix parse function for ILLEGAL found")
        self.assertEqual(errors[0].code, "L001")
        self.assertIn("'@'", errors[0].help_text)

    def test_integer_overflow(self):
        program, errors = parse("let big = 18446744073709551616; let ok = 1;")
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].message, "could not parse 18446744073709551616 as integer")
        self.assertEqual(errors[0].code, "P003")
        self.assertEqual(program.statements, (LetStatement(Identifier("ok"), IntegerLiteral(1)),))

    def test_integer_too_long_to_convert(self):
        digits = "9" * 5000
        program, errors = parse("let x = " + digits + "; let ok = 1;")
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].code, "P003")
        self.assertEqual(errors[0].message, f"could not parse {digits} as integer")
        self.assertEqual(program.statements, (LetStatement(Identifier("ok"), IntegerLiteral(1)),))

    def test_zero_padded_integer(self):
        self.assertEqual(self._single_expression("0" * 5000 + "7"), IntegerLiteral(7))
        self.assertEqual(self._single_expression("0" * 5000), IntegerLiteral(0))

    def test_deeply_nested_parentheses(self):
        source = "(" * 500 + "a" + ")" * 500 + "; let ok = 1;"
        program, errors = parse(source)
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].code, "P005")
        self.assertEqual(errors[0].found.type, TokenType.LEFT_PAREN)
        self.assertEqual(program.statements, (LetStatement(Identifier("ok"), IntegerLiteral(1)),))

    def test_deeply_nested_prefix_operators(self):
        program, errors = parse("-" * 500 + "a; b")
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].code, "P005")
        self.assertEqual(errors[0].found.type, TokenType.MINUS)
        self.assertEqual(program.statements, (ExpressionStatement(Identifier("b")),))

    def test_deeply_nested_blocks(self):
        program, errors = parse("if (a) { " * 300 + "b" + " }" * 300)
        self.assertIsInstance(program, Program)
        self.assertTrue(errors)
        self.assertEqual(errors[0].code, "P005")

    def test_nesting_within_limit(self):
        expression = self._single_expression("(" * (MAX_NESTING_DEPTH - 1) + "a" + ")" * (MAX_NESTING_DEPTH - 1))
        self.assertEqual(expression, Identifier("a"))

    def test_codes_are_catalogued(self):
        sources = [
            "let = 5;", ")", "@", "18446744073709551616", "(1", "-" * 200 + "a",
        ]
        for source in sources:
            with self.subTest(source=source):
                parser = Parser(Lexer(source))
                parser.parse_program()
                self.assertTrue(parser.has_errors())
                for diagnostic in parser.errors:
                    self.assertIn(diagnostic.code, ERROR_CODES)
                    self.assertTrue(diagnostic.is_error)

    def test_warnings_do_not_count_as_errors(self):
        parser = Parser(Lexer("x"))
        parser.parse_program()
        parser.errors.append(Diagnostic("just a note", parser.current_token.location, "warning"))
        self.assertFalse(parser.has_errors())

    def test_missing_operand(self):
        _, errors = parse("5 +;")
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].found.type, TokenType.SEMICOLON)

    def test_return_without_value(self):
        program, errors = parse("return;")
        self.assertEqual(program.statements, ())
        self.assertEqual(len(errors), 1)

    def test_unclosed_paren(self):
        _, errors = parse("(1 + 2")
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].code, "P004")
        self.assertEqual(errors[0].found.type, TokenType.EOF)

    def test_wrong_closing_token(self):
        _, errors = parse("add(1, 2;")
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].expected, TokenType.RIGHT_PAREN)
        self.assertEqual(errors[0].found.type, TokenType.SEMICOLON)

    def test_unclosed_block(self):
        _, errors = parse("if (x) { y")
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].message, "unclosed delimiter '{'")

    def test_bad_function_parameter(self):
        _, errors = parse("fn(x, 1) { x }")
        self.assertGreaterEqual(len(errors), 1)
        self.assertEqual(errors[0].expected, TokenType.IDENTIFIER)
        self.assertEqual(errors[0].found.type, TokenType.INTEGER)

    def test_if_requires_parenthesized_condition(self):
        _, errors = parse("if x { y }")
        self.assertGreaterEqual(len(errors), 1)
        self.assertEqual(errors[0].expected, TokenType.LEFT_PAREN)

    def test_diagnostic_rendering(self):
        _, errors = parse("let = 5;", filename="bad.mk")
        rendered = str(errors[0])
        self.assertTrue(rendered.startswith("ERROR[P001]: expected next token to be IDENTIFIER"))
        self.assertIn("--> bad.mk:1:5", rendered)


class TestRecovery(ParserTestCase):
    """Parsing resumes after a damaged statement."""

    def test_resynchronizes_at_semicolon(self):
        program, errors = parse("let = 5; let x = 1;")
        self.assertEqual(len(errors), 1)
        self.assertEqual(program.statements, (LetStatement(Identifier("x"), IntegerLiteral(1)),))

    def test_collects_several_errors(self):
        program, errors = parse("let = 1; let y 2; let z = 3; )")
        self.assertEqual(len(errors), 3)
        self.assertEqual(program.statements, (LetStatement(Identifier("z"), IntegerLiteral(3)),))

    def test_recovery_inside_block(self):
        program, errors = parse("if (a) { let = 1; b } c")
        self.assertEqual(len(errors), 1)
        self.assertEqual(str(program), "if a { b } c")

    def test_error_before_closing_brace(self):
        program, errors = parse("fn() { 1 + }; 2")
        self.assertEqual(len(errors), 1)
        self.assertEqual(str(program), "fn() { } 2")

    def test_always_terminates(self):
        """Garbage input still yields a Program and at least one diagnostic."""
        sources = [
            "}}}}", ";;;;", "let let let", "((((", "fn fn fn", "if if", "= = =",
            "@@@", "return return", ") ( ) (", "let x = fn(", "else {",
        ]
        for source in sources:
            with self.subTest(source=source):
                program, errors = parse(source)
                self.assertIsInstance(program, Program)
                self.assertTrue(errors)


class TestExtension(ParserTestCase):
    """New operators plug into the handler tables without touching the core loop."""

    def test_register_infix(self):
        parser = Parser(Lexer("a + b * c"))

        def parse_product(left):
            token = parser.current_token
            precedence = parser.current_precedence()
            parser.next_token()
            right = parser.parse_expression(precedence)
            return InfixExpression(left, InfixOperator.from_token_type(token.type), right)

        # Demote '*' to the same binding power as '+'
        parser.register_infix(TokenType.ASTERISK, parse_product, Precedence.SUM)
        program = parser.parse_program()

        self.assertFalse(parser.has_errors())
        self.assertEqual(str(program), "((a + b) * c)")

    def test_register_prefix(self):
        parser = Parser(Lexer("; 1"))

        def parse_empty():
            return IntegerLiteral(0)

        parser.register_prefix(TokenType.SEMICOLON, parse_empty)
        program = parser.parse_program()

        self.assertFalse(parser.has_errors())
        self.assertEqual(program.statements[0], ExpressionStatement(IntegerLiteral(0)))


class TestEntryPoints(unittest.TestCase):

    def test_parse_returns_copy_of_errors(self):
        program, errors = parse("let = 1;")
        self.assertIsInstance(program, Program)
        self.assertIsInstance(errors, list)
        self.assertEqual(len(errors), 1)

    def test_parse_string_clean(self):
        program = parse_string("let x = 1;", filename="ok.mk")
        self.assertEqual(program.statements[0].location.filename, "ok.mk")

    def test_parse_string_raises_with_all_diagnostics(self):
        with self.assertRaises(ParseError) as context:
            parse_string("let = 1; let y 2;")

        error = context.exception
        self.assertEqual(len(error.diagnostics), 2)
        self.assertIs(error.diagnostic, error.diagnostics[0])
        self.assertIn("expected next token to be IDENTIFIER", str(error))
        self.assertIn("(1 more error(s))", str(error))

    def test_parse_file(self):
        with tempfile.NamedTemporaryFile("w", suffix=".mk", delete=False, encoding="utf-8") as f:
            f.write("let answer = 42;\nanswer\n")
            path = f.name
        try:
            program = parse_file(path)
        finally:
            os.unlink(path)

        self.assertEqual(str(program), "let answer = 42; answer")
        self.assertEqual(program.statements[1].location.filename, path)

    def test_parse_file_missing(self):
        with self.assertRaises(OSError):
            parse_file(os.path.join(tempfile.gettempdir(), "does-not-exist.mk"))


class TestParserState(unittest.TestCase):

    def test_two_token_lookahead_after_construction(self):
        parser = Parser(Lexer("let x"))
        self.assertEqual(parser.current_token.type, TokenType.LET)
        self.assertEqual(parser.peek_token.type, TokenType.IDENTIFIER)

    def test_expect_peek_failure_leaves_cursor(self):
        parser = Parser(Lexer("let 5"))
        self.assertFalse(parser.expect_peek(TokenType.IDENTIFIER))
        self.assertEqual(parser.current_token.type, TokenType.LET)
        self.assertEqual(parser.peek_token.type, TokenType.INTEGER)
        self.assertEqual(len(parser.errors), 1)

    def test_precedence_ordering(self):
        order = [
            Precedence.LOWEST, Precedence.EQUALS, Precedence.LESS_GREATER,
            Precedence.SUM, Precedence.PRODUCT, Precedence.PREFIX, Precedence.CALL,
        ]
        self.assertEqual(sorted(order), order)


if __name__ == '__main__':
    unittest.main()
