import io
import unittest
from unittest.mock import patch

from lox.lexer.reader import SourceReader
from lox.lexer.cleaner import Cleaner
from lox.lexer.lexer import Lexer
from lox.parser.parser import Parser
from lox.parser.nodes import *
from lox.parser.visitor import ASTPrinter
from lox.tokens import TokenType
from lox.utils import Config


class TestParser(unittest.TestCase):

    def _parse(self, code: str, config: Config = None):
        reader = SourceReader(io.StringIO(code))
        lexer = Lexer(reader, Cleaner(reader))
        parser = Parser(lexer.scan_tokens(), config)
        statements = parser.parse()
        return statements, parser.errors

    def _parse_ok(self, code: str):
        statements, errors = self._parse(code)
        self.assertEqual(errors, [], f"Unexpected errors for code:\n{code}")
        return statements

    def _parse_expression(self, code: str) -> ExpressionNode:
        statements = self._parse_ok(code + ";")
        self.assertEqual(len(statements), 1)
        self.assertIsInstance(statements[0], ExpressionStatementNode)
        return statements[0].expression

    def _error_messages(self, code: str):
        _, errors = self._parse(code)
        return [str(e) for e in errors]

    # --- Expressions ---

    def test_empty_program(self):
        self.assertEqual(self._parse_ok(""), [])

    def test_literals(self):
        self.assertEqual(self._parse_expression("1").value, 1.0)
        self.assertEqual(self._parse_expression('"s"').value, "s")
        self.assertIs(self._parse_expression("true").value, True)
        self.assertIs(self._parse_expression("false").value, False)
        self.assertIsNone(self._parse_expression("nil").value)

    def test_factor_binds_tighter_than_term(self):
        node = self._parse_expression("1 + 2 * 3")
        self.assertIsInstance(node, BinaryNode)
        self.assertEqual(node.operator.type, TokenType.OP_PLUS)
        self.assertIsInstance(node.right, BinaryNode)
        self.assertEqual(node.right.operator.type, TokenType.OP_MULTIPLY)

    def test_binary_operators_are_left_associative(self):
        node = self._parse_expression("1 - 2 - 3")
        self.assertIsInstance(node.left, BinaryNode)
        self.assertEqual(node.left.left.value, 1.0)
        self.assertEqual(node.right.value, 3.0)

    def test_grouping(self):
        node = self._parse_expression("(1 + 2) * 3")
        self.assertEqual(node.operator.type, TokenType.OP_MULTIPLY)
        self.assertIsInstance(node.left, GroupingNode)

    def test_unary_is_right_recursive(self):
        node = self._parse_expression("!!-x")
        self.assertIsInstance(node, UnaryNode)
        self.assertIsInstance(node.operand, UnaryNode)
        self.assertEqual(node.operand.operand.operator.type, TokenType.OP_MINUS)

    def test_logical_operators(self):
        node = self._parse_expression("a or b and c")
        self.assertIsInstance(node, LogicalNode)
        self.assertEqual(node.operator.type, TokenType.KEYWORD_OR)
        self.assertIsInstance(node.right, LogicalNode)
        self.assertEqual(node.right.operator.type, TokenType.KEYWORD_AND)

    def test_comparison_below_equality(self):
        node = self._parse_expression("a < b == c >= d")
        self.assertEqual(node.operator.type, TokenType.OP_EQ)
        self.assertEqual(node.left.operator.type, TokenType.OP_LT)
        self.assertEqual(node.right.operator.type, TokenType.OP_GTE)

    def test_assignment_is_right_associative(self):
        node = self._parse_expression("a = b = 1")
        self.assertIsInstance(node, AssignNode)
        self.assertEqual(node.name.lexeme, "a")
        self.assertIsInstance(node.value, AssignNode)
        self.assertEqual(node.value.name.lexeme, "b")

    def test_property_assignment_becomes_set(self):
        node = self._parse_expression("a.b.c = 1")
        self.assertIsInstance(node, SetNode)
        self.assertEqual(node.name.lexeme, "c")
        self.assertIsInstance(node.object_expr, GetNode)

    def test_call_chain(self):
        node = self._parse_expression("f(1, 2)(3).g()")
        self.assertIsInstance(node, CallNode)
        self.assertEqual(node.arguments, [])
        self.assertIsInstance(node.callee, GetNode)
        inner = node.callee.object_expr
        self.assertIsInstance(inner, CallNode)
        self.assertEqual(len(inner.arguments), 1)
        self.assertEqual(len(inner.callee.arguments), 2)
        self.assertEqual(inner.paren.type, TokenType.RPAREN)

    def test_this_and_super(self):
        node = self._parse_expression("super.method(this)")
        self.assertIsInstance(node.callee, SuperNode)
        self.assertEqual(node.callee.method.lexeme, "method")
        self.assertIsInstance(node.arguments[0], ThisNode)

    # --- Statements ---

    def test_var_declaration(self):
        with_init, without_init = self._parse_ok("var a = 1; var b;")
        self.assertIsInstance(with_init, VarDeclarationNode)
        self.assertEqual(with_init.initializer.value, 1.0)
        self.assertIsNone(without_init.initializer)

    def test_if_else_binds_to_nearest_if(self):
        (node,) = self._parse_ok("if (a) if (b) print 1; else print 2;")
        self.assertIsNone(node.else_branch)
        self.assertIsInstance(node.then_branch, IfStatementNode)
        self.assertIsInstance(node.then_branch.else_branch, PrintStatementNode)

    def test_while_loop(self):
        (node,) = self._parse_ok("while (x) { print x; }")
        self.assertIsInstance(node, WhileLoopNode)
        self.assertIsInstance(node.body, BlockNode)

    def test_for_loop_desugars_to_while(self):
        (node,) = self._parse_ok("for (var i = 0; i < 3; i = i + 1) print i;")

        self.assertIsInstance(node, BlockNode)
        initializer, loop = node.statements
        self.assertIsInstance(initializer, VarDeclarationNode)
        self.assertIsInstance(loop, WhileLoopNode)
        self.assertEqual(loop.condition.operator.type, TokenType.OP_LT)
        body, increment = loop.body.statements
        self.assertIsInstance(body, PrintStatementNode)
        self.assertIsInstance(increment.expression, AssignNode)

    def test_empty_for_clauses(self):
        (node,) = self._parse_ok("for (;;) print 1;")
        self.assertIsInstance(node, WhileLoopNode)
        self.assertIs(node.condition.value, True)
        self.assertIsInstance(node.body, PrintStatementNode)

    def test_function_declaration(self):
        (node,) = self._parse_ok("fun add(a, b) { return a + b; }")
        self.assertIsInstance(node, FunctionDeclarationNode)
        self.assertEqual([p.lexeme for p in node.params], ["a", "b"])
        self.assertIsInstance(node.body[0], ReturnStatementNode)

    def test_return_without_value(self):
        (node,) = self._parse_ok("fun f() { return; }")
        self.assertIsNone(node.body[0].value)

    def test_class_declaration(self):
        (node,) = self._parse_ok("class B < A { init(x) {} method() {} }")
        self.assertIsInstance(node, ClassDeclarationNode)
        self.assertEqual(node.superclass.name.lexeme, "A")
        self.assertEqual([m.name.lexeme for m in node.methods], ["init", "method"])

    def test_nodes_compare_by_identity(self):
        first, second = self._parse_ok("a; a;")
        self.assertNotEqual(first.expression, second.expression)
        self.assertEqual(len({first.expression, second.expression}), 2)

    # --- Errors ---

    def test_missing_expression(self):
        self.assertEqual(self._error_messages("print ;"), ["[line 1] Error at ';': Expect expression."])

    def test_missing_semicolon_at_end(self):
        self.assertEqual(self._error_messages("print 1"), ["[line 1] Error at end: Expect ';' after value."])

    def test_invalid_assignment_target_is_not_fatal(self):
        statements, errors = self._parse("1 + 2 = 3; print 4;")
        self.assertEqual([str(e) for e in errors], ["[line 1] Error at '=': Invalid assignment target."])
        self.assertEqual(len(statements), 2)

    def test_recovers_at_statement_boundary(self):
        statements, errors = self._parse("var = 1;\nprint 2;\nvar x = ;\nprint 3;")
        self.assertEqual([str(e) for e in errors], [
            "[line 1] Error at '=': Expect variable name.",
            "[line 3] Error at ';': Expect expression.",
        ])
        self.assertEqual([type(s) for s in statements], [PrintStatementNode, PrintStatementNode])

    def test_recovers_at_declaration_keyword(self):
        statements, errors = self._parse("print 1 2 3 class A {}")
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(statements[-1], ClassDeclarationNode)

    def test_unclosed_block(self):
        self.assertEqual(self._error_messages("{ print 1;"), ["[line 1] Error at end: Expect '}' after block."])

    def test_super_needs_method_name(self):
        self.assertEqual(self._error_messages("super.1;"),
                         ["[line 1] Error at '1': Expect superclass method name."])

    def test_too_many_arguments(self):
        config = Config(max_arguments=2)
        statements, errors = self._parse("f(1, 2, 3);", config)
        self.assertEqual([str(e) for e in errors], ["[line 1] Error at '3': Can't have more than 2 arguments."])
        self.assertEqual(len(statements[0].expression.arguments), 3)

    def test_too_many_parameters(self):
        params = ", ".join(f"p{i}" for i in range(256))
        _, errors = self._parse(f"fun f({params}) {{}}")
        self.assertEqual([str(e) for e in errors], ["[line 1] Error at 'p255': Can't have more than 255 parameters."])


class TestASTPrinter(unittest.TestCase):

    def _print(self, code: str) -> str:
        reader = SourceReader(io.StringIO(code))
        statements = Parser(Lexer(reader, Cleaner(reader)).scan_tokens()).parse()
        with patch('sys.stdout', new_callable=io.StringIO) as mock_stdout:
            ASTPrinter().print_program(statements)
            return mock_stdout.getvalue()

    def test_print_expression_tree(self):
        output = self._print("print 1 + 2;")
        self.assertEqual(output.splitlines(), [
            "Program:",
            "  Print:",
            "    Binary: +",
            "      Literal: 1.0",
            "      Literal: 2.0",
        ])

    def test_print_class(self):
        output = self._print("class B < A { m() { return this; } }")
        self.assertEqual(output.splitlines(), [
            "Program:",
            "  Class: B < A",
            "    Fun: m()",
            "      Return:",
            "        This",
        ])


if __name__ == '__main__':
    unittest.main()
