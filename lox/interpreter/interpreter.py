import logging
import math
import time
from typing import Callable, Dict, List, Optional

from lox.tokens import Token, TokenType
from lox.parser.nodes import *
from lox.parser.visitor import NodeVisitor
from lox.interpreter.completion import Completion, NORMAL
from lox.interpreter.environment import Environment
from lox.interpreter.runtime_values import (
    Value, NumberValue, StringValue, CallableValue, BuiltInFunction, FunctionValue,
    ClassValue, InstanceValue, NIL, bool_value,
)
from lox.utils import Config, RuntimeException

logger = logging.getLogger(__name__)

ARITHMETIC_OPS: Dict[TokenType, Callable[[float, float], float]] = {
    TokenType.OP_MINUS: lambda a, b: a - b,
    TokenType.OP_MULTIPLY: lambda a, b: a * b,
}

COMPARISON_OPS: Dict[TokenType, Callable[[float, float], bool]] = {
    TokenType.OP_GT: lambda a, b: a > b,
    TokenType.OP_GTE: lambda a, b: a >= b,
    TokenType.OP_LT: lambda a, b: a < b,
    TokenType.OP_LTE: lambda a, b: a <= b,
}

def _divide(a: float, b: float) -> float:
    # Python raises on float division by zero, the language follows IEEE 754
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b

class Interpreter(NodeVisitor):
    """
    Tree-walking evaluator. Expression visitors return a Value, statement
    visitors return a Completion.
    """
    def __init__(self, config: Optional[Config] = None):
        self.config = config if config else Config()
        self.globals: Environment = Environment()
        self.env: Environment = self.globals
        self.locals: Dict[ExpressionNode, int] = {}

        self._init_built_in_functions()

    def _init_built_in_functions(self):
        # number clock()
        def builtin_clock() -> NumberValue:
            return NumberValue(time.time())
        self.globals.define("clock", BuiltInFunction("clock", 0, builtin_clock))

    def resolve(self, locals: Dict[ExpressionNode, int]):
        """Takes in scope distances computed by the Resolver."""
        self.locals.update(locals)

    def interpret(self, statements: List[StatementNode]) -> Optional[RuntimeException]:
        """
        Executes top-level statements in order. The first runtime error stops
        the run and is returned.
        """
        try:
            for statement in statements:
                self.execute(statement)
        except RuntimeException as e:
            logger.debug("Runtime error on line %d: %s", e.line, e.message)
            return e
        return None

    def execute(self, statement: StatementNode) -> Completion:
        return self.visit(statement)

    def evaluate(self, expression: ExpressionNode) -> Value:
        return self.visit(expression)

    def execute_block(self, statements: List[StatementNode], environment: Environment) -> Completion:
        previous = self.env
        try:
            self.env = environment
            for statement in statements:
                completion = self.execute(statement)
                if completion.is_return:
                    return completion
            return NORMAL
        finally:
            self.env = previous

    # --- Statements ---

    def visit_ExpressionStatementNode(self, node: ExpressionStatementNode) -> Completion:
        self.evaluate(node.expression)
        return NORMAL

    def visit_PrintStatementNode(self, node: PrintStatementNode) -> Completion:
        value = self.evaluate(node.expression)
        print(str(value))
        return NORMAL

    def visit_VarDeclarationNode(self, node: VarDeclarationNode) -> Completion:
        value = NIL
        if node.initializer is not None:
            value = self.evaluate(node.initializer)
        self.env.define(node.name.lexeme, value)
        return NORMAL

    def visit_BlockNode(self, node: BlockNode) -> Completion:
        return self.execute_block(node.statements, Environment(self.env))

    def visit_IfStatementNode(self, node: IfStatementNode) -> Completion:
        if self.evaluate(node.condition).is_true():
            return self.execute(node.then_branch)
        elif node.else_branch is not None:
            return self.execute(node.else_branch)
        return NORMAL

    def visit_WhileLoopNode(self, node: WhileLoopNode) -> Completion:
        while self.evaluate(node.condition).is_true():
            completion = self.execute(node.body)
            if completion.is_return:
                return completion
        return NORMAL

    def visit_FunctionDeclarationNode(self, node: FunctionDeclarationNode) -> Completion:
        function = FunctionValue(node, self.env, is_initializer=False)
        self.env.define(node.name.lexeme, function)
        return NORMAL

    def visit_ReturnStatementNode(self, node: ReturnStatementNode) -> Completion:
        value = NIL
        if node.value is not None:
            value = self.evaluate(node.value)
        return Completion.returning(value)

    def visit_ClassDeclarationNode(self, node: ClassDeclarationNode) -> Completion:
        superclass = None
        if node.superclass is not None:
            superclass = self.evaluate(node.superclass)
            if not isinstance(superclass, ClassValue):
                raise RuntimeException("Superclass must be a class.", node.superclass.name)

        self.env.define(node.name.lexeme, NIL)

        method_env = self.env
        if superclass is not None:
            method_env = Environment(self.env)
            method_env.define("super", superclass)

        methods: Dict[str, FunctionValue] = {}
        for method in node.methods:
            methods[method.name.lexeme] = FunctionValue(method, method_env, method.name.lexeme == "init")

        klass = ClassValue(node.name.lexeme, superclass, methods)
        self.env.assign(node.name, klass)
        return NORMAL

    # --- Expressions ---

    def visit_LiteralNode(self, node: LiteralNode) -> Value:
        if node.value is None:
            return NIL
        if isinstance(node.value, bool):
            return bool_value(node.value)
        if isinstance(node.value, float):
            return NumberValue(node.value)
        return StringValue(node.value)

    def visit_GroupingNode(self, node: GroupingNode) -> Value:
        return self.evaluate(node.expression)

    def visit_VariableNode(self, node: VariableNode) -> Value:
        return self._look_up_variable(node.name, node)

    def visit_ThisNode(self, node: ThisNode) -> Value:
        return self._look_up_variable(node.keyword, node)

    def _look_up_variable(self, name: Token, node: ExpressionNode) -> Value:
        distance = self.locals.get(node)
        if distance is not None:
            return self.env.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def visit_AssignNode(self, node: AssignNode) -> Value:
        value = self.evaluate(node.value)

        distance = self.locals.get(node)
        if distance is not None:
            self.env.assign_at(distance, node.name, value)
        else:
            self.globals.assign(node.name, value)
        return value

    def visit_UnaryNode(self, node: UnaryNode) -> Value:
        operand = self.evaluate(node.operand)

        if node.operator.type == TokenType.OP_NOT:
            return bool_value(not operand.is_true())

        # OP_MINUS
        if not isinstance(operand, NumberValue):
            raise RuntimeException("Operand must be a number.", node.operator)
        return NumberValue(-operand.value)

    def visit_LogicalNode(self, node: LogicalNode) -> Value:
        left = self.evaluate(node.left)

        if node.operator.type == TokenType.KEYWORD_OR:
            if left.is_true():
                return left
        elif not left.is_true():
            return left

        return self.evaluate(node.right)

    def visit_BinaryNode(self, node: BinaryNode) -> Value:
        left = self.evaluate(node.left)
        right = self.evaluate(node.right)
        operator = node.operator

        if operator.type == TokenType.OP_EQ:
            return bool_value(left.equals(right))
        if operator.type == TokenType.OP_NEQ:
            return bool_value(not left.equals(right))

        if operator.type == TokenType.OP_PLUS:
            if isinstance(left, NumberValue) and isinstance(right, NumberValue):
                return NumberValue(left.value + right.value)
            if isinstance(left, StringValue) and isinstance(right, StringValue):
                return StringValue(left.value + right.value)
            raise RuntimeException("Operands must be two numbers or two strings.", operator)

        if not isinstance(left, NumberValue) or not isinstance(right, NumberValue):
            raise RuntimeException("Operands must be numbers.", operator)

        if operator.type == TokenType.OP_DIVIDE:
            return NumberValue(_divide(left.value, right.value))
        if operator.type in ARITHMETIC_OPS:
            return NumberValue(ARITHMETIC_OPS[operator.type](left.value, right.value))
        return bool_value(COMPARISON_OPS[operator.type](left.value, right.value))

    def visit_CallNode(self, node: CallNode) -> Value:
        callee = self.evaluate(node.callee)
        arguments = [self.evaluate(argument) for argument in node.arguments]

        if not isinstance(callee, CallableValue):
            raise RuntimeException("Can only call functions and classes.", node.paren)

        if len(arguments) != callee.arity():
            raise RuntimeException(f"Expected {callee.arity()} arguments but got {len(arguments)}.", node.paren)

        return callee.call(self, arguments)

    def visit_GetNode(self, node: GetNode) -> Value:
        obj = self.evaluate(node.object_expr)
        return obj.get_attribute(node.name)

    def visit_SetNode(self, node: SetNode) -> Value:
        obj = self.evaluate(node.object_expr)
        if not isinstance(obj, InstanceValue):
            raise RuntimeException("Only instances have fields.", node.name)

        value = self.evaluate(node.value)
        obj.set_attribute_value(node.name, value)
        return value

    def visit_SuperNode(self, node: SuperNode) -> Value:
        distance = self.locals[node]
        superclass = self.env.get_at(distance, "super")
        # 'this' lives in the scope right inside the one binding 'super'
        instance = self.env.get_at(distance - 1, "this")

        method = superclass.find_method(node.method.lexeme)
        if method is None:
            raise RuntimeException(f"Undefined property '{node.method.lexeme}'.", node.method)
        return method.bind(instance)
