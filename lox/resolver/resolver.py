import logging
from enum import Enum, auto
from typing import Dict, List

from lox.tokens import Token
from lox.parser.nodes import *
from lox.parser.visitor import NodeVisitor
from lox.utils import ResolverException

logger = logging.getLogger(__name__)

class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    INITIALIZER = auto()
    METHOD = auto()

class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()

class Resolver(NodeVisitor):
    """
    Static pass computing, for every variable reference, how many environments
    the interpreter has to walk up to find its binding. Names not found in any
    local scope are globals and get no entry.

    Also reports the static errors (bad returns, this/super outside classes,
    duplicate locals). Errors are collected and resolution carries on.
    """
    def __init__(self):
        self.scopes: List[Dict[str, bool]] = []
        self.locals: Dict[ExpressionNode, int] = {}
        self.errors: List[ResolverException] = []
        self.current_function: FunctionType = FunctionType.NONE
        self.current_class: ClassType = ClassType.NONE

    def resolve(self, statements: List[StatementNode]) -> Dict[ExpressionNode, int]:
        self.scopes = []
        self.locals = {}
        self.errors = []
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

        for statement in statements:
            self.visit(statement)

        logger.debug("Resolved %d local references with %d errors", len(self.locals), len(self.errors))
        return self.locals

    def _error(self, message: str, token: Token):
        error = ResolverException(message, token)
        logger.debug("Resolver error: %s", error)
        self.errors.append(error)

    def _begin_scope(self):
        self.scopes.append({})

    def _end_scope(self):
        self.scopes.pop()

    def _declare(self, name: Token):
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self._error("Already a variable with this name in this scope.", name)
        scope[name.lexeme] = False

    def _define(self, name: Token):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def _resolve_local(self, node: ExpressionNode, name: Token):
        for index in range(len(self.scopes) - 1, -1, -1):
            if name.lexeme in self.scopes[index]:
                self.locals[node] = len(self.scopes) - 1 - index
                return

    def _resolve_function(self, node: FunctionDeclarationNode, function_type: FunctionType):
        enclosing_function = self.current_function
        self.current_function = function_type

        self._begin_scope()
        for param in node.params:
            self._declare(param)
            self._define(param)
        for statement in node.body:
            self.visit(statement)
        self._end_scope()

        self.current_function = enclosing_function

    # --- Statements ---

    def visit_BlockNode(self, node: BlockNode):
        self._begin_scope()
        for statement in node.statements:
            self.visit(statement)
        self._end_scope()

    def visit_ClassDeclarationNode(self, node: ClassDeclarationNode):
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self._declare(node.name)
        self._define(node.name)

        if node.superclass is not None:
            if node.superclass.name.lexeme == node.name.lexeme:
                self._error("A class can't inherit from itself.", node.superclass.name)
            self.current_class = ClassType.SUBCLASS
            self.visit(node.superclass)

            self._begin_scope()
            self.scopes[-1]["super"] = True

        self._begin_scope()
        self.scopes[-1]["this"] = True

        for method in node.methods:
            function_type = FunctionType.METHOD
            if method.name.lexeme == "init":
                function_type = FunctionType.INITIALIZER
            self._resolve_function(method, function_type)

        self._end_scope()
        if node.superclass is not None:
            self._end_scope()

        self.current_class = enclosing_class

    def visit_ExpressionStatementNode(self, node: ExpressionStatementNode):
        self.visit(node.expression)

    def visit_FunctionDeclarationNode(self, node: FunctionDeclarationNode):
        self._declare(node.name)
        self._define(node.name)
        self._resolve_function(node, FunctionType.FUNCTION)

    def visit_IfStatementNode(self, node: IfStatementNode):
        self.visit(node.condition)
        self.visit(node.then_branch)
        self.visit(node.else_branch)

    def visit_PrintStatementNode(self, node: PrintStatementNode):
        self.visit(node.expression)

    def visit_ReturnStatementNode(self, node: ReturnStatementNode):
        if self.current_function == FunctionType.NONE:
            self._error("Can't return from top-level code.", node.keyword)

        if node.value is not None:
            if self.current_function == FunctionType.INITIALIZER:
                self._error("Can't return a value from an initializer.", node.keyword)
            self.visit(node.value)

    def visit_VarDeclarationNode(self, node: VarDeclarationNode):
        self._declare(node.name)
        self.visit(node.initializer)
        self._define(node.name)

    def visit_WhileLoopNode(self, node: WhileLoopNode):
        self.visit(node.condition)
        self.visit(node.body)

    # --- Expressions ---

    def visit_AssignNode(self, node: AssignNode):
        self.visit(node.value)
        self._resolve_local(node, node.name)

    def visit_BinaryNode(self, node: BinaryNode):
        self.visit(node.left)
        self.visit(node.right)

    def visit_CallNode(self, node: CallNode):
        self.visit(node.callee)
        for argument in node.arguments:
            self.visit(argument)

    def visit_GetNode(self, node: GetNode):
        self.visit(node.object_expr)

    def visit_GroupingNode(self, node: GroupingNode):
        self.visit(node.expression)

    def visit_LiteralNode(self, node: LiteralNode):
        pass

    def visit_LogicalNode(self, node: LogicalNode):
        self.visit(node.left)
        self.visit(node.right)

    def visit_SetNode(self, node: SetNode):
        self.visit(node.value)
        self.visit(node.object_expr)

    def visit_SuperNode(self, node: SuperNode):
        if self.current_class == ClassType.NONE:
            self._error("Can't use 'super' outside of a class.", node.keyword)
        elif self.current_class != ClassType.SUBCLASS:
            self._error("Can't use 'super' in a class with no superclass.", node.keyword)
        self._resolve_local(node, node.keyword)

    def visit_ThisNode(self, node: ThisNode):
        if self.current_class == ClassType.NONE:
            self._error("Can't use 'this' outside of a class.", node.keyword)
            return
        self._resolve_local(node, node.keyword)

    def visit_UnaryNode(self, node: UnaryNode):
        self.visit(node.operand)

    def visit_VariableNode(self, node: VariableNode):
        if self.scopes and self.scopes[-1].get(node.name.lexeme) is False:
            self._error("Can't read local variable in its own initializer.", node.name)
        self._resolve_local(node, node.name)
