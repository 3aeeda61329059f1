from typing import Any

from lox.parser.nodes import *

class NodeVisitor:
    def visit(self, node: Any, *args, **kwargs) -> Any:
        """
        Dispatches to the appropriate visit_NodeType method.
        """
        if node is None:
            return self.visit_None(node, *args, **kwargs)

        method_name = 'visit_' + type(node).__name__
        visitor_method = getattr(self, method_name, None)
        if visitor_method is None:
            raise NotImplementedError(f"{type(self).__name__} has no visitor method for {type(node).__name__}")
        return visitor_method(node, *args, **kwargs)

    def visit_None(self, node: None, *args, **kwargs) -> Any:
        """Handles cases where an optional node is None."""
        return None

class ASTPrinter(NodeVisitor):
    def __init__(self, indent_char: str = "  ", initial_indent: int = -1):
        self.indent_char = indent_char
        self.current_indent_level = initial_indent

    def _print_with_indent(self, message: str):
        self._increase_indent()
        print(f"{self.indent_char * self.current_indent_level}{message}")
        self._decrease_indent()

    def _increase_indent(self):
        self.current_indent_level += 1

    def _decrease_indent(self):
        self.current_indent_level -= 1

    def _visit_indented(self, label: str, *children):
        self._print_with_indent(label)
        self._increase_indent()
        for child in children:
            self.visit(child)
        self._decrease_indent()

    def print_program(self, statements: List[StatementNode]):
        self._visit_indented("Program:", *statements)

    # --- Statements ---

    def visit_ExpressionStatementNode(self, node: ExpressionStatementNode):
        self._visit_indented("ExpressionStatement:", node.expression)

    def visit_PrintStatementNode(self, node: PrintStatementNode):
        self._visit_indented("Print:", node.expression)

    def visit_VarDeclarationNode(self, node: VarDeclarationNode):
        self._visit_indented(f"Var: {node.name.lexeme}", node.initializer)

    def visit_BlockNode(self, node: BlockNode):
        self._visit_indented("Block:", *node.statements)

    def visit_IfStatementNode(self, node: IfStatementNode):
        self._print_with_indent("If:")
        self._increase_indent()
        self._visit_indented("Condition:", node.condition)
        self._visit_indented("Then:", node.then_branch)
        if node.else_branch:
            self._visit_indented("Else:", node.else_branch)
        self._decrease_indent()

    def visit_WhileLoopNode(self, node: WhileLoopNode):
        self._print_with_indent("While:")
        self._increase_indent()
        self._visit_indented("Condition:", node.condition)
        self._visit_indented("Body:", node.body)
        self._decrease_indent()

    def visit_FunctionDeclarationNode(self, node: FunctionDeclarationNode):
        param_str = ", ".join(p.lexeme for p in node.params)
        self._visit_indented(f"Fun: {node.name.lexeme}({param_str})", *node.body)

    def visit_ReturnStatementNode(self, node: ReturnStatementNode):
        self._visit_indented("Return:", node.value)

    def visit_ClassDeclarationNode(self, node: ClassDeclarationNode):
        header = f"Class: {node.name.lexeme}"
        if node.superclass:
            header += f" < {node.superclass.name.lexeme}"
        self._visit_indented(header, *node.methods)

    # --- Expressions ---

    def visit_LiteralNode(self, node: LiteralNode):
        self._print_with_indent(f"Literal: {node.value!r}")

    def visit_VariableNode(self, node: VariableNode):
        self._print_with_indent(f"Variable: {node.name.lexeme}")

    def visit_AssignNode(self, node: AssignNode):
        self._visit_indented(f"Assign: {node.name.lexeme}", node.value)

    def visit_UnaryNode(self, node: UnaryNode):
        self._visit_indented(f"Unary: {node.operator.lexeme}", node.operand)

    def visit_BinaryNode(self, node: BinaryNode):
        self._visit_indented(f"Binary: {node.operator.lexeme}", node.left, node.right)

    def visit_LogicalNode(self, node: LogicalNode):
        self._visit_indented(f"Logical: {node.operator.lexeme}", node.left, node.right)

    def visit_GroupingNode(self, node: GroupingNode):
        self._visit_indented("Grouping:", node.expression)

    def visit_CallNode(self, node: CallNode):
        self._print_with_indent("Call:")
        self._increase_indent()
        self._visit_indented("Callee:", node.callee)
        if node.arguments:
            self._visit_indented("Arguments:", *node.arguments)
        self._decrease_indent()

    def visit_GetNode(self, node: GetNode):
        self._visit_indented(f"Get: {node.name.lexeme}", node.object_expr)

    def visit_SetNode(self, node: SetNode):
        self._visit_indented(f"Set: {node.name.lexeme}", node.object_expr, node.value)

    def visit_ThisNode(self, node: ThisNode):
        self._print_with_indent("This")

    def visit_SuperNode(self, node: SuperNode):
        self._print_with_indent(f"Super: {node.method.lexeme}")
