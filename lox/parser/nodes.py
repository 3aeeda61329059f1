from typing import List, Any, Optional
from dataclasses import dataclass
from lox.tokens import Token

# Nodes compare and hash by identity. The resolver keys its distance map on
# the node object, so two structurally equal nodes must stay distinct.

@dataclass(eq=False)
class ParserNode:
    pass

# --- EXPRESSION NODES---
@dataclass(eq=False)
class ExpressionNode(ParserNode):
    pass

@dataclass(eq=False)
class LiteralNode(ExpressionNode):
    value: Any

@dataclass(eq=False)
class VariableNode(ExpressionNode):
    name: Token

@dataclass(eq=False)
class AssignNode(ExpressionNode):
    name: Token
    value: ExpressionNode

@dataclass(eq=False)
class UnaryNode(ExpressionNode):
    operator: Token
    operand: ExpressionNode

@dataclass(eq=False)
class BinaryNode(ExpressionNode):
    left: ExpressionNode
    operator: Token
    right: ExpressionNode

@dataclass(eq=False)
class LogicalNode(ExpressionNode):
    left: ExpressionNode
    operator: Token
    right: ExpressionNode

@dataclass(eq=False)
class GroupingNode(ExpressionNode):
    expression: ExpressionNode

@dataclass(eq=False)
class CallNode(ExpressionNode):
    callee: ExpressionNode
    paren: Token
    arguments: List[ExpressionNode]

@dataclass(eq=False)
class GetNode(ExpressionNode):
    object_expr: ExpressionNode
    name: Token

@dataclass(eq=False)
class SetNode(ExpressionNode):
    object_expr: ExpressionNode
    name: Token
    value: ExpressionNode

@dataclass(eq=False)
class ThisNode(ExpressionNode):
    keyword: Token

@dataclass(eq=False)
class SuperNode(ExpressionNode):
    keyword: Token
    method: Token

# --- STATEMENT NODES ---
@dataclass(eq=False)
class StatementNode(ParserNode):
    pass

@dataclass(eq=False)
class ExpressionStatementNode(StatementNode):
    expression: ExpressionNode

@dataclass(eq=False)
class PrintStatementNode(StatementNode):
    expression: ExpressionNode

@dataclass(eq=False)
class VarDeclarationNode(StatementNode):
    name: Token
    initializer: Optional[ExpressionNode]

@dataclass(eq=False)
class BlockNode(StatementNode):
    statements: List[StatementNode]

@dataclass(eq=False)
class IfStatementNode(StatementNode):
    condition: ExpressionNode
    then_branch: StatementNode
    else_branch: Optional[StatementNode]

@dataclass(eq=False)
class WhileLoopNode(StatementNode):
    condition: ExpressionNode
    body: StatementNode

@dataclass(eq=False)
class ReturnStatementNode(StatementNode):
    keyword: Token
    value: Optional[ExpressionNode]

# --- FUNCTION AND CLASS DEFINITIONS ---
@dataclass(eq=False)
class FunctionDeclarationNode(StatementNode):
    name: Token
    params: List[Token]
    body: List[StatementNode]

@dataclass(eq=False)
class ClassDeclarationNode(StatementNode):
    name: Token
    superclass: Optional[VariableNode]
    methods: List[FunctionDeclarationNode]
