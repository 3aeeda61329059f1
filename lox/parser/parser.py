import logging
from typing import Callable, List, Optional, Sequence

from lox.tokens import Token, TokenType
from lox.parser.nodes import *
from lox.utils import (
    Config,
    ParserException,
    InvalidAssignmentTargetException,
    TooManyArgumentsException,
)

logger = logging.getLogger(__name__)

# Tokens that start a declaration, used to resynchronize after an error
SYNC_TOKENS = {
    TokenType.KEYWORD_CLASS, TokenType.KEYWORD_FUN, TokenType.KEYWORD_VAR,
    TokenType.KEYWORD_FOR, TokenType.KEYWORD_IF, TokenType.KEYWORD_WHILE,
    TokenType.KEYWORD_PRINT, TokenType.KEYWORD_RETURN,
}

LITERAL_TOKENS = {
    TokenType.KEYWORD_FALSE: False,
    TokenType.KEYWORD_TRUE: True,
    TokenType.KEYWORD_NIL: None,
}

class Parser:
    """
    Recursive descent parser. Syntax errors are collected in ``errors``; after
    each one the parser skips to the next statement boundary and goes on.
    """
    def __init__(self, tokens: Sequence[Token], config: Optional[Config] = None):
        self._tokens: Sequence[Token] = tokens
        self._current: int = 0
        self._config = config if config else Config()
        self.errors: List[ParserException] = []
        self._declaration_try_parsers: List[Callable[[], Optional[StatementNode]]] = []
        self._statement_try_parsers: List[Callable[[], Optional[StatementNode]]] = []

        self._init_try_parsers()

    def _init_try_parsers(self):
        self._declaration_try_parsers = [
            self._try_parse_class_declaration,
            self._try_parse_function_declaration,
            self._try_parse_variable_declaration,
        ]

        self._statement_try_parsers = [
            self._try_parse_for_loop,
            self._try_parse_if_statement,
            self._try_parse_print_statement,
            self._try_parse_return_statement,
            self._try_parse_while_loop,
            self._try_parse_block,
        ]

    # --- TOKEN STREAM ---

    @property
    def current_token(self) -> Token:
        return self._tokens[self._current]

    def _previous(self) -> Token:
        return self._tokens[self._current - 1]

    def _is_at_end(self) -> bool:
        return self.current_token.type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        return not self._is_at_end() and self.current_token.type == token_type

    def _advance(self) -> Token:
        if not self._is_at_end():
            self._current += 1
        return self._previous()

    def _accept(self, *token_types: TokenType) -> Optional[Token]:
        """Consumes the current token if it has one of the given types."""
        for token_type in token_types:
            if self._check(token_type):
                return self._advance()
        return None

    def _match(self, expected_type: TokenType, message: str) -> Token:
        """Consumes a token of the expected type or raises."""
        if self._check(expected_type):
            return self._advance()
        raise ParserException(message, self.current_token)

    def _report(self, error: ParserException):
        """Records an error that does not need resynchronization."""
        logger.debug("Parser error: %s", error)
        self.errors.append(error)

    def _synchronize(self):
        self._advance()
        while not self._is_at_end():
            if self._previous().type == TokenType.SEMICOLON:
                return
            if self.current_token.type in SYNC_TOKENS:
                return
            self._advance()

    # --- PARSERS ---

    # program = { declaration }, EOF ;
    def parse(self) -> List[StatementNode]:
        statements: List[StatementNode] = []
        while not self._is_at_end():
            statement = self._parse_declaration()
            if statement is not None:
                statements.append(statement)
        logger.debug("Parsed %d statements with %d errors", len(statements), len(self.errors))
        return statements

    # declaration = class_declaration
    #             | function_declaration
    #             | variable_declaration
    #             | statement ;
    def _parse_declaration(self) -> Optional[StatementNode]:
        try:
            for try_parser_func in self._declaration_try_parsers:
                node = try_parser_func()
                if node is not None:
                    return node
            return self._parse_statement()
        except ParserException as e:
            self._report(e)
            self._synchronize()
            return None

    # statement = for_loop
    #           | if_statement
    #           | print_statement
    #           | return_statement
    #           | while_loop
    #           | block
    #           | expression_statement ;
    def _parse_statement(self) -> StatementNode:
        for try_parser_func in self._statement_try_parsers:
            node = try_parser_func()
            if node is not None:
                return node
        return self._parse_expression_statement()

    # class_declaration = "class", identifier, [ "<", identifier ],
    #                     "{", { function }, "}" ;
    def _try_parse_class_declaration(self) -> Optional[ClassDeclarationNode]:
        if not self._accept(TokenType.KEYWORD_CLASS):
            return None

        name = self._match(TokenType.IDENTIFIER, "Expect class name.")

        superclass = None
        if self._accept(TokenType.OP_LT):
            superclass_name = self._match(TokenType.IDENTIFIER, "Expect superclass name.")
            superclass = VariableNode(superclass_name)

        self._match(TokenType.LBRACE, "Expect '{' before class body.")
        methods: List[FunctionDeclarationNode] = []
        while not self._check(TokenType.RBRACE) and not self._is_at_end():
            methods.append(self._parse_function("method"))
        self._match(TokenType.RBRACE, "Expect '}' after class body.")

        return ClassDeclarationNode(name, superclass, methods)

    # function_declaration = "fun", function ;
    def _try_parse_function_declaration(self) -> Optional[FunctionDeclarationNode]:
        if not self._accept(TokenType.KEYWORD_FUN):
            return None
        return self._parse_function("function")

    # function       = identifier, "(", [ parameter_list ], ")", block ;
    # parameter_list = identifier, { ",", identifier } ;
    def _parse_function(self, kind: str) -> FunctionDeclarationNode:
        name = self._match(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self._match(TokenType.LPAREN, f"Expect '(' after {kind} name.")

        params: List[Token] = []
        if not self._check(TokenType.RPAREN):
            while True:
                if len(params) >= self._config.max_arguments:
                    self._report(TooManyArgumentsException(self.current_token, self._config.max_arguments, "parameters"))
                params.append(self._match(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self._accept(TokenType.COMMA):
                    break
        self._match(TokenType.RPAREN, "Expect ')' after parameters.")

        self._match(TokenType.LBRACE, f"Expect '{{' before {kind} body.")
        body = self._parse_block_statements()
        return FunctionDeclarationNode(name, params, body)

    # variable_declaration = "var", identifier, [ "=", expression ], ";" ;
    def _try_parse_variable_declaration(self) -> Optional[VarDeclarationNode]:
        if not self._accept(TokenType.KEYWORD_VAR):
            return None
        return self._parse_variable_declaration()

    def _parse_variable_declaration(self) -> VarDeclarationNode:
        name = self._match(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self._accept(TokenType.OP_ASSIGN):
            initializer = self._parse_expression()

        self._match(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return VarDeclarationNode(name, initializer)

    # for_loop = "for", "(", ( variable_declaration | expression_statement | ";" ),
    #            [ expression ], ";", [ expression ], ")", statement ;
    def _try_parse_for_loop(self) -> Optional[StatementNode]:
        """Desugars the loop into a while loop wrapped in blocks."""
        if not self._accept(TokenType.KEYWORD_FOR):
            return None

        self._match(TokenType.LPAREN, "Expect '(' after 'for'.")

        initializer: Optional[StatementNode]
        if self._accept(TokenType.SEMICOLON):
            initializer = None
        elif self._accept(TokenType.KEYWORD_VAR):
            initializer = self._parse_variable_declaration()
        else:
            initializer = self._parse_expression_statement()

        condition = None
        if not self._check(TokenType.SEMICOLON):
            condition = self._parse_expression()
        self._match(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self._check(TokenType.RPAREN):
            increment = self._parse_expression()
        self._match(TokenType.RPAREN, "Expect ')' after for clauses.")

        body = self._parse_statement()

        if increment is not None:
            body = BlockNode([body, ExpressionStatementNode(increment)])
        if condition is None:
            condition = LiteralNode(True)
        body = WhileLoopNode(condition, body)
        if initializer is not None:
            body = BlockNode([initializer, body])

        return body

    # if_statement = "if", "(", expression, ")", statement, [ "else", statement ] ;
    def _try_parse_if_statement(self) -> Optional[IfStatementNode]:
        if not self._accept(TokenType.KEYWORD_IF):
            return None

        self._match(TokenType.LPAREN, "Expect '(' after 'if'.")
        condition = self._parse_expression()
        self._match(TokenType.RPAREN, "Expect ')' after if condition.")

        then_branch = self._parse_statement()
        else_branch = None
        if self._accept(TokenType.KEYWORD_ELSE):
            else_branch = self._parse_statement()

        return IfStatementNode(condition, then_branch, else_branch)

    # print_statement = "print", expression, ";" ;
    def _try_parse_print_statement(self) -> Optional[PrintStatementNode]:
        if not self._accept(TokenType.KEYWORD_PRINT):
            return None

        value = self._parse_expression()
        self._match(TokenType.SEMICOLON, "Expect ';' after value.")
        return PrintStatementNode(value)

    # return_statement = "return", [ expression ], ";" ;
    def _try_parse_return_statement(self) -> Optional[ReturnStatementNode]:
        keyword = self._accept(TokenType.KEYWORD_RETURN)
        if not keyword:
            return None

        value = None
        if not self._check(TokenType.SEMICOLON):
            value = self._parse_expression()

        self._match(TokenType.SEMICOLON, "Expect ';' after return value.")
        return ReturnStatementNode(keyword, value)

    # while_loop = "while", "(", expression, ")", statement ;
    def _try_parse_while_loop(self) -> Optional[WhileLoopNode]:
        if not self._accept(TokenType.KEYWORD_WHILE):
            return None

        self._match(TokenType.LPAREN, "Expect '(' after 'while'.")
        condition = self._parse_expression()
        self._match(TokenType.RPAREN, "Expect ')' after condition.")
        body = self._parse_statement()

        return WhileLoopNode(condition, body)

    # block = "{", { declaration }, "}" ;
    def _try_parse_block(self) -> Optional[BlockNode]:
        if not self._accept(TokenType.LBRACE):
            return None
        return BlockNode(self._parse_block_statements())

    def _parse_block_statements(self) -> List[StatementNode]:
        statements: List[StatementNode] = []
        while not self._check(TokenType.RBRACE) and not self._is_at_end():
            statement = self._parse_declaration()
            if statement is not None:
                statements.append(statement)

        self._match(TokenType.RBRACE, "Expect '}' after block.")
        return statements

    # expression_statement = expression, ";" ;
    def _parse_expression_statement(self) -> ExpressionStatementNode:
        expression = self._parse_expression()
        self._match(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ExpressionStatementNode(expression)

    # --- EXPRESSION PARSING ---

    # expression = assignment ;
    def _parse_expression(self) -> ExpressionNode:
        return self._parse_assignment()

    # assignment = [ call, "." ], identifier, "=", assignment
    #            | logic_or ;
    def _parse_assignment(self) -> ExpressionNode:
        node = self._parse_logical_or()

        equals = self._accept(TokenType.OP_ASSIGN)
        if equals:
            value = self._parse_assignment()

            if isinstance(node, VariableNode):
                return AssignNode(node.name, value)
            if isinstance(node, GetNode):
                return SetNode(node.object_expr, node.name, value)

            self._report(InvalidAssignmentTargetException(equals))

        return node

    def _parse_left_associative(self, operand_parser: Callable[[], ExpressionNode],
                                operator_types: Sequence[TokenType], node_class=BinaryNode) -> ExpressionNode:
        node = operand_parser()
        while True:
            operator = self._accept(*operator_types)
            if not operator:
                return node
            right = operand_parser()
            node = node_class(node, operator, right)

    # logic_or = logic_and, { "or", logic_and } ;
    def _parse_logical_or(self) -> ExpressionNode:
        return self._parse_left_associative(self._parse_logical_and, [TokenType.KEYWORD_OR], LogicalNode)

    # logic_and = equality, { "and", equality } ;
    def _parse_logical_and(self) -> ExpressionNode:
        return self._parse_left_associative(self._parse_equality, [TokenType.KEYWORD_AND], LogicalNode)

    # equality = comparison, { ( "!=" | "==" ), comparison } ;
    def _parse_equality(self) -> ExpressionNode:
        return self._parse_left_associative(self._parse_comparison, [TokenType.OP_NEQ, TokenType.OP_EQ])

    # comparison = term, { ( ">" | ">=" | "<" | "<=" ), term } ;
    def _parse_comparison(self) -> ExpressionNode:
        return self._parse_left_associative(
            self._parse_term, [TokenType.OP_GT, TokenType.OP_GTE, TokenType.OP_LT, TokenType.OP_LTE])

    # term = factor, { ( "-" | "+" ), factor } ;
    def _parse_term(self) -> ExpressionNode:
        return self._parse_left_associative(self._parse_factor, [TokenType.OP_MINUS, TokenType.OP_PLUS])

    # factor = unary, { ( "/" | "*" ), unary } ;
    def _parse_factor(self) -> ExpressionNode:
        return self._parse_left_associative(self._parse_unary, [TokenType.OP_DIVIDE, TokenType.OP_MULTIPLY])

    # unary = ( "!" | "-" ), unary
    #       | call ;
    def _parse_unary(self) -> ExpressionNode:
        operator = self._accept(TokenType.OP_NOT, TokenType.OP_MINUS)
        if operator:
            return UnaryNode(operator, self._parse_unary())
        return self._parse_call()

    # call = primary, { "(", [ argument_list ], ")" | ".", identifier } ;
    def _parse_call(self) -> ExpressionNode:
        node = self._parse_primary()

        while True:
            if self._accept(TokenType.LPAREN):
                node = self._parse_call_arguments(node)
            elif self._accept(TokenType.DOT):
                name = self._match(TokenType.IDENTIFIER, "Expect property name after '.'.")
                node = GetNode(node, name)
            else:
                return node

    # argument_list = expression, { ",", expression } ;
    def _parse_call_arguments(self, callee: ExpressionNode) -> CallNode:
        arguments: List[ExpressionNode] = []
        if not self._check(TokenType.RPAREN):
            while True:
                if len(arguments) >= self._config.max_arguments:
                    self._report(TooManyArgumentsException(self.current_token, self._config.max_arguments))
                arguments.append(self._parse_expression())
                if not self._accept(TokenType.COMMA):
                    break

        paren = self._match(TokenType.RPAREN, "Expect ')' after arguments.")
        return CallNode(callee, paren, arguments)

    # primary = "true" | "false" | "nil" | "this"
    #         | number | string | identifier
    #         | "(", expression, ")"
    #         | "super", ".", identifier ;
    def _parse_primary(self) -> ExpressionNode:
        token = self.current_token

        if token.type in LITERAL_TOKENS:
            self._advance()
            return LiteralNode(LITERAL_TOKENS[token.type])

        if self._accept(TokenType.LITERAL_NUMBER, TokenType.LITERAL_STRING):
            return LiteralNode(token.literal)

        if self._accept(TokenType.KEYWORD_SUPER):
            self._match(TokenType.DOT, "Expect '.' after 'super'.")
            method = self._match(TokenType.IDENTIFIER, "Expect superclass method name.")
            return SuperNode(token, method)

        if self._accept(TokenType.KEYWORD_THIS):
            return ThisNode(token)

        if self._accept(TokenType.IDENTIFIER):
            return VariableNode(token)

        if self._accept(TokenType.LPAREN):
            expression = self._parse_expression()
            self._match(TokenType.RPAREN, "Expect ')' after expression.")
            return GroupingNode(expression)

        raise ParserException("Expect expression.", token)
