import json
from dataclasses import dataclass
from lox.tokens import Token, TokenType


def _where(token: Token) -> str:
    if token.type == TokenType.EOF:
        return " at end"
    return f" at '{token.lexeme}'"


# LEXER
class LexerException(Exception):
    def __init__(self, message: str, line: int):
        self.line = line
        self.message = message
        super().__init__(f'[line {self.line}] Error: {message}')

class UnexpectedCharacterException(LexerException):
    def __init__(self, character: str, line: int):
        self.character = character
        super().__init__("Unexpected character.", line)

class UnterminatedStringException(LexerException):
    def __init__(self, line: int):
        super().__init__("Unterminated string.", line)

# PARSER
class ParserException(Exception):
    def __init__(self, message: str, token: Token):
        self.token = token
        self.message = message
        super().__init__(f'[line {token.line}] Error{_where(token)}: {message}')

    @property
    def line(self) -> int:
        return self.token.line

class InvalidAssignmentTargetException(ParserException):
    def __init__(self, token: Token):
        super().__init__("Invalid assignment target.", token)

class TooManyArgumentsException(ParserException):
    def __init__(self, token: Token, limit: int, kind: str = "arguments"):
        super().__init__(f"Can't have more than {limit} {kind}.", token)

# RESOLVER
class ResolverException(Exception):
    def __init__(self, message: str, token: Token):
        self.token = token
        self.message = message
        super().__init__(f'[line {token.line}] Error{_where(token)}: {message}')

    @property
    def line(self) -> int:
        return self.token.line

# INTERPRETER
class RuntimeException(Exception):
    def __init__(self, message: str, token: Token):
        self.message = message
        self.token = token
        super().__init__(f'{message}\n[line {token.line}]')

    @property
    def line(self) -> int:
        return self.token.line

@dataclass
class Config:
    max_arguments: int = 255
    # Each Lox call takes about a dozen Python frames
    recursion_limit: int = 100000
    thread_stack_size: int = 512 * 1024 * 1024
    prompt: str = "> "

    @staticmethod
    def from_json_file(path: str) -> 'Config':
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return Config(**data)
