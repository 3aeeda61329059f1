from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

@dataclass(frozen=True)
class Position:
    line: int
    column: int

# --- Token Definition ---

class TokenType(Enum):
    # Single-character tokens
    LPAREN = auto()                     # (
    RPAREN = auto()                     # )
    LBRACE = auto()                     # {
    RBRACE = auto()                     # }
    COMMA = auto()                      # ,
    DOT = auto()                        # .
    SEMICOLON = auto()                  # ;

    # Operators
    OP_MINUS = auto()                   # -
    OP_PLUS = auto()                    # +
    OP_DIVIDE = auto()                  # /
    OP_MULTIPLY = auto()                # *
    OP_NOT = auto()                     # !
    OP_NEQ = auto()                     # !=
    OP_ASSIGN = auto()                  # =
    OP_EQ = auto()                      # ==
    OP_GT = auto()                      # >
    OP_GTE = auto()                     # >=
    OP_LT = auto()                      # <
    OP_LTE = auto()                     # <=

    # Identifier
    IDENTIFIER = auto()

    # Literals
    LITERAL_STRING = auto()
    LITERAL_NUMBER = auto()

    # Keywords
    KEYWORD_AND = auto()
    KEYWORD_CLASS = auto()
    KEYWORD_ELSE = auto()
    KEYWORD_FALSE = auto()
    KEYWORD_FUN = auto()
    KEYWORD_FOR = auto()
    KEYWORD_IF = auto()
    KEYWORD_NIL = auto()
    KEYWORD_OR = auto()
    KEYWORD_PRINT = auto()
    KEYWORD_RETURN = auto()
    KEYWORD_SUPER = auto()
    KEYWORD_THIS = auto()
    KEYWORD_TRUE = auto()
    KEYWORD_VAR = auto()
    KEYWORD_WHILE = auto()

    # Special
    EOF = auto()                        # End of File/Input

    def __str__(self):
        return self.name

@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str
    literal: Any
    code_position: Position

    @property
    def line(self) -> int:
        return self.code_position.line

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {repr(self.lexeme)}, {repr(self.literal)}, Ln {self.code_position.line}, Col {self.code_position.column})"
