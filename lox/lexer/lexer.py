import logging
from typing import Dict, Iterator, List, Optional, Tuple

from lox.lexer.cleaner import Cleaner
from lox.lexer.reader import SourceReader
from lox.tokens import Position, Token, TokenType
from lox.utils import (
    LexerException,
    UnexpectedCharacterException,
    UnterminatedStringException,
)

logger = logging.getLogger(__name__)

SINGLE_CHAR_TOKENS: Dict[str, TokenType] = {
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    ';': TokenType.SEMICOLON,
    '-': TokenType.OP_MINUS,
    '+': TokenType.OP_PLUS,
    '/': TokenType.OP_DIVIDE,
    '*': TokenType.OP_MULTIPLY,
}

# first char -> (token alone, token when followed by '=')
ONE_OR_TWO_CHAR_TOKENS: Dict[str, Tuple[TokenType, TokenType]] = {
    '!': (TokenType.OP_NOT, TokenType.OP_NEQ),
    '=': (TokenType.OP_ASSIGN, TokenType.OP_EQ),
    '<': (TokenType.OP_LT, TokenType.OP_LTE),
    '>': (TokenType.OP_GT, TokenType.OP_GTE),
}

def _is_digit(char: Optional[str]) -> bool:
    return char is not None and '0' <= char <= '9'

def _is_alpha(char: Optional[str]) -> bool:
    return char is not None and ('a' <= char <= 'z' or 'A' <= char <= 'Z' or char == '_')

def _is_alphanumeric(char: Optional[str]) -> bool:
    return _is_alpha(char) or _is_digit(char)

class Lexer:
    """
    Generates a stream of tokens from a SourceReader.

    Lexical errors do not stop scanning. They are collected in ``errors`` and
    the lexer moves on to the next character, so one pass reports all of them.
    """
    KEYWORDS: Dict[str, TokenType] = {
        "and": TokenType.KEYWORD_AND,
        "class": TokenType.KEYWORD_CLASS,
        "else": TokenType.KEYWORD_ELSE,
        "false": TokenType.KEYWORD_FALSE,
        "for": TokenType.KEYWORD_FOR,
        "fun": TokenType.KEYWORD_FUN,
        "if": TokenType.KEYWORD_IF,
        "nil": TokenType.KEYWORD_NIL,
        "or": TokenType.KEYWORD_OR,
        "print": TokenType.KEYWORD_PRINT,
        "return": TokenType.KEYWORD_RETURN,
        "super": TokenType.KEYWORD_SUPER,
        "this": TokenType.KEYWORD_THIS,
        "true": TokenType.KEYWORD_TRUE,
        "var": TokenType.KEYWORD_VAR,
        "while": TokenType.KEYWORD_WHILE,
    }

    def __init__(self, reader: SourceReader, cleaner: Optional[Cleaner] = None):
        self._reader = reader
        self._cleaner = cleaner if cleaner else Cleaner(reader)
        self.current_char: Optional[str] = None
        self.errors: List[LexerException] = []
        self._started: bool = False
        self._finished: bool = False

    def _advance(self):
        self.current_char = self._reader.get_char()

    def _read_identifier(self, position: Position) -> Optional[Token]:
        """Reads an identifier or keyword."""
        if not _is_alpha(self.current_char):
            return None

        value = []
        while _is_alphanumeric(self.current_char):
            value.append(self.current_char)
            self._advance()

        lexeme = ''.join(value)
        token_type = self.KEYWORDS.get(lexeme, TokenType.IDENTIFIER)
        return Token(token_type, lexeme, None, position)

    def _read_number(self, position: Position) -> Optional[Token]:
        """Reads a number literal, the fractional part needs a digit after the '.'."""
        if not _is_digit(self.current_char):
            return None

        digits = []
        while _is_digit(self.current_char):
            digits.append(self.current_char)
            self._advance()

        if self.current_char == '.' and _is_digit(self._reader.peek_char()):
            digits.append(self.current_char)
            self._advance()
            while _is_digit(self.current_char):
                digits.append(self.current_char)
                self._advance()

        lexeme = ''.join(digits)
        return Token(TokenType.LITERAL_NUMBER, lexeme, float(lexeme), position)

    def _read_string(self, position: Position) -> Optional[Token]:
        """Reads a string literal enclosed in double quotes. Strings may span lines."""
        if self.current_char != '"':
            return None

        self._advance()
        string = []
        while self.current_char != '"':
            if self.current_char is None:
                raise UnterminatedStringException(self._reader.line)
            string.append(self.current_char)
            self._advance()

        # Closing quote
        self._advance()
        value = ''.join(string)
        return Token(TokenType.LITERAL_STRING, f'"{value}"', value, position)

    def _read_operator(self, position: Position) -> Optional[Token]:
        char = self.current_char
        if char in SINGLE_CHAR_TOKENS:
            self._advance()
            return Token(SINGLE_CHAR_TOKENS[char], char, None, position)

        if char in ONE_OR_TWO_CHAR_TOKENS:
            single, double = ONE_OR_TWO_CHAR_TOKENS[char]
            self._advance()
            if self.current_char == '=':
                self._advance()
                return Token(double, char + '=', None, position)
            return Token(single, char, None, position)

        return None

    def get_next_token(self) -> Token:
        """Reads and returns the next token from the source."""
        if not self._started:
            self._started = True
            self._advance()

        while True:
            self.current_char = self._cleaner.skip(self.current_char)
            position = self._reader.current_pos()

            if self.current_char is None:
                return Token(TokenType.EOF, "", None, position)

            try:
                token = (self._read_identifier(position) or self._read_number(position)
                         or self._read_string(position) or self._read_operator(position))
                if token is not None:
                    return token

                bad_char = self.current_char
                self._advance()
                raise UnexpectedCharacterException(bad_char, position.line)
            except LexerException as e:
                logger.debug("Lexer error: %s", e)
                self.errors.append(e)

    def scan_tokens(self) -> List[Token]:
        """Scans the whole source, the returned list always ends with EOF."""
        tokens = list(self)
        logger.debug("Scanned %d tokens with %d errors", len(tokens), len(self.errors))
        return tokens

    def __iter__(self) -> Iterator[Token]:
        """Allows iterating through the tokens."""
        while not self._finished:
            token = self.get_next_token()
            if token.type == TokenType.EOF:
                self._finished = True
            yield token
