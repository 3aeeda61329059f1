from typing import Optional

from lox.lexer.reader import SourceReader

# SourceReader already turns carriage returns into newlines
WHITESPACE = {' ', '\t', '\n'}

# --- Whitespace and Comment Handler ---

class Cleaner:
    """Skips characters that never start a token: whitespace and // comments."""
    def __init__(self, reader: SourceReader):
        self._reader = reader

    def skip(self, char: Optional[str]) -> Optional[str]:
        """
        Starting from an already consumed character, returns the first
        significant character. Returns None if EOF is reached while skipping.
        """
        while char is not None:
            if char in WHITESPACE:
                char = self._reader.get_char()
                continue

            if char == '/' and self._reader.peek_char() == '/':
                # Line comment, runs up to (and including) the newline
                while char is not None and char != '\n':
                    char = self._reader.get_char()
                continue

            return char
        return None
