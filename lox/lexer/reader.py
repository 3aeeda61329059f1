from typing import List, Optional, TextIO

from lox.tokens import Position

# --- Source Reader ---

class SourceReader:
    """
    Character source for the lexer. Pulls one character at a time from any
    text stream, so scripts are never loaded whole, and keeps the line and
    column of the character consumed last.

    Line endings are normalized: \\r\\n and a lone \\r both come out as \\n.
    """
    def __init__(self, source: TextIO):
        self._stream = source
        self._pending: List[str] = []
        self._exhausted: bool = False
        self.line: int = 1
        self.column: int = 0

    def _pull(self) -> Optional[str]:
        if not self._exhausted:
            char = self._stream.read(1)
            if char:
                return char
            self._exhausted = True
        return None

    def _take(self) -> Optional[str]:
        return self._pending.pop(0) if self._pending else self._pull()

    def peek_char(self, k: int = 1) -> Optional[str]:
        """Returns the k-th character ahead without consuming it, or None past the end."""
        if k < 1:
            return None

        while len(self._pending) < k:
            char = self._pull()
            if char is None:
                return None
            self._pending.append(char)

        char = self._pending[k - 1]
        return '\n' if char == '\r' else char

    def get_char(self) -> Optional[str]:
        """Consumes one character and advances the position. Returns None at the end."""
        char = self._take()
        if char is None:
            return None

        if char == '\r':
            # Raw lookahead, peek_char would report another \r as \n
            if self.peek_char() is not None and self._pending[0] == '\n':
                self._take()
            char = '\n'

        if char == '\n':
            self.line, self.column = self.line + 1, 0
        else:
            self.column += 1
        return char

    def current_pos(self) -> Position:
        return Position(self.line, self.column)
