from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from lox.interpreter.runtime_values import Value

class CompletionType(Enum):
    NORMAL = auto()
    RETURN = auto()

@dataclass(frozen=True)
class Completion:
    """
    Outcome of executing one statement. A RETURN completion is passed up
    through blocks, ifs and loops until the enclosing function call takes it.
    """
    type: CompletionType
    value: Optional[Value] = None

    @property
    def is_return(self) -> bool:
        return self.type == CompletionType.RETURN

    @staticmethod
    def returning(value: Value) -> Completion:
        return Completion(CompletionType.RETURN, value)

NORMAL = Completion(CompletionType.NORMAL)
