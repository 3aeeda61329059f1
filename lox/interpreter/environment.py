from __future__ import annotations
from typing import Dict, Optional, TYPE_CHECKING

from lox.tokens import Token
from lox.utils import RuntimeException

if TYPE_CHECKING:
    from lox.interpreter.runtime_values import Value

class Environment:
    """
    One scope of variable bindings, linked to the scope it is nested in.

    Environments are shared by reference: a closure keeps the environment it
    was declared in alive after the declaring block has finished.
    """
    def __init__(self, enclosing: Optional[Environment] = None):
        self.values: Dict[str, Value] = {}
        self.enclosing: Optional[Environment] = enclosing

    def define(self, name: str, value: Value):
        # Redefinition is allowed, globals can be redeclared
        self.values[name] = value

    def get(self, name: Token) -> Value:
        environment = self._find_scope(name.lexeme)
        if environment is None:
            raise RuntimeException(f"Undefined variable '{name.lexeme}'.", name)
        return environment.values[name.lexeme]

    def assign(self, name: Token, value: Value):
        environment = self._find_scope(name.lexeme)
        if environment is None:
            raise RuntimeException(f"Undefined variable '{name.lexeme}'.", name)
        environment.values[name.lexeme] = value

    def ancestor(self, distance: int) -> Environment:
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance: int, name: str) -> Value:
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: Token, value: Value):
        self.ancestor(distance).values[name.lexeme] = value

    def _find_scope(self, name: str) -> Optional[Environment]:
        """Finds the innermost environment that binds 'name'."""
        environment = self
        while environment is not None:
            if name in environment.values:
                return environment
            environment = environment.enclosing
        return None

    def __repr__(self):
        return f"Environment(vars={list(self.values.keys())}, enclosing={'Yes' if self.enclosing else 'No'})"
