from __future__ import annotations
import math
from decimal import Decimal
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from lox.tokens import Token
from lox.parser.nodes import FunctionDeclarationNode
from lox.interpreter.environment import Environment
from lox.utils import RuntimeException

if TYPE_CHECKING:
    from lox.interpreter.interpreter import Interpreter

class Value:
    def __init__(self, type_name: str):
        self.type_name: str = type_name

    def is_true(self) -> bool:
        return True

    def equals(self, other: Value) -> bool:
        """Language level '=='. Never fails, values of different kinds are never equal."""
        return self is other

    def __repr__(self) -> str:
        return f"<{self.type_name} Value>"

    def get_attribute(self, name: Token) -> Value:
        raise RuntimeException("Only instances have properties.", name)

    def set_attribute_value(self, name: Token, value: Value):
        raise RuntimeException("Only instances have fields.", name)

# --- Simple Values ---
class NilValue(Value):
    def __init__(self):
        super().__init__("nil")
        self.value: None = None
    def is_true(self) -> bool: return False
    def equals(self, other: Value) -> bool: return isinstance(other, NilValue)
    def __str__(self) -> str: return "nil"
    def __repr__(self) -> str: return "NilValue()"

class BoolValue(Value):
    def __init__(self, value: bool):
        super().__init__("bool")
        self.value: bool = value
    def is_true(self) -> bool: return self.value
    def equals(self, other: Value) -> bool:
        return isinstance(other, BoolValue) and self.value == other.value
    def __str__(self) -> str: return "true" if self.value else "false"
    def __repr__(self) -> str: return f"BoolValue({self.value})"

def format_number(value: float) -> str:
    """
    Shortest round-trip digits. Magnitudes in [1e-3, 1e7) are written out,
    others as d.dddE<exp>. Integral results lose their ".0".
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    if value == 0.0 or 1e-3 <= abs(value) < 1e7:
        text = repr(value)
    else:
        sign, digits, exponent = Decimal(repr(value)).normalize().as_tuple()
        mantissa = "".join(str(d) for d in digits)
        text = "-" if sign else ""
        text += f"{mantissa[0]}.{mantissa[1:] or '0'}E{exponent + len(digits) - 1}"

    if text.endswith(".0"):
        text = text[:-2]
    return text

class NumberValue(Value):
    def __init__(self, value: float):
        super().__init__("number")
        self.value: float = float(value)
    def equals(self, other: Value) -> bool:
        # Bitwise semantics: NaN equals NaN, 0 and -0 differ
        if not isinstance(other, NumberValue):
            return False
        if math.isnan(self.value) or math.isnan(other.value):
            return math.isnan(self.value) and math.isnan(other.value)
        return self.value == other.value and math.copysign(1.0, self.value) == math.copysign(1.0, other.value)
    def __str__(self) -> str: return format_number(self.value)
    def __repr__(self) -> str: return f"NumberValue({self.value})"

class StringValue(Value):
    def __init__(self, value: str):
        super().__init__("string")
        self.value: str = value
    def equals(self, other: Value) -> bool:
        return isinstance(other, StringValue) and self.value == other.value
    def __str__(self) -> str: return self.value
    def __repr__(self) -> str: return f"StringValue('{self.value}')"

NIL = NilValue()
TRUE = BoolValue(True)
FALSE = BoolValue(False)

def bool_value(value: bool) -> BoolValue:
    return TRUE if value else FALSE

# --- Callables ---
class CallableValue(Value):
    def arity(self) -> int:
        raise NotImplementedError

    def call(self, interpreter: Interpreter, arguments: List[Value]) -> Value:
        raise NotImplementedError

class BuiltInFunction(CallableValue):
    def __init__(self, name: str, arity: int, python_callable: Callable[..., Value]):
        super().__init__("builtin_function")
        self.name = name
        self._arity = arity
        self.python_callable = python_callable

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: Interpreter, arguments: List[Value]) -> Value:
        return self.python_callable(*arguments)

    def __str__(self) -> str: return "<native fn>"
    def __repr__(self) -> str: return f"<BuiltInFunction {self.name}>"

class FunctionValue(CallableValue):
    """A user function together with the environment it was declared in."""
    def __init__(self, declaration: FunctionDeclarationNode, closure: Environment, is_initializer: bool = False):
        super().__init__("function")
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def bind(self, instance: InstanceValue) -> FunctionValue:
        """Returns a copy of this method whose closure has 'this' bound to instance."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return FunctionValue(self.declaration, environment, self.is_initializer)

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: Interpreter, arguments: List[Value]) -> Value:
        # Parented at the closure, not at the caller's environment
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        completion = interpreter.execute_block(self.declaration.body, environment)

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if completion.is_return:
            return completion.value
        return NIL

    def __str__(self) -> str: return f"<fn {self.name}>"
    def __repr__(self) -> str: return f"FunctionValue({self.name})"

# --- Classes and Instances ---
class ClassValue(CallableValue):
    def __init__(self, name: str, superclass: Optional[ClassValue], methods: Dict[str, FunctionValue]):
        super().__init__("class")
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name: str) -> Optional[FunctionValue]:
        klass = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self) -> int:
        initializer = self.find_method("init")
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter: Interpreter, arguments: List[Value]) -> Value:
        instance = InstanceValue(self)
        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self) -> str: return self.name
    def __repr__(self) -> str: return f"ClassValue({self.name})"

class InstanceValue(Value):
    def __init__(self, klass: ClassValue):
        super().__init__(klass.name)
        self.klass = klass
        self.fields: Dict[str, Value] = {}

    def get_attribute(self, name: Token) -> Value:
        # Fields shadow methods
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise RuntimeException(f"Undefined property '{name.lexeme}'.", name)

    def set_attribute_value(self, name: Token, value: Value):
        self.fields[name.lexeme] = value

    def __str__(self) -> str: return f"{self.klass.name} instance"
    def __repr__(self) -> str: return f"InstanceValue({self.klass.name})"
