import io
import logging
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TextIO, Tuple

from lox.lexer.lexer import Lexer
from lox.lexer.reader import SourceReader
from lox.lexer.cleaner import Cleaner
from lox.parser.nodes import ExpressionNode, StatementNode
from lox.parser.parser import Parser
from lox.resolver.resolver import Resolver
from lox.interpreter.interpreter import Interpreter
from lox.utils import Config, RuntimeException

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 64
EXIT_STATIC_ERROR = 65
EXIT_NO_INPUT = 66
EXIT_RUNTIME_ERROR = 70

STACK_OVERFLOW = "Fatal error: stack overflow."

@dataclass
class RunResult:
    static_errors: List[Exception] = field(default_factory=list)
    runtime_error: Optional[RuntimeException] = None
    fatal_error: Optional[str] = None

    @property
    def had_error(self) -> bool:
        return bool(self.static_errors)

    @property
    def had_runtime_error(self) -> bool:
        return self.runtime_error is not None or self.fatal_error is not None

    @property
    def exit_code(self) -> int:
        if self.had_error:
            return EXIT_STATIC_ERROR
        if self.had_runtime_error:
            return EXIT_RUNTIME_ERROR
        return EXIT_OK

class Lox:
    """
    Runs source text through lexer, parser, resolver and interpreter.

    The interpreter, and with it the global environment, lives as long as this
    object, so consecutive runs (REPL lines) see each other's globals.

    Every stage recurses on the host stack, so ``run`` and ``check`` work on a
    worker thread with a large stack and a raised recursion limit. Running
    out of host stack ends the run with a fatal error instead of an exception.
    """
    def __init__(self, config: Optional[Config] = None, error_stream: Optional[TextIO] = None):
        self.config = config if config else Config()
        self.interpreter = Interpreter(self.config)
        self._error_stream = error_stream

    def _report(self, error: Any):
        print(str(error), file=self._error_stream or sys.stderr)

    def on_deep_stack(self, function: Callable[..., Any], *args) -> Any:
        """
        Calls function on a thread sized by ``Config.thread_stack_size`` with
        the recursion limit set to ``Config.recursion_limit``. Returns its
        result or re-raises what it raised.
        """
        outcome: Dict[str, Any] = {}

        def target():
            try:
                outcome["value"] = function(*args)
            except BaseException as e:
                outcome["error"] = e

        previous_limit = sys.getrecursionlimit()
        previous_size = threading.stack_size(self.config.thread_stack_size)
        try:
            sys.setrecursionlimit(self.config.recursion_limit)
            worker = threading.Thread(target=target, name="lox-interpreter")
            worker.start()
            worker.join()
        finally:
            threading.stack_size(previous_size)
            sys.setrecursionlimit(previous_limit)

        if "error" in outcome:
            raise outcome["error"]
        return outcome["value"]

    def lexer_for(self, source: TextIO) -> Lexer:
        reader = SourceReader(source)
        return Lexer(reader, Cleaner(reader))

    def parse(self, source: str, result: RunResult) -> List[StatementNode]:
        lexer = self.lexer_for(io.StringIO(source))
        tokens = lexer.scan_tokens()
        parser = Parser(tokens, self.config)
        statements = parser.parse()

        result.static_errors.extend(lexer.errors)
        result.static_errors.extend(parser.errors)
        return statements

    def analyze(self, source: str) -> Tuple[RunResult, List[StatementNode], Dict[ExpressionNode, int]]:
        """Lexes, parses and resolves, reporting every static error found."""
        result = RunResult()
        statements = self.parse(source, result)

        locals: Dict[ExpressionNode, int] = {}
        if not result.had_error:
            resolver = Resolver()
            locals = resolver.resolve(statements)
            result.static_errors.extend(resolver.errors)

        for error in result.static_errors:
            self._report(error)
        return result, statements, locals

    def _check(self, source: str) -> RunResult:
        return self.analyze(source)[0]

    def _run(self, source: str) -> RunResult:
        result, statements, locals = self.analyze(source)
        if result.had_error:
            logger.debug("Not running, %d static errors", len(result.static_errors))
            return result

        self.interpreter.resolve(locals)
        result.runtime_error = self.interpreter.interpret(statements)
        if result.runtime_error is not None:
            self._report(result.runtime_error)
        return result

    def _guarded(self, stage: Callable[[str], RunResult], source: str) -> RunResult:
        try:
            return self.on_deep_stack(stage, source)
        except RecursionError as e:
            logger.debug("Host stack exhausted: %s", e)
            self._report(STACK_OVERFLOW)
            return RunResult(fatal_error=STACK_OVERFLOW)

    def check(self, source: str) -> RunResult:
        return self._guarded(self._check, source)

    def run(self, source: str) -> RunResult:
        return self._guarded(self._run, source)
