import io
import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from lox.__main__ import main
from lox.runner import Lox, EXIT_OK, EXIT_USAGE, EXIT_STATIC_ERROR, EXIT_NO_INPUT, EXIT_RUNTIME_ERROR


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def _write(self, name, content):
        path = os.path.join(self.test_dir, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def _main(self, argv, stdin_data=None):
        with patch('sys.stdout', new_callable=io.StringIO) as mock_stdout, \
             patch('sys.stderr', new_callable=io.StringIO) as mock_stderr, \
             patch('sys.stdin', io.StringIO(stdin_data or "")):

            exit_code = main(argv)

            captured_stdout = mock_stdout.getvalue()
            captured_stderr = mock_stderr.getvalue()

        return exit_code, captured_stdout, captured_stderr

    # --- Scripts ---

    def test_run_file(self):
        path = self._write("hello.lox", 'var greeting = "Hello";\nprint greeting + ", world";\n')
        exit_code, output, error = self._main(["-f", path])
        self.assertEqual(exit_code, EXIT_OK)
        self.assertEqual(output, "Hello, world\n")
        self.assertEqual(error, "")

    def test_run_string(self):
        exit_code, output, _ = self._main(["-s", "print 6 * 7;"])
        self.assertEqual(exit_code, EXIT_OK)
        self.assertEqual(output, "42\n")

    def test_missing_file(self):
        exit_code, _, error = self._main(["-f", os.path.join(self.test_dir, "missing.lox")])
        self.assertEqual(exit_code, EXIT_NO_INPUT)
        self.assertIn("Error reading file", error)

    def test_static_error_exit_code(self):
        path = self._write("bad.lox", 'print "ok";\nvar = 1;\n')
        exit_code, output, error = self._main(["-f", path])
        self.assertEqual(exit_code, EXIT_STATIC_ERROR)
        self.assertEqual(output, "")
        self.assertEqual(error, "[line 2] Error at '=': Expect variable name.\n")

    def test_runtime_error_exit_code(self):
        path = self._write("fail.lox", 'print "start";\nprint 1 + nil;\n')
        exit_code, output, error = self._main(["-f", path])
        self.assertEqual(exit_code, EXIT_RUNTIME_ERROR)
        self.assertEqual(output, "start\n")
        self.assertEqual(error, "Operands must be two numbers or two strings.\n[line 2]\n")

    def test_deep_recursion_is_not_limited(self):
        code = "fun sum(n) { if (n == 0) return 0; return n + sum(n - 1); }\nprint sum(600);"
        exit_code, output, error = self._main(["-s", code])
        self.assertEqual(exit_code, EXIT_OK)
        self.assertEqual(output, "180300\n")
        self.assertEqual(error, "")

    def test_host_stack_exhaustion_is_fatal(self):
        path = self._write("config.json", json.dumps({"recursion_limit": 2000}))
        exit_code, _, error = self._main(["-c", path, "-s", "fun f() { f(); } f();"])
        self.assertEqual(exit_code, EXIT_RUNTIME_ERROR)
        self.assertEqual(error, "Fatal error: stack overflow.\n")

    # --- Modes ---

    def test_lex_mode(self):
        exit_code, output, _ = self._main(["-l", "-s", "print 1;"])
        lines = output.splitlines()
        self.assertEqual(exit_code, EXIT_OK)
        self.assertEqual(len(lines), 4)
        self.assertTrue(lines[0].startswith("Token(KEYWORD_PRINT, 'print'"))
        self.assertTrue(lines[-1].startswith("Token(EOF"))

    def test_lex_mode_reports_errors(self):
        exit_code, _, error = self._main(["-l", "-s", "#"])
        self.assertEqual(exit_code, EXIT_STATIC_ERROR)
        self.assertEqual(error, "[line 1] Error: Unexpected character.\n")

    def test_parse_mode_does_not_run(self):
        exit_code, output, _ = self._main(["-p", "-s", "print 1;"])
        self.assertEqual(exit_code, EXIT_OK)
        self.assertEqual(output.splitlines(), ["Program:", "| Print:", "| | Literal: 1.0"])

    def test_check_mode(self):
        exit_code, output, error = self._main(["-t", "-s", 'print "never";\nreturn;'])
        self.assertEqual(exit_code, EXIT_STATIC_ERROR)
        self.assertEqual(output, "")
        self.assertIn("Can't return from top-level code.", error)

        exit_code, output, _ = self._main(["-t", "-s", 'print "never";'])
        self.assertEqual(exit_code, EXIT_OK)
        self.assertEqual(output, "")

    # --- REPL ---

    def test_repl_keeps_state_and_survives_errors(self):
        session = "var a = 1;\nprint b;\nprint a + 1;\nprint ;\nprint a;\n"
        exit_code, output, error = self._main([], stdin_data=session)

        self.assertEqual(exit_code, EXIT_OK)
        printed = [line for line in output.replace("> ", "").splitlines() if line]
        self.assertEqual(printed, ["2", "1"])
        self.assertIn("Undefined variable 'b'.", error)
        self.assertIn("Expect expression.", error)

    def test_repl_ends_at_eof(self):
        exit_code, output, _ = self._main([], stdin_data="")
        self.assertEqual(exit_code, EXIT_OK)
        self.assertEqual(output, "> \n")

    # --- Config ---

    def test_config_file(self):
        path = self._write("config.json", json.dumps({"prompt": "lox> "}))
        _, output, _ = self._main(["-c", path], stdin_data="print 1;\n")
        self.assertTrue(output.startswith("lox> 1\n"))

    def test_config_limits_arguments(self):
        path = self._write("config.json", json.dumps({"max_arguments": 1}))
        exit_code, _, error = self._main(["-c", path, "-s", "fun f(a, b) {}"])
        self.assertEqual(exit_code, EXIT_STATIC_ERROR)
        self.assertIn("Can't have more than 1 parameters.", error)

    def test_bad_config(self):
        path = self._write("config.json", json.dumps({"unknown_option": 1}))
        exit_code, _, error = self._main(["-c", path, "-s", "print 1;"])
        self.assertEqual(exit_code, EXIT_USAGE)
        self.assertIn("Failed to load config", error)


class TestRunner(unittest.TestCase):

    def test_errors_go_to_given_stream(self):
        errors = io.StringIO()
        lox = Lox(error_stream=errors)
        result = lox.check("var x = ;")
        self.assertTrue(result.had_error)
        self.assertEqual(errors.getvalue(), "[line 1] Error at ';': Expect expression.\n")

    def test_run_result_exit_codes(self):
        lox = Lox(error_stream=io.StringIO())
        with patch('sys.stdout', new_callable=io.StringIO):
            self.assertEqual(lox.run("print 1;").exit_code, EXIT_OK)
            self.assertEqual(lox.run("print ;").exit_code, EXIT_STATIC_ERROR)
            result = lox.run("print nope;")
        self.assertTrue(result.had_runtime_error)
        self.assertFalse(result.had_error)
        self.assertEqual(result.exit_code, EXIT_RUNTIME_ERROR)


if __name__ == '__main__':
    unittest.main()
