import contextlib
import io
import os
import tempfile
import unittest

from fncalc.lang.error import ErrorHandler
from fncalc.lang.session import Session
from fncalc.lang.shell import Shell
from fncalc.main import main


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.shell = Shell(Session(ErrorHandler()))

    def send(self, *lines):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            for line in lines:
                self.shell.onecmd(line)
        return out.getvalue()

    def test_evaluate(self):
        output = self.send("let x = 5", "x * 2", "(fn(y) => y)(3)")
        self.assertEqual(["x = 5", "10", "3"], output.splitlines())

    def test_errors_do_not_stop_shell(self):
        output = self.send("1 / 0", "nope", "1 + 1")
        self.assertIn("error: ", output)
        self.assertEqual("2", output.splitlines()[-1])
        self.assertFalse(self.shell.sess.error_handler.fatal)

    def test_continuation(self):
        self.assertEqual("", self.send("def add(a,"))
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)

        output = self.send("b) = a + b")
        self.assertEqual("Function add(a, b) defined", output.strip())
        self.assertEqual(Shell._tmp_prompt, self.shell.prompt)

    def test_panels(self):
        self.send("let a = 1", "let f = fn(x) => x", "def sq(x) = x * x")

        self.assertIn("1", self.send("vars"))
        self.assertIn("<function(x)>", self.send("closures"))
        self.assertIn("x * x", self.send("funcs"))

        history = self.send("history")
        self.assertIn("let a = 1", history)
        self.assertEqual(3, len(history.splitlines()))

    def test_command_names_as_identifiers(self):
        output = self.send("let history = 3", "history + 1", "def funcs(x) = x", "funcs(2)", "def help(x) = x * 2",
                           "help(4)", "let vars = fn(a) => a", "vars(5)")
        expected = ["history = 3", "4", "Function funcs(x) defined", "2", "Function help(x) defined", "8",
                    "vars = <function(a)>", "5"]
        self.assertEqual(expected, output.splitlines())

        self.assertEqual(len(expected), len(self.send("history").splitlines()))
        self.assertIn("error: ", self.send("exit + 1"))

    def test_parseline(self):
        cases = {
            "vars": ("vars", ""),
            "  history  ": ("history", ""),
            "tree 1 + 2": ("tree", "1 + 2"),
            "?": ("help", ""),
            "history(1)": (None, None),
            "exit - 1": (None, None),
            "vars x": (None, None),
            "tree(2)": (None, None),
            "let funcs = 2": (None, None),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.shell.parseline(case)[:2], case)

    def test_tree(self):
        expected = "BinaryOp(expr='1 + 2', nodes=[\n    NumberLiteral(expr='1'),\n    NumberLiteral(expr='2')\n])\n"
        self.assertEqual(expected, self.send("tree 1+2"))
        self.assertIn("error: ", self.send("tree 1 +"))
        self.assertEqual([], self.shell.history)

    def test_funcs_after_deep_definition(self):
        output = self.send("def f(a) = " + " + ".join(["a"] * 3000), "def g(x) = x + 1", "funcs")
        self.assertIn("error: ", output)
        self.assertIn("x + 1", output.splitlines()[-1])

    def test_comment_and_empty(self):
        self.assertEqual("", self.send(";; nothing here", ""))

    def test_exit(self):
        with contextlib.redirect_stdout(io.StringIO()):
            self.assertTrue(self.shell.onecmd("exit"))
            self.assertTrue(self.shell.onecmd("EOF"))


class MainTestCase(unittest.TestCase):

    def test_run_file(self):
        handle, path = tempfile.mkstemp(suffix=".calc")
        with os.fdopen(handle, "w") as file:
            file.write("let r = 2\ndef area(x) = 3 * x ^ 2\narea(r)\n")
        self.addCleanup(os.remove, path)

        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            main([path])
        self.assertEqual(["r = 2", "Function area(x) defined", "12"], out.getvalue().splitlines())

    def test_run_file_error_exits(self):
        handle, path = tempfile.mkstemp(suffix=".calc")
        with os.fdopen(handle, "w") as file:
            file.write("1 +\n")
        self.addCleanup(os.remove, path)

        with contextlib.redirect_stdout(io.StringIO()), self.assertRaises(SystemExit) as context:
            main([path])
        self.assertEqual(1, context.exception.code)


if __name__ == '__main__':
    unittest.main()
