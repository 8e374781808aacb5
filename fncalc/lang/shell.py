"""Handles interactive/command-line mode for the fncalc interpreter. Uses cmd as backend."""

import cmd

from termcolor import colored

from fncalc.lang.error import StackDepthExceededError
from fncalc.lang.numerical import display, number
from fncalc.pure.parser import compile_expr


class Shell(cmd.Cmd):
    """fncalc interpreter shell."""
    intro = "fncalc :: calculator with first-class functions\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    COMMANDS = {"vars", "closures", "funcs", "history", "exit", "EOF"}  # only ever a whole line
    ARG_COMMANDS = {"help", "tree"}  # may be followed by an argument
    NOT_ARGS = "+-*/^(),="  # an argument starting with one of these makes the line a fncalc statement

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.history = []  # (line, display value) of every successful statement

        self._tmp_line = ""
        self.line_num = 0

    def parseline(self, line):
        """Splits line like cmd.Cmd.parseline, but only recognizes a shell command where line cannot be a fncalc
        statement: a command name on its own, or help/tree followed by an argument that does not start with an
        operator. Anything else, including every line of a continuation, is returned as (None, None, line) so that it
        reaches default.
        """
        command, arg, parsed = super().parseline(line)

        if not self._tmp_line:
            if command in Shell.COMMANDS and not arg:
                return command, arg, parsed
            if command in Shell.ARG_COMMANDS and not (arg and arg[0] in Shell.NOT_ARGS):
                return command, arg, parsed

        return None, None, line.strip()

    def default(self, line):
        """Evaluates arbitrary fncalc statement."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            line, add_to_prev = self.sess.preprocess_line(self._tmp_line + " " + line, False)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            line = line.strip()
            if not line:
                return

            self.sess.error_handler.register_line(self.sess.path, line, self.line_num)
            result = display(self.sess.evaluate(line))
            self.sess.error_handler.remove_line(self.sess.path)

            self.history.append((line, result))
            print(result)

    def do_vars(self, arg):
        """Lists global variables holding numbers."""
        for name, value in self.sess.get_variables().items():
            print(f"{colored(name, attrs=['bold'])} = {number(value)}")

    def do_closures(self, arg):
        """Lists global variables holding functions."""
        for name in self.sess.get_closures():
            print(f"{colored(name, attrs=['bold'])} = {display(self.sess.variables[name])}")

    def do_funcs(self, arg):
        """Lists named functions created with def."""
        for info in self.sess.get_functions():
            print(f"{colored(info.name, attrs=['bold'])}({', '.join(info.params)}) = {info.body}")

    def do_history(self, arg):
        """Lists the statements evaluated so far and their results."""
        for line, result in self.history:
            print(f"{line}  =>  {result}")

    def do_tree(self, arg):
        """Shows the expression tree arg parses to."""
        with self.sess.error_handler:
            tree = compile_expr(arg)
            try:
                print(tree.display())
            except RecursionError:
                raise StackDepthExceededError() from None

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to fncalc!\n\n"
              "Type an expression such as '2 + 3 * 4' to evaluate it. Note that '^' associates to the\n"
              "left: '2 ^ 3 ^ 2' is 64. Bind a variable with 'let x = 5' and define a function with\n"
              "'def sq(x) = x * x'. Functions are values too: 'let add = fn(a, b) => a + b' binds a\n"
              "closure, and '(fn(x) => x * x)(4)' calls one immediately.\n\n"
              "Commands: vars, closures, funcs, history, tree EXPRESSION, help, exit. A command is only recognized\n"
              "on a line of its own, so 'let history = 3' and 'history + 1' are ordinary statements.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
