"""Session control for the fncalc language. A Session owns one pair of global tables (variables and named functions)
and evaluates statements against them, either one line at a time from the shell or from a script file.

Sessions share nothing: two Session objects in the same process are fully independent.
"""

from dataclasses import dataclass

from fncalc.lang.error import GenericException, StackDepthExceededError
from fncalc.lang.lexical import Grammar
from fncalc.lang.numerical import display
from fncalc.pure.evaluator import Closure, Evaluator


@dataclass
class FunctionInfo:
    """Descriptor of a named function, for display."""
    name: str
    params: tuple
    body: str

    def __str__(self):
        return f"{self.name}({', '.join(self.params)}) = {self.body}"


class Session:
    """Governs a fncalc session: its global variables, its named functions and the evaluation of statements."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = ";;"

    def __init__(self, error_handler=None, path=SH_FILE, max_depth=None):
        self.error_handler = error_handler
        self.path = path  # used for error messages

        self.variables = {}  # name: float or Closure
        self.functions = {}  # name: FunctionDef
        self.evaluator = Evaluator(self.variables, self.functions, max_depth)

        if self.error_handler is not None:
            self.error_handler.register_file(path)
            if path == Session.SH_FILE:
                self.error_handler.fatal = False

    @staticmethod
    def preprocess_line(line, add_to_prev, stmts=None):
        """Preprocesses a line from a file or command-line. stmts, if given, is the list of (line, line_num) read so far
        and is updated in place. Returns updated value of line and whether or not the next line continues it.
        """
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]  # get rid of comments

        line = line.rstrip()
        if stmts is not None and add_to_prev:
            prev, line_num = stmts.pop()
            line = prev + " " + line.strip()
            stmts.append((line, line_num))

        return line, line.count("(") > line.count(")")

    def load(self):
        """Returns list of (statement, line_num) read from self.path."""
        stmts = []
        add_to_prev = False

        try:
            with open(self.path, "r") as file:
                for line_num, line in enumerate(file, start=1):
                    if not add_to_prev:
                        if not line.strip() or line.strip().startswith(Session.COMMENT):
                            continue
                        stmts.append(("", line_num))
                        add_to_prev = True
                    __, add_to_prev = Session.preprocess_line(line, add_to_prev, stmts)
        except OSError:
            raise GenericException("'{}' could not be opened", self.path, diagnosis=False)

        return [(stmt.strip(), line_num) for stmt, line_num in stmts if stmt.strip()]

    def evaluate(self, line):
        """Evaluates one statement. Returns a float for numeric expressions and a display string otherwise. Raises a
        GenericException on failure, in which case neither table has been modified.
        """
        try:
            return Grammar.infer(line).execute(self)
        except RecursionError:
            raise StackDepthExceededError(self.evaluator.max_depth) from None

    def run(self):
        """Evaluates every statement in self.path in order, yielding one display string per statement. Stops at the
        first error, which is raised.
        """
        for line, line_num in self.load():
            if self.error_handler is not None:
                self.error_handler.register_line(self.path, line, line_num)

            result = display(self.evaluate(line))

            if self.error_handler is not None:
                self.error_handler.remove_line(self.path)
            yield result

    def warn(self, msg, *exprs):
        """Reports a warning through the error handler, if there is one."""
        if self.error_handler is not None:
            self.error_handler.warn(msg, exprs, diagnosis=False)

    def get_variables(self):
        """Returns dict of global numeric variables. Closures are excluded (see get_closures)."""
        return {name: value for name, value in self.variables.items() if not isinstance(value, Closure)}

    def get_closures(self):
        """Returns list of names whose global binding is a closure."""
        return [name for name, value in self.variables.items() if isinstance(value, Closure)]

    def get_functions(self):
        """Returns list of FunctionInfo for every named function."""
        return [FunctionInfo(name, func.params, func.source) for name, func in self.functions.items()]
