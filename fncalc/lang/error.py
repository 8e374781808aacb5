"""Error handling for the fncalc language. Only GenericExceptions should be encountered during evaluation: if another
type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a fncalc error/warning. str() of the
    exception is the plain message, while msg holds the same message with the offending snippets bolded.
    """

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        """Parses args for GenericException or warning."""
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]
        exprs = [str(expr) for expr in exprs]

        super().__init__(msg.format(*exprs))
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0]  # exprs[0] should be the offending expr that caused the error
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal


class LexError(GenericException):
    """Raised when the lexer meets a character that starts no token."""

    def __init__(self, text, position):
        self.position = position
        self.char = text[position]
        super().__init__("'{}' contains unexpected character '{}'", (text, self.char), start=position, end=position + 1)


class ParseError(GenericException):
    """Malformed statement or expression syntax."""


class InvalidNameError(GenericException):
    """Raised when a variable, function or parameter name is not a valid identifier."""

    def __init__(self, name, kind="variable", original_expr=""):
        super().__init__("invalid {} name '{}'", (kind, name))
        self.name = name

        start = original_expr.find(name) if name else -1  # point the diagnosis at the name, if it can be found
        self.expr = original_expr
        self.start = max(start, 0)
        self.end = self.start + len(name)
        self.diagnosis = start != -1


class DuplicateParamError(GenericException):
    """Raised when a def repeats a parameter name."""

    def __init__(self, name, original_expr=""):
        self.name = name
        super().__init__("duplicate parameter '{}' in '{}'", (name, original_expr), diagnosis=False)


class UndefinedVariableError(GenericException):
    """Name not bound in the local frame nor in the global variable table."""

    def __init__(self, name):
        self.name = name
        super().__init__("undefined variable '{}'", name, diagnosis=False)


class UndefinedCallableError(GenericException):
    """Name bound neither to a named function nor to a closure."""

    def __init__(self, name):
        self.name = name
        super().__init__("undefined function or closure '{}'", name, diagnosis=False)


class TypeMismatchError(GenericException):
    """Arithmetic on a function value, or a non-function used where a function was expected."""

    def __init__(self, msg, *exprs):
        super().__init__(msg, exprs, diagnosis=False)


class DivisionByZeroError(GenericException):
    """Division with a divisor of exactly zero."""

    def __init__(self, expr=""):
        super().__init__("division by zero in '{}'", expr, diagnosis=False)


class ArityError(GenericException):
    """Call with the wrong number of arguments."""

    def __init__(self, expected, got, name="<anonymous>"):
        self.expected = expected
        self.got = got
        self.name = name
        super().__init__("'{}' expects {} argument(s), got {}", (name, expected, got), diagnosis=False)


class StackDepthExceededError(GenericException):
    """Raised by the recursion guard instead of letting the host stack overflow."""

    def __init__(self, limit=None):
        self.limit = limit
        if limit is None:  # host recursion limit, hit while parsing
            super().__init__("maximum nesting depth exceeded", diagnosis=False)
        else:
            super().__init__("maximum evaluation depth of {} exceeded", str(limit), diagnosis=False)


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report fncalc errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session evaluate."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after a successful Session evaluate."""
        self.traceback[path] = (None, None)

    @staticmethod
    def diagnose(error, warning=False):
        """Returns offending part of error.expr highlighted and bolded."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, error.start + 1)
        diagnosis += colored(error.expr[error.start:end], color, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), color, attrs=["bold"])

        return diagnosis

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        error = GenericException(*args, **kwargs)

        error_msg = ""
        for file, (line, line_num) in self.traceback.items():
            if line:
                error_msg = colored(f"{file}:{line_num}: ", attrs=["bold"])
                break
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg

        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error, warning=True))

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error))

        if self.fatal:
            sys.exit(1)
        self.traceback = {path: (None, None) for path in self.traceback}  # reset traceback, keep registered files

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
