"""Statement grammar for the fncalc language, a shallow wrapper around calculator expressions (see fncalc.pure). Each
line of input is exactly one statement:

```
<let_stmt>  ::= "let" <name> "=" <expression>                ; binds a number or a closure globally
<def_stmt>  ::= "def" <name> "(" <names>? ")" "=" <expression>  ; named function, body evaluated on each call
<expr_stmt> ::= <expression>                                  ; evaluated and shown

<name>      ::= [A-Za-z_][A-Za-z0-9_]*                        ; keywords excluded
<names>     ::= <name> ("," <name>)*                          ; no repeats
```

Statements are split on raw text before anything is tokenized, because the right-hand side of a let may itself
contain the "=" of a lambda arrow.
"""

from abc import abstractmethod, ABC
import re

from fncalc.lang.error import DuplicateParamError, InvalidNameError, ParseError
from fncalc.lang.numerical import display
from fncalc.pure.evaluator import Closure, FunctionDef
from fncalc.pure.lexical import KEYWORDS
from fncalc.pure.parser import compile_expr


NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class Grammar(ABC):
    """Superclass representing any statement in the fncalc language."""

    def __init__(self, expr, original_expr=None):
        """Assumes check_grammar has been run."""
        if original_expr is None:
            original_expr = expr

        self.expr = Grammar.preprocess(expr)
        self.original_expr = original_expr  # used for errors messages
        self._cls = type(self).__name__

    @staticmethod
    @abstractmethod
    def check_grammar(expr):
        """This method should check expr's top-level grammar and return whether or not it is of this statement type."""

    @abstractmethod
    def execute(self, session):
        """Runs this statement against session's tables and returns the value to display."""

    @staticmethod
    def preprocess(expr):
        """Removes surrounding whitespace."""
        return expr.strip()

    @staticmethod
    def check_name(name, original_expr, kind="variable"):
        """Raises InvalidNameError if name is not a usable identifier."""
        if not NAME.fullmatch(name) or name in KEYWORDS:
            raise InvalidNameError(name, kind, original_expr)
        return name

    @classmethod
    def infer(cls, expr):
        """Infers the statement type of expr and returns an object of the matching Grammar subclass."""
        for subclass in cls.__subclasses__():
            if subclass.check_grammar(Grammar.preprocess(expr)):
                return subclass(expr)

        raise ParseError("'{}' is not valid fncalc grammar", expr)

    def __repr__(self):
        return f"{self._cls}('{self.expr}')"

    def __str__(self):
        return self.expr


class LetStmt(Grammar):
    """Variable binding: let <name> = <expression>. The expression is evaluated when the statement is executed."""
    KEYWORD = re.compile(r"let\b")

    def __init__(self, expr, original_expr=None):
        super().__init__(expr, original_expr)

        rest = self.expr[3:]
        eq = LetStmt.find_equals(rest)
        if eq == -1:
            raise ParseError("'{}' is missing '=': expected let NAME = EXPRESSION", self.original_expr, diagnosis=False)

        self.name = Grammar.check_name(rest[:eq].strip(), self.original_expr)
        self.term = compile_expr(rest[eq + 1:].strip())

    @staticmethod
    def check_grammar(expr):
        return LetStmt.KEYWORD.match(expr) is not None

    @staticmethod
    def find_equals(expr):
        """Index of the first '=' in expr that does not begin a '=>', or -1."""
        for idx, char in enumerate(expr):
            if char == "=" and not expr.startswith("=>", idx):
                return idx
        return -1

    def execute(self, session):
        value = session.evaluator.evaluate(self.term)  # nothing is written unless this succeeds

        if isinstance(value, Closure) and self.name in session.functions:
            session.warn("closure '{}' is shadowed in calls by the named function of the same name", self.name)

        session.variables[self.name] = value
        return f"{self.name} = {display(value)}"


class DefStmt(Grammar):
    """Named function definition: def <name>(<params>) = <expression>. The body is parsed, not evaluated."""
    KEYWORD = re.compile(r"def\b")
    FORMAT = re.compile(r"def(?P<name>[^(]*)\((?P<params>[^)]*)\)\s*=(?!>)(?P<body>.*)", re.DOTALL)

    def __init__(self, expr, original_expr=None):
        super().__init__(expr, original_expr)

        match = DefStmt.FORMAT.fullmatch(self.expr)
        if not match:
            msg = "'{}' is not a valid function definition: expected def NAME(PARAMS) = EXPRESSION"
            raise ParseError(msg, self.original_expr, diagnosis=False)

        self.name = Grammar.check_name(match["name"].strip(), self.original_expr, "function")

        self.params = []
        if match["params"].strip():
            for param in match["params"].split(","):
                param = Grammar.check_name(param.strip(), self.original_expr, "parameter")
                if param in self.params:
                    raise DuplicateParamError(param, self.original_expr)
                self.params.append(param)

        self.term = compile_expr(match["body"].strip())

    @staticmethod
    def check_grammar(expr):
        return DefStmt.KEYWORD.match(expr) is not None

    def execute(self, session):
        source = self.term.expr  # rendered before anything is written; may overflow on very deep bodies

        if isinstance(session.variables.get(self.name), Closure):
            session.warn("named function '{}' shadows the closure of the same name in calls", self.name)

        session.functions[self.name] = FunctionDef(tuple(self.params), self.term, source)
        return f"Function {self.name}({', '.join(self.params)}) defined"


class ExprStmt(Grammar):
    """Bare expression, evaluated and returned: numbers as floats, closures as '<function(params)>'."""

    def __init__(self, expr, original_expr=None):
        super().__init__(expr, original_expr)
        self.term = compile_expr(self.expr)

    @staticmethod
    def check_grammar(expr):
        return True

    def execute(self, session):
        value = session.evaluator.evaluate(self.term)
        if isinstance(value, Closure):
            return str(value)
        return value
