"""Expression tree for the calculator language. Trees are built by fncalc.pure.parser and never mutated afterwards, so
a body can be shared by reference between a named function, its call sites and every closure created from the same
lambda literal.

Each node knows how to render itself back to source text (expr) and how to evaluate itself against a local frame,
given the session's Evaluator. Precedence, lowest to highest:

```
lambda   fn(...) => ...   ; body extends as far right as possible
additive + -              ; left-associative
multipl. * /              ; left-associative
power    ^                ; left-associative too: 2^3^2 = (2^3)^2
primary  numbers, names, calls, parenthesized expressions
```
"""

from abc import abstractmethod, ABC

from fncalc.lang.error import TypeMismatchError
from fncalc.lang.numerical import display, number, OPERATORS
from fncalc.pure.evaluator import Closure


class Expression(ABC):
    """Superclass representing any node in an expression tree."""
    PRECEDENCE = 4  # primaries bind tighter than any operator

    def __init__(self, *nodes):
        self.nodes = tuple(nodes)
        self._cls = type(self).__name__

    @property
    @abstractmethod
    def expr(self):
        """Source text of this node, with parentheses only where precedence requires them."""

    @abstractmethod
    def evaluate(self, evaluator, frame):
        """Evaluates this node in frame, a dict of local bindings layered over evaluator's globals. Sub-nodes must be
        evaluated through evaluator.evaluate so that the depth guard sees them.
        """

    def wrap(self, parent_precedence, right=False):
        """Returns self.expr, parenthesized if it would not otherwise parse back as a child of parent_precedence."""
        if self.PRECEDENCE < parent_precedence or (right and self.PRECEDENCE == parent_precedence):
            return f"({self.expr})"
        return self.expr

    def display(self, indents=0):
        """Recursively displays expression tree with readable format.

        Format:
        <Expression>(expr='<expr>', nodes=[
            <Expression>(expr='<expr>', nodes=[
                ...
                <Expression>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{self._cls}(expr='{self.expr}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __repr__(self):
        return f"{self._cls}('{self.expr}')"

    def __str__(self):
        return self.expr

    def __eq__(self, other):
        return isinstance(other, type(self)) and self.expr == other.expr

    def __hash__(self):
        return hash(self.expr)


class NumberLiteral(Expression):
    """Float literal."""

    def __init__(self, value):
        super().__init__()
        self.value = float(value)

    @property
    def expr(self):
        return number(self.value)

    def evaluate(self, evaluator, frame):
        return self.value


class VariableRef(Expression):
    """Name looked up in the local frame, then in the global variable table."""

    def __init__(self, name):
        super().__init__()
        self.name = name

    @property
    def expr(self):
        return self.name

    def evaluate(self, evaluator, frame):
        return evaluator.lookup(self.name, frame)


class BinaryOp(Expression):
    """Arithmetic on two numbers. Function values are rejected on either side."""
    PRECEDENCES = {"+": 1, "-": 1, "*": 2, "/": 2, "^": 3}

    def __init__(self, op, left, right):
        super().__init__(left, right)
        self.op = op
        self.PRECEDENCE = BinaryOp.PRECEDENCES[op]

    @property
    def left(self):
        return self.nodes[0]

    @property
    def right(self):
        return self.nodes[1]

    @property
    def expr(self):
        return f"{self.left.wrap(self.PRECEDENCE)} {self.op} {self.right.wrap(self.PRECEDENCE, right=True)}"

    def evaluate(self, evaluator, frame):
        left = evaluator.evaluate(self.left, frame)
        right = evaluator.evaluate(self.right, frame)

        for side in (left, right):
            if isinstance(side, Closure):
                raise TypeMismatchError("cannot apply '{}' to function value {}", self.op, side)

        return OPERATORS[self.op](left, right)


class Lambda(Expression):
    """Anonymous function literal: fn(params) => body. Evaluates to a Closure without evaluating body."""
    PRECEDENCE = 0  # body is greedy, so a lambda operand always needs parentheses

    def __init__(self, params, body):
        super().__init__(body)
        self.params = tuple(params)

    @property
    def body(self):
        return self.nodes[0]

    @property
    def expr(self):
        return f"fn({', '.join(self.params)}) => {self.body.expr}"

    def evaluate(self, evaluator, frame):
        return Closure(self.params, self.body, evaluator.capture(frame))


class Call(Expression):
    """Call of a named function, or of a closure bound to a name."""

    def __init__(self, name, args):
        super().__init__(*args)
        self.name = name

    @property
    def args(self):
        return self.nodes

    @property
    def expr(self):
        return f"{self.name}({', '.join(arg.expr for arg in self.args)})"

    def evaluate(self, evaluator, frame):
        callee = evaluator.resolve(self.name, frame)
        return evaluator.apply(callee, self.args, frame, self.name)


class AnonymousCall(Expression):
    """Immediately invoked lambda literal: (fn(params) => body)(args)."""

    def __init__(self, function, args):
        super().__init__(function, *args)

    @property
    def function(self):
        return self.nodes[0]

    @property
    def args(self):
        return self.nodes[1:]

    @property
    def expr(self):
        return f"({self.function.expr})({', '.join(arg.expr for arg in self.args)})"

    def evaluate(self, evaluator, frame):
        closure = evaluator.evaluate(self.function, frame)
        if not isinstance(closure, Closure):
            raise TypeMismatchError("expected a function, got '{}'", display(closure))
        return evaluator.apply(closure, self.args, frame)
