"""Tree-walking evaluation of calculator expressions.

An Evaluator holds references to a session's two global tables and evaluates expression trees against a local frame
(a plain dict) stacked over them. Scoping rules:

- Names resolve in the local frame first, then in the live global variable table.
- A lambda literal evaluates to a Closure over a snapshot of the numeric bindings visible at that point: locals
  first, then globals not already captured. Function values are never captured, so a closure-valued local is not
  reachable from the new closure's body, while a closure-valued global still is through the live global table.
- A named function (def) runs in a fresh frame holding only its parameters, so its free names are late-bound to
  whatever the globals hold at call time. A closure runs in its snapshot plus its parameters.
"""

from dataclasses import dataclass, field

from fncalc.lang.error import ArityError, StackDepthExceededError, UndefinedCallableError, UndefinedVariableError


@dataclass
class FunctionDef:
    """Named function created by def. Has no captured environment. source is the body rendered once at definition,
    so listing functions never walks the tree again.
    """
    params: tuple
    body: object
    source: str = ""

    def __str__(self):
        return f"<function({', '.join(self.params)})>"


@dataclass
class Closure:
    """Function value created by a lambda literal. env maps names to the numbers captured when it was created; body is
    shared with the literal, never copied.
    """
    params: tuple
    body: object
    env: dict = field(default_factory=dict)

    def __str__(self):
        return f"<function({', '.join(self.params)})>"


class Evaluator:
    """Evaluates expression trees against a session's global tables, with a guard on evaluation depth."""
    MAX_DEPTH = 300  # two or three host frames per level, well inside the default recursion limit

    def __init__(self, variables, functions, max_depth=None):
        self.variables = variables  # name: float or Closure, shared with the session
        self.functions = functions  # name: FunctionDef, shared with the session
        self.max_depth = max_depth if max_depth is not None else Evaluator.MAX_DEPTH
        self.depth = 0

    def evaluate(self, node, frame=None):
        """Returns value of node evaluated in frame (defaults to an empty frame). Raises StackDepthExceededError
        if nested node evaluations, calls included, go deeper than self.max_depth, or if the host stack runs out first.
        """
        if frame is None:
            frame = {}

        if self.depth >= self.max_depth:
            raise StackDepthExceededError(self.max_depth)

        self.depth += 1
        try:
            return node.evaluate(self, frame)
        except RecursionError:
            if self.depth > 1:
                raise  # converted once, by the outermost call
            raise StackDepthExceededError(self.max_depth) from None
        finally:
            self.depth -= 1

    def lookup(self, name, frame):
        """Value bound to name in frame, else in the global variable table."""
        if name in frame:
            return frame[name]
        elif name in self.variables:
            return self.variables[name]
        raise UndefinedVariableError(name)

    def capture(self, frame):
        """Snapshot of the numeric bindings visible from frame, locals shadowing globals."""
        env = {name: value for name, value in frame.items() if not isinstance(value, Closure)}
        for name, value in self.variables.items():
            if name not in env and not isinstance(value, Closure):
                env[name] = value
        return env

    def resolve(self, name, frame):
        """Returns the FunctionDef or Closure that a call of name refers to. Named functions take precedence over
        closure-valued bindings.
        """
        if name in self.functions:
            return self.functions[name]

        try:
            value = self.lookup(name, frame)
        except UndefinedVariableError:
            raise UndefinedCallableError(name) from None

        if not isinstance(value, Closure):
            raise UndefinedCallableError(name)
        return value

    def apply(self, callee, args, frame, name="<anonymous>"):
        """Calls callee (FunctionDef or Closure) with args, a sequence of expressions evaluated left to right in the
        caller's frame.
        """
        if len(args) != len(callee.params):
            raise ArityError(len(callee.params), len(args), name)

        values = [self.evaluate(arg, frame) for arg in args]

        if isinstance(callee, Closure):
            scope = dict(callee.env)
        else:
            scope = {}  # named functions see their parameters and the live globals only
        scope.update(zip(callee.params, values))

        return self.evaluate(callee.body, scope)
