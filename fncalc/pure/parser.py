"""Recursive-descent parser from a token list (see fncalc.pure.lexical) to an expression tree (see
fncalc.pure.grammar).

```
<expression>     ::= <additive>
<additive>       ::= <multiplicative> (("+" | "-") <multiplicative>)*
<multiplicative> ::= <power> (("*" | "/") <power>)*
<power>          ::= <primary> ("^" <primary>)*                      ; left-associative, unlike maths convention
<primary>        ::= <number>
                   | "fn" "(" <params>? ")" "=>" <expression>        ; lambda literal
                   | <identifier> ("(" <args>? ")")?                 ; call or variable
                   | "(" <lambda> ")" ("(" <args>? ")")?             ; lambda, optionally invoked immediately
                   | "(" <expression> ")"
<params>         ::= <identifier> ("," <identifier>)*
<args>           ::= <expression> ("," <expression>)*
```

The whole token list must be consumed: anything left before END is an error.
"""

from fncalc.lang.error import ParseError, StackDepthExceededError
from fncalc.pure.grammar import AnonymousCall, BinaryOp, Call, Lambda, NumberLiteral, VariableRef
from fncalc.pure.lexical import Kind, tokenize


class Parser:
    """Parses a single expression from a list of tokens. original_expr is the tokenized text, used for diagnoses."""

    def __init__(self, tokens, original_expr=""):
        self.tokens = tokens
        self.original_expr = original_expr
        self.pos = 0

    @property
    def current(self):
        return self.tokens[self.pos]

    def advance(self):
        """Consumes and returns the current token. END is never consumed."""
        token = self.current
        if not token.matches(Kind.END):
            self.pos += 1
        return token

    def accept(self, kind, lexeme=None):
        """Consumes current token and returns it if it matches, else returns None."""
        if self.current.matches(kind, lexeme):
            return self.advance()
        return None

    def expect(self, kind, what):
        """Consumes current token, which must be of kind. what describes the expected construct."""
        token = self.accept(kind)
        if token is None:
            raise self.error(f"expected {what}, got {{}}", self.current)
        return token

    def error(self, msg, token):
        """ParseError for msg (with one '{}' placeholder for token), pointing at token."""
        if token.matches(Kind.END):
            return ParseError(msg.replace("{}", "end of input"), self.original_expr, diagnosis=False)
        start = token.pos
        return ParseError(msg.replace("{}", f"'{token.lexeme}'"), self.original_expr, start=start,
                          end=start + len(token.lexeme))

    def parse(self):
        """Returns the expression tree for all of self.tokens."""
        try:
            tree = self.expression()
        except RecursionError:
            raise StackDepthExceededError() from None

        if not self.current.matches(Kind.END):
            raise self.error("unexpected trailing tokens starting at {}", self.current)
        return tree

    def expression(self):
        return self.additive()

    def _binary(self, operand, operators):
        """Left-associative chain of operand separated by any of operators."""
        left = operand()
        while self.current.kind is Kind.OPERATOR and self.current.lexeme in operators:
            op = self.advance().lexeme
            left = BinaryOp(op, left, operand())
        return left

    def additive(self):
        return self._binary(self.multiplicative, "+-")

    def multiplicative(self):
        return self._binary(self.power, "*/")

    def power(self):
        return self._binary(self.primary, "^")

    def primary(self):
        token = self.current

        if self.accept(Kind.NUMBER):
            try:
                return NumberLiteral(token.lexeme)
            except ValueError:
                raise self.error("invalid number {}", token) from None

        elif token.matches(Kind.KEYWORD, "fn"):
            return self.lambda_()

        elif self.accept(Kind.IDENTIFIER):
            if self.accept(Kind.LPAREN):
                return Call(token.lexeme, self.args())
            return VariableRef(token.lexeme)

        elif self.accept(Kind.LPAREN):
            if self.current.matches(Kind.KEYWORD, "fn"):
                function = self.lambda_()
                self.expect(Kind.RPAREN, "')' after lambda expression")
                if self.accept(Kind.LPAREN):
                    return AnonymousCall(function, self.args())
                return function

            tree = self.expression()
            self.expect(Kind.RPAREN, "')'")
            return tree

        raise self.error("unexpected token {}", token)

    def lambda_(self):
        """fn(params) => body, with the current token at 'fn'."""
        self.advance()
        self.expect(Kind.LPAREN, "'(' after 'fn'")

        params = []
        if not self.accept(Kind.RPAREN):
            params.append(self.expect(Kind.IDENTIFIER, "parameter name").lexeme)
            while self.accept(Kind.COMMA):
                params.append(self.expect(Kind.IDENTIFIER, "parameter name after ','").lexeme)
            self.expect(Kind.RPAREN, "')' after parameters")

        self.expect(Kind.ARROW, "'=>' after parameter list")
        return Lambda(params, self.expression())

    def args(self):
        """Comma-separated argument expressions, with the opening '(' already consumed."""
        args = []
        if not self.accept(Kind.RPAREN):
            args.append(self.expression())
            while self.accept(Kind.COMMA):
                args.append(self.expression())
            self.expect(Kind.RPAREN, "')' after arguments")
        return args


def parse(tokens, original_expr=""):
    """Returns the expression tree for tokens. Raises ParseError on malformed input."""
    return Parser(tokens, original_expr).parse()


def compile_expr(text):
    """Tokenizes and parses text."""
    return parse(tokenize(text), text)
