import unittest

from fncalc.lang.error import ParseError, StackDepthExceededError
from fncalc.pure.grammar import AnonymousCall, BinaryOp, Call, Lambda, NumberLiteral, VariableRef
from fncalc.pure.lexical import tokenize
from fncalc.pure.parser import compile_expr, parse


class ParserTestCase(unittest.TestCase):

    def test_primaries(self):
        cases = {
            "42": NumberLiteral(42),
            "2.5": NumberLiteral(2.5),
            "5.": NumberLiteral(5),
            "x": VariableRef("x"),
            "f()": Call("f", []),
            "f(1, y)": Call("f", [NumberLiteral(1), VariableRef("y")]),
            "((x))": VariableRef("x"),
            "fn() => 1": Lambda([], NumberLiteral(1)),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, compile_expr(case), case)

    def test_precedence(self):
        cases = {
            "2 + 3 * 4": "2 + 3 * 4",
            "(2 + 3) * 4": "(2 + 3) * 4",
            "2 * 3 ^ 2": "2 * 3 ^ 2",
            "(2 * 3) ^ 2": "(2 * 3) ^ 2",
            "1 - 2 - 3": "1 - 2 - 3",
            "1 - (2 - 3)": "1 - (2 - 3)",
            "8 / 4 / 2": "8 / 4 / 2",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, compile_expr(case).expr, case)

    def test_left_associative(self):
        tree = compile_expr("2 ^ 3 ^ 2")
        self.assertIsInstance(tree, BinaryOp)
        self.assertEqual("^", tree.op)
        self.assertEqual(BinaryOp("^", NumberLiteral(2), NumberLiteral(3)), tree.left)
        self.assertEqual(NumberLiteral(2), tree.right)

        tree = compile_expr("1 - 2 + 3")
        self.assertEqual("+", tree.op)
        self.assertEqual("1 - 2", tree.left.expr)

    def test_lambda(self):
        tree = compile_expr("fn(x, y) => x + y * 2")
        self.assertIsInstance(tree, Lambda)
        self.assertEqual(("x", "y"), tree.params)
        self.assertEqual("x + y * 2", tree.body.expr)

        tree = compile_expr("fn(n) => fn(x) => x + n")
        self.assertIsInstance(tree.body, Lambda)
        self.assertEqual("fn(n) => fn(x) => x + n", tree.expr)

    def test_anonymous_call(self):
        tree = compile_expr("(fn(x) => x * x)(4)")
        self.assertIsInstance(tree, AnonymousCall)
        self.assertIsInstance(tree.function, Lambda)
        self.assertEqual((NumberLiteral(4),), tree.args)
        self.assertEqual("(fn(x) => x * x)(4)", tree.expr)

        self.assertIsInstance(compile_expr("(fn(x) => x)"), Lambda)
        self.assertIsInstance(compile_expr("(fn() => 1)()"), AnonymousCall)
        self.assertEqual("(fn(x) => x) + 1", compile_expr("(fn(x) => x) + 1").expr)

    def test_expr_reparses(self):
        should_pass = ["2 ^ (3 ^ 2)", "f(a, g(b)) / (c - d)", "(fn(x) => x)(fn(y) => y)", "fn(f) => f(1) ^ 2"]
        for case in should_pass:
            tree = compile_expr(case)
            self.assertEqual(tree, compile_expr(tree.expr), case)

    def test_parse_error(self):
        should_fail = [
            "",
            "2 +",
            "(2 + 3",
            "f(1, 2",
            "f(1,)",
            "fn x => x",
            "fn(x) x",
            "fn(1) => 1",
            "fn(x,) => x",
            "(fn(x) => x",
            "2 3",
            "x = 3",
            "let",
            "1.2.3",
            ")",
            "* 2",
        ]
        for case in should_fail:
            self.assertRaises(ParseError, compile_expr, case)

    def test_trailing_tokens(self):
        should_fail = ["1 2", "x)", "(fn(x) => x)(1)(2)", "f(1) (2)"]
        for case in should_fail:
            with self.assertRaises(ParseError, msg=case) as context:
                compile_expr(case)
            self.assertIn("unexpected trailing tokens", str(context.exception), case)

    def test_parse_tokens(self):
        self.assertEqual(NumberLiteral(3), parse(tokenize("3")))

    def test_deep_nesting(self):
        self.assertRaises(StackDepthExceededError, compile_expr, "(" * 5000 + "1" + ")" * 5000)

    def test_display(self):
        expected = ("BinaryOp(expr='f(x) * 2', nodes=[\n"
                    "    Call(expr='f(x)', nodes=[\n"
                    "        VariableRef(expr='x')\n"
                    "    ]),\n"
                    "    NumberLiteral(expr='2')\n"
                    "])")
        self.assertEqual(expected, compile_expr("f(x) * 2").display())
        self.assertEqual("NumberLiteral(expr='7')", compile_expr("7").display())

    def test_shared_body(self):
        tree = compile_expr("fn(x) => x + 1")
        self.assertIs(tree.body, tree.nodes[0])


if __name__ == '__main__':
    unittest.main()
