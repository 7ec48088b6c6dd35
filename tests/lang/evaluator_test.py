import unittest

from falconlike.lang.error import EvaluationError
from falconlike.lang.evaluator import Evaluator
from falconlike.lang.scope import Scope
from falconlike.lang.values import Float, Integer, String


class EvaluatorTestCase(unittest.TestCase):

    def setUp(self):
        self.scope = Scope()
        self.evaluator = Evaluator(self.scope)

    def test_literals(self):
        should_pass = {
            "5": Integer(5),
            " -12 ": Integer(-12),
            "2.5": Float(2.5),
            "\"hello world\"": String("hello world"),
            "\"\"": String(""),
            "\"5\"": String("5"),
            "unknown": String("unknown"),
            "\"": String("\""),
        }
        for case, result in should_pass.items():
            self.assertEqual(result, self.evaluator.evaluate(case), case)

    def test_lookup_order(self):
        self.scope.define_constant("limit", Integer(10))
        self.assertEqual(Integer(10), self.evaluator.evaluate("limit"))

        self.scope.assign("x", Integer(5))
        self.assertEqual(Integer(5), self.evaluator.evaluate("x"))
        self.assertEqual(String("x"), self.evaluator.evaluate("\"x\""))

        self.scope.assign("x", Integer(6))
        self.assertEqual(Integer(6), self.evaluator.evaluate("x"))

    def test_numbers_are_not_names(self):
        self.scope.assign("5", Integer(6))  # not reachable through let, but lookup still wins
        self.assertEqual(Integer(6), self.evaluator.evaluate("5"))

    def test_integer(self):
        self.scope.assign("flag", Integer(1))
        self.assertEqual(1, self.evaluator.integer("flag"))
        self.assertEqual(0, self.evaluator.integer("0"))

        should_fail = ["1.5", "\"1\"", "missing"]
        for case in should_fail:
            self.assertRaises(EvaluationError, self.evaluator.integer, case)

    def test_integer_error_carries_statement(self):
        statement = object()
        with self.assertRaises(EvaluationError) as context:
            self.evaluator.integer("missing", statement)
        self.assertIs(statement, context.exception.statement)
        self.assertEqual("missing", context.exception.expr)


class InterpolateTestCase(unittest.TestCase):

    def setUp(self):
        self.scope = Scope()
        self.evaluator = Evaluator(self.scope)

    def test_interpolate(self):
        self.scope.assign("name", String("World"))
        self.scope.assign("count", Integer(3))
        self.scope.assign("ratio", Float(2.0))
        self.scope.define_constant("PI", Float(3.14))

        should_pass = {
            "Hello ${name}!": "Hello World!",
            "${count} items at ${ratio}": "3 items at 2",
            "${PI}": "3.14",
            "Hello ${nobody}!": "Hello !",
            "no placeholders": "no placeholders",
            "${ name }": "${ name }",
            "${1x}": "${1x}",
            "$name": "$name",
            "${name}${name}": "WorldWorld",
        }
        for case, result in should_pass.items():
            self.assertEqual(result, self.evaluator.interpolate(case), case)

    def test_no_rescan(self):
        self.scope.assign("a", String("${b}"))
        self.scope.assign("b", String("nested"))
        self.assertEqual("${b}", self.evaluator.interpolate("${a}"))


if __name__ == '__main__':
    unittest.main()
