import io
import unittest

from falconlike.lang.error import ErrorHandler, EvaluationError, FalconError, MalformedStatement, ResourceError
from falconlike.lang.lexical import Line


class Located:
    def __init__(self, source, path="test.fal", line_num=3):
        self.line = Line(path, line_num, source)


class FalconErrorTestCase(unittest.TestCase):

    def test_message(self):
        error = EvaluationError("'{}' expects {} argument(s), got {}", ("greet", 2, 1))
        self.assertEqual("'greet' expects 2 argument(s), got 1", str(error))
        self.assertEqual("greet", error.expr)
        self.assertIsNone(error.statement)

    def test_single_expr(self):
        error = ResourceError("invalid sleep time '{}'", "soon")
        self.assertEqual("invalid sleep time 'soon'", str(error))
        self.assertEqual("soon", error.expr)

    def test_hierarchy(self):
        for cls in (MalformedStatement, EvaluationError, ResourceError):
            self.assertTrue(issubclass(cls, FalconError), cls)


class ErrorHandlerTestCase(unittest.TestCase):

    def setUp(self):
        self.error_handler = ErrorHandler(stream=io.StringIO())

    def report(self):
        return self.error_handler.stream.getvalue()

    def test_throw(self):
        error = EvaluationError("bad '{}'", "cond", statement=Located("    if cond"))
        self.error_handler.throw(error)

        report = self.report()
        self.assertIn("test.fal:3:", report)
        self.assertIn("error: ", report)
        self.assertIn("if ", report)
        self.assertIn("^~~~", report)
        self.assertNotIn("Traceback", report)
        self.assertEqual(1, self.error_handler.errors)

    def test_throw_without_statement(self):
        self.error_handler.throw(ResourceError("'{}' could not be opened: {}", ("x.fal", "No such file")))
        self.assertIn("could not be opened", self.report())
        self.assertEqual(1, self.error_handler.errors)

    def test_traceback(self):
        self.error_handler.register_file("main.fal")
        self.error_handler.register_line("main.fal", "include \"lib.fal\"", 1)
        self.error_handler.register_file("lib.fal")
        self.error_handler.register_line("lib.fal", "if x", 2)

        self.error_handler.throw(EvaluationError("bad '{}'", "x", statement=Located("if x", "lib.fal", 2)))
        report = self.report()
        self.assertIn("Traceback:\n  File 'main.fal', line 1:\n    include \"lib.fal\"\n", report)
        self.assertIn("lib.fal:2:", report)

    def test_register_and_remove_line(self):
        self.error_handler.register_file("a.fal")
        previous = self.error_handler.register_line("a.fal", "outer", 1)
        inner_previous = self.error_handler.register_line("a.fal", "inner", 2)
        self.assertEqual((None, None), previous)
        self.assertEqual(("outer", 1), inner_previous)

        self.error_handler.remove_line("a.fal", inner_previous)
        self.assertEqual(("outer", 1), self.error_handler.traceback["a.fal"])

        self.error_handler.release_file("a.fal")
        self.assertEqual({}, self.error_handler.traceback)

    def test_diagnose(self):
        self.assertIsNone(ErrorHandler.diagnose("let x = 5", "y"))
        self.assertIsNone(ErrorHandler.diagnose("let x = 5", ""))

        self.assertIn("^", ErrorHandler.diagnose("let x = 5", "5"))
        self.assertIn("^~~~", ErrorHandler.diagnose("let x = five", "five"))

    def test_warn(self):
        self.error_handler.warn(FalconError("'{}' block is never closed", "while", statement=Located("while x")))
        self.assertIn("warning: ", self.report())
        self.assertEqual(1, self.error_handler.warnings)
        self.assertEqual(0, self.error_handler.errors)

    def test_fatal(self):
        self.error_handler.fatal = True
        with self.assertRaises(SystemExit) as context:
            self.error_handler.throw(FalconError("stop"))
        self.assertEqual(1, context.exception.code)

    def test_context_manager(self):
        with self.error_handler:
            raise EvaluationError("suppressed")
        self.assertEqual(1, self.error_handler.errors)

        with self.error_handler:
            raise KeyboardInterrupt
        self.assertIn("keyboard interrupt", self.report())

        with self.assertRaises(SystemExit):
            with self.error_handler:
                raise SystemExit(0)

        with self.assertRaises(ZeroDivisionError):
            with self.error_handler:
                raise ZeroDivisionError("internal")
        self.assertIn("[internal]", self.report())


if __name__ == '__main__':
    unittest.main()
