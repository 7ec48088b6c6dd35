import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from falconlike.lang.engine import Engine
from falconlike.lang.error import ErrorHandler, FalconError, ResourceError
from falconlike.lang.session import Session
from falconlike.lang.shell import Shell


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.error_handler = ErrorHandler(stream=io.StringIO())
        self.engine = Engine(self.error_handler, stdout=io.StringIO())

    def output(self):
        return self.engine.stdout.getvalue()

    def test_file(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "prog.fal")
            with open(path, "w", encoding="utf-8") as file:
                file.write(f"print \"start\"\ninclude \"{path}\"\nprint \"end\"\n")

            Session(self.error_handler, path, self.engine).run()

        self.assertEqual("start\nend\n", self.output())  # including the running file is a no-op
        self.assertEqual(0, self.error_handler.errors)

    def test_bad_paths(self):
        self.assertRaises(ResourceError, Session, self.error_handler, "does/not/exist.fal", self.engine)
        self.assertRaises(FalconError, Session, self.error_handler, Session.SH_FILE, self.engine)

    def test_cmd_line(self):
        self.error_handler.fatal = True
        sess = Session(self.error_handler, Session.SH_FILE, self.engine, cmd_line=True)
        self.assertFalse(self.error_handler.fatal)

        self.assertTrue(sess.add("let x = 1"))
        self.assertFalse(sess.add("func show"))
        self.assertTrue(sess.pending)
        self.assertFalse(sess.add("    print \"x is ${x}\""))
        self.assertEqual("", self.output())

        self.assertTrue(sess.add("end"))
        self.assertFalse(sess.pending)
        self.assertTrue(sess.add("show"))
        self.assertEqual("x is 1\n", self.output())

    def test_cmd_line_numbers(self):
        sess = Session(self.error_handler, Session.SH_FILE, self.engine, cmd_line=True)
        sess.add("print \"a\"")
        sess.add("if 1")
        sess.add("    nonsense")
        sess.add("end")

        self.assertEqual("a\n", self.output())
        self.assertEqual(1, self.error_handler.errors)
        self.assertIn("<in>:3:", self.error_handler.stream.getvalue())


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.error_handler = ErrorHandler(stream=io.StringIO())
        self.engine = Engine(self.error_handler, stdout=io.StringIO())
        sess = Session(self.error_handler, Session.SH_FILE, self.engine, cmd_line=True)
        self.shell = Shell(sess, stdout=io.StringIO())

    def test_blocks_switch_prompt(self):
        self.shell.onecmd("repeat 2")
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)
        self.shell.onecmd("print \"hi\"")
        self.assertEqual("", self.engine.stdout.getvalue())

        self.shell.onecmd("end")
        self.assertEqual("> ", self.shell.prompt)
        self.assertEqual("hi\nhi\n", self.engine.stdout.getvalue())

    def test_errors_are_not_fatal(self):
        self.shell.onecmd("if \"no\"")
        self.shell.onecmd("end")
        self.shell.onecmd("print \"still here\"")
        self.assertEqual("still here\n", self.engine.stdout.getvalue())
        self.assertEqual(1, self.error_handler.errors)

    def test_commands(self):
        self.assertFalse(self.shell.emptyline())
        self.assertTrue(self.shell.onecmd("exit"))

        out = io.StringIO()
        with redirect_stdout(out):
            self.shell.onecmd("help")
            self.assertTrue(self.shell.onecmd("EOF"))
        self.assertIn("Falcon-like", out.getvalue())


if __name__ == '__main__':
    unittest.main()
