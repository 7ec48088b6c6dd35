"""Error handling for the Falcon-like language. Only FalconErrors should be encountered during running: they are
reported against the statement that raised them, and execution carries on with the next statement. If another type of
error makes it all the way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys

from termcolor import colored


class FalconError(Exception):
    """Templates an error/warning message so that it can be reported against a statement. exprs are formatted into msg
    (in bold), and exprs[0] should be the offending expr that caused the error.
    """

    def __init__(self, msg, exprs=None, statement=None, diagnosis=True, internal=False):
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]
        exprs = [str(expr) for expr in exprs]

        super().__init__(msg.format(*exprs))
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0]

        self.statement = statement  # anything with a .line; filled in by the engine if left empty
        self.diagnosis = diagnosis
        self.internal = internal


class MalformedStatement(FalconError):
    """Statement has the wrong shape for its keyword, or matches no keyword, function or method."""


class EvaluationError(FalconError):
    """Value has the wrong type where it is used, or a call can't be made as written."""


class ResourceError(FalconError):
    """File couldn't be read, or a duration/count isn't a usable number."""


class ErrorHandler:
    """Context manager that will report Falcon errors/warnings and keep count of them."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=False, stream=None):
        self.fatal = fatal
        self.stream = stream  # None means sys.stdout at the time of printing
        self.traceback = {}   # path: (line, line_num), insertion-ordered

        self.errors = 0
        self.warnings = 0

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback.setdefault(path, (None, None))

    def release_file(self, path):
        """Removes path from traceback once its statements are done running."""
        self.traceback.pop(path, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Returns what was registered before, for remove_line."""
        previous = self.traceback.get(path, (None, None))
        self.traceback[path] = (line, line_num)
        return previous

    def remove_line(self, path, previous=(None, None)):
        """Puts back the line registered for path before the matching register_line."""
        if path in self.traceback:
            self.traceback[path] = previous

    @staticmethod
    def diagnose(line, expr, warning=False):
        """Returns line with the first occurrence of expr highlighted and bolded, or None if expr isn't in line."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        start = line.find(expr) if expr else -1
        if start == -1:
            return None
        end = start + len(expr)

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def warn(self, error):
        """Prints warning message for error. error must be a FalconError with a statement."""
        self.warnings += 1
        error_msg = ErrorHandler._location(error)
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg
        self._print(error_msg)

        if error.statement is not None and error.diagnosis:
            diagnosis = ErrorHandler.diagnose(error.statement.line.source.strip(), error.expr, warning=True)
            if diagnosis:
                self._print(diagnosis)

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a FalconError, and self.traceback must be a
        dict of file: (line, line_num) representing the chain of files leading to the error.
        """
        own_path = error.statement.line.path if error.statement is not None else None

        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line and file != own_path:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line.strip()}\n"
                lines += 1

        if lines:
            error_msg = "Traceback:\n" + error_msg

        error_msg += ErrorHandler._location(error)
        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        self._print(error_msg)

        if not error.internal and error.statement is not None and error.diagnosis:
            diagnosis = ErrorHandler.diagnose(error.statement.line.source.strip(), error.expr)
            if diagnosis:
                self._print(diagnosis)

        self.errors += 1
        if self.fatal:
            sys.exit(1)

    @staticmethod
    def _location(error):
        if error.statement is None:
            return ""
        line = error.statement.line
        return colored(f"{line.path}:{line.line_num}: ", attrs=["bold"])

    def _print(self, msg):
        print(msg, file=self.stream if self.stream is not None else sys.stdout)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(FalconError("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(FalconError("maximum call depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, FalconError):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(FalconError(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
