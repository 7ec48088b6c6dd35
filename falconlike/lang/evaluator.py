"""Expression evaluation and string interpolation. An expression is a single token or a single quoted string: there is
no arithmetic, so evaluating one is a matter of quoting, scope lookup and literal detection.
"""

import re

from falconlike.lang.error import EvaluationError
from falconlike.lang.values import String, parse_literal


PLACEHOLDER = re.compile(r"\$\{([a-zA-Z_][a-zA-Z0-9_]*)\}")


class Evaluator:
    """Resolves expressions against scope."""

    def __init__(self, scope):
        self.scope = scope

    def evaluate(self, expr):
        """Returns the Value of expr: quoted text, then a variable, then a constant, then a number literal. Anything
        else evaluates to its own text, so unknown names are not errors.
        """
        expr = expr.strip()
        if len(expr) >= 2 and expr.startswith("\"") and expr.endswith("\""):
            return String(expr[1:-1])

        value = self.scope.lookup(expr)
        if value is not None:
            return value
        return parse_literal(expr)

    def integer(self, expr, statement=None):
        """Evaluates expr, which must give an Integer (conditions, loop bounds), and returns its int."""
        try:
            return self.evaluate(expr).as_integer(expr)
        except EvaluationError as error:
            error.statement = statement
            raise

    def interpolate(self, text):
        """Replaces every ${name} in text with the value of name; unknown names are replaced with nothing."""

        def _sub(match):
            value = self.scope.lookup(match.group(1))
            return "" if value is None else str(value)

        return PLACEHOLDER.sub(_sub, text)
