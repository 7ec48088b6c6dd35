"""Runtime values of the Falcon-like language: integers, floats and strings. There is no implicit widening: a literal is
tried as an integer, then as a float, and is otherwise kept as raw text.
"""

import math
import re
from dataclasses import dataclass
from decimal import Decimal

from falconlike.lang.error import EvaluationError


INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1

INTEGER = re.compile(r"[+-]?[0-9]+")
INFINITIES = ("inf", "infinity")


@dataclass(frozen=True)
class Value:
    """Superclass of all runtime values. Values of different subclasses never compare equal."""
    value: object
    type_name = "value"

    def as_integer(self, expr=None):
        """Returns the int held by this value, or raises an EvaluationError blaming expr."""
        if expr is None:
            expr = str(self)
        raise EvaluationError("'{}' must evaluate to an integer, got {} '{}'", (expr, self.type_name, str(self)))

    def __str__(self):
        return str(self.value)


class Integer(Value):
    type_name = "integer"

    def as_integer(self, expr=None):
        return self.value


class Float(Value):
    type_name = "float"

    def __str__(self):
        return format_float(self.value)


class String(Value):
    type_name = "string"


def format_float(number):
    """Shortest round-trip digits of number, in exponent form when the decimal exponent is below -4 or at least 6.
    Whole numbers drop their fractional part: 2.0 is '2', 1e6 is '1e+06' and 0.000015 is '1.5e-05'.
    """
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "+Inf" if number > 0 else "-Inf"

    sign, digits, exponent = Decimal(repr(number)).normalize().as_tuple()
    digits = "".join(str(digit) for digit in digits)
    point = exponent + len(digits) - 1  # exponent in scientific notation
    prefix = "-" if sign else ""

    if point < -4 or point >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        return f"{prefix}{mantissa}e{'-' if point < 0 else '+'}{abs(point):02d}"
    if exponent >= 0:
        return prefix + digits + "0" * exponent
    if point >= 0:
        return prefix + digits[:point + 1] + "." + digits[point + 1:]
    return prefix + "0." + "0" * (-point - 1) + digits


def parse_literal(text):
    """Returns Integer if text is a 64-bit integer, else Float if text is a float, else String(text)."""
    if INTEGER.fullmatch(text):
        number = int(text)
        if INT64_MIN <= number <= INT64_MAX:
            return Integer(number)

    if "_" not in text:  # float() accepts digit separators, which are not numbers here
        try:
            number = float(text)
        except ValueError:
            pass
        else:
            if not math.isinf(number) or text.lstrip("+-").lower() in INFINITIES:  # 1e400 overflows: not a float
                return Float(number)

    return String(text)
