"""Numbers in fncalc are 64-bit floats. This module holds the arithmetic behind the binary operators and the formatting
used whenever a number is shown to the user.

Formatting drops the fractional part of integral values ("5", not "5.0") and otherwise uses the shortest repr that
round-trips. Overflow and domain errors in "^" follow IEEE semantics (inf/nan) instead of raising, like the other
operators already do for floats.
"""

import math
import operator

from fncalc.lang.error import DivisionByZeroError


def number(value):
    """Returns str of float value as displayed by the calculator."""
    if math.isnan(value):
        return "NaN"
    elif math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    elif float(value).is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(float(value))


def display(value):
    """Returns the display string for any evaluation result: numbers are formatted, closures and confirmation strings
    are shown as is.
    """
    if isinstance(value, (int, float)):
        return number(value)
    return str(value)


def divide(left, right):
    """Float division, except that a divisor of exactly zero is an error."""
    if right == 0:
        raise DivisionByZeroError(f"{number(left)} / {number(right)}")
    return left / right


def power(left, right):
    """pow(left, right) with IEEE results where math.pow would raise."""
    try:
        return math.pow(left, right)
    except OverflowError:
        if left < 0 and right % 2 == 1:  # odd integral exponent keeps the sign
            return -math.inf
        return math.inf
    except ValueError:
        if left == 0:  # zero to a negative power
            return math.inf
        return math.nan


OPERATORS = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": divide,
    "^": power,
}
