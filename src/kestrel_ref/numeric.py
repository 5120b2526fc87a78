"""Numeric tower: a double that may also carry an exact 64-bit integer.

Arithmetic between two exact operands stays exact (wrapping like a 64-bit
two's-complement long). As soon as an approximate operand takes part the
result is double-only, and exactness is never recovered from a double.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, Context, InvalidOperation, ROUND_HALF_EVEN
from typing import Optional, Union

from .types import (
    KsBool,
    KsNull,
    KsNumber,
    KsValue,
    KestrelArithmeticError,
    KestrelTypeError,
)

EPSILON = abs(32 * ((7 * 0.1) * 10 - 7))
DISPLAY_DIGITS = 12

LONG_MIN = -(1 << 63)
LONG_MAX = (1 << 63) - 1
INT_MAX = (1 << 31) - 1

_DISPLAY_CONTEXT = Context(prec=DISPLAY_DIGITS, rounding=ROUND_HALF_EVEN)
_NAN_HASH = 0x7FF8
# longs past this magnitude are not all representable as doubles
_DOUBLE_EXACT_LIMIT = 1 << 53

def wrap_long(n: int) -> int:
    return ((n - LONG_MIN) & 0xFFFFFFFFFFFFFFFF) + LONG_MIN

def floor_long(v: float) -> int:
    """Floor of a double saturated into the long range (NaN -> 0)."""
    if math.isnan(v):
        return 0
    if v >= LONG_MAX:
        return LONG_MAX
    if v <= LONG_MIN:
        return LONG_MIN
    return math.floor(v)

# ---------- construction ----------

def of_long(n: int) -> KsNumber:
    n = wrap_long(n)
    return KsNumber(float(n), n)

def of_double(d: float) -> KsNumber:
    return KsNumber(float(d))

def number_of(value: Union[int, float, None]) -> KsValue:
    """Convert a host number, keeping integral values exact."""
    if value is None:
        return KsNull()

    if isinstance(value, bool):
        return of_long(int(value))

    if isinstance(value, int):
        return of_long(value)

    if math.isfinite(value) and value == floor_long(value):
        return of_long(int(value))

    return of_double(value)

def from_literal(text: str) -> KsNumber:
    """Parse a decimal literal, capturing the exact long when it has no fraction."""
    try:
        decimal = Decimal(text)
    except InvalidOperation:
        raise KestrelTypeError(f"Incorrect number format for {text}") from None

    exact: Optional[int] = None
    if decimal.is_finite() and decimal.normalize().as_tuple().exponent >= 0:
        candidate = int(decimal)
        if LONG_MIN <= candidate <= LONG_MAX:
            exact = candidate

    return KsNumber(float(decimal), exact)

def as_number(value: KsValue, argument_id: Optional[str]=None) -> KsNumber:
    if isinstance(value, KsNumber):
        return value

    if isinstance(value, KsBool):
        return of_long(1 if value.value else 0)

    if argument_id is not None:
        raise KestrelTypeError(f"Argument {argument_id} has to be of a numeric type")

    raise KestrelTypeError("Operand has to be of a numeric type")

# ---------- arithmetic ----------

def add(a: KsNumber, b: KsNumber) -> KsNumber:
    if a.exact is not None and b.exact is not None:
        return of_long(a.exact + b.exact)
    return of_double(a.value + b.value)

def subtract(a: KsNumber, b: KsNumber) -> KsNumber:
    if a.exact is not None and b.exact is not None:
        return of_long(a.exact - b.exact)
    return of_double(a.value - b.value)

def multiply(a: KsNumber, b: KsNumber) -> KsNumber:
    if a.exact is not None and b.exact is not None:
        return of_long(a.exact * b.exact)
    return of_double(a.value * b.value)

def divide(a: KsNumber, b: KsNumber) -> KsNumber:
    # never raises: zero divisors follow IEEE-754
    x, y = a.value, b.value

    if y == 0.0:
        if x == 0.0 or math.isnan(x):
            return of_double(math.nan)
        negative = (math.copysign(1.0, x) < 0) != (math.copysign(1.0, y) < 0)
        return of_double(-math.inf if negative else math.inf)

    return of_double(x / y)

def mod(a: KsNumber, b: KsNumber) -> KsNumber:
    if a.exact is not None and b.exact is not None:
        if b.exact == 0:
            raise KestrelArithmeticError("Division by zero")
        return of_long(a.exact % b.exact)

    x, y = a.value, b.value
    if y == 0:
        raise KestrelArithmeticError("Division by zero")

    q = x / y
    # math.floor rejects inf and NaN, which floor to themselves
    if math.isfinite(q):
        q = math.floor(q)
    return of_double(x - q * y)

def _is_odd_integer(v: float) -> bool:
    return math.isfinite(v) and v == math.floor(v) and math.fmod(v, 2.0) != 0.0

def _pow_infinity(base: float, exponent: float) -> KsNumber:
    # odd integral exponents keep the sign of the base
    if _is_odd_integer(exponent):
        return of_double(math.copysign(math.inf, base))
    return of_double(math.inf)

def power(a: KsNumber, b: KsNumber) -> KsNumber:
    try:
        return of_double(math.pow(a.value, b.value))
    except OverflowError:
        return _pow_infinity(a.value, b.value)
    except ValueError:
        # math.pow rejects what IEEE-754 maps to infinity or NaN
        if a.value == 0 and b.value < 0:
            return _pow_infinity(a.value, b.value)
        return of_double(math.nan)

def opposite(a: KsNumber) -> KsNumber:
    if a.exact is not None:
        return of_long(-a.exact)
    return of_double(-a.value)

# ---------- comparison ----------

def compare_doubles(x: float, y: float) -> int:
    """Total order on doubles: -0.0 < 0.0 and NaN above everything."""
    if x < y:
        return -1
    if x > y:
        return 1

    x_nan, y_nan = math.isnan(x), math.isnan(y)
    if x_nan or y_nan:
        return (x_nan > y_nan) - (x_nan < y_nan)

    x_neg, y_neg = math.copysign(1.0, x) < 0, math.copysign(1.0, y) < 0
    return (y_neg > x_neg) - (y_neg < x_neg)

def compare(a: KsNumber, b: KsNumber) -> int:
    if a.exact is not None and b.exact is not None:
        return (a.exact > b.exact) - (a.exact < b.exact)
    return compare_doubles(a.value, b.value)

def truthy(a: KsNumber) -> bool:
    return abs(a.value) > EPSILON

def equals(a: KsNumber, b: KsNumber) -> bool:
    if a.exact is not None and b.exact is not None:
        return a.exact == b.exact

    # NaN differences are never truthy, so NaN would otherwise equal everything
    x_nan, y_nan = math.isnan(a.value), math.isnan(b.value)
    if x_nan or y_nan:
        return x_nan and y_nan

    return not truthy(subtract(a, b))

def number_hash(a: KsNumber) -> int:
    if a.exact is not None:
        if abs(a.exact) > _DOUBLE_EXACT_LIMIT:
            # equal to its nearest double under the mixed rule, so hash like it
            return hash(floor_long(float(a.exact)))
        return hash(a.exact)

    v = a.value
    if math.isnan(v):
        return _NAN_HASH
    if math.isinf(v):
        return hash(v)

    # close enough to an integer: collide with that integer's exact hash
    if abs(math.floor(v + 0.5) - v) < EPSILON:
        return hash(a.get_long())

    return hash(v)

# ---------- rendering ----------

def get_string(a: KsNumber) -> str:
    if a.exact is not None:
        return str(a.exact)

    v = a.value
    if math.isinf(v):
        return "INFINITY" if v > 0 else "-INFINITY"
    if math.isnan(v):
        return "NaN"
    if abs(v) < EPSILON:
        return "-0" if v < 0 else "0"

    rounded = _DISPLAY_CONTEXT.create_decimal(Decimal(repr(v))).normalize(_DISPLAY_CONTEXT)
    return format(rounded, "f")

def get_pretty_string(a: KsNumber) -> str:
    if a.is_integer():
        return str(a.get_long())
    return "%.1f.." % a.value

def length(a: KsNumber) -> int:
    return len(str(a.get_long()))

# ---------- external forms ----------

@dataclass(frozen=True)
class ExternalNumber:
    """Typed external representation: ``kind`` is 'int', 'long' or 'double'."""
    kind: str
    value: Union[int, float]

def to_tag(a: KsNumber) -> ExternalNumber:
    if a.exact is not None:
        if abs(a.exact) < INT_MAX - 2:
            return ExternalNumber("int", a.exact)
        return ExternalNumber("long", a.exact)

    lv = a.get_long()
    if a.value == lv:
        if abs(a.value) < INT_MAX - 2:
            return ExternalNumber("int", lv)
        return ExternalNumber("long", lv)

    return ExternalNumber("double", a.value)

def to_json(a: KsNumber) -> Union[int, float]:
    if a.exact is not None:
        return a.exact

    lv = a.get_long()
    return lv if a.value == lv else a.value
