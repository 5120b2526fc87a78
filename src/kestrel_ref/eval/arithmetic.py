from __future__ import annotations

from typing import Callable, List

from .. import numeric, values
from ..registry import Registry
from ..types import KsNull, KsValue

BinaryOp = Callable[[KsValue, KsValue], KsValue]

def fold(op: BinaryOp, args: List[KsValue]) -> KsValue:
    """Strict left fold; nothing folds to null, a single value to itself."""
    if not args:
        return KsNull()

    acc = args[0]
    for value in args[1:]:
        acc = op(acc, value)

    return acc

def _reduction(op: BinaryOp) -> Callable[[List[KsValue]], KsValue]:
    return lambda args: fold(op, args)

def modulo(lhs: KsValue, rhs: KsValue) -> KsValue:
    return numeric.mod(numeric.as_number(lhs), numeric.as_number(rhs))

def power(lhs: KsValue, rhs: KsValue) -> KsValue:
    return numeric.power(numeric.as_number(lhs), numeric.as_number(rhs))

_FOLDS = (
    ("+", "addition", values.add, "sum"),
    ("-", "addition", values.subtract, "difference"),
    ("*", "multiplication", values.multiply, "product"),
    ("/", "multiplication", values.divide, "quotient"),
)

def register(registry: Registry) -> None:
    prec = registry.precedence

    for symbol, klass, op, name in _FOLDS:
        registry.add_binary_operator(symbol, prec[klass], True, op)
        registry.add_function(name, _reduction(op))
        registry.add_functional_equivalence(symbol, name)

    registry.add_binary_operator("%", prec["multiplication"], True, modulo)
    registry.add_binary_operator("^", prec["exponent"], False, power)

    registry.add_unary_operator("-", False, lambda v: numeric.opposite(numeric.as_number(v)))
    registry.add_unary_operator("+", False, numeric.as_number)
