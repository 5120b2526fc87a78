from __future__ import annotations

import struct
from typing import Callable, List

from .. import numeric
from ..registry import Registry
from ..types import KsNull, KsValue

MASK = 0xFFFFFFFFFFFFFFFF

def _unsigned(num: int) -> int:
    return num & MASK

def _fold_long(op: Callable[[int, int], int]) -> Callable[[List[KsValue]], KsValue]:
    def fold(args: List[KsValue]) -> KsValue:
        if not args:
            return KsNull()

        acc = numeric.as_number(args[0]).get_long()
        for value in args[1:]:
            acc = op(acc, numeric.as_number(value).get_long())

        return numeric.of_long(acc)

    return fold

def shift_left(num: int, amount: int) -> int:
    return num << (amount & 63)

def shift_right(num: int, amount: int) -> int:
    return num >> (amount & 63)

def roll_left(num: int, amount: int) -> int:
    amount %= 64
    bits = _unsigned(num)
    return (bits << amount | bits >> (64 - amount)) & MASK

def roll_right(num: int, amount: int) -> int:
    amount %= 64
    bits = _unsigned(num)
    return (bits >> amount | bits << (64 - amount)) & MASK

def popcount(num: int) -> int:
    return bin(_unsigned(num)).count("1")

def double_to_long_bits(value: KsValue) -> KsValue:
    bits, = struct.unpack("<q", struct.pack("<d", numeric.as_number(value).get_double()))
    return numeric.of_long(bits)

def long_to_double_bits(value: KsValue) -> KsValue:
    double, = struct.unpack("<d", struct.pack("<q", numeric.as_number(value).get_long()))
    return numeric.of_double(double)

def register(registry: Registry) -> None:
    registry.add_function("bitwise_and", _fold_long(lambda a, b: a & b))
    registry.add_function("bitwise_xor", _fold_long(lambda a, b: a ^ b))
    registry.add_function("bitwise_or", _fold_long(lambda a, b: a | b))

    registry.add_math_binary_int_function("bitwise_shift_left", shift_left)
    registry.add_math_binary_int_function("bitwise_shift_right", shift_right)
    registry.add_math_binary_int_function("bitwise_roll_left", roll_left)
    registry.add_math_binary_int_function("bitwise_roll_right", roll_right)
    registry.add_math_unary_int_function("bitwise_not", lambda num: ~num)
    registry.add_math_unary_int_function("bitwise_popcount", popcount)
    registry.add_unary_function("double_to_long_bits", double_to_long_bits)
    registry.add_unary_function("long_to_double_bits", long_to_double_bits)
