from __future__ import annotations

from itertools import combinations, groupby
from typing import Callable, List

from ..registry import Registry
from ..types import KsValue
from ..values import compare_to, contains, equals, of_bool, value_hash

ListFn = Callable[[List[KsValue]], KsValue]

def monotonic(holds: Callable[[int], bool]) -> ListFn:
    """n-ary chain check: ``holds(compare_to(prev, next))`` for each adjacent pair."""
    def check(args: List[KsValue]) -> KsValue:
        if len(args) < 2:
            return of_bool(True)

        prev = args[0]
        for nxt in args[1:]:
            if not holds(compare_to(prev, nxt)):
                return of_bool(False)
            prev = nxt

        return of_bool(True)

    return check

def all_equal(args: List[KsValue]) -> KsValue:
    if len(args) < 2:
        return of_bool(True)

    prev = args[0]
    for nxt in args[1:]:
        if not equals(prev, nxt):
            return of_bool(False)
        prev = nxt

    return of_bool(True)

def all_unique(args: List[KsValue]) -> KsValue:
    """Distinctness via hash ordering: equal values hash equal, so they share a run.

    Unequal values can collide too, so every pair inside a run is compared.
    """
    if len(args) < 2:
        return of_bool(True)

    for _, bucket in groupby(sorted(args, key=value_hash), key=value_hash):
        for a, b in combinations(list(bucket), 2):
            if equals(a, b):
                return of_bool(False)

    return of_bool(True)

_CHAINS = (
    (">", "decreasing", lambda c: c > 0),
    (">=", "nonincreasing", lambda c: c >= 0),
    ("<", "increasing", lambda c: c < 0),
    ("<=", "nondecreasing", lambda c: c <= 0),
)

def _comparator(holds: Callable[[int], bool]) -> Callable[[KsValue, KsValue], KsValue]:
    return lambda v1, v2: of_bool(holds(compare_to(v1, v2)))

def register(registry: Registry) -> None:
    prec = registry.precedence

    registry.add_binary_operator("~", prec["attribute"], True, contains)

    for symbol, name, holds in _CHAINS:
        registry.add_binary_operator(symbol, prec["compare"], False, _comparator(holds))
        registry.add_function(name, monotonic(holds))
        registry.add_functional_equivalence(symbol, name)

    registry.add_binary_operator("==", prec["equal"], False, lambda v1, v2: of_bool(equals(v1, v2)))
    registry.add_function("equal", all_equal)
    registry.add_functional_equivalence("==", "equal")

    registry.add_binary_operator("!=", prec["equal"], False, lambda v1, v2: of_bool(not equals(v1, v2)))
    registry.add_function("unique", all_unique)
    registry.add_functional_equivalence("!=", "unique")
