from __future__ import annotations

from typing import List

from ..context import Context, LazyValue, const, fixed_context
from ..registry import VARIADIC, Registry
from ..types import Frame, KsUnpacked, KsValue
from ..values import get_boolean, of_bool

def _and(frame: Frame, ctx: Context, lhs: LazyValue, rhs: LazyValue) -> LazyValue:
    v1 = lhs(frame, Context.BOOLEAN)
    return rhs if get_boolean(v1) else const(v1)

def _or(frame: Frame, ctx: Context, lhs: LazyValue, rhs: LazyValue) -> LazyValue:
    v1 = lhs(frame, Context.BOOLEAN)
    return const(v1) if get_boolean(v1) else rhs

def _settle_last(arg: LazyValue, stop_on: bool) -> LazyValue:
    def last(frame: Frame, ctx: Context) -> KsValue:
        val = arg(frame, ctx)
        if not isinstance(val, KsUnpacked):
            return val

        if not val.items:
            return of_bool(not stop_on)

        for item in val:
            if get_boolean(item) == stop_on:
                return item

        return val.items[-1]

    return last

def short_circuit(stop_on: bool):
    """Variadic and/or: the first operand whose truth is ``stop_on`` wins.

    Spread operands are tested element by element, in order, before moving on
    to the next positional operand. The last operand is handed back unforced so
    the caller evaluates it under its own context.
    """
    def scan(frame: Frame, ctx: Context, args: List[LazyValue]) -> LazyValue:
        if not args:
            return const(of_bool(not stop_on))

        for arg in args[:-1]:
            val = arg(frame, Context.BOOLEAN)

            if isinstance(val, KsUnpacked):
                for item in val:
                    if get_boolean(item) == stop_on:
                        return const(item)
            elif get_boolean(val) == stop_on:
                return const(val)

        return _settle_last(args[-1], stop_on)

    return scan

def _not(frame: Frame, ctx: Context, operand: LazyValue) -> LazyValue:
    return const(of_bool(not get_boolean(operand(frame, Context.BOOLEAN))))

def register(registry: Registry) -> None:
    prec = registry.precedence
    boolean = fixed_context(Context.BOOLEAN)

    registry.add_lazy_binary_operator("&&", prec["and"], False, True, boolean, _and)
    registry.add_lazy_function("and", VARIADIC, boolean, short_circuit(False))
    registry.add_functional_equivalence("&&", "and")

    registry.add_lazy_binary_operator("||", prec["or"], False, True, boolean, _or)
    registry.add_lazy_function("or", VARIADIC, boolean, short_circuit(True))
    registry.add_functional_equivalence("||", "or")

    registry.add_lazy_unary_operator("!", prec["unary"], False, True, boolean, _not)
