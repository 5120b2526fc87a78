from __future__ import annotations

"""Assignment family: `=`, `+=` and the swap `<>`.

The left operand is forced in LVALUE context and yields one of three shapes:
a list-constructor pattern, a container location, or a value carrying the
name of the variable it was read from.
"""

from typing import List, Sequence

from ..context import Context, LazyValue, const, fixed_context
from ..registry import Registry
from ..types import (
    Frame,
    KsLContainer,
    KsList,
    KsListConstructor,
    KsMap,
    KsNull,
    KsValue,
    KestrelArityError,
    KestrelRuntimeError,
)
from ..values import add, append, assert_assignable, bind_to, get_variable, of_bool, rebound_to

def check_unpack_arity(targets: Sequence[KsValue], sources: Sequence[KsValue]) -> None:
    if len(targets) < len(sources):
        raise KestrelArityError("Too many values to unpack")
    if len(targets) > len(sources):
        raise KestrelArityError("Too few values to unpack")

def _targets(pattern: KsListConstructor) -> List[KsValue]:
    # every slot is checked before anything is bound
    for target in pattern.items:
        assert_assignable(target)
    return list(pattern.items)

def _bind(frame: Frame, name: str, value: KsValue) -> LazyValue:
    thunk = const(value)
    frame.set_any_variable(name, thunk)
    return thunk

def _assign(frame: Frame, ctx: Context, lhs: LazyValue, rhs: LazyValue) -> LazyValue:
    v1 = lhs(frame, Context.LVALUE)
    v2 = rhs(frame, Context.NONE)

    match v1:
        case KsListConstructor() if isinstance(v2, KsList):
            check_unpack_arity(v1.items, v2.items)

            for target, source in zip(_targets(v1), v2.items):
                name = get_variable(target)
                _bind(frame, name, rebound_to(source, name))

            return const(of_bool(True))

        case KsLContainer(container=container, address=address):
            if container is None or not container.put(address, v2):
                return const(KsNull())
            return const(v2)

    name = get_variable(v1)
    return _bind(frame, name, rebound_to(v2, name))

def _add_assign(frame: Frame, ctx: Context, lhs: LazyValue, rhs: LazyValue) -> LazyValue:
    v1 = lhs(frame, Context.LVALUE)
    v2 = rhs(frame, Context.NONE)

    match v1:
        case KsListConstructor() if isinstance(v2, KsList):
            check_unpack_arity(v1.items, v2.items)

            for target, source in zip(_targets(v1), v2.items):
                name = get_variable(target)
                _bind(frame, name, bind_to(add(target, source), name))

            return const(of_bool(True))

        case KsLContainer(container=container, address=address):
            if container is None:
                raise KestrelRuntimeError("Failed to resolve left hand side of the += operation")

            current = container.get(address)
            if isinstance(current, (KsList, KsMap)):
                append(current, v2)
                return const(current)

            result = add(current, v2)
            container.put(address, result)
            return const(result)

    name = get_variable(v1)

    # lists and maps grow in place so every alias sees the new element
    if isinstance(v1, (KsList, KsMap)):
        append(v1, v2)
        return _bind(frame, name, v1)

    return _bind(frame, name, bind_to(add(v1, v2), name))

def _swap(frame: Frame, ctx: Context, lhs: LazyValue, rhs: LazyValue) -> LazyValue:
    v1 = lhs(frame, Context.LVALUE)
    v2 = rhs(frame, Context.LVALUE)

    if isinstance(v1, KsListConstructor) and isinstance(v2, KsListConstructor):
        check_unpack_arity(v1.items, v2.items)
        left, right = _targets(v1), _targets(v2)

        # capture both sides fully before installing any binding
        pending = []
        for lval, rval in zip(left, right):
            lname, rname = get_variable(lval), get_variable(rval)
            pending.append((lname, rebound_to(rval, lname)))
            pending.append((rname, rebound_to(lval, rname)))

        for name, value in pending:
            _bind(frame, name, value)

        return const(of_bool(True))

    lname, rname = get_variable(v1), get_variable(v2)
    lval = rebound_to(v2, lname)
    rval = rebound_to(v1, rname)

    _bind(frame, rname, rval)
    return _bind(frame, lname, lval)

def register(registry: Registry) -> None:
    prec = registry.precedence["assign"]
    lvalue = fixed_context(Context.LVALUE)

    registry.add_lazy_binary_operator("=", prec, False, False, lvalue, _assign)
    registry.add_lazy_binary_operator("+=", prec, False, False, lvalue, _add_assign)
    registry.add_lazy_binary_operator("<>", prec, False, False, lvalue, _swap)
