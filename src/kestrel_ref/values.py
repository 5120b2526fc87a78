from __future__ import annotations

import re
from dataclasses import replace
from typing import Callable, List

from . import numeric
from .types import (
    KsAnnotation,
    KsBool,
    KsLContainer,
    KsList,
    KsListConstructor,
    KsMap,
    KsNull,
    KsNumber,
    KsString,
    KsUnpacked,
    KsValue,
    KestrelRuntimeError,
    KestrelTypeError,
)

def of_bool(flag: bool) -> KsBool:
    return KsBool(bool(flag))

def is_null(value: KsValue) -> bool:
    return isinstance(value, KsNull)

def as_long(value: KsValue) -> int:
    return numeric.as_number(value).get_long()

def type_name(value: KsValue) -> str:
    match value:
        case KsNull():
            return "null"
        case KsNumber():
            return "number"
        case KsString():
            return "string"
        case KsBool():
            return "bool"
        case KsList():
            return "list"
        case KsMap():
            return "map"
        case KsAnnotation():
            return "annotation"
        case KsUnpacked():
            return "unpacked"
        case KsLContainer():
            return "container location"
    return type(value).__name__

# ---------- variable binding ----------

def rebound_to(value: KsValue, name: str) -> KsValue:
    """Copy of ``value`` carrying ``name``; list and map storage stays shared."""
    match value:
        case KsListConstructor(items=items):
            copy: KsValue = KsList(items)
        case _:
            copy = replace(value)
    copy.bound = name
    return copy

def bind_to(value: KsValue, name: str) -> KsValue:
    value.bound = name
    return value

def assert_assignable(value: KsValue) -> None:
    if value.bound is None:
        raise KestrelRuntimeError(f"<{get_string(value)}> is not a variable")

def get_variable(value: KsValue) -> str:
    assert_assignable(value)
    return value.bound  # type: ignore[return-value]

# ---------- truthiness & rendering ----------

def get_boolean(value: KsValue) -> bool:
    match value:
        case KsBool(value=b):
            return b
        case KsNumber():
            return numeric.truthy(value)
        case KsNull():
            return False
        case KsString(value=s):
            return bool(s)
        case KsList(items=items) | KsUnpacked(items=items):
            return bool(items)
        case KsMap(slots=slots):
            return bool(slots)
        case KsAnnotation() | KsLContainer():
            return True
    raise KestrelTypeError(f"Unexpected value type {type(value).__name__}")

def get_string(value: KsValue) -> str:
    match value:
        case KsNull():
            return "null"
        case KsBool(value=b):
            return "true" if b else "false"
        case KsNumber():
            return numeric.get_string(value)
        case KsString(value=s):
            return s
        case KsList(items=items) | KsUnpacked(items=items):
            return "[" + ", ".join(get_string(x) for x in items) + "]"
        case KsMap(slots=slots):
            return "{" + ", ".join(f"{get_string(k)}: {get_string(v)}" for k, v in slots.items()) + "}"
        case KsAnnotation(value=inner, kind=kind):
            return f"{kind.value} {get_string(inner)}"
        case KsLContainer(address=address):
            return f"container[{get_string(address)}]"
    raise KestrelTypeError(f"Unexpected value type {type(value).__name__}")

def get_pretty_string(value: KsValue) -> str:
    match value:
        case KsNumber():
            return numeric.get_pretty_string(value)
        case KsList(items=items):
            return "[" + ", ".join(get_pretty_string(x) for x in items) + "]"
        case KsMap(slots=slots):
            pairs = [f"{get_pretty_string(k)}: {get_pretty_string(v)}" for k, v in slots.items()]
            return "{" + ", ".join(pairs) + "}"
        case _:
            return get_string(value)

# ---------- equality, hashing, ordering ----------

def equals(lhs: KsValue, rhs: KsValue) -> bool:
    match (lhs, rhs):
        case (KsNull(), KsNull()):
            return True
        case (KsNull(), _) | (_, KsNull()):
            return False
        case (KsNumber() | KsBool(), KsNumber() | KsBool()):
            return numeric.equals(numeric.as_number(lhs), numeric.as_number(rhs))
        case (KsString(value=a), KsString(value=b)):
            return a == b
        case (KsList(items=a), KsList(items=b)):
            return len(a) == len(b) and all(equals(x, y) for x, y in zip(a, b))
        case (KsMap(slots=a), KsMap(slots=b)):
            return len(a) == len(b) and all(k in b and equals(v, b[k]) for k, v in a.items())
        case (KsAnnotation(value=a, kind=ka), KsAnnotation(value=b, kind=kb)):
            return ka == kb and equals(a, b)
        case _:
            return lhs is rhs

def value_hash(value: KsValue) -> int:
    """Hash compatible with ``equals``: equal values always hash equal."""
    match value:
        case KsNull():
            return 0
        case KsBool(value=b):
            return hash(1 if b else 0)
        case KsNumber():
            return numeric.number_hash(value)
        case KsString(value=s):
            return hash(s)
        case KsList(items=items):
            return hash(("list",) + tuple(value_hash(x) for x in items))
        case KsMap(slots=slots):
            return hash(frozenset((value_hash(k), value_hash(v)) for k, v in slots.items()))
        case KsAnnotation(value=inner, kind=kind):
            return hash((kind, value_hash(inner)))
        case _:
            return id(value)

def compare_to(lhs: KsValue, rhs: KsValue) -> int:
    match (lhs, rhs):
        case (KsNull(), KsNull()):
            return 0
        case (KsNull(), _):
            return -1
        case (_, KsNull()):
            return -compare_to(rhs, lhs)
        case (KsNumber() | KsBool(), KsNumber() | KsBool()):
            return numeric.compare(numeric.as_number(lhs), numeric.as_number(rhs))
        case (KsList(items=a), KsList(items=b)):
            if len(a) != len(b):
                return (len(a) > len(b)) - (len(a) < len(b))

            for x, y in zip(a, b):
                res = compare_to(x, y)
                if res != 0:
                    return res
            return 0
        case _:
            a_str, b_str = get_string(lhs), get_string(rhs)
            return (a_str > b_str) - (a_str < b_str)

# ---------- arithmetic ----------

def _elementwise(op: Callable[[KsValue, KsValue], KsValue], verb: str, lhs: KsValue, rhs: KsValue) -> KsList:
    match (lhs, rhs):
        case (KsList(items=a), KsList(items=b)):
            if len(a) != len(b):
                raise KestrelRuntimeError(f"Cannot {verb} two lists of uneven sizes")
            return KsList([op(x, y) for x, y in zip(a, b)])
        case (KsList(items=a), _):
            return KsList([op(x, rhs) for x in a])
        case (_, KsList(items=b)):
            return KsList([op(lhs, y) for y in b])
    raise KestrelTypeError(f"Cannot {verb} {type_name(lhs)} and {type_name(rhs)}")

def add(lhs: KsValue, rhs: KsValue) -> KsValue:
    match (lhs, rhs):
        case (KsNumber() | KsBool(), KsNumber() | KsBool()):
            return numeric.add(numeric.as_number(lhs), numeric.as_number(rhs))
        case (KsList(), _):
            return _elementwise(add, "add", lhs, rhs)
        case (KsMap(slots=a), KsMap(slots=b)):
            merged = dict(a)
            merged.update(b)
            return KsMap(merged)
        case (KsMap(slots=a), _):
            extended = dict(a)
            extended[rhs] = KsNull()
            return KsMap(extended)
        case (KsString(), _) | (_, KsString()):
            return KsString(get_string(lhs) + get_string(rhs))
    raise KestrelTypeError(f"Cannot add {type_name(lhs)} and {type_name(rhs)}")

def subtract(lhs: KsValue, rhs: KsValue) -> KsValue:
    match (lhs, rhs):
        case (KsNumber() | KsBool(), KsNumber() | KsBool()):
            return numeric.subtract(numeric.as_number(lhs), numeric.as_number(rhs))
        case (KsList(), _):
            return _elementwise(subtract, "subtract", lhs, rhs)
    raise KestrelTypeError(f"Cannot subtract {type_name(rhs)} from {type_name(lhs)}")

def multiply(lhs: KsValue, rhs: KsValue) -> KsValue:
    match (lhs, rhs):
        case (KsNumber() | KsBool(), KsNumber() | KsBool()):
            return numeric.multiply(numeric.as_number(lhs), numeric.as_number(rhs))
        case (KsList(), _) | (KsNumber() | KsBool(), KsList()):
            return _elementwise(multiply, "multiply", lhs, rhs)
        case (KsString(value=s), KsNumber() | KsBool()):
            return KsString(s * max(as_long(rhs), 0))
        case (KsNumber() | KsBool(), KsNull() | KsString() | KsMap()):
            # a number repeats the text form of any non-numeric, non-list operand
            return KsString(get_string(rhs) * max(as_long(lhs), 0))
    raise KestrelTypeError(f"Cannot multiply {type_name(lhs)} and {type_name(rhs)}")

def divide(lhs: KsValue, rhs: KsValue) -> KsValue:
    match (lhs, rhs):
        case (KsNumber() | KsBool(), KsNumber() | KsBool()):
            return numeric.divide(numeric.as_number(lhs), numeric.as_number(rhs))
        case (KsList(), _):
            return _elementwise(divide, "divide", lhs, rhs)
    raise KestrelTypeError(f"Cannot divide {type_name(lhs)} by {type_name(rhs)}")

# ---------- containers ----------

def append(target: KsValue, value: KsValue) -> None:
    match target:
        case KsList() | KsMap():
            target.append(value)
        case _:
            raise KestrelTypeError(f"Cannot append to {type_name(target)}")

def unpack(value: KsValue) -> List[KsValue]:
    """Elements a spread exposes: list items or map keys."""
    match value:
        case KsList(items=items):
            return list(items)
        case KsMap(slots=slots):
            return list(slots)
    raise KestrelRuntimeError("Unable to unpack a non-list")

def contains(lhs: KsValue, rhs: KsValue) -> KsValue:
    """The `~` operator: position, key or regex match of ``rhs`` in ``lhs``."""
    match lhs:
        case KsList(items=items):
            for idx, item in enumerate(items):
                if equals(item, rhs):
                    return numeric.of_long(idx)
            return KsNull()
        case KsMap(slots=slots):
            return rhs if rhs in slots else KsNull()
        case KsNull():
            return KsNull()

    try:
        pattern = re.compile(get_string(rhs))
    except re.error as exc:
        raise KestrelRuntimeError(f"Incorrect matching pattern: {exc}") from exc

    found = pattern.search(get_string(lhs))
    if found is None:
        return KsNull()

    groups = found.groups()
    if not groups:
        return KsString(found.group(0))
    if len(groups) == 1:
        return KsString(groups[0]) if groups[0] is not None else KsNull()

    return KsList([KsString(g) if g is not None else KsNull() for g in groups])
