from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional
from typing_extensions import Protocol, TypeAlias, runtime_checkable

# ---------- Value Model ----------

class KsBase:
    """Shared behaviour of every Kestrel value.

    ``bound`` is the name of the variable the value was read from or written to.
    Equality and hashing defer to ``values`` so that Python containers keyed by
    Kestrel values (maps) follow the language rules.
    """
    bound: Optional[str] = None

    def __eq__(self, other: object) -> bool:
        from .values import equals
        if not isinstance(other, KsBase):
            return NotImplemented
        return equals(self, other)  # type: ignore[arg-type]

    def __hash__(self) -> int:
        from .values import value_hash
        return value_hash(self)  # type: ignore[arg-type]

    def __str__(self) -> str:
        from .values import get_string
        return get_string(self)  # type: ignore[arg-type]

@dataclass(eq=False)
class KsNull(KsBase):
    def __repr__(self) -> str:
        return "null"

@dataclass(eq=False)
class KsNumber(KsBase):
    """Double approximation plus an optional exact 64-bit form."""
    value: float
    exact: Optional[int] = None

    def get_double(self) -> float:
        return self.value

    def get_long(self) -> int:
        if self.exact is not None:
            return self.exact
        from .numeric import floor_long, EPSILON
        return floor_long(self.value + EPSILON)

    def is_integer(self) -> bool:
        return self.exact is not None or self.value == self.get_long()

    def __repr__(self) -> str:
        if self.exact is not None:
            return str(self.exact)
        return repr(self.value)

@dataclass(eq=False)
class KsString(KsBase):
    value: str
    def __repr__(self) -> str:
        return f"'{self.value}'"

@dataclass(eq=False)
class KsBool(KsBase):
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(eq=False)
class KsList(KsBase):
    items: List['KsValue'] = field(default_factory=list)

    def get(self, address: 'KsValue') -> 'KsValue':
        if not self.items:
            return KsNull()
        if not isinstance(address, (KsNumber, KsBool)):
            raise KestrelTypeError("List index has to be a number")
        from .values import as_long
        return self.items[as_long(address) % len(self.items)]

    def put(self, address: 'KsValue', value: 'KsValue') -> bool:
        if isinstance(address, KsNull):
            self.items.append(value)
            return True
        if not isinstance(address, (KsNumber, KsBool)):
            return False
        from .values import as_long
        size = len(self.items)
        index = as_long(address)
        if index < 0:
            index += size
            if index < 0:
                return False
        if index >= size:
            self.items.extend(KsNull() for _ in range(index - size))
            self.items.append(value)
            return True
        self.items[index] = value
        return True

    def append(self, value: 'KsValue') -> None:
        self.items.append(value)

    def __iter__(self) -> Iterator['KsValue']:
        return iter(self.items)

    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.items) + "]"

@dataclass(eq=False)
class KsListConstructor(KsList):
    """Result of literal list syntax; doubles as a destructuring pattern."""

@dataclass(eq=False)
class KsMap(KsBase):
    slots: Dict['KsValue', 'KsValue'] = field(default_factory=dict)

    def get(self, address: 'KsValue') -> 'KsValue':
        return self.slots.get(address, KsNull())

    def put(self, address: 'KsValue', value: 'KsValue') -> bool:
        self.slots[address] = value
        return True

    def append(self, value: 'KsValue') -> None:
        self.slots[value] = KsNull()

    def __iter__(self) -> Iterator['KsValue']:
        return iter(list(self.slots))

    def __repr__(self) -> str:
        pairs = []

        for k, v in self.slots.items():
            pairs.append(f"{k!r}: {v!r}")

        return "{" + ", ".join(pairs) + "}"

class AnnotationType(enum.Enum):
    VARARG = "vararg"

@dataclass(eq=False)
class KsAnnotation(KsBase):
    """Marks a sub-expression as part of a function signature."""
    value: 'KsValue'
    kind: AnnotationType = AnnotationType.VARARG

@dataclass(eq=False)
class KsUnpacked(KsBase):
    """Spread carrier produced by `...`; consumed by the enclosing call."""
    items: List['KsValue'] = field(default_factory=list)

    def __iter__(self) -> Iterator['KsValue']:
        return iter(self.items)

@dataclass(eq=False)
class KsLContainer(KsBase):
    """Assignable location inside a container: {container, address}."""
    container: Optional['Container']
    address: 'KsValue'

KsValue: TypeAlias = (
    KsNull
    | KsNumber
    | KsString
    | KsBool
    | KsList
    | KsListConstructor
    | KsMap
    | KsAnnotation
    | KsUnpacked
    | KsLContainer
)

@runtime_checkable
class Container(Protocol):
    """Anything assignment syntax may write into by address."""
    def get(self, address: KsValue) -> KsValue: ...
    def put(self, address: KsValue, value: KsValue) -> bool: ...

# ---------- Scope host ----------

GLOBAL_PREFIX = "global_"

class Frame:
    """Variable scope. Variables hold lazy values, not plain values."""

    def __init__(self, parent: Optional['Frame']=None):
        self.parent = parent
        self.vars: Dict[str, Any] = {}

    def root(self) -> 'Frame':
        frame = self

        while frame.parent is not None:
            frame = frame.parent

        return frame

    def get_variable(self, name: str) -> Optional[Any]:
        if name.startswith(GLOBAL_PREFIX):
            return self.root().vars.get(name)

        if name in self.vars:
            return self.vars[name]

        if self.parent is not None:
            return self.parent.get_variable(name)

        return None

    def set_any_variable(self, name: str, thunk: Any) -> None:
        if name.startswith(GLOBAL_PREFIX):
            self.root().vars[name] = thunk
            return

        self.vars[name] = thunk

# ---------- Exceptions ----------

class KestrelRuntimeError(Exception):
    ks_meta: Optional[object]

    def __init__(self, message: str):
        super().__init__(message)
        self.ks_meta = None

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        msg = super().__str__()

        meta = getattr(self, "ks_meta", None)
        if meta is None:
            return msg

        line = getattr(meta, "line", None)
        col = getattr(meta, "column", None)

        if line is None:
            return msg

        if col is None:
            return f"{msg} (line {line})"

        return f"{msg} (line {line}, col {col})"

class KestrelTypeError(KestrelRuntimeError):
    pass

class KestrelArityError(KestrelRuntimeError):
    pass

class KestrelArithmeticError(KestrelRuntimeError):
    pass

class KestrelNameError(KestrelRuntimeError):
    def __init__(self, kind: str, name: str):
        super().__init__(f"Unknown {kind} '{name}'")
        self.kind = kind
        self.name = name
