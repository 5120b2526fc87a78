from __future__ import annotations

import enum
from typing import Callable
from typing_extensions import TypeAlias

from .types import Frame, KsValue

class Context(enum.Enum):
    """Result shape the caller expects from an evaluation."""
    NONE = "none"
    VOID = "void"
    BOOLEAN = "boolean"
    LOCALIZATION = "localization"  # parameter lists and signatures
    LVALUE = "lvalue"

# a suspended operand: forced with the scope and the context to evaluate under
LazyValue: TypeAlias = Callable[[Frame, Context], KsValue]
ContextSelector: TypeAlias = Callable[[Context], Context]

def const(value: KsValue) -> LazyValue:
    return lambda _frame, _ctx: value

def fixed_context(target: Context) -> ContextSelector:
    return lambda _ctx: target
