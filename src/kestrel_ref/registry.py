"""Operator and function registry.

Operators come in two kinds picked once at registration: eager ones receive
evaluated values, lazy ones receive the suspended operands plus the caller's
context and decide themselves what to force and when. A `Registry` is a plain
value; build one per language instance (see ``operators.build_registry``).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union

from . import numeric
from .context import Context, ContextSelector, LazyValue, const
from .types import (
    Frame,
    KsUnpacked,
    KsValue,
    KestrelArityError,
    KestrelNameError,
)

# process-wide operator classes, low to high
PRECEDENCE: Dict[str, int] = {
    "nextop": 1,       # ;
    "def": 2,          # ->
    "assign": 3,       # = += <>
    "or": 4,           # ||
    "and": 5,          # &&
    "equal": 7,        # == !=
    "compare": 10,     # > >= < <=
    "addition": 20,    # + -
    "multiplication": 30,  # * / %
    "exponent": 40,    # ^
    "unary": 60,       # + - ! ...
    "attribute": 80,   # ~ :
}

VARIADIC = -1

BinaryFn = Callable[[KsValue, KsValue], KsValue]
UnaryFn = Callable[[KsValue], KsValue]
LazyBinaryFn = Callable[[Frame, Context, LazyValue, LazyValue], LazyValue]
LazyUnaryFn = Callable[[Frame, Context, LazyValue], LazyValue]
ListFn = Callable[[List[KsValue]], KsValue]
LazyListFn = Callable[[Frame, Context, List[LazyValue]], LazyValue]

def evaluate_arguments(frame: Frame, args: List[LazyValue]) -> List[KsValue]:
    """Force call arguments left to right, splicing in spread carriers."""
    values: List[KsValue] = []

    for arg in args:
        val = arg(frame, Context.NONE)
        if isinstance(val, KsUnpacked):
            values.extend(val.items)
        else:
            values.append(val)

    return values

# ---------- operator kinds ----------

@dataclass(frozen=True)
class BinaryOperator:
    symbol: str
    precedence: int
    left_assoc: bool
    fn: BinaryFn

    def invoke(self, frame: Frame, ctx: Context, lhs: LazyValue, rhs: LazyValue) -> LazyValue:
        v1 = lhs(frame, Context.NONE)
        v2 = rhs(frame, Context.NONE)
        return const(self.fn(v1, v2))

@dataclass(frozen=True)
class LazyBinaryOperator:
    symbol: str
    precedence: int
    left_assoc: bool
    short_circuit: bool
    context_selector: ContextSelector
    fn: LazyBinaryFn

    def invoke(self, frame: Frame, ctx: Context, lhs: LazyValue, rhs: LazyValue) -> LazyValue:
        return self.fn(frame, ctx, lhs, rhs)

@dataclass(frozen=True)
class UnaryOperator:
    symbol: str
    precedence: int
    left_assoc: bool
    fn: UnaryFn

    def invoke(self, frame: Frame, ctx: Context, operand: LazyValue) -> LazyValue:
        return const(self.fn(operand(frame, Context.NONE)))

@dataclass(frozen=True)
class LazyUnaryOperator:
    symbol: str
    precedence: int
    left_assoc: bool
    short_circuit: bool
    context_selector: ContextSelector
    fn: LazyUnaryFn

    def invoke(self, frame: Frame, ctx: Context, operand: LazyValue) -> LazyValue:
        return self.fn(frame, ctx, operand)

@dataclass(frozen=True)
class Function:
    name: str
    arity: int
    fn: ListFn

    def invoke(self, frame: Frame, ctx: Context, args: List[LazyValue]) -> LazyValue:
        values = evaluate_arguments(frame, args)
        _check_arity(self.name, self.arity, len(values))
        return const(self.fn(values))

@dataclass(frozen=True)
class LazyFunction:
    name: str
    arity: int
    context_selector: ContextSelector
    fn: LazyListFn

    def invoke(self, frame: Frame, ctx: Context, args: List[LazyValue]) -> LazyValue:
        _check_arity(self.name, self.arity, len(args))
        return self.fn(frame, ctx, args)

BinaryEntry = Union[BinaryOperator, LazyBinaryOperator]
UnaryEntry = Union[UnaryOperator, LazyUnaryOperator]
FunctionEntry = Union[Function, LazyFunction]

def _check_arity(name: str, arity: int, given: int) -> None:
    if arity != VARIADIC and arity != given:
        raise KestrelArityError(f"Function {name} expected {arity} parameters, got {given}")

# ---------- registry ----------

class Registry:
    def __init__(self) -> None:
        self.precedence: Dict[str, int] = dict(PRECEDENCE)
        self.binary_operators: Dict[str, BinaryEntry] = {}
        self.unary_operators: Dict[str, UnaryEntry] = {}
        self.functions: Dict[str, FunctionEntry] = {}
        self.equivalences: Dict[str, str] = {}

    # binary operators

    def add_binary_operator(self, symbol: str, precedence: int, left_assoc: bool, fn: BinaryFn) -> None:
        self.binary_operators[symbol] = BinaryOperator(symbol, precedence, left_assoc, fn)

    def add_lazy_binary_operator(
        self,
        symbol: str,
        precedence: int,
        left_assoc: bool,
        short_circuit: bool,
        context_selector: ContextSelector,
        fn: LazyBinaryFn,
    ) -> None:
        self.binary_operators[symbol] = LazyBinaryOperator(symbol, precedence, left_assoc, short_circuit, context_selector, fn)

    # unary operators

    def add_unary_operator(self, symbol: str, left_assoc: bool, fn: UnaryFn) -> None:
        self.unary_operators[symbol] = UnaryOperator(symbol, self.precedence["unary"], left_assoc, fn)

    def add_lazy_unary_operator(
        self,
        symbol: str,
        precedence: int,
        left_assoc: bool,
        short_circuit: bool,
        context_selector: ContextSelector,
        fn: LazyUnaryFn,
    ) -> None:
        self.unary_operators[symbol] = LazyUnaryOperator(symbol, precedence, left_assoc, short_circuit, context_selector, fn)

    # functions

    def add_function(self, name: str, fn: ListFn, arity: int=VARIADIC) -> None:
        self.functions[name] = Function(name, arity, fn)

    def add_unary_function(self, name: str, fn: UnaryFn) -> None:
        self.add_function(name, lambda args: fn(args[0]), arity=1)

    def add_binary_function(self, name: str, fn: BinaryFn) -> None:
        self.add_function(name, lambda args: fn(args[0], args[1]), arity=2)

    def add_lazy_function(
        self,
        name: str,
        arity: int,
        context_selector: ContextSelector,
        fn: LazyListFn,
    ) -> None:
        self.functions[name] = LazyFunction(name, arity, context_selector, fn)

    def add_math_binary_int_function(self, name: str, fn: Callable[[int, int], int]) -> None:
        def apply(v: KsValue, w: KsValue) -> KsValue:
            a = numeric.as_number(v, "1").get_long()
            b = numeric.as_number(w, "2").get_long()
            return numeric.of_long(fn(a, b))

        self.add_binary_function(name, apply)

    def add_math_unary_int_function(self, name: str, fn: Callable[[int], int]) -> None:
        self.add_unary_function(name, lambda v: numeric.of_long(fn(numeric.as_number(v).get_long())))

    def add_functional_equivalence(self, operator: str, function: str) -> None:
        self.equivalences[operator] = function

    # lookups

    def binary_operator(self, symbol: str) -> BinaryEntry:
        try:
            return self.binary_operators[symbol]
        except KeyError:
            raise KestrelNameError("operator", symbol) from None

    def unary_operator(self, symbol: str) -> UnaryEntry:
        try:
            return self.unary_operators[symbol]
        except KeyError:
            raise KestrelNameError("unary operator", symbol) from None

    def function(self, name: str) -> FunctionEntry:
        try:
            return self.functions[name]
        except KeyError:
            raise KestrelNameError("function", name) from None

    def functional_equivalent(self, operator: str) -> Optional[str]:
        return self.equivalences.get(operator)

    def operand_context(self, symbol: str, caller: Context) -> Context:
        """Context the operands of operator or function ``symbol`` are forced under."""
        entry = (
            self.binary_operators.get(symbol)
            or self.unary_operators.get(symbol)
            or self.functions.get(symbol)
        )

        if isinstance(entry, (LazyBinaryOperator, LazyUnaryOperator, LazyFunction)):
            return entry.context_selector(caller)

        return Context.NONE
