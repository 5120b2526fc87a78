from __future__ import annotations

from typing import Callable, Optional

from lark import Token, Tree

from . import numeric
from .context import Context, LazyValue
from .operators import build_registry
from .registry import Registry
from .tree import Node, is_token, node_meta, tree_children
from .types import (
    Container,
    Frame,
    KsBool,
    KsLContainer,
    KsList,
    KsListConstructor,
    KsMap,
    KsNull,
    KsString,
    KsValue,
    KestrelRuntimeError,
    KestrelTypeError,
)
from .values import rebound_to, type_name

def _maybe_attach_location(exc: KestrelRuntimeError, node: Node) -> None:
    if getattr(exc, "_augmented", False):
        return

    meta = node_meta(node)
    if meta is None:
        return

    exc.ks_meta = meta
    exc._augmented = True  # type: ignore[attr-defined]

# ---------------- Public API ----------------

def eval_expr(
    ast: Node,
    frame: Optional[Frame]=None,
    registry: Optional[Registry]=None,
    ctx: Context=Context.NONE,
) -> KsValue:
    frame = frame or Frame()
    registry = registry or build_registry()

    return eval_node(ast, frame, registry, ctx)

def eval_node(n: Node, frame: Frame, registry: Registry, ctx: Context=Context.NONE) -> KsValue:
    try:
        return _eval_node_inner(n, frame, registry, ctx)
    except KestrelRuntimeError as e:
        _maybe_attach_location(e, n)
        raise

def lazy(n: Node, registry: Registry) -> LazyValue:
    """Suspend ``n``; the operator forcing it picks the scope and context."""
    return lambda frame, ctx: eval_node(n, frame, registry, ctx)

def _eval_node_inner(n: Node, frame: Frame, registry: Registry, ctx: Context) -> KsValue:
    if is_token(n):
        return _eval_token(n, frame, ctx)

    handler = _NODE_DISPATCH.get(n.data)
    if handler is None:
        raise KestrelRuntimeError(f"Unsupported node type {n.data}")

    return handler(n, frame, registry, ctx)

def _eval_token(t: Token, frame: Frame, ctx: Context) -> KsValue:
    match t.type:
        case "NUMBER":
            return numeric.from_literal(t.value)
        case "STRING":
            return KsString(t.value)
        case "NULL":
            return KsNull()
        case "TRUE":
            return KsBool(True)
        case "FALSE":
            return KsBool(False)
        case "NAME":
            return _resolve_variable(t.value, frame, ctx)

    raise KestrelRuntimeError(f"Unsupported token type {t.type}")

def _resolve_variable(name: str, frame: Frame, ctx: Context) -> KsValue:
    # unknown names read as null so they can be assigned to
    thunk = frame.get_variable(name)
    if thunk is None:
        return rebound_to(KsNull(), name)

    return rebound_to(thunk(frame, ctx), name)

# ---------------- Node handlers ----------------

def _eval_list(n: Tree, frame: Frame, registry: Registry, ctx: Context) -> KsValue:
    if ctx == Context.LVALUE:
        return KsListConstructor([eval_node(c, frame, registry, Context.LVALUE) for c in n.children])

    return KsList([eval_node(c, frame, registry) for c in n.children])

def _eval_map(n: Tree, frame: Frame, registry: Registry, ctx: Context) -> KsValue:
    slots = {}

    for pair in n.children:
        key_node, value_node = tree_children(pair)
        slots[eval_node(key_node, frame, registry)] = eval_node(value_node, frame, registry)

    return KsMap(slots)

def _eval_index(n: Tree, frame: Frame, registry: Registry, ctx: Context) -> KsValue:
    container_node, address_node = n.children
    container = eval_node(container_node, frame, registry)
    address = eval_node(address_node, frame, registry)

    if ctx == Context.LVALUE:
        return KsLContainer(container if isinstance(container, Container) else None, address)

    if not isinstance(container, Container):
        raise KestrelTypeError(f"Cannot index {type_name(container)}")

    return container.get(address)

def _eval_binop(n: Tree, frame: Frame, registry: Registry, ctx: Context) -> KsValue:
    op, lhs, rhs = n.children
    entry = registry.binary_operator(str(op))
    result = entry.invoke(frame, ctx, lazy(lhs, registry), lazy(rhs, registry))

    return result(frame, ctx)

def _eval_unop(n: Tree, frame: Frame, registry: Registry, ctx: Context) -> KsValue:
    op, operand = n.children
    entry = registry.unary_operator(str(op))
    result = entry.invoke(frame, ctx, lazy(operand, registry))

    return result(frame, ctx)

def _eval_call(n: Tree, frame: Frame, registry: Registry, ctx: Context) -> KsValue:
    fn, *args = n.children
    entry = registry.function(str(fn))
    result = entry.invoke(frame, ctx, [lazy(a, registry) for a in args])

    return result(frame, ctx)

def _eval_seq(n: Tree, frame: Frame, registry: Registry, ctx: Context) -> KsValue:
    if not n.children:
        return KsNull()

    *init, last = n.children
    for stmt in init:
        eval_node(stmt, frame, registry, Context.VOID)

    return eval_node(last, frame, registry, ctx)

def _eval_signature(n: Tree, frame: Frame, registry: Registry, ctx: Context) -> KsValue:
    (expr,) = n.children
    return eval_node(expr, frame, registry, Context.LOCALIZATION)

_NODE_DISPATCH: dict[str, Callable[[Tree, Frame, Registry, Context], KsValue]] = {
    "list": _eval_list,
    "map": _eval_map,
    "index": _eval_index,
    "binop": _eval_binop,
    "unop": _eval_unop,
    "call": _eval_call,
    "seq": _eval_seq,
    "signature": _eval_signature,
}
