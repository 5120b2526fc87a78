from __future__ import annotations

from ..context import Context, LazyValue, const
from ..registry import Registry
from ..types import AnnotationType, Frame, KsAnnotation, KsUnpacked
from ..values import unpack

def spread_context(caller: Context) -> Context:
    return Context.NONE if caller == Context.LOCALIZATION else caller

def _spread(frame: Frame, ctx: Context, operand: LazyValue) -> LazyValue:
    # inside a signature `...x` marks a vararg parameter instead of spreading
    if ctx == Context.LOCALIZATION:
        return const(KsAnnotation(operand(frame, Context.NONE), AnnotationType.VARARG))

    return const(KsUnpacked(unpack(operand(frame, spread_context(ctx)))))

def register(registry: Registry) -> None:
    registry.add_lazy_unary_operator("...", registry.precedence["unary"], False, False, spread_context, _spread)
