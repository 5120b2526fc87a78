from __future__ import annotations

from .eval import arithmetic, assign, bitwise, compare, logical, unpack
from .registry import Registry

_MODULES = (arithmetic, compare, logical, assign, unpack, bitwise)

def install(registry: Registry) -> Registry:
    """Register the complete built-in operator and function set."""
    for module in _MODULES:
        module.register(registry)

    return registry

def build_registry() -> Registry:
    return install(Registry())
