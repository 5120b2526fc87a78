"""Operator and function families installed into a registry."""

__all__ = [
    "arithmetic",
    "assign",
    "bitwise",
    "compare",
    "logical",
    "unpack",
]
