"""Helpers for the lark Tree/Token expression trees the reference host walks.

Node shapes:

    Token NUMBER/STRING/NAME/NULL/TRUE/FALSE    literals and variable references
    Tree('list', [item, ...])                   list literal
    Tree('map', [Tree('pair', [k, v]), ...])    map literal
    Tree('index', [container, address])         `container:address`
    Tree('binop', [Token('OP', sym), lhs, rhs])
    Tree('unop', [Token('OP', sym), operand])
    Tree('call', [Token('NAME', fn), arg, ...])
    Tree('seq', [expr, ...])                    `a ; b ; c`
    Tree('signature', [expr])                   expr evaluated as a parameter list
"""
from __future__ import annotations

from types import SimpleNamespace
from typing import List, Optional, Union
from typing_extensions import TypeAlias, TypeGuard

from lark import Token, Tree

Node: TypeAlias = Union[Tree, Token]

def is_tree(node: Node) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: Node) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_children(node: Node) -> List[Node]:
    if not is_tree(node):
        return []

    return list(node.children)

def node_meta(node: Node) -> Optional[SimpleNamespace]:
    """Position of ``node``: its own, or that of the first positioned descendant."""
    if is_token(node):
        if node.line is None:
            return None
        return SimpleNamespace(line=node.line, column=node.column)

    meta = getattr(node, "meta", None)
    if meta is not None and getattr(meta, "line", None) is not None:
        return SimpleNamespace(line=meta.line, column=getattr(meta, "column", None))

    for child in tree_children(node):
        found = node_meta(child)
        if found is not None:
            return found

    return None

# ---------- builders ----------

def _token(kind: str, value: str, line: Optional[int]) -> Token:
    if line is None:
        return Token(kind, value)
    return Token(kind, value, line=line, column=1)

def num(text: Union[str, int, float], line: Optional[int]=None) -> Token:
    return _token("NUMBER", str(text), line)

def string(text: str) -> Token:
    return Token("STRING", text)

def name(ident: str, line: Optional[int]=None) -> Token:
    return _token("NAME", ident, line)

def null() -> Token:
    return Token("NULL", "null")

def true() -> Token:
    return Token("TRUE", "true")

def false() -> Token:
    return Token("FALSE", "false")

def lst(*items: Node) -> Tree:
    return Tree("list", list(items))

def mapping(*pairs: tuple) -> Tree:
    return Tree("map", [Tree("pair", [k, v]) for k, v in pairs])

def index(container: Node, address: Node) -> Tree:
    return Tree("index", [container, address])

def binop(symbol: str, lhs: Node, rhs: Node, line: Optional[int]=None) -> Tree:
    return Tree("binop", [_token("OP", symbol, line), lhs, rhs])

def unop(symbol: str, operand: Node) -> Tree:
    return Tree("unop", [Token("OP", symbol), operand])

def call(fn: str, *args: Node, line: Optional[int]=None) -> Tree:
    return Tree("call", [_token("NAME", fn, line), *args])

def seq(*exprs: Node) -> Tree:
    return Tree("seq", list(exprs))

def signature(expr: Node) -> Tree:
    return Tree("signature", [expr])
