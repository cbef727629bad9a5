"""Arithmetic evaluation for expression-valued geometry options.

Options such as ``win_width = "columns // 2"`` are evaluated against a
mapping of names (terminal size, item count, already-resolved options). Only
numeric literals, names, arithmetic operators, and ``min``/``max``/``int``
calls are accepted.
"""

from __future__ import annotations

import ast
import operator
from collections.abc import Callable, Mapping

_BINARY_OPS: dict[type[ast.operator], Callable[[object, object], object]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}
_UNARY_OPS: dict[type[ast.unaryop], Callable[[object], object]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}
_FUNCTIONS: dict[str, Callable[..., object]] = {"min": min, "max": max, "int": int}


class ExpressionError(ValueError):
    """Raised for unsupported syntax or unknown names."""


def evaluate_expression(expr: str, names: Mapping[str, object]) -> object:
    """Evaluate ``expr`` with ``names`` bound; raises :class:`ExpressionError`."""
    try:
        tree = ast.parse(expr.strip(), mode="eval")
    except SyntaxError as exc:
        raise ExpressionError(f"invalid expression {expr!r}: {exc.msg}") from exc
    return _eval_node(tree.body, names)


def _eval_node(node: ast.AST, names: Mapping[str, object]) -> object:
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return node.value
    if isinstance(node, ast.Name):
        if node.id not in names:
            raise ExpressionError(f"unknown name: {node.id}")
        value = names[node.id]
        if isinstance(value, str):
            # Options may refer to other options that are still expressions.
            return evaluate_expression(value, names)
        return value
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        return _BINARY_OPS[type(node.op)](_eval_node(node.left, names), _eval_node(node.right, names))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand, names))
    if (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id in _FUNCTIONS
        and not node.keywords
    ):
        args = [_eval_node(arg, names) for arg in node.args]
        return _FUNCTIONS[node.func.id](*args)
    raise ExpressionError(f"unsupported expression element: {type(node).__name__}")
