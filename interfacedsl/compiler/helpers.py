import ast
from typing import List, Optional, Sequence, Tuple

from .constants import INTERFACE_NAMESPACE


def _is_docstring_expr(node: ast.AST) -> bool:
    return isinstance(node, ast.Expr) and isinstance(node.value, ast.Constant) and isinstance(
        node.value.value, str
    )


def _is_ellipsis_expr(node: ast.AST) -> bool:
    return isinstance(node, ast.Expr) and isinstance(node.value, ast.Constant) and (
        node.value.value is Ellipsis
    )


def _format_syntax_error(exc: SyntaxError, source: str) -> str:
    line = exc.lineno or 0
    col = exc.offset or 0
    snippet = (exc.text or "").strip()
    if not snippet and line > 0:
        lines = source.splitlines()
        if line <= len(lines):
            snippet = lines[line - 1].strip()
    message = f"Invalid Python syntax: {exc.msg}"
    if line > 0:
        message += f"\nLocation: line {line}, column {col if col > 0 else 1}"
    if snippet:
        message += f"\nCode: {snippet}"
    return message


def _parse_int_literal(node: ast.AST) -> int | None:
    if isinstance(node, ast.Constant) and isinstance(node.value, int) and not isinstance(
        node.value, bool
    ):
        return node.value

    if (
        isinstance(node, ast.UnaryOp)
        and isinstance(node.op, ast.USub)
        and isinstance(node.operand, ast.Constant)
        and isinstance(node.operand.value, int)
        and not isinstance(node.operand.value, bool)
    ):
        return -node.operand.value

    return None


def _attr_path(node: ast.AST) -> Optional[Tuple[str, ...]]:
    # Supports both:
    #   interface.no_selector
    #   interface.call_index(0)
    if isinstance(node, ast.Call):
        node = node.func
    parts: List[str] = []
    while isinstance(node, ast.Attribute):
        parts.append(node.attr)
        node = node.value
    if not isinstance(node, ast.Name):
        return None
    parts.append(node.id)
    return tuple(reversed(parts))


def _is_interface_attr(node: ast.AST) -> bool:
    attr_path = _attr_path(node)
    return attr_path is not None and len(attr_path) >= 2 and attr_path[0] == INTERFACE_NAMESPACE


def _interface_attr_name(node: ast.AST) -> str:
    attr_path = _attr_path(node)
    assert attr_path is not None
    return ".".join(attr_path[1:])


def _take_interface_attrs(
    attrs: Sequence[ast.expr],
) -> Tuple[Tuple[ast.expr, ...], Tuple[ast.expr, ...]]:
    """Split ``interface.*`` attributes from the rest, preserving order."""
    taken = tuple(attr for attr in attrs if _is_interface_attr(attr))
    remaining = tuple(attr for attr in attrs if not _is_interface_attr(attr))
    return taken, remaining


def _docstring_lines(node: ast.AST) -> Tuple[str, ...]:
    doc = ast.get_docstring(node)
    if not doc:
        return ()
    return tuple(doc.splitlines())


__all__ = [
    "_is_docstring_expr",
    "_is_ellipsis_expr",
    "_format_syntax_error",
    "_parse_int_literal",
    "_attr_path",
    "_is_interface_attr",
    "_interface_attr_name",
    "_take_interface_attrs",
    "_docstring_lines",
]
