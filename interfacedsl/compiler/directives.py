"""Per-method ``interface.*`` directives and argument markers.

Each recognized decorator is classified into exactly one :class:`Directive`
variant; anything else under the ``interface`` namespace is rejected.
"""

import ast
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from interfacedsl.errors import (
    SourceLocation,
    UnrecognizedSyntaxError,
    node_context,
    source_segment,
)

from .constants import (
    CALL_DIRECTIVES,
    CALL_INDEX,
    COMPACT,
    INTERFACE_NAMESPACE,
    MAX_CALL_INDEX,
    NO_SELECTOR,
    USE_SELECTOR,
    WEIGHT,
)
from .helpers import _interface_attr_name, _parse_int_literal, _take_interface_attrs


class Directive:
    pass


@dataclass(frozen=True)
class CallIndex(Directive):
    index: int


@dataclass(frozen=True)
class Weight(Directive):
    formula: str


@dataclass(frozen=True)
class UseSelector(Directive):
    name: str


@dataclass(frozen=True)
class NoSelector(Directive):
    pass


@dataclass(frozen=True)
class Compact:
    pass


def _expected_vocabulary(names: Sequence[str]) -> str:
    return ", ".join(f"`{INTERFACE_NAMESPACE}.{name}`" for name in names)


def _single_argument(node: ast.AST, name: str, usage: str) -> ast.expr:
    if not isinstance(node, ast.Call):
        raise UnrecognizedSyntaxError(
            f"`{INTERFACE_NAMESPACE}.{name}` requires an argument, e.g. `{usage}`."
        )
    if len(node.args) != 1 or node.keywords:
        raise UnrecognizedSyntaxError(
            f"`{INTERFACE_NAMESPACE}.{name}` takes exactly one positional argument, "
            f"e.g. `{usage}`."
        )
    return node.args[0]


def _parse_call_index(node: ast.AST) -> CallIndex:
    value = _single_argument(node, CALL_INDEX, "interface.call_index(0)")
    if isinstance(value, ast.Constant) and isinstance(value.value, (float, complex)):
        raise UnrecognizedSyntaxError(
            f"Number literal must not have a suffix: `{ast.unparse(value)}`.",
            node=value,
        )
    index = _parse_int_literal(value)
    if index is None:
        raise UnrecognizedSyntaxError(
            f"`{INTERFACE_NAMESPACE}.{CALL_INDEX}` expects an unsigned integer literal, "
            f"found `{ast.unparse(value)}`.",
            node=value,
        )
    if not 0 <= index <= MAX_CALL_INDEX:
        raise UnrecognizedSyntaxError(
            f"Call index {index} is out of range; expected 0..{MAX_CALL_INDEX}.",
            node=value,
        )
    return CallIndex(index)


def _parse_use_selector(node: ast.AST) -> UseSelector:
    value = _single_argument(node, USE_SELECTOR, "interface.use_selector(SelectorName)")
    if not isinstance(value, ast.Name):
        raise UnrecognizedSyntaxError(
            f"`{INTERFACE_NAMESPACE}.{USE_SELECTOR}` expects a bare selector identifier, "
            f"found `{ast.unparse(value)}`.",
            node=value,
        )
    return UseSelector(value.id)


def parse_call_directive(node: ast.expr) -> Directive:
    """Classify one ``interface.*`` decorator of a call method."""
    with node_context(node):
        name = _interface_attr_name(node)
        if name == CALL_INDEX:
            return _parse_call_index(node)
        if name == WEIGHT:
            formula = _single_argument(node, WEIGHT, "interface.weight(10_000)")
            return Weight(source_segment(formula) or ast.unparse(formula))
        if name == USE_SELECTOR:
            return _parse_use_selector(node)
        if name == NO_SELECTOR:
            if isinstance(node, ast.Call):
                raise UnrecognizedSyntaxError(
                    f"`{INTERFACE_NAMESPACE}.{NO_SELECTOR}` takes no arguments."
                )
            return NoSelector()
        raise UnrecognizedSyntaxError(
            f"Unrecognized call attribute `{ast.unparse(node)}`; expected one of "
            f"{_expected_vocabulary(CALL_DIRECTIVES)}."
        )


def parse_arg_attr(node: ast.expr) -> Compact:
    """Parse an ``interface.*`` marker attached to a call argument."""
    with node_context(node):
        if _interface_attr_name(node) == COMPACT and not isinstance(node, ast.Call):
            return Compact()
        raise UnrecognizedSyntaxError(
            f"Unrecognized argument attribute `{ast.unparse(node)}`; expected "
            f"{_expected_vocabulary((COMPACT,))}."
        )


def take_call_directives(
    attrs: Sequence[ast.expr],
) -> Tuple[List[Tuple[Directive, SourceLocation | None]], Tuple[ast.expr, ...]]:
    """Drain and parse the ``interface.*`` attributes of a call method.

    Returns the parsed directives (with the location of the attribute each
    came from) and the attributes left untouched.
    """
    taken, remaining = _take_interface_attrs(attrs)
    directives = [
        (parse_call_directive(attr), SourceLocation.from_node(attr)) for attr in taken
    ]
    return directives, remaining


def take_arg_attrs(attrs: Sequence[ast.expr]) -> Tuple[List[Compact], Tuple[ast.expr, ...]]:
    taken, remaining = _take_interface_attrs(attrs)
    return [parse_arg_attr(attr) for attr in taken], remaining
