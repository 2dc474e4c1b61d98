"""Discover interface definitions in Python source.

The scanner turns ``@interface.definition`` classes into
:class:`~interfacedsl.declarations.InterfaceDeclaration` values. It checks
only the shape of the source; the per-kind passes validate the rest.
"""

import ast
import warnings
from typing import Dict, List, Optional, Tuple

from interfacedsl.compiler.constants import (
    ANNOTATED_NAMES,
    CALL,
    DEFINITION,
    SELECTOR,
    VIEW,
    WITH_SELECTOR,
)
from interfacedsl.compiler.helpers import (
    _attr_path,
    _docstring_lines,
    _format_syntax_error,
    _interface_attr_name,
    _is_docstring_expr,
    _is_ellipsis_expr,
    _is_interface_attr,
    _take_interface_attrs,
)
from interfacedsl.declarations import (
    InterfaceDeclaration,
    MarkedMethod,
    MethodDeclaration,
    MethodKind,
    Param,
    ParamKind,
)
from interfacedsl.errors import (
    CardinalityError,
    ConsistencyError,
    SourceLocation,
    StructuralError,
    UnrecognizedSyntaxError,
    format_diagnostic,
    node_context,
    source_context,
)
from interfacedsl.typesys import type_from_ast

_METHOD_MARKERS = {
    CALL: MethodKind.CALL,
    VIEW: MethodKind.VIEW,
    SELECTOR: MethodKind.SELECTOR,
}


def scan_definitions(
    source: str, source_path: Optional[str] = None
) -> List[InterfaceDeclaration]:
    """Parse ``source`` and return its interface definitions in source order."""
    if not source.strip():
        raise StructuralError("Source is empty; expected at least one interface definition.")

    with source_context(source, source_path):
        try:
            module = ast.parse(source)
        except SyntaxError as exc:
            raise UnrecognizedSyntaxError(_format_syntax_error(exc, source)) from exc

        definitions: List[InterfaceDeclaration] = []
        for node in module.body:
            with node_context(node):
                if _is_docstring_expr(node):
                    continue
                if isinstance(node, (ast.Import, ast.ImportFrom)):
                    continue
                if isinstance(node, ast.ClassDef):
                    if _is_definition_class(node):
                        definitions.append(_scan_definition(node))
                    else:
                        warnings.warn(
                            format_diagnostic(
                                f"Class '{node.name}' is ignored because it is not "
                                f"decorated with @interface.{DEFINITION}.",
                                node=node,
                            ),
                            stacklevel=2,
                        )
                    continue
                raise UnrecognizedSyntaxError(
                    f"Unsupported top-level statement: {type(node).__name__}"
                )

        return definitions


def _is_definition_class(node: ast.ClassDef) -> bool:
    return any(
        _is_interface_attr(decorator) and _interface_attr_name(decorator) == DEFINITION
        for decorator in node.decorator_list
    )


def _scan_definition(node: ast.ClassDef) -> InterfaceDeclaration:
    taken, remaining = _take_interface_attrs(node.decorator_list)
    if remaining:
        raise StructuralError(
            "Only interface.* decorators are allowed on interface definitions.",
            node=remaining[0],
        )

    seen: Dict[str, ast.expr] = {}
    for decorator in taken:
        with node_context(decorator):
            name = _interface_attr_name(decorator)
            if name not in (DEFINITION, WITH_SELECTOR) or isinstance(decorator, ast.Call):
                raise UnrecognizedSyntaxError(
                    f"Unrecognized definition attribute `{ast.unparse(decorator)}`; "
                    f"expected `interface.{DEFINITION}` or `interface.{WITH_SELECTOR}`."
                )
            if name in seen:
                raise CardinalityError(
                    f"Multiple `@interface.{name}` attributes on definition '{node.name}'."
                )
            seen[name] = decorator

    associated_types: List[str] = []
    methods: List[MarkedMethod] = []
    method_names: Dict[str, MarkedMethod] = {}
    for stmt in node.body:
        with node_context(stmt):
            if _is_docstring_expr(stmt) or isinstance(stmt, ast.Pass):
                continue
            if isinstance(stmt, ast.AnnAssign):
                if stmt.value is not None or not isinstance(stmt.target, ast.Name):
                    raise StructuralError(
                        "Associated types must be declared as `Name: Bound` without a value."
                    )
                if stmt.target.id in associated_types:
                    raise ConsistencyError(
                        f"Duplicate associated type '{stmt.target.id}' in '{node.name}'."
                    )
                associated_types.append(stmt.target.id)
                continue
            if isinstance(stmt, ast.FunctionDef):
                marked = _scan_method(stmt)
                previous = method_names.get(stmt.name)
                if previous is not None:
                    message = f"Duplicate method '{stmt.name}' in definition '{node.name}'."
                    error = ConsistencyError(message, location=previous.method.location)
                    error.combine(ConsistencyError(message, location=marked.method.location))
                    raise error
                method_names[stmt.name] = marked
                methods.append(marked)
                continue
            raise UnrecognizedSyntaxError(
                f"Unsupported statement in interface definition: {type(stmt).__name__}"
            )

    location = SourceLocation.from_node(node)
    assert location is not None
    return InterfaceDeclaration(
        name=node.name,
        global_selector=WITH_SELECTOR in seen,
        associated_types=tuple(associated_types),
        methods=tuple(methods),
        docs=_docstring_lines(node),
        location=location,
    )


def _scan_method(fn: ast.FunctionDef) -> MarkedMethod:
    markers = [
        decorator
        for decorator in fn.decorator_list
        if _is_interface_attr(decorator)
        and _interface_attr_name(decorator) in _METHOD_MARKERS
    ]
    if not markers:
        raise StructuralError(
            f"Method '{fn.name}' must be marked with one of `@interface.{CALL}`, "
            f"`@interface.{VIEW}` or `@interface.{SELECTOR}(Name)`."
        )
    if len(markers) > 1:
        raise CardinalityError(
            f"Method '{fn.name}' has more than one kind marker; use exactly one of "
            f"`@interface.{CALL}`, `@interface.{VIEW}` or `@interface.{SELECTOR}(Name)`."
        )
    marker = markers[0]
    kind = _METHOD_MARKERS[_interface_attr_name(marker)]
    if kind is not MethodKind.SELECTOR and isinstance(marker, ast.Call):
        raise UnrecognizedSyntaxError(
            f"`@interface.{_interface_attr_name(marker)}` takes no arguments.", node=marker
        )

    for stmt in fn.body:
        if _is_docstring_expr(stmt) or _is_ellipsis_expr(stmt) or isinstance(stmt, ast.Pass):
            continue
        raise StructuralError(
            f"Interface method '{fn.name}' cannot have a body; use `...`.", node=stmt
        )

    location = SourceLocation.from_node(fn)
    assert location is not None
    returns = type_from_ast(fn.returns) if fn.returns is not None else None
    method = MethodDeclaration(
        name=fn.name,
        params=_scan_params(fn),
        returns=returns,
        attrs=tuple(d for d in fn.decorator_list if d is not marker),
        docs=_docstring_lines(fn),
        location=location,
        returns_location=(
            SourceLocation.from_node(fn.returns) if fn.returns is not None else None
        ),
        node=fn,
    )
    return MarkedMethod(kind=kind, method=method, marker=marker)


def _scan_params(fn: ast.FunctionDef) -> Tuple[Param, ...]:
    args = fn.args
    if args.defaults or any(default is not None for default in args.kw_defaults):
        raise StructuralError(
            f"Interface method '{fn.name}' parameters cannot have default values."
        )

    entries: List[Tuple[str, ast.arg]] = []
    entries.extend((arg.arg, arg) for arg in args.posonlyargs + args.args)
    if args.vararg is not None:
        entries.append((f"*{args.vararg.arg}", args.vararg))
    entries.extend((arg.arg, arg) for arg in args.kwonlyargs)
    if args.kwarg is not None:
        entries.append((f"**{args.kwarg.arg}", args.kwarg))

    params: List[Param] = []
    for position, (pattern, arg) in enumerate(entries):
        with node_context(arg):
            location = SourceLocation.from_node(arg)
            if arg.annotation is None:
                if position == 0 and pattern == arg.arg:
                    params.append(
                        Param(ParamKind.RECEIVER, pattern, location=location, node=arg)
                    )
                    continue
                raise StructuralError(f"Parameter '{pattern}' must have a type annotation.")
            type_node, metadata = _split_annotated(arg.annotation)
            params.append(
                Param(
                    ParamKind.TYPED,
                    pattern,
                    ty=type_from_ast(type_node),
                    attrs=metadata,
                    location=location,
                    node=arg,
                )
            )
    return tuple(params)


def _split_annotated(node: ast.expr) -> Tuple[ast.expr, Tuple[ast.expr, ...]]:
    # Annotated[T, interface.compact] attaches markers to the argument.
    if isinstance(node, ast.Subscript):
        attr_path = _attr_path(node.value)
        if attr_path is not None and attr_path[-1] in ANNOTATED_NAMES:
            if not isinstance(node.slice, ast.Tuple) or len(node.slice.elts) < 2:
                raise StructuralError(
                    "Annotated[...] requires a type and at least one marker.", node=node
                )
            return node.slice.elts[0], tuple(node.slice.elts[1:])
    return node, ()
