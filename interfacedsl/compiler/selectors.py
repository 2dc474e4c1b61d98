import ast
from typing import Optional

from interfacedsl.declarations import MethodDeclaration, ParamKind
from interfacedsl.errors import (
    CardinalityError,
    ConsistencyError,
    SourceLocation,
    StructuralError,
    UnrecognizedSyntaxError,
    node_context,
)
from interfacedsl.ir import (
    DefaultSelector,
    NamedSelector,
    SelectorEntry,
    SelectorRequirement,
    SelectorTable,
)
from interfacedsl.typesys import PathType, TypeExpr, render_type

from .constants import (
    DEFAULT_SELECTOR,
    SELECTION_KEY_TYPE,
    SELECTOR,
    SELECTOR_RESULT,
    WITH_SELECTOR,
)
from .helpers import _interface_attr_name, _take_interface_attrs


def check_selector(
    selectors: SelectorTable,
    requirement: SelectorRequirement,
    *,
    location: Optional[SourceLocation] = None,
) -> None:
    """Check that ``requirement`` is satisfied by a declared selector.

    A default requirement is only checked when the table marks a default
    selector; otherwise the default is resolved from context.
    """
    if isinstance(requirement, NamedSelector):
        declared = selectors.get(requirement.name)
        if declared is None:
            raise ConsistencyError(
                f"Invalid interface.definition, selector `{requirement.name}` is not "
                "declared (try adding a method annotated with "
                f"`@interface.{SELECTOR}({requirement.name})`).",
                location=location,
            )
    elif isinstance(requirement, DefaultSelector):
        declared = selectors.default
        if declared is None:
            return
    else:
        raise AssertionError("Unknown selector requirement")

    if declared.return_ty != requirement.return_ty:
        raise ConsistencyError(
            f"Invalid interface.definition, selector `{declared.name}` returns "
            f"`{render_type(declared.return_ty)}` but the call expects "
            f"`{render_type(requirement.return_ty)}`.",
            location=location,
        )


class SelectorCompiler:
    """Collect ``interface.selector`` methods into a :class:`SelectorTable`."""

    def compile_one(
        self,
        selectors: Optional[SelectorTable],
        global_selector: bool,
        method: MethodDeclaration,
        marker: ast.expr,
    ) -> SelectorTable:
        selectors = selectors if selectors is not None else SelectorTable()

        if not global_selector:
            raise ConsistencyError(
                f"Invalid interface.selector, selector `{method.name}` declared but the "
                f"definition misses the `@interface.{WITH_SELECTOR}` attribute.",
                location=method.location,
            )

        name = self._selector_name(marker)
        is_default = self._take_default_flag(method)

        if len(method.params) != 1 or method.params[0].kind is ParamKind.RECEIVER:
            raise StructuralError(
                "Invalid interface.selector, expected exactly one typed argument, "
                f"e.g. `selectable: {SELECTION_KEY_TYPE}`.",
                location=method.location,
            )
        key = method.params[0]
        if not (isinstance(key.ty, PathType) and key.ty.is_plain(SELECTION_KEY_TYPE)):
            raise StructuralError(
                f"Invalid type: expected `{SELECTION_KEY_TYPE}`.",
                location=key.location,
            )
        return_ty = self._selected_type(method)

        existing = selectors.get(name)
        if existing is not None:
            message = (
                f"Selector names are conflicting: Both functions {existing.method_name} "
                f"and {method.name} declare selector {name}."
            )
            error = ConsistencyError(message, location=existing.location)
            error.combine(ConsistencyError(message, location=method.location))
            raise error
        if is_default and selectors.default is not None:
            raise ConsistencyError(
                f"Invalid interface.selector, `{selectors.default.name}` is already the "
                "default selector. Only one is allowed.",
                location=method.location,
            )

        return selectors.with_entry(
            SelectorEntry(
                name=name,
                method_name=method.name,
                return_ty=return_ty,
                is_default=is_default,
                location=method.location,
            )
        )

    def _selector_name(self, marker: ast.expr) -> str:
        with node_context(marker):
            if (
                isinstance(marker, ast.Call)
                and len(marker.args) == 1
                and not marker.keywords
                and isinstance(marker.args[0], ast.Name)
            ):
                return marker.args[0].id
            raise UnrecognizedSyntaxError(
                f"`interface.{SELECTOR}` expects a bare selector identifier, "
                "e.g. `@interface.selector(SelectCurrency)`."
            )

    def _take_default_flag(self, method: MethodDeclaration) -> bool:
        taken, _ = _take_interface_attrs(method.attrs)
        defaults = 0
        for attr in taken:
            with node_context(attr):
                if _interface_attr_name(attr) != DEFAULT_SELECTOR or isinstance(
                    attr, ast.Call
                ):
                    raise UnrecognizedSyntaxError(
                        f"Unrecognized selector attribute `{ast.unparse(attr)}`; expected "
                        f"`interface.{DEFAULT_SELECTOR}`."
                    )
            defaults += 1
        if defaults > 1:
            raise CardinalityError(
                f"Invalid interface.selector, multiple `@interface.{DEFAULT_SELECTOR}` "
                "attributes used on the same method. Only one is allowed.",
                location=method.location,
            )
        return defaults == 1

    def _selected_type(self, method: MethodDeclaration) -> TypeExpr:
        returns = method.returns
        if (
            isinstance(returns, PathType)
            and returns.qself is None
            and len(returns.segments) == 1
            and returns.segments[0].ident == SELECTOR_RESULT
            and len(returns.segments[0].args) == 2
        ):
            return returns.segments[0].args[0]
        raise StructuralError(
            f"Invalid interface.selector, expected return type `{SELECTOR_RESULT}[$type, Error]`.",
            location=method.returns_location or method.location,
        )
