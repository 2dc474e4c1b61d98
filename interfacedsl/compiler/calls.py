import ast
import keyword
from typing import List, Optional, Tuple

from interfacedsl.declarations import MethodDeclaration, Param, ParamKind
from interfacedsl.errors import (
    CardinalityError,
    ConsistencyError,
    SourceLocation,
    StructuralError,
)
from interfacedsl.ir import (
    CallArg,
    CallEntry,
    CallTable,
    DefaultSelector,
    NamedSelector,
    SelectorRequirement,
    SelectorTable,
)
from interfacedsl.typesys import substitute_self

from .constants import (
    DEFAULT_RUNTIME_PLACEHOLDER,
    NO_SELECTOR,
    USE_SELECTOR,
    WITH_SELECTOR,
)
from .directives import (
    CallIndex,
    Directive,
    NoSelector,
    UseSelector,
    Weight,
    take_arg_attrs,
    take_call_directives,
)
from .selectors import check_selector
from .signature import (
    check_call_first_arg_type,
    check_call_return_type,
    check_call_second_arg_type,
)


def _is_simple_identifier(pattern: str) -> bool:
    return pattern.isidentifier() and not keyword.iskeyword(pattern)


class CallCompiler:
    """Fold call methods, one at a time, into a validated :class:`CallTable`."""

    def __init__(self, runtime_placeholder: str = DEFAULT_RUNTIME_PLACEHOLDER):
        self.runtime_placeholder = runtime_placeholder

    def compile_one(
        self,
        calls: Optional[CallTable],
        global_selector: bool,
        method: MethodDeclaration,
        *,
        interface_location: Optional[SourceLocation] = None,
        attr_location: Optional[SourceLocation] = None,
    ) -> CallTable:
        """Compile ``method`` and return ``calls`` extended with its entry.

        ``calls`` is never modified; on failure no table is produced.
        """
        calls = calls if calls is not None else CallTable(interface_location)
        location = attr_location or method.location
        indices = calls.index_map()

        if not method.params:
            raise StructuralError(
                "Invalid interface.call, must have at least origin arg.",
                location=method.location,
            )
        origin = method.params[0]
        if origin.kind is ParamKind.RECEIVER:
            raise StructuralError(
                "Invalid interface.call, first argument must be a typed argument, "
                "e.g. `origin: Self.RuntimeOrigin`.",
                location=method.location,
            )
        check_call_first_arg_type(origin)
        self._reject_arg_markers(origin, "origin")
        check_call_return_type(method.returns, method.returns_location or method.location)

        directives, remaining_attrs = take_call_directives(method.attrs)
        method = method.with_attrs(remaining_attrs)
        weights, call_indices, selector_attr = self._partition_directives(
            directives, method
        )

        if len(weights) != 1:
            if not weights:
                raise CardinalityError(
                    "Invalid interface.call, requires weight attribute "
                    "i.e. `@interface.weight($expr)`.",
                    location=method.location,
                )
            raise CardinalityError(
                "Invalid interface.call, too many weight attributes given.",
                location=method.location,
            )
        weight = weights[0]

        if len(call_indices) != 1:
            if not call_indices:
                raise CardinalityError(
                    "Invalid interface.call, requires call_index attribute "
                    "i.e. `@interface.call_index(u8)`.",
                    location=method.location,
                )
            raise CardinalityError(
                "Invalid interface.call, too many call_index attributes given.",
                location=method.location,
            )
        call_index = call_indices[0]

        used = indices.get(call_index.index)
        if used is not None:
            message = (
                f"Call indices are conflicting: Both functions {used.name} and "
                f"{method.name} are at index {call_index.index}."
            )
            error = ConsistencyError(message, location=used.location)
            error.combine(ConsistencyError(message, location=location))
            raise error

        if selector_attr is not None and not global_selector:
            raise ConsistencyError(
                "Invalid interface.call, selector attributes given but the definition "
                f"misses the `@interface.{WITH_SELECTOR}` attribute.",
                location=method.location,
            )

        if selector_attr is None:
            with_selector = global_selector
        else:
            with_selector = isinstance(selector_attr, UseSelector)

        selector: Optional[SelectorRequirement] = None
        skip = 1
        if with_selector:
            selector = self._selector_requirement(method, selector_attr)
            skip = 2

        args = tuple(self._compile_arg(param) for param in method.params[skip:])

        entry = CallEntry(
            selector=selector,
            name=method.name,
            args=args,
            weight=weight.formula,
            call_index=call_index.index,
            docs=method.docs,
            attrs=tuple(ast.unparse(attr) for attr in method.attrs),
            location=location,
        )
        return calls.with_entry(entry)

    def check_selectors(
        self, calls: CallTable, selectors: Optional[SelectorTable]
    ) -> None:
        """Check every call's selector requirement against the declared selectors."""
        for call in calls.entries:
            if call.selector is None:
                continue
            if selectors is None:
                raise ConsistencyError(
                    "Invalid interface.definition, expected a selector of kind "
                    f"`{call.selector.describe()}`, found none. (try adding a correctly "
                    "annotated selector method to the definition).",
                    location=call.location,
                )
            check_selector(selectors, call.selector, location=call.location)

    def _partition_directives(
        self,
        directives: List[Tuple[Directive, Optional[SourceLocation]]],
        method: MethodDeclaration,
    ) -> Tuple[List[Weight], List[CallIndex], Optional[Directive]]:
        weights: List[Weight] = []
        call_indices: List[CallIndex] = []
        selector_attr: Optional[Directive] = None

        for directive, attr_location in directives:
            if isinstance(directive, Weight):
                weights.append(directive)
            elif isinstance(directive, CallIndex):
                call_indices.append(directive)
            elif isinstance(directive, (NoSelector, UseSelector)):
                if selector_attr is not None:
                    if type(selector_attr) is not type(directive):
                        raise ConsistencyError(
                            f"Invalid interface.call, both `@interface.{NO_SELECTOR}` and "
                            f"`@interface.{USE_SELECTOR}($ident)` used on the same method. "
                            "Use either one or the other.",
                            location=attr_location or method.location,
                        )
                    kind = NO_SELECTOR if isinstance(directive, NoSelector) else (
                        f"{USE_SELECTOR}($ident)"
                    )
                    raise CardinalityError(
                        f"Invalid interface.call, multiple `@interface.{kind}` attributes "
                        "used on the same method. Only one is allowed.",
                        location=attr_location or method.location,
                    )
                selector_attr = directive
            else:
                raise AssertionError(f"Unknown directive {type(directive).__name__}")

        return weights, call_indices, selector_attr

    def _selector_requirement(
        self, method: MethodDeclaration, selector_attr: Optional[Directive]
    ) -> SelectorRequirement:
        if len(method.params) < 2:
            raise StructuralError(
                "Invalid interface.call, must have `Select[$type]` as second argument if "
                f"used with a selector and not annotated with `@interface.{NO_SELECTOR}`.",
                location=method.location,
            )
        select = method.params[1]
        if select.kind is ParamKind.RECEIVER:
            raise StructuralError(
                "Invalid interface.call, second argument must be a typed argument, "
                "e.g. `select: Select[$type]`.",
                location=select.location or method.location,
            )
        return_ty = check_call_second_arg_type(select)
        self._reject_arg_markers(select, "selection")
        if isinstance(selector_attr, UseSelector):
            return NamedSelector(name=selector_attr.name, return_ty=return_ty)
        return DefaultSelector(return_ty=return_ty)

    def _reject_arg_markers(self, param: Param, role: str) -> None:
        markers, _ = take_arg_attrs(param.attrs)
        if markers:
            raise StructuralError(
                f"Invalid interface.call, the {role} argument cannot be marked "
                "`interface.compact`.",
                location=param.location,
            )

    def _compile_arg(self, param: Param) -> CallArg:
        if param.kind is ParamKind.RECEIVER or param.ty is None:
            raise StructuralError(
                "Invalid interface.call, only the first argument can be a receiver.",
                location=param.location,
            )
        markers, remaining = take_arg_attrs(param.attrs)
        param = param.with_attrs(remaining)
        if len(markers) > 1:
            raise CardinalityError(
                "Invalid interface.call, argument has too many attributes.",
                location=param.location,
            )
        if not _is_simple_identifier(param.pattern):
            raise StructuralError(
                f"Invalid interface.call, argument must be ident, found `{param.pattern}`.",
                location=param.location,
            )
        return CallArg(
            is_compact=bool(markers),
            name=param.pattern,
            ty=substitute_self(param.ty, self.runtime_placeholder),
        )
