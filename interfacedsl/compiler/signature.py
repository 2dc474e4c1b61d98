from typing import Optional

from interfacedsl.declarations import Param
from interfacedsl.errors import SourceLocation, StructuralError
from interfacedsl.typesys import PathType, TypeExpr, render_type

from .constants import CALL_RESULT_MARKERS, RUNTIME_ORIGIN, SELECT_WRAPPER, SELF_IDENT


def _type_text(ty: Optional[TypeExpr]) -> str:
    return render_type(ty) if ty is not None else "<none>"


def check_call_first_arg_type(param: Param) -> None:
    """Check the syntax is ``Self.RuntimeOrigin``."""
    if isinstance(param.ty, PathType) and param.ty.is_plain(SELF_IDENT, RUNTIME_ORIGIN):
        return
    raise StructuralError(
        f"Invalid type: expected `{SELF_IDENT}.{RUNTIME_ORIGIN}`, "
        f"found `{_type_text(param.ty)}`.",
        location=param.location,
    )


def check_call_second_arg_type(param: Param) -> TypeExpr:
    """Check the syntax is ``Select[T]`` and return ``T``."""
    ty = param.ty
    if (
        isinstance(ty, PathType)
        and ty.qself is None
        and len(ty.segments) == 1
        and ty.segments[0].ident == SELECT_WRAPPER
        and len(ty.segments[0].args) == 1
    ):
        return ty.segments[0].args[0]
    raise StructuralError(
        f"Invalid type: expected `{SELECT_WRAPPER}[$type]`, found `{_type_text(ty)}`.",
        location=param.location,
    )


def check_call_return_type(
    returns: Optional[TypeExpr], location: Optional[SourceLocation]
) -> None:
    """Check the return type is one of the call result markers."""
    if returns is None:
        raise StructuralError(
            f"Invalid interface.call, require return type {CALL_RESULT_MARKERS[0]}.",
            location=location,
        )
    if isinstance(returns, PathType) and any(
        returns.is_plain(marker) for marker in CALL_RESULT_MARKERS
    ):
        return
    expected = " or ".join(f"`{marker}`" for marker in CALL_RESULT_MARKERS)
    raise StructuralError(
        f"Invalid return type: expected {expected}, found `{render_type(returns)}`.",
        location=location,
    )
