import ast

import pytest

from interfacedsl.compiler.signature import (
    check_call_first_arg_type,
    check_call_return_type,
    check_call_second_arg_type,
)
from interfacedsl.declarations import Param, ParamKind
from interfacedsl.errors import SourceLocation, StructuralError
from interfacedsl.typesys import path, type_from_ast


def parse_type(text: str):
    return type_from_ast(ast.parse(text, mode="eval").body)


def typed(name: str, annotation: str) -> Param:
    return Param(
        ParamKind.TYPED,
        name,
        ty=parse_type(annotation),
        location=SourceLocation(line=4, column=9),
    )


def test_first_arg_must_be_runtime_origin():
    check_call_first_arg_type(typed("origin", "Self.RuntimeOrigin"))


@pytest.mark.parametrize(
    "annotation", ["Self.AccountId", "T.RuntimeOrigin", "RuntimeOrigin", "Self.RuntimeOrigin[u8]"]
)
def test_reject_other_first_arg_types(annotation):
    with pytest.raises(StructuralError, match="expected `Self.RuntimeOrigin`") as exc:
        check_call_first_arg_type(typed("origin", annotation))
    assert exc.value.locations == [SourceLocation(line=4, column=9)]


def test_second_arg_yields_selected_type():
    assert check_call_second_arg_type(typed("currency", "Select[Self.Currency]")) == path(
        "Self", "Currency"
    )


@pytest.mark.parametrize(
    "annotation", ["Self.Currency", "Select[Self.Currency, u8]", "Option[Self.Currency]"]
)
def test_reject_other_second_arg_types(annotation):
    with pytest.raises(StructuralError, match=r"expected `Select\[\$type\]`"):
        check_call_second_arg_type(typed("currency", annotation))


@pytest.mark.parametrize("marker", ["CallResult", "InterfaceResult"])
def test_return_type_accepts_result_markers(marker):
    check_call_return_type(parse_type(marker), None)


def test_reject_missing_return_type():
    with pytest.raises(StructuralError, match="require return type CallResult"):
        check_call_return_type(None, None)


@pytest.mark.parametrize("annotation", ["DispatchResult", "CallResult[u8]", "Self.CallResult"])
def test_reject_other_return_types(annotation):
    with pytest.raises(StructuralError, match="Invalid return type"):
        check_call_return_type(parse_type(annotation), None)
