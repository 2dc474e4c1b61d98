import ast

import pytest

from interfacedsl.errors import StructuralError
from interfacedsl.typesys import (
    PathSegment,
    PathType,
    QualifiedSelf,
    TupleType,
    generic,
    path,
    render_type,
    substitute_self,
    type_from_ast,
)


def parse_type(text: str):
    return type_from_ast(ast.parse(text, mode="eval").body)


def test_parse_plain_and_self_paths():
    assert parse_type("u32") == path("u32")
    assert parse_type("Self.Currency") == path("Self", "Currency")


def test_parse_generic_application():
    assert parse_type("Select[Self.Currency]") == generic("Select", path("Self", "Currency"))
    assert parse_type("BTreeMap[Self.AccountId, u128]") == generic(
        "BTreeMap", path("Self", "AccountId"), path("u128")
    )


def test_parse_qualified_path():
    assert parse_type("As[Self.Currency, fungible.Inspect].Balance") == PathType(
        (PathSegment("Balance"),),
        qself=QualifiedSelf(path("Self", "Currency"), path("fungible", "Inspect")),
    )


def test_parse_tuples_unit_and_string_annotations():
    assert parse_type("Tuple[Self.Currency, u8]") == TupleType(
        (path("Self", "Currency"), path("u8"))
    )
    assert parse_type("None") == TupleType(())
    assert parse_type("'Self.Balance'") == path("Self", "Balance")


def test_reject_bare_qualified_path():
    with pytest.raises(StructuralError, match="must name an associated item"):
        parse_type("As[Self.Currency, Trait]")


def test_reject_unsupported_type_expression():
    with pytest.raises(StructuralError, match="Unsupported type expression"):
        parse_type("Self.Balance | None")


@pytest.mark.parametrize(
    "text",
    [
        "u32",
        "Self.Currency",
        "Vec[Tuple[Self.Currency, Self.Balance]]",
        "As[Self.Currency, fungible.Inspect].Balance",
        "None",
    ],
)
def test_render_type_matches_annotation_text(text):
    assert render_type(parse_type(text)) == text


def test_substitute_self_leaves_types_without_self_unchanged():
    ty = parse_type("Vec[Tuple[u8, frame.AccountId]]")
    assert substitute_self(ty, "Runtime") == ty


def test_substitute_self_rewrites_paths_and_qualified_clauses():
    assert render_type(substitute_self(parse_type("Self.Currency"), "Runtime")) == (
        "Runtime.Currency"
    )
    assert (
        render_type(
            substitute_self(parse_type("As[Self.Currency, fungible.Inspect].Balance"), "Runtime")
        )
        == "As[Runtime.Currency, fungible.Inspect].Balance"
    )
    assert (
        render_type(substitute_self(parse_type("Vec[Tuple[Self.AccountId, u8]]"), "Runtime"))
        == "Vec[Tuple[Runtime.AccountId, u8]]"
    )


def test_substitute_self_is_idempotent():
    once = substitute_self(parse_type("As[Self.Currency, Trait].Assoc"), "Runtime")
    assert substitute_self(once, "Runtime") == once


def test_substitute_self_rejects_self_placeholder():
    with pytest.raises(ValueError, match="cannot itself be 'Self'"):
        substitute_self(path("Self", "Currency"), "Self")
