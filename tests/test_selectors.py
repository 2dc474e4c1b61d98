import textwrap

import pytest

from interfacedsl.compiler.calls import CallCompiler
from interfacedsl.compiler.selectors import SelectorCompiler, check_selector
from interfacedsl.declarations import MethodKind
from interfacedsl.errors import (
    CardinalityError,
    ConsistencyError,
    SourceLocation,
    StructuralError,
    UnrecognizedSyntaxError,
)
from interfacedsl.ir import (
    CallTable,
    DefaultSelector,
    NamedSelector,
    SelectorEntry,
    SelectorTable,
)
from interfacedsl.scanner import scan_definitions
from interfacedsl.typesys import path

LOCATION = SourceLocation(line=1, column=1)

PIP20_CALLS = """
@interface.definition
@interface.with_selector
class Pip20(Core):
    @interface.call
    @interface.call_index(0)
    @interface.weight(0)
    def transfer(
        origin: Self.RuntimeOrigin,
        currency: Select[Self.Currency],
        recv: Self.AccountId,
        amount: Self.Balance,
    ) -> CallResult: ...

    @interface.call
    @interface.call_index(1)
    @interface.use_selector(RestrictedCurrency)
    @interface.weight(0)
    def approve(
        origin: Self.RuntimeOrigin,
        currency: Select[Self.Currency],
        recv: Self.AccountId,
        amount: Self.Balance,
    ) -> CallResult: ...

    @interface.call
    @interface.call_index(3)
    @interface.weight(0)
    @interface.no_selector
    def burn(origin: Self.RuntimeOrigin, who: Self.AccountId, amount: Self.Balance) -> CallResult: ...
"""


def compile_pip20_calls():
    [definition] = scan_definitions(PIP20_CALLS)
    compiler = CallCompiler()
    table = None
    for marked in definition.methods:
        table = compiler.compile_one(table, definition.global_selector, marked.method)
    return table


def selector(name: str, is_default: bool = False, *returns: str) -> SelectorEntry:
    return SelectorEntry(
        name=name,
        method_name=f"select_{name.lower()}",
        return_ty=path(*(returns or ("Self", "Currency"))),
        is_default=is_default,
        location=LOCATION,
    )


def scan_selectors(body: str, with_selector: bool = True):
    header = "@interface.definition\n"
    if with_selector:
        header += "@interface.with_selector\n"
    source = header + "class Pip(Core):\n" + textwrap.indent(textwrap.dedent(body), "    ")
    [definition] = scan_definitions(source)
    compiler = SelectorCompiler()
    table = None
    for marked in definition.methods:
        assert marked.kind is MethodKind.SELECTOR
        table = compiler.compile_one(
            table, definition.global_selector, marked.method, marked.marker
        )
    return table


def test_pip20_calls_compile_in_declaration_order():
    table = compile_pip20_calls()
    assert [entry.call_index for entry in table.entries] == [0, 1, 3]
    assert [entry.selector for entry in table.entries] == [
        DefaultSelector(path("Self", "Currency")),
        NamedSelector("RestrictedCurrency", path("Self", "Currency")),
        None,
    ]


def test_cross_check_succeeds_with_named_and_default_selectors():
    table = compile_pip20_calls()
    selectors = SelectorTable(
        (selector("SelectCurrency", True), selector("RestrictedCurrency"))
    )
    CallCompiler().check_selectors(table, selectors)


def test_cross_check_fails_on_missing_named_selector():
    table = compile_pip20_calls()
    approve = table.entries[1]

    with pytest.raises(ConsistencyError, match="selector `RestrictedCurrency` is not declared") as exc:
        CallCompiler().check_selectors(table, SelectorTable())

    assert exc.value.locations == [approve.location]


def test_cross_check_fails_without_selector_table():
    table = compile_pip20_calls()
    transfer = table.entries[0]

    with pytest.raises(ConsistencyError, match="expected a selector of kind `Default") as exc:
        CallCompiler().check_selectors(table, None)

    assert exc.value.locations == [transfer.location]


def test_cross_check_ignores_calls_without_selector():
    table = compile_pip20_calls()
    burn_only = CallTable(table.interface_location, (table.entries[2],))
    CallCompiler().check_selectors(burn_only, None)


def test_check_selector_rejects_return_type_mismatch():
    selectors = SelectorTable((selector("RestrictedCurrency", False, "Self", "AccountId"),))
    with pytest.raises(ConsistencyError, match="returns `Self.AccountId` but the call expects"):
        check_selector(
            selectors, NamedSelector("RestrictedCurrency", path("Self", "Currency"))
        )


def test_check_selector_checks_declared_default():
    selectors = SelectorTable((selector("SelectAccount", True, "Self", "AccountId"),))
    with pytest.raises(ConsistencyError, match="selector `SelectAccount` returns"):
        check_selector(selectors, DefaultSelector(path("Self", "Currency")))

    check_selector(selectors, DefaultSelector(path("Self", "AccountId")))


def test_selector_compiler_builds_table():
    table = scan_selectors(
        """
        @interface.selector(SelectCurrency)
        @interface.default_selector
        def select_currency(selectable: H256) -> Result[Self.Currency, Error]: ...

        @interface.selector(SelectAccount)
        def select_account(selectable: H256) -> Result[Self.AccountId, Error]: ...
        """
    )
    assert [entry.name for entry in table.entries] == ["SelectCurrency", "SelectAccount"]
    assert table.default.name == "SelectCurrency"
    assert table.get("SelectAccount").return_ty == path("Self", "AccountId")
    assert table.get("Missing") is None


def test_selector_requires_global_selector_mode():
    with pytest.raises(ConsistencyError, match="misses the `@interface.with_selector`"):
        scan_selectors(
            """
            @interface.selector(SelectCurrency)
            def select_currency(selectable: H256) -> Result[Self.Currency, Error]: ...
            """,
            with_selector=False,
        )


def test_reject_duplicate_selector_names():
    with pytest.raises(ConsistencyError, match="declare selector SelectCurrency") as exc:
        scan_selectors(
            """
            @interface.selector(SelectCurrency)
            def select_currency(selectable: H256) -> Result[Self.Currency, Error]: ...

            @interface.selector(SelectCurrency)
            def select_other(selectable: H256) -> Result[Self.Currency, Error]: ...
            """
        )
    assert len(exc.value.diagnostics) == 2


def test_reject_second_default_selector():
    with pytest.raises(ConsistencyError, match="already the default selector"):
        scan_selectors(
            """
            @interface.selector(SelectCurrency)
            @interface.default_selector
            def select_currency(selectable: H256) -> Result[Self.Currency, Error]: ...

            @interface.selector(SelectAccount)
            @interface.default_selector
            def select_account(selectable: H256) -> Result[Self.AccountId, Error]: ...
            """
        )


def test_reject_repeated_default_selector_attribute():
    with pytest.raises(CardinalityError, match="multiple `@interface.default_selector`"):
        scan_selectors(
            """
            @interface.selector(SelectCurrency)
            @interface.default_selector
            @interface.default_selector
            def select_currency(selectable: H256) -> Result[Self.Currency, Error]: ...
            """
        )


def test_reject_quoted_selector_name():
    with pytest.raises(UnrecognizedSyntaxError, match="bare selector identifier"):
        scan_selectors(
            """
            @interface.selector("SelectCurrency")
            def select_currency(selectable: H256) -> Result[Self.Currency, Error]: ...
            """
        )


def test_reject_selector_key_type():
    with pytest.raises(StructuralError, match="expected `H256`"):
        scan_selectors(
            """
            @interface.selector(SelectCurrency)
            def select_currency(selectable: u32) -> Result[Self.Currency, Error]: ...
            """
        )


def test_reject_selector_return_type():
    with pytest.raises(StructuralError, match="expected return type `Result"):
        scan_selectors(
            """
            @interface.selector(SelectCurrency)
            def select_currency(selectable: H256) -> Self.Currency: ...
            """
        )
