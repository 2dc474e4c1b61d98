"""Public marker symbols for authoring interface definitions.

These symbols are parsed from source with ``ast`` and are never executed for
their semantics. Importing them keeps definition files valid, importable
Python; every decorator returns its target unchanged. Selector and trait
names are imported by name, e.g. ``from interfacedsl.dsl_markers import
RestrictedCurrency``, and resolve to inert name markers.

Example::

    from interfacedsl.dsl_markers import *
    from interfacedsl.dsl_markers import RestrictedCurrency, fungible

    @interface.definition
    @interface.with_selector
    class Pip20(Core):
        Currency: Parameter
        Balance: Parameter

        @interface.selector(RestrictedCurrency)
        @interface.default_selector
        def select_restricted_currency(
            selectable: H256,
        ) -> Result[Self.Currency, InterfaceError]: ...

        @interface.call
        @interface.call_index(1)
        @interface.use_selector(RestrictedCurrency)
        @interface.weight(10_000)
        def approve(
            origin: Self.RuntimeOrigin,
            currency: Select[Self.Currency],
            amount: Annotated[Self.Balance, interface.compact],
        ) -> CallResult:
            \"\"\"Approve a spender.\"\"\"

        @interface.call
        @interface.call_index(3)
        @interface.weight(0)
        @interface.no_selector
        def burn(
            origin: Self.RuntimeOrigin,
            amount: As[Self.Currency, fungible.Inspect].Balance,
        ) -> InterfaceResult: ...
"""

from typing import Annotated, Any, Callable, Generic, Tuple, TypeVar

T = TypeVar("T")
E = TypeVar("E")
F = TypeVar("F", bound=Callable[..., Any])


def _identity(target: F) -> F:
    return target


def _directive(*_args: Any) -> Callable[[F], F]:
    return _identity


class _NameMarker:
    """Inert stand-in for a name the compiler resolves, e.g. ``Self.Balance``."""

    def __init__(self, name: str):
        self._name = name

    def __getattr__(self, name: str) -> "_NameMarker":
        if name.startswith("__"):
            raise AttributeError(name)
        return _NameMarker(f"{self._name}.{name}")

    def __getitem__(self, _item: Any) -> "_NameMarker":
        return self

    def __call__(self, *_args: Any, **_kwargs: Any) -> "_NameMarker":
        return self

    def __repr__(self) -> str:
        return self._name


class _CompactMarker:
    def __repr__(self) -> str:
        return "interface.compact"


class _Interface:
    """Namespace behind the ``interface.*`` decorators."""

    definition = staticmethod(_identity)
    with_selector = staticmethod(_identity)
    call = staticmethod(_identity)
    view = staticmethod(_identity)
    no_selector = staticmethod(_identity)
    default_selector = staticmethod(_identity)

    call_index = staticmethod(_directive)
    view_index = staticmethod(_directive)
    weight = staticmethod(_directive)
    use_selector = staticmethod(_directive)
    selector = staticmethod(_directive)

    compact = _CompactMarker()


interface = _Interface()


class _SelfMeta(type):
    def __getattr__(cls, name: str) -> _NameMarker:
        if name.startswith("__"):
            raise AttributeError(name)
        return _NameMarker(f"Self.{name}")


class Self(metaclass=_SelfMeta):
    """The definition's own associated items: ``Self.Balance``, ``Self.RuntimeOrigin``."""


class Core:
    """Base class of interface definitions.

    ``Self.RuntimeOrigin`` names the origin every call receives first.
    """

    RuntimeOrigin: Any


class Parameter:
    """Bound marker for associated types."""


class Member:
    """Bound marker for associated types."""


class H256(bytes):
    """Opaque 256-bit selection key."""


class Select(Generic[T]):
    """Selection wrapper: a selection key paired with the selector resolving it."""


class Result(Generic[T, E]):
    """Return type of selector methods, ``Result[Selected, Error]``."""


class Error(Exception):
    """Interface error marker used in selector return types."""


InterfaceError = Error


class CallResult:
    """Result marker every call method must return."""


InterfaceResult = CallResult


class As:
    """Qualified path marker: ``As[Self.Currency, Trait].Assoc``."""

    def __class_getitem__(cls, item):
        if not isinstance(item, tuple):
            item = (item,)
        return _NameMarker(f"As[{', '.join(repr(part) for part in item)}]")


def __getattr__(name: str) -> _NameMarker:
    if name.startswith("_"):
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return _NameMarker(name)


__all__ = [
    "Annotated",
    "As",
    "CallResult",
    "Core",
    "Error",
    "H256",
    "InterfaceError",
    "InterfaceResult",
    "Member",
    "Parameter",
    "Result",
    "Select",
    "Self",
    "Tuple",
    "interface",
]
