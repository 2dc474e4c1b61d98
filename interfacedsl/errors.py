import ast
import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence


_CURRENT_SOURCE: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "interfacedsl_current_source", default=None
)
_CURRENT_SOURCE_PATH: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "interfacedsl_current_source_path", default=None
)
_CURRENT_NODE: contextvars.ContextVar[Optional[ast.AST]] = contextvars.ContextVar(
    "interfacedsl_current_node", default=None
)


def _line_from_source(source: str, line_no: int) -> Optional[str]:
    if line_no <= 0:
        return None
    lines = source.splitlines()
    if line_no > len(lines):
        return None
    return lines[line_no - 1].strip()


@dataclass(frozen=True)
class SourceLocation:
    """Pinpoint position of a declaration element, used only for diagnostics."""

    line: int
    column: int
    code: Optional[str] = None
    source_path: Optional[str] = None

    @classmethod
    def from_node(cls, node: ast.AST) -> Optional["SourceLocation"]:
        line = getattr(node, "lineno", None)
        if line is None:
            return None
        col = getattr(node, "col_offset", None)
        source = _CURRENT_SOURCE.get()
        code: Optional[str] = None
        if source is not None:
            code = _line_from_source(source, line)
        return cls(
            line=line,
            column=(col + 1) if col is not None else 1,
            code=code or None,
            source_path=_CURRENT_SOURCE_PATH.get(),
        )

    def describe(self) -> str:
        where = f"line {self.line}, column {self.column}"
        if self.source_path:
            return f"{self.source_path}, {where}"
        return where


def source_segment(node: ast.AST) -> Optional[str]:
    """Return the exact source text of ``node`` if the current source is known."""
    source = _CURRENT_SOURCE.get()
    if source is None:
        return None
    return ast.get_source_segment(source, node)


@dataclass(frozen=True)
class Diagnostic:
    message: str
    location: Optional[SourceLocation] = None

    def render(self) -> str:
        if self.location is None:
            return self.message
        details = [f"Location: {self.location.describe()}"]
        if self.location.code:
            details.append(f"Code: {self.location.code}")
        return f"{self.message}\n" + "\n".join(details)


def format_diagnostic(message: str, *, node: Optional[ast.AST] = None) -> str:
    """Attach best-effort source context to a warning/info diagnostic string."""
    node = node if node is not None else _CURRENT_NODE.get()
    location = SourceLocation.from_node(node) if node is not None else None
    return Diagnostic(message, location).render()


@contextmanager
def source_context(source: str, source_path: Optional[str] = None) -> Iterator[None]:
    token = _CURRENT_SOURCE.set(source)
    path_token = _CURRENT_SOURCE_PATH.set(source_path)
    try:
        yield
    finally:
        _CURRENT_SOURCE_PATH.reset(path_token)
        _CURRENT_SOURCE.reset(token)


@contextmanager
def node_context(node: Optional[ast.AST]) -> Iterator[None]:
    token = _CURRENT_NODE.set(node)
    try:
        yield
    finally:
        _CURRENT_NODE.reset(token)


class ErrorKind(Enum):
    STRUCTURAL = "structural"
    CARDINALITY = "cardinality"
    CONSISTENCY = "consistency"
    UNRECOGNIZED_SYNTAX = "unrecognized_syntax"


class InterfaceError(Exception):
    """Base interfacedsl error."""


class InterfaceValidationError(InterfaceError):
    """Raised when an interface declaration violates a compile-time rule.

    The error holds one or more diagnostics. Most failures carry exactly one;
    conflicts between two declarations (e.g. a shared call index) carry one
    diagnostic per involved location.
    """

    kind: ErrorKind = ErrorKind.STRUCTURAL

    def __init__(
        self,
        message: str,
        *,
        node: Optional[ast.AST] = None,
        location: Optional[SourceLocation] = None,
    ):
        if location is None:
            node = node if node is not None else _CURRENT_NODE.get()
            if node is not None:
                location = SourceLocation.from_node(node)
        self.message = message
        self.diagnostics: List[Diagnostic] = [Diagnostic(message, location)]
        super().__init__(self._render())

    @property
    def locations(self) -> List[SourceLocation]:
        return [d.location for d in self.diagnostics if d.location is not None]

    def combine(self, other: "InterfaceValidationError") -> "InterfaceValidationError":
        """Append the diagnostics of ``other`` to this error and return it."""
        self.diagnostics.extend(other.diagnostics)
        self.args = (self._render(),)
        return self

    def _render(self) -> str:
        return "\n\n".join(d.render() for d in self.diagnostics)


class StructuralError(InterfaceValidationError):
    """Wrong parameter count/kind, wrong type shape or non-identifier pattern."""

    kind = ErrorKind.STRUCTURAL


class CardinalityError(InterfaceValidationError):
    """Missing or repeated directives and markers."""

    kind = ErrorKind.CARDINALITY


class ConsistencyError(InterfaceValidationError):
    """Conflicts between declarations, or between a declaration and its definition."""

    kind = ErrorKind.CONSISTENCY


class UnrecognizedSyntaxError(InterfaceValidationError):
    """Annotation or source text outside the recognized vocabulary."""

    kind = ErrorKind.UNRECOGNIZED_SYNTAX


class InterfaceDefinitionError(InterfaceError):
    """Raised by the definition compiler when one definition fails to compile.

    Wraps the core validation error so callers can report every diagnostic
    together with the name of the definition that was rejected.
    """

    def __init__(
        self,
        definition: str,
        kind: ErrorKind,
        diagnostics: Sequence[Diagnostic],
    ):
        self.definition = definition
        self.kind = kind
        self.diagnostics = list(diagnostics)
        body = "\n\n".join(d.render() for d in self.diagnostics)
        super().__init__(f"Interface definition '{definition}' is invalid:\n{body}")

    @classmethod
    def from_validation(
        cls, definition: str, error: InterfaceValidationError
    ) -> "InterfaceDefinitionError":
        return cls(definition, error.kind, error.diagnostics)
