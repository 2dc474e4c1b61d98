import ast
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

from interfacedsl.errors import SourceLocation
from interfacedsl.typesys import TypeExpr


class ParamKind(Enum):
    TYPED = "typed"
    RECEIVER = "receiver"


class MethodKind(Enum):
    CALL = "call"
    VIEW = "view"
    SELECTOR = "selector"


@dataclass(frozen=True)
class Param:
    kind: ParamKind
    pattern: str
    ty: Optional[TypeExpr] = None
    attrs: Tuple[ast.expr, ...] = ()
    location: Optional[SourceLocation] = None
    node: Optional[ast.AST] = field(default=None, compare=False, repr=False)

    def with_attrs(self, attrs: Tuple[ast.expr, ...]) -> "Param":
        return replace(self, attrs=tuple(attrs))


@dataclass(frozen=True)
class MethodDeclaration:
    """One method of an interface definition, as found by the scanner."""

    name: str
    params: Tuple[Param, ...]
    returns: Optional[TypeExpr]
    attrs: Tuple[ast.expr, ...]
    docs: Tuple[str, ...]
    location: SourceLocation
    returns_location: Optional[SourceLocation] = None
    node: Optional[ast.AST] = field(default=None, compare=False, repr=False)

    def with_attrs(self, attrs: Tuple[ast.expr, ...]) -> "MethodDeclaration":
        return replace(self, attrs=tuple(attrs))


@dataclass(frozen=True)
class MarkedMethod:
    kind: MethodKind
    method: MethodDeclaration
    marker: ast.expr = field(compare=False, repr=False)


@dataclass(frozen=True)
class InterfaceDeclaration:
    name: str
    global_selector: bool
    associated_types: Tuple[str, ...]
    methods: Tuple[MarkedMethod, ...]
    docs: Tuple[str, ...]
    location: SourceLocation
