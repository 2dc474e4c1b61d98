import ast
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from interfacedsl.errors import StructuralError, UnrecognizedSyntaxError

SELF_IDENT = "Self"
QUALIFIED_PATH_MARKER = "As"
_TUPLE_NAMES = {"Tuple", "tuple"}


@dataclass(frozen=True)
class TypeExpr:
    pass


@dataclass(frozen=True)
class PathSegment:
    ident: str
    args: Tuple[TypeExpr, ...] = ()


@dataclass(frozen=True)
class QualifiedSelf:
    """The ``As[ty, trait]`` clause of a qualified path."""

    ty: TypeExpr
    trait: "PathType"


@dataclass(frozen=True)
class PathType(TypeExpr):
    segments: Tuple[PathSegment, ...]
    qself: Optional[QualifiedSelf] = None

    def is_plain(self, *idents: str) -> bool:
        """Return whether this is exactly ``a.b.c`` with no generics or qualifier."""
        return (
            self.qself is None
            and tuple(s.ident for s in self.segments) == idents
            and all(not s.args for s in self.segments)
        )


@dataclass(frozen=True)
class TupleType(TypeExpr):
    elems: Tuple[TypeExpr, ...] = ()


def path(*idents: str) -> PathType:
    return PathType(tuple(PathSegment(ident) for ident in idents))


def generic(ident: str, *args: TypeExpr) -> PathType:
    return PathType((PathSegment(ident, tuple(args)),))


def type_from_ast(node: ast.AST) -> TypeExpr:
    """Convert a Python annotation expression into a :class:`TypeExpr`."""
    return _convert(node, allow_bare_qself=False)


def _convert(node: ast.AST, *, allow_bare_qself: bool) -> TypeExpr:
    if isinstance(node, ast.Constant):
        if node.value is None:
            return TupleType(())
        if isinstance(node.value, str):
            try:
                parsed = ast.parse(node.value.strip(), mode="eval")
            except SyntaxError as exc:
                raise UnrecognizedSyntaxError(
                    f"Invalid type annotation string '{node.value}'.", node=node
                ) from exc
            return _convert(parsed.body, allow_bare_qself=allow_bare_qself)
        raise StructuralError(
            f"Unsupported type expression: {ast.unparse(node)}", node=node
        )

    if isinstance(node, ast.Name):
        return path(node.id)

    if isinstance(node, ast.Attribute):
        base = _convert(node.value, allow_bare_qself=True)
        if not isinstance(base, PathType):
            raise StructuralError(
                f"Unsupported type expression: {ast.unparse(node)}", node=node
            )
        return PathType(base.segments + (PathSegment(node.attr),), qself=base.qself)

    if isinstance(node, ast.Subscript):
        items = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]
        if isinstance(node.value, ast.Name) and node.value.id in _TUPLE_NAMES:
            return TupleType(tuple(type_from_ast(item) for item in items))

        if isinstance(node.value, ast.Name) and node.value.id == QUALIFIED_PATH_MARKER:
            if len(items) != 2:
                raise StructuralError(
                    "Qualified path must be written As[type, Trait].Item.", node=node
                )
            trait = type_from_ast(items[1])
            if not isinstance(trait, PathType) or trait.qself is not None:
                raise StructuralError(
                    "Qualified path trait must be a plain path.", node=items[1]
                )
            result = PathType((), qself=QualifiedSelf(type_from_ast(items[0]), trait))
            if not allow_bare_qself:
                raise StructuralError(
                    "Qualified path must name an associated item, e.g. As[type, Trait].Item.",
                    node=node,
                )
            return result

        base = _convert(node.value, allow_bare_qself=False)
        if not isinstance(base, PathType) or base.segments[-1].args:
            raise StructuralError(
                f"Unsupported type expression: {ast.unparse(node)}", node=node
            )
        last = PathSegment(
            base.segments[-1].ident, tuple(type_from_ast(item) for item in items)
        )
        return PathType(base.segments[:-1] + (last,), qself=base.qself)

    raise StructuralError(
        f"Unsupported type expression: {ast.unparse(node)}", node=node
    )


def render_type(ty: TypeExpr) -> str:
    """Render a type back in the annotation notation it was parsed from."""
    if isinstance(ty, TupleType):
        if not ty.elems:
            return "None"
        return f"Tuple[{', '.join(render_type(elem) for elem in ty.elems)}]"
    if isinstance(ty, PathType):
        parts = []
        if ty.qself is not None:
            parts.append(
                f"{QUALIFIED_PATH_MARKER}[{render_type(ty.qself.ty)}, "
                f"{render_type(ty.qself.trait)}]"
            )
        for segment in ty.segments:
            text = segment.ident
            if segment.args:
                text += f"[{', '.join(render_type(arg) for arg in segment.args)}]"
            parts.append(text)
        return ".".join(parts)
    raise AssertionError("Unknown type expression")


def substitute_self(ty: TypeExpr, placeholder: str) -> TypeExpr:
    """Replace every ``Self`` path segment with ``placeholder``.

    Qualified-path clauses are rewritten before the outer segments; every
    other part of the structure is preserved.
    """
    if placeholder == SELF_IDENT:
        raise ValueError("Self-type placeholder cannot itself be 'Self'.")
    if isinstance(ty, TupleType):
        return TupleType(tuple(substitute_self(elem, placeholder) for elem in ty.elems))
    if isinstance(ty, PathType):
        qself = ty.qself
        if qself is not None:
            trait = substitute_self(qself.trait, placeholder)
            assert isinstance(trait, PathType)
            qself = QualifiedSelf(substitute_self(qself.ty, placeholder), trait)
        segments = tuple(
            replace(
                segment,
                ident=placeholder if segment.ident == SELF_IDENT else segment.ident,
                args=tuple(substitute_self(arg, placeholder) for arg in segment.args),
            )
            for segment in ty.segments
        )
        return PathType(segments, qself=qself)
    raise AssertionError("Unknown type expression")
