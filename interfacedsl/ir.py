from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from interfacedsl.errors import SourceLocation
from interfacedsl.typesys import TypeExpr, render_type


# Selector requirements

@dataclass(frozen=True)
class DefaultSelector:
    return_ty: TypeExpr

    def describe(self) -> str:
        return f"Default(return_ty={render_type(self.return_ty)})"


@dataclass(frozen=True)
class NamedSelector:
    name: str
    return_ty: TypeExpr

    def describe(self) -> str:
        return f"Named(name={self.name}, return_ty={render_type(self.return_ty)})"


SelectorRequirement = Union[DefaultSelector, NamedSelector]


# Calls

@dataclass(frozen=True)
class CallArg:
    is_compact: bool
    name: str
    ty: TypeExpr


@dataclass(frozen=True)
class CallEntry:
    selector: Optional[SelectorRequirement]
    name: str
    args: Tuple[CallArg, ...]
    weight: str
    call_index: int
    docs: Tuple[str, ...]
    attrs: Tuple[str, ...]
    location: SourceLocation


@dataclass(frozen=True)
class CallTable:
    interface_location: Optional[SourceLocation]
    entries: Tuple[CallEntry, ...] = ()

    def index_map(self) -> Dict[int, CallEntry]:
        return {entry.call_index: entry for entry in self.entries}

    def with_entry(self, entry: CallEntry) -> "CallTable":
        return CallTable(self.interface_location, self.entries + (entry,))

    def __len__(self) -> int:
        return len(self.entries)


# Selectors

@dataclass(frozen=True)
class SelectorEntry:
    name: str
    method_name: str
    return_ty: TypeExpr
    is_default: bool
    location: SourceLocation


@dataclass(frozen=True)
class SelectorTable:
    entries: Tuple[SelectorEntry, ...] = ()

    def get(self, name: str) -> Optional[SelectorEntry]:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    @property
    def default(self) -> Optional[SelectorEntry]:
        for entry in self.entries:
            if entry.is_default:
                return entry
        return None

    def with_entry(self, entry: SelectorEntry) -> "SelectorTable":
        return SelectorTable(self.entries + (entry,))


@dataclass(frozen=True)
class InterfaceIR:
    name: str
    global_selector: bool
    associated_types: Tuple[str, ...]
    calls: CallTable
    selectors: Optional[SelectorTable]
    docs: Tuple[str, ...]
    location: SourceLocation
