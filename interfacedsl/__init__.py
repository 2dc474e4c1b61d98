"""Public Python API for interfacedsl.

The package compiles annotated interface definitions into a validated call
table IR. DSL marker symbols live in ``interfacedsl.dsl_markers``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from interfacedsl.compiler import CallCompiler, SelectorCompiler
from interfacedsl.definition_compiler import DefinitionCompiler
from interfacedsl.errors import (
    CardinalityError,
    ConsistencyError,
    ErrorKind,
    InterfaceDefinitionError,
    InterfaceError,
    InterfaceValidationError,
    StructuralError,
    UnrecognizedSyntaxError,
)
from interfacedsl.exporter import (
    compile_interfaces,
    export_interfaces,
    interface_to_dict,
    interfaces_to_dict,
)
from interfacedsl.scanner import scan_definitions

try:
    __version__: str = version("interfacedsl")
except PackageNotFoundError:  # pragma: no cover - editable local fallback
    __version__ = "0.1.0"


__all__ = [
    "__version__",
    "CallCompiler",
    "CardinalityError",
    "ConsistencyError",
    "DefinitionCompiler",
    "ErrorKind",
    "InterfaceDefinitionError",
    "InterfaceError",
    "InterfaceValidationError",
    "SelectorCompiler",
    "StructuralError",
    "UnrecognizedSyntaxError",
    "compile_interfaces",
    "export_interfaces",
    "interface_to_dict",
    "interfaces_to_dict",
    "scan_definitions",
]
