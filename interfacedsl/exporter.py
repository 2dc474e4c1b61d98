import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from interfacedsl.compiler.constants import DEFAULT_RUNTIME_PLACEHOLDER
from interfacedsl.definition_compiler import DefinitionCompiler
from interfacedsl.errors import SourceLocation
from interfacedsl.ir import (
    CallEntry,
    CallTable,
    DefaultSelector,
    InterfaceIR,
    NamedSelector,
    SelectorRequirement,
    SelectorTable,
)
from interfacedsl.typesys import render_type

IR_FILENAME = "interfaces.json"


def compile_interfaces(
    source: str,
    source_path: str | None = None,
    *,
    runtime_placeholder: str = DEFAULT_RUNTIME_PLACEHOLDER,
) -> List[InterfaceIR]:
    """Compile definition source into a list of :class:`InterfaceIR`."""
    return DefinitionCompiler(runtime_placeholder=runtime_placeholder).compile(
        source, source_path=source_path
    )


def interfaces_to_dict(interfaces: List[InterfaceIR]) -> Dict[str, Any]:
    """Serialize compiled definitions into the JSON IR payload."""
    return {"interfaces": [interface_to_dict(interface) for interface in interfaces]}


def interface_to_dict(interface: InterfaceIR) -> Dict[str, Any]:
    return {
        "name": interface.name,
        "with_selector": interface.global_selector,
        "associated_types": list(interface.associated_types),
        "docs": list(interface.docs),
        "location": _location_to_dict(interface.location),
        "calls": call_table_to_dict(interface.calls),
        "selectors": _selector_table_to_dict(interface.selectors),
    }


def call_table_to_dict(calls: CallTable) -> List[Dict[str, Any]]:
    return [_call_to_dict(entry) for entry in calls.entries]


def export_interfaces(
    source: str,
    output_dir: str,
    source_path: str | None = None,
    *,
    runtime_placeholder: str = DEFAULT_RUNTIME_PLACEHOLDER,
) -> List[InterfaceIR]:
    """Compile and write the IR payload to ``output_dir``."""
    interfaces = compile_interfaces(
        source,
        source_path=source_path,
        runtime_placeholder=runtime_placeholder,
    )
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    ir_path = out_dir / IR_FILENAME
    ir_path.write_text(
        json.dumps(interfaces_to_dict(interfaces), indent=2, sort_keys=True),
        encoding="utf-8",
    )
    return interfaces


def _call_to_dict(entry: CallEntry) -> Dict[str, Any]:
    return {
        "name": entry.name,
        "call_index": entry.call_index,
        "weight": entry.weight,
        "selector": _requirement_to_dict(entry.selector),
        "args": [
            {
                "name": arg.name,
                "type": render_type(arg.ty),
                "compact": arg.is_compact,
            }
            for arg in entry.args
        ],
        "docs": list(entry.docs),
        "attrs": list(entry.attrs),
        "location": _location_to_dict(entry.location),
    }


def _requirement_to_dict(
    requirement: Optional[SelectorRequirement],
) -> Optional[Dict[str, Any]]:
    if requirement is None:
        return None
    if isinstance(requirement, NamedSelector):
        return {
            "kind": "named",
            "name": requirement.name,
            "return_type": render_type(requirement.return_ty),
        }
    if isinstance(requirement, DefaultSelector):
        return {
            "kind": "default",
            "return_type": render_type(requirement.return_ty),
        }
    raise AssertionError("Unknown selector requirement")


def _selector_table_to_dict(
    selectors: Optional[SelectorTable],
) -> Optional[List[Dict[str, Any]]]:
    if selectors is None:
        return None
    return [
        {
            "name": entry.name,
            "method": entry.method_name,
            "return_type": render_type(entry.return_ty),
            "default": entry.is_default,
            "location": _location_to_dict(entry.location),
        }
        for entry in selectors.entries
    ]


def _location_to_dict(location: Optional[SourceLocation]) -> Optional[Dict[str, Any]]:
    if location is None:
        return None
    return {
        "line": location.line,
        "column": location.column,
        "source_path": location.source_path,
    }
