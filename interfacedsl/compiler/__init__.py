"""Public compiler entry points.

Internal compiler constants are intentionally not re-exported from this module.
"""

from interfacedsl.compiler.calls import CallCompiler
from interfacedsl.compiler.directives import (
    CallIndex,
    Directive,
    NoSelector,
    UseSelector,
    Weight,
    parse_call_directive,
)
from interfacedsl.compiler.selectors import SelectorCompiler, check_selector

__all__ = [
    "CallCompiler",
    "CallIndex",
    "Directive",
    "NoSelector",
    "SelectorCompiler",
    "UseSelector",
    "Weight",
    "check_selector",
    "parse_call_directive",
]
