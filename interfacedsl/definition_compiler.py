import warnings
from typing import List, Optional

from interfacedsl.compiler.calls import CallCompiler
from interfacedsl.compiler.constants import DEFAULT_RUNTIME_PLACEHOLDER
from interfacedsl.compiler.selectors import SelectorCompiler
from interfacedsl.declarations import InterfaceDeclaration, MethodKind
from interfacedsl.errors import (
    InterfaceDefinitionError,
    InterfaceValidationError,
    format_diagnostic,
    source_context,
)
from interfacedsl.ir import CallTable, InterfaceIR, SelectorTable
from interfacedsl.scanner import scan_definitions


class DefinitionCompiler:
    """Compile every interface definition of a source file into IR."""

    def __init__(self, *, runtime_placeholder: str = DEFAULT_RUNTIME_PLACEHOLDER):
        self.calls = CallCompiler(runtime_placeholder=runtime_placeholder)
        self.selectors = SelectorCompiler()

    def compile(self, source: str, source_path: Optional[str] = None) -> List[InterfaceIR]:
        """Compile ``source`` and return one :class:`InterfaceIR` per definition.

        Scanning errors propagate as raised. Errors inside a definition are
        converted to :class:`InterfaceDefinitionError` naming the definition.
        """
        definitions = scan_definitions(source, source_path=source_path)
        with source_context(source, source_path):
            return [self.compile_definition(definition) for definition in definitions]

    def compile_definition(self, definition: InterfaceDeclaration) -> InterfaceIR:
        try:
            return self._compile_definition(definition)
        except InterfaceValidationError as exc:
            raise InterfaceDefinitionError.from_validation(definition.name, exc) from exc

    def _compile_definition(self, definition: InterfaceDeclaration) -> InterfaceIR:
        selectors: Optional[SelectorTable] = None
        for marked in definition.methods:
            if marked.kind is MethodKind.SELECTOR:
                selectors = self.selectors.compile_one(
                    selectors, definition.global_selector, marked.method, marked.marker
                )

        calls: Optional[CallTable] = None
        for marked in definition.methods:
            if marked.kind is MethodKind.CALL:
                calls = self.calls.compile_one(
                    calls,
                    definition.global_selector,
                    marked.method,
                    interface_location=definition.location,
                )
            elif marked.kind is MethodKind.VIEW:
                warnings.warn(
                    format_diagnostic(
                        f"View '{marked.method.name}' is skipped; views are compiled "
                        "by a separate pass.",
                        node=marked.method.node,
                    ),
                    stacklevel=3,
                )

        if calls is None:
            calls = CallTable(definition.location)
        self.calls.check_selectors(calls, selectors)

        return InterfaceIR(
            name=definition.name,
            global_selector=definition.global_selector,
            associated_types=definition.associated_types,
            calls=calls,
            selectors=selectors,
            docs=definition.docs,
            location=definition.location,
        )
