from interfacedsl.typesys import SELF_IDENT

INTERFACE_NAMESPACE = "interface"

# Definition-level markers
DEFINITION = "definition"
WITH_SELECTOR = "with_selector"

# Method kind markers
CALL = "call"
VIEW = "view"
SELECTOR = "selector"

# Call directives
CALL_INDEX = "call_index"
WEIGHT = "weight"
USE_SELECTOR = "use_selector"
NO_SELECTOR = "no_selector"

# Selector directives
DEFAULT_SELECTOR = "default_selector"

# Argument markers
COMPACT = "compact"

CALL_DIRECTIVES = (CALL_INDEX, WEIGHT, USE_SELECTOR, NO_SELECTOR)

RUNTIME_ORIGIN = "RuntimeOrigin"
SELECT_WRAPPER = "Select"
CALL_RESULT_MARKERS = ("CallResult", "InterfaceResult")
SELECTION_KEY_TYPE = "H256"
SELECTOR_RESULT = "Result"
ANNOTATED_NAMES = {"Annotated"}

DEFAULT_RUNTIME_PLACEHOLDER = "Runtime"

MAX_CALL_INDEX = 255

__all__ = [
    "SELF_IDENT",
    "INTERFACE_NAMESPACE",
    "DEFINITION",
    "WITH_SELECTOR",
    "CALL",
    "VIEW",
    "SELECTOR",
    "CALL_INDEX",
    "WEIGHT",
    "USE_SELECTOR",
    "NO_SELECTOR",
    "DEFAULT_SELECTOR",
    "COMPACT",
    "CALL_DIRECTIVES",
    "RUNTIME_ORIGIN",
    "SELECT_WRAPPER",
    "CALL_RESULT_MARKERS",
    "SELECTION_KEY_TYPE",
    "SELECTOR_RESULT",
    "ANNOTATED_NAMES",
    "DEFAULT_RUNTIME_PLACEHOLDER",
    "MAX_CALL_INDEX",
]
