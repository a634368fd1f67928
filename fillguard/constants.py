"""Named constants — eliminates magic strings across the codebase."""

from __future__ import annotations

LANGUAGE = "javascript"

RULE_ID = "no-array-fill-with-reference-type"

MESSAGE_TEMPLATE = (
    "Avoid using {call} with reference type{type}. "
    "Use Array.from() instead to ensure independent instances."
)

# Option aliases as they appear in rule configuration
OPT_CAN_FILL_WITH_FUNCTION = "canFillWithFunction"
OPT_CAN_FILL_WITH_REGEXP = "canFillWithRegexp"

# Recursion guard for identifier → initializer chains
MAX_RESOLUTION_DEPTH = 64

MAX_CALLEE_LABEL_LENGTH = 32

# Type labels
LABEL_OBJECT = "Object"
LABEL_ARRAY = "Array"
LABEL_FUNCTION = "Function"
LABEL_REGEXP = "RegExp"
NEW_LABEL_TEMPLATE = "new {name}()"
VARIABLE_LABEL_TEMPLATE = "variable ({name})"

# Globals the classifier recognises by name
ARRAY_GLOBAL = "Array"
SYMBOL_GLOBAL = "Symbol"
REGEXP_GLOBAL = "RegExp"

FILL_METHOD = "fill"
ARRAY_FACTORY_METHODS: frozenset[str] = frozenset({"from", "of"})

# Trace event kinds
EVENT_CYCLE_DETECTED = "cycle_detected"
EVENT_DEPTH_EXCEEDED = "depth_exceeded"
EVENT_RESOLVER_FAULT = "resolver_fault"
EVENT_UNRESOLVED_IDENTIFIER = "unresolved_identifier"
EVENT_REASSIGNABLE_BINDING = "reassignable_binding"
EVENT_SYMBOL_SHADOWED = "symbol_shadowed"
EVENT_MALFORMED_NODE = "malformed_node"

OUTPUT_TEXT = "text"
OUTPUT_JSON = "json"

STDIN_PATH = "-"
STDIN_DISPLAY_NAME = "<stdin>"
DEFAULT_DISPLAY_NAME = "<input>"
