"""Default names and keywords shared across fieldguard."""

DEFAULT_ORDER_INPUT_NAME = "order"
DEFAULT_FILTER_INPUT_NAME = "filter"
DEFAULT_PAGINATION_INPUT_NAME = "pagination"
DEFAULT_INPUT_NAME = "input"

# Subject pattern matching every subject type.
ALL_SUBJECTS = "all"

# Field that cursor pagination implicitly sorts by.
CURSOR_FIELD = "id"

# Condition variable replaced with the actor id when grants are compiled.
ACTOR_ID_VARIABLE = "$id"
ESCAPED_ACTOR_ID_VARIABLE = "\\$id"

# Logical keys inside filter trees. Every other key is a field name.
FILTER_LOGICAL_KEYS = ("AND", "OR", "NOT")

DEFAULT_GUEST_GROUP = "Guest"
