# File: /gridbase/core/constants.py | Version: 1.0 | Title: Shared constants (view bag keys, defaults, id format)
import re

# UUID validation (versions 1-5, RFC 4122 variant)
UUID_REGEX = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
EMPTY_UUID = "00000000-0000-0000-0000-000000000000"

# Default names
DEFAULT_BASE_NAME = "Untitled Base"
DEFAULT_TABLE_NAME = "Table 1"
DEFAULT_GRID_VIEW_NAME = "Grid view"
DEFAULT_FORM_VIEW_NAME = "Form"

# Row operations
BULK_INSERT_CHUNK_SIZE = 1000
BULK_GENERATED_MAX_ROWS = 100_000
FILTER_VALUE_MAX_LENGTH = 200
MAX_QUERY_FILTER_CONDITIONS = 30

# View-scoped state filter keys
VIEW_KIND_FILTER_KEY = "__viewKind"
VIEW_SEARCH_QUERY_FILTER_KEY = "__viewSearchQuery"
VIEW_SORTING_FILTER_KEY = "__viewSorting"
VIEW_FILTER_GROUPS_FILTER_KEY = "__viewFilterGroups"
VIEW_HIDDEN_FIELDS_FILTER_KEY = "__viewHiddenFields"

VIEW_KINDS = ("grid", "form")
COLUMN_TYPES = ("text", "number")

# Cell text that the number index (and number filters) accept
NUMERIC_CELL_PATTERN = r"^-?[0-9]+([.][0-9]+)?$"


def is_uuid(value: object) -> bool:
    return isinstance(value, str) and UUID_REGEX.match(value) is not None
