# File: /gridbase/core/view_state.py | Version: 1.0 | Title: View-scoped state <-> view filters bag adapter
"""
A view persists its configuration in one generic JSON bag (``View.filters``).
Several logically separate concerns share that bag under reserved keys:

    __viewKind          "grid" | "form"
    __viewSearchQuery   str
    __viewSorting       [{"id": str, "desc": bool}]   (at most one entry)
    __viewFilterGroups  editable filter groups
    __viewHiddenFields  [column id, ...]

Parsing degrades per key: a corrupted sort does not throw away a valid
search query. Keys this module does not know about are carried through
untouched when the state is written back.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

from gridbase.core.constants import (
    DEFAULT_GRID_VIEW_NAME,
    VIEW_FILTER_GROUPS_FILTER_KEY,
    VIEW_HIDDEN_FIELDS_FILTER_KEY,
    VIEW_KIND_FILTER_KEY,
    VIEW_KINDS,
    VIEW_SEARCH_QUERY_FILTER_KEY,
    VIEW_SORTING_FILTER_KEY,
)
from gridbase.core.filter_utils import normalize_filter_groups
from gridbase.core.sort_utils import normalize_sorting_state
from gridbase.schemas.filters import ViewScopedState


def normalize_view_name(value: str) -> str:
    return value.strip() or DEFAULT_GRID_VIEW_NAME


def get_view_kind_from_filters(filters: Any) -> Optional[str]:
    """Explicit kind tag, or None when the bag does not carry one."""
    if not isinstance(filters, dict):
        return None
    value = filters.get(VIEW_KIND_FILTER_KEY)
    return value if value in VIEW_KINDS else None


def resolve_sidebar_view_kind(name: str, filters: Any = None) -> str:
    """Explicit tag, then a "form..." name prefix, then grid."""
    kind = get_view_kind_from_filters(filters)
    if kind:
        return kind
    return "form" if (name or "").strip().lower().startswith("form") else "grid"


def get_view_kind_label(kind: str) -> str:
    return "form" if kind == "form" else "grid view"


def get_default_view_scoped_state() -> ViewScopedState:
    return ViewScopedState()


def parse_view_scoped_state_from_filters(filters: Any) -> ViewScopedState:
    if not isinstance(filters, dict):
        return get_default_view_scoped_state()

    raw_hidden = filters.get(VIEW_HIDDEN_FIELDS_FILTER_KEY)
    hidden_field_ids = (
        [field_id for field_id in raw_hidden if isinstance(field_id, str)]
        if isinstance(raw_hidden, list)
        else []
    )
    raw_search = filters.get(VIEW_SEARCH_QUERY_FILTER_KEY)

    return ViewScopedState(
        search_query=raw_search if isinstance(raw_search, str) else "",
        sorting=normalize_sorting_state(filters.get(VIEW_SORTING_FILTER_KEY)),
        filter_groups=normalize_filter_groups(filters.get(VIEW_FILTER_GROUPS_FILTER_KEY)),
        hidden_field_ids=hidden_field_ids,
    )


def _canonical(state: ViewScopedState) -> str:
    return json.dumps(state.model_dump(by_alias=True), sort_keys=True, separators=(",", ":"))


def are_view_scoped_states_equal(a: Optional[ViewScopedState], b: ViewScopedState) -> bool:
    # No previous state means the first write always counts as a change
    if a is None:
        return False
    return _canonical(a) == _canonical(b)


def apply_view_scoped_state_to_filters(
    filters: Any,
    state: ViewScopedState,
    kind: Optional[str] = None,
) -> Dict[str, Any]:
    """Return a new bag with ``state`` written under the reserved keys."""
    bag: Dict[str, Any] = dict(filters) if isinstance(filters, Mapping) else {}
    dumped = state.model_dump(by_alias=True)
    bag[VIEW_SEARCH_QUERY_FILTER_KEY] = dumped["searchQuery"]
    bag[VIEW_SORTING_FILTER_KEY] = dumped["sorting"]
    bag[VIEW_FILTER_GROUPS_FILTER_KEY] = dumped["filterGroups"]
    bag[VIEW_HIDDEN_FIELDS_FILTER_KEY] = dumped["hiddenFieldIds"]
    if kind in VIEW_KINDS:
        bag[VIEW_KIND_FILTER_KEY] = kind
    return bag
