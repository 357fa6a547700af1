# File: /gridbase/core/sort_utils.py | Version: 1.0 | Title: Sorting state normalization (single-column sort)
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from gridbase.schemas.filters import SortEntry

# Multi-column sort is not supported; anything past the first entry is dropped.
MAX_SORT_ENTRIES = 1


def get_sort_direction_labels_for_field(field_kind: Optional[str]) -> Dict[str, str]:
    if field_kind == "number":
        return {"asc": "1 → 9", "desc": "9 → 1"}
    return {"asc": "A → Z", "desc": "Z → A"}


def normalize_sorting_state(value: Any) -> List[SortEntry]:
    if not isinstance(value, list):
        return []
    entries: List[SortEntry] = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        sort_id = raw.get("id")
        if not isinstance(sort_id, str) or sort_id.strip() == "":
            continue
        entries.append(SortEntry(id=sort_id, desc=bool(raw.get("desc"))))
    return entries[:MAX_SORT_ENTRIES]


def clone_sorting_state(sorting: Sequence[SortEntry]) -> List[SortEntry]:
    return [entry.model_copy() for entry in sorting]
