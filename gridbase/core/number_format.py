# File: /gridbase/core/number_format.py | Version: 1.0 | Title: Number column config, parsing & display formatting
from __future__ import annotations

import math
import re
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import ValidationError

from gridbase.schemas.filters import CamelModel

NumberSeparatorId = Literal["local", "periodComma", "spaceComma", "spacePeriod"]
NumberAbbreviationId = Literal["none", "thousand", "million", "billion"]
NumberPresetId = Literal["none", "decimal4", "integer", "million1"]

MAX_DECIMALS = 8

_DIRECT_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_ABBREVIATED = re.compile(r"^(.*?)([kKmMbB])$", re.DOTALL)
_COMMA_DECIMAL = re.compile(r"^[+-]?\d+(,\d+)?$")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

_ABBREVIATION_MULTIPLIERS = {"K": 1_000, "M": 1_000_000, "B": 1_000_000_000}


class NumberFieldConfig(CamelModel):
    preset: NumberPresetId = "none"
    decimal_places: str = "1"
    separators: NumberSeparatorId = "local"
    show_thousands_separator: bool = True
    abbreviation: NumberAbbreviationId = "none"
    allow_negative: bool = False


DEFAULT_NUMBER_FIELD_CONFIG = NumberFieldConfig()


def clamp_number_decimals(value: Any) -> int:
    match = _LEADING_INT.match(str(value))
    if not match:
        return 1
    return max(0, min(MAX_DECIMALS, int(match.group(1))))


def resolve_number_separators(separators: str) -> Tuple[str, str]:
    """(thousands separator, decimal separator)"""
    if separators == "periodComma":
        return ".", ","
    if separators == "spaceComma":
        return " ", ","
    if separators == "spacePeriod":
        return " ", "."
    return ",", "."


def format_number_with_separators(
    value: float,
    decimals: int,
    show_thousands_separator: bool,
    separators: str,
) -> str:
    normalized = value if value == value and abs(value) != float("inf") else 0.0
    sign = "-" if normalized < 0 else ""
    fixed = f"{abs(normalized):.{decimals}f}"
    integer_part, _, decimal_part = fixed.partition(".")
    thousands_separator, decimal_separator = resolve_number_separators(separators)

    if show_thousands_separator:
        integer_part = f"{int(integer_part):,}".replace(",", thousands_separator)

    if decimals <= 0:
        return f"{sign}{integer_part}"
    return f"{sign}{integer_part}{decimal_separator}{decimal_part}"


def apply_number_abbreviation(value: float, abbreviation: str) -> Tuple[float, str]:
    if abbreviation == "thousand":
        return value / 1_000, "K"
    if abbreviation == "million":
        return value / 1_000_000, "M"
    if abbreviation == "billion":
        return value / 1_000_000_000, "B"
    return value, ""


def parse_configured_number_value(raw_value: str, separators: str) -> Optional[float]:
    """Parse user-typed number text ("1,234.5", "1.234,5", "2.5k") or None."""
    trimmed = raw_value.strip()
    if not trimmed:
        return None
    if _DIRECT_NUMBER.match(trimmed):
        direct = float(trimmed)
        return direct if math.isfinite(direct) else None

    abbreviated = _ABBREVIATED.match(trimmed)
    multiplier = 1
    working = trimmed
    if abbreviated:
        multiplier = _ABBREVIATION_MULTIPLIERS[abbreviated.group(2).upper()]
        working = abbreviated.group(1)
    working = re.sub(r"\s+", "", working)

    thousands_separator, decimal_separator = resolve_number_separators(separators)
    if thousands_separator != " ":
        working = working.replace(thousands_separator, "")
    if decimal_separator != ".":
        working = working.replace(decimal_separator, ".")

    if _COMMA_DECIMAL.match(working):
        working = working.replace(",", ".", 1)
    working = working.replace(",", "")

    sign = working[0] if working[:1] in ("-", "+") else ""
    unsigned = working[1:] if sign else working
    # Only the last dot is a decimal point
    head, dot, tail = unsigned.rpartition(".")
    unsigned = head.replace(".", "") + dot + tail if dot else unsigned
    unsigned = re.sub(r"[^0-9.]", "", unsigned)
    if not any(ch.isdigit() for ch in unsigned):
        return None
    try:
        parsed = float(f"{sign}{unsigned}")
    except ValueError:
        return None
    scaled = parsed * multiplier
    return scaled if math.isfinite(scaled) else None


def resolve_number_config(config: Optional[Dict[str, Any] | NumberFieldConfig] = None) -> NumberFieldConfig:
    """Defaults merged with ``config``; unknown or invalid input falls back to defaults."""
    if isinstance(config, NumberFieldConfig):
        merged = config
    else:
        try:
            merged = NumberFieldConfig.model_validate(config or {})
        except ValidationError:
            merged = DEFAULT_NUMBER_FIELD_CONFIG
    return merged.model_copy(
        update={"decimal_places": str(clamp_number_decimals(merged.decimal_places))}
    )


def normalize_number_value_for_storage(raw_value: str, config: Optional[Dict[str, Any] | NumberFieldConfig] = None) -> str:
    """Canonical cell text for a number column; unparsable input is kept as typed."""
    trimmed = raw_value.strip()
    if not trimmed:
        return ""
    resolved = resolve_number_config(config)
    parsed = parse_configured_number_value(trimmed, resolved.separators)
    if parsed is None:
        return trimmed
    normalized = parsed if resolved.allow_negative else abs(parsed)
    return f"{normalized:.{clamp_number_decimals(resolved.decimal_places)}f}"


def format_number_cell_value(raw_value: str, config: Optional[Dict[str, Any] | NumberFieldConfig] = None) -> str:
    trimmed = raw_value.strip()
    if not trimmed:
        return ""
    resolved = resolve_number_config(config)
    parsed = parse_configured_number_value(trimmed, resolved.separators)
    if parsed is None:
        return raw_value
    normalized = parsed if resolved.allow_negative else abs(parsed)
    value, suffix = apply_number_abbreviation(normalized, resolved.abbreviation)
    formatted = format_number_with_separators(
        value,
        clamp_number_decimals(resolved.decimal_places),
        resolved.show_thousands_separator,
        resolved.separators,
    )
    return f"{formatted}{suffix}"
