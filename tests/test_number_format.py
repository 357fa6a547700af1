# File: /tests/test_number_format.py | Version: 1.0 | Title: Number column parsing, storage & display
import pytest

from gridbase.core.number_format import (
    apply_number_abbreviation,
    clamp_number_decimals,
    format_number_cell_value,
    format_number_with_separators,
    normalize_number_value_for_storage,
    parse_configured_number_value,
    resolve_number_config,
    resolve_number_separators,
)


@pytest.mark.parametrize(
    "raw, expected",
    [("2", 2), ("12", 8), ("-3", 0), ("abc", 1), ("4.7", 4)],
)
def test_clamp_number_decimals(raw, expected):
    assert clamp_number_decimals(raw) == expected


def test_resolve_number_separators():
    assert resolve_number_separators("local") == (",", ".")
    assert resolve_number_separators("periodComma") == (".", ",")
    assert resolve_number_separators("spaceComma") == (" ", ",")
    assert resolve_number_separators("spacePeriod") == (" ", ".")


def test_format_number_with_separators():
    assert format_number_with_separators(1234567.891, 2, True, "local") == "1,234,567.89"
    assert format_number_with_separators(1234567.891, 1, True, "periodComma") == "1.234.567,9"
    assert format_number_with_separators(-1234.5, 0, False, "local") == "-1234"
    assert format_number_with_separators(float("nan"), 1, True, "local") == "0.0"


def test_apply_number_abbreviation():
    assert apply_number_abbreviation(2500, "thousand") == (2.5, "K")
    assert apply_number_abbreviation(3_000_000, "million") == (3.0, "M")
    assert apply_number_abbreviation(7, "none") == (7, "")


@pytest.mark.parametrize(
    "raw, separators, expected",
    [
        ("42", "local", 42.0),
        ("1,234.5", "local", 1234.5),
        ("1.234,5", "periodComma", 1234.5),
        ("2.5k", "local", 2500.0),
        ("-7", "local", -7.0),
        ("abc", "local", None),
        ("   ", "local", None),
        ("1e400", "local", None),
        ("9" * 400, "local", None),
    ],
)
def test_parse_configured_number_value(raw, separators, expected):
    assert parse_configured_number_value(raw, separators) == expected


def test_resolve_number_config_falls_back_on_invalid():
    assert resolve_number_config({"separators": "nope"}).separators == "local"
    assert resolve_number_config({"decimalPlaces": "20"}).decimal_places == "8"
    assert resolve_number_config(None).decimal_places == "1"


def test_normalize_number_value_for_storage():
    assert normalize_number_value_for_storage("1,234.56") == "1234.6"
    assert normalize_number_value_for_storage("-5", {"allowNegative": True, "decimalPlaces": "0"}) == "-5"
    assert normalize_number_value_for_storage("-5") == "5.0"
    assert normalize_number_value_for_storage("  ") == ""
    assert normalize_number_value_for_storage("n/a") == "n/a"
    assert normalize_number_value_for_storage("1e400") == "1e400"


def test_format_number_cell_value():
    assert format_number_cell_value("1234.5") == "1,234.5"
    assert format_number_cell_value("2500", {"abbreviation": "thousand", "decimalPlaces": "1"}) == "2.5K"
    assert format_number_cell_value("oops") == "oops"
    assert format_number_cell_value("") == ""
