"""Tests for conditionals.condition.comparators — per-type comparison rules."""

from __future__ import annotations

import enum
import math

import pytest

from conditionals.condition.comparators import (
    NumberMatchType,
    StringMatchType,
    compare_double,
    compare_enum,
    compare_float,
    compare_integer,
    compare_os,
    compare_string,
    normalize_string,
    to_float32,
)
from conditionals.condition.spec import (
    parse_double_spec,
    parse_enum_spec,
    parse_float_spec,
    parse_integer_spec,
    parse_string_spec,
)


class Level(enum.Enum):
    DEBUG = 1
    INFO = 2
    WARN = 3


# ---------------------------------------------------------------------------
# String
# ---------------------------------------------------------------------------


class TestCompareString:
    """Tests for compare_string() — normalization and match types."""

    @pytest.mark.parametrize(
        ("match_type", "resolved", "candidate", "expected"),
        [
            (StringMatchType.EQUALS, "prod", "prod", True),
            (StringMatchType.EQUALS, "prod", "PROD", False),
            (StringMatchType.CONTAINS, "eu-west-1", "west", True),
            (StringMatchType.CONTAINS, "eu-west-1", "east", False),
            (StringMatchType.STARTS_WITH, "eu-west-1", "eu-", True),
            (StringMatchType.STARTS_WITH, "eu-west-1", "us-", False),
            (StringMatchType.ENDS_WITH, "eu-west-1", "-1", True),
            (StringMatchType.ENDS_WITH, "eu-west-1", "-2", False),
            (StringMatchType.MATCHES, "eu-west-1", r"eu-\w+-\d", True),
            (StringMatchType.MATCHES, "eu-west-1", r"eu", False),
        ],
    )
    def test_match_types(
        self, match_type: StringMatchType, resolved: str, candidate: str, expected: bool
    ) -> None:
        spec = parse_string_spec(
            {"name": "region", "having_value": candidate, "match_type": match_type}
        )
        assert compare_string(spec, resolved, candidate) is expected

    def test_ignore_case(self) -> None:
        spec = parse_string_spec({"name": "mode", "having_value": "prod", "ignore_case": True})
        assert compare_string(spec, "PROD", "prod") is True

    def test_trim(self) -> None:
        spec = parse_string_spec({"name": "label", "having_value": "primary ", "trim": True})
        assert compare_string(spec, "  primary", "primary ") is True

    def test_trim_disabled_keeps_whitespace(self) -> None:
        spec = parse_string_spec({"name": "label", "having_value": "primary"})
        assert compare_string(spec, " primary ", "primary") is False

    def test_matches_is_full_match(self) -> None:
        spec = parse_string_spec(
            {"name": "v", "having_value": "[0-9]+", "match_type": "matches"}
        )
        assert compare_string(spec, "123", "[0-9]+") is True
        assert compare_string(spec, "123abc", "[0-9]+") is False

    def test_matches_with_ignore_case_normalizes_pattern(self) -> None:
        spec = parse_string_spec(
            {"name": "v", "having_value": "PROD-.*", "match_type": "matches", "ignore_case": True}
        )
        assert compare_string(spec, "Prod-EU", "PROD-.*") is True

    def test_none_is_not_comparable(self) -> None:
        spec = parse_string_spec({"name": "mode", "having_value": "prod"})
        assert compare_string(spec, None, "prod") is None

    def test_normalize_order_case_then_trim(self) -> None:
        assert normalize_string("  MiXeD  ", ignore_case=True, trim=True) == "mixed"
        assert normalize_string("  MiXeD  ", ignore_case=False, trim=False) == "  MiXeD  "


# ---------------------------------------------------------------------------
# Integer
# ---------------------------------------------------------------------------


class TestCompareInteger:
    """Tests for compare_integer() — ordinary integer ordering."""

    @pytest.mark.parametrize(
        ("match_type", "resolved", "expected"),
        [
            (NumberMatchType.EQUALS, 5, True),
            (NumberMatchType.EQUALS, 6, False),
            (NumberMatchType.GREATER_THAN, 6, True),
            (NumberMatchType.GREATER_THAN, 5, False),
            (NumberMatchType.LESS_THAN, 4, True),
            (NumberMatchType.LESS_THAN, 5, False),
            (NumberMatchType.GREATER_THAN_OR_EQUAL, 5, True),
            (NumberMatchType.GREATER_THAN_OR_EQUAL, 4, False),
            (NumberMatchType.LESS_THAN_OR_EQUAL, 5, True),
            (NumberMatchType.LESS_THAN_OR_EQUAL, 6, False),
        ],
    )
    def test_match_types(self, match_type: NumberMatchType, resolved: int, expected: bool) -> None:
        spec = parse_integer_spec({"name": "n", "having_value": 5, "match_type": match_type})
        assert compare_integer(spec, resolved, 5) is expected

    def test_negative_values(self) -> None:
        spec = parse_integer_spec({"name": "n", "having_value": -3, "match_type": "less_than"})
        assert compare_integer(spec, -10, -3) is True


# ---------------------------------------------------------------------------
# Float / double
# ---------------------------------------------------------------------------


class TestCompareFloat:
    """Tests for compare_float() — single precision with a 1e-5 tolerance."""

    def test_equal_within_tolerance(self) -> None:
        spec = parse_float_spec({"name": "ratio", "having_value": 0.3})
        assert compare_float(spec, 0.300001, 0.3) is True

    def test_not_equal_outside_tolerance(self) -> None:
        spec = parse_float_spec({"name": "ratio", "having_value": 0.3})
        assert compare_float(spec, 0.31, 0.3) is False

    def test_difference_of_epsilon_does_not_match(self) -> None:
        spec = parse_float_spec({"name": "ratio", "having_value": 0.0})
        assert compare_float(spec, 0.00001, 0.0) is False
        assert compare_float(spec, 0.00002, 0.0) is False

    def test_ordering(self) -> None:
        spec = parse_float_spec({"name": "r", "having_value": 1.5, "match_type": "greater_than"})
        assert compare_float(spec, 2.0, 1.5) is True
        assert compare_float(spec, 1.0, 1.5) is False

    @pytest.mark.parametrize("match_type", list(NumberMatchType))
    def test_nan_is_not_comparable(self, match_type: NumberMatchType) -> None:
        spec = parse_float_spec({"name": "r", "having_value": 1.0, "match_type": match_type})
        assert compare_float(spec, math.nan, 1.0) is None
        assert compare_float(spec, 1.0, math.nan) is None

    def test_to_float32_rounds(self) -> None:
        assert to_float32(0.1) != 0.1
        assert abs(to_float32(0.1) - 0.1) < 1e-7
        assert to_float32(1e40) == math.inf


class TestCompareDouble:
    """Tests for compare_double() — double precision with a 1e-9 tolerance."""

    def test_equal_within_tolerance(self) -> None:
        spec = parse_double_spec({"name": "r", "having_value": 0.3})
        assert compare_double(spec, 0.3 + 1e-10, 0.3) is True

    def test_tolerance_is_tighter_than_float(self) -> None:
        spec = parse_double_spec({"name": "r", "having_value": 0.3})
        assert compare_double(spec, 0.300001, 0.3) is False

    def test_difference_of_epsilon_does_not_match(self) -> None:
        spec = parse_double_spec({"name": "r", "having_value": 0.0})
        assert compare_double(spec, 1e-9, 0.0) is False

    @pytest.mark.parametrize("match_type", list(NumberMatchType))
    def test_nan_is_not_comparable(self, match_type: NumberMatchType) -> None:
        spec = parse_double_spec({"name": "r", "having_value": 1.0, "match_type": match_type})
        assert compare_double(spec, math.nan, 1.0) is None

    def test_less_than_or_equal(self) -> None:
        spec = parse_double_spec(
            {"name": "r", "having_value": 2.5, "match_type": "less_than_or_equal"}
        )
        assert compare_double(spec, 2.5, 2.5) is True
        assert compare_double(spec, 2.6, 2.5) is False


# ---------------------------------------------------------------------------
# Enum
# ---------------------------------------------------------------------------


class TestCompareEnum:
    """Tests for compare_enum() — symbol lookup after upper-casing."""

    def test_same_symbol_case_insensitive(self) -> None:
        spec = parse_enum_spec({"name": "level", "having_value": "INFO", "enum_type": Level})
        assert compare_enum(spec, "info", "INFO") is True

    def test_different_symbol(self) -> None:
        spec = parse_enum_spec({"name": "level", "having_value": "INFO", "enum_type": Level})
        assert compare_enum(spec, "warn", "INFO") is False

    def test_unknown_resolved_symbol_is_not_comparable(self) -> None:
        spec = parse_enum_spec({"name": "level", "having_value": "INFO", "enum_type": Level})
        assert compare_enum(spec, "verbose", "INFO") is None

    def test_unknown_candidate_symbol_is_not_comparable(self) -> None:
        spec = parse_enum_spec({"name": "level", "having_value": "TRACE", "enum_type": Level})
        assert compare_enum(spec, "info", "TRACE") is None

    def test_inline_symbols(self) -> None:
        spec = parse_enum_spec(
            {"name": "tier", "having_value": "gold", "enum_type": ["GOLD", "SILVER"]}
        )
        assert compare_enum(spec, "Gold", "gold") is True


# ---------------------------------------------------------------------------
# OS
# ---------------------------------------------------------------------------


class TestCompareOs:
    """Tests for compare_os() — lower-cased substring tokens."""

    def test_token_substring(self) -> None:
        assert compare_os("Windows 11", ("win",)) is True

    def test_token_case_insensitive(self) -> None:
        assert compare_os("linux", ("LINUX",)) is True

    def test_any_token(self) -> None:
        assert compare_os("Mac OS X", ("win", "mac")) is True

    def test_no_token(self) -> None:
        assert compare_os("Linux", ("win", "mac")) is False
        assert compare_os("Linux", ()) is False
