"""Tests for domain/normalize.py — scalar coercion of assistant JSON."""

import pytest

from blueprint.domain.normalize import (
    parse_bool,
    parse_int_safe,
    parse_number,
    parse_string,
)


class TestParseNumber:
    def test_native_numbers(self):
        assert parse_number(5000) == 5000.0
        assert parse_number(12.5) == 12.5
        assert parse_number(-3) == -3.0

    def test_bool_is_not_a_number(self):
        assert parse_number(True) is None
        assert parse_number(False) is None

    def test_non_finite(self):
        assert parse_number(float("nan")) is None
        assert parse_number(float("inf")) is None

    def test_int_beyond_float_range(self):
        assert parse_number(10**400) is None
        assert parse_int_safe(-(10**400)) is None

    @pytest.mark.parametrize("raw,expected", [
        ("1200", 1200.0),
        ("5 000,50", 5000.5),
        ("$1,200", 1200.0),
        ("5 000₽", 5000.0),
        ("12,5", 12.5),
        ("1.234,56", 1234.56),
        ("1,234.56", 1234.56),
        ("1,000,000", 1000000.0),
        ("1.000.000", 1000000.0),
        ("  42  ", 42.0),
        ("-15", -15.0),
        ("€ 99.90", 99.9),
    ])
    def test_locale_strings(self, raw, expected):
        assert parse_number(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", ["", "   ", "abc", "рублей", "-", "."])
    def test_no_digits(self, raw):
        assert parse_number(raw) is None

    def test_unparseable_leftover(self):
        # Several minus signs survive stripping but do not form a number
        assert parse_number("1-2-3") is None

    def test_other_types(self):
        assert parse_number(None) is None
        assert parse_number([1]) is None
        assert parse_number({"amount": 1}) is None


class TestParseIntSafe:
    def test_truncates_toward_zero(self):
        assert parse_int_safe("31.9") == 31
        assert parse_int_safe(-2.7) == -2

    def test_string_day(self):
        assert parse_int_safe("31") == 31

    def test_none(self):
        assert parse_int_safe("n/a") is None
        assert parse_int_safe(None) is None

    def test_returns_int(self):
        assert isinstance(parse_int_safe(5.0), int)


class TestParseString:
    def test_trims(self):
        assert parse_string("  Ivan ") == "Ivan"

    def test_empty(self):
        assert parse_string("") is None
        assert parse_string("   ") is None

    def test_non_strings(self):
        assert parse_string(42) is None
        assert parse_string(None) is None
        assert parse_string(["a"]) is None


class TestParseBool:
    def test_native(self):
        assert parse_bool(True) is True
        assert parse_bool(False) is False

    def test_strings(self):
        assert parse_bool("false") is False
        assert parse_bool("True") is True
        assert parse_bool("нет") is False
        assert parse_bool("да") is True

    def test_default(self):
        assert parse_bool(None) is True
        assert parse_bool("maybe", default=False) is False
        assert parse_bool([]) is True

    def test_numbers(self):
        assert parse_bool(0) is False
        assert parse_bool(0.0) is False
        assert parse_bool(1) is True
        assert parse_bool(2.5) is True
        assert parse_bool(float("nan"), default=False) is False
