"""Tests for shared parsing and coercion helpers (worktile/utils.py)."""

from __future__ import annotations

import pytest

from worktile.utils import (
    clamp,
    coerce_bool,
    coerce_float,
    coerce_int,
    coerce_str,
    parse_bool,
    parse_float,
    parse_int,
    sanitize_hostname_for_topic,
    split_csv,
)


def test_sanitize_hostname_for_topic():
    assert sanitize_hostname_for_topic("Office.Desk/#+") == "office_desk___"


@pytest.mark.parametrize(
    ("value", "default", "expected"),
    [("1", False, True), ("Yes", False, True), (" on ", False, True), ("no", True, False), (None, True, True)],
)
def test_parse_bool(value, default, expected):
    assert parse_bool(value, default) is expected


def test_parse_numbers():
    assert parse_int("42", 0) == 42
    assert parse_int("4.2", 7) == 7
    assert parse_int(None, 3) == 3
    assert parse_float("2.5", 0.0) == 2.5
    assert parse_float("x", 1.5) == 1.5


def test_split_csv():
    assert split_csv(" a, ,b ,c") == ["a", "b", "c"]
    assert split_csv(None) == []


def test_clamp():
    assert clamp(-1, 0, 100) == 0
    assert clamp(101, 0, 100) == 100
    assert clamp(55, 0, 100) == 55


class TestCoercion:
    @pytest.mark.parametrize(("value", "expected"), [(3, 3), (2.9, 2), ("7", 7), (True, 9), (None, 9), ([1], 9)])
    def test_coerce_int(self, value, expected):
        assert coerce_int(value, 9) == expected

    @pytest.mark.parametrize(("value", "expected"), [(True, True), (0, False), (1, True), ("true", True), (None, False)])
    def test_coerce_bool(self, value, expected):
        assert coerce_bool(value, False) is expected

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_coerce_int_non_finite_falls_back(self, value):
        assert coerce_int(value, 9) == 9

    @pytest.mark.parametrize("value", [float("inf"), float("nan"), "inf", "NaN", 10**400])
    def test_coerce_float_non_finite_falls_back(self, value):
        assert coerce_float(value, 0.5) == 0.5

    def test_coerce_float(self):
        assert coerce_float(3, None) == 3.0
        assert coerce_float("1.25", None) == 1.25
        assert coerce_float("soon", None) is None
        assert coerce_float(False, 0.5) == 0.5

    @pytest.mark.parametrize(("value", "expected"), [("blue", "blue"), (" ", "teal"), (None, "teal"), (False, "teal"), (5, "5")])
    def test_coerce_str(self, value, expected):
        assert coerce_str(value, "teal") == expected
