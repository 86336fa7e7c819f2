# tests/test_utils.py
"""Tests for utility functions."""

import logging

import pytest

from propresenter_edit.internals import constants
from propresenter_edit.utils import get_debug_mode, preview, str_to_bool


# region str_to_bool tests
@pytest.mark.parametrize(
    "input_str,expected",
    [
        ("true", True),
        ("TRUE", True),
        ("t", True),
        ("1", True),
        ("yEs", True),
        ("  y", True),
        ("false", False),
        ("F", False),
        ("0", False),
        ("no", False),
        ("n  ", False),
    ],
)
def test_str_to_bool_returns_expected(input_str: str, expected: bool) -> None:
    assert str_to_bool(input_str) == expected


@pytest.mark.parametrize("invalid_str", ["invalid", "maybe", "-1", "2", "", " ", "yes no"])
def test_str_to_bool_raises_error_for_invalid_strings(invalid_str: str) -> None:
    with pytest.raises(ValueError):
        str_to_bool(invalid_str)


def test_str_to_bool_error_message_includes_invalid_value() -> None:
    with pytest.raises(ValueError, match="bob"):
        str_to_bool("bob")


# endregion


# region get_debug_mode tests
def test_get_debug_mode_returns_true_when_env_var_is_true(
    clean_debug_env: pytest.MonkeyPatch,
) -> None:
    clean_debug_env.setenv("PROPRESENTER_EDIT_DEBUG", "true")
    assert get_debug_mode() is True


def test_get_debug_mode_returns_false_when_env_var_is_false(
    clean_debug_env: pytest.MonkeyPatch,
) -> None:
    clean_debug_env.setenv("PROPRESENTER_EDIT_DEBUG", "0")
    assert get_debug_mode() is False


def test_get_debug_mode_returns_default_when_env_var_not_set(
    clean_debug_env: pytest.MonkeyPatch,
) -> None:
    assert get_debug_mode() == constants.DEBUG_MODE_DEFAULT


def test_get_debug_mode_falls_back_and_warns_for_invalid_env_var(
    clean_debug_env: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    clean_debug_env.setenv("PROPRESENTER_EDIT_DEBUG", "banana")

    with caplog.at_level(logging.WARNING, logger="propresenter_edit"):
        assert get_debug_mode() == constants.DEBUG_MODE_DEFAULT

    assert "Invalid value for PROPRESENTER_EDIT_DEBUG" in caplog.text
    assert "banana" in caplog.text


# endregion


# region preview tests
def test_preview_keeps_short_text() -> None:
    assert preview("Amazing grace", 50) == "Amazing grace"


def test_preview_truncates_with_ellipsis() -> None:
    assert preview("abcdefghij", 4) == "abcd..."


def test_preview_joins_lines() -> None:
    assert preview("one\ntwo", 50) == "one two"
    assert preview("one\ntwo", 50, " | ") == "one | two"


def test_preview_exact_length_is_not_marked() -> None:
    assert preview("abcd", 4) == "abcd"


# endregion
