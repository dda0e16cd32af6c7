"""Tests for filename sanitizing and pattern expansion."""

import pytest

from reshape.naming import (
    INVALID_FILENAME_CHARS,
    expand,
    has_counter,
    materialize_counters,
    sanitize_filename,
    sanitize_path,
)


def test_sanitize_filename_removes_invalid_characters() -> None:
    assert sanitize_filename('  a<b>c:d"e/f\\g|h?i*j\x01  ') == "abcdefghij"


def test_sanitize_filename_is_idempotent() -> None:
    value = ' Trip: "Day/1" *final*  '

    once = sanitize_filename(value)

    assert sanitize_filename(once) == once
    assert not set(once) & INVALID_FILENAME_CHARS


def test_sanitize_path_keeps_separators() -> None:
    assert sanitize_path(" Day 1/Beach?: ") == "Day 1/Beach"


def test_expand_substitutes_placeholders_case_insensitively() -> None:
    metadata = {"year": "2024", "month": "01", "day": "15", "filename": "photo"}

    assert expand("{Year}-{MONTH}-{day}_{filename}", metadata) == "2024-01-15_photo"


def test_expand_leaves_unknown_placeholders_in_place() -> None:
    assert expand("{filename}_{location}", {"filename": "photo"}) == "photo_{location}"


def test_expand_sanitizes_substituted_values() -> None:
    metadata = {"camera_model": "EOS 5D: Mark/IV"}

    assert expand("{camera_model}", metadata) == "EOS 5D MarkIV"


def test_expand_preserve_separators_keeps_slashes() -> None:
    metadata = {"year": "2024", "month": "03"}

    assert expand("{year}/{month}", metadata) == "202403"
    assert expand("{year}/{month}", metadata, preserve_separators=True) == "2024/03"


def test_expand_canonicalizes_counters() -> None:
    expanded = expand("{filename}_{counter}_{COUNTER:5}", {"filename": "a"})

    assert expanded == "a_{counter:3}_{counter:5}"
    assert has_counter(expanded)


@pytest.mark.parametrize(
    ("name", "value", "expected"),
    [
        ("a_{counter:3}", 7, "a_007"),
        ("{counter:4}_{counter:1}", 12, "0012_12"),
        ("a_{counter:2}", 1234, "a_1234"),
        ("plain", 5, "plain"),
    ],
)
def test_materialize_counters_pads_to_width(name: str, value: int, expected: str) -> None:
    assert materialize_counters(name, value) == expected


def test_has_counter_false_after_materializing() -> None:
    assert not has_counter(materialize_counters("x_{counter:3}", 1))
