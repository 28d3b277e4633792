"""Query normalization: alphabet, whitespace and idempotence."""
import re

import pytest

from studyshare.services.normalize import normalize_query

SAMPLES = [
    "",
    "   ",
    "Mathematics Past Papers",
    "  O/L   Science -- 2019!!  ",
    "nonexistent_xyz_query",
    "Tab\tand\nnewline",
    "ÀÉÎ accents",
    "සිංහල සාහිත්‍යය",
    "ict (grade 11)",
]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("", ""),
        ("   ", ""),
        ("Mathematics Past Papers", "mathematics past papers"),
        ("  O/L   Science -- 2019!!  ", "ol science 2019"),
        ("nonexistent_xyz_query", "nonexistentxyzquery"),
        ("Tab\tand\nnewline", "tab and newline"),
    ],
)
def test_normalize_examples(raw, expected):
    assert normalize_query(raw) == expected


@pytest.mark.parametrize("raw", SAMPLES)
def test_output_is_lowercase_alnum_single_spaced(raw):
    out = normalize_query(raw)
    assert re.fullmatch(r"([a-z0-9]+( [a-z0-9]+)*)?", out)


@pytest.mark.parametrize("raw", SAMPLES)
def test_normalize_is_idempotent(raw):
    once = normalize_query(raw)
    assert normalize_query(once) == once
