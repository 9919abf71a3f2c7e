"""Tests for arXiv identifier utilities."""

import pytest

from asxiv.core.arxiv_id import (
    clean_arxiv_id,
    get_arxiv_abs_url,
    get_arxiv_file_name,
    get_arxiv_pdf_url,
    parse_arxiv_id,
)


# ── Cleaning ─────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1706.03762v2", "1706.03762"),
        ("cs/0211011v1", "cs/0211011"),
        ("1706.03762", "1706.03762"),
        ("2301.12345v12", "2301.12345"),
        (["cs", "0211011v3"], "cs/0211011"),
        (None, ""),
        ("", ""),
        ([], ""),
    ],
)
def test_clean_arxiv_id(raw, expected):
    assert clean_arxiv_id(raw) == expected


# ── Parsing ──────────────────────────────────────────────────────────


def test_parse_new_format():
    parsed = parse_arxiv_id("1706.03762")
    assert parsed.is_valid
    assert not parsed.is_old_format
    assert parsed.category is None
    assert parsed.number == "1706.03762"


def test_parse_five_digit_new_format():
    assert parse_arxiv_id("2301.12345").is_valid


def test_parse_old_format_from_segments():
    parsed = parse_arxiv_id(["math-ph", "0506203"])
    assert parsed.is_valid
    assert parsed.is_old_format
    assert parsed.id == "math-ph/0506203"
    assert parsed.category == "math-ph"
    assert parsed.number == "0506203"


@pytest.mark.parametrize("raw", ["not-an-id", "1706.037", "cs/021101", "1706.03762v1", "../etc"])
def test_parse_invalid(raw):
    parsed = parse_arxiv_id(raw)
    assert not parsed.is_valid
    assert parsed.id == raw
    assert parsed.category is None


@pytest.mark.parametrize("raw", [None, [], ""])
def test_parse_missing(raw):
    parsed = parse_arxiv_id(raw)
    assert not parsed.is_valid
    assert parsed.id == ""


# ── Derived Names ────────────────────────────────────────────────────


def test_urls():
    assert get_arxiv_pdf_url("cs/0211011") == "https://arxiv.org/pdf/cs/0211011"
    assert get_arxiv_abs_url("1706.03762") == "https://arxiv.org/abs/1706.03762"


@pytest.mark.parametrize(
    "arxiv_id, expected",
    [
        ("1706.03762", "arxiv-1706-03762"),
        ("cs/0211011", "arxiv-cs-0211011"),
        ("Math-PH/0506203", "arxiv-math-ph-0506203"),
    ],
)
def test_file_name(arxiv_id, expected):
    assert get_arxiv_file_name(arxiv_id) == expected
