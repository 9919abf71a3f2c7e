"""Tests for search result display helpers."""

from datetime import datetime, timezone

from asxiv.search.formatting import format_arxiv_date, truncate_text


def test_format_date_string():
    assert format_arxiv_date("2017-06-12T17:57:34Z") == "Jun 12, 2017"


def test_format_date_datetime():
    assert format_arxiv_date(datetime(2023, 1, 5, tzinfo=timezone.utc)) == "Jan 5, 2023"


def test_format_date_passthrough():
    assert format_arxiv_date("") == ""
    assert format_arxiv_date(None) is None
    assert format_arxiv_date("sometime in 2017") == "sometime in 2017"


def test_truncate_short_text_unchanged():
    assert truncate_text("short") == "short"
    assert truncate_text("x" * 200) == "x" * 200


def test_truncate_long_text():
    text = "word " * 100
    out = truncate_text(text, max_length=20)
    assert out.endswith("...")
    assert out == text[:20].strip() + "..."


def test_truncate_empty():
    assert truncate_text("") == ""
    assert truncate_text(None) == ""
