"""arXiv identifier parsing, cleaning, and URL derivation."""

import re
from typing import Optional

from pydantic import BaseModel

# New format: YYMM.NNNNN (1706.03762). Old format: archive/YYMMNNN (cs/0211011).
ARXIV_ID_PATTERN = re.compile(r"^(\d{4}\.\d{4,5}|[a-z-]+/\d{7})$", re.IGNORECASE)

_VERSION_SUFFIX = re.compile(r"v\d+$")


class ParsedArxivId(BaseModel):
    """Result of validating an arXiv identifier."""

    id: str
    is_valid: bool
    category: Optional[str] = None
    number: Optional[str] = None
    is_old_format: bool = False


def _join_segments(value: str | list[str] | None) -> str:
    """Path segments from a URL route become one id: ["cs", "0211011"] → "cs/0211011"."""
    if not value:
        return ""
    if isinstance(value, list):
        return "/".join(value)
    return str(value)


def clean_arxiv_id(value: str | list[str] | None) -> str:
    """Strip a trailing version suffix: "1706.03762v2" → "1706.03762"."""
    return _VERSION_SUFFIX.sub("", _join_segments(value))


def parse_arxiv_id(value: str | list[str] | None) -> ParsedArxivId:
    """Validate an id and split old-format ids into archive and number."""
    arxiv_id = _join_segments(value)
    if not arxiv_id or not ARXIV_ID_PATTERN.match(arxiv_id):
        return ParsedArxivId(id=arxiv_id, is_valid=False)

    if "/" in arxiv_id:
        category, number = arxiv_id.split("/", 1)
        return ParsedArxivId(
            id=arxiv_id,
            is_valid=True,
            category=category,
            number=number,
            is_old_format=True,
        )

    return ParsedArxivId(id=arxiv_id, is_valid=True, number=arxiv_id)


# ── URL / Filename Derivation ────────────────────────────────────────


def get_arxiv_pdf_url(arxiv_id: str) -> str:
    # arXiv serves PDFs without a .pdf extension for both id formats
    return f"https://arxiv.org/pdf/{arxiv_id}"


def get_arxiv_abs_url(arxiv_id: str) -> str:
    return f"https://arxiv.org/abs/{arxiv_id}"


def get_arxiv_file_name(arxiv_id: str) -> str:
    """Cache-safe name: "cs/0211011" → "arxiv-cs-0211011"."""
    return "arxiv-" + re.sub(r"[./]", "-", arxiv_id).lower()
