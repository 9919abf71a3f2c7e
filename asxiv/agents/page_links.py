"""Turn "(page N)" citations in assistant output into markdown anchors."""

import re

_PAGE_REFERENCE = re.compile(r"\(\s*page\s+(\d+(?:\s*,\s*page\s+\d+)*)\s*\)")
_PAGE_SPLIT = re.compile(r"\s*,\s*page\s+")


def _link_pages(match: re.Match) -> str:
    pages = _PAGE_SPLIT.split(match.group(1))
    links = [f"[page {num.strip()}](#page-{num.strip()})" for num in pages]
    return f"({', '.join(links)})"


def process_page_references(content: str) -> str:
    """(page 2, page 6) → ([page 2](#page-2), [page 6](#page-6))"""
    return _PAGE_REFERENCE.sub(_link_pages, content)
