"""Normalize arXiv Atom feed text into a SearchResultPage."""

import logging
import re
from datetime import datetime, timezone
from typing import Optional
from xml.etree import ElementTree as ET
from xml.etree.ElementTree import Element

from asxiv.core.arxiv_id import clean_arxiv_id, get_arxiv_abs_url, get_arxiv_pdf_url
from asxiv.search.models import PaperRecord, SearchResultPage

logger = logging.getLogger(__name__)

# Total estimation when upstream omits the count. Tunable, not contractual.
MIN_ESTIMATED_TOTAL = 100
ESTIMATE_LOOKAHEAD = 50

_ENTRY_WRAPPER = (
    '<feed xmlns="http://www.w3.org/2005/Atom" '
    'xmlns:arxiv="http://arxiv.org/schemas/atom" '
    'xmlns:opensearch="http://a9.com/-/spec/opensearch/1.1/">{}</feed>'
)

_ABS_ID = re.compile(r"arxiv\.org/abs/(\S+?)\s*$")
# a block ends at its own </entry>, never past the start of the next entry
_ENTRY_BLOCK = re.compile(r"<entry\b[^>]*>(?:(?!<entry\b).)*?</entry>", re.DOTALL)
_TOTAL_MARKER = re.compile(r"<(?:[\w-]+:)?totalResults\b[^>]*>\s*(\d+)\s*<", re.IGNORECASE)
_TAG = re.compile(r"<[^<>!?]+>")
_PREFIX = re.compile(r"(^</?|\s)[\w.-]+:(?=[\w.-])")
_WHITESPACE = re.compile(r"\s+")


# ── Public API ───────────────────────────────────────────────────────


def normalize_feed(
    feed_text: str,
    page_size: int,
    start: int,
    query: str,
) -> SearchResultPage:
    """Parse raw feed text into an ordered, bounded page of PaperRecords.

    Entries without an arXiv identifier are dropped. A single bad entry never
    fails the whole page.
    """
    entries, reported_total = _read_feed(feed_text)

    records: list[PaperRecord] = []
    for position, entry in enumerate(entries, 1):
        try:
            record = parse_entry(entry)
        except Exception as exc:
            logger.warning("Skipping unreadable feed entry #%d: %s", position, exc)
            continue
        if record is None:
            logger.warning("Skipping feed entry #%d: no arXiv identifier", position)
            continue
        records.append(record)

    total = estimate_total(reported_total, len(records), start, page_size)
    logger.debug(
        "Normalized feed: %d/%d entries kept, reported_total=%s, total=%d",
        len(records),
        len(entries),
        reported_total,
        total,
    )

    return SearchResultPage(
        results=records,
        total_results=total,
        start_index=start,
        items_per_page=page_size,
        query=query,
    )


def estimate_total(
    reported: Optional[int],
    found: int,
    start: int,
    page_size: int,
) -> int:
    """Total-result count that never undercounts the visible records.

    A positive upstream count wins. Without one, a short page means these are
    the last results; a full page assumes more exist so paging stays usable.
    """
    if reported:
        total = reported
    elif found == 0:
        total = 0
    elif found < page_size:
        total = start + found
    else:
        total = max(MIN_ESTIMATED_TOTAL, start + page_size + ESTIMATE_LOOKAHEAD)
    return max(total, start + found)


# ── Feed Reading ─────────────────────────────────────────────────────


def _read_feed(feed_text: str) -> tuple[list[Element], Optional[int]]:
    """Return entry elements and the upstream total, if the feed has one."""
    if not feed_text or not feed_text.strip():
        return [], None

    try:
        root = ET.fromstring(feed_text)
    except ET.ParseError as exc:
        logger.warning("Feed is not well-formed XML (%s); salvaging entries", exc)
        return _salvage_entries(feed_text), _salvage_total(feed_text)

    entries = [el for el in root.iter() if _local(el.tag) == "entry"]
    total = None
    for el in root.iter():
        if _local(el.tag).lower() == "totalresults":
            total = _as_int(el.text)
            break
    return entries, total


def _salvage_entries(feed_text: str) -> list[Element]:
    """Parse each <entry> block on its own so one broken block loses only itself."""
    entries: list[Element] = []
    for block in _ENTRY_BLOCK.findall(feed_text):
        try:
            wrapper = ET.fromstring(_ENTRY_WRAPPER.format(block))
        except ET.ParseError:
            # prefixes bound on the lost feed root are unknown here
            try:
                wrapper = ET.fromstring(_ENTRY_WRAPPER.format(_strip_prefixes(block)))
            except ET.ParseError as exc:
                logger.warning("Skipping malformed entry block: %s", exc)
                continue
        entries.extend(el for el in wrapper if _local(el.tag) == "entry")
    return entries


def _strip_prefixes(block: str) -> str:
    """Drop namespace prefixes from element and attribute names."""
    return _TAG.sub(lambda m: _PREFIX.sub(r"\1", m.group(0)), block)


def _salvage_total(feed_text: str) -> Optional[int]:
    match = _TOTAL_MARKER.search(feed_text)
    return int(match.group(1)) if match else None


# ── Entry → PaperRecord ──────────────────────────────────────────────


def parse_entry(entry: Element) -> PaperRecord | None:
    """Convert one Atom <entry> into a PaperRecord, or None without an id."""
    raw_id = _child_text(entry, "id")
    match = _ABS_ID.search(raw_id)
    if not match:
        return None
    arxiv_id = clean_arxiv_id(match.group(1))
    if not arxiv_id:
        return None

    authors = []
    for author in _children(entry, "author"):
        name = _collapse(_child_text(author, "name"))
        if name:
            authors.append(name)

    categories = [
        el.get("term") for el in _children(entry, "category") if el.get("term")
    ]

    return PaperRecord(
        id=arxiv_id,
        title=_collapse(_child_text(entry, "title")),
        authors=authors,
        abstract=_collapse(_child_text(entry, "summary")),
        published=_parse_timestamp(_child_text(entry, "published")),
        updated=_parse_timestamp(_child_text(entry, "updated")),
        categories=categories,
        doi=_collapse(_child_text(entry, "doi")) or None,
        comment=_collapse(_child_text(entry, "comment")) or None,
        pdf_url=get_arxiv_pdf_url(arxiv_id),
        abstract_url=get_arxiv_abs_url(arxiv_id),
    )


# ── Helpers ──────────────────────────────────────────────────────────


def _local(tag) -> str:
    """Tag name without its "{namespace}" prefix."""
    if not isinstance(tag, str):
        return ""  # comments and processing instructions
    return tag.rsplit("}", 1)[-1]


def _children(parent: Element, name: str) -> list[Element]:
    return [el for el in parent if _local(el.tag) == name]


def _child_text(parent: Element, name: str) -> str:
    for el in parent:
        if _local(el.tag) == name:
            return "".join(el.itertext())
    return ""


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _as_int(text: str | None) -> Optional[int]:
    try:
        return int((text or "").strip())
    except ValueError:
        return None


def _parse_timestamp(raw: str) -> Optional[datetime]:
    raw = raw.strip()
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable feed timestamp: %r", raw)
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed
