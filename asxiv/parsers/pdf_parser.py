"""Paper PDF acquisition and parsing: PyMuPDF for digital PDFs, a vision model for scanned."""

import base64
import hashlib
import logging
from datetime import datetime, timezone
from pathlib import Path

import fitz  # PyMuPDF
import ollama
import requests

from asxiv.core.arxiv_id import get_arxiv_file_name, get_arxiv_pdf_url
from asxiv.core.config import Settings
from asxiv.core.document_store import DocumentStore
from asxiv.parsers.models import ParsedDocument

logger = logging.getLogger(__name__)

_SCANNED_THRESHOLD = 100  # avg chars per page; below this the PDF is image-only
_PAGE_SEPARATOR = "\n\n---\n\n"


class PdfFetchError(RuntimeError):
    """The paper PDF could not be downloaded or is not a usable PDF."""


# ── Download ─────────────────────────────────────────────────────────


def download_pdf(
    url: str,
    settings: Settings,
    session: requests.Session | None = None,
) -> bytes:
    """Fetch a PDF and check it really is one and is not oversized."""
    http = session or requests
    try:
        response = http.get(
            url,
            headers={"User-Agent": settings.user_agent},
            timeout=settings.pdf_timeout,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        raise PdfFetchError(f"Failed to download PDF: {exc}") from exc

    data = response.content
    if not data.startswith(b"%PDF"):
        raise PdfFetchError("Downloaded content is not a valid PDF file")

    size_mb = len(data) / (1024 * 1024)
    if size_mb > settings.max_pdf_mb:
        raise PdfFetchError(
            f"PDF file too large ({size_mb:.2f} MB). "
            f"Maximum size is {settings.max_pdf_mb:g} MB"
        )

    logger.info("Downloaded %s (%.2f MB)", url, size_mb)
    return data


# ── Parsing ──────────────────────────────────────────────────────────


def compute_pdf_hash(pdf_path: str | Path) -> str:
    """SHA-256 hash of the PDF file contents."""
    h = hashlib.sha256()
    with open(pdf_path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def extract_pages(pdf_path: str | Path) -> list[str]:
    """Text layer of every page, in order."""
    doc = fitz.open(str(pdf_path))
    try:
        return [page.get_text() for page in doc]
    finally:
        doc.close()


def is_scanned(pages: list[str]) -> bool:
    """Heuristic: sparse extractable text per page means an image-only scan."""
    if not pages:
        return True
    chars_per_page = sum(len(p) for p in pages) / len(pages)
    return chars_per_page < _SCANNED_THRESHOLD


def parse_with_vision(pdf_path: str | Path, client: ollama.Client, model: str) -> list[str]:
    """Transcribe each rendered page with a vision model."""
    doc = fitz.open(str(pdf_path))
    pages: list[str] = []

    try:
        for page_num in range(len(doc)):
            pix = doc[page_num].get_pixmap(dpi=200)
            img_b64 = base64.b64encode(pix.tobytes("png")).decode()

            response = client.chat(
                model=model,
                messages=[
                    {
                        "role": "user",
                        "content": (
                            "Extract all text from this page. Preserve tables, "
                            "headings, and formatting. Output as Markdown."
                        ),
                        "images": [img_b64],
                    }
                ],
                options={"temperature": 0},
            )
            pages.append(response.message.content or "")
            logger.info("Vision model parsed page %d/%d", page_num + 1, len(doc))
    finally:
        doc.close()

    return pages


def format_pages(pages: list[str]) -> str:
    """Join pages with numbered markers the assistant cites as "(page N)"."""
    return _PAGE_SEPARATOR.join(
        f"<!-- Page {num} -->\n{text.strip()}" for num, text in enumerate(pages, 1)
    )


def parse_pdf(
    pdf_path: str | Path,
    arxiv_id: str,
    file_name: str,
    client: ollama.Client | None,
    settings: Settings,
) -> ParsedDocument:
    """Parse a PDF, routing scanned documents to the vision model when one is available."""
    pages = extract_pages(pdf_path)
    parser_used = "pymupdf"

    if is_scanned(pages):
        if client is None:
            logger.warning("%s: looks scanned but no vision client given", arxiv_id)
        else:
            logger.info("%s: scanned PDF detected, using %s", arxiv_id, settings.vision_model)
            pages = parse_with_vision(pdf_path, client, settings.vision_model)
            parser_used = "vision"

    return ParsedDocument(
        arxiv_id=arxiv_id,
        file_name=file_name,
        pdf_hash=compute_pdf_hash(pdf_path),
        page_count=len(pages),
        text=format_pages(pages),
        parser_used=parser_used,
        parsed_at=datetime.now(timezone.utc),
    )


# ── Public API ───────────────────────────────────────────────────────


def acquire_document(
    arxiv_id: str,
    store: DocumentStore,
    settings: Settings,
    client: ollama.Client | None = None,
    session: requests.Session | None = None,
) -> ParsedDocument:
    """Return the parsed paper, downloading and parsing it only on a cache miss."""
    file_name = get_arxiv_file_name(arxiv_id)

    cached = store.get_document(file_name)
    if cached is not None:
        logger.info("%s already parsed (%d pages) — using cache", arxiv_id, cached.page_count)
        return cached

    data = download_pdf(get_arxiv_pdf_url(arxiv_id), settings, session=session)
    pdf_path = store.pdf_path_for(file_name)
    pdf_path.write_bytes(data)

    doc = parse_pdf(pdf_path, arxiv_id, file_name, client, settings)
    store.save_document(doc, pdf_path)
    return doc
