"""SQLite-backed cache of downloaded and parsed paper PDFs."""

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from asxiv.parsers.models import ParsedDocument

logger = logging.getLogger(__name__)

DATA_ROOT = Path("data")

# ── Schema DDL ───────────────────────────────────────────────────────

_SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    file_name           TEXT PRIMARY KEY,
    arxiv_id            TEXT NOT NULL,
    pdf_path            TEXT NOT NULL,
    pdf_hash            TEXT NOT NULL,
    page_count          INTEGER NOT NULL CHECK (page_count >= 0),
    parsed_text_path    TEXT NOT NULL,
    parser_used         TEXT NOT NULL CHECK (parser_used IN ('pymupdf', 'vision')),
    parsed_at           TEXT NOT NULL,
    created_at          TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_documents_arxiv ON documents(arxiv_id);
"""


# ── DocumentStore ────────────────────────────────────────────────────


class DocumentStore:
    """One cache directory: documents.db plus pdfs/ and parsed_text/."""

    def __init__(self, data_root: Path | None = None):
        root = Path(data_root or DATA_ROOT)
        root.mkdir(parents=True, exist_ok=True)
        self.pdf_dir = root / "pdfs"
        self.text_dir = root / "parsed_text"
        self.pdf_dir.mkdir(exist_ok=True)
        self.text_dir.mkdir(exist_ok=True)

        self.db_path = root / "documents.db"
        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def pdf_path_for(self, file_name: str) -> Path:
        return self.pdf_dir / f"{file_name}.pdf"

    # ── Documents ────────────────────────────────────────────

    def get_document(self, file_name: str) -> ParsedDocument | None:
        """Return the cached parse, or None if unknown or its text file is gone."""
        row = self._conn.execute(
            "SELECT * FROM documents WHERE file_name = ?", (file_name,)
        ).fetchone()
        if row is None:
            return None

        text_path = Path(row["parsed_text_path"])
        if not text_path.exists():
            logger.warning("Cached text for %s missing at %s", file_name, text_path)
            return None

        return ParsedDocument(
            arxiv_id=row["arxiv_id"],
            file_name=row["file_name"],
            pdf_hash=row["pdf_hash"],
            page_count=row["page_count"],
            text=text_path.read_text(),
            parser_used=row["parser_used"],
            parsed_at=datetime.fromisoformat(row["parsed_at"]),
        )

    def save_document(self, doc: ParsedDocument, pdf_path: Path) -> Path:
        """Write the parsed text and upsert the row. Returns the text path."""
        text_path = self.text_dir / f"{doc.file_name}.md"
        text_path.write_text(doc.text)

        self._conn.execute(
            """INSERT OR REPLACE INTO documents
               (file_name, arxiv_id, pdf_path, pdf_hash, page_count,
                parsed_text_path, parser_used, parsed_at, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                doc.file_name,
                doc.arxiv_id,
                str(pdf_path),
                doc.pdf_hash,
                doc.page_count,
                str(text_path),
                doc.parser_used,
                doc.parsed_at.isoformat(),
                _now(),
            ),
        )
        self._conn.commit()
        logger.info("Cached %s (%d pages, %s)", doc.file_name, doc.page_count, doc.parser_used)
        return text_path

    def list_documents(self) -> list[dict]:
        rows = self._conn.execute(
            "SELECT file_name, arxiv_id, page_count, parser_used, parsed_at "
            "FROM documents ORDER BY created_at, rowid"
        ).fetchall()
        return [dict(r) for r in rows]

    # ── Cleanup ──────────────────────────────────────────────

    def close(self) -> None:
        self._conn.close()


# ── Helpers ──────────────────────────────────────────────────────────


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
