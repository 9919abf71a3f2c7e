"""Shared data models for parsers."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class ParsedDocument(BaseModel):
    """A paper PDF converted to page-delimited Markdown."""

    arxiv_id: str
    file_name: str
    pdf_hash: str
    page_count: int = Field(ge=0)
    text: str
    parser_used: Literal["pymupdf", "vision"]
    parsed_at: datetime
