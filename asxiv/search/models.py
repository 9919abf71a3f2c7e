"""Shared data models for arXiv search."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SortBy = Literal["relevance", "lastUpdatedDate", "submittedDate"]
SortOrder = Literal["ascending", "descending"]


class SearchQuery(BaseModel):
    """A structured search request: free text, field filters, paging, sort."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    author: Optional[str] = None
    title: Optional[str] = None
    abstract: Optional[str] = None
    comment: Optional[str] = None
    journal: Optional[str] = None
    report_number: Optional[str] = None
    category: Optional[str] = None
    all: Optional[str] = Field(
        default=None, description="Raw full-text override; ignores every other filter"
    )

    start: int = Field(default=0, ge=0)
    max_results: int = Field(default=10, ge=1, le=200)
    sort_by: SortBy = "relevance"
    sort_order: SortOrder = "descending"

    @property
    def is_issuable(self) -> bool:
        return bool(self.query or self.all)


class PaperRecord(BaseModel):
    """One normalized feed entry."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(min_length=1)
    title: str = ""
    authors: list[str] = Field(default_factory=list)
    abstract: str = ""
    published: Optional[datetime] = None
    updated: Optional[datetime] = None
    categories: list[str] = Field(default_factory=list)
    doi: Optional[str] = None
    comment: Optional[str] = None
    pdf_url: str
    abstract_url: str


class SearchResultPage(BaseModel):
    """One page of normalized results plus paging metadata."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    results: list[PaperRecord] = Field(default_factory=list)
    total_results: int = Field(ge=0)
    start_index: int = Field(ge=0)
    items_per_page: int
    query: str = ""

    def to_response(self) -> dict:
        """Consumer-facing shape: camelCase keys, ISO timestamps."""
        return self.model_dump(mode="json", by_alias=True)
