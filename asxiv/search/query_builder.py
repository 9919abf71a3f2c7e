"""Translate a SearchQuery into arXiv API query parameters."""

from asxiv.search.models import SearchQuery

# Declaration order is the order tokens appear in the built query.
_FIELD_PREFIXES: tuple[tuple[str, str], ...] = (
    ("query", "all"),
    ("author", "au"),
    ("title", "ti"),
    ("abstract", "abs"),
    ("comment", "co"),
    ("journal", "jr"),
    ("report_number", "rn"),
    ("category", "cat"),
)


class QueryValidationError(ValueError):
    """The query cannot be sent upstream as given."""


def build_search_query(q: SearchQuery) -> str:
    """Combine populated fields into one ``search_query`` value.

    An ``all`` override replaces every other filter. Otherwise each populated
    field contributes a prefixed token, joined with ``AND``.
    """
    if q.all:
        return f"all:{q.all}"

    parts = [
        f"{prefix}:{getattr(q, name)}"
        for name, prefix in _FIELD_PREFIXES
        if getattr(q, name)
    ]
    if not parts:
        raise QueryValidationError("Query parameter is required")
    return " AND ".join(parts)


def build_request_params(q: SearchQuery) -> dict[str, str | int]:
    """Full parameter set for the arXiv query endpoint."""
    return {
        "search_query": build_search_query(q),
        "start": q.start,
        "max_results": q.max_results,
        "sortBy": q.sort_by,
        "sortOrder": q.sort_order,
    }
