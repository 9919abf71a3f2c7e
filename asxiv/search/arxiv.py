"""arXiv search client: build the request, fetch the feed, normalize it."""

import logging

import requests

from asxiv.core.config import Settings
from asxiv.search.feed import normalize_feed
from asxiv.search.models import SearchQuery, SearchResultPage
from asxiv.search.query_builder import QueryValidationError, build_request_params

logger = logging.getLogger(__name__)


class ArxivSearchError(RuntimeError):
    """The upstream search could not be completed."""


# ── Public API ───────────────────────────────────────────────────────


def search_arxiv(
    q: SearchQuery,
    settings: Settings | None = None,
    session: requests.Session | None = None,
) -> SearchResultPage:
    """Run one arXiv search and return the normalized result page.

    Validation happens before any network call. Transport failures surface
    once as ArxivSearchError; there is no retry.
    """
    if not q.is_issuable:
        raise QueryValidationError("Query parameter is required")

    settings = settings or Settings()
    params = build_request_params(q)
    logger.info("arXiv query: %s (start=%d, max=%d)", params["search_query"], q.start, q.max_results)

    http = session or requests
    try:
        response = http.get(
            settings.arxiv_api_url,
            params=params,
            headers={"User-Agent": settings.user_agent},
            timeout=settings.request_timeout,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.error("arXiv search failed: %s", exc)
        raise ArxivSearchError("Failed to search arXiv papers") from exc

    page = normalize_feed(
        response.text,
        page_size=q.max_results,
        start=q.start,
        query=q.query or q.all or "",
    )
    logger.info(
        "arXiv returned %d results (total %d)", len(page.results), page.total_results
    )
    return page
