"""Tests for the arXiv search client (mocked HTTP, plus one live query)."""

from unittest.mock import MagicMock

import pytest
import requests

from asxiv.core.config import Settings
from asxiv.search.arxiv import ArxivSearchError, search_arxiv
from asxiv.search.models import SearchQuery, SearchResultPage
from asxiv.search.query_builder import QueryValidationError

FEED = """<feed xmlns="http://www.w3.org/2005/Atom"
      xmlns:opensearch="http://a9.com/-/spec/opensearch/1.1/">
  <opensearch:totalResults>1</opensearch:totalResults>
  <entry>
    <id>http://arxiv.org/abs/1706.03762v7</id>
    <title>Attention Is All You Need</title>
    <author><name>Ashish Vaswani</name></author>
    <published>2017-06-12T15:00:00Z</published>
  </entry>
</feed>"""


@pytest.fixture()
def settings():
    return Settings()


def _session(text: str = FEED, status_error: Exception | None = None) -> MagicMock:
    response = MagicMock(text=text)
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    session = MagicMock()
    session.get.return_value = response
    return session


# ── Request ──────────────────────────────────────────────────────────


def test_search_sends_built_params(settings):
    session = _session()
    q = SearchQuery(query="attention", category="cs.CL", start=10, max_results=5)

    search_arxiv(q, settings, session=session)

    session.get.assert_called_once()
    args, kwargs = session.get.call_args
    assert args[0] == settings.arxiv_api_url
    assert kwargs["params"] == {
        "search_query": "all:attention AND cat:cs.CL",
        "start": 10,
        "max_results": 5,
        "sortBy": "relevance",
        "sortOrder": "descending",
    }
    assert kwargs["headers"]["User-Agent"] == settings.user_agent
    assert kwargs["timeout"] == settings.request_timeout


def test_search_returns_normalized_page(settings):
    page = search_arxiv(SearchQuery(query="attention"), settings, session=_session())
    assert isinstance(page, SearchResultPage)
    assert [p.id for p in page.results] == ["1706.03762"]
    assert page.total_results == 1
    assert page.query == "attention"


def test_search_reports_override_as_query(settings):
    page = search_arxiv(SearchQuery(all="ti:attention"), settings, session=_session())
    assert page.query == "ti:attention"


# ── Errors ───────────────────────────────────────────────────────────


def test_unissuable_query_never_hits_network(settings):
    session = _session()
    with pytest.raises(QueryValidationError):
        search_arxiv(SearchQuery(author="John Doe"), settings, session=session)
    session.get.assert_not_called()


def test_http_error_becomes_search_error(settings):
    session = _session(status_error=requests.HTTPError("503 Service Unavailable"))
    with pytest.raises(ArxivSearchError, match="Failed to search arXiv papers") as info:
        search_arxiv(SearchQuery(query="x"), settings, session=session)
    assert isinstance(info.value.__cause__, requests.HTTPError)


def test_connection_error_becomes_search_error(settings):
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("connection refused")
    with pytest.raises(ArxivSearchError):
        search_arxiv(SearchQuery(query="x"), settings, session=session)
    assert session.get.call_count == 1


def test_empty_feed_is_not_an_error(settings):
    page = search_arxiv(SearchQuery(query="zzzz"), settings, session=_session(text=""))
    assert page.results == []
    assert page.total_results == 0


# ── Live Search ──────────────────────────────────────────────────────


@pytest.mark.network
def test_live_search_finds_attention_paper():
    page = search_arxiv(SearchQuery(query="attention is all you need", max_results=5))
    assert page.results
    assert all(p.id for p in page.results)
    assert page.total_results >= len(page.results)
