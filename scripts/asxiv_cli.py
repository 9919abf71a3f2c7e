#!/usr/bin/env python3
"""asXiv command-line runner: search arXiv, chat about a paper, get insights."""

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import ollama
from pydantic import ValidationError

from asxiv.agents.chat import ChatAgent, ChatError, ChatRequestError
from asxiv.agents.insights import InsightsAgent, InsightsError, paper_from_record
from asxiv.agents.models import ChatMessage, ChatRequest, InsightsRequest
from asxiv.agents.page_links import process_page_references
from asxiv.core.arxiv_id import clean_arxiv_id
from asxiv.core.categories import get_arxiv_categories
from asxiv.core.config import build_ollama_client, load_settings
from asxiv.core.document_store import DocumentStore
from asxiv.parsers.pdf_parser import PdfFetchError
from asxiv.search.arxiv import ArxivSearchError, search_arxiv
from asxiv.search.formatting import format_arxiv_date, truncate_text
from asxiv.search.models import SearchQuery, SearchResultPage
from asxiv.search.query_builder import QueryValidationError, build_search_query

logger = logging.getLogger("asxiv")

WELCOME_PROMPT = "Please give me a welcome message and suggested questions for this paper."

EXIT_FAILED = 1
EXIT_INVALID = 2


# ── Commands ─────────────────────────────────────────────────────────


def _search_query_from_args(args) -> SearchQuery:
    return SearchQuery(
        query=args.query or "",
        author=args.author,
        title=args.title,
        abstract=args.abstract,
        comment=args.comment,
        journal=args.journal,
        report_number=args.report_number,
        category=args.category,
        all=args.all,
        start=args.start,
        max_results=args.max_results,
        sort_by=args.sort_by,
        sort_order=args.sort_order,
    )


def _print_page(page: SearchResultPage) -> None:
    last = page.start_index + len(page.results)
    print(f"Showing {page.start_index + 1}-{last} of {page.total_results} results\n")
    for i, paper in enumerate(page.results, page.start_index + 1):
        print(f"{i}. {paper.title} [{paper.id}]")
        print(f"   {', '.join(paper.authors)}")
        print(f"   {format_arxiv_date(paper.published) or ''}  {' '.join(paper.categories)}")
        print(f"   {truncate_text(paper.abstract, 300)}")
        print(f"   {paper.pdf_url}\n")


def cmd_search(args, settings) -> None:
    page = search_arxiv(_search_query_from_args(args), settings)
    if args.json:
        print(json.dumps(page.to_response(), indent=2))
    else:
        _print_page(page)


def _print_reply(reply) -> None:
    print(process_page_references(reply.structured.content))
    if reply.structured.suggested_questions:
        print("\nSuggested questions:")
        for q in reply.structured.suggested_questions:
            print(f"  - {q.text}")
    print()


def cmd_chat(args, settings) -> None:
    store = DocumentStore(settings.data_root)
    agent = ChatAgent(build_ollama_client(settings), store, settings)
    arxiv_id = clean_arxiv_id(args.arxiv_id)
    messages: list[ChatMessage] = []

    def ask(text: str) -> None:
        messages.append(ChatMessage(role="user", content=text))
        reply = agent.respond(ChatRequest(messages=messages, arxiv_id=arxiv_id))
        messages.append(ChatMessage(role="assistant", content=reply.response))
        _print_reply(reply)

    try:
        if args.question:
            ask(args.question)
            return

        ask(WELCOME_PROMPT)
        while True:
            try:
                text = input("> ").strip()
            except EOFError:
                break
            if text.lower() in ("exit", "quit"):
                break
            if text:
                ask(text)
    finally:
        store.close()


def cmd_insights(args, settings) -> None:
    q = _search_query_from_args(args)
    page = search_arxiv(q, settings)
    if not page.results:
        logger.info("No papers found — nothing to analyse")
        return

    request = InsightsRequest(
        query=q.query or build_search_query(q),
        goal=args.goal,
        papers=[paper_from_record(r) for r in page.results],
    )
    insights = InsightsAgent(build_ollama_client(settings), settings).generate(request)

    if args.json:
        print(json.dumps(insights.model_dump(mode="json", by_alias=True), indent=2))
        return

    print(insights.overview, "\n")
    for rec in insights.recommended_papers:
        print(f"* {rec.title} [{rec.paper_id}]\n  {rec.reason}")
    if insights.follow_up_questions:
        print("\nFollow-up questions:")
        for q in insights.follow_up_questions:
            print(f"  - {q}")


def cmd_categories(args, settings) -> None:
    for cat in get_arxiv_categories():
        print(f"{cat.code:<18} {cat.name}")


def cmd_cache(args, settings) -> None:
    store = DocumentStore(settings.data_root)
    try:
        documents = store.list_documents()
    finally:
        store.close()

    if not documents:
        print(f"No cached papers in {settings.data_root}")
        return
    for doc in documents:
        print(
            f"{doc['arxiv_id']:<18} {doc['page_count']:>4} pages  "
            f"{doc['parser_used']:<8} {doc['parsed_at']}"
        )


# ── CLI ──────────────────────────────────────────────────────────────


def _add_search_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("query", nargs="?", default="", help="Free-text query")
    parser.add_argument("--all", default=None, help="Raw query override (ignores filters)")
    parser.add_argument("--author")
    parser.add_argument("--title")
    parser.add_argument("--abstract")
    parser.add_argument("--comment")
    parser.add_argument("--journal")
    parser.add_argument("--report-number")
    parser.add_argument("--category", help="e.g. cs.AI (see 'categories')")
    parser.add_argument("--start", type=int, default=0)
    parser.add_argument("--max-results", type=int, default=10)
    parser.add_argument(
        "--sort-by",
        choices=("relevance", "lastUpdatedDate", "submittedDate"),
        default="relevance",
    )
    parser.add_argument("--sort-order", choices=("ascending", "descending"), default="descending")
    parser.add_argument("--json", action="store_true", help="Print the raw response shape")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search arXiv and talk to papers")
    parser.add_argument("--config", default=None, help="Path to settings YAML")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Search arXiv")
    _add_search_arguments(search)
    search.set_defaults(func=cmd_search)

    chat = sub.add_parser("chat", help="Chat about one paper")
    chat.add_argument("arxiv_id", help="e.g. 1706.03762 or cs/0211011")
    chat.add_argument("--question", help="Ask a single question and exit")
    chat.set_defaults(func=cmd_chat)

    insights = sub.add_parser("insights", help="Search, then analyse results for a goal")
    _add_search_arguments(insights)
    insights.add_argument("--goal", required=True, help="What you are trying to find out")
    insights.set_defaults(func=cmd_insights)

    categories = sub.add_parser("categories", help="List popular arXiv categories")
    categories.set_defaults(func=cmd_categories)

    cache = sub.add_parser("cache", help="List papers already downloaded and parsed")
    cache.set_defaults(func=cmd_cache)

    return parser


def main():
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        settings = load_settings(args.config)
        args.func(args, settings)
    except (ValidationError, QueryValidationError, ChatRequestError) as exc:
        logger.error("Invalid request: %s", exc)
        sys.exit(EXIT_INVALID)
    except (ArxivSearchError, PdfFetchError, ChatError, InsightsError) as exc:
        logger.error("%s", exc)
        sys.exit(EXIT_FAILED)
    except (ollama.ResponseError, ConnectionError) as exc:
        logger.error("LLM request failed: %s", exc)
        sys.exit(EXIT_FAILED)
    except KeyboardInterrupt:
        sys.exit(EXIT_FAILED)


if __name__ == "__main__":
    main()
