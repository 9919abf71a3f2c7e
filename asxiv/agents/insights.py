"""Research insights agent: rank and explain a page of search results for a goal."""

import logging

import ollama
from pydantic import ValidationError

from asxiv.agents.models import (
    InsightPaper,
    InsightsOutput,
    InsightsPayload,
    InsightsRequest,
    InsightsResponse,
)
from asxiv.core.config import Settings
from asxiv.search.models import PaperRecord

logger = logging.getLogger(__name__)


class InsightsError(RuntimeError):
    """The model did not produce a usable insights payload."""


# ── Prompt Builder ───────────────────────────────────────────────────


def paper_from_record(record: PaperRecord) -> InsightPaper:
    return InsightPaper(
        id=record.id,
        title=record.title,
        abstract=record.abstract,
        authors=record.authors,
        published=record.published,
        categories=record.categories,
    )


def build_insights_prompt(request: InsightsRequest) -> str:
    """Numbered paper summaries plus instructions for the reviewer model."""
    summaries = []
    for index, paper in enumerate(request.papers, 1):
        published = paper.published.isoformat() if paper.published else ""
        summaries.append(
            f"{index}. [{paper.id}]\n"
            f"Title: {paper.title}\n"
            f"Authors: {', '.join(paper.authors)}\n"
            f"Published: {published}\n"
            f"Categories: {', '.join(paper.categories)}\n"
            f"Abstract: {paper.abstract}"
        )
    paper_block = "\n\n".join(summaries)

    return f"""You are an AI research teammate helping a user analyse arXiv papers.

SEARCH QUERY: {request.query}
RESEARCH GOAL: {request.goal}

PAPERS TO REVIEW:
{paper_block}

Instructions:
- Consider the research goal and highlight which papers help the user satisfy it.
- Respond with concise language that a researcher can scan quickly.
- Prioritise relevance and actionable insight over generic summaries.
- If multiple papers cover similar angles, explain how they differ.
- Always include the paperId you were given; do not invent new IDs.
- Only reference the provided papers.
"""


# ── Response Normalization ───────────────────────────────────────────


def collect_paper_insights(payload: InsightsPayload) -> dict[str, str]:
    """Flatten paper insights into {paperId: insight}.

    Accepts either a list of {"paperId", "insight"} objects or a plain
    mapping; malformed entries are dropped. Recommended papers without an
    insight fall back to their reason.
    """
    insights: dict[str, str] = {}

    if isinstance(payload.paper_insights, list):
        for entry in payload.paper_insights:
            if not isinstance(entry, dict):
                continue
            paper_id = entry.get("paperId", entry.get("paper_id"))
            insight = entry.get("insight")
            if paper_id and isinstance(paper_id, str) and isinstance(insight, str):
                insights[paper_id] = insight
    elif isinstance(payload.paper_insights, dict):
        for paper_id, insight in payload.paper_insights.items():
            if isinstance(paper_id, str) and isinstance(insight, str):
                insights[paper_id] = insight

    for item in payload.recommended_papers:
        if not insights.get(item.paper_id):
            insights[item.paper_id] = item.reason

    return insights


# ── Agent ────────────────────────────────────────────────────────────


class InsightsAgent:
    """Generates goal-directed insights over a set of papers; client is injected."""

    def __init__(self, client: ollama.Client, settings: Settings):
        self.client = client
        self.settings = settings

    def generate(self, request: InsightsRequest) -> InsightsResponse:
        prompt = build_insights_prompt(request)
        logger.info(
            "Insights for %d papers (query=%r, model %s)",
            len(request.papers),
            request.query,
            self.settings.insights_model,
        )

        response = self.client.chat(
            model=self.settings.insights_model,
            messages=[{"role": "user", "content": prompt}],
            format=InsightsOutput.model_json_schema(),
            options={"temperature": 0},
        )

        raw = (response.message.content or "").strip()
        if not raw:
            raise InsightsError("No response received from model")

        try:
            payload = InsightsPayload.model_validate_json(raw)
        except ValidationError as exc:
            logger.error("Failed to parse insights output: %s", exc)
            raise InsightsError("Failed to parse AI response") from exc

        return InsightsResponse(
            overview=payload.overview,
            recommended_papers=payload.recommended_papers,
            follow_up_questions=payload.follow_up_questions or [],
            paper_insights=collect_paper_insights(payload),
        )
