"""Shared data models for the chat and insights agents.

Models exchanged with the LLM or returned to callers use camelCase aliases,
so their JSON schema and dumps match the consumer-facing API shape.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Chat ─────────────────────────────────────────────────────────────


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(_CamelModel):
    """A conversation about one paper; the last message is the new question."""

    messages: list[ChatMessage]
    arxiv_id: str = Field(min_length=1)


class SuggestedQuestion(_CamelModel):
    text: str = Field(description="The suggested question text")
    description: Optional[str] = Field(
        default=None, description="Optional description of what this question explores"
    )


class StructuredChatResponse(_CamelModel):
    """Schema used for Ollama structured output in chat turns."""

    content: str = Field(description="Main response content in markdown format")
    suggested_questions: list[SuggestedQuestion] = Field(
        default_factory=list,
        description="Context-aware suggested questions based on current conversation",
    )
    response_type: Literal["welcome", "answer", "clarification", "error"] = Field(
        description="Type of response for UI handling"
    )


class ChatApiResponse(_CamelModel):
    response: str
    structured: StructuredChatResponse


# ── Insights ─────────────────────────────────────────────────────────


class InsightPaper(_CamelModel):
    """The subset of a search result the insights prompt needs."""

    id: str = Field(min_length=1)
    title: str
    abstract: str = ""
    authors: list[str] = Field(default_factory=list)
    published: Optional[datetime] = None
    categories: list[str] = Field(default_factory=list)


class InsightsRequest(_CamelModel):
    query: str = Field(min_length=1)
    goal: str = Field(min_length=1)
    papers: list[InsightPaper] = Field(min_length=1)


class RecommendedPaper(_CamelModel):
    paper_id: str = Field(description="ArXiv identifier of the paper")
    title: str = Field(description="Paper title copied verbatim from the input")
    reason: str = Field(
        description="Brief rationale for why this paper helps with the stated goal"
    )


class PaperInsight(_CamelModel):
    paper_id: str = Field(description="ArXiv identifier for the insight")
    insight: str = Field(description="Short explanation tailored to the paper")


class InsightsOutput(_CamelModel):
    """Schema used for Ollama structured output in insights requests."""

    overview: str = Field(
        description="A concise summary that connects the research goal to the supplied papers"
    )
    recommended_papers: list[RecommendedPaper] = Field(
        description="Ordered list of papers that best address the researcher goal"
    )
    paper_insights: list[PaperInsight] = Field(
        default_factory=list,
        description="Optional per-paper insight snippets for specific papers",
    )
    follow_up_questions: list[str] = Field(
        default_factory=list,
        description="Optional short questions the researcher could ask next",
    )


class InsightsPayload(_CamelModel):
    """What the model actually returned.

    Paper insights are kept loose (a list of objects or a plain mapping) and
    filtered entry by entry when building the response.
    """

    overview: str
    recommended_papers: list[RecommendedPaper]
    paper_insights: list | dict | None = None
    follow_up_questions: Optional[list[str]] = None


class InsightsResponse(_CamelModel):
    overview: str
    recommended_papers: list[RecommendedPaper]
    follow_up_questions: list[str] = Field(default_factory=list)
    paper_insights: dict[str, str] = Field(default_factory=dict)
