"""Paper chat agent: structured Q&A about a single arXiv PDF via Ollama."""

import logging

import ollama
import requests
from pydantic import ValidationError

from asxiv.agents.models import (
    ChatApiResponse,
    ChatMessage,
    ChatRequest,
    StructuredChatResponse,
)
from asxiv.core.arxiv_id import ParsedArxivId, parse_arxiv_id
from asxiv.core.categories import get_category_prompt_context
from asxiv.core.config import Settings
from asxiv.core.document_store import DocumentStore
from asxiv.parsers.pdf_parser import acquire_document

logger = logging.getLogger(__name__)

_WELCOME_TRIGGERS = ("welcome message", "suggested questions")

_WELCOME_PERSONA = (
    "You are an AI assistant helping a student understand this research paper."
)
_ANSWER_PERSONA = (
    "You are an AI assistant helping users understand and analyze research papers."
)

_ANSWER_GUIDELINES = """Guidelines for content field:
- CRITICAL: Always format page references using EXACTLY this format: (page X) for single pages or (page X, page Y) for multiple pages. Examples: "(page 1)", "(page 2, page 6)". NEVER use formats like "page 1,3" or "page 1-3"
- CRITICAL: ONLY state information you can actually find in the paper text
- NEVER make assumptions or educated guesses about information not explicitly stated
- If you cannot find specific information, clearly state "I cannot find this information in the paper"
- Do NOT infer dates from arXiv IDs - only cite dates actually written in the paper
- Never make up or hallucinate page references - only cite pages where you actually found the information
- Do NOT start responses with "Based on my analysis" or "According to the paper"
- Use markdown formatting for better readability"""


class ChatRequestError(ValueError):
    """The chat request is malformed and was rejected before any I/O."""


class ChatError(RuntimeError):
    """The model did not produce a usable structured reply."""


# ── Prompt Builder ───────────────────────────────────────────────────


def is_welcome_request(content: str) -> bool:
    lowered = content.lower()
    return any(trigger in lowered for trigger in _WELCOME_TRIGGERS)


def render_history(messages: list[ChatMessage]) -> str:
    """Prior turns as "Human:"/"Assistant:" lines, followed by a separator."""
    if not messages:
        return ""
    lines = [
        f"{'Human' if m.role == 'user' else 'Assistant'}: {m.content}"
        for m in messages
    ]
    return "\n\n".join(lines) + "\n\n---\n\n"


def build_chat_prompt(parsed: ParsedArxivId, messages: list[ChatMessage]) -> tuple[str, str]:
    """Return (system persona, user prompt) for the next turn.

    Only old-format ids carry an archive, so only they get a field-specific
    persona.
    """
    question = messages[-1].content
    first_turn = len(messages) == 1

    if first_turn and is_welcome_request(question):
        persona = (
            get_category_prompt_context(parsed.category)
            if parsed.category
            else _WELCOME_PERSONA
        )
        prompt = f"""You are helping with arXiv paper {parsed.id}. After analyzing the paper, create a brief welcome message.

For the content field: Provide a brief welcome message with one sentence summary of what this paper is about.

For suggestedQuestions: Create 4-5 specific questions that users can ask about THIS particular paper. Make them specific to the paper's content, methodology, and findings - not generic questions.

Set responseType to "welcome"."""
        return persona, prompt

    persona = (
        get_category_prompt_context(parsed.category) if parsed.category else _ANSWER_PERSONA
    )

    if first_turn:
        prompt = f"""You are helping with arXiv paper {parsed.id}. You are part of asXiv.

Answer this question: {question}

{_ANSWER_GUIDELINES}

For suggestedQuestions: Provide 2-4 contextually relevant follow-up questions based on your answer and the current conversation. Make them specific to this paper's content, not generic.

Set responseType to "answer"."""
        return persona, prompt

    history = render_history(messages[:-1])
    prompt = f"""Continue our conversation about arXiv paper {parsed.id}. You have already analyzed the paper. You are part of asXiv.

{history}Current question: {question}

{_ANSWER_GUIDELINES}

For suggestedQuestions: Provide 2-4 contextually relevant suggested questions based on our conversation history. Make them specific to this paper and our current discussion thread.

Set responseType to "answer"."""
    return persona, prompt


def fit_context(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "\n\n[Paper text truncated]"


# ── Agent ────────────────────────────────────────────────────────────


class ChatAgent:
    """Answers questions about one paper; the LLM client is injected."""

    def __init__(
        self,
        client: ollama.Client,
        store: DocumentStore,
        settings: Settings,
        session: requests.Session | None = None,
    ):
        self.client = client
        self.store = store
        self.settings = settings
        self.session = session

    def respond(self, request: ChatRequest) -> ChatApiResponse:
        """Produce the assistant's next structured turn."""
        parsed = parse_arxiv_id(request.arxiv_id)
        if not parsed.is_valid:
            raise ChatRequestError(f"Invalid ArXiv ID format: {request.arxiv_id}")

        if not request.messages or request.messages[-1].role != "user":
            raise ChatRequestError("Last message must be from user")

        doc = acquire_document(
            parsed.id,
            self.store,
            self.settings,
            client=self.client,
            session=self.session,
        )
        persona, prompt = build_chat_prompt(parsed, request.messages)
        paper_text = fit_context(doc.text, self.settings.max_context_chars)

        logger.info(
            "Chat turn %d for %s (model %s)",
            len(request.messages),
            parsed.id,
            self.settings.chat_model,
        )
        response = self.client.chat(
            model=self.settings.chat_model,
            messages=[
                {"role": "system", "content": persona},
                {
                    "role": "user",
                    "content": (
                        f"PAPER TEXT ({doc.page_count} pages, each starting with a "
                        f"<!-- Page N --> marker):\n\n{paper_text}"
                    ),
                },
                {"role": "user", "content": prompt},
            ],
            format=StructuredChatResponse.model_json_schema(),
            options={"temperature": 0},
        )

        raw = (response.message.content or "").strip()
        if not raw:
            raise ChatError("No text response received from model")

        try:
            structured = StructuredChatResponse.model_validate_json(raw)
        except ValidationError as exc:
            logger.error("Failed to parse structured chat output: %s", exc)
            raise ChatError("Invalid structured response from model") from exc

        return ChatApiResponse(response=structured.content, structured=structured)
