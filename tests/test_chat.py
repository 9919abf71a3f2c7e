"""Tests for the paper chat agent (mocked Ollama client)."""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from fpdf import FPDF

from asxiv.agents.chat import (
    ChatAgent,
    ChatError,
    ChatRequestError,
    build_chat_prompt,
    fit_context,
    is_welcome_request,
    render_history,
)
from asxiv.agents.models import ChatMessage, ChatRequest, StructuredChatResponse
from asxiv.core.arxiv_id import parse_arxiv_id
from asxiv.core.config import Settings
from asxiv.core.document_store import DocumentStore
from asxiv.parsers.models import ParsedDocument

WELCOME_REPLY = {
    "content": "Welcome! This paper introduces the Transformer.",
    "suggestedQuestions": [
        {"text": "How does multi-head attention work?", "description": "Core mechanism"},
        {"text": "What BLEU scores were reported?"},
    ],
    "responseType": "welcome",
}

ANSWER_REPLY = {
    "content": "Eight attention heads are used (page 5).",
    "suggestedQuestions": [],
    "responseType": "answer",
}


@pytest.fixture()
def settings(tmp_path):
    return Settings(data_root=tmp_path / "data")


@pytest.fixture()
def store(settings):
    s = DocumentStore(settings.data_root)
    yield s
    s.close()


@pytest.fixture()
def cached_paper(store):
    """Seed the cache so the agent never downloads."""
    doc = ParsedDocument(
        arxiv_id="1706.03762",
        file_name="arxiv-1706-03762",
        pdf_hash="f" * 64,
        page_count=2,
        text="<!-- Page 1 -->\nAttention Is All You Need\n\n---\n\n<!-- Page 2 -->\nh = 8",
        parser_used="pymupdf",
        parsed_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    store.save_document(doc, store.pdf_path_for(doc.file_name))
    return doc


def _client(reply) -> MagicMock:
    content = reply if isinstance(reply, str) else json.dumps(reply)
    client = MagicMock()
    client.chat.return_value = MagicMock(message=MagicMock(content=content))
    return client


def _user(text: str) -> ChatMessage:
    return ChatMessage(role="user", content=text)


def _assistant(text: str) -> ChatMessage:
    return ChatMessage(role="assistant", content=text)


# ── Prompt Builder ───────────────────────────────────────────────────


def test_welcome_detection():
    assert is_welcome_request("Please give me a Welcome Message")
    assert is_welcome_request("any suggested questions?")
    assert not is_welcome_request("What is the learning rate?")


def test_render_history():
    history = render_history([_user("Hi"), _assistant("Hello")])
    assert history == "Human: Hi\n\nAssistant: Hello\n\n---\n\n"
    assert render_history([]) == ""


def test_welcome_prompt_for_new_format_id():
    persona, prompt = build_chat_prompt(
        parse_arxiv_id("1706.03762"), [_user("welcome message please")]
    )
    assert persona.startswith("You are an AI assistant helping a student")
    assert 'Set responseType to "welcome"' in prompt
    assert "1706.03762" in prompt


def test_old_format_id_gets_field_persona():
    persona, _ = build_chat_prompt(parse_arxiv_id("cs/0211011"), [_user("What is proved?")])
    assert persona.startswith("You are a Computer Science professor")


def test_first_question_prompt():
    _, prompt = build_chat_prompt(parse_arxiv_id("1706.03762"), [_user("How many layers?")])
    assert "Answer this question: How many layers?" in prompt
    assert "(page X)" in prompt
    assert 'Set responseType to "answer"' in prompt


def test_follow_up_prompt_carries_history():
    messages = [_user("welcome message"), _assistant("Welcome!"), _user("How many heads?")]
    _, prompt = build_chat_prompt(parse_arxiv_id("1706.03762"), messages)
    assert prompt.startswith("Continue our conversation")
    assert "Human: welcome message\n\nAssistant: Welcome!" in prompt
    assert "Current question: How many heads?" in prompt
    assert 'Set responseType to "welcome"' not in prompt


def test_fit_context():
    assert fit_context("short", 100) == "short"
    cut = fit_context("x" * 50, 10)
    assert cut.startswith("x" * 10)
    assert cut.endswith("[Paper text truncated]")


# ── Agent ────────────────────────────────────────────────────────────


def test_welcome_turn(store, settings, cached_paper):
    client = _client(WELCOME_REPLY)
    session = MagicMock()
    agent = ChatAgent(client, store, settings, session=session)

    reply = agent.respond(ChatRequest(messages=[_user("welcome message")], arxiv_id="1706.03762"))

    assert reply.response == WELCOME_REPLY["content"]
    assert reply.structured.response_type == "welcome"
    assert [q.text for q in reply.structured.suggested_questions] == [
        "How does multi-head attention work?",
        "What BLEU scores were reported?",
    ]
    session.get.assert_not_called()


def test_model_call_shape(store, settings, cached_paper):
    client = _client(ANSWER_REPLY)
    agent = ChatAgent(client, store, settings)
    agent.respond(ChatRequest(messages=[_user("How many heads?")], arxiv_id="1706.03762"))

    kwargs = client.chat.call_args.kwargs
    assert kwargs["model"] == settings.chat_model
    assert kwargs["format"] == StructuredChatResponse.model_json_schema()
    assert kwargs["options"] == {"temperature": 0}
    roles = [m["role"] for m in kwargs["messages"]]
    assert roles == ["system", "user", "user"]
    assert cached_paper.text in kwargs["messages"][1]["content"]


def test_request_accepts_camel_case_body(store, settings, cached_paper):
    agent = ChatAgent(_client(ANSWER_REPLY), store, settings)
    request = ChatRequest.model_validate(
        {"messages": [{"role": "user", "content": "Q?"}], "arxivId": "1706.03762"}
    )
    assert agent.respond(request).structured.response_type == "answer"


def test_invalid_id_rejected_before_io(store, settings):
    client = _client(ANSWER_REPLY)
    session = MagicMock()
    agent = ChatAgent(client, store, settings, session=session)

    with pytest.raises(ChatRequestError, match="Invalid ArXiv ID format: nope"):
        agent.respond(ChatRequest(messages=[_user("hi")], arxiv_id="nope"))
    client.chat.assert_not_called()
    session.get.assert_not_called()


@pytest.mark.parametrize(
    "messages",
    [[], [_user("hi"), _assistant("hello")]],
)
def test_last_message_must_be_user(store, settings, messages):
    client = _client(ANSWER_REPLY)
    agent = ChatAgent(client, store, settings, session=MagicMock())
    with pytest.raises(ChatRequestError, match="Last message must be from user"):
        agent.respond(ChatRequest(messages=messages, arxiv_id="1706.03762"))
    client.chat.assert_not_called()


def test_empty_model_output(store, settings, cached_paper):
    agent = ChatAgent(_client("   "), store, settings)
    with pytest.raises(ChatError, match="No text response"):
        agent.respond(ChatRequest(messages=[_user("Q?")], arxiv_id="1706.03762"))


@pytest.mark.parametrize(
    "raw",
    ["not json", json.dumps({"content": "x"}), json.dumps({"content": "x", "responseType": "joke"})],
)
def test_invalid_model_output(store, settings, cached_paper, raw):
    agent = ChatAgent(_client(raw), store, settings)
    with pytest.raises(ChatError, match="Invalid structured response"):
        agent.respond(ChatRequest(messages=[_user("Q?")], arxiv_id="1706.03762"))


def test_cache_miss_downloads_pdf_once(tmp_path, store, settings):
    pdf = FPDF()
    pdf.add_page()
    pdf.set_font("Helvetica", size=12)
    pdf.multi_cell(w=0, text="Old-style paper body text about proofs and lemmas. " * 6)
    pdf_path = tmp_path / "old.pdf"
    pdf.output(str(pdf_path))

    session = MagicMock()
    session.get.return_value = MagicMock(content=pdf_path.read_bytes())
    agent = ChatAgent(_client(ANSWER_REPLY), store, settings, session=session)

    request = ChatRequest(messages=[_user("Main lemma?")], arxiv_id="cs/0211011")
    agent.respond(request)
    agent.respond(request)

    assert session.get.call_count == 1
    assert store.get_document("arxiv-cs-0211011").page_count == 1
