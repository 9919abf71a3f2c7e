"""Display helpers for rendering search results."""

from datetime import datetime


def format_arxiv_date(value: str | datetime | None) -> str | datetime | None:
    """Render a timestamp as "Jun 12, 2017".

    Empty or unparseable input is returned unchanged.
    """
    if not value:
        return value

    parsed = value
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value

    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def truncate_text(text: str, max_length: int = 200) -> str:
    if not text or not isinstance(text, str):
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."
