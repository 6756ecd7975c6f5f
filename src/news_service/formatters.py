"""Plain-text rendering helpers for article lists."""

from __future__ import annotations

import re
from datetime import datetime

from news_service.models import Article

_COUNTRY_NAMES = {
    "united states": "us",
    "usa": "us",
    "uk": "gb",
    "united kingdom": "gb",
    "great britain": "gb",
    "australia": "au",
    "canada": "ca",
    "india": "in",
    "germany": "de",
    "france": "fr",
    "italy": "it",
    "japan": "jp",
    "china": "cn",
    "brazil": "br",
    "mexico": "mx",
    "spain": "es",
    "russia": "ru",
}
_COUNTRY_CODES = frozenset(_COUNTRY_NAMES.values())


def format_date(published_at: str) -> str:
    """Render an ISO-8601 timestamp as e.g. 'January 1, 2024'."""
    try:
        dt = datetime.fromisoformat(published_at.replace("Z", "+00:00"))
    except ValueError:
        return published_at
    return f"{dt.strftime('%B')} {dt.day}, {dt.year}"


def truncate_text(text: str, max_length: int = 150) -> str:
    """Shorten text to max_length characters, ending in '...' when cut."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def format_articles(articles: list[Article]) -> str:
    """Render articles as a numbered plain-text list."""
    blocks = []
    for index, article in enumerate(articles, start=1):
        blocks.append(
            f"{index}. {article.title}\n"
            f"{article.description or ''}\n"
            f"Source: {article.source_name} | {format_date(article.published_at)}\n"
            f"{article.url}\n"
        )
    return "\n".join(blocks)


def extract_country_code(text: str) -> str | None:
    """Find a supported country in free text and return its ISO code."""
    lowered = text.lower()

    for name, code in _COUNTRY_NAMES.items():
        if re.search(rf"\b{re.escape(name)}\b", lowered):
            return code

    match = re.search(r"\b([a-z]{2})\b", lowered)
    if match and match.group(1) in _COUNTRY_CODES:
        return match.group(1)

    return None
