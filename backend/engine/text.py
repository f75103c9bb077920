"""Free-text helpers for turning questionnaire prose into list items and ids."""

from __future__ import annotations

import re

_LIST_DELIMITERS = re.compile(r"[,\n\-\d.)]+")
BULLETED_LIST_DELIMITERS = re.compile(r"[,\n\u2022\-\d.)]+")
_TIME_PATTERN = re.compile(r"(\d+)\s*(hour|minute|day)", re.IGNORECASE)

# Tools we know expose a public API (substring match, lowercase).
TOOLS_WITH_API = (
    "hubspot", "pipedrive", "salesforce", "zoho",
    "asana", "clickup", "monday", "trello", "notion", "basecamp",
    "slack", "teams", "discord",
    "google drive", "dropbox", "onedrive",
    "quickbooks", "xero", "freshbooks", "stripe",
)


def parse_text_list(text: str, delimiters: re.Pattern = _LIST_DELIMITERS) -> list[str]:
    """Split a free-text answer into items on commas, newlines, dashes and numbering.

    Fragments of three characters or fewer are dropped.
    """
    if not text:
        return []
    items = (item.strip() for item in delimiters.split(text))
    return [item for item in items if len(item) > 3]


def slugify(text: str, max_length: int = 50) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:max_length]


def truncate(text: str, length: int) -> str:
    if len(text) <= length:
        return text
    return text[:length] + "..."


def parse_estimated_time(value: str) -> float:
    """Hours for a build-time label: '30 minutes' -> 0.5, '1 day' -> 8. Default 2."""
    match = _TIME_PATTERN.search(value or "")
    if not match:
        return 2
    amount = int(match.group(1))
    unit = match.group(2).lower()
    if unit == "minute":
        return amount / 60
    if unit == "day":
        return amount * 8
    return amount


def is_api_available(tool: str) -> bool:
    lowered = tool.lower()
    return any(known in lowered for known in TOOLS_WITH_API)
