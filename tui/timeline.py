"""
Plain-text rendering for the classroom timeline page.
Kept free of Textual so cards and status lines can be tested directly.
"""

from datetime import datetime
from typing import Optional

from baybridge.client.classroom import TimelineItem
from baybridge.client.viewer import STATUS_ERROR, STATUS_IDLE, STATUS_MISSING_KEY, STATUS_OK

ROLES = [("Teacher", "teacher"), ("Parent", "parent")]
LOCALES = [("English", "en"), ("Spanish", "es"), ("Chinese", "zh")]

STATUS_LINES = {
    STATUS_OK: "Translation: OK",
    STATUS_IDLE: "Translation: …",
    STATUS_MISSING_KEY: "Translation disabled (missing LINGODOTDEV_API_KEY)",
    STATUS_ERROR: "Translation unavailable (rate limit or error)",
}

# Services the demo is built around, shown in the footer
TECH_BADGES = [
    ("S2.dev", "Durable streams & SSE", "https://s2.dev/"),
    ("Cactus Compute", "Local STT/TTS & LLM", "https://cactuscompute.com/"),
    ("Random Labs Slate", "Auto-improve via PRs", "https://randomlabs.ai/"),
    ("Lingo.dev", "Live translations", "https://lingo.dev/en"),
    ("Stack Auth", "Orgs & roles", "https://stack-auth.com/"),
]


def format_timestamp(at: Optional[int]) -> str:
    """Local date/time for an epoch-milliseconds timestamp."""
    if at is None:
        return "-"
    return datetime.fromtimestamp(at / 1000).strftime("%Y-%m-%d %H:%M:%S")


def view_text(item: TimelineItem, role: str) -> str:
    """Teachers see the raw text; parents see the translation once it lands."""
    if role == "parent":
        return item.view_text if item.view_text is not None else "Translating…"
    return item.text or ""


def format_card(item: TimelineItem, role: str, locale: str) -> str:
    seq = item.seq_num if item.seq_num is not None else "-"
    lines = [
        f"#{seq}    {format_timestamp(item.at)}",
        item.type.upper(),
        view_text(item, role),
    ]

    meta = []
    if item.author_role:
        meta.append(f"by {item.author_role}")
    if role == "parent" and item.view_text is not None:
        meta.append(f"translated to {locale}")
    if meta:
        lines.append("    ".join(meta))

    return "\n".join(lines)


def status_line(status: str) -> str:
    return STATUS_LINES.get(status, STATUS_LINES[STATUS_IDLE])


def badges_line() -> str:
    return "Built with: " + "  •  ".join(f"{title} ({subtitle})" for title, subtitle, _ in TECH_BADGES)
