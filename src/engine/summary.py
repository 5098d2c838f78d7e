"""
Scorecard — Summary Title Assembly

Builds the short human-readable card identity stored as summary_title:

    year, card set, player, card type, "auto", card number, print run

Missing parts are skipped. When fewer than SUMMARY_MIN_FIELDS parts are
available the raw title, stripped of grading and marketing vocabulary, is
used instead so every card still has something readable.
"""

from __future__ import annotations

import re

from src.config import settings

_STRIP_CHARS = " ,;:-|"

_CLEAN_PATTERNS = (
    re.compile(r"(?<![\w])(?:PSA|BGS|SGC|CGC|CSG|HGA)\s*#?\d{1,2}(?:\.\d)?(?![\w])", re.IGNORECASE),
    re.compile(r"(?<![\w])GEM[\s\-]*(?:MINT|MT)(?:\s*\d{1,2})?(?![\w])", re.IGNORECASE),
    re.compile(r"(?<![\w])(?:NM[\s\-]*)?MT\s*\d{1,2}(?![\w])", re.IGNORECASE),
    re.compile(
        r"(?<![\w])(?:RC|ROOKIE|SSP|SP|AUTO|AUTOGRAPH|UNGRADED|GRADED|CERT|POP(?:\s*\d+)?)(?![\w])",
        re.IGNORECASE,
    ),
    re.compile(r"[^\w\s#/'.\-&]"),
)
_WHITESPACE_RE = re.compile(r"\s+")


def _collapse(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip(_STRIP_CHARS)


def clean_title(title: str | None) -> str:
    """Raw title minus grading/marketing vocabulary; never empty for a non-blank title."""
    if not title:
        return ""
    cleaned = title
    for pattern in _CLEAN_PATTERNS:
        cleaned = pattern.sub(" ", cleaned)
    cleaned = _collapse(cleaned)
    return cleaned or _WHITESPACE_RE.sub(" ", title).strip()


def assemble_summary_title(
    *,
    year: str | None,
    card_set: str | None,
    player_name: str | None,
    card_type: str | None,
    is_autograph: bool,
    card_number: str | None,
    print_run: str | None,
    title: str | None = "",
) -> str:
    """
    Deterministic summary title from extracted fields.

    The player is omitted when the card set already contains the name
    (insert sets named after a player). "Base" is not worth printing.
    """
    parts: list[str] = []
    if year:
        parts.append(year)
    if card_set:
        parts.append(card_set)
    if player_name and not (card_set and player_name.lower() in card_set.lower()):
        parts.append(player_name)
    if card_type and card_type != "Base":
        parts.append(card_type)
    if is_autograph:
        parts.append("auto")
    if card_number:
        parts.append(card_number if card_number.startswith("#") else f"#{card_number}")
    if print_run:
        parts.append(print_run if print_run.startswith("/") else f"/{print_run}")

    if len(parts) < settings.SUMMARY_MIN_FIELDS:
        return clean_title(title)
    return _collapse(" ".join(parts))
