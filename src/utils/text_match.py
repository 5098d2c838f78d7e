"""
Scorecard — Phrase Matching Helpers

Every dictionary lookup in the pipeline goes through phrase_pattern():
case-insensitive, whole-word/whole-phrase, and tolerant of the separator
variants sellers use between words ("Bowman Chrome", "Bowman - Chrome",
"Bowman-Chrome").

Spans are character offsets into the normalized title. normalize_title() is
length-preserving so offsets computed by one extractor stay valid for every
other extractor working on the same title.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, NamedTuple

# One-to-one character replacements (keeps offsets stable)
_TITLE_TRANSLATION = str.maketrans({
    "\u2018": "'",
    "\u2019": "'",
    "\u02bc": "'",
    "\u00b4": "'",
    "`": "'",
    "\u00a0": " ",
    "\u200b": " ",
    "\t": " ",
    "\n": " ",
    "\r": " ",
})

_WORD_SEPARATOR = r"(?:\s*-\s*|\s+)"


class Span(NamedTuple):
    """A claimed region of a title: [start, end) plus what claimed it."""
    start: int
    end: int
    kind: str
    value: str

    @property
    def length(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "Span") -> bool:
        return self.start < other.end and other.start < self.end


def normalize_title(title: str | None) -> str:
    """Fold curly quotes and odd whitespace to ASCII, one char for one char."""
    if not title:
        return ""
    return title.translate(_TITLE_TRANSLATION)


@lru_cache(maxsize=8192)
def phrase_pattern(term: str) -> re.Pattern[str]:
    """
    Compile a whole-phrase, case-insensitive matcher for a dictionary term.

    Words in the term may be separated in the title by whitespace or by a
    hyphen with optional surrounding whitespace. The match may not start or
    end inside a longer word ("auto" does not match "automatic", "bowman"
    does not match "bowman's").
    """
    words = [re.escape(word) for word in re.split(r"[\s\-]+", term.strip()) if word]
    if not words:
        # Never matches
        return re.compile(r"(?!x)x")
    body = _WORD_SEPARATOR.join(words)
    return re.compile(rf"(?<![\w']){body}(?![\w'])", re.IGNORECASE)


def contains_phrase(text: str, term: str) -> bool:
    return phrase_pattern(term).search(text) is not None


def find_phrases(
    text: str,
    terms: Iterable[tuple[str, str]],
    kind: str,
) -> list[Span]:
    """
    Find every occurrence of every (surface, canonical) term in text.

    Returned spans carry the canonical value. Overlaps are NOT resolved here;
    see select_longest().
    """
    spans: list[Span] = []
    if not text:
        return spans
    for surface, canonical in terms:
        for match in phrase_pattern(surface).finditer(text):
            spans.append(Span(match.start(), match.end(), kind, canonical))
    return spans


def select_longest(
    spans: Iterable[Span],
    claimed: Iterable[Span] = (),
) -> list[Span]:
    """
    Greedy longest-first overlap resolution.

    Spans are considered longest first (ties broken by earliest start); a span
    is kept only if it overlaps neither an already-kept span nor anything in
    `claimed`. Result is ordered by position in the title.
    """
    taken: list[Span] = list(claimed)
    kept: list[Span] = []
    for span in sorted(spans, key=lambda s: (-s.length, s.start, s.value)):
        if any(span.overlaps(other) for other in taken):
            continue
        taken.append(span)
        kept.append(span)
    return sorted(kept, key=lambda s: s.start)


def overlaps_any(span: Span, others: Iterable[Span]) -> bool:
    return any(span.overlaps(other) for other in others)
