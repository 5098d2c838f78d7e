"""
Scorecard — Field Extractors

One extractor per field: year, card set, brand, card type, card number,
print run, autograph flag, rookie flag. Each takes the raw title (plus the
Dictionaries where it needs vocabulary) and returns a value or None. None of
them raise, whatever the input.

Number-like tokens are claimed in a fixed order so no substring is ever
reused by two fields:

1. Grading / population counts ("PSA 10", "BGS 9.5", "POP 5"): never a field
2. Year (first 19xx/20xx; a "2023-24" range is claimed whole)
3. Print run ("/150"; a serial "12/99" or "#12/99" claims both numbers)
4. Card set (longest dictionary entry)
5. Card number ("#"-token, then brand prefix like BDP26, then a bare 1-3 digit number)
6. Card types (every dictionary match not already claimed)

scan_title() performs the whole claim pass once; the player-name extractor
reuses it to know what to strip.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from src.engine.dictionaries import SEED_DICTIONARIES, Dictionaries
from src.utils.text_match import (
    Span,
    find_phrases,
    normalize_title,
    overlaps_any,
    phrase_pattern,
    select_longest,
)

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_GRADE = r"\d{1,2}(?:\.\d)?"

_GRADING_RE = re.compile(
    r"(?<![\w])(?:PSA|BGS|SGC|CGC|CSG|HGA|BVG|GMA|TAG|KSA|ISA|BECKETT)\s*"
    r"(?:(?:GEM[\s\-]*(?:MINT|MT)|NM[\s\-]*MT|MINT|MT|PRISTINE)\s*)?"
    rf"#?{_GRADE}(?![\w])"
    rf"|(?<![\w])(?:GEM[\s\-]*(?:MINT|MT)|NM[\s\-]*MT|MINT|MT)\s*{_GRADE}(?![\w])"
    r"|(?<![\w])POP(?:ULATION)?\.?\s*\d+(?![\w])",
    re.IGNORECASE,
)

_YEAR_RE = re.compile(r"(?<![\w#/.\-])((?:19|20)\d{2})(?:[-/]\d{2})?(?![\w/])")

_PRINT_RUN_RE = re.compile(r"(?<!/)/\s*(\d{1,5})(?![\w/])")
# "12/99", "#12/99", and the "#d/25" / "#'d/25" numbered shorthand
_SERIAL_NUMERATOR_RE = re.compile(r"(?<![\w/\-#.])(\d{1,4}\s*|#\s?(?:\d{1,4}|'?d))$", re.IGNORECASE)
_DATE_PREFIX_RE = re.compile(r"\d{1,2}/\d{1,2}\s*$")

_HASH_NUMBER_RE = re.compile(r"#\s?([A-Za-z0-9]+(?:-[A-Za-z0-9]+)*)")
_PREFIX_NUMBER_RE = re.compile(
    r"(?<![\w\-#])((?:BDPP|BDC|BDP|BCP|BCRA|BSA|CPA|CDA|CRA|MMR|TC|DT|RA|RS|US)-?\d{1,4}[A-Za-z]?)(?![\w\-])",
    re.IGNORECASE,
)
_BARE_NUMBER_RE = re.compile(r"(?<![\w#/.\-])(\d{1,3})(?![\w.\-/])")

_NOT_A_CARD_NUMBER = frozenset({"ssp", "sp"})

# "Bowman's Best" -> "Bowman s Best" so the brand word stands alone (same length)
_POSSESSIVE_RE = re.compile(r"'(?=s\b)", re.IGNORECASE)

# Words around a bare number that make it a count, not a card number
_COUNT_WORDS_BEFORE = frozenset({
    "series", "lot", "of", "vol", "volume", "set", "box", "pack", "packs", "x", "top",
    "pick", "round", "formula", "grade", "graded", "size", "week", "day", "qty",
    "quantity", "game", "games", "year", "years", "age",
})
_COUNT_WORDS_AFTER = frozenset({
    "card", "cards", "ct", "count", "pc", "pcs", "pack", "packs", "lot", "x", "yr",
    "year", "years", "box", "boxes",
})
_WORD_BEFORE_RE = re.compile(r"([A-Za-z]+)[^\w]*$")
_WORD_AFTER_RE = re.compile(r"^[^\w]*([A-Za-z]+)")

_AUTOGRAPH_TERMS = (
    "auto", "autos", "autograph", "autographs", "autographed",
    "signature", "signatures", "signed",
)
_ROOKIE_TERMS = ("rookie", "rc", "1st", "debut", "young guns")


# ---------------------------------------------------------------------------
# Claim pass
# ---------------------------------------------------------------------------


class TitleScan(NamedTuple):
    """Every span claimed in one title, in claim order."""
    text: str
    grading: tuple[Span, ...] = ()
    year: Span | None = None
    print_run: Span | None = None
    card_set: Span | None = None
    card_number: Span | None = None
    card_types: tuple[Span, ...] = ()
    players: tuple[Span, ...] = ()     # curated player names, shielded from removal

    @property
    def number_claims(self) -> tuple[Span, ...]:
        """Grading, year, print-run and card-number spans."""
        spans = list(self.grading)
        spans.extend(span for span in (self.year, self.print_run, self.card_number) if span)
        return tuple(spans)

    @property
    def claims(self) -> tuple[Span, ...]:
        spans = list(self.number_claims)
        if self.card_set:
            spans.append(self.card_set)
        spans.extend(self.card_types)
        return tuple(spans)


def _grading_spans(text: str) -> tuple[Span, ...]:
    return tuple(
        Span(match.start(), match.end(), "grading", match.group(0))
        for match in _GRADING_RE.finditer(text)
    )


def _year_span(text: str, claimed: list[Span]) -> Span | None:
    for match in _YEAR_RE.finditer(text):
        span = Span(match.start(), match.end(), "year", match.group(1))
        if not overlaps_any(span, claimed):
            return span
    return None


def _print_run_span(text: str, claimed: list[Span]) -> Span | None:
    for match in _PRINT_RUN_RE.finditer(text):
        prefix = text[:match.start()]
        if _DATE_PREFIX_RE.search(prefix):
            continue
        span = Span(match.start(), match.end(), "print_run", f"/{match.group(1)}")
        if overlaps_any(span, claimed):
            continue
        numerator = _SERIAL_NUMERATOR_RE.search(prefix)
        if numerator:
            widened = span._replace(start=numerator.start(1))
            if not overlaps_any(widened, claimed):
                span = widened
        return span
    return None


def _card_set_span(text: str, dictionaries: Dictionaries, claimed: list[Span]) -> Span | None:
    candidates = [
        span for span in find_phrases(text, dictionaries.card_sets, "card_set")
        if not overlaps_any(span, claimed)
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda s: (-s.length, s.start))


def _is_count(text: str, span: Span) -> bool:
    before = _WORD_BEFORE_RE.search(text[:span.start])
    if before and before.group(1).lower() in _COUNT_WORDS_BEFORE:
        return True
    after = _WORD_AFTER_RE.search(text[span.end:])
    return bool(after and after.group(1).lower() in _COUNT_WORDS_AFTER)


def _card_number_span(text: str, claimed: list[Span]) -> Span | None:
    for match in _HASH_NUMBER_RE.finditer(text):
        token = match.group(1)
        if token.lower() in _NOT_A_CARD_NUMBER or text[match.end():].startswith("/"):
            continue
        span = Span(match.start(), match.end(), "card_number", f"#{token}")
        if not overlaps_any(span, claimed):
            return span

    for match in _PREFIX_NUMBER_RE.finditer(text):
        span = Span(match.start(), match.end(), "card_number", f"#{match.group(1).upper()}")
        if not overlaps_any(span, claimed):
            return span

    for match in _BARE_NUMBER_RE.finditer(text):
        span = Span(match.start(), match.end(), "card_number", f"#{match.group(1)}")
        if overlaps_any(span, claimed) or _is_count(text, span):
            continue
        return span
    return None


def _player_spans(text: str, dictionaries: Dictionaries) -> tuple[Span, ...]:
    pairs = ((name, name) for name in sorted(dictionaries.players))
    return tuple(select_longest(find_phrases(text, pairs, "player")))


def _card_type_spans(
    text: str,
    dictionaries: Dictionaries,
    claimed: list[Span],
    players: tuple[Span, ...],
) -> tuple[Span, ...]:
    spans = [
        span for span in find_phrases(text, dictionaries.card_type_pairs(), "card_type")
        if not span.value.replace("/", "").isdigit() and not overlaps_any(span, players)
    ]
    return tuple(select_longest(spans, claimed))


def scan_title(title: str | None, dictionaries: Dictionaries = SEED_DICTIONARIES) -> TitleScan:
    """Run the full claim pass over one title."""
    text = normalize_title(title)
    if not text.strip():
        return TitleScan(text=text)

    grading = _grading_spans(text)
    claimed: list[Span] = list(grading)

    year = _year_span(text, claimed)
    if year:
        claimed.append(year)

    print_run = _print_run_span(text, claimed)
    if print_run:
        claimed.append(print_run)

    card_set = _card_set_span(text, dictionaries, claimed)
    if card_set:
        claimed.append(card_set)

    card_number = _card_number_span(text, claimed)
    if card_number:
        claimed.append(card_number)

    players = _player_spans(text, dictionaries)
    card_types = _card_type_spans(text, dictionaries, claimed, players)

    return TitleScan(
        text=text,
        grading=grading,
        year=year,
        print_run=print_run,
        card_set=card_set,
        card_number=card_number,
        card_types=card_types,
        players=players,
    )


# ---------------------------------------------------------------------------
# Public extractors
# ---------------------------------------------------------------------------


def extract_year(title: str | None) -> str | None:
    """First 19xx/20xx token that is not part of a grade. No multi-year disambiguation."""
    span = scan_title(title, SEED_DICTIONARIES).year
    return span.value if span else None


def extract_print_run(title: str | None) -> str | None:
    span = scan_title(title, SEED_DICTIONARIES).print_run
    return span.value if span else None


def extract_card_number(title: str | None, dictionaries: Dictionaries = SEED_DICTIONARIES) -> str | None:
    span = scan_title(title, dictionaries).card_number
    return span.value if span else None


def extract_card_set(title: str | None, dictionaries: Dictionaries = SEED_DICTIONARIES) -> str | None:
    span = scan_title(title, dictionaries).card_set
    return span.value if span else None


def card_type_from_scan(scan: TitleScan) -> str | None:
    names: list[str] = []
    for span in scan.card_types:
        if span.value not in names:
            names.append(span.value)
    if len(names) > 1 and "Base" in names:
        names.remove("Base")
    return " ".join(names) if names else None


def extract_card_type(title: str | None, dictionaries: Dictionaries = SEED_DICTIONARIES) -> str | None:
    """Every card-type match, in order of appearance, joined by spaces."""
    return card_type_from_scan(scan_title(title, dictionaries))


def brand_from_scan(scan: TitleScan, dictionaries: Dictionaries) -> str | None:
    """Manufacturer: the card set's leading brand, else the first brand in the title."""
    if scan.card_set:
        card_set = _POSSESSIVE_RE.sub(" ", scan.card_set.value)
        for surface, canonical in dictionaries.brands:
            if phrase_pattern(surface).match(card_set):
                return canonical
    spans = find_phrases(_POSSESSIVE_RE.sub(" ", scan.text), dictionaries.brands, "brand")
    if not spans:
        return None
    return min(spans, key=lambda s: (s.start, -s.length)).value


def extract_brand(title: str | None, dictionaries: Dictionaries = SEED_DICTIONARIES) -> str | None:
    return brand_from_scan(scan_title(title, dictionaries), dictionaries)


def is_autograph(title: str | None) -> bool:
    text = normalize_title(title)
    return any(phrase_pattern(term).search(text) for term in _AUTOGRAPH_TERMS)


def is_rookie(title: str | None) -> bool:
    text = normalize_title(title)
    return any(phrase_pattern(term).search(text) for term in _ROOKIE_TERMS)
