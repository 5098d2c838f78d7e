"""
Scorecard — Player Name Extraction

Pulls the player's name out of a listing title:

0. A curated player name present in the title wins outright
1. Remove every claimed number (grade, year, print run, card number), the
   card set, and every known product / card-type / noise term, longest first
2. Look for name shapes in what remains:
   a. Initials:      "J.J. McCarthy", "C.J. Stroud"
   b. Hyphenated:    "Shai Gilgeous-Alexander"
   c. Apostrophe:    "Ja'Marr Chase", "De'Aaron Fox"
   d. Plain:         "Paul Skenes", "Elly De La Cruz", "Leo De Vries"
3. Trim team/city words off the edges, cap at three core tokens, normalize
   casing, then apply the manual override table

A result assembled from tokens the dictionaries also know is still returned,
flagged needs_review for a human to look at.
"""

from __future__ import annotations

import re
from typing import NamedTuple

import structlog

from src.config import settings
from src.engine.dictionaries import SEED_DICTIONARIES, Dictionaries
from src.engine.fields import TitleScan, scan_title
from src.engine.name_overrides import NameOverrides, default_name_overrides
from src.utils.text_match import Span, contains_phrase, overlaps_any, phrase_pattern

logger = structlog.get_logger(__name__)


class PlayerNameResult(NamedTuple):
    name: str | None
    needs_review: bool = False


# ---------------------------------------------------------------------------
# Name shapes
# ---------------------------------------------------------------------------

_NAME = r"[A-ZÀ-ÖØ-Þ](?:[^\W\d_]|')*[^\W\d_]"
_SUFFIX = r"(?i:jr|sr|iii|ii|iv)\.?"
_PARTICLE = r"(?i:della|del|der|den|dos|das|van|von|de|la|da|di|le|du)"
_START = r"(?<![\w'.\-])"
_END = r"(?![\w'\-])"

_NAME_SHAPES_RE = re.compile(
    _START + "(?:"
    rf"(?P<initials>(?:[A-Z]\.\s?){{2}}\s*{_NAME}(?:\s+{_SUFFIX})?)"
    rf"|(?P<hyphenated>{_NAME}\s+{_NAME}-{_NAME}(?:\s+{_SUFFIX})?)"
    rf"|(?P<apostrophe>[A-Z][A-Za-z]?'[A-Za-z]{{2,}}\s+{_NAME}(?:-{_NAME})?(?:\s+{_SUFFIX})?)"
    rf"|(?P<plain>{_NAME}(?:\s+{_PARTICLE}){{0,2}}\s+{_NAME}(?:\s+{_NAME})?(?:\s+{_SUFFIX})?)"
    ")" + _END
)

_SUFFIX_AFTER_RE = re.compile(r"^\s+(?:jr|sr|iii|ii|iv)\.?(?![\w'\-])", re.IGNORECASE)
_WORD_BEFORE_NAME_RE = re.compile(r"(?<![\w'\-])([A-Z][A-Za-z]+)\s+$")

_SUFFIXES = {"jr": "Jr.", "sr": "Sr.", "ii": "II", "iii": "III", "iv": "IV"}
_PARTICLES = frozenset({
    "della", "del", "der", "den", "dos", "das", "van", "von", "de", "la", "da", "di", "le", "du",
})
_INITIAL_PAIRS = frozenset({"aj", "cj", "dj", "jj", "tj", "rj", "pj", "bj", "jc"})
_INITIALS_RE = re.compile(r"(?:[A-Za-z]\.){1,3}")
_STRAY_RE = re.compile(r"[^\w\s'.\-]|[\d_]")

_PRODUCT_KINDS = frozenset({"product", "card_set"})


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def _case_word(word: str) -> str:
    if "'" in word:
        head, *rest = word.split("'")
        parts = [_case_word(head) if head else head]
        parts.extend(_case_word(part) if len(part) > 1 else part.lower() for part in rest)
        return "'".join(parts)
    lower = word.lower()
    if any(c.isupper() for c in word[1:]) and any(c.islower() for c in word):
        return word
    if lower in _INITIAL_PAIRS:
        return word.upper()
    if lower.startswith("mc") and len(lower) > 2:
        return "Mc" + lower[2:].capitalize()
    return lower.capitalize()


def _normalize_token(token: str, first: bool) -> str:
    bare = token.rstrip(".").lower()
    if not first and bare in _SUFFIXES:
        return _SUFFIXES[bare]
    if not first and bare in _PARTICLES:
        return bare
    if _INITIALS_RE.fullmatch(token):
        return token.upper()
    if "-" in token:
        return "-".join(_case_word(part) for part in token.split("-") if part)
    return _case_word(token.rstrip("."))


def normalize_player_name(name: str | None) -> str:
    """
    Canonical casing for a player name.

    "PAUL SKENES" -> "Paul Skenes", "leo de vries" -> "Leo de Vries",
    "ken griffey jr" -> "Ken Griffey Jr.", "JA'MARR CHASE" -> "Ja'Marr Chase",
    "MCCARTHY" -> "McCarthy". Stray punctuation and digits are dropped and a
    word repeated back to back is kept once.
    """
    if not name:
        return ""
    tokens: list[str] = []
    for raw in _STRAY_RE.sub(" ", name).split():
        token = raw.strip("-'")
        if not token or not any(c.isalpha() for c in token):
            continue
        if tokens and tokens[-1].lower() == token.lower():
            continue
        tokens.append(token)
    return " ".join(_normalize_token(token, first=i == 0) for i, token in enumerate(tokens))


# ---------------------------------------------------------------------------
# Removal pass
# ---------------------------------------------------------------------------


def removal_terms(text: str, dictionaries: Dictionaries) -> list[tuple[str, str]]:
    """
    Every known non-player term present in text, as (term, kind).

    Sorted longest first so "bowman chrome" is removed before "bowman" or
    "chrome" get a chance to split it.
    """
    kinds: dict[str, str] = {}
    for surface, _ in (*dictionaries.card_sets, *dictionaries.brands):
        kinds.setdefault(surface, "product")
    for surface, _ in dictionaries.card_type_pairs():
        kinds.setdefault(surface, "card_type")
    for word in dictionaries.noise:
        kinds.setdefault(word, "noise")
    present = [(term, kind) for term, kind in kinds.items() if contains_phrase(text, term)]
    return sorted(present, key=lambda pair: (-len(pair[0]), pair[0]))


def _removed_spans(scan: TitleScan, dictionaries: Dictionaries, protected: tuple[Span, ...]) -> list[Span]:
    removed: list[Span] = list(scan.number_claims)
    if scan.card_set:
        removed.append(scan.card_set)
    for term, kind in removal_terms(scan.text, dictionaries):
        for match in phrase_pattern(term).finditer(scan.text):
            span = Span(match.start(), match.end(), kind, term)
            if overlaps_any(span, removed) or overlaps_any(span, protected):
                continue
            removed.append(span)
    return removed


def _mask(text: str, removed: list[Span]) -> str:
    """
    Length-preserving copy of text where only name material survives.

    Removed spans become blanks headed by a "|" barrier so a name can never
    be stitched together across them.
    """
    chars = list(text)
    for i, ch in enumerate(text):
        prev_alpha = i > 0 and text[i - 1].isalpha()
        next_alpha = i + 1 < len(text) and text[i + 1].isalpha()
        if ch.isalpha() or ch == " ":
            continue
        if ch == "-" and prev_alpha and next_alpha:
            continue
        if ch == "'" and (prev_alpha or next_alpha):
            continue
        if ch == "." and prev_alpha:
            continue
        chars[i] = "|"
    for span in removed:
        chars[span.start:span.end] = ["|"] + [" "] * (span.length - 1)
    return "".join(chars)


# ---------------------------------------------------------------------------
# Candidate refinement
# ---------------------------------------------------------------------------


def _is_particle(token: str, index: int) -> bool:
    return index > 0 and token.lower() in _PARTICLES


def _is_suffix(token: str, index: int) -> bool:
    return index > 0 and token.rstrip(".").lower() in _SUFFIXES


def _follows_product(text: str, start: int, removed: list[Span]) -> bool:
    for span in removed:
        if span.kind in _PRODUCT_KINDS and span.end <= start and not text[span.end:start].strip(" -"):
            return True
    return False


def _strip_teams(tokens: list[str], dictionaries: Dictionaries) -> list[str]:
    teams = dictionaries.teams
    changed = True
    while changed and len(tokens) > 2:
        changed = False
        for width in (2, 1):
            if len(tokens) - width < 2:
                continue
            if " ".join(tokens[-width:]).lower() in teams:
                tokens = tokens[:-width]
                changed = True
                break
            if " ".join(tokens[:width]).lower() in teams:
                tokens = tokens[width:]
                changed = True
                break
    return tokens


def _cap_core_tokens(tokens: list[str]) -> list[str]:
    kept: list[str] = []
    core = 0
    for i, token in enumerate(tokens):
        if _is_particle(token, i) or _is_suffix(token, i):
            kept.append(token)
            continue
        if core == settings.PLAYER_NAME_MAX_TOKENS:
            break
        kept.append(token)
        core += 1
    while len(kept) > 1 and _is_particle(kept[-1], len(kept) - 1):
        kept.pop()
    return kept


def _refine(
    match: re.Match[str],
    text: str,
    removed: list[Span],
    dictionaries: Dictionaries,
) -> PlayerNameResult | None:
    candidate = " ".join(match.group(0).split())
    if dictionaries.is_known_term(candidate):
        return None

    tokens = _strip_teams(candidate.split(), dictionaries)
    needs_review = False

    plain = match.lastgroup == "plain"
    if (
        plain
        and len(tokens) == 3
        and not any(_is_particle(t, i) or _is_suffix(t, i) for i, t in enumerate(tokens))
        and _follows_product(text, match.start(), removed)
    ):
        # Product-line word glued to the name ("Panini Level Devin Booker")
        tokens = tokens[1:]
        needs_review = True

    while len(tokens) > 1 and _is_particle(tokens[-1], len(tokens) - 1):
        tokens.pop()

    if (
        len(tokens) > 2
        and not candidate.isupper()
        and tokens[-1].isupper()
        and len(tokens[-1]) <= 4
        and not _is_suffix(tokens[-1], len(tokens) - 1)
    ):
        tokens = tokens[:-1]

    tokens = _cap_core_tokens(tokens)
    core = [t for i, t in enumerate(tokens) if not (_is_particle(t, i) or _is_suffix(t, i))]
    name = normalize_player_name(" ".join(tokens))
    if len(core) < 2 or len(name) < settings.PLAYER_NAME_MIN_LENGTH:
        return None

    known = [dictionaries.is_known_term(token) for token in core]
    if all(known):
        return None
    if any(known):
        needs_review = True
    return PlayerNameResult(name=name, needs_review=needs_review)


def _known_player(scan: TitleScan) -> Span | None:
    spans = [span for span in scan.players if " " in span.value or "-" in span.value]
    if not spans:
        return None
    best = min(spans, key=lambda s: (-s.length, s.start))
    end = best.end
    suffix = _SUFFIX_AFTER_RE.match(scan.text[end:])
    if suffix:
        end += suffix.end()
    return Span(best.start, end, "player", scan.text[best.start:end])


def _after_product_fragment(scan: TitleScan, start: int, dictionaries: Dictionaries) -> bool:
    """One unknown capitalized word sits between a brand/set and the name."""
    word = _WORD_BEFORE_NAME_RE.search(scan.text[:start])
    if not word or dictionaries.is_known_term(word.group(1)):
        return False
    removed = _removed_spans(scan, dictionaries, scan.players)
    return _follows_product(scan.text, word.start(1), removed)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_player_name(
    title: str | None,
    dictionaries: Dictionaries = SEED_DICTIONARIES,
    overrides: NameOverrides | None = None,
    scan: TitleScan | None = None,
) -> PlayerNameResult:
    """
    Extract the player name from a listing title.

    Args:
        title: Raw listing title.
        dictionaries: Vocabulary for the removal pass.
        overrides: Manual correction table (bundled table by default).
        scan: Claim pass already run on this title, if the caller has one.

    Returns:
        PlayerNameResult; name is None when no plausible name was found.
    """
    if overrides is None:
        overrides = default_name_overrides()
    if scan is None:
        scan = scan_title(title, dictionaries)
    text = scan.text
    if not text.strip():
        return PlayerNameResult(name=None)

    known = _known_player(scan)
    if known:
        name = overrides.apply(normalize_player_name(known.value))
        if not _after_product_fragment(scan, known.start, dictionaries):
            return PlayerNameResult(name=name)
        _log_needs_review(text, name, known.value)
        return PlayerNameResult(name=name, needs_review=True)

    removed = _removed_spans(scan, dictionaries, scan.players)
    masked = _mask(text, removed)

    for match in _NAME_SHAPES_RE.finditer(masked):
        result = _refine(match, text, removed, dictionaries)
        if result is None:
            continue
        name = overrides.apply(result.name)
        if result.needs_review:
            _log_needs_review(text, name, match.group(0).strip())
        return PlayerNameResult(name=name, needs_review=result.needs_review)

    return PlayerNameResult(name=None)


def _log_needs_review(title: str, name: str, candidate: str) -> None:
    logger.warning(
        "player_name_needs_review",
        title=title,
        player_name=name,
        candidate=candidate,
    )
