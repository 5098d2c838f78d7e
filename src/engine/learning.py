"""
Scorecard — Dictionary Learning Step

Runs before every extraction batch. Scans the stored titles and returns a new
Dictionaries with variants that the seed tables do not carry:

1. Candidate sets/parallels (LEARNABLE_*) that actually occur in the corpus
2. Colour + finish pairs observed side by side ("Purple Wave", "Gold Lava")

Pure: the corpus is only read, and the same corpus always yields the same
dictionaries. An empty corpus yields the seed dictionaries unchanged.
"""

from __future__ import annotations

import re
from typing import Iterable

import structlog

from src.engine.dictionaries import (
    LEARNABLE_CARD_SETS,
    LEARNABLE_CARD_TYPES,
    PARALLEL_COLORS,
    PARALLEL_FINISHES,
    SEED_DICTIONARIES,
    Dictionaries,
)
from src.utils.text_match import contains_phrase, normalize_title

logger = structlog.get_logger(__name__)


def _alternation(words: Iterable[str]) -> str:
    ordered = sorted(words, key=lambda word: (-len(word), word))
    return "|".join(r"[\s\-]+".join(re.escape(part) for part in word.split()) for word in ordered)


_COLOR_FINISH_RE = re.compile(
    rf"(?<![\w'])({_alternation(PARALLEL_COLORS)})[\s\-]+({_alternation(PARALLEL_FINISHES)})(?![\w'])",
    re.IGNORECASE,
)


def _canonical_case(phrase: str) -> str:
    return " ".join(part.capitalize() for part in re.split(r"[\s\-]+", phrase.strip()) if part)


def learn_dictionaries(
    titles: Iterable[str | None],
    base: Dictionaries = SEED_DICTIONARIES,
) -> Dictionaries:
    """
    Layer corpus-observed sets and card types on top of `base`.

    Args:
        titles: Every stored title (None/blank entries are skipped).
        base: Dictionaries to extend (seed tables by default).

    Returns:
        A new Dictionaries, or `base` itself when nothing new was observed.
    """
    corpus = [normalize_title(title) for title in titles if title and title.strip()]
    if not corpus:
        logger.info("dictionary_learning_empty_corpus_using_seed")
        return base

    learned_sets: dict[str, tuple[str, ...]] = {}
    for canonical, surfaces in LEARNABLE_CARD_SETS.items():
        forms = (canonical.lower(), *surfaces)
        if any(contains_phrase(title, form) for title in corpus for form in forms):
            learned_sets[canonical] = tuple(surfaces)

    learned_types: set[str] = {
        name
        for name in LEARNABLE_CARD_TYPES
        if any(contains_phrase(title, name) for title in corpus)
    }
    for title in corpus:
        for match in _COLOR_FINISH_RE.finditer(title):
            learned_types.add(f"{_canonical_case(match.group(1))} {_canonical_case(match.group(2))}")

    new_types = learned_types - base.card_types
    known_set_names = {canonical for _, canonical in base.card_sets}
    new_sets = {name: forms for name, forms in learned_sets.items() if name not in known_set_names}

    if not new_sets and not new_types:
        logger.info("dictionary_learning_no_new_terms", titles_scanned=len(corpus))
        return base

    logger.info(
        "dictionary_learning_complete",
        titles_scanned=len(corpus),
        new_card_sets=len(new_sets),
        new_card_types=len(new_types),
    )
    return base.with_additions(card_sets=new_sets, card_types=new_types)
