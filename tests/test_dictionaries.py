"""
Tests for term dictionaries (src/engine/dictionaries.py).
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.engine.dictionaries import SEED_DICTIONARIES, SEED_CARD_SETS, surface_pairs
from src.engine.fields import extract_card_set


class TestSurfacePairs:
    def test_canonical_is_a_surface_form(self) -> None:
        pairs = surface_pairs({"Bowman Chrome Draft": ("bowman draft chrome",)})
        assert ("bowman chrome draft", "Bowman Chrome Draft") in pairs
        assert ("bowman draft chrome", "Bowman Chrome Draft") in pairs

    def test_sorted_longest_first(self) -> None:
        """Removal and matching order is an explicit sort, not set iteration order."""
        pairs = surface_pairs(SEED_CARD_SETS)
        lengths = [len(surface) for surface, _ in pairs]
        assert lengths == sorted(lengths, reverse=True)
        assert pairs == surface_pairs(dict(reversed(list(SEED_CARD_SETS.items()))))


class TestCaseInsensitivity:
    @pytest.mark.parametrize("title", [
        "2023 BOWMAN CHROME DRAFT Jackson Holliday",
        "2023 bowman chrome draft Jackson Holliday",
        "2023 Bowman Chrome Draft Jackson Holliday",
    ])
    def test_same_canonical_regardless_of_case(self, title: str) -> None:
        assert extract_card_set(title) == "Bowman Chrome Draft"

    def test_longest_set_preferred(self) -> None:
        assert extract_card_set("2022 Bowman Chrome Draft 1st Edition Elijah Green") == "Bowman Chrome Draft 1st"
        assert extract_card_set("2022 Bowman Elijah Green") == "Bowman"


class TestDictionariesValueObject:
    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            SEED_DICTIONARIES.noise = frozenset()  # type: ignore[misc]

    def test_with_additions_returns_new_instance(self) -> None:
        extended = SEED_DICTIONARIES.with_additions(
            card_sets={"Topps Fire": ()},
            card_types={"Titanium"},
        )
        assert extended is not SEED_DICTIONARIES
        assert "Titanium" in extended.card_types
        assert "Titanium" not in SEED_DICTIONARIES.card_types
        assert ("topps fire", "Topps Fire") in extended.card_sets

    def test_known_terms_exclude_players(self) -> None:
        assert SEED_DICTIONARIES.is_known_term("Refractor")
        assert SEED_DICTIONARIES.is_known_term("GEM  MINT")
        assert not SEED_DICTIONARIES.is_known_term("Paul Skenes")
