"""
Tests for the card repository (src/pipeline/repository.py).

Runs against in-memory SQLite (see conftest.db_engine).

Covers:
- Insert with summary assembled from the stored fields
- Patch validation (immutable / derived / unknown fields)
- Partial patches rebuild only the derived values they affect
- No-op patches leave the row (and last_updated) alone
- Listing helpers
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from src.engine.dictionaries import SEED_DICTIONARIES
from src.engine.extract import CardFields, extract_all
from src.engine.name_overrides import EMPTY_OVERRIDES
from src.pipeline.repository import (
    apply_patch,
    fetch_all_titles,
    get_card,
    insert_card,
    item_url_exists,
    list_card_ids,
    recompute_derived,
)

from tests.conftest import make_listing

RUTH = "2021 Topps Stadium Club Chrome 32 Babe Ruth Refractor PSA 10"
RUTH_URL = "https://www.ebay.com/itm/1001"


@pytest.fixture
async def ruth(db_session):
    fields = extract_all(RUTH, SEED_DICTIONARIES, EMPTY_OVERRIDES)
    card = await insert_card(db_session, make_listing(RUTH, RUTH_URL), fields, "Baseball", search_term="babe ruth")
    await db_session.commit()
    return card


# ---------------------------------------------------------------------------
# Insert / read
# ---------------------------------------------------------------------------


class TestInsert:
    async def test_insert_card(self, ruth, db_session) -> None:
        assert ruth.id is not None
        assert ruth.title == RUTH
        assert ruth.player_name == "Babe Ruth"
        assert ruth.card_number == "#32"
        assert ruth.summary_title == "2021 Topps Stadium Club Chrome Babe Ruth Refractor #32"
        assert ruth.price == Decimal("25.00")
        assert ruth.sport == "Baseball"
        assert ruth.search_term == "babe ruth"
        assert ruth.multiplier is None

    async def test_sport_defaults_to_unknown(self, db_session) -> None:
        card = await insert_card(db_session, make_listing("Mystery Box Item #4"), CardFields())
        assert card.sport == "Unknown"
        assert card.summary_title == "Mystery Box Item #4"

    async def test_get_card(self, ruth, session_factory) -> None:
        async with session_factory() as session:
            loaded = await get_card(session, ruth.id)
        assert loaded.title == RUTH
        assert loaded.card_set == "Topps Stadium Club Chrome"

    async def test_get_missing_card(self, db_session) -> None:
        with pytest.raises(LookupError):
            await get_card(db_session, 999)

    async def test_item_url_exists(self, ruth, db_session) -> None:
        assert await item_url_exists(db_session, RUTH_URL) is True
        assert await item_url_exists(db_session, "https://www.ebay.com/itm/404") is False


# ---------------------------------------------------------------------------
# Patch validation
# ---------------------------------------------------------------------------


class TestPatchValidation:
    @pytest.mark.parametrize("field, message", [
        ("title", "immutable"),
        ("id", "immutable"),
        ("created_at", "immutable"),
        ("summary_title", "derived"),
        ("multiplier", "derived"),
        ("favourite_colour", "Unknown card field"),
    ])
    async def test_rejected_fields(self, ruth, db_session, field: str, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            await apply_patch(db_session, ruth.id, {field: "x"})

    async def test_unknown_card(self, db_session) -> None:
        with pytest.raises(LookupError):
            await apply_patch(db_session, 999, {"player_name": "Babe Ruth"})


# ---------------------------------------------------------------------------
# Partial patches
# ---------------------------------------------------------------------------


class TestApplyPatch:
    async def test_prices_rebuild_multiplier(self, ruth, db_session) -> None:
        changed = await apply_patch(db_session, ruth.id, {"psa10_price": "500", "raw_average_price": 50})
        assert changed is True
        assert ruth.psa10_price == Decimal("500.00")
        assert ruth.multiplier == Decimal("10.00")
        assert ruth.summary_title == "2021 Topps Stadium Club Chrome Babe Ruth Refractor #32"

    async def test_zero_raw_price_clears_multiplier(self, ruth, db_session) -> None:
        await apply_patch(db_session, ruth.id, {"psa10_price": 500, "raw_average_price": 50})
        await apply_patch(db_session, ruth.id, {"raw_average_price": 0})
        assert ruth.multiplier is None

    async def test_field_change_rebuilds_summary(self, ruth, db_session) -> None:
        await apply_patch(db_session, ruth.id, {"player_name": "George Herman Ruth", "is_autograph": True})
        assert ruth.summary_title == "2021 Topps Stadium Club Chrome George Herman Ruth Refractor auto #32"
        assert ruth.card_set == "Topps Stadium Club Chrome"
        assert ruth.sport == "Baseball"

    async def test_psa9_price_does_not_touch_multiplier(self, ruth, db_session) -> None:
        await apply_patch(db_session, ruth.id, {"psa9_average_price": "120"})
        assert ruth.psa9_average_price == Decimal("120.00")
        assert ruth.multiplier is None

    async def test_noop_patch(self, ruth, db_session) -> None:
        await apply_patch(db_session, ruth.id, {"sport": "Baseball", "card_type": "Gold"})
        touched_at = ruth.last_updated

        changed = await apply_patch(db_session, ruth.id, {"card_type": "Gold", "price": 25})
        assert changed is False
        assert ruth.last_updated == touched_at

    async def test_change_bumps_last_updated(self, ruth, db_session) -> None:
        await apply_patch(db_session, ruth.id, {"card_type": "Gold"})
        first = ruth.last_updated
        assert first.tzinfo is not None

        await apply_patch(db_session, ruth.id, {"card_type": "Silver"})
        assert ruth.last_updated >= first


# ---------------------------------------------------------------------------
# Derived recompute
# ---------------------------------------------------------------------------


async def test_recompute_derived(ruth, db_session) -> None:
    ruth.summary_title = "stale"
    await db_session.flush()

    assert await recompute_derived(db_session, ruth.id) is True
    assert ruth.summary_title == "2021 Topps Stadium Club Chrome Babe Ruth Refractor #32"
    assert await recompute_derived(db_session, ruth.id) is False


# ---------------------------------------------------------------------------
# Listing helpers
# ---------------------------------------------------------------------------


async def test_list_card_ids_unknown_only(session_factory) -> None:
    ids = []
    for i, sport in enumerate(("Baseball", None, "Football", "Unknown")):
        async with session_factory() as session:
            card = await insert_card(session, make_listing(f"Card {i}", f"https://www.ebay.com/itm/{i}"), CardFields(), sport)
            await session.commit()
            ids.append(card.id)

    async with session_factory() as session:
        await apply_patch(session, ids[2], {"sport": "  "})
        await session.commit()

    async with session_factory() as session:
        assert await list_card_ids(session) == ids
        assert await list_card_ids(session, only_unknown_sport=True) == [ids[1], ids[2], ids[3]]
        assert await fetch_all_titles(session) == ["Card 0", "Card 1", "Card 2", "Card 3"]
