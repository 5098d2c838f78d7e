"""
Scorecard — Card Repository

Persistence operations on the cards table. Derived columns are owned here:

- summary_title is rebuilt whenever a field it is assembled from changes
- multiplier is rebuilt whenever a price it is computed from changes

Callers never write either directly. None of these functions commit; the
caller owns the transaction (one per record in the batch drivers).
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import Sport
from src.engine.extract import CardFields
from src.engine.multiplier import calculate_multiplier
from src.engine.summary import assemble_summary_title
from src.models.card import Card
from src.scraper import ScrapedListing

logger = structlog.get_logger(__name__)

_TWO_DP = Decimal("0.01")

IMMUTABLE_FIELDS = frozenset({"id", "title", "created_at", "last_updated"})
DERIVED_FIELDS = frozenset({"summary_title", "multiplier"})

SUMMARY_SOURCE_FIELDS = frozenset({
    "year", "card_set", "player_name", "card_type", "is_autograph", "card_number", "print_run",
})
PRICE_FIELDS = frozenset({"psa10_price", "psa9_average_price", "raw_average_price"})
MULTIPLIER_SOURCE_FIELDS = frozenset({"psa10_price", "raw_average_price"})

PATCHABLE_FIELDS = frozenset({
    "player_name", "year", "brand", "card_set", "card_type", "card_number", "print_run",
    "is_rookie", "is_autograph", "needs_review", "sport",
    "price", "sold_date", "condition", "item_url", "search_term",
    *PRICE_FIELDS,
})


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------


def _to_price(value: Any) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value)).quantize(_TWO_DP, rounding=ROUND_HALF_UP)


def summary_for(card: Card) -> str:
    return assemble_summary_title(
        year=card.year,
        card_set=card.card_set,
        player_name=card.player_name,
        card_type=card.card_type,
        is_autograph=bool(card.is_autograph),
        card_number=card.card_number,
        print_run=card.print_run,
        title=card.title,
    )


def multiplier_for(card: Card) -> Decimal | None:
    return calculate_multiplier(card.psa10_price, card.raw_average_price)


def _refresh_derived(card: Card, summary: bool = True, multiplier: bool = True) -> bool:
    changed = False
    if summary:
        new_summary = summary_for(card)
        if card.summary_title != new_summary:
            card.summary_title = new_summary
            changed = True
    if multiplier:
        new_multiplier = multiplier_for(card)
        if card.multiplier != new_multiplier:
            card.multiplier = new_multiplier
            changed = True
    return changed


def _touch(card: Card) -> None:
    card.last_updated = datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_card(session: AsyncSession, card_id: int) -> Card:
    """
    Raises:
        LookupError: No card with this id.
    """
    card = await session.get(Card, card_id)
    if card is None:
        raise LookupError(f"Card {card_id} not found")
    return card


async def list_card_ids(session: AsyncSession, only_unknown_sport: bool = False) -> list[int]:
    """Card ids in insert order, optionally only those still needing sport detection."""
    stmt = select(Card.id).order_by(Card.id)
    if only_unknown_sport:
        stmt = stmt.where(
            or_(
                Card.sport.is_(None),
                func.trim(Card.sport) == "",
                func.lower(Card.sport) == Sport.UNKNOWN.value.lower(),
            )
        )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def fetch_all_titles(session: AsyncSession) -> list[str]:
    """Every stored title, for the dictionary learning step."""
    result = await session.execute(select(Card.title).order_by(Card.id))
    return list(result.scalars().all())


async def item_url_exists(session: AsyncSession, item_url: str) -> bool:
    result = await session.execute(select(Card.id).where(Card.item_url == item_url).limit(1))
    return result.first() is not None


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def insert_card(
    session: AsyncSession,
    listing: ScrapedListing,
    fields: CardFields,
    sport: str | None = None,
    search_term: str | None = None,
) -> Card:
    """
    Insert a fully extracted listing.

    The summary title is assembled from the stored fields here, whatever the
    caller's CardFields carried.
    """
    card = Card(
        title=listing.title,
        price=_to_price(listing.price),
        sold_date=listing.sold_date,
        condition=listing.condition,
        item_url=listing.item_url,
        search_term=search_term,
        sport=sport or Sport.UNKNOWN.value,
        **fields.as_patch(),
    )
    _refresh_derived(card)
    session.add(card)
    await session.flush()

    logger.debug("card_inserted", card_id=card.id, summary_title=card.summary_title)
    return card


def _check_patch_keys(patch: Mapping[str, Any]) -> None:
    for key in patch:
        if key in IMMUTABLE_FIELDS:
            raise ValueError(f"Field {key!r} is immutable")
        if key in DERIVED_FIELDS:
            raise ValueError(f"Field {key!r} is derived and cannot be patched")
        if key not in PATCHABLE_FIELDS:
            raise ValueError(f"Unknown card field {key!r}")


async def apply_patch(session: AsyncSession, card_id: int, patch: Mapping[str, Any]) -> bool:
    """
    Partially update one card.

    Only fields whose value actually differs are written. Derived columns
    follow their inputs; last_updated is bumped only if something changed.

    Returns:
        Whether the stored card changed.

    Raises:
        LookupError: Unknown card id.
        ValueError: Patch names an immutable, derived or unknown field.
    """
    _check_patch_keys(patch)
    card = await get_card(session, card_id)

    changed_fields: set[str] = set()
    for key, value in patch.items():
        if key in PRICE_FIELDS or key == "price":
            value = _to_price(value)
        if getattr(card, key) != value:
            setattr(card, key, value)
            changed_fields.add(key)

    if not changed_fields:
        return False

    _refresh_derived(
        card,
        summary=bool(changed_fields & SUMMARY_SOURCE_FIELDS),
        multiplier=bool(changed_fields & MULTIPLIER_SOURCE_FIELDS),
    )
    _touch(card)
    await session.flush()

    logger.debug("card_patched", card_id=card_id, fields=sorted(changed_fields))
    return True


async def recompute_derived(session: AsyncSession, card_id: int) -> bool:
    """Rebuild summary_title and multiplier from the stored fields."""
    card = await get_card(session, card_id)
    if not _refresh_derived(card):
        return False
    _touch(card)
    await session.flush()
    return True
