"""
Scorecard — Listing Ingest

Scraper -> extraction -> sport detection -> insert. Every new listing is
fully extracted once, at insert time. A listing whose item_url is already
stored is skipped.

Each listing is committed on its own; a failure rolls back that listing
only and the batch carries on.
"""

from __future__ import annotations

from typing import Iterable

import structlog
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.engine.dictionaries import Dictionaries
from src.engine.extract import extract_all
from src.engine.name_overrides import NameOverrides
from src.pipeline.backfill import load_dictionaries
from src.pipeline.repository import insert_card, item_url_exists
from src.pipeline.sport_detector import SportDetector
from src.scraper import ScrapedListing, ScraperError, SoldListingSource

logger = structlog.get_logger(__name__)


class IngestReport(BaseModel):
    inserted: int = 0
    skipped: int = 0
    errors: int = 0


async def ingest_listings(
    session_factory: async_sessionmaker[AsyncSession],
    listings: Iterable[ScrapedListing],
    dictionaries: Dictionaries,
    detector: SportDetector | None = None,
    overrides: NameOverrides | None = None,
    search_term: str | None = None,
) -> IngestReport:
    """
    Extract and store a batch of scraped listings.

    Args:
        session_factory: Async session factory.
        listings: Raw listings from the scraper.
        dictionaries: Vocabulary for extraction (learned or seed).
        detector: Sport detector (keyword table only when omitted).
        overrides: Player-name correction table.
        search_term: Search that produced these listings, stored per card.

    Returns:
        IngestReport with inserted / skipped / errors counts.
    """
    detector = detector or SportDetector()
    report = IngestReport()

    for listing in listings:
        async with session_factory() as session:
            try:
                if listing.item_url and await item_url_exists(session, listing.item_url):
                    report.skipped += 1
                    logger.debug("ingest_duplicate_skipped", item_url=listing.item_url)
                    continue

                fields = extract_all(listing.title, dictionaries, overrides)
                sport = await detector.detect_sport(listing.title, fields.player_name)
                card = await insert_card(session, listing, fields, sport, search_term=search_term)
                await session.commit()
                report.inserted += 1
                logger.debug("ingest_listing_stored", card_id=card.id, sport=sport)
            except Exception as e:
                await session.rollback()
                report.errors += 1
                logger.error(
                    "ingest_listing_failed",
                    title=listing.title,
                    error=str(e),
                    error_type=type(e).__name__,
                )

    logger.info("ingest_complete", search_term=search_term, **report.model_dump())
    return report


async def pull_sold_listings(
    source: SoldListingSource,
    search_term: str,
    session_factory: async_sessionmaker[AsyncSession],
    dictionaries: Dictionaries | None = None,
    detector: SportDetector | None = None,
    overrides: NameOverrides | None = None,
) -> IngestReport:
    """
    Search the scraper for one term and ingest what it returns.

    Dictionaries are learned from the stored corpus when not supplied.
    A scraper failure is logged and reported as a single error.
    """
    try:
        listings = await source.search_sold(search_term)
    except ScraperError as e:
        logger.error("scraper_search_failed", search_term=search_term, error=str(e))
        return IngestReport(errors=1)

    if dictionaries is None:
        dictionaries = await load_dictionaries(session_factory)

    logger.info("ingest_started", search_term=search_term, listings=len(listings))
    return await ingest_listings(
        session_factory,
        listings,
        dictionaries,
        detector=detector,
        overrides=overrides,
        search_term=search_term,
    )
