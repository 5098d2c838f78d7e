"""
Tests for listing ingest (src/pipeline/ingest.py).

Covers:
- Listings are extracted, classified and stored once
- Duplicate item URLs are skipped
- One bad listing does not stop the batch
- Scraper failures are reported, not raised
"""

from __future__ import annotations

from unittest.mock import patch

from src.engine.dictionaries import SEED_DICTIONARIES
from src.engine.extract import extract_all
from src.engine.name_overrides import EMPTY_OVERRIDES
from src.pipeline.ingest import IngestReport, ingest_listings, pull_sold_listings
from src.pipeline.repository import get_card, list_card_ids
from src.pipeline.sport_detector import SportDetector
from src.scraper import ScrapedListing, ScraperError, SoldListingSource

from tests.conftest import make_listing

RUTH = "2021 Topps Stadium Club Chrome 32 Babe Ruth Refractor PSA 10"
CAMINERO = "2023 Bowman - Chrome Prospects Junior Caminero #BCP-61 Lunar Glow PSA 10 (RC)"


class StubSource:
    def __init__(self, listings: list[ScrapedListing] | None = None, error: str | None = None):
        self.listings = listings or []
        self.error = error
        self.searched: list[str] = []

    async def search_sold(self, search_term: str) -> list[ScrapedListing]:
        self.searched.append(search_term)
        if self.error:
            raise ScraperError(self.error)
        return self.listings


async def _ingest(session_factory, listings) -> IngestReport:
    return await ingest_listings(
        session_factory,
        listings,
        SEED_DICTIONARIES,
        detector=SportDetector(),
        overrides=EMPTY_OVERRIDES,
        search_term="prospects",
    )


# ---------------------------------------------------------------------------
# Test 1: Happy path
# ---------------------------------------------------------------------------


async def test_ingest_stores_extracted_cards(session_factory) -> None:
    report = await _ingest(session_factory, [
        make_listing(RUTH, "https://www.ebay.com/itm/1"),
        make_listing(CAMINERO, "https://www.ebay.com/itm/2"),
    ])

    assert report == IngestReport(inserted=2)
    async with session_factory() as session:
        ids = await list_card_ids(session)
        ruth = await get_card(session, ids[0])
        caminero = await get_card(session, ids[1])

    assert ruth.player_name == "Babe Ruth"
    assert ruth.sport == "Baseball"
    assert ruth.search_term == "prospects"
    assert caminero.summary_title == "2023 Bowman Chrome Prospects Junior Caminero Lunar Glow #BCP-61"
    assert caminero.is_rookie is True


# ---------------------------------------------------------------------------
# Test 2: Duplicates
# ---------------------------------------------------------------------------


async def test_duplicate_item_url_skipped(session_factory) -> None:
    listing = make_listing(RUTH, "https://www.ebay.com/itm/1")
    first = await _ingest(session_factory, [listing])
    second = await _ingest(session_factory, [listing, make_listing(CAMINERO, "https://www.ebay.com/itm/2")])

    assert first == IngestReport(inserted=1)
    assert second == IngestReport(inserted=1, skipped=1)


async def test_listings_without_url_always_stored(session_factory) -> None:
    report = await _ingest(session_factory, [make_listing(RUTH), make_listing(RUTH)])
    assert report.inserted == 2


# ---------------------------------------------------------------------------
# Test 3: Per-listing failure
# ---------------------------------------------------------------------------


async def test_failing_listing_does_not_stop_batch(session_factory) -> None:
    def flaky_extract(title, *args, **kwargs):
        if "Caminero" in title:
            raise RuntimeError("extractor exploded")
        return extract_all(title, *args, **kwargs)

    with patch("src.pipeline.ingest.extract_all", side_effect=flaky_extract):
        report = await _ingest(session_factory, [
            make_listing(CAMINERO, "https://www.ebay.com/itm/2"),
            make_listing(RUTH, "https://www.ebay.com/itm/1"),
        ])

    assert report == IngestReport(inserted=1, errors=1)
    async with session_factory() as session:
        assert len(await list_card_ids(session)) == 1


# ---------------------------------------------------------------------------
# Test 4: Scraper contract
# ---------------------------------------------------------------------------


async def test_pull_sold_listings(session_factory) -> None:
    source = StubSource([make_listing(RUTH, "https://www.ebay.com/itm/1")])
    assert isinstance(source, SoldListingSource)

    report = await pull_sold_listings(source, "babe ruth", session_factory, overrides=EMPTY_OVERRIDES)

    assert report == IngestReport(inserted=1)
    assert source.searched == ["babe ruth"]
    async with session_factory() as session:
        card = await get_card(session, (await list_card_ids(session))[0])
    assert card.search_term == "babe ruth"


async def test_pull_sold_listings_scraper_error(session_factory) -> None:
    source = StubSource(error="blocked")
    report = await pull_sold_listings(source, "babe ruth", session_factory)
    assert report == IngestReport(errors=1)
