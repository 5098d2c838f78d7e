"""
Tests for the backfill drivers (src/pipeline/backfill.py).

Covers:
- Re-extraction updates stale rows and is a no-op the second time
- Sport detection only visits unclassified rows by default
- A failing record is counted and skipped
- Cooperative stop
- Dictionary learning falls back to the seed tables on a read failure
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.config import BackfillJob
from src.engine.dictionaries import SEED_DICTIONARIES
from src.engine.extract import CardFields, extract_all
from src.engine.name_overrides import EMPTY_OVERRIDES
from src.pipeline.backfill import BackfillRunner, BatchReport, load_dictionaries, run_backfill
from src.pipeline.repository import apply_patch, get_card, insert_card

from tests.conftest import make_listing

RUTH = "2021 Topps Stadium Club Chrome 32 Babe Ruth Refractor PSA 10"
MYSTERY = "Mystery Box Item #4"
HOLLIDAY = "2023 Bowman Chrome Titanium Jackson Holliday"


async def _store_raw(session_factory, *titles: str, sport: str | None = None) -> list[int]:
    """Insert cards with no extracted fields, as an old extractor might have left them."""
    ids = []
    for i, title in enumerate(titles):
        async with session_factory() as session:
            card = await insert_card(
                session, make_listing(title, f"https://www.ebay.com/itm/{i}"), CardFields(), sport
            )
            await session.commit()
            ids.append(card.id)
    return ids


def _runner(session_factory, **kwargs) -> BackfillRunner:
    kwargs.setdefault("overrides", EMPTY_OVERRIDES)
    return BackfillRunner(session_factory, **kwargs)


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class TestExtraction:
    async def test_updates_then_noop(self, session_factory) -> None:
        ids = await _store_raw(session_factory, RUTH, MYSTERY)
        runner = _runner(session_factory, dictionaries=SEED_DICTIONARIES)

        first = await runner.run_extraction()
        assert first == BatchReport(job=BackfillJob.EXTRACT, updated=2)

        second = await runner.run_extraction()
        assert second == BatchReport(job=BackfillJob.EXTRACT, unchanged=2)

        async with session_factory() as session:
            ruth = await get_card(session, ids[0])
        assert ruth.player_name == "Babe Ruth"
        assert ruth.summary_title == "2021 Topps Stadium Club Chrome Babe Ruth Refractor #32"

    async def test_learns_dictionaries_from_corpus(self, session_factory) -> None:
        ids = await _store_raw(session_factory, HOLLIDAY)
        runner = _runner(session_factory)

        await runner.run_extraction()

        assert runner.dictionaries is not None
        assert "Titanium" in runner.dictionaries.card_types
        async with session_factory() as session:
            card = await get_card(session, ids[0])
        assert card.card_type == "Titanium"

    async def test_failing_record_counted(self, session_factory) -> None:
        await _store_raw(session_factory, RUTH, MYSTERY)

        def flaky_extract(title, *args, **kwargs):
            if title == MYSTERY:
                raise RuntimeError("bad title")
            return extract_all(title, *args, **kwargs)

        runner = _runner(session_factory, dictionaries=SEED_DICTIONARIES)
        with patch("src.pipeline.backfill.extract_all", side_effect=flaky_extract):
            report = await runner.run_extraction()

        assert report.updated == 1
        assert report.errors == 1


# ---------------------------------------------------------------------------
# Sport detection
# ---------------------------------------------------------------------------


class TestSportDetection:
    async def test_unknown_rows_only(self, session_factory) -> None:
        ids = await _store_raw(session_factory, RUTH, MYSTERY)
        async with session_factory() as session:
            await apply_patch(session, ids[1], {"sport": "Football"})
            await session.commit()

        report = await _runner(session_factory).run_sport_detection()

        assert report == BatchReport(job=BackfillJob.SPORT, updated=1)
        async with session_factory() as session:
            assert (await get_card(session, ids[0])).sport == "Baseball"
            assert (await get_card(session, ids[1])).sport == "Football"

    async def test_miss_stays_unknown(self, session_factory) -> None:
        await _store_raw(session_factory, MYSTERY)
        report = await _runner(session_factory).run_sport_detection()
        assert report == BatchReport(job=BackfillJob.SPORT, unchanged=1)

    async def test_all_rows(self, session_factory) -> None:
        await _store_raw(session_factory, RUTH, sport="Football")
        report = await _runner(session_factory).run_sport_detection(only_unknown=False)
        assert report.updated == 1

    async def test_stop_after_current_record(self, session_factory) -> None:
        await _store_raw(session_factory, RUTH, MYSTERY, HOLLIDAY)

        class StoppingDetector:
            runner: BackfillRunner | None = None

            async def detect_sport(self, title, player_name=None) -> str:
                self.runner.stop()
                return "Baseball"

        detector = StoppingDetector()
        runner = _runner(session_factory, detector=detector)
        detector.runner = runner

        report = await runner.run_sport_detection()

        assert report.updated == 1
        assert report.stopped is True
        assert runner.stopping is True


# ---------------------------------------------------------------------------
# Derived values / full run
# ---------------------------------------------------------------------------


async def test_run_derived(session_factory) -> None:
    ids = await _store_raw(session_factory, RUTH, MYSTERY)
    async with session_factory() as session:
        card = await get_card(session, ids[0])
        card.summary_title = "stale"
        await session.commit()

    report = await _runner(session_factory).run_derived()
    assert report == BatchReport(job=BackfillJob.DERIVED, updated=1, unchanged=1)


async def test_run_all(session_factory) -> None:
    await _store_raw(session_factory, RUTH, MYSTERY)
    reports = await _runner(session_factory).run(BackfillJob.ALL)

    assert [r.job for r in reports] == [BackfillJob.EXTRACT, BackfillJob.SPORT, BackfillJob.DERIVED]
    assert reports[0].updated == 2
    assert reports[1].updated == 1
    assert reports[2] == BatchReport(job=BackfillJob.DERIVED, unchanged=2)


async def test_run_backfill_single_job(session_factory) -> None:
    await _store_raw(session_factory, RUTH)
    reports = await run_backfill(session_factory, BackfillJob.DERIVED, overrides=EMPTY_OVERRIDES)
    assert reports == [BatchReport(job=BackfillJob.DERIVED, unchanged=1)]


# ---------------------------------------------------------------------------
# Dictionary loading
# ---------------------------------------------------------------------------


async def test_load_dictionaries_empty_corpus(session_factory) -> None:
    assert await load_dictionaries(session_factory) == SEED_DICTIONARIES


async def test_load_dictionaries_read_failure() -> None:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        assert await load_dictionaries(factory) is SEED_DICTIONARIES
    finally:
        await engine.dispose()


@pytest.mark.parametrize("only_unknown", [True, False])
async def test_run_dispatches_sport_flag(session_factory, only_unknown: bool) -> None:
    await _store_raw(session_factory, RUTH, sport="Football")
    reports = await _runner(session_factory).run(BackfillJob.SPORT, only_unknown_sport=only_unknown)
    assert reports[0].updated == (0 if only_unknown else 1)
