"""
Scorecard — Maintenance / Backfill Drivers

Re-runs pipeline stages over the stored corpus:

- extract: re-extract every card's fields from its title (after learning)
- sport:   re-detect sport for cards still "Unknown" (or every card)
- derived: rebuild summary titles and multipliers from stored fields
- all:     the three above, in that order

Records are processed sequentially, each in its own session and
transaction, so one failing record never takes the batch down. Every job
reports updated / unchanged / errors. stop() is cooperative: the record in
flight finishes, the next one is not started.
"""

from __future__ import annotations

import asyncio
import signal
from typing import Any, Awaitable, Callable

import structlog
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config import BackfillJob, settings
from src.engine.dictionaries import SEED_DICTIONARIES, Dictionaries
from src.engine.extract import extract_all
from src.engine.learning import learn_dictionaries
from src.engine.name_overrides import NameOverrides
from src.pipeline.repository import (
    apply_patch,
    fetch_all_titles,
    get_card,
    list_card_ids,
    recompute_derived,
)
from src.pipeline.sport_detector import SportDetector

logger = structlog.get_logger(__name__)

RecordHandler = Callable[[AsyncSession, int], Awaitable[bool]]


class BatchReport(BaseModel):
    """Outcome of one job over the corpus."""
    job: BackfillJob
    updated: int = 0
    unchanged: int = 0
    errors: int = 0
    stopped: bool = False


async def load_dictionaries(session_factory: async_sessionmaker[AsyncSession]) -> Dictionaries:
    """
    Learn dictionaries from every stored title.

    A corpus read failure is not fatal: it is logged and the seed
    dictionaries are used instead.
    """
    try:
        async with session_factory() as session:
            titles = await fetch_all_titles(session)
    except SQLAlchemyError as e:
        logger.warning(
            "dictionary_learning_failed_using_seed",
            error=str(e),
            error_type=type(e).__name__,
        )
        return SEED_DICTIONARIES
    return learn_dictionaries(titles)


class BackfillRunner:
    """
    Usage:
        runner = BackfillRunner(session_factory, detector=detector)
        report = await runner.run_extraction()
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dictionaries: Dictionaries | None = None,
        detector: SportDetector | None = None,
        overrides: NameOverrides | None = None,
    ):
        self.session_factory = session_factory
        self.dictionaries = dictionaries
        self.detector = detector or SportDetector()
        self.overrides = overrides
        self._stop_event = asyncio.Event()

    def stop(self) -> None:
        """Finish the current record, then stop."""
        logger.info("backfill_stop_requested")
        self._stop_event.set()

    @property
    def stopping(self) -> bool:
        return self._stop_event.is_set()

    # -----------------------------------------------------------------------
    # Per-record handlers
    # -----------------------------------------------------------------------

    async def _extract_one(self, session: AsyncSession, card_id: int) -> bool:
        card = await get_card(session, card_id)
        fields = extract_all(card.title, self.dictionaries or SEED_DICTIONARIES, self.overrides)
        return await apply_patch(session, card_id, fields.as_patch())

    async def _detect_one(self, session: AsyncSession, card_id: int) -> bool:
        card = await get_card(session, card_id)
        sport = await self.detector.detect_sport(card.title, card.player_name)
        changed = await apply_patch(session, card_id, {"sport": sport})
        if settings.BACKFILL_SPORT_DELAY_SECONDS > 0:
            await asyncio.sleep(settings.BACKFILL_SPORT_DELAY_SECONDS)
        return changed

    async def _derived_one(self, session: AsyncSession, card_id: int) -> bool:
        return await recompute_derived(session, card_id)

    # -----------------------------------------------------------------------
    # Batch loop
    # -----------------------------------------------------------------------

    async def _run(self, job: BackfillJob, handler: RecordHandler, only_unknown_sport: bool = False) -> BatchReport:
        report = BatchReport(job=job)
        async with self.session_factory() as session:
            card_ids = await list_card_ids(session, only_unknown_sport=only_unknown_sport)

        logger.info("backfill_started", job=job.value, records=len(card_ids))

        for card_id in card_ids:
            if self._stop_event.is_set():
                report.stopped = True
                break

            async with self.session_factory() as session:
                try:
                    changed = await handler(session, card_id)
                    await session.commit()
                except Exception as e:
                    await session.rollback()
                    report.errors += 1
                    logger.error(
                        "backfill_record_failed",
                        job=job.value,
                        card_id=card_id,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    continue

            if changed:
                report.updated += 1
            else:
                report.unchanged += 1

        logger.info(
            "backfill_complete",
            job=job.value,
            updated=report.updated,
            unchanged=report.unchanged,
            errors=report.errors,
            stopped=report.stopped,
        )
        return report

    async def run_extraction(self) -> BatchReport:
        """Re-extract every card. Dictionaries are learned first unless supplied."""
        if self.dictionaries is None:
            self.dictionaries = await load_dictionaries(self.session_factory)
        return await self._run(BackfillJob.EXTRACT, self._extract_one)

    async def run_sport_detection(self, only_unknown: bool = True) -> BatchReport:
        return await self._run(BackfillJob.SPORT, self._detect_one, only_unknown_sport=only_unknown)

    async def run_derived(self) -> BatchReport:
        return await self._run(BackfillJob.DERIVED, self._derived_one)

    async def run_all(self, only_unknown_sport: bool = True) -> list[BatchReport]:
        reports: list[BatchReport] = []
        for step in (
            self.run_extraction,
            lambda: self.run_sport_detection(only_unknown=only_unknown_sport),
            self.run_derived,
        ):
            report = await step()
            reports.append(report)
            if report.stopped:
                break
        return reports

    async def run(self, job: BackfillJob, only_unknown_sport: bool = True) -> list[BatchReport]:
        if job == BackfillJob.EXTRACT:
            return [await self.run_extraction()]
        if job == BackfillJob.SPORT:
            return [await self.run_sport_detection(only_unknown=only_unknown_sport)]
        if job == BackfillJob.DERIVED:
            return [await self.run_derived()]
        return await self.run_all(only_unknown_sport=only_unknown_sport)


async def run_backfill(
    session_factory: async_sessionmaker[AsyncSession],
    job: BackfillJob = BackfillJob.ALL,
    detector: SportDetector | None = None,
    overrides: NameOverrides | None = None,
    only_unknown_sport: bool = True,
) -> list[BatchReport]:
    """
    Run a backfill job with graceful shutdown handling.

    SIGTERM/SIGINT request a cooperative stop instead of killing the batch
    mid-record.
    """
    runner = BackfillRunner(session_factory, detector=detector, overrides=overrides)

    def handle_signal(_signum: int, _frame: Any) -> None:
        """Called by SIGTERM/SIGINT."""
        logger.info("backfill_signal_received")
        runner.stop()

    loop = asyncio.get_running_loop()

    try:
        loop.add_signal_handler(signal.SIGTERM, handle_signal, signal.SIGTERM, None)
        loop.add_signal_handler(signal.SIGINT, handle_signal, signal.SIGINT, None)
    except NotImplementedError:
        # Windows doesn't support add_signal_handler for all signals
        logger.warning("signal_handlers_not_supported_on_platform")

    try:
        return await runner.run(job, only_unknown_sport=only_unknown_sport)
    except Exception as e:
        logger.error("backfill_fatal_error", error=str(e), error_type=type(e).__name__)
        raise
    finally:
        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.remove_signal_handler(sig)
            except NotImplementedError:
                pass
