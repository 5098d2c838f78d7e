"""
Scorecard — Application Entrypoint

Initializes the async SQLAlchemy engine, configures structlog, creates the
cards table if needed, then runs the backfill jobs over the stored corpus.

Run via:
    python -m src.main
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from src.config import BackfillJob, settings
from src.engine.name_overrides import load_name_overrides
from src.models import Base
from src.pipeline.backfill import BatchReport, run_backfill
from src.pipeline.espn import ESPNClient
from src.pipeline.sport_detector import SportDetector


# ---------------------------------------------------------------------------
# Structlog Configuration
# ---------------------------------------------------------------------------


def _configure_logging(log_level: str = "INFO") -> None:
    """
    Set up structured logging with JSON output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    # Configure stdlib logging first (for third-party libraries)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Database Setup
# ---------------------------------------------------------------------------


async def create_db_engine() -> tuple[Any, async_sessionmaker[AsyncSession]]:
    """
    Create SQLAlchemy async engine and session factory.

    The DATABASE_URL is read from settings (env variable DATABASE_URL).
    Uses aiosqlite for async SQLite connections.

    Returns:
        (engine, session_factory) tuple.
    """
    logger = structlog.get_logger(__name__)

    logger.info("database_engine_initializing", database_url=settings.DATABASE_URL)

    engine = create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        pool_pre_ping=True,  # Verify connections before use
    )

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    logger.info("database_engine_ready")
    return engine, session_factory


async def init_db(engine: Any) -> None:
    """Create missing tables. Existing tables are left as they are."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ---------------------------------------------------------------------------
# Application Startup
# ---------------------------------------------------------------------------


async def main(
    job: BackfillJob = BackfillJob.ALL,
    only_unknown_sport: bool = True,
) -> list[BatchReport]:
    """
    Application entrypoint. Initializes subsystems and runs one backfill job.

    Execution order:
    1. Configure logging (structlog JSON)
    2. Load the player-name override table (fails fast if malformed)
    3. Create async database engine, session factory and tables
    4. Verify database connection (health check)
    5. Run the job with an ESPN-backed sport detector
    """
    _configure_logging(log_level=settings.LOG_LEVEL)
    logger = structlog.get_logger(__name__)

    logger.info("scorecard_startup_begin", version="0.1.0", job=job.value)

    overrides = load_name_overrides()

    try:
        engine, session_factory = await create_db_engine()
        await init_db(engine)
    except Exception as e:
        logger.error(
            "database_engine_creation_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise

    # Health check: verify database connection
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        logger.info("database_health_check_passed")
    except Exception as e:
        logger.error(
            "database_health_check_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        await engine.dispose()
        raise

    try:
        async with ESPNClient() as client:
            detector = SportDetector(client)
            reports = await run_backfill(
                session_factory,
                job=job,
                detector=detector,
                overrides=overrides,
                only_unknown_sport=only_unknown_sport,
            )
        for report in reports:
            logger.info("scorecard_job_report", **report.model_dump(mode="json"))
        logger.info("scorecard_sport_cache", **detector.cache_stats()._asdict())
        return reports
    except Exception as e:
        logger.error(
            "scorecard_fatal_error",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise
    finally:
        await engine.dispose()
        logger.info("scorecard_shutdown_complete")


# ---------------------------------------------------------------------------
# CLI Entry
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    asyncio.run(main())
