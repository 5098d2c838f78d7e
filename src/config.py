"""
Scorecard — Configuration & Constants

Every threshold, endpoint and tunable used by the title extraction pipeline
lives here. No hardcoded values in business logic.

Usage:
    from src.config import settings
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Sport(str, Enum):
    """Sport classification persisted on every card. UNKNOWN is a sentinel, never null."""
    FOOTBALL = "Football"
    BASKETBALL = "Basketball"
    BASEBALL = "Baseball"
    HOCKEY = "Hockey"
    SOCCER = "Soccer"
    GOLF = "Golf"
    RACING = "Racing"
    WRESTLING = "Wrestling"
    MMA = "MMA"
    TENNIS = "Tennis"
    BOXING = "Boxing"
    POKEMON = "Pokemon"
    YUGIOH = "Yu-Gi-Oh"
    MAGIC = "Magic"
    UNKNOWN = "Unknown"


class BackfillJob(str, Enum):
    """Maintenance jobs runnable over the stored corpus."""
    EXTRACT = "extract"     # re-run field + player-name extraction
    SPORT = "sport"         # re-run sport detection
    DERIVED = "derived"     # rebuild summary titles and multipliers
    ALL = "all"


_DEFAULT_OVERRIDES_PATH = Path(__file__).parent / "data" / "name_overrides.json"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Central configuration for Scorecard.

    Loads from environment variables with fallback defaults.
    """

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # -----------------------------------------------------------------------
    # Database
    # -----------------------------------------------------------------------
    DATABASE_URL: str = "sqlite+aiosqlite:///scorecard.db"
    DATABASE_ECHO: bool = False

    # -----------------------------------------------------------------------
    # ESPN player search (sport detection fallback)
    # -----------------------------------------------------------------------
    ESPN_SEARCH_URL: str = "https://site.web.api.espn.com/apis/search/v2"
    ESPN_SEARCH_LIMIT: int = 100
    ESPN_TIMEOUT_SECONDS: float = 10.0
    ESPN_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # Player name -> sport cache, includes explicit "not found" results
    SPORT_CACHE_TTL_SECONDS: int = 86400

    # -----------------------------------------------------------------------
    # Player name overrides (versioned correction table)
    # -----------------------------------------------------------------------
    NAME_OVERRIDES_PATH: str = str(_DEFAULT_OVERRIDES_PATH)
    NAME_OVERRIDES_MAX_ENTRIES: int = 500

    # -----------------------------------------------------------------------
    # Extraction thresholds
    # -----------------------------------------------------------------------
    PLAYER_NAME_MAX_TOKENS: int = 3     # first + middle + last (particles/suffixes not counted)
    PLAYER_NAME_MIN_LENGTH: int = 4     # names of 3 chars or fewer are rejected
    SUMMARY_MIN_FIELDS: int = 2         # fewer emitted parts -> cleaned raw title

    # -----------------------------------------------------------------------
    # Backfill drivers
    # -----------------------------------------------------------------------
    BACKFILL_SPORT_DELAY_SECONDS: float = 0.0  # pacing between external lookups

    # -----------------------------------------------------------------------
    # Logging
    # -----------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"


# Singleton instance
settings = Settings()
