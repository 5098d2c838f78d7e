"""
Scorecard — Player Name Override Table

Manual corrections applied after normalization, for names the shape rules
cannot get right on their own ("Jamarr Chase" -> "Ja'Marr Chase").

File format (JSON):

    {"version": 3, "overrides": [{"from": "Jamarr Chase", "to": "Ja'Marr Chase"}]}

Keys are matched case-insensitively on the normalized name. A missing file
means no overrides; a malformed one is a configuration error and raises.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.config import settings

logger = structlog.get_logger(__name__)


class OverrideEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(alias="from", min_length=1)
    target: str = Field(alias="to", min_length=1)


class OverrideFile(BaseModel):
    version: int = Field(ge=1)
    overrides: list[OverrideEntry] = []


class NameOverrides(BaseModel):
    """Lookup table keyed by lowercased normalized name."""

    model_config = ConfigDict(frozen=True)

    version: int = 0
    entries: dict[str, str] = {}

    def apply(self, name: str | None) -> str | None:
        if not name:
            return name
        return self.entries.get(" ".join(name.lower().split()), name)

    def __len__(self) -> int:
        return len(self.entries)


EMPTY_OVERRIDES = NameOverrides()


def load_name_overrides(
    path: str | Path | None = None,
    max_entries: int | None = None,
) -> NameOverrides:
    """
    Load and validate an override file.

    Args:
        path: JSON file (defaults to settings.NAME_OVERRIDES_PATH).
        max_entries: Upper bound on entries (defaults to settings).

    Returns:
        NameOverrides; EMPTY_OVERRIDES if the file does not exist.

    Raises:
        ValueError: Invalid JSON, schema violation, or too many entries.
    """
    path = Path(path or settings.NAME_OVERRIDES_PATH)
    limit = max_entries if max_entries is not None else settings.NAME_OVERRIDES_MAX_ENTRIES

    if not path.exists():
        logger.warning("name_overrides_file_missing", path=str(path))
        return EMPTY_OVERRIDES

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Override file {path} is not valid JSON: {e}") from e

    try:
        parsed = OverrideFile.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Override file {path} failed validation: {e}") from e

    if len(parsed.overrides) > limit:
        raise ValueError(
            f"Override file {path} has {len(parsed.overrides)} entries (max {limit})"
        )

    entries = {
        " ".join(entry.source.lower().split()): entry.target.strip()
        for entry in parsed.overrides
    }
    logger.info(
        "name_overrides_loaded",
        path=str(path),
        version=parsed.version,
        entries=len(entries),
    )
    return NameOverrides(version=parsed.version, entries=entries)


@lru_cache(maxsize=1)
def default_name_overrides() -> NameOverrides:
    """The configured override table, loaded once per process."""
    return load_name_overrides()
