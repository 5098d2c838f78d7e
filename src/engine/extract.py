"""
Scorecard — Full Title Extraction

extract_all() runs every field extractor plus the player-name extractor over
one title and returns the complete set of derived fields. It is the single
entry point used at insert time and by the re-extraction backfill.

Pure: the same title with the same Dictionaries and overrides always yields
the same CardFields.
"""

from __future__ import annotations

import structlog
from pydantic import BaseModel

from src.engine.dictionaries import SEED_DICTIONARIES, Dictionaries
from src.engine.fields import (
    brand_from_scan,
    card_type_from_scan,
    is_autograph,
    is_rookie,
    scan_title,
)
from src.engine.name_overrides import NameOverrides
from src.engine.player_name import extract_player_name
from src.engine.summary import assemble_summary_title

logger = structlog.get_logger(__name__)

# Fields written back to a stored card by re-extraction
EXTRACTED_FIELDS: tuple[str, ...] = (
    "player_name",
    "year",
    "brand",
    "card_set",
    "card_type",
    "card_number",
    "print_run",
    "is_rookie",
    "is_autograph",
    "needs_review",
)


class CardFields(BaseModel):
    """Everything derivable from a title alone."""

    year: str | None = None
    brand: str | None = None
    card_set: str | None = None
    player_name: str | None = None
    card_type: str | None = None
    card_number: str | None = None
    print_run: str | None = None
    is_rookie: bool = False
    is_autograph: bool = False
    needs_review: bool = False
    summary_title: str = ""

    def as_patch(self) -> dict[str, str | bool | None]:
        """Extracted fields only; summary_title is derived by the repository."""
        return {name: getattr(self, name) for name in EXTRACTED_FIELDS}


def extract_all(
    title: str | None,
    dictionaries: Dictionaries = SEED_DICTIONARIES,
    overrides: NameOverrides | None = None,
) -> CardFields:
    """
    Extract every field from a listing title.

    Args:
        title: Raw listing title.
        dictionaries: Seed or learned vocabulary.
        overrides: Player-name correction table (bundled table by default).

    Returns:
        CardFields with the assembled summary title.
    """
    scan = scan_title(title, dictionaries)
    player = extract_player_name(title, dictionaries, overrides=overrides, scan=scan)
    autograph = is_autograph(title)

    fields = CardFields(
        year=scan.year.value if scan.year else None,
        brand=brand_from_scan(scan, dictionaries),
        card_set=scan.card_set.value if scan.card_set else None,
        player_name=player.name,
        card_type=card_type_from_scan(scan),
        card_number=scan.card_number.value if scan.card_number else None,
        print_run=scan.print_run.value if scan.print_run else None,
        is_rookie=is_rookie(title),
        is_autograph=autograph,
        needs_review=player.needs_review,
    )
    fields.summary_title = assemble_summary_title(
        year=fields.year,
        card_set=fields.card_set,
        player_name=fields.player_name,
        card_type=fields.card_type,
        is_autograph=autograph,
        card_number=fields.card_number,
        print_run=fields.print_run,
        title=title,
    )

    logger.debug(
        "title_extracted",
        title=title,
        player_name=fields.player_name,
        card_set=fields.card_set,
        needs_review=fields.needs_review,
    )
    return fields
