"""
Scorecard — Card Model

One row per observed sold listing. The raw title is the only extraction
input and never changes after insert; every other descriptive column is
derived from it and may be rewritten by re-extraction or manual correction.

Derived columns:
- summary_title: rebuilt from the extracted fields, never written directly
- multiplier: psa10_price / raw_average_price, only when both are positive
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BOOLEAN, DECIMAL, INTEGER, TIMESTAMP, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.config import Sport
from src.models.base import Base


class Card(Base):
    """A sold listing plus everything extracted from its title."""

    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(
        INTEGER, primary_key=True, autoincrement=True, comment="Assigned at insert, immutable"
    )
    title: Mapped[str] = mapped_column(
        Text, nullable=False, comment="Raw listing title, immutable once stored"
    )
    summary_title: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="Display/search string assembled from extracted fields"
    )

    # Extracted fields
    player_name: Mapped[str | None] = mapped_column(String, nullable=True)
    year: Mapped[str | None] = mapped_column(String, nullable=True, comment="First 19xx/20xx in title")
    brand: Mapped[str | None] = mapped_column(String, nullable=True, comment="Manufacturer (Topps, Panini, ...)")
    card_set: Mapped[str | None] = mapped_column(String, nullable=True, comment="Canonical set name")
    card_type: Mapped[str | None] = mapped_column(
        String, nullable=True, comment="Parallel / colour / finish names"
    )
    card_number: Mapped[str | None] = mapped_column(String, nullable=True, comment="Always '#'-prefixed")
    print_run: Mapped[str | None] = mapped_column(String, nullable=True, comment="e.g. '/150'")
    is_rookie: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, default=False)
    is_autograph: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, default=False)
    sport: Mapped[str | None] = mapped_column(
        String,
        nullable=True,
        default=Sport.UNKNOWN.value,
        comment="Sport value; 'Unknown' when no source could classify it",
    )
    needs_review: Mapped[bool] = mapped_column(
        BOOLEAN,
        nullable=False,
        default=False,
        comment="Player name built from dictionary-colliding tokens",
    )

    # Scraper pass-through
    price: Mapped[Decimal | None] = mapped_column(DECIMAL(10, 2), nullable=True, comment="Sold price")
    sold_date: Mapped[str | None] = mapped_column(String, nullable=True)
    condition: Mapped[str | None] = mapped_column(String, nullable=True)
    item_url: Mapped[str | None] = mapped_column(String, nullable=True)
    search_term: Mapped[str | None] = mapped_column(
        String, nullable=True, comment="Search that surfaced the listing"
    )

    # Prices (populated by the price-lookup process)
    psa10_price: Mapped[Decimal | None] = mapped_column(DECIMAL(10, 2), nullable=True)
    psa9_average_price: Mapped[Decimal | None] = mapped_column(DECIMAL(10, 2), nullable=True)
    raw_average_price: Mapped[Decimal | None] = mapped_column(DECIMAL(10, 2), nullable=True)
    multiplier: Mapped[Decimal | None] = mapped_column(
        DECIMAL(10, 2), nullable=True, comment="psa10_price / raw_average_price"
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        comment="Insert timestamp",
    )
    last_updated: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        comment="Bumped on every field mutation",
    )

    __table_args__ = (
        Index("ix_cards_item_url", "item_url"),
        Index("ix_cards_sport", "sport"),
    )

    def __repr__(self) -> str:
        return f"<Card id={self.id} title={self.title!r} sport={self.sport!r}>"
