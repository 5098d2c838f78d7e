"""
Scorecard — Scraper Contract

The sold-listing scraper is an external collaborator. The pipeline only
relies on this contract: given a search term, return zero or more raw
listings, or raise ScraperError.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ScraperError(Exception):
    """The scraper could not produce results for a search term."""


class ScrapedListing(BaseModel):
    """One raw sold listing. Only title is needed for extraction."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    price: Decimal | None = None
    sold_date: str | None = Field(default=None, alias="soldDate")
    condition: str | None = None
    item_url: str | None = Field(default=None, alias="itemUrl")

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be blank")
        return v.strip()


@runtime_checkable
class SoldListingSource(Protocol):
    """Anything that can search sold listings."""

    async def search_sold(self, search_term: str) -> list[ScrapedListing]:
        ...
