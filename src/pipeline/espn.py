"""
Scorecard — ESPN Player Search Client

Second source for sport classification, consulted only when the keyword
table has no hit. Searches ESPN by player name and maps the best match's
league slug to a Sport.

Endpoint: GET https://site.web.api.espn.com/apis/search/v2?limit=100&query=<name>

Response (abridged):
    {"results": [{"type": "player",
                  "contents": [{"displayName": "Paul Skenes",
                                "defaultLeagueSlug": "mlb"}]}]}

Failures (timeout, transport error, non-2xx, body that does not parse) are
logged and reported as None so the caller can tell "lookup failed" apart
from "no such player".
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import BaseModel, Field

from src.config import Sport, settings

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# League slug -> sport
# ---------------------------------------------------------------------------

LEAGUE_SPORTS: dict[str, Sport] = {
    # Football
    "nfl": Sport.FOOTBALL,
    "college-football": Sport.FOOTBALL,
    "xfl": Sport.FOOTBALL,
    "usfl": Sport.FOOTBALL,
    # Basketball
    "nba": Sport.BASKETBALL,
    "wnba": Sport.BASKETBALL,
    "college-basketball": Sport.BASKETBALL,
    "mens-college-basketball": Sport.BASKETBALL,
    "womens-college-basketball": Sport.BASKETBALL,
    "g-league": Sport.BASKETBALL,
    # Baseball
    "mlb": Sport.BASEBALL,
    "minor-league-baseball": Sport.BASEBALL,
    "college-baseball": Sport.BASEBALL,
    # Hockey
    "nhl": Sport.HOCKEY,
    "ahl": Sport.HOCKEY,
    # Racing
    "f1": Sport.RACING,
    "nascar": Sport.RACING,
    "indycar": Sport.RACING,
    # Soccer
    "soccer": Sport.SOCCER,
    "mls": Sport.SOCCER,
    "premier-league": Sport.SOCCER,
    "eng.1": Sport.SOCCER,
    "esp.1": Sport.SOCCER,
    "ger.1": Sport.SOCCER,
    "ita.1": Sport.SOCCER,
    "fra.1": Sport.SOCCER,
    "usa.1": Sport.SOCCER,
    "uefa.champions": Sport.SOCCER,
    # Golf
    "pga": Sport.GOLF,
    "lpga": Sport.GOLF,
    # Tennis
    "atp": Sport.TENNIS,
    "wta": Sport.TENNIS,
    "tennis": Sport.TENNIS,
    # Combat / entertainment
    "boxing": Sport.BOXING,
    "ufc": Sport.MMA,
    "mma": Sport.MMA,
    "wwe": Sport.WRESTLING,
}


def map_league_to_sport(league: str | None) -> Sport:
    if not league:
        return Sport.UNKNOWN
    return LEAGUE_SPORTS.get(league.strip().lower(), Sport.UNKNOWN)


# ---------------------------------------------------------------------------
# Pydantic Response Models
# ---------------------------------------------------------------------------


class PlayerHit(BaseModel):
    """One entity in a search result group."""
    displayName: str | None = None
    defaultLeagueSlug: str | None = None


class SearchResultGroup(BaseModel):
    type: str | None = None
    contents: list[PlayerHit] = Field(default_factory=list)


class SearchResponse(BaseModel):
    results: list[SearchResultGroup] = Field(default_factory=list)

    def players(self) -> list[PlayerHit]:
        for group in self.results:
            if group.type == "player":
                return list(group.contents)
        return []


def pick_best_match(players: list[PlayerHit], name: str) -> PlayerHit | None:
    """First exact (case-insensitive) display-name match, else the first result."""
    if not players:
        return None
    wanted = name.strip().lower()
    for player in players:
        if player.displayName and player.displayName.strip().lower() == wanted:
            return player
    return players[0]


# ---------------------------------------------------------------------------
# API Client
# ---------------------------------------------------------------------------


class ESPNClient:
    """
    Async client for the ESPN v2 search endpoint.

    Usage:
        async with ESPNClient() as client:
            sport = await client.lookup_sport("Paul Skenes")
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        self._base_url = base_url or settings.ESPN_SEARCH_URL
        self._timeout = timeout if timeout is not None else settings.ESPN_TIMEOUT_SECONDS
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> ESPNClient:
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            headers={
                "User-Agent": settings.ESPN_USER_AGENT,
                "Accept": "application/json",
            },
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def search_players(self, name: str) -> list[PlayerHit] | None:
        """
        Search ESPN for a player name.

        Returns:
            Player entities in ranked order (possibly empty), or None when
            the lookup itself failed.
        """
        assert self._client is not None, "Client not initialized. Use 'async with'."

        try:
            response = await self._client.get(
                self._base_url,
                params={"limit": settings.ESPN_SEARCH_LIMIT, "query": name},
            )
            response.raise_for_status()
            parsed = SearchResponse.model_validate(response.json())
        except Exception as e:
            logger.warning(
                "espn_search_failed",
                player_name=name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        players = parsed.players()
        logger.debug("espn_search_complete", player_name=name, results=len(players))
        return players

    async def lookup_sport(self, name: str) -> Sport | None:
        """
        Resolve a player name to a Sport.

        Returns:
            The mapped Sport (Sport.UNKNOWN for no match or an unmapped
            league), or None when the lookup failed.
        """
        players = await self.search_players(name)
        if players is None:
            return None

        best = pick_best_match(players, name)
        if best is None:
            logger.info("espn_player_not_found", player_name=name)
            return Sport.UNKNOWN

        sport = map_league_to_sport(best.defaultLeagueSlug)
        logger.info(
            "espn_player_matched",
            player_name=name,
            matched=best.displayName,
            league=best.defaultLeagueSlug,
            sport=sport.value,
        )
        return sport
