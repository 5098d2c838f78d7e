"""
Scorecard — Sport Keyword Table

First source of sport classification: a curated table of well-known players,
league/category terms and team names. Instant and offline, so it is always
consulted before the external player search.

Lookup precedence:
1. Player names (most specific)
2. League/category/position terms
3. Team names

Within a tier the longest keyword wins. A team name or term that belongs to
more than one sport ("giants", "kings", "center") is ambiguous and never used.
"""

from __future__ import annotations

from collections import Counter
from typing import NamedTuple

import structlog

from src.config import Sport
from src.utils.text_match import normalize_title, phrase_pattern

logger = structlog.get_logger(__name__)


class SportKeywords(NamedTuple):
    players: tuple[str, ...] = ()
    terms: tuple[str, ...] = ()
    teams: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Keyword table
# ---------------------------------------------------------------------------

SPORT_KEYWORDS: dict[Sport, SportKeywords] = {
    Sport.FOOTBALL: SportKeywords(
        players=(
            "patrick mahomes", "josh allen", "joe burrow", "justin herbert", "lamar jackson",
            "jalen hurts", "dak prescott", "aaron rodgers", "tom brady", "christian mccaffrey",
            "saquon barkley", "derrick henry", "tyreek hill", "justin jefferson", "ja'marr chase",
            "jamarr chase", "stefon diggs", "davante adams", "cooper kupp", "caleb williams",
            "drake maye", "bo nix", "jayden daniels", "michael penix", "j.j. mccarthy", "jj mccarthy",
            "bryce young", "rome odunze", "marvin harrison", "blake corum", "bijan robinson",
            "rashee rice", "brock bowers", "trevor lawrence", "myles garrett", "brock purdy",
            "c.j. stroud", "cj stroud", "puka nacua", "jahmyr gibbs", "de'von achane", "ceedee lamb",
            "jaxon smith-njigba", "malik nabers", "brian thomas", "ladd mcconkey", "travis hunter",
            "cam ward", "ashton jeanty", "shedeur sanders",
        ),
        terms=(
            "football", "nfl", "college football", "ncaa football", "quarterback", "qb",
            "running back", "wide receiver", "tight end", "linebacker", "cornerback",
            "defensive end", "kicker", "punter", "xfl", "usfl",
        ),
        teams=(
            "bears", "packers", "cowboys", "eagles", "giants", "redskins", "commanders", "patriots",
            "steelers", "49ers", "seahawks", "cardinals", "rams", "saints", "buccaneers", "falcons",
            "panthers", "vikings", "lions", "bills", "dolphins", "jets", "bengals", "browns", "ravens",
            "texans", "colts", "jaguars", "titans", "broncos", "chargers", "raiders", "chiefs",
        ),
    ),
    Sport.BASKETBALL: SportKeywords(
        players=(
            "lebron james", "stephen curry", "kevin durant", "giannis", "nikola jokic", "joel embiid",
            "luka doncic", "ja morant", "zion williamson", "anthony edwards", "lamelo ball",
            "cade cunningham", "paolo banchero", "chet holmgren", "victor wembanyama",
            "scoot henderson", "domantas sabonis", "caitlin clark", "rj barrett", "sabrina ionescu",
            "stephon castle", "shai gilgeous-alexander", "de'aaron fox", "devin booker",
            "michael jordan", "kobe bryant", "jalen green", "angel reese", "paige bueckers",
            "cooper flagg", "tyrese haliburton", "jayson tatum",
        ),
        terms=(
            "basketball", "nba", "college basketball", "ncaa basketball", "wnba", "point guard",
            "shooting guard", "small forward", "power forward", "hoops",
        ),
        teams=(
            "lakers", "celtics", "bulls", "warriors", "heat", "knicks", "nets", "raptors", "76ers",
            "hawks", "hornets", "wizards", "magic", "pacers", "bucks", "cavaliers", "pistons",
            "rockets", "mavericks", "spurs", "grizzlies", "pelicans", "thunder", "jazz", "nuggets",
            "timberwolves", "trail blazers", "kings", "suns", "clippers", "sparks", "fever", "aces",
        ),
    ),
    Sport.BASEBALL: SportKeywords(
        players=(
            "mike trout", "aaron judge", "shohei ohtani", "ronald acuna", "mookie betts",
            "freddie freeman", "juan soto", "yordan alvarez", "kyle tucker", "jose altuve",
            "alex bregman", "carlos correa", "fernando tatis", "manny machado", "xander bogaerts",
            "rafael devers", "vladimir guerrero", "bo bichette", "julio rodriguez",
            "adley rutschman", "gunnar henderson", "elly de la cruz", "jackson holliday",
            "wyatt flores", "paul skenes", "jackson chourio", "jordan lawlar", "junior caminero",
            "babe ruth", "mickey mantle", "ken griffey", "leo de vries", "roman anthony",
            "james wood", "jackson merrill", "pete crow-armstrong", "bobby witt", "corbin carroll",
            "wyatt langford", "dylan crews", "roki sasaki", "konnor griffin", "jacob wilson",
        ),
        terms=(
            "baseball", "mlb", "college baseball", "ncaa baseball", "pitcher", "outfielder",
            "infielder", "catcher", "shortstop", "designated hitter", "milb",
        ),
        teams=(
            "yankees", "red sox", "blue jays", "orioles", "rays", "white sox", "indians", "guardians",
            "tigers", "twins", "royals", "astros", "rangers", "athletics", "mariners", "angels",
            "dodgers", "giants", "padres", "rockies", "diamondbacks", "braves", "marlins", "mets",
            "phillies", "nationals", "pirates", "reds", "brewers", "cubs", "cardinals",
        ),
    ),
    Sport.HOCKEY: SportKeywords(
        players=(
            "auston matthews", "connor mcdavid", "leon draisaitl", "nathan mackinnon",
            "sidney crosby", "alex ovechkin", "david pastrnak", "artemi panarin", "mikko rantanen",
            "nikita kucherov", "steven stamkos", "brayden point", "victor hedman", "roman josi",
            "cale makar", "quinn hughes", "adam fox", "morgan rielly", "jake guentzel",
            "mitch marner", "william nylander", "connor bedard", "macklin celebrini",
            "wayne gretzky",
        ),
        terms=(
            "hockey", "nhl", "college hockey", "ncaa hockey", "goalie", "goaltender",
            "defenseman", "left wing", "right wing", "young guns",
        ),
        teams=(
            "red wings", "blackhawks", "bruins", "rangers", "maple leafs", "canadiens", "senators",
            "sabres", "panthers", "lightning", "capitals", "flyers", "devils", "islanders",
            "penguins", "blue jackets", "hurricanes", "predators", "blues", "wild", "avalanche",
            "stars", "oilers", "flames", "canucks", "sharks", "ducks", "golden knights", "kings",
            "coyotes", "jets", "kraken",
        ),
    ),
    Sport.SOCCER: SportKeywords(
        players=(
            "lionel messi", "cristiano ronaldo", "kylian mbappe", "erling haaland",
            "kevin de bruyne", "luka modric", "toni kroos", "virgil van dijk", "mohamed salah",
            "sadio mane", "robert lewandowski", "jude bellingham", "lamine yamal", "vinicius junior",
        ),
        terms=(
            "soccer", "fifa", "premier league", "la liga", "bundesliga", "serie a",
            "champions league", "uefa", "mls", "world cup",
        ),
        teams=(
            "manchester united", "manchester city", "barcelona", "real madrid", "bayern munich",
            "psg", "liverpool", "chelsea", "arsenal", "tottenham", "juventus", "ac milan",
            "inter milan", "inter miami",
        ),
    ),
    Sport.GOLF: SportKeywords(
        players=(
            "tiger woods", "rory mcilroy", "brooks koepka", "jon rahm", "scottie scheffler",
            "jordan spieth", "justin thomas", "collin morikawa", "viktor hovland",
            "patrick cantlay", "xander schauffele", "sam burns", "cameron young",
            "sahith theegala", "ludvig aberg", "nick dunlap",
        ),
        terms=(
            "golf", "liv golf", "pga", "pga tour", "liv tour", "masters", "us open",
            "pga championship", "open championship", "ryder cup", "presidents cup",
        ),
    ),
    Sport.RACING: SportKeywords(
        players=(
            "max verstappen", "lewis hamilton", "charles leclerc", "lando norris", "carlos sainz",
            "george russell", "fernando alonso", "sergio perez", "valtteri bottas",
            "daniel ricciardo", "oscar piastri", "kimi antonelli",
        ),
        terms=(
            "f1", "formula 1", "formula one", "racing", "grand prix", "mclaren", "ferrari",
            "mercedes", "red bull", "nascar", "indycar",
        ),
    ),
    Sport.WRESTLING: SportKeywords(
        terms=("wwe", "wrestling", "wrestler", "aew", "impact wrestling"),
    ),
    Sport.MMA: SportKeywords(
        terms=("ufc", "mma", "bellator"),
    ),
    Sport.BOXING: SportKeywords(
        terms=("boxing", "boxer"),
    ),
    Sport.TENNIS: SportKeywords(
        terms=("tennis", "wimbledon", "atp", "wta"),
    ),
    Sport.POKEMON: SportKeywords(
        terms=("pokemon", "pikachu", "charizard", "moltres", "zapdos", "articuno"),
    ),
    Sport.YUGIOH: SportKeywords(
        terms=("yugioh", "yu-gi-oh"),
    ),
    Sport.MAGIC: SportKeywords(
        terms=("magic the gathering", "mtg"),
    ),
}


# ---------------------------------------------------------------------------
# Flattened lookup index
# ---------------------------------------------------------------------------

_PLAYER_TIER = 0
_TERM_TIER = 1
_TEAM_TIER = 2


def _build_index() -> tuple[tuple[int, str, Sport], ...]:
    entries: list[tuple[int, str, Sport]] = []
    for tier, field in ((_PLAYER_TIER, "players"), (_TERM_TIER, "terms"), (_TEAM_TIER, "teams")):
        owners: Counter[str] = Counter()
        for keywords in SPORT_KEYWORDS.values():
            owners.update(set(getattr(keywords, field)))
        for sport, keywords in SPORT_KEYWORDS.items():
            for keyword in getattr(keywords, field):
                if owners[keyword] > 1:
                    continue
                entries.append((tier, keyword, sport))
    entries.sort(key=lambda entry: (entry[0], -len(entry[1]), entry[1]))
    return tuple(entries)


_KEYWORD_INDEX = _build_index()


def known_player_names() -> frozenset[str]:
    """Every curated player name (lowercase), across sports."""
    return frozenset(
        player for keywords in SPORT_KEYWORDS.values() for player in keywords.players
    )


def team_names() -> frozenset[str]:
    """Every curated team name (lowercase), ambiguous ones included."""
    return frozenset(
        team for keywords in SPORT_KEYWORDS.values() for team in keywords.teams
    )


def detect_sport_from_keywords(text: str | None) -> Sport | None:
    """
    Classify text by the first keyword hit in precedence order.

    Returns:
        The matched Sport, or None when nothing in the table matches.
    """
    text = normalize_title(text)
    if not text.strip():
        return None

    for tier, keyword, sport in _KEYWORD_INDEX:
        if phrase_pattern(keyword).search(text):
            logger.debug(
                "sport_keyword_hit",
                keyword=keyword,
                tier=tier,
                sport=sport.value,
            )
            return sport
    return None
