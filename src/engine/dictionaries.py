"""
Scorecard — Term Dictionaries

Shared vocabulary every extractor uses to recognize non-player, non-numeric
tokens in a listing title:

- Card sets: canonical set name -> surface forms seen in titles
- Brands: card manufacturers
- Card types: parallels / colours / finishes ("Refractor", "Lunar Glow")
- Teams and cities: only ever used to strip false positives off player names
- Noise: grading vocabulary, marketing filler, product fragments

Dictionaries is immutable. The learning step (engine/learning.py) returns a
new instance with corpus-observed terms layered on top of the seed tables;
extractors receive it explicitly and never consult hidden global state.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Mapping

from pydantic import BaseModel, ConfigDict

from src.engine.sport_keywords import known_player_names, team_names


# ---------------------------------------------------------------------------
# Seed tables: card sets (canonical -> surface forms)
# The canonical name, lowercased, is always a surface form too.
# ---------------------------------------------------------------------------

SEED_CARD_SETS: dict[str, tuple[str, ...]] = {
    # Bowman
    "Bowman Chrome Draft 1st": ("bowman draft chrome 1st", "bowman chrome draft 1st edition"),
    "Bowman Chrome Draft": ("bowman draft chrome",),
    "Bowman Chrome Prospects": ("bowman chrome prospect",),
    "Bowman Chrome Sapphire": ("bowman sapphire",),
    "Bowman University Chrome": ("bowman chrome university", "bowman u chrome"),
    "Bowman Chrome": (),
    "Bowman Draft": (),
    "Bowman's Best": ("bowmans best", "bowman best"),
    "Bowman Sterling": (),
    "Bowman Platinum": (),
    "Bowman": (),
    # Topps
    "Topps Stadium Club Chrome": (),
    "Stadium Club Chrome": (),
    "Topps Stadium Club": (),
    "Stadium Club": (),
    "Topps Chrome Sapphire": ("topps sapphire",),
    "Topps Chrome Update": (),
    "Topps Chrome": (),
    "Topps Finest": (),
    "Topps Heritage": (),
    "Topps Update": ("topps update series",),
    "Topps Series 1": ("topps series one",),
    "Topps Series 2": ("topps series two",),
    "Topps Now": (),
    "Topps Inception": (),
    "Topps Tribute": (),
    "Topps Dynasty": (),
    "Topps Triple Threads": (),
    "Topps Museum Collection": (),
    "Topps Cosmic Chrome": ("cosmic chrome",),
    "Topps Gold Label": (),
    "Topps Archives": (),
    "Topps Gypsy Queen": ("gypsy queen",),
    "Topps Allen & Ginter": ("allen & ginter", "allen and ginter", "allen ginter"),
    "Topps": (),
    # Panini
    "Panini Donruss Optic": (),
    "Donruss Optic": ("optic donruss",),
    "Panini Donruss": (),
    "Donruss": (),
    "Panini Prizm": (),
    "Prizm": (),
    "Panini Select": (),
    "Panini Mosaic": (),
    "Panini Contenders": (),
    "Panini Chronicles": (),
    "Panini Phoenix": (),
    "Panini Spectra": (),
    "Panini Absolute": (),
    "Panini Certified": (),
    "Panini Obsidian": (),
    "Panini Prestige": (),
    "Panini Hoops": ("nba hoops",),
    "Panini Instant": (),
    "National Treasures": ("panini national treasures",),
    "Flawless": ("panini flawless",),
    "Immaculate": ("panini immaculate",),
    "Panini": (),
    # Others
    "Upper Deck": (),
    "Fleer": (),
    "Leaf": (),
    "Score": (),
    "Skybox": ("sky box",),
}

# Activated only when observed in the stored corpus (see engine/learning.py)
LEARNABLE_CARD_SETS: dict[str, tuple[str, ...]] = {
    "Bowman Mega Box Chrome": ("bowman chrome mega box", "bowman mega box"),
    "Bowman Chrome Mini": (),
    "Topps Chrome Black": (),
    "Topps Chrome Platinum Anniversary": ("topps chrome platinum",),
    "Topps Chrome Formula 1": ("topps chrome f1", "topps chrome formula one"),
    "Topps Chrome UEFA": ("topps chrome ucl", "topps chrome uefa champions league"),
    "Topps Big League": ("big league",),
    "Topps Opening Day": ("opening day",),
    "Topps Fire": (),
    "Topps Pristine": (),
    "Topps Holiday": (),
    "Panini Crown Royale": ("crown royale",),
    "Panini Rookies & Stars": ("rookies & stars", "rookies and stars"),
    "Panini Zenith": (),
    "Panini Black": (),
    "Panini Origins": (),
    "Panini Luminance": (),
    "Panini Illusions": (),
    "Panini Playoff": (),
    "Totally Certified": (),
    "Press Pass": (),
    "Skybox E-X2001": ("e-x2001", "ex2001", "skybox ex2001"),
    "Upper Deck Young Guns": (),
    "Upper Deck SP Authentic": ("sp authentic",),
    "O-Pee-Chee": ("opc", "o pee chee"),
    "Pacific": (),
    "Sage": (),
}

# ---------------------------------------------------------------------------
# Seed tables: brands (canonical manufacturer -> surface forms)
# ---------------------------------------------------------------------------

SEED_BRANDS: dict[str, tuple[str, ...]] = {
    "Bowman": (),
    "Topps": (),
    "Panini": (),
    "Donruss": (),
    "Upper Deck": (),
    "Fleer": (),
    "Leaf": (),
    "Score": (),
    "Skybox": ("sky box",),
    "Pacific": (),
    "O-Pee-Chee": ("opc",),
    "Playoff": (),
    "Sage": (),
}

# ---------------------------------------------------------------------------
# Seed tables: card types (parallels, colours, finishes)
# ---------------------------------------------------------------------------

SEED_CARD_TYPES: frozenset[str] = frozenset({
    # Colours
    "Red", "Blue", "Green", "Gold", "Silver", "Orange", "Purple", "Pink", "Black",
    "White", "Yellow", "Aqua", "Teal", "Bronze", "Emerald", "Ruby", "Sapphire",
    "Neon Green", "Sky Blue", "Light Blue", "Rose Gold", "Black Gold",
    # Finishes
    "Refractor", "Xfractor", "Superfractor", "Logofractor", "Mojo", "Shimmer", "Wave",
    "Raywave", "Speckle", "Atomic", "Mini Diamond", "Cracked Ice", "Holo", "Lazer",
    "Hyper", "Scope", "Pulsar", "Disco", "Shock", "Velocity", "Camo", "Tie-Dye",
    "Snakeskin", "Zebra", "Tiger Stripe", "Sepia", "Geometric", "Lava", "Fast Break",
    "Choice", "Genesis", "Nebula", "Stained Glass", "Prizm Silver",
    # Named parallels
    "Lunar Glow", "Silver Prizm", "Silver Wave Prizm", "Gold Refractor", "Blue Refractor",
    "Green Refractor", "Orange Refractor", "Red Refractor", "Purple Refractor",
    "Black Refractor", "Gold Wave", "Blue Wave", "Red Wave", "Color Blast", "Kaboom",
    "Downtown", "Helmet Heroes", "Base",
})

LEARNABLE_CARD_TYPES: frozenset[str] = frozenset({
    "Titanium", "Carbon", "Rainbow", "Holographic", "Legacy", "Anniversary", "Platinum",
    "Magenta", "Fuchsia", "Copper", "Vintage Stock", "Independence Day", "Mother's Day",
    "Father's Day", "Clear", "Printing Plate", "Sparkle", "Foil", "Galactic",
    "Pink Ice", "Blue Ice", "Red Ice", "Purple Ice", "Orange Ice", "Ice", "Hyper Pink",
    "Reptilian", "Alligator", "Peacock", "Dragon Scale", "Marble", "Cosmic", "Aurora",
})

# Colour x finish pairs composed into new card types when observed together
PARALLEL_COLORS: tuple[str, ...] = (
    "red", "blue", "green", "gold", "silver", "orange", "purple", "pink", "black",
    "white", "yellow", "aqua", "teal", "bronze", "magenta", "sky blue", "neon green",
)
PARALLEL_FINISHES: tuple[str, ...] = (
    "refractor", "xfractor", "wave", "shimmer", "mojo", "speckle", "lava", "ice",
    "raywave", "mini diamond", "cracked ice", "prizm", "holo", "lazer", "scope", "atomic",
)

# ---------------------------------------------------------------------------
# Seed tables: cities (teams come from the sport keyword table)
# No "la": it collides with the "De La Cruz" particle.
# ---------------------------------------------------------------------------

SEED_CITIES: frozenset[str] = frozenset({
    "atlanta", "baltimore", "boston", "brooklyn", "buffalo", "charlotte", "chicago",
    "cincinnati", "cleveland", "colorado", "dallas", "denver", "detroit", "golden state",
    "green bay", "houston", "indiana", "indianapolis", "jacksonville", "kansas city",
    "las vegas", "los angeles", "memphis", "miami", "milwaukee", "minnesota",
    "new england", "new orleans", "new york", "oakland", "oklahoma city", "orlando",
    "philadelphia", "phoenix", "pittsburgh", "portland", "sacramento", "san antonio",
    "san diego", "san francisco", "seattle", "st louis", "tampa bay", "tennessee",
    "texas", "toronto", "utah", "washington", "arizona", "carolina", "montreal",
    "edmonton", "calgary", "vancouver", "winnipeg", "ottawa",
})

# ---------------------------------------------------------------------------
# Seed tables: grading vocabulary, marketing noise, product fragments
# ---------------------------------------------------------------------------

SEED_NOISE: frozenset[str] = frozenset({
    # Grading
    "psa", "bgs", "sgc", "cgc", "csg", "hga", "bvg", "gma", "beckett", "gem mint",
    "gem mt", "gem", "mint", "mt", "nm", "nm-mt", "near mint", "pristine", "black label",
    "graded", "ungraded", "raw", "slab", "slabbed", "pop", "population", "cert",
    "authentic", "authenticated", "dna",
    # Marketing filler
    "premium", "box set", "logo", "hot", "invest", "investment", "rare", "ultra rare",
    "l@@k", "look", "wow", "must see", "sharp", "beautiful", "gorgeous", "stunning",
    "centered", "well centered", "case hit", "ssp", "sp", "short print", "new", "sealed",
    "free shipping", "read", "hof", "goat", "legend", "mystery", "box", "item", "items",
    "pack", "packs", "break", "lot", "investment grade",
    # Card vocabulary
    "card", "cards", "rookie", "rookies", "rc", "1st", "first", "debut", "young guns",
    "auto", "autos", "autograph", "autographs", "autographed", "signed", "signature",
    "signatures", "on card", "sticker", "prospect", "prospects", "draft", "insert",
    "inserts", "parallel", "numbered", "serial", "serial numbered", "patch", "jersey",
    "relic", "memorabilia", "variation", "var", "image", "photo", "edition",
    "1st edition", "base", "chrome", "update", "series", "pro debut", "rated rookie",
    "rookie ticket", "emergent", "supernatural", "instant impact", "my house",
    "fireworks", "concourse", "essentials", "electricity", "future stars",
    "all-star", "all star", "top prospects", "top prospect", "dual", "triple", "team",
    # Sports and leagues
    "football", "basketball", "baseball", "hockey", "soccer", "golf", "racing", "nfl",
    "nba", "mlb", "nhl", "wnba", "ncaa", "ufc", "mma", "wwe", "aew", "f1", "formula 1",
    "pokemon", "uefa", "fifa", "usa",
    # Product fragments
    "topps", "bowman", "panini", "donruss", "fleer", "leaf", "upper deck", "prizm",
    "optic", "mosaic", "select", "finest", "heritage", "sapphire", "stadium club",
    "contenders", "prestige", "chronicles", "hoops", "phoenix", "spectra", "absolute",
    "certified", "obsidian", "immaculate", "flawless", "national treasures", "platinum",
    "bowman's best", "archives", "gallery", "metal", "skybox", "instant", "university",
    "gypsy queen", "allen & ginter", "big league", "opening day", "international",
})


# ---------------------------------------------------------------------------
# Value object
# ---------------------------------------------------------------------------

def surface_pairs(table: Mapping[str, Iterable[str]]) -> tuple[tuple[str, str], ...]:
    """
    Flatten {canonical: surfaces} into sorted (surface, canonical) pairs.

    The canonical name (lowercased) is always included as a surface form.
    Sorted longest surface first, then alphabetically, so iteration order is
    deterministic and longest-first.
    """
    pairs: set[tuple[str, str]] = set()
    for canonical, surfaces in table.items():
        pairs.add((canonical.lower(), canonical))
        for surface in surfaces:
            pairs.add((surface.lower(), canonical))
    return tuple(sorted(pairs, key=lambda pair: (-len(pair[0]), pair[0], pair[1])))


class Dictionaries(BaseModel):
    """Immutable snapshot of every vocabulary the extractors consult."""

    model_config = ConfigDict(frozen=True)

    card_sets: tuple[tuple[str, str], ...]      # (surface, canonical)
    brands: tuple[tuple[str, str], ...]         # (surface, canonical)
    card_types: frozenset[str]                  # canonical names
    teams: frozenset[str]                       # teams + cities, lowercase
    noise: frozenset[str]                       # lowercase
    players: frozenset[str]                     # curated player names, lowercase

    def card_type_pairs(self) -> tuple[tuple[str, str], ...]:
        return _card_type_pairs(self.card_types)

    def known_terms(self) -> frozenset[str]:
        """Every non-player term, lowercased."""
        return _known_terms(self)

    def is_known_term(self, text: str) -> bool:
        return " ".join(text.lower().split()) in self.known_terms()

    def with_additions(
        self,
        card_sets: Mapping[str, Iterable[str]] | None = None,
        card_types: Iterable[str] = (),
    ) -> "Dictionaries":
        """Return a new instance with extra sets/types merged in."""
        merged_sets = set(self.card_sets)
        if card_sets:
            merged_sets.update(surface_pairs(card_sets))
        return self.model_copy(update={
            "card_sets": tuple(
                sorted(merged_sets, key=lambda pair: (-len(pair[0]), pair[0], pair[1]))
            ),
            "card_types": self.card_types | frozenset(card_types),
        })


@lru_cache(maxsize=32)
def _card_type_pairs(card_types: frozenset[str]) -> tuple[tuple[str, str], ...]:
    return tuple(sorted(
        ((name.lower(), name) for name in card_types),
        key=lambda pair: (-len(pair[0]), pair[0]),
    ))


@lru_cache(maxsize=32)
def _known_terms(dictionaries: Dictionaries) -> frozenset[str]:
    terms: set[str] = set()
    terms.update(surface for surface, _ in dictionaries.card_sets)
    terms.update(canonical.lower() for _, canonical in dictionaries.card_sets)
    terms.update(surface for surface, _ in dictionaries.brands)
    terms.update(name.lower() for name in dictionaries.card_types)
    terms.update(dictionaries.teams)
    terms.update(dictionaries.noise)
    return frozenset(terms)


def build_seed_dictionaries() -> Dictionaries:
    return Dictionaries(
        card_sets=surface_pairs(SEED_CARD_SETS),
        brands=surface_pairs(SEED_BRANDS),
        card_types=SEED_CARD_TYPES,
        teams=team_names() | SEED_CITIES,
        noise=SEED_NOISE,
        players=known_player_names(),
    )


SEED_DICTIONARIES = build_seed_dictionaries()
