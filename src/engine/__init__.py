from src.engine.dictionaries import SEED_DICTIONARIES, Dictionaries
from src.engine.extract import CardFields, extract_all
from src.engine.fields import (
    extract_brand,
    extract_card_number,
    extract_card_set,
    extract_card_type,
    extract_print_run,
    extract_year,
    is_autograph,
    is_rookie,
)
from src.engine.learning import learn_dictionaries
from src.engine.multiplier import calculate_multiplier
from src.engine.name_overrides import NameOverrides, load_name_overrides
from src.engine.player_name import extract_player_name, normalize_player_name
from src.engine.sport_keywords import detect_sport_from_keywords
from src.engine.summary import assemble_summary_title, clean_title

__all__ = [
    "CardFields",
    "Dictionaries",
    "NameOverrides",
    "SEED_DICTIONARIES",
    "assemble_summary_title",
    "calculate_multiplier",
    "clean_title",
    "detect_sport_from_keywords",
    "extract_all",
    "extract_brand",
    "extract_card_number",
    "extract_card_set",
    "extract_card_type",
    "extract_player_name",
    "extract_print_run",
    "extract_year",
    "is_autograph",
    "is_rookie",
    "learn_dictionaries",
    "load_name_overrides",
    "normalize_player_name",
]
