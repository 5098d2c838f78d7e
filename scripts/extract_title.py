"""
Scorecard — Single Title Extraction

Runs the extraction pipeline on titles given on the command line (or one
per line on stdin) and prints the extracted fields as JSON. Uses the seed
dictionaries and the configured override table; no database needed.

Usage:
    python scripts/extract_title.py "2021 Topps Stadium Club Chrome 32 Babe Ruth Refractor PSA 10"
    cat titles.txt | python scripts/extract_title.py --sport
"""

from __future__ import annotations

import argparse
import json
import os
import sys

# Resolve project root so this script can be run from any working directory
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.engine import detect_sport_from_keywords, extract_all, load_name_overrides


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Extract structured card fields from listing titles.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/extract_title.py "PAUL SKENES 2024 BOWMAN CHROME SAPPHIRE RED /5 PSA 10"
  python scripts/extract_title.py --sport "2023 Bowman Chrome Prospects Junior Caminero #BCP-61"
""",
    )
    parser.add_argument("titles", nargs="*", help="Listing titles (stdin when omitted).")
    parser.add_argument(
        "--sport",
        action="store_true",
        help="Also classify sport from the keyword table (no network lookups).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    titles = args.titles or [line.strip() for line in sys.stdin if line.strip()]

    try:
        overrides = load_name_overrides()
    except ValueError as e:
        print(f"Invalid override table: {e}", file=sys.stderr)
        sys.exit(1)

    for title in titles:
        record = {"title": title, **extract_all(title, overrides=overrides).model_dump()}
        if args.sport:
            sport = detect_sport_from_keywords(title)
            record["sport"] = sport.value if sport else None
        print(json.dumps(record, ensure_ascii=False))


if __name__ == "__main__":
    main()
