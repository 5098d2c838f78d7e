"""
Scorecard — Backfill Script

Re-runs pipeline stages over every stored card and prints the
updated / unchanged / errors counters for each job.

Usage:
    python scripts/backfill.py --job extract
    python scripts/backfill.py --job sport --all-sports
    python scripts/backfill.py
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Resolve project root so this script can be run from any working directory
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.config import BackfillJob
from src.main import main as run_main


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Re-run Scorecard extraction, sport detection or derived fields over stored cards.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/backfill.py --job extract
  python scripts/backfill.py --job sport
  python scripts/backfill.py --job sport --all-sports
  python scripts/backfill.py --job derived
""",
    )
    parser.add_argument(
        "--job",
        type=str,
        default=BackfillJob.ALL.value,
        choices=[job.value for job in BackfillJob],
        help="extract | sport | derived | all (default: all).",
    )
    parser.add_argument(
        "--all-sports",
        action="store_true",
        help="Re-detect sport for every card, not only those still 'Unknown'.",
    )
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    job = BackfillJob(args.job)

    try:
        reports = await run_main(job=job, only_unknown_sport=not args.all_sports)
    except Exception as e:
        print(f"Backfill failed: {e}", file=sys.stderr)
        sys.exit(1)

    for report in reports:
        status = " (stopped early)" if report.stopped else ""
        print(
            f"{report.job.value:<8} updated={report.updated} "
            f"unchanged={report.unchanged} errors={report.errors}{status}"
        )
    if any(report.errors for report in reports):
        sys.exit(2)


if __name__ == "__main__":
    asyncio.run(main())
