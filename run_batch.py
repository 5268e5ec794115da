#!/usr/bin/env python
"""
Command-line entry point for the listing grader.

Build a rules file from a scraped corpus:
    python run_batch.py build data/corpus.json --out data/category_rules.json --count 20

Grade one listing against it:
    python run_batch.py grade listing.json --rules data/category_rules.json
"""
import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from listing_grader.config import get_config
from listing_grader.normalization import normalize_listing, normalize_listings
from listing_grader.pipeline.grader import ListingGrader
from listing_grader.pipeline.orchestrator import run_batch
from listing_grader.storage import save_rules_file


def _read_json(path: str):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _read_best_sellers(path: str) -> list[str]:
    """JSON list of ids/URLs, or one per line."""
    text = Path(path).read_text(encoding="utf-8")
    if text.lstrip().startswith("["):
        return [str(item) for item in json.loads(text)]
    return [line.strip() for line in text.splitlines() if line.strip()]


def cmd_build(args) -> int:
    raw = _read_json(args.corpus)
    # Accept a bare list or an export object with a listings key
    if isinstance(raw, dict):
        raw = raw.get("listings") or raw.get("assets") or []
    corpus = normalize_listings(raw)

    best_sellers = _read_best_sellers(args.best_sellers) if args.best_sellers else None

    rules_file = run_batch(
        corpus,
        datetime.now(timezone.utc),
        count=args.count,
        percent=args.percent,
        best_sellers=best_sellers,
        max_workers=args.workers,
    )
    path = save_rules_file(rules_file, args.out)

    meta = rules_file.metadata
    print(f"Wrote {path}")
    print(f"  Categories: {meta.total_categories} ({len(meta.fallback_categories)} on fallback rules)")
    print(f"  Exemplars:  {meta.total_exemplars} from {meta.corpus_size} listings ({meta.selection})")
    print(
        f"  Confidence: high {meta.confidence_distribution['high']}, "
        f"medium {meta.confidence_distribution['medium']}, low {meta.confidence_distribution['low']}"
    )
    return 0


def cmd_grade(args) -> int:
    listing = normalize_listing(_read_json(args.listing))
    grader = ListingGrader.from_file(args.rules)
    result = grader.grade(listing, datetime.now(timezone.utc), category=args.category)
    print(result.model_dump_json(indent=2))
    return 0


def main() -> int:
    config = get_config()

    parser = argparse.ArgumentParser(description="Exemplar-based listing grader")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Build a rules file from a corpus")
    build.add_argument("corpus", help="Corpus JSON file (list of scraped listings)")
    build.add_argument(
        "--out",
        default=None,
        help=f"Rules file to write (default: {config.paths.rules_file})",
    )
    selection = build.add_mutually_exclusive_group()
    selection.add_argument("--count", type=int, help=f"Exemplars per category (default: {config.selection.top_n})")
    selection.add_argument("--percent", type=float, help="Share of each category to keep as exemplars")
    build.add_argument("--best-sellers", help="File of best-seller ids or URLs (JSON list or one per line)")
    build.add_argument("--workers", type=int, default=1, help="Worker threads for per-category stages")
    build.set_defaults(func=cmd_build)

    grade = subparsers.add_parser("grade", help="Grade one listing against a rules file")
    grade.add_argument("listing", help="Listing JSON file")
    grade.add_argument("--rules", default=None, help=f"Rules file (default: {config.paths.rules_file})")
    grade.add_argument("--category", help="Grade under this category instead of the listing's own")
    grade.set_defaults(func=cmd_grade)

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
