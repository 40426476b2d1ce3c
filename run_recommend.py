"""
One-command crop recommendation from the terminal.
Run from project root:
    python run_recommend.py --climate tropical --soil clay --location "Cuttack, Odisha" --budget medium
    python run_recommend.py --climate arid --soil sandy --location Rajasthan --budget low --water scarce --csv out.csv
"""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

# Ensure project root is on path
PROJECT_ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(PROJECT_ROOT))

from agreegenius.config import BUDGET_TIERS, WATER_AVAILABILITY_LEVELS, CATALOG_CSV_PATH
from agreegenius.conditions import FarmConditions, InvalidConditionsError
from agreegenius.crop_catalog import CATALOG_VERSION, CatalogError, load_catalog
from agreegenius.scorer import SuitabilityScorer
from agreegenius.report import recommendations_to_frame


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rank crops for a farm's soil, climate, budget and water.")
    parser.add_argument("--location", default="", help="District, state or country")
    parser.add_argument("--soil", required=True, help="Soil type (e.g. clay, loam, black-cotton)")
    parser.add_argument("--climate", required=True, help="Climate (e.g. tropical, semi-arid)")
    parser.add_argument("--budget", required=True, choices=list(BUDGET_TIERS), help="Budget tier")
    parser.add_argument("--water", default=None, choices=WATER_AVAILABILITY_LEVELS, help="Water availability (optional)")
    parser.add_argument("--farm-size", type=float, default=None, help="Farm size in acres (informational)")
    parser.add_argument("--catalog", type=Path, default=None, help="Crop catalog CSV; must exist (default: data/raw/crop_catalog.csv if present, else embedded)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the confidence jitter")
    parser.add_argument("--csv", type=Path, default=None, help="Also write the ranking to this CSV")
    return parser


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = build_parser().parse_args(argv)

    try:
        conditions = FarmConditions.from_form({
            "location": args.location,
            "soil_type": args.soil,
            "climate": args.climate,
            "budget_tier": args.budget,
            "water_availability": args.water,
            "farm_size_acres": args.farm_size,
        })
    except InvalidConditionsError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    try:
        catalog = load_catalog(args.catalog)
    except CatalogError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2
    scorer = SuitabilityScorer(catalog, rng_factory=lambda: np.random.default_rng(args.seed))
    recommendations = scorer.recommend(conditions)

    csv_source = args.catalog or (CATALOG_CSV_PATH if CATALOG_CSV_PATH.exists() else None)
    source = f"catalog {csv_source}" if csv_source else f"catalog v{CATALOG_VERSION}"
    print(f"AgreeGenius crop advisory ({source}, {len(catalog)} crops)")
    print("=" * 50)
    if not recommendations:
        print("No suitable crop found for these conditions.")
        return 0

    for rec in recommendations:
        print(f"\n#{rec.rank} {rec.name} — confidence {rec.confidence:.1f}% (score {rec.score})")
        print(f"  {rec.suitability_reason}")
        print(f"  Yield: {rec.expected_yield} | Period: {rec.growth_period} | Price: {rec.market_price}")
        print(f"  Investment: {rec.investment_tier}")
        print(f"  Risks:    {', '.join(rec.risks)}")
        print(f"  Benefits: {', '.join(rec.benefits)}")

    if args.csv:
        args.csv.parent.mkdir(parents=True, exist_ok=True)
        recommendations_to_frame(recommendations).to_csv(args.csv, index=False)
        print(f"\nSaved to: {args.csv}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
