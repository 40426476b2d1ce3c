"""
Crop catalog: the static reference records the scorer ranks against.

The catalog is built once per process and never mutated afterwards:
  - DEFAULT_CATALOG_RECORDS is the embedded, versioned default (India-specific
    vocabulary, ₹ pricing, water requirement per crop).
  - A CSV placed at data/raw/crop_catalog.csv (or AGREEGENIUS_CATALOG_CSV)
    replaces it. If the file is absent the embedded default is used.

Integrity is checked at build time: names must be unique, every investment
tier must carry a ₹ amount so it maps to an investment level (1-4), and the
water/profitability values must come from the known scales.

Market prices are 2024-25 MSP / FRP figures where one exists, otherwise a
typical mandi modal price range.
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import pandas as pd

from agreegenius.config import (
    CATALOG_CSV_PATH,
    CATALOG_LIST_SEP,
    INVESTMENT_LEVEL_BANDS,
    TOP_INVESTMENT_LEVEL,
    WATER_REQUIREMENTS,
    PROFITABILITY_LEVELS,
)

log = logging.getLogger(__name__)

CATALOG_VERSION = "2024.2-in"

CATALOG_COLUMNS = [
    "name", "climates", "soils", "regions", "water_requirement",
    "investment_tier", "profitability", "expected_yield", "growth_period",
    "market_price",
]
REQUIRED_COLUMNS = CATALOG_COLUMNS[:7]


class CatalogError(ValueError):
    """Raised when catalog records fail integrity checks."""


@dataclass(frozen=True)
class CropCandidate:
    name: str
    climates: frozenset[str]
    soils: frozenset[str]
    regions: frozenset[str]
    water_requirement: str
    investment_tier: str
    investment_level: int
    profitability: str
    expected_yield: str = ""
    growth_period: str = ""
    market_price: str = ""


# ---------------------------------------------------------------------------
# Embedded default catalog
# ---------------------------------------------------------------------------
DEFAULT_CATALOG_RECORDS: list[dict] = [
    {
        "name": "Rice",
        "climates": ["tropical", "subtropical"],
        "soils": ["clay", "loam", "alluvial"],
        "regions": ["india", "west bengal", "punjab", "odisha", "andhra pradesh",
                    "tamil nadu", "chhattisgarh", "bangladesh", "asia"],
        "water_requirement": "high",
        "investment_tier": "₹20,000-30,000/acre",
        "profitability": "high",
        "expected_yield": "20-25 quintals/acre",
        "growth_period": "4-5 months (Kharif)",
        "market_price": "₹2,300/quintal (MSP)",
    },
    {
        "name": "Wheat",
        "climates": ["temperate", "subtropical", "semi-arid"],
        "soils": ["loam", "clay", "alluvial"],
        "regions": ["india", "punjab", "haryana", "uttar pradesh",
                    "madhya pradesh", "rajasthan", "bihar"],
        "water_requirement": "medium",
        "investment_tier": "₹16,000-22,000/acre",
        "profitability": "medium",
        "expected_yield": "18-22 quintals/acre",
        "growth_period": "4-5 months (Rabi)",
        "market_price": "₹2,275/quintal (MSP)",
    },
    {
        "name": "Maize",
        "climates": ["tropical", "subtropical", "temperate"],
        "soils": ["loam", "alluvial", "red", "sandy"],
        "regions": ["karnataka", "madhya pradesh", "bihar", "maharashtra",
                    "telangana", "andhra pradesh"],
        "water_requirement": "medium",
        "investment_tier": "₹15,000-22,000/acre",
        "profitability": "medium",
        "expected_yield": "20-28 quintals/acre",
        "growth_period": "3-4 months",
        "market_price": "₹2,225/quintal (MSP)",
    },
    {
        "name": "Cotton",
        "climates": ["arid", "semi-arid", "subtropical"],
        "soils": ["black-cotton", "sandy", "loam", "alluvial"],
        "regions": ["india", "gujarat", "maharashtra", "telangana", "punjab",
                    "haryana", "pakistan"],
        "water_requirement": "medium",
        "investment_tier": "₹30,000-45,000/acre",
        "profitability": "high",
        "expected_yield": "8-12 quintals/acre (kapas)",
        "growth_period": "5-6 months",
        "market_price": "₹7,121/quintal (MSP, medium staple)",
    },
    {
        "name": "Sugarcane",
        "climates": ["tropical", "subtropical"],
        "soils": ["loam", "clay", "alluvial", "black-cotton"],
        "regions": ["uttar pradesh", "maharashtra", "karnataka", "tamil nadu",
                    "bihar", "brazil"],
        "water_requirement": "high",
        "investment_tier": "₹60,000-90,000/acre",
        "profitability": "high",
        "expected_yield": "300-400 quintals/acre",
        "growth_period": "12-18 months",
        "market_price": "₹340/quintal (FRP)",
    },
    {
        "name": "Pearl Millet (Bajra)",
        "climates": ["arid", "semi-arid"],
        "soils": ["sandy", "loam", "red"],
        "regions": ["rajasthan", "gujarat", "haryana", "uttar pradesh", "africa"],
        "water_requirement": "low",
        "investment_tier": "₹8,000-12,000/acre",
        "profitability": "medium",
        "expected_yield": "8-12 quintals/acre",
        "growth_period": "2.5-3 months",
        "market_price": "₹2,625/quintal (MSP)",
    },
    {
        "name": "Chickpea (Chana)",
        "climates": ["semi-arid", "subtropical", "temperate"],
        "soils": ["black-cotton", "loam", "clay"],
        "regions": ["madhya pradesh", "rajasthan", "maharashtra", "karnataka",
                    "uttar pradesh"],
        "water_requirement": "low",
        "investment_tier": "₹10,000-15,000/acre",
        "profitability": "medium",
        "expected_yield": "6-8 quintals/acre",
        "growth_period": "3.5-4.5 months (Rabi)",
        "market_price": "₹5,440/quintal (MSP)",
    },
    {
        "name": "Mustard",
        "climates": ["semi-arid", "temperate", "subtropical"],
        "soils": ["loam", "sandy", "alluvial"],
        "regions": ["rajasthan", "haryana", "madhya pradesh", "uttar pradesh",
                    "west bengal"],
        "water_requirement": "low",
        "investment_tier": "₹9,000-14,000/acre",
        "profitability": "medium",
        "expected_yield": "6-8 quintals/acre",
        "growth_period": "4-5 months (Rabi)",
        "market_price": "₹5,650/quintal (MSP)",
    },
    {
        "name": "Groundnut",
        "climates": ["tropical", "semi-arid", "subtropical"],
        "soils": ["sandy", "red", "loam"],
        "regions": ["gujarat", "andhra pradesh", "tamil nadu", "karnataka",
                    "rajasthan"],
        "water_requirement": "low",
        "investment_tier": "₹18,000-25,000/acre",
        "profitability": "high",
        "expected_yield": "8-10 quintals/acre (pods)",
        "growth_period": "3.5-4.5 months",
        "market_price": "₹6,783/quintal (MSP)",
    },
    {
        "name": "Soybean",
        "climates": ["tropical", "subtropical", "temperate"],
        "soils": ["black-cotton", "loam", "clay"],
        "regions": ["madhya pradesh", "maharashtra", "rajasthan", "karnataka"],
        "water_requirement": "medium",
        "investment_tier": "₹12,000-18,000/acre",
        "profitability": "medium",
        "expected_yield": "8-10 quintals/acre",
        "growth_period": "3.5-4 months (Kharif)",
        "market_price": "₹4,892/quintal (MSP)",
    },
    {
        "name": "Potato",
        "climates": ["temperate", "subtropical"],
        "soils": ["sandy", "loam", "alluvial"],
        "regions": ["worldwide"],
        "water_requirement": "medium",
        "investment_tier": "₹45,000-70,000/acre",
        "profitability": "high",
        "expected_yield": "80-120 quintals/acre",
        "growth_period": "3-4 months",
        "market_price": "₹800-1,500/quintal (mandi modal)",
    },
    {
        "name": "Tea",
        "climates": ["tropical", "subtropical"],
        "soils": ["laterite", "loam", "red"],
        "regions": ["assam", "west bengal", "darjeeling", "kerala", "tamil nadu",
                    "nilgiris"],
        "water_requirement": "high",
        "investment_tier": "₹1,00,000-1,50,000/acre",
        "profitability": "high",
        "expected_yield": "8-10 quintals/acre (made tea)",
        "growth_period": "Perennial (first plucking after 3 years)",
        "market_price": "₹200-250/kg (auction average)",
    },
]


# ---------------------------------------------------------------------------
# Building and validation
# ---------------------------------------------------------------------------

_AMOUNT_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")


def investment_level_for(tier: str) -> int:
    """
    Map an investment tier string (e.g. '₹20,000-30,000/acre') to a level 1-4
    using the lower bound of the range.
    """
    match = _AMOUNT_RE.search(tier or "")
    if not match:
        raise CatalogError(f"Investment tier {tier!r} has no ₹ amount to derive a level from.")
    lower = float(match.group(0).replace(",", ""))
    for upper_bound, level in INVESTMENT_LEVEL_BANDS:
        if lower < upper_bound:
            return level
    return TOP_INVESTMENT_LEVEL


def _as_set(value) -> frozenset[str]:
    """Accept a list/tuple/set or a separator-joined string; normalise to lowercase."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return frozenset()
    if isinstance(value, str):
        items = value.split(CATALOG_LIST_SEP)
    else:
        items = list(value)
    return frozenset(str(v).strip().lower() for v in items if str(v).strip())


def _text(value) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def make_candidate(record: dict) -> CropCandidate:
    """Build one CropCandidate from a raw record, deriving its investment level."""
    name = _text(record.get("name"))
    if not name:
        raise CatalogError(f"Catalog record without a name: {record}")

    water = _text(record.get("water_requirement")).lower()
    if water not in WATER_REQUIREMENTS:
        raise CatalogError(f"{name}: water_requirement {water!r} not in {WATER_REQUIREMENTS}")
    profitability = _text(record.get("profitability")).lower()
    if profitability not in PROFITABILITY_LEVELS:
        raise CatalogError(f"{name}: profitability {profitability!r} not in {PROFITABILITY_LEVELS}")

    tier = _text(record.get("investment_tier"))
    return CropCandidate(
        name=name,
        climates=_as_set(record.get("climates")),
        soils=_as_set(record.get("soils")),
        regions=_as_set(record.get("regions")),
        water_requirement=water,
        investment_tier=tier,
        investment_level=investment_level_for(tier),
        profitability=profitability,
        expected_yield=_text(record.get("expected_yield")),
        growth_period=_text(record.get("growth_period")),
        market_price=_text(record.get("market_price")),
    )


def check_unique_names(catalog) -> None:
    """Raise CatalogError if two crops share a name (case-insensitive)."""
    seen: set[str] = set()
    dupes = []
    for crop in catalog:
        key = crop.name.lower()
        if key in seen:
            dupes.append(crop.name)
        seen.add(key)
    if dupes:
        raise CatalogError(f"Duplicate crop names in catalog: {dupes}")


def build_catalog(records: list[dict]) -> tuple[CropCandidate, ...]:
    """
    Build an immutable catalog from raw records.
    Raises CatalogError on duplicate names or malformed records.
    """
    catalog = tuple(make_candidate(r) for r in records)
    check_unique_names(catalog)
    return catalog


def load_catalog(csv_path: Path | None = None) -> tuple[CropCandidate, ...]:
    """
    Load the crop catalog from CSV.

    With no csv_path the configured CATALOG_CSV_PATH is tried and the embedded
    default is used if that file is absent. An explicit csv_path must exist.
    A CSV that exists but lacks required columns is an error, not a fallback.
    """
    path = Path(csv_path) if csv_path is not None else CATALOG_CSV_PATH
    if not path.exists():
        if csv_path is not None:
            raise CatalogError(f"Catalog CSV not found: {path}")
        log.debug("Catalog CSV not found at %s — using embedded catalog v%s.", path, CATALOG_VERSION)
        return build_catalog(DEFAULT_CATALOG_RECORDS)

    df = pd.read_csv(path, dtype=str)
    df = df.set_axis([c.strip().lower() for c in df.columns], axis=1)
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise CatalogError(f"Catalog CSV {path} missing columns: {missing}. Available: {list(df.columns)}")

    df = df.dropna(subset=["name"])
    records = df.to_dict("records")
    catalog = build_catalog(records)
    log.info("Loaded crop catalog from %s (%d crops).", path, len(catalog))
    return catalog


@lru_cache(maxsize=1)
def get_default_catalog() -> tuple[CropCandidate, ...]:
    """Process-wide catalog, built once on first use."""
    return load_catalog()


def catalog_to_frame(catalog) -> pd.DataFrame:
    """Flatten a catalog into a DataFrame (list columns joined with the CSV separator)."""
    rows = []
    for crop in catalog:
        rows.append({
            "name":              crop.name,
            "climates":          CATALOG_LIST_SEP.join(sorted(crop.climates)),
            "soils":             CATALOG_LIST_SEP.join(sorted(crop.soils)),
            "regions":           CATALOG_LIST_SEP.join(sorted(crop.regions)),
            "water_requirement": crop.water_requirement,
            "investment_tier":   crop.investment_tier,
            "investment_level":  crop.investment_level,
            "profitability":     crop.profitability,
            "expected_yield":    crop.expected_yield,
            "growth_period":     crop.growth_period,
            "market_price":      crop.market_price,
        })
    return pd.DataFrame(rows)
