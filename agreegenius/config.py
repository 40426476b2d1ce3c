"""
Configuration and constants for the AgreeGenius crop advisory.
Centralizes paths, vocabularies, scoring weights, thresholds and gateway settings.
"""

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Base paths (project root = parent of 'agreegenius')
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"
RAW_DATA_DIR = DATA_DIR / "raw"

# ---------------------------------------------------------------------------
# Crop catalog source
# If the CSV is absent the embedded default catalog is used.
#
# Expected schema (list columns are '|' separated):
#   name, climates, soils, regions, water_requirement, investment_tier,
#   profitability, expected_yield, growth_period, market_price
# ---------------------------------------------------------------------------
CATALOG_FNAME = "crop_catalog.csv"
CATALOG_CSV_PATH = Path(os.environ.get("AGREEGENIUS_CATALOG_CSV", RAW_DATA_DIR / CATALOG_FNAME))
CATALOG_LIST_SEP = "|"

# ---------------------------------------------------------------------------
# Vocabularies (form dropdowns). Values outside these sets are still scored,
# they simply never earn the full-match points.
# ---------------------------------------------------------------------------
SOIL_TYPES: list[str] = [
    "alluvial", "black-cotton", "red", "laterite", "clay", "loam", "sandy", "silt",
]
CLIMATES: list[str] = [
    "tropical", "subtropical", "arid", "semi-arid", "temperate", "mediterranean",
]
SOIL_ALIASES: dict[str, str] = {
    "black cotton": "black-cotton", "black_cotton": "black-cotton", "black": "black-cotton",
    "regur": "black-cotton", "red laterite": "laterite", "clay loam": "loam",
    "sandy loam": "sandy",
}
CLIMATE_ALIASES: dict[str, str] = {
    "semi arid": "semi-arid", "semi_arid": "semi-arid", "semiarid": "semi-arid",
    "sub-tropical": "subtropical", "sub tropical": "subtropical",
}

# Ordinal scales
BUDGET_TIERS: dict[str, int] = {"low": 1, "medium": 2, "high": 3, "premium": 4}
UNKNOWN_BUDGET_LEVEL = 0           # below every crop: unrecognised tiers never earn budget points
WATER_AVAILABILITY_LEVELS: list[str] = ["scarce", "limited", "moderate", "abundant"]
WATER_REQUIREMENTS: list[str] = ["low", "medium", "high"]
PROFITABILITY_LEVELS: list[str] = ["low", "medium", "high"]

# Budget labels shown in the form (₹ per season)
BUDGET_LABELS: dict[str, str] = {
    "low":     "Under ₹50,000",
    "medium":  "₹50,000 - ₹2,00,000",
    "high":    "₹2,00,000 - ₹5,00,000",
    "premium": "Above ₹5,00,000",
}

# ---------------------------------------------------------------------------
# Investment tier → investment level (1-4)
# Derived from the lower bound of the tier's ₹/acre range.
# ---------------------------------------------------------------------------
INVESTMENT_LEVEL_BANDS: list[tuple[float, int]] = [
    (15_000, 1),
    (30_000, 2),
    (60_000, 3),
]
TOP_INVESTMENT_LEVEL = 4

# ---------------------------------------------------------------------------
# Scoring weights: (full match, partial credit)
# ---------------------------------------------------------------------------
CLIMATE_POINTS = (40, 10)
SOIL_POINTS    = (30, 5)
REGION_POINTS  = (20, 5)
BUDGET_POINTS  = (10, 0)
WORLDWIDE_REGION = "worldwide"

# Water term: crop water requirement → caller water availability → points
WATER_POINTS: dict[str, dict[str, int]] = {
    "high":   {"abundant": 20, "moderate": 10, "limited": 5,  "scarce": 0},
    "medium": {"abundant": 20, "moderate": 20, "limited": 10, "scarce": 5},
    "low":    {"abundant": 15, "moderate": 20, "limited": 20, "scarce": 15},
}
WATER_FULL_POINTS = 20
WATER_STRAIN_POINTS = 5   # at or below this the crop's water need is a risk

# Minimum raw score to be recommended
MIN_SCORE = 50
MIN_SCORE_WITH_WATER = 60

# ---------------------------------------------------------------------------
# Confidence display band
# confidence = clamp(score + U[0, JITTER_MAX), CONFIDENCE_FLOOR, CONFIDENCE_CEILING)
# ---------------------------------------------------------------------------
JITTER_MAX = 10.0
CONFIDENCE_FLOOR = 60.0
CONFIDENCE_CEILING = 95.0
TOP_K_CROPS = 3
MAX_RISKS = 3
MAX_BENEFITS = 3

# ---------------------------------------------------------------------------
# External inference gateway (crop image + scheme analysis)
# ---------------------------------------------------------------------------
INFERENCE_GATEWAY_URL = os.environ.get(
    "INFERENCE_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions"
)
INFERENCE_GATEWAY_API_KEY = os.environ.get("INFERENCE_GATEWAY_API_KEY")
INFERENCE_MODEL = os.environ.get("INFERENCE_MODEL", "google/gemini-2.5-flash")
INFERENCE_TIMEOUT = 60      # seconds
