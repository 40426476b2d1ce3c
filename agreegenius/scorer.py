"""
Suitability scorer: rank the crop catalog against one farmer's conditions.

Raw score (weighted sum with partial-credit floors):
    climate  40 / 10   conditions.climate in crop.climates
    soil     30 / 5    conditions.soil_type in crop.soils
    region   20 / 5    location contains / is contained by a region keyword,
                       or the crop is grown 'worldwide'
    budget   10 / 0    budget level >= crop investment level
    water    0-20      only when water availability is given (WATER_POINTS table)

Threshold: 50, or 60 when the water term applies.

Ranking:
    1. score every crop (deterministic)
    2. drop crops below the threshold
    3. confidence = clamp(score + U[0, 10), 60, 95), one draw per survivor
    4. stable sort by confidence, descending
    5. keep the top 3 and attach risks / benefits

The jitter only changes the displayed confidence and the order among
survivors; it never decides which crops pass the threshold.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from agreegenius.config import (
    CLIMATE_POINTS,
    SOIL_POINTS,
    REGION_POINTS,
    BUDGET_POINTS,
    WATER_POINTS,
    WATER_FULL_POINTS,
    WATER_STRAIN_POINTS,
    WORLDWIDE_REGION,
    MIN_SCORE,
    MIN_SCORE_WITH_WATER,
    JITTER_MAX,
    CONFIDENCE_FLOOR,
    CONFIDENCE_CEILING,
    TOP_K_CROPS,
)
from agreegenius.advisory import build_risks, build_benefits, build_suitability_reason
from agreegenius.crop_catalog import CropCandidate, check_unique_names, get_default_catalog

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CropScore:
    crop: CropCandidate
    score: int
    climate: int
    soil: int
    region: int
    budget: int
    water: int | None
    reasons: tuple[str, ...]
    region_match: bool
    threshold: int

    @property
    def passed(self) -> bool:
        return self.score >= self.threshold


@dataclass
class ScoredRecommendation:
    name: str
    confidence: float
    score: int
    suitability_reason: str
    expected_yield: str
    growth_period: str
    investment_tier: str
    market_price: str
    profitability: str
    water_requirement: str
    risks: list[str] = field(default_factory=list)
    benefits: list[str] = field(default_factory=list)
    rank: int = 0

    def to_dict(self) -> dict:
        return {
            "rank":               self.rank,
            "name":               self.name,
            "confidence":         self.confidence,
            "score":              self.score,
            "suitability_reason": self.suitability_reason,
            "expected_yield":     self.expected_yield,
            "growth_period":      self.growth_period,
            "investment_tier":    self.investment_tier,
            "market_price":       self.market_price,
            "profitability":      self.profitability,
            "water_requirement":  self.water_requirement,
            "risks":              list(self.risks),
            "benefits":           list(self.benefits),
        }


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def threshold_for(conditions) -> int:
    return MIN_SCORE_WITH_WATER if conditions.uses_water else MIN_SCORE


def region_matches(location: str, regions) -> bool:
    """Case-insensitive keyword match in either direction; 'worldwide' always matches."""
    loc = (location or "").strip().lower()
    for region in regions:
        if region == WORLDWIDE_REGION:
            return True
        if loc and (region in loc or loc in region):
            return True
    return False


def score_crop(conditions, crop: CropCandidate) -> CropScore:
    """Deterministic raw score and reasons for one crop (no jitter)."""
    reasons = []

    if conditions.climate in crop.climates:
        climate_pts = CLIMATE_POINTS[0]
        reasons.append(f"optimal {conditions.climate} climate conditions")
    else:
        climate_pts = CLIMATE_POINTS[1]
        reasons.append(f"adaptable to {conditions.climate} climate with proper management")

    if conditions.soil_type in crop.soils:
        soil_pts = SOIL_POINTS[0]
        reasons.append(f"excellent {conditions.soil_type} soil compatibility")
    else:
        soil_pts = SOIL_POINTS[1]
        reasons.append(f"moderate {conditions.soil_type} soil adaptation possible")

    region_match = region_matches(conditions.location, crop.regions)
    if region_match:
        region_pts = REGION_POINTS[0]
        reasons.append("proven success in your region")
    else:
        region_pts = REGION_POINTS[1]
        reasons.append("emerging crop for your area")

    if conditions.budget_level >= crop.investment_level:
        budget_pts = BUDGET_POINTS[0]
        reasons.append("fits within your budget range")
    else:
        budget_pts = BUDGET_POINTS[1]

    water_pts = None
    if conditions.uses_water:
        avail = conditions.water_availability
        water_pts = WATER_POINTS.get(crop.water_requirement, {}).get(avail, 0)
        if water_pts >= WATER_FULL_POINTS:
            reasons.append(f"water needs well matched to {avail} water availability")
        elif water_pts > WATER_STRAIN_POINTS:
            reasons.append(f"manageable water needs with {avail} water availability")
        else:
            reasons.append(f"{crop.water_requirement} water needs strain {avail} water supply")

    total = climate_pts + soil_pts + region_pts + budget_pts + (water_pts or 0)
    return CropScore(
        crop=crop,
        score=total,
        climate=climate_pts,
        soil=soil_pts,
        region=region_pts,
        budget=budget_pts,
        water=water_pts,
        reasons=tuple(reasons),
        region_match=region_match,
        threshold=threshold_for(conditions),
    )


def score_catalog(conditions, catalog) -> list[CropScore]:
    """Score every crop, in catalog order."""
    scores = [score_crop(conditions, crop) for crop in catalog]
    for s in scores:
        log.debug("%s: %d (threshold %d)", s.crop.name, s.score, s.threshold)
    return scores


def _confidence(score: int, rng) -> float:
    jittered = score + float(rng.uniform(0.0, JITTER_MAX))
    return round(min(CONFIDENCE_CEILING, max(CONFIDENCE_FLOOR, jittered)), 1)


def _to_recommendation(crop_score: CropScore, conditions, confidence: float) -> ScoredRecommendation:
    crop = crop_score.crop
    return ScoredRecommendation(
        name=crop.name,
        confidence=confidence,
        score=crop_score.score,
        suitability_reason=build_suitability_reason(conditions, list(crop_score.reasons)),
        expected_yield=crop.expected_yield,
        growth_period=crop.growth_period,
        investment_tier=crop.investment_tier,
        market_price=crop.market_price,
        profitability=crop.profitability,
        water_requirement=crop.water_requirement,
        risks=build_risks(crop, conditions, crop_score.water),
        benefits=build_benefits(crop, conditions, crop_score.region_match),
    )


# ---------------------------------------------------------------------------
# Main API
# ---------------------------------------------------------------------------

def recommend(conditions, catalog, rng=None) -> list[ScoredRecommendation]:
    """
    Return up to TOP_K_CROPS recommendations, best first.

    Parameters
    ----------
    conditions : FarmConditions
        Validated farm conditions.
    catalog : iterable of CropCandidate
        Read-only crop catalog, consumed once. An empty catalog yields [].
    rng : object with uniform(low, high), optional
        Randomness source for the confidence jitter (e.g. a seeded
        numpy Generator). A fresh default_rng() is used when omitted.

    Returns
    -------
    list[ScoredRecommendation] — empty when nothing reaches the threshold.
    """
    catalog = tuple(catalog)
    if not catalog:
        return []
    rng = rng if rng is not None else np.random.default_rng()

    survivors = [s for s in score_catalog(conditions, catalog) if s.passed]
    with_conf = [(s, _confidence(s.score, rng)) for s in survivors]
    # sorted() is stable: equal confidences keep catalog order
    ranked = sorted(with_conf, key=lambda pair: pair[1], reverse=True)[:TOP_K_CROPS]

    results = []
    for rank, (crop_score, confidence) in enumerate(ranked, 1):
        rec = _to_recommendation(crop_score, conditions, confidence)
        rec.rank = rank
        results.append(rec)

    log.info(
        "Recommended %d of %d crops for %s/%s at %s (%d above threshold %d).",
        len(results), len(catalog), conditions.climate, conditions.soil_type,
        conditions.location or "unspecified location", len(survivors), threshold_for(conditions),
    )
    return results


class SuitabilityScorer:
    """
    Holds one immutable catalog and a randomness factory.
    Safe to share between request contexts: nothing here is mutated per call.
    """

    def __init__(self, catalog=None, rng_factory=None):
        self.catalog = tuple(catalog) if catalog is not None else get_default_catalog()
        check_unique_names(self.catalog)
        self._rng_factory = rng_factory or np.random.default_rng

    def score(self, conditions) -> list[CropScore]:
        return score_catalog(conditions, self.catalog)

    def recommend(self, conditions, rng=None) -> list[ScoredRecommendation]:
        return recommend(conditions, self.catalog, rng=rng if rng is not None else self._rng_factory())
