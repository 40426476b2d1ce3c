"""
Scorer tests: weighted terms, thresholds, confidence band, ranking and ties.
Run from project root: python -m pytest tests/test_scorer.py -v
"""

import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from agreegenius.conditions import FarmConditions
from agreegenius.crop_catalog import CatalogError, build_catalog, get_default_catalog
from agreegenius.config import SOIL_TYPES, CLIMATES, BUDGET_TIERS, WATER_AVAILABILITY_LEVELS
from agreegenius.scorer import (
    SuitabilityScorer,
    recommend,
    region_matches,
    score_catalog,
    score_crop,
)


class FixedJitter:
    """Stand-in randomness source returning preset jitter values in order."""

    def __init__(self, values):
        self.values = list(values)

    def uniform(self, low, high):
        return self.values.pop(0)


def _conditions(**overrides) -> FarmConditions:
    base = dict(location="India", soil_type="clay", climate="tropical", budget_tier="medium")
    base.update(overrides)
    return FarmConditions(**base)


def _record(name, **overrides) -> dict:
    rec = {
        "name": name,
        "climates": ["temperate"],
        "soils": ["clay"],
        "regions": ["india"],
        "water_requirement": "medium",
        "investment_tier": "₹10,000-12,000/acre",
        "profitability": "medium",
    }
    rec.update(overrides)
    return rec


def _crop(name):
    return next(c for c in get_default_catalog() if c.name == name)


# ---------------------------------------------------------------------------
# Example scenarios
# ---------------------------------------------------------------------------

def test_rice_full_match_scores_100():
    """Tropical clay in India on a medium budget is a full match for rice."""
    conditions = _conditions()
    s = score_crop(conditions, _crop("Rice"))
    assert (s.climate, s.soil, s.region, s.budget) == (40, 30, 20, 10)
    assert s.score == 100
    assert s.water is None
    assert s.threshold == 50

    recs = recommend(conditions, get_default_catalog(), rng=np.random.default_rng(0))
    assert recs[0].name == "Rice"
    assert 60 <= recs[0].confidence <= 95


def test_nothing_matches_returns_empty_list():
    """Unknown climate, soil and location fall below the threshold for every crop."""
    conditions = _conditions(climate="arctic", soil_type="unknown-soil", location="Nowhere", budget_tier="low")
    for s in score_catalog(conditions, get_default_catalog()):
        assert s.climate == 10 and s.soil == 5
        assert s.score < 50
    assert recommend(conditions, get_default_catalog()) == []


def test_scarce_water_keeps_high_water_crop_above_raised_threshold():
    """Rice with scarce water earns 0 water points but 100 still clears 60."""
    conditions = _conditions(water_availability="scarce")
    s = score_crop(conditions, _crop("Rice"))
    assert s.water == 0
    assert s.score == 100
    assert s.threshold == 60
    assert s.passed

    names = [r.name for r in recommend(conditions, get_default_catalog(), rng=np.random.default_rng(1))]
    assert "Rice" in names


def test_low_water_crop_boosted_over_threshold_by_scarce_water():
    """A marginal low-water crop (45) fails alone but passes with +15 water points."""
    catalog = build_catalog([
        _record("Dryland Pulse", climates=["arid"], soils=["sandy"], regions=["rajasthan"],
                water_requirement="low", investment_tier="₹40,000/acre"),
    ])
    dry = _conditions(climate="tropical", soil_type="sandy", location="Kenya", budget_tier="low")
    assert score_crop(dry, catalog[0]).score == 45
    assert recommend(dry, catalog) == []

    with_water = _conditions(climate="tropical", soil_type="sandy", location="Kenya",
                             budget_tier="low", water_availability="scarce")
    s = score_crop(with_water, catalog[0])
    assert s.water == 15
    assert s.score == 60
    recs = recommend(with_water, catalog, rng=FixedJitter([0.0]))
    assert [r.name for r in recs] == ["Dryland Pulse"]


def test_tied_scores_ordered_by_jittered_confidence():
    """Two crops at raw 70: the one whose jitter lands higher comes first."""
    catalog = build_catalog([
        _record("First Crop", climates=["arid"]),
        _record("Second Crop", climates=["arid"]),
    ])
    conditions = _conditions(climate="tropical")
    assert [s.score for s in score_catalog(conditions, catalog)] == [70, 70]

    recs = recommend(conditions, catalog, rng=FixedJitter([2.0, 8.0]))
    assert [r.name for r in recs] == ["Second Crop", "First Crop"]
    assert [r.confidence for r in recs] == [78.0, 72.0]
    assert [r.rank for r in recs] == [1, 2]


# ---------------------------------------------------------------------------
# Terms and thresholds
# ---------------------------------------------------------------------------

def test_partial_credit_never_zero():
    """Climate, soil and region always contribute at least their partial credit."""
    conditions = _conditions(climate="polar", soil_type="rock", location="")
    for s in score_catalog(conditions, get_default_catalog()):
        assert s.climate >= 10 and s.soil >= 5 and s.region >= 5
        assert len(s.reasons) >= 3


def test_budget_term_compares_levels():
    """Budget points only when the budget level reaches the crop's investment level."""
    sugarcane = _crop("Sugarcane")
    assert sugarcane.investment_level == 4
    assert score_crop(_conditions(budget_tier="high"), sugarcane).budget == 0
    assert score_crop(_conditions(budget_tier="premium"), sugarcane).budget == 10


def test_unknown_budget_tier_never_earns_budget_points():
    """A directly-constructed unknown budget tier falls through to partial credit."""
    conditions = _conditions(budget_tier="unlimited")
    assert conditions.budget_level == 0
    for crop in get_default_catalog():
        s = score_crop(conditions, crop)
        assert s.budget == 0
        assert "fits within your budget range" not in s.reasons


def test_water_table_values():
    """Water points follow the requirement x availability table."""
    rice, wheat, bajra = _crop("Rice"), _crop("Wheat"), _crop("Pearl Millet (Bajra)")
    expected = {
        "abundant": (20, 20, 15),
        "moderate": (10, 20, 20),
        "limited":  (5, 10, 20),
        "scarce":   (0, 5, 15),
    }
    for avail, (high, medium, low) in expected.items():
        c = _conditions(water_availability=avail)
        assert score_crop(c, rice).water == high
        assert score_crop(c, wheat).water == medium
        assert score_crop(c, bajra).water == low


def test_unknown_water_value_scores_zero_with_raised_threshold():
    s = score_crop(_conditions(water_availability="flooded"), _crop("Wheat"))
    assert s.water == 0
    assert s.threshold == 60


def test_region_matching_both_directions():
    regions = frozenset({"punjab", "west bengal"})
    assert region_matches("Ludhiana, Punjab, India", regions)
    assert region_matches("Bengal", regions)
    assert region_matches("PUNJAB", regions)
    assert not region_matches("Kerala", regions)
    assert not region_matches("", regions)
    assert region_matches("", frozenset({"worldwide"}))
    assert region_matches("Anywhere", frozenset({"worldwide"}))


def test_reason_sentence_embeds_clauses_in_order():
    rec = recommend(_conditions(), get_default_catalog(), rng=np.random.default_rng(3))[0]
    assert rec.suitability_reason == (
        "Recommended for clay soil in tropical climate zones: optimal tropical climate conditions, "
        "excellent clay soil compatibility, proven success in your region, fits within your budget range."
    )


# ---------------------------------------------------------------------------
# Confidence band and ranking properties
# ---------------------------------------------------------------------------

def test_confidence_capped_at_ceiling():
    """Score 100 with near-maximal jitter caps at 95; the 45-point crop is dropped."""
    catalog = build_catalog([
        _record("Perfect", climates=["tropical"]),
        _record("Marginal", climates=["arid"], soils=["sandy"]),
    ])
    conditions = _conditions(budget_tier="low")
    assert [s.score for s in score_catalog(conditions, catalog)] == [100, 45]

    recs = recommend(conditions, catalog, rng=FixedJitter([9.99]))
    assert [r.name for r in recs] == ["Perfect"]
    assert [r.confidence for r in recs] == [95.0]


def test_confidence_inside_band_is_score_plus_jitter():
    """A worldwide crop at 70 plus 4.5 jitter displays 74.5."""
    catalog = build_catalog([
        _record("Spread", climates=["arid"], soils=["sandy"], regions=["worldwide"]),
    ])
    conditions = _conditions(climate="tropical", soil_type="sandy", location="Nowhere", budget_tier="low")
    recs = recommend(conditions, catalog, rng=FixedJitter([4.5]))
    assert recs[0].score == 10 + 30 + 20 + 10
    assert recs[0].confidence == 74.5


def test_confidence_floor_applies_at_threshold():
    """A crop exactly at threshold 50 with zero jitter displays 60."""
    catalog = build_catalog([_record("AtThreshold", climates=["tropical"], soils=["sandy"], regions=["kenya"],
                                     investment_tier="₹70,000/acre")])
    conditions = _conditions(location="Nowhere", budget_tier="low")
    assert score_crop(conditions, catalog[0]).score == 40 + 5 + 5 + 0
    recs = recommend(conditions, catalog, rng=FixedJitter([0.0]))
    assert recs[0].confidence == 60.0


def test_ties_in_confidence_keep_catalog_order():
    catalog = build_catalog([
        _record("Alpha", climates=["tropical"]),
        _record("Beta", climates=["tropical"]),
        _record("Gamma", climates=["tropical"]),
    ])
    recs = recommend(_conditions(), catalog, rng=FixedJitter([5.0, 5.0, 5.0]))
    assert [r.name for r in recs] == ["Alpha", "Beta", "Gamma"]


def test_empty_catalog_returns_empty_list():
    assert recommend(_conditions(), []) == []
    assert recommend(_conditions(), ()) == []
    assert recommend(_conditions(), iter([])) == []


def test_generator_catalog_accepted():
    """Any iterable of crops works, including a one-shot generator."""
    catalog = get_default_catalog()
    recs = recommend(_conditions(), (crop for crop in catalog), rng=np.random.default_rng(0))
    assert recs[0].name == "Rice"
    assert len(recs) == 3


def test_output_properties_across_conditions():
    """Length, order, band, threshold and advisory list sizes hold for every input."""
    catalog = get_default_catalog()
    rng = np.random.default_rng(42)
    locations = ["India", "Punjab", "Nairobi", "", "Tamil Nadu, India"]
    waters = [None] + WATER_AVAILABILITY_LEVELS
    for climate in CLIMATES:
        for soil in SOIL_TYPES:
            for budget in BUDGET_TIERS:
                for i, water in enumerate(waters):
                    c = _conditions(climate=climate, soil_type=soil, budget_tier=budget,
                                    water_availability=water, location=locations[i % len(locations)])
                    recs = recommend(c, catalog, rng=rng)
                    assert len(recs) <= 3
                    confs = [r.confidence for r in recs]
                    assert confs == sorted(confs, reverse=True)
                    threshold = 60 if water else 50
                    for r in recs:
                        assert 60 <= r.confidence <= 95
                        assert r.score >= threshold
                        assert 1 <= len(r.risks) <= 3
                        assert 1 <= len(r.benefits) <= 3


def test_survivors_and_raw_order_are_deterministic():
    """Excluding jitter, repeated scoring gives the same survivors and raw ordering."""
    catalog = get_default_catalog()
    conditions = _conditions(climate="semi-arid", soil_type="black-cotton", location="Maharashtra",
                             water_availability="limited")
    first = score_catalog(conditions, catalog)
    second = score_catalog(conditions, catalog)
    assert {s.crop.name for s in first if s.passed} == {s.crop.name for s in second if s.passed}
    assert [s.score for s in first] == [s.score for s in second]

    names_a = {r.name for r in recommend(conditions, catalog, rng=np.random.default_rng(1))}
    names_b = {r.name for r in recommend(conditions, catalog, rng=np.random.default_rng(2))}
    passed = {s.crop.name for s in first if s.passed}
    assert names_a <= passed and names_b <= passed


def test_catalog_not_mutated_by_scoring():
    catalog = get_default_catalog()
    snapshot = tuple(catalog)
    recommend(_conditions(water_availability="moderate"), catalog, rng=np.random.default_rng(0))
    assert catalog == snapshot


# ---------------------------------------------------------------------------
# SuitabilityScorer
# ---------------------------------------------------------------------------

def test_scorer_uses_injected_catalog_and_rng():
    catalog = build_catalog([_record("Only", climates=["tropical"])])
    scorer = SuitabilityScorer(catalog, rng_factory=lambda: FixedJitter([3.0]))
    recs = scorer.recommend(_conditions())
    assert [r.name for r in recs] == ["Only"]
    assert recs[0].confidence == 95.0
    assert [s.score for s in scorer.score(_conditions())] == [100]


def test_scorer_rejects_duplicate_names():
    catalog = build_catalog([_record("Rice")]) + build_catalog([_record("rice")])
    with pytest.raises(CatalogError):
        SuitabilityScorer(catalog)


def test_scorer_defaults_to_process_catalog():
    assert SuitabilityScorer().catalog is get_default_catalog()


def test_recommendation_to_dict_has_display_fields():
    rec = recommend(_conditions(), get_default_catalog(), rng=np.random.default_rng(0))[0]
    d = rec.to_dict()
    for key in ("name", "confidence", "suitability_reason", "risks", "benefits",
                "expected_yield", "growth_period", "market_price", "investment_tier"):
        assert key in d


if __name__ == "__main__":
    import subprocess
    sys.exit(subprocess.call([sys.executable, "-m", "pytest", __file__, "-v", "-s"]))
