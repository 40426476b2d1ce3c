"""
Report tests: recommendation table, CSV bytes, farm summary card.
Run from project root: python -m pytest tests/test_report.py -v
"""

import io
import sys
from pathlib import Path

import numpy as np
import pandas as pd

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from agreegenius.conditions import FarmConditions
from agreegenius.report import REPORT_COLUMNS, describe_conditions, recommendations_to_frame, to_csv_bytes
from agreegenius.scorer import SuitabilityScorer


def _rice_farm():
    return FarmConditions("Cuttack, Odisha, India", "clay", "tropical", "medium", farm_size_acres=2.5)


def test_empty_recommendations_give_empty_table():
    df = recommendations_to_frame([])
    assert list(df.columns) == REPORT_COLUMNS
    assert df.empty


def test_report_rows_follow_ranking():
    recs = SuitabilityScorer().recommend(_rice_farm(), rng=np.random.default_rng(3))
    df = recommendations_to_frame(recs)
    assert list(df.columns) == REPORT_COLUMNS
    assert list(df["Rank"]) == [r.rank for r in recs]
    assert df.iloc[0]["Crop"] == "Rice"
    assert df.iloc[0]["Water Requirement"] == "High"
    assert df.iloc[0]["Risks"] == "; ".join(recs[0].risks)


def test_csv_bytes_round_trip_header():
    recs = SuitabilityScorer().recommend(_rice_farm(), rng=np.random.default_rng(3))
    data = to_csv_bytes(recommendations_to_frame(recs))
    assert isinstance(data, bytes)
    back = pd.read_csv(io.BytesIO(data))
    assert list(back.columns) == REPORT_COLUMNS
    assert len(back) == len(recs)


def test_describe_conditions():
    summary = describe_conditions(
        FarmConditions("Akola, Maharashtra", "black-cotton", "semi-arid", "low", water_availability="limited", farm_size_acres=2.5)
    )
    assert summary == {
        "Location": "Akola, Maharashtra",
        "Farm Size": "2.5 acres",
        "Soil Type": "Black Cotton",
        "Climate": "Semi Arid",
        "Budget": "Under ₹50,000",
        "Water": "Limited",
    }


def test_describe_conditions_missing_optionals():
    summary = describe_conditions(FarmConditions("", "loam", "temperate", "premium"))
    assert summary["Location"] == "Not specified"
    assert summary["Farm Size"] == "Not specified"
    assert summary["Water"] == "Not specified"
    assert summary["Budget"] == "Above ₹5,00,000"


if __name__ == "__main__":
    import subprocess
    sys.exit(subprocess.call([sys.executable, "-m", "pytest", __file__, "-v", "-s"]))
