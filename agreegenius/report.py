"""
Report helpers: recommendations → table / CSV, and a summary of the farm conditions.
Used by the Streamlit page (download button) and the command-line runner.
"""

import pandas as pd

from agreegenius.config import BUDGET_LABELS

REPORT_COLUMNS = [
    "Rank", "Crop", "Confidence (%)", "Expected Yield", "Growth Period",
    "Investment", "Market Price", "Water Requirement", "Profitability",
    "Risks", "Benefits",
]


def recommendations_to_frame(recommendations) -> pd.DataFrame:
    """One row per recommendation; risks and benefits joined with '; '."""
    rows = []
    for r in recommendations:
        rows.append({
            "Rank": r.rank,
            "Crop": r.name,
            "Confidence (%)": r.confidence,
            "Expected Yield": r.expected_yield,
            "Growth Period": r.growth_period,
            "Investment": r.investment_tier,
            "Market Price": r.market_price,
            "Water Requirement": r.water_requirement.capitalize(),
            "Profitability": r.profitability.capitalize(),
            "Risks": "; ".join(r.risks),
            "Benefits": "; ".join(r.benefits),
        })
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def to_csv_bytes(df: pd.DataFrame) -> bytes:
    return df.to_csv(index=False).encode("utf-8")


def describe_conditions(conditions) -> dict[str, str]:
    """Label → display value for the farm summary card."""
    size = conditions.farm_size_acres
    return {
        "Location":   conditions.location or "Not specified",
        "Farm Size":  f"{size:g} acres" if size else "Not specified",
        "Soil Type":  conditions.soil_type.replace("-", " ").title(),
        "Climate":    conditions.climate.replace("-", " ").title(),
        "Budget":     BUDGET_LABELS.get(conditions.budget_tier, conditions.budget_tier.title()),
        "Water":      conditions.water_availability.title() if conditions.water_availability else "Not specified",
    }
