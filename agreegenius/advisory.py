"""
Advisory text for a recommended crop: risks, benefits and the suitability sentence.
- RISK rules are keyed on climate, soil, profitability and water mismatch.
- BENEFIT rules are keyed on profitability, water efficiency, crop identity
  and location keywords.
Each list is topped up with generic fallbacks, deduplicated and capped.
"""

from agreegenius.config import (
    MAX_RISKS,
    MAX_BENEFITS,
    WATER_STRAIN_POINTS,
)

DRY_CLIMATES = ("arid", "semi-arid")

GENERIC_RISKS = ["Weather dependency", "Input cost fluctuations"]
GENERIC_BENEFITS = ["Suitable for local conditions", "Market availability"]

# Crop-specific benefits: crop name -> list of (location keyword or None, benefit)
CROP_BENEFITS: dict[str, list[tuple[str | None, str]]] = {
    "rice": [
        ("india", "Government MSP support"),
        ("india", "Established supply chain"),
    ],
    "wheat": [
        ("india", "Assured procurement at MSP"),
    ],
    "soybean": [
        (None, "Nitrogen fixation benefits"),
        (None, "Excellent rotation crop"),
    ],
    "chickpea (chana)": [
        (None, "Nitrogen fixation benefits"),
        (None, "Excellent rotation crop"),
    ],
    "groundnut": [
        (None, "Nitrogen fixation benefits"),
    ],
    "cotton": [
        (None, "Strong export market"),
        (None, "Value-added processing opportunities"),
    ],
    "sugarcane": [
        (None, "Assured mill offtake at FRP"),
    ],
    "pearl millet (bajra)": [
        (None, "Drought and heat tolerant"),
    ],
}


def _dedupe_cap(items: list[str], limit: int) -> list[str]:
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out[:limit]


def build_risks(crop, conditions, water_points: int | None = None) -> list[str]:
    """
    Return 1-3 risks for growing `crop` under `conditions`.
    water_points is the water-term score (None when availability was not supplied).
    """
    risks = []
    if crop.water_requirement == "high" and conditions.climate in DRY_CLIMATES:
        risks.append("High water requirements in dry climate")
    if water_points is not None and water_points <= WATER_STRAIN_POINTS:
        risks.append(
            f"{crop.water_requirement.capitalize()} water needs exceed "
            f"{conditions.water_availability} water availability"
        )
    if crop.name.lower() == "rice" and conditions.soil_type != "clay":
        risks.append("Requires proper water management")
    if conditions.soil_type not in crop.soils:
        risks.append(f"Soil amendment needed for {conditions.soil_type} soil")
    if conditions.climate == "tropical":
        risks.append("Pest and disease pressure")
    if crop.profitability == "high":
        risks.append("Market price volatility")

    risks.extend(GENERIC_RISKS)
    return _dedupe_cap(risks, MAX_RISKS)


def build_benefits(crop, conditions, region_match: bool = False) -> list[str]:
    """Return 1-3 benefits for growing `crop` at the farmer's location."""
    benefits = []
    location = (conditions.location or "").lower()

    if crop.profitability == "high":
        benefits.append("High profit potential")
    if crop.water_requirement == "low":
        benefits.append("Water efficient cultivation")
    for keyword, benefit in CROP_BENEFITS.get(crop.name.lower(), []):
        if keyword is None or keyword in location:
            benefits.append(benefit)
    if region_match:
        benefits.append("Proven track record in your region")

    benefits.extend(GENERIC_BENEFITS)
    return _dedupe_cap(benefits, MAX_BENEFITS)


def build_suitability_reason(conditions, reasons: list[str]) -> str:
    """Fixed-template sentence embedding the ordered match reasons."""
    return (
        f"Recommended for {conditions.soil_type} soil in {conditions.climate} climate zones: "
        f"{', '.join(reasons)}."
    )
