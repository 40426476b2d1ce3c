"""
Farm conditions: the validated input record for one scoring call.

FarmConditions.from_form() is the boundary between a raw form submission
(dict of strings) and the scorer. It trims and lowercases enum fields, maps
common aliases, and rejects missing or unknown required values. Unknown soil
or climate names are allowed through: they simply never earn full-match points.
"""

import math
from dataclasses import dataclass

from agreegenius.config import (
    BUDGET_TIERS,
    UNKNOWN_BUDGET_LEVEL,
    WATER_AVAILABILITY_LEVELS,
    SOIL_ALIASES,
    CLIMATE_ALIASES,
)


class InvalidConditionsError(ValueError):
    """Raised when a form submission cannot be turned into FarmConditions."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        detail = "; ".join(f"{field}: {msg}" for field, msg in errors.items())
        super().__init__(f"Invalid farm conditions — {detail}")


def _clean(value) -> str:
    return str(value).strip().lower() if value is not None else ""


def normalise_soil(value) -> str:
    soil = _clean(value)
    return SOIL_ALIASES.get(soil, soil)


def normalise_climate(value) -> str:
    climate = _clean(value)
    return CLIMATE_ALIASES.get(climate, climate)


@dataclass(frozen=True)
class FarmConditions:
    location: str
    soil_type: str
    climate: str
    budget_tier: str
    water_availability: str | None = None
    farm_size_acres: float | None = None

    @property
    def budget_level(self) -> int:
        return BUDGET_TIERS.get(self.budget_tier, UNKNOWN_BUDGET_LEVEL)

    @property
    def uses_water(self) -> bool:
        return self.water_availability is not None

    @classmethod
    def from_form(cls, form: dict) -> "FarmConditions":
        """
        Validate a form submission and build FarmConditions.

        Expected keys: location, soil_type, climate, budget_tier and optionally
        water_availability, farm_size_acres. The web form's camelCase keys
        (soilType, budget, waterAvailability, farmSize) are accepted too.
        Raises InvalidConditionsError listing every bad field.
        """
        def pick(*keys):
            for k in keys:
                if k in form and form[k] is not None:
                    return form[k]
            return None

        errors: dict[str, str] = {}

        location = str(pick("location") or "").strip()
        soil = normalise_soil(pick("soil_type", "soilType"))
        climate = normalise_climate(pick("climate"))
        budget = _clean(pick("budget_tier", "budgetTier", "budget"))
        water = _clean(pick("water_availability", "waterAvailability")) or None
        size_raw = pick("farm_size_acres", "farmSizeAcres", "farmSize")

        if not soil:
            errors["soil_type"] = "required"
        if not climate:
            errors["climate"] = "required"
        if not budget:
            errors["budget_tier"] = "required"
        elif budget not in BUDGET_TIERS:
            errors["budget_tier"] = f"must be one of {list(BUDGET_TIERS)}"
        if water is not None and water not in WATER_AVAILABILITY_LEVELS:
            errors["water_availability"] = f"must be one of {WATER_AVAILABILITY_LEVELS}"

        farm_size = None
        if size_raw not in (None, ""):
            try:
                farm_size = float(size_raw)
            except (TypeError, ValueError):
                errors["farm_size_acres"] = "must be a number"
            else:
                if not math.isfinite(farm_size):
                    errors["farm_size_acres"] = "must be a finite number"
                elif farm_size <= 0:
                    errors["farm_size_acres"] = "must be positive"

        if errors:
            raise InvalidConditionsError(errors)

        return cls(
            location=location,
            soil_type=soil,
            climate=climate,
            budget_tier=budget,
            water_availability=water,
            farm_size_acres=farm_size,
        )
