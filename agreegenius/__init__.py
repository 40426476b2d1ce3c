"""
AgreeGenius crop advisory — core package.
"""

from agreegenius.conditions import FarmConditions, InvalidConditionsError
from agreegenius.crop_catalog import (
    CATALOG_VERSION,
    CatalogError,
    CropCandidate,
    get_default_catalog,
    load_catalog,
)
from agreegenius.scorer import (
    ScoredRecommendation,
    SuitabilityScorer,
    recommend,
)

__all__ = [
    "CATALOG_VERSION",
    "CatalogError",
    "CropCandidate",
    "FarmConditions",
    "InvalidConditionsError",
    "ScoredRecommendation",
    "SuitabilityScorer",
    "get_default_catalog",
    "load_catalog",
    "recommend",
]
