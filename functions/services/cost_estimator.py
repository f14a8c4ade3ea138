"""Cost Estimator for RoofReport.

Maps project type, area, material tier, location and timeline to a cost
breakdown through static rate and multiplier tables. Pure: no clock, no state.
"""

import math
from typing import Dict, Optional, Tuple

import structlog

from config.errors import ErrorCode, RoofReportError, ValidationError
from models.cost_breakdown import CostBreakdown
from models.outcome import Outcome
from models.project_input import ProjectInput

logger = structlog.get_logger()


# =============================================================================
# RATE TABLES
# =============================================================================

# Per-square-foot base rates by project type
BASE_RATES: Dict[str, Dict[str, float]] = {
    "residential": {"materials": 85, "labor": 45, "permits": 3},
    "commercial": {"materials": 120, "labor": 65, "permits": 8},
    "renovation": {"materials": 65, "labor": 55, "permits": 2},
    "infrastructure": {"materials": 200, "labor": 85, "permits": 15},
}

MATERIAL_TIER_MULTIPLIERS: Dict[str, float] = {
    "economy": 0.7,
    "standard": 1.0,
    "premium": 1.35,
}

# Ordered: equal-length matches resolve to the earlier entry
REGION_MULTIPLIERS: Tuple[Tuple[str, float], ...] = (
    ("san francisco", 1.65),
    ("oakland", 1.45),
    ("palo alto", 1.75),
    ("san jose", 1.55),
    ("los angeles", 1.35),
    ("chicago", 1.15),
    ("new york", 1.85),
    ("miami", 1.25),
    ("seattle", 1.45),
    ("austin", 1.15),
    ("denver", 1.05),
    ("phoenix", 0.95),
    ("atlanta", 1.00),
    ("dallas", 1.05),
    ("boston", 1.55),
)
DEFAULT_REGION_MULTIPLIER = 1.0

TIMELINE_MULTIPLIERS: Dict[str, float] = {
    "urgent": 1.25,
    "standard": 1.0,
    "flexible": 0.92,
}

CONTINGENCY_RATE = 0.07


# =============================================================================
# HELPERS
# =============================================================================


def round_half_up(value: float) -> int:
    """Round halves toward positive infinity: 2.5 -> 3, -2.5 -> -2."""
    return int(math.floor(value + 0.5))


def match_region(location: Optional[str]) -> Optional[str]:
    """Find the region key contained in a location string.

    Matching is case-insensitive. When several keys are substrings of the
    location, the longest key wins, and among keys of equal length the one
    listed first in REGION_MULTIPLIERS.

    Returns:
        The matched region key, or None.
    """
    if not location:
        return None
    haystack = location.lower()
    best: Optional[str] = None
    for key, _ in REGION_MULTIPLIERS:
        if key in haystack and (best is None or len(key) > len(best)):
            best = key
    return best


def region_multiplier(location: Optional[str]) -> float:
    """Resolve the regional cost multiplier for a location string."""
    key = match_region(location)
    if key is None:
        return DEFAULT_REGION_MULTIPLIER
    return dict(REGION_MULTIPLIERS)[key]


def _lookup(table: Dict[str, float], key: Optional[str], field: str, code: str):
    if key not in table:
        raise ValidationError(
            f"Unknown {field}: {key!r}. Expected one of: {', '.join(table)}",
            field=field,
            code=code,
        )
    return table[key]


# =============================================================================
# PUBLIC API
# =============================================================================


def estimate(project: ProjectInput) -> CostBreakdown:
    """Compute the cost breakdown for a project.

    Each component is rounded half-up before summing, so the total is the
    exact sum of the four rounded components.

    Args:
        project: Validated project input

    Returns:
        CostBreakdown

    Raises:
        ValidationError: Missing area, or unknown project type, material tier
            or timeline.
    """
    if project.area is None:
        raise ValidationError("Project area is required for a cost estimate", field="area",
                              code=ErrorCode.MISSING_FIELD)

    rates = _lookup(BASE_RATES, project.project_type, "projectType", ErrorCode.UNKNOWN_PROJECT_TYPE)
    tier_mult = _lookup(
        MATERIAL_TIER_MULTIPLIERS,
        project.material_tier or "standard",
        "materialTier",
        ErrorCode.UNKNOWN_MATERIAL_TIER,
    )
    timeline_mult = 1.0
    if project.timeline:
        timeline_mult = _lookup(TIMELINE_MULTIPLIERS, project.timeline, "timeline", ErrorCode.UNKNOWN_TIMELINE)

    region_mult = region_multiplier(project.location_display)
    area = project.area

    materials = round_half_up(area * rates["materials"] * tier_mult * region_mult * timeline_mult)
    labor = round_half_up(area * rates["labor"] * region_mult * timeline_mult)
    permits = round_half_up(area * rates["permits"] * region_mult)
    contingency = round_half_up((materials + labor + permits) * CONTINGENCY_RATE)

    return CostBreakdown(
        materials_cost=materials,
        labor_cost=labor,
        permits_cost=permits,
        contingency_cost=contingency,
        total_cost=materials + labor + permits + contingency,
        region_multiplier=region_mult,
    )


def regional_insights(location: Optional[str]) -> Dict[str, object]:
    """Summarize regional market conditions for a location string."""
    multiplier = region_multiplier(location)
    return {
        "regionMultiplier": multiplier,
        "laborCostVariation": round_half_up((multiplier - 1) * 100),
        "materialAvailability": "Good supply, standard lead times",
        "permitTimeline": "3-6 months typical timeline",
    }


def estimate_result(project: ProjectInput) -> Outcome[CostBreakdown]:
    """Boundary wrapper around estimate() that reports errors as an Outcome."""
    try:
        breakdown = estimate(project)
    except RoofReportError as e:
        logger.warning("estimate_rejected", code=e.code, message=e.message, details=e.details)
        return Outcome.failure(e.code, e.message)

    logger.info(
        "estimate_computed",
        project_type=project.project_type,
        area=project.area,
        region_multiplier=breakdown.region_multiplier,
        total_cost=breakdown.total_cost,
    )
    return Outcome.success(breakdown)
