"""Unit tests for the cost estimator."""

import pytest

from config.errors import ErrorCode, ValidationError
from models.project_input import ProjectInput
from services.cost_estimator import (
    estimate,
    estimate_result,
    match_region,
    region_multiplier,
    regional_insights,
    round_half_up,
)


def _project(**overrides) -> ProjectInput:
    data = {
        "projectType": "residential",
        "area": 1200,
        "materialTier": "standard",
        "location": "Austin",
        "timeline": "standard",
    }
    data.update(overrides)
    return ProjectInput.model_validate(data)


class TestEstimate:
    """Tests for estimate()."""

    def test_austin_residential_scenario(self):
        """1200 sq ft standard residential in Austin."""
        result = estimate(_project())

        assert result.region_multiplier == 1.15
        assert result.materials_cost == 117300
        assert result.labor_cost == 62100
        assert result.permits_cost == 4140
        assert result.contingency_cost == 12848
        assert result.total_cost == 196388

    def test_total_is_sum_of_rounded_components(self):
        result = estimate(_project(area=1337, location="Miami, FL", materialTier="premium", timeline="urgent"))

        assert result.total_cost == (
            result.materials_cost + result.labor_cost + result.permits_cost + result.contingency_cost
        )

    def test_estimate_is_pure(self):
        project = _project(area=987.5, location="Seattle")

        assert estimate(project) == estimate(project)

    def test_unknown_location_uses_default_multiplier(self):
        result = estimate(_project(location="Reykjavik"))

        assert result.region_multiplier == 1.0
        assert result.materials_cost == 102000

    def test_missing_timeline_is_neutral(self):
        assert estimate(_project(timeline=None)) == estimate(_project())

    def test_flexible_timeline_discounts_materials_and_labor_only(self):
        flexible = estimate(_project(timeline="flexible"))
        standard = estimate(_project())

        assert flexible.materials_cost < standard.materials_cost
        assert flexible.labor_cost < standard.labor_cost
        assert flexible.permits_cost == standard.permits_cost

    def test_case_insensitive_choices(self):
        assert estimate(_project(projectType="Residential", materialTier="STANDARD")) == estimate(_project())

    def test_missing_area_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            estimate(_project(area=None))

        assert exc_info.value.code == ErrorCode.MISSING_FIELD
        assert exc_info.value.details["field"] == "area"

    def test_unknown_project_type_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            estimate(_project(projectType="spaceport"))

        assert exc_info.value.code == ErrorCode.UNKNOWN_PROJECT_TYPE

    def test_unknown_material_tier_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            estimate(_project(materialTier="platinum"))

        assert exc_info.value.code == ErrorCode.UNKNOWN_MATERIAL_TIER

    def test_unknown_timeline_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            estimate(_project(timeline="yesterday"))

        assert exc_info.value.code == ErrorCode.UNKNOWN_TIMELINE


class TestEstimateResult:
    """Tests for the Outcome wrapper."""

    def test_success(self):
        outcome = estimate_result(_project())

        assert outcome.ok
        assert outcome.value.total_cost == 196388

    def test_failure_is_reported_not_raised(self):
        outcome = estimate_result(_project(projectType="spaceport"))

        assert not outcome.ok
        assert outcome.value is None
        assert outcome.error_code == ErrorCode.UNKNOWN_PROJECT_TYPE


class TestRegionMatching:
    """Tests for region lookup."""

    @pytest.mark.parametrize("location,expected", [
        ("Austin, TX", "austin"),
        ("SAN FRANCISCO", "san francisco"),
        ("Downtown Palo Alto, CA", "palo alto"),
        ("Portland", None),
        ("", None),
        (None, None),
    ])
    def test_match_region(self, location, expected):
        assert match_region(location) == expected

    def test_longest_key_wins(self):
        # Both keys occur; the eight-character key beats the seven-character one
        assert match_region("Chicago and New York office") == "new york"
        assert region_multiplier("Chicago and New York office") == 1.85

    def test_equal_length_keys_resolve_in_table_order(self):
        # "austin" and "denver" are both six characters; austin is listed first
        assert match_region("denver-austin corridor") == "austin"


class TestHelpers:

    @pytest.mark.parametrize("value,expected", [
        (0.5, 1),
        (1.5, 2),
        (2.5, 3),
        (-0.5, 0),
        (12847.8, 12848),
        (12847.4, 12847),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_regional_insights(self):
        insights = regional_insights("Boston, MA")

        assert insights["regionMultiplier"] == 1.55
        assert insights["laborCostVariation"] == 55
        assert insights["materialAvailability"]
        assert insights["permitTimeline"]
