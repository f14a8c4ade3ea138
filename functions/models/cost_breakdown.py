"""Cost breakdown model for RoofReport."""

from typing import Any, Dict

from pydantic import BaseModel, Field, model_validator


class CostBreakdown(BaseModel):
    """Estimated project cost, one whole-currency amount per component.

    Every component is rounded before summing, so ``total_cost`` always equals
    the exact sum of the four rounded components.
    """

    materials_cost: int = Field(alias="materialsCost", description="Rounded materials cost")
    labor_cost: int = Field(alias="laborCost", description="Rounded labor cost")
    permits_cost: int = Field(alias="permitsCost", description="Rounded permits cost")
    contingency_cost: int = Field(alias="contingencyCost", description="7% of the other three, rounded")
    total_cost: int = Field(alias="totalCost", description="Sum of the four components")
    region_multiplier: float = Field(alias="regionMultiplier", description="Resolved regional factor")

    class Config:
        populate_by_name = True
        frozen = True

    @model_validator(mode="after")
    def check_total(self):
        expected = self.materials_cost + self.labor_cost + self.permits_cost + self.contingency_cost
        if self.total_cost != expected:
            raise ValueError(f"totalCost {self.total_cost} does not equal component sum {expected}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response and Firestore."""
        return self.model_dump(by_alias=True)
