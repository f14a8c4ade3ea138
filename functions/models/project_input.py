"""Project input models for RoofReport.

Pydantic models for the form-supplied facts about a property and project.
Field aliases match the camelCase keys stored with each report in Firestore
(``formInputData``), so a stored record can be re-validated directly.
"""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# ENUMS
# =============================================================================


class ProjectType(str, Enum):
    """Project types with a base rate entry in the cost table."""

    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    RENOVATION = "renovation"
    INFRASTRUCTURE = "infrastructure"


class MaterialTier(str, Enum):
    """Material quality tier."""

    ECONOMY = "economy"
    STANDARD = "standard"
    PREMIUM = "premium"


class Timeline(str, Enum):
    """Requested delivery timeline."""

    URGENT = "urgent"
    STANDARD = "standard"
    FLEXIBLE = "flexible"


class UserRole(str, Enum):
    """Report audiences. Selects the assembler and renderer path."""

    HOMEOWNER = "homeowner"
    CONTRACTOR = "contractor"
    INSPECTOR = "inspector"
    INSURANCE_ADJUSTER = "insurance-adjuster"


# =============================================================================
# NESTED MODELS
# =============================================================================


class ProjectLocation(BaseModel):
    """Property location as captured by the estimation form."""

    country: Optional[str] = Field(default=None, description="Country name")
    city: Optional[str] = Field(default=None, description="City or metro area")
    zip_code: Optional[str] = Field(default=None, alias="zipCode", description="Postal code")

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def display(self) -> str:
        """Render as ``"city, country zip"`` with blank parts trimmed."""
        text = f"{self.city or ''}, {self.country or ''} {self.zip_code or ''}"
        return text.strip().strip(",").strip()


class PipeBoot(BaseModel):
    """A pipe boot size and how many of them are on the roof."""

    size: Optional[str] = None
    quantity: Optional[Union[int, str]] = None

    class Config:
        frozen = True


class EdgeComponent(BaseModel):
    """Fascia or gutter description."""

    size: Optional[str] = None
    type: Optional[str] = None
    condition: Optional[str] = None

    class Config:
        frozen = True


class SlopeDamage(BaseModel):
    """Damage observed on a single roof slope."""

    slope: Optional[str] = None
    damage_type: Optional[str] = Field(default=None, alias="damageType")
    severity: Optional[str] = None
    description: Optional[str] = None

    class Config:
        populate_by_name = True
        frozen = True


class InspectorInfo(BaseModel):
    """Inspector identity for the certification block."""

    name: Optional[str] = None
    license: Optional[str] = None
    contact: Optional[str] = None

    class Config:
        frozen = True


class LaborNeeds(BaseModel):
    """Contractor crew requirements."""

    worker_count: Optional[Union[int, str]] = Field(default=None, alias="workerCount")
    steep_assist: bool = Field(default=False, alias="steepAssist")

    class Config:
        populate_by_name = True
        frozen = True


class HomeownerInfo(BaseModel):
    """Homeowner contact details."""

    name: Optional[str] = None
    email: Optional[str] = None

    class Config:
        frozen = True


class InsuranceAdjusterInfo(BaseModel):
    """Adjuster identity when supplied as a nested object."""

    name: Optional[str] = None
    contact: Optional[str] = None
    company: Optional[str] = None

    class Config:
        frozen = True


class CoverageMapping(BaseModel):
    """Claim coverage buckets."""

    covered: List[str] = Field(default_factory=list)
    excluded: List[str] = Field(default_factory=list)
    maintenance: List[str] = Field(default_factory=list)

    class Config:
        frozen = True


class UploadedFile(BaseModel):
    """A photo attached to the project, carried inline as base64 or a data URI."""

    name: Optional[str] = None
    size: int = Field(default=0, ge=0, description="Original file size in bytes")
    type: Optional[str] = Field(default=None, description="MIME type reported by the browser")
    data: Optional[str] = Field(default=None, description="Base64 payload or data URI")

    class Config:
        frozen = True


# =============================================================================
# PROJECT INPUT
# =============================================================================


class ProjectInput(BaseModel):
    """Everything the user entered for one report.

    Unknown keys are ignored so older stored form payloads still validate.
    Instances are frozen once built.
    """

    id: Optional[str] = Field(default=None, description="Project identifier, if already persisted")
    name: Optional[str] = Field(default=None, description="Project display name")
    project_type: Optional[str] = Field(
        default=None,
        alias="projectType",
        description="residential | commercial | renovation | infrastructure",
    )
    user_role: Optional[str] = Field(
        default=None,
        alias="userRole",
        description="Report audience; unrecognized values yield branding pages only",
    )
    location: Optional[ProjectLocation] = None
    area: Optional[float] = Field(default=None, ge=0, description="Roof area in square feet")
    material_tier: str = Field(default="standard", alias="materialTier")
    timeline: Optional[str] = None

    # Structure
    structure_type: Optional[str] = Field(default=None, alias="structureType")
    roof_pitch: Optional[str] = Field(default=None, alias="roofPitch")
    roof_age: Optional[float] = Field(default=None, alias="roofAge", ge=0)
    material_layers: List[str] = Field(default_factory=list, alias="materialLayers")
    ice_water_shield: bool = Field(default=False, alias="iceWaterShield")
    felt: Optional[str] = None
    drip_edge: bool = Field(default=False, alias="dripEdge")
    gutter_apron: bool = Field(default=False, alias="gutterApron")
    pipe_boots: List[PipeBoot] = Field(default_factory=list, alias="pipeBoots")
    fascia: Optional[EdgeComponent] = None
    gutter: Optional[EdgeComponent] = None

    # Inspector
    inspector_info: Optional[InspectorInfo] = Field(default=None, alias="inspectorInfo")
    inspection_date: Optional[str] = Field(default=None, alias="inspectionDate")
    weather_conditions: Optional[str] = Field(default=None, alias="weatherConditions")
    access_tools: List[str] = Field(default_factory=list, alias="accessTools")
    slope_damage: List[SlopeDamage] = Field(default_factory=list, alias="slopeDamage")
    owner_notes: Optional[str] = Field(default=None, alias="ownerNotes")

    # Contractor
    job_type: Optional[str] = Field(default=None, alias="jobType")
    material_preference: Optional[str] = Field(default=None, alias="materialPreference")
    labor_needs: Optional[LaborNeeds] = Field(default=None, alias="laborNeeds")
    line_items: List[str] = Field(default_factory=list, alias="lineItems")
    local_permit: bool = Field(default=False, alias="localPermit")

    # Homeowner
    homeowner_info: Optional[HomeownerInfo] = Field(default=None, alias="homeownerInfo")
    urgency: Optional[str] = None
    budget_style: Optional[str] = Field(default=None, alias="budgetStyle")

    # Insurance adjuster
    insurance_adjuster_info: Optional[InsuranceAdjusterInfo] = Field(default=None, alias="insuranceAdjusterInfo")
    claim_number: Optional[str] = Field(default=None, alias="claimNumber")
    policyholder_name: Optional[str] = Field(default=None, alias="policyholderName")
    adjuster_name: Optional[str] = Field(default=None, alias="adjusterName")
    adjuster_contact: Optional[str] = Field(default=None, alias="adjusterContact")
    date_of_loss: Optional[str] = Field(default=None, alias="dateOfLoss")
    damage_cause: Optional[str] = Field(default=None, alias="damageCause")
    coverage_mapping: Optional[CoverageMapping] = Field(default=None, alias="coverageMapping")

    # Shared preferences
    preferred_language: Optional[str] = Field(default=None, alias="preferredLanguage")
    preferred_currency: Optional[str] = Field(default=None, alias="preferredCurrency")

    uploaded_files: List[UploadedFile] = Field(default_factory=list, alias="uploadedFiles")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("location", mode="before")
    @classmethod
    def coerce_location(cls, v):
        """A plain string location is stored as the city."""
        if isinstance(v, str):
            return {"city": v} if v.strip() else None
        return v

    @field_validator("material_tier", mode="before")
    @classmethod
    def default_material_tier(cls, v):
        return v or "standard"

    @field_validator("project_type", "material_tier", "timeline", "user_role", mode="after")
    @classmethod
    def normalize_choice(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @property
    def location_display(self) -> str:
        """Location string used for region matching and report addresses."""
        return self.location.display if self.location else ""

    @property
    def effective_area(self) -> float:
        """Area for quantity heuristics; 1200 sq ft when none was entered."""
        return self.area or 1200.0

    @property
    def steep_assist(self) -> bool:
        return bool(self.labor_needs and self.labor_needs.steep_assist)

    def to_record(self) -> dict:
        """Serialize with camelCase keys for storage, omitting unset fields."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")
