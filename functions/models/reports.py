"""Assembled report models for RoofReport.

One model per audience. Every leaf is a string, a list of strings or a list
of row models whose cells are strings, so the renderer never has to check for
missing values. Aliases match the keys of the AI analysis payload for each
role, which lets a merged payload validate straight into these models.
"""

from typing import Dict, List

from pydantic import BaseModel, Field


# =============================================================================
# SHARED ROWS
# =============================================================================


class KeyValueRow(BaseModel):
    """A labelled value, rendered as ``label  value``."""

    label: str
    value: str


class SlopeRow(BaseModel):
    """Damage on one slope."""

    slope: str
    damage_type: str = Field(alias="damageType")
    severity: str
    description: str

    class Config:
        populate_by_name = True


class MaterialRow(BaseModel):
    """Material breakdown table row: item, quantity, unit, notes."""

    item: str
    quantity: str
    unit: str
    notes: str = ""

    def cells(self) -> List[str]:
        return [self.item, self.quantity, self.unit, self.notes]


class GlossaryEntry(BaseModel):
    """A roofing term and its plain-language definition."""

    term: str
    definition: str


class PhotoEntry(BaseModel):
    """An uploaded photo with its caption.

    ``data`` is an empty string when the upload carried no image payload.
    """

    title: str
    caption: str
    name: str
    size_label: str = Field(alias="sizeLabel")
    data: str = ""

    class Config:
        populate_by_name = True


class ReportBase(BaseModel):
    """Fields every assembled report carries."""

    role: str
    title: str
    language: str = "english"
    currency: str = "USD"
    labels: Dict[str, str] = Field(default_factory=dict, description="Localized headings and labels")
    cost_summary: List[KeyValueRow] = Field(default_factory=list, alias="costSummary")
    photos: List[PhotoEntry] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list, description="Fallbacks applied while assembling")

    class Config:
        populate_by_name = True

    def label(self, key: str) -> str:
        return self.labels.get(key, key)


# =============================================================================
# HOMEOWNER
# =============================================================================


class WelcomeMessage(BaseModel):
    greeting: str
    introduction: str
    our_commitment: str = Field(alias="ourCommitment")

    class Config:
        populate_by_name = True


class RoofOverview(BaseModel):
    property_type: str = Field(alias="propertyType")
    roof_age: str = Field(alias="roofAge")
    roof_style: str = Field(alias="roofStyle")
    current_materials: str = Field(alias="currentMaterials")
    overall_condition: str = Field(alias="overallCondition")
    key_features: List[str] = Field(alias="keyFeatures")

    class Config:
        populate_by_name = True


class DamageSummary(BaseModel):
    inspection_findings: str = Field(alias="inspectionFindings")
    priority_level: str = Field(alias="priorityLevel")
    main_concerns: List[str] = Field(alias="mainConcerns")
    what_this_means: str = Field(alias="whatThisMeans")

    class Config:
        populate_by_name = True


class LongTermOutlook(BaseModel):
    timeline: str
    investment_guidance: str = Field(alias="investmentGuidance")
    preventive_care: str = Field(alias="preventiveCare")

    class Config:
        populate_by_name = True


class RepairSuggestions(BaseModel):
    immediate_actions: List[str] = Field(alias="immediateActions")
    short_term_planning: List[str] = Field(alias="shortTermPlanning")
    long_term_outlook: LongTermOutlook = Field(alias="longTermOutlook")

    class Config:
        populate_by_name = True


class EstimatedRange(BaseModel):
    repairs: str
    partial_replacement: str = Field(alias="partialReplacement")
    full_replacement: str = Field(alias="fullReplacement")

    class Config:
        populate_by_name = True


class BudgetGuidance(BaseModel):
    estimated_range: EstimatedRange = Field(alias="estimatedRange")
    financing_options: List[str] = Field(alias="financingOptions")
    cost_saving_tips: List[str] = Field(alias="costSavingTips")

    class Config:
        populate_by_name = True


class HomeownerReport(ReportBase):
    """Plain-language report for property owners."""

    welcome_message: WelcomeMessage = Field(alias="welcomeMessage")
    roof_overview: RoofOverview = Field(alias="roofOverview")
    damage_summary: DamageSummary = Field(alias="damageSummary")
    repair_suggestions: RepairSuggestions = Field(alias="repairSuggestions")
    budget_guidance: BudgetGuidance = Field(alias="budgetGuidance")
    glossary: List[GlossaryEntry]
    closing_note: str = Field(alias="closingNote")


# =============================================================================
# CONTRACTOR
# =============================================================================


class ScopeOfWork(BaseModel):
    preparation_tasks: List[str] = Field(alias="preparationTasks")
    removal_tasks: List[str] = Field(alias="removalTasks")
    installation_tasks: List[str] = Field(alias="installationTasks")
    finishing_tasks: List[str] = Field(alias="finishingTasks")

    class Config:
        populate_by_name = True

    def phases(self) -> List[tuple]:
        """(label key, tasks) pairs in work order."""
        return [
            ("preparation_tasks", self.preparation_tasks),
            ("removal_tasks", self.removal_tasks),
            ("installation_tasks", self.installation_tasks),
            ("finishing_tasks", self.finishing_tasks),
        ]


class LaborRequirements(BaseModel):
    crew_size: str = Field(alias="crewSize")
    estimated_days: str = Field(alias="estimatedDays")
    steep_assist: str = Field(alias="steepAssist")
    special_equipment: List[str] = Field(alias="specialEquipment")
    safety_requirements: List[str] = Field(alias="safetyRequirements")

    class Config:
        populate_by_name = True


class CostEstimates(BaseModel):
    """Contractor cost lines, already formatted for display.

    A blank total means the corresponding subsection is omitted.
    """

    materials_breakdown: List[KeyValueRow] = Field(alias="materialsBreakdown")
    materials_total: str = Field(alias="materialsTotal")
    labor_rate: str = Field(alias="laborRate")
    labor_hours: str = Field(alias="laborHours")
    labor_total: str = Field(alias="laborTotal")
    equipment_items: List[KeyValueRow] = Field(alias="equipmentItems")
    equipment_total: str = Field(alias="equipmentTotal")
    project_total: str = Field(alias="projectTotal")

    class Config:
        populate_by_name = True


class ContractorReport(ReportBase):
    """Job specification report for roofing contractors."""

    project_details: List[KeyValueRow] = Field(alias="projectDetails")
    scope_of_work: ScopeOfWork = Field(alias="scopeOfWork")
    labor_requirements: LaborRequirements = Field(alias="laborRequirements")
    material_breakdown: List[MaterialRow] = Field(alias="materialBreakdown")
    cost_estimates: CostEstimates = Field(alias="costEstimates")


# =============================================================================
# INSPECTOR
# =============================================================================


class InspectorCertification(BaseModel):
    inspector: str
    license: str
    contact: str


class InspectionDetails(BaseModel):
    date: str
    weather: str


class StructureAnalysis(BaseModel):
    type: str
    roof_pitch: str = Field(alias="roofPitch")
    age: str
    materials: str

    class Config:
        populate_by_name = True


class InspectorReport(ReportBase):
    """Professional inspection record."""

    certification: InspectorCertification
    inspection_details: InspectionDetails = Field(alias="inspectionDetails")
    property_address: str = Field(alias="propertyAddress")
    structure: StructureAnalysis
    slopes: List[SlopeRow]
    components: List[KeyValueRow]
    equipment_used: str = Field(alias="equipmentUsed")
    owner_notes: str = Field(alias="ownerNotes")


# =============================================================================
# INSURANCE ADJUSTER
# =============================================================================


class ClaimMetadata(BaseModel):
    claim_number: str = Field(alias="claimNumber")
    policyholder: str
    adjuster_name: str = Field(alias="adjusterName")
    adjuster_contact: str = Field(alias="adjusterContact")
    date_of_loss: str = Field(alias="dateOfLoss")
    date_of_inspection: str = Field(alias="dateOfInspection")

    class Config:
        populate_by_name = True


class CoverageTable(BaseModel):
    covered_items: List[str] = Field(alias="coveredItems")
    non_covered_items: List[str] = Field(alias="nonCoveredItems")
    maintenance_items: List[str] = Field(alias="maintenanceItems")

    class Config:
        populate_by_name = True


class StormDamageAssessment(BaseModel):
    primary_damage_cause: str = Field(alias="primaryDamageCause")
    affected_components: List[str] = Field(alias="affectedComponents")

    class Config:
        populate_by_name = True


class InsuranceReport(ReportBase):
    """Claim documentation for insurance adjusters.

    ``damage_classifications`` only holds fully populated rows; when it is
    empty the section is left out of the document.
    """

    claim_metadata: ClaimMetadata = Field(alias="claimMetadata")
    inspection_summary: List[KeyValueRow] = Field(alias="inspectionSummary")
    coverage: CoverageTable = Field(alias="coverageTable")
    storm_damage: StormDamageAssessment = Field(alias="stormDamageAssessment")
    damage_classifications: List[SlopeRow] = Field(alias="damageClassificationsTable")
    legal_certification: str = Field(alias="legalCertification")
