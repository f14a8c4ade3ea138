"""Insurance adjuster report assembler.

Claim documentation with sentinel-aware filtering: inspection summary rows
and damage classification rows that only carry placeholders are dropped, and
an empty damage table removes the whole section.
"""

from typing import Any, Dict, List, Optional

from models.cost_breakdown import CostBreakdown
from models.project_input import ProjectInput
from models.reports import InsuranceReport, SlopeRow
from services.localization import Localizer
from assemblers.base_assembler import (
    NOT_PROVIDED,
    BaseAssembler,
    capitalize_words,
    coerce_value,
    format_number,
    is_meaningful,
    join_list,
)

DAMAGE_FIELDS = ("slope", "damageType", "severity", "description")

# (payload key, label key) in display order
SUMMARY_FIELDS = (
    ("propertyAddress", "property_address"),
    ("structureType", "structure_type"),
    ("roofAge", "roof_age"),
    ("roofPitch", "roof_pitch"),
    ("existingMaterials", "existing_materials"),
    ("totalArea", "total_area"),
    ("weatherConditions", "weather_conditions"),
)


def filter_damage_rows(rows: Any) -> List[SlopeRow]:
    """Keep rows whose four fields are all present and not placeholders.

    Damage type and severity are title-cased for display.
    """
    kept = []
    for row in rows if isinstance(rows, list) else []:
        if not isinstance(row, dict):
            continue
        if not all(is_meaningful(row.get(name)) for name in DAMAGE_FIELDS):
            continue
        kept.append(
            SlopeRow(
                slope=str(row["slope"]),
                damage_type=capitalize_words(str(row["damageType"])),
                severity=capitalize_words(str(row["severity"])),
                description=str(row["description"]),
            )
        )
    return kept


class InsuranceAssembler(BaseAssembler):
    role = "insurance-adjuster"
    title_key = "title_insurance"
    photo_title_key = "photo_title_insurance"
    annotation_key = "annotatedPhotos"
    default_caption = "Insurance claim documentation photo - analysis pending"
    label_keys = (
        "claim_metadata", "inspection_summary", "coverage_analysis", "storm_damage",
        "damage_classifications", "legal_certification", "cost_summary", "claim_number", "policyholder",
        "adjuster", "contact", "date_of_loss", "date_of_inspection", "covered_items", "non_covered_items",
        "maintenance_items", "no_covered_items", "no_non_covered_items", "primary_damage_cause",
        "affected_components", "no_affected_components", "slope_heading", "type", "severity",
        "description", "image_name_insurance", "image_size_insurance", "insurance_use_only", "no_image",
        "image_failed",
    )

    def build_fallback(
        self,
        project: ProjectInput,
        localizer: Localizer,
        cost: Optional[CostBreakdown],
    ) -> Dict[str, Any]:
        adjuster_info = project.insurance_adjuster_info
        adjuster = project.adjuster_name or (adjuster_info.name if adjuster_info else None)
        adjuster_contact = project.adjuster_contact or (adjuster_info.contact if adjuster_info else None)
        coverage = project.coverage_mapping
        city = project.location.city if project.location else None

        return {
            "claimMetadata": {
                "claimNumber": project.claim_number or NOT_PROVIDED,
                "policyholder": project.policyholder_name or NOT_PROVIDED,
                "adjusterName": adjuster or NOT_PROVIDED,
                "adjusterContact": adjuster_contact or NOT_PROVIDED,
                "dateOfLoss": project.date_of_loss or NOT_PROVIDED,
                "dateOfInspection": self.inspection_date(),
            },
            # None marks a field with nothing to show; such rows are filtered out
            "inspectionSummary": {
                "propertyAddress": project.location_display or None,
                "structureType": project.structure_type,
                "roofAge": f"{format_number(project.roof_age)} years" if project.roof_age else None,
                "roofPitch": project.roof_pitch,
                "existingMaterials": join_list(project.material_layers),
                "totalArea": f"{format_number(project.area)} sq ft" if project.area else None,
                "weatherConditions": project.weather_conditions,
            },
            "coverageTable": {
                "coveredItems": list(coverage.covered) if coverage else [],
                "nonCoveredItems": list(coverage.excluded) if coverage else [],
                "maintenanceItems": list(coverage.maintenance) if coverage else [],
            },
            "stormDamageAssessment": {
                "primaryDamageCause": project.damage_cause or NOT_PROVIDED,
                "affectedComponents": list(project.material_layers),
            },
            "damageClassificationsTable": [
                damage.model_dump(by_alias=True) for damage in project.slope_damage
            ],
            "legalCertificationNotes": {
                "certificationStatement": (
                    f"This report is prepared for insurance purposes by {adjuster or 'assigned adjuster'}, "
                    "based on physical inspection and documentation review of the "
                    f"{project.structure_type or 'insured'} property located in "
                    f"{city or 'specified location'}."
                ),
            },
        }

    def build_report(
        self,
        project: ProjectInput,
        merged: Dict[str, Any],
        localizer: Localizer,
        base: Dict[str, Any],
    ) -> InsuranceReport:
        summary = merged["inspectionSummary"]
        summary_rows = self.rows(
            ((localizer.t(label_key), summary.get(key)) for key, label_key in SUMMARY_FIELDS),
            keep_blank=False,
        )

        source_rows = merged["damageClassificationsTable"]
        damage_rows = filter_damage_rows(source_rows)
        dropped = (len(source_rows) if isinstance(source_rows, list) else 0) - len(damage_rows)
        if dropped:
            base["warnings"].append(f"damageClassificationsTable: dropped {dropped} incomplete row(s)")

        legal = coerce_value(merged["legalCertificationNotes"])
        return InsuranceReport(
            **base,
            claim_metadata=coerce_value(merged["claimMetadata"], NOT_PROVIDED),
            inspection_summary=summary_rows,
            coverage=coerce_value(merged["coverageTable"]),
            storm_damage=coerce_value(merged["stormDamageAssessment"], NOT_PROVIDED),
            damage_classifications=damage_rows,
            legal_certification=legal["certificationStatement"],
        )
