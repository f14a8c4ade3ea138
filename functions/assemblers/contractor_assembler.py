"""Contractor report assembler.

Job specification: project details, phased scope of work, crew and
equipment, a material breakdown table and cost estimates.
"""

import math
from typing import Any, Dict, List, Optional

import structlog

from models.cost_breakdown import CostBreakdown
from models.project_input import ProjectInput
from models.reports import ContractorReport, CostEstimates, KeyValueRow, MaterialRow
from services.localization import Localizer
from assemblers.base_assembler import (
    BaseAssembler,
    capitalize_words,
    coerce_value,
    format_number,
    is_meaningful,
    join_list,
    to_number,
)

logger = structlog.get_logger()

# Per-square-foot material rates by preference: (total, roofing materials)
MATERIAL_RATES = {
    "luxury": (8, 5),
    "eco": (4, 2.5),
}
DEFAULT_MATERIAL_RATES = (6, 3.5)


class ContractorAssembler(BaseAssembler):
    role = "contractor"
    title_key = "title_contractor"
    photo_title_key = "photo_title_contractor"
    photo_caption_key = "photo_caption_contractor"
    annotation_key = "imageAnalysis"
    default_caption = (
        "Professional analysis: This image shows roofing conditions requiring contractor assessment "
        "for repair planning and material requirements."
    )
    label_keys = (
        "project_details", "scope_of_work", "labor_equipment", "material_breakdown", "cost_estimates",
        "cost_summary", "preparation_tasks", "removal_tasks", "installation_tasks", "finishing_tasks",
        "crew_size", "estimated_days", "steep_assist", "special_equipment", "safety_requirements",
        "col_item", "col_qty", "col_unit", "col_notes", "materials_breakdown", "total_materials",
        "labor_section", "rate_per_hour", "total_hours", "total_labor", "equipment_section",
        "total_equipment", "project_total", "photo_caption_contractor", "no_image", "image_failed",
    )

    def build_fallback(
        self,
        project: ProjectInput,
        localizer: Localizer,
        cost: Optional[CostBreakdown],
    ) -> Dict[str, Any]:
        area = project.effective_area
        steep = project.steep_assist
        full_replace = project.job_type == "full-replace"
        line_items = project.line_items

        installation = []
        if "Underlayment & Felt" in line_items:
            installation.append(f"Install {project.felt or '15lb'} felt underlayment")
        if project.ice_water_shield:
            installation.append("Install ice and water shield")
        if project.drip_edge:
            installation.append("Install drip edge and trim")
        first_layer = project.material_layers[0] if project.material_layers else "roofing materials"
        installation.append(f"Install {first_layer}")
        if "Ridge Vents & Ventilation" in line_items:
            installation.append("Install ridge vents and ventilation")
        if "Flashing (All Types)" in line_items:
            installation.append("Install flashing systems")
        installation.append("Final inspection and quality control")

        special_equipment = ["Steep assist equipment and safety gear"] if steep else []
        special_equipment += [
            "Roofing tools and fasteners",
            "Material hoisting equipment",
            "Safety equipment and fall protection",
        ]
        safety = ["OSHA compliant fall protection", "Hard hats and safety equipment"]
        if project.roof_pitch and "Steep" in project.roof_pitch:
            safety.append("Additional steep roof safety measures")
        safety.append("Weather monitoring protocols")

        total_rate, roofing_rate = MATERIAL_RATES.get(project.material_preference, DEFAULT_MATERIAL_RATES)
        equipment_items = [
            {"item": "Tool rental and equipment", "cost": 500 if steep else 300},
            {"item": "Safety equipment", "cost": 200},
        ]
        if steep:
            equipment_items.append({"item": "Steep assist equipment", "cost": 300})

        worker_count = project.labor_needs.worker_count if project.labor_needs else None

        return {
            "scopeOfWork": {
                "preparationTasks": [
                    "Site assessment and safety setup",
                    "Material delivery and staging",
                    "Obtain required local permits" if project.local_permit else "Permits if needed",
                    "Weather monitoring and scheduling",
                ],
                "removalTasks": [
                    "Complete removal of existing roofing materials" if full_replace
                    else "Partial removal of damaged sections",
                    "Debris removal and disposal",
                    "Deck inspection and repair preparation",
                ],
                "installationTasks": installation,
                "finishingTasks": [
                    "Site cleanup and debris removal",
                    "Final walkthrough with client",
                    "Warranty documentation",
                ],
            },
            "laborRequirements": {
                "crewSize": worker_count or "3-5",
                "estimatedDays": "5-8" if full_replace else "2-4",
                "specialEquipment": special_equipment,
                "safetyRequirements": safety,
            },
            "materialBreakdown": {
                "lineItems": [self._line_item(item, area) for item in line_items],
            },
            "costEstimates": {
                "materials": {
                    "total": area * total_rate,
                    "breakdown": [
                        {"category": "Roofing Materials", "amount": area * roofing_rate},
                        {"category": "Underlayment & Accessories", "amount": area * 1.5},
                        {"category": "Flashing & Trim", "amount": area * 1},
                    ],
                },
                "labor": {
                    "total": area * (4 if steep else 3),
                    "ratePerHour": 75 if steep else 65,
                    "totalHours": math.ceil(area / (80 if steep else 100)),
                },
                "equipment": {
                    "total": 800 if steep else 500,
                    "items": equipment_items,
                },
            },
        }

    @staticmethod
    def _line_item(item: str, area: float) -> Dict[str, Any]:
        by_square = "Shingles" in item or "Underlayment" in item
        if by_square:
            unit = "squares"
        elif "Linear" in item:
            unit = "linear feet"
        else:
            unit = "each"
        return {
            "item": item,
            "quantity": math.ceil(area / 100) if by_square else 1,
            "unit": unit,
            "notes": "Based on project specifications",
        }

    def _project_details(self, project: ProjectInput, merged: Dict[str, Any], localizer: Localizer) -> List[KeyValueRow]:
        details = merged.get("projectDetails")
        dimensions = details.get("dimensions") if isinstance(details, dict) else None
        total_area = project.area or (dimensions.get("totalArea") if isinstance(dimensions, dict) else None)
        pairs = [
            (localizer.t("project_address"), project.location_display or None),
            (localizer.t("project_type"), capitalize_words(project.project_type)),
            (localizer.t("job_type"),
             capitalize_words(project.job_type.replace("-", " ", 1)) if project.job_type else None),
            (localizer.t("material_preference"),
             capitalize_words(project.material_preference) if project.material_preference else None),
            (localizer.t("total_area"), f"{format_number(total_area)} sq ft" if total_area else None),
            (localizer.t("roof_pitch"), project.roof_pitch),
            (localizer.t("roof_age"), f"{format_number(project.roof_age)} years" if project.roof_age else None),
            (localizer.t("structure_type"), project.structure_type),
            (localizer.t("existing_materials"), join_list(project.material_layers)),
            (localizer.t("local_permit"), localizer.t("yes") if project.local_permit else localizer.t("no")),
        ]
        return self.rows(pairs, keep_blank=False)

    def _materials(self, merged: Dict[str, Any], warnings: List[str]) -> List[MaterialRow]:
        section = merged.get("materialBreakdown")
        items = section.get("lineItems") if isinstance(section, dict) else None
        rows = []
        for entry in items or []:
            if not isinstance(entry, dict) or not is_meaningful(entry.get("item")):
                warnings.append("materialBreakdown: dropped malformed line item")
                continue
            rows.append(
                MaterialRow(
                    item=str(entry["item"]),
                    quantity=coerce_value(entry.get("quantity"), "1"),
                    unit=coerce_value(entry.get("unit"), "each"),
                    notes=coerce_value(entry.get("notes"), ""),
                )
            )
        return rows

    def _cost_estimates(self, merged: Dict[str, Any], localizer: Localizer) -> CostEstimates:
        estimates = merged.get("costEstimates") or {}
        materials = estimates.get("materials") or {}
        labor = estimates.get("labor") or {}
        equipment = estimates.get("equipment") or {}

        materials_total = to_number(materials.get("total"))
        labor_total = to_number(labor.get("total"))
        equipment_total = to_number(equipment.get("total"))
        show_totals = materials_total > 0 or labor_total > 0

        breakdown = [
            KeyValueRow(label=f"{entry.get('category', 'Materials')}:", value=localizer.money(to_number(entry.get("amount"))))
            for entry in materials.get("breakdown") or []
            if isinstance(entry, dict)
        ]
        items = [
            KeyValueRow(label=f"{entry.get('item', 'Equipment')}:", value=localizer.money(to_number(entry.get("cost"))))
            for entry in equipment.get("items") or []
            if isinstance(entry, dict)
        ]

        return CostEstimates(
            materials_breakdown=breakdown if show_totals and materials_total > 0 else [],
            materials_total=localizer.money(materials_total) if show_totals and materials_total > 0 else "",
            labor_rate=localizer.money(to_number(labor.get("ratePerHour"))),
            labor_hours=format_number(to_number(labor.get("totalHours"))),
            labor_total=localizer.money(labor_total) if show_totals and labor_total > 0 else "",
            equipment_items=items if show_totals and equipment_total > 0 else [],
            equipment_total=localizer.money(equipment_total) if show_totals and equipment_total > 0 else "",
            project_total=(
                localizer.money(materials_total + labor_total + equipment_total) if show_totals else ""
            ),
        )

    def build_report(
        self,
        project: ProjectInput,
        merged: Dict[str, Any],
        localizer: Localizer,
        base: Dict[str, Any],
    ) -> ContractorReport:
        scope = coerce_value(merged["scopeOfWork"])
        labor = coerce_value(merged["laborRequirements"])
        labor["steepAssist"] = localizer.t("required") if project.steep_assist else localizer.t("not_required")
        labor["crewSize"] = f"{labor['crewSize']} {localizer.t('workers')}"
        labor["estimatedDays"] = f"{labor['estimatedDays']} {localizer.t('days')}"

        return ContractorReport(
            **base,
            project_details=self._project_details(project, merged, localizer),
            scope_of_work=scope,
            labor_requirements=labor,
            material_breakdown=self._materials(merged, base["warnings"]),
            cost_estimates=self._cost_estimates(merged, localizer),
        )
