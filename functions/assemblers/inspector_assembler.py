"""Inspector report assembler."""

from typing import Any, Dict, List, Optional

from models.cost_breakdown import CostBreakdown
from models.project_input import ProjectInput
from models.reports import InspectorReport
from services.localization import Localizer
from assemblers.base_assembler import BaseAssembler, coerce_value, format_number, join_list


class InspectorAssembler(BaseAssembler):
    role = "inspector"
    title_key = "title_inspector"
    photo_title_key = "photo_title_inspector"
    annotation_key = "annotatedPhotographicEvidence"
    default_caption = "Professional inspection photo - analysis pending"
    label_keys = (
        "inspector_certification", "inspection_details", "property_location", "structure_analysis",
        "slope_conditions", "components_assessment", "notes_equipment", "cost_summary", "inspector",
        "license", "contact", "date", "weather_conditions", "address", "type", "roof_pitch", "age",
        "materials", "slope", "damage_type", "severity", "description", "no_slope_damage",
        "equipment_used", "owner_notes", "image_name_inspector", "image_size_inspector", "no_image",
        "image_failed",
    )

    def build_fallback(
        self,
        project: ProjectInput,
        localizer: Localizer,
        cost: Optional[CostBreakdown],
    ) -> Dict[str, Any]:
        info = project.inspector_info
        present = localizer.t("present")
        absent = localizer.t("not_present")

        boots = ", ".join(
            f"{boot.size or 'Unknown'} ({boot.quantity if boot.quantity is not None else 0})"
            for boot in project.pipe_boots
        )

        return {
            "certification": {
                "inspector": (info.name if info else None) or "Inspector name not provided",
                "license": (info.license if info else None) or "License not provided",
                "contact": (info.contact if info else None) or "Contact info not provided",
            },
            "inspectionDetails": {
                "date": project.inspection_date or "Date not provided",
                "weather": project.weather_conditions or "Weather not specified",
            },
            "propertyAddress": project.location_display or "Location not provided",
            "structure": {
                "type": project.structure_type or "Not specified",
                "roofPitch": project.roof_pitch or "Not specified",
                "age": f"{format_number(project.roof_age)} years" if project.roof_age else "Not specified",
                "materials": join_list(project.material_layers) or "Not specified",
            },
            "slopes": [
                {
                    "slope": damage.slope or "Not specified",
                    "damageType": damage.damage_type or "Not specified",
                    "severity": damage.severity or "Not specified",
                    "description": damage.description or "No description",
                }
                for damage in project.slope_damage
            ],
            "components": [
                {"label": localizer.t("felt"), "value": project.felt or "Not specified"},
                {"label": localizer.t("ice_water_shield"), "value": present if project.ice_water_shield else absent},
                {"label": localizer.t("drip_edge"), "value": present if project.drip_edge else absent},
                {"label": localizer.t("gutter_apron"), "value": present if project.gutter_apron else absent},
                {"label": localizer.t("pipe_boots"), "value": boots or "None specified"},
                {"label": localizer.t("fascia_condition"),
                 "value": (project.fascia.condition if project.fascia else None) or "Not specified"},
                {"label": localizer.t("gutter_condition"),
                 "value": (project.gutter.condition if project.gutter else None) or "Not specified"},
            ],
            "equipmentUsed": join_list(project.access_tools) or "Not specified",
            "ownerNotes": project.owner_notes or "None provided",
        }

    def build_report(
        self,
        project: ProjectInput,
        merged: Dict[str, Any],
        localizer: Localizer,
        base: Dict[str, Any],
    ) -> InspectorReport:
        content = coerce_value(merged)
        slopes: List[Dict[str, Any]] = [row for row in content["slopes"] if isinstance(row, dict)]
        return InspectorReport(
            **base,
            certification=content["certification"],
            inspection_details=content["inspectionDetails"],
            property_address=content["propertyAddress"],
            structure=content["structure"],
            slopes=[
                {
                    "slope": coerce_value(row.get("slope")),
                    "damageType": coerce_value(row.get("damageType")),
                    "severity": coerce_value(row.get("severity")),
                    "description": coerce_value(row.get("description"), "No description"),
                }
                for row in slopes
            ],
            components=content["components"],
            equipment_used=content["equipmentUsed"],
            owner_notes=content["ownerNotes"],
        )
