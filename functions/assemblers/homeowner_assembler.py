"""Homeowner report assembler.

Plain-language content: welcome, roof overview, findings, recommendations,
budget planning and a fixed glossary of roofing terms.
"""

from typing import Any, Dict, List, Optional

from models.cost_breakdown import CostBreakdown
from models.project_input import ProjectInput
from models.reports import GlossaryEntry, HomeownerReport
from services.cost_estimator import round_half_up
from services.localization import Localizer
from assemblers.base_assembler import BaseAssembler, coerce_value, format_number, join_list

GLOSSARY_TERMS = (
    ("Drip Edge",
     "Metal strips installed along roof edges to direct water away from fascia and into gutters, "
     "preventing water damage."),
    ("Ice and Water Shield",
     "A waterproof membrane applied to vulnerable roof areas (like valleys and eaves) to prevent "
     "ice dams and water infiltration."),
    ("Felt Underlayment",
     "Protective barrier installed beneath roofing materials to provide additional waterproofing "
     "and weather protection."),
    ("Roof Pitch",
     "The steepness of your roof measured as rise over run. Low slope (2-4/12), medium (4-8/12), "
     "steep (8+/12)."),
    ("Flashing",
     "Metal pieces that seal joints and transitions on your roof (around chimneys, vents, valleys) "
     "to prevent water leaks."),
    ("Ridge Vent",
     "Ventilation system installed along the roof peak to allow hot air to escape from your attic, "
     "improving energy efficiency."),
    ("Gutters & Downspouts",
     "System that collects rainwater from your roof and directs it away from your home's foundation."),
    ("Shingles/Materials",
     "The visible outer layer of your roof. Common types include asphalt shingles, metal, tile, or slate."),
    ("Soffit & Fascia",
     "Soffit: underside of roof overhang. Fascia: vertical board along roof edge. Both protect roof "
     "structure and support gutters."),
    ("Square",
     "Roofing measurement unit. One square = 100 square feet of roof area. Used for material and "
     "labor calculations."),
)

CLOSING_NOTE = (
    "This glossary explains common roofing terms to help you understand your roof better. "
    "Don't hesitate to ask your contractor to explain any technical terms during your consultation."
)

FINANCING_OPTIONS = [
    "Home improvement loans",
    "Insurance claims (if applicable)",
    "Contractor payment plans",
    "Home equity line of credit",
]

COST_SAVING_TIPS = [
    "Get multiple quotes for comparison",
    "Consider timing repairs during off-season",
    "Bundle multiple home improvements",
    "Ask about material upgrade options",
]

# Per-square-foot replacement rates by budget style
PARTIAL_RATES = {"premium": 8, "basic": 4}
FULL_RATES = {"premium": 12, "basic": 6}


def glossary() -> List[GlossaryEntry]:
    return [GlossaryEntry(term=term, definition=definition) for term, definition in GLOSSARY_TERMS]


class HomeownerAssembler(BaseAssembler):
    role = "homeowner"
    title_key = "title_homeowner"
    photo_title_key = "photo_title_homeowner"
    photo_caption_key = "photo_caption_homeowner"
    annotation_key = "imageAnalysis"
    default_caption = (
        "This photo shows your roof's current condition. We've examined this area for signs of wear, "
        "damage, or potential issues that may need attention. Look for any visible signs mentioned in "
        "our recommendations section."
    )
    label_keys = (
        "welcome", "roof_overview", "what_we_found", "recommendations", "budget_planning", "glossary",
        "cost_summary", "property_type", "roof_age", "roof_style", "current_materials",
        "overall_condition", "key_features", "priority_level", "inspection_findings", "main_concerns",
        "what_this_means", "immediate_actions", "short_term_planning", "long_term_outlook", "timeline",
        "investment", "care", "estimated_ranges", "repairs", "partial_replacement", "full_replacement",
        "financing_options", "cost_saving_tips", "photo_caption_homeowner", "no_image", "image_failed",
    )

    def build_fallback(
        self,
        project: ProjectInput,
        localizer: Localizer,
        cost: Optional[CostBreakdown],
    ) -> Dict[str, Any]:
        age = project.roof_age or 0
        damage_count = len(project.slope_damage)
        urgency = project.urgency
        budget = project.budget_style
        owner = project.homeowner_info.name if project.homeowner_info else None

        if age > 20:
            condition = "reaching the end of its typical lifespan"
        elif age > 10:
            condition = "in the middle of its expected lifespan"
        else:
            condition = "relatively new"

        if urgency == "high":
            priority = "High Priority - Immediate attention recommended"
        elif urgency == "medium":
            priority = "Medium Priority - Address within 6 months"
        else:
            priority = "Low Priority - Monitor and plan for future repairs"

        if age > 20 or urgency == "high":
            meaning = "needs prompt attention to prevent water damage to your home"
        elif age > 10:
            meaning = "is showing normal signs of aging and should be monitored closely"
        else:
            meaning = "appears to be in good condition for its age"

        if budget == "premium":
            planning = "Consider high-quality materials for maximum longevity"
            guidance = "investing in premium materials will provide the best long-term value"
        elif budget == "basic":
            planning = "Focus on essential repairs with cost-effective solutions"
            guidance = "focus on necessary repairs to maintain protection"
        else:
            planning = "Balance quality and cost for best value"
            guidance = "a balanced approach offers good protection and value"

        if age > 20:
            outlook = "Replacement recommended within 1-2 years"
        elif age > 15:
            outlook = "Start planning for replacement in 3-5 years"
        else:
            outlook = "Roof should last another 10-15 years with proper maintenance"

        if urgency == "high":
            repairs = (2000, 8000)
        elif urgency == "medium":
            repairs = (1000, 4000)
        else:
            repairs = (500, 2000)

        area = project.effective_area
        partial = round_half_up(area * PARTIAL_RATES.get(budget, 6) * 0.5)
        full = round_half_up(area * FULL_RATES.get(budget, 8))

        return {
            "welcomeMessage": {
                "greeting": f"Dear {owner or 'Homeowner'},",
                "introduction": (
                    f"Thank you for choosing {self.brand_name} for your roofing assessment. We've carefully "
                    f"analyzed your {project.structure_type or 'home'} and prepared this easy-to-understand "
                    "report to help you make informed decisions about your roof."
                ),
                "ourCommitment": (
                    "Our goal is to provide you with clear, honest information about your roof's condition "
                    "and help you understand your options moving forward."
                ),
            },
            "roofOverview": {
                "propertyType": project.structure_type or "Residential structure",
                "roofAge": f"{format_number(project.roof_age)} years old" if project.roof_age else "Age not specified",
                "roofStyle": project.roof_pitch or "Standard pitch",
                "currentMaterials": join_list(project.material_layers) or "Standard roofing materials",
                "overallCondition": f"Based on the age and materials, your roof is {condition}",
                "keyFeatures": [
                    "Ice and water shield protection installed" if project.ice_water_shield else "Standard underlayment",
                    "Drip edge protection in place" if project.drip_edge else "Basic edge protection",
                    f"Felt underlayment: {project.felt or 'Standard grade'}",
                ],
            },
            "damageSummary": {
                "inspectionFindings": f"We've identified {damage_count} areas of concern that need your attention",
                "priorityLevel": priority,
                "mainConcerns": [
                    "Age-related wear and material deterioration" if age > 15 else "Normal wear patterns for roof age",
                    "Visible damage requiring professional attention" if damage_count
                    else "No major structural concerns identified",
                    "Weather protection effectiveness",
                ],
                "whatThisMeans": f"In simple terms, your roof {meaning}",
            },
            "repairSuggestions": {
                "immediateActions": [
                    "Contact a licensed roofer within 2 weeks" if urgency == "high" else "Schedule a professional inspection",
                    "Address visible damage areas to prevent water intrusion" if damage_count
                    else "Continue regular maintenance and monitoring",
                    "Monitor for leaks during heavy rain",
                ],
                "shortTermPlanning": [
                    planning,
                    "Get quotes from 3 licensed contractors",
                    "Plan timing around weather and personal schedule",
                ],
                "longTermOutlook": {
                    "timeline": outlook,
                    "investmentGuidance": f"For a roof of this age and condition, {guidance}",
                    "preventiveCare": (
                        "Regular maintenance can extend your roof's life and prevent costly emergency repairs"
                    ),
                },
            },
            "budgetGuidance": {
                "estimatedRange": {
                    "repairs": f"{localizer.money(repairs[0])} - {localizer.money(repairs[1])}",
                    "partialReplacement": localizer.money(partial),
                    "fullReplacement": localizer.money(full),
                },
                "financingOptions": list(FINANCING_OPTIONS),
                "costSavingTips": list(COST_SAVING_TIPS),
            },
        }

    def build_report(
        self,
        project: ProjectInput,
        merged: Dict[str, Any],
        localizer: Localizer,
        base: Dict[str, Any],
    ) -> HomeownerReport:
        content = coerce_value(merged)
        return HomeownerReport(
            **base,
            welcome_message=content["welcomeMessage"],
            roof_overview=content["roofOverview"],
            damage_summary=content["damageSummary"],
            repair_suggestions=content["repairSuggestions"],
            budget_guidance=content["budgetGuidance"],
            glossary=glossary(),
            closing_note=CLOSING_NOTE,
        )
