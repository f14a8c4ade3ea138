"""Report builder: assembled report models to draw commands.

Every document opens and closes with a branding page. Between them comes the
role body followed by one page per uploaded photo. Reports for roles without
a body layout get the two branding pages only.
"""

from typing import Callable, Dict, List, Optional

import structlog

from config.settings import settings
from models.reports import (
    ContractorReport,
    HomeownerReport,
    InspectorReport,
    InsuranceReport,
    KeyValueRow,
    PhotoEntry,
    ReportBase,
)
from renderer.commands import (
    BRAND_ORANGE,
    GREY,
    LEGAL_BLUE,
    RGB,
    BrandingPage,
    BulletList,
    Command,
    ImageBlock,
    KeyValue,
    PageBreak,
    SectionHeader,
    Spacer,
    Table,
    TextBlock,
    Title,
)

logger = structlog.get_logger()

PRIORITY_COLORS = {
    "high": (220, 50, 50),
    "medium": (180, 120, 50),
}
LOW_PRIORITY_COLOR = (60, 120, 50)

FULL_WIDTH_IMAGE_HEIGHT = 120
EVIDENCE_IMAGE_WIDTH = 150
EVIDENCE_IMAGE_HEIGHT = 100


def priority_color(priority_level: str) -> RGB:
    """Color for a priority label such as ``"High Priority - ..."``."""
    lowered = (priority_level or "").lower()
    for keyword, color in PRIORITY_COLORS.items():
        if keyword in lowered:
            return color
    return LOW_PRIORITY_COLOR


class ReportBuilder:
    """Emits the draw commands for one report.

    Usage:
        commands = ReportBuilder("RoofReport").build(report, "homeowner")
    """

    def __init__(self, brand_name: Optional[str] = None):
        self.brand_name = brand_name or settings.brand_name
        self._bodies: Dict[str, Callable[[ReportBase], List[Command]]] = {
            "homeowner": self._homeowner,
            "contractor": self._contractor,
            "inspector": self._inspector,
            "insurance-adjuster": self._insurance,
        }
        self._photo_pages: Dict[str, Callable[[ReportBase, int, PhotoEntry], List[Command]]] = {
            "homeowner": self._explained_photo,
            "contractor": self._explained_photo,
            "inspector": self._inspector_photo,
            "insurance-adjuster": self._insurance_photo,
        }

    def build(self, report: Optional[ReportBase], role: Optional[str] = None) -> List[Command]:
        role = (role or (report.role if report else "") or "").strip().lower()
        commands: List[Command] = [BrandingPage(self.brand_name), PageBreak()]

        body = self._bodies.get(role)
        if body is None or report is None:
            logger.warning("report_role_unrecognized", role=role, has_report=report is not None)
        else:
            commands.extend(body(report))
            photo_page = self._photo_pages[role]
            for index, photo in enumerate(report.photos):
                commands.append(PageBreak())
                commands.extend(photo_page(report, index, photo))

        commands.extend([PageBreak(), BrandingPage(self.brand_name)])
        logger.debug("report_commands_built", role=role, command_count=len(commands))
        return commands

    # ------------------------------------------------------------------
    # Shared pieces
    # ------------------------------------------------------------------

    @staticmethod
    def _rows(rows: List[KeyValueRow], label_width: float = 50) -> List[Command]:
        return [KeyValue(row.label, row.value, label_width=label_width) for row in rows]

    def _cost_summary(self, report: ReportBase) -> List[Command]:
        if not report.cost_summary:
            return []
        return [
            SectionHeader(report.label("cost_summary")),
            *self._rows(report.cost_summary),
            Spacer(5),
        ]

    # ------------------------------------------------------------------
    # Role bodies
    # ------------------------------------------------------------------

    def _homeowner(self, report: HomeownerReport) -> List[Command]:
        label = report.label
        welcome = report.welcome_message
        overview = report.roof_overview
        damage = report.damage_summary
        repairs = report.repair_suggestions
        outlook = repairs.long_term_outlook
        budget = report.budget_guidance
        ranges = budget.estimated_range
        level_color = priority_color(damage.priority_level)

        commands: List[Command] = [
            Title(report.title),
            SectionHeader(label("welcome")),
            TextBlock(welcome.greeting, size=12, style="bold", line_height=7),
            TextBlock(welcome.introduction, space_after=3),
            TextBlock(welcome.our_commitment, style="italic", space_after=5),
            SectionHeader(label("roof_overview")),
            KeyValue(label("property_type"), overview.property_type),
            KeyValue(label("roof_age"), overview.roof_age),
            KeyValue(label("roof_style"), overview.roof_style),
            KeyValue(label("current_materials"), overview.current_materials),
            KeyValue(label("overall_condition"), overview.overall_condition),
            BulletList(overview.key_features, heading=label("key_features")),
            SectionHeader(label("what_we_found")),
            KeyValue(label("priority_level"), damage.priority_level),
            TextBlock(damage.priority_level.upper(), size=12, style="bold", color=level_color, line_height=7),
            TextBlock(label("inspection_findings"), style="bold", line_height=7),
            TextBlock(damage.inspection_findings, space_after=3),
            BulletList(damage.main_concerns, heading=label("main_concerns")),
            TextBlock(label("what_this_means"), style="bold", line_height=7),
            TextBlock(damage.what_this_means, space_after=5),
            SectionHeader(label("recommendations")),
            BulletList(repairs.immediate_actions, heading=label("immediate_actions")),
            BulletList(repairs.short_term_planning, heading=label("short_term_planning")),
            TextBlock(label("long_term_outlook"), style="bold", line_height=7),
            KeyValue(label("timeline"), outlook.timeline, label_width=30),
            KeyValue(label("investment"), outlook.investment_guidance, label_width=30),
            KeyValue(label("care"), outlook.preventive_care, label_width=30),
            Spacer(5),
            SectionHeader(label("budget_planning")),
            TextBlock(label("estimated_ranges"), style="bold", line_height=7),
            KeyValue(label("repairs"), ranges.repairs),
            KeyValue(label("partial_replacement"), ranges.partial_replacement),
            KeyValue(label("full_replacement"), ranges.full_replacement),
            Spacer(3),
            BulletList(budget.financing_options, heading=label("financing_options")),
            BulletList(budget.cost_saving_tips, heading=label("cost_saving_tips")),
        ]
        commands.extend(self._cost_summary(report))
        commands.append(SectionHeader(label("glossary")))
        for entry in report.glossary:
            commands.append(TextBlock(entry.term, style="bold", line_height=6))
            commands.append(TextBlock(entry.definition, indent=5, line_height=5, space_after=2))
        commands.append(Spacer(5))
        commands.append(TextBlock(report.closing_note, size=9, style="italic", color=GREY, line_height=5))
        return commands

    def _contractor(self, report: ContractorReport) -> List[Command]:
        label = report.label
        labor = report.labor_requirements
        costs = report.cost_estimates

        commands: List[Command] = [
            Title(report.title),
            SectionHeader(label("project_details")),
            *self._rows(report.project_details, label_width=60),
            Spacer(5),
            SectionHeader(label("scope_of_work")),
        ]
        for key, tasks in report.scope_of_work.phases():
            commands.append(BulletList(tasks, heading=label(key)))

        commands.extend([
            SectionHeader(label("labor_equipment")),
            KeyValue(label("crew_size"), labor.crew_size),
            KeyValue(label("estimated_days"), labor.estimated_days),
            KeyValue(label("steep_assist"), labor.steep_assist),
            BulletList(labor.special_equipment, heading=label("special_equipment")),
            BulletList(labor.safety_requirements, heading=label("safety_requirements")),
        ])

        if report.material_breakdown:
            commands.extend([
                SectionHeader(label("material_breakdown")),
                Table(
                    headers=[label("col_item"), label("col_qty"), label("col_unit"), label("col_notes")],
                    rows=[row.cells() for row in report.material_breakdown],
                ),
            ])

        commands.append(SectionHeader(label("cost_estimates")))
        if costs.materials_total:
            commands.append(TextBlock(label("materials_breakdown"), style="bold", line_height=7))
            commands.extend(self._rows(costs.materials_breakdown, label_width=60))
            commands.append(KeyValue(label("total_materials"), costs.materials_total, label_width=60))
            commands.append(Spacer(3))
        if costs.labor_total:
            commands.append(TextBlock(label("labor_section"), style="bold", line_height=7))
            commands.append(KeyValue(label("rate_per_hour"), costs.labor_rate, label_width=60))
            commands.append(KeyValue(label("total_hours"), costs.labor_hours, label_width=60))
            commands.append(KeyValue(label("total_labor"), costs.labor_total, label_width=60))
            commands.append(Spacer(3))
        if costs.equipment_total:
            commands.append(TextBlock(label("equipment_section"), style="bold", line_height=7))
            commands.extend(self._rows(costs.equipment_items, label_width=60))
            commands.append(KeyValue(label("total_equipment"), costs.equipment_total, label_width=60))
            commands.append(Spacer(3))
        if costs.project_total:
            commands.append(
                TextBlock(
                    f"{label('project_total')} {costs.project_total}",
                    size=14,
                    style="bold",
                    color=BRAND_ORANGE,
                    line_height=9,
                    space_after=5,
                )
            )
        commands.extend(self._cost_summary(report))
        return commands

    def _inspector(self, report: InspectorReport) -> List[Command]:
        label = report.label
        cert = report.certification
        details = report.inspection_details
        structure = report.structure

        commands: List[Command] = [
            Title(report.title),
            SectionHeader(label("inspector_certification"), fill=LEGAL_BLUE),
            KeyValue(label("inspector"), cert.inspector),
            KeyValue(label("license"), cert.license),
            KeyValue(label("contact"), cert.contact),
            Spacer(5),
            SectionHeader(label("inspection_details"), fill=LEGAL_BLUE),
            KeyValue(label("date"), details.date),
            KeyValue(label("weather_conditions"), details.weather),
            Spacer(5),
            SectionHeader(label("property_location"), fill=LEGAL_BLUE),
            KeyValue(label("address"), report.property_address),
            Spacer(5),
            SectionHeader(label("structure_analysis"), fill=LEGAL_BLUE),
            KeyValue(label("type"), structure.type),
            KeyValue(label("roof_pitch"), structure.roof_pitch),
            KeyValue(label("age"), structure.age),
            KeyValue(label("materials"), structure.materials),
            Spacer(5),
            SectionHeader(label("slope_conditions"), fill=LEGAL_BLUE),
        ]
        if not report.slopes:
            commands.append(TextBlock(label("no_slope_damage"), style="italic", space_after=5))
        for slope in report.slopes:
            commands.extend([
                TextBlock(f"{label('slope')} {slope.slope}", style="bold", line_height=7),
                KeyValue(label("damage_type"), slope.damage_type),
                KeyValue(label("severity"), slope.severity),
                KeyValue(label("description"), slope.description),
                Spacer(3),
            ])

        commands.append(SectionHeader(label("components_assessment"), fill=LEGAL_BLUE))
        commands.extend(self._rows(report.components, label_width=60))
        commands.extend([
            Spacer(5),
            SectionHeader(label("notes_equipment"), fill=LEGAL_BLUE),
            KeyValue(label("equipment_used"), report.equipment_used),
            KeyValue(label("owner_notes"), report.owner_notes),
            Spacer(5),
        ])
        commands.extend(self._cost_summary(report))
        return commands

    def _insurance(self, report: InsuranceReport) -> List[Command]:
        label = report.label
        claim = report.claim_metadata
        coverage = report.coverage
        storm = report.storm_damage

        commands: List[Command] = [
            Title(report.title),
            SectionHeader(label("claim_metadata")),
            KeyValue(label("claim_number"), claim.claim_number),
            KeyValue(label("policyholder"), claim.policyholder),
            KeyValue(label("adjuster"), claim.adjuster_name),
            KeyValue(label("contact"), claim.adjuster_contact),
            KeyValue(label("date_of_loss"), claim.date_of_loss),
            KeyValue(label("date_of_inspection"), claim.date_of_inspection),
            Spacer(5),
        ]
        if report.inspection_summary:
            commands.append(SectionHeader(label("inspection_summary")))
            commands.extend(self._rows(report.inspection_summary))
            commands.append(Spacer(5))

        commands.extend([
            SectionHeader(label("coverage_analysis")),
            BulletList(coverage.covered_items, heading=label("covered_items"), empty_text=label("no_covered_items")),
            BulletList(
                coverage.non_covered_items,
                heading=label("non_covered_items"),
                empty_text=label("no_non_covered_items"),
            ),
        ])
        if coverage.maintenance_items:
            commands.append(BulletList(coverage.maintenance_items, heading=label("maintenance_items")))

        commands.extend([
            SectionHeader(label("storm_damage")),
            KeyValue(label("primary_damage_cause"), storm.primary_damage_cause, label_width=60),
            BulletList(
                storm.affected_components,
                heading=label("affected_components"),
                empty_text=label("no_affected_components"),
            ),
        ])

        # Section is left out entirely when no complete damage rows survive
        if report.damage_classifications:
            commands.append(SectionHeader(label("damage_classifications")))
            for row in report.damage_classifications:
                commands.extend([
                    TextBlock(f"{label('slope_heading')} {row.slope}", style="bold", line_height=7),
                    KeyValue(label("type"), row.damage_type, label_width=30),
                    KeyValue(label("severity"), row.severity, label_width=30),
                    KeyValue(label("description"), row.description, label_width=30),
                    Spacer(3),
                ])

        commands.extend(self._cost_summary(report))
        commands.extend([
            SectionHeader(label("legal_certification"), fill=LEGAL_BLUE),
            TextBlock(report.legal_certification, space_after=5),
        ])
        return commands

    # ------------------------------------------------------------------
    # Photo pages
    # ------------------------------------------------------------------

    def _explained_photo(self, report: ReportBase, index: int, photo: PhotoEntry) -> List[Command]:
        caption_key = "photo_caption_homeowner" if report.role == "homeowner" else "photo_caption_contractor"
        return [
            Title(photo.title, size=16),
            ImageBlock(
                data=photo.data,
                height=FULL_WIDTH_IMAGE_HEIGHT,
                missing_text=report.label("no_image"),
                failed_text=report.label("image_failed"),
            ),
            Spacer(10),
            TextBlock(report.label(caption_key), size=12, style="bold", color=BRAND_ORANGE, line_height=8),
            TextBlock(photo.caption, line_height=6),
        ]

    def _inspector_photo(self, report: ReportBase, index: int, photo: PhotoEntry) -> List[Command]:
        return [
            Title(photo.title, size=16, align="left", color=LEGAL_BLUE, advance=25, rule=LEGAL_BLUE),
            TextBlock(photo.caption, size=11, width=150, line_height=6, space_after=10),
            ImageBlock(
                data=photo.data,
                height=EVIDENCE_IMAGE_HEIGHT,
                width=EVIDENCE_IMAGE_WIDTH,
                x=20,
                missing_text=report.label("no_image"),
                failed_text=report.label("image_failed"),
                details=[
                    f"{report.label('image_name_inspector')} {photo.name}",
                    f"{report.label('image_size_inspector')} {photo.size_label}",
                ],
            ),
        ]

    def _insurance_photo(self, report: ReportBase, index: int, photo: PhotoEntry) -> List[Command]:
        return [
            Title(photo.title, size=16, align="left", advance=25, rule=BRAND_ORANGE),
            TextBlock(photo.caption, size=11, width=150, line_height=6, space_after=10),
            ImageBlock(
                data=photo.data,
                height=EVIDENCE_IMAGE_HEIGHT,
                width=EVIDENCE_IMAGE_WIDTH,
                x=20,
                missing_text=report.label("no_image"),
                failed_text=report.label("image_failed"),
                details=[
                    f"{report.label('image_name_insurance')} {photo.name}",
                    f"{report.label('image_size_insurance')} {photo.size_label}",
                    report.label("insurance_use_only"),
                ],
            ),
        ]
