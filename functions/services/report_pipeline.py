"""Report generation pipeline for RoofReport.

Runs one report end to end:

    ProjectInput -> estimate -> (optional) AI analysis -> role assembler
        -> report builder -> layout -> PDF -> persistence

Generation raises only for invalid input or a rendering failure. Estimation,
analysis and persistence problems are carried as warnings and outcomes on the
result so the caller always gets its document.
"""

import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from assemblers import get_assembler
from config.errors import ErrorCode, RenderError, ValidationError
from config.settings import settings
from models.cost_breakdown import CostBreakdown
from models.outcome import Outcome
from models.persisted_document import RenderedDocument
from models.project_input import ProjectInput
from renderer import DocumentRenderer
from services.analysis_service import AnalysisService
from services.cost_estimator import estimate_result
from services.report_storage import ReportStorage, encode_pdf
from services.session import UserSession
from utils.report_logger import (
    log_generation_complete,
    log_generation_failed,
    log_generation_start,
    log_payload_summary,
)

logger = structlog.get_logger()


@dataclass
class ReportOptions:
    """Per-call generation options.

    Attributes:
        username: Name used in the file name and ``uploadedBy``; defaults to the session's
        analyze: Request an AI payload when none is supplied
        persist: Save the document to Firestore
        as_of: Fixed clock for dates in the report and file name
        verbose: Print banner summaries of the inputs
    """

    username: Optional[str] = None
    analyze: bool = False
    persist: bool = True
    as_of: Optional[datetime] = None
    verbose: bool = False


@dataclass
class ReportGenerationResult:
    """Everything the caller needs after a report run."""

    file_name: str
    pdf_base64: str
    file_size: int
    timestamp: str
    role: str
    page_count: int
    uploaded_by: str
    cost: Optional[CostBreakdown] = None
    document_id: Optional[str] = None
    save_outcome: Optional[Outcome[str]] = None
    structured_data: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fileName": self.file_name,
            "pdfBase64": self.pdf_base64,
            "fileSize": self.file_size,
            "timestamp": self.timestamp,
            "projectType": self.role,
            "pageCount": self.page_count,
            "uploadedBy": self.uploaded_by,
            "cost": self.cost.to_dict() if self.cost else None,
            "documentId": self.document_id,
            "save": self.save_outcome.to_dict() if self.save_outcome else None,
            "structuredData": self.structured_data,
            "warnings": self.warnings,
        }


def _safe_name(value: Optional[str]) -> str:
    return re.sub(r"[^a-z0-9]", "_", value or "", flags=re.IGNORECASE).lower()


def build_file_name(
    project_name: Optional[str],
    username: Optional[str],
    as_of: Optional[datetime] = None,
    brand_name: Optional[str] = None,
) -> str:
    """``{user}_{project}_{YYYY-MM-DD}_{Brand}.pdf``; the user part is dropped when unknown."""
    safe_project = _safe_name(project_name) or "project"
    safe_user = _safe_name(username)
    date = (as_of or datetime.now()).strftime("%Y-%m-%d")
    brand = brand_name or settings.brand_name
    if safe_user:
        return f"{safe_user}_{safe_project}_{date}_{brand}.pdf"
    return f"{safe_project}_{date}_{brand}.pdf"


def build_structured_data(
    project: ProjectInput,
    document: RenderedDocument,
    cost: Optional[CostBreakdown],
    ai_payload: Any,
    uploaded_by: str,
) -> Dict[str, Any]:
    """Metadata stored next to the PDF.

    ``geminiResponse`` and ``estimate`` are always present and hold null
    when there was no AI payload or no estimate.
    """
    form_input = project.to_record()
    # Photos are already embedded in the PDF; keep their names and sizes only
    if "uploadedFiles" in form_input:
        form_input["uploadedFiles"] = [
            {key: value for key, value in upload.items() if key != "data"}
            for upload in form_input["uploadedFiles"]
        ]

    estimate_summary = None
    if cost is not None:
        estimate_summary = {
            "id": project.id,
            "totalCost": cost.total_cost,
            "materialsCost": cost.materials_cost,
            "laborCost": cost.labor_cost,
            "createdAt": document.generated_at,
        }

    return {
        "projectType": document.role or "unknown",
        "uploadedBy": uploaded_by,
        "formInputData": form_input,
        "geminiResponse": ai_payload,
        "project": {
            "id": project.id,
            "name": project.name,
            "userRole": project.user_role,
            "type": project.project_type,
            "location": project.location_display or None,
            "area": project.area,
        },
        "estimate": estimate_summary,
    }


class ReportPipeline:
    """Generates, renders and stores role-specific reports.

    Usage:
        pipeline = ReportPipeline()
        result = await pipeline.generate_report(form_data, session)
    """

    def __init__(
        self,
        storage: Optional[ReportStorage] = None,
        analysis: Optional[AnalysisService] = None,
        brand_name: Optional[str] = None,
    ):
        self._storage = storage
        self._analysis = analysis
        self.brand_name = brand_name or settings.brand_name

    @property
    def storage(self) -> ReportStorage:
        if self._storage is None:
            self._storage = ReportStorage()
        return self._storage

    @property
    def analysis(self) -> AnalysisService:
        if self._analysis is None:
            self._analysis = AnalysisService()
        return self._analysis

    @staticmethod
    def parse_input(project_input: Union[ProjectInput, Dict[str, Any]]) -> ProjectInput:
        """Validate raw form data into a ProjectInput.

        Raises:
            ValidationError: If the form data does not validate.
        """
        if isinstance(project_input, ProjectInput):
            return project_input
        try:
            return ProjectInput.model_validate(project_input or {})
        except PydanticValidationError as e:
            first = e.errors()[0] if e.errors() else {}
            field_name = ".".join(str(part) for part in first.get("loc", ())) or None
            raise ValidationError(
                message=f"Invalid project input: {first.get('msg', str(e))}",
                field=field_name,
                details={"error_count": e.error_count()},
                code=ErrorCode.INVALID_FIELD,
            )

    async def generate_report(
        self,
        project_input: Union[ProjectInput, Dict[str, Any]],
        session: Optional[UserSession] = None,
        ai_payload: Optional[Dict[str, Any]] = None,
        options: Optional[ReportOptions] = None,
    ) -> ReportGenerationResult:
        """Run the full pipeline for one report.

        Raises:
            ValidationError: If the project input is invalid.
            RenderError: If the PDF cannot be produced.
        """
        options = options or ReportOptions()
        start_time = time.perf_counter()
        project = self.parse_input(project_input)
        role = project.user_role or ""
        uploaded_by = options.username or (session.display_name if session and session.is_authenticated else "anonymous")
        warnings: List[str] = []

        log_generation_start(role, project.name, len(project.uploaded_files))
        if options.verbose:
            log_payload_summary("form input", project.to_record())
            log_payload_summary("ai payload", ai_payload)

        estimated = estimate_result(project)
        cost = estimated.value if estimated.ok else None
        if not estimated.ok:
            warnings.append(f"estimate unavailable: {estimated.message}")

        if ai_payload is None and options.analyze:
            ai_payload = await self.analysis.analyze(project, cost)

        assembler = get_assembler(role, as_of=options.as_of, brand_name=self.brand_name)
        report = assembler.assemble(project, ai_payload, cost) if assembler else None
        if report is not None:
            warnings.extend(report.warnings)
        else:
            warnings.append(f"unrecognized role {role!r}: branding pages only")

        file_name = build_file_name(project.name, options.username or uploaded_by, options.as_of, self.brand_name)
        renderer = DocumentRenderer(file_name=file_name, brand_name=self.brand_name, as_of=options.as_of)
        try:
            document = renderer.render(report, role)
        except RenderError as e:
            log_generation_failed("render", e.message, e.code)
            raise

        structured_data = build_structured_data(project, document, cost, ai_payload, uploaded_by)
        if options.persist:
            save_outcome = await self.storage.save(document, structured_data, session)
        else:
            save_outcome = Outcome.success(None, warnings=["skipped: persistence disabled"])
        warnings.extend(save_outcome.warnings)
        if not save_outcome.ok:
            warnings.append(f"save failed: {save_outcome.message}")

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        log_generation_complete(
            file_name=document.file_name,
            page_count=document.page_count,
            file_size=document.file_size,
            duration_ms=duration_ms,
            document_id=save_outcome.value,
            warnings=warnings,
        )

        return ReportGenerationResult(
            file_name=document.file_name,
            pdf_base64=encode_pdf(document.pdf_bytes),
            file_size=document.file_size,
            timestamp=document.generated_at,
            role=role or "unknown",
            page_count=document.page_count,
            uploaded_by=uploaded_by,
            cost=cost,
            document_id=save_outcome.value,
            save_outcome=save_outcome,
            structured_data=structured_data,
            warnings=warnings,
        )


async def generate_report(
    project_input: Union[ProjectInput, Dict[str, Any]],
    session: Optional[UserSession] = None,
    ai_payload: Optional[Dict[str, Any]] = None,
    options: Optional[ReportOptions] = None,
) -> ReportGenerationResult:
    """Module-level shortcut for ``ReportPipeline().generate_report``."""
    return await ReportPipeline().generate_report(project_input, session, ai_payload, options)
