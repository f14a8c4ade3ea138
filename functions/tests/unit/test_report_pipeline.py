"""Unit tests for the end-to-end report pipeline.

WeasyPrint is patched out; everything up to HTML rendering runs for real.
"""

from datetime import datetime

import pytest
from unittest.mock import AsyncMock, MagicMock

from config.errors import ErrorCode, RenderError, ValidationError
from models.persisted_document import RenderedDocument
from models.project_input import ProjectInput
from services.cost_estimator import estimate
from services.report_pipeline import ReportOptions, ReportPipeline, build_file_name, build_structured_data
from services.report_storage import ReportStorage, decode_pdf
from tests.fixtures.sample_projects import HOMEOWNER_FORM, HOMEOWNER_PAYLOAD, INSURANCE_FORM

AS_OF = datetime(2024, 3, 1, 9, 30)


@pytest.fixture
def pipeline(fake_firestore_service):
    return ReportPipeline(storage=ReportStorage(firestore_service=fake_firestore_service), brand_name="RoofReport")


class TestBuildFileName:

    def test_with_user(self):
        assert build_file_name("Maple Street Roof", "Pat Doe", AS_OF, "RoofReport") == (
            "pat_doe_maple_street_roof_2024-03-01_RoofReport.pdf"
        )

    def test_without_user_or_project(self):
        assert build_file_name(None, "", AS_OF, "RoofReport") == "project_2024-03-01_RoofReport.pdf"


class TestBuildStructuredData:

    def _document(self):
        return RenderedDocument(
            pdf_bytes=b"%PDF-1.4",
            page_count=3,
            generated_at="2024-03-01T09:30:00",
            file_name="roof.pdf",
            role="homeowner",
        )

    def test_record_keys(self):
        project = ProjectInput.model_validate({**HOMEOWNER_FORM, "id": "proj-7"})

        data = build_structured_data(project, self._document(), estimate(project), None, "pat.doe")

        assert sorted(data) == [
            "estimate", "formInputData", "geminiResponse", "project", "projectType", "uploadedBy",
        ]
        assert data["geminiResponse"] is None
        assert data["estimate"] == {
            "id": "proj-7",
            "totalCost": 196388,
            "materialsCost": 117300,
            "laborCost": 62100,
            "createdAt": "2024-03-01T09:30:00",
        }
        assert sorted(data["project"]) == ["area", "id", "location", "name", "type", "userRole"]

    def test_without_estimate_or_id(self):
        project = ProjectInput.model_validate(HOMEOWNER_FORM)

        data = build_structured_data(project, self._document(), None, {"summary": "ok"}, "pat.doe")

        assert data["estimate"] is None
        assert data["project"]["id"] is None
        assert data["geminiResponse"] == {"summary": "ok"}


class TestGenerateReport:

    @pytest.mark.asyncio
    async def test_signed_in_report_is_saved(self, pipeline, signed_in_session, fake_pdf_backend, fake_firestore_service):
        result = await pipeline.generate_report(HOMEOWNER_FORM, signed_in_session, options=ReportOptions(as_of=AS_OF))

        assert result.file_name == "pat_doe_maple_street_roof_2024-03-01_RoofReport.pdf"
        assert result.document_id == "report-123"
        assert result.role == "homeowner"
        assert result.cost.total_cost == 196388
        assert decode_pdf(result.pdf_base64).startswith(b"%PDF")
        assert result.page_count >= 3

        record = fake_firestore_service.add_report.call_args.args[0]
        assert record["projectType"] == "homeowner"
        assert record["uploadedBy"] == "pat.doe"
        assert record["estimate"]["totalCost"] == 196388
        assert record["geminiResponse"] is None

    @pytest.mark.asyncio
    async def test_username_option_overrides_session(self, pipeline, signed_in_session, fake_pdf_backend):
        options = ReportOptions(username="Pat Doe", as_of=AS_OF, persist=False)

        result = await pipeline.generate_report(HOMEOWNER_FORM, signed_in_session, options=options)

        assert result.file_name == "pat_doe_maple_street_roof_2024-03-01_RoofReport.pdf"
        assert result.uploaded_by == "Pat Doe"
        assert "skipped: persistence disabled" in result.warnings

    @pytest.mark.asyncio
    async def test_anonymous_report_is_returned_unsaved(self, pipeline, anonymous_session, fake_pdf_backend,
                                                        fake_firestore_service):
        result = await pipeline.generate_report(HOMEOWNER_FORM, anonymous_session, options=ReportOptions(as_of=AS_OF))

        assert result.document_id is None
        assert result.save_outcome.ok
        assert "skipped: no authenticated user" in result.warnings
        assert result.file_name == "anonymous_maple_street_roof_2024-03-01_RoofReport.pdf"
        fake_firestore_service.add_report.assert_not_called()

    @pytest.mark.asyncio
    async def test_ai_payload_is_stored(self, pipeline, signed_in_session, fake_pdf_backend, fake_firestore_service):
        result = await pipeline.generate_report(HOMEOWNER_FORM, signed_in_session, ai_payload=HOMEOWNER_PAYLOAD)

        record = fake_firestore_service.add_report.call_args.args[0]
        assert record["geminiResponse"] == HOMEOWNER_PAYLOAD
        assert result.structured_data["geminiResponse"] == HOMEOWNER_PAYLOAD

    @pytest.mark.asyncio
    async def test_estimate_failure_is_a_warning(self, pipeline, signed_in_session, fake_pdf_backend):
        form = {**INSURANCE_FORM, "projectType": "spaceport"}

        result = await pipeline.generate_report(form, signed_in_session)

        assert result.cost is None
        assert any(w.startswith("estimate unavailable") for w in result.warnings)
        assert result.structured_data["estimate"] is None

    @pytest.mark.asyncio
    async def test_unknown_role_renders_branding_only(self, pipeline, signed_in_session, fake_pdf_backend):
        result = await pipeline.generate_report({**HOMEOWNER_FORM, "userRole": "architect"}, signed_in_session)

        assert result.page_count == 2
        assert any("branding pages only" in w for w in result.warnings)

    @pytest.mark.asyncio
    async def test_save_failure_still_returns_document(self, pipeline, signed_in_session, fake_pdf_backend,
                                                       fake_firestore_service):
        from config.errors import RoofReportError

        fake_firestore_service.add_report.side_effect = RoofReportError(
            code=ErrorCode.FIRESTORE_WRITE_FAILED, message="quota exceeded"
        )

        result = await pipeline.generate_report(HOMEOWNER_FORM, signed_in_session)

        assert result.pdf_base64
        assert not result.save_outcome.ok
        assert "save failed: quota exceeded" in result.warnings

    @pytest.mark.asyncio
    async def test_analysis_runs_only_when_requested(self, fake_firestore_service, signed_in_session, fake_pdf_backend):
        analysis = MagicMock()
        analysis.analyze = AsyncMock(return_value=HOMEOWNER_PAYLOAD)
        pipeline = ReportPipeline(
            storage=ReportStorage(firestore_service=fake_firestore_service),
            analysis=analysis,
        )

        await pipeline.generate_report(HOMEOWNER_FORM, signed_in_session)
        analysis.analyze.assert_not_called()

        result = await pipeline.generate_report(HOMEOWNER_FORM, signed_in_session, options=ReportOptions(analyze=True))
        analysis.analyze.assert_awaited_once()
        assert result.structured_data["geminiResponse"] == HOMEOWNER_PAYLOAD

    @pytest.mark.asyncio
    async def test_invalid_input_raises(self, pipeline):
        with pytest.raises(ValidationError) as exc_info:
            await pipeline.generate_report({"area": -5, "userRole": "homeowner"})

        assert exc_info.value.code == ErrorCode.INVALID_FIELD
        assert exc_info.value.details["field"] == "area"

    @pytest.mark.asyncio
    async def test_render_failure_propagates(self, pipeline, signed_in_session, monkeypatch, fake_firestore_service):
        def explode(html):
            raise OSError("no cairo")

        monkeypatch.setattr("renderer.pdf_writer._html_to_pdf", explode)

        with pytest.raises(RenderError):
            await pipeline.generate_report(HOMEOWNER_FORM, signed_in_session)

        fake_firestore_service.add_report.assert_not_called()

    def test_to_dict_uses_camel_case(self):
        from services.report_pipeline import ReportGenerationResult

        result = ReportGenerationResult(
            file_name="r.pdf",
            pdf_base64="data:application/pdf;base64,",
            file_size=0,
            timestamp="2024-03-01T09:30:00",
            role="homeowner",
            page_count=2,
            uploaded_by="pat",
        )

        data = result.to_dict()
        assert data["fileName"] == "r.pdf"
        assert data["projectType"] == "homeowner"
        assert data["save"] is None
