"""Unit tests for ReportBuilder and DocumentRenderer page structure."""

from datetime import datetime

import pytest

from assemblers import get_assembler
from config.errors import ErrorCode, RenderError
from models.project_input import ProjectInput
from renderer import DocumentRenderer, ReportBuilder
from renderer.builder import LOW_PRIORITY_COLOR, PRIORITY_COLORS, priority_color
from renderer.commands import BrandingPage, ImageBlock, PageBreak, SectionHeader, TextBlock
from renderer.layout import PlacedText
from tests.fixtures.sample_projects import CONTRACTOR_FORM, HOMEOWNER_FORM, INSPECTOR_FORM, INSURANCE_FORM

AS_OF = datetime(2024, 3, 1, 9, 30)


def _report(form, payload=None, **extra):
    project = ProjectInput.model_validate({**form, **extra})
    return get_assembler(project.user_role, as_of=AS_OF).assemble(project, payload)


def _all_texts(pages):
    return [e.text for page in pages for e in page.elements if isinstance(e, PlacedText)]


class TestReportBuilder:

    def test_opens_and_closes_with_branding(self):
        commands = ReportBuilder("RoofReport").build(_report(HOMEOWNER_FORM))

        assert isinstance(commands[0], BrandingPage)
        assert isinstance(commands[1], PageBreak)
        assert isinstance(commands[-1], BrandingPage)
        assert isinstance(commands[-2], PageBreak)

    @pytest.mark.parametrize("role", ["architect", "", None])
    def test_unknown_role_gets_branding_pages_only(self, role):
        commands = ReportBuilder("RoofReport").build(None, role)

        assert [type(c) for c in commands] == [BrandingPage, PageBreak, PageBreak, BrandingPage]

    @pytest.mark.parametrize("level, expected", [
        ("High Priority - Immediate attention recommended", PRIORITY_COLORS["high"]),
        ("Medium Priority - Address within 6 months", PRIORITY_COLORS["medium"]),
        ("Low Priority - Monitor and plan for future repairs", LOW_PRIORITY_COLOR),
        ("", LOW_PRIORITY_COLOR),
    ])
    def test_priority_color(self, level, expected):
        assert priority_color(level) == expected

    def test_high_urgency_priority_is_red(self):
        commands = ReportBuilder().build(_report(HOMEOWNER_FORM))

        priority = next(c for c in commands if isinstance(c, TextBlock) and c.text.startswith("HIGH PRIORITY"))
        assert priority.color == PRIORITY_COLORS["high"]

    def test_one_photo_page_per_upload(self):
        files = [{"name": f"p{i}.png", "size": 1024} for i in range(3)]
        report = _report(INSPECTOR_FORM, uploadedFiles=files)

        commands = ReportBuilder().build(report)

        images = [c for c in commands if isinstance(c, ImageBlock)]
        assert len(images) == 3
        assert images[0].details == ["Image: p0.png", "Size: 1 KB"]

    def test_insurance_damage_section_omitted_without_rows(self):
        form = {**INSURANCE_FORM, "slopeDamage": []}
        commands = ReportBuilder().build(_report(form))

        headers = [c.text for c in commands if isinstance(c, SectionHeader)]
        assert "DAMAGE CLASSIFICATIONS" not in headers
        assert "COVERAGE ANALYSIS" in headers

    def test_insurance_damage_section_present_with_rows(self):
        commands = ReportBuilder().build(_report(INSURANCE_FORM))

        headers = [c.text for c in commands if isinstance(c, SectionHeader)]
        assert "DAMAGE CLASSIFICATIONS" in headers

    def test_spanish_labels(self):
        report = _report(INSURANCE_FORM, preferredLanguage="spanish")

        headers = [c.text for c in ReportBuilder().build(report) if isinstance(c, SectionHeader)]
        assert "CLASIFICACIÓN DE DAÑOS" in headers


class TestDocumentLayout:
    """Layout pass only: no PDF backend involved."""

    def test_unknown_role_lays_out_two_pages(self):
        pages = DocumentRenderer(brand_name="RoofReport").layout(None, "architect")

        assert len(pages) == 2
        assert all(page.background is not None for page in pages)

    @pytest.mark.parametrize("form", [HOMEOWNER_FORM, CONTRACTOR_FORM, INSPECTOR_FORM, INSURANCE_FORM])
    def test_every_role_has_body_between_branding(self, form):
        pages = DocumentRenderer().layout(_report(form))

        assert len(pages) >= 3
        assert pages[0].background is not None
        assert pages[-1].background is not None
        assert pages[1].background is None

    def test_photo_pages_follow_body(self, png_base64):
        files = [
            {"name": "ridge.png", "size": 2048, "data": png_base64},
            {"name": "missing.png", "size": 10},
        ]
        without = DocumentRenderer().layout(_report(HOMEOWNER_FORM))
        pages = DocumentRenderer().layout(_report(HOMEOWNER_FORM, uploadedFiles=files))

        assert len(pages) == len(without) + 2
        assert "[No image available]" in _all_texts(pages[-3:-1])


class TestDocumentRenderer:

    def test_render_returns_document(self, fake_pdf_backend):
        document = DocumentRenderer(file_name="r.pdf", as_of=AS_OF).render(_report(CONTRACTOR_FORM))

        assert document.pdf_bytes.startswith(b"%PDF")
        assert document.page_count >= 3
        assert document.role == "contractor"
        assert document.generated_at == AS_OF.isoformat()

    def test_second_render_is_rejected(self, fake_pdf_backend):
        renderer = DocumentRenderer()
        renderer.render(None, "architect")

        with pytest.raises(RenderError) as exc_info:
            renderer.render(None, "architect")

        assert exc_info.value.code == ErrorCode.RENDER_INVALID_STATE

    def test_backend_failure_is_wrapped(self, monkeypatch):
        def explode(html):
            raise OSError("cairo missing")

        monkeypatch.setattr("renderer.pdf_writer._html_to_pdf", explode)

        with pytest.raises(RenderError) as exc_info:
            DocumentRenderer().render(None, "architect")

        assert exc_info.value.code == ErrorCode.RENDER_FAILED
