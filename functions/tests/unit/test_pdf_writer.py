"""
Unit tests for PDF serialization with the real WeasyPrint backend.

Usage:
    cd functions && python3 -m pytest tests/unit/test_pdf_writer.py -v
"""

import time
from datetime import datetime

import pytest

# WeasyPrint can be installed but fail to import when Pango/Cairo are missing
# (OSError). Skip the module in either case.
try:
    import weasyprint  # noqa: F401
except Exception:  # pragma: no cover
    pytest.skip("WeasyPrint (or its native deps) not available on this system", allow_module_level=True)

from assemblers import get_assembler
from models.project_input import ProjectInput
from renderer import DocumentRenderer
from renderer.pdf_writer import _render_html
from tests.fixtures.sample_projects import HOMEOWNER_FORM, INSURANCE_FORM

AS_OF = datetime(2024, 3, 1, 9, 30)


def _report(form, **extra):
    project = ProjectInput.model_validate({**form, **extra})
    return get_assembler(project.user_role, as_of=AS_OF).assemble(project, None)


def test_renders_valid_pdf(png_base64):
    report = _report(HOMEOWNER_FORM, uploadedFiles=[{"name": "ridge.png", "size": 2048, "data": png_base64}])

    start = time.perf_counter()
    document = DocumentRenderer(file_name="homeowner.pdf", as_of=AS_OF).render(report)
    elapsed = time.perf_counter() - start

    assert document.pdf_bytes.startswith(b"%PDF")
    assert document.file_size > 1000
    assert elapsed < 10


def test_html_has_one_section_per_page():
    renderer = DocumentRenderer()
    pages = renderer.layout(_report(INSURANCE_FORM))
    cursor = renderer.engine.cursor

    html = _render_html(pages, cursor.page_width, cursor.page_height, "Claim")

    assert html.count('class="page') == len(pages)
    assert "CLM-2024-0042" in html
