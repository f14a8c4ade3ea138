"""
PDF serialization for RoofReport.

Laid-out pages are rendered through a Jinja2 template into HTML where every
element is absolutely positioned in millimetres, then converted to PDF with
WeasyPrint.

Architecture:
- ReportBuilder emits draw commands for the role
- LayoutEngine places them on A4 pages
- Jinja2 renders the pages to HTML
- WeasyPrint converts the HTML to PDF bytes
"""

import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import structlog
from jinja2 import Environment, FileSystemLoader, select_autoescape

from config.errors import ErrorCode, RenderError
from config.settings import settings
from models.persisted_document import RenderedDocument
from models.reports import ReportBase
from renderer.builder import ReportBuilder
from renderer.commands import BRAND_ORANGE
from renderer.layout import (
    WATERMARK_ANGLE,
    WATERMARK_OPACITY,
    WATERMARK_SIZE,
    LayoutEngine,
    Page,
)

logger = structlog.get_logger(__name__)

# Template directory
TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

TEMPLATE_NAME = "report_pages.html"


def _get_jinja_env() -> Environment:
    """Create and configure the Jinja2 environment."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )
    env.filters["rgb"] = lambda color: "rgb({}, {}, {})".format(*color)
    env.filters["mm"] = lambda value: f"{value:.2f}mm"
    return env


def _render_html(pages: List[Page], page_width: float, page_height: float, title: str) -> str:
    template = _get_jinja_env().get_template(TEMPLATE_NAME)
    return template.render(
        pages=pages,
        page_width=page_width,
        page_height=page_height,
        title=title,
        watermark={
            "size": WATERMARK_SIZE,
            "angle": WATERMARK_ANGLE,
            "opacity": WATERMARK_OPACITY,
            "color": BRAND_ORANGE,
        },
    )


def _html_to_pdf(html_content: str) -> bytes:
    """Convert HTML to PDF using WeasyPrint."""
    from weasyprint import HTML
    from weasyprint.text.fonts import FontConfiguration

    font_config = FontConfiguration()
    html_doc = HTML(string=html_content, base_url=str(TEMPLATE_DIR))
    return html_doc.write_pdf(font_config=font_config)


class DocumentRenderer:
    """Renders one report to a PDF.

    A renderer serializes exactly once; build a new one per document.

    Usage:
        renderer = DocumentRenderer(file_name="report.pdf")
        document = renderer.render(report, role="homeowner")
    """

    def __init__(
        self,
        file_name: str = "report.pdf",
        brand_name: Optional[str] = None,
        as_of: Optional[datetime] = None,
        engine: Optional[LayoutEngine] = None,
    ):
        self.file_name = file_name
        self.brand_name = brand_name or settings.brand_name
        self.as_of = as_of
        self.engine = engine or LayoutEngine(watermark=self.brand_name)
        self.builder = ReportBuilder(self.brand_name)
        self._serialized = False

    def layout(self, report: Optional[ReportBase], role: Optional[str] = None) -> List[Page]:
        """Run the builder and layout pass without serializing."""
        commands = self.builder.build(report, role)
        return self.engine.layout(commands)

    def render(self, report: Optional[ReportBase], role: Optional[str] = None) -> RenderedDocument:
        if self._serialized:
            raise RenderError(
                code=ErrorCode.RENDER_INVALID_STATE,
                message="Document has already been serialized",
                details={"file_name": self.file_name},
            )
        self._serialized = True

        role = role or (report.role if report else "")
        start_time = time.perf_counter()
        logger.info("pdf_render_started", role=role, file_name=self.file_name)

        try:
            pages = self.layout(report, role)
            cursor = self.engine.cursor
            html_content = _render_html(
                pages,
                cursor.page_width,
                cursor.page_height,
                report.title if report else self.brand_name,
            )
            pdf_bytes = _html_to_pdf(html_content)
        except RenderError:
            raise
        except Exception as e:
            logger.error(
                "pdf_render_error",
                role=role,
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise RenderError(
                code=ErrorCode.RENDER_FAILED,
                message=f"PDF rendering failed: {e}",
                details={"role": role},
            ) from e

        document = RenderedDocument(
            pdf_bytes=pdf_bytes,
            page_count=len(pages),
            generated_at=(self.as_of or datetime.now()).isoformat(),
            file_name=self.file_name,
            role=role,
        )
        logger.info(
            "pdf_rendered",
            role=role,
            page_count=document.page_count,
            file_size_kb=round(document.file_size / 1024, 2),
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return document
