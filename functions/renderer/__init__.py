"""Paginated PDF renderer for RoofReport.

Usage:
    from renderer import DocumentRenderer

    document = DocumentRenderer(file_name="report.pdf").render(report)
"""

from renderer.builder import ReportBuilder
from renderer.layout import LayoutEngine, LayoutState, Page, RenderCursor
from renderer.pdf_writer import DocumentRenderer

__all__ = [
    "DocumentRenderer",
    "LayoutEngine",
    "LayoutState",
    "Page",
    "RenderCursor",
    "ReportBuilder",
]
