"""Typed draw commands.

The report builder describes a document as a flat list of these commands;
the layout engine decides where each one lands. Units are millimetres and
font sizes are points.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

RGB = Tuple[int, int, int]

BRAND_ORANGE: RGB = (255, 102, 0)
LEGAL_BLUE: RGB = (33, 53, 153)
DARK: RGB = (33, 33, 33)
BLACK: RGB = (0, 0, 0)
GREY: RGB = (100, 100, 100)


@dataclass(frozen=True)
class Title:
    """Report or page title. ``rule`` draws a coloured line underneath."""

    text: str
    size: float = 20
    align: str = "center"
    color: RGB = DARK
    advance: float = 15
    rule: Optional[RGB] = None


@dataclass(frozen=True)
class SectionHeader:
    """Coloured band with white heading text: 8mm band plus 7mm advance."""

    text: str
    fill: RGB = BRAND_ORANGE


@dataclass(frozen=True)
class TextBlock:
    """Wrapped paragraph. Each wrapped line advances by ``line_height``."""

    text: str
    size: float = 10
    style: str = "normal"
    indent: float = 0
    line_height: float = 6
    color: RGB = BLACK
    space_after: float = 0
    width: Optional[float] = None


@dataclass(frozen=True)
class KeyValue:
    """Bold label with the value at a fixed offset from the left margin."""

    label: str
    value: str
    label_width: float = 50
    line_height: float = 7
    size: float = 10


@dataclass(frozen=True)
class BulletList:
    """Optional bold heading followed by bulleted, wrapped items."""

    items: List[str]
    heading: Optional[str] = None
    indent: float = 10
    line_height: float = 5
    empty_text: Optional[str] = None
    space_after: float = 5
    size: float = 10


@dataclass(frozen=True)
class Table:
    """Header row plus wrapped rows.

    ``col_widths`` defaults to ``[70, 25, 25, remainder]`` of the content width.
    """

    headers: List[str]
    rows: List[List[str]]
    col_widths: Optional[List[float]] = None
    base_row_height: float = 7
    line_height: float = 5
    size: float = 10


@dataclass(frozen=True)
class ImageBlock:
    """Embedded photo, or a placeholder box when it cannot be shown.

    ``width`` of None means the full content width.
    """

    data: str
    height: float
    width: Optional[float] = None
    x: Optional[float] = None
    missing_text: str = "[No image available]"
    failed_text: str = "[Image could not be loaded]"
    details: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Spacer:
    height: float


@dataclass(frozen=True)
class PageBreak:
    pass


@dataclass(frozen=True)
class BrandingPage:
    """Full-page brand sheet used to open and close every document."""

    brand_name: str
    tagline: str = "ESTIMATE SMARTER. BUILD BETTER."
    subtitle: str = "Advanced Analytics • Market Intelligence • Precision Estimates"
    services: Tuple[str, ...] = (
        "Professional Inspector Reports & Certifications",
        "Insurance Adjuster Claims Documentation",
        "Contractor Project Specifications & Estimates",
        "Homeowner-Friendly Explanations & Guidance",
    )
    metrics: Tuple[Tuple[str, str], ...] = (
        ("95%", "Accuracy Rate"),
        ("10,000+", "Projects Analyzed"),
        ("$2B+", "Total Project Value"),
        ("500+", "Partner Contractors"),
    )


Command = Union[Title, SectionHeader, TextBlock, KeyValue, BulletList, Table, ImageBlock, Spacer, PageBreak, BrandingPage]
