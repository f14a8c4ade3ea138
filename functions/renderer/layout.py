"""Layout pass: turns draw commands into positioned page elements.

The engine owns a single ``RenderCursor``. Before anything is written it
checks that the block fits between the cursor and the bottom margin and
starts a new page when it does not, so ``current_y`` never passes
``page_height - margin``. Multi-line blocks are written line by line (rows
for tables), which lets long sections flow across pages. A single block that
is taller than the usable page height is clipped to it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

import structlog

from config.errors import ErrorCode, RenderError
from renderer.commands import (
    BLACK,
    BRAND_ORANGE,
    DARK,
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
from renderer.images import IMAGE_FAILED, IMAGE_OK, LoadedImage, load_image
from renderer.metrics import PT_TO_MM, text_width, wrap_text

logger = structlog.get_logger()

WHITE: RGB = (255, 255, 255)
PLACEHOLDER_STROKE: RGB = (200, 200, 200)
PLACEHOLDER_TEXT: RGB = (150, 150, 150)

SECTION_BAND_HEIGHT = 8.0
SECTION_ADVANCE = 7.0
# Room kept under a section header so it is not stranded at the page foot
SECTION_KEEP_WITH_NEXT = 12.0
BULLET = "•"
BULLET_GAP = 5.0
CELL_PADDING = 2.0
DETAIL_LINE_HEIGHT = 6.0

WATERMARK_SIZE = 48
WATERMARK_ANGLE = 35
WATERMARK_OPACITY = 0.08

# Fraction of the font size from the top of a line box to the baseline
ASCENT = 0.8


class LayoutState(Enum):
    WRITING_PAGE = "writing_page"
    PAGE_BREAK_PENDING = "page_break_pending"
    DONE = "done"


@dataclass
class RenderCursor:
    """Vertical write position on the current page, in millimetres."""

    page_width: float = 210.0
    page_height: float = 297.0
    margin: float = 20.0
    current_y: float = 20.0

    @property
    def bottom_limit(self) -> float:
        return self.page_height - self.margin

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def usable_height(self) -> float:
        return self.page_height - 2 * self.margin

    def fits(self, height: float) -> bool:
        return self.current_y + height <= self.bottom_limit

    def reset(self) -> None:
        self.current_y = self.margin


# =============================================================================
# PLACED ELEMENTS
# =============================================================================


@dataclass(frozen=True)
class PlacedText:
    """A single line of text. ``x`` is the centre for centred text."""

    x: float
    top: float
    text: str
    size: float = 10
    style: str = "normal"
    color: RGB = BLACK
    align: str = "left"

    kind = "text"


@dataclass(frozen=True)
class PlacedRect:
    x: float
    top: float
    width: float
    height: float
    fill: Optional[RGB] = None
    stroke: Optional[RGB] = None

    kind = "rect"


@dataclass(frozen=True)
class PlacedLine:
    """Horizontal rule from ``x1`` to ``x2``."""

    x1: float
    x2: float
    y: float
    color: RGB = BRAND_ORANGE
    thickness: float = 0.5

    kind = "line"


@dataclass(frozen=True)
class PlacedImage:
    x: float
    top: float
    width: float
    height: float
    src: str

    kind = "image"


Element = Union[PlacedText, PlacedRect, PlacedLine, PlacedImage]


@dataclass
class Page:
    number: int
    elements: List[Element] = field(default_factory=list)
    background: Optional[RGB] = None
    watermark: Optional[str] = None


# =============================================================================
# ENGINE
# =============================================================================


class LayoutEngine:
    """Places draw commands on A4 pages.

    Usage:
        engine = LayoutEngine(watermark="RoofReport")
        pages = engine.layout(commands)
    """

    def __init__(
        self,
        watermark: Optional[str] = None,
        page_width: float = 210.0,
        page_height: float = 297.0,
        margin: float = 20.0,
        image_loader: Callable[[Optional[str]], LoadedImage] = load_image,
    ):
        self.cursor = RenderCursor(page_width, page_height, margin, margin)
        self.watermark = watermark
        self.image_loader = image_loader
        self.pages: List[Page] = []
        # A document opens with a pending break so the first write creates page 1
        self.state = LayoutState.PAGE_BREAK_PENDING
        self.clipped_blocks = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def layout(self, commands: List[Command]) -> List[Page]:
        """Lay out every command and finish the document."""
        for command in commands:
            self.write(command)
        return self.finish()

    def write(self, command: Command) -> None:
        if self.state is LayoutState.DONE:
            raise RenderError(
                code=ErrorCode.RENDER_INVALID_STATE,
                message="Cannot write to a finished layout",
                details={"command": type(command).__name__},
            )
        handler = getattr(self, f"_write_{type(command).__name__.lower()}", None)
        if handler is None:
            raise RenderError(
                code=ErrorCode.RENDER_FAILED,
                message=f"Unsupported draw command: {type(command).__name__}",
            )
        handler(command)

    def finish(self) -> List[Page]:
        if self.state is not LayoutState.DONE:
            self.state = LayoutState.DONE
            logger.debug("layout_finished", page_count=len(self.pages), clipped_blocks=self.clipped_blocks)
        return self.pages

    @property
    def page_count(self) -> int:
        return len(self.pages)

    # ------------------------------------------------------------------
    # Page management
    # ------------------------------------------------------------------

    def _new_page(self) -> Page:
        page = Page(number=len(self.pages) + 1, watermark=self.watermark)
        self.pages.append(page)
        self.cursor.reset()
        self.state = LayoutState.WRITING_PAGE
        return page

    @property
    def _page(self) -> Page:
        return self.pages[-1]

    def _reserve(self, height: float) -> Tuple[float, float]:
        """Make room for a block and return its (top, height).

        Opens a new page when a break is pending or the block does not fit.
        Heights beyond the usable page height are clipped.
        """
        if height > self.cursor.usable_height:
            self.clipped_blocks += 1
            logger.warning("layout_block_clipped", height=round(height, 2), limit=self.cursor.usable_height)
            height = self.cursor.usable_height
        if self.state is LayoutState.PAGE_BREAK_PENDING or not self.cursor.fits(height):
            self._new_page()
        top = self.cursor.current_y
        self.cursor.current_y = top + height
        return top, height

    def _advance(self, height: float) -> None:
        """Move the cursor down without writing, stopping at the bottom limit."""
        if self.state is LayoutState.WRITING_PAGE:
            self.cursor.current_y = min(self.cursor.current_y + height, self.cursor.bottom_limit)

    def _text(
        self,
        x: float,
        line_top: float,
        line_height: float,
        text: str,
        size: float,
        style: str = "normal",
        color: RGB = BLACK,
        align: str = "left",
    ) -> None:
        box = size * PT_TO_MM * 1.15
        top = line_top + max(0.0, (line_height - box) / 2)
        self._page.elements.append(PlacedText(x, top, text, size, style, color, align))

    def _text_at_baseline(
        self,
        x: float,
        baseline: float,
        text: str,
        size: float,
        style: str = "normal",
        color: RGB = BLACK,
        align: str = "left",
    ) -> None:
        top = baseline - size * PT_TO_MM * ASCENT
        self._page.elements.append(PlacedText(x, top, text, size, style, color, align))

    def _lines(
        self,
        lines: List[str],
        x: float,
        line_height: float,
        size: float,
        style: str = "normal",
        color: RGB = BLACK,
        align: str = "left",
    ) -> None:
        for line in lines:
            top, _ = self._reserve(line_height)
            self._text(x, top, line_height, line, size, style, color, align)

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------

    def _write_pagebreak(self, command: PageBreak) -> None:
        if self.state is LayoutState.WRITING_PAGE:
            self.state = LayoutState.PAGE_BREAK_PENDING

    def _write_spacer(self, command: Spacer) -> None:
        self._advance(command.height)

    def _write_title(self, command: Title) -> None:
        margin = self.cursor.margin
        width = self.cursor.content_width
        lines = wrap_text(command.text, width, command.size, "bold")
        line_height = command.size * PT_TO_MM * 1.4
        for index, line in enumerate(lines):
            last = index == len(lines) - 1
            height = command.advance if last else line_height
            top, _ = self._reserve(height)
            x = self.cursor.page_width / 2 if command.align == "center" else margin
            self._text(x, top, line_height, line, command.size, "bold", command.color, command.align)
            if last and command.rule is not None:
                self._page.elements.append(
                    PlacedLine(margin, margin + width, top + line_height + 1, command.rule, 0.8)
                )

    def _write_sectionheader(self, command: SectionHeader) -> None:
        height = SECTION_BAND_HEIGHT + SECTION_ADVANCE
        if not self.cursor.fits(height + SECTION_KEEP_WITH_NEXT) and self.state is LayoutState.WRITING_PAGE:
            self.state = LayoutState.PAGE_BREAK_PENDING
        top, _ = self._reserve(height)
        margin = self.cursor.margin
        self._page.elements.append(
            PlacedRect(margin, top, self.cursor.content_width, SECTION_BAND_HEIGHT, fill=command.fill)
        )
        self._text(margin + 5, top, SECTION_BAND_HEIGHT, command.text, 14, "bold", WHITE)

    def _write_textblock(self, command: TextBlock) -> None:
        x = self.cursor.margin + command.indent
        width = command.width or (self.cursor.content_width - command.indent)
        lines = wrap_text(command.text, width, command.size, command.style)
        self._lines(lines, x, command.line_height, command.size, command.style, command.color)
        self._advance(command.space_after)

    def _write_keyvalue(self, command: KeyValue) -> None:
        margin = self.cursor.margin
        value_width = self.cursor.content_width - command.label_width
        lines = wrap_text(command.value, value_width, command.size)
        max_lines = int(self.cursor.usable_height // command.line_height)
        if len(lines) > max_lines:
            lines = lines[:max_lines]
        top, _ = self._reserve(len(lines) * command.line_height)
        self._text(margin, top, command.line_height, command.label, command.size, "bold")
        for index, line in enumerate(lines):
            line_top = top + index * command.line_height
            self._text(margin + command.label_width, line_top, command.line_height, line, command.size)

    def _write_bulletlist(self, command: BulletList) -> None:
        margin = self.cursor.margin
        if command.heading:
            top, _ = self._reserve(7)
            self._text(margin, top, 7, command.heading, command.size, "bold")
        items = [item for item in command.items if item and item.strip()]
        if not items and command.empty_text:
            self._lines([command.empty_text], margin + command.indent, command.line_height, command.size)
        text_x = margin + command.indent + BULLET_GAP
        width = self.cursor.content_width - command.indent - BULLET_GAP
        for item in items:
            lines = wrap_text(item, width, command.size)
            for index, line in enumerate(lines):
                top, _ = self._reserve(command.line_height)
                if index == 0:
                    self._text(margin + command.indent, top, command.line_height, BULLET, command.size)
                self._text(text_x, top, command.line_height, line, command.size)
        self._advance(command.space_after)

    def _column_widths(self, command: Table) -> List[float]:
        if command.col_widths:
            return list(command.col_widths)
        fixed = [70.0, 25.0, 25.0]
        remainder = max(self.cursor.content_width - sum(fixed), 10.0)
        widths = fixed + [remainder]
        return widths[: len(command.headers)] if len(command.headers) < len(widths) else widths

    def _write_table(self, command: Table) -> None:
        margin = self.cursor.margin
        widths = self._column_widths(command)
        max_lines = int(self.cursor.usable_height // command.line_height)

        def write_row(cells: List[str], style: str) -> None:
            wrapped = [
                wrap_text(cell, max(width - CELL_PADDING, 1.0), command.size, style)
                for cell, width in zip(cells, widths)
            ]
            line_count = min(max((len(w) for w in wrapped), default=1), max_lines)
            height = max(command.base_row_height, line_count * command.line_height)
            top, height = self._reserve(height)
            x = margin
            for cell_lines, width in zip(wrapped, widths):
                for index, line in enumerate(cell_lines[:line_count]):
                    line_top = top + index * command.line_height
                    self._text(x, line_top, command.line_height, line, command.size, style)
                x += width

        write_row(command.headers, "bold")
        for row in command.rows:
            write_row([str(cell) for cell in row], "normal")
        self._advance(5)

    def _write_imageblock(self, command: ImageBlock) -> None:
        margin = self.cursor.margin
        width = command.width if command.width is not None else self.cursor.content_width
        x = command.x if command.x is not None else margin
        top, height = self._reserve(command.height)

        try:
            loaded = self.image_loader(command.data)
        except Exception as e:
            # Placeholder instead of aborting the document
            logger.warning("image_loader_failed", error=str(e), error_type=type(e).__name__)
            loaded = LoadedImage(status=IMAGE_FAILED)
        if loaded.status == IMAGE_OK and loaded.src:
            self._page.elements.append(PlacedImage(x, top, width, height, loaded.src))
        else:
            text = command.missing_text if not (command.data or "").strip() else command.failed_text
            self._page.elements.append(PlacedRect(x, top, width, height, stroke=PLACEHOLDER_STROKE))
            self._text(x + 5, top + min(50.0, height / 2), 6, text, 10, color=PLACEHOLDER_TEXT)
            logger.info("image_placeholder_drawn", reason=loaded.status, page=self._page.number)

        if command.details:
            self._advance(10)
            self._lines(list(command.details), margin, DETAIL_LINE_HEIGHT, 10)

    def _write_brandingpage(self, command: BrandingPage) -> None:
        if self.state is LayoutState.WRITING_PAGE:
            self.state = LayoutState.PAGE_BREAK_PENDING
        self._reserve(self.cursor.usable_height)

        page = self._page
        pw, ph = self.cursor.page_width, self.cursor.page_height
        center = pw / 2
        page.background = DARK
        page.watermark = command.brand_name.upper()
        page.elements.extend([
            PlacedRect(0, 0, pw, 20, fill=BRAND_ORANGE),
            PlacedRect(0, ph - 20, pw, 20, fill=BRAND_ORANGE),
            PlacedRect(20, 35, pw - 40, ph - 70, fill=WHITE),
        ])

        first, second = split_brand(command.brand_name)
        logo_width = text_width(first + second, 36, "bold")
        start_x = center - logo_width / 2
        self._text_at_baseline(start_x, 75, first, 36, "bold", DARK)
        if second:
            self._text_at_baseline(start_x + text_width(first, 36, "bold"), 75, second, 36, "bold", BRAND_ORANGE)
        page.elements.append(PlacedLine(center - 35, center + 35, 85, BRAND_ORANGE, 1.5))

        self._text_at_baseline(center, 100, command.tagline, 14, "bold", BRAND_ORANGE, "center")
        self._text_at_baseline(center, 115, command.subtitle, 10, color=(100, 100, 100), align="center")
        self._text_at_baseline(center, 140, "PROFESSIONAL ROOFING INTELLIGENCE", 12, "bold", DARK, "center")
        for index, service in enumerate(command.services):
            self._text_at_baseline(center, 152 + index * 15, service, 10, color=(60, 60, 60), align="center")

        self._text_at_baseline(center, 210, "TRUSTED BY INDUSTRY LEADERS", 12, "bold", BRAND_ORANGE, "center")
        spacing = pw / 3
        for index, (value, label) in enumerate(command.metrics):
            row_y = 225 if index < 2 else 245
            x = spacing * (index % 2 + 1)
            self._text_at_baseline(x, row_y, value, 14, "bold", BRAND_ORANGE, "center")
            self._text_at_baseline(x, row_y + 8, label, 10, color=(80, 80, 80), align="center")

        self._text_at_baseline(center, ph - 8, f"© {command.brand_name}", 10, color=WHITE, align="center")
        self.cursor.current_y = self.cursor.bottom_limit
        self.state = LayoutState.PAGE_BREAK_PENDING


def split_brand(brand_name: str) -> Tuple[str, str]:
    """Split a camel-cased brand into its two logo halves, upper-cased.

    ``RoofReport`` becomes ``("ROOF", "REPORT")``; a name with no inner
    capital stays whole.
    """
    for index in range(1, len(brand_name)):
        if brand_name[index].isupper() and brand_name[index - 1].islower():
            return brand_name[:index].upper(), brand_name[index:].upper()
    return brand_name.upper(), ""
