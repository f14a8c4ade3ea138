"""Helvetica font metrics for text measurement and wrapping.

Advance widths come from the standard Helvetica and Helvetica-Bold AFM files
(units of 1/1000 em) for the printable ASCII range. Oblique shares the
regular widths. Characters outside the table use an average width, and CJK
ideographs a full em.
"""

from typing import Dict, List

PT_TO_MM = 0.352778

_ASCII = [chr(code) for code in range(32, 127)]

_HELVETICA = [
    278, 278, 355, 556, 556, 889, 667, 191, 333, 333, 389, 584, 278, 333, 278, 278,
    556, 556, 556, 556, 556, 556, 556, 556, 556, 556, 278, 278, 584, 584, 584, 556,
    1015, 667, 667, 722, 722, 667, 611, 778, 722, 278, 500, 667, 556, 833, 722, 778,
    667, 778, 722, 667, 611, 722, 667, 944, 667, 667, 611, 278, 278, 278, 469, 556,
    333, 556, 556, 500, 556, 556, 278, 556, 556, 222, 222, 500, 222, 833, 556, 556,
    556, 556, 333, 500, 278, 556, 500, 722, 500, 500, 500, 334, 260, 334, 584,
]

_HELVETICA_BOLD = [
    278, 333, 474, 556, 556, 889, 722, 238, 333, 333, 389, 584, 278, 333, 278, 278,
    556, 556, 556, 556, 556, 556, 556, 556, 556, 556, 333, 333, 584, 584, 584, 611,
    975, 722, 722, 722, 722, 667, 611, 778, 722, 278, 556, 722, 611, 833, 722, 778,
    667, 778, 722, 667, 611, 722, 667, 944, 667, 667, 611, 333, 278, 333, 584, 556,
    333, 556, 611, 556, 611, 556, 333, 611, 611, 278, 278, 556, 278, 889, 611, 611,
    611, 611, 389, 556, 333, 611, 556, 778, 556, 556, 500, 389, 280, 389, 584,
]

WIDTHS: Dict[str, Dict[str, int]] = {
    "normal": dict(zip(_ASCII, _HELVETICA)),
    "italic": dict(zip(_ASCII, _HELVETICA)),
    "bold": dict(zip(_ASCII, _HELVETICA_BOLD)),
}

DEFAULT_WIDTH = 556
WIDE_WIDTH = 1000
EXTRA_WIDTHS = {"•": 350, "€": 556, "£": 556, "¥": 556, "©": 737}


def _char_width(char: str, table: Dict[str, int]) -> int:
    if char in table:
        return table[char]
    if char in EXTRA_WIDTHS:
        return EXTRA_WIDTHS[char]
    if ord(char) >= 0x2E80:
        return WIDE_WIDTH
    return DEFAULT_WIDTH


def text_width(text: str, size: float, style: str = "normal") -> float:
    """Width of ``text`` in millimetres at ``size`` points."""
    table = WIDTHS.get(style, WIDTHS["normal"])
    units = sum(_char_width(char, table) for char in text)
    return units / 1000.0 * size * PT_TO_MM


def _break_word(word: str, max_width: float, size: float, style: str) -> List[str]:
    pieces, current = [], ""
    for char in word:
        if current and text_width(current + char, size, style) > max_width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


def wrap_text(text: str, max_width: float, size: float, style: str = "normal") -> List[str]:
    """Greedy word wrap to ``max_width`` millimetres.

    Explicit newlines are kept, and words wider than the line are broken
    between characters. Always returns at least one line.
    """
    lines: List[str] = []
    for paragraph in str(text).split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if text_width(candidate, size, style) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            if text_width(word, size, style) > max_width:
                *full, current = _break_word(word, max_width, size, style)
                lines.extend(full)
            else:
                current = word
        lines.append(current)
    return lines or [""]
