"""
PDF Renderer.

Draws layout blocks onto a reportlab canvas. Accepts either improved CV
markup text or a full AnalysisResult and writes a finished PDF file.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from reportlab.lib.colors import Color, HexColor, black
from reportlab.lib.pagesizes import LETTER
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas

from cv_optimizer.exceptions import StorageError
from cv_optimizer.markup import (
    BULLET_GLYPH,
    Block,
    BlockKind,
    TextStyle,
    layout_analysis,
    layout_cv,
)
from cv_optimizer.models import AnalysisResult

logger = logging.getLogger("cv_optimizer.renderer")

# * Page geometry (points)
PAGE_SIZE = LETTER
MARGIN = 50
BULLET_INDENT = 10
LINE_SPACING = 1.2

HEADING_COLOR = HexColor("#1f4e79")
MUTED_COLOR = HexColor("#333333")

# * Built-in faces, Latin-1 only
DEFAULT_FONT = "Helvetica"
DEFAULT_BOLD_FONT = "Helvetica-Bold"


@dataclass(frozen=True)
class FontSpec:
    name: str
    size: float
    color: Color

    @property
    def leading(self) -> float:
        return self.size * LINE_SPACING


@dataclass(frozen=True)
class FontSet:
    """Fonts for every text role in a document."""

    body: FontSpec
    heading: FontSpec
    sub_heading: FontSpec
    title: FontSpec
    score: FontSpec
    metadata: FontSpec

    def for_style(self, style: TextStyle) -> FontSpec:
        if style == TextStyle.HEADING:
            return self.heading
        if style == TextStyle.SUB_HEADING:
            return self.sub_heading
        return self.body


def build_fonts(regular: str = DEFAULT_FONT, bold: str = DEFAULT_BOLD_FONT) -> FontSet:
    """
    Build the document fonts from a regular and a bold face.

    Args:
        regular: Registered font name for body, heading and metadata text.
        bold: Registered font name for title, score and sub-heading text.

    Returns:
        FontSet with the sizes and colours of the CV layout.
    """
    return FontSet(
        body=FontSpec(regular, 12, black),
        heading=FontSpec(regular, 14, HEADING_COLOR),
        sub_heading=FontSpec(bold, 12, MUTED_COLOR),
        title=FontSpec(bold, 20, HEADING_COLOR),
        score=FontSpec(bold, 12, black),
        metadata=FontSpec(regular, 11, MUTED_COLOR),
    )


def register_ttf(path: str | Path) -> str:
    """
    Register a TrueType font with reportlab.

    The built-in Helvetica faces only cover Latin-1; a TTF font is needed to
    draw other scripts.

    Args:
        path: Path to a .ttf file.

    Returns:
        Font name to use on the canvas (the file stem).

    Raises:
        ValueError: If the file cannot be loaded as a TrueType font.
    """
    path = Path(path)
    name = path.stem
    if name in pdfmetrics.getRegisteredFontNames():
        return name

    try:
        pdfmetrics.registerFont(TTFont(name, str(path)))
    except (TTFError, OSError) as e:
        raise ValueError(f"Cannot load PDF font: {path}") from e

    logger.info("PDF font registered name=%s path=%s", name, path)
    return name


DEFAULT_FONTS = build_fonts()

# * Vertical gaps, in body lines
GAP_LINE = DEFAULT_FONTS.body.leading


class _PageCursor:
    """Tracks the vertical position on the current page and wraps text."""

    def __init__(self, pdf: canvas.Canvas, page_size: tuple[float, float], margin: float):
        self.pdf = pdf
        self.width, self.height = page_size
        self.left = margin
        self.right = self.width - margin
        self.top = self.height - margin
        self.bottom = margin
        self.y = self.top

    def new_page(self) -> None:
        self.pdf.showPage()
        self.y = self.top

    def ensure_space(self, height: float) -> None:
        if self.y - height < self.bottom:
            self.new_page()

    def gap(self, lines: float) -> None:
        # * Overflow is handled by the next ensure_space
        self.y -= GAP_LINE * lines

    def rule(self) -> None:
        self.ensure_space(GAP_LINE)
        self.pdf.setStrokeColor(black)
        self.pdf.setLineWidth(1)
        self.pdf.line(self.left, self.y, self.right, self.y)

    def wrap(self, text: str, font: FontSpec, available: float) -> list[str]:
        words = text.split()
        if not words:
            return [""]

        lines = []
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if self._width(candidate, font) <= available:
                current = candidate
                continue
            if current:
                lines.append(current)
            # * Words wider than the line (URLs, hashes) break between characters
            pieces = self._split_word(word, font, available)
            lines.extend(pieces[:-1])
            current = pieces[-1]
        lines.append(current)
        return lines

    def _split_word(self, word: str, font: FontSpec, available: float) -> list[str]:
        pieces = []
        current = ""
        for char in word:
            if current and self._width(current + char, font) > available:
                pieces.append(current)
                current = char
            else:
                current += char
        pieces.append(current)
        return pieces

    def _width(self, text: str, font: FontSpec) -> float:
        return self.pdf.stringWidth(text, font.name, font.size)

    def text(
        self,
        text: str,
        font: FontSpec,
        align: str = "left",
        indent: float = 0,
        underline: bool = False,
    ) -> None:
        x = self.left + indent
        available = self.right - x

        for line in self.wrap(text, font, available):
            self.ensure_space(font.leading)
            baseline = self.y - font.size
            self.pdf.setFont(font.name, font.size)
            self.pdf.setFillColor(font.color)

            line_width = self.pdf.stringWidth(line, font.name, font.size)
            if align == "center":
                start = x + (available - line_width) / 2
            elif align == "right":
                start = self.right - line_width
            else:
                start = x
            self.pdf.drawString(start, baseline, line)

            if underline and line:
                self.pdf.setStrokeColor(font.color)
                self.pdf.setLineWidth(0.75)
                self.pdf.line(start, baseline - 2, start + line_width, baseline - 2)

            self.y -= font.leading


class PdfRenderer:
    """
    Renders improved CV text or a full analysis report to PDF.

    Output is deterministic for identical input: the canvas runs in
    reportlab's invariant mode, which omits creation dates and random IDs.
    """

    def __init__(
        self,
        page_size: tuple[float, float] = PAGE_SIZE,
        margin: float = MARGIN,
        font_path: str | Path | None = None,
        bold_font_path: str | Path | None = None,
    ):
        """
        Initialize the renderer.

        Args:
            page_size: Page size in points.
            margin: Margin on every side, in points.
            font_path: TrueType font for regular text. Defaults to Helvetica,
                which only covers Latin-1.
            bold_font_path: TrueType font for bold text. Defaults to
                font_path when that is given, else Helvetica-Bold.

        Raises:
            ValueError: If a font file cannot be loaded.
        """
        self.page_size = page_size
        self.margin = margin

        regular = register_ttf(font_path) if font_path else DEFAULT_FONT
        if bold_font_path:
            bold = register_ttf(bold_font_path)
        elif font_path:
            bold = regular
        else:
            bold = DEFAULT_BOLD_FONT
        self.fonts = build_fonts(regular, bold)

    @classmethod
    def from_settings(cls, settings) -> "PdfRenderer":
        """Build a renderer using the font paths from Settings."""
        return cls(font_path=settings.pdf_font_path, bold_font_path=settings.pdf_bold_font_path)

    def layout(self, content: Union[str, AnalysisResult]) -> list[Block]:
        """
        Lay out content without drawing it.

        Args:
            content: Markup text or an AnalysisResult.

        Returns:
            Ordered layout blocks.
        """
        if isinstance(content, AnalysisResult):
            return layout_analysis(content)
        if isinstance(content, str):
            return layout_cv(content)
        raise TypeError(f"Cannot render content of type {type(content).__name__}")

    def render(self, content: Union[str, AnalysisResult], destination: str | Path) -> Path:
        """
        Render content to a new PDF file.

        Args:
            content: Markup text (CV only) or an AnalysisResult (full report).
            destination: Path of the PDF to write.

        Returns:
            Path to the written file, valid once this returns.

        Raises:
            StorageError: If the file cannot be written.
        """
        blocks = self.layout(content)
        return self.draw(blocks, destination)

    def draw(self, blocks: list[Block], destination: str | Path) -> Path:
        """Draw layout blocks into a PDF at destination."""
        destination = Path(destination)
        start = time.perf_counter()

        try:
            pdf = canvas.Canvas(str(destination), pagesize=self.page_size, invariant=1)
            titles = [block.text for block in blocks if block.kind == BlockKind.TITLE]
            if titles:
                pdf.setTitle(titles[0])
            cursor = _PageCursor(pdf, self.page_size, self.margin)

            for block in blocks:
                self._draw_block(cursor, block)

            pages = pdf.getPageNumber()
            # * save() writes and closes the file
            pdf.save()
        except OSError as e:
            logger.error("PDF write failed path=%s error=%s", destination, e, exc_info=True)
            raise StorageError("Failed to write the generated PDF.") from e

        logger.info(
            "PDF rendered path=%s blocks=%s pages=%s duration=%.3fs",
            destination,
            len(blocks),
            pages,
            time.perf_counter() - start,
        )
        return destination

    def _draw_block(self, cursor: _PageCursor, block: Block) -> None:
        font = self.fonts.for_style(block.style)

        if block.kind == BlockKind.BLANK:
            cursor.gap(0.3)

        elif block.kind == BlockKind.RULE:
            cursor.rule()
            cursor.gap(0.5)

        elif block.kind == BlockKind.HEADING:
            cursor.gap(0.5)
            cursor.text(block.text, font, underline=True)
            cursor.gap(0.2)

        elif block.kind == BlockKind.SUB_HEADING:
            cursor.gap(0.3)
            cursor.text(block.text, font, underline=True)
            cursor.gap(0.15)

        elif block.kind == BlockKind.BULLET:
            cursor.text(f"{BULLET_GLYPH} {block.text}", font, indent=BULLET_INDENT)
            cursor.gap(0.1)

        elif block.kind == BlockKind.METADATA:
            cursor.text(block.text, self.fonts.metadata, align="center")
            cursor.gap(0.2)

        elif block.kind == BlockKind.PARAGRAPH:
            cursor.text(block.text, font)
            cursor.gap(0.15)

        elif block.kind == BlockKind.TITLE:
            cursor.text(block.text, self.fonts.title, align="center", underline=True)
            cursor.gap(1)

        elif block.kind == BlockKind.SCORE:
            cursor.text(block.text, self.fonts.score, align="right")
            cursor.gap(0.5)

        elif block.kind == BlockKind.PAGE_BREAK:
            cursor.new_page()


def render_pdf(
    content: Union[str, AnalysisResult],
    destination: str | Path,
    font_path: str | Path | None = None,
    bold_font_path: str | Path | None = None,
) -> Path:
    """
    Render content to a PDF with the default page settings.

    Args:
        content: Markup text or an AnalysisResult.
        destination: Path of the PDF to write.
        font_path: Optional TrueType font for regular text.
        bold_font_path: Optional TrueType font for bold text.

    Returns:
        Path to the written file.
    """
    renderer = PdfRenderer(font_path=font_path, bold_font_path=bold_font_path)
    return renderer.render(content, destination)
