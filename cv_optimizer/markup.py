"""
CV Markup Layout.

Converts the light line markup used in improved CV text, or a whole
AnalysisResult, into an ordered list of layout blocks. Drawing the blocks
is left to the PDF renderer.

Line markup, checked in this order (first match wins):
- blank line            -> small vertical gap
- "---"                 -> horizontal rule
- "### Title"           -> section heading
- "**Title**"           -> sub-heading
- "* item" / "- item"   -> bullet
- line containing "|"   -> centered metadata row (contact details)
- anything else         -> body paragraph
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from cv_optimizer.models import RECOMMENDATION_SECTIONS, AnalysisResult

CV_TITLE = "Curriculum Vitae"
REPORT_TITLE = "CV Analysis Report"
FULL_CV_HEADING = "Full Improved CV"
SCORE_SUFFIX = "/100"
BULLET_GLYPH = "•"


class BlockKind(str, Enum):
    """What a layout block draws."""

    BLANK = "blank"
    RULE = "rule"
    HEADING = "heading"
    SUB_HEADING = "sub_heading"
    BULLET = "bullet"
    METADATA = "metadata"
    PARAGRAPH = "paragraph"
    # * Produced by document layouts, never by a markup line
    TITLE = "title"
    SCORE = "score"
    PAGE_BREAK = "page_break"


class TextStyle(str, Enum):
    """Text style in effect while a block is drawn."""

    BODY = "body"
    HEADING = "heading"
    SUB_HEADING = "sub_heading"


# * Style entered by each block kind; every other kind drops back to BODY,
# * so a heading never leaks its style onto the following line.
STYLE_TRANSITIONS = {
    BlockKind.HEADING: TextStyle.HEADING,
    BlockKind.SUB_HEADING: TextStyle.SUB_HEADING,
}


@dataclass(frozen=True)
class Block:
    kind: BlockKind
    text: str = ""
    style: TextStyle = TextStyle.BODY


def next_style(kind: BlockKind) -> TextStyle:
    return STYLE_TRANSITIONS.get(kind, TextStyle.BODY)


def classify_line(raw_line: str) -> tuple[BlockKind, str]:
    """
    Classify one markup line.

    Args:
        raw_line: A single line of markup text (no newline).

    Returns:
        Tuple of (block kind, text to draw).
    """
    line = raw_line.rstrip()

    if not line.strip():
        return BlockKind.BLANK, ""

    if line.strip() == "---":
        return BlockKind.RULE, ""

    if line.startswith("### "):
        return BlockKind.HEADING, line[4:].strip()

    if line.startswith("**") and line.endswith("**") and len(line) > 4:
        return BlockKind.SUB_HEADING, line[2:-2].strip()

    if (line.startswith("* ") or line.startswith("- ")) and len(line) > 2:
        return BlockKind.BULLET, line[2:].strip()

    if "|" in line:
        return BlockKind.METADATA, line

    return BlockKind.PARAGRAPH, line


def layout_markup(text: str) -> list[Block]:
    """
    Lay out markup text, one block per input line, in input order.

    Args:
        text: Markup text.

    Returns:
        List of blocks.
    """
    blocks = []
    style = TextStyle.BODY

    for raw_line in text.splitlines():
        kind, content = classify_line(raw_line)
        style = next_style(kind)
        blocks.append(Block(kind=kind, text=content, style=style))

    return blocks


def layout_cv(text: str) -> list[Block]:
    """Lay out a standalone CV document: title followed by the markup."""
    return [Block(BlockKind.TITLE, CV_TITLE, TextStyle.HEADING)] + layout_markup(text)


def format_score(value: Any) -> Optional[str]:
    """
    Format a match score for the score line.

    Args:
        value: Score as returned by the model.

    Returns:
        Text like "85/100", or None when there is no score to show.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        return f"{value}{SCORE_SUFFIX}"

    if isinstance(value, float):
        # * json.loads accepts NaN and Infinity
        if not math.isfinite(value):
            return None
        return f"{round(value)}{SCORE_SUFFIX}"

    text = str(value).strip()
    if not text:
        return None
    if text.isdigit():
        return f"{int(text)}{SCORE_SUFFIX}"
    return text


def normalize_items(value: Any) -> list[str]:
    """
    Turn a recommendation field into a list of non-empty strings.

    The model output is not validated, so a bare string counts as a single
    item and anything that is not a list or string counts as no items.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []

    items = []
    for item in value:
        if item is None:
            continue
        text = str(item).strip()
        if text:
            items.append(text)
    return items


def layout_analysis(analysis: AnalysisResult) -> list[Block]:
    """
    Lay out a full analysis report.

    Title, score line, one section per non-empty recommendation list, then
    the improved CV on a new page.

    Args:
        analysis: Parsed analysis.

    Returns:
        List of blocks.
    """
    blocks = [Block(BlockKind.TITLE, REPORT_TITLE, TextStyle.HEADING)]

    score = format_score(analysis.match_score)
    if score is not None:
        blocks.append(Block(BlockKind.SCORE, f"Match Score: {score}"))

    for field_name, heading in RECOMMENDATION_SECTIONS:
        items = normalize_items(getattr(analysis, field_name, None))
        if not items:
            continue
        blocks.append(Block(BlockKind.HEADING, heading, TextStyle.HEADING))
        blocks.extend(Block(BlockKind.BULLET, item) for item in items)

    if analysis.improved_cv_full_text:
        blocks.append(Block(BlockKind.PAGE_BREAK))
        blocks.append(Block(BlockKind.HEADING, FULL_CV_HEADING, TextStyle.HEADING))
        blocks.extend(layout_markup(analysis.improved_cv_full_text))

    return blocks
