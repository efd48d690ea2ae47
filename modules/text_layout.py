"""
Text Layout - greedy word wrap and logo-relative company text placement
"""

from typing import Callable, List, Optional, Tuple

from PIL import ImageDraw, ImageFont

from modules.geometry import BoundingBox, Position


TEXT_POSITIONS = ("above", "below", "left", "right")
TEXT_ALIGNMENTS = ("left", "center", "right")


def wrap_lines(text: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """
    Greedy line breaking on single spaces

    Args:
        text: Text to wrap
        max_width: A line grows while its measured width stays below this
        measure: Returns the rendered width of a string

    Returns:
        Lines in order (a single over-long word stays on its own line)
    """
    words = str(text).split(" ")
    lines: List[str] = []
    current = words[0] if words else ""

    for word in words[1:]:
        candidate = f"{current} {word}"
        if measure(candidate) < max_width:
            current = candidate
        else:
            lines.append(current)
            current = word

    if current:
        lines.append(current)
    return lines


def wrap_text_centered(
    draw: ImageDraw.ImageDraw,
    text: str,
    x: float,
    y: float,
    max_width: float,
    line_height: float,
    font: ImageFont.ImageFont,
    fill
) -> List[str]:
    """
    Draw wrapped text as a block vertically centered on y

    Each line is centered horizontally on x. The first line's center sits
    at ``y - total_height / 2 + line_height / 2``.

    Returns:
        The lines that were drawn
    """
    lines = wrap_lines(text, max_width, lambda s: draw.textlength(s, font=font))
    total_height = len(lines) * line_height
    line_y = y - total_height / 2 + line_height / 2

    for line in lines:
        draw.text((x, line_y), line, font=font, fill=fill, anchor="mm")
        line_y += line_height

    return lines


def company_font_size(text_size: Optional[float], canvas_width: float) -> float:
    """Company text size: ``text_size`` is per-mille of canvas width, floor 16px"""
    if text_size:
        return max(16.0, text_size * canvas_width / 1000)
    return max(16.0, canvas_width * 0.03)


def position_company_text(
    logo_box: Optional[BoundingBox],
    mode: Optional[str],
    alignment: Optional[str],
    canvas_size: Tuple[float, float],
    text_size: Tuple[float, float],
    padding: float,
    spacing: float
) -> Position:
    """
    Compute the top-left origin of the company text

    Args:
        logo_box: Drawn logo box, if the logo made it onto the canvas
        mode: above / below / left / right (relative to the logo)
        alignment: left / center / right (only for above / below)
        canvas_size: (width, height)
        text_size: Measured (width, height) of the text
        padding: Edge padding
        spacing: Gap between logo and text

    Returns:
        Origin clamped into [padding, dimension - extent - padding]
    """
    width, height = canvas_size
    text_w, text_h = text_size

    # Default: bottom-left corner
    x = padding
    y = height - padding - text_h

    if logo_box is not None and mode in TEXT_POSITIONS:
        if mode in ("above", "below"):
            if mode == "above":
                y = logo_box.y - text_h - spacing
            else:
                y = logo_box.y + logo_box.h + spacing

            if alignment == "center":
                x = logo_box.x + logo_box.w / 2 - text_w / 2
            elif alignment == "right":
                x = logo_box.x + logo_box.w - text_w
            else:
                x = logo_box.x
        else:
            if mode == "left":
                x = logo_box.x - text_w - spacing
            else:
                x = logo_box.x + logo_box.w + spacing
            y = logo_box.y + logo_box.h / 2 - text_h / 2

    # Text wider than the canvas pins to the padding
    x = max(padding, min(x, width - text_w - padding))
    y = max(padding, min(y, height - text_h - padding))
    return Position(x=x, y=y)
