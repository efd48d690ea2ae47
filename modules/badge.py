"""
Badge planning - promotion selection, badge color and estimated template obstacles
"""

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from loguru import logger

from config import settings
from modules.color import expand_short_hex, shift_hex_hue, string_to_deterministic_hex
from modules.geometry import BoundingBox, corner_origin
from modules.schemas import PromotionalComponent, TemplateSettings


@dataclass
class BadgeGeometry:
    """Badge sizes for one canvas"""
    inner: float  # text-safe diameter
    diameter: float  # visual circle
    padding: float

    @property
    def radius(self) -> float:
        return self.diameter / 2

    @classmethod
    def for_canvas(cls, canvas_size: Tuple[float, float]) -> "BadgeGeometry":
        width, height = canvas_size
        inner = min(width, height) * settings.BADGE_INNER_RATIO
        return cls(
            inner=inner,
            diameter=inner * settings.BADGE_VISUAL_SCALE,
            padding=max(12.0, width * 0.02),
        )


def select_promotion(components: Iterable[PromotionalComponent]) -> Optional[PromotionalComponent]:
    """First promotion-like component; one badge per image"""
    for component in components or ():
        if component.is_promotion:
            return component
    return None


def resolve_badge_color(component: PromotionalComponent, rng: random.Random = None) -> str:
    """
    Pick the badge color and nudge its hue away from brand colors

    Explicit hex wins, any other string is hashed to a stable color, and
    without a color a palette entry is drawn at random. The result is always
    hue-shifted by BADGE_HUE_SHIFT_MIN .. MIN + SPAN - 1 degrees.

    Args:
        component: Selected promotion
        rng: Random source (default: module random)

    Returns:
        ``#rrggbb``
    """
    rng = rng or random
    raw = component.color.strip() if component.color else ""

    if raw.startswith("#"):
        base = expand_short_hex(raw)
    elif raw:
        base = string_to_deterministic_hex(raw)
    else:
        base = rng.choice(settings.BADGE_PALETTE)

    shift = settings.BADGE_HUE_SHIFT_MIN + rng.randrange(settings.BADGE_HUE_SHIFT_SPAN)
    badge = shift_hex_hue(base, shift)
    logger.debug(f"Badge color {base} shifted {shift} deg -> {badge}")
    return badge


def _obstacle_padding(canvas_width: float) -> float:
    return max(20.0, canvas_width * 0.02)


def estimate_logo_box(template: TemplateSettings, canvas_size: Tuple[float, float]) -> Optional[BoundingBox]:
    """
    Approximate box of a template logo, square at 12% of the short side

    Only exists when the template has both a logo and a position.
    """
    if not (template.has_logo and template.selected_position):
        return None

    width, height = canvas_size
    size = min(width, height) * 0.12
    origin = corner_origin(template.selected_position, canvas_size, (size, size), _obstacle_padding(width))
    return BoundingBox(x=origin.x, y=origin.y, w=size, h=size)


def estimate_text_box(template: TemplateSettings, canvas_size: Tuple[float, float]) -> Optional[BoundingBox]:
    """
    Approximate box of the company text from character count x font size

    Glyph metrics are not known before drawing, so this can disagree with
    the rendered text; it only steers badge placement.
    """
    if not template.has_company_text:
        return None

    width, height = canvas_size
    font_size = (template.text_size or 24) * (width / 1000)
    text_w = min(width * 0.4, font_size * len(template.company_text))
    padding = _obstacle_padding(width)

    position = template.selected_position or ""
    if position.startswith("top"):
        y = padding + font_size + 4
    elif position.startswith("bottom"):
        y = height - padding - font_size
    else:
        y = padding

    if position.endswith("center"):
        x = (width - text_w) / 2
    elif position.endswith("right"):
        x = width - text_w - padding
    else:
        x = padding

    return BoundingBox(x=x, y=y, w=text_w, h=font_size + 4)


def estimate_obstacles(
    template: Optional[TemplateSettings],
    canvas_size: Tuple[float, float]
) -> List[BoundingBox]:
    """Estimated logo and text boxes the badge should stay clear of"""
    if template is None:
        return []
    boxes = [estimate_logo_box(template, canvas_size), estimate_text_box(template, canvas_size)]
    return [box for box in boxes if box is not None]
