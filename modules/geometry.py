"""
Geometry & Collision - anchor resolution, overlap tests and candidate-position search
"""

import random
from dataclasses import dataclass
from numbers import Real
from typing import Callable, List, Optional, Sequence, Tuple, Union

from loguru import logger


CORNERS = ("top-left", "top-center", "top-right", "bottom-left", "bottom-center", "bottom-right")

# Fractions of (width, height)
KEYWORD_POSITIONS = {
    "center-left": (0.25, 0.5),
    "center-right": (0.75, 0.5),
    "center-up": (0.5, 0.25),
    "center-down": (0.5, 0.75),
    "center": (0.5, 0.5),
}

# Probe order for collision avoidance: right-center, left-center, top-center, bottom-center
CANDIDATE_FRACTIONS = (
    (0.75, 0.5),
    (0.25, 0.5),
    (0.5, 0.25),
    (0.5, 0.75),
)

DEFAULT_CORNER = "top-right"

# Badge x (fraction of width) for template corners it would otherwise share with the logo
CORNER_BADGE_X = {
    "top-left": 0.5,
    "top-center": 0.75,
}

RANDOM_SIDE_JITTER = 0.05  # +/-5% of canvas height


@dataclass
class Position:
    """Position with x, y coordinates"""
    x: float
    y: float


@dataclass
class BoundingBox:
    """Axis-aligned rectangle, top-left origin"""
    x: float
    y: float
    w: float
    h: float


@dataclass
class BoundingCircle:
    """Circle by center and radius"""
    x: float
    y: float
    r: float


# ----------------------------------------------------------------------------
# Anchor variants
# ----------------------------------------------------------------------------

@dataclass(frozen=True)
class NormalizedAnchor:
    """Center as fractions of canvas width/height, both in (0, 1]"""
    x: float
    y: float


@dataclass(frozen=True)
class PixelAnchor:
    """Center in absolute canvas pixels"""
    x: float
    y: float


@dataclass(frozen=True)
class KeywordAnchor:
    """One of KEYWORD_POSITIONS"""
    keyword: str


@dataclass(frozen=True)
class CornerAnchor:
    """Named template corner (top-left ... bottom-right)"""
    corner: str


@dataclass(frozen=True)
class RandomSideAnchor:
    """center-left or center-right with vertical jitter, picked at resolve time"""


Anchor = Union[NormalizedAnchor, PixelAnchor, KeywordAnchor, CornerAnchor, RandomSideAnchor]


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _pair(raw) -> Optional[Tuple[float, float]]:
    if raw is None or isinstance(raw, str):
        return None
    if isinstance(raw, dict):
        x, y = raw.get("x"), raw.get("y")
    elif isinstance(raw, (tuple, list)) and len(raw) == 2:
        x, y = raw
    else:
        x, y = getattr(raw, "x", None), getattr(raw, "y", None)
    if _is_number(x) and _is_number(y):
        return float(x), float(y)
    return None


def parse_anchor(raw, template_position: Optional[str] = None) -> Anchor:
    """
    Classify a raw position spec into an Anchor variant

    Args:
        raw: {x, y} mapping / pair / object, keyword string, or None
        template_position: Template's selected corner, if a template exists

    Returns:
        Anchor variant; resolve it with resolve_anchor()
    """
    pair = _pair(raw)
    if pair is not None:
        x, y = pair
        if 0 < x <= 1 and 0 < y <= 1:
            return NormalizedAnchor(x, y)
        return PixelAnchor(x, y)

    if isinstance(raw, str):
        keyword = raw.strip().lower()
        if keyword in KEYWORD_POSITIONS:
            return KeywordAnchor(keyword)
        logger.debug(f"Unknown position keyword {raw!r}, falling back to template corner")
        return CornerAnchor(template_position or DEFAULT_CORNER)

    if template_position:
        return CornerAnchor(template_position)
    return RandomSideAnchor()


def corner_origin(
    corner: Optional[str],
    canvas_size: Tuple[float, float],
    element_size: Tuple[float, float],
    padding: float
) -> Position:
    """
    Top-left origin of an element placed at a named corner

    Unknown or missing corners resolve to bottom-right.
    """
    width, height = canvas_size
    w, h = element_size

    left = padding
    center = (width - w) / 2
    right = width - w - padding
    top = padding
    bottom = height - h - padding

    table = {
        "top-left": (left, top),
        "top-center": (center, top),
        "top-right": (right, top),
        "bottom-left": (left, bottom),
        "bottom-center": (center, bottom),
        "bottom-right": (right, bottom),
    }
    x, y = table.get(corner, (right, bottom))
    return Position(x=x, y=y)


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def clamp_center(
    center: Position,
    canvas_size: Tuple[float, float],
    extent: float,
    padding: float
) -> Position:
    """
    Clamp an element center so the element stays inside the padded canvas

    Args:
        center: Element center
        canvas_size: (width, height)
        extent: Element diameter (square extent)
        padding: Edge padding

    Returns:
        Clamped center
    """
    width, height = canvas_size
    half = extent / 2
    return Position(
        x=clamp(center.x, padding + half, width - padding - half),
        y=clamp(center.y, padding + half, height - padding - half),
    )


def resolve_anchor(
    anchor: Anchor,
    canvas_size: Tuple[float, float],
    extent: float,
    padding: float,
    rng: random.Random = None
) -> Position:
    """
    Resolve an anchor to an (unclamped) element center

    Args:
        anchor: Parsed anchor
        canvas_size: (width, height)
        extent: Element diameter, used for corner anchors
        padding: Edge padding
        rng: Random source for RandomSideAnchor (default: module random)

    Returns:
        Element center
    """
    width, height = canvas_size

    if isinstance(anchor, NormalizedAnchor):
        return Position(x=anchor.x * width, y=anchor.y * height)

    if isinstance(anchor, PixelAnchor):
        return Position(x=anchor.x, y=anchor.y)

    if isinstance(anchor, KeywordAnchor):
        fx, fy = KEYWORD_POSITIONS[anchor.keyword]
        return Position(x=fx * width, y=fy * height)

    if isinstance(anchor, CornerAnchor):
        origin = corner_origin(anchor.corner, canvas_size, (extent, extent), padding)
        center = Position(x=origin.x + extent / 2, y=origin.y + extent / 2)
        if anchor.corner in CORNER_BADGE_X:
            center.x = CORNER_BADGE_X[anchor.corner] * width
        return center

    rng = rng or random
    side = "center-right" if rng.random() < 0.5 else "center-left"
    jitter = (rng.random() - 0.5) * (RANDOM_SIDE_JITTER * 2)
    fx, _ = KEYWORD_POSITIONS[side]
    logger.debug(f"No badge position given, picked {side} with jitter {jitter:+.3f}")
    return Position(x=fx * width, y=height * (0.5 + jitter))


def box_circle_overlap(box: Optional[BoundingBox], circle: BoundingCircle) -> bool:
    """
    Conservative overlap test using the circle's bounding square

    May report overlap for configurations that only touch the square's
    corners; that only ever triggers a reposition.
    """
    if box is None:
        return False
    left = circle.x - circle.r
    right = circle.x + circle.r
    top = circle.y - circle.r
    bottom = circle.y + circle.r
    return not (right < box.x or left > box.x + box.w or bottom < box.y or top > box.y + box.h)


def candidate_positions(canvas_size: Tuple[float, float]) -> List[Position]:
    width, height = canvas_size
    return [Position(x=fx * width, y=fy * height) for fx, fy in CANDIDATE_FRACTIONS]


def find_non_overlapping_position(
    initial: Position,
    radius: float,
    obstacles: Sequence[Optional[BoundingBox]],
    candidates: Sequence[Position],
    clamp_fn: Callable[[Position], Position]
) -> Position:
    """
    Move a circle off the obstacles using a fixed, bounded list of probes

    Args:
        initial: Already clamped center
        radius: Circle radius
        obstacles: Boxes to avoid (None entries are ignored)
        candidates: Ordered probe centers (at most a handful)
        clamp_fn: Clamps a probe into bounds

    Returns:
        ``initial`` if it is clear, else the first clear clamped candidate,
        else ``initial`` (possibly still overlapping)
    """
    boxes = [box for box in obstacles if box is not None]

    def clear(center: Position) -> bool:
        circle = BoundingCircle(x=center.x, y=center.y, r=radius)
        return not any(box_circle_overlap(box, circle) for box in boxes)

    if clear(initial):
        return initial

    for candidate in candidates:
        probe = clamp_fn(candidate)
        if clear(probe):
            logger.debug(f"Badge moved from ({initial.x:.0f}, {initial.y:.0f}) to ({probe.x:.0f}, {probe.y:.0f})")
            return probe

    logger.debug("No clear candidate position, keeping original badge position")
    return initial
