"""
Color Derivation Module - hex/HSL conversion, deterministic colors and hue/luminance tweaks
"""

import math
import re
from typing import NamedTuple, Optional, Tuple

from loguru import logger
from PIL import ImageColor


RGBA = Tuple[int, int, int, int]

_HEX_RE = re.compile(r"^#?[0-9a-fA-F]{1,8}$")


class HSL(NamedTuple):
    """Hue in degrees [0, 360), saturation and lightness in [0, 1]"""
    h: float
    s: float
    l: float


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def expand_short_hex(hex_color: Optional[str]) -> str:
    """
    Normalize a hex color to 6-digit ``#rrggbb`` form

    Args:
        hex_color: ``#abc``, ``abc``, ``#aabbcc`` or a short string to zero-pad

    Returns:
        6-digit hex string with leading ``#`` (black when input is empty)
    """
    if not hex_color:
        return "#000000"
    cleaned = hex_color.replace("#", "")
    if len(cleaned) == 3:
        return "#" + "".join(c + c for c in cleaned)
    return "#" + cleaned.zfill(6)


def _hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    cleaned = expand_short_hex(hex_color).replace("#", "")[:6]
    num = int(cleaned, 16)
    return (num >> 16) & 255, (num >> 8) & 255, num & 255


def hex_to_hsl(hex_color: str) -> Optional[HSL]:
    """
    Convert hex to HSL using max/min channel decomposition

    Returns None when the hex cannot be parsed; callers keep the original color.
    """
    try:
        r, g, b = (c / 255 for c in _hex_to_rgb(hex_color))
    except (ValueError, TypeError):
        return None

    max_c, min_c = max(r, g, b), min(r, g, b)
    h = s = 0.0
    l = (max_c + min_c) / 2

    if max_c != min_c:
        d = max_c - min_c
        s = d / (2 - max_c - min_c) if l > 0.5 else d / (max_c + min_c)
        if max_c == r:
            h = (g - b) / d + (6 if g < b else 0)
        elif max_c == g:
            h = (b - r) / d + 2
        else:
            h = (r - g) / d + 4
        h = (h * 60) % 360

    return HSL(h, s, l)


def hsl_to_hex(hsl: HSL) -> str:
    """
    Convert HSL back to ``#rrggbb``

    Saturation and lightness are clamped to [0, 1] first.
    """
    h, s, l = hsl
    s = max(0.0, min(1.0, s))
    l = max(0.0, min(1.0, l))

    c = (1 - abs(2 * l - 1)) * s
    hh = (h % 360) / 60
    x = c * (1 - abs((hh % 2) - 1))

    if 0 <= hh < 1:
        r, g, b = c, x, 0.0
    elif 1 <= hh < 2:
        r, g, b = x, c, 0.0
    elif 2 <= hh < 3:
        r, g, b = 0.0, c, x
    elif 3 <= hh < 4:
        r, g, b = 0.0, x, c
    elif 4 <= hh < 5:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x

    m = l - c / 2
    return "#" + "".join(f"{max(0, min(255, _round_half_up((v + m) * 255))):02x}" for v in (r, g, b))


def string_to_deterministic_hex(value: str) -> str:
    """
    Map an arbitrary string to a stable color

    Uses the classic ``hash = char + ((hash << 5) - hash)`` rolling hash with
    32-bit wraparound over UTF-16 code units. Collisions are acceptable.

    Args:
        value: Any string (e.g. a color name the model made up)

    Returns:
        ``#rrggbb``
    """
    h = 0
    units = str(value).encode("utf-16-le")
    for i in range(0, len(units), 2):
        code = units[i] | (units[i + 1] << 8)
        h = _to_int32(code + (h << 5) - h)

    r = (h >> 16) & 0xFF
    g = (h >> 8) & 0xFF
    b = h & 0xFF
    return f"#{r:02x}{g:02x}{b:02x}"


def shift_hex_hue(hex_color: str, degrees: float) -> str:
    """
    Rotate hue by ``degrees`` (wrapped into [0, 360)), keeping s and l

    Returns the input unchanged if it cannot be parsed.
    """
    hsl = hex_to_hsl(hex_color)
    if hsl is None:
        logger.debug(f"Hue shift skipped, unparsable color: {hex_color!r}")
        return hex_color
    h = (hsl.h + degrees) % 360
    if h < 0:
        h += 360
    return hsl_to_hex(HSL(h, hsl.s, hsl.l))


def adjust_color_luminance(hex_color: str, amount: float) -> str:
    """
    Add ``amount`` (-1..1) to lightness, clamped to [0, 1]

    Args:
        hex_color: Source color
        amount: Lightness delta

    Returns:
        Adjusted ``#rrggbb``, or the input unchanged if it cannot be parsed
    """
    hsl = hex_to_hsl(hex_color)
    if hsl is None:
        return hex_color
    l = max(0.0, min(1.0, hsl.l + amount))
    return hsl_to_hex(HSL(hsl.h, hsl.s, l))


def hex_to_rgba(hex_color: str, alpha: float = 1) -> str:
    """Format as a CSS ``rgba(r, g, b, a)`` string; opaque black on parse failure."""
    try:
        r, g, b = _hex_to_rgb(hex_color)
    except (ValueError, TypeError):
        return f"rgba(0,0,0,{alpha})"
    return f"rgba({r}, {g}, {b}, {alpha})"


def hex_to_rgb_tuple(hex_color: str, alpha: float = 1.0) -> RGBA:
    """
    Resolve a hex color to the concrete RGBA tuple Pillow draws with

    Args:
        hex_color: Source color
        alpha: Opacity 0..1

    Returns:
        (r, g, b, a) with a in 0..255; black at ``alpha`` on parse failure
    """
    a = max(0, min(255, _round_half_up(alpha * 255)))
    try:
        r, g, b = _hex_to_rgb(hex_color)
    except (ValueError, TypeError):
        return (0, 0, 0, a)
    return (r, g, b, a)


def parse_color(
    value: Optional[str],
    alpha: float = 1.0,
    default: Tuple[int, int, int] = (0, 0, 0)
) -> RGBA:
    """
    Resolve a user-supplied color (hex or CSS name) to an RGBA tuple

    Args:
        value: ``#ff0000``, ``f00``, ``red``, ``rgb(255,0,0)`` ...
        alpha: Opacity 0..1 applied to the result
        default: RGB used when the value cannot be parsed

    Returns:
        (r, g, b, a)
    """
    a = max(0, min(255, _round_half_up(alpha * 255)))
    if not value:
        return (*default, a)

    value = value.strip()
    if _HEX_RE.match(value):
        return hex_to_rgb_tuple(value, alpha)

    try:
        rgb = ImageColor.getrgb(value)
    except ValueError:
        logger.warning(f"Unrecognized color {value!r}, using {default}")
        return (*default, a)
    return (rgb[0], rgb[1], rgb[2], a)
