"""
Image utility functions for decoding, encoding and drawing helpers
"""

import base64
import io
import sys
from pathlib import Path
from typing import Optional, Tuple, Union

from loguru import logger
from PIL import Image, ImageFont

from config import settings
from utils.exceptions import ExportError


def configure_logging(level: str = None) -> None:
    """
    Route loguru output to stderr at the configured level

    Args:
        level: Log level name (default: settings.LOG_LEVEL)
    """
    logger.remove()
    logger.add(sys.stderr, level=level or settings.LOG_LEVEL)


def decode_image(data: bytes) -> Image.Image:
    """
    Decode raw bytes into an RGBA Pillow image

    Args:
        data: Encoded image bytes (PNG, JPEG, WebP, ...)

    Returns:
        Fully loaded RGBA image
    """
    with Image.open(io.BytesIO(data)) as img:
        img.load()
        return img.convert("RGBA")


def encode_data_url(image: Image.Image, image_format: str = None) -> str:
    """
    Encode an image as a base64 data URL

    Args:
        image: Image to encode
        image_format: Pillow format name (default: settings.OUTPUT_FORMAT)

    Returns:
        data:image/<format>;base64,... string
    """
    image_format = (image_format or settings.OUTPUT_FORMAT).upper()
    buffer = io.BytesIO()
    try:
        if image_format in ("JPEG", "JPG"):
            image.convert("RGB").save(buffer, format="JPEG", quality=95)
            mime = "jpeg"
        else:
            image.save(buffer, format=image_format)
            mime = image_format.lower()
    except (OSError, ValueError, KeyError) as e:
        raise ExportError(f"Failed to encode canvas as {image_format}: {e}") from e

    payload = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/{mime};base64,{payload}"


def resize_image(image: Image.Image, target_size: Tuple[int, int]) -> Image.Image:
    """
    Resize image to exactly target size (callers keep the aspect ratio)

    Args:
        image: Input image
        target_size: (width, height)

    Returns:
        Resized image
    """
    return image.resize(target_size, Image.LANCZOS)


def paste_layer(canvas: Image.Image, layer: Image.Image, origin: Tuple[float, float]) -> None:
    """
    Alpha-composite an RGBA layer onto the canvas in place

    Pillow rejects negative destinations, so layers hanging off the
    top/left edge are cropped first.
    """
    x, y = int(round(origin[0])), int(round(origin[1]))
    if x < 0 or y < 0:
        layer = layer.crop((max(0, -x), max(0, -y), layer.width, layer.height))
        x, y = max(0, x), max(0, y)
    if layer.width == 0 or layer.height == 0 or x >= canvas.width or y >= canvas.height:
        return
    canvas.alpha_composite(layer.convert("RGBA"), dest=(x, y))


def load_font(size: float, font_path: Optional[Union[str, Path]] = None) -> ImageFont.ImageFont:
    """
    Load a bold font at the given pixel size

    Args:
        size: Font size in pixels
        font_path: Optional explicit font file

    Returns:
        TrueType font, or Pillow's bundled font as a last resort
    """
    size = max(1, int(round(size)))
    candidates = [font_path, settings.FONT_PATH, settings.FONTS_DIR / settings.FONT_BOLD, settings.FONT_BOLD]

    for candidate in candidates:
        if not candidate:
            continue
        try:
            return ImageFont.truetype(str(candidate), size)
        except OSError:
            continue

    logger.debug(f"No TrueType font available, using Pillow default at {size}px")
    return ImageFont.load_default(size=size)
