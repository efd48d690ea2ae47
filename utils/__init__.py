"""
Utility Functions
"""

from .image_utils import (
    configure_logging,
    decode_image,
    encode_data_url,
    resize_image,
    paste_layer,
    load_font,
)
from .exceptions import CompositorError, ImageLoadError, ExportError

__all__ = [
    "configure_logging",
    "decode_image",
    "encode_data_url",
    "resize_image",
    "paste_layer",
    "load_font",
    "CompositorError",
    "ImageLoadError",
    "ExportError",
]
