"""Shared fixtures for compositor tests."""

import base64
import io

import pytest
from PIL import Image


def _png_bytes(color=(255, 255, 255), size=(400, 300), mode="RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_png():
    """Factory: solid-color PNG bytes."""
    return _png_bytes


@pytest.fixture
def make_data_url():
    """Factory: solid-color PNG as a data URL."""

    def factory(color=(255, 255, 255), size=(400, 300), mode="RGB") -> str:
        payload = base64.b64encode(_png_bytes(color, size, mode)).decode("ascii")
        return f"data:image/png;base64,{payload}"

    return factory


@pytest.fixture
def decode_data_url():
    """Decode a data URL back into an RGBA image."""

    def decode(url: str) -> Image.Image:
        assert url.startswith("data:image/png;base64,")
        payload = url.split(",", 1)[1]
        return Image.open(io.BytesIO(base64.b64decode(payload))).convert("RGBA")

    return decode
