"""
Image Loader - async fetch/decode of image references with explicit success/failure results
"""

import asyncio
import base64
import binascii
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Optional, Union
from urllib.parse import unquote, unquote_to_bytes, urlsplit
from uuid import uuid4

import httpx
from loguru import logger
from PIL import Image

from config import settings
from utils.exceptions import ImageLoadError
from utils.image_utils import decode_image


@dataclass
class Loaded:
    """Decoded image"""
    source: str
    image: Image.Image


@dataclass
class LoadFailed:
    """Image that could not be fetched or decoded"""
    source: str
    reason: str


ImageLoadResult = Union[Loaded, LoadFailed]


class BlobStore:
    """
    Object URLs (``blob:<uuid>``) for fetched bytes

    Every URL handed out must be revoked; use ``hold()`` so that happens on
    every exit path.
    """

    def __init__(self):
        self._blobs: Dict[str, bytes] = {}

    def __len__(self) -> int:
        return len(self._blobs)

    def create(self, data: bytes) -> str:
        url = f"blob:{uuid4()}"
        self._blobs[url] = data
        return url

    def read(self, url: str) -> bytes:
        try:
            return self._blobs[url]
        except KeyError:
            raise ImageLoadError(url, "object URL was revoked or never created") from None

    def revoke(self, url: str) -> None:
        self._blobs.pop(url, None)

    @contextmanager
    def hold(self, data: bytes) -> Iterator[str]:
        """Create an object URL for ``data`` and revoke it when the block exits"""
        url = self.create(data)
        try:
            yield url
        finally:
            self.revoke(url)


def _decode_data_url(url: str) -> bytes:
    header, sep, payload = url.partition(",")
    if not sep:
        raise ImageLoadError(url, "malformed data URL")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as e:
            raise ImageLoadError(url, f"bad base64 payload: {e}") from e
    return unquote_to_bytes(payload)


class ImageLoader:
    """
    Turns image references into Pillow images

    Supported references: http(s) URLs, ``data:`` URLs, ``blob:`` object URLs
    from this loader's BlobStore, ``file://`` URLs and local paths.
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
        blobs: Optional[BlobStore] = None
    ):
        """
        Initialize Image Loader

        Args:
            transport: Custom httpx transport (tests pass httpx.MockTransport)
            timeout: HTTP timeout in seconds (default: settings.HTTP_TIMEOUT, None = no timeout)
            blobs: Object URL registry (default: a fresh one)
        """
        self.transport = transport
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT
        self.blobs = blobs if blobs is not None else BlobStore()

    async def fetch_bytes(self, ref: str) -> bytes:
        """
        Fetch raw bytes for an image reference

        Raises:
            ImageLoadError: on any fetch failure
        """
        if not ref:
            raise ImageLoadError(str(ref), "empty image reference")

        if ref.startswith("data:"):
            return _decode_data_url(ref)

        if ref.startswith("blob:"):
            return self.blobs.read(ref)

        scheme = urlsplit(ref).scheme.lower()
        if scheme in ("http", "https"):
            return await self._fetch_http(ref)

        if scheme == "file":
            path = Path(unquote(urlsplit(ref).path))
        elif scheme and len(scheme) > 1:
            raise ImageLoadError(ref, f"unsupported scheme {scheme!r}")
        else:
            path = Path(ref)

        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise ImageLoadError(ref, str(e)) from e

    async def _fetch_http(self, url: str) -> bytes:
        try:
            async with httpx.AsyncClient(
                transport=self.transport,
                timeout=self.timeout,
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response.content
        except httpx.HTTPError as e:
            raise ImageLoadError(url, f"{type(e).__name__}: {e}") from e

    async def load(self, ref: str) -> ImageLoadResult:
        """
        Fetch and decode an image; never raises

        Args:
            ref: Image reference

        Returns:
            Loaded on success, LoadFailed otherwise
        """
        try:
            data = await self.fetch_bytes(ref)
            image = await asyncio.to_thread(decode_image, data)
        except ImageLoadError as e:
            logger.warning(e.message)
            return LoadFailed(source=ref, reason=e.reason)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            error = ImageLoadError(ref, f"decode failed: {e}")
            logger.warning(error.message)
            return LoadFailed(source=ref, reason=error.reason)

        logger.debug(f"Loaded image {image.width}x{image.height}")
        return Loaded(source=ref, image=image)
