"""
Custom exceptions for the Brand Overlay Compositor
"""


class CompositorError(Exception):
    """Base class for compositing failures that are recovered inside a pipeline."""


class ImageLoadError(CompositorError):
    """
    Raised when an image reference cannot be fetched or decoded.

    Pipelines never let this escape: a failed base image turns into the
    original reference, a failed logo just skips the logo layer.
    """

    def __init__(self, source: str, reason: str, message: str = None):
        self.source = source
        self.reason = reason
        self.message = message or f"Failed to load image {_short(source)}: {reason}"
        super().__init__(self.message)


class ExportError(CompositorError):
    """Raised when the composited canvas cannot be encoded."""


def _short(source: str, limit: int = 80) -> str:
    # data: URLs can be megabytes long
    if source and len(source) > limit:
        return source[:limit] + "..."
    return source
