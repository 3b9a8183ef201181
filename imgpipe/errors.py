"""Error taxonomy for the transformation pipeline.

Request errors (``InvalidSizeError``, ``AssetNotFoundError``) carry a message
that is safe to return to the caller. Every other error is internal: the HTTP
layer logs it with full detail and answers with a generic message.
"""
from __future__ import annotations

from typing import Any

GENERIC_ERROR_MESSAGE = "Error processing request"


class ImageServiceError(Exception):
    """Base class for every failure raised by the pipeline."""

    status_code: int = 500
    public: bool = False

    @property
    def detail(self) -> str:
        return str(self) if self.public else GENERIC_ERROR_MESSAGE


class InvalidSizeError(ImageServiceError):
    """Raised when an explicit width or height is not strictly positive."""

    status_code = 400
    public = True

    def __init__(self, size: Any, field: str = "size") -> None:
        super().__init__(f"Size {size!r} for '{field}' is not valid.")
        self.size = size
        self.field = field


class AssetNotFoundError(ImageServiceError):
    """Raised when the base image or a watermark key is missing in the store."""

    status_code = 404
    public = True

    def __init__(self, key: str) -> None:
        super().__init__(f"{key} not found")
        self.key = key


class DecodeError(ImageServiceError):
    """Raised when fetched bytes cannot be decoded as an image."""


class ProcessingError(ImageServiceError):
    """Raised when resize, rotate, composite or encode fails."""


class TransportError(ImageServiceError):
    """Raised when the asset store fails for reasons other than a missing key."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"Error fetching {key}: {message}")
        self.key = key
