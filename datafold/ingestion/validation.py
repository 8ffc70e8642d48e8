"""Validation gate applied before an upload is stored."""
from __future__ import annotations

import logging

from datafold.settings import UploadLimits

from .request import UploadRequest

logger = logging.getLogger(__name__)


def is_safe_file_name(file_name: str) -> bool:
    """Return True when *file_name* is non-empty and cannot escape a directory."""

    if not file_name or not file_name.strip():
        return False
    if "/" in file_name or "\\" in file_name:
        return False
    return ".." not in file_name


def is_extension_allowed(extension: str, limits: UploadLimits) -> bool:
    extension = extension.lower()
    if extension in limits.blocked_extensions:
        logger.warning("File extension %s is blocked", extension)
        return False
    if extension not in limits.allowed_extensions:
        logger.warning(
            "File extension %s is not allowed (allowed: %s)",
            extension or "<none>",
            ", ".join(limits.allowed_extensions),
        )
        return False
    return True


def is_size_allowed(file_size: int, limits: UploadLimits) -> bool:
    if file_size <= 0:
        logger.warning("File size must be positive, got %d", file_size)
        return False
    if file_size > limits.max_file_size:
        logger.warning("File size %d exceeds limit of %d bytes", file_size, limits.max_file_size)
        return False
    return True


def validate_upload(request: UploadRequest, limits: UploadLimits) -> bool:
    """Return True when *request* may be stored.

    Rejections are reported through the return value, never raised.
    """

    if not is_safe_file_name(request.file_name):
        logger.warning("Rejected unsafe file name %r", request.file_name)
        return False
    if not is_extension_allowed(request.extension, limits):
        return False
    return is_size_allowed(request.file_size, limits)
