"""Upload validation for ``POST /api/restore``.

All checks run before anything is written to disk or sent to the provider.
Failures raise :class:`~smartrestore.core.errors.UploadValidationError`
carrying the HTTP status to report.

The mode is only checked for presence.  Unknown values are accepted and
compile to the default instruction.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import UploadFile

from smartrestore.core.errors import UploadValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png"})
ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png"})

# Generic types defer to the extension check.
_GENERIC_CONTENT_TYPES = frozenset({"", "application/octet-stream"})


def validate_image_type(filename: str | None, content_type: str | None) -> None:
    """Reject anything that is not a JPEG or PNG upload.

    Raises:
        UploadValidationError: If the extension or a specific content type
            is not allowed.
    """
    extension = Path(filename or "").suffix.lower()
    declared = (content_type or "").split(";")[0].strip().lower()

    if extension not in ALLOWED_EXTENSIONS or (
        declared not in _GENERIC_CONTENT_TYPES and declared not in ALLOWED_CONTENT_TYPES
    ):
        logger.info("Rejected upload %r (%s).", filename, declared or "no content type")
        raise UploadValidationError("Only JPG, JPEG, and PNG files are allowed")


def validate_mode(mode: str | None) -> str:
    """Return the mode string, rejecting a missing or empty value.

    Whitespace-only values are accepted and compile to the default instruction.
    """
    if not mode:
        raise UploadValidationError("No restoration mode provided")
    return mode


async def read_limited(upload: UploadFile, max_bytes: int) -> bytes:
    """Read an upload into memory, refusing anything over ``max_bytes``.

    At most ``max_bytes + 1`` bytes are read, so an oversized upload is
    detected without buffering all of it.

    Raises:
        UploadValidationError: 413 if the upload exceeds the limit.
    """
    data = await upload.read(max_bytes + 1)
    if len(data) > max_bytes:
        limit_mib = max_bytes / (1024 * 1024)
        raise UploadValidationError(
            f"File too large: the limit is {limit_mib:g} MB",
            status_code=413,
        )
    return data


async def validate_upload(
    image: UploadFile | None,
    mode: str | None,
    max_bytes: int,
) -> tuple[bytes, str]:
    """Run every upload check in order.

    Order: file present, type allowed, size within limit, mode present.

    Returns:
        Tuple of ``(image_bytes, mode)``.

    Raises:
        UploadValidationError: On the first failing check.
    """
    if image is None or not image.filename:
        raise UploadValidationError("No image uploaded")

    validate_image_type(image.filename, image.content_type)
    data = await read_limited(image, max_bytes)
    if not data:
        raise UploadValidationError("Uploaded image is empty")

    return data, validate_mode(mode)
