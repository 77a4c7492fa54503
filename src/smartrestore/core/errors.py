"""Error kinds raised by the restoration core.

Every failure the service can report is a :class:`RestorationError`.  The
FastAPI layer maps each subclass onto an HTTP status and the
``{"error": ..., "details": ...}`` response shape, so messages attached to
these exceptions must never contain internal filesystem paths.
"""

from __future__ import annotations


class RestorationError(Exception):
    """Base class for all restoration failures."""


class UploadValidationError(RestorationError):
    """The inbound upload was rejected before any processing happened.

    Attributes:
        status_code: HTTP status to report (400 by default, 413 for
            oversized uploads).
    """

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderError(RestorationError):
    """The generative provider failed or returned an unusable response."""


class NoImageProduced(ProviderError):
    """The provider answered, but without any image segment."""


class FilesystemError(RestorationError):
    """Reading the staged upload or writing the result failed."""


class ConfigurationError(RestorationError):
    """Required configuration (e.g. the API credential) is missing."""
