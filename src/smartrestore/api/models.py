"""Pydantic response models for the Smart Restore API.

Field names use the camelCase keys the browser client expects
(``imageUrl``, ``restorationMode``, ``createdAt``).

Models
------
RestoreResponse
    Success payload for ``POST /api/restore``.
ErrorResponse
    Failure payload for every endpoint.
ModeOption / ClientConfig
    Payload for ``GET /api/config``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class RestoreResponse(BaseModel):
    """Response body for a successful ``POST /api/restore``.

    The browser turns ``imageUrl``, ``restorationMode`` and ``createdAt``
    into a history record stored on the user's device.

    Attributes:
        success: Always ``True``.
        imageUrl: Public URL of the restored image.
        restorationMode: Mode string exactly as sent by the client.
        createdAt: Completion time in milliseconds since the epoch.
    """

    success: bool = Field(default=True)
    imageUrl: str = Field(..., description="Public URL of the restored image.")
    restorationMode: str = Field(..., description="Mode as sent by the client.")
    createdAt: int = Field(..., description="Completion time, epoch milliseconds.")


class ErrorResponse(BaseModel):
    """Response body for any failed request.

    Attributes:
        error: Short, user-facing description.
        details: Optional underlying cause.  Never contains server paths.
    """

    error: str
    details: str | None = None


class ModeOption(BaseModel):
    """One entry of the restoration mode picker."""

    id: str
    label: str


class ClientConfig(BaseModel):
    """Settings the frontend needs before the first upload."""

    version: str
    modes: list[ModeOption]
    maxUploadBytes: int
    acceptedTypes: list[str]
    historyCapacity: int
