"""Restoration invoker: the single call out to the generative model.

The lifecycle manager only depends on the :class:`Invoker` protocol, so the
Gemini client can be swapped for a fake in tests.  :class:`GeminiInvoker`
is the production implementation built on the ``google-genai`` SDK.

Response Handling
-----------------
Gemini may answer with a mix of text and image parts.  The first inline
image part of the first candidate is the result; text parts are logged and
discarded.  An answer without any image part raises
:class:`~smartrestore.core.errors.NoImageProduced`.

Every transport or SDK failure is wrapped in
:class:`~smartrestore.core.errors.ProviderError` and re-raised.  There are
no retries: each request makes exactly one provider call.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from google import genai
from google.genai import types

from smartrestore.core.config import SmartRestoreConfig
from smartrestore.core.errors import NoImageProduced, ProviderError

logger = logging.getLogger(__name__)

SUPPORTED_MIME_TYPES = frozenset({"image/jpeg", "image/png"})


class Invoker(Protocol):
    """Capability that turns (image, instruction) into a new image."""

    async def invoke(self, image_bytes: bytes, mime_type: str, instruction: str) -> bytes:
        """Return the regenerated image bytes or raise ``ProviderError``."""
        ...


def extract_image(response: Any) -> bytes:
    """Pull the first inline image out of a ``generate_content`` response.

    Args:
        response: A ``GenerateContentResponse`` (or any object with the same
            ``candidates[0].content.parts`` shape).

    Returns:
        Raw bytes of the first image part.

    Raises:
        ProviderError: If the response has no candidate content at all.
        NoImageProduced: If the candidate contains no image part.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        raise ProviderError("Provider returned no candidates")

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        raise ProviderError("Provider returned an empty candidate")

    for part in parts:
        inline_data = getattr(part, "inline_data", None)
        if inline_data is not None and inline_data.data:
            return inline_data.data
        if getattr(part, "text", None):
            logger.info("AI response text: %s", part.text)

    raise NoImageProduced("No image was generated in the response")


class GeminiInvoker:
    """Invoker backed by the Google Gemini image model.

    Attributes:
        _client: ``genai.Client`` used for the async ``generate_content`` call.
        _model: Gemini model name.
        _generation_config: Fixed sampling configuration sent with every call.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gemini-2.0-flash-exp",
        temperature: float = 0.4,
        top_p: float = 1.0,
        top_k: int = 32,
        client: Any = None,
    ) -> None:
        """Create the invoker.

        Args:
            api_key: Gemini API key.  Ignored when ``client`` is given.
            model: Model name passed to ``generate_content``.
            temperature: Sampling temperature.
            top_p: Nucleus sampling threshold.
            top_k: Top-k sampling limit.
            client: Pre-built client, mainly for tests.
        """
        self._client = client if client is not None else genai.Client(api_key=api_key)
        self._model = model
        self._generation_config = types.GenerateContentConfig(
            response_modalities=["TEXT", "IMAGE"],
            temperature=temperature,
            top_p=top_p,
            top_k=top_k,
        )

    @classmethod
    def from_config(cls, config: SmartRestoreConfig) -> GeminiInvoker:
        """Build an invoker from the application configuration."""
        return cls(
            config.gemini_api_key,
            model=config.gemini_model,
            temperature=config.temperature,
            top_p=config.top_p,
            top_k=config.top_k,
        )

    async def invoke(self, image_bytes: bytes, mime_type: str, instruction: str) -> bytes:
        """Send the photo and instruction to Gemini and return the new image.

        Args:
            image_bytes: Raw bytes of the uploaded photo.
            mime_type: MIME type of ``image_bytes``.  Types outside
                :data:`SUPPORTED_MIME_TYPES` are passed through best-effort.
            instruction: Restoration instruction text.

        Returns:
            Bytes of the first image part returned by the model.

        Raises:
            ProviderError: On empty input, transport/SDK failure or a
                malformed response.
            NoImageProduced: If the model answered without an image.
        """
        if not image_bytes:
            raise ProviderError("Cannot restore an empty image")
        if mime_type not in SUPPORTED_MIME_TYPES:
            logger.warning("Sending unsupported MIME type '%s' to provider.", mime_type)

        contents = [
            types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
            instruction,
        ]

        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=contents,
                config=self._generation_config,
            )
        except Exception as exc:
            raise ProviderError(f"Image generation request failed: {exc}") from exc

        return extract_image(response)
