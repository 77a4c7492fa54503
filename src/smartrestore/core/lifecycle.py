"""Upload lifecycle management for a single restoration request.

:class:`UploadLifecycleManager` owns a request from the moment the upload is
staged on disk until the restored image is written to the results store:

1. Stage the upload in the temporary uploads store.
2. Read it back, derive its MIME type from the extension, and compile the
   instruction for the requested mode.
3. Call the injected :class:`~smartrestore.core.invoker.Invoker`.
4. Write the returned image under a fresh name in the results store.
5. Delete the staged upload, on success and on failure alike.

Deleting the staged upload is best-effort.  A failed delete is logged and
the request carries on; the periodic sweep in
:mod:`smartrestore.core.sweeper` reclaims anything left behind.

The manager holds no per-request state, so one instance serves every
concurrent request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from smartrestore.core.errors import FilesystemError
from smartrestore.core.file_store import FileStore
from smartrestore.core.invoker import Invoker
from smartrestore.core.prompt_builder import build_prompt, normalize_mode

logger = logging.getLogger(__name__)

_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
}
_FALLBACK_MIME_TYPE = "application/octet-stream"


def mime_type_for(path: Path) -> str:
    """Return the MIME type implied by a file's extension."""
    return _MIME_TYPES.get(Path(path).suffix.lower(), _FALLBACK_MIME_TYPE)


@dataclass(frozen=True)
class RestorationResult:
    """Outcome of a successful restoration.

    Attributes:
        image_bytes: Bytes written to the results store.
        path: Location of the result inside the results store.
        url: Public URL under which the result is served.
    """

    image_bytes: bytes
    path: Path
    url: str


class UploadLifecycleManager:
    """Drives one upload through staging, restoration and cleanup.

    Attributes:
        _invoker: Capability that performs the actual restoration.
        _uploads: Store holding staged uploads.
        _results: Publicly served store receiving restored images.
    """

    def __init__(self, invoker: Invoker, uploads: FileStore, results: FileStore) -> None:
        self._invoker = invoker
        self._uploads = uploads
        self._results = results

    def stage_upload(self, data: bytes, original_filename: str) -> Path:
        """Write an inbound upload to the temporary store.

        Only the extension of ``original_filename`` is kept; the stored name
        is generated.

        Raises:
            FilesystemError: If the upload cannot be written.
        """
        suffix = Path(original_filename).suffix.lower()
        name = self._uploads.unique_name("upload", suffix)
        try:
            return self._uploads.write(name, data)
        except OSError as exc:
            raise FilesystemError("Failed to store uploaded image") from exc

    async def restore(self, temp_input_path: Path, mode: str) -> RestorationResult:
        """Restore a staged upload and publish the result.

        Args:
            temp_input_path: Path of the staged upload.
            mode: Restoration mode as sent by the client.  Unknown values use
                the default instruction.

        Returns:
            The stored :class:`RestorationResult`.

        Raises:
            FilesystemError: If the upload cannot be read or the result
                cannot be written.
            ProviderError: If the invoker fails or produces no image.
        """
        temp_input_path = Path(temp_input_path)

        try:
            try:
                image_bytes = temp_input_path.read_bytes()
            except OSError as exc:
                raise FilesystemError("Failed to read uploaded image") from exc

            mime_type = mime_type_for(temp_input_path)
            instruction = build_prompt(mode)

            logger.info('Restoring image using mode: "%s"', normalize_mode(mode).value)
            restored = await self._invoker.invoke(image_bytes, mime_type, instruction)

            name = self._results.unique_name("restored", ".png")
            try:
                output_path = self._results.write(name, restored)
            except OSError as exc:
                raise FilesystemError("Failed to save restored image") from exc
            logger.info("Image successfully restored and saved to %s", output_path)
        finally:
            self._discard_upload(temp_input_path)

        return RestorationResult(
            image_bytes=restored,
            path=output_path,
            url=self._results.public_url(output_path),
        )

    def _discard_upload(self, path: Path) -> None:
        """Delete a staged upload, logging rather than raising on failure."""
        try:
            if self._uploads.delete(path):
                logger.info("Cleaned up uploaded file: %s", path)
        except OSError as exc:
            logger.warning("Could not delete temporary file %s: %s", path, exc)
