"""Directory-backed blob stores for staged uploads and restored results.

A :class:`FileStore` wraps one flat directory.  The application uses two:

- the **uploads** store, holding staged inputs until they are restored
- the **results** store, publicly served under a URL prefix so clients can
  fetch restored images directly

Filenames are generated from the current time in milliseconds plus a random
component, so concurrent requests never write to the same path and no
locking is needed.  Both the clock and the random source are injectable to
keep tests deterministic.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class StoredFile:
    """A file in a store together with its last-modified time."""

    path: Path
    modified_at: float

    def age(self, now: float) -> float:
        """Seconds elapsed between the last modification and ``now``."""
        return now - self.modified_at


class FileStore:
    """A flat directory of short-lived files.

    Attributes:
        root: Directory holding the files.
        url_prefix: Public URL prefix for the store, or ``None`` when its
            files are not served.
    """

    def __init__(
        self,
        root: Path,
        *,
        url_prefix: str | None = None,
        clock: Clock = time.time,
        rng: random.Random | None = None,
    ) -> None:
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/") if url_prefix else None
        self._clock = clock
        self._rng = rng or random.Random()

    def ensure(self) -> None:
        """Create the store directory if it does not exist."""
        self.root.mkdir(parents=True, exist_ok=True)

    def unique_name(self, prefix: str, suffix: str) -> str:
        """Return a fresh filename such as ``restored-1712345678901-48213.png``."""
        millis = int(self._clock() * 1000)
        return f"{prefix}-{millis}-{self._rng.randrange(10**9)}{suffix}"

    def write(self, name: str, data: bytes) -> Path:
        """Write ``data`` to ``name`` inside the store and return its path."""
        self.ensure()
        path = self.root / name
        path.write_bytes(data)
        return path

    def delete(self, path: Path) -> bool:
        """Delete a file from the store.

        Returns:
            ``True`` if a file was removed, ``False`` if it was already gone.

        Raises:
            OSError: If the file exists but cannot be removed.
        """
        try:
            Path(path).unlink()
        except FileNotFoundError:
            return False
        return True

    def entries(self) -> list[StoredFile]:
        """List the regular files in the store with their modification times.

        Files that disappear while the directory is being listed are skipped.
        A missing store directory yields an empty list.
        """
        if not self.root.exists():
            return []

        found: list[StoredFile] = []
        for path in sorted(self.root.iterdir()):
            try:
                stat = path.stat()
            except FileNotFoundError:
                continue
            if path.is_file():
                found.append(StoredFile(path=path, modified_at=stat.st_mtime))
        return found

    def public_url(self, path: Path) -> str:
        """Return the public URL of a file in a served store.

        Raises:
            ValueError: If the store is not publicly served.
        """
        if self.url_prefix is None:
            raise ValueError(f"Store {self.root.name!r} is not publicly served")
        return f"{self.url_prefix}/{Path(path).name}"
