"""Shared pytest fixtures for Smart Restore tests."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from smartrestore.api.main import create_app
from smartrestore.core.config import SmartRestoreConfig
from smartrestore.core.errors import ProviderError
from smartrestore.core.file_store import FileStore

PNG_HEADER = b"\x89PNG\r\n\x1a\n"
JPEG_HEADER = b"\xff\xd8\xff\xe0"


class FakeInvoker:
    """Stand-in for the Gemini invoker that records every call.

    Attributes:
        result: Bytes returned by :meth:`invoke`.
        error: Exception raised by :meth:`invoke` instead, when set.
        calls: ``(image_bytes, mime_type, instruction)`` per call.
    """

    def __init__(self, result: bytes = PNG_HEADER + b"restored", error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[tuple[bytes, str, str]] = []

    async def invoke(self, image_bytes: bytes, mime_type: str, instruction: str) -> bytes:
        self.calls.append((image_bytes, mime_type, instruction))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> SmartRestoreConfig:
    """Create a test configuration whose stores live in ``temp_dir``."""
    return SmartRestoreConfig(
        _env_file=None,
        gemini_api_key="test-key",
        uploads_dir=str(temp_dir / "uploads"),
        results_dir=str(temp_dir / "results"),
    )


@pytest.fixture
def uploads_store(test_config: SmartRestoreConfig) -> FileStore:
    return FileStore(test_config.uploads_dir)


@pytest.fixture
def results_store(test_config: SmartRestoreConfig) -> FileStore:
    return FileStore(test_config.results_dir, url_prefix="/results")


@pytest.fixture
def fake_invoker() -> FakeInvoker:
    """Invoker that returns a small PNG payload."""
    return FakeInvoker()


@pytest.fixture
def failing_invoker() -> FakeInvoker:
    """Invoker that always fails like an unreachable provider."""
    return FakeInvoker(error=ProviderError("Image generation request failed: timeout"))


@pytest.fixture
def test_client(test_config: SmartRestoreConfig, fake_invoker: FakeInvoker):
    """FastAPI TestClient wired to the fake invoker and temporary stores."""
    app = create_app(test_config, invoker=fake_invoker)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def make_invoker():
    """Factory for FakeInvoker instances with a custom result or error."""
    return FakeInvoker


@pytest.fixture
def png_bytes() -> bytes:
    """A 500 KB payload with a PNG signature."""
    return PNG_HEADER + b"\x00" * (500 * 1024)


@pytest.fixture
def jpeg_bytes() -> bytes:
    """A small payload with a JPEG signature."""
    return JPEG_HEADER + b"\x00" * 1024
