"""Configuration management for Smart Restore.

This module provides centralized configuration using Pydantic Settings.
Values are loaded from environment variables with the ``SMARTRESTORE_``
prefix, falling back to a ``.env`` file and then to the defaults below.

Two settings also accept the conventional unprefixed names used by hosting
platforms:

- ``GEMINI_API_KEY`` for :attr:`SmartRestoreConfig.gemini_api_key`
- ``PORT`` for :attr:`SmartRestoreConfig.server_port`

Example .env file::

    GEMINI_API_KEY=your-key
    SMARTRESTORE_SERVER_PORT=3000
    SMARTRESTORE_RESULTS_DIR=results

Global Configuration Instance
-----------------------------
A global ``config`` instance is created at import time and serves as the
single source of truth for the application.  The upload and results
directories are created when a configuration is initialised.

The API key is deliberately not validated here.  A missing key is reported
when the application starts (see :mod:`smartrestore.api.main`), so tools and
tests can import the package without a credential.
"""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


class SmartRestoreConfig(BaseSettings):
    """Main configuration for Smart Restore.

    Attributes
    ----------
    Provider Settings:
        gemini_api_key : str
            Credential for the Google Gemini API (required at startup).
        gemini_model : str
            Gemini model with image output support.
        temperature, top_p, top_k : float, float, int
            Sampling configuration.  Kept low so the model restores rather
            than reinterprets the photo.

    Server Settings:
        server_host : str
            Bind address for uvicorn.
        server_port : int
            Port for uvicorn (1-65535).
        log_level : str
            Root logging level used by the CLI entry point.

    Storage Settings:
        uploads_dir : Path
            Temporary store for staged uploads.
        results_dir : Path
            Publicly served store for restored images.
        static_dir, templates_dir : Path
            Frontend assets shipped with the package.

    Limits:
        max_upload_bytes : int
            Largest accepted upload.
        file_max_age_seconds : int
            Age after which the sweep deletes a stored file.
        sweep_interval_seconds : int
            Delay between two sweeps.
        history_capacity : int
            Number of records the browser history keeps.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SMARTRESTORE_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Provider settings
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "gemini_api_key", "SMARTRESTORE_GEMINI_API_KEY", "GEMINI_API_KEY"
        ),
        description="Google Gemini API key",
    )
    gemini_model: str = Field(
        default="gemini-2.0-flash-exp",
        description="Gemini model able to return image parts",
    )
    temperature: float = Field(default=0.4, ge=0.0, le=2.0)
    top_p: float = Field(default=1.0, gt=0.0, le=1.0)
    top_k: int = Field(default=32, ge=1)

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=3000,
        validation_alias=AliasChoices("server_port", "SMARTRESTORE_SERVER_PORT", "PORT"),
        description="Server port",
        ge=1,
        le=65535,
    )
    log_level: str = Field(default="INFO", description="Logging level")

    # Paths
    uploads_dir: Path = Field(
        default=Path("uploads"),
        description="Temporary store for staged uploads",
    )
    results_dir: Path = Field(
        default=Path("results"),
        description="Publicly served store for restored images",
    )
    static_dir: Path = Field(
        default=_PACKAGE_DIR / "static",
        description="Frontend CSS and JavaScript",
    )
    templates_dir: Path = Field(
        default=_PACKAGE_DIR / "templates",
        description="Directory holding index.html",
    )

    # Limits
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, ge=1)
    file_max_age_seconds: int = Field(default=60 * 60, ge=1)
    sweep_interval_seconds: int = Field(default=60 * 60, ge=1)
    history_capacity: int = Field(default=20, ge=1)

    def __init__(self, **kwargs):
        """Initialize configuration and create the file stores.

        Args:
            **kwargs: Configuration overrides.
        """
        super().__init__(**kwargs)

        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        self.results_dir.mkdir(parents=True, exist_ok=True)


# Global configuration instance
config = SmartRestoreConfig()
