"""Smart Restore - AI-powered photo restoration with no durable storage."""

__version__ = "0.1.0"

from smartrestore.core.config import SmartRestoreConfig, config

__all__ = [
    "SmartRestoreConfig",
    "config",
]
