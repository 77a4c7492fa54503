"""Core restoration components.

- **prompt_builder**: maps a restoration mode to the instruction text
- **invoker**: the ``Invoker`` protocol and its Gemini implementation
- **file_store**: directory-backed stores for uploads and results
- **lifecycle**: drives one upload through restoration and cleanup
- **sweeper**: periodic deletion of stale files
- **config**: Pydantic Settings configuration (``SMARTRESTORE_`` prefix)
"""

from smartrestore.core.config import SmartRestoreConfig, config
from smartrestore.core.errors import (
    ConfigurationError,
    FilesystemError,
    NoImageProduced,
    ProviderError,
    RestorationError,
    UploadValidationError,
)
from smartrestore.core.lifecycle import RestorationResult, UploadLifecycleManager
from smartrestore.core.prompt_builder import RestorationMode, build_prompt

__all__ = [
    "ConfigurationError",
    "FilesystemError",
    "NoImageProduced",
    "ProviderError",
    "RestorationError",
    "RestorationMode",
    "RestorationResult",
    "SmartRestoreConfig",
    "UploadLifecycleManager",
    "UploadValidationError",
    "build_prompt",
    "config",
]
