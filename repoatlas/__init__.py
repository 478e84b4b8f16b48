"""Repository atlas engine: navigation documents and entrypoint tags for codebases."""

from .config import AtlasSettings, ConfigError, load_settings
from .engine import AtlasEngine
from .models import (
    AtlasScanResult,
    AtlasStatus,
    CrossDependency,
    GenerateResult,
    GeneratedContent,
    InferredDomain,
    InlineTag,
    ScanProgress,
    SourceFileInfo,
    WriteResult,
)

__version__ = "0.1.0"

__all__ = [
    "AtlasEngine",
    "AtlasScanResult",
    "AtlasSettings",
    "AtlasStatus",
    "ConfigError",
    "CrossDependency",
    "GenerateResult",
    "GeneratedContent",
    "InferredDomain",
    "InlineTag",
    "ScanProgress",
    "SourceFileInfo",
    "WriteResult",
    "load_settings",
]
