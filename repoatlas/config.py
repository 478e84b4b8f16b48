"""Configuration loading for repoatlas (.atlas.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".atlas.yml"

SENSITIVITY_LEVELS = ("low", "medium", "high")

DEFAULT_MAX_INLINE_TAGS = 20
DEFAULT_SENSITIVITY = "medium"
DEFAULT_NAMING_OVERLAP_THRESHOLD = 0.3


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class AtlasSettings:
    """Tunable knobs for a single atlas scan."""

    max_inline_tags: int = DEFAULT_MAX_INLINE_TAGS
    domain_inference_sensitivity: str = DEFAULT_SENSITIVITY
    exclude_patterns: List[str] = field(default_factory=list)
    naming_overlap_threshold: float = DEFAULT_NAMING_OVERLAP_THRESHOLD

    def __post_init__(self) -> None:
        self.domain_inference_sensitivity = self.domain_inference_sensitivity.lower()
        if self.domain_inference_sensitivity not in SENSITIVITY_LEVELS:
            raise ValueError(
                f"Unknown domain inference sensitivity '{self.domain_inference_sensitivity}'"
                f" (expected one of: {', '.join(SENSITIVITY_LEVELS)})"
            )
        if self.max_inline_tags < 0:
            raise ValueError("max_inline_tags must not be negative")
        if not 0.0 < self.naming_overlap_threshold <= 1.0:
            raise ValueError("naming_overlap_threshold must be within (0, 1]")

    def with_overrides(
        self,
        *,
        max_inline_tags: Optional[int] = None,
        domain_inference_sensitivity: Optional[str] = None,
        exclude_patterns: Sequence[str] = (),
    ) -> "AtlasSettings":
        """Return a copy with CLI-style overrides applied on top."""
        changes: Dict[str, Any] = {}
        if max_inline_tags is not None:
            changes["max_inline_tags"] = max_inline_tags
        if domain_inference_sensitivity is not None:
            changes["domain_inference_sensitivity"] = domain_inference_sensitivity
        if exclude_patterns:
            merged = list(self.exclude_patterns)
            merged.extend(pattern for pattern in exclude_patterns if pattern not in merged)
            changes["exclude_patterns"] = merged
        return replace(self, **changes)


def load_settings(config_path: Path) -> AtlasSettings:
    """Load settings from a project directory or an explicit .atlas.yml path."""
    config_file = _resolve_config_path(config_path)
    if not config_file.exists():
        return AtlasSettings()

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    max_tags = _as_int(data.get("max_inline_tags"))
    sensitivity = _as_str(data.get("domain_inference_sensitivity"))
    threshold = _as_float(data.get("naming_overlap_threshold"))

    try:
        return AtlasSettings(
            max_inline_tags=DEFAULT_MAX_INLINE_TAGS if max_tags is None else max_tags,
            domain_inference_sensitivity=sensitivity or DEFAULT_SENSITIVITY,
            exclude_patterns=_as_str_list(data.get("exclude_patterns")),
            naming_overlap_threshold=(
                DEFAULT_NAMING_OVERLAP_THRESHOLD if threshold is None else threshold
            ),
        )
    except ValueError as exc:
        raise ConfigError(f"Invalid {CONFIG_FILENAME}: {exc}") from exc


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "AtlasSettings",
    "CONFIG_FILENAME",
    "ConfigError",
    "SENSITIVITY_LEVELS",
    "load_settings",
]
