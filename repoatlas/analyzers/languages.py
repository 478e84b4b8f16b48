"""Language, layer, and comment-syntax tables shared by the analyzers."""

from __future__ import annotations

import posixpath
from typing import Dict, Optional, Tuple

UNKNOWN_LANGUAGE = "unknown"

LANGUAGE_BY_EXTENSION: Dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".py": "python",
    ".pyw": "python",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".cs": "csharp",
    ".css": "css",
    ".scss": "css",
    ".less": "css",
    ".html": "html",
    ".htm": "html",
    ".json": "json",
    ".jsonc": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".md": "markdown",
    ".mdx": "markdown",
}

# Languages that can carry a single-line inline tag at the top of the file.
LINE_COMMENT_BY_LANGUAGE: Dict[str, str] = {
    "typescript": "//",
    "javascript": "//",
    "go": "//",
    "rust": "//",
    "java": "//",
    "kotlin": "//",
    "csharp": "//",
    "python": "#",
    "yaml": "#",
}

# Matched as `src/<layer>/` at any depth or as a top-level `<layer>/` directory.
_LAYER_NAMES: Tuple[str, ...] = ("main", "renderer", "shared", "preload")
_LAYER_PARENT = "src"


def detect_language(relative_path: str) -> Optional[str]:
    """Return the language key for a path, or None when the extension is unsupported."""
    _, extension = posixpath.splitext(relative_path)
    return LANGUAGE_BY_EXTENSION.get(extension.lower())


def detect_layer(relative_path: str) -> str:
    """Derive the architectural layer from path segments."""
    parts = relative_path.replace("\\", "/").split("/")[:-1]
    for layer in _LAYER_NAMES:
        if parts and parts[0] == layer:
            return layer
        for index in range(len(parts) - 1):
            if parts[index] == _LAYER_PARENT and parts[index + 1] == layer:
                return layer
    return "other"


def line_comment_for(language: str) -> Optional[str]:
    return LINE_COMMENT_BY_LANGUAGE.get(language)


def title_case(name: str) -> str:
    """Turn kebab-case or snake_case into Title Case words."""
    if not name:
        return name
    words = name.replace("_", "-").split("-")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def file_stem(relative_path: str) -> str:
    basename = posixpath.basename(relative_path)
    stem, _ = posixpath.splitext(basename)
    return stem


__all__ = [
    "LANGUAGE_BY_EXTENSION",
    "LINE_COMMENT_BY_LANGUAGE",
    "UNKNOWN_LANGUAGE",
    "detect_language",
    "detect_layer",
    "file_stem",
    "line_comment_for",
    "title_case",
]
