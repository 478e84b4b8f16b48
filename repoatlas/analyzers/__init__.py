"""Static analysis stages: import extraction, dependency graph, domains, tags."""

from __future__ import annotations

from .dependencies import DependencyGraphBuilder
from .domains import DomainInferenceEngine
from .imports import ImportExtractor
from .languages import detect_language, detect_layer
from .tags import TagSelector

__all__ = [
    "DependencyGraphBuilder",
    "DomainInferenceEngine",
    "ImportExtractor",
    "TagSelector",
    "detect_language",
    "detect_layer",
]
