"""Regex-driven import and export extraction."""

from __future__ import annotations

import re
from typing import Dict, FrozenSet, Pattern, Tuple

_JS_IMPORT_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"""import\s+(?:type\s+)?(?:\{[^}]*\}|\*\s+as\s+\w+|\w+)\s+from\s+['"]([^'"]+)['"]"""),
    re.compile(r"""import\s+['"]([^'"]+)['"]"""),
    re.compile(r"""require\s*\(\s*['"]([^'"]+)['"]\s*\)"""),
)

IMPORT_PATTERNS: Dict[str, Tuple[Pattern[str], ...]] = {
    "typescript": _JS_IMPORT_PATTERNS,
    "javascript": _JS_IMPORT_PATTERNS,
    "python": (
        re.compile(r"^import\s+([\w.]+)", re.MULTILINE),
        re.compile(r"^from\s+([\w.]+)\s+import", re.MULTILINE),
    ),
    "go": (
        re.compile(r'import\s+"([^"]+)"'),
        re.compile(r'import\s+\w+\s+"([^"]+)"'),
    ),
    "rust": (
        re.compile(r"use\s+([\w:]+)"),
        re.compile(r"extern\s+crate\s+(\w+)"),
    ),
    "java": (re.compile(r"import\s+(?:static\s+)?([a-zA-Z][\w.]*)"),),
    "kotlin": (re.compile(r"import\s+([a-zA-Z][\w.]*)"),),
    "csharp": (re.compile(r"using\s+(?:static\s+)?([a-zA-Z][\w.]*)"),),
    "css": (re.compile(r"""@import\s+(?:url\()?\s*['"]([^'"]+)['"]"""),),
}

_EXPORT_PATTERN = re.compile(
    r"export\s+(?:default\s+)?(?:function|class|const|let|var|interface|type|enum)\s+(\w+)"
)

EXPORT_LANGUAGES = frozenset({"typescript", "javascript"})


class ImportExtractor:
    """Extracts raw import targets and exported symbol names from file content."""

    def __init__(self, patterns: Dict[str, Tuple[Pattern[str], ...]] | None = None) -> None:
        self._patterns = IMPORT_PATTERNS if patterns is None else patterns

    def supports(self, language: str) -> bool:
        return language in self._patterns

    def extract_imports(self, content: str, language: str) -> FrozenSet[str]:
        """Return the union of targets matched by every pattern of the language."""
        imports = set()
        for pattern in self._patterns.get(language, ()):
            for match in pattern.finditer(content):
                target = match.group(1)
                if target:
                    imports.add(target)
        return frozenset(imports)

    def extract_exports(self, content: str, language: str) -> FrozenSet[str]:
        """Return top-level exported names; empty for languages without static exports."""
        if language not in EXPORT_LANGUAGES:
            return frozenset()
        return frozenset(match.group(1) for match in _EXPORT_PATTERN.finditer(content))


__all__ = ["EXPORT_LANGUAGES", "IMPORT_PATTERNS", "ImportExtractor"]
