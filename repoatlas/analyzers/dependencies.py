"""Resolution of relative imports into a weighted file dependency graph."""

from __future__ import annotations

import posixpath
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..models import CrossDependency, SourceFileInfo

# Import prefixes treated as project-internal; everything else is an external package.
INTERNAL_PREFIXES: Tuple[str, ...] = (".", "/", "src/")


def _strip_extension(path: str) -> str:
    root, _ = posixpath.splitext(path)
    return root


class DependencyGraphBuilder:
    """Builds deduplicated CrossDependency edges between enumerated files."""

    def __init__(self, internal_prefixes: Sequence[str] = INTERNAL_PREFIXES) -> None:
        self.internal_prefixes = tuple(internal_prefixes)

    def build(self, files: Sequence[SourceFileInfo]) -> List[CrossDependency]:
        lookup = self._build_lookup(files)
        counts: Dict[Tuple[str, str], int] = {}

        for file in files:
            for raw_import in sorted(file.imports):
                if not self.is_internal(raw_import):
                    continue
                target = self._resolve(file.relative_path, raw_import, lookup)
                if target is None or target.relative_path == file.relative_path:
                    continue
                key = (file.relative_path, target.relative_path)
                counts[key] = counts.get(key, 0) + 1

        return [
            CrossDependency(source=source, target=target, import_count=count)
            for (source, target), count in counts.items()
        ]

    def is_internal(self, raw_import: str) -> bool:
        return raw_import.startswith(self.internal_prefixes)

    @staticmethod
    def _build_lookup(files: Iterable[SourceFileInfo]) -> Dict[str, SourceFileInfo]:
        lookup: Dict[str, SourceFileInfo] = {}
        for file in files:
            relative = file.relative_path
            lookup[relative] = file
            lookup[_strip_extension(relative)] = file
            stem = _strip_extension(posixpath.basename(relative))
            lookup.setdefault(stem, file)
        return lookup

    @staticmethod
    def _resolve(
        importer: str, raw_import: str, lookup: Dict[str, SourceFileInfo]
    ) -> Optional[SourceFileInfo]:
        if raw_import.startswith("."):
            directory = posixpath.dirname(importer)
            resolved = posixpath.normpath(posixpath.join(directory, raw_import))
        else:
            resolved = raw_import.lstrip("/")

        for candidate in (resolved, f"{resolved}/index", _strip_extension(resolved)):
            target = lookup.get(candidate)
            if target is not None:
                return target
        return None


__all__ = ["DependencyGraphBuilder", "INTERNAL_PREFIXES"]
