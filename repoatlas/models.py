"""Core data models shared across repoatlas components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

LAYERS: Tuple[str, ...] = ("main", "renderer", "shared", "preload", "other")

SCAN_PHASES: Tuple[str, ...] = ("enumerating", "analyzing", "inferring", "generating")


@dataclass(frozen=True)
class SourceFileInfo:
    """Metadata and import facts for one enumerated source file."""

    relative_path: str
    absolute_path: str
    language: str
    line_count: int
    size_bytes: int
    imports: FrozenSet[str] = frozenset()
    exports: FrozenSet[str] = frozenset()
    layer: str = "other"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "relativePath": self.relative_path,
            "absolutePath": self.absolute_path,
            "language": self.language,
            "lineCount": self.line_count,
            "sizeBytes": self.size_bytes,
            "imports": sorted(self.imports),
            "exports": sorted(self.exports),
            "layer": self.layer,
        }


@dataclass(frozen=True)
class CrossDependency:
    """Directed edge between two files, weighted by import statements."""

    source: str
    target: str
    import_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"from": self.source, "to": self.target, "importCount": self.import_count}


@dataclass
class InferredDomain:
    """Named cluster of files believed to implement one functional area."""

    name: str
    files: Tuple[SourceFileInfo, ...]
    ipc_prefix: Optional[str] = None
    main_files: List[str] = field(default_factory=list)
    renderer_files: List[str] = field(default_factory=list)
    shared_files: List[str] = field(default_factory=list)
    entrypoints: List[str] = field(default_factory=list)

    def paths(self) -> List[str]:
        return [file.relative_path for file in self.files]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "files": [file.to_dict() for file in self.files],
            "ipcPrefix": self.ipc_prefix,
            "mainFiles": list(self.main_files),
            "rendererFiles": list(self.renderer_files),
            "sharedFiles": list(self.shared_files),
            "entrypoints": list(self.entrypoints),
        }


@dataclass
class InlineTag:
    """Proposed single-line entrypoint annotation for a source file."""

    file_path: str
    relative_path: str
    current_tag: Optional[str]
    suggested_tag: str
    reason: str
    selected: Optional[bool] = None

    def __post_init__(self) -> None:
        # An existing annotation is never selected for overwrite by default.
        if self.selected is None:
            self.selected = self.current_tag is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filePath": self.file_path,
            "relativePath": self.relative_path,
            "currentTag": self.current_tag,
            "suggestedTag": self.suggested_tag,
            "reason": self.reason,
            "selected": bool(self.selected),
        }


@dataclass(frozen=True)
class ScanProgress:
    """Progress event emitted while a scan moves through its phases."""

    phase: str
    current: int
    total: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase,
            "current": self.current,
            "total": self.total,
            "message": self.message,
        }


@dataclass
class AtlasScanResult:
    """Aggregate output of one scan."""

    files: List[SourceFileInfo]
    total_files: int
    total_lines: int
    languages: Dict[str, int]
    dependencies: List[CrossDependency]
    domains: List[InferredDomain]
    inline_tags: List[InlineTag]
    scan_duration_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": [file.to_dict() for file in self.files],
            "totalFiles": self.total_files,
            "totalLines": self.total_lines,
            "languages": dict(self.languages),
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "domains": [domain.to_dict() for domain in self.domains],
            "inlineTags": [tag.to_dict() for tag in self.inline_tags],
            "scanDurationMs": self.scan_duration_ms,
        }


@dataclass
class GeneratedContent:
    """Rendered documents plus what is currently on disk, for review."""

    claude_md: str
    repo_index: str
    inline_tags: List[InlineTag]
    existing_claude_md: Optional[str] = None
    existing_repo_index: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "claudeMd": self.claude_md,
            "repoIndex": self.repo_index,
            "inlineTags": [tag.to_dict() for tag in self.inline_tags],
            "existingClaudeMd": self.existing_claude_md,
            "existingRepoIndex": self.existing_repo_index,
        }


@dataclass
class GenerateResult:
    """Result of AtlasEngine.generate."""

    scan_result: AtlasScanResult
    generated_content: GeneratedContent

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scanResult": self.scan_result.to_dict(),
            "generatedContent": self.generated_content.to_dict(),
        }


@dataclass
class WriteResult:
    """Outcome of persisting approved atlas artifacts."""

    claude_md_written: bool = False
    repo_index_written: bool = False
    inline_tags_written: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "claudeMdWritten": self.claude_md_written,
            "repoIndexWritten": self.repo_index_written,
            "inlineTagsWritten": self.inline_tags_written,
        }


@dataclass
class AtlasStatus:
    """Existence and metadata check for previously generated artifacts."""

    has_atlas: bool
    claude_md_path: Optional[str]
    repo_index_path: Optional[str]
    last_generated: Optional[datetime]
    inline_tag_count: int

    def to_dict(self) -> Dict[str, Any]:
        last_generated = None
        if self.last_generated is not None:
            last_generated = self.last_generated.isoformat().replace("+00:00", "Z")
        return {
            "hasAtlas": self.has_atlas,
            "claudeMdPath": self.claude_md_path,
            "repoIndexPath": self.repo_index_path,
            "lastGenerated": last_generated,
            "inlineTagCount": self.inline_tag_count,
        }
