"""Inline entrypoint tag scoring and marker helpers."""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from ..logging import get_logger
from ..models import InferredDomain, InlineTag, SourceFileInfo
from .languages import line_comment_for

TAG_MARKER = "@atlas-entrypoint:"

# Single pattern shared by detection, stripping, and status counting.
TAG_PATTERN = re.compile(r"^[ \t]*(?://|#)[ \t]*@atlas-entrypoint:[^\r\n]*", re.MULTILINE)

ENTRYPOINT_FILENAMES = frozenset({"index.ts", "index.tsx", "index.js"})
ROOT_COMPONENT_FILENAMES = frozenset({"App.tsx", "App.ts"})
IPC_CONTRACT_NAMES = ("ipc-contract", "ipc-types")

DEFAULT_SCORES: Mapping[str, int] = {
    "entrypoint": 5,
    "high export count": 3,
    "domain manager": 4,
    "root component": 5,
    "IPC contract": 5,
    "substantial file": 1,
}

HIGH_EXPORT_THRESHOLD = 5
SUBSTANTIAL_LINE_THRESHOLD = 200

logger = get_logger("tags")


def find_tag(content: str) -> Optional[str]:
    """Return the first inline tag line in content, if any."""
    match = TAG_PATTERN.search(content)
    return match.group(0) if match else None


def read_current_tag(path: Path | str) -> Optional[str]:
    try:
        content = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.debug("Could not read %s for tag detection: %s", path, exc)
        return None
    return find_tag(content)


@dataclass
class ScoredFile:
    """Tag-worthiness score of one file with the rules that fired."""

    file: SourceFileInfo
    score: int
    reasons: List[str]


class TagSelector:
    """Ranks files by entrypoint heuristics and proposes inline tags."""

    def __init__(self, scores: Mapping[str, int] | None = None) -> None:
        self.scores: Dict[str, int] = dict(DEFAULT_SCORES)
        if scores:
            self.scores.update(scores)

    def score(self, file: SourceFileInfo) -> ScoredFile:
        basename = posixpath.basename(file.relative_path)
        reasons: List[str] = []
        if basename in ENTRYPOINT_FILENAMES:
            reasons.append("entrypoint")
        if len(file.exports) > HIGH_EXPORT_THRESHOLD:
            reasons.append("high export count")
        if "-manager" in basename:
            reasons.append("domain manager")
        if basename in ROOT_COMPONENT_FILENAMES:
            reasons.append("root component")
        if any(name in basename for name in IPC_CONTRACT_NAMES):
            reasons.append("IPC contract")
        if file.line_count > SUBSTANTIAL_LINE_THRESHOLD:
            reasons.append("substantial file")
        total = sum(self.scores.get(reason, 0) for reason in reasons)
        return ScoredFile(file=file, score=total, reasons=reasons)

    def rank(self, files: Sequence[SourceFileInfo], limit: int) -> List[ScoredFile]:
        """Return at most ``limit`` taggable candidates, best first."""
        candidates = [
            scored
            for scored in (self.score(file) for file in files if line_comment_for(file.language))
            if scored.reasons
        ]
        candidates.sort(key=lambda scored: scored.score, reverse=True)
        return candidates[: max(limit, 0)]

    def select(
        self,
        files: Sequence[SourceFileInfo],
        domains: Sequence[InferredDomain],
        max_tags: int,
    ) -> List[InlineTag]:
        domain_by_path: Dict[str, str] = {}
        for domain in domains:
            for path in domain.paths():
                domain_by_path.setdefault(path, domain.name)

        tags: List[InlineTag] = []
        for scored in self.rank(files, max_tags):
            file = scored.file
            current_tag = read_current_tag(file.absolute_path)
            reason = ", ".join(scored.reasons)
            tags.append(
                InlineTag(
                    file_path=file.absolute_path,
                    relative_path=file.relative_path,
                    current_tag=current_tag,
                    suggested_tag=self.suggest_tag(
                        file, domain_by_path.get(file.relative_path), reason
                    ),
                    reason=reason,
                    selected=current_tag is None,
                )
            )
        return tags

    @staticmethod
    def suggest_tag(file: SourceFileInfo, domain_name: Optional[str], reason: str) -> str:
        comment = line_comment_for(file.language) or "//"
        label = domain_name or file.layer
        layer_label = "" if file.layer == "other" else f" ({file.layer})"
        return f"{comment} {TAG_MARKER} {label}{layer_label} - {reason}"


__all__ = [
    "DEFAULT_SCORES",
    "TAG_MARKER",
    "TAG_PATTERN",
    "TagSelector",
    "find_tag",
    "read_current_tag",
]
