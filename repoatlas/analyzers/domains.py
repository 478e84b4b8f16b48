"""Three-tier domain inference over enumerated source files.

Tier 1 partitions files by directory and is the only tier that decides
membership. Tier 2 attaches IPC channel prefixes to domains whose files talk to
the IPC contract, and tier 3 renames domains after dominant naming groups
(``<name>-manager`` modules and ``use<Name>`` hooks).
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import replace
from typing import Dict, List, Mapping, Sequence, Tuple

from ..config import DEFAULT_NAMING_OVERLAP_THRESHOLD, SENSITIVITY_LEVELS
from ..models import SourceFileInfo, InferredDomain
from .languages import file_stem, title_case

ROOT_DOMAIN = "root"

# Layer directories under src/ whose children are split into finer domains.
_SPLIT_LAYERS = frozenset({"main", "renderer"})

IPC_CONTRACT_MARKERS: Tuple[str, ...] = ("ipc-contract", "ipc-types")

IPC_PREFIX_BY_STEM: Mapping[str, str] = {
    "session-manager": "session:*",
    "cli-manager": "session:*",
    "settings-persistence": "settings:*",
    "agent-team-manager": "teams:*",
    "history-manager": "history:*",
    "checkpoint-manager": "checkpoint:*",
    "prompt-templates-manager": "template:*",
    "quota-service": "quota:*",
    "file-dragdrop-handler": "dragdrop:*",
    "atlas-manager": "atlas:*",
}

_MANAGER_PATTERN = re.compile(r"^(.+)-manager\.(?:ts|js)$")
_HOOK_PATTERN = re.compile(r"^use(.+)\.(?:ts|tsx)$")


def directory_domain(relative_path: str) -> str:
    """Return the raw tier-1 domain key for a path."""
    parts = relative_path.split("/")
    if len(parts) <= 1:
        return ROOT_DOMAIN
    if parts[0] == "src" and len(parts) >= 3:
        if len(parts) >= 4 and parts[1] in _SPLIT_LAYERS:
            return parts[2]
        return parts[1]
    return parts[0]


def naming_group(relative_path: str) -> str | None:
    """Return the naming-convention group of a file, if it follows one."""
    basename = posixpath.basename(relative_path)
    group = None
    manager = _MANAGER_PATTERN.match(basename)
    if manager:
        group = manager.group(1)
    hook = _HOOK_PATTERN.match(basename)
    if hook:
        name = hook.group(1)
        group = name[:1].lower() + name[1:]
    return group


def guess_ipc_prefix(stem: str) -> str | None:
    return IPC_PREFIX_BY_STEM.get(stem)


class DomainInferenceEngine:
    """Clusters files into named, disjoint domains."""

    def __init__(self, naming_overlap_threshold: float = DEFAULT_NAMING_OVERLAP_THRESHOLD) -> None:
        self.naming_overlap_threshold = naming_overlap_threshold

    def infer(self, files: Sequence[SourceFileInfo], sensitivity: str = "medium") -> List[InferredDomain]:
        if sensitivity not in SENSITIVITY_LEVELS:
            raise ValueError(f"Unknown domain inference sensitivity '{sensitivity}'")

        domains = self.infer_by_directory(files)
        if sensitivity == "low":
            return domains

        domains = self.refine_with_imports(domains)
        if sensitivity == "medium":
            return domains

        return self.refine_with_naming(domains, files)

    def infer_by_directory(self, files: Sequence[SourceFileInfo]) -> List[InferredDomain]:
        groups: Dict[str, List[SourceFileInfo]] = {}
        for file in files:
            groups.setdefault(directory_domain(file.relative_path), []).append(file)

        domains = [self._build_domain(name, members) for name, members in groups.items()]
        # sorted() is stable, so equal sizes keep first-encounter order.
        return sorted(domains, key=lambda domain: len(domain.files), reverse=True)

    def refine_with_imports(self, domains: Sequence[InferredDomain]) -> List[InferredDomain]:
        refined: List[InferredDomain] = []
        for domain in domains:
            prefixes: List[str] = []
            for file in domain.files:
                if not any(
                    marker in raw_import
                    for raw_import in file.imports
                    for marker in IPC_CONTRACT_MARKERS
                ):
                    continue
                prefix = guess_ipc_prefix(file_stem(file.relative_path))
                if prefix and prefix not in prefixes:
                    prefixes.append(prefix)
            if prefixes:
                refined.append(replace(domain, ipc_prefix=", ".join(prefixes)))
            else:
                refined.append(domain)
        return refined

    def refine_with_naming(
        self, domains: Sequence[InferredDomain], files: Sequence[SourceFileInfo]
    ) -> List[InferredDomain]:
        groups: Dict[str, set[str]] = {}
        for file in files:
            group = naming_group(file.relative_path)
            if group:
                groups.setdefault(group, set()).add(file.relative_path)

        renamed: List[InferredDomain] = []
        for domain in domains:
            members = set(domain.paths())
            new_name = None
            for group, group_paths in groups.items():
                overlap = len(members & group_paths)
                if overlap and overlap >= len(members) * self.naming_overlap_threshold:
                    new_name = title_case(group)
                    break
            renamed.append(replace(domain, name=new_name) if new_name else domain)
        return renamed

    @staticmethod
    def _build_domain(name: str, files: Sequence[SourceFileInfo]) -> InferredDomain:
        entrypoints = [
            file.relative_path
            for file in files
            if len(file.exports) > 3 or posixpath.basename(file.relative_path).startswith("index")
        ]
        return InferredDomain(
            name=title_case(name),
            files=tuple(files),
            main_files=[file.relative_path for file in files if file.layer == "main"],
            renderer_files=[file.relative_path for file in files if file.layer == "renderer"],
            shared_files=[file.relative_path for file in files if file.layer == "shared"],
            entrypoints=entrypoints,
        )


__all__ = [
    "DomainInferenceEngine",
    "IPC_PREFIX_BY_STEM",
    "ROOT_DOMAIN",
    "directory_domain",
    "guess_ipc_prefix",
    "naming_group",
]
