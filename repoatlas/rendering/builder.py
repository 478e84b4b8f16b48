"""Renders the overview and repo index documents from a scan result."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

from ..analyzers.languages import UNKNOWN_LANGUAGE, title_case
from ..analyzers.tags import ENTRYPOINT_FILENAMES, IPC_CONTRACT_NAMES
from ..models import AtlasScanResult, InferredDomain, SourceFileInfo
from .constants import (
    EMPTY_CELL,
    OVERVIEW_TEMPLATE,
    REPO_INDEX_RELATIVE_PATH,
    REPO_INDEX_TEMPLATE,
    TECH_STACK_LIMIT,
)

_ENTRYPOINT_LAYERS = frozenset({"main", "preload"})
_IPC_HANDLER_STEM = "ipc-handlers"
_TEST_FILE_MARKERS = frozenset({"test", "spec"})


@dataclass(frozen=True)
class DomainRow:
    """One row of the overview domain map."""

    name: str
    main: str
    renderer: str
    shared: str
    prefix: str


class DocumentGenerator:
    """Renders atlas Markdown documents.

    Rendering is a pure function of the scan result and project name: the
    output never depends on the clock, the filesystem layout beyond the
    packaged templates, or dictionary iteration order.
    """

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def render_overview(self, project_name: str, scan: AtlasScanResult) -> str:
        """Render the project-root overview (CLAUDE.md)."""
        return self._render(
            OVERVIEW_TEMPLATE,
            project_name=project_name,
            total_files=scan.total_files,
            total_lines=f"{scan.total_lines:,}",
            domain_count=len(scan.domains),
            tech_stack=self.tech_stack(scan.languages),
            domain_rows=[self._domain_row(domain) for domain in scan.domains],
            ipc_contract=self._first_path(scan.files, IPC_CONTRACT_NAMES),
            ipc_handlers=self._first_path(scan.files, (_IPC_HANDLER_STEM,)),
            layered_layout=self._uses_layered_layout(scan.files),
            repo_index_path=REPO_INDEX_RELATIVE_PATH,
        )

    def render_repo_index(self, project_name: str, scan: AtlasScanResult) -> str:
        """Render the detailed per-domain index (docs/repo-index.md)."""
        domains = [
            {
                "name": domain.name,
                "ipc_prefix": domain.ipc_prefix,
                "files": sorted(domain.files, key=lambda file: file.relative_path),
            }
            for domain in scan.domains
        ]
        return self._render(
            REPO_INDEX_TEMPLATE,
            project_name=project_name,
            total_files=scan.total_files,
            total_lines=f"{scan.total_lines:,}",
            domain_count=len(scan.domains),
            entrypoints=self.entrypoints(scan.files),
            domains=domains,
        )

    @staticmethod
    def tech_stack(languages: Dict[str, int]) -> str:
        ranked = sorted(
            ((language, count) for language, count in languages.items() if language != UNKNOWN_LANGUAGE),
            key=lambda item: (-item[1], item[0]),
        )
        return " | ".join(
            f"{title_case(language)} ({count})" for language, count in ranked[:TECH_STACK_LIMIT]
        )

    @staticmethod
    def entrypoints(files: Sequence[SourceFileInfo]) -> List[SourceFileInfo]:
        return [
            file
            for file in files
            if file.layer in _ENTRYPOINT_LAYERS
            and posixpath.basename(file.relative_path) in ENTRYPOINT_FILENAMES
        ]

    def _render(self, template_name: str, **context: object) -> str:
        try:
            template = self._env.get_template(template_name)
        except TemplateNotFound as exc:
            raise FileNotFoundError(
                f"Template not found: {template_name} in {self.templates_dir}"
            ) from exc
        return template.render(**context)

    @staticmethod
    def _domain_row(domain: InferredDomain) -> DomainRow:
        def _cell(paths: Sequence[str]) -> str:
            return ", ".join(posixpath.basename(path) for path in paths) or EMPTY_CELL

        return DomainRow(
            name=domain.name,
            main=_cell(domain.main_files),
            renderer=_cell(domain.renderer_files),
            shared=_cell(domain.shared_files),
            prefix=domain.ipc_prefix or EMPTY_CELL,
        )

    @staticmethod
    def _first_path(files: Sequence[SourceFileInfo], names: Sequence[str]) -> Optional[str]:
        matches = sorted(
            file.relative_path
            for file in files
            if any(name in posixpath.basename(file.relative_path) for name in names)
            and not _TEST_FILE_MARKERS.intersection(posixpath.basename(file.relative_path).split("."))
        )
        return matches[0] if matches else None

    @staticmethod
    def _uses_layered_layout(files: Sequence[SourceFileInfo]) -> bool:
        layers = {file.layer for file in files}
        return {"main", "renderer"} <= layers


__all__ = ["DocumentGenerator", "DomainRow"]
