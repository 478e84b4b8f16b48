"""Tests for the Markdown document generator."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from repoatlas.analyzers.domains import DomainInferenceEngine
from repoatlas.models import AtlasScanResult, SourceFileInfo
from repoatlas.rendering.builder import DocumentGenerator
from tests._fixtures.repo_builder import make_file


def _scan(files: List[SourceFileInfo], sensitivity: str = "medium") -> AtlasScanResult:
    languages: dict[str, int] = {}
    for file in files:
        languages[file.language] = languages.get(file.language, 0) + 1
    return AtlasScanResult(
        files=files,
        total_files=len(files),
        total_lines=sum(file.line_count for file in files),
        languages=languages,
        dependencies=[],
        domains=DomainInferenceEngine().infer(files, sensitivity),
        inline_tags=[],
        scan_duration_ms=12,
    )


@pytest.fixture
def layered_scan() -> AtlasScanResult:
    return _scan(
        [
            make_file("src/main/index.ts", line_count=1200),
            make_file("src/main/session-manager.ts", imports=["../shared/ipc-contract"]),
            make_file("src/main/ipc-handlers.ts"),
            make_file("src/preload/index.ts", line_count=30),
            make_file("src/renderer/hooks/useSession.ts"),
            make_file("src/renderer/hooks/useTheme.ts"),
            make_file("src/shared/ipc-contract.ts"),
            make_file("scripts/release.py", language="python"),
            make_file("README.md", language="markdown"),
        ]
    )


def test_overview_contains_stats_stack_and_domain_map(layered_scan: AtlasScanResult) -> None:
    overview = DocumentGenerator().render_overview("demo", layered_scan)

    assert overview.startswith("# demo\n\n## Stats\n")
    assert "9 source files | ~1,300 LOC | " in overview
    assert "## Tech Stack\nTypescript (7) | Markdown (1) | Python (1)\n" in overview
    assert "| Domain | Main | Renderer | Shared | IPC Prefix |\n|--------|" in overview
    assert "| Main | index.ts, session-manager.ts, ipc-handlers.ts | - | - | session:* |\n" in overview
    assert "| Hooks | - | useSession.ts, useTheme.ts | - | - |\n" in overview
    assert "1. Add entry to `src/shared/ipc-contract.ts`\n2. Add handler in `src/main/ipc-handlers.ts`\n" in overview
    assert "## Adding a New Domain" in overview
    assert overview.endswith("- [Repo Index](docs/repo-index.md) - detailed domain-to-file mapping\n")


def test_overview_omits_layered_sections_for_flat_projects() -> None:
    scan = _scan([make_file("a.ts", imports=["./b"]), make_file("b.ts")])

    overview = DocumentGenerator().render_overview("flat", scan)

    assert "## Adding a New IPC Method" not in overview
    assert "## Adding a New Domain" not in overview
    assert "| Root | - | - | - | - |\n\n## Docs\n" in overview


def test_tech_stack_excludes_unknown_and_caps_at_five() -> None:
    stack = DocumentGenerator.tech_stack(
        {"unknown": 50, "go": 3, "rust": 3, "python": 9, "css": 1, "json": 2, "yaml": 2}
    )

    assert stack == "Python (9) | Go (3) | Rust (3) | Json (2) | Yaml (2)"


def test_repo_index_lists_entrypoints_and_sorted_files(layered_scan: AtlasScanResult) -> None:
    index = DocumentGenerator().render_repo_index("demo", layered_scan)

    assert index.startswith("# demo - Repo Index\n\n9 files | ~1,300 LOC | ")
    assert (
        "## Entrypoints\n\n"
        "- `src/main/index.ts` (main, 1200 lines)\n"
        "- `src/preload/index.ts` (preload, 30 lines)\n\n"
    ) in index
    assert (
        "## Main\n\nIPC: `session:*`\n\n| File | Layer | Lines |\n|------|-------|-------|\n"
        "| `src/main/index.ts` | main | 1200 |\n"
        "| `src/main/ipc-handlers.ts` | main | 10 |\n"
        "| `src/main/session-manager.ts` | main | 10 |\n\n"
    ) in index


def test_repo_index_without_entrypoints() -> None:
    scan = _scan([make_file("a.ts"), make_file("b.ts")])

    index = DocumentGenerator().render_repo_index("flat", scan)

    assert index == (
        "# flat - Repo Index\n\n"
        "2 files | ~20 LOC | 1 domains\n\n"
        "## Root\n\n"
        "| File | Layer | Lines |\n"
        "|------|-------|-------|\n"
        "| `a.ts` | other | 10 |\n"
        "| `b.ts` | other | 10 |\n\n"
    )


def test_rendering_is_deterministic(layered_scan: AtlasScanResult) -> None:
    generator = DocumentGenerator()

    assert generator.render_overview("demo", layered_scan) == generator.render_overview("demo", layered_scan)
    assert generator.render_repo_index("demo", layered_scan) == generator.render_repo_index("demo", layered_scan)


def test_missing_template_is_reported_as_not_found(tmp_path: Path, layered_scan: AtlasScanResult) -> None:
    generator = DocumentGenerator(templates_dir=tmp_path)

    with pytest.raises(FileNotFoundError):
        generator.render_overview("demo", layered_scan)
