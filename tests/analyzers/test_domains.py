"""Tests for three-tier domain inference."""

from __future__ import annotations

from typing import Dict, List

import pytest

from repoatlas.analyzers.domains import DomainInferenceEngine, directory_domain, naming_group
from repoatlas.models import InferredDomain, SourceFileInfo
from tests._fixtures.repo_builder import make_file


def _membership(domains: List[InferredDomain]) -> Dict[str, int]:
    mapping: Dict[str, int] = {}
    for index, domain in enumerate(domains):
        for path in domain.paths():
            mapping[path] = index
    return mapping


@pytest.fixture
def electron_files() -> List[SourceFileInfo]:
    return [
        make_file("src/main/session-manager.ts", imports=["../shared/ipc-contract"], exports=list("abcd")),
        make_file("src/main/index.ts"),
        make_file("src/main/ipc-handlers.ts", imports=["../shared/ipc-contract"]),
        make_file("src/main/atlas/atlas-manager.ts", imports=["../../shared/ipc-types"]),
        make_file("src/main/atlas/scanner.ts"),
        make_file("src/renderer/hooks/useSession.ts"),
        make_file("src/renderer/hooks/useAtlas.ts"),
        make_file("src/renderer/hooks/useTheme.ts"),
        make_file("src/renderer/components/AtlasPanel.tsx"),
        make_file("src/shared/ipc-contract.ts"),
        make_file("scripts/build.js"),
        make_file("package.json", language="json"),
    ]


def test_directory_domain_rules() -> None:
    assert directory_domain("a.ts") == "root"
    assert directory_domain("src/index.ts") == "src"
    assert directory_domain("src/main/index.ts") == "main"
    assert directory_domain("src/main/atlas/scanner.ts") == "atlas"
    assert directory_domain("src/renderer/hooks/useX.ts") == "hooks"
    assert directory_domain("src/shared/types/atlas.ts") == "shared"
    assert directory_domain("scripts/tools/build.js") == "scripts"


def test_flat_layout_collapses_into_root() -> None:
    files = [make_file("a.ts", imports=["./b"]), make_file("b.ts")]

    domains = DomainInferenceEngine().infer(files, "low")

    assert [domain.name for domain in domains] == ["Root"]
    assert domains[0].paths() == ["a.ts", "b.ts"]


def test_tier_one_sorts_by_size_and_derives_layers(electron_files: List[SourceFileInfo]) -> None:
    domains = DomainInferenceEngine().infer(electron_files, "low")

    names = [domain.name for domain in domains]
    sizes = [len(domain.files) for domain in domains]
    assert sizes == sorted(sizes, reverse=True)
    # Ties keep first-encounter order.
    assert names == ["Main", "Hooks", "Atlas", "Components", "Shared", "Scripts", "Root"]

    main = domains[0]
    assert main.main_files == [
        "src/main/session-manager.ts",
        "src/main/index.ts",
        "src/main/ipc-handlers.ts",
    ]
    assert main.entrypoints == ["src/main/session-manager.ts", "src/main/index.ts"]
    assert all(domain.ipc_prefix is None for domain in domains)


def test_medium_adds_ipc_prefixes_without_moving_files(electron_files: List[SourceFileInfo]) -> None:
    engine = DomainInferenceEngine()
    low = engine.infer(electron_files, "low")
    medium = engine.infer(electron_files, "medium")

    assert _membership(medium) == _membership(low)
    prefixes = {domain.name: domain.ipc_prefix for domain in medium}
    assert prefixes["Main"] == "session:*"
    assert prefixes["Atlas"] == "atlas:*"
    assert prefixes["Hooks"] is None


def test_high_renames_domains_by_naming_groups(electron_files: List[SourceFileInfo]) -> None:
    engine = DomainInferenceEngine()
    low = engine.infer(electron_files, "low")
    high = engine.infer(electron_files, "high")

    assert _membership(high) == _membership(low)
    names = [domain.name for domain in high]
    # "session" group covers 1/3 of Main and 1/3 of Hooks; first group wins for both.
    assert names[0] == "Session"
    assert names[1] == "Session"
    assert names[2] == "Atlas"
    assert "Components" in names
    assert high[0].ipc_prefix == "session:*"


def test_overlap_threshold_is_configurable(electron_files: List[SourceFileInfo]) -> None:
    strict = DomainInferenceEngine(naming_overlap_threshold=0.9).infer(electron_files, "high")

    assert [domain.name for domain in strict][:3] == ["Main", "Hooks", "Atlas"]


def test_membership_invariant_across_sensitivities(electron_files: List[SourceFileInfo]) -> None:
    engine = DomainInferenceEngine()
    results = [engine.infer(electron_files, level) for level in ("low", "medium", "high")]

    memberships = [_membership(domains) for domains in results]
    assert memberships[0] == memberships[1] == memberships[2]
    for domains in results:
        assert all(domain.files for domain in domains)
        sizes = [len(domain.files) for domain in domains]
        assert sizes == sorted(sizes, reverse=True)


def test_naming_group_patterns() -> None:
    assert naming_group("src/main/session-manager.ts") == "session"
    assert naming_group("src/renderer/hooks/useSessionManager.ts") == "sessionManager"
    assert naming_group("src/renderer/hooks/useAtlas.tsx") == "atlas"
    assert naming_group("src/main/session-manager.py") is None
    assert naming_group("src/renderer/model.ts") is None


def test_unknown_sensitivity_is_rejected() -> None:
    with pytest.raises(ValueError):
        DomainInferenceEngine().infer([], "extreme")


def test_no_files_means_no_domains() -> None:
    assert DomainInferenceEngine().infer([], "high") == []
