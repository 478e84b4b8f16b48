"""Tests for the dependency graph builder."""

from __future__ import annotations

from repoatlas.analyzers.dependencies import DependencyGraphBuilder
from repoatlas.models import CrossDependency
from tests._fixtures.repo_builder import RepoBuilder, make_file


def test_relative_import_resolves_to_sibling() -> None:
    files = [make_file("a.ts", imports=["./b"]), make_file("b.ts")]

    assert DependencyGraphBuilder().build(files) == [
        CrossDependency(source="a.ts", target="b.ts", import_count=1)
    ]


def test_external_packages_are_skipped() -> None:
    files = [
        make_file("src/app.ts", imports=["react", "lodash/fp", "@scope/pkg"]),
        make_file("react.ts"),
    ]

    assert DependencyGraphBuilder().build(files) == []


def test_index_and_extension_candidates() -> None:
    files = [
        make_file("src/renderer/App.tsx", imports=["./components", "../shared/types.js"]),
        make_file("src/renderer/components/index.tsx"),
        make_file("src/shared/types.ts"),
    ]

    edges = {(dep.source, dep.target) for dep in DependencyGraphBuilder().build(files)}

    assert edges == {
        ("src/renderer/App.tsx", "src/renderer/components/index.tsx"),
        ("src/renderer/App.tsx", "src/shared/types.ts"),
    }


def test_parent_directory_and_src_prefixed_imports() -> None:
    files = [
        make_file("src/main/ipc/handlers.ts", imports=["../../shared/ipc-contract", "src/main/logger"]),
        make_file("src/shared/ipc-contract.ts"),
        make_file("src/main/logger.ts"),
    ]

    targets = sorted(dep.target for dep in DependencyGraphBuilder().build(files))

    assert targets == ["src/main/logger.ts", "src/shared/ipc-contract.ts"]


def test_counts_accumulate_per_ordered_pair() -> None:
    files = [
        make_file("a.ts", imports=["./b", "./b.ts", "./b.js"]),
        make_file("b.ts", imports=["./a"]),
    ]

    edges = DependencyGraphBuilder().build(files)

    assert CrossDependency(source="a.ts", target="b.ts", import_count=3) in edges
    assert CrossDependency(source="b.ts", target="a.ts", import_count=1) in edges
    pairs = [(dep.source, dep.target) for dep in edges]
    assert len(pairs) == len(set(pairs))


def test_self_edges_are_dropped() -> None:
    files = [make_file("lib/util.ts", imports=["./util", "."])]

    assert DependencyGraphBuilder().build(files) == []


def test_unresolved_targets_are_dropped() -> None:
    files = [make_file("a.ts", imports=["./missing", "../outside/thing"])]

    assert DependencyGraphBuilder().build(files) == []


def test_bare_stem_lookup_prefers_first_writer() -> None:
    first = make_file("alpha/config.ts")
    second = make_file("beta/config.ts")
    importer = make_file("src/app.ts", imports=["/config"])

    edges = DependencyGraphBuilder().build([first, second, importer])

    assert edges == [CrossDependency(source="src/app.ts", target="alpha/config.ts", import_count=1)]


def test_graph_from_scanned_repository(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "a.ts": "import { b } from './b';\n",
            "b.ts": "export const b = 1;\n",
        }
    )

    edges = DependencyGraphBuilder().build(repo_builder.scan())

    assert edges == [CrossDependency(source="a.ts", target="b.ts", import_count=1)]
