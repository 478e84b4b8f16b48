"""Tests for inline tag scoring and selection."""

from __future__ import annotations

from pathlib import Path

from repoatlas.analyzers.domains import DomainInferenceEngine
from repoatlas.analyzers.tags import TagSelector, find_tag
from tests._fixtures.repo_builder import RepoBuilder, make_file


def test_scores_are_additive() -> None:
    selector = TagSelector()

    index_large = selector.score(make_file("src/main/index.ts", line_count=250))
    index_only = selector.score(make_file("src/preload/index.ts", line_count=20))

    assert index_large.score == 6
    assert index_large.reasons == ["entrypoint", "substantial file"]
    assert index_only.score == 5

    ranked = selector.rank(
        [make_file("src/preload/index.ts"), make_file("src/main/index.ts", line_count=250)], 5
    )
    assert [scored.file.relative_path for scored in ranked] == [
        "src/main/index.ts",
        "src/preload/index.ts",
    ]


def test_every_rule_fires() -> None:
    scored = TagSelector().score(
        make_file("src/main/ipc-types-manager.ts", exports=list("abcdef"), line_count=201)
    )

    assert scored.reasons == ["high export count", "domain manager", "IPC contract", "substantial file"]
    assert scored.score == 3 + 4 + 5 + 1
    assert TagSelector().score(make_file("src/renderer/App.tsx")).reasons == ["root component"]


def test_zero_score_files_are_excluded_even_with_capacity() -> None:
    files = [make_file("src/util.ts"), make_file("src/main/session-manager.ts")]

    ranked = TagSelector().rank(files, 10)

    assert [scored.file.relative_path for scored in ranked] == ["src/main/session-manager.ts"]


def test_rank_respects_limit_and_non_comment_languages() -> None:
    files = [
        make_file(f"pkg{index}/index.ts") for index in range(5)
    ] + [make_file("docs/guide.md", language="markdown", line_count=900)]

    ranked = TagSelector().rank(files, 3)

    assert len(ranked) == 3
    assert all(scored.file.language == "typescript" for scored in ranked)
    assert TagSelector().rank(files, 0) == []


def test_custom_scores_override_defaults() -> None:
    selector = TagSelector(scores={"substantial file": 10})
    ranked = selector.rank(
        [make_file("src/index.ts"), make_file("src/big.ts", line_count=500)], 2
    )

    assert ranked[0].file.relative_path == "src/big.ts"


def test_select_reads_existing_tags_and_deselects(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/main/index.ts": "// @atlas-entrypoint: Main (main) - entrypoint\nexport {};\n",
            "src/main/session-manager.ts": "export class SessionManager {}\n",
            "tools/cli-manager.py": "import sys\n",
        }
    )
    files = repo_builder.scan()
    domains = DomainInferenceEngine().infer(files, "low")

    tags = TagSelector().select(files, domains, 10)
    by_path = {tag.relative_path: tag for tag in tags}

    existing = by_path["src/main/index.ts"]
    assert existing.current_tag == "// @atlas-entrypoint: Main (main) - entrypoint"
    assert existing.selected is False

    fresh = by_path["src/main/session-manager.ts"]
    assert fresh.current_tag is None
    assert fresh.selected is True
    assert fresh.suggested_tag == "// @atlas-entrypoint: Main (main) - domain manager"
    assert Path(fresh.file_path).is_absolute()

    python_tag = by_path["tools/cli-manager.py"]
    assert python_tag.suggested_tag == "# @atlas-entrypoint: Tools - domain manager"


def test_select_never_exceeds_max(repo_builder: RepoBuilder) -> None:
    repo_builder.write({f"mod{index}/index.ts": "export {};\n" for index in range(6)})
    files = repo_builder.scan()

    tags = TagSelector().select(files, DomainInferenceEngine().infer(files, "low"), 4)

    assert len(tags) == 4


def test_find_tag_matches_single_marker_pattern() -> None:
    assert find_tag("line\n  # @atlas-entrypoint: X - y\n") == "  # @atlas-entrypoint: X - y"
    assert find_tag('const s = "@atlas-entrypoint: not a tag";\n') is None


def test_find_tag_excludes_carriage_return() -> None:
    assert find_tag("// @atlas-entrypoint: X - y\r\nexport {};\r\n") == "// @atlas-entrypoint: X - y"
