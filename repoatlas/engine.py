"""Coordinates the atlas pipeline: scan, infer, render, and persist."""

from __future__ import annotations

import subprocess
import time
from collections import Counter
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from .analyzers.dependencies import DependencyGraphBuilder
from .analyzers.domains import DomainInferenceEngine
from .analyzers.imports import ImportExtractor
from .analyzers.languages import line_comment_for, detect_language
from .analyzers.tags import TAG_MARKER, TagSelector, find_tag
from .config import AtlasSettings, load_settings
from .logging import get_logger
from .models import (
    AtlasScanResult,
    AtlasStatus,
    GenerateResult,
    GeneratedContent,
    InlineTag,
    ScanProgress,
    SourceFileInfo,
    WriteResult,
)
from .rendering.builder import DocumentGenerator
from .rendering.constants import CLAUDE_MD_FILENAME, DOCS_DIRNAME, REPO_INDEX_FILENAME
from .repo_scanner import FileEnumerator, Runner, analyze_file, resolve_root
from .writer import AtomicWriter

ProgressCallback = Callable[[ScanProgress], None]

PROGRESS_INTERVAL = 20

# --untracked matches the ls-files listing: untracked files count, ignored ones do not.
_GIT_GREP_ARGS = ("git", "grep", "--untracked", "-l", "-z", "-F", TAG_MARKER)


class AtlasEngine:
    """Runs generate / write / status for a project directory."""

    def __init__(
        self,
        enumerator: FileEnumerator | None = None,
        extractor: ImportExtractor | None = None,
        graph_builder: DependencyGraphBuilder | None = None,
        tag_selector: TagSelector | None = None,
        generator: DocumentGenerator | None = None,
        writer: AtomicWriter | None = None,
        git_runner: Runner | None = None,
    ) -> None:
        self.enumerator = enumerator or FileEnumerator(runner=git_runner)
        self.extractor = extractor or ImportExtractor()
        self.graph_builder = graph_builder or DependencyGraphBuilder()
        self.tag_selector = tag_selector or TagSelector()
        self.generator = generator or DocumentGenerator()
        self.writer = writer or AtomicWriter()
        self._git_runner = git_runner or FileEnumerator._default_runner
        self.logger = get_logger("engine")

    # ------------------------------------------------------------------
    # generate

    def generate(
        self,
        project_path: str | Path,
        settings: AtlasSettings | None = None,
        progress: ProgressCallback | None = None,
    ) -> GenerateResult:
        """Scan the project and render the atlas documents without writing them."""
        started = time.perf_counter()
        root = resolve_root(project_path)
        if settings is None:
            settings = load_settings(root)
        emit = progress or (lambda _event: None)
        self.logger.info("Starting atlas scan for %s", root)

        emit(ScanProgress("enumerating", 0, 0, "Discovering source files..."))
        paths = self.enumerator.enumerate(root, settings.exclude_patterns)
        emit(ScanProgress("enumerating", len(paths), len(paths), f"Found {len(paths)} source files"))
        self.logger.debug("Enumerated %d files", len(paths))

        emit(ScanProgress("analyzing", 0, len(paths), "Analyzing imports..."))
        files = self._analyze(root, paths, emit)
        emit(ScanProgress("analyzing", len(files), len(files), "Import analysis complete"))

        emit(ScanProgress("inferring", 0, 1, "Inferring domains..."))
        dependencies = self.graph_builder.build(files)
        domain_engine = DomainInferenceEngine(settings.naming_overlap_threshold)
        domains = domain_engine.infer(files, settings.domain_inference_sensitivity)
        inline_tags = self.tag_selector.select(files, domains, settings.max_inline_tags)
        emit(ScanProgress("inferring", 1, 1, f"Found {len(domains)} domains"))
        self.logger.debug(
            "Resolved %d dependencies, %d domains, %d tag candidates",
            len(dependencies),
            len(domains),
            len(inline_tags),
        )

        languages = dict(Counter(file.language for file in files))
        scan_result = AtlasScanResult(
            files=files,
            total_files=len(files),
            total_lines=sum(file.line_count for file in files),
            languages=languages,
            dependencies=dependencies,
            domains=domains,
            inline_tags=inline_tags,
            scan_duration_ms=int((time.perf_counter() - started) * 1000),
        )

        project_name = root.name or "Repository"
        emit(ScanProgress("generating", 0, 2, f"Generating {CLAUDE_MD_FILENAME}..."))
        claude_md = self.generator.render_overview(project_name, scan_result)
        emit(ScanProgress("generating", 1, 2, f"Generating {REPO_INDEX_FILENAME}..."))
        repo_index = self.generator.render_repo_index(project_name, scan_result)
        emit(ScanProgress("generating", 2, 2, "Generation complete"))

        content = GeneratedContent(
            claude_md=claude_md,
            repo_index=repo_index,
            inline_tags=inline_tags,
            existing_claude_md=self._read_existing(self.claude_md_path(root)),
            existing_repo_index=self._read_existing(self.repo_index_path(root)),
        )
        self.logger.info(
            "Atlas scan finished: %d files, %d domains in %d ms",
            scan_result.total_files,
            len(domains),
            scan_result.scan_duration_ms,
        )
        return GenerateResult(scan_result=scan_result, generated_content=content)

    def _analyze(
        self, root: Path, paths: Sequence[str], emit: ProgressCallback
    ) -> List[SourceFileInfo]:
        files: List[SourceFileInfo] = []
        for index, relative_path in enumerate(paths):
            if index % PROGRESS_INTERVAL == 0:
                emit(ScanProgress("analyzing", index, len(paths), f"Analyzing {relative_path}"))
            info = analyze_file(root, relative_path, self.extractor)
            if info is not None:
                files.append(info)
        return files

    # ------------------------------------------------------------------
    # write

    def write(
        self,
        project_path: str | Path,
        claude_md: str,
        repo_index: str,
        inline_tags: Iterable[InlineTag] = (),
    ) -> WriteResult:
        """Persist both documents and every selected inline tag independently."""
        root = resolve_root(project_path)
        result = WriteResult()

        try:
            self.writer.write(self.claude_md_path(root), claude_md)
            result.claude_md_written = True
        except (OSError, ValueError):
            self.logger.exception("Failed to write %s", CLAUDE_MD_FILENAME)

        try:
            self.writer.write(self.repo_index_path(root), repo_index)
            result.repo_index_written = True
        except (OSError, ValueError):
            self.logger.exception("Failed to write %s", REPO_INDEX_FILENAME)

        for tag in inline_tags:
            if not tag.selected:
                continue
            target = Path(tag.file_path)
            if not self._is_within(root, target):
                self.logger.warning("Refusing to tag %s outside %s", target, root)
                continue
            try:
                self.writer.write_inline_tag(target, tag.suggested_tag)
            except (OSError, ValueError) as exc:
                self.logger.warning("Failed to write inline tag to %s: %s", target, exc)
                continue
            result.inline_tags_written += 1

        self.logger.info(
            "Atlas written (overview=%s, index=%s, tags=%d)",
            result.claude_md_written,
            result.repo_index_written,
            result.inline_tags_written,
        )
        return result

    # ------------------------------------------------------------------
    # status

    def status(self, project_path: str | Path) -> AtlasStatus:
        """Report existing atlas artifacts without re-running the pipeline."""
        root = resolve_root(project_path)
        claude_md = self.claude_md_path(root)
        repo_index = self.repo_index_path(root)
        has_claude_md = claude_md.is_file()
        has_repo_index = repo_index.is_file()

        last_generated: Optional[datetime] = None
        if has_claude_md:
            try:
                last_generated = datetime.fromtimestamp(claude_md.stat().st_mtime, tz=UTC)
            except OSError as exc:
                self.logger.debug("Could not stat %s: %s", claude_md, exc)

        return AtlasStatus(
            has_atlas=has_claude_md or has_repo_index,
            claude_md_path=str(claude_md) if has_claude_md else None,
            repo_index_path=str(repo_index) if has_repo_index else None,
            last_generated=last_generated,
            inline_tag_count=self.count_tagged_files(root),
        )

    def count_tagged_files(self, root: Path) -> int:
        """Count files carrying an inline tag via git grep, or a direct read when git is unavailable."""
        try:
            output = self._git_runner(_GIT_GREP_ARGS, cwd=root)
        except subprocess.CalledProcessError as exc:
            # git grep exits 1 when nothing matches inside a work tree.
            if exc.returncode == 1:
                return 0
            self.logger.debug("git grep unavailable (%s); reading files directly", exc)
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.debug("git grep unavailable (%s); reading files directly", exc)
        else:
            return sum(
                1
                for path in output.split("\0")
                if path
                and self.enumerator.accepts(path)
                and self._is_taggable(path)
                and self._has_tag(root / path)
            )

        return sum(
            1
            for path in self.enumerator.enumerate(root)
            if self._is_taggable(path) and self._has_tag(root / path)
        )

    # ------------------------------------------------------------------
    # helpers

    @staticmethod
    def claude_md_path(root: Path) -> Path:
        return root / CLAUDE_MD_FILENAME

    @staticmethod
    def repo_index_path(root: Path) -> Path:
        return root / DOCS_DIRNAME / REPO_INDEX_FILENAME

    @staticmethod
    def _is_taggable(relative_path: str) -> bool:
        language = detect_language(relative_path)
        return language is not None and line_comment_for(language) is not None

    def _has_tag(self, path: Path) -> bool:
        content = self._read_existing(path)
        return content is not None and find_tag(content) is not None

    def _read_existing(self, path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return None

    @staticmethod
    def _is_within(root: Path, target: Path) -> bool:
        try:
            target.resolve().relative_to(root)
        except ValueError:
            return False
        return True


__all__ = ["AtlasEngine", "PROGRESS_INTERVAL", "ProgressCallback"]
