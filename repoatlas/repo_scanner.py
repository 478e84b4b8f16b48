"""Source file enumeration and per-file analysis."""

from __future__ import annotations

import os
import subprocess
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from .analyzers.imports import ImportExtractor
from .analyzers.languages import detect_language, detect_layer
from .logging import get_logger
from .models import SourceFileInfo

EXCLUDED_DIRS = frozenset(
    {
        "node_modules",
        ".git",
        "dist",
        "build",
        "out",
        ".next",
        "coverage",
        "__pycache__",
        ".venv",
        "vendor",
        "target",
        "bin",
        "obj",
        ".cache",
        ".turbo",
        ".parcel-cache",
    }
)

_GIT_LIST_ARGS = ("git", "ls-files", "-z", "--cached", "--others", "--exclude-standard")
_GIT_MAX_OUTPUT = 10 * 1024 * 1024

Runner = Callable[..., str]

logger = get_logger("scanner")


class EnumerationError(RuntimeError):
    """Raised by an enumeration strategy that cannot produce a listing."""


def resolve_root(root: str | Path) -> Path:
    """Return the absolute project root, rejecting missing or non-directory paths."""
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise FileNotFoundError(f"Project path not found: {root}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Project path is not a directory: {root}")
    return root_path


class FileEnumerator:
    """Lists plausible source files under a project root.

    A VCS-aware listing is tried first; when git is unavailable or the root is
    not inside a work tree, a manual directory walk takes over. Both strategies
    share one acceptance predicate so they filter identically.
    """

    def __init__(self, runner: Runner | None = None) -> None:
        self._runner = runner or self._default_runner

    def enumerate(self, root: str | Path, extra_excludes: Sequence[str] = ()) -> List[str]:
        root_path = resolve_root(root)
        excludes = list(extra_excludes)
        strategies = (
            ("git", self._list_with_git),
            ("walk", self._list_with_walk),
        )
        for name, strategy in strategies:
            try:
                files = sorted(
                    {path for path in strategy(root_path) if self.accepts(path, excludes)}
                )
            except (
                EnumerationError,
                OSError,
                UnicodeDecodeError,
                subprocess.SubprocessError,
            ) as exc:
                logger.debug("File listing via %s unavailable: %s", name, exc)
                continue
            logger.debug("Enumerated %d source files via %s", len(files), name)
            return files
        return []

    @staticmethod
    def is_excluded_segment(segment: str, extra_excludes: Sequence[str] = ()) -> bool:
        if segment in EXCLUDED_DIRS:
            return True
        return any(fnmatchcase(segment, pattern) for pattern in extra_excludes)

    def accepts(self, relative_path: str, extra_excludes: Sequence[str] = ()) -> bool:
        """Shared filter: supported extension, no excluded segment, no dot directory."""
        parts = relative_path.split("/")
        if any(self.is_excluded_segment(part, extra_excludes) for part in parts):
            return False
        if any(part.startswith(".") for part in parts[:-1]):
            return False
        return detect_language(relative_path) is not None

    def _list_with_git(self, root: Path) -> Iterable[str]:
        output = self._runner(_GIT_LIST_ARGS, cwd=root)
        if len(output) > _GIT_MAX_OUTPUT:
            raise EnumerationError("git ls-files output exceeded the listing buffer")
        return [entry.replace("\\", "/") for entry in output.split("\0") if entry]

    def _list_with_walk(self, root: Path) -> Iterator[str]:
        def _on_error(exc: OSError) -> None:
            logger.debug("Skipping unreadable directory %s: %s", exc.filename, exc)

        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""
            dirnames[:] = sorted(
                name
                for name in dirnames
                if name not in EXCLUDED_DIRS and not name.startswith(".")
            )
            for filename in filenames:
                yield f"{rel_dir}/{filename}" if rel_dir else filename

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            encoding="utf-8",
            # Undecodable file names round-trip like os.walk output.
            errors="surrogateescape",
            capture_output=True,
        )
        return completed.stdout


def analyze_file(
    root: Path, relative_path: str, extractor: ImportExtractor
) -> Optional[SourceFileInfo]:
    """Read one file and collect its metrics; None when it cannot be read."""
    absolute = root / relative_path
    try:
        size = absolute.stat().st_size
        content = absolute.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.debug("Skipping unreadable file %s: %s", relative_path, exc)
        return None

    language = detect_language(relative_path) or "unknown"
    return SourceFileInfo(
        relative_path=relative_path,
        absolute_path=str(absolute),
        language=language,
        line_count=content.count("\n") + 1,
        size_bytes=size,
        imports=extractor.extract_imports(content, language),
        exports=extractor.extract_exports(content, language),
        layer=detect_layer(relative_path),
    )


__all__ = [
    "EXCLUDED_DIRS",
    "EnumerationError",
    "FileEnumerator",
    "analyze_file",
    "resolve_root",
]
