"""Atomic persistence of atlas documents and inline tags."""

from __future__ import annotations

import os
from pathlib import Path

from .analyzers.tags import TAG_PATTERN

TEMP_SUFFIX = ".tmp"


def strip_inline_tag(content: str) -> str:
    """Remove the first inline tag line, including its line break."""
    match = TAG_PATTERN.search(content)
    if match is None:
        return content
    end = match.end()
    if content.startswith("\r\n", end):
        end += 2
    elif content.startswith("\n", end):
        end += 1
    return content[: match.start()] + content[end:]


def _line_ending(content: str) -> str:
    first_break = content.find("\n")
    if first_break > 0 and content[first_break - 1] == "\r":
        return "\r\n"
    return "\n"


class AtomicWriter:
    """Writes files through a sibling temp file and an atomic rename."""

    def write(self, path: Path | str, content: str) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        temp_path = target.with_name(target.name + TEMP_SUFFIX)
        try:
            with temp_path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(content)
            self._commit(temp_path, target)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise
        return target

    def write_inline_tag(self, path: Path | str, tag: str) -> Path:
        """Replace any existing tag line with ``tag`` at the top of the file."""
        target = Path(path)
        # newline="" keeps CRLF files byte-for-byte outside the tag line.
        with target.open("r", encoding="utf-8", newline="") as handle:
            content = handle.read()
        return self.write(target, f"{tag}{_line_ending(content)}{strip_inline_tag(content)}")

    @staticmethod
    def _commit(temp_path: Path, target: Path) -> None:
        # os.replace is the commit point; readers see old or new content only.
        os.replace(temp_path, target)


__all__ = ["AtomicWriter", "TEMP_SUFFIX", "strip_inline_tag"]
