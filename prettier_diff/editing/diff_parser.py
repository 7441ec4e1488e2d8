"""
Diff parser — turns ``git diff --unified=0`` output into change ranges.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from .change_range import ChangeRange

logger = logging.getLogger(__name__)

# Patterns
_FILE_PATTERN = re.compile(r"^\+\+\+ (?:b/)?(.+?)\s*$")
_HUNK_PATTERN = re.compile(
    r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@"
)


@dataclass
class DiffHunk:
    """One hunk header: where lines were removed and where they were added."""
    old_start: int
    old_count: int
    new_start: int
    new_count: int

    @property
    def is_deletion(self) -> bool:
        return self.new_count == 0

    def to_range(self) -> ChangeRange:
        """Range of added lines in the new file (not valid for deletions)."""
        return ChangeRange(self.new_start, self.new_start + self.new_count)


@dataclass
class FileDiff:
    """All hunks for a single file."""
    file_path: str
    hunks: list[DiffHunk] = field(default_factory=list)


class DiffParser:
    """Parse unified diffs into per-file hunks."""

    def parse(self, diff_text: str) -> list[FileDiff]:
        """Parse *diff_text* into one ``FileDiff`` per file header.

        Hunks seen before any ``+++`` header are collected under an empty
        path, which is what a single-file diff piped without headers gives.
        """
        files: list[FileDiff] = []
        current: FileDiff | None = None

        previous = ""
        for line in diff_text.splitlines():
            # An added line starting with "++" also reads "+++ ...";
            # real headers always follow a "--- " line.
            file_match = _FILE_PATTERN.match(line)
            is_header = file_match is not None and previous.startswith("--- ")
            previous = line
            if is_header:
                current = FileDiff(file_path=file_match.group(1))
                files.append(current)
                continue

            hunk_match = _HUNK_PATTERN.match(line)
            if not hunk_match:
                continue

            if current is None:
                current = FileDiff(file_path="")
                files.append(current)

            old_start, old_count, new_start, new_count = hunk_match.groups()
            current.hunks.append(DiffHunk(
                old_start=int(old_start),
                old_count=int(old_count) if old_count is not None else 1,
                new_start=int(new_start),
                new_count=int(new_count) if new_count is not None else 1,
            ))

        return files

    def ranges_for_diff(self, diff_text: str) -> list[ChangeRange]:
        """Return the added-line ranges of every hunk, ascending.

        Pure deletions leave nothing to format and are skipped.
        """
        ranges: list[ChangeRange] = []
        for file_diff in self.parse(diff_text):
            for hunk in file_diff.hunks:
                if hunk.is_deletion:
                    logger.debug(
                        "[DiffParse] Skipping deletion hunk at -%d in %s",
                        hunk.old_start, file_diff.file_path or "<stdin>",
                    )
                    continue
                ranges.append(hunk.to_range())

        ranges.sort(key=lambda r: r.inclusive_lower_bound)
        return ranges
