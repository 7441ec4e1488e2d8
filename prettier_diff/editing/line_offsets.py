"""
Line offset index — maps 0-based line numbers to character offsets.

Built once per text version. Each line's terminator width is measured
independently, so documents mixing ``\\n`` and ``\\r\\n`` are handled.
"""

from __future__ import annotations

import re

from .change_range import ChangeRange

_LINE_SPLIT = re.compile(r"\r?\n")


def _line_ending_width(text: str, offset: int) -> int:
    """Width of the terminator starting at *offset* (0 at end of text)."""
    if text.startswith("\r\n", offset):
        return 2
    if text.startswith("\n", offset):
        return 1
    return 0


class LineOffsetIndex:
    """Character offset at which every line of a text begins."""

    def __init__(self, text: str) -> None:
        self._text_length = len(text)
        lines = _LINE_SPLIT.split(text)
        offsets = [0]
        for line in lines:
            line_end = offsets[-1] + len(line)
            offsets.append(line_end + _line_ending_width(text, line_end))
        self._offsets = offsets

        # A trailing terminator leaves an empty final segment that is not a line.
        self._line_count = len(lines)
        if not text or text.endswith("\n"):
            self._line_count -= 1

    def offset_of(self, line: int) -> int:
        """Return the offset where *line* begins, or 0 if it is out of range."""
        if 0 <= line < len(self._offsets):
            return self._offsets[line]
        return 0

    def span_of(self, change_range: ChangeRange) -> tuple[int, int]:
        """Half-open character span covered by *change_range*.

        Both ends clamp to the text length, so a range lying wholly past
        the last line yields an empty span at the end of the text.
        """
        start_line = max(change_range.start(), 0)
        if start_line < len(self._offsets):
            start = self._offsets[start_line]
        else:
            start = self._text_length
        if change_range.end() < len(self._offsets):
            end = self._offsets[change_range.end()]
        else:
            end = self._text_length
        return start, max(start, end)

    def line_count(self) -> int:
        return self._line_count

    @property
    def offsets(self) -> list[int]:
        return list(self._offsets)
