"""
Range formatting strategies — format only the changed parts of a document.

Three mutually exclusive strategies share one contract: text outside the
requested ranges comes back unchanged (for ``OFFSET_RANGE`` this relies on
the engine honouring the span; ``MARKER_BASED`` enforces it by merging).

All functions here are pure. The formatter is passed in as a callable::

    format_fn(text, range_start=None, range_end=None) -> str
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from .change_range import ChangeRange, coalesce_ranges
from .line_offsets import LineOffsetIndex
from .markers import insert_markers, merge_sections, split_marked_sections

logger = logging.getLogger(__name__)

FormatFn = Callable[..., str]


class Strategy(str, Enum):
    WHOLE_DOCUMENT = "whole-document"
    OFFSET_RANGE = "offset-range"
    MARKER_BASED = "marker-based"


@dataclass
class FormatOutcome:
    """Result of running a strategy over one document."""
    original: str
    text: str
    strategy: Strategy
    changed_ranges: list[ChangeRange] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.text != self.original


def is_full_span(ranges: list[ChangeRange], index: LineOffsetIndex) -> bool:
    """True when a single range covers the document from its first line to
    within one line of its last, making range formatting equivalent to
    formatting the whole document."""
    if len(ranges) != 1:
        return False
    only = ranges[0]
    return only.start() <= 0 and only.end() >= index.line_count() - 1


def choose_strategy(
    text: str,
    ranges: Optional[list[ChangeRange]],
    use_markers: bool = False,
) -> Strategy:
    """Pick the strategy for *text* given its change *ranges*.

    ``None`` for *ranges* means line-level formatting was not requested.
    """
    if ranges is None or is_full_span(ranges, LineOffsetIndex(text)):
        return Strategy.WHOLE_DOCUMENT
    return Strategy.MARKER_BASED if use_markers else Strategy.OFFSET_RANGE


def format_whole(text: str, format_fn: FormatFn) -> FormatOutcome:
    """Format the entire document in one pass."""
    formatted = format_fn(text)
    return FormatOutcome(
        original=text, text=formatted, strategy=Strategy.WHOLE_DOCUMENT
    )


def format_offset_ranges(
    text: str,
    ranges: list[ChangeRange],
    format_fn: FormatFn,
) -> FormatOutcome:
    """Ask the engine to format each range's character span in turn.

    Ranges are applied bottom-up so that line numbers of ranges still to
    come are not shifted by earlier edits. Every step sees the cumulative
    result of the previous ones, and the index is rebuilt for each
    intermediate text.
    """
    current = text
    changed: list[ChangeRange] = []

    for rng in sorted(ranges, key=lambda r: r.start(), reverse=True):
        start, end = LineOffsetIndex(current).span_of(rng)
        formatted = format_fn(current, range_start=start, range_end=end)

        delta = len(formatted) - len(current)
        before = current[start:end]
        after = formatted[start:max(start, end + delta)]
        if before != after:
            changed.append(rng)
            logger.debug("[RangeFormat] Range %s changed", rng.label())

        current = formatted

    changed.reverse()
    return FormatOutcome(
        original=text,
        text=current,
        strategy=Strategy.OFFSET_RANGE,
        changed_ranges=changed,
    )


def format_with_markers(
    text: str,
    ranges: list[ChangeRange],
    language: str,
    format_fn: FormatFn,
) -> FormatOutcome:
    """Fence the ranges with markers, format once, merge the fenced parts back.

    Raises
    ------
    MarkerError
        If *language* has no comment syntax or the formatter disturbed a
        marker. Callers are expected to fall back to ``format_offset_ranges``.
    """
    fenced = coalesce_ranges(ranges)
    marked = insert_markers(text, fenced, language)
    formatted_marked = format_fn(marked)

    original_parts = split_marked_sections(marked, language)
    formatted_parts = split_marked_sections(formatted_marked, language)
    merged = merge_sections(original_parts, formatted_parts)

    # insert_markers appended a line break; keep the original's missing
    # trailing newline unless a range reaches the end of the document.
    if not text.endswith("\n") and merged.endswith("\n"):
        line_count = LineOffsetIndex(text).line_count()
        if all(rng.end() < line_count for rng in fenced):
            merged = merged[:-1]

    changed = [
        rng
        for i, rng in enumerate(fenced)
        if original_parts[2 * i + 1] != formatted_parts[2 * i + 1]
    ]

    return FormatOutcome(
        original=text,
        text=merged,
        strategy=Strategy.MARKER_BASED,
        changed_ranges=changed,
    )
