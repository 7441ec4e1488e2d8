"""Diff-aware formatting core — change ranges, offsets, markers, strategies."""

from .change_range import ChangeRange, InvalidRangeError, coalesce_ranges
from .line_offsets import LineOffsetIndex
from .markers import (
    COMMENT_STYLES, CommentStyle, MarkerError, MarkerMismatchError,
    UnsupportedLanguageError, get_marker, insert_markers,
    merge_marked_sections, merge_sections, split_marked_sections,
)
from .strategies import (
    FormatOutcome, Strategy, choose_strategy, format_offset_ranges,
    format_whole, format_with_markers, is_full_span,
)
from .diff_parser import DiffParser, DiffHunk, FileDiff

__all__ = [
    "ChangeRange", "InvalidRangeError", "coalesce_ranges",
    "LineOffsetIndex",
    "COMMENT_STYLES", "CommentStyle", "MarkerError", "MarkerMismatchError",
    "UnsupportedLanguageError", "get_marker", "insert_markers",
    "merge_marked_sections", "merge_sections", "split_marked_sections",
    "FormatOutcome", "Strategy", "choose_strategy", "format_offset_ranges",
    "format_whole", "format_with_markers", "is_full_span",
    "DiffParser", "DiffHunk", "FileDiff",
]
