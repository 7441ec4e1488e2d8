"""
Marker protocol — fence change ranges with inert comments so a
whole-document format can be merged back range by range.

Markers are comments in the target language wrapping an id that is unique
to this process and language, so they can never collide with real source.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from typing import Optional

from .change_range import ChangeRange
from .line_offsets import LineOffsetIndex

logger = logging.getLogger(__name__)

# Generated once per process; every marker embeds it.
RUN_ID = uuid.uuid4().hex


class MarkerError(Exception):
    """Base class for marker protocol failures."""


class UnsupportedLanguageError(MarkerError):
    """Raised when a language has no registered comment syntax."""


class MarkerMismatchError(MarkerError):
    """Raised when original and formatted texts split into different segment counts."""


@dataclass(frozen=True)
class CommentStyle:
    """Comment syntax of a language: a line prefix and/or a block pair."""
    line: Optional[str] = None
    block: Optional[tuple[str, str]] = None


_C_STYLE = CommentStyle(line="//", block=("/*", "*/"))
_HTML_STYLE = CommentStyle(block=("<!--", "-->"))
_SQL_STYLE = CommentStyle(line="--", block=("/*", "*/"))
_HASH_STYLE = CommentStyle(line="#")
_HANDLEBARS_STYLE = CommentStyle(block=("{{!--", "--}}"))

# Keyed by formatter parser name.
COMMENT_STYLES: dict[str, CommentStyle] = {
    "css": CommentStyle(block=("/*", "*/")),
    "scss": _C_STYLE,
    "less": _C_STYLE,
    "babel": _C_STYLE,
    "babel-flow": _C_STYLE,
    "babel-ts": _C_STYLE,
    "flow": _C_STYLE,
    "acorn": _C_STYLE,
    "espree": _C_STYLE,
    "meriyah": _C_STYLE,
    "typescript": _C_STYLE,
    "javascript": _C_STYLE,
    "json5": _C_STYLE,
    "apex": _C_STYLE,
    "html": _HTML_STYLE,
    "vue": _HTML_STYLE,
    "angular": _HTML_STYLE,
    "lwc": _HTML_STYLE,
    "xml": _HTML_STYLE,
    "markdown": _HTML_STYLE,
    "mdx": _HTML_STYLE,
    "astro": _HTML_STYLE,
    "svelte": _HTML_STYLE,
    "sql": _SQL_STYLE,
    "yaml": _HASH_STYLE,
    "toml": _HASH_STYLE,
    "graphql": _HASH_STYLE,
    "python": _HASH_STYLE,
    "glimmer": _HANDLEBARS_STYLE,
    "handlebars": _HANDLEBARS_STYLE,
    "liquid": CommentStyle(block=("{{!", "}}")),
}


def get_marker(language: str, run_id: str = RUN_ID) -> str:
    """Return the marker comment for *language*.

    Raises
    ------
    UnsupportedLanguageError
        If *language* has no entry in ``COMMENT_STYLES``.
    """
    marker_id = f"__PDQ_MARKER_{run_id}_{language}_PDQ_MARKER__"
    style = COMMENT_STYLES.get(language)

    if style is not None and style.line:
        return f"{style.line}{marker_id}"
    if style is not None and style.block:
        return f"{style.block[0]}{marker_id}{style.block[1]}"

    raise UnsupportedLanguageError(
        f"Unsupported parser for marker generation: {language}"
    )


def _marker_pattern(marker: str) -> re.Pattern[str]:
    # Surrounding blanks and the marker's own line break belong to the marker.
    return re.compile(rf"[ \t]*{re.escape(marker)}[ \t]*\r?\n?")


def insert_markers(text: str, ranges: list[ChangeRange], language: str) -> str:
    """Bracket every range in *text* with a pair of marker lines.

    The text is first normalized to end with a line break. Ranges are
    processed from the highest start offset down so offsets computed on
    the normalized text stay valid while the result is mutated.

    Parameters
    ----------
    text:
        Document to mark up.
    ranges:
        Non-overlapping change ranges, in any order.
    language:
        Formatter parser name selecting the comment syntax.

    Returns
    -------
    str
        The marked-up text.
    """
    marker_line = get_marker(language) + "\n"

    result = text
    if not result.endswith("\n"):
        result += "\n"

    index = LineOffsetIndex(result)
    spans = sorted(
        (index.span_of(rng) for rng in ranges),
        key=lambda span: span[0],
        reverse=True,
    )

    for start_offset, end_offset in spans:
        result = result[:end_offset] + marker_line + result[end_offset:]
        result = result[:start_offset] + marker_line + result[start_offset:]

    logger.debug(
        "[Markers] Inserted %d marker pair(s) for %s", len(spans), language
    )
    return result


def split_marked_sections(text: str, language: str) -> list[str]:
    """Split *text* on markers: even items lie outside ranges, odd inside."""
    return _marker_pattern(get_marker(language)).split(text)


def merge_sections(original_parts: list[str], formatted_parts: list[str]) -> str:
    """Join already-split sections: odd items from *formatted_parts*, even
    items from *original_parts*.

    Raises
    ------
    MarkerMismatchError
        If the two lists differ in length.
    """
    if len(original_parts) != len(formatted_parts):
        raise MarkerMismatchError(
            "Marker count mismatch between original and formatted files "
            f"({len(original_parts)} vs {len(formatted_parts)} segments)."
        )

    return "".join(
        formatted_parts[i] if i % 2 == 1 else part
        for i, part in enumerate(original_parts)
    )


def merge_marked_sections(
    original_marked: str,
    formatted_marked: str,
    language: str,
) -> str:
    """Take the inside of every range from the formatted text and the rest
    from the original.

    Raises
    ------
    MarkerMismatchError
        If the two texts do not contain the same number of markers.
    """
    return merge_sections(
        split_marked_sections(original_marked, language),
        split_marked_sections(formatted_marked, language),
    )
