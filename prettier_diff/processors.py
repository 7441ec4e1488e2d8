"""
Processors — per-file read → format → compare/write → log, and the run
loop over every targeted file.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import shutil
from dataclasses import dataclass, field
from typing import Optional

from tqdm import tqdm

from . import git_utils
from .editing.change_range import ChangeRange, InvalidRangeError
from .editing.markers import MarkerError
from .editing.strategies import (
    FormatFn, FormatOutcome, Strategy, choose_strategy, format_offset_ranges,
    format_whole, format_with_markers,
)
from .engine import FormatterError, FormattingEngine, PrettierEngine
from .log import log

logger = logging.getLogger(__name__)

UNSTAGED_REASON = "has unstaged changes. Please stage or remove the changes."


@dataclass
class FormatOptions:
    """What to format and how, as chosen on the command line."""
    check: bool = False          # only report, never write
    staged: bool = False         # staged files
    changed: bool = False        # changed (unstaged) files
    lines: bool = False          # only changed lines
    markers: bool = False        # marker-based line formatting
    extensions: list[str] = field(default_factory=list)
    pattern: Optional[str] = None
    tracked_only: bool = False   # leave untracked files alone
    diff_base: Optional[str] = None
    progress: bool = False


@dataclass
class RunSummary:
    """Outcome of ``run_prettier`` over all targeted files."""
    processed: list[str] = field(default_factory=list)
    unformatted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.unformatted and not self.failed


class FilesNotFormattedError(Exception):
    """Raised in check mode when at least one file needs formatting."""

    def __init__(self, summary: RunSummary) -> None:
        super().__init__("Some files are not formatted.")
        self.summary = summary


# ----------------------------------------------------------------------
# Filesystem
# ----------------------------------------------------------------------

def read_file(path: str) -> str:
    """Read *path* as UTF-8 without translating line endings."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def write_file(path: str, content: str) -> None:
    """Write *content* to *path* atomically via temp file + rename."""
    abs_path = os.path.abspath(path)
    tmp_path = abs_path + ".prettier_diff_tmp"

    try:
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        shutil.move(tmp_path, abs_path)
    except Exception:
        # Clean up temp file on failure
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


# ----------------------------------------------------------------------
# Target files
# ----------------------------------------------------------------------

def resolve_target_files(
    options: FormatOptions,
    untracked_files: list[str] | None = None,
) -> list[str]:
    """Changed files to process, deduplicated and filtered.

    Staged and changed files are both included unless exactly one of
    ``staged``/``changed`` is requested. Untracked files are included
    unless ``tracked_only`` is set.
    """
    files: list[str] = []
    both = options.staged == options.changed

    if both or options.staged:
        files.extend(git_utils.get_diff_file_list(True, options.diff_base))
    if both or options.changed:
        files.extend(git_utils.get_diff_file_list(False, options.diff_base))

    if not options.tracked_only:
        if untracked_files is None:
            untracked_files = git_utils.get_untracked_file_list()
        files.extend(untracked_files)

    files = list(dict.fromkeys(files))

    if options.extensions:
        exts = {ext.lstrip(".") for ext in options.extensions}
        files = [f for f in files if os.path.splitext(f)[1].lstrip(".") in exts]

    if options.pattern:
        files = [f for f in files if fnmatch.fnmatch(f, options.pattern)]

    # Deleted or renamed-away paths can still show up in git's lists.
    return [f for f in files if os.path.isfile(f)]


# ----------------------------------------------------------------------
# Per-file processing
# ----------------------------------------------------------------------

def _load(
    file: str,
    options: FormatOptions,
    engine: FormattingEngine,
) -> tuple[str, str, Optional[str]] | None:
    """Read *file* and resolve how to format it.

    Returns ``(code, parser, config)`` or ``None`` when the file is to be
    left alone (unstaged changes in staged mode, ignored, no parser).
    """
    if options.staged and not git_utils.has_clean_index(file):
        log.skipped(file, UNSTAGED_REASON)
        return None

    info = engine.get_file_info(file)
    if info.ignored or not info.inferred_parser:
        logger.debug(
            "[Process] %s treated as formatted (ignored=%s, parser=%s)",
            file, info.ignored, info.inferred_parser,
        )
        return None

    code = read_file(file)
    config = engine.resolve_config(file)
    return code, info.inferred_parser, config


def _format_fn(engine: FormattingEngine, file: str, config: Optional[str]) -> FormatFn:
    def format_fn(text: str, range_start=None, range_end=None) -> str:
        return engine.format(
            text,
            filepath=file,
            config=config,
            range_start=range_start,
            range_end=range_end,
        )
    return format_fn


def _report(file: str, options: FormatOptions, outcome: FormatOutcome) -> bool:
    """Log (and in apply mode write) *outcome*; ``False`` on a check failure."""
    if not outcome.changed:
        return True

    labels: list[Optional[str]] = [None]
    if outcome.strategy is not Strategy.WHOLE_DOCUMENT and outcome.changed_ranges:
        labels = [rng.label() for rng in outcome.changed_ranges]

    if options.check:
        for label in labels:
            log.checked(file, label)
        return False

    write_file(file, outcome.text)
    for label in labels:
        log.formatted(file, label)
    return True


def _ranges(
    file: str,
    code: str,
    options: FormatOptions,
    untracked: bool,
) -> list[ChangeRange]:
    return git_utils.ranges_for_file(
        file, code, options.staged, options.diff_base, untracked=untracked
    )


def process_whole_file(
    file: str,
    options: FormatOptions,
    engine: FormattingEngine,
) -> bool:
    """Format all of *file*."""
    loaded = _load(file, options, engine)
    if loaded is None:
        return True
    code, _, config = loaded

    outcome = format_whole(code, _format_fn(engine, file, config))
    return _report(file, options, outcome)


def process_file_by_ranges(
    file: str,
    options: FormatOptions,
    engine: FormattingEngine,
    untracked: bool = False,
) -> bool:
    """Format only the changed lines of *file*, one character span at a time."""
    loaded = _load(file, options, engine)
    if loaded is None:
        return True
    code, _, config = loaded

    ranges = _ranges(file, code, options, untracked)
    if not ranges:
        return True

    format_fn = _format_fn(engine, file, config)
    if choose_strategy(code, ranges) is Strategy.WHOLE_DOCUMENT:
        outcome = format_whole(code, format_fn)
    else:
        outcome = format_offset_ranges(code, ranges, format_fn)
    return _report(file, options, outcome)


def process_ranges_with_markers(
    file: str,
    options: FormatOptions,
    engine: FormattingEngine,
    untracked: bool = False,
) -> bool:
    """Format only the changed lines of *file* by fencing them with markers.

    Falls back to span formatting when the marker round trip fails.
    """
    loaded = _load(file, options, engine)
    if loaded is None:
        return True
    code, parser, config = loaded

    ranges = _ranges(file, code, options, untracked)
    if not ranges:
        return True

    format_fn = _format_fn(engine, file, config)
    if choose_strategy(code, ranges, use_markers=True) is Strategy.WHOLE_DOCUMENT:
        outcome = format_whole(code, format_fn)
    else:
        try:
            outcome = format_with_markers(code, ranges, parser, format_fn)
        except (MarkerError, FormatterError) as exc:
            log.error(
                f"Marker-based formatting failed, falling back to range "
                f"formatting: {exc}",
                file,
            )
            outcome = format_offset_ranges(code, ranges, format_fn)
    return _report(file, options, outcome)


def process_file(
    file: str,
    options: FormatOptions,
    engine: FormattingEngine,
    untracked: bool = False,
) -> bool:
    """Dispatch *file* to the processor matching *options*."""
    if not options.lines:
        return process_whole_file(file, options, engine)
    if options.markers:
        return process_ranges_with_markers(file, options, engine, untracked)
    return process_file_by_ranges(file, options, engine, untracked)


# ----------------------------------------------------------------------
# Run
# ----------------------------------------------------------------------

def run_prettier(
    options: FormatOptions,
    engine: FormattingEngine | None = None,
) -> RunSummary:
    """Format (or check) every changed file.

    Files are processed one at a time. A file whose processing raises is
    logged and recorded in ``RunSummary.failed``; the run carries on.

    Raises
    ------
    FilesNotFormattedError
        In check mode, when any file needs formatting.
    """
    engine = engine or PrettierEngine()
    summary = RunSummary()

    untracked = [] if options.tracked_only else git_utils.get_untracked_file_list()
    files = resolve_target_files(options, untracked)

    if not files:
        log.info("No files to process.")
        return summary

    untracked_set = set(untracked)
    for file in tqdm(files, unit="file", desc="Formatting", disable=not options.progress):
        try:
            ok = process_file(file, options, engine, untracked=file in untracked_set)
        except (FormatterError, git_utils.GitError, InvalidRangeError,
                OSError, UnicodeDecodeError) as exc:
            log.error(exc, file)
            summary.failed.append(file)
            continue

        summary.processed.append(file)
        if not ok:
            summary.unformatted.append(file)

    logger.debug(
        "[Run] %d processed, %d unformatted, %d failed",
        len(summary.processed), len(summary.unformatted), len(summary.failed),
    )

    if options.check and summary.unformatted:
        raise FilesNotFormattedError(summary)
    return summary
