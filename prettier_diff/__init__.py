"""
prettier_diff — run Prettier on changed files, or only on changed lines.

Public API for library usage::

    from prettier_diff import run_prettier, FormatOptions

    summary = run_prettier(FormatOptions(lines=True, check=True))
"""

from .processors import (
    FilesNotFormattedError, FormatOptions, RunSummary, run_prettier,
)

__all__ = ["run_prettier", "FormatOptions", "RunSummary", "FilesNotFormattedError"]
