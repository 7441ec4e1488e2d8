"""
Git integration — changed-file lists, per-file diffs and CI base fetching.
"""

import logging
import os
import shlex
import subprocess

from .editing.change_range import ChangeRange
from .editing.diff_parser import DiffParser
from .editing.line_offsets import LineOffsetIndex

logger = logging.getLogger(__name__)

# Checked in order; the first one set names the branch a PR targets.
_CI_BRANCH_VARS = (
    "GITHUB_BASE_REF",
    "CI_MERGE_REQUEST_TARGET_BRANCH_NAME",
    "BITBUCKET_PR_DESTINATION_BRANCH",
    "SYSTEM_PULLREQUEST_TARGETBRANCH",
)


class GitError(Exception):
    """Raised when a git command needed for formatting fails."""


def _run_git(cmd: str) -> tuple[bool, str]:
    """Run a git command and return ``(success, output)``."""
    try:
        result = subprocess.run(
            f"git {cmd}",
            shell=True,
            capture_output=True,
            text=True,
            check=False,
        )
        output = result.stdout if result.returncode == 0 else result.stderr
        return result.returncode == 0, output
    except OSError as e:
        return False, str(e)


def _git_output(cmd: str) -> str:
    """Run a git command, raising ``GitError`` on failure."""
    ok, output = _run_git(cmd)
    if not ok:
        raise GitError(f"git {cmd} failed: {output.strip()}")
    return output


def _lines(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


def is_git_repo() -> bool:
    """Return ``True`` if the CWD is inside a git repository."""
    ok, _ = _run_git("rev-parse --is-inside-work-tree")
    return ok


def get_diff_file_list(staged: bool, base: str | None = None) -> list[str]:
    """Paths of added, copied or modified files in the index or work tree."""
    cmd = "diff --name-only --relative --diff-filter=ACM"
    if staged:
        cmd += " --cached"
    if base:
        cmd += f" {shlex.quote(base)}"
    return _lines(_git_output(cmd))


def get_untracked_file_list() -> list[str]:
    """Paths of untracked files that are not ignored."""
    return _lines(_git_output("ls-files --others --exclude-standard"))


def get_diff_for_file(path: str, staged: bool, base: str | None = None) -> str:
    """Zero-context unified diff of *path*."""
    cmd = "diff --unified=0 --no-color"
    if staged:
        cmd += " --cached"
    if base:
        cmd += f" {shlex.quote(base)}"
    cmd += f" -- {shlex.quote(path)}"
    return _git_output(cmd)


def has_clean_index(path: str) -> bool:
    """Return ``True`` if *path* has no unstaged changes."""
    ok, _ = _run_git(f"diff --quiet -- {shlex.quote(path)}")
    return ok


def ranges_for_file(
    path: str,
    text: str,
    staged: bool,
    base: str | None = None,
    untracked: bool = False,
) -> list[ChangeRange]:
    """Changed line ranges of *path*, whose current contents are *text*.

    Untracked files have no diff; every line of them counts as changed.
    """
    if untracked:
        line_count = LineOffsetIndex(text).line_count()
        return [ChangeRange(1, line_count + 1)] if line_count else []
    return DiffParser().ranges_for_diff(get_diff_for_file(path, staged, base))


def guess_branch() -> str | None:
    """Name of the branch a CI pull request targets, if any is known."""
    for var in _CI_BRANCH_VARS:
        value = os.getenv(var)
        if value:
            return value
    return None


def fetch_from_origin(branch: str) -> tuple[bool, str]:
    """Fetch *branch* from origin so it can be diffed against."""
    return _run_git(f"fetch --quiet origin {shlex.quote(branch)}")


def prepare_ci_base(configured_base: str | None = None) -> str | None:
    """Fetch the base branch in CI and return ``origin/<branch>``.

    Outside CI the configured base is returned unchanged.
    """
    if os.getenv("CI") is None:
        return configured_base

    branch = configured_base or guess_branch()
    if not branch:
        return None

    if branch.startswith("origin/"):
        branch = branch[len("origin/"):]
    ok, output = fetch_from_origin(branch)
    if not ok:
        logger.warning("[Git] Could not fetch origin/%s: %s", branch, output.strip())
    return f"origin/{branch}"
