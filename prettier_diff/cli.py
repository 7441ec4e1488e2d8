"""
CLI entry point — argument parsing and main execution flow.
"""

import argparse
import sys

from . import git_utils
from .config import Config
from .engine import PrettierEngine
from .log import log, setup_logger
from .processors import FilesNotFormattedError, FormatOptions, run_prettier

EXIT_OK = 0
EXIT_NOT_FORMATTED = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prettier-diff",
        description="Run Prettier on changed files, or only on changed lines",
    )
    parser.add_argument("--check", action="store_true",
                        help="Do not format, just check formatting")
    parser.add_argument("--staged", action="store_true",
                        help="Run only on staged files")
    parser.add_argument("--changed", action="store_true",
                        help="Run only on changed files")
    parser.add_argument("--lines", action="store_true",
                        help="Format only changed/staged lines")
    parser.add_argument("--markers", action="store_true", default=None,
                        help="With --lines, fence changed lines with comment "
                             "markers and format the whole file once")
    parser.add_argument("--extensions", default=None,
                        help="Comma-separated list of file extensions to "
                             "process (e.g. 'ts,js,jsx')")
    parser.add_argument("--pattern", default=None,
                        help="Only process files matching this glob pattern")
    parser.add_argument("--tracked-only", action="store_true",
                        help="Skip untracked files")
    parser.add_argument("--config", default=None,
                        help="Path to .prettier-diff.yaml config file")
    parser.add_argument("--no-progress", action="store_true",
                        help="Disable the progress bar")
    parser.add_argument("--verbose", action="store_true",
                        help="Show debug output")
    return parser


def options_from_args(args: argparse.Namespace, cfg: Config) -> FormatOptions:
    """Merge parsed CLI args over *cfg* into ``FormatOptions``."""
    if args.extensions is not None:
        extensions = [e.strip().lstrip(".") for e in args.extensions.split(",")
                      if e.strip()]
    else:
        extensions = list(cfg.EXTENSIONS)

    return FormatOptions(
        check=args.check,
        staged=args.staged,
        changed=args.changed,
        lines=args.lines,
        markers=cfg.USE_MARKERS if args.markers is None else args.markers,
        extensions=extensions,
        pattern=args.pattern,
        tracked_only=args.tracked_only,
        diff_base=cfg.DIFF_BASE,
        progress=cfg.SHOW_PROGRESS and not args.no_progress and sys.stderr.isatty(),
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # ── 0. Load config ──
    cfg = Config.load(args.config)
    setup_logger(cfg.LOG_DIR, verbose=args.verbose)
    log.color = sys.stdout.isatty()

    options = options_from_args(args, cfg)

    if not git_utils.is_git_repo():
        log.error("Not a git repository; nothing to diff against.")
        return EXIT_ERROR

    # ── 1. CI: make sure the base branch exists locally ──
    options.diff_base = git_utils.prepare_ci_base(options.diff_base)

    # ── 2. Run ──
    engine = PrettierEngine(cfg.PRETTIER_COMMAND)
    try:
        summary = run_prettier(options, engine)
    except FilesNotFormattedError as exc:
        summary = exc.summary
        log.print_summary(level="warn")
        print(f"\n  {exc}")
        return EXIT_ERROR if summary.failed else EXIT_NOT_FORMATTED
    except git_utils.GitError as exc:
        log.error(exc)
        log.print_summary()
        return EXIT_ERROR

    log.print_summary()
    if summary.failed:
        print(f"\n  An error occurred while formatting {len(summary.failed)} file(s).")
        return EXIT_ERROR
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
