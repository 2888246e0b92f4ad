"""Command line interface for trace-working."""

import argparse
import sys

from . import __version__
from .colors import Colors
from .command import parse_target
from .tracer import TraceRunner


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="trace-working",
        description="Trace Working - find the last commit where a file still worked",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run a script against every commit that has it, newest first
  trace-working --file scripts/report.py --cmd "python"

  # Check a single test with pytest
  trace-working --file tests/test_api.py::TestLogin::test_ok --pytest

  # Same test, selector given separately
  trace-working --file tests/test_api.py --pytest --selector TestLogin::test_ok

  # Leave HEAD on the working commit
  trace-working --file tool.sh --cmd "sh" --no-restore

  # List the commits that would be checked
  trace-working --file tool.sh --cmd "sh" --dry-run

Exit Codes:
  0 - Trace finished (whether or not a working commit was found)
  1 - Repository, checkout, command launch or restore failure
  2 - Invalid arguments or uncommitted changes in the work tree
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "--file", "-f",
        metavar="PATH[::SELECTOR]",
        required=True,
        help="File to check, optionally with a test selector"
    )
    parser.add_argument(
        "--cmd", "-c",
        metavar="COMMAND",
        help="Command that checks the file; the path is appended unless "
             "already present (required unless --pytest)"
    )

    parser.add_argument(
        "--repo", "-r",
        metavar="PATH",
        default=".",
        help="Path to git repository (default: current directory)"
    )
    parser.add_argument(
        "--restore", "-R",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Check the original HEAD back out when done (default: yes)"
    )
    parser.add_argument(
        "--pytest", "-p",
        action="store_true",
        help="Run 'pytest PATH[::SELECTOR]' instead of --cmd"
    )
    parser.add_argument(
        "--selector", "-k",
        metavar="SELECTOR",
        help="Test selector for --pytest, overrides one given in --file"
    )
    parser.add_argument(
        "--timeout",
        metavar="SECONDS",
        type=float,
        help="Kill a check after this many seconds and count it as failing"
    )
    parser.add_argument(
        "--report",
        metavar="FILE",
        help="Write a JSON report of every commit inspected"
    )
    parser.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="List commits containing the file without checking them out"
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Run even if the work tree has uncommitted changes (they will be lost)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    return parser


def main(argv=None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (default: sys.argv[1:]).

    Returns:
        Exit code.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not parse_target(args.file).path.strip():
        parser.error("--file needs a file path")
    if not args.pytest and not args.cmd:
        parser.error("--cmd is required (unless using --pytest)")
    if args.selector and not args.pytest:
        parser.error("--selector only applies together with --pytest")
    if args.timeout is not None and args.timeout <= 0:
        parser.error("--timeout must be positive")

    Colors.init()

    runner = TraceRunner(
        repo_path=args.repo,
        target=args.file,
        command=args.cmd,
        pytest_mode=args.pytest,
        selector=args.selector,
        restore=args.restore,
        timeout=args.timeout,
        report_file=args.report,
        dry_run=args.dry_run,
        force=args.force,
        verbose=args.verbose,
    )

    return runner.run()


if __name__ == "__main__":
    sys.exit(main())
