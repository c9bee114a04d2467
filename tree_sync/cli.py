"""Command-line interface for tree sync."""

import argparse
import logging
import sys
from pathlib import Path

from tqdm import tqdm

from .models import HardLinkFallback
from .report import (
    EXIT_INTERRUPTED,
    EXIT_USAGE,
    exit_code_for,
    print_summary,
    write_report,
)
from .walker import sync_tree

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with the usage code instead of 2."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        print(f"{self.prog}: error: {message}", file=sys.stderr)
        sys.exit(EXIT_USAGE)


def _parallelism(value: str) -> int:
    try:
        workers = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid parallelism: {value!r}")
    if workers < 1:
        raise argparse.ArgumentTypeError(f"parallelism must be at least 1, got {workers}")
    return workers


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = _ArgumentParser(
        prog="tree-sync",
        description="Sync files, folders, subfolders and links from one mount path to another.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s /mnt/source /mnt/backup 8
  %(prog)s --report failures.json --hardlink-fallback copy /data /mnt/usb/data 4
        """
    )

    parser.add_argument("source", type=Path, help="Source directory")
    parser.add_argument("destination", type=Path, help="Destination path")
    parser.add_argument("parallelism", type=_parallelism,
                        help="Maximum number of copy tasks running at once")

    parser.add_argument(
        "--report", "-r",
        type=Path,
        default=None,
        help="Write a JSON report of the run, failures included"
    )

    parser.add_argument(
        "--hardlink-fallback",
        choices=[f.value for f in HardLinkFallback],
        default=HardLinkFallback.FAIL.value,
        help="What to do when a hard link cannot cross filesystems: "
             "'fail' reports an error, 'copy' copies the first alias and links "
             "the rest to it (default: fail)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every entry as it is copied"
    )

    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not show the progress bar"
    )

    return parser.parse_args(argv)


def validate_args(args: argparse.Namespace) -> None:
    """Validate command-line arguments."""
    if not args.source.exists():
        print(f"Error: Source does not exist: {args.source}")
        sys.exit(EXIT_USAGE)
    if not args.source.is_dir():
        print(f"Error: Source is not a directory: {args.source}")
        sys.exit(EXIT_USAGE)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )


def main(argv=None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    validate_args(args)
    configure_logging(args.verbose)

    print("=" * 60)
    print("TREE SYNC")
    print("=" * 60)
    print(f"Source:      {args.source.absolute()}")
    print(f"Destination: {args.destination.absolute()}")
    print(f"Workers:     {args.parallelism}")

    try:
        with tqdm(desc="Syncing", unit="entry", disable=args.no_progress) as pbar:
            result = sync_tree(
                args.source.absolute(),
                args.destination.absolute(),
                args.parallelism,
                hardlink_fallback=HardLinkFallback(args.hardlink_fallback),
                on_progress=lambda entry: pbar.update(1),
            )
    except KeyboardInterrupt:
        print("\n\nInterrupted! The destination may be incomplete.")
        print("Run the same command again to finish the sync.")
        sys.exit(EXIT_INTERRUPTED)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(EXIT_USAGE)

    print_summary(result)
    if args.report is not None:
        write_report(args.report, result)
        print(f"Report saved to: {args.report}")

    sys.exit(exit_code_for(result.status))
