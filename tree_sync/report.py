"""Reporting of sync outcomes."""

import json
from pathlib import Path

from .models import SyncResult, SyncStatus

EXIT_SUCCESS = 0
EXIT_USAGE = 1
EXIT_PARTIAL = 2
EXIT_FAILED = 3
EXIT_INTERRUPTED = 130

MAX_LISTED_FAILURES = 10


def exit_code_for(status: SyncStatus) -> int:
    """Map a sync status to the process exit code."""
    return {
        SyncStatus.SUCCESS: EXIT_SUCCESS,
        SyncStatus.PARTIAL: EXIT_PARTIAL,
        SyncStatus.FAILED: EXIT_FAILED,
    }[status]


def print_summary(result: SyncResult) -> None:
    """Print the end-of-run summary, listing the first failures."""
    if result.failures:
        print(f"\n--- Copy Errors ({len(result.failures)} entries failed) ---")
        for failure in result.failures[:MAX_LISTED_FAILURES]:
            print(f"  [{failure.kind.value}] {failure.path}")
            print(f"    {failure.error}")
        if len(result.failures) > MAX_LISTED_FAILURES:
            print(f"  ... and {len(result.failures) - MAX_LISTED_FAILURES} more errors")
        print("-" * 20)

    print("\n" + "=" * 60)
    if result.status is SyncStatus.SUCCESS:
        print("SYNC COMPLETE!")
    elif result.status is SyncStatus.PARTIAL:
        print("SYNC COMPLETED WITH ERRORS")
    else:
        print("SYNC FAILED")
    print("=" * 60)
    print(f"Destination: {result.destination}")
    print(f"  - Directories: {result.directories}")
    print(f"  - Files copied: {result.files}")
    print(f"  - Symbolic links: {result.symlinks}")
    print(f"  - Hard links: {result.hardlinks}")
    if result.skipped:
        print(f"  - Skipped (already present or special): {result.skipped}")
    if result.failures:
        print(f"  - Errors: {len(result.failures)}")


def write_report(path: Path, result: SyncResult) -> None:
    """Write the result, failures included, as JSON."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, indent=2)
