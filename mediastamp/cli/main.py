"""Command-line interface for MediaStamp."""

import argparse
import logging
import shutil
import sys
from typing import List, Optional

from tqdm import tqdm

from mediastamp import __version__
from mediastamp.core.config import SortConfig, load_config_file
from mediastamp.core.errors import ConfigError, DirectoryReadError
from mediastamp.core.exiftool import get_install_instructions, is_exiftool_available
from mediastamp.core.ffprobe import is_ffprobe_available
from mediastamp.core.models import OutcomeStatus, RunResult
from mediastamp.core.orchestrator import BatchOrchestrator
from mediastamp.core.utils import exists, normalize_path


# Program description
DESCRIPTION = """MediaStamp

Renames the photos and videos in an input folder after the moment they were
captured, and moves them into an output folder:

    input/IMG_4711.JPG  ->  output/2023-05-10_14-22-31.jpg

Dates come from EXIF DateTimeOriginal (images, via ExifTool) or the container
creation_time (videos, via ffprobe), never from filesystem dates. Files
without a usable date are left where they are.
"""

# Failures/skips listed on the console
MAX_LISTED = 10


def create_progress_callback(desc: str = "Processing"):
    """Create a tqdm-based progress callback.

    Args:
        desc: Description for progress bar.

    Returns:
        Tuple of (callback function, tqdm instance).
    """
    pbar = tqdm(total=100, desc=desc)

    # Leave room for progress bar elements (percentage, bar, counts)
    terminal_width = shutil.get_terminal_size().columns
    max_desc_width = max(20, min(80, terminal_width - 40))

    def callback(current: int, total: int, message: str):
        pbar.total = total
        pbar.n = current
        if len(message) > max_desc_width:
            message = message[:max_desc_width - 3] + "..."
        pbar.set_description(message)
        pbar.refresh()

    return callback, pbar


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr (INFO with --verbose, WARNING otherwise)."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


def build_config(parsed: argparse.Namespace) -> SortConfig:
    """Combine defaults, an optional config file and command-line flags.

    Precedence: command line > config file > defaults.

    Raises:
        ConfigError: If the config file is unreadable.
    """
    file_values = load_config_file(normalize_path(parsed.config)) if parsed.config else {}

    workdir = normalize_path(parsed.workdir) if parsed.workdir else None
    config = SortConfig.from_workdir(workdir, **file_values)

    return config.merged(
        input_dir=normalize_path(parsed.input) if parsed.input else None,
        output_dir=normalize_path(parsed.output) if parsed.output else None,
        display_timezone=parsed.timezone,
        hidden_prefix=parsed.hidden_prefix,
        workers=parsed.workers,
        update_timestamps=False if parsed.no_timestamp_update else None,
    )


def print_result(result: RunResult) -> None:
    """Print counts and the first few skip/failure reasons."""
    moved_label = "Would move" if result.dry_run else "Moved"

    if result.dry_run:
        for outcome in result.with_status(OutcomeStatus.MOVED):
            print(f"  {outcome.filename} -> {outcome.destination}")

    for status, heading in (
        (OutcomeStatus.SKIPPED, "Skipped"),
        (OutcomeStatus.FAILED, "Failed"),
    ):
        items = result.with_status(status)
        if not items:
            continue
        print(f"\n{heading}:")
        for outcome in items[:MAX_LISTED]:
            print(f"  {outcome.filename}: {outcome.reason}")
        if len(items) > MAX_LISTED:
            print(f"  ... and {len(items) - MAX_LISTED} more")

    print("\nFinished!")
    print(f"{moved_label}: {result.moved} files")
    print(f"Skipped: {result.skipped} files")
    print(f"Failed: {result.failed} files")
    print(f"Time used: {result.elapsed_time} seconds")
    if result.summary_file:
        print(f"\nSummary:\n  {result.summary_file}")


def run_sort(
    config: SortConfig,
    dry_run: bool = False,
    log_dir: Optional[str] = None,
    verbose: bool = False
) -> int:
    """Run a batch (or a preview of one).

    Args:
        config: Run configuration.
        dry_run: If True, only report where files would go.
        log_dir: Optional directory for summary/report files.
        verbose: If True, log all operations.

    Returns:
        Exit code (0 success, 1 fatal error, 2 some files failed).
    """
    if not exists(config.input_dir):
        print(f"Error: Input directory does not exist: {config.input_dir}")
        return 1

    if dry_run:
        print("\n=== DRY RUN MODE ===")
        print("No files will be moved or created.\n")

    print(f"Input:    {config.input_dir}")
    print(f"Output:   {config.output_dir}")
    print(f"Timezone: {config.display_timezone}")

    if not is_exiftool_available():
        print(f"\n{get_install_instructions()}")
    if not is_ffprobe_available():
        print("\nffprobe not found. Video dates cannot be read without FFmpeg.")

    try:
        orchestrator = BatchOrchestrator(config, log_dir=log_dir, verbose=verbose)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    callback, pbar = create_progress_callback("Processing")
    try:
        result = orchestrator.run(on_progress=callback, dry_run=dry_run)
    except (DirectoryReadError, ConfigError) as e:
        print(f"\nError: {e}")
        return 1
    finally:
        pbar.close()

    print_result(result)

    if result.failed > 0:
        return 2
    return 0


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: Arguments to parse (default: sys.argv[1:]).

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        description=DESCRIPTION,
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "-w", "--workdir",
        help="Base directory holding input/ and output/ (default: current directory)",
        type=str,
        default=None
    )

    parser.add_argument(
        "-i", "--input",
        help="Directory with the files to rename (default: <workdir>/input)",
        type=str,
        default=None
    )

    parser.add_argument(
        "-o", "--output",
        help="Directory that receives renamed files (default: <workdir>/output)",
        type=str,
        default=None
    )

    parser.add_argument(
        "-t", "--timezone",
        help="IANA timezone used for file names (default: Europe/Amsterdam)",
        type=str,
        default=None
    )

    parser.add_argument(
        "--hidden-prefix",
        help="Skip input entries whose name starts with this (default: '.')",
        type=str,
        default=None
    )

    parser.add_argument(
        "-j", "--workers",
        help="Number of files processed in parallel (default: 8)",
        type=int,
        default=None
    )

    parser.add_argument(
        "-c", "--config",
        help="JSON file with default settings",
        type=str,
        default=None
    )

    parser.add_argument(
        "--dry-run",
        help="Show where files would go without moving anything",
        action="store_true"
    )

    parser.add_argument(
        "--no-timestamp-update",
        help="Do not set file creation/modification dates after moving",
        action="store_true"
    )

    parser.add_argument(
        "--log-dir",
        help="Write summary.txt and outcomes.json to this directory",
        type=str,
        default=None
    )

    parser.add_argument(
        "-v", "--verbose",
        help="Log all operations (default: only warnings and errors)",
        action="store_true"
    )

    return parser.parse_args(args)


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (default: sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parsed = parse_args(args)
    configure_logging(parsed.verbose)

    try:
        config = build_config(parsed)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    log_dir = normalize_path(parsed.log_dir) if parsed.log_dir else None

    return run_sort(config, dry_run=parsed.dry_run, log_dir=log_dir, verbose=parsed.verbose)


if __name__ == "__main__":
    sys.exit(main())
