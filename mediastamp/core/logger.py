"""Run logging for MediaStamp.

Console output goes through the standard ``logging`` module. The classes
here write the per-run files into an optional log directory:

- verbose.txt: every operation (only with verbose=True)
- summary.txt: counts plus one line per skipped/failed file
- outcomes.json: machine-readable list of every outcome
"""

import os
import threading
import time
from typing import Optional, TextIO, Union

import orjson

from mediastamp.core.models import BatchOutcome, OutcomeStatus, RunResult


class BufferedLogger:
    """Buffered file logger with context manager support.

    Safe to call from worker threads.

    Usage:
        with BufferedLogger("/path/to/logs") as logger:
            logger.log("Processing started")
        # File is automatically closed
    """

    def __init__(self, output_dir: str, filename: str = "verbose.txt"):
        """Initialize logger.

        Args:
            output_dir: Directory to write log file.
            filename: Name of log file (default: verbose.txt).
        """
        self.output_dir = output_dir
        self.filename = filename
        self.filepath = os.path.join(output_dir, filename)
        self._handle: Optional[TextIO] = None
        self._lock = threading.Lock()

    def _open(self) -> None:
        """Open the log file for writing (lazy initialization)."""
        if self._handle is None:
            os.makedirs(self.output_dir, exist_ok=True)
            self._handle = open(self.filepath, "a", encoding="utf-8")

    def log(self, message: str) -> None:
        """Write a timestamped message to the log.

        Args:
            message: Message to log.
        """
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        with self._lock:
            self._open()  # Lazy open on first log
            self._handle.write(f"{timestamp} - {message}\n")

    def close(self) -> None:
        """Close the log file."""
        with self._lock:
            if self._handle:
                self._handle.close()
                self._handle = None

    def __enter__(self) -> "BufferedLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class NullLogger:
    """A logger that does nothing - useful for testing or when logging is disabled."""

    def log(self, message: str) -> None:
        pass

    def close(self) -> None:
        pass

    def __enter__(self) -> "NullLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        pass


def create_logger(output_dir: Optional[str], enabled: bool = True) -> Union[BufferedLogger, NullLogger]:
    """Create a logger instance.

    Args:
        output_dir: Directory for log file.
        enabled: If False (or no directory), returns a NullLogger.

    Returns:
        Configured logger instance.
    """
    if enabled and output_dir:
        return BufferedLogger(output_dir)
    return NullLogger()


def format_outcome(outcome: BatchOutcome) -> str:
    """One-line rendering: STATUS | source | destination | reason."""
    parts = [outcome.status.value.upper(), outcome.source]
    parts.append(outcome.destination or "-")
    parts.append(outcome.reason or "-")
    return " | ".join(parts)


def _format_duration(elapsed_time: float) -> str:
    if elapsed_time >= 60:
        minutes = int(elapsed_time // 60)
        seconds = int(elapsed_time % 60)
        return f"{minutes}m {seconds}s"
    return f"{elapsed_time:.1f}s"


class RunLogger:
    """Writes all per-run files. A RunLogger without a log_dir writes nothing.

    Usage:
        with RunLogger("/path/to/logs", verbose=True) as run_logger:
            run_logger.log("Started")
            run_logger.record(outcome)
            run_logger.write_summary(result)
    """

    SUMMARY_FILENAME = "summary.txt"
    REPORT_FILENAME = "outcomes.json"

    def __init__(self, log_dir: Optional[str] = None, verbose: bool = False):
        """Initialize run logger.

        Args:
            log_dir: Directory for log files, or None to disable file output.
            verbose: Whether to create verbose.txt.
        """
        self.log_dir = log_dir
        self.verbose = verbose
        self._verbose_logger = create_logger(log_dir, enabled=verbose)

        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

    @property
    def enabled(self) -> bool:
        return bool(self.log_dir)

    def log(self, message: str) -> None:
        """Log a message to verbose.txt (if verbose mode enabled)."""
        self._verbose_logger.log(message)

    def record(self, outcome: BatchOutcome) -> None:
        """Log one outcome as a structured line."""
        self._verbose_logger.log(format_outcome(outcome))

    def close(self) -> None:
        self._verbose_logger.close()

    def __enter__(self) -> "RunLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def write_summary(self, result: RunResult) -> Optional[str]:
        """Write concise summary.txt.

        Returns:
            Path to summary file, or None if file output is disabled.
        """
        if not self.log_dir:
            return None

        filepath = os.path.join(self.log_dir, self.SUMMARY_FILENAME)
        title = "MediaStamp - Preview Summary" if result.dry_run else "MediaStamp - Run Summary"

        with open(filepath, "w", encoding="utf-8") as f:
            f.write(title + "\n")
            f.write("=" * 40 + "\n\n")
            f.write(f"Input:     {result.input_dir}\n")
            f.write(f"Output:    {result.output_dir}\n")
            f.write(f"Started:   {result.start_time}\n")
            f.write(f"Completed: {result.end_time}\n")
            f.write(f"Duration:  {_format_duration(result.elapsed_time)}\n\n")

            f.write(f"Files Moved:    {result.moved:,}\n")
            f.write(f"Files Skipped:  {result.skipped:,}\n")
            f.write(f"Files Failed:   {result.failed:,}\n")

            for status, heading in (
                (OutcomeStatus.SKIPPED, "Skipped files"),
                (OutcomeStatus.FAILED, "Failed files"),
            ):
                items = result.with_status(status)
                if not items:
                    continue
                f.write(f"\n{heading}:\n")
                for outcome in items:
                    f.write(f"    {outcome.filename} | {outcome.reason}\n")

        return filepath

    def write_report(self, result: RunResult) -> Optional[str]:
        """Write outcomes.json with every outcome.

        Returns:
            Path to report file, or None if file output is disabled.
        """
        if not self.log_dir:
            return None

        filepath = os.path.join(self.log_dir, self.REPORT_FILENAME)
        payload = {
            "input_dir": result.input_dir,
            "output_dir": result.output_dir,
            "dry_run": result.dry_run,
            "start_time": result.start_time,
            "end_time": result.end_time,
            "elapsed_time": result.elapsed_time,
            "moved": result.moved,
            "skipped": result.skipped,
            "failed": result.failed,
            "outcomes": [o.to_dict() for o in result.outcomes],
        }
        with open(filepath, "wb") as f:
            f.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
        return filepath
