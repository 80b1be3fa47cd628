"""OS-level file timestamp updates.

After a file is moved its creation/modification times are set to the
capture date, so file browsers sort it correctly. This is always
best-effort: callers log TimestampUpdateError and carry on.
"""

import logging
import shutil
import subprocess
import sys
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

import filedate

from mediastamp.core.errors import TimestampUpdateError

logger = logging.getLogger(__name__)

# SetFile date format: mm/dd/yyyy hh:mm:ss (local time)
SETFILE_FORMAT = "%m/%d/%Y %H:%M:%S"
SETFILE_TIMEOUT = 30


def _local_naive(instant: datetime) -> datetime:
    """Convert to the machine's local time, which file APIs expect."""
    if instant.tzinfo is None:
        return instant
    return instant.astimezone().replace(tzinfo=None)


class TimestampUpdater(ABC):
    """Sets a file's on-disk dates to a capture instant."""

    @abstractmethod
    def update(self, path: str, instant: datetime) -> None:
        """Set file dates.

        Raises:
            TimestampUpdateError: If the dates could not be set.
        """


class NullTimestampUpdater(TimestampUpdater):
    """Leaves file dates untouched."""

    def update(self, path: str, instant: datetime) -> None:
        pass


class FiledateTimestampUpdater(TimestampUpdater):
    """Uses filedate (Windows and Linux).

    Windows can set the creation time; Linux has no API for birth time, so
    only modified/accessed times are set there.
    """

    def __init__(self, set_created: bool = True):
        self.set_created = set_created

    def update(self, path: str, instant: datetime) -> None:
        try:
            local = _local_naive(instant)
            if self.set_created:
                dates = {"created": local, "modified": local}
            else:
                dates = {"modified": local, "accessed": local}
            filedate.File(path).set(**dates)
        except Exception as e:
            raise TimestampUpdateError(f"Could not set file dates on {path}: {e}") from e


class SetFileTimestampUpdater(TimestampUpdater):
    """Uses the macOS SetFile tool (Xcode command line tools).

    SetFile is the only way to change the birth time shown by Finder.
    """

    def __init__(self, executable: Optional[str] = None, timeout: float = SETFILE_TIMEOUT):
        self.executable = executable or shutil.which("SetFile") or "SetFile"
        self.timeout = timeout

    def update(self, path: str, instant: datetime) -> None:
        try:
            stamp = _local_naive(instant).strftime(SETFILE_FORMAT)
        except (OverflowError, ValueError, OSError) as e:
            raise TimestampUpdateError(f"Cannot express {instant} as a local file date: {e}") from e

        try:
            proc = subprocess.run(
                [self.executable, "-d", stamp, "-m", stamp, path],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise TimestampUpdateError(f"Failed to update creation date of {path}: {e}") from e

        if proc.returncode != 0 or proc.stderr.strip():
            detail = proc.stderr.strip() or f"exit code {proc.returncode}"
            raise TimestampUpdateError(f"Failed to update creation date of {path}: {detail}")


def get_timestamp_updater(platform: Optional[str] = None) -> TimestampUpdater:
    """Pick the timestamp updater for a platform.

    Args:
        platform: sys.platform style name (default: current platform).

    Returns:
        SetFileTimestampUpdater on macOS, FiledateTimestampUpdater elsewhere.
    """
    platform = platform or sys.platform
    if platform == "darwin":
        return SetFileTimestampUpdater()
    if platform == "win32":
        return FiledateTimestampUpdater(set_created=True)
    return FiledateTimestampUpdater(set_created=False)
