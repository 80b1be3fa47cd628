"""Moving media files into the output directory."""

import errno
import logging
import os
import shutil
from datetime import datetime
from typing import Optional

from mediastamp.core.errors import MoveError, MoveVerificationError, TimestampUpdateError
from mediastamp.core.logger import RunLogger
from mediastamp.core.timestamps import NullTimestampUpdater, TimestampUpdater
from mediastamp.core.utils import release_path

logger = logging.getLogger(__name__)


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def move_file(source: str, destination: str) -> None:
    """Move a file, falling back to copy-then-delete across filesystems.

    The destination may already hold an empty placeholder from
    DestinationResolver; it is replaced. The source is only deleted once a
    complete copy exists at the destination.

    Args:
        source: File to move.
        destination: Target path.

    Raises:
        MoveError: If the move fails. The source is left in place and the
            destination placeholder or partial copy is removed.
        MoveVerificationError: If the destination is missing or incomplete
            after the move reported success.
    """
    try:
        expected_size = os.path.getsize(source)
    except OSError as e:
        release_path(destination)
        raise MoveError(f"Cannot read source {source}: {e}") from e

    try:
        os.replace(source, destination)
    except OSError as e:
        if e.errno != errno.EXDEV:
            release_path(destination)
            raise MoveError(f"Failed to move {source} to {destination}: {e}") from e
        _copy_then_delete(source, destination, expected_size)

    if not os.path.isfile(destination) or os.path.getsize(destination) != expected_size:
        raise MoveVerificationError(
            f"Post-move verification failed: {destination} not found after move"
        )


def _copy_then_delete(source: str, destination: str, expected_size: int) -> None:
    """Cross-device move: copy, confirm the copy, then delete the source."""
    try:
        shutil.copy2(source, destination)
    except OSError as e:
        _discard(destination)
        raise MoveError(f"Failed to copy {source} to {destination}: {e}") from e

    if os.path.getsize(destination) != expected_size:
        _discard(destination)
        raise MoveError(f"Incomplete copy of {source} at {destination}")

    try:
        os.remove(source)
    except OSError as e:
        # Keep exactly one copy: the source
        _discard(destination)
        raise MoveError(f"Copied {source} but could not remove it: {e}") from e


class MediaMover:
    """Relocates files and stamps them with their capture date.

    Usage:
        mover = MediaMover(timestamp_updater=get_timestamp_updater())
        mover.relocate(src, dest, instant)
    """

    def __init__(
        self,
        timestamp_updater: Optional[TimestampUpdater] = None,
        run_logger: Optional[RunLogger] = None
    ):
        self.timestamp_updater = timestamp_updater or NullTimestampUpdater()
        self.run_logger = run_logger

    def update_timestamp(self, destination: str, instant: datetime) -> bool:
        """Best-effort OS date update. Never raises.

        The file has already been moved, so no error here may change its
        outcome.

        Returns:
            True if the dates were set.
        """
        try:
            self.timestamp_updater.update(destination, instant)
            return True
        except TimestampUpdateError as e:
            logger.warning(str(e))
        except Exception as e:
            logger.warning(f"Unexpected error setting file dates on {destination}: {e!r}")
        return False

    def relocate(self, source: str, destination: str, instant: Optional[datetime] = None) -> str:
        """Move a file and, if instant is given, set its file dates.

        Args:
            source: File to move.
            destination: Resolved destination path.
            instant: Capture instant for the OS timestamp update.

        Returns:
            The destination path.

        Raises:
            MoveError: If the move fails.
            MoveVerificationError: If the destination is missing afterwards.
        """
        logger.info(f"Moving file from {source} to {destination}")
        move_file(source, destination)

        if instant is not None and not self.update_timestamp(destination, instant):
            if self.run_logger:
                self.run_logger.log(f"Warning: could not set file dates on {destination}")
        return destination
