"""Utility functions for file and path operations."""

import os
import time
import uuid
from typing import Optional


def exists(path: Optional[str]) -> bool:
    """Check if a path exists.

    Args:
        path: Path to check, or None.

    Returns:
        True if path exists, False if path is None or doesn't exist.
    """
    if path:
        return os.path.lexists(path)
    return False


def reserve_path(path: str) -> bool:
    """Atomically claim a file path by creating an empty placeholder.

    Uses os.open() with O_CREAT | O_EXCL, which fails if anything already
    exists at the path. Two threads racing for the same name can never both
    succeed, so no external locking is needed.

    Args:
        path: File path to claim.

    Returns:
        True if the placeholder was created, False if the path was taken.
    """
    try:
        fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
    except FileExistsError:
        return False
    os.close(fd)
    return True


def release_path(path: str) -> None:
    """Remove a placeholder left by reserve_path(), if it is still empty."""
    try:
        if os.path.isfile(path) and os.path.getsize(path) == 0:
            os.remove(path)
    except OSError:
        pass


def make_disambiguator() -> str:
    """Build a filename suffix that is unique across calls and threads.

    Combines a nanosecond timestamp (distinct between sequential calls) with
    a random UUID4 (distinct between concurrent calls).

    Example:
        >>> make_disambiguator()
        '_1683728551123456789_0b6c0f5e-8a3e-4a8a-9d0e-3b1f6f1d2c11'
    """
    return f"_{time.time_ns()}_{uuid.uuid4()}"


def checkout_dir(path: str) -> str:
    """Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path.

    Returns:
        Path to the directory.

    Raises:
        ValueError: If path exists as a file (not a directory).
    """
    if os.path.isfile(path):
        raise ValueError(f"Cannot create directory: {path} exists as a file")

    if not os.path.isdir(path):
        os.makedirs(path)
    return path


def normalize_path(path: str) -> str:
    """Normalize a path for consistent handling.

    Handles:
    - Trailing slashes
    - Mixed forward/backward slashes
    - User home directory (~)
    - Leading/trailing whitespace

    Args:
        path: Path to normalize.

    Returns:
        Normalized absolute path.
    """
    return os.path.abspath(os.path.normpath(os.path.expanduser(path.strip())))
