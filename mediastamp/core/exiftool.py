"""ExifTool management for MediaStamp.

Handles finding ExifTool and keeping one batch-mode process alive for the
whole run.
"""

import logging
import os
import shutil
import sys
import threading
from typing import Optional, List

from mediastamp.core.errors import MetadataExtractionError

logger = logging.getLogger(__name__)

# ExifTool paths
EXIFTOOL_DIR = os.path.join("tools", "exiftool")
EXIFTOOL_EXE = "exiftool.exe" if sys.platform == "win32" else "exiftool"

# Tags read for capture dates
DATE_TAGS = ["EXIF:DateTimeOriginal", "EXIF:OffsetTimeOriginal"]


def _default_base_dir() -> str:
    # Go up from mediastamp/core/ to project root
    return os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def get_exiftool_path(base_dir: Optional[str] = None) -> Optional[str]:
    """Find ExifTool executable.

    Checks in order:
    1. EXIFTOOL_PATH environment variable
    2. System PATH
    3. Local tools directory

    Args:
        base_dir: Base directory for local tools folder.
                 Defaults to the project root.

    Returns:
        Path to exiftool executable, or None if not found.
    """
    env_path = os.environ.get("EXIFTOOL_PATH")
    if env_path and os.path.exists(env_path):
        return env_path

    if shutil.which("exiftool"):
        return "exiftool"

    if base_dir is None:
        base_dir = _default_base_dir()

    local_path = os.path.join(base_dir, EXIFTOOL_DIR, EXIFTOOL_EXE)
    if os.path.exists(local_path):
        return local_path

    logger.warning("ExifTool not found. Install from https://exiftool.org/")
    return None


def is_exiftool_available() -> bool:
    """Check if ExifTool is available.

    Returns:
        True if ExifTool can be found.
    """
    if shutil.which("exiftool"):
        return True

    env_path = os.environ.get("EXIFTOOL_PATH")
    if env_path and os.path.exists(env_path):
        return True

    local_path = os.path.join(_default_base_dir(), EXIFTOOL_DIR, EXIFTOOL_EXE)
    return os.path.exists(local_path)


def get_install_instructions() -> str:
    """Get manual installation instructions."""
    return (
        "ExifTool not found. File types and image dates cannot be read without it.\n"
        "  1. Download from https://exiftool.org/\n"
        "  2. Place it in PATH, in ./tools/exiftool/, or set EXIFTOOL_PATH"
    )


class ExifToolManager:
    """Manages the ExifTool process used to read file types and image dates.

    ExifToolHelper talks to a single stay-open process over pipes, so calls
    from worker threads are serialized with a lock.

    Usage:
        with ExifToolManager() as et:
            tags = et.read_tags("/path/to/file.jpg")
    """

    def __init__(self, base_dir: Optional[str] = None):
        """Initialize manager.

        Args:
            base_dir: Base directory for local tools folder.
        """
        self._helper = None
        self._base_dir = base_dir
        self._lock = threading.Lock()
        self.error: Optional[str] = None

    def start(self) -> bool:
        """Start ExifTool process.

        Returns:
            True if started successfully, False otherwise. On failure the
            reason is kept in ``error``.
        """
        try:
            import exiftool
        except ImportError:
            self.error = "pyexiftool not installed. Run: pip install pyexiftool"
            logger.warning(self.error)
            return False

        exiftool_path = get_exiftool_path(self._base_dir)
        if not exiftool_path:
            self.error = "ExifTool executable not found"
            return False

        try:
            self._helper = exiftool.ExifToolHelper(executable=exiftool_path)
            self._helper.run()
            return True
        except Exception as e:
            self._helper = None
            self.error = f"Failed to start ExifTool: {e}"
            logger.error(self.error)
            return False

    def stop(self) -> None:
        """Stop ExifTool process."""
        if self._helper:
            try:
                self._helper.terminate()
            except Exception as e:
                logger.debug(f"Error stopping ExifTool: {e}")
            self._helper = None

    def read_tags(self, filepath: str, tags: Optional[List[str]] = None) -> dict:
        """Read tags from a file.

        Args:
            filepath: Path to file.
            tags: Tags to read (default: DATE_TAGS).

        Returns:
            Dict of tag values as reported by ExifTool. Missing tags are
            simply absent from the dict.

        Raises:
            MetadataExtractionError: If ExifTool is not running or fails on
                the file.
        """
        if not self._helper:
            raise MetadataExtractionError(self.error or "ExifTool is not running")

        try:
            with self._lock:
                result = self._helper.get_tags(filepath, tags or DATE_TAGS)
        except Exception as e:
            raise MetadataExtractionError(f"ExifTool failed on {filepath}: {e}") from e
        return result[0] if result else {}

    @property
    def is_running(self) -> bool:
        """Check if ExifTool is running."""
        return self._helper is not None

    def __enter__(self) -> "ExifToolManager":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.stop()
