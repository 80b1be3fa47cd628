"""ffprobe wrapper for reading video container metadata."""

import logging
import os
import shutil
import subprocess
from typing import Optional

import orjson

from mediastamp.core.errors import MetadataExtractionError

logger = logging.getLogger(__name__)

# Seconds before a single probe is abandoned
PROBE_TIMEOUT = 60


def get_ffprobe_path() -> Optional[str]:
    """Find the ffprobe executable (FFPROBE_PATH, then system PATH)."""
    env_path = os.environ.get("FFPROBE_PATH")
    if env_path and os.path.exists(env_path):
        return env_path
    return shutil.which("ffprobe")


def is_ffprobe_available() -> bool:
    return get_ffprobe_path() is not None


class FFProbe:
    """Runs ffprobe and decodes its JSON output.

    Usage:
        probe = FFProbe()
        data = probe.probe_format("/path/to/clip.mp4")
        tags = data["format"].get("tags", {})
    """

    def __init__(self, executable: Optional[str] = None, timeout: float = PROBE_TIMEOUT):
        self._executable = executable
        self.timeout = timeout

    @property
    def executable(self) -> Optional[str]:
        if self._executable is None:
            self._executable = get_ffprobe_path()
        return self._executable

    def build_command(self, filepath: str) -> list:
        return [
            self.executable,
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            filepath,
        ]

    def probe_format(self, filepath: str) -> dict:
        """Read format-level metadata from a media file.

        Args:
            filepath: Path to the video.

        Returns:
            Decoded ffprobe JSON (contains a "format" block).

        Raises:
            MetadataExtractionError: If ffprobe is missing, fails, times out
                or prints something that is not a JSON object.
        """
        if not self.executable:
            raise MetadataExtractionError("ffprobe not found. Install FFmpeg or set FFPROBE_PATH")

        try:
            proc = subprocess.run(
                self.build_command(filepath),
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise MetadataExtractionError(
                f"ffprobe timed out after {self.timeout}s on {filepath}"
            ) from e
        except OSError as e:
            raise MetadataExtractionError(f"Cannot run ffprobe: {e}") from e

        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            raise MetadataExtractionError(
                f"ffprobe exited with {proc.returncode} on {filepath}"
                + (f": {stderr}" if stderr else "")
            )

        try:
            data = orjson.loads(proc.stdout)
        except orjson.JSONDecodeError as e:
            raise MetadataExtractionError(f"Unreadable ffprobe output for {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise MetadataExtractionError(f"Unexpected ffprobe output for {filepath}")
        return data
