"""Data models for MediaStamp."""

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Callable


class MediaKind(Enum):
    """Media family detected from file content."""
    IMAGE = "image"
    VIDEO = "video"
    UNSUPPORTED = "unsupported"


class TimestampSource(Enum):
    """Where a capture timestamp was read from."""
    EXIF = "exif"
    VIDEO_METADATA = "video-metadata"


class OutcomeStatus(Enum):
    """Terminal state of one file's pipeline."""
    MOVED = "moved"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class MediaFile:
    """A classified input file.

    Uses __slots__ since one is created per input entry.
    """
    path: str
    kind: MediaKind
    extension: str = ""

    @property
    def filename(self) -> str:
        """Get the filename from the path."""
        return os.path.basename(self.path)

    @property
    def is_supported(self) -> bool:
        return self.kind is not MediaKind.UNSUPPORTED


@dataclass(frozen=True, slots=True)
class ImageMetadata:
    """EXIF fields consumed from an image.

    Both fields are raw strings exactly as ExifTool reports them, e.g.
    "2023:05:10 14:22:31" and "+02:00".
    """
    date_time_original: Optional[str] = None
    offset_time_original: Optional[str] = None

    @classmethod
    def from_tags(cls, tags: Optional[dict]) -> "ImageMetadata":
        """Create from an ExifTool tag dict, keeping only usable strings.

        ExifTool may report numbers or lists for damaged fields; those are
        treated as missing.
        """
        if not tags:
            return cls()

        def text(*keys: str) -> Optional[str]:
            for key in keys:
                value = tags.get(key)
                if isinstance(value, str) and value.strip():
                    return value.strip()
            return None

        return cls(
            date_time_original=text("EXIF:DateTimeOriginal", "DateTimeOriginal"),
            offset_time_original=text("EXIF:OffsetTimeOriginal", "OffsetTimeOriginal"),
        )


@dataclass(frozen=True, slots=True)
class VideoMetadata:
    """Container-level fields consumed from a video probe."""
    creation_time: Optional[str] = None

    @classmethod
    def from_probe(cls, data: Optional[dict]) -> "VideoMetadata":
        """Create from ffprobe JSON output (the ``format.tags`` block)."""
        if not isinstance(data, dict):
            return cls()
        fmt = data.get("format")
        tags = fmt.get("tags") if isinstance(fmt, dict) else None
        if not isinstance(tags, dict):
            return cls()
        value = tags.get("creation_time")
        if isinstance(value, str) and value.strip():
            return cls(creation_time=value.strip())
        return cls()


@dataclass(frozen=True, slots=True)
class CaptureTimestamp:
    """The instant a file was recorded, as declared by its metadata.

    ``instant`` is always timezone-aware.
    """
    instant: datetime
    source: TimestampSource


@dataclass(frozen=True)
class BatchOutcome:
    """Result of processing a single input file."""
    source: str
    status: OutcomeStatus
    destination: Optional[str] = None
    reason: str = ""
    error_kind: Optional[str] = None  # Error class name, e.g. "TimestampAbsent"
    timestamp: Optional[CaptureTimestamp] = None

    @classmethod
    def moved(cls, source: str, destination: str,
              timestamp: Optional[CaptureTimestamp] = None) -> "BatchOutcome":
        return cls(source, OutcomeStatus.MOVED, destination=destination, timestamp=timestamp)

    @classmethod
    def skipped(cls, source: str, reason: str, error_kind: Optional[str] = None) -> "BatchOutcome":
        return cls(source, OutcomeStatus.SKIPPED, reason=reason, error_kind=error_kind)

    @classmethod
    def failed(cls, source: str, reason: str, error_kind: Optional[str] = None,
               destination: Optional[str] = None) -> "BatchOutcome":
        return cls(source, OutcomeStatus.FAILED, destination=destination,
                   reason=reason, error_kind=error_kind)

    @property
    def filename(self) -> str:
        return os.path.basename(self.source)

    def to_dict(self) -> dict:
        """Plain dict for the JSON run report."""
        return {
            "source": self.source,
            "status": self.status.value,
            "destination": self.destination,
            "reason": self.reason,
            "error_kind": self.error_kind,
            "captured_at": self.timestamp.instant.isoformat() if self.timestamp else None,
            "timestamp_source": self.timestamp.source.value if self.timestamp else None,
        }


@dataclass
class RunResult:
    """Results from a batch run.

    Returned by BatchOrchestrator.run().
    """
    input_dir: str
    output_dir: str
    outcomes: List[BatchOutcome] = field(default_factory=list)
    elapsed_time: float = 0.0
    start_time: str = ""
    end_time: str = ""
    dry_run: bool = False
    summary_file: Optional[str] = None
    report_file: Optional[str] = None

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def moved(self) -> int:
        return self._count(OutcomeStatus.MOVED)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    def with_status(self, status: OutcomeStatus) -> List[BatchOutcome]:
        """Get outcomes with the given status, in input order."""
        return [o for o in self.outcomes if o.status is status]


# Type alias for progress callbacks
# (current_item, total_items, message) -> None
ProgressCallback = Callable[[int, int, str], None]
