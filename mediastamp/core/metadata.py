"""Capture timestamp extraction for MediaStamp.

Images are read through ExifTool, videos through ffprobe. Each strategy
turns the raw service output into a typed metadata record first
(ImageMetadata / VideoMetadata), then into a CaptureTimestamp.

Failures are reported with two different errors so they can be logged
differently:
    MetadataExtractionError: the service could not read the file at all.
    TimestampAbsent: the file was read but carries no usable date
        (TimestampInvalid when the field is present but malformed).
"""

import logging
from abc import ABC, abstractmethod
from datetime import timezone, tzinfo
from typing import Dict

from mediastamp.core.dates import parse_exif_datetime, parse_iso_instant
from mediastamp.core.errors import TimestampAbsent
from mediastamp.core.exiftool import ExifToolManager
from mediastamp.core.ffprobe import FFProbe
from mediastamp.core.models import (
    CaptureTimestamp, ImageMetadata, MediaFile, MediaKind,
    TimestampSource, VideoMetadata,
)

logger = logging.getLogger(__name__)


class TimestampStrategy(ABC):
    """Reads a capture timestamp from one kind of metadata source."""

    source: TimestampSource

    @abstractmethod
    def extract(self, path: str) -> CaptureTimestamp:
        """Extract the capture timestamp of a file.

        Raises:
            MetadataExtractionError: If the metadata service fails.
            TimestampAbsent: If no usable date is present.
        """


class ExifTimestampStrategy(TimestampStrategy):
    """DateTimeOriginal from EXIF, via ExifTool."""

    source = TimestampSource.EXIF

    def __init__(self, exiftool: ExifToolManager, default_tz: tzinfo = timezone.utc):
        """
        Args:
            exiftool: Started ExifToolManager.
            default_tz: Zone for EXIF wall-clock dates that have no
                OffsetTimeOriginal.
        """
        self.exiftool = exiftool
        self.default_tz = default_tz

    def read_metadata(self, path: str) -> ImageMetadata:
        return ImageMetadata.from_tags(self.exiftool.read_tags(path))

    def extract(self, path: str) -> CaptureTimestamp:
        metadata = self.read_metadata(path)
        if not metadata.date_time_original:
            raise TimestampAbsent("No DateTimeOriginal in EXIF")

        instant = parse_exif_datetime(
            metadata.date_time_original,
            offset=metadata.offset_time_original,
            default_tz=self.default_tz,
        )
        return CaptureTimestamp(instant, self.source)


class VideoTimestampStrategy(TimestampStrategy):
    """format.tags.creation_time from the container, via ffprobe."""

    source = TimestampSource.VIDEO_METADATA

    def __init__(self, probe: FFProbe):
        self.probe = probe

    def read_metadata(self, path: str) -> VideoMetadata:
        return VideoMetadata.from_probe(self.probe.probe_format(path))

    def extract(self, path: str) -> CaptureTimestamp:
        metadata = self.read_metadata(path)
        if not metadata.creation_time:
            raise TimestampAbsent("No creation_time in container metadata")

        return CaptureTimestamp(parse_iso_instant(metadata.creation_time), self.source)


class MetadataExtractor:
    """Dispatches a classified file to the strategy for its media kind.

    Usage:
        extractor = MetadataExtractor({
            MediaKind.IMAGE: ExifTimestampStrategy(exiftool, tz),
            MediaKind.VIDEO: VideoTimestampStrategy(FFProbe()),
        })
        timestamp = extractor.extract(media_file)
    """

    def __init__(self, strategies: Dict[MediaKind, TimestampStrategy]):
        self.strategies = strategies

    def extract(self, media: MediaFile) -> CaptureTimestamp:
        """Extract the capture timestamp for a media file.

        Raises:
            ValueError: If no strategy handles the file's kind.
            MetadataExtractionError: If the metadata service fails.
            TimestampAbsent: If no usable date is present.
        """
        strategy = self.strategies.get(media.kind)
        if strategy is None:
            raise ValueError(f"No timestamp strategy for {media.kind.value} files")

        timestamp = strategy.extract(media.path)
        logger.debug(f"{media.filename}: {timestamp.instant.isoformat()} ({timestamp.source.value})")
        return timestamp
