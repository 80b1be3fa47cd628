"""Tests for mediastamp.core.metadata module."""

import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock
from zoneinfo import ZoneInfo

import pytest

from mediastamp.core.errors import MetadataExtractionError, TimestampAbsent, TimestampInvalid
from mediastamp.core.exiftool import ExifToolManager
from mediastamp.core.ffprobe import FFProbe
from mediastamp.core.metadata import (
    ExifTimestampStrategy,
    MetadataExtractor,
    TimestampStrategy,
    VideoTimestampStrategy,
)
from mediastamp.core.models import CaptureTimestamp, MediaFile, MediaKind, TimestampSource


def exiftool_returning(tags):
    manager = Mock(spec=ExifToolManager)
    manager.read_tags.return_value = tags
    return manager


def probe_returning(data):
    probe = Mock(spec=FFProbe)
    probe.probe_format.return_value = data
    return probe


class TestExifTimestampStrategy:
    """Tests for ExifTimestampStrategy."""

    def test_reads_date_time_original(self):
        strategy = ExifTimestampStrategy(exiftool_returning({
            "EXIF:DateTimeOriginal": "2023:05:10 14:22:31",
        }))
        ts = strategy.extract("/in/a.jpg")
        assert ts.instant == datetime(2023, 5, 10, 14, 22, 31, tzinfo=timezone.utc)
        assert ts.source is TimestampSource.EXIF

    def test_uses_offset_tag(self):
        strategy = ExifTimestampStrategy(exiftool_returning({
            "EXIF:DateTimeOriginal": "2023:05:10 14:22:31",
            "EXIF:OffsetTimeOriginal": "+02:00",
        }))
        ts = strategy.extract("/in/a.jpg")
        assert ts.instant.astimezone(timezone.utc).hour == 12

    def test_default_zone(self):
        strategy = ExifTimestampStrategy(
            exiftool_returning({"EXIF:DateTimeOriginal": "2023:01:10 14:22:31"}),
            default_tz=ZoneInfo("Europe/Amsterdam"),
        )
        assert strategy.extract("/in/a.jpg").instant.utcoffset() == timedelta(hours=1)

    def test_missing_field_is_absent(self):
        strategy = ExifTimestampStrategy(exiftool_returning({"SourceFile": "/in/a.jpg"}))
        with pytest.raises(TimestampAbsent, match="DateTimeOriginal") as excinfo:
            strategy.extract("/in/a.jpg")
        assert not isinstance(excinfo.value, TimestampInvalid)

    def test_malformed_field_is_invalid(self):
        strategy = ExifTimestampStrategy(exiftool_returning({
            "EXIF:DateTimeOriginal": "0000:00:00 00:00:00",
        }))
        with pytest.raises(TimestampInvalid):
            strategy.extract("/in/a.jpg")

    def test_reader_failure_propagates(self):
        manager = Mock(spec=ExifToolManager)
        manager.read_tags.side_effect = MetadataExtractionError("corrupt file")
        with pytest.raises(MetadataExtractionError, match="corrupt"):
            ExifTimestampStrategy(manager).extract("/in/a.jpg")

    def test_read_metadata(self):
        strategy = ExifTimestampStrategy(exiftool_returning({
            "EXIF:DateTimeOriginal": "2023:05:10 14:22:31",
        }))
        meta = strategy.read_metadata("/in/a.jpg")
        assert meta.date_time_original == "2023:05:10 14:22:31"
        assert meta.offset_time_original is None


class TestVideoTimestampStrategy:
    """Tests for VideoTimestampStrategy."""

    def test_reads_creation_time(self):
        strategy = VideoTimestampStrategy(probe_returning({
            "format": {"tags": {"creation_time": "2023-05-10T12:22:31.000000Z"}}
        }))
        ts = strategy.extract("/in/clip.mp4")
        assert ts.instant == datetime(2023, 5, 10, 12, 22, 31, tzinfo=timezone.utc)
        assert ts.source is TimestampSource.VIDEO_METADATA

    def test_missing_tags_is_absent(self):
        strategy = VideoTimestampStrategy(probe_returning({"format": {"format_name": "mov"}}))
        with pytest.raises(TimestampAbsent, match="creation_time"):
            strategy.extract("/in/clip.mp4")

    def test_malformed_value_is_invalid(self):
        strategy = VideoTimestampStrategy(probe_returning({
            "format": {"tags": {"creation_time": "sometime in May"}}
        }))
        with pytest.raises(TimestampInvalid):
            strategy.extract("/in/clip.mp4")

    def test_probe_failure_propagates(self):
        probe = Mock(spec=FFProbe)
        probe.probe_format.side_effect = MetadataExtractionError("ffprobe exited with 1")
        with pytest.raises(MetadataExtractionError):
            VideoTimestampStrategy(probe).extract("/in/clip.mp4")


class TestMetadataExtractor:
    """Tests for MetadataExtractor dispatch."""

    def _strategy(self, source):
        strategy = Mock(spec=TimestampStrategy)
        strategy.extract.return_value = CaptureTimestamp(
            datetime(2023, 5, 10, tzinfo=timezone.utc), source
        )
        return strategy

    def test_dispatches_by_kind(self):
        image = self._strategy(TimestampSource.EXIF)
        video = self._strategy(TimestampSource.VIDEO_METADATA)
        extractor = MetadataExtractor({MediaKind.IMAGE: image, MediaKind.VIDEO: video})

        ts = extractor.extract(MediaFile("/in/clip.mp4", MediaKind.VIDEO, ".mp4"))

        assert ts.source is TimestampSource.VIDEO_METADATA
        video.extract.assert_called_once_with("/in/clip.mp4")
        image.extract.assert_not_called()

    def test_unsupported_kind_raises(self):
        extractor = MetadataExtractor({MediaKind.IMAGE: self._strategy(TimestampSource.EXIF)})
        with pytest.raises(ValueError, match="No timestamp strategy"):
            extractor.extract(MediaFile("/in/a.txt", MediaKind.UNSUPPORTED))

    def test_logs_result(self, caplog):
        extractor = MetadataExtractor({MediaKind.IMAGE: self._strategy(TimestampSource.EXIF)})
        with caplog.at_level(logging.DEBUG, logger="mediastamp.core.metadata"):
            extractor.extract(MediaFile("/in/a.jpg", MediaKind.IMAGE, ".jpg"))
        assert any("a.jpg" in msg and "exif" in msg for msg in caplog.messages)

    def test_errors_propagate(self):
        strategy = Mock(spec=TimestampStrategy)
        strategy.extract.side_effect = TimestampAbsent("No DateTimeOriginal in EXIF")
        extractor = MetadataExtractor({MediaKind.IMAGE: strategy})
        with pytest.raises(TimestampAbsent):
            extractor.extract(MediaFile("/in/a.jpg", MediaKind.IMAGE, ".jpg"))
