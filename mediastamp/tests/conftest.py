"""Pytest configuration and fixtures."""

import os
import tempfile
import shutil
from datetime import datetime, timezone
from typing import Dict, Generator, List, Optional, Union

import pytest

from mediastamp.core.classifier import FILE_TYPE_TAGS, FileTypeClassifier
from mediastamp.core.config import SortConfig
from mediastamp.core.errors import MediaStampError, MetadataExtractionError
from mediastamp.core.metadata import MetadataExtractor
from mediastamp.core.models import CaptureTimestamp, MediaFile, TimestampSource

# Minimal but genuine file headers
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00" + b"\x00" * 64
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 64
MP4_BYTES = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom" + b"\x00" * 64
MOV_BYTES = b"\x00\x00\x00\x14ftypqt  \x00\x00\x02\x00qt  " + b"\x00" * 64
TEXT_BYTES = b"Shopping list:\n- milk\n- eggs\n"

# What ExifTool reports for each sample: (content, MIMEType, FileTypeExtension)
SAMPLE_FILE_TYPES = [
    (JPEG_BYTES, "image/jpeg", "JPG"),
    (PNG_BYTES, "image/png", "PNG"),
    (MP4_BYTES, "video/mp4", "MP4"),
    (MOV_BYTES, "video/quicktime", "MOV"),
    (TEXT_BYTES, "text/plain", "TXT"),
]


def write_file(path: str, data: bytes) -> str:
    """Write bytes to path, creating parent directories."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)
    return path


class FakeExifTool:
    """Stands in for an ExifToolManager.

    File type requests are answered for the sample contents above; other
    content fails the way ExifTool fails on files it cannot identify. Any
    other tag request answers from a filename -> tags (or exception) table.
    """

    def __init__(self, tags: Optional[Dict[str, Union[dict, Exception]]] = None, running: bool = True):
        self.tags = tags or {}
        self.is_running = running
        self.error = None if running else "ExifTool executable not found"
        self.calls: List[tuple] = []
        self.started = 0
        self.stopped = 0

    def start(self) -> bool:
        self.started += 1
        return self.is_running

    def stop(self) -> None:
        self.stopped += 1

    def read_tags(self, filepath: str, tags: Optional[List[str]] = None) -> dict:
        name = os.path.basename(filepath)
        self.calls.append((name, tags))
        if not self.is_running:
            raise MetadataExtractionError(self.error)

        if tags == FILE_TYPE_TAGS:
            with open(filepath, "rb") as f:
                data = f.read()
            for sample, mime, extension in SAMPLE_FILE_TYPES:
                if data.startswith(sample):
                    return {"File:MIMEType": mime, "File:FileTypeExtension": extension}
            raise MetadataExtractionError(f"ExifTool failed on {filepath}: Unknown file type")

        value = self.tags.get(name, {})
        if isinstance(value, Exception):
            raise value
        return value


class StubExtractor(MetadataExtractor):
    """Extractor that answers from a filename -> datetime/exception table.

    Files missing from the table raise KeyError, which the orchestrator
    records as an unexpected failure.
    """

    def __init__(self, table: Dict[str, Union[datetime, MediaStampError, Exception]]):
        super().__init__({})
        self.table = table
        self.calls = []

    def extract(self, media: MediaFile) -> CaptureTimestamp:
        self.calls.append(media.filename)
        value = self.table[media.filename]
        if isinstance(value, Exception):
            raise value
        source = TimestampSource.EXIF if media.kind.value == "image" else TimestampSource.VIDEO_METADATA
        return CaptureTimestamp(value, source)


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield tmpdir
    shutil.rmtree(tmpdir)


@pytest.fixture
def workdir(temp_dir: str) -> str:
    """Create an empty input/ and output/ pair.

    Structure:
        temp_dir/
        ├── input/
        └── output/
    """
    os.makedirs(os.path.join(temp_dir, "input"))
    os.makedirs(os.path.join(temp_dir, "output"))
    return temp_dir


@pytest.fixture
def utc_config(workdir: str) -> SortConfig:
    """Config for the workdir using UTC names and two workers."""
    return SortConfig.from_workdir(workdir, display_timezone="UTC", workers=2)


@pytest.fixture
def sample_drop(workdir: str) -> str:
    """Create a drop folder of mixed files.

    Structure:
        workdir/
        ├── input/
        │   ├── .DS_Store        (hidden, ignored)
        │   ├── clip.mp4
        │   ├── notes.txt        (unsupported)
        │   ├── photo.jpg
        │   └── screenshot.dat   (PNG content, wrong extension)
        └── output/
    """
    input_dir = os.path.join(workdir, "input")
    write_file(os.path.join(input_dir, ".DS_Store"), b"\x00\x00\x00\x01Bud1")
    write_file(os.path.join(input_dir, "clip.mp4"), MP4_BYTES)
    write_file(os.path.join(input_dir, "notes.txt"), TEXT_BYTES)
    write_file(os.path.join(input_dir, "photo.jpg"), JPEG_BYTES)
    write_file(os.path.join(input_dir, "screenshot.dat"), PNG_BYTES)
    return workdir


@pytest.fixture
def sample_dates() -> Dict[str, datetime]:
    """Capture instants for the files in sample_drop."""
    return {
        "photo.jpg": datetime(2023, 5, 10, 14, 22, 31, tzinfo=timezone.utc),
        "clip.mp4": datetime(2022, 12, 24, 18, 0, 5, tzinfo=timezone.utc),
        "screenshot.dat": datetime(2021, 1, 1, 9, 30, 0, tzinfo=timezone.utc),
    }


@pytest.fixture
def media_bytes() -> Dict[str, bytes]:
    """Sample file contents keyed by type."""
    return {
        "jpeg": JPEG_BYTES,
        "png": PNG_BYTES,
        "mp4": MP4_BYTES,
        "mov": MOV_BYTES,
        "text": TEXT_BYTES,
    }


@pytest.fixture
def write_media():
    """The write_file() helper, for tests that build their own trees."""
    return write_file


@pytest.fixture
def stub_extractor():
    """Factory for StubExtractor instances."""
    return StubExtractor


@pytest.fixture
def fake_exiftool():
    """Factory for FakeExifTool instances."""
    return FakeExifTool


@pytest.fixture
def classifier() -> FileTypeClassifier:
    """A FileTypeClassifier that knows the sample file contents."""
    return FileTypeClassifier(FakeExifTool())
