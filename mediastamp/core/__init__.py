"""Core processing logic for MediaStamp."""

from mediastamp.core.models import (
    MediaKind,
    MediaFile,
    ImageMetadata,
    VideoMetadata,
    TimestampSource,
    CaptureTimestamp,
    OutcomeStatus,
    BatchOutcome,
    RunResult,
    ProgressCallback,
)

from mediastamp.core.errors import (
    MediaStampError,
    ConfigError,
    DirectoryReadError,
    ClassificationError,
    MetadataExtractionError,
    TimestampAbsent,
    TimestampInvalid,
    MoveError,
    MoveVerificationError,
    TimestampUpdateError,
)

from mediastamp.core.utils import (
    exists,
    reserve_path,
    release_path,
    make_disambiguator,
    checkout_dir,
    normalize_path,
)

from mediastamp.core.config import (
    SortConfig,
    load_config_file,
)

from mediastamp.core.logger import (
    BufferedLogger,
    NullLogger,
    RunLogger,
    create_logger,
)

from mediastamp.core.classifier import (
    FileTypeClassifier,
    FILE_TYPE_TAGS,
)

from mediastamp.core.dates import (
    DISPLAY_FORMAT,
    format_capture_date,
    get_timezone,
    parse_exif_datetime,
    parse_iso_instant,
)

from mediastamp.core.exiftool import (
    get_exiftool_path,
    is_exiftool_available,
    ExifToolManager,
)

from mediastamp.core.ffprobe import (
    FFProbe,
    is_ffprobe_available,
)

from mediastamp.core.metadata import (
    TimestampStrategy,
    ExifTimestampStrategy,
    VideoTimestampStrategy,
    MetadataExtractor,
)

from mediastamp.core.resolver import (
    DestinationResolver,
)

from mediastamp.core.timestamps import (
    TimestampUpdater,
    NullTimestampUpdater,
    FiledateTimestampUpdater,
    SetFileTimestampUpdater,
    get_timestamp_updater,
)

from mediastamp.core.mover import (
    MediaMover,
    move_file,
)

from mediastamp.core.orchestrator import (
    BatchOrchestrator,
    RunServices,
)

__all__ = [
    # Models
    "MediaKind",
    "MediaFile",
    "ImageMetadata",
    "VideoMetadata",
    "TimestampSource",
    "CaptureTimestamp",
    "OutcomeStatus",
    "BatchOutcome",
    "RunResult",
    "ProgressCallback",
    # Errors
    "MediaStampError",
    "ConfigError",
    "DirectoryReadError",
    "ClassificationError",
    "MetadataExtractionError",
    "TimestampAbsent",
    "TimestampInvalid",
    "MoveError",
    "MoveVerificationError",
    "TimestampUpdateError",
    # Utils
    "exists",
    "reserve_path",
    "release_path",
    "make_disambiguator",
    "checkout_dir",
    "normalize_path",
    # Config
    "SortConfig",
    "load_config_file",
    # Logger
    "BufferedLogger",
    "NullLogger",
    "RunLogger",
    "create_logger",
    # Classifier
    "FileTypeClassifier",
    "FILE_TYPE_TAGS",
    # Dates
    "DISPLAY_FORMAT",
    "format_capture_date",
    "get_timezone",
    "parse_exif_datetime",
    "parse_iso_instant",
    # Metadata services
    "get_exiftool_path",
    "is_exiftool_available",
    "ExifToolManager",
    "FFProbe",
    "is_ffprobe_available",
    # Extraction
    "TimestampStrategy",
    "ExifTimestampStrategy",
    "VideoTimestampStrategy",
    "MetadataExtractor",
    # Resolver
    "DestinationResolver",
    # Timestamps
    "TimestampUpdater",
    "NullTimestampUpdater",
    "FiledateTimestampUpdater",
    "SetFileTimestampUpdater",
    "get_timestamp_updater",
    # Mover
    "MediaMover",
    "move_file",
    # Orchestrator
    "BatchOrchestrator",
    "RunServices",
]
