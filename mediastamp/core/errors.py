"""Exception hierarchy for MediaStamp.

Everything except DirectoryReadError and ConfigError is contained within a
single file's pipeline and turned into a BatchOutcome by the orchestrator.
"""


class MediaStampError(Exception):
    """Base error for the project."""


class ConfigError(MediaStampError):
    """Configuration is invalid (unknown timezone, unreadable config file)."""


class DirectoryReadError(MediaStampError):
    """The input directory could not be listed. Aborts the run."""


class ClassificationError(MediaStampError):
    """File could not be read or its type could not be identified."""


class MetadataExtractionError(MediaStampError):
    """The EXIF parser or video prober failed on a file."""


class TimestampAbsent(MediaStampError):
    """Metadata was readable but carried no capture date."""


class TimestampInvalid(TimestampAbsent):
    """A capture date field was present but could not be parsed."""


class MoveError(MediaStampError):
    """Rename or copy to the destination failed. Source left in place."""


class MoveVerificationError(MoveError):
    """Destination was missing after the move reported success."""


class TimestampUpdateError(MediaStampError):
    """Best-effort OS timestamp update failed. Never fails the file."""
