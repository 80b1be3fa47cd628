"""Content-based file type detection for MediaStamp.

File types come from ExifTool, which identifies a file by its content and
reports ``File:MIMEType`` and ``File:FileTypeExtension``. The file name is
never consulted, so a JPEG saved as ``IMG_0001.dat`` is still renamed to
``.jpg`` and a Nikon NEF keeps ``.nef``.
"""

import logging
from typing import Optional, Tuple

from mediastamp.core.errors import ClassificationError, MetadataExtractionError
from mediastamp.core.exiftool import ExifToolManager
from mediastamp.core.models import MediaFile, MediaKind

logger = logging.getLogger(__name__)

# Tags read for classification
FILE_TYPE_TAGS = ["File:MIMEType", "File:FileTypeExtension"]

# MIME top-level type -> media kind
MEDIA_FAMILIES = {
    "image": MediaKind.IMAGE,
    "video": MediaKind.VIDEO,
}


def media_kind(mime: Optional[str]) -> MediaKind:
    """Map a MIME type to a media kind (UNSUPPORTED for anything else)."""
    if not mime or "/" not in mime:
        return MediaKind.UNSUPPORTED
    return MEDIA_FAMILIES.get(mime.split("/", 1)[0].strip().lower(), MediaKind.UNSUPPORTED)


def canonical_extension(extension: Optional[str]) -> str:
    """Normalize an ExifTool FileTypeExtension ("JPG" -> ".jpg")."""
    if not extension:
        return ""
    return "." + extension.strip().lstrip(".").lower()


class FileTypeClassifier:
    """Classifies files as image, video or unsupported by content.

    Shares the run's ExifTool process with the image timestamp strategy.

    Usage:
        with ExifToolManager() as et:
            classifier = FileTypeClassifier(et)
            media = classifier.classify("/drop/IMG_0001.JPG")
            if media.kind is MediaKind.IMAGE:
                ...
    """

    def __init__(self, exiftool: ExifToolManager):
        self.exiftool = exiftool

    def check_readable(self, path: str) -> None:
        """Make sure the file content can be read.

        Raises:
            ClassificationError: If the file cannot be opened or read.
        """
        try:
            with open(path, "rb") as f:
                f.read(1)
        except OSError as e:
            raise ClassificationError(f"Cannot read {path}: {e}") from e

    def read_file_type(self, path: str) -> Tuple[Optional[str], Optional[str]]:
        """Ask ExifTool for the file's MIME type and extension.

        Raises:
            MetadataExtractionError: If ExifTool cannot identify the file.
        """
        tags = self.exiftool.read_tags(path, FILE_TYPE_TAGS)
        return tags.get("File:MIMEType"), tags.get("File:FileTypeExtension")

    def classify(self, path: str) -> MediaFile:
        """Classify a file.

        Unknown or non-media content never raises; it returns a MediaFile
        with kind UNSUPPORTED.

        Args:
            path: Path to the file.

        Returns:
            MediaFile with detected kind and canonical extension.

        Raises:
            ClassificationError: If the file cannot be read, or ExifTool is
                not running so content cannot be inspected at all.
        """
        self.check_readable(path)
        if not self.exiftool.is_running:
            reason = self.exiftool.error or "ExifTool is not running"
            raise ClassificationError(f"Cannot identify {path}: {reason}")

        try:
            mime, extension = self.read_file_type(path)
        except MetadataExtractionError as e:
            # ExifTool exits non-zero for content it does not recognize
            logger.debug(f"Unknown file type: {path} ({e})")
            return MediaFile(path, MediaKind.UNSUPPORTED)

        kind = media_kind(mime)
        extension = canonical_extension(extension)
        if kind is MediaKind.UNSUPPORTED:
            logger.debug(f"Non-media type {mime}: {path}")
        elif not extension:
            logger.debug(f"No extension reported for {mime}: {path}")
            return MediaFile(path, MediaKind.UNSUPPORTED)
        return MediaFile(path, kind, extension)
