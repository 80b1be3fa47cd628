"""Destination path resolution for MediaStamp."""

import logging
import os

from mediastamp.core.utils import exists, make_disambiguator, reserve_path

logger = logging.getLogger(__name__)


class DestinationResolver:
    """Picks a free output path for a formatted capture date.

    The first choice is ``{date}{ext}``. When that is taken, a fresh
    disambiguator is appended (``{date}_{time_ns}_{uuid}{ext}``) until a
    free name is found.

    With ``reserve=True`` (the default) every check is an atomic exclusive
    create, so the returned path holds an empty placeholder that only this
    caller owns; MediaMover replaces it with the real file. With
    ``reserve=False`` the check is a plain existence test and nothing is
    written, which is what previews use.

    Usage:
        resolver = DestinationResolver("/photos/output")
        dest = resolver.resolve("2023-05-10_14-22-31", ".jpg")
    """

    def __init__(self, output_dir: str, reserve: bool = True):
        self.output_dir = output_dir
        self.reserve = reserve

    def base_candidate(self, formatted_date: str, extension: str) -> str:
        return os.path.join(self.output_dir, f"{formatted_date}{extension}")

    def _claim(self, path: str) -> bool:
        if self.reserve:
            return reserve_path(path)
        return not exists(path)

    def resolve(self, formatted_date: str, extension: str) -> str:
        """Get an unoccupied destination path.

        Args:
            formatted_date: Display date, e.g. "2023-05-10_14-22-31".
            extension: Extension with leading dot, e.g. ".jpg".

        Returns:
            Path that did not exist when it was checked.

        Raises:
            OSError: If the output directory cannot be written (reserve mode).
        """
        candidate = self.base_candidate(formatted_date, extension)
        if self._claim(candidate):
            return candidate

        logger.debug(f"Destination taken: {candidate}")
        while True:
            candidate = os.path.join(
                self.output_dir,
                f"{formatted_date}{make_disambiguator()}{extension}"
            )
            if self._claim(candidate):
                return candidate
