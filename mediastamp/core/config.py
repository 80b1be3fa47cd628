"""Run configuration for MediaStamp."""

import logging
import os
from dataclasses import dataclass, fields, replace
from datetime import tzinfo
from typing import Any, Dict, Optional

import orjson

from mediastamp.core.dates import get_timezone
from mediastamp.core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Europe/Amsterdam"
DEFAULT_HIDDEN_PREFIX = "."
DEFAULT_WORKERS = 8

INPUT_DIR_NAME = "input"
OUTPUT_DIR_NAME = "output"


def _has_type(value: Any, expected: type) -> bool:
    # bool is an int subclass; true is not a worker count
    if expected is not bool and isinstance(value, bool):
        return False
    return isinstance(value, expected)


@dataclass(frozen=True)
class SortConfig:
    """Settings for one batch run.

    The timezone applies to every file in the run.

    Usage:
        config = SortConfig.from_workdir("/photos", display_timezone="UTC")
        BatchOrchestrator(config).run()
    """
    input_dir: str
    output_dir: str
    display_timezone: str = DEFAULT_TIMEZONE
    hidden_prefix: str = DEFAULT_HIDDEN_PREFIX
    workers: int = DEFAULT_WORKERS
    update_timestamps: bool = True

    @classmethod
    def from_workdir(cls, workdir: Optional[str] = None, **overrides: Any) -> "SortConfig":
        """Build a config using ``input/`` and ``output/`` under workdir.

        Args:
            workdir: Base directory (default: current working directory).
            **overrides: Any SortConfig field; None values are ignored.
        """
        workdir = workdir or os.getcwd()
        values: Dict[str, Any] = {
            "input_dir": os.path.join(workdir, INPUT_DIR_NAME),
            "output_dir": os.path.join(workdir, OUTPUT_DIR_NAME),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def merged(self, **overrides: Any) -> "SortConfig":
        """Copy with the given fields replaced; None values are ignored."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def tzinfo(self) -> tzinfo:
        return get_timezone(self.display_timezone)

    def validate(self) -> None:
        """Check values that can be checked before the run.

        Raises:
            ConfigError: On an unknown timezone or invalid worker count.
        """
        get_timezone(self.display_timezone)
        if not _has_type(self.workers, int) or self.workers < 1:
            raise ConfigError(f"workers must be at least 1, got {self.workers}")
        if os.path.abspath(self.input_dir) == os.path.abspath(self.output_dir):
            raise ConfigError("Input and output directories must differ")


def load_config_file(path: str) -> Dict[str, Any]:
    """Read SortConfig values from a JSON file.

    Unknown keys are ignored with a warning. null values count as unset.

    Args:
        path: Path to a JSON object, e.g. {"display_timezone": "UTC"}.

    Returns:
        Dict of recognized SortConfig fields.

    Raises:
        ConfigError: If the file cannot be read, is not a JSON object, or
            a known key has a value of the wrong type.
    """
    try:
        with open(path, "rb") as f:
            data = orjson.loads(f.read())
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except orjson.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    known = {f.name: f.type for f in fields(SortConfig)}
    for key in sorted(set(data) - set(known)):
        logger.warning(f"Ignoring unknown config key {key!r} in {path}")

    values = {}
    for key, value in data.items():
        if key not in known or value is None:
            continue
        if not _has_type(value, known[key]):
            raise ConfigError(
                f"Config key {key!r} in {path} must be {known[key].__name__}, "
                f"got {type(value).__name__}"
            )
        values[key] = value
    return values
