"""Tests for mediastamp.core.timestamps module."""

import subprocess
from datetime import datetime, timezone
from unittest.mock import Mock, patch

import pytest

from mediastamp.core.errors import TimestampUpdateError
from mediastamp.core.timestamps import (
    FiledateTimestampUpdater,
    NullTimestampUpdater,
    SetFileTimestampUpdater,
    SETFILE_FORMAT,
    get_timestamp_updater,
)

INSTANT = datetime(2023, 5, 10, 12, 22, 31, tzinfo=timezone.utc)
LOCAL = INSTANT.astimezone().replace(tzinfo=None)


class TestGetTimestampUpdater:
    """Tests for get_timestamp_updater() platform selection."""

    def test_macos_uses_setfile(self):
        assert isinstance(get_timestamp_updater("darwin"), SetFileTimestampUpdater)

    def test_windows_sets_created(self):
        updater = get_timestamp_updater("win32")
        assert isinstance(updater, FiledateTimestampUpdater)
        assert updater.set_created is True

    def test_linux_skips_created(self):
        updater = get_timestamp_updater("linux")
        assert isinstance(updater, FiledateTimestampUpdater)
        assert updater.set_created is False


class TestNullTimestampUpdater:
    """Tests for NullTimestampUpdater."""

    def test_does_nothing(self, temp_dir):
        NullTimestampUpdater().update(temp_dir, INSTANT)


class TestFiledateTimestampUpdater:
    """Tests for FiledateTimestampUpdater."""

    def test_sets_created_and_modified(self):
        with patch("mediastamp.core.timestamps.filedate.File") as mock_file:
            FiledateTimestampUpdater(set_created=True).update("/out/a.jpg", INSTANT)

        mock_file.assert_called_once_with("/out/a.jpg")
        mock_file.return_value.set.assert_called_once_with(created=LOCAL, modified=LOCAL)

    def test_without_created(self):
        with patch("mediastamp.core.timestamps.filedate.File") as mock_file:
            FiledateTimestampUpdater(set_created=False).update("/out/a.jpg", INSTANT)

        mock_file.return_value.set.assert_called_once_with(modified=LOCAL, accessed=LOCAL)

    def test_failure_wrapped(self):
        with patch("mediastamp.core.timestamps.filedate.File") as mock_file:
            mock_file.return_value.set.side_effect = OSError("read-only")
            with pytest.raises(TimestampUpdateError, match="read-only"):
                FiledateTimestampUpdater().update("/out/a.jpg", INSTANT)

    def test_unrepresentable_local_date_wrapped(self):
        """A capture date the local clock cannot express is an update error, not a crash."""
        with patch("mediastamp.core.timestamps.filedate.File") as mock_file, \
             patch("mediastamp.core.timestamps._local_naive",
                   side_effect=OverflowError("date value out of range")):
            with pytest.raises(TimestampUpdateError, match="out of range"):
                FiledateTimestampUpdater().update("/out/a.jpg", INSTANT)
        mock_file.assert_not_called()


class TestSetFileTimestampUpdater:
    """Tests for SetFileTimestampUpdater."""

    def _result(self, returncode=0, stderr=""):
        result = Mock()
        result.returncode = returncode
        result.stderr = stderr
        return result

    def test_command(self):
        with patch("subprocess.run", return_value=self._result()) as mock_run:
            SetFileTimestampUpdater(executable="/usr/bin/SetFile").update("/out/a.jpg", INSTANT)

        stamp = LOCAL.strftime(SETFILE_FORMAT)
        command = mock_run.call_args[0][0]
        assert command == ["/usr/bin/SetFile", "-d", stamp, "-m", stamp, "/out/a.jpg"]

    def test_nonzero_exit_raises(self):
        with patch("subprocess.run", return_value=self._result(returncode=2)):
            with pytest.raises(TimestampUpdateError, match="exit code 2"):
                SetFileTimestampUpdater(executable="SetFile").update("/out/a.jpg", INSTANT)

    def test_stderr_raises(self):
        with patch("subprocess.run", return_value=self._result(stderr="ERROR: invalid date")):
            with pytest.raises(TimestampUpdateError, match="invalid date"):
                SetFileTimestampUpdater(executable="SetFile").update("/out/a.jpg", INSTANT)

    def test_missing_tool_raises(self):
        with patch("subprocess.run", side_effect=FileNotFoundError("SetFile")):
            with pytest.raises(TimestampUpdateError):
                SetFileTimestampUpdater(executable="SetFile").update("/out/a.jpg", INSTANT)

    def test_timeout_raises(self):
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired("SetFile", 30)):
            with pytest.raises(TimestampUpdateError):
                SetFileTimestampUpdater(executable="SetFile").update("/out/a.jpg", INSTANT)

    def test_unrepresentable_local_date_wrapped(self):
        with patch("subprocess.run") as mock_run, \
             patch("mediastamp.core.timestamps._local_naive",
                   side_effect=OverflowError("date value out of range")):
            with pytest.raises(TimestampUpdateError, match="out of range"):
                SetFileTimestampUpdater(executable="SetFile").update("/out/a.jpg", INSTANT)
        mock_run.assert_not_called()

    def test_default_executable(self):
        with patch("mediastamp.core.timestamps.shutil.which", return_value=None):
            assert SetFileTimestampUpdater().executable == "SetFile"
