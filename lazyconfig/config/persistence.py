"""
Settings file persistence.

Loads the settings map from a single JSON file and writes it back, skipping
the write when the serialized content is unchanged since the last save.

Failure policy:
- A missing file is not an error; it yields an empty map.
- An unreadable or unparsable file is logged, recorded as a LoadFailure on
  ``last_load_error`` and also yields an empty map. Before the next save can
  overwrite it, the damaged file is copied aside as
  ``<name>.corrupt-<timestamp>`` so the previous configuration is not lost.
- A failed write is logged and recorded as a SaveFailure on
  ``last_save_error``; it is never raised to the caller.
"""

import json
import logging
import os
import shutil
import sys
import tempfile
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Union

from lazyconfig.config.settings_map import SettingsMap
from lazyconfig.constants import Defaults, Permissions, default_settings_file
from lazyconfig.errors import LoadFailure, SaveFailure
from lazyconfig.utils.error_handling import log_config_error, log_filesystem_error
from lazyconfig.utils.locks import ReadWriteLock

logger = logging.getLogger(__name__)


class LoadStatus(Enum):
    """Outcome of the most recent load()."""
    NOT_LOADED = "not_loaded"
    MISSING = "missing"      # never configured
    LOADED = "loaded"
    CORRUPT = "corrupt"      # present but unreadable; fell back to empty


def base_directory() -> Path:
    """Directory of the running application (falls back to the cwd)."""
    script = sys.argv[0] if sys.argv and sys.argv[0] else ''
    if script and script != '-c' and os.path.exists(script):
        return Path(os.path.abspath(script)).parent
    return Path.cwd()


def resolve_settings_path(path: Optional[Union[str, Path]] = None) -> Path:
    """
    Resolve where the settings file lives.

    With no path, the default file name is placed next to the application.
    An explicit path is used as given.
    """
    if path is None:
        name = Path(default_settings_file())
        return name if name.is_absolute() else base_directory() / name
    return Path(path)


class SettingsFile:
    """
    Reads and writes one settings file.

    File I/O is guarded by a reader-writer lock: loads share it, saves hold
    it exclusively. The lock covers only the I/O step; callers that mutate a
    map before saving it must serialize those mutations themselves.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        indent: Optional[int] = Defaults.JSON_INDENT,
        file_mode: int = Permissions.SETTINGS_FILE,
        preserve_corrupt: bool = True,
    ):
        self.path = resolve_settings_path(path)
        self.indent = indent
        self.file_mode = file_mode
        self.preserve_corrupt = preserve_corrupt

        self._io_lock = ReadWriteLock()
        # Last serialized form written by this instance
        self._parity: Optional[str] = None
        self._write_count = 0

        self.last_load_status = LoadStatus.NOT_LOADED
        self.last_load_error: Optional[LoadFailure] = None
        self.last_save_error: Optional[SaveFailure] = None
        self.corrupt_backup: Optional[Path] = None

    def __repr__(self) -> str:
        return f"SettingsFile({str(self.path)!r})"

    @property
    def write_count(self) -> int:
        """Number of physical writes performed by this instance."""
        return self._write_count

    @property
    def parity(self) -> Optional[str]:
        return self._parity

    def exists(self) -> bool:
        return self.path.exists()

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def serialize(self, settings: Mapping[str, Optional[str]]) -> str:
        """
        Deterministic JSON form of the map.

        Keys are sorted, null values are omitted and non-ASCII characters are
        written unescaped so the file stays legible.
        """
        data = {key: value for key, value in settings.items() if value is not None}
        return json.dumps(data, indent=self.indent, ensure_ascii=False, sort_keys=True)

    @staticmethod
    def parse(text: str) -> SettingsMap:
        """Parse compact or indented JSON into a SettingsMap."""
        if not text.strip():
            return SettingsMap()

        raw = json.loads(text)
        if raw is None:
            return SettingsMap()
        if not isinstance(raw, dict):
            raise ValueError(
                f"Settings file must contain a JSON object, found {type(raw).__name__}"
            )

        settings = SettingsMap()
        for key, value in raw.items():
            if value is None or isinstance(value, str):
                settings[key] = value
            elif isinstance(value, (bool, int, float)):
                settings[key] = str(value)
            else:
                raise ValueError(f"Setting '{key}' holds a {type(value).__name__}, expected a string")
        return settings

    # -------------------------------------------------------------------------
    # Load / Save
    # -------------------------------------------------------------------------

    def load(self) -> SettingsMap:
        """Load the settings map, or an empty map if the file is absent or unreadable."""
        with self._io_lock.read_locked():
            if not self.path.exists():
                logger.debug(f"No settings file at {self.path}, starting empty")
                self.last_load_status = LoadStatus.MISSING
                self.last_load_error = None
                return SettingsMap()

            try:
                text = self.path.read_text(encoding='utf-8-sig')
                settings = self.parse(text)
            except (OSError, ValueError, RecursionError) as e:
                failure = LoadFailure(str(self.path), str(e))
                failure.__cause__ = e
                if isinstance(e, OSError):
                    log_filesystem_error(failure, 'load_settings', path=str(self.path))
                else:
                    log_config_error(failure, 'load_settings', path=str(self.path))

                self.last_load_status = LoadStatus.CORRUPT
                self.last_load_error = failure
                if self.preserve_corrupt:
                    self._preserve_corrupt_file()
                return SettingsMap()

        logger.debug(f"Loaded {len(settings)} setting(s) from {self.path}")
        self.last_load_status = LoadStatus.LOADED
        self.last_load_error = None
        return settings

    def save(self, settings: Mapping[str, Optional[str]]) -> bool:
        """
        Persist the map.

        Returns True if the file was written, False if the content matched
        the last save (no I/O) or the write failed.
        """
        with self._io_lock.write_locked():
            try:
                content = self.serialize(settings)
            except (TypeError, ValueError) as e:
                self._record_save_failure(e)
                return False

            if self._parity is not None and content == self._parity:
                logger.debug("Settings unchanged since last save, skipping write")
                return False

            created = not self.path.exists()
            try:
                self._atomic_write(content)
            except OSError as e:
                self._record_save_failure(e)
                return False

            self._parity = content
            self._write_count += 1
            self.last_save_error = None

        if created:
            logger.info(f"Created settings file {self.path}")
        else:
            logger.debug(f"Saved settings to {self.path}")
        return True

    def _record_save_failure(self, error: Exception) -> None:
        failure = SaveFailure(str(self.path), str(error))
        failure.__cause__ = error
        log_filesystem_error(failure, 'save_settings', path=str(self.path))
        self.last_save_error = failure

    def _atomic_write(self, content: str) -> None:
        """Write file atomically with secure permissions."""
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(
            dir=directory,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
        )

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())

            os.chmod(temp_path, self.file_mode)
            os.replace(temp_path, self.path)

        except OSError:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def _preserve_corrupt_file(self) -> None:
        """Copy an unreadable settings file aside before it can be overwritten."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup = self.path.with_name(f"{self.path.name}.corrupt-{timestamp}")
        try:
            shutil.copy2(self.path, backup)
        except OSError as e:
            log_filesystem_error(e, 'preserve_corrupt_settings', path=str(self.path))
            return
        self.corrupt_backup = backup
        logger.warning(f"Unreadable settings file preserved as {backup}")


__all__ = [
    'LoadStatus',
    'SettingsFile',
    'base_directory',
    'resolve_settings_path',
]
