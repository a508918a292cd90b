"""
Lazy, thread-safe settings store with write-through persistence.

The in-memory map is loaded from the settings file on first access, exactly
once, no matter how many threads race to touch it. Every set() is persisted
before it returns. Keys listed in the EncryptionPolicy are encrypted on the
way in and decrypted on the way out, so the file never holds their plaintext.

Strings are the storage unit for every value. They are the most versatile
form for conversion by the caller and during (de)serialization, and storing
"False" instead of false costs only a couple of bytes.
"""

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

from lazyconfig.config.persistence import LoadStatus, SettingsFile
from lazyconfig.config.policy import EncryptionPolicy
from lazyconfig.config.settings_map import SettingsMap
from lazyconfig.crypto.cipher import Encryptor
from lazyconfig.errors import DecryptionFailed, DecryptionFailure, EncryptionFailure
from lazyconfig.utils.error_handling import log_security_error

logger = logging.getLogger(__name__)


class LazyConfigStore:
    """
    Key-value settings store backed by a single JSON file.

    Concurrency:
    - The first get/set loads the file under ``_load_lock``; callers arriving
      while that load is in flight block until it is published and then see
      the same map.
    - ``_mutation_lock`` covers the whole read-transform-insert-persist
      sequence of set(), so concurrent writers cannot lose updates.
    - Only one process should own a settings file at a time.

    Args:
        path: Settings file path. Defaults to ``settings.config`` next to the
            application.
        encryptor: Cipher for encrypted keys. Without one, keys outside the
            policy work normally while set() of an encrypted key raises
            EncryptionFailure and get() of a stored one raises
            DecryptionFailed.
        policy: Which keys are encrypted.
        settings_file: Pre-built persistence layer (overrides ``path``).
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        encryptor: Optional[Encryptor] = None,
        policy: Optional[EncryptionPolicy] = None,
        settings_file: Optional[SettingsFile] = None,
    ):
        self._file = settings_file or SettingsFile(path)
        self._encryptor = encryptor
        self._policy = policy or EncryptionPolicy()

        self._map: Optional[SettingsMap] = None
        self._loaded = False
        self._load_lock = threading.Lock()
        self._mutation_lock = threading.RLock()
        self._load_count = 0

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(path={str(self._file.path)!r}, "
            f"encrypted={self._encryptor is not None})"
        )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def path(self) -> Path:
        return self._file.path

    @property
    def settings_file(self) -> SettingsFile:
        return self._file

    @property
    def policy(self) -> EncryptionPolicy:
        return self._policy

    @property
    def encryption_enabled(self) -> bool:
        return self._encryptor is not None

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def load_count(self) -> int:
        """How many times the backing file has been loaded (0 or 1)."""
        return self._load_count

    @property
    def load_status(self) -> LoadStatus:
        return self._file.last_load_status

    # -------------------------------------------------------------------------
    # Lazy initialization
    # -------------------------------------------------------------------------

    def _settings(self) -> SettingsMap:
        """The materialized map, loading it on first use."""
        if self._loaded:
            return self._map

        with self._load_lock:
            if not self._loaded:
                self._map = self._file.load()
                self._load_count += 1
                # Publish only after the map is fully built
                self._loaded = True
                logger.debug(
                    f"Settings map initialized ({self._file.last_load_status.value}, "
                    f"{len(self._map)} key(s))"
                )
        return self._map

    # -------------------------------------------------------------------------
    # Store API
    # -------------------------------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        """
        Return the value for key, or None if absent.

        Raises:
            DecryptionFailed: key is encrypted and its stored envelope could
                not be decrypted, or no cipher is configured. A cipher error
                is chained as __cause__.
        """
        with self._mutation_lock:
            settings = self._settings()
            raw = settings.get(key)

        if raw and self._policy.is_encrypted(key):
            if self._encryptor is None:
                failure = DecryptionFailed(key, f"'{key}' is encrypted but no cipher is configured")
                log_security_error(failure, 'decrypt_setting', key=key)
                raise failure
            try:
                return self._encryptor.decrypt(raw)
            except DecryptionFailure as e:
                failure = DecryptionFailed(key)
                log_security_error(failure, 'decrypt_setting', key=key)
                raise failure from e
        return raw

    def set(self, key: str, value: Optional[str]) -> None:
        """
        Store value under key and persist the map before returning.

        Encrypted keys are encrypted first; a cipher failure is raised and
        leaves both the map and the file untouched. A failed file write is
        logged only, and the in-memory value stays authoritative.
        """
        if value is not None and not isinstance(value, str):
            raise TypeError(f"Setting values must be strings, got {type(value).__name__}")

        with self._mutation_lock:
            settings = self._settings()
            if value is not None and self._policy.is_encrypted(key):
                if self._encryptor is None:
                    failure = EncryptionFailure(f"'{key}' must be encrypted but no cipher is configured")
                    log_security_error(failure, 'encrypt_setting', key=key)
                    raise failure
                try:
                    stored = self._encryptor.encrypt(value)
                except EncryptionFailure as e:
                    log_security_error(e, 'encrypt_setting', key=key)
                    raise
            else:
                stored = value

            settings[key] = stored
            self._file.save(settings)

    def delete(self, key: str) -> bool:
        """Remove key and persist. Returns False if the key was absent."""
        with self._mutation_lock:
            settings = self._settings()
            if key not in settings:
                return False
            del settings[key]
            self._file.save(settings)
            return True

    def save(self) -> bool:
        """
        Persist the current map again.

        Returns True only if a write happened; an unchanged map is skipped.
        """
        with self._mutation_lock:
            return self._file.save(self._settings())

    def contains(self, key: str) -> bool:
        with self._mutation_lock:
            return key in self._settings()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains(key)

    def keys(self) -> List[str]:
        with self._mutation_lock:
            return list(self._settings())

    def raw(self, key: str) -> Optional[str]:
        """Stored form of a value, without decryption."""
        with self._mutation_lock:
            return self._settings().get(key)

    def snapshot(self) -> Dict[str, Optional[str]]:
        """
        Decrypted copy of every setting.

        Raises DecryptionFailed on the first encrypted value that cannot be
        decrypted.
        """
        return {key: self.get(key) for key in self.keys()}


__all__ = [
    'LazyConfigStore',
]
