"""
Typed application settings on top of LazyConfigStore.

Each setting is declared once in APP_SCHEMA with its semantic type, default
and encryption flag. Parsing and formatting go through try_parse() and
format_value(), which report success explicitly; the typed properties turn a
failed parse of a stored value into a SettingParseError instead of quietly
substituting the default.

    settings = AppSettings(encryptor=AesPortableEncryptor(passphrase, salt))
    if settings.first_run:
        settings.retry_count = 5
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from lazyconfig.config.policy import EncryptionPolicy, SettingSpec, SettingType, fold_key
from lazyconfig.config.store import LazyConfigStore
from lazyconfig.crypto.cipher import Encryptor
from lazyconfig.errors import SettingParseError

_TRUE = "True"
_FALSE = "False"


def try_parse(setting_type: SettingType, raw: str) -> Tuple[bool, Any]:
    """
    Parse a stored string as setting_type.

    Returns (True, value) on success and (False, None) when raw is not
    recognizable as that type.
    """
    text = raw.strip()

    if setting_type is SettingType.STRING:
        return True, raw

    if setting_type is SettingType.BOOL:
        lowered = text.lower()
        if lowered == "true":
            return True, True
        if lowered == "false":
            return True, False
        return False, None

    if setting_type is SettingType.INT:
        try:
            return True, int(text)
        except ValueError:
            return False, None

    if setting_type is SettingType.DATETIME:
        try:
            return True, datetime.fromisoformat(text)
        except ValueError:
            return False, None

    return False, None


def format_value(setting_type: SettingType, value: Any) -> str:
    """Format a typed value for storage."""
    if setting_type is SettingType.BOOL:
        if not isinstance(value, bool):
            raise TypeError(f"Expected bool, got {type(value).__name__}")
        return _TRUE if value else _FALSE

    if setting_type is SettingType.INT:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Expected int, got {type(value).__name__}")
        return str(value)

    if setting_type is SettingType.DATETIME:
        if not isinstance(value, datetime):
            raise TypeError(f"Expected datetime, got {type(value).__name__}")
        return value.isoformat()

    if not isinstance(value, str):
        raise TypeError(f"Expected str, got {type(value).__name__}")
    return value


APP_SCHEMA: Tuple[SettingSpec, ...] = (
    SettingSpec("FirstRun", SettingType.BOOL, True),
    SettingSpec("Logging", SettingType.BOOL, False),
    SettingSpec("CompatibleVersion", SettingType.STRING),
    SettingSpec("Metrics", SettingType.STRING),
    SettingSpec("RetryCount", SettingType.INT, 3),
    SettingSpec("PositionX", SettingType.INT, 100),
    SettingSpec("PositionY", SettingType.INT, 100),
    SettingSpec("LastUse", SettingType.DATETIME, datetime.min),
    SettingSpec("User", SettingType.STRING),
    SettingSpec("APIKey", SettingType.STRING, encrypted=True,
                description="Third-party API key, stored encrypted"),
)


class Setting:
    """Descriptor exposing one schema entry as a typed attribute."""

    def __init__(self, key: str):
        self.key = key

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return instance.get_typed(self.key)

    def __set__(self, instance, value):
        instance.set_typed(self.key, value)


class AppSettings:
    """The application's settings, typed and backed by a LazyConfigStore."""

    SCHEMA: Tuple[SettingSpec, ...] = APP_SCHEMA

    first_run = Setting("FirstRun")
    logging_enabled = Setting("Logging")
    compatible_version = Setting("CompatibleVersion")
    metrics = Setting("Metrics")
    retry_count = Setting("RetryCount")
    position_x = Setting("PositionX")
    position_y = Setting("PositionY")
    last_use = Setting("LastUse")
    user = Setting("User")
    api_key = Setting("APIKey")

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        encryptor: Optional[Encryptor] = None,
        store: Optional[LazyConfigStore] = None,
    ):
        self.store = store or LazyConfigStore(path, encryptor=encryptor, policy=self.policy())
        self._specs: Dict[str, SettingSpec] = {fold_key(s.key): s for s in self.SCHEMA}

    @classmethod
    def policy(cls) -> EncryptionPolicy:
        return EncryptionPolicy(cls.SCHEMA)

    def spec_for(self, key: str) -> SettingSpec:
        try:
            return self._specs[fold_key(key)]
        except KeyError:
            raise KeyError(f"Unknown setting: {key}") from None

    def get_typed(self, key: str) -> Any:
        spec = self.spec_for(key)
        raw = self.store.get(spec.key)
        if raw is None:
            return spec.default
        if spec.type is not SettingType.STRING and not raw.strip():
            return spec.default

        ok, value = try_parse(spec.type, raw)
        if not ok:
            raise SettingParseError(spec.key, raw, spec.type.value)
        return value

    def set_typed(self, key: str, value: Any) -> None:
        spec = self.spec_for(key)
        self.store.set(spec.key, None if value is None else format_value(spec.type, value))

    def as_dict(self) -> Dict[str, Any]:
        """Typed value of every schema entry."""
        return {spec.key: self.get_typed(spec.key) for spec in self.SCHEMA}


__all__ = [
    'APP_SCHEMA',
    'AppSettings',
    'Setting',
    'try_parse',
    'format_value',
]
