"""
LazyConfig - embedded key-value settings with optional per-key encryption.

    from lazyconfig import LazyConfigStore, AesPortableEncryptor, EncryptionPolicy

    cipher = AesPortableEncryptor("super-secret-passphrase", salt)
    store = LazyConfigStore("settings.config", encryptor=cipher,
                            policy=EncryptionPolicy.from_keys(["APIKey"]))
    store.set("APIKey", "...")
"""

from .errors import (
    LazyConfigError,
    InvalidCipherParameters,
    CipherError,
    EncryptionFailure,
    DecryptionFailure,
    DecryptionFailed,
    LoadFailure,
    SaveFailure,
    SettingParseError,
)
from .crypto import Encryptor, AesPortableEncryptor
from .config import (
    SettingType,
    SettingSpec,
    EncryptionPolicy,
    SettingsMap,
    LoadStatus,
    SettingsFile,
    LazyConfigStore,
    APP_SCHEMA,
    AppSettings,
)

__version__ = "1.0.0"

__all__ = [
    'LazyConfigError',
    'InvalidCipherParameters',
    'CipherError',
    'EncryptionFailure',
    'DecryptionFailure',
    'DecryptionFailed',
    'LoadFailure',
    'SaveFailure',
    'SettingParseError',
    'Encryptor',
    'AesPortableEncryptor',
    'SettingType',
    'SettingSpec',
    'EncryptionPolicy',
    'SettingsMap',
    'LoadStatus',
    'SettingsFile',
    'LazyConfigStore',
    'APP_SCHEMA',
    'AppSettings',
    '__version__',
]
