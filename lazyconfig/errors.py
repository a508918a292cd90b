"""
Exception hierarchy for LazyConfig.

Load and save failures are recovered inside the persistence layer and only
recorded; cipher failures always propagate to the caller of get/set.
"""

from typing import Optional


class LazyConfigError(Exception):
    """Base class for all LazyConfig errors."""


class InvalidCipherParameters(LazyConfigError, ValueError):
    """The passphrase, salt or iteration count violates a hard precondition."""

    def __init__(self, parameter: str, message: str):
        self.parameter = parameter
        super().__init__(f"{parameter}: {message}")


class CipherError(LazyConfigError):
    """Base class for encryption and decryption faults."""


class EncryptionFailure(CipherError):
    """A value could not be encrypted."""


class DecryptionFailure(CipherError):
    """
    A ciphertext envelope could not be decrypted.

    Raised for malformed text encoding, truncated or misaligned envelopes,
    invalid padding (wrong key or tampering) and non-UTF-8 plaintext.
    """


class DecryptionFailed(DecryptionFailure):
    """Store-level decryption failure for a specific settings key."""

    def __init__(self, key: str, message: Optional[str] = None):
        self.key = key
        super().__init__(message or f"Could not decrypt '{key}'")


class LoadFailure(LazyConfigError):
    """The settings file exists but could not be read or parsed."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Error reading config '{path}': {message}")


class SaveFailure(LazyConfigError):
    """The settings file could not be written."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Error saving config '{path}': {message}")


class SettingParseError(LazyConfigError, ValueError):
    """A stored string is not recognizable as the setting's declared type."""

    def __init__(self, key: str, raw: str, expected: str):
        self.key = key
        self.raw = raw
        self.expected = expected
        super().__init__(f"Setting '{key}' holds {raw!r}, expected {expected}")


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
]
