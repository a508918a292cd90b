"""
Centralized Constants Module for LazyConfig.

This module consolidates the fixed values used by the settings store and the
cipher so that security-sensitive limits are easy to audit in one place.

SECURITY: The cipher limits below are hard preconditions. They may be raised
through the environment but never lowered below the documented minimums.

Usage:
    from lazyconfig.constants import Defaults, CipherLimits, Permissions

    store = LazyConfigStore(Defaults.FILE_NAME)
    os.chmod(path, Permissions.SETTINGS_FILE)
"""

import os
import logging
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

ENV_PREFIX = "LAZYCONFIG_"


# =============================================================================
# ENVIRONMENT VARIABLE OVERRIDE UTILITIES
# =============================================================================

T = TypeVar('T')


def env_override(
    env_var: str,
    default: T,
    converter: Callable[[str], T] = str,
    validator: Optional[Callable[[T], bool]] = None,
    min_value: Optional[T] = None,
    max_value: Optional[T] = None,
) -> T:
    """Get a configuration value with environment variable override.

    Args:
        env_var: Environment variable name (will be prefixed with LAZYCONFIG_)
        default: Default value if env var not set
        converter: Function to convert string to target type
        validator: Optional validation function
        min_value: Optional minimum allowed value
        max_value: Optional maximum allowed value

    Returns:
        Configured value (from env var if valid, otherwise default)
    """
    full_env_var = f"{ENV_PREFIX}{env_var}"
    env_value = os.environ.get(full_env_var)

    if env_value is None:
        return default

    try:
        converted = converter(env_value)

        if min_value is not None and converted < min_value:
            logger.warning(
                f"{full_env_var}={env_value} below minimum {min_value}, using default"
            )
            return default
        if max_value is not None and converted > max_value:
            logger.warning(
                f"{full_env_var}={env_value} above maximum {max_value}, using default"
            )
            return default

        if validator is not None and not validator(converted):
            logger.warning(f"{full_env_var}={env_value} failed validation, using default")
            return default

        logger.debug(f"Using {full_env_var} override")
        return converted

    except (ValueError, TypeError) as e:
        logger.warning(f"Invalid value for {full_env_var}: {e}, using default")
        return default


# =============================================================================
# CIPHER LIMITS
# =============================================================================

@dataclass(frozen=True)
class CipherLimits:
    """
    Hard preconditions and sizes for the portable AES cipher.

    The key is 256 bits, the block (and therefore the IV) is 128 bits.
    """
    MIN_PASSPHRASE_LENGTH: int = 16     # characters
    MIN_SALT_BYTES: int = 16
    MIN_ITERATIONS: int = 10000
    KEY_BYTES: int = 32                 # AES-256
    IV_BYTES: int = 16
    BLOCK_BITS: int = 128


# =============================================================================
# DEFAULTS
# =============================================================================

@dataclass(frozen=True)
class Defaults:
    """Default values for the store, the cipher and the CLI."""
    FILE_NAME: str = "settings.config"
    KDF_ITERATIONS: int = 10000
    KDF_ALGORITHM: str = "sha1"
    JSON_INDENT: int = 2
    ERROR_DEDUP_WINDOW: int = 60        # seconds


@dataclass(frozen=True)
class Permissions:
    """File permission modes."""
    SETTINGS_FILE: int = 0o600


def default_settings_file() -> str:
    """Settings file name, overridable through LAZYCONFIG_FILE."""
    return env_override("FILE", Defaults.FILE_NAME, validator=lambda v: bool(v.strip()))


def default_kdf_iterations() -> int:
    """Iteration count, overridable through LAZYCONFIG_KDF_ITERATIONS."""
    return env_override(
        "KDF_ITERATIONS",
        Defaults.KDF_ITERATIONS,
        converter=int,
        min_value=CipherLimits.MIN_ITERATIONS,
    )


__all__ = [
    'ENV_PREFIX',
    'env_override',
    'CipherLimits',
    'Defaults',
    'Permissions',
    'default_settings_file',
    'default_kdf_iterations',
]
