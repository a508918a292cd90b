"""
Tests for the Constants module.

Tests cipher limits, defaults and environment variable overrides.
"""

import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lazyconfig.constants import (
    CipherLimits,
    Defaults,
    Permissions,
    default_kdf_iterations,
    default_settings_file,
    env_override,
)


# ===========================================================================
# Cipher Limits Tests
# ===========================================================================

class TestCipherLimits:
    """Tests for CipherLimits dataclass."""

    def test_aes_256_sizes(self):
        """Key is 256 bits, IV is one 128-bit block."""
        assert CipherLimits.KEY_BYTES == 32
        assert CipherLimits.IV_BYTES == 16
        assert CipherLimits.BLOCK_BITS == CipherLimits.IV_BYTES * 8

    def test_minimums(self):
        assert CipherLimits.MIN_PASSPHRASE_LENGTH == 16
        assert CipherLimits.MIN_SALT_BYTES == 16
        assert CipherLimits.MIN_ITERATIONS == 10000

    def test_default_iterations_meet_minimum(self):
        assert Defaults.KDF_ITERATIONS >= CipherLimits.MIN_ITERATIONS


# ===========================================================================
# Defaults Tests
# ===========================================================================

class TestDefaults:
    """Tests for Defaults dataclass."""

    def test_file_name(self):
        assert Defaults.FILE_NAME == "settings.config"

    def test_json_indent(self):
        assert Defaults.JSON_INDENT == 2

    def test_settings_file_owner_only(self):
        """Settings file should not be group or world accessible."""
        assert Permissions.SETTINGS_FILE & 0o077 == 0


# ===========================================================================
# Environment Override Tests
# ===========================================================================

class TestEnvOverride:
    """Tests for LAZYCONFIG_* environment variable overrides."""

    def test_unset_returns_default(self, monkeypatch):
        monkeypatch.delenv("LAZYCONFIG_SAMPLE", raising=False)
        assert env_override("SAMPLE", 5, converter=int) == 5

    def test_converted_value(self, monkeypatch):
        monkeypatch.setenv("LAZYCONFIG_SAMPLE", "12")
        assert env_override("SAMPLE", 5, converter=int) == 12

    def test_invalid_value_returns_default(self, monkeypatch):
        monkeypatch.setenv("LAZYCONFIG_SAMPLE", "twelve")
        assert env_override("SAMPLE", 5, converter=int) == 5

    def test_below_minimum_returns_default(self, monkeypatch):
        monkeypatch.setenv("LAZYCONFIG_SAMPLE", "1")
        assert env_override("SAMPLE", 5, converter=int, min_value=3) == 5

    def test_above_maximum_returns_default(self, monkeypatch):
        monkeypatch.setenv("LAZYCONFIG_SAMPLE", "100")
        assert env_override("SAMPLE", 5, converter=int, max_value=10) == 5

    def test_validator_rejects(self, monkeypatch):
        monkeypatch.setenv("LAZYCONFIG_SAMPLE", "odd")
        assert env_override("SAMPLE", "even", validator=lambda v: v == "even") == "even"

    def test_settings_file_override(self, monkeypatch):
        monkeypatch.setenv("LAZYCONFIG_FILE", "app.config")
        assert default_settings_file() == "app.config"

    def test_blank_settings_file_ignored(self, monkeypatch):
        monkeypatch.setenv("LAZYCONFIG_FILE", "  ")
        assert default_settings_file() == Defaults.FILE_NAME

    def test_iterations_can_be_raised(self, monkeypatch):
        monkeypatch.setenv("LAZYCONFIG_KDF_ITERATIONS", "50000")
        assert default_kdf_iterations() == 50000

    def test_iterations_cannot_be_lowered(self, monkeypatch):
        monkeypatch.setenv("LAZYCONFIG_KDF_ITERATIONS", "1000")
        assert default_kdf_iterations() == Defaults.KDF_ITERATIONS
