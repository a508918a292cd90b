"""
Pytest configuration and shared fixtures for LazyConfig tests.

This module provides common fixtures for testing the settings store, the
persistence layer and the cipher.
"""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Generator

import pytest

# Add the parent directory to the path for imports
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lazyconfig.config.persistence import SettingsFile
from lazyconfig.config.policy import EncryptionPolicy
from lazyconfig.config.store import LazyConfigStore
from lazyconfig.crypto.cipher import AesPortableEncryptor
from lazyconfig.utils.error_handling import get_error_aggregator
from lazyconfig.utils.extensions import hex_to_bytes


PASSPHRASE = "super-secret-passphrase"
OTHER_PASSPHRASE = "a-completely-different-passphrase"
SALT_HEX = "f94aaa0dacf2454fb0b8ab2aa8ec1465"
SAMPLE_API_KEY = "ThisRepresentsASampleAPIKey"


# ===========================================================================
# Temporary Directory Fixtures
# ===========================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    tmpdir = tempfile.mkdtemp(prefix="lazyconfig_test_")
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def settings_path(temp_dir: Path) -> Path:
    """Provide a settings file path that does not exist yet."""
    return temp_dir / "settings.config"


@pytest.fixture(autouse=True)
def clear_error_aggregator():
    """Keep error deduplication from leaking between tests."""
    get_error_aggregator().clear()
    yield
    get_error_aggregator().clear()


# ===========================================================================
# Cipher Fixtures
# ===========================================================================

@pytest.fixture
def salt() -> bytes:
    """Provide the 16-byte salt shared by every machine in the tests."""
    return hex_to_bytes(SALT_HEX)


@pytest.fixture
def cipher(salt: bytes) -> AesPortableEncryptor:
    """Provide a cipher built from the sample passphrase."""
    return AesPortableEncryptor(PASSPHRASE, salt)


@pytest.fixture
def other_cipher(salt: bytes) -> AesPortableEncryptor:
    """Provide a cipher with the same salt but a different passphrase."""
    return AesPortableEncryptor(OTHER_PASSPHRASE, salt)


# ===========================================================================
# Store Fixtures
# ===========================================================================

@pytest.fixture
def policy() -> EncryptionPolicy:
    """Provide a policy that encrypts only APIKey."""
    return EncryptionPolicy([("APIKey", True), ("User", False)])


@pytest.fixture
def store(settings_path: Path, cipher: AesPortableEncryptor,
          policy: EncryptionPolicy) -> LazyConfigStore:
    """Provide an encrypting store over a fresh settings file."""
    return LazyConfigStore(settings_path, encryptor=cipher, policy=policy)


@pytest.fixture
def plain_store(settings_path: Path) -> LazyConfigStore:
    """Provide a store with encryption disabled."""
    return LazyConfigStore(settings_path)


@pytest.fixture
def settings_file(settings_path: Path) -> SettingsFile:
    """Provide a persistence layer over a fresh settings file."""
    return SettingsFile(settings_path)


# ===========================================================================
# Utility Functions
# ===========================================================================

def write_settings(path: Path, data: Dict, indent=None) -> None:
    """Write a settings file directly, bypassing the store."""
    path.write_text(json.dumps(data, indent=indent, ensure_ascii=False), encoding='utf-8')


def read_settings(path: Path) -> Dict:
    """Read a settings file directly, bypassing the store."""
    return json.loads(path.read_text(encoding='utf-8'))


# ===========================================================================
# Markers Registration
# ===========================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "security: Security-specific tests")
    config.addinivalue_line("markers", "concurrency: Multi-threaded tests")
