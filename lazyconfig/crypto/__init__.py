"""
Cryptographic module for LazyConfig.

Portable passphrase-based AES encryption for individual setting values.
"""

from .cipher import (
    Encryptor,
    AesPortableEncryptor,
    derive_key,
)

__all__ = [
    'Encryptor',
    'AesPortableEncryptor',
    'derive_key',
]
