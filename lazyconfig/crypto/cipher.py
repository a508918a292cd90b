"""
Portable AES Cipher - Passphrase-derived encryption for individual settings.

Provides:
- PBKDF2 key derivation from a (passphrase, salt, iterations) triple
- AES-256 in CBC mode with PKCS7 padding
- A fresh random 128-bit IV for every encryption
- Self-contained envelopes: base64(IV || ciphertext)

The envelope layout is compatible with settings files produced by other
AES-CBC/PKCS7 implementations that use the same derivation parameters, so
a configuration can be shared across machines.

SECURITY: The salt must be identical on every machine that shares a settings
file, and should be treated as configuration-only data rather than published.
The envelope carries no MAC: wrong keys and damaged ciphertext are detected
through padding and UTF-8 validation, which catches truncation, corruption of
the final blocks and key mismatches, but not every possible bit flip.
"""

import base64
import binascii
import logging
import os
from abc import ABC, abstractmethod
from typing import Union

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from lazyconfig.constants import CipherLimits, Defaults
from lazyconfig.errors import (
    DecryptionFailure,
    EncryptionFailure,
    InvalidCipherParameters,
)

logger = logging.getLogger(__name__)

# PRFs accepted for key derivation
_KDF_ALGORITHMS = {
    'sha1': hashes.SHA1,
    'sha256': hashes.SHA256,
    'sha512': hashes.SHA512,
}


class Encryptor(ABC):
    """Encryption contract used by the settings store."""

    @abstractmethod
    def encrypt(self, plaintext: str) -> str:
        """Return the text-encoded ciphertext for plaintext."""

    @abstractmethod
    def decrypt(self, ciphertext: str) -> str:
        """Return the plaintext for a value produced by encrypt()."""


def derive_key(
    passphrase: str,
    salt: bytes,
    iterations: int,
    algorithm: str = Defaults.KDF_ALGORITHM,
) -> bytes:
    """
    Derive a 256-bit key with PBKDF2.

    Parameters are not validated here; AesPortableEncryptor enforces the
    minimums before calling this.
    """
    try:
        hash_cls = _KDF_ALGORITHMS[algorithm.lower()]
    except KeyError:
        raise InvalidCipherParameters(
            'algorithm',
            f"Unsupported key derivation hash {algorithm!r}, "
            f"expected one of {sorted(_KDF_ALGORITHMS)}",
        ) from None

    kdf = PBKDF2HMAC(
        algorithm=hash_cls(),
        length=CipherLimits.KEY_BYTES,
        salt=bytes(salt),
        iterations=iterations,
    )
    return kdf.derive(passphrase.encode('utf-8'))


class AesPortableEncryptor(Encryptor):
    """
    Portable AES implementation so that configurations can be shared across
    machine domains.

    PBKDF2 repeatedly hashes the passphrase and salt through an HMAC, which
    makes brute-force attacks expensive. Passphrase length matters, but the
    salt and iteration count carry most of that cost.

    Usage notes:
    - Salt must be the same across machines to preserve portability.
    - Salt must be kept secret or obfuscated (or held as configuration only).
    - The derived key lives only on this instance and is never persisted.
    """

    def __init__(
        self,
        passphrase: str,
        salt: Union[bytes, bytearray],
        iterations: int = Defaults.KDF_ITERATIONS,
        algorithm: str = Defaults.KDF_ALGORITHM,
    ):
        if not passphrase:
            raise InvalidCipherParameters('passphrase', "The passphrase cannot be null or empty.")
        if not isinstance(passphrase, str):
            raise InvalidCipherParameters('passphrase', "The passphrase must be a string.")
        if len(passphrase) < CipherLimits.MIN_PASSPHRASE_LENGTH:
            raise InvalidCipherParameters(
                'passphrase',
                f"The passphrase should be no less than "
                f"{CipherLimits.MIN_PASSPHRASE_LENGTH} characters.",
            )
        if not isinstance(salt, (bytes, bytearray)):
            raise InvalidCipherParameters('salt', "The salt must be bytes.")
        if len(salt) < CipherLimits.MIN_SALT_BYTES:
            raise InvalidCipherParameters(
                'salt',
                f"The salt should be no less than {CipherLimits.MIN_SALT_BYTES} bytes.",
            )
        if isinstance(iterations, bool) or not isinstance(iterations, int):
            raise InvalidCipherParameters('iterations', "The iteration count must be an integer.")
        if iterations < CipherLimits.MIN_ITERATIONS:
            raise InvalidCipherParameters(
                'iterations',
                f"The iteration count is too low, "
                f"{CipherLimits.MIN_ITERATIONS} minimum is required.",
            )

        self._algorithm = algorithm.lower()
        self._iterations = iterations
        self._key = derive_key(passphrase, salt, iterations, self._algorithm)
        logger.debug(
            f"Derived {CipherLimits.KEY_BYTES * 8}-bit key "
            f"(PBKDF2-HMAC-{self._algorithm.upper()}, {iterations} iterations)"
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(algorithm={self._algorithm!r}, "
            f"iterations={self._iterations})"
        )

    @property
    def iterations(self) -> int:
        return self._iterations

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def _cipher(self, iv: bytes) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(iv))

    def encrypt(self, plaintext: str) -> str:
        """
        Returns the given plaintext as a base64 string of IV || ciphertext.

        Identical plaintexts produce different outputs because the IV is
        random for every call.
        """
        if not isinstance(plaintext, str):
            raise EncryptionFailure(
                f"Only strings can be encrypted, got {type(plaintext).__name__}"
            )

        try:
            iv = os.urandom(CipherLimits.IV_BYTES)
            padder = padding.PKCS7(CipherLimits.BLOCK_BITS).padder()
            padded = padder.update(plaintext.encode('utf-8')) + padder.finalize()

            encryptor = self._cipher(iv).encryptor()
            cipher_bytes = encryptor.update(padded) + encryptor.finalize()
        except (ValueError, UnicodeEncodeError) as e:
            raise EncryptionFailure(f"Encryption failed: {e}") from e

        return base64.b64encode(iv + cipher_bytes).decode('ascii')

    def decrypt(self, ciphertext: str) -> str:
        """
        Returns the given base64 envelope as a decrypted string.

        Raises:
            DecryptionFailure: malformed encoding, truncated or misaligned
                envelope, invalid padding (wrong key or tampering), or
                plaintext that is not valid UTF-8.
        """
        if not isinstance(ciphertext, str):
            raise DecryptionFailure(
                f"Ciphertext must be a string, got {type(ciphertext).__name__}"
            )

        try:
            envelope = base64.b64decode(ciphertext.strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecryptionFailure(f"Ciphertext is not valid base64: {e}") from e

        block_bytes = CipherLimits.BLOCK_BITS // 8
        if len(envelope) < CipherLimits.IV_BYTES + block_bytes:
            raise DecryptionFailure(
                f"Ciphertext too short ({len(envelope)} bytes) to hold an IV and one block"
            )

        iv = envelope[:CipherLimits.IV_BYTES]
        cipher_bytes = envelope[CipherLimits.IV_BYTES:]
        if len(cipher_bytes) % block_bytes:
            raise DecryptionFailure(
                f"Ciphertext length {len(cipher_bytes)} is not a multiple of the block size"
            )

        try:
            decryptor = self._cipher(iv).decryptor()
            padded = decryptor.update(cipher_bytes) + decryptor.finalize()

            unpadder = padding.PKCS7(CipherLimits.BLOCK_BITS).unpadder()
            plain_bytes = unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise DecryptionFailure(
                "Invalid padding - key mismatch or data corruption"
            ) from e

        try:
            return plain_bytes.decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecryptionFailure(
                "Decrypted data is not valid UTF-8 - key mismatch or data corruption"
            ) from e


__all__ = [
    'Encryptor',
    'AesPortableEncryptor',
    'derive_key',
]
