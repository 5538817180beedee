# readme_pro/security.py

"""
Client-side encryption of the remembered API key.

The key is derived from an ambient, session-stable secret (by default the
user agent and origin the web app ran under) rather than from a password the
user types. This deters casual inspection of the local store; it is not
protection against anyone who can read this code and the store together.

Stored formats:
- ``v2:`` PBKDF2-HMAC-SHA256 + AES-GCM, payload is salt || nonce || ciphertext
- ``v1:`` XOR against the repeating ambient secret
- untagged: XOR written before formats were versioned, with a last-resort
  attempt using the historical fixed key
"""

from __future__ import annotations
import base64
import binascii
import logging
import os
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger(__name__)

SALT_LENGTH = 16
NONCE_LENGTH = 12
TAG_LENGTH = 16
KEY_LENGTH = 32
PBKDF2_ITERATIONS = 100_000

LEGACY_OBFUSCATION_KEY = "a-not-so-secret-key-for-obfuscation"


class AmbientSecretProvider:
    """Source of the string keys are derived from."""

    def get_secret(self) -> str:
        raise NotImplementedError


class BrowserAmbientSecret(AmbientSecretProvider):
    """User agent + origin, the way the web app built its secret."""

    def __init__(self, user_agent: str, origin: str = ""):
        self.user_agent = user_agent or ""
        self.origin = origin or ""

    def get_secret(self) -> str:
        return self.user_agent + self.origin


class StaticAmbientSecret(AmbientSecretProvider):
    """A fixed secret, e.g. a per-install random seed kept in configuration."""

    def __init__(self, secret: str):
        self.secret = secret or ""

    def get_secret(self) -> str:
        return self.secret


class StorageFormat(Enum):
    """Version tags of stored secrets, in the order they are checked."""
    AEAD_V2 = "v2:"
    XOR_V1 = "v1:"
    LEGACY = ""

    @classmethod
    def detect(cls, stored: str) -> "StorageFormat":
        for fmt in (cls.AEAD_V2, cls.XOR_V1):
            if stored.startswith(fmt.value):
                return fmt
        return cls.LEGACY

    def strip(self, stored: str) -> str:
        return stored[len(self.value):]


class DecryptionError(Exception):
    """Internal signal that one decoder in the fallback chain failed."""


def xor_bytes(data: bytes, key: bytes) -> bytes:
    """XOR ``data`` against the repeating ``key``. An empty key leaves data unchanged."""
    if not key:
        return bytes(data)
    key_len = len(key)
    return bytes(b ^ key[i % key_len] for i, b in enumerate(data))


class SecurityModule:
    """Encrypts and decrypts a single secret string."""

    def __init__(
        self,
        ambient: Optional[AmbientSecretProvider] = None,
        *,
        iterations: int = PBKDF2_ITERATIONS,
        random_bytes: Callable[[int], bytes] = os.urandom,
        cipher_factory: Callable[[bytes], AESGCM] = AESGCM,
        crypto_available: bool = True,
    ):
        """
        Initialize the security module.

        Args:
            ambient: Provider of the secret keys are derived from
            iterations: PBKDF2 iteration count (at least 100,000)
            random_bytes: Source of salts and nonces
            cipher_factory: Builds the AEAD cipher from a derived key
            crypto_available: False simulates a platform without AES-GCM
        """
        if iterations < PBKDF2_ITERATIONS:
            raise ValueError(f"PBKDF2 iterations must be at least {PBKDF2_ITERATIONS}")
        self.ambient = ambient or StaticAmbientSecret("")
        self.iterations = iterations
        self.random_bytes = random_bytes
        self.cipher_factory = cipher_factory
        self.crypto_available = crypto_available
        self._decoders: Dict[StorageFormat, Tuple[Callable[[str], str], ...]] = {
            StorageFormat.AEAD_V2: (self._decrypt_aead,),
            StorageFormat.XOR_V1: (self._decrypt_xor_ambient,),
            StorageFormat.LEGACY: (self._decrypt_xor_ambient, self._decrypt_xor_legacy),
        }

    def _secret(self) -> bytes:
        return self.ambient.get_secret().encode("utf-8")

    def _derive_key(self, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=salt,
            iterations=self.iterations,
        )
        return kdf.derive(self._secret())

    # -------- Encryption --------
    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a secret for storage.

        Uses AES-GCM when available and downgrades to XOR obfuscation
        otherwise; never raises for a string input.

        Args:
            plaintext: The secret to protect

        Returns:
            Version-tagged, base64-encoded string
        """
        if not self.crypto_available:
            logger.warning("AES-GCM not available, falling back to XOR obfuscation")
            return self._encrypt_xor(plaintext)

        try:
            salt = self.random_bytes(SALT_LENGTH)
            nonce = self.random_bytes(NONCE_LENGTH)
            cipher = self.cipher_factory(self._derive_key(salt))
            ciphertext = cipher.encrypt(nonce, plaintext.encode("utf-8"), None)
        except Exception as e:
            logger.error(f"AES-GCM encryption failed, falling back to XOR obfuscation: {e}")
            return self._encrypt_xor(plaintext)

        payload = base64.b64encode(salt + nonce + ciphertext).decode("ascii")
        return StorageFormat.AEAD_V2.value + payload

    def _encrypt_xor(self, plaintext: str) -> str:
        obfuscated = xor_bytes(plaintext.encode("utf-8"), self._secret())
        return StorageFormat.XOR_V1.value + base64.b64encode(obfuscated).decode("ascii")

    # -------- Decryption --------
    def decrypt(self, stored: Optional[str]) -> str:
        """
        Decrypt a value produced by :meth:`encrypt` or by an older format.

        Args:
            stored: Version-tagged (or legacy untagged) string

        Returns:
            The plaintext, or an empty string when nothing usable could be recovered
        """
        if not stored:
            return ""

        fmt = StorageFormat.detect(stored)
        for decoder in self._decoders[fmt]:
            try:
                return decoder(stored)
            except DecryptionError as e:
                logger.warning(f"Could not decrypt {fmt.name} value: {e}")
        return ""

    def _decrypt_aead(self, stored: str) -> str:
        if not self.crypto_available:
            raise DecryptionError("AES-GCM not available")

        try:
            combined = base64.b64decode(StorageFormat.AEAD_V2.strip(stored), validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError(f"invalid base64: {e}") from e

        if len(combined) < SALT_LENGTH + NONCE_LENGTH + TAG_LENGTH:
            raise DecryptionError("payload too short")

        salt = combined[:SALT_LENGTH]
        nonce = combined[SALT_LENGTH:SALT_LENGTH + NONCE_LENGTH]
        ciphertext = combined[SALT_LENGTH + NONCE_LENGTH:]
        try:
            cipher = self.cipher_factory(self._derive_key(salt))
            plaintext = cipher.decrypt(nonce, ciphertext, None)
            return plaintext.decode("utf-8")
        except InvalidTag as e:
            raise DecryptionError("authentication failed; data is corrupt or from a different environment") from e
        except (UnicodeDecodeError, ValueError) as e:
            raise DecryptionError(str(e)) from e

    def _decrypt_xor(self, encoded: str, key: bytes) -> str:
        try:
            obfuscated = base64.b64decode(encoded, validate=True)
            return xor_bytes(obfuscated, key).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError, ValueError) as e:
            raise DecryptionError(str(e)) from e

    def _decrypt_xor_ambient(self, stored: str) -> str:
        return self._decrypt_xor(StorageFormat.detect(stored).strip(stored), self._secret())

    def _decrypt_xor_legacy(self, stored: str) -> str:
        return self._decrypt_xor(stored, LEGACY_OBFUSCATION_KEY.encode("utf-8"))
