"""Authenticated encryption for repository credentials at rest.

Payload layout (base64 of the concatenation):

    nonce (12 bytes) || auth tag (16 bytes) || ciphertext
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import os
from functools import lru_cache

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from sitewright.errors import ConfigurationError, DecryptionError

logger = logging.getLogger(__name__)

NONCE_SIZE = 12
TAG_SIZE = 16
DEFAULT_SECRET_ENV = "SESSION_SECRET"


class SecretCodec:
    """AES-256-GCM codec keyed by the SHA-256 digest of a configured secret."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ConfigurationError("Encryption secret is not configured")
        self._aead = AESGCM(hashlib.sha256(secret.encode("utf-8")).digest())

    @classmethod
    def from_env(cls, env_name: str = DEFAULT_SECRET_ENV) -> SecretCodec:
        secret = os.environ.get(env_name, "")
        if not secret:
            raise ConfigurationError(
                f"Encryption secret not found. Set the {env_name} environment variable."
            )
        return cls(secret)

    def encrypt(self, plaintext: str) -> str:
        nonce = os.urandom(NONCE_SIZE)
        sealed = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        # AESGCM appends the tag; the stored layout puts it before the ciphertext.
        ciphertext, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
        return base64.b64encode(nonce + tag + ciphertext).decode("ascii")

    def decrypt(self, payload: str) -> str:
        if not isinstance(payload, str) or not payload:
            raise DecryptionError("Empty or non-string payload")

        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("Payload is not valid base64") from e
        # Reject non-canonical encodings so every character of the payload is covered.
        if base64.b64encode(raw).decode("ascii") != payload:
            raise DecryptionError("Payload is not canonically encoded")

        if len(raw) < NONCE_SIZE + TAG_SIZE:
            raise DecryptionError(
                f"Invalid payload length: {len(raw)}. "
                f"Expected at least {NONCE_SIZE + TAG_SIZE} bytes"
            )

        nonce = raw[:NONCE_SIZE]
        tag = raw[NONCE_SIZE : NONCE_SIZE + TAG_SIZE]
        ciphertext = raw[NONCE_SIZE + TAG_SIZE :]
        try:
            plaintext = self._aead.decrypt(nonce, ciphertext + tag, None)
        except InvalidTag as e:
            logger.warning("credential payload failed authentication (%d bytes)", len(raw))
            raise DecryptionError("Payload failed authentication") from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Decrypted payload is not UTF-8 text") from e


@lru_cache(maxsize=None)
def get_secret_codec(env_name: str = DEFAULT_SECRET_ENV) -> SecretCodec:
    """Process-wide codec; the key is derived once per env var name."""
    return SecretCodec.from_env(env_name)
