"""Credential encryption."""

from sitewright.secrets.codec import (
    DEFAULT_SECRET_ENV,
    NONCE_SIZE,
    TAG_SIZE,
    SecretCodec,
    get_secret_codec,
)

__all__ = [
    "DEFAULT_SECRET_ENV",
    "NONCE_SIZE",
    "SecretCodec",
    "TAG_SIZE",
    "get_secret_codec",
]
