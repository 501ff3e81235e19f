"""Tests for sitewright.secrets — AES-GCM credential codec."""

import base64
import os
from unittest.mock import patch

import pytest

from sitewright.errors import ConfigurationError, DecryptionError
from sitewright.secrets.codec import NONCE_SIZE, TAG_SIZE, SecretCodec, get_secret_codec


class TestRoundTrip:
    @pytest.mark.parametrize("plaintext", ["ghp_abc123", "", "ünïcødé ✓", "x" * 5000])
    def test_decrypt_inverts_encrypt(self, codec, plaintext):
        assert codec.decrypt(codec.encrypt(plaintext)) == plaintext

    def test_fresh_nonce_per_call(self, codec):
        assert codec.encrypt("same") != codec.encrypt("same")

    def test_payload_layout(self, codec):
        raw = base64.b64decode(codec.encrypt("token"))
        assert len(raw) == NONCE_SIZE + TAG_SIZE + len("token")

    def test_same_secret_decrypts_across_instances(self, codec):
        payload = codec.encrypt("token")
        assert SecretCodec("test-session-secret").decrypt(payload) == "token"


class TestTamperDetection:
    def test_flipping_any_byte_fails(self, codec):
        raw = bytearray(base64.b64decode(codec.encrypt("ghp_secret")))
        for i in range(len(raw)):
            tampered = bytearray(raw)
            tampered[i] ^= 0x01
            with pytest.raises(DecryptionError):
                codec.decrypt(base64.b64encode(bytes(tampered)).decode("ascii"))

    def test_wrong_secret_fails(self, codec):
        payload = codec.encrypt("token")
        with pytest.raises(DecryptionError, match="authentication"):
            SecretCodec("another-secret").decrypt(payload)

    def test_short_payload(self, codec):
        with pytest.raises(DecryptionError, match="Invalid payload length"):
            codec.decrypt(base64.b64encode(b"\x00" * 27).decode("ascii"))

    @pytest.mark.parametrize("payload", ["", "not base64!!", None, 42])
    def test_malformed_input(self, codec, payload):
        with pytest.raises(DecryptionError):
            codec.decrypt(payload)

    def test_non_canonical_base64(self, codec):
        payload = codec.encrypt("token")
        with pytest.raises(DecryptionError):
            codec.decrypt(payload + "\n")

    def test_error_code(self, codec):
        with pytest.raises(DecryptionError) as exc_info:
            codec.decrypt("")
        assert exc_info.value.code == "decryption_error"


class TestConfiguration:
    def test_empty_secret_rejected(self):
        with pytest.raises(ConfigurationError):
            SecretCodec("")

    def test_from_env_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError, match="SESSION_SECRET"):
                SecretCodec.from_env()

    def test_get_secret_codec_is_cached(self):
        with patch.dict(os.environ, {"SESSION_SECRET": "abc"}):
            assert get_secret_codec() is get_secret_codec()

    def test_get_secret_codec_custom_env(self):
        with patch.dict(os.environ, {"MY_SECRET": "abc"}):
            codec = get_secret_codec("MY_SECRET")
        assert SecretCodec("abc").decrypt(codec.encrypt("t")) == "t"
