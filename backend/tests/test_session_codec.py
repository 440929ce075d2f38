"""
Koalab Backend: Session Codec Unit Tests
=========================================

What we test:
    ✅ Encoded values decode back unchanged
    ✅ Tokens fail under another secret, another field name, or after tampering
    ✅ Expired tokens are refused
    ✅ Secret file is generated once (32 bytes, mode 0600) and then reused
    ✅ Unusable secret file locations are fatal (StartupError)
"""

import os
import stat

import pytest

from koalab.exceptions import AuthenticationError, StartupError
from koalab.services.session_codec import (
    SECRET_LENGTH,
    SessionCodec,
    load_or_create_secret,
)


class TestSessionCodec:
    """Encode/decode behaviour."""

    def setup_method(self):
        self.codec = SessionCodec(b"k" * SECRET_LENGTH)

    @pytest.mark.parametrize("value", ["a@b.com", "", "ünïcödé@example.org", "x" * 500])
    def test_round_trip(self, value):
        token = self.codec.encode("email", value)
        assert self.codec.decode("email", token) == value

    def test_token_is_opaque(self):
        """The email should not appear in the cookie as plain text."""
        token = self.codec.encode("email", "a@b.com")
        assert "a@b.com" not in token

    def test_other_secret_rejected(self):
        token = self.codec.encode("email", "a@b.com")
        other = SessionCodec(b"z" * SECRET_LENGTH)
        with pytest.raises(AuthenticationError):
            other.decode("email", token)

    def test_other_field_rejected(self):
        token = self.codec.encode("email", "a@b.com")
        with pytest.raises(AuthenticationError):
            self.codec.decode("user", token)

    def test_mutated_payload_rejected(self):
        token = self.codec.encode("email", "a@b.com")
        first = "A" if token[0] != "A" else "B"
        with pytest.raises(AuthenticationError):
            self.codec.decode("email", first + token[1:])

    def test_mutated_signature_rejected(self):
        token = self.codec.encode("email", "a@b.com")
        payload, _, signature = token.rpartition(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
        with pytest.raises(AuthenticationError):
            self.codec.decode("email", f"{payload}.{flipped}")

    @pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c", "...."])
    def test_garbage_rejected(self, garbage):
        with pytest.raises(AuthenticationError):
            self.codec.decode("email", garbage)

    def test_expired_token_rejected(self):
        token = self.codec.encode("email", "a@b.com")
        strict = SessionCodec(b"k" * SECRET_LENGTH, max_age=-1)
        with pytest.raises(AuthenticationError) as exc_info:
            strict.decode("email", token)
        assert exc_info.value.context["reason"] == "expired"

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            SessionCodec(b"")


class TestSecretFile:
    """Secret generation and reuse across restarts."""

    @pytest.mark.asyncio
    async def test_generates_secret_when_absent(self, tmp_path):
        path = tmp_path / ".secret"

        key = await load_or_create_secret(str(path))

        assert len(key) == SECRET_LENGTH
        assert path.read_bytes() == key
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    @pytest.mark.asyncio
    async def test_reuses_existing_secret(self, tmp_path):
        path = tmp_path / ".secret"

        first = await load_or_create_secret(str(path))
        second = await load_or_create_secret(str(path))

        assert first == second

    @pytest.mark.asyncio
    async def test_sessions_survive_restart(self, tmp_path):
        """A token minted before a restart still decodes afterwards."""
        path = str(tmp_path / ".secret")
        token = SessionCodec(await load_or_create_secret(path)).encode("email", "a@b.com")

        restarted = SessionCodec(await load_or_create_secret(path))

        assert restarted.decode("email", token) == "a@b.com"

    @pytest.mark.asyncio
    async def test_unwritable_location_is_fatal(self, tmp_path):
        path = tmp_path / "missing-dir" / ".secret"
        with pytest.raises(StartupError, match="Can't write"):
            await load_or_create_secret(str(path))

    @pytest.mark.asyncio
    async def test_unreadable_path_is_fatal(self, tmp_path):
        """A directory where the file should be cannot be read."""
        path = tmp_path / ".secret"
        path.mkdir()
        with pytest.raises(StartupError, match="Can't read"):
            await load_or_create_secret(str(path))

    @pytest.mark.asyncio
    async def test_empty_file_is_fatal(self, tmp_path):
        path = tmp_path / ".secret"
        path.write_bytes(b"")
        with pytest.raises(StartupError, match="empty"):
            await load_or_create_secret(str(path))
