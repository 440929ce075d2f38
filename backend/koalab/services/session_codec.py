"""
Koalab Backend: Session Codec
==============================

What:  Turns an email address into a tamper-evident cookie value and back.
How:   itsdangerous URLSafeTimedSerializer (HMAC-SHA256). The cookie name is
       used as the salt, so a token minted for one field never decodes under
       another. The embedded timestamp bounds the token's age.
Who:   POST /api/user mints tokens; the session gate decodes them.

Secret Lifecycle:
    The signing key is 32 random bytes kept in SECRET_FILE. It is generated
    on the very first start, written with mode 0600, and re-read on every
    later start so existing sessions survive restarts. Any failure to read
    or write that file is fatal (StartupError).
"""

import hashlib
import logging
import os
import secrets
from pathlib import Path

import aiofiles
from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer

from koalab.exceptions import AuthenticationError, StartupError

logger = logging.getLogger(__name__)

# Length in bytes of a generated signing key
SECRET_LENGTH = 32


def _private_opener(path: str, flags: int) -> int:
    # Owner read/write only
    return os.open(path, flags, 0o600)


async def load_or_create_secret(path: str) -> bytes:
    """
    Return the signing key stored at `path`, generating it if absent.

    Raises:
        StartupError: the file exists but cannot be read, is empty, or a new
                      key cannot be written.
    """
    secret_path = Path(path)

    try:
        async with aiofiles.open(secret_path, "rb") as f:
            key = await f.read()
    except FileNotFoundError:
        key = None
    except OSError as e:
        raise StartupError(
            message=f"Can't read the secret file {secret_path}: {e}",
            context={"path": str(secret_path)},
        ) from e

    if key is not None:
        if not key:
            raise StartupError(
                message=f"The secret file {secret_path} is empty; delete it to regenerate",
                context={"path": str(secret_path)},
            )
        logger.info("Loaded session secret from %s", secret_path)
        return key

    key = secrets.token_bytes(SECRET_LENGTH)
    try:
        async with aiofiles.open(secret_path, "xb", opener=_private_opener) as f:
            await f.write(key)
    except OSError as e:
        raise StartupError(
            message=f"Can't write the secret file {secret_path}: {e}",
            context={"path": str(secret_path)},
        ) from e

    logger.info("Generated a new session secret in %s", secret_path)
    return key


class SessionCodec:
    """
    Encodes and decodes named string values with a symmetric secret.

    Example:
        codec = SessionCodec(key)
        token = codec.encode("email", "a@b.com")
        codec.decode("email", token)   # "a@b.com"
        codec.decode("other", token)   # AuthenticationError
    """

    def __init__(self, secret_key: bytes, max_age: int = 2_592_000):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self.max_age = max_age

    def _serializer(self, field_name: str) -> URLSafeTimedSerializer:
        return URLSafeTimedSerializer(
            self._secret_key,
            salt=field_name,
            signer_kwargs={"digest_method": hashlib.sha256},
        )

    def encode(self, field_name: str, value: str) -> str:
        """Authenticated opaque token carrying `value` under `field_name`."""
        return self._serializer(field_name).dumps(value)

    def decode(self, field_name: str, token: str) -> str:
        """
        Recover the value from `token`.

        Raises:
            AuthenticationError: forged, corrupted, expired, or minted for a
                                 different field.
        """
        try:
            value = self._serializer(field_name).loads(token, max_age=self.max_age)
        except SignatureExpired as e:
            raise AuthenticationError(context={"reason": "expired", "field": field_name}) from e
        except BadData as e:
            raise AuthenticationError(context={"reason": "bad_signature", "field": field_name}) from e

        if not isinstance(value, str):
            raise AuthenticationError(context={"reason": "bad_payload", "field": field_name})
        return value
