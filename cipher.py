"""Password hashing and reversible encryption of short strings.

Emails are stored as ``ivHex:cipherHex`` produced by AES-256-CBC with a
fresh IV per call.  Decryption is deliberately forgiving: anything that
is not a token we produced comes back as ``None`` so lookups can treat it
as "no match".
"""
from __future__ import annotations

import logging
import secrets
from typing import Optional

from Crypto.Cipher import AES
from Crypto.Util.Padding import pad, unpad
from werkzeug.security import check_password_hash, generate_password_hash

from errors import ConfigError

log = logging.getLogger(__name__)

KEY_BYTES = 32
IV_BYTES = AES.block_size
SEPARATOR = ":"
PASSWORD_METHOD = "scrypt"


def hash_password(plain: str) -> str:
    return generate_password_hash(plain, method=PASSWORD_METHOD)


def verify_password(plain: str, hashed: str) -> bool:
    if not isinstance(hashed, str) or not hashed:
        return False
    try:
        return check_password_hash(hashed, plain)
    except ValueError:
        # unknown method or a hash string we did not produce
        return False


def load_key(hex_value: Optional[str]) -> bytes:
    """Turn the configured hex key into bytes or refuse to start."""
    if not hex_value:
        raise ConfigError("SECRET_KEY is not defined in the environment or .env file")
    try:
        key = bytes.fromhex(hex_value)
    except ValueError:
        raise ConfigError(
            "Invalid SECRET_KEY format. Ensure it is a valid hexadecimal string."
        ) from None
    if len(key) != KEY_BYTES:
        raise ConfigError(
            f"SECRET_KEY must be {KEY_BYTES * 2} hex characters ({KEY_BYTES * 8}-bit key)"
        )
    return key


class Cipher:
    def __init__(self, key: bytes):
        if len(key) != KEY_BYTES:
            raise ConfigError(f"Cipher key must be {KEY_BYTES} bytes")
        self._key = key

    def encrypt(self, plaintext: str) -> str:
        iv = secrets.token_bytes(IV_BYTES)
        cipher = AES.new(self._key, AES.MODE_CBC, iv)
        ciphertext = cipher.encrypt(pad(plaintext.encode("utf-8"), AES.block_size))
        return f"{iv.hex()}{SEPARATOR}{ciphertext.hex()}"

    def decrypt(self, token) -> Optional[str]:
        if not isinstance(token, str):
            log.debug("Decrypt skipped: token is %s, not str", type(token).__name__)
            return None
        parts = token.split(SEPARATOR)
        if len(parts) != 2:
            log.debug("Decrypt skipped: expected 2 parts, got %d", len(parts))
            return None
        try:
            iv = bytes.fromhex(parts[0])
            ciphertext = bytes.fromhex(parts[1])
            cipher = AES.new(self._key, AES.MODE_CBC, iv)
            return unpad(cipher.decrypt(ciphertext), AES.block_size).decode("utf-8")
        except ValueError as exc:
            # bad hex, IV length, block length or padding; UnicodeDecodeError is a ValueError
            log.debug("Decrypt failed: %s", exc)
            return None

    def matches(self, token, plaintext: str) -> bool:
        return self.decrypt(token) == plaintext
