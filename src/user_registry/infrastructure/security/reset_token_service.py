"""Opaque password reset token generation and hashing."""

from __future__ import annotations

import hashlib
import secrets

_TOKEN_PREFIX = "reset-"


class ResetTokenService:
    """Generate random reset tokens and derive the hash stored at rest."""

    def __init__(self, *, token_bytes: int = 32) -> None:
        self._token_bytes = token_bytes

    def generate_token(self) -> str:
        return f"{_TOKEN_PREFIX}{secrets.token_urlsafe(self._token_bytes)}"

    def hash_token(self, token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()
