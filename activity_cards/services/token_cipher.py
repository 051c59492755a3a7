"""Encryption of Strava tokens at rest, with support for rotating the secret."""

from __future__ import annotations

import base64
import hashlib
from typing import Iterable

from cryptography.fernet import Fernet, InvalidToken, MultiFernet


def _fernet_for(secret: str) -> Fernet:
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


class TokenCipherService:
    """Encrypt Strava tokens under ``secret``.

    ``previous_secrets`` keep tokens written before a secret rotation readable.
    Strava access tokens live six hours, so the next refresh stores every
    account under the current secret.
    """

    def __init__(self, *, secret: str, previous_secrets: Iterable[str] = ()) -> None:
        if not secret:
            raise ValueError("Token encryption secret must be provided.")
        keys = [_fernet_for(secret)]
        keys.extend(_fernet_for(old) for old in previous_secrets if old and old != secret)
        self._fernet = MultiFernet(keys)

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a stored token; raises ``ValueError`` for foreign ciphertext."""
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise ValueError(
                "Failed to decrypt token; the encryption secret may have changed."
            ) from exc
        return plaintext.decode("utf-8")


__all__ = ["TokenCipherService"]
