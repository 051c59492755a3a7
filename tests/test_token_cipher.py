try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from activity_cards.services.token_cipher import TokenCipherService


def test_token_cipher_roundtrip() -> None:
    cipher = TokenCipherService(secret="super-secret-key")
    plaintext = "strava-access-token"

    encrypted = cipher.encrypt(plaintext)
    assert encrypted != plaintext
    assert cipher.decrypt(encrypted) == plaintext


def test_token_cipher_rejects_bad_ciphertext() -> None:
    cipher = TokenCipherService(secret="another-secret")

    with pytest.raises(ValueError):
        cipher.decrypt("not-valid")


def test_token_cipher_rejects_tokens_from_another_secret() -> None:
    encrypted = TokenCipherService(secret="first").encrypt("token")

    with pytest.raises(ValueError):
        TokenCipherService(secret="second").decrypt(encrypted)


def test_token_cipher_requires_secret() -> None:
    with pytest.raises(ValueError):
        TokenCipherService(secret="")


def test_previous_secrets_still_decrypt_after_rotation() -> None:
    legacy = TokenCipherService(secret="old-secret").encrypt("strava-refresh-token")
    rotated = TokenCipherService(secret="new-secret", previous_secrets=("old-secret",))

    assert rotated.decrypt(legacy) == "strava-refresh-token"
    fresh = rotated.encrypt("strava-refresh-token")
    # New ciphertext is only readable with the current secret.
    assert TokenCipherService(secret="new-secret").decrypt(fresh) == "strava-refresh-token"
    with pytest.raises(ValueError):
        TokenCipherService(secret="old-secret").decrypt(fresh)


def test_previous_secrets_setting_accepts_comma_separated_values(monkeypatch) -> None:
    from activity_cards.core.config import SecuritySettings

    monkeypatch.setenv("TOKEN_ENCRYPTION_PREVIOUS_SECRETS", "first, second,,")

    assert SecuritySettings().previous_token_encryption_secrets == ("first", "second")
