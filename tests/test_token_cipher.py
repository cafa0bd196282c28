try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from aps_mcp.services.token_cipher import TokenCipherService


def test_token_cipher_roundtrip() -> None:
    cipher = TokenCipherService(secret="super-secret-key")
    plaintext = "aps-refresh-token"

    encrypted = cipher.encrypt(plaintext)
    assert encrypted != plaintext
    assert cipher.decrypt(encrypted) == plaintext


def test_token_cipher_rejects_ciphertext_from_another_secret() -> None:
    encrypted = TokenCipherService(secret="old-secret").encrypt("token")

    with pytest.raises(ValueError, match="APS_SESSION_SECRET"):
        TokenCipherService(secret="new-secret").decrypt(encrypted)


def test_token_cipher_requires_secret() -> None:
    with pytest.raises(ValueError):
        TokenCipherService(secret="")
