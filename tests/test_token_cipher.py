try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from oauth_relay.services.token_cipher import TokenCipherService


def test_token_cipher_roundtrip() -> None:
    cipher = TokenCipherService(secret="super-secret-key")
    plaintext = "sensitive-token"

    encrypted = cipher.encrypt(plaintext)
    assert encrypted != plaintext

    decrypted = cipher.decrypt(encrypted)
    assert decrypted == plaintext


def test_token_cipher_rejects_bad_ciphertext() -> None:
    cipher = TokenCipherService(secret="another-secret")

    with pytest.raises(ValueError):
        cipher.decrypt("not-valid")


def test_token_cipher_requires_secret() -> None:
    with pytest.raises(ValueError):
        TokenCipherService(secret="")


def test_ciphertext_from_other_secret_is_rejected() -> None:
    sealed = TokenCipherService(secret="one").encrypt("token")

    with pytest.raises(ValueError):
        TokenCipherService(secret="two").decrypt(sealed)


def test_seal_fields_only_touches_named_present_values() -> None:
    cipher = TokenCipherService(secret="field-secret")
    document = {
        "access_token": "at",
        "refresh_token": None,
        "token_type": "Bearer",
    }

    sealed = cipher.seal_fields(document, ("access_token", "refresh_token", "missing"))

    assert sealed["access_token"] != "at"
    assert sealed["refresh_token"] is None
    assert sealed["token_type"] == "Bearer"
    assert "missing" not in sealed
    assert document["access_token"] == "at"

    opened = cipher.open_fields(sealed, ("access_token", "refresh_token"))
    assert opened == document
