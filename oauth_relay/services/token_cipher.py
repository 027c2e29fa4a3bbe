"""Symmetric encryption for tokens parked in session documents."""

from __future__ import annotations

import base64
import hashlib
from typing import Any, Dict, Iterable

from cryptography.fernet import Fernet, InvalidToken


class TokenCipherService:
    """Encrypt and decrypt token strings using a derived Fernet key."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Token encryption secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise ValueError(
                "Failed to decrypt token; invalid ciphertext provided."
            ) from exc
        return plaintext.decode("utf-8")

    def seal_fields(self, document: Dict[str, Any], names: Iterable[str]) -> Dict[str, Any]:
        """Return a copy of ``document`` with the named string fields encrypted.

        Missing or ``None`` fields are left as they are.
        """
        sealed = dict(document)
        for name in names:
            if sealed.get(name) is not None:
                sealed[name] = self.encrypt(sealed[name])
        return sealed

    def open_fields(self, document: Dict[str, Any], names: Iterable[str]) -> Dict[str, Any]:
        opened = dict(document)
        for name in names:
            if opened.get(name) is not None:
                opened[name] = self.decrypt(opened[name])
        return opened


__all__ = ["TokenCipherService"]
