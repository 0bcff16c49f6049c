"""Salted one-way hashing for passwords and PINs."""

from __future__ import annotations

from typing import Protocol

import bcrypt


class SecretVerifier(Protocol):
    def hash(self, plaintext: str) -> str:
        ...

    def verify(self, plaintext: str, stored_hash: str) -> bool:
        ...


class BcryptSecretVerifier:
    """bcrypt-backed verifier. `rounds` is the log2 work factor."""

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, plaintext: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")

    def verify(self, plaintext: str, stored_hash: str) -> bool:
        if not isinstance(plaintext, str) or not stored_hash:
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), stored_hash.encode("utf-8"))
        except ValueError:
            return False


__all__ = ["SecretVerifier", "BcryptSecretVerifier"]
