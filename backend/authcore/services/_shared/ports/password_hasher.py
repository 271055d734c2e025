from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """
    Port for one-way password hashing.

    Implementations salt every digest and compare in constant time. They must
    never log or return the raw secret.
    """

    def hash(self, secret: str) -> str: ...
    def verify(self, secret: str, digest: str) -> bool: ...
    def dummy_verify(self, secret: str) -> None: ...


class PlainTextPasswordHasher(PasswordHasher):
    """Reversible stand-in used in unit tests where hashing cost is irrelevant."""

    PREFIX = "plain$"

    def hash(self, secret: str) -> str:
        return f"{self.PREFIX}{secret}"

    def verify(self, secret: str, digest: str) -> bool:
        return digest == f"{self.PREFIX}{secret}"

    def dummy_verify(self, secret: str) -> None:
        return None
