# authcore/infra/security/werkzeug_password_hasher.py
from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from authcore.services._shared.ports import PasswordHasher

DEFAULT_METHOD = "scrypt"
DEFAULT_SALT_LENGTH = 16


class WerkzeugPasswordHasher(PasswordHasher):
    """
    Salted password hashing backed by :mod:`werkzeug.security`.

    ``check_password_hash`` compares digests in constant time. A digest of a
    throwaway secret is computed once so :meth:`dummy_verify` costs the same as
    a real verification.
    """

    def __init__(
        self, *, method: str = DEFAULT_METHOD, salt_length: int = DEFAULT_SALT_LENGTH
    ) -> None:
        self.method = method
        self.salt_length = salt_length
        self._dummy_digest = generate_password_hash(
            "authcore-timing-equalizer", method=method, salt_length=salt_length
        )

    def hash(self, secret: str) -> str:
        if not isinstance(secret, str) or not secret:
            raise ValueError("Password must be a non-empty string.")
        return generate_password_hash(secret, method=self.method, salt_length=self.salt_length)

    def verify(self, secret: str, digest: str) -> bool:
        if not digest or not secret:
            return False
        # ``check_password_hash`` is untyped; coerce for mypy.
        return bool(check_password_hash(digest, secret))

    def dummy_verify(self, secret: str) -> None:
        check_password_hash(self._dummy_digest, secret or "")
