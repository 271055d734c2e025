"""
authcore.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) that define the contracts
for credential and token infrastructure.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider` for signing and verifying bearer tokens
    in the access, refresh and reset domains.

- :mod:`revocation_registry`:
    Defines :class:`~.RevocationRegistry` for recording revoked tokens.

- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher` for salted one-way hashing.

- :mod:`clock`:
    Defines :class:`~.Clock`, the single source of "now" for expiry checks.

Design Notes
------------
Concrete adapters (Redis, SQL, PyJWT, Werkzeug) implement these interfaces
under ``authcore.infra``. Each port module also ships an in-memory double used
by unit tests.
"""

from __future__ import annotations

from .clock import Clock, ManualClock, SystemClock
from .password_hasher import PasswordHasher, PlainTextPasswordHasher
from .revocation_registry import InMemoryRevocationRegistry, RevocationRegistry, token_digest
from .token_provider import IssuedToken, TokenClaims, TokenDomain, TokenProvider

__all__ = [
    "Clock",
    "InMemoryRevocationRegistry",
    "IssuedToken",
    "ManualClock",
    "PasswordHasher",
    "PlainTextPasswordHasher",
    "RevocationRegistry",
    "SystemClock",
    "TokenClaims",
    "TokenDomain",
    "TokenProvider",
    "token_digest",
]
