# authcore/services/auth/service.py
from __future__ import annotations

import hmac
import logging
from dataclasses import replace

from authcore.models.account import ACTIVE, Account
from authcore.models.base import as_utc
from authcore.services._shared.base import BaseService
from authcore.services._shared.best_effort import best_effort
from authcore.services._shared.errors import (
    AccountNotActiveError,
    DuplicateFieldError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    TokenExpiredError,
    ValidationFailedError,
)
from authcore.services._shared.ports import (
    Clock,
    PasswordHasher,
    RevocationRegistry,
    SystemClock,
    TokenDomain,
    TokenProvider,
    token_digest,
)
from authcore.services.accounts.dto import AccountOut
from authcore.services.auth.dto import (
    AccessTokenOut,
    AuthSettings,
    LoginIn,
    LoginOut,
    RegisterIn,
    ResetTokenOut,
)
from authcore.services.auth.validation import validate_credentials
from authcore.services.roles.resolver import RoleResolver

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Credential lifecycle service.

    Registers accounts, authenticates credentials, issues access/refresh
    tokens, revokes tokens on logout and runs the password reset and change
    flows.

    A token authorizes only while its signature and domain check out, it has
    not expired, it is absent from the revocation registry and its ``tv``
    claim equals the account's ``token_version``. Password reset and change
    bump ``token_version``, invalidating every token issued before.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        password_hasher: PasswordHasher,
        revocation_registry: RevocationRegistry,
        role_resolver: RoleResolver,
        clock: Clock | None = None,
        settings: AuthSettings | None = None,
    ) -> None:
        """
        Initialize the service with its collaborators.

        :param token_provider: Signs and verifies tokens in each domain.
        :param password_hasher: Salted one-way hashing.
        :param revocation_registry: Store of revoked tokens.
        :param role_resolver: Default-role cache and role get-or-create.
        :param clock: Source of "now"; wall clock by default.
        :param settings: Credential policy.
        """
        super().__init__()
        self.tokens = token_provider
        self.hasher = password_hasher
        self.registry = revocation_registry
        self.roles = role_resolver
        self.clock = clock or SystemClock()
        self.settings = settings or AuthSettings()

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> AccountOut:
        """
        Create an account with a hashed password and at least one role.

        :param dto: Registration candidate.
        :returns: Public view of the new account.
        :raises ValidationFailedError: Invalid username, email or password.
        :raises DuplicateFieldError: ``username`` or ``email`` already taken.
        :raises StoreUnavailableError: Database unreachable or timed out.
        """
        errors = validate_credentials(
            username=dto.username,
            email=dto.email,
            password=dto.password,
            min_password_length=self.settings.password_min_length,
        )
        if errors:
            raise ValidationFailedError(errors)

        email = dto.email.strip().lower()

        # Fast-fail pre-check; the unique constraints decide races.
        with self.ro_uow() as uow:
            taken = uow.accounts.find_conflicts(username=dto.username, email=email)
        for field_name in ("username", "email"):
            if field_name in taken:
                raise DuplicateFieldError(field_name)

        refs = self.roles.resolve_roles(dto.roles) or [self.roles.get_or_create_default_role()]
        digest = self.hasher.hash(dto.password)

        with self.rw_uow() as uow:
            account = Account(
                username=dto.username,
                email=email,
                password_hash=digest,
                first_name=dto.first_name,
                last_name=dto.last_name,
                phone=dto.phone,
                date_of_birth=dto.date_of_birth,
                address=dto.address,
            )
            account.roles = self.roles.attach(uow, refs)
            uow.accounts.create(account)
            out = AccountOut.from_model(account)

        logger.info(
            "Account registered",
            extra={"event": "auth.registered", "account_id": out.id},
        )
        return out

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def authenticate(self, dto: LoginIn) -> LoginOut:
        """
        Verify credentials and issue an access/refresh token pair.

        :param dto: Username and raw password.
        :returns: Tokens plus the public account view.
        :raises InvalidCredentialsError: Wrong password, or unknown username
            unless ``reveal_unknown_accounts`` is enabled.
        :raises NotFoundError: Unknown username with ``reveal_unknown_accounts``.
        :raises AccountNotActiveError: Account is inactive or suspended.
        """
        with self.ro_uow() as uow:
            account = uow.accounts.get_by_username(dto.username or "")
            found = (
                None
                if account is None
                else (
                    account.password_hash,
                    account.status,
                    account.token_version,
                    AccountOut.from_model(account),
                )
            )

        if found is None:
            self.hasher.dummy_verify(dto.password or "")
            logger.info("Login rejected", extra={"event": "auth.login_failed", "reason": "unknown"})
            if self.settings.reveal_unknown_accounts:
                raise NotFoundError("Account", dto.username)
            raise InvalidCredentialsError()

        digest, status, token_version, out = found
        if status != ACTIVE:
            logger.info(
                "Login rejected",
                extra={"event": "auth.login_failed", "account_id": out.id, "reason": status},
            )
            raise AccountNotActiveError(status)

        if not self.hasher.verify(dto.password or "", digest):
            logger.info(
                "Login rejected",
                extra={"event": "auth.login_failed", "account_id": out.id, "reason": "password"},
            )
            raise InvalidCredentialsError()

        access = self.tokens.issue(
            account_id=out.id, domain=TokenDomain.ACCESS, token_version=token_version
        )
        refresh = self.tokens.issue(
            account_id=out.id, domain=TokenDomain.REFRESH, token_version=token_version
        )

        now = self.clock.now()
        best_effort(
            lambda: self._touch_last_login(out.id),
            event="auth.last_login_failed",
            account_id=out.id,
        )

        logger.info("Login succeeded", extra={"event": "auth.login", "account_id": out.id})
        return LoginOut(
            account=replace(out, last_login_at=now),
            access_token=access.token,
            refresh_token=refresh.token,
            expires_at=access.expires_at,
        )

    def _touch_last_login(self, account_id: int) -> None:
        with self.rw_uow() as uow:
            uow.accounts.touch_last_login(account_id, self.clock.now())

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(
        self,
        token: str,
        *,
        account_id: int | None = None,
        refresh_token: str | None = None,
    ) -> None:
        """
        Revoke an access token, and its refresh token when given, for the rest
        of their lifetimes.

        Always reports success once the access token is present: an
        undecodable or expired token is already unusable, and a failed
        registry write is logged and dropped.

        :param token: Encoded access JWT.
        :param account_id: Authenticated caller; must own both tokens when given.
        :param refresh_token: Refresh JWT issued alongside ``token``.
        :raises ValidationFailedError: ``token`` is empty.
        :raises ForbiddenError: A token belongs to another account.
        """
        if not token:
            raise ValidationFailedError({"token": ["Token is required."]})

        revocable = []
        presented_tokens = ((token, TokenDomain.ACCESS), (refresh_token, TokenDomain.REFRESH))
        for presented, domain in presented_tokens:
            if not presented:
                continue
            try:
                claims = self.tokens.verify(presented, domain=domain)
            except InvalidTokenError:
                logger.info(
                    "Logout with unusable token",
                    extra={"event": "auth.logout", "reason": domain.value},
                )
                continue
            if account_id is None:
                account_id = claims.account_id
            if claims.account_id != account_id:
                raise ForbiddenError("Token belongs to another account")
            revocable.append((presented, claims))

        now = self.clock.now()
        for presented, claims in revocable:
            best_effort(
                lambda presented=presented, claims=claims: self.registry.revoke(
                    token=presented,
                    account_id=claims.account_id,
                    reason="logout",
                    ttl=claims.remaining(now),
                ),
                event="auth.logout_revocation_failed",
                account_id=claims.account_id,
            )
        if revocable:
            logger.info("Logout", extra={"event": "auth.logout", "account_id": account_id})

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self, refresh_token: str) -> AccessTokenOut:
        """
        Exchange a refresh token for a new access token.

        The previous access token is left alone; it expires on its own.

        :raises InvalidTokenError: Bad, expired, revoked or stale refresh token.
        :raises NotFoundError: The subject account no longer exists.
        :raises AccountNotActiveError: The account is inactive or suspended.
        """
        claims = self.tokens.verify(refresh_token, domain=TokenDomain.REFRESH)
        if self.registry.is_revoked(refresh_token):
            raise InvalidTokenError("Token revoked")

        with self.ro_uow() as uow:
            account = uow.accounts.get(claims.account_id)
            if account is None:
                raise NotFoundError("Account", claims.account_id)
            if account.token_version != claims.token_version:
                raise InvalidTokenError("Token no longer valid")
            if account.status != ACTIVE:
                raise AccountNotActiveError(account.status)
            token_version = account.token_version

        access = self.tokens.issue(
            account_id=claims.account_id, domain=TokenDomain.ACCESS, token_version=token_version
        )
        logger.info(
            "Token refreshed", extra={"event": "auth.refresh", "account_id": claims.account_id}
        )
        return AccessTokenOut(access_token=access.token, expires_at=access.expires_at)

    # ------------------------------------------------------------------ #
    # Password reset
    # ------------------------------------------------------------------ #

    def request_password_reset(self, email: str) -> ResetTokenOut:
        """
        Issue a reset token and remember its digest on the account.

        A newer request replaces the outstanding token.

        :raises NotFoundError: No account has this email.
        """
        normalized = (email or "").strip().lower()
        with self.rw_uow() as uow:
            account = uow.accounts.get_by_email(normalized)
            if account is None:
                raise NotFoundError("Account", normalized)
            issued = self.tokens.issue(
                account_id=account.id,
                domain=TokenDomain.RESET,
                token_version=account.token_version,
            )
            account.reset_token_hash = token_digest(issued.token)
            account.reset_token_expires_at = issued.expires_at
            account_id = account.id

        logger.info(
            "Password reset requested",
            extra={"event": "auth.reset_requested", "account_id": account_id},
        )
        return ResetTokenOut(
            account_id=account_id,
            email=normalized,
            reset_token=issued.token,
            expires_at=issued.expires_at,
        )

    def reset_password(self, reset_token: str, new_password: str) -> None:
        """
        Set a new password using an outstanding reset token.

        :raises ValidationFailedError: New password too short.
        :raises InvalidTokenError: Token invalid, expired, superseded or already used.
        """
        self._validate_new_password(new_password)
        claims = self.tokens.verify(reset_token, domain=TokenDomain.RESET)
        digest = self.hasher.hash(new_password)

        with self.rw_uow() as uow:
            account = uow.accounts.get(claims.account_id)
            if account is None:
                raise InvalidTokenError("Unknown reset subject")
            stored = account.reset_token_hash
            if not stored or not hmac.compare_digest(stored, token_digest(reset_token)):
                raise InvalidTokenError("Reset token is not outstanding")
            expires_at = as_utc(account.reset_token_expires_at)
            if expires_at is None or expires_at <= self.clock.now():
                raise TokenExpiredError()
            if account.token_version != claims.token_version:
                raise InvalidTokenError("Token no longer valid")

            account.password_hash = digest
            account.reset_token_hash = None
            account.reset_token_expires_at = None
            uow.accounts.bump_token_version(account)
            account_id = account.id

        logger.info(
            "Password reset", extra={"event": "auth.password_reset", "account_id": account_id}
        )

    # ------------------------------------------------------------------ #
    # Password change
    # ------------------------------------------------------------------ #

    def change_password(
        self,
        account_id: int,
        current_password: str,
        new_password: str,
        *,
        token: str | None = None,
    ) -> None:
        """
        Replace the password after checking the current one.

        :param token: Access token presented with the request; revoked
            best-effort with reason ``password_change``.
        :raises ValidationFailedError: New password too short.
        :raises NotFoundError: Account does not exist.
        :raises InvalidCredentialsError: ``current_password`` does not match.
        """
        self._validate_new_password(new_password)

        with self.rw_uow() as uow:
            account = uow.accounts.get(account_id)
            if account is None:
                raise NotFoundError("Account", account_id)
            if not self.hasher.verify(current_password or "", account.password_hash):
                raise InvalidCredentialsError("Current password is incorrect")
            account.password_hash = self.hasher.hash(new_password)
            account.reset_token_hash = None
            account.reset_token_expires_at = None
            uow.accounts.bump_token_version(account)

        if token:
            self._revoke_presented(token, account_id=account_id, reason="password_change")

        logger.info(
            "Password changed", extra={"event": "auth.password_changed", "account_id": account_id}
        )

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _validate_new_password(self, password: str) -> None:
        errors = validate_credentials(
            password=password,
            min_password_length=self.settings.password_min_length,
            fields=("password",),
        )
        if errors:
            raise ValidationFailedError(errors)

    def _revoke_presented(self, token: str, *, account_id: int, reason: str) -> None:
        try:
            claims = self.tokens.verify(token, domain=TokenDomain.ACCESS)
        except InvalidTokenError:
            return
        ttl = claims.remaining(self.clock.now())
        best_effort(
            lambda: self.registry.revoke(
                token=token, account_id=account_id, reason=reason, ttl=ttl
            ),
            event="auth.revocation_failed",
            account_id=account_id,
            reason=reason,
        )
