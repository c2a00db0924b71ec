# shortlink/services/auth/service.py
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from shortlink.core.components import get_token_signer
from shortlink.core.config import CoreSettings
from shortlink.repositories.user import UserRepository
from shortlink.services._shared.base import BaseService
from shortlink.services._shared.errors import (
    ConflictError,
    NotFoundError,
    OwnerNotFoundError,
    ServiceError,
)
from shortlink.services._shared.ports import TokenSigner, ValidationResult
from shortlink.services.auth.dto import AuthOut, LoginIn, RegisterIn
from shortlink.services.auth.validation import TokenValidationService
from shortlink.services.tokens.service import RefreshTokenService, mask_token

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Authentication lifecycle service (register / login / refresh / logout).

    Access tokens come from a pluggable :class:`TokenSigner`; refresh tokens
    are rows managed by :class:`RefreshTokenService`, one per owner.
    Validation goes through :class:`TokenValidationService`.
    """

    def __init__(
        self,
        *,
        signer: TokenSigner | None = None,
        tokens: RefreshTokenService | None = None,
        validation: TokenValidationService | None = None,
        settings: CoreSettings | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param signer: Adapter for signing access tokens.
        :param tokens: Refresh-token service.
        :param validation: Cached access-token validation.
        :param settings: Core tunables.
        """
        super().__init__(settings=settings)
        self.signer = signer or get_token_signer()
        self.tokens = tokens or RefreshTokenService(settings=self.settings)
        self.validation = validation or TokenValidationService(
            signer=self.signer, settings=self.settings
        )

    # ------------------------------------------------------------------ #
    # Register / Login
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> AuthOut:
        """
        Create an owner and grant a token pair.

        :raises ConflictError: If the username or email is taken.
        :raises ServiceError: If the username, email or password is rejected.
        """
        with self.guard("register"):
            try:
                with self.rw_uow() as uow:
                    repo: UserRepository = uow.users
                    if repo.exists_by_username_or_email(dto.username, dto.email):
                        raise ConflictError("User", "username or email already registered")
                    user = repo.model(username=dto.username, email=dto.email)
                    user.password = dto.password
                    repo.add(user)
                    owner_id, username = user.id, user.username
            except ValueError as exc:
                raise ServiceError(str(exc)) from exc
            except IntegrityError as exc:
                raise ConflictError("User", "username or email already registered") from exc

        logger.info("User registered", extra={"owner_id": owner_id})
        return self._grant(owner_id, username)

    def login(self, dto: LoginIn) -> AuthOut:
        """
        Authenticate by username and grant a token pair.

        Issuing the refresh token rotates away any previous one.

        :raises ServiceError: If credentials are invalid.
        """
        with self.guard("login"), self.ro_uow() as uow:
            user = uow.users.authenticate(dto.username, dto.password)
            if user is None:
                raise ServiceError("Invalid username or password")
            owner_id, username = user.id, user.username

        return self._grant(owner_id, username)

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self, refresh_token: str) -> AuthOut:
        """
        Sign a new access token for a live refresh token.

        The refresh token itself is returned unchanged.

        :raises NotFoundError: If the refresh token is unknown.
        :raises ExpiredError: If it expired (it is deleted).
        :raises OwnerNotFoundError: If its owner no longer exists.
        """
        if self.tokens.find(refresh_token) is None:
            raise NotFoundError("RefreshToken", mask_token(refresh_token))
        current = self.tokens.verify(refresh_token)

        with self.guard("refresh"), self.ro_uow() as uow:
            user = uow.users.get(current.owner_id)
            if user is None:
                raise OwnerNotFoundError(current.owner_id)
            username = user.username

        return AuthOut(
            username=username,
            access_token=self.signer.sign(username),
            refresh_token=current.token,
            refresh_expires_at=current.expiry_date,
        )

    # ------------------------------------------------------------------ #
    # Logout / Validate
    # ------------------------------------------------------------------ #

    def logout(self, username: str) -> None:
        """
        Revoke the owner's refresh tokens and evict its owner cache entry.

        Positive validations cached under raw access tokens are left to
        expire on their own TTL.

        :raises OwnerNotFoundError: If ``username`` is unknown.
        """
        with self.guard("logout"), self.ro_uow() as uow:
            user = uow.users.get_by_username(username)
            if user is None:
                raise OwnerNotFoundError(username)
            owner_id = user.id

        self.tokens.revoke_for_owner(owner_id)
        self.validation.evict_owner(username)
        logger.info("User logged out", extra={"owner_id": owner_id})

    def validate(self, access_token: str) -> ValidationResult:
        return self.validation.validate(access_token)

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _grant(self, owner_id: int, username: str) -> AuthOut:
        refresh = self.tokens.issue(owner_id)
        return AuthOut(
            username=username,
            access_token=self.signer.sign(username),
            refresh_token=refresh.token,
            refresh_expires_at=refresh.expiry_date,
        )
