# shortlink/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param username: Unique handle (also the access-token subject).
    :type username: str
    :param email: Unique email address.
    :type email: str
    :param password: Raw password (hashed by the model).
    :type password: str
    """

    username: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param username: User handle.
    :type username: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    username: str
    password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthOut:
    """
    Output DTO with an access token and the owner's refresh token.

    :param username: Authenticated owner.
    :type username: str
    :param access_token: Signed access token.
    :type access_token: str
    :param refresh_token: Opaque refresh token.
    :type refresh_token: str
    :param refresh_expires_at: Refresh token expiry (UTC).
    :type refresh_expires_at: datetime
    """

    username: str
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime
    token_type: str = "Bearer"
