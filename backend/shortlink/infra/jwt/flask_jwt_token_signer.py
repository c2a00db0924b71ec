# shortlink/infra/jwt/flask_jwt_token_signer.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, cast

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from shortlink.services._shared.ports import TokenSigner, ValidationResult

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"


@dataclass(slots=True)
class JWTTokenSigner(TokenSigner):
    """
    Adapter for Flask-JWT-Extended.

    The token subject is the owner's username. Signature, expiry and token
    type are checked by :func:`decode_token`; any rejection is reported as
    an invalid result rather than raised.

    .. note::
       Requires an active Flask app context with ``JWT_SECRET_KEY`` set.
    """

    def sign(self, username: str) -> str:
        return cast(str, create_access_token(identity=username))

    def verify(self, token: str) -> ValidationResult:
        try:
            claims = cast(dict[str, Any], decode_token(token))
        except (PyJWTError, JWTExtendedException) as exc:
            logger.info("Access token rejected", extra={"reason": type(exc).__name__})
            return ValidationResult.invalid()

        if claims.get("type") != ACCESS_TOKEN_TYPE:
            return ValidationResult.invalid()
        subject = claims.get("sub")
        if not subject:
            return ValidationResult.invalid()
        return ValidationResult(valid=True, username=str(subject))
