"""Read-through cache in front of access-token verification."""

from __future__ import annotations

import logging

from shortlink.core.components import get_token_signer, get_validation_cache
from shortlink.core.config import CoreSettings
from shortlink.services._shared.base import BaseService
from shortlink.services._shared.ports import (
    TokenSigner,
    ValidationCache,
    ValidationResult,
    owner_key,
)

logger = logging.getLogger(__name__)


class TokenValidationService(BaseService):
    """
    Answer "is this access token valid, and for whom" with a cache in front.

    Only positive results are cached, for a fixed TTL that ignores the
    token's own remaining lifetime. A cached positive result can therefore
    outlive a revocation by up to that TTL.

    Cached entries are keyed by the raw token. :meth:`evict_owner` removes
    the owner-scoped key instead, which is a different namespace: it does
    not remove token-keyed entries of that owner.
    """

    def __init__(
        self,
        *,
        signer: TokenSigner | None = None,
        cache: ValidationCache | None = None,
        settings: CoreSettings | None = None,
    ) -> None:
        super().__init__(settings=settings)
        self.signer = signer or get_token_signer()
        self.cache = cache if cache is not None else get_validation_cache()

    def validate(self, access_token: str) -> ValidationResult:
        """
        Return the cached result, or verify with the signer on a miss.

        Any exception raised by the signer counts as an invalid token.

        :raises InternalError: If the cache backend fails.
        """
        with self.guard("validate_token"):
            cached = self.cache.get(access_token)
        if cached is not None:
            return cached

        logger.info("Validation cache miss")
        try:
            result = self.signer.verify(access_token)
        except Exception:
            logger.warning("Token verification raised; treating as invalid", exc_info=True)
            return ValidationResult.invalid()

        if result.valid:
            with self.guard("validate_token"):
                self.cache.put(access_token, result, self.settings.validation_ttl)
        return result

    def evict_owner(self, owner: str) -> bool:
        """Remove the owner-scoped entry; returns whether one existed."""
        with self.guard("evict_owner"):
            removed = self.cache.evict(owner_key(owner))
        logger.info("Owner validation entry evicted", extra={"owner": owner, "removed": removed})
        return removed
