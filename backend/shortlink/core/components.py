"""
Process-wide collaborators of the link/token core.

``init_app`` builds the click recorder, validation cache and token signer
from config and stores them in ``app.extensions``. The ``get_*`` accessors
return the app's instance, or a standalone default outside an app.
"""

from __future__ import annotations

import atexit
import logging
from typing import TYPE_CHECKING

from flask import Flask, current_app, has_app_context

if TYPE_CHECKING:
    from shortlink.services._shared.ports import ClickRecorder, TokenSigner, ValidationCache

logger = logging.getLogger(__name__)

CLICK_RECORDER_KEY = "click_recorder"
VALIDATION_CACHE_KEY = "validation_cache"
TOKEN_SIGNER_KEY = "token_signer"


def init_app(app: Flask) -> None:
    """
    Register core collaborators on ``app``.

    - ``REDIS_URL`` set → :class:`RedisValidationCache`, else in-memory cache.
    - ``CLICK_RECORDER_WORKERS > 0`` → :class:`ThreadedClickRecorder`, else
      clicks are written inline. The pool is shut down at interpreter exit.
    """
    from shortlink.core.extensions import get_redis
    from shortlink.infra.clicks import SQLClickRecorder, ThreadedClickRecorder
    from shortlink.infra.jwt.flask_jwt_token_signer import JWTTokenSigner
    from shortlink.infra.redis.redis_validation_cache import RedisValidationCache
    from shortlink.services._shared.ports import InMemoryValidationCache

    cache: ValidationCache
    if app.config.get("REDIS_URL"):
        cache = RedisValidationCache(get_redis())
    else:
        cache = InMemoryValidationCache()

    workers = int(app.config.get("CLICK_RECORDER_WORKERS", 0))
    clicks: ClickRecorder
    if workers > 0:
        clicks = ThreadedClickRecorder(app, max_workers=workers)
        # Drain queued increments before the interpreter exits.
        atexit.register(clicks.shutdown)
    else:
        clicks = SQLClickRecorder()

    app.extensions[VALIDATION_CACHE_KEY] = cache
    app.extensions[CLICK_RECORDER_KEY] = clicks
    app.extensions[TOKEN_SIGNER_KEY] = JWTTokenSigner()
    logger.info(
        "Core components ready",
        extra={
            "validation_cache": type(cache).__name__,
            "click_recorder": type(clicks).__name__,
        },
    )


def _from_app(key: str):
    if has_app_context():
        return current_app.extensions.get(key)
    return None


def get_click_recorder() -> ClickRecorder:
    from shortlink.infra.clicks import SQLClickRecorder

    return _from_app(CLICK_RECORDER_KEY) or SQLClickRecorder()


def get_validation_cache() -> ValidationCache:
    from shortlink.services._shared.ports import InMemoryValidationCache

    cache = _from_app(VALIDATION_CACHE_KEY)
    return cache if cache is not None else InMemoryValidationCache()


def get_token_signer() -> TokenSigner:
    from shortlink.infra.jwt.flask_jwt_token_signer import JWTTokenSigner

    return _from_app(TOKEN_SIGNER_KEY) or JWTTokenSigner()
