"""Factory Boy definition for :class:`shortlink.models.refresh_token.RefreshToken`."""

from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import factory

from shortlink.models.base import utcnow
from shortlink.models.refresh_token import RefreshToken
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class RefreshTokenFactory(BaseFactory):
    """Build persisted refresh tokens valid for one day."""

    class Meta:
        model = RefreshToken

    id = None
    owner = factory.SubFactory(UserFactory)
    owner_id = factory.SelfAttribute("owner.id")
    token = factory.LazyFunction(lambda: str(uuid4()))
    expiry_date = factory.LazyFunction(lambda: utcnow() + timedelta(days=1))
