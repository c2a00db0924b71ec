"""Tests for the ShortLink model."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from shortlink.models.link import ShortLink
from tests.factories.link import ShortLinkFactory
from tests.factories.user import UserFactory


class TestShortLink:
    def test_defaults_on_insert(self, session):
        owner = UserFactory()
        link = ShortLink(
            original_url="https://example.com",
            short_code="abc123",
            owner_id=owner.id,
            expires_at=datetime.now(UTC) + timedelta(days=1),
        )
        session.add(link)
        session.flush()

        assert link.click_count == 0
        assert link.is_active is True
        assert link.created_at is not None

    def test_short_code_unique_across_soft_deleted_rows(self, session):
        ShortLinkFactory(short_code="taken", is_active=False)

        with pytest.raises(IntegrityError):
            ShortLinkFactory(short_code="taken")
        session.rollback()

    def test_click_count_cannot_go_negative(self, session):
        link = ShortLinkFactory()
        link.click_count = -1
        with pytest.raises(IntegrityError):
            session.flush()
        session.rollback()

    def test_is_expired_compares_against_now(self):
        now = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
        link = ShortLink(expires_at=now - timedelta(seconds=1))
        assert link.is_expired(now) is True

        link.expires_at = now
        assert link.is_expired(now) is False

    def test_is_expired_treats_naive_values_as_utc(self):
        now = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
        link = ShortLink(expires_at=datetime(2025, 1, 1, 11, 0))
        assert link.is_expired(now) is True

    def test_owner_and_links_load_on_access(self, session):
        owner = UserFactory()
        link = ShortLinkFactory(owner=owner)
        session.flush()
        session.expire_all()

        assert link.owner.id == owner.id
        assert [item.id for item in owner.links] == [link.id]
