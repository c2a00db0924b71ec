"""
Unit tests for SQLAlchemyUnitOfWork (writer), using factories.
"""

from __future__ import annotations

import pytest

from shortlink.models import ShortLink, User
from shortlink.uow import SQLAlchemyUnitOfWork
from tests.factories.link import ShortLinkFactory
from tests.factories.user import UserFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN we create a user via repo inside the context and leave without exception
        THEN the transaction is committed and the row is visible afterwards.
        """
        initial = db.session.query(User).count()

        with SQLAlchemyUnitOfWork() as uow:
            u = UserFactory.build()  # build = no persist
            uow.users.add(u)

        after = db.session.query(User).count()
        assert after == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN an exception is raised inside the context
        THEN the transaction is rolled back and no rows are persisted.
        """
        initial = db.session.query(User).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            u = UserFactory.build()
            uow.users.add(u)
            raise RuntimeError("boom")

        after = db.session.query(User).count()
        assert after == initial

    def test_repositories_share_the_session(self, app, db, session):
        """All repositories of one UoW write through the same transaction."""
        with SQLAlchemyUnitOfWork() as uow:
            assert uow.links.session is uow.session
            assert uow.refresh_tokens.session is uow.session
            assert uow.users.session is uow.session

    def test_increment_is_visible_after_commit(self, app, db, session):
        link = ShortLinkFactory(short_code="uowclick")
        session.commit()

        with SQLAlchemyUnitOfWork() as uow:
            uow.links.increment_clicks("uowclick")

        assert db.session.get(ShortLink, link.id).click_count == 1
