"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside an outer transaction against an in-memory SQLite
database. Sessions join it through SAVEPOINTs, so service-level commits and
rollbacks stay inside the test and nothing leaks between cases.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from shortlink.core.config import TestingConfig
from shortlink.core.extensions import db as _db  # Flask-SQLAlchemy instance
from shortlink.factory import create_app  # application factory under test


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Records clicks inline and never connects to Redis.
    - Pins the tunables tests assert against.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = "test-secret-key-with-at-least-32-bytes!"
    SHORT_URL_BASE = "https://sho.rt"
    SHORT_CODE_LENGTH = 6
    LINK_DEFAULT_TTL_DAYS = 365
    REFRESH_TOKEN_TTL_SECONDS = 24 * 60 * 60
    VALIDATION_CACHE_TTL_SECONDS = 300
    CLICK_RECORDER_WORKERS = 0
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Parameters
    ----------
    app: flask.Flask
        Application fixture ensuring the Flask context is available.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.

    Notes
    -----
    pysqlite defers ``BEGIN`` on its own, which breaks SAVEPOINT nesting.
    The two listeners hand transaction control back to SQLAlchemy.
    """
    with app.app_context():
        engine = _db.engine

        @event.listens_for(engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")

        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session.

    Parameters
    ----------
    db: flask_sqlalchemy.SQLAlchemy
        Database extension used to retrieve the engine.

    Yields
    ------
    sqlalchemy.engine.Connection
        Connection reused by the per-test outer transaction.
    """
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session joined to a per-test outer transaction.

    Parameters
    ----------
    db: flask_sqlalchemy.SQLAlchemy
        Database extension whose ``session`` attribute is temporarily
        reassigned.
    connection: sqlalchemy.engine.Connection
        Shared connection maintaining the outer transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection; everything is rolled
        back after each test.

    Notes
    -----
    ``join_transaction_mode="create_savepoint"`` makes every session-level
    transaction a SAVEPOINT: ``commit()`` releases it, ``rollback()`` rolls
    back to it, and the outer transaction is only ended here.
    """
    outer = connection.begin()

    SessionFactory = sessionmaker(
        bind=connection,
        join_transaction_mode="create_savepoint",
        autoflush=False,
    )
    scoped = scoped_session(SessionFactory)

    # Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        outer.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield


@pytest.fixture(autouse=True)
def _reset_validation_cache(app):
    """Give each test an empty in-process validation cache."""
    from shortlink.core.components import VALIDATION_CACHE_KEY
    from shortlink.services._shared.ports import InMemoryValidationCache

    app.extensions[VALIDATION_CACHE_KEY] = InMemoryValidationCache()
    yield
