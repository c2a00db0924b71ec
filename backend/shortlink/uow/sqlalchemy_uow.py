"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from contextlib import suppress

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session

from shortlink.core.extensions import db
from shortlink.repositories import (
    RefreshTokenRepository,
    ShortLinkRepository,
    UserRepository,
)
from shortlink.uow.base import UnitOfWork


def _current_session(session: Session | scoped_session[Session] | None) -> Session:
    """Return the concrete session behind ``session`` (``db.session`` when omitted)."""
    source = session if session is not None else db.session
    if isinstance(source, scoped_session):
        return source()
    return source


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session | scoped_session[Session] | None = None) -> None:
        # Listeners and ``in_transaction`` need the real Session, not the registry proxy.
        self.session = _current_session(session)
        self.users = UserRepository(session=self.session)
        self.links = ShortLinkRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    Commits when the block exits cleanly, rolls back otherwise. Multi-step
    sequences (code retry loop, delete-then-insert rotation) run inside one
    of these so their intermediate flushes share a single transaction.
    """

    def __init__(self, session: Session | None = None) -> None:
        super().__init__(session=session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Sets the isolation level and ``READ ONLY`` on dialects that support it,
      but only when it owns the transaction.
    - Installs write guards (ORM flush + cursor-level DML) for its lifetime.
    - Rolls back on exit when it owns the transaction; otherwise it leaves the
      outer transaction untouched.
    - Disallows ``commit()``.

    Parameters
    ----------
    isolation_level:
        Transaction isolation hint such as ``"READ COMMITTED"``. ``None`` keeps
        the connection default.
    enforce_db_readonly:
        Apply ``SET TRANSACTION READ ONLY`` on PostgreSQL/MySQL/MariaDB.
    """

    _WRITE_PREFIXES = (
        "insert",
        "update",
        "delete",
        "merge",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
        "grant",
        "revoke",
    )
    _ISOLATION_LEVELS = frozenset(
        {"READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE", "READ UNCOMMITTED"}
    )

    def __init__(
        self,
        *,
        session: Session | None = None,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._owns_transaction = False
        self._conn: Connection | None = None
        self._listeners_installed = False

    # ----------------------------- Context Manager -----------------------------

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # An outer transaction (autobegin, test fixture) is joined, not replaced.
        self._owns_transaction = not self.session.in_transaction()
        if self._owns_transaction:
            self.session.begin()

        self._conn = self.session.connection()
        if self._owns_transaction:
            self._apply_transaction_directives(self._conn.dialect.name)
        self._install_listeners()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owns_transaction:
                self.session.rollback()
        finally:
            self._remove_listeners()
            self._conn = None
            self._owns_transaction = False

    # ----------------------------- Public API ---------------------------------

    def commit(self) -> None:
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Guards & Listeners --------------------------

    def _apply_transaction_directives(self, dialect: str) -> None:
        if dialect not in ("postgresql", "mysql", "mariadb"):
            return
        try:
            if self.isolation_level:
                iso = self.isolation_level.upper().strip()
                if iso not in self._ISOLATION_LEVELS:
                    current_app.logger.warning("Unknown isolation_level '%s'; attempting as-is.", iso)
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {iso}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            current_app.logger.warning(
                "SET TRANSACTION directives failed (%s). Falling back to guards-only.", exc
            )

    def _install_listeners(self) -> None:
        if self._listeners_installed:
            return

        def _before_flush(session, flush_context, instances):
            if session.new or session.dirty or session.deleted:
                raise RuntimeError(
                    "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
                )

        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            first_token = statement.lstrip().split(None, 1)[0].lower() if statement else ""
            if first_token.startswith(self._WRITE_PREFIXES):
                raise RuntimeError(
                    f"Read-only UnitOfWork: SQL statement blocked: {first_token.upper()}"
                )

        event.listen(self.session, "before_flush", _before_flush)
        target = self._conn if self._conn is not None else self.session.get_bind()
        event.listen(target, "before_cursor_execute", _before_cursor_execute)

        self._ro_before_flush = _before_flush
        self._ro_before_cursor_execute = _before_cursor_execute
        self._ro_target = target
        self._listeners_installed = True

    def _remove_listeners(self) -> None:
        if not self._listeners_installed:
            return

        with suppress(Exception):
            event.remove(self.session, "before_flush", self._ro_before_flush)
        with suppress(Exception):
            event.remove(self._ro_target, "before_cursor_execute", self._ro_before_cursor_execute)

        self._listeners_installed = False
