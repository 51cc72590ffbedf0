# src/telebugs_mcp/core/tracker/database.py
"""Database connection management and storage access for the tracker.

The tracker database is written concurrently by the Telebugs Rails app.
This module owns engine setup (SQLite pragmas for sharing the file with
Rails) and the three storage primitives every operation goes through:
``fetch_all``, ``fetch_one`` and ``execute_write``. Statements are
SQLAlchemy Core constructs, so every value is a bound parameter; ``in_()``
expands to one placeholder per scoped project id.

Any engine failure surfaces as ``StorageFault``.
"""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any, Self

from sqlalchemy import Connection, Row, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql.expression import Executable

from telebugs_mcp.contracts.errors import SchemaCompatibilityError, StorageFault
from telebugs_mcp.core.tracker.schema import GROUP_SEARCH_INDEX_DDL, metadata, search_metadata

logger = logging.getLogger(__name__)


class TrackerDB:
    """Tracker database connection manager and storage access primitive."""

    def __init__(self, connection_string: str, *, busy_timeout_ms: int = 5000) -> None:
        """Open a connection to an existing tracker database.

        Tables are never created here: the schema is owned by the Rails app.

        Args:
            connection_string: SQLAlchemy connection string
                e.g., "sqlite:////var/lib/telebugs/production.sqlite3"
            busy_timeout_ms: SQLite lock wait before a write fails
        """
        self.connection_string = connection_string
        self._engine: Engine | None = create_engine(connection_string, echo=False)
        if connection_string.startswith("sqlite"):
            TrackerDB._configure_sqlite(self._engine, busy_timeout_ms=busy_timeout_ms)
        self._validate_schema()

    @staticmethod
    def _configure_sqlite(engine: Engine, *, busy_timeout_ms: int = 5000, wal: bool = True) -> None:
        """Configure SQLite engine for sharing the file with the Rails app.

        Registers a connection event hook that sets:
        - PRAGMA journal_mode=WAL (readers never block the Rails writer)
        - PRAGMA foreign_keys=ON (referential integrity)
        - PRAGMA busy_timeout (wait for Rails-held locks instead of failing)

        Args:
            engine: SQLAlchemy Engine to configure
            busy_timeout_ms: Lock wait in milliseconds
            wal: Switch journal mode to WAL (not applicable to :memory:)
        """

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection: object, connection_record: object) -> None:
            cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]  # SQLAlchemy event passes DBAPI connection typed as object
            if wal:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            # PRAGMA doesn't support parameter binding; the value is an int from settings
            cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
            cursor.close()

    def _validate_schema(self) -> None:
        """Check that every table this server reads exists.

        Raises:
            SchemaCompatibilityError: If tables are missing (wrong file, or a
                Telebugs version this server does not understand).
        """
        from sqlalchemy import inspect

        try:
            existing_tables = set(inspect(self.engine).get_table_names())
        except SQLAlchemyError as e:
            raise StorageFault(f"Cannot open tracker database: {type(e).__name__}") from e

        expected = set(metadata.tables) | set(search_metadata.tables)
        missing = sorted(expected - existing_tables)
        if missing:
            raise SchemaCompatibilityError(
                "Tracker database is missing tables: " + ", ".join(missing) + "\n\n"
                "Check that --database points at the Telebugs production database.\n\n"
                f"Database: {self.connection_string}"
            )

    @property
    def engine(self) -> Engine:
        """Get the SQLAlchemy engine."""
        if self._engine is None:
            raise RuntimeError("Database not initialized")
        return self._engine

    def close(self) -> None:
        """Close database connection."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    @classmethod
    def in_memory(cls) -> Self:
        """Create an in-memory SQLite database for testing.

        Tables and the FTS5 search index are created automatically. A single
        shared connection is used so every thread sees the same database.

        Returns:
            TrackerDB instance with in-memory SQLite
        """
        engine = create_engine(
            "sqlite:///:memory:",
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        cls._configure_sqlite(engine, wal=False)
        metadata.create_all(engine)
        with engine.begin() as conn:
            conn.execute(text(GROUP_SEARCH_INDEX_DDL))
        instance = cls.__new__(cls)
        instance.connection_string = "sqlite:///:memory:"
        instance._engine = engine
        return instance

    @classmethod
    def from_url(cls, url: str, *, busy_timeout_ms: int = 5000) -> Self:
        """Create database from connection URL.

        Args:
            url: SQLAlchemy connection URL
            busy_timeout_ms: SQLite lock wait before a write fails

        Returns:
            TrackerDB instance
        """
        return cls(url, busy_timeout_ms=busy_timeout_ms)

    @contextmanager
    def connection(self) -> Iterator[Connection]:
        """Get a database connection with automatic transaction handling.

        Uses engine.begin() for proper transaction semantics:
        - Auto-commits on successful block exit
        - Auto-rolls back on exception

        Engine errors raised inside the block are re-raised as StorageFault.

        Usage:
            with db.connection() as conn:
                conn.execute(notes_table.insert().values(...))
                conn.execute(groups_table.update().values(...))
            # Both committed, or neither
        """
        try:
            with self.engine.begin() as conn:
                yield conn
        except SQLAlchemyError as e:
            logger.error("Tracker database operation failed: %s", type(e).__name__)
            raise StorageFault(f"Tracker database operation failed: {type(e).__name__}: {e}") from e

    def fetch_all(self, statement: Executable) -> Sequence[Row[Any]]:
        """Execute a read statement and return every row."""
        with self.connection() as conn:
            return conn.execute(statement).fetchall()

    def fetch_one(self, statement: Executable) -> Row[Any] | None:
        """Execute a read statement and return the first row, or None."""
        with self.connection() as conn:
            return conn.execute(statement).first()

    def fetch_count(self, statement: Executable) -> int:
        """Execute a ``SELECT COUNT(*)`` statement and return the count."""
        with self.connection() as conn:
            count = conn.execute(statement).scalar_one()
        return int(count)

    def execute_write(self, *statements: Executable) -> int:
        """Execute write statements in one transaction.

        Either every statement commits or none does.

        Returns:
            Total number of affected rows
        """
        affected = 0
        with self.connection() as conn:
            for statement in statements:
                affected += conn.execute(statement).rowcount
        return affected
