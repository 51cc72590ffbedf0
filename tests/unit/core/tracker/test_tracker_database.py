# tests/unit/core/tracker/test_tracker_database.py
"""Tests for TrackerDB connection management and storage primitives."""

from pathlib import Path

import pytest
from sqlalchemy import create_engine, func, insert, select, text, update

from telebugs_mcp.contracts import SchemaCompatibilityError, StorageFault
from telebugs_mcp.core.tracker.database import TrackerDB
from telebugs_mcp.core.tracker.schema import GROUP_SEARCH_INDEX_DDL, metadata, projects_table, users_table


def _create_tracker_file(path: Path, *, with_search_index: bool = True) -> str:
    url = f"sqlite:///{path}"
    engine = create_engine(url)
    metadata.create_all(engine)
    if with_search_index:
        with engine.begin() as conn:
            conn.execute(text(GROUP_SEARCH_INDEX_DDL))
    engine.dispose()
    return url


class TestOpening:
    def test_opens_existing_database(self, tmp_path: Path) -> None:
        url = _create_tracker_file(tmp_path / "production.sqlite3")

        with TrackerDB.from_url(url) as db:
            assert db.connection_string == url
            assert db.fetch_count(select(func.count()).select_from(users_table)) == 0

    def test_missing_tables_rejected(self, tmp_path: Path) -> None:
        url = f"sqlite:///{tmp_path / 'empty.sqlite3'}"

        with pytest.raises(SchemaCompatibilityError, match="missing tables"):
            TrackerDB.from_url(url)

    def test_missing_search_index_rejected(self, tmp_path: Path) -> None:
        url = _create_tracker_file(tmp_path / "nofts.sqlite3", with_search_index=False)

        with pytest.raises(SchemaCompatibilityError, match="group_search_index"):
            TrackerDB.from_url(url)

    def test_file_database_uses_wal_and_foreign_keys(self, tmp_path: Path) -> None:
        url = _create_tracker_file(tmp_path / "production.sqlite3")

        with TrackerDB.from_url(url, busy_timeout_ms=1234) as db, db.connection() as conn:
            assert conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
            assert conn.execute(text("PRAGMA busy_timeout")).scalar() == 1234

    def test_close_is_idempotent(self) -> None:
        db = TrackerDB.in_memory()
        db.close()
        db.close()

        with pytest.raises(RuntimeError, match="not initialized"):
            _ = db.engine


class TestStoragePrimitives:
    def test_fetch_one_returns_none_when_absent(self, tracker_db: TrackerDB) -> None:
        assert tracker_db.fetch_one(select(users_table.c.id).where(users_table.c.id == 1)) is None

    def test_execute_write_reports_affected_rows(self, tracker_db: TrackerDB) -> None:
        tracker_db.execute_write(
            insert(projects_table).values(name="A"),
            insert(projects_table).values(name="B"),
        )

        affected = tracker_db.execute_write(update(projects_table).values(timezone="Europe/Berlin"))

        assert affected == 2
        rows = tracker_db.fetch_all(select(projects_table.c.name).order_by(projects_table.c.name))
        assert [row.name for row in rows] == ["A", "B"]

    def test_execute_write_is_atomic(self, tracker_db: TrackerDB) -> None:
        """A failing statement rolls back the statements before it."""
        with pytest.raises(StorageFault):
            tracker_db.execute_write(
                insert(projects_table).values(name="kept?"),
                insert(projects_table).values(name=None),  # NOT NULL violation
            )

        assert tracker_db.fetch_count(select(func.count()).select_from(projects_table)) == 0

    def test_engine_errors_surface_as_storage_fault(self, tracker_db: TrackerDB) -> None:
        with pytest.raises(StorageFault) as exc_info:
            tracker_db.fetch_all(text("SELECT * FROM no_such_table"))

        assert exc_info.value.__cause__ is not None

    def test_foreign_keys_enforced_in_memory(self, tracker_db: TrackerDB) -> None:
        from telebugs_mcp.core.tracker.schema import project_memberships_table

        with pytest.raises(StorageFault):
            tracker_db.execute_write(insert(project_memberships_table).values(user_id=999, project_id=999))
