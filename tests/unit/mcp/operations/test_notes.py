# tests/unit/mcp/operations/test_notes.py
"""Tests for add_note and delete_note."""

from sqlalchemy import func, select

from telebugs_mcp.core.tracker.schema import groups_table, notes_table
from telebugs_mcp.mcp.operations.groups import get_error_group
from telebugs_mcp.mcp.operations.notes import NOT_AUTHOR, add_note, delete_note
from tests.fixtures.tracker import World


def _notes_count(world: World, group_id: int) -> int:
    row = world.db.fetch_one(select(groups_table.c.notes_count).where(groups_table.c.id == group_id))
    assert row is not None
    return int(row.notes_count)


def _stored_notes(world: World, group_id: int) -> int:
    return world.db.fetch_count(select(func.count()).select_from(notes_table).where(notes_table.c.group_id == group_id))


class TestAddNote:
    def test_add_note(self, world: World) -> None:
        result = add_note(world.db, world.alice_ctx, world.web_open, "Fixed in web@2.4.2")

        assert result["success"] is True  # type: ignore[typeddict-item]
        assert result["group_id"] == world.web_open  # type: ignore[typeddict-item]
        assert isinstance(result["note_id"], int)  # type: ignore[typeddict-item]
        assert _notes_count(world, world.web_open) == 1

    def test_note_visible_in_group_detail(self, world: World) -> None:
        add_note(world.db, world.alice_ctx, world.web_open, "Fixed in web@2.4.2")

        group = get_error_group(world.db, world.alice_ctx, world.web_open)["error_group"]  # type: ignore[typeddict-item]

        assert group["notes_count"] == 1
        (note,) = group["notes"]
        assert note["content"] == "Fixed in web@2.4.2"
        assert note["author"] == "Alice"
        assert note["automated"] is False

    def test_counter_tracks_every_insert(self, world: World) -> None:
        for n in range(3):
            add_note(world.db, world.bob_ctx, world.api_open, f"note {n}")

        assert _notes_count(world, world.api_open) == _stored_notes(world, world.api_open) == 3

    def test_not_found(self, world: World) -> None:
        assert add_note(world.db, world.alice_ctx, 9999, "hello") == {"error": "Error group not found"}

    def test_access_denied_writes_nothing(self, world: World) -> None:
        assert add_note(world.db, world.alice_ctx, world.secret_open, "hello") == {"error": "Access denied to this error group"}
        assert _stored_notes(world, world.secret_open) == 0


class TestDeleteNote:
    def test_author_deletes_own_note(self, world: World) -> None:
        note_id = add_note(world.db, world.alice_ctx, world.web_open, "temporary")["note_id"]  # type: ignore[typeddict-item]

        result = delete_note(world.db, world.alice_ctx, world.web_open, note_id)

        assert result == {"success": True, "note_id": note_id, "group_id": world.web_open}
        assert _notes_count(world, world.web_open) == 0
        assert _stored_notes(world, world.web_open) == 0

    def test_other_member_cannot_delete(self, world: World) -> None:
        note_id = add_note(world.db, world.alice_ctx, world.api_open, "mine")["note_id"]  # type: ignore[typeddict-item]

        assert delete_note(world.db, world.bob_ctx, world.api_open, note_id) == {"error": NOT_AUTHOR}
        assert _stored_notes(world, world.api_open) == 1
        assert _notes_count(world, world.api_open) == 1

    def test_admin_role_does_not_bypass_authorship(self, world: World) -> None:
        admin = world.seed.user("Root", role=1)
        world.seed.membership(admin, world.api)
        note_id = add_note(world.db, world.alice_ctx, world.api_open, "mine")["note_id"]  # type: ignore[typeddict-item]

        assert delete_note(world.db, world.seed.context(admin), world.api_open, note_id) == {"error": NOT_AUTHOR}

    def test_note_under_other_group_not_found(self, world: World) -> None:
        note_id = add_note(world.db, world.alice_ctx, world.web_open, "here")["note_id"]  # type: ignore[typeddict-item]

        assert delete_note(world.db, world.alice_ctx, world.api_open, note_id) == {"error": "Note not found"}
        assert _stored_notes(world, world.web_open) == 1

    def test_unknown_note(self, world: World) -> None:
        assert delete_note(world.db, world.alice_ctx, world.web_open, 9999) == {"error": "Note not found"}

    def test_group_checked_first(self, world: World) -> None:
        assert delete_note(world.db, world.alice_ctx, 9999, 1) == {"error": "Error group not found"}
        assert delete_note(world.db, world.alice_ctx, world.secret_open, 1) == {"error": "Access denied to this error group"}

    def test_delete_twice(self, world: World) -> None:
        note_id = add_note(world.db, world.alice_ctx, world.web_open, "once")["note_id"]  # type: ignore[typeddict-item]
        delete_note(world.db, world.alice_ctx, world.web_open, note_id)

        assert delete_note(world.db, world.alice_ctx, world.web_open, note_id) == {"error": "Note not found"}
        assert _notes_count(world, world.web_open) == 0
