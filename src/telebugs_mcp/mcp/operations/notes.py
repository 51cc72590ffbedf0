# src/telebugs_mcp/mcp/operations/notes.py
"""Note creation and deletion.

Each write keeps ``groups.notes_count`` in step with the notes table in the
same transaction.
"""

import logging

from sqlalchemy import delete, insert, select, update

from telebugs_mcp.contracts import ErrorResult, PrincipalContext, not_found
from telebugs_mcp.core.tracker.database import TrackerDB
from telebugs_mcp.core.tracker.formatters import utc_timestamp
from telebugs_mcp.core.tracker.schema import groups_table, notes_table
from telebugs_mcp.mcp.operations.common import check_ownership
from telebugs_mcp.mcp.types import NoteMutationResult

logger = logging.getLogger(__name__)

NOT_AUTHOR = "You can only delete your own notes"


def _check_group(db: TrackerDB, ctx: PrincipalContext, group_id: int) -> ErrorResult | None:
    group = db.fetch_one(select(groups_table.c.id, groups_table.c.project_id).where(groups_table.c.id == group_id))
    return check_ownership(ctx, group, "error group")


def add_note(db: TrackerDB, ctx: PrincipalContext, group_id: int, content: str) -> NoteMutationResult | ErrorResult:
    """Attach a human-authored note to an error group.

    Returns:
        The new note id, or "Error group not found" /
        "Access denied to this error group"
    """
    failure = _check_group(db, ctx, group_id)
    if failure is not None:
        return failure

    now = utc_timestamp()
    with db.connection() as conn:
        inserted = conn.execute(
            insert(notes_table).values(
                group_id=group_id,
                user_id=ctx.principal.id,
                content=content,
                automated=False,
                created_at=now,
                updated_at=now,
            )
        )
        note_id = inserted.inserted_primary_key[0]
        conn.execute(
            update(groups_table)
            .where(groups_table.c.id == group_id)
            .values(notes_count=groups_table.c.notes_count + 1, updated_at=now)
        )

    logger.info("Note %s added to error group %s by user %s", note_id, group_id, ctx.principal.id)
    return {"success": True, "note_id": note_id, "group_id": group_id}


def delete_note(db: TrackerDB, ctx: PrincipalContext, group_id: int, note_id: int) -> NoteMutationResult | ErrorResult:
    """Delete a note. Only its author may delete it, whatever their role.

    Returns:
        Confirmation, or "Error group not found" /
        "Access denied to this error group" / "Note not found" /
        "You can only delete your own notes"
    """
    failure = _check_group(db, ctx, group_id)
    if failure is not None:
        return failure

    note = db.fetch_one(
        select(notes_table.c.id, notes_table.c.user_id).where(
            notes_table.c.id == note_id,
            notes_table.c.group_id == group_id,
        )
    )
    if note is None:
        return not_found("Note")
    if note.user_id != ctx.principal.id:
        return {"error": NOT_AUTHOR}

    now = utc_timestamp()
    with db.connection() as conn:
        deleted = conn.execute(
            delete(notes_table).where(
                notes_table.c.id == note_id,
                notes_table.c.group_id == group_id,
                notes_table.c.user_id == ctx.principal.id,
            )
        ).rowcount
        if deleted:
            conn.execute(
                update(groups_table)
                .where(groups_table.c.id == group_id)
                .values(notes_count=groups_table.c.notes_count - 1, updated_at=now)
            )
    if not deleted:
        # Deleted concurrently between the check and the write
        return not_found("Note")

    logger.info("Note %s deleted from error group %s by user %s", note_id, group_id, ctx.principal.id)
    return {"success": True, "note_id": note_id, "group_id": group_id}
