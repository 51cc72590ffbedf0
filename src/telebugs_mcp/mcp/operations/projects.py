# src/telebugs_mcp/mcp/operations/projects.py
"""Project listing."""

from sqlalchemy import func, select

from telebugs_mcp.contracts import Platform, PrincipalContext
from telebugs_mcp.core.tracker.database import TrackerDB
from telebugs_mcp.core.tracker.schema import projects_table
from telebugs_mcp.mcp.operations.common import in_scope
from telebugs_mcp.mcp.types import ProjectsResult


def list_projects(db: TrackerDB, ctx: PrincipalContext) -> ProjectsResult:
    """List every live project the principal is a member of, ordered by name.

    Project filters do not apply here: the scope is always the full
    membership set. Soft-deleted projects are excluded.
    """
    if not ctx.project_ids:
        return {"total_count": 0, "projects": []}

    condition = in_scope(projects_table.c.id, ctx.project_ids) & projects_table.c.deleted_at.is_(None)

    total_count = db.fetch_count(select(func.count()).select_from(projects_table).where(condition))
    rows = db.fetch_all(select(projects_table).where(condition).order_by(projects_table.c.name, projects_table.c.id))

    return {
        "total_count": total_count,
        "projects": [
            {
                "id": row.id,
                "name": row.name,
                "platform": Platform.from_code(row.platform).value,
                "timezone": row.timezone,
                "error_groups_count": row.groups_count,
                "reports_count": row.reports_count,
                "created_at": row.created_at,
            }
            for row in rows
        ],
    }
