# src/telebugs_mcp/mcp/operations/releases.py
"""Release, artifact and source map lookups.

Unlike the other listings, ``list_releases`` requires a project the caller
is a member of and fails hard otherwise instead of widening to the full
membership.
"""

from sqlalchemy import and_, func, select

from telebugs_mcp.contracts import ErrorResult, PrincipalContext, access_denied
from telebugs_mcp.core.tracker.database import TrackerDB
from telebugs_mcp.core.tracker.schema import (
    artifacts_table,
    attachments_table,
    blobs_table,
    projects_table,
    releases_table,
)
from telebugs_mcp.core.tracker.scope import effective_scope
from telebugs_mcp.mcp.operations.common import check_ownership, in_scope
from telebugs_mcp.mcp.types import ArtifactsResult, ReleasesResult, SourcemapStatusResult

# ActiveStorage polymorphic record type for artifact uploads
_ARTIFACT_RECORD_TYPE = "Artifact"


def list_releases(
    db: TrackerDB,
    ctx: PrincipalContext,
    *,
    project_id: int,
    limit: int = 20,
    offset: int = 0,
) -> ReleasesResult | ErrorResult:
    """List a project's releases, newest first, with artifact counts.

    Returns:
        The releases page, or "Access denied to this project" when the
        caller is not a member of ``project_id``
    """
    if not ctx.can_access(project_id):
        return access_denied("project")

    condition = releases_table.c.project_id == project_id
    total_count = db.fetch_count(select(func.count()).select_from(releases_table).where(condition))

    artifacts_count = (
        select(func.count(artifacts_table.c.id))
        .where(artifacts_table.c.release_id == releases_table.c.id)
        .scalar_subquery()
        .label("artifacts_count")
    )
    rows = db.fetch_all(
        select(
            releases_table.c.id,
            releases_table.c.project_id,
            projects_table.c.name.label("project_name"),
            releases_table.c.version,
            artifacts_count,
            releases_table.c.created_at,
        )
        .select_from(releases_table.join(projects_table, projects_table.c.id == releases_table.c.project_id))
        .where(condition)
        .order_by(releases_table.c.created_at.desc(), releases_table.c.id.desc())
        .limit(limit)
        .offset(offset)
    )

    return {
        "total_count": total_count,
        "releases": [
            {
                "id": row.id,
                "project_id": row.project_id,
                "project_name": row.project_name,
                "version": row.version,
                "artifacts_count": row.artifacts_count,
                "created_at": row.created_at,
            }
            for row in rows
        ],
    }


def list_release_artifacts(
    db: TrackerDB,
    ctx: PrincipalContext,
    *,
    release_id: int,
    limit: int = 20,
    offset: int = 0,
) -> ArtifactsResult | ErrorResult:
    """List a release's artifacts with the size and content type of their upload.

    Returns:
        The artifacts page, or "Release not found" /
        "Access denied to this release"
    """
    release = db.fetch_one(
        select(releases_table.c.id, releases_table.c.project_id).where(releases_table.c.id == release_id)
    )
    failure = check_ownership(ctx, release, "release")
    if failure is not None:
        return failure

    condition = artifacts_table.c.release_id == release_id
    total_count = db.fetch_count(select(func.count()).select_from(artifacts_table).where(condition))

    rows = db.fetch_all(
        select(
            artifacts_table.c.id,
            artifacts_table.c.name,
            artifacts_table.c.debug_id,
            blobs_table.c.byte_size,
            blobs_table.c.content_type,
            artifacts_table.c.created_at,
        )
        .select_from(
            artifacts_table.outerjoin(
                attachments_table,
                and_(
                    attachments_table.c.record_type == _ARTIFACT_RECORD_TYPE,
                    attachments_table.c.record_id == artifacts_table.c.id,
                ),
            ).outerjoin(blobs_table, blobs_table.c.id == attachments_table.c.blob_id)
        )
        .where(condition)
        .order_by(artifacts_table.c.created_at.desc(), artifacts_table.c.id.desc())
        .limit(limit)
        .offset(offset)
    )

    return {
        "total_count": total_count,
        "artifacts": [
            {
                "id": row.id,
                "name": row.name,
                "debug_id": row.debug_id,
                "byte_size": row.byte_size,
                "content_type": row.content_type,
                "created_at": row.created_at,
            }
            for row in rows
        ],
    }


def get_sourcemap_status(
    db: TrackerDB,
    ctx: PrincipalContext,
    *,
    debug_id: str,
    project_id: int | None = None,
) -> SourcemapStatusResult:
    """Check whether an artifact with ``debug_id`` was uploaded to a project in scope.

    When several releases carry the same debug id, the most recently
    uploaded artifact wins.
    """
    scope = effective_scope(ctx.project_ids, project_id)
    if not scope:
        return {"found": False, "artifact": None}

    row = db.fetch_one(
        select(
            artifacts_table.c.id,
            artifacts_table.c.name,
            artifacts_table.c.debug_id,
            releases_table.c.version.label("release_version"),
            releases_table.c.id.label("release_id"),
            releases_table.c.project_id,
            projects_table.c.name.label("project_name"),
        )
        .select_from(
            artifacts_table.join(releases_table, releases_table.c.id == artifacts_table.c.release_id).join(
                projects_table, projects_table.c.id == releases_table.c.project_id
            )
        )
        .where(in_scope(releases_table.c.project_id, scope), artifacts_table.c.debug_id == debug_id)
        .order_by(artifacts_table.c.created_at.desc(), artifacts_table.c.id.desc())
        .limit(1)
    )
    if row is None:
        return {"found": False, "artifact": None}

    return {
        "found": True,
        "artifact": {
            "id": row.id,
            "name": row.name,
            "debug_id": row.debug_id,
            "release_version": row.release_version,
            "release_id": row.release_id,
            "project_id": row.project_id,
            "project_name": row.project_name,
        },
    }
