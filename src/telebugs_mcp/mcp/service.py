# src/telebugs_mcp/mcp/service.py
"""Thin facade binding one principal to the tracker operations.

TrackerService keeps a flat, per-caller API and delegates every method to
the matching submodule in ``mcp.operations``. A service is cheap: the
server builds one per tool call from the caller's PrincipalContext.
"""

from telebugs_mcp.contracts import ErrorResult, PrincipalContext
from telebugs_mcp.core.tracker.database import TrackerDB
from telebugs_mcp.mcp.operations import groups, mutations, notes, projects, releases, reports, statistics
from telebugs_mcp.mcp.types import (
    ArtifactsResult,
    ErrorGroupResult,
    ErrorGroupsResult,
    GroupMutationResult,
    NoteMutationResult,
    ProjectsResult,
    ReleasesResult,
    ReportResult,
    ReportsResult,
    SearchResult,
    SourcemapStatusResult,
    StatisticsResult,
)


class TrackerService:
    """Authorization-scoped access to the tracker for one principal.

    Delegates to domain-specific submodules:
    - projects: list_projects
    - groups: list_error_groups, get_error_group, search_errors
    - reports: list_reports, get_report
    - statistics: get_statistics
    - releases: list_releases, list_release_artifacts, get_sourcemap_status
    - mutations: resolve/unresolve/mute/unmute
    - notes: add_note, delete_note
    """

    def __init__(self, db: TrackerDB, ctx: PrincipalContext) -> None:
        self._db = db
        self._ctx = ctx

    @property
    def context(self) -> PrincipalContext:
        return self._ctx

    # === Queries ===

    def list_projects(self) -> ProjectsResult:
        return projects.list_projects(self._db, self._ctx)

    def list_error_groups(
        self,
        *,
        project_id: int | None = None,
        error_type: str | None = None,
        error_message: str | None = None,
        status: str = "open",
        date_from: str | None = None,
        date_to: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ErrorGroupsResult:
        return groups.list_error_groups(
            self._db,
            self._ctx,
            project_id=project_id,
            error_type=error_type,
            error_message=error_message,
            status=status,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset,
        )

    def get_error_group(self, group_id: int) -> ErrorGroupResult | ErrorResult:
        return groups.get_error_group(self._db, self._ctx, group_id)

    def search_errors(self, query: str, *, project_id: int | None = None, limit: int = 20, offset: int = 0) -> SearchResult:
        return groups.search_errors(self._db, self._ctx, query=query, project_id=project_id, limit=limit, offset=offset)

    def list_reports(
        self,
        *,
        group_id: int | None = None,
        project_id: int | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ReportsResult:
        return reports.list_reports(
            self._db,
            self._ctx,
            group_id=group_id,
            project_id=project_id,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset,
        )

    def get_report(self, report_id: int) -> ReportResult | ErrorResult:
        return reports.get_report(self._db, self._ctx, report_id)

    def get_statistics(self, *, project_id: int | None = None, period: str = "day", limit: int = 30) -> StatisticsResult:
        return statistics.get_statistics(self._db, self._ctx, project_id=project_id, period=period, limit=limit)

    def list_releases(self, project_id: int, *, limit: int = 20, offset: int = 0) -> ReleasesResult | ErrorResult:
        return releases.list_releases(self._db, self._ctx, project_id=project_id, limit=limit, offset=offset)

    def list_release_artifacts(self, release_id: int, *, limit: int = 20, offset: int = 0) -> ArtifactsResult | ErrorResult:
        return releases.list_release_artifacts(self._db, self._ctx, release_id=release_id, limit=limit, offset=offset)

    def get_sourcemap_status(self, debug_id: str, *, project_id: int | None = None) -> SourcemapStatusResult:
        return releases.get_sourcemap_status(self._db, self._ctx, debug_id=debug_id, project_id=project_id)

    # === Mutations ===

    def resolve_error_group(self, group_id: int) -> GroupMutationResult | ErrorResult:
        return mutations.resolve_error_group(self._db, self._ctx, group_id)

    def unresolve_error_group(self, group_id: int) -> GroupMutationResult | ErrorResult:
        return mutations.unresolve_error_group(self._db, self._ctx, group_id)

    def mute_error_group(self, group_id: int, muted_until: str | None = None) -> GroupMutationResult | ErrorResult:
        return mutations.mute_error_group(self._db, self._ctx, group_id, muted_until)

    def unmute_error_group(self, group_id: int) -> GroupMutationResult | ErrorResult:
        return mutations.unmute_error_group(self._db, self._ctx, group_id)

    def add_note(self, group_id: int, content: str) -> NoteMutationResult | ErrorResult:
        return notes.add_note(self._db, self._ctx, group_id, content)

    def delete_note(self, group_id: int, note_id: int) -> NoteMutationResult | ErrorResult:
        return notes.delete_note(self._db, self._ctx, group_id, note_id)
