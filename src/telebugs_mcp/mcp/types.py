# src/telebugs_mcp/mcp/types.py
"""TypedDict definitions for MCP tool results.

These TypedDicts give static structure to the dicts returned by the
operation functions. At runtime they are plain dicts and serialize
identically via json.dumps() -- the MCP wire format is unchanged.

Naming convention:
  - {Noun}Record   -- items in a list (SQL row projections)
  - {Noun}Detail   -- single-entity views with nested substructures
  - {Noun}Result   -- the top-level object a tool returns

Every tool returns an object. Success carries the entity key; recoverable
failures carry only ``error`` (see ``telebugs_mcp.contracts.errors``).
"""

from typing import Any, TypedDict

from telebugs_mcp.contracts.errors import ErrorResult

# ══════════════════════════════════════════════════════════════════════════════
# Group A -- Records (items in listings)
# ══════════════════════════════════════════════════════════════════════════════


class ProjectRecord(TypedDict):
    """A project as returned by ``list_projects``."""

    id: int
    name: str
    platform: str
    timezone: str
    error_groups_count: int
    reports_count: int
    created_at: str | None


class ErrorGroupRecord(TypedDict):
    """An error group row as returned by ``list_error_groups``."""

    id: int
    project_id: int
    project_name: str
    error_type: str
    error_message: str
    culprit: str | None
    occurrences: int
    first_seen: str | None
    last_seen: str | None
    status: str


class SearchResultRecord(TypedDict):
    """An error group matched by ``search_errors``."""

    id: int
    project_id: int
    project_name: str
    error_type: str
    error_message: str
    culprit: str | None
    occurrences: int
    last_seen: str | None
    status: str


class NoteRecord(TypedDict):
    """A note attached to an error group."""

    id: int
    content: str
    automated: bool
    author: str
    created_at: str | None


class ReportRecord(TypedDict):
    """A report row as returned by ``list_reports``."""

    id: int
    project_id: int
    project_name: str
    group_id: int
    error_type: str
    error_message: str
    culprit: str | None
    environment: str | None
    platform: str | None
    release: str | None
    server: str | None
    handled: bool
    severity: str
    occurred_at: str


class ReleaseRecord(TypedDict):
    """A release as returned by ``list_releases``."""

    id: int
    project_id: int
    project_name: str
    version: str
    artifacts_count: int
    created_at: str | None


class ArtifactRecord(TypedDict):
    """An uploaded artifact as returned by ``list_release_artifacts``."""

    id: int
    name: str
    debug_id: str | None
    byte_size: int | None
    content_type: str | None
    created_at: str | None


class PeriodRecord(TypedDict):
    """One time bucket of ``get_statistics``."""

    period_key: str
    report_count: int
    error_group_count: int


class TopGroupRecord(TypedDict):
    """A high-volume error group in ``get_statistics``."""

    group_id: int
    error_type: str
    error_message: str
    count: int


# ══════════════════════════════════════════════════════════════════════════════
# Group B -- Details (single entities with nested structure)
# ══════════════════════════════════════════════════════════════════════════════


class ErrorGroupDetail(TypedDict):
    """Full error group view from ``get_error_group``."""

    id: int
    project_id: int
    project_name: str
    error_type: str
    error_message: str
    culprit: str | None
    fingerprint: str
    occurrences: int
    first_seen: str | None
    last_seen: str | None
    status: str
    resolved_at: str | None
    resolved_by: str | None
    muted_at: str | None
    muted_until: str | None
    muted_by: str | None
    assigned_to: str | None
    merged_into_id: int | None
    notes_count: int
    notes: list[NoteRecord]


class FrameDetail(TypedDict):
    """One stack frame. Context fields are parsed JSON or raw text."""

    file: str | None
    function: str | None
    line: int | None
    column: int | None
    context_line: str | None
    pre_context: Any
    post_context: Any
    in_app: bool


class StackTraceDetail(TypedDict):
    """One exception in the chain with its frames in position order."""

    exception_type: str | None
    exception_module: str | None
    exception_value: str | None
    frames: list[FrameDetail]


class BreadcrumbDetail(TypedDict):
    type: str | None
    category: str | None
    level: str | None
    message: str | None
    data: Any
    timestamp: str | None


class RequestDetail(TypedDict):
    """HTTP request snapshot. Headers and body are parsed JSON or raw text."""

    url: str | None
    method: str | None
    query_string: str | None
    headers: Any
    data: Any


class GeoDetail(TypedDict):
    country: str | None
    region: str | None
    city: str | None


class ReportUserDetail(TypedDict):
    """End user affected by the report."""

    id: str | None
    username: str | None
    email: str | None
    ip_address: str | None
    geo: GeoDetail


class ReportDetail(TypedDict):
    """Fully assembled report from ``get_report``."""

    id: int
    project_id: int
    project_name: str
    group_id: int
    error_type: str
    error_message: str
    culprit: str | None
    environment: str | None
    platform: str | None
    release: str | None
    server: str | None
    handled: bool
    severity: str
    occurred_at: str
    log_message: str | None
    stack_traces: list[StackTraceDetail]
    contexts: dict[str, Any]
    tags: dict[str, str | None]
    breadcrumbs: list[BreadcrumbDetail]
    request: RequestDetail | None
    user: ReportUserDetail | None


class StatisticsDetail(TypedDict):
    period: str
    total_reports: int
    unique_error_groups: int
    periods: list[PeriodRecord]
    top_error_groups: list[TopGroupRecord]


class SourcemapArtifactDetail(TypedDict):
    id: int
    name: str
    debug_id: str
    release_version: str
    release_id: int
    project_id: int
    project_name: str


# ══════════════════════════════════════════════════════════════════════════════
# Group C -- Tool Results (top-level objects)
# ══════════════════════════════════════════════════════════════════════════════


class ProjectsResult(TypedDict):
    total_count: int
    projects: list[ProjectRecord]


class ErrorGroupsResult(TypedDict):
    total_count: int
    error_groups: list[ErrorGroupRecord]


class ErrorGroupResult(TypedDict):
    error_group: ErrorGroupDetail


class ReportsResult(TypedDict):
    total_count: int
    reports: list[ReportRecord]


class ReportResult(TypedDict):
    report: ReportDetail


class StatisticsResult(TypedDict):
    statistics: StatisticsDetail


class SearchResult(TypedDict):
    total_count: int
    results: list[SearchResultRecord]


class ReleasesResult(TypedDict):
    total_count: int
    releases: list[ReleaseRecord]


class ArtifactsResult(TypedDict):
    total_count: int
    artifacts: list[ArtifactRecord]


class SourcemapStatusResult(TypedDict):
    found: bool
    artifact: SourcemapArtifactDetail | None


class GroupMutationResult(TypedDict, total=False):
    """Result of resolve/unresolve/mute/unmute. ``muted_until`` only for mute."""

    success: bool
    group_id: int
    status: str
    muted_until: str | None


class NoteMutationResult(TypedDict):
    success: bool
    note_id: int
    group_id: int


__all__ = [
    "ArtifactRecord",
    "ArtifactsResult",
    "BreadcrumbDetail",
    "ErrorGroupDetail",
    "ErrorGroupRecord",
    "ErrorGroupResult",
    "ErrorGroupsResult",
    "ErrorResult",
    "FrameDetail",
    "GeoDetail",
    "GroupMutationResult",
    "NoteMutationResult",
    "NoteRecord",
    "PeriodRecord",
    "ProjectRecord",
    "ProjectsResult",
    "ReleaseRecord",
    "ReleasesResult",
    "ReportDetail",
    "ReportRecord",
    "ReportResult",
    "ReportUserDetail",
    "ReportsResult",
    "RequestDetail",
    "SearchResult",
    "SearchResultRecord",
    "SourcemapArtifactDetail",
    "SourcemapStatusResult",
    "StackTraceDetail",
    "StatisticsDetail",
    "StatisticsResult",
    "TopGroupRecord",
]
