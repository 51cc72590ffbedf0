# src/telebugs_mcp/core/tracker/schema.py
"""SQLAlchemy table definitions for the Telebugs tracker database.

The database is owned and migrated by the Telebugs Rails application; these
definitions describe the subset of its schema this server reads and writes.
Uses SQLAlchemy Core (not ORM) for explicit control over queries.

Timestamps are declared as String: Rails stores them as text in SQLite and
range filters compare that text directly, so values are passed through
exactly as stored.
"""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

# Shared metadata for all regular tables
metadata = MetaData()

# The FTS5 search index is a virtual table. It lives in its own metadata so
# create_all() never tries to create it as a plain table.
search_metadata = MetaData()

# === Users and Membership ===

users_table = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("email_address", String(255), nullable=False),
    Column("role", Integer, nullable=False, default=0),
    Column("api_key", String(255)),
    Column("active", Boolean, nullable=False, default=True),
    Column("created_at", String(32)),
    Column("updated_at", String(32)),
)

projects_table = Table(
    "projects",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("platform", Integer),
    Column("timezone", String(64), nullable=False, default="UTC"),
    Column("groups_count", Integer, nullable=False, default=0),
    Column("reports_count", Integer, nullable=False, default=0),
    Column("created_at", String(32)),
    Column("updated_at", String(32)),
    # Soft delete marker; deleted projects are invisible to every tool
    Column("deleted_at", String(32)),
)

project_memberships_table = Table(
    "project_memberships",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("project_id", Integer, ForeignKey("projects.id"), nullable=False),
    Index("ix_project_memberships_user_id", "user_id"),
)

# === Error Groups ===

groups_table = Table(
    "groups",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("project_id", Integer, ForeignKey("projects.id"), nullable=False),
    Column("error_type", String(255), nullable=False),
    Column("error_message", Text, nullable=False),
    Column("culprit", Text),
    Column("fingerprint", String(255), nullable=False),
    Column("reports_count", Integer, nullable=False, default=0),
    Column("notes_count", Integer, nullable=False, default=0),
    Column("first_occurred_at", String(32)),
    Column("last_occurred_at", String(32)),
    # Lifecycle: status is derived from resolved_at / muted_at, never stored
    Column("resolved_at", String(32)),
    Column("resolver_id", Integer, ForeignKey("users.id")),
    Column("muted_at", String(32)),
    Column("muted_until", String(32)),
    Column("muter_id", Integer, ForeignKey("users.id")),
    Column("owner_id", Integer, ForeignKey("users.id")),
    # Set when the group was absorbed by another; merged groups are hidden from listings
    Column("merged_into_id", Integer, ForeignKey("groups.id")),
    Column("created_at", String(32)),
    Column("updated_at", String(32)),
    Index("ix_groups_project_id_last_occurred_at", "project_id", "last_occurred_at"),
)

notes_table = Table(
    "notes",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("group_id", Integer, ForeignKey("groups.id"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("content", Text, nullable=False),
    Column("automated", Boolean, nullable=False, default=False),
    Column("created_at", String(32)),
    Column("updated_at", String(32)),
    Index("ix_notes_group_id", "group_id"),
)

# === Reports and Per-Report Substructures ===

reports_table = Table(
    "reports",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("project_id", Integer, ForeignKey("projects.id"), nullable=False),
    Column("group_id", Integer, ForeignKey("groups.id"), nullable=False),
    Column("error_type", String(255), nullable=False),
    Column("error_message", Text, nullable=False),
    Column("culprit", Text),
    Column("environment", String(255)),
    Column("platform", String(64)),
    Column("release_version", String(255)),
    Column("server_name", String(255)),
    Column("handled", Boolean, nullable=False, default=True),
    Column("severity", Integer, nullable=False, default=0),
    Column("log_message", Text),
    Column("occurred_at", String(32), nullable=False),
    Index("ix_reports_project_id_occurred_at", "project_id", "occurred_at"),
    Index("ix_reports_group_id", "group_id"),
)

backtraces_table = Table(
    "backtraces",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("report_id", Integer, ForeignKey("reports.id"), nullable=False),
    Column("exception_type", String(255)),
    Column("exception_module", String(255)),
    Column("exception_value", Text),
)

frames_table = Table(
    "frames",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("backtrace_id", Integer, ForeignKey("backtraces.id"), nullable=False),
    Column("position", Integer, nullable=False),
    Column("abs_path", Text),
    Column("filename", Text),
    Column("function", Text),
    Column("lineno", Integer),
    Column("colno", Integer),
    Column("context_line", Text),
    Column("pre_context", Text),  # JSON array of source lines
    Column("post_context", Text),  # JSON array of source lines
    Column("in_app", Boolean, nullable=False, default=False),
)

contexts_table = Table(
    "contexts",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("report_id", Integer, ForeignKey("reports.id"), nullable=False),
    Column("name", String(255)),
    Column("data", Text),  # JSON object
)

tags_table = Table(
    "tags",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("report_id", Integer, ForeignKey("reports.id"), nullable=False),
    Column("key", String(255), nullable=False),
    Column("value", Text),
)

breadcrumbs_table = Table(
    "error_breadcrumbs",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("report_id", Integer, ForeignKey("reports.id"), nullable=False),
    Column("breadcrumb_type", String(64)),
    Column("category", String(255)),
    Column("level", String(32)),
    Column("message", Text),
    Column("data", Text),  # JSON object
    Column("timestamp", String(32)),
)

requests_table = Table(
    "requests",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("report_id", Integer, ForeignKey("reports.id"), nullable=False),
    Column("url", Text),
    Column("method", String(16)),
    Column("query_string", Text),
    Column("headers", Text),  # JSON object
    Column("data", Text),  # JSON body, or raw text
)

report_users_table = Table(
    "report_users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("report_id", Integer, ForeignKey("reports.id"), nullable=False),
    Column("user_id", String(255)),
    Column("username", String(255)),
    Column("email", String(255)),
    Column("ip_address", String(64)),
    Column("geo_country_code", String(8)),
    Column("geo_region", String(255)),
    Column("geo_city", String(255)),
)

# === Aggregates ===

report_aggregates_table = Table(
    "report_aggregates",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("project_id", Integer, ForeignKey("projects.id"), nullable=False),
    Column("group_id", Integer, ForeignKey("groups.id"), nullable=False),
    Column("period_type", Integer, nullable=False),  # PeriodType code
    Column("period_key", String(32), nullable=False),
    Column("count", Integer, nullable=False, default=0),
    Index("ix_report_aggregates_scope", "project_id", "period_type", "period_key"),
)

# === Releases and Artifacts ===

releases_table = Table(
    "releases",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("project_id", Integer, ForeignKey("projects.id"), nullable=False),
    Column("version", String(255), nullable=False),
    Column("created_at", String(32)),
)

artifacts_table = Table(
    "artifacts",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("release_id", Integer, ForeignKey("releases.id"), nullable=False),
    Column("name", String(1024), nullable=False),
    Column("debug_id", String(64)),
    Column("created_at", String(32)),
    Index("ix_artifacts_debug_id", "debug_id"),
)

# ActiveStorage polymorphic attachment tables (byte size and content type
# of an artifact live on its attached blob)
attachments_table = Table(
    "active_storage_attachments",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("record_type", String(255), nullable=False),
    Column("record_id", Integer, nullable=False),
    Column("blob_id", Integer, ForeignKey("active_storage_blobs.id"), nullable=False),
    Column("created_at", String(32)),
)

blobs_table = Table(
    "active_storage_blobs",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("key", String(255), nullable=False),
    Column("filename", String(1024), nullable=False),
    Column("content_type", String(255)),
    Column("byte_size", Integer, nullable=False),
    Column("checksum", String(64)),
    Column("created_at", String(32)),
)

# === Full-Text Search ===

# FTS5 virtual table maintained by the Rails app; rowid is the group id
group_search_index_table = Table(
    "group_search_index",
    search_metadata,
    Column("rowid", Integer),
    Column("error_type", Text),
    Column("error_message", Text),
    Column("culprit", Text),
)

GROUP_SEARCH_INDEX_DDL = "CREATE VIRTUAL TABLE IF NOT EXISTS group_search_index USING fts5(error_type, error_message, culprit)"
