# src/telebugs_mcp/mcp/server.py
"""MCP server exposing the Telebugs error tracker.

Every tool runs on behalf of one principal and only sees the projects that
principal is a member of. How the principal is found depends on the
transport:

    stdio -- resolved once at startup from the API key in an environment
             variable (TELEBUGS_API_KEY by default)
    http  -- resolved per session from the Bearer token sent with the
             initialize request (see ``mcp.http``)

Usage:
    # stdio, for a local MCP client
    TELEBUGS_API_KEY=... telebugs-mcp --database /path/to/production.sqlite3

    # streamable HTTP on port 3100
    telebugs-mcp --transport http --port 3100

Query and mutation logic lives in ``mcp.service`` (facade) and
``mcp.operations.*``. This file contains only MCP protocol machinery: tool
registration, argument parsing, dispatch, transports and the CLI entry point.
"""

import argparse
import json
import logging
import os
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool
from pydantic import ValidationError

from telebugs_mcp.contracts import PrincipalContext, SchemaCompatibilityError, StorageFault, Unauthenticated
from telebugs_mcp.core.config import ServerSettings, load_settings
from telebugs_mcp.core.logging import configure_logging, get_logger
from telebugs_mcp.core.tracker.database import TrackerDB
from telebugs_mcp.core.tracker.principals import resolve_principal
from telebugs_mcp.mcp.requests import (
    AddNoteRequest,
    DeleteNoteRequest,
    GetErrorGroupRequest,
    GetReportRequest,
    GetSourcemapStatusRequest,
    GetStatisticsRequest,
    GroupRequest,
    ListErrorGroupsRequest,
    ListProjectsRequest,
    ListReleaseArtifactsRequest,
    ListReleasesRequest,
    ListReportsRequest,
    MuteErrorGroupRequest,
    SearchErrorsRequest,
    ValidationFailure,
    input_schema,
    parse_request,
)
from telebugs_mcp.mcp.service import TrackerService

logger = logging.getLogger(__name__)

SERVER_NAME = "telebugs-mcp"

# Maps the transport's request object (None for stdio) to the caller
ContextProvider = Callable[[Any], PrincipalContext | None]


@dataclass(frozen=True, slots=True)
class _ToolSpec:
    description: str
    request_model: type[Any]


_TOOLS: dict[str, _ToolSpec] = {
    # --- Queries ---
    "list_projects": _ToolSpec(
        "List all projects accessible to the authenticated user",
        ListProjectsRequest,
    ),
    "list_error_groups": _ToolSpec(
        "List deduplicated error groups with optional filtering by project, status, and date range",
        ListErrorGroupsRequest,
    ),
    "get_error_group": _ToolSpec(
        "Get detailed information about a specific error group including notes",
        GetErrorGroupRequest,
    ),
    "list_reports": _ToolSpec(
        "List individual error occurrences with optional filtering",
        ListReportsRequest,
    ),
    "get_report": _ToolSpec(
        "Get full details of a specific error report including stack trace, breadcrumbs, and context",
        GetReportRequest,
    ),
    "get_statistics": _ToolSpec(
        "Get aggregated error statistics over time with optional project filtering",
        GetStatisticsRequest,
    ),
    "search_errors": _ToolSpec(
        "Full-text search across error types, messages and culprits",
        SearchErrorsRequest,
    ),
    "list_releases": _ToolSpec(
        "List all releases for a project with artifact counts",
        ListReleasesRequest,
    ),
    "list_release_artifacts": _ToolSpec(
        "List uploaded artifacts for a release",
        ListReleaseArtifactsRequest,
    ),
    "get_sourcemap_status": _ToolSpec(
        "Check if a debug ID has sourcemaps available",
        GetSourcemapStatusRequest,
    ),
    # --- Mutations ---
    "resolve_error_group": _ToolSpec(
        "Mark an error group as resolved",
        GroupRequest,
    ),
    "unresolve_error_group": _ToolSpec(
        "Reopen a resolved error group",
        GroupRequest,
    ),
    "mute_error_group": _ToolSpec(
        "Mute an open error group, optionally until a given date",
        MuteErrorGroupRequest,
    ),
    "unmute_error_group": _ToolSpec(
        "Unmute a muted error group",
        GroupRequest,
    ),
    "add_note": _ToolSpec(
        "Add a note to an error group",
        AddNoteRequest,
    ),
    "delete_note": _ToolSpec(
        "Delete one of your own notes from an error group",
        DeleteNoteRequest,
    ),
}


def tool_definitions() -> list[Tool]:
    """Tool list advertised to clients, schemas generated from the request models."""
    return [
        Tool(name=name, description=spec.description, inputSchema=input_schema(spec.request_model))
        for name, spec in _TOOLS.items()
    ]


def _dispatch(service: TrackerService, name: str, request: Any) -> dict[str, Any]:
    """Route a validated request to the service.

    No blanket catch: StorageFault and programming errors propagate so the
    SDK reports them as protocol errors rather than tool results.
    """
    result: Any
    if name == "list_projects":
        result = service.list_projects()
    elif name == "list_error_groups":
        result = service.list_error_groups(
            project_id=request.project_id,
            error_type=request.error_type,
            error_message=request.error_message,
            status=request.status,
            date_from=request.date_from,
            date_to=request.date_to,
            limit=request.limit,
            offset=request.offset,
        )
    elif name == "get_error_group":
        result = service.get_error_group(request.group_id)
    elif name == "list_reports":
        result = service.list_reports(
            group_id=request.group_id,
            project_id=request.project_id,
            date_from=request.date_from,
            date_to=request.date_to,
            limit=request.limit,
            offset=request.offset,
        )
    elif name == "get_report":
        result = service.get_report(request.report_id)
    elif name == "get_statistics":
        result = service.get_statistics(
            project_id=request.project_id,
            period=request.period,
            limit=request.limit,
        )
    elif name == "search_errors":
        result = service.search_errors(
            request.query,
            project_id=request.project_id,
            limit=request.limit,
            offset=request.offset,
        )
    elif name == "list_releases":
        result = service.list_releases(request.project_id, limit=request.limit, offset=request.offset)
    elif name == "list_release_artifacts":
        result = service.list_release_artifacts(request.release_id, limit=request.limit, offset=request.offset)
    elif name == "get_sourcemap_status":
        result = service.get_sourcemap_status(request.debug_id, project_id=request.project_id)
    # === Mutations ===
    elif name == "resolve_error_group":
        result = service.resolve_error_group(request.group_id)
    elif name == "unresolve_error_group":
        result = service.unresolve_error_group(request.group_id)
    elif name == "mute_error_group":
        result = service.mute_error_group(request.group_id, request.muted_until)
    elif name == "unmute_error_group":
        result = service.unmute_error_group(request.group_id)
    elif name == "add_note":
        result = service.add_note(request.group_id, request.content)
    elif name == "delete_note":
        result = service.delete_note(request.group_id, request.note_id)
    else:
        result = {"error": f"Unknown tool: {name}"}
    return dict(result)


def handle_tool_call(db: TrackerDB, ctx: PrincipalContext, name: str, arguments: dict[str, Any] | None) -> dict[str, Any]:
    """Validate arguments and run one tool for ``ctx``.

    Transport independent: both the MCP handler and tests go through here.
    """
    spec = _TOOLS.get(name)
    if spec is None:
        return {"error": f"Unknown tool: {name}"}

    request = parse_request(spec.request_model, arguments)
    if isinstance(request, ValidationFailure):
        return {"error": f"Invalid arguments: {request.message}"}

    logger.debug("Tool %s called by user %s", name, ctx.principal.id)
    return _dispatch(TrackerService(db, ctx), name, request)


def create_server(db: TrackerDB, context_provider: ContextProvider) -> Server:
    """Create MCP server with the tracker tools.

    Args:
        db: Tracker database
        context_provider: Returns the calling principal for the current
            transport request (None when the request is not authorized)

    Returns:
        Configured MCP Server
    """
    server: Server = Server(SERVER_NAME)

    @server.list_tools()  # type: ignore[misc, no-untyped-call, untyped-decorator]  # MCP SDK decorators lack type stubs
    async def list_tools() -> list[Tool]:
        return tool_definitions()

    # Arguments are validated by the request models, which report every bad
    # field in one {"error": ...} result instead of an SDK error
    @server.call_tool(validate_input=False)  # type: ignore[misc, untyped-decorator]  # MCP SDK decorators lack type stubs
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        ctx = context_provider(server.request_context.request)
        if ctx is None:
            raise Unauthenticated("No authenticated principal for this session")

        result = handle_tool_call(db, ctx, name, arguments)
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    return server


# ══════════════════════════════════════════════════════════════════════════════
# Transports
# ══════════════════════════════════════════════════════════════════════════════


async def run_stdio(db: TrackerDB, ctx: PrincipalContext) -> None:
    """Run the MCP server with stdio transport for a single principal."""
    server = create_server(db, lambda _request: ctx)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run_http(db: TrackerDB, settings: ServerSettings) -> None:
    """Run the MCP server with streamable HTTP transport (blocks)."""
    import uvicorn

    from telebugs_mcp.mcp.http import HttpTransport, session_id_of
    from telebugs_mcp.mcp.sessions import SessionRegistry

    registry = SessionRegistry(idle_timeout=settings.http.session_idle_timeout_seconds)

    def context_for(request: Any) -> PrincipalContext | None:
        session_id = session_id_of(request)
        return registry.get(session_id) if session_id is not None else None

    server = create_server(db, context_for)
    transport = HttpTransport(server, db, registry, path=settings.http.path)
    get_logger(__name__).info(
        "Starting streamable HTTP transport",
        host=settings.http.host,
        port=settings.http.port,
        path=settings.http.path,
    )
    # log_config=None keeps uvicorn on the structlog handlers configured above
    uvicorn.run(transport.app, host=settings.http.host, port=settings.http.port, log_config=None)


# ══════════════════════════════════════════════════════════════════════════════
# CLI
# ══════════════════════════════════════════════════════════════════════════════


def _database_url(value: str) -> str:
    """Accept either a SQLAlchemy URL or a bare path to a SQLite file."""
    if "://" in value:
        return value
    return f"sqlite:///{Path(value).expanduser()}"


def _apply_cli_overrides(settings: ServerSettings, args: argparse.Namespace) -> ServerSettings:
    """CLI flags win over config file and environment values.

    The merged values are validated again, so overrides obey the same
    constraints as file and environment settings.
    """
    raw = settings.model_dump()
    if args.database is not None:
        raw["database"]["url"] = _database_url(args.database)
    if args.transport is not None:
        raw["transport"] = args.transport
    if args.host is not None:
        raw["http"]["host"] = args.host
    if args.port is not None:
        raw["http"]["port"] = args.port
    if args.api_key_env is not None:
        raw["api_key_env"] = args.api_key_env
    if args.log_level is not None:
        raw["logging"]["level"] = args.log_level
    if args.json_logs:
        raw["logging"]["json_output"] = True
    return ServerSettings.model_validate(raw)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="telebugs-mcp",
        description="Telebugs MCP Server - error tracker tools for MCP clients",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # stdio transport (API key from the environment)
    export TELEBUGS_API_KEY="your-api-key"
    telebugs-mcp --database /var/lib/telebugs/production.sqlite3

    # Streamable HTTP transport (clients send Authorization: Bearer <key>)
    telebugs-mcp --transport http --host 0.0.0.0 --port 3100

    # Settings from a file, overridden on the command line
    telebugs-mcp --config telebugs-mcp.yaml --log-level debug

Environment Variables:
    TELEBUGS_MCP_DATABASE__URL: Database URL (nested keys use a double underscore)
    TELEBUGS_DB_PATH: Legacy database file path
    PORT: Legacy HTTP port
""",
    )
    parser.add_argument("--config", "-c", type=Path, default=None, help="YAML settings file")
    parser.add_argument(
        "--database",
        "-d",
        default=None,
        help="Database connection URL (SQLAlchemy format) or path to the SQLite file",
    )
    parser.add_argument("--transport", choices=["stdio", "http"], default=None, help="MCP transport (default: stdio)")
    parser.add_argument("--host", default=None, help="HTTP bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None, help="HTTP port (default: 3100)")
    parser.add_argument(
        "--api-key-env",
        default=None,
        metavar="VAR",
        help="Environment variable holding the API key for stdio mode (default: TELEBUGS_API_KEY)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines on stderr")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = _apply_cli_overrides(load_settings(args.config), args)
    except (FileNotFoundError, ValidationError) as e:
        sys.stderr.write(f"Error: invalid configuration: {e}\n")
        sys.exit(1)

    configure_logging(json_output=settings.logging.json_output, level=settings.logging.level)

    try:
        db = TrackerDB.from_url(settings.database.url, busy_timeout_ms=settings.database.busy_timeout_ms)
    except (SchemaCompatibilityError, StorageFault) as e:
        sys.stderr.write(f"Error: {e}\n")
        sys.exit(1)

    try:
        if settings.transport == "http":
            run_http(db, settings)
            return

        api_key = os.environ.get(settings.api_key_env)
        if not api_key:
            sys.stderr.write(
                f"Error: environment variable {settings.api_key_env} is not set.\n"
                f'Set it with: export {settings.api_key_env}="your-api-key"\n'
            )
            sys.exit(1)

        ctx = resolve_principal(db, api_key)
        if ctx is None:
            sys.stderr.write(f"Error: the API key in {settings.api_key_env} does not belong to an active user.\n")
            sys.exit(1)

        get_logger(__name__).info("Starting stdio transport", user=ctx.principal.name, projects=len(ctx.project_ids))

        import asyncio

        asyncio.run(run_stdio(db, ctx))
    finally:
        db.close()


if __name__ == "__main__":
    main()
