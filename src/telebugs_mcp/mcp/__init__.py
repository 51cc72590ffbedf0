# src/telebugs_mcp/mcp/__init__.py
"""MCP (Model Context Protocol) server for the Telebugs error tracker.

Query tools:
- list_projects, list_error_groups, get_error_group, search_errors
- list_reports, get_report, get_statistics
- list_releases, list_release_artifacts, get_sourcemap_status

Mutation tools:
- resolve_error_group, unresolve_error_group, mute_error_group, unmute_error_group
- add_note, delete_note

Imports of the server module are deferred until a wrapper is called, so
importing this package does not pull in the MCP SDK or the HTTP stack.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp.server.lowlevel import Server


def create_server(*args: Any, **kwargs: Any) -> "Server":
    from telebugs_mcp.mcp.server import create_server as _create_server

    return _create_server(*args, **kwargs)


def main(argv: list[str] | None = None) -> None:
    from telebugs_mcp.mcp.server import main as _main

    _main(argv)


__all__ = ["create_server", "main"]
