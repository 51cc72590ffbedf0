# tests/unit/mcp/test_tool_dispatch.py
"""Tests for tool registration and handle_tool_call routing.

handle_tool_call is the transport-independent entry point: validation,
dispatch through TrackerService, and the JSON-ready result.
"""

import json

import pytest

from telebugs_mcp.contracts import StorageFault
from telebugs_mcp.mcp.server import handle_tool_call, tool_definitions
from tests.fixtures.tracker import World

QUERY_TOOLS = {
    "list_projects",
    "list_error_groups",
    "get_error_group",
    "list_reports",
    "get_report",
    "get_statistics",
    "search_errors",
    "list_releases",
    "list_release_artifacts",
    "get_sourcemap_status",
}
MUTATION_TOOLS = {
    "resolve_error_group",
    "unresolve_error_group",
    "mute_error_group",
    "unmute_error_group",
    "add_note",
    "delete_note",
}


class TestToolDefinitions:
    def test_all_tools_registered(self) -> None:
        names = [tool.name for tool in tool_definitions()]

        assert set(names) == QUERY_TOOLS | MUTATION_TOOLS
        assert len(names) == len(set(names))

    def test_every_tool_has_object_schema_and_description(self) -> None:
        for tool in tool_definitions():
            assert tool.description
            assert tool.inputSchema["type"] == "object"


class TestHandleToolCall:
    def test_unknown_tool(self, world: World) -> None:
        assert handle_tool_call(world.db, world.alice_ctx, "drop_database", {}) == {"error": "Unknown tool: drop_database"}

    def test_invalid_arguments(self, world: World) -> None:
        result = handle_tool_call(world.db, world.alice_ctx, "get_error_group", {"group_id": "abc"})

        assert result["error"].startswith("Invalid arguments: group_id: ")

    def test_list_projects(self, world: World) -> None:
        result = handle_tool_call(world.db, world.alice_ctx, "list_projects", None)

        assert [p["name"] for p in result["projects"]] == ["Api", "Web"]

    def test_list_error_groups_with_wire_arguments(self, world: World) -> None:
        result = handle_tool_call(
            world.db,
            world.alice_ctx,
            "list_error_groups",
            {"status": "all", "from": "2024-03-09 00:00:00.000000", "project_id": world.web},
        )

        assert [g["id"] for g in result["error_groups"]] == [world.web_open]

    def test_access_denied_is_a_result(self, world: World) -> None:
        result = handle_tool_call(world.db, world.alice_ctx, "get_error_group", {"group_id": world.secret_open})

        assert result == {"error": "Access denied to this error group"}

    def test_search_errors(self, world: World) -> None:
        result = handle_tool_call(world.db, world.alice_ctx, "search_errors", {"query": "gtag"})

        assert [r["id"] for r in result["results"]] == [world.web_muted]

    def test_get_statistics(self, world: World) -> None:
        result = handle_tool_call(world.db, world.alice_ctx, "get_statistics", {"period": "week", "limit": 5})

        assert result["statistics"]["period"] == "week"

    def test_list_releases_requires_membership(self, world: World) -> None:
        result = handle_tool_call(world.db, world.alice_ctx, "list_releases", {"project_id": world.secret})

        assert result == {"error": "Access denied to this project"}

    def test_release_tools(self, world: World) -> None:
        release = world.seed.release(world.web, "web@1.0.0")
        world.seed.artifact(release, "app.js.map", debug_id="dbg-1")

        releases = handle_tool_call(world.db, world.alice_ctx, "list_releases", {"project_id": world.web})
        artifacts = handle_tool_call(world.db, world.alice_ctx, "list_release_artifacts", {"release_id": release})
        status = handle_tool_call(world.db, world.alice_ctx, "get_sourcemap_status", {"debug_id": "dbg-1"})

        assert releases["releases"][0]["artifacts_count"] == 1
        assert artifacts["artifacts"][0]["name"] == "app.js.map"
        assert status["found"] is True

    def test_report_tools(self, world: World) -> None:
        report_id = world.seed.report(world.api, world.api_open, occurred_at="2024-03-12 15:30:00.000000")

        listed = handle_tool_call(world.db, world.bob_ctx, "list_reports", {"group_id": world.api_open})
        detail = handle_tool_call(world.db, world.bob_ctx, "get_report", {"report_id": report_id})

        assert [r["id"] for r in listed["reports"]] == [report_id]
        assert detail["report"]["id"] == report_id

    def test_lifecycle_round_trip(self, world: World) -> None:
        ctx = world.alice_ctx
        group = {"group_id": world.web_open}

        assert handle_tool_call(world.db, ctx, "mute_error_group", {**group, "muted_until": "2024-04-01"})["status"] == "muted"
        assert handle_tool_call(world.db, ctx, "resolve_error_group", group)["status"] == "resolved"
        assert handle_tool_call(world.db, ctx, "mute_error_group", group) == {"error": "Cannot mute a resolved error group"}
        assert handle_tool_call(world.db, ctx, "unresolve_error_group", group)["status"] == "open"
        assert handle_tool_call(world.db, ctx, "unmute_error_group", group)["status"] == "open"
        assert handle_tool_call(world.db, ctx, "get_error_group", group)["error_group"]["status"] == "open"

    def test_note_round_trip(self, world: World) -> None:
        added = handle_tool_call(world.db, world.alice_ctx, "add_note", {"group_id": world.web_open, "content": "On it"})
        deleted = handle_tool_call(
            world.db,
            world.alice_ctx,
            "delete_note",
            {"group_id": world.web_open, "note_id": added["note_id"]},
        )

        assert added["success"] is True
        assert deleted == {"success": True, "note_id": added["note_id"], "group_id": world.web_open}

    def test_results_are_json_serializable(self, world: World) -> None:
        result = handle_tool_call(world.db, world.alice_ctx, "get_error_group", {"group_id": world.web_resolved})

        assert json.loads(json.dumps(result)) == result

    def test_storage_fault_propagates(self, world: World, monkeypatch: pytest.MonkeyPatch) -> None:
        """Infrastructure failures are raised, never rendered as tool results."""

        def broken(*_args: object) -> object:
            raise StorageFault("Tracker database operation failed: OperationalError")

        monkeypatch.setattr(world.db, "fetch_count", broken)

        with pytest.raises(StorageFault):
            handle_tool_call(world.db, world.alice_ctx, "list_projects", {})
