# tests/unit/mcp/operations/test_search_errors.py
"""Tests for full-text search over error groups."""

from telebugs_mcp.mcp.operations.groups import search_errors
from tests.fixtures.tracker import World


class TestSearchErrors:
    def test_matches_message_terms(self, world: World) -> None:
        result = search_errors(world.db, world.alice_ctx, query="undefined")

        assert result["total_count"] == 1
        (hit,) = result["results"]
        assert hit["id"] == world.web_open
        assert hit["project_name"] == "Web"
        assert hit["status"] == "open"
        assert hit["occurrences"] == 12

    def test_matches_culprit(self, world: World) -> None:
        result = search_errors(world.db, world.alice_ctx, query="parse_id")

        assert [r["id"] for r in result["results"]] == [world.api_open]

    def test_all_terms_must_match(self, world: World) -> None:
        assert search_errors(world.db, world.alice_ctx, query="TypeError function")["total_count"] == 1
        assert search_errors(world.db, world.alice_ctx, query="TypeError gtag")["total_count"] == 0

    def test_includes_every_status(self, world: World) -> None:
        result = search_errors(world.db, world.alice_ctx, query="TypeError")

        assert {r["status"] for r in result["results"]} == {"open", "resolved"}

    def test_merged_groups_hidden(self, world: World) -> None:
        ids = {r["id"] for r in search_errors(world.db, world.alice_ctx, query="undefined")["results"]}

        assert world.web_merged not in ids

    def test_never_leaks_other_tenant(self, world: World) -> None:
        assert search_errors(world.db, world.alice_ctx, query="secret_token")["total_count"] == 0
        assert search_errors(world.db, world.bob_ctx, query="secret_token")["total_count"] == 1

    def test_project_filter(self, world: World) -> None:
        result = search_errors(world.db, world.bob_ctx, query="invalid", project_id=world.api)

        assert [r["id"] for r in result["results"]] == [world.api_open]

    def test_fts_syntax_is_literal(self, world: World) -> None:
        """Operators and stray quotes never raise a syntax error."""
        assert search_errors(world.db, world.alice_ctx, query='"unbalanced OR NEAR(')["results"] == []
        assert search_errors(world.db, world.alice_ctx, query="x AND")["total_count"] == 0

    def test_trailing_star_matches_prefix(self, world: World) -> None:
        assert [r["id"] for r in search_errors(world.db, world.alice_ctx, query="undef*")["results"]] == [world.web_open]
        assert [r["id"] for r in search_errors(world.db, world.alice_ctx, query="gta*")["results"]] == [world.web_muted]
        assert search_errors(world.db, world.alice_ctx, query="undef")["total_count"] == 0

    def test_bare_star_matches_nothing(self, world: World) -> None:
        assert search_errors(world.db, world.alice_ctx, query="*") == {"total_count": 0, "results": []}

    def test_whitespace_query_matches_nothing(self, world: World) -> None:
        assert search_errors(world.db, world.alice_ctx, query="   ") == {"total_count": 0, "results": []}

    def test_pagination(self, world: World) -> None:
        first = search_errors(world.db, world.alice_ctx, query="TypeError", limit=1)
        second = search_errors(world.db, world.alice_ctx, query="TypeError", limit=1, offset=1)

        assert first["total_count"] == 2
        assert first["results"][0]["id"] == world.web_open
        assert second["results"][0]["id"] == world.web_resolved
