# tests/unit/mcp/operations/test_releases.py
"""Tests for releases, release artifacts and source map status."""

import pytest

from telebugs_mcp.mcp.operations.releases import get_sourcemap_status, list_release_artifacts, list_releases
from tests.fixtures.tracker import World

DEBUG_ID = "c941e6f2-6a5c-4f3b-9b43-4c3e5f0d8a11"


@pytest.fixture
def releases(world: World) -> dict[str, int]:
    seed = world.seed
    old = seed.release(world.web, "web@2.4.0", created_at="2024-03-01 00:00:00.000000")
    new = seed.release(world.web, "web@2.4.1", created_at="2024-03-09 00:00:00.000000")
    hidden = seed.release(world.secret, "secret@1.0.0")
    seed.artifact(old, "app.js.map", debug_id=DEBUG_ID, created_at="2024-03-01 00:00:01.000000")
    seed.artifact(new, "app.js", created_at="2024-03-09 00:00:01.000000", byte_size=2048, content_type="application/javascript")
    seed.artifact(new, "app.js.map", debug_id=DEBUG_ID, created_at="2024-03-09 00:00:02.000000", byte_size=8192)
    seed.artifact(hidden, "secret.js.map", debug_id="secret-debug-id")
    return {"old": old, "new": new, "hidden": hidden}


class TestListReleases:
    def test_newest_first_with_artifact_counts(self, world: World, releases: dict[str, int]) -> None:
        result = list_releases(world.db, world.alice_ctx, project_id=world.web)

        assert result == {
            "total_count": 2,
            "releases": [
                {
                    "id": releases["new"],
                    "project_id": world.web,
                    "project_name": "Web",
                    "version": "web@2.4.1",
                    "artifacts_count": 2,
                    "created_at": "2024-03-09 00:00:00.000000",
                },
                {
                    "id": releases["old"],
                    "project_id": world.web,
                    "project_name": "Web",
                    "version": "web@2.4.0",
                    "artifacts_count": 1,
                    "created_at": "2024-03-01 00:00:00.000000",
                },
            ],
        }

    def test_non_member_project_fails_hard(self, world: World, releases: dict[str, int]) -> None:
        """No fallback to the membership set here."""
        assert list_releases(world.db, world.alice_ctx, project_id=world.secret) == {"error": "Access denied to this project"}

    def test_unknown_project_is_denied(self, world: World) -> None:
        assert list_releases(world.db, world.alice_ctx, project_id=9999) == {"error": "Access denied to this project"}

    def test_pagination(self, world: World, releases: dict[str, int]) -> None:
        result = list_releases(world.db, world.alice_ctx, project_id=world.web, limit=1, offset=1)

        assert result["total_count"] == 2  # type: ignore[typeddict-item]
        assert [r["version"] for r in result["releases"]] == ["web@2.4.0"]  # type: ignore[typeddict-item]


class TestListReleaseArtifacts:
    def test_artifacts_with_blob_metadata(self, world: World, releases: dict[str, int]) -> None:
        result = list_release_artifacts(world.db, world.alice_ctx, release_id=releases["new"])

        assert result["total_count"] == 2  # type: ignore[typeddict-item]
        newest, oldest = result["artifacts"]  # type: ignore[typeddict-item]
        assert newest["name"] == "app.js.map"
        assert newest["debug_id"] == DEBUG_ID
        assert newest["byte_size"] == 8192
        assert newest["content_type"] is None
        assert oldest["byte_size"] == 2048
        assert oldest["content_type"] == "application/javascript"

    def test_artifact_without_upload(self, world: World, releases: dict[str, int]) -> None:
        (artifact,) = list_release_artifacts(world.db, world.alice_ctx, release_id=releases["old"])["artifacts"]  # type: ignore[typeddict-item]

        assert artifact["byte_size"] is None
        assert artifact["content_type"] is None

    def test_not_found(self, world: World) -> None:
        assert list_release_artifacts(world.db, world.alice_ctx, release_id=9999) == {"error": "Release not found"}

    def test_access_denied(self, world: World, releases: dict[str, int]) -> None:
        result = list_release_artifacts(world.db, world.alice_ctx, release_id=releases["hidden"])

        assert result == {"error": "Access denied to this release"}


class TestGetSourcemapStatus:
    def test_most_recent_upload_wins(self, world: World, releases: dict[str, int]) -> None:
        result = get_sourcemap_status(world.db, world.alice_ctx, debug_id=DEBUG_ID)

        assert result["found"] is True
        assert result["artifact"] is not None
        assert result["artifact"]["release_version"] == "web@2.4.1"
        assert result["artifact"]["release_id"] == releases["new"]
        assert result["artifact"]["project_name"] == "Web"
        assert result["artifact"]["name"] == "app.js.map"

    def test_not_uploaded(self, world: World, releases: dict[str, int]) -> None:
        assert get_sourcemap_status(world.db, world.alice_ctx, debug_id="missing") == {"found": False, "artifact": None}

    def test_other_tenant_debug_id_not_found(self, world: World, releases: dict[str, int]) -> None:
        assert get_sourcemap_status(world.db, world.alice_ctx, debug_id="secret-debug-id")["found"] is False
        assert get_sourcemap_status(world.db, world.bob_ctx, debug_id="secret-debug-id")["found"] is True

    def test_project_filter(self, world: World, releases: dict[str, int]) -> None:
        assert get_sourcemap_status(world.db, world.alice_ctx, debug_id=DEBUG_ID, project_id=world.api)["found"] is False
