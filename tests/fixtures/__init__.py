# tests/fixtures/__init__.py
"""Shared pytest fixtures for telebugs-mcp tests.

Available fixtures:
- tracker_db: fresh in-memory TrackerDB
- seed: TrackerSeed row factory bound to tracker_db
- world: two-tenant World dataset bound to tracker_db
"""

from tests.fixtures.tracker import TrackerSeed, World, build_world, make_tracker_db, seed, tracker_db, world

__all__ = [
    "TrackerSeed",
    "World",
    "build_world",
    "make_tracker_db",
    "seed",
    "tracker_db",
    "world",
]
