# src/telebugs_mcp/contracts/principal.py
"""Authenticated caller identity and its project membership."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """A Telebugs user, as read from the users table."""

    id: int
    name: str
    email_address: str
    role: int


@dataclass(frozen=True, slots=True)
class PrincipalContext:
    """A principal plus the projects it may access.

    Built once per credential validation and never mutated afterwards.
    ``project_ids`` is the authoritative membership set: every operation
    narrows its results to it.
    """

    principal: Principal
    project_ids: frozenset[int]

    def can_access(self, project_id: int) -> bool:
        return project_id in self.project_ids
