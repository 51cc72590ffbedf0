# src/telebugs_mcp/core/tracker/scope.py
"""Project scope evaluation.

Membership is authoritative, the caller's project filter is advisory: a
filter naming a project the caller is not a member of silently degrades to
"no filter". Operations that require an unambiguous project (releases) or a
specific entity (ownership checks) do not use this fallback; they test
membership directly with ``PrincipalContext.can_access``.
"""

from collections.abc import Set


def effective_scope(member_project_ids: Set[int], requested_project_id: int | None = None) -> frozenset[int]:
    """Compute the set of project ids a request may read.

    Args:
        member_project_ids: Every project the principal belongs to
        requested_project_id: Optional project filter supplied by the caller

    Returns:
        ``{requested_project_id}`` when it is a member, otherwise the full
        membership set. May be empty.
    """
    if requested_project_id is not None and requested_project_id in member_project_ids:
        return frozenset((requested_project_id,))
    return frozenset(member_project_ids)
