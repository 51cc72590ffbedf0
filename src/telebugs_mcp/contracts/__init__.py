"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core or mcp.
Settings classes are NOT re-exported here - import them from
telebugs_mcp.core.config.

Import patterns:
    from telebugs_mcp.contracts import GroupStatus, PrincipalContext, StorageFault
"""

from telebugs_mcp.contracts.enums import GroupStatus, PeriodType, Platform, Severity
from telebugs_mcp.contracts.errors import (
    ErrorResult,
    SchemaCompatibilityError,
    StorageFault,
    Unauthenticated,
    access_denied,
    invalid_state,
    not_found,
)
from telebugs_mcp.contracts.principal import Principal, PrincipalContext

__all__ = [
    "ErrorResult",
    "GroupStatus",
    "PeriodType",
    "Platform",
    "Principal",
    "PrincipalContext",
    "SchemaCompatibilityError",
    "Severity",
    "StorageFault",
    "Unauthenticated",
    "access_denied",
    "invalid_state",
    "not_found",
]
