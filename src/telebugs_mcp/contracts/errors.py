# src/telebugs_mcp/contracts/errors.py
"""Exceptions and recoverable error results.

Two classes of failure exist and they never mix:

- Business-rule failures (not found, access denied, invalid state) are
  returned as ``{"error": "..."}`` dicts built by the helpers below. They
  are never raised across an operation boundary.
- Infrastructure failures (``StorageFault``, ``Unauthenticated``) are
  raised and propagate to the transport, which reports them as protocol
  errors rather than tool results.
"""

from typing import TypedDict


class ErrorResult(TypedDict):
    """Recoverable business-rule failure returned by a tool."""

    error: str


class StorageFault(Exception):
    """Raised when the storage engine cannot execute a query or transaction.

    Wraps the underlying SQLAlchemy error (available as ``__cause__``).
    Callers must not inspect the message for business meaning.
    """

    pass


class Unauthenticated(Exception):
    """Raised when a request carries no valid credential or session."""

    pass


class SchemaCompatibilityError(Exception):
    """Raised when the tracker database lacks tables this server reads."""

    pass


def not_found(entity: str) -> ErrorResult:
    return {"error": f"{entity} not found"}


def access_denied(entity: str) -> ErrorResult:
    return {"error": f"Access denied to this {entity}"}


def invalid_state(message: str) -> ErrorResult:
    return {"error": message}
