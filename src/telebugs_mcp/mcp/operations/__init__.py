# src/telebugs_mcp/mcp/operations/__init__.py
"""Tool operations split by entity.

Every function takes ``(db, ctx, ...)``: the tracker database and the
calling principal's context. Each returns a JSON-serializable dict: the
entity result on success or ``{"error": ...}`` for a business-rule failure.
StorageFault propagates.
"""
