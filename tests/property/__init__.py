# tests/property/__init__.py
"""Property-based tests for telebugs-mcp.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of. For a multi-tenant server the
key ones are tenant isolation and the group lifecycle state machine.

Test modules:
- test_scope_properties: effective scope never exceeds membership
- test_status_properties: status derivation and mutation transitions
"""
