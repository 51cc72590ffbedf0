"""Telebugs MCP: authorization-scoped MCP tools over a Telebugs error-tracking database."""

__version__ = "1.0.0"
