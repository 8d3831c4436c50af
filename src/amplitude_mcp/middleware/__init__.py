"""Middleware components for the Amplitude MCP server."""

from amplitude_mcp.middleware.audit import (
    AuditConfig,
    AuditMiddleware,
    create_audit_middleware,
)

__all__ = ["AuditConfig", "AuditMiddleware", "create_audit_middleware"]
