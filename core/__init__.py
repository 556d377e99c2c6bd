"""Core package for the projects MCP server.

This package houses the primary components:
- server: JSON-RPC dispatcher owning the registries and the opener
- projects: in-memory project registry (list/read/create)
- opener: platform reveal command for project directories
- registry: tool registration and schema store
- errors: request-level error taxonomy with JSON-RPC codes
"""
