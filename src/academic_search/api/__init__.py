"""
HTTP API for federated academic search.

REST endpoints over the same AcademicSearchService the MCP tools use.
"""

from .server import create_api_server, main

__all__ = ["create_api_server", "main"]
