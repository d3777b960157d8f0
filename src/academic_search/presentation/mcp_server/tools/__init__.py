"""
Academic Search MCP Tools

- search_academic_sources: main entry, concurrent multi-provider search
- check_full_text_availability: full-text locations for found papers
- academic_search_status: providers, cache and rate-limit state
- test_provider_connections: connectivity probe per provider

Usage:
    from .tools import register_all_tools
    register_all_tools(mcp, service)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .academic import register_academic_tools

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from academic_search.application.search import AcademicSearchService


def register_all_tools(mcp: FastMCP, service: AcademicSearchService):
    """Register all academic search tools with the MCP server."""
    register_academic_tools(mcp, service)


__all__ = ["register_academic_tools", "register_all_tools"]
