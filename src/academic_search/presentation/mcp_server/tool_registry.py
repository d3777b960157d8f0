"""
Tool Registry - Central catalogue of MCP tools.

Usage:
    from .tool_registry import register_all_mcp_tools, list_registered_tools

    register_all_mcp_tools(mcp, service)
    tools = list_registered_tools()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from academic_search.application.search import AcademicSearchService

logger = logging.getLogger(__name__)


# ============================================================================
# Tool Categories
# ============================================================================

TOOL_CATEGORIES = {
    "search": {
        "name": "Search",
        "description": "Federated search entry point",
        "tools": ["search_academic_sources"],
    },
    "fulltext": {
        "name": "Full text",
        "description": "Full-text availability",
        "tools": ["check_full_text_availability"],
    },
    "operations": {
        "name": "Operations",
        "description": "Status and provider connectivity",
        "tools": ["academic_search_status", "test_provider_connections"],
    },
}


# ============================================================================
# Registration Functions
# ============================================================================


def register_all_mcp_tools(mcp: FastMCP, service: AcademicSearchService) -> dict[str, int]:
    """
    Register all MCP tools.

    Args:
        mcp: FastMCP server instance
        service: AcademicSearchService instance

    Returns:
        Dict with category names and tool counts
    """
    from .tools import register_all_tools

    logger.info("Registering academic search tools...")
    register_all_tools(mcp, service)

    stats = {cat_id: len(cat_info["tools"]) for cat_id, cat_info in TOOL_CATEGORIES.items()}
    logger.info(f"Total registered: {sum(stats.values())} tools")
    return stats


def list_registered_tools() -> dict[str, list[str]]:
    """List all defined tools grouped by category."""
    return {cat_id: cat_info["tools"] for cat_id, cat_info in TOOL_CATEGORIES.items()}


# ============================================================================
# Validation Functions
# ============================================================================


def validate_tool_registry(mcp: FastMCP) -> dict[str, object]:
    """
    Check that TOOL_CATEGORIES and the tools actually registered agree.

    Returns:
        Dict with defined / registered / missing / extra tool names and
        ``valid`` (True if fully synchronized)
    """
    defined_tools = {tool for cat_info in TOOL_CATEGORIES.values() for tool in cat_info["tools"]}

    try:
        registered_tools = set(mcp._tool_manager._tools.keys())
    except AttributeError:
        logger.warning("Cannot access registered tools from FastMCP instance")
        return {
            "defined": sorted(defined_tools),
            "registered": [],
            "missing": [],
            "extra": [],
            "valid": False,
        }

    missing = defined_tools - registered_tools
    extra = registered_tools - defined_tools
    if missing:
        logger.warning(f"Tools defined but not registered: {missing}")
    if extra:
        logger.info(f"Tools registered but not in TOOL_CATEGORIES: {extra}")

    return {
        "defined": sorted(defined_tools),
        "registered": sorted(registered_tools),
        "missing": sorted(missing),
        "extra": sorted(extra),
        "valid": not missing and not extra,
    }


__all__ = [
    "TOOL_CATEGORIES",
    "list_registered_tools",
    "register_all_mcp_tools",
    "validate_tool_registry",
]
