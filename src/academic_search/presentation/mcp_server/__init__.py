"""
Academic Search MCP Server

Model Context Protocol server for federated academic search
(PubMed, arXiv, CrossRef, Semantic Scholar).

Usage as standalone server:
    python -m academic_search.presentation.mcp_server

Or in mcp.json:
    {
        "servers": {
            "academic-search": {
                "type": "stdio",
                "command": "python",
                "args": ["-m", "academic_search.presentation.mcp_server"]
            }
        }
    }

Usage for integration:
    from academic_search.container import create_service
    from academic_search.presentation.mcp_server import register_all_tools

    register_all_tools(your_mcp_server, create_service())
"""

from __future__ import annotations

from .server import create_server, main
from .tools import register_all_tools

__all__ = ["create_server", "main", "register_all_tools"]
