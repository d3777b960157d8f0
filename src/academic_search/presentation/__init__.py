"""
Presentation Layer - MCP server surface.
"""
