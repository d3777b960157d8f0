#!/usr/bin/env python3
"""
Academic Search MCP Server - HTTP Mode

Runs the Academic Search MCP server over SSE or streamable HTTP so remote
clients can connect.

Usage:
    # Run with SSE transport (default, more compatible)
    python run_server.py --transport sse --port 8765

    # Run with streamable-http transport
    python run_server.py --transport streamable-http --port 8765

Environment Variables:
    NCBI_EMAIL / NCBI_API_KEY / CROSSREF_EMAIL / SEMANTIC_SCHOLAR_API_KEY
    MCP_PORT: Server port (default: 8765)
    MCP_HOST: Server host (default: 0.0.0.0)
"""

import argparse
import logging
import os

import uvicorn

from academic_search.config import Settings
from academic_search.presentation.mcp_server.server import create_server

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Run Academic Search MCP Server in HTTP mode"
    )
    parser.add_argument(
        "--transport",
        choices=["sse", "streamable-http"],
        default="sse",
        help="Transport protocol (default: sse)"
    )
    parser.add_argument(
        "--host",
        default=os.environ.get("MCP_HOST", "0.0.0.0"),
        help="Server host (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("MCP_PORT", "8765")),
        help="Server port (default: 8765)"
    )
    parser.add_argument(
        "--no-security",
        action="store_true",
        default=True,
        help="Disable DNS rebinding protection (default: True for remote access)"
    )

    args = parser.parse_args()
    settings = Settings.from_env()

    logger.info("Creating Academic Search MCP Server...")
    logger.info(f"  NCBI API Key: {'Set' if settings.ncbi_api_key else 'Not set'}")
    logger.info(f"  Transport: {args.transport}")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Port: {args.port}")

    server = create_server(settings, disable_security=args.no_security)

    if args.transport == "sse":
        logger.info("SSE endpoint: /sse")
        app = server.sse_app()
    else:
        logger.info("Streamable HTTP endpoint: /mcp")
        app = server.streamable_http_app()

    logger.info(f"Starting server at http://{args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
