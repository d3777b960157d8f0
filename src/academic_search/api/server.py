"""
HTTP API Server for federated academic search.

Exposes the search service over HTTP for clients that do not speak MCP.

Routes:
    GET  /health
    GET  /api/academic/search
    GET  /api/academic/test-connections
    GET  /api/academic/status
    POST /api/academic/full-text-availability
    GET  /api/academic/{provider}          single-provider search
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from academic_search.core.exceptions import ValidationError
from academic_search.domain.entities import Provider

logger = logging.getLogger(__name__)

DEFAULT_API_PORT = 8765


# Pydantic models for API requests / responses
class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    providers: List[str]
    cache_size: int


class SearchResultsResponse(BaseModel):
    """Federated search response."""
    success: bool = True
    query: str
    total_results: int
    results: List[Dict[str, Any]]
    diagnostics: Dict[str, str]
    errors: Dict[str, Dict[str, Any]]
    from_cache: bool
    timestamp: str


class FullTextRequest(BaseModel):
    """Papers to check for full-text availability."""
    papers: List[Dict[str, Any]]


class FullTextResponse(BaseModel):
    success: bool = True
    total_papers: int
    availability: List[Dict[str, Any]]


class ConnectionsResponse(BaseModel):
    success: bool = True
    connections: Dict[str, bool]
    timestamp: str


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str
    category: Optional[str] = None
    suggestion: Optional[str] = None


def _split_providers(providers: Optional[str]) -> Optional[List[str]]:
    if providers is None:
        return None
    return [name.strip() for name in providers.split(",") if name.strip()]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_api_server(service: Any = None) -> FastAPI:
    """
    Create the FastAPI server.

    Args:
        service: AcademicSearchService to serve. If None, one is built from
                 the environment on startup and closed on shutdown.

    Returns:
        Configured FastAPI instance.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = False
        if getattr(app.state, "service", None) is None:
            from academic_search.container import create_service

            app.state.service = create_service()
            owned = True
        logger.info("HTTP API server initialized")

        yield

        logger.info("HTTP API server shutting down")
        if owned:
            await app.state.service.close()

    app = FastAPI(
        title="Academic Search API",
        description="Federated search over PubMed, arXiv, CrossRef and Semantic Scholar.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request parameters", "category": "validation", "details": exc.errors()},
        )

    def get_service(request: Request):
        return request.app.state.service

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Health check endpoint."""
        service = get_service(request)
        return HealthResponse(
            status="healthy",
            providers=[provider.value for provider in service.providers],
            cache_size=len(service.cache),
        )

    async def _search(
        request: Request,
        query: Optional[str],
        providers: Optional[List[str]],
        max_results: int,
        year_from: Optional[int],
        year_to: Optional[int],
        source_type: str,
        sort_by: str,
        include_abstracts: bool,
    ) -> SearchResultsResponse:
        response = await get_service(request).search(
            query or "",
            providers=providers,
            max_results=max_results,
            year_from=year_from,
            year_to=year_to,
            source_type=source_type,
            sort_by=sort_by,
            include_abstracts=include_abstracts,
        )
        data = response.to_dict()
        return SearchResultsResponse(
            query=query or "",
            total_results=len(data["results"]),
            timestamp=_now(),
            **data,
        )

    @app.get(
        "/api/academic/search",
        response_model=SearchResultsResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid search parameters"}},
    )
    async def search_academic_sources(
        request: Request,
        query: Optional[str] = Query(None, description="Free-text search query"),
        providers: Optional[str] = Query(None, description="Comma-separated provider subset"),
        max_results: int = Query(20),
        year_from: Optional[int] = Query(None),
        year_to: Optional[int] = Query(None),
        source_type: str = Query("all"),
        sort_by: str = Query("relevance"),
        include_abstracts: bool = Query(True),
    ):
        """Search all (or the selected) providers concurrently."""
        return await _search(
            request,
            query,
            _split_providers(providers),
            max_results,
            year_from,
            year_to,
            source_type,
            sort_by,
            include_abstracts,
        )

    @app.post(
        "/api/academic/full-text-availability",
        response_model=FullTextResponse,
        responses={400: {"model": ErrorResponse}},
    )
    async def full_text_availability(request: Request, body: FullTextRequest):
        """Annotate papers with their full-text sources."""
        availability = get_service(request).full_text_availability(body.papers)
        return FullTextResponse(total_papers=len(body.papers), availability=availability)

    @app.get("/api/academic/test-connections", response_model=ConnectionsResponse)
    async def test_connections(request: Request):
        """Probe every provider with a one-result query."""
        connections = await get_service(request).check_connections()
        return ConnectionsResponse(connections=connections, timestamp=_now())

    @app.get("/api/academic/status")
    async def academic_status(request: Request) -> Dict[str, Any]:
        """Service status: providers, cache and rate limits."""
        return {"success": True, "status": get_service(request).status(), "timestamp": _now()}

    @app.get(
        "/api/academic/{provider}",
        response_model=SearchResultsResponse,
        responses={400: {"model": ErrorResponse, "description": "Unknown provider or invalid parameters"}},
    )
    async def search_single_provider(
        request: Request,
        provider: str,
        query: Optional[str] = Query(None),
        max_results: int = Query(10),
        year_from: Optional[int] = Query(None),
        year_to: Optional[int] = Query(None),
        include_abstracts: bool = Query(True),
    ):
        """Search one provider (pubmed, arxiv, crossref, semantic-scholar)."""
        return await _search(
            request,
            query,
            [Provider.parse(provider).value],
            max_results,
            year_from,
            year_to,
            "all",
            "relevance",
            include_abstracts,
        )

    return app


def main():
    """Run the HTTP API with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    port = int(os.environ.get("ACADEMIC_SEARCH_API_PORT", DEFAULT_API_PORT))
    uvicorn.run(create_api_server(), host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
