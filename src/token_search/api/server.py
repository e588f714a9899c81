"""
HTTP API Server for token search.

Endpoints:
- GET /search?q=&chains=   ranked cross-chain token search
- GET /health              adapter capabilities and defaults
"""

import logging
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from token_search import __version__
from token_search.container import ApplicationContainer
from token_search.core.exceptions import TokenSearchError, ValidationError
from token_search.models.chains import parse_chain_param

logger = logging.getLogger(__name__)

DEFAULT_API_PORT = 8780


# Pydantic models for API responses
class TokenResponse(BaseModel):
    """One ranked token."""
    chainId: str
    address: str
    symbol: str
    name: str
    decimals: Optional[int] = None
    logoUrl: Optional[str] = None
    liquidityUsd: Optional[float] = None
    priceUsd: Optional[float] = None
    priceChange24h: Optional[float] = None
    volume24hUsd: Optional[float] = None
    marketCapUsd: Optional[float] = None
    pairAddress: Optional[str] = None
    dex: Optional[str] = None
    sources: List[str]
    matchTier: Optional[str] = None


class SourceReport(BaseModel):
    """Outcome of one adapter."""
    status: str
    chains: Dict[str, str]
    resultCount: int
    elapsedMs: float
    error: Optional[str] = None


class SearchResponse(BaseModel):
    """Search response model."""
    success: bool = True
    data: List[TokenResponse]
    query: str
    chains: List[str]
    resultsCount: int
    sources: Dict[str, SourceReport]
    allSourcesFailed: bool = False


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str
    message: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    adapters: Dict[str, List[str]]
    disabled: Dict[str, str]
    defaultChains: List[str]


def create_app(container: Optional[ApplicationContainer] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        container: DI container; a fresh one (settings from environment)
                   is created when omitted. Tests pass a container with
                   overridden providers.

    Returns:
        Configured FastAPI instance.
    """
    container = container or ApplicationContainer()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = container.settings()
        logger.info(f"Token search API starting: {settings.summary()}")
        yield
        logger.info("Token search API shutting down")
        await container.registry().close()

    app = FastAPI(
        title="Token Search API",
        description="Cross-chain token search aggregated from token lists and DEX data providers.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get(
        "/search",
        response_model=SearchResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Missing or too short query"},
            500: {"model": ErrorResponse, "description": "Internal server error"},
        },
    )
    async def search(
        q: Optional[str] = Query(default=None, description="Symbol, name or contract address"),
        chains: Optional[str] = Query(default=None, description="Comma-separated chain ids"),
    ):
        """
        Search tokens across chains.

        Returns matches from every reachable source, merged and ranked.
        Sources that failed are listed under ``sources`` with their status.
        """
        try:
            outcome = await container.search_service().search(q, parse_chain_param(chains))
            return SearchResponse(**outcome.to_dict())
        except ValidationError as e:
            logger.info(f"Rejected search q={q!r}: {e}")
            return JSONResponse(status_code=400, content={"error": str(e)})
        except TokenSearchError as e:
            logger.error(f"Search failed for q={q!r}: {e.to_dict()}")
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "message": str(e)},
            )
        except Exception:
            logger.exception(f"Search failed for q={q!r}")
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "message": "Unknown error"},
            )

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        registry = container.registry()
        return HealthResponse(
            status="healthy" if len(registry) else "degraded",
            version=__version__,
            adapters=registry.capabilities(),
            disabled=registry.disabled,
            defaultChains=list(container.settings().default_chains),
        )

    return app


def run_api_server(
    host: str = "127.0.0.1",
    port: int = DEFAULT_API_PORT,
    container: Optional[ApplicationContainer] = None,
    log_level: str = "info",
) -> None:
    """
    Run the HTTP API server.

    Args:
        host: Host to bind to (default: 127.0.0.1 for local only)
        port: Port to bind to
        container: Optional pre-configured container
        log_level: uvicorn log level
    """
    import uvicorn

    app = create_app(container)
    logger.info(f"Starting HTTP API server on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=log_level)


__all__ = ["create_app", "run_api_server", "SearchResponse", "HealthResponse"]
