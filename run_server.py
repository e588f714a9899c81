#!/usr/bin/env python3
"""
Token Search API Server

Runs the HTTP search API with uvicorn.

Usage:
    # Defaults (127.0.0.1:8780, chains ethereum,bsc,polygon)
    python run_server.py

    # Listen on all interfaces
    python run_server.py --host 0.0.0.0 --port 8780

    # Only query DexScreener and GeckoTerminal, GeckoTerminal first
    TOKEN_SEARCH_ADAPTERS=geckoterminal,dexscreener python run_server.py

Environment Variables:
    TOKEN_SEARCH_HOST: Server host (default: 127.0.0.1)
    TOKEN_SEARCH_PORT: Server port (default: 8780)
    TOKEN_SEARCH_LOG_LEVEL: Logging level (default: INFO)
    TOKEN_SEARCH_*: Search settings, see token_search.config
    COINGECKO_API_KEY: Optional CoinGecko Pro key for GeckoTerminal
"""

import argparse
import logging
import os
import sys

# Add src to path for development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from token_search.api.server import DEFAULT_API_PORT, run_api_server
from token_search.container import ApplicationContainer
from token_search.core.exceptions import ConfigurationError

# Configure logging
logging.basicConfig(
    level=os.environ.get("TOKEN_SEARCH_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Run the Token Search HTTP API"
    )
    parser.add_argument(
        "--host",
        default=os.environ.get("TOKEN_SEARCH_HOST", "127.0.0.1"),
        help="Server host (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("TOKEN_SEARCH_PORT", str(DEFAULT_API_PORT))),
        help=f"Server port (default: {DEFAULT_API_PORT})"
    )

    args = parser.parse_args()

    container = ApplicationContainer()
    try:
        settings = container.settings()
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)

    registry = container.registry()
    logger.info("Creating Token Search API...")
    logger.info(f"  Default chains: {', '.join(settings.default_chains)}")
    logger.info(f"  Adapters: {', '.join(registry.names) or 'none'}")
    for name, reason in registry.disabled.items():
        logger.info(f"  Disabled: {name} ({reason})")
    logger.info(f"  Deadline: {settings.global_deadline}s (per adapter {settings.adapter_timeout}s)")

    logger.info(f"Starting server at http://{args.host}:{args.port}")
    logger.info("Search endpoint: /search?q=&chains=")
    run_api_server(
        host=args.host,
        port=args.port,
        container=container,
        log_level=logging.getLevelName(logger.getEffectiveLevel()).lower(),
    )


if __name__ == "__main__":
    main()
