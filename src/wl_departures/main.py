"""Main entry point for the edge CORS proxy server."""

import asyncio
import logging
import sys

import uvicorn

from wl_departures.adapters.config import AppConfig
from wl_departures.adapters.web import create_proxy_app

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)


async def main() -> None:
    """Start the proxy server."""
    config = AppConfig()
    try:
        config.load_toml_overrides()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    app = create_proxy_app(config)
    logger.info(f"Starting CORS proxy on {config.host}:{config.port}")

    server = uvicorn.Server(
        uvicorn.Config(app, host=config.host, port=config.port, log_level="info")
    )
    try:
        await server.serve()
    except KeyboardInterrupt:
        logger.info("Shutting down...")


def run() -> None:
    """Synchronous entry point for the proxy command."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
