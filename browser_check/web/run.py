"""
Run script for the status server.
"""

import uvicorn
from loguru import logger

from ..config import load_config, redact_endpoint
from ..utils.log_setup import setup_logging
from .app import create_app


def main() -> None:
    config = load_config()
    setup_logging(config.log_level, config.log_file)

    logger.info("=" * 60)
    logger.info("Starting Browser Test Service")
    logger.info("=" * 60)
    logger.info(f"Server will be available at http://{config.host}:{config.port}")
    logger.info(f"Browser endpoint: {redact_endpoint(config.ws_endpoint) or 'NOT SET'}")
    logger.info("Press CTRL+C to stop the server")

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower()
    )


if __name__ == "__main__":
    main()
