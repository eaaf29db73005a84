"""
Main application entry point.
Configures logging and serves the FastAPI app with uvicorn.
"""
import logging
import sys

import uvicorn

from setlone.api.app import create_app
from setlone.config.settings import settings

# Configure logging for stdout/stderr collectors
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True,
)

logger = logging.getLogger(__name__)


def main():
    """Run the application."""
    logger.info(
        "Configuration loaded",
        extra={
            "host": settings.host,
            "port": settings.port,
            "log_level": settings.log_level,
            "environment": settings.environment,
            "db_pool_size": settings.db_pool_size,
            "request_timeout_seconds": settings.request_timeout_seconds,
        },
    )

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        lifespan="on",
        access_log=True,
    )


if __name__ == "__main__":
    main()
