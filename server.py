"""
KPI Pulse API Server - Main entry point for the FastAPI application.
"""

import logging

from app.core.config import get_settings

logger = logging.getLogger(__name__)


def main():
    """Run the API server."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    logger.info("Starting %s v%s on http://%s:%d", settings.app_name, settings.app_version,
                settings.host, settings.port)
    logger.info("API documentation available at http://%s:%d/docs", settings.host, settings.port)

    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
