"""
Rufheld Review API - Web Server Entry Point
===========================================

Run this to start the API server:
    python main.py

Requires WEXTRACTOR_API_KEY (environment or .env file).
Then open http://127.0.0.1:3000/api/health in your browser.
"""

import logging
import sys

import uvicorn

from rufheld.infrastructure.config import ConfigurationError, get_settings

logger = logging.getLogger(__name__)


def main():
    """Start the web server."""
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()

    try:
        settings.require()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    print("\n" + "=" * 50)
    print("   Rufheld Review API")
    print("=" * 50)
    print(f"\n   Starting server on port {settings.port}")
    print("   Press Ctrl+C to stop\n")

    uvicorn.run(
        "rufheld.web.app:app",
        host="0.0.0.0",
        port=settings.port,
        reload=not settings.is_production,
        log_level="info"
    )


if __name__ == "__main__":
    main()
