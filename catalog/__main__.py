"""
Catalog Backend: Server Entry Point
====================================

What:  `python -m catalog` / `catalog-api` starts uvicorn on
       BACKEND_HOST:BACKEND_PORT (default 0.0.0.0:3000).
When:  A failure while starting (port in use, bad configuration) is logged
       and the process exits with status 1.
"""

import logging
import sys

import uvicorn

from catalog.config import settings

logger = logging.getLogger("catalog")


def main() -> None:
    try:
        uvicorn.run(
            "catalog.main:app",
            host=settings.backend_host,
            port=settings.backend_port,
            log_level=settings.log_level.lower(),
        )
    except Exception as e:
        logger.critical("Server failed to start: %s", str(e), exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
