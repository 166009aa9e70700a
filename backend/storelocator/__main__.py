"""Run the store locator server: ``python -m storelocator``."""
from __future__ import annotations

import logging

import uvicorn

from storelocator.config import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info(
        "Server listening on http://localhost:%d", settings.port
    )
    uvicorn.run(
        "storelocator.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
