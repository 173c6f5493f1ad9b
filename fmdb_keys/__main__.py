"""Run the registration server: ``python -m fmdb_keys``."""

import logging

import uvicorn

from fmdb_keys.config.settings import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger("fmdb_keys")
    logger.info("Websocket server running on port %s", settings.port)
    uvicorn.run(
        "fmdb_keys.api.main:app",
        host=settings.host,
        port=settings.port,
        proxy_headers=True,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
