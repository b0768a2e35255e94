# subsapi/main.py
from __future__ import annotations

import logging

import uvicorn

from subsapi.config import settings
from subsapi.core.logging import setup_logging, attach_ctx_filter

logger = logging.getLogger("subsapi.main")


def main() -> None:
    setup_logging()
    attach_ctx_filter()
    logger.info(
        "boot: starting with LOG_LEVEL=%s SQL_ECHO=%s env=%s",
        settings.log_level,
        settings.SQL_ECHO,
        settings.ENVIRONMENT,
    )
    uvicorn.run(
        "subsapi.web.server:app",
        host=settings.WEBAPP_HOST,
        port=settings.WEBAPP_PORT,
        log_config=None,  # keep our dictConfig
        access_log=True,
    )


if __name__ == "__main__":
    main()
