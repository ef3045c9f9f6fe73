"""Entrypoint: python -m support_chat"""
from __future__ import annotations

import logging

import uvicorn

from support_chat.api.middleware.correlation_id import RequestIdLogFilter
from support_chat.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"


def configure_logging() -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIdLogFilter())
    logging.basicConfig(level=settings.LOG_LEVEL, handlers=[handler], force=True)


def main() -> None:
    configure_logging()
    uvicorn.run(
        "support_chat.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level=settings.LOG_LEVEL.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
