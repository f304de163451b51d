"""Entrypoint: python -m telemed_realtime"""
from __future__ import annotations

import uvicorn

from telemed_realtime.config import settings
from telemed_realtime.logging_config import configure_logging


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "telemed_realtime.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL,
        log_config=None,
    )


if __name__ == "__main__":
    main()
