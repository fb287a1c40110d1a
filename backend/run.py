#!/usr/bin/env python3
"""
AI Desk backend launcher.
Serves the session/credential API on the loopback interface for the desktop shell.
"""

import logging

import uvicorn

from aidesk.core.config import settings


def configure_logging():
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )


def main():
    configure_logging()
    uvicorn.run(
        "aidesk.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
