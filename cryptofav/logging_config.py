"""Process-wide logging setup: JSON lines in production, readable text locally."""

import logging
import sys

from cryptofav.config.settings import Settings

_JSON_FORMAT = '{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format=_JSON_FORMAT if settings.LOG_JSON else _TEXT_FORMAT,
        stream=sys.stdout,
    )
