"""Process-wide logging setup."""

import logging

from core.settings import Settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_handler = None


def configure_logging(settings: Settings) -> None:
    global _handler
    root = logging.getLogger()
    root.setLevel(settings.log_level)
    # create_app() may run more than once per process (tests, reload)
    if _handler is not None:
        return
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(_handler)
