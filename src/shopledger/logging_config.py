"""Process-wide logging setup for shopledger.

Library modules only call ``logging.getLogger(__name__)``; entry points
call ``configure_logging`` once to attach a console handler.
"""

import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER: logging.Handler | None = None


def configure_logging(level: int | str = logging.WARNING) -> logging.Logger:
    """Attach a stream handler to the ``shopledger`` logger and set its level.

    Calling it again only changes the level; no duplicate handlers are added.
    """
    global _HANDLER

    if isinstance(level, str):
        name = level
        level = logging.getLevelName(name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level '{name}'")

    logger = logging.getLogger("shopledger")
    if _HANDLER is None:
        _HANDLER = logging.StreamHandler()
        _HANDLER.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(_HANDLER)
    logger.setLevel(level)
    return logger
