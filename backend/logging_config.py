"""Process-wide logging setup for the API server and CLI scripts."""

import logging

from config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"

# Libraries that log every SQL statement, pool checkout or HTTP request
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "urllib3", "plaid")


def setup_logging(level: str | None = None) -> None:
    """Install the root handler and clamp chatty libraries to WARNING.

    Args:
        level: Root level name. Defaults to ``settings.LOG_LEVEL``.
    """
    logging.basicConfig(
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        level=getattr(logging, (level or settings.LOG_LEVEL).upper()),
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
