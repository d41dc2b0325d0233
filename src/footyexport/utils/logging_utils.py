"""
Logging setup for FootyExport.

Modules get their logger with `get_logger(__name__)`. The CLI calls
`configure_logging` once at start; library use without it still gets the
package format on the first `get_logger` call.
"""

import logging
from typing import Optional, Union

from footyexport.config import LOG_FORMAT, LOG_LEVEL

PACKAGE_LOGGER = "footyexport"


def configure_logging(
    level: Union[int, str] = LOG_LEVEL,
    fmt: str = LOG_FORMAT,
    force: bool = False,
) -> None:
    """
    Install a stream handler with the package format on the root logger.

    Does nothing when the root logger already has handlers, unless `force`
    is set (e.g. a host application configured logging first).
    """
    logging.basicConfig(level=level, format=fmt, force=force)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Return the logger for `name`, configuring logging on first use.

    Parameters
    ----------
    name : str | None
        Dotted logger name, usually the module's `__name__`. If None, the
        package logger "footyexport" is returned.

    Returns
    -------
    logging.Logger
    """
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name if name is not None else PACKAGE_LOGGER)
