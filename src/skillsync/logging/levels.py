"""
HUMAN log level (25) for the status lines of init and sync.

It sits between INFO and WARNING but carries no severity: records at this
level are what the user reads (checking updates, fetched skills, written
tools). Everything else is technical logging.

Importing this module registers the level with stdlib logging and
structlog, and gives stdlib loggers a .human() method so structlog's
BoundLogger.log(HUMAN, ...) can proxy to it.
"""

import logging

import structlog

HUMAN = 25


def _log_human(self: logging.Logger, message, *args, **kwargs) -> None:
    if self.isEnabledFor(HUMAN):
        self._log(HUMAN, message, args, **kwargs)


logging.addLevelName(HUMAN, "HUMAN")
logging.Logger.human = _log_human

# structlog maps numeric levels to method names through these tables
structlog.stdlib.LEVEL_TO_NAME[HUMAN] = "human"
structlog.stdlib.NAME_TO_LEVEL["human"] = HUMAN
