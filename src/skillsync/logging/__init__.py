"""
Logging module - Structured logging system with a HUMAN status level.
"""

from .human import HumanFormatter, HumanLog, HumanLogHandler
from .levels import HUMAN
from .setup import configure_logging

__all__ = [
    "configure_logging",
    "HUMAN",
    "HumanFormatter",
    "HumanLog",
    "HumanLogHandler",
]
