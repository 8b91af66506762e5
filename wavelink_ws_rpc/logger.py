"""
Logging switch for the client.

Every module asks ``get_logger()`` for its logger, so the whole package can be
silenced, pointed at stderr or routed through loguru from one place. The mode
is read from ``WAVELINK_RPC_LOGGING`` the first time a logger is requested,
unless ``logging_config.set_mode()`` was called before.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from logging.config import dictConfig
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger  # type: ignore[import-not-found]

MODE_ENV_VAR = "WAVELINK_RPC_LOGGING"
LEVEL_ENV_VAR = "WAVELINK_RPC_LOG_LEVEL"
ROOT_LOGGER = "wavelink_ws_rpc"


class LoggingModes(Enum):
    # stay silent, even on errors
    NO_LOGS = 0
    # own stderr handler on the package root logger
    CONSOLE = 1
    # plain logging calls; the application configures handlers
    SIMPLE = 2
    # hand every call to loguru
    LOGURU = 3


def _level_from_env(default: int) -> int:
    value = os.environ.get(LEVEL_ENV_VAR, "").strip()
    if not value:
        return default
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else default


class LoggingConfig:
    FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    DATE_FORMAT = "%H:%M:%S"

    def __init__(self) -> None:
        self._mode: LoggingModes | None = None
        self._level = logging.INFO

    @property
    def level(self) -> int:
        return self._level

    def _root_config(self, root: dict[str, Any]) -> dict[str, Any]:
        return {
            "version": 1,
            # Application loggers configured before us are left alone
            "disable_existing_loggers": False,
            "formatters": {
                "wavelink": {"format": self.FORMAT, "datefmt": self.DATE_FORMAT},
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "wavelink",
                    "stream": "ext://sys.stderr",
                },
            },
            "loggers": {ROOT_LOGGER: root},
        }

    def get_mode(self) -> LoggingModes:
        if self._mode is None:
            name = os.environ.get(MODE_ENV_VAR, "").strip().upper()
            self.set_mode(
                LoggingModes.__members__.get(name, LoggingModes.SIMPLE),
                _level_from_env(logging.INFO),
            )
        if self._mode is None:
            raise RuntimeError("Logging mode must be set by set_mode() method")
        return self._mode

    def set_mode(
        self, mode: LoggingModes = LoggingModes.CONSOLE, level: int = logging.INFO
    ) -> None:
        """
        Select how the package logs. Call before creating a client.

        CONSOLE and NO_LOGS install a ``dictConfig`` for the "wavelink_ws_rpc"
        logger only; SIMPLE and LOGURU leave the logging tree untouched. For
        anything fancier configure the "wavelink_ws_rpc" logger directly.

        Args:
            mode (LoggingModes, optional): Defaults to LoggingModes.CONSOLE.
            level (int, optional): Level for the CONSOLE handler. Defaults to
                logging.INFO.
        """
        self._mode = mode
        self._level = level
        if mode == LoggingModes.CONSOLE:
            dictConfig(
                self._root_config(
                    {"handlers": ["stderr"], "propagate": False, "level": level}
                )
            )
        elif mode == LoggingModes.NO_LOGS:
            dictConfig(
                self._root_config(
                    {"handlers": [], "propagate": False, "level": logging.CRITICAL + 1}
                )
            )


# Process-wide switch shared by every module
logging_config = LoggingConfig()


def get_logger(name: str) -> logging.Logger | LoguruLogger:
    """
    Return the logger a module should use.

    Module paths (``__name__``) are used as is; short channel names such as
    ``"RPC_CHANNEL"`` are nested under "wavelink_ws_rpc".
    """
    if logging_config.get_mode() == LoggingModes.LOGURU:
        from loguru import logger

        return logger.bind(channel=name)
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
