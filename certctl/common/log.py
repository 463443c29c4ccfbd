# certctl/common/log.py
"""
Logging for certctl.

Verbosity is carried by the IssuanceConfig each component receives, not by a
process-wide level. attach_handler() is called once by the CLI so records have
somewhere to go; get_logger() binds a module logger to a config.
"""
import logging
import sys

from certctl.common.config import IssuanceConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
ROOT_LOGGER = "certctl"


def attach_handler(stream=None) -> logging.Logger:
    """Install a single StreamHandler on the certctl logger (idempotent)."""
    logger = logging.getLogger(ROOT_LOGGER)
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(h)
    logger.handlers[0].setStream(stream or sys.stderr)
    logger.propagate = False
    return logger


class RunLogger(logging.LoggerAdapter):
    """LoggerAdapter that decides what to emit from config.log_level."""

    def __init__(self, logger, config):
        super().__init__(logger, {})
        self.config = config

    def isEnabledFor(self, level):
        return level >= self.config.log_level

    def log(self, level, msg, *args, **kwargs):
        # the logger's own level is not consulted; config is the only gate
        if self.isEnabledFor(level):
            msg, kwargs = self.process(msg, kwargs)
            self.logger._log(level, msg, args, **kwargs)


def get_logger(name: str, config=None) -> RunLogger:
    if config is None:
        config = IssuanceConfig()
    return RunLogger(logging.getLogger(name), config)
