# -*- coding: utf-8 -*-
import logging
from typing import Union

_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
_LOGGER_NAME = "sorabridge"


def setup_logger(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Attach a stream handler to the package logger (once) and set level."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    for handler in logger.handlers:
        if getattr(handler, "_sorabridge", False):
            handler.setLevel(level)
            return logger
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._sorabridge = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
