import logging
from typing import Optional, Union

LOGGER_NAME = "scoutgate"

logger = logging.getLogger(LOGGER_NAME)


def setup_logging(level: Optional[Union[str, int]] = None) -> logging.Logger:
    """Attach the gate's stream handler once and set the level."""
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "[%(asctime)s] [%(levelname)s] [GATE] %(message)s",
            "%Y-%m-%dT%H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level or logging.INFO)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if not name:
        return logger
    return logger.getChild(name)
