import logging

_FORMAT = '%(asctime)s %(levelname)s %(message)s'

# Names of every logger handed out, so the CLI can adjust them together
_LOGGER_NAMES = set()


def get_logger(name: str) -> logging.Logger:
    """Return a named logger with a single stream handler attached."""
    logger = logging.getLogger(name)
    if not logger.hasHandlers():
        handler = logging.StreamHandler()
        formatter = logging.Formatter(_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    _LOGGER_NAMES.add(name)
    return logger


def set_log_level(level) -> None:
    """Set the level of every logger created through get_logger."""
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    for name in _LOGGER_NAMES:
        logging.getLogger(name).setLevel(level)
