import logging
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Attaches one stderr handler to the `lume` logger. Calling it again only
    changes the level.
    """
    logger = logging.getLogger("lume")
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    logger.addHandler(handler)
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Module logger under the `lume` namespace.
    """
    if not name:
        return logging.getLogger("lume")
    if name.startswith("lume."):
        return logging.getLogger(name)
    return logging.getLogger(f"lume.{name}")
