# Logging bootstrap shared by the app and the dev launcher.

import logging

FORMAT = "%(asctime)s %(levelname)s: %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger("qbot")
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(FORMAT))
        logger.addHandler(h)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    return logger
