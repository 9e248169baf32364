import logging
import os
import sys

from ..config import LOG_LEVEL


def get_logger():
    logger = logging.getLogger("attestor")
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)
        fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(message)s")
        h.setFormatter(fmt)
        logger.addHandler(h)
        logger.setLevel(os.getenv("LOG_LEVEL", LOG_LEVEL).upper())
    return logger
