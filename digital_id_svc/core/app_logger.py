from __future__ import annotations
import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
BASE_LOGGER = "digital_id_svc"

def setup_logging(level: str = "INFO") -> logging.Logger:
    lvl = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger(BASE_LOGGER)
    logger.setLevel(lvl)

    # avoid duplicate console handlers on reload
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(ch)

    logger.propagate = False
    return logger

def get_logger(name: str | None = None) -> logging.Logger:
    base = logging.getLogger(BASE_LOGGER)
    return base.getChild(name) if name else base
