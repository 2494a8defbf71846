########################################
# core/utils/logging_utils.py
########################################

import logging
from datetime import datetime
from pathlib import Path


def setup_logger(name="farmfromspace", level=logging.INFO, log_dir=None):
    """
    Configures a standard logger for the engine.

    - Always logs to the console.
    - Also logs to a dated file when ``log_dir`` is given.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicated handlers when reconfigured
    if not logger.handlers:
        ch = logging.StreamHandler()
        ch.setLevel(level)
        ch.setFormatter(logging.Formatter("%(levelname)s | %(name)s | %(message)s"))
        logger.addHandler(ch)

        if log_dir is not None:
            log_dir = Path(log_dir)
            log_dir.mkdir(exist_ok=True, parents=True)
            log_path = log_dir / f"{name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
            fh = logging.FileHandler(log_path, encoding="utf-8")
            fh.setLevel(level)
            fh.setFormatter(
                logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
            )
            logger.addHandler(fh)

    return logger


def get_logger(name="farmfromspace"):
    """
    Returns an existing logger (or creates it).

    Child loggers ("farmfromspace.engine") reuse the handlers of the
    configured root "farmfromspace" logger.
    """
    root = name.split(".")[0]
    if root not in logging.Logger.manager.loggerDict:
        setup_logger(root)
    return logging.getLogger(name)
