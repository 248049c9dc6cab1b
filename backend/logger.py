"""Logging setup shared by every map engine module."""
import logging
import os
from datetime import datetime

LOGS_DIR = os.getenv("MAP_ENGINE_LOGS_DIR", os.path.join(os.path.dirname(__file__), "logs"))
CONSOLE_LEVEL = os.getenv("MAP_ENGINE_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logger(name: str = "map_engine") -> logging.Logger:
    """Logger writing DEBUG to the daily engine log and CONSOLE_LEVEL to stderr.

    All components share one file per day (map_engine_YYYYMMDD.log); the
    component shows up in the %(name)s column.
    """
    logger = logging.getLogger(f"map_engine.{name}")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    if not logger.handlers:
        os.makedirs(LOGS_DIR, exist_ok=True)
        log_file = os.path.join(LOGS_DIR, f"map_engine_{datetime.now().strftime('%Y%m%d')}.log")
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, CONSOLE_LEVEL, logging.INFO))

        formatter = logging.Formatter(LOG_FORMAT)
        file_handler.setFormatter(formatter)
        console_handler.setFormatter(formatter)

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)

    return logger
