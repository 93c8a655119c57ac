import logging
import sys
from pathlib import Path

from agentvista.config import Config

handlers = [logging.StreamHandler(sys.stdout)]

if Config.LOG_FILE:
    log_file = Path(Config.LOG_FILE)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))

# configure the logger
logging.basicConfig(
    level=Config.LOG_LEVEL.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    handlers=handlers,
)


def get_logger(name: str):
    """
    Return a logger instance with the specified name.
    """
    return logging.getLogger(name)
