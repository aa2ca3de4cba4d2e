import logging
import os
from typing import Optional

from config.settings import LOG_FILE, LOG_LEVEL

if LOG_FILE:
    os.makedirs(os.path.dirname(os.path.abspath(LOG_FILE)), exist_ok=True)
    logging.basicConfig(
        filename=LOG_FILE,
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
else:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

logger = logging.getLogger("vm-provisioner")


def log_event(message: str) -> None:
    """
    Write a single line event to the provisioner log.
    """
    logger.info(message)


def log_error(message: str, exc: Optional[BaseException] = None) -> None:
    logger.error(message, exc_info=exc)
