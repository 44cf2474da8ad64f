from __future__ import annotations

import logging
import logging.handlers
import os
from typing import Any

KEY_LOGGER = "clite.keytrace"


def setup_logging(config: dict[str, Any]) -> None:
    """Attach handlers to the ``clite`` loggers.

    The terminal is in raw mode while the editor runs, so records only ever
    go to a file. Without ``logging.file`` everything is discarded.
    """
    logging_config = config.get("logging", {})
    logger = logging.getLogger("clite")
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.propagate = False

    key_logger = logging.getLogger(KEY_LOGGER)
    key_logger.disabled = True

    log_filename = logging_config.get("file") or os.environ.get("CLITE_LOG", "")
    if not log_filename:
        logger.addHandler(logging.NullHandler())
        return

    level_name = str(logging_config.get("level", "WARNING")).upper()
    level = getattr(logging, level_name, logging.WARNING)
    handler = logging.handlers.RotatingFileHandler(
        os.path.expanduser(log_filename), maxBytes=1024 * 1024, backupCount=3, encoding="utf-8"
    )
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)-8s - %(name)-14s - %(message)s")
    )
    logger.addHandler(handler)
    logger.setLevel(level)

    if logging_config.get("keytrace") or os.environ.get("CLITE_KEYTRACE", "").lower() in {"1", "true", "yes"}:
        key_logger.disabled = False
        key_logger.setLevel(logging.DEBUG)
        logger.info("key tracing enabled")
    logger.info("logging to %s at %s", log_filename, logging.getLevelName(level))
