from __future__ import annotations

import logging


_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a console handler to the package logger (idempotent)."""

    logger = logging.getLogger("geotag")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(getattr(h, "_geotag", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler._geotag = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
