"""Process-wide logging configuration for runtime entrypoints."""

from __future__ import annotations

import logging


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger when none is present.

    Args:
        level: Logging level name such as `INFO` or `DEBUG`.

    Returns:
        None: Logging is configured as a side effect.
    """

    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level)
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler()],
    )
