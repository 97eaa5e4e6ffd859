"""
shotboard.logging - Package logger and CLI logging setup.

Batch progress and request retries are logged under "shotboard"; the image
service libraries log under their own names and are kept quieter.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("shotboard")

SERVICE_LOGGERS = ("LiteLLM", "httpx", "urllib3")


def configure_logging(verbose: bool = False) -> None:
    """Set up console logging for a CLI run.

    Args:
        verbose: If True, log shotboard at DEBUG and the service libraries
            at INFO; otherwise only warnings are shown
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    logger.setLevel(level)

    service_level = logging.INFO if verbose else logging.WARNING
    for name in SERVICE_LOGGERS:
        logging.getLogger(name).setLevel(service_level)
