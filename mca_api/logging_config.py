from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Set the level for everything under the `mca_api` logger.

    Uvicorn installs the handlers; we only control verbosity here.
    Set `MCA_LOG_LEVEL=DEBUG` to see scope lookups and RBAC decisions.
    """

    normalized = level.upper()
    logger = logging.getLogger("mca_api")
    logger.setLevel(normalized)
    logger.propagate = True
