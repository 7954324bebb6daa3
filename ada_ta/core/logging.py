"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``; this only configures
the root handler once at process startup.
"""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging. Safe to call more than once."""
    global _configured

    if level is None:
        from ada_ta.core.config import settings

        level = settings.log_level

    numeric_level = getattr(logging, str(level).upper(), logging.INFO)

    if _configured:
        logging.getLogger().setLevel(numeric_level)
        return

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    _configured = True
