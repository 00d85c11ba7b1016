"""Root logging setup for the API and the Streamlit app.

Library modules only call ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
import os
from typing import IO, Optional, Union

LEVEL_ENV = "SPEND_DASHBOARD_LOG_LEVEL"
HANDLER_NAME = "spend-dashboard"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _parse_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = os.getenv(LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(level.strip().upper())
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(level: Union[int, str, None] = None, *, stream: Optional[IO[str]] = None) -> None:
    """Attach one formatted stream handler to the root logger.

    Calling again only updates the level.
    """
    root = logging.getLogger()
    root.setLevel(_parse_level(level))
    if any(h.get_name() == HANDLER_NAME for h in root.handlers):
        return
    handler = logging.StreamHandler(stream)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
