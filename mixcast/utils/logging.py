"""
Root logger setup for the ``mixcast`` command.

Library modules only ever call ``logging.getLogger(__name__)``; the CLI calls
:func:`configure_logging` once, before the pipeline is built, so GStreamer
bus messages and pad-resolution events land in one timestamped stream.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
LEVEL_ENV_VAR = "MIXCAST_LOG_LEVEL"


def resolve_level(level: Union[int, str, None]) -> int:
    """
    Turn ``--log-level`` (or ``$MIXCAST_LOG_LEVEL`` when it is omitted) into a
    numeric level. Names are case-insensitive; unknown names raise
    ``ValueError`` so the CLI can report them as a usage error.
    """

    if level is None:
        level = os.environ.get(LEVEL_ENV_VAR, "INFO")
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(str(level).strip().upper())
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level '{level}'")
    return numeric


def configure_logging(level: Union[int, str, None] = None, format: Optional[str] = None) -> None:
    root = logging.getLogger()
    if root.handlers:
        # embedding applications and test runners own the root logger
        return

    numeric = resolve_level(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format or DEFAULT_FORMAT))
    root.addHandler(handler)
    root.setLevel(numeric)
