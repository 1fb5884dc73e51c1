"""
Input path resolution.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

LOG = logging.getLogger(__name__)


def resolve_media_path(candidate: Union[str, Path, None], cwd: Optional[Path] = None) -> Optional[Path]:
    """
    Return the absolute path of an existing media file, or ``None``.

    Relative paths are resolved against ``cwd`` (the process working directory
    by default).
    """

    if candidate is None:
        return None
    trimmed = str(candidate).strip()
    if not trimmed:
        return None
    path = Path(trimmed).expanduser()
    if not path.is_absolute():
        path = (cwd or Path.cwd()) / path
    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError:
        return None
    except RuntimeError:  # symlink loop
        LOG.debug("Failed to resolve path '%s'", trimmed, exc_info=True)
        return None
    if not resolved.is_file():
        return None
    return resolved
