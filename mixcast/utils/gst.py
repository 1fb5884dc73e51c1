"""
GStreamer bootstrap and pad helpers.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

try:
    import gi  # type: ignore

    gi.require_version("Gst", "1.0")
    from gi.repository import Gst  # type: ignore
except (ImportError, ValueError) as exc:  # pragma: no cover - runtime guard
    Gst = None  # type: ignore[assignment]
    _GST_IMPORT_ERROR: Optional[BaseException] = exc
else:  # pragma: no cover - availability depends on host environment
    _GST_IMPORT_ERROR = None

from ..errors import PipelineUnavailableError

LOG = logging.getLogger(__name__)


def require_gstreamer() -> None:
    if Gst is None:
        raise PipelineUnavailableError(
            "GStreamer runtime is not available. Install PyGObject/GStreamer "
            "1.x to enable pipeline execution."
        ) from _GST_IMPORT_ERROR


def ensure_initialised() -> None:
    require_gstreamer()
    if not Gst.is_initialized():
        Gst.init(None)
        LOG.debug("GStreamer initialised: %s", Gst.version_string())


def media_type_of(pad: Any) -> Optional[str]:
    """
    Name of the first caps structure negotiated on ``pad``.

    Falls back to the pad's queryable caps when nothing is negotiated yet.
    """

    caps = pad.get_current_caps()
    if caps is None:
        caps = pad.query_caps(None)
    if caps is None or caps.is_empty():
        return None
    structure = caps.get_structure(0)
    if structure is None:
        return None
    return structure.get_name()


def pad_label(pad: Any) -> str:
    parent = pad.get_parent_element()
    owner = parent.get_name() if parent is not None else "?"
    return f"{owner}:{pad.get_name()}"
