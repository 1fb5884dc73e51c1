"""
Element factory shim.

Every element of the graph is created through :class:`ElementFactory`, which
maps a logical role to the GStreamer factory providing it and fails fast when
the engine cannot instantiate it.
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional, Sequence, Tuple

from ..errors import ConstructionError
from ..utils import gst as gst_utils

LOG = logging.getLogger(__name__)

# role -> candidate factories, first available wins
ELEMENT_FACTORIES: Mapping[str, Tuple[str, ...]] = {
    "source": ("uridecodebin",),
    "audio_convert": ("audioconvert",),
    "audio_resample": ("audioresample",),
    "audio_tee": ("tee",),
    "fake_audio_sink": ("fakesink",),
    "device_audio_queue": ("queue",),
    "audio_device_sink": ("autoaudiosink",),
    "stream_audio_queue": ("queue",),
    "aac_encoder": ("voaacenc", "avenc_aac", "fdkaacenc"),
    "video_scale": ("videoscale",),
    "video_mixer": ("compositor", "videomixer"),
    "video_tee": ("tee",),
    "device_video_queue": ("queue",),
    "video_device_sink": ("autovideosink",),
    "stream_video_queue": ("queue",),
    "x264_enc": ("x264enc",),
    "flv_mux": ("flvmux",),
    "rtmp_sink": ("rtmpsink",),
}


class ElementFactory:
    """
    Create named elements for logical roles.

    Names are ``<role>`` or ``<role>_<index>`` and therefore unique within the
    pipeline.
    """

    def __init__(self, factories: Optional[Mapping[str, Sequence[str]]] = None) -> None:
        self._factories: Dict[str, Tuple[str, ...]] = {
            role: tuple(candidates) for role, candidates in (factories or ELEMENT_FACTORIES).items()
        }
        self.created: Dict[str, object] = {}

    def make(self, role: str, index: Optional[int] = None):
        gst_utils.require_gstreamer()
        Gst = gst_utils.Gst

        candidates = self._factories.get(role)
        if not candidates:
            raise ConstructionError(f"no element factory registered for role '{role}'")

        name = role if index is None else f"{role}_{index}"
        if name in self.created:
            raise ConstructionError(f"pipeline element '{name}' was already created")

        for factory in candidates:
            element = Gst.ElementFactory.make(factory, name)
            if element is not None:
                if factory != candidates[0]:
                    LOG.warning("'%s' not available; using '%s' for %s.", candidates[0], factory, name)
                LOG.debug("Created %s (%s)", name, factory)
                self.created[name] = element
                return element

        raise ConstructionError(
            f"pipeline element '{name}' was not created (tried {', '.join(candidates)})"
        )
