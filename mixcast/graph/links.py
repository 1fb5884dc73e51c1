"""
Static link construction.

Links everything that does not depend on stream types negotiated at runtime:
the audio conditioning chain, the scaler → compositor inputs, both tee
fan-outs and the preview/network consumer chains. Any failure aborts the
build with a :class:`LinkError` naming the edge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from ..errors import LinkError
from ..utils import gst as gst_utils
from .assembler import GraphHandles
from .layout import Placement

LOG = logging.getLogger(__name__)


@dataclass
class StaticLinks:
    edges: List[str] = field(default_factory=list)
    # tee pads to hand back with release_request_pad at teardown
    request_pads: List[Tuple[Any, Any]] = field(default_factory=list)

    def release(self) -> None:
        for element, pad in self.request_pads:
            element.release_request_pad(pad)
        self.request_pads.clear()


def link_static(
    handles: GraphHandles,
    mixer_pads: Sequence[Any],
    placements: Sequence[Placement],
    links: Optional[StaticLinks] = None,
) -> StaticLinks:
    """
    Establish every static link, recording into ``links`` as it goes.

    Passing ``links`` in lets the caller release tee pads even when a later
    link fails.
    """

    gst_utils.require_gstreamer()
    links = links if links is not None else StaticLinks()

    _link_chain(links, handles.audio_convert, handles.audio_resample, handles.audio_tee)

    for scale, pad, placement in zip(handles.video_scales, mixer_pads, placements):
        _link_to_mixer(links, scale, handles.video_mixer, pad, placement)

    _link_chain(links, handles.video_mixer, handles.video_tee)

    _link_tee_branch(links, handles.audio_tee, handles.device_audio_queue)
    _link_tee_branch(links, handles.video_tee, handles.device_video_queue)

    streaming = handles.streaming
    if streaming is not None:
        _link_tee_branch(links, handles.audio_tee, streaming.audio_queue)
        _link_tee_branch(links, handles.video_tee, streaming.video_queue)
        _link_chain(links, streaming.audio_queue, streaming.aac_encoder, streaming.flv_mux)
        _link_chain(
            links,
            streaming.video_queue,
            streaming.h264_encoder,
            streaming.flv_mux,
            streaming.rtmp_sink,
        )

    _link_chain(links, handles.device_audio_queue, handles.audio_device_sink)
    _link_chain(links, handles.device_video_queue, handles.video_device_sink)

    LOG.info("Established %d static links", len(links.edges))
    return links


def _link_chain(links: StaticLinks, *elements: Any) -> None:
    for upstream, downstream in zip(elements, elements[1:]):
        edge = f"{upstream.get_name()} -> {downstream.get_name()}"
        if not upstream.link(downstream):
            raise LinkError(edge)
        links.edges.append(edge)


def _link_to_mixer(
    links: StaticLinks,
    scale: Any,
    mixer: Any,
    mixer_pad: Any,
    placement: Placement,
) -> None:
    Gst = gst_utils.Gst
    edge = f"{scale.get_name()}:src -> {mixer.get_name()}:{mixer_pad.get_name()}"
    if mixer_pad.is_linked():
        raise LinkError(edge, "mixer input is already linked")

    caps = Gst.Caps.from_string(placement.caps_string)
    if caps is None:
        raise LinkError(edge, f"failed to create scale filter caps '{placement.caps_string}'")

    if not scale.link_pads_filtered("src", mixer, mixer_pad.get_name(), caps):
        raise LinkError(edge, f"filtered by {placement.caps_string}")
    links.edges.append(edge)


def _link_tee_branch(links: StaticLinks, tee: Any, queue: Any) -> None:
    Gst = gst_utils.Gst
    tee_pad = tee.get_request_pad("src_%u")
    if tee_pad is None:
        raise LinkError(f"{tee.get_name()}:src_%u -> {queue.get_name()}:sink", "no request pad")
    links.request_pads.append((tee, tee_pad))

    edge = f"{tee.get_name()}:{tee_pad.get_name()} -> {queue.get_name()}:sink"
    sink_pad = queue.get_static_pad("sink")
    if sink_pad is None:
        raise LinkError(edge, "queue has no sink pad")
    if sink_pad.is_linked():
        raise LinkError(edge, "sink pad is already linked")

    result = tee_pad.link(sink_pad)
    if result != Gst.PadLinkReturn.OK:
        raise LinkError(edge, str(getattr(result, "value_nick", result)))
    links.edges.append(edge)
