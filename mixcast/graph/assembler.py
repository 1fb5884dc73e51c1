"""
Graph assembly.

Creates every element of the session, configures it and inserts it into one
pipeline container. Linking is left to :mod:`mixcast.graph.links` and
:mod:`mixcast.graph.resolver`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Sequence, Tuple

from ..errors import ConstructionError
from ..utils import gst as gst_utils
from .branches import StreamingBranch
from .elements import ElementFactory

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..config import SourceSpec, StreamerConfig

LOG = logging.getLogger(__name__)

PIPELINE_NAME = "mixcast-pipeline"


@dataclass(frozen=True)
class StreamingHandles:
    audio_queue: Any
    aac_encoder: Any
    video_queue: Any
    h264_encoder: Any
    flv_mux: Any
    rtmp_sink: Any

    def elements(self) -> List[Any]:
        return [
            self.audio_queue,
            self.aac_encoder,
            self.video_queue,
            self.flv_mux,
            self.h264_encoder,
            self.rtmp_sink,
        ]


@dataclass(frozen=True)
class GraphHandles:
    """
    Every element of an assembled graph.

    Built once by :func:`assemble` and read-only afterwards.
    """

    pipeline: Any
    sources: Tuple[Any, ...]
    audio_source_index: int
    audio_convert: Any
    audio_resample: Any
    audio_tee: Any
    device_audio_queue: Any
    audio_device_sink: Any
    video_scales: Tuple[Any, ...]
    video_mixer: Any
    video_tee: Any
    device_video_queue: Any
    video_device_sink: Any
    discard_sinks: Mapping[int, Any] = field(default_factory=dict)
    streaming: Optional[StreamingHandles] = None

    @property
    def streaming_enabled(self) -> bool:
        return self.streaming is not None

    def elements(self) -> List[Any]:
        """All elements in insertion order."""

        ordered: List[Any] = list(self.sources)
        ordered.extend(self.discard_sinks[index] for index in sorted(self.discard_sinks))
        ordered.extend(self.video_scales)
        ordered.extend(
            [
                self.audio_convert,
                self.audio_resample,
                self.audio_device_sink,
                self.audio_tee,
                self.device_audio_queue,
                self.video_mixer,
                self.video_tee,
                self.device_video_queue,
                self.video_device_sink,
            ]
        )
        if self.streaming is not None:
            ordered.extend(self.streaming.elements())
        return ordered


def assemble(
    config: "StreamerConfig",
    sources: Sequence["SourceSpec"],
    *,
    factory: Optional[ElementFactory] = None,
) -> GraphHandles:
    """
    Create, configure and insert every element of the session.

    Raises :class:`ConstructionError` if any element cannot be created or added;
    nothing is returned in that case.
    """

    gst_utils.require_gstreamer()
    Gst = gst_utils.Gst

    factory = factory or ElementFactory()
    branch = StreamingBranch.from_config(config)
    audio_index = config.audio_source_index

    pipeline = Gst.Pipeline.new(PIPELINE_NAME)
    if pipeline is None:
        raise ConstructionError("failed to create pipeline")

    source_elements = tuple(factory.make("source", spec.index) for spec in sources)
    for element, spec in zip(source_elements, sources):
        element.set_property("uri", spec.uri)

    # Audio
    audio_convert = factory.make("audio_convert")
    audio_resample = factory.make("audio_resample")
    audio_tee = factory.make("audio_tee")
    discard_sinks = {}
    for spec in sources:
        if spec.index == audio_index:
            continue
        sink = factory.make("fake_audio_sink", spec.index)
        # an input without an audio track must not hold up preroll
        sink.set_property("async", False)
        discard_sinks[spec.index] = sink
    device_audio_queue = factory.make("device_audio_queue")
    audio_device_sink = factory.make("audio_device_sink")

    # Video
    video_scales = tuple(factory.make("video_scale", spec.index) for spec in sources)
    video_mixer = factory.make("video_mixer")
    video_tee = factory.make("video_tee")
    device_video_queue = factory.make("device_video_queue")
    video_device_sink = factory.make("video_device_sink")

    streaming: Optional[StreamingHandles] = None
    if branch is not None:
        streaming = StreamingHandles(
            audio_queue=factory.make("stream_audio_queue"),
            aac_encoder=factory.make("aac_encoder"),
            video_queue=factory.make("stream_video_queue"),
            h264_encoder=factory.make("x264_enc"),
            flv_mux=factory.make("flv_mux"),
            rtmp_sink=factory.make("rtmp_sink"),
        )

    handles = GraphHandles(
        pipeline=pipeline,
        sources=source_elements,
        audio_source_index=audio_index,
        audio_convert=audio_convert,
        audio_resample=audio_resample,
        audio_tee=audio_tee,
        device_audio_queue=device_audio_queue,
        audio_device_sink=audio_device_sink,
        video_scales=video_scales,
        video_mixer=video_mixer,
        video_tee=video_tee,
        device_video_queue=device_video_queue,
        video_device_sink=video_device_sink,
        discard_sinks=MappingProxyType(discard_sinks),
        streaming=streaming,
    )

    if branch is not None and streaming is not None:
        _configure_streaming(streaming, branch)
        LOG.info("Streaming enabled; publishing to %s", config.masked_rtmp_location)
    else:
        LOG.info("Streaming disabled; local preview only")

    for element in handles.elements():
        if not pipeline.add(element):
            raise ConstructionError(f"failed to add element '{element.get_name()}' to the pipeline")

    return handles


def _configure_streaming(streaming: StreamingHandles, branch: StreamingBranch) -> None:
    for queue in (streaming.audio_queue, streaming.video_queue):
        _set_properties(queue, branch.queue_properties())
    _set_properties(streaming.h264_encoder, branch.encoder_properties())
    _set_properties(streaming.flv_mux, branch.mux_properties())
    _set_properties(streaming.rtmp_sink, branch.sink_properties())


def _set_properties(element: Any, properties: Mapping[str, object]) -> None:
    for key, value in properties.items():
        element.set_property(key, value)
