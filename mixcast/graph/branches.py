"""
Property set applied to the network consumers hanging off each tee.

The local preview queues and sinks keep the engine defaults and need none.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..config import StreamerConfig

QUEUE_LEAKY_DOWNSTREAM = 2


@dataclass(frozen=True)
class StreamingBranch:
    """
    Network path: tee → leaky queue → encoder → flvmux → rtmpsink.

    Both network queues drop their oldest data once ``queue_window_ns`` of
    media is buffered, so a stalled ingest never backs up into the tee.
    """

    location: str
    queue_window_ns: int
    video_bitrate_kbps: int = 768
    speed_preset: int = 4
    qp_min: int = 30
    tune: int = 4

    @classmethod
    def from_config(cls, config: "StreamerConfig") -> Optional["StreamingBranch"]:
        if not config.streaming_enabled:
            return None
        return cls(
            location=config.rtmp_location or "",
            queue_window_ns=config.stream_queue_window_ns,
            video_bitrate_kbps=config.encoder.video_bitrate_kbps,
            speed_preset=config.encoder.speed_preset,
            qp_min=config.encoder.qp_min,
            tune=config.encoder.tune,
        )

    def queue_properties(self) -> Dict[str, object]:
        return {
            "leaky": QUEUE_LEAKY_DOWNSTREAM,
            "max-size-buffers": 0,
            "max-size-bytes": 0,
            "max-size-time": int(self.queue_window_ns),
        }

    def encoder_properties(self) -> Dict[str, object]:
        return {
            "bitrate": int(self.video_bitrate_kbps),
            "speed-preset": int(self.speed_preset),
            "qp-min": int(self.qp_min),
            "tune": int(self.tune),
        }

    def mux_properties(self) -> Dict[str, object]:
        return {"streamable": True}

    def sink_properties(self) -> Dict[str, object]:
        return {"location": self.location}
