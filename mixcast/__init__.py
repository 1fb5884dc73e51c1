"""
mixcast: live multi-source video mixer.

Composites several media files onto one canvas with GStreamer, renders the
program locally and optionally publishes it to an RTMP ingest.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    "StreamerConfig",
    "StreamerPipeline",
    "__version__",
]

from .config import StreamerConfig
from .pipeline import StreamerPipeline
