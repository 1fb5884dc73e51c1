"""
Session status shared between the pipeline, its streaming threads and the
status API.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from ..graph.resolver import LinkOutcome

LOG = logging.getLogger(__name__)


@dataclass
class PipelineStatus:
    """
    Thread-safe record of what the session built and what happened since.

    Written by the control thread and by the pad resolver (engine threads),
    read by the status API.
    """

    profile: str = "default"
    layout: str = ""
    streaming: bool = False
    rtmp_target: Optional[str] = None
    sources: List[str] = field(default_factory=list)
    state: str = "NULL"
    elements: List[str] = field(default_factory=list)
    static_links: List[str] = field(default_factory=list)
    dynamic_links: List[LinkOutcome] = field(default_factory=list)
    outcome: Optional[str] = None
    last_error: Optional[str] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_graph(self, elements: List[str], static_links: List[str]) -> None:
        with self._lock:
            self.elements = list(elements)
            self.static_links = list(static_links)

    def record_link(self, outcome: LinkOutcome) -> None:
        with self._lock:
            self.dynamic_links.append(outcome)

    def record_state(self, _old: str, new: str) -> None:
        with self._lock:
            self.state = new

    def record_outcome(self, outcome: str, error: Optional[str] = None) -> None:
        with self._lock:
            self.outcome = outcome
            if error is not None:
                self.last_error = error

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "profile": self.profile,
                "layout": self.layout,
                "streaming": self.streaming,
                "rtmpTarget": self.rtmp_target,
                "sources": list(self.sources),
                "state": self.state,
                "elements": list(self.elements),
                "staticLinks": list(self.static_links),
                "dynamicLinks": [outcome.to_dict() for outcome in self.dynamic_links],
                "outcome": self.outcome,
                "lastError": self.last_error,
            }
