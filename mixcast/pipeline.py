"""
GStreamer pipeline orchestration.

:class:`StreamerPipeline` materialises one GStreamer pipeline that decodes
every source, composites the video streams onto a shared canvas and fans the
program out to the local preview branch and, when a credential is configured,
to the RTMP branch. Construction is all-or-nothing; once built, the topology
only changes through the dynamic pad links made by the resolver.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .api.state import PipelineStatus
from .config import StreamerConfig
from .errors import ConstructionError, EngineError, StreamerError
from .graph.assembler import GraphHandles, assemble
from .graph.elements import ElementFactory
from .graph.layout import apply_layout, planner_for
from .graph.links import StaticLinks, link_static
from .graph.resolver import PadResolver, build_bindings
from .runtime.control import RunOutcome, run_until_terminal
from .utils import gst as gst_utils

LOG = logging.getLogger(__name__)


class StreamerPipeline:
    """
    Build, run and tear down one mixing session.

    Use as a context manager so the pipeline is forced back to NULL on every
    exit path::

        with StreamerPipeline(config) as session:
            session.build()
            session.run()
    """

    def __init__(
        self,
        config: StreamerConfig,
        *,
        factory: Optional[ElementFactory] = None,
        status: Optional[PipelineStatus] = None,
        cwd: Optional[Path] = None,
    ) -> None:
        self.config = config
        self.status = status or PipelineStatus()
        self.status.profile = config.profile
        self.status.layout = config.layout
        self.status.streaming = config.streaming_enabled
        self.status.rtmp_target = config.masked_rtmp_location
        self.status.sources = list(config.sources)
        self._factory = factory or ElementFactory()
        self._cwd = cwd
        self._handles: Optional[GraphHandles] = None
        self._links = StaticLinks()
        self._mixer_pads: List[Any] = []
        self._resolver: Optional[PadResolver] = None
        self._signal_handlers: List[Tuple[Any, int]] = []
        self._built = False
        self._closed = False
        self._build_error: Optional[StreamerError] = None

    # --------------------------------------------------------------------- API

    @property
    def handles(self) -> Optional[GraphHandles]:
        return self._handles if self._built else None

    @property
    def resolver(self) -> Optional[PadResolver]:
        return self._resolver

    @property
    def is_built(self) -> bool:
        return self._built

    def build(self) -> GraphHandles:
        """
        Assemble and link the whole graph.

        All or nothing: on failure the partial graph is torn down and the
        session refuses any further build or run.
        """

        if self._build_error is not None:
            raise ConstructionError(
                f"pipeline build already failed: {self._build_error}"
            ) from self._build_error
        if self._closed:
            raise ConstructionError("pipeline session is closed")
        if self._built:
            return self._handles

        try:
            handles = self._build()
        except StreamerError as exc:
            self._build_error = exc
            self._teardown()
            raise
        self._built = True
        return handles

    def _build(self) -> GraphHandles:
        gst_utils.ensure_initialised()

        sources = self.config.resolve_sources(self._cwd)
        canvas = self.config.canvas
        placements = planner_for(self.config.layout).plan(len(sources), canvas.width, canvas.height)

        handles = assemble(self.config, sources, factory=self._factory)
        # kept for teardown only; is_built stays false until linking completes
        self._handles = handles

        self._mixer_pads = apply_layout(handles.video_mixer, placements)
        link_static(handles, self._mixer_pads, placements, links=self._links)

        self._resolver = PadResolver(build_bindings(handles), observer=self.status.record_link)
        self._signal_handlers = self._resolver.connect(handles.sources)

        self.status.record_graph(
            [element.get_name() for element in handles.elements()],
            self._links.edges,
        )
        LOG.info(
            "Pipeline built: %d sources, layout '%s', streaming %s",
            len(sources),
            self.config.layout,
            "enabled" if handles.streaming_enabled else "disabled",
        )
        return handles

    def run(self) -> RunOutcome:
        handles = self.build()
        try:
            outcome = run_until_terminal(handles.pipeline, on_state_changed=self.status.record_state)
        except EngineError as exc:
            self.status.record_outcome("error", str(exc))
            raise
        self.status.record_outcome(outcome.value)
        return outcome

    def close(self) -> None:
        self._closed = True
        self._teardown()

    def _teardown(self) -> None:
        handles = self._handles
        if handles is None:
            return
        Gst = gst_utils.Gst

        handles.pipeline.set_state(Gst.State.NULL)
        self.status.record_state(self.status.state, "NULL")

        for element, handler_id in self._signal_handlers:
            element.disconnect(handler_id)
        self._signal_handlers.clear()

        self._links.release()
        for pad in self._mixer_pads:
            handles.video_mixer.release_request_pad(pad)
        self._mixer_pads = []

        self._resolver = None
        self._handles = None
        self._built = False
        LOG.debug("Pipeline released")

    def describe(self) -> Dict[str, object]:
        """
        Return a serialisable snapshot of the built graph and runtime state.
        """

        return self.status.snapshot()

    # ------------------------------------------------------------ context mgmt

    def __enter__(self) -> "StreamerPipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
