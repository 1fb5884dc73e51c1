"""
Control loop.

Requests the PLAYING state and then blocks on the pipeline bus until the
engine reports end-of-stream or an error. The loop is the only consumer of
the bus and never polls: each iteration is one indefinite
``timed_pop_filtered`` call.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Optional

from ..errors import EngineError
from ..utils import gst as gst_utils

LOG = logging.getLogger(__name__)

StateObserver = Callable[[str, str], None]


class RunOutcome(str, Enum):
    EOS = "eos"


def state_name(state: Any) -> str:
    Gst = gst_utils.Gst
    return Gst.Element.state_get_name(state)


def run_until_terminal(pipeline: Any, *, on_state_changed: Optional[StateObserver] = None) -> RunOutcome:
    """
    Drive ``pipeline`` to PLAYING and consume bus messages until it terminates.

    Returns :attr:`RunOutcome.EOS` on end-of-stream. Raises :class:`EngineError`
    when the state change is refused, when any element posts an error, or when
    a message outside the filter mask shows up.
    """

    gst_utils.require_gstreamer()
    Gst = gst_utils.Gst

    ret = pipeline.set_state(Gst.State.PLAYING)
    if ret == Gst.StateChangeReturn.FAILURE:
        raise EngineError("unable to set the pipeline to the playing state")

    bus = pipeline.get_bus()
    if bus is None:
        raise EngineError("pipeline bus is not available")

    mask = Gst.MessageType.STATE_CHANGED | Gst.MessageType.ERROR | Gst.MessageType.EOS
    while True:
        message = bus.timed_pop_filtered(Gst.CLOCK_TIME_NONE, mask)
        if message is None:
            # an indefinite pop only returns empty-handed on a flushing bus
            raise EngineError("pipeline bus was flushed while running")

        msg_type = message.type
        if msg_type == Gst.MessageType.ERROR:
            err, debug = message.parse_error()
            source = message.src.get_name() if message.src is not None else None
            LOG.error("Error received from element %s: %s", source, err.message)
            LOG.error("Debugging information: %s", debug or "none")
            raise EngineError(err.message, source=source, debug=debug)

        if msg_type == Gst.MessageType.EOS:
            LOG.info("End-Of-Stream reached.")
            return RunOutcome.EOS

        if msg_type == Gst.MessageType.STATE_CHANGED:
            # only the pipeline's own transitions are of interest
            if message.src != pipeline:
                continue
            old_state, new_state, _pending = message.parse_state_changed()
            old_name, new_name = state_name(old_state), state_name(new_state)
            LOG.info("Pipeline state changed from %s to %s", old_name, new_name)
            if on_state_changed is not None:
                on_state_changed(old_name, new_name)
            continue

        raise EngineError(f"unexpected message received: {msg_type}")
