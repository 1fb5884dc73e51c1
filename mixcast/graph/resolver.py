"""
Dynamic pad resolution.

``uridecodebin`` exposes one pad per decoded stream once it has parsed the
container. The engine calls :meth:`PadResolver.on_pad_added` for each of them,
from its own streaming threads, in no particular order. Where a pad goes is a
pure function of the source element that produced it and the negotiated media
type; the source → consumer table is built once at assembly time and never
changes. Once a source reports ``no-more-pads``, consumers it never fed are
ended with EOS.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..errors import ConstructionError, ResolverInvariantError, RuntimeLinkFailure
from ..utils import gst as gst_utils
from .assembler import GraphHandles

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceBinding:
    index: int
    authoritative: bool
    audio_pad: Any
    video_pad: Any


@dataclass(frozen=True)
class LinkOutcome:
    source_index: int
    pad_name: str
    media_type: Optional[str]
    target: Optional[str]
    linked: bool
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


LinkObserver = Callable[[LinkOutcome], None]


def build_bindings(handles: GraphHandles) -> Mapping[Any, SourceBinding]:
    """
    Map every source element to the sink pads its streams must reach.
    """

    bindings: Dict[Any, SourceBinding] = {}
    for index, source in enumerate(handles.sources):
        authoritative = index == handles.audio_source_index
        audio_owner = handles.audio_convert if authoritative else handles.discard_sinks[index]
        audio_pad = audio_owner.get_static_pad("sink")
        video_pad = handles.video_scales[index].get_static_pad("sink")
        if audio_pad is None or video_pad is None:
            raise ConstructionError(f"consumer sink pads for source {index} are not available")
        bindings[source] = SourceBinding(
            index=index,
            authoritative=authoritative,
            audio_pad=audio_pad,
            video_pad=video_pad,
        )
    return MappingProxyType(bindings)


class PadResolver:
    def __init__(self, bindings: Mapping[Any, SourceBinding], observer: Optional[LinkObserver] = None) -> None:
        self._bindings = bindings
        self._observer = observer
        self._seen_lock = threading.Lock()
        self._seen: set = set()

    def binding_for(self, source: Any) -> SourceBinding:
        binding = self._bindings.get(source)
        if binding is None:
            raise ResolverInvariantError(f"pad-added from unknown element '{source.get_name()}'")
        return binding

    def resolve(self, source: Any, media_type: Optional[str]) -> Optional[Any]:
        """
        Sink pad for a stream of ``media_type`` produced by ``source``.

        ``None`` means the stream is not consumed (subtitles, data tracks).
        """

        binding = self.binding_for(source)
        if not media_type:
            return None
        if media_type.startswith("audio"):
            return binding.audio_pad
        if media_type.startswith("video"):
            return binding.video_pad
        return None

    def connect(self, sources: Tuple[Any, ...]) -> List[Tuple[Any, int]]:
        handlers = []
        for source in sources:
            handlers.append((source, source.connect("pad-added", self.on_pad_added)))
            handlers.append((source, source.connect("no-more-pads", self.on_no_more_pads)))
        return handlers

    def on_pad_added(self, source: Any, pad: Any) -> LinkOutcome:
        with self._seen_lock:
            if pad in self._seen:
                raise ResolverInvariantError(
                    f"pad '{pad.get_name()}' from '{source.get_name()}' was delivered twice"
                )
            self._seen.add(pad)

        binding = self.binding_for(source)
        media_type = gst_utils.media_type_of(pad)
        LOG.info("Received new pad '%s' from '%s' (type '%s')", pad.get_name(), source.get_name(), media_type)

        target = self.resolve(source, media_type)
        if target is None:
            LOG.debug("Ignoring pad '%s' of type '%s'", pad.get_name(), media_type)
            outcome = LinkOutcome(binding.index, pad.get_name(), media_type, None, False, "not consumed")
        else:
            target_label = gst_utils.pad_label(target)
            try:
                self._link(pad, target)
            except RuntimeLinkFailure as exc:
                LOG.warning("Type is '%s' but link to %s failed: %s", media_type, target_label, exc)
                outcome = LinkOutcome(binding.index, pad.get_name(), media_type, target_label, False, str(exc))
            else:
                LOG.info("Link succeeded (type '%s') -> %s", media_type, target_label)
                outcome = LinkOutcome(binding.index, pad.get_name(), media_type, target_label, True)

        self._notify(outcome)
        return outcome

    def on_no_more_pads(self, source: Any) -> List[LinkOutcome]:
        """
        End every consumer of ``source`` that never received a stream.

        Aggregators and async sinks wait for data on each of their inputs, so a
        file without an audio (or video) track would otherwise hold the whole
        pipeline in preroll. An EOS on the unlinked sink pad lets the rest of
        the program play with that stream absent.
        """

        Gst = gst_utils.Gst
        binding = self.binding_for(source)
        outcomes = []
        for media_type, target in (("audio", binding.audio_pad), ("video", binding.video_pad)):
            if target.is_linked():
                continue
            target_label = gst_utils.pad_label(target)
            LOG.warning(
                "Source '%s' exposed no %s stream; ending %s",
                source.get_name(),
                media_type,
                target_label,
            )
            if not target.send_event(Gst.Event.new_eos()):
                LOG.warning("%s did not accept end-of-stream", target_label)
            outcome = LinkOutcome(binding.index, "", media_type, target_label, False, "no stream")
            self._notify(outcome)
            outcomes.append(outcome)
        return outcomes

    @staticmethod
    def _link(pad: Any, target: Any) -> None:
        Gst = gst_utils.Gst
        if target.is_linked():
            raise RuntimeLinkFailure("sink pad is already linked")
        result = pad.link(target)
        if result != Gst.PadLinkReturn.OK:
            raise RuntimeLinkFailure(str(getattr(result, "value_nick", result)))

    def _notify(self, outcome: LinkOutcome) -> None:
        if self._observer is None:
            return
        try:
            self._observer(outcome)
        except Exception:  # pragma: no cover
            LOG.exception("Link observer failed for pad '%s'.", outcome.pad_name)
