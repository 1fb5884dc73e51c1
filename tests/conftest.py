"""
Shared fixtures.

``fake_gst`` replaces the GStreamer bindings with a small in-memory engine so
graph construction, pad resolution and the bus loop can be exercised without
a native GStreamer install.
"""

from __future__ import annotations

import enum
import itertools
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from mixcast.utils import gst as gst_utils


class PadLinkReturn(str, enum.Enum):
    OK = "ok"
    WAS_LINKED = "was-linked"
    NOFORMAT = "noformat"

    @property
    def value_nick(self) -> str:
        return self.value


class State:
    VOID_PENDING = "VOID_PENDING"
    NULL = "NULL"
    READY = "READY"
    PAUSED = "PAUSED"
    PLAYING = "PLAYING"


class StateChangeReturn(enum.Enum):
    FAILURE = 0
    SUCCESS = 1
    ASYNC = 2


class MessageType(enum.IntFlag):
    EOS = 1
    ERROR = 2
    WARNING = 4
    STATE_CHANGED = 8
    BUFFERING = 16


# no static pads on uridecodebin; tee/compositor only expose one side
STATIC_PADS = {
    "uridecodebin": (),
    "tee": ("sink",),
    "compositor": ("src",),
    "videomixer": ("src",),
    "flvmux": ("src",),
    "fakesink": ("sink",),
    "autoaudiosink": ("sink",),
    "autovideosink": ("sink",),
    "rtmpsink": ("sink",),
}


class FakeCaps:
    def __init__(self, string: str) -> None:
        self.string = string

    def is_empty(self) -> bool:
        return not self.string

    def get_structure(self, index: int) -> "FakeStructure":
        return FakeStructure(self.string.split(",")[0])


class FakeStructure:
    def __init__(self, name: str) -> None:
        self._name = name

    def get_name(self) -> str:
        return self._name


class FakePad:
    def __init__(self, name: str, parent: Optional["FakeElement"] = None, caps: Optional[str] = None) -> None:
        self.name = name
        self.parent = parent
        self.caps = FakeCaps(caps) if caps is not None else None
        self.peer: Optional[FakePad] = None
        self.props: Dict[str, object] = {}
        self.filter_caps: Optional[FakeCaps] = None
        self.link_result: Optional[PadLinkReturn] = None
        self.events: List[str] = []

    def get_name(self) -> str:
        return self.name

    def get_parent_element(self) -> Optional["FakeElement"]:
        return self.parent

    def get_current_caps(self) -> Optional[FakeCaps]:
        return self.caps

    def query_caps(self, _filter) -> Optional[FakeCaps]:
        return self.caps

    def is_linked(self) -> bool:
        return self.peer is not None

    def send_event(self, event: str) -> bool:
        self.events.append(event)
        return True

    def set_property(self, key: str, value: object) -> None:
        self.props[key] = value

    def get_property(self, key: str) -> object:
        return self.props[key]

    def link(self, sink: "FakePad") -> PadLinkReturn:
        if self.link_result is not None:
            return self.link_result
        if self.peer is not None or sink.peer is not None:
            return PadLinkReturn.WAS_LINKED
        self.peer = sink
        sink.peer = self
        return PadLinkReturn.OK


class FakeElement:
    _handler_ids = itertools.count(1)

    def __init__(self, factory: str, name: str) -> None:
        self.factory = factory
        self.name = name
        self.props: Dict[str, object] = {}
        self.parent: Optional[FakeElement] = None
        self.linked_to: List[FakeElement] = []
        self.fail_link_to: set = set()
        self.request_limit: Optional[int] = None
        self.requested: List[FakePad] = []
        self.released: List[FakePad] = []
        self.handlers: Dict[int, tuple] = {}
        self._static = {
            pad_name: FakePad(pad_name, self)
            for pad_name in STATIC_PADS.get(factory, ("sink", "src"))
        }
        self._counters: Dict[str, itertools.count] = {}

    def __repr__(self) -> str:
        return f"<FakeElement {self.name}>"

    def get_name(self) -> str:
        return self.name

    def set_property(self, key: str, value: object) -> None:
        self.props[key] = value

    def get_property(self, key: str) -> object:
        return self.props[key]

    def get_static_pad(self, name: str) -> Optional[FakePad]:
        return self._static.get(name)

    def get_request_pad(self, template: str) -> Optional[FakePad]:
        if self.request_limit is not None and len(self.requested) >= self.request_limit:
            return None
        counter = self._counters.setdefault(template, itertools.count())
        pad = FakePad(template.replace("%u", str(next(counter))), self)
        self.requested.append(pad)
        return pad

    def release_request_pad(self, pad: FakePad) -> None:
        self.released.append(pad)

    def link(self, other: "FakeElement") -> bool:
        if other.name in self.fail_link_to:
            return False
        self.linked_to.append(other)
        return True

    def link_pads_filtered(self, src_name: str, dest: "FakeElement", dest_pad_name: str, caps: FakeCaps) -> bool:
        if dest.name in self.fail_link_to:
            return False
        src_pad = self.get_static_pad(src_name)
        dest_pad = next((pad for pad in dest.requested if pad.name == dest_pad_name), None)
        if src_pad is None or dest_pad is None:
            return False
        if src_pad.link(dest_pad) != PadLinkReturn.OK:
            return False
        dest_pad.filter_caps = caps
        return True

    def connect(self, signal: str, callback: Callable) -> int:
        handler_id = next(self._handler_ids)
        self.handlers[handler_id] = (signal, callback)
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        del self.handlers[handler_id]

    def emit(self, signal: str, *args):
        results = []
        for name, callback in list(self.handlers.values()):
            if name == signal:
                results.append(callback(self, *args))
        return results


class FakeError:
    def __init__(self, message: str) -> None:
        self.message = message


class FakeMessage:
    def __init__(self, type_: MessageType, src, *, error=None, debug=None, states=None) -> None:
        self.type = type_
        self.src = src
        self._error = error
        self._debug = debug
        self._states = states

    def parse_error(self):
        return self._error, self._debug

    def parse_state_changed(self):
        return self._states


class FakeBus:
    def __init__(self, messages: List[FakeMessage]) -> None:
        self.messages = list(messages)
        self.timeouts: List[int] = []

    def timed_pop_filtered(self, timeout: int, mask: MessageType) -> Optional[FakeMessage]:
        self.timeouts.append(timeout)
        for index, message in enumerate(self.messages):
            if message.type & mask:
                return self.messages.pop(index)
        return None


class FakePipeline(FakeElement):
    def __init__(self, name: str, gst: "FakeGst") -> None:
        super().__init__("pipeline", name)
        self._gst = gst
        self.children: List[FakeElement] = []
        self.state = State.NULL
        self.state_history: List[str] = []
        self.bus: Optional[FakeBus] = None

    def add(self, element: FakeElement) -> bool:
        if element.name in self._gst.fail_add:
            return False
        element.parent = self
        self.children.append(element)
        return True

    def set_state(self, state: str) -> StateChangeReturn:
        self.state_history.append(state)
        if state == State.PLAYING and self._gst.playing_result is not None:
            return self._gst.playing_result
        self.state = state
        return StateChangeReturn.ASYNC if state == State.PLAYING else StateChangeReturn.SUCCESS

    def get_bus(self) -> FakeBus:
        if self.bus is None:
            self.bus = FakeBus([build(self) for build in self._gst.bus_script])
        return self.bus

    def by_name(self, name: str) -> FakeElement:
        return next(child for child in self.children if child.name == name)


class FakeGst:
    """Namespace standing in for ``gi.repository.Gst``."""

    CLOCK_TIME_NONE = 2**64 - 1
    SECOND = 1_000_000_000
    PadLinkReturn = PadLinkReturn
    State = State
    StateChangeReturn = StateChangeReturn
    MessageType = MessageType

    def __init__(self) -> None:
        self.missing: set = set()
        self.fail_add: set = set()
        self.playing_result: Optional[StateChangeReturn] = None
        self.bus_script: List[Callable[[FakePipeline], FakeMessage]] = []
        self.pipelines: List[FakePipeline] = []
        self.elements: Dict[str, FakeElement] = {}
        gst = self

        class ElementFactory:
            @staticmethod
            def make(factory: str, name: str) -> Optional[FakeElement]:
                if factory in gst.missing:
                    return None
                element = FakeElement(factory, name)
                gst.elements[name] = element
                return element

        class Pipeline:
            @staticmethod
            def new(name: str) -> FakePipeline:
                pipeline = FakePipeline(name, gst)
                gst.pipelines.append(pipeline)
                return pipeline

        class Caps:
            @staticmethod
            def from_string(string: str) -> FakeCaps:
                return FakeCaps(string)

        class Element:
            @staticmethod
            def state_get_name(state: str) -> str:
                return str(state)

        class Event:
            @staticmethod
            def new_eos() -> str:
                return "eos"

        self.ElementFactory = ElementFactory
        self.Pipeline = Pipeline
        self.Caps = Caps
        self.Element = Element
        self.Event = Event

    # -- engine bootstrap

    @staticmethod
    def is_initialized() -> bool:
        return True

    @staticmethod
    def init(_argv) -> None:
        return None

    @staticmethod
    def version_string() -> str:
        return "GStreamer (fake) 1.24"

    # -- test helpers

    @property
    def pipeline(self) -> FakePipeline:
        return self.pipelines[-1]

    def pad(self, caps: Optional[str], name: str = "src_0", parent: Optional[FakeElement] = None) -> FakePad:
        return FakePad(name, parent, caps)

    def script(self, *builders: Callable[[FakePipeline], FakeMessage]) -> None:
        self.bus_script.extend(builders)

    @staticmethod
    def eos() -> Callable[[FakePipeline], FakeMessage]:
        return lambda pipeline: FakeMessage(MessageType.EOS, pipeline)

    @staticmethod
    def error(element_name: str, text: str, debug: str = "gst debug") -> Callable[[FakePipeline], FakeMessage]:
        def build(pipeline: FakePipeline) -> FakeMessage:
            source = FakeElement("fake", element_name)
            return FakeMessage(MessageType.ERROR, source, error=FakeError(text), debug=debug)

        return build

    @staticmethod
    def state_changed(old: str, new: str, *, child: Optional[str] = None) -> Callable[[FakePipeline], FakeMessage]:
        def build(pipeline: FakePipeline) -> FakeMessage:
            source = FakeElement("fake", child) if child else pipeline
            return FakeMessage(MessageType.STATE_CHANGED, source, states=(old, new, State.VOID_PENDING))

        return build

    @staticmethod
    def warning() -> Callable[[FakePipeline], FakeMessage]:
        return lambda pipeline: FakeMessage(MessageType.WARNING, pipeline)


@pytest.fixture
def fake_gst(monkeypatch: pytest.MonkeyPatch) -> FakeGst:
    fake = FakeGst()
    monkeypatch.setattr(gst_utils, "Gst", fake)
    return fake


@pytest.fixture
def media_files(tmp_path: Path) -> List[Path]:
    paths = []
    for name in ("sintel_trailer-480p.webm", "big_buck_bunny_trailer-360p.mp4", "the_daily_dweebs-720p.mp4"):
        path = tmp_path / name
        path.write_bytes(b"media")
        paths.append(path)
    return paths
