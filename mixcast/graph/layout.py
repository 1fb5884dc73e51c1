"""
Compositor layout planning.

A planner turns a source count and a canvas size into one placement per
source, in source index order. :func:`apply_layout` reserves the compositor
input pads and positions them; the pads are linked later by the static link
builder.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Type

from ..errors import LayoutError

LOG = logging.getLogger(__name__)

MIXER_BACKGROUND_BLACK = 1


@dataclass(frozen=True)
class Placement:
    source_index: int
    xpos: int
    ypos: int
    width: int
    height: int

    @property
    def caps_string(self) -> str:
        return f"video/x-raw,width={self.width},height={self.height}"


class LayoutPlanner(ABC):
    name: str = ""
    max_sources: int = 0

    def plan(self, count: int, width: int, height: int) -> List[Placement]:
        if count <= 0:
            raise LayoutError("a layout needs at least one source")
        if count > self.max_sources:
            raise LayoutError(
                f"layout '{self.name}' places at most {self.max_sources} sources, got {count}"
            )
        return self._plan(count, width, height)

    @abstractmethod
    def _plan(self, count: int, width: int, height: int) -> List[Placement]:
        raise NotImplementedError


class TriptychLayout(LayoutPlanner):
    """
    Two half-size tiles side by side on top, the third centred below.
    """

    name = "triptych"
    max_sources = 3

    def _plan(self, count: int, width: int, height: int) -> List[Placement]:
        tile_w, tile_h = width // 2, height // 2
        origins = [(0, 0), (width // 2, 0), (width // 4, height // 2)]
        return [
            Placement(index, x, y, tile_w, tile_h)
            for index, (x, y) in enumerate(origins[:count])
        ]


class GridLayout(LayoutPlanner):
    """
    Near-square row-major mosaic.
    """

    name = "grid"
    max_sources = 16

    def _plan(self, count: int, width: int, height: int) -> List[Placement]:
        cols = math.ceil(math.sqrt(count))
        rows = math.ceil(count / cols)
        tile_w, tile_h = width // cols, height // rows
        return [
            Placement(index, (index % cols) * tile_w, (index // cols) * tile_h, tile_w, tile_h)
            for index in range(count)
        ]


LAYOUTS: Dict[str, Type[LayoutPlanner]] = {
    TriptychLayout.name: TriptychLayout,
    GridLayout.name: GridLayout,
}


def planner_for(name: str) -> LayoutPlanner:
    try:
        return LAYOUTS[name]()
    except KeyError:
        raise LayoutError(f"unknown layout '{name}'") from None


def apply_layout(compositor: Any, placements: Sequence[Placement]) -> List[Any]:
    """
    Request one compositor input per placement and position it.

    Pads are requested in placement order, so ``sink_0`` belongs to source 0.
    On failure every pad requested so far is released before raising.
    """

    compositor.set_property("background", MIXER_BACKGROUND_BLACK)

    pads: List[Any] = []
    for placement in placements:
        pad = compositor.get_request_pad("sink_%u")
        if pad is None:
            for requested in pads:
                compositor.release_request_pad(requested)
            raise LayoutError(f"failed to get pad {placement.source_index} from video mixer")
        pad.set_property("xpos", placement.xpos)
        pad.set_property("ypos", placement.ypos)
        LOG.info(
            "Requested pad from video mixer: %s at (%d, %d)",
            pad.get_name(),
            placement.xpos,
            placement.ypos,
        )
        pads.append(pad)
    return pads
