"""
Graph assembly helpers for mixcast.

Each submodule owns one construction step: creating elements, inserting them
into the pipeline, planning the compositor layout, linking the static part of
the graph and resolving the pads that sources expose at runtime.
"""

from __future__ import annotations

__all__ = [
    "ElementFactory",
    "GraphHandles",
    "StreamingHandles",
    "assemble",
    "StreamingBranch",
    "LayoutPlanner",
    "Placement",
    "TriptychLayout",
    "GridLayout",
    "apply_layout",
    "planner_for",
    "StaticLinks",
    "link_static",
    "LinkOutcome",
    "PadResolver",
    "SourceBinding",
    "build_bindings",
]

from .elements import ElementFactory
from .assembler import GraphHandles, StreamingHandles, assemble
from .branches import StreamingBranch
from .layout import GridLayout, LayoutPlanner, Placement, TriptychLayout, apply_layout, planner_for
from .links import StaticLinks, link_static
from .resolver import LinkOutcome, PadResolver, SourceBinding, build_bindings
