"""
Runtime supervision of an assembled pipeline.
"""

from __future__ import annotations

from .control import RunOutcome, StateObserver, run_until_terminal

__all__ = [
    "RunOutcome",
    "StateObserver",
    "run_until_terminal",
]
