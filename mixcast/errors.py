"""
Error taxonomy shared by the graph builders, the runtime loop and the CLI.
"""

from __future__ import annotations

from typing import Optional


class StreamerError(RuntimeError):
    """Base class for every error raised by mixcast."""


class ArgumentError(StreamerError):
    """Raised when the command line cannot be turned into a configuration."""


class ConfigError(StreamerError):
    """Raised when a configuration or profile is invalid."""


class PipelineUnavailableError(StreamerError):
    """Raised when the pipeline cannot be materialised due to missing dependencies."""


class ConstructionError(StreamerError):
    """Raised when an element could not be created or added to the pipeline."""


class LinkError(StreamerError):
    """Raised when a link known at construction time could not be established."""

    def __init__(self, edge: str, reason: Optional[str] = None) -> None:
        self.edge = edge
        self.reason = reason
        message = f"failed to link {edge}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class LayoutError(StreamerError):
    """Raised when a compositor input pad could not be reserved."""


class RuntimeLinkFailure(StreamerError):
    """A dynamic pad could not be linked; the stream is dropped, playback goes on."""


class ResolverInvariantError(StreamerError):
    """Raised when the engine delivers the same dynamic pad twice."""


class EngineError(StreamerError):
    """Raised when the engine reports a failure while the pipeline runs."""

    def __init__(self, message: str, *, source: Optional[str] = None, debug: Optional[str] = None) -> None:
        self.source = source
        self.debug = debug
        if source:
            message = f"error received from element {source}: {message}"
        super().__init__(message)


__all__ = [
    "ArgumentError",
    "ConfigError",
    "ConstructionError",
    "EngineError",
    "LayoutError",
    "LinkError",
    "PipelineUnavailableError",
    "ResolverInvariantError",
    "RuntimeLinkFailure",
    "StreamerError",
]
