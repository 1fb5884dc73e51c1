"""
Configuration model for a mixcast session.

The configuration is resolved once from the command line and a named profile
(``configs/profiles.yaml``) and is immutable afterwards; every graph builder
receives the same instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator, validator

from .errors import ConfigError
from .graph.layout import LAYOUTS, planner_for
from .utils.paths import resolve_media_path

LOG = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent / "configs"
PROFILES_PATH = CONFIG_DIR / "profiles.yaml"

MAX_SOURCES = 3
AUDIO_FROM_SOURCE_INDEX = 0
OUTPUT_VIDEO_WIDTH = 1280
OUTPUT_VIDEO_HEIGHT = 720
TWITCH_URL_PREFIX = "rtmp://live.justin.tv/app"
STREAM_QUEUE_WINDOW_S = 5.0


class Canvas(BaseModel):
    width: int = OUTPUT_VIDEO_WIDTH
    height: int = OUTPUT_VIDEO_HEIGHT
    model_config = ConfigDict(frozen=True)

    @validator("width", "height")
    def _positive(cls, value: int) -> int:
        if int(value) <= 0:
            raise ValueError("canvas dimensions must be positive")
        return int(value)


class EncoderSettings(BaseModel):
    """x264 settings applied to the network branch."""

    video_bitrate_kbps: int = 768
    speed_preset: int = 4  # faster
    qp_min: int = 30
    tune: int = 4  # zerolatency
    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class SourceSpec:
    index: int
    path: Path

    @property
    def uri(self) -> str:
        return self.path.as_uri()


class StreamerConfig(BaseModel):
    sources: Tuple[str, ...]
    api_key: Optional[str] = None
    audio_source_index: int = AUDIO_FROM_SOURCE_INDEX
    canvas: Canvas = Field(default_factory=Canvas)
    layout: str = "triptych"
    encoder: EncoderSettings = Field(default_factory=EncoderSettings)
    stream_queue_window_s: float = STREAM_QUEUE_WINDOW_S
    rtmp_base_url: str = TWITCH_URL_PREFIX
    profile: str = "default"
    model_config = ConfigDict(frozen=True)

    @validator("api_key")
    def _validate_api_key(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = str(value).strip()
        if not cleaned:
            raise ValueError("streaming credential must not be empty")
        return cleaned

    @validator("layout")
    def _validate_layout(cls, value: str) -> str:
        name = str(value or "").strip().lower()
        if name not in LAYOUTS:
            raise ValueError(f"unknown layout '{value}' (expected one of {', '.join(sorted(LAYOUTS))})")
        return name

    @validator("stream_queue_window_s")
    def _validate_window(cls, value: float) -> float:
        if float(value) <= 0:
            raise ValueError("stream queue window must be positive")
        return float(value)

    @validator("rtmp_base_url")
    def _strip_trailing_slash(cls, value: str) -> str:
        return str(value).rstrip("/")

    @model_validator(mode="after")
    def _check_sources(self) -> "StreamerConfig":
        if not self.sources:
            raise ValueError("at least one source is required")
        bound = planner_for(self.layout).max_sources
        if len(self.sources) > bound:
            raise ValueError(
                f"layout '{self.layout}' places at most {bound} sources, got {len(self.sources)}"
            )
        if not 0 <= self.audio_source_index < len(self.sources):
            raise ValueError(
                f"audio source index {self.audio_source_index} is outside [0, {len(self.sources)})"
            )
        return self

    # ------------------------------------------------------------------ derived

    @property
    def streaming_enabled(self) -> bool:
        return self.api_key is not None

    @property
    def rtmp_location(self) -> Optional[str]:
        if self.api_key is None:
            return None
        return f"{self.rtmp_base_url}/{self.api_key}"

    @property
    def masked_rtmp_location(self) -> Optional[str]:
        if self.api_key is None:
            return None
        return f"{self.rtmp_base_url}/****"

    @property
    def stream_queue_window_ns(self) -> int:
        return int(self.stream_queue_window_s * 1_000_000_000)

    def resolve_sources(self, cwd: Optional[Path] = None) -> List[SourceSpec]:
        """
        Resolve every configured path to an existing absolute file.

        Raises :class:`ConfigError` naming the first path that does not exist.
        """

        specs: List[SourceSpec] = []
        for index, raw in enumerate(self.sources):
            path = resolve_media_path(raw, cwd=cwd)
            if path is None:
                raise ConfigError(f"file '{raw}' does not exist")
            LOG.info("Loading file: '%s'", path)
            specs.append(SourceSpec(index=index, path=path))
        return specs

    # -------------------------------------------------------------- constructors

    @classmethod
    def from_args(
        cls,
        sources: Sequence[str],
        *,
        api_key: Optional[str] = None,
        profile: str = "default",
        layout: Optional[str] = None,
        profiles: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> "StreamerConfig":
        available = load_profiles() if profiles is None else dict(profiles)
        if profile not in available:
            raise ConfigError(f"unknown profile '{profile}'")
        payload: Dict[str, Any] = dict(available[profile] or {})
        payload.update(sources=tuple(sources), api_key=api_key, profile=profile)
        if layout is not None:
            payload["layout"] = layout
        try:
            return cls(**payload)
        except ValidationError as exc:
            raise ConfigError(f"invalid configuration: {exc}") from exc


def load_profiles(path: Optional[Path] = None) -> Dict[str, Dict[str, Any]]:
    target = path or PROFILES_PATH
    try:
        with target.open("r", encoding="utf-8") as handle:
            profiles = yaml.safe_load(handle) or {}
    except FileNotFoundError:
        LOG.warning("Profiles file '%s' not found; using built-in defaults.", target)
        profiles = {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse profiles file '{target}': {exc}") from exc
    if not isinstance(profiles, dict):
        raise ConfigError(f"profiles file '{target}' must contain a mapping")
    profiles.setdefault("default", {})
    return profiles


__all__ = [
    "Canvas",
    "EncoderSettings",
    "SourceSpec",
    "StreamerConfig",
    "load_profiles",
]
