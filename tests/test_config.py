from __future__ import annotations

import pytest

from mixcast.config import StreamerConfig, load_profiles
from mixcast.errors import ConfigError


def test_defaults_without_credential(media_files) -> None:
    config = StreamerConfig.from_args([str(p) for p in media_files])

    assert config.streaming_enabled is False
    assert config.rtmp_location is None
    assert config.masked_rtmp_location is None
    assert config.layout == "triptych"
    assert (config.canvas.width, config.canvas.height) == (1280, 720)
    assert config.audio_source_index == 0
    assert config.stream_queue_window_ns == 5_000_000_000


def test_credential_builds_twitch_location(media_files) -> None:
    config = StreamerConfig.from_args([str(p) for p in media_files], api_key="live_111_abc")

    assert config.streaming_enabled is True
    assert config.rtmp_location == "rtmp://live.justin.tv/app/live_111_abc"
    assert config.masked_rtmp_location == "rtmp://live.justin.tv/app/****"
    assert "live_111_abc" not in config.masked_rtmp_location


def test_empty_credential_is_rejected(media_files) -> None:
    with pytest.raises(ConfigError):
        StreamerConfig.from_args([str(p) for p in media_files], api_key="   ")


def test_unknown_profile_is_rejected(media_files) -> None:
    with pytest.raises(ConfigError, match="unknown profile 'nope'"):
        StreamerConfig.from_args([str(p) for p in media_files], profile="nope")


def test_triptych_rejects_a_fourth_source(media_files) -> None:
    paths = [str(p) for p in media_files]
    with pytest.raises(ConfigError):
        StreamerConfig.from_args(paths + paths[:1])

    grid = StreamerConfig.from_args(paths + paths[:1], layout="grid")
    assert grid.layout == "grid"
    assert len(grid.sources) == 4


def test_audio_index_must_address_a_source() -> None:
    with pytest.raises(ValueError):
        StreamerConfig(sources=("a.mp4", "b.mp4"), audio_source_index=2)


def test_config_is_immutable(media_files) -> None:
    config = StreamerConfig.from_args([str(p) for p in media_files])
    with pytest.raises(Exception):
        config.api_key = "changed"  # type: ignore[misc]


def test_profiles_ship_with_package() -> None:
    profiles = load_profiles()

    assert {"default", "low-bandwidth", "mosaic-hd"} <= set(profiles)
    assert profiles["mosaic-hd"]["layout"] == "grid"


def test_low_bandwidth_profile_applies(media_files) -> None:
    config = StreamerConfig.from_args([str(p) for p in media_files], profile="low-bandwidth")

    assert config.profile == "low-bandwidth"
    assert config.canvas.width == 854
    assert config.encoder.video_bitrate_kbps == 400
    assert config.stream_queue_window_s == 3.0


def test_inline_profiles_override_file(media_files) -> None:
    profiles = {"tiny": {"canvas": {"width": 320, "height": 180}, "rtmp_base_url": "rtmp://ingest.local/live/"}}
    config = StreamerConfig.from_args(
        [str(p) for p in media_files], api_key="k", profile="tiny", profiles=profiles
    )

    assert config.canvas.height == 180
    assert config.rtmp_location == "rtmp://ingest.local/live/k"


def test_missing_profiles_file_falls_back_to_default(tmp_path) -> None:
    profiles = load_profiles(tmp_path / "absent.yaml")
    assert profiles == {"default": {}}


def test_malformed_profiles_file_raises(tmp_path) -> None:
    target = tmp_path / "profiles.yaml"
    target.write_text("- just\n- a list\n")

    with pytest.raises(ConfigError):
        load_profiles(target)


def test_resolve_sources_names_missing_file(media_files, tmp_path) -> None:
    paths = [str(media_files[0]), str(tmp_path / "missing.mp4"), str(media_files[2])]
    config = StreamerConfig.from_args(paths)

    with pytest.raises(ConfigError, match="missing.mp4"):
        config.resolve_sources()


def test_resolve_sources_relative_to_cwd(media_files, tmp_path) -> None:
    config = StreamerConfig.from_args([p.name for p in media_files])

    specs = config.resolve_sources(tmp_path)

    assert [spec.index for spec in specs] == [0, 1, 2]
    assert [spec.path for spec in specs] == [p.resolve() for p in media_files]
    assert specs[0].uri.startswith("file://")
