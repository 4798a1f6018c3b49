"""Configuration loading and dataclasses for VoiceDrop."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class AudioConfig:
    """Audio capture/playback configuration."""

    sample_rate: int = 16000
    channels: int = 1
    chunk_size: int = 2048  # bytes per device read
    input_device: int | str | None = None
    output_device: int | str | None = None


@dataclass
class CodecConfig:
    """Payload compression configuration."""

    compress_level: int = 9


@dataclass
class StoreConfig:
    """Mailbox database configuration."""

    db_path: str = "data/voicedrop.db"
    wal: bool = True


@dataclass
class VoiceDropConfig:
    """Top-level configuration for VoiceDrop."""

    audio: AudioConfig = field(default_factory=AudioConfig)
    codec: CodecConfig = field(default_factory=CodecConfig)
    store: StoreConfig = field(default_factory=StoreConfig)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str = "config/default.yaml") -> VoiceDropConfig:
    """
    Load VoiceDrop configuration from YAML file.

    Args:
        config_path: Path to the main configuration file.

    Returns:
        VoiceDropConfig with all settings loaded.
    """
    config_file = Path(config_path)

    if not config_file.exists():
        print(f"Warning: Config file not found: {config_path}, using defaults")
        return VoiceDropConfig()

    data = _load_yaml(config_file)

    # Parse audio section
    audio_data = data.get("audio") or {}
    audio_config = AudioConfig(
        sample_rate=audio_data.get("sample_rate", 16000),
        channels=audio_data.get("channels", 1),
        chunk_size=audio_data.get("chunk_size", 2048),
        input_device=audio_data.get("input_device"),
        output_device=audio_data.get("output_device"),
    )

    # Parse codec section
    codec_data = data.get("codec") or {}
    compress_level = codec_data.get("compress_level", 9)
    if isinstance(compress_level, bool) or not isinstance(compress_level, int) or not 0 <= compress_level <= 9:
        raise ValueError(f"codec.compress_level must be an integer 0-9, got {compress_level!r}")
    codec_config = CodecConfig(compress_level=compress_level)

    # Parse store section
    store_data = data.get("store") or {}
    store_config = StoreConfig(
        db_path=store_data.get("db_path", "data/voicedrop.db"),
        wal=store_data.get("wal", True),
    )

    return VoiceDropConfig(
        audio=audio_config,
        codec=codec_config,
        store=store_config,
    )
