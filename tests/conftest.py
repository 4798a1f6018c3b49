"""Shared test fixtures for VoiceDrop test suite."""

from unittest.mock import MagicMock

import numpy as np
import pytest


class FakePortAudioError(Exception):
    """Stands in for sounddevice.PortAudioError when ``sd`` is mocked."""


@pytest.fixture
def default_config():
    """VoiceDropConfig with all defaults."""
    from voicedrop.core.config import VoiceDropConfig

    return VoiceDropConfig()


@pytest.fixture
def mock_sd():
    """A MagicMock shaped like the sounddevice module."""
    sd = MagicMock()
    sd.PortAudioError = FakePortAudioError
    return sd


@pytest.fixture
def store(tmp_path):
    """Open MailboxStore backed by a temporary file."""
    from voicedrop.store.database import MailboxStore

    with MailboxStore(str(tmp_path / "mail.db")) as s:
        yield s


@pytest.fixture
def tone_pcm() -> bytes:
    """1-second 440Hz tone as 16kHz mono int16 PCM bytes."""
    t = np.linspace(0, 1, 16000, endpoint=False)
    return (0.5 * 32767 * np.sin(2 * np.pi * 440 * t)).astype("<i2").tobytes()


@pytest.fixture
def tmp_config_dir(tmp_path):
    """Temporary directory for YAML config files."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir
