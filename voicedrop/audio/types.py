"""States and result values for the capture/playback engine."""

from dataclasses import dataclass
from enum import Enum

from voicedrop.core.errors import DeviceIOError

# 16-bit signed little-endian PCM
SAMPLE_WIDTH = 2
PCM_DTYPE = "int16"


class CaptureState(Enum):
    IDLE = "idle"
    CAPTURING = "capturing"


class PlaybackState(Enum):
    IDLE = "idle"
    OPEN = "open"


@dataclass(frozen=True)
class CaptureResult:
    """Outcome of a capture session, returned by ``stop_capture``."""

    bytes_captured: int
    error: DeviceIOError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class PlaybackResult:
    """Outcome of a ``play`` call."""

    bytes_written: int
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
