"""Audio playback functionality."""

from __future__ import annotations

import numpy as np
import sounddevice as sd
from rich.console import Console

from voicedrop.audio.types import PCM_DTYPE, SAMPLE_WIDTH, PlaybackResult, PlaybackState
from voicedrop.core.config import AudioConfig
from voicedrop.core.errors import DeviceIOError, DeviceUnavailable

console = Console()


class AudioPlayer:
    """Plays raw PCM through the speakers over a single output line."""

    def __init__(self, config: AudioConfig | None = None):
        """
        Initialize the audio player.

        Args:
            config: Audio configuration (format, device).
        """
        self.config = config or AudioConfig()
        self.sample_rate = self.config.sample_rate
        self.channels = self.config.channels
        self._stream: sd.OutputStream | None = None

    @property
    def state(self) -> PlaybackState:
        return PlaybackState.OPEN if self._stream is not None else PlaybackState.IDLE

    def start_playback(self) -> None:
        """
        Open the output line.

        Raises:
            DeviceUnavailable: If no compatible output device exists.
        """
        if self._stream is not None:
            return
        try:
            stream = sd.OutputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype=PCM_DTYPE,
                device=self.config.output_device,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as e:
            raise DeviceUnavailable(f"No output line available: {e}") from e
        self._stream = stream

    def stop_playback(self) -> None:
        """Drain and close the output line. No-op when already closed."""
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except sd.PortAudioError as e:
            console.print(f"[yellow]Error closing output line: {e}[/yellow]")

    def _to_frames(self, data: bytes) -> np.ndarray:
        # A trailing partial sample cannot be played
        usable = len(data) - len(data) % (SAMPLE_WIDTH * self.channels)
        samples = np.frombuffer(data[:usable], dtype=np.int16)
        return samples.reshape(-1, self.channels)

    def play(self, data: bytes) -> PlaybackResult:
        """
        Write PCM to the output line, opening it first if needed.

        Returns once the device has accepted the buffer, which may be before
        the sound has finished playing.

        Args:
            data: 16-bit signed little-endian PCM.

        Returns:
            PlaybackResult with the number of bytes written or the error.
        """
        try:
            self.start_playback()
        except DeviceUnavailable as e:
            console.print(f"[red]{e}[/red]")
            return PlaybackResult(bytes_written=0, error=e)

        frames = self._to_frames(data)
        if len(frames) == 0:
            return PlaybackResult(bytes_written=0)
        try:
            self._stream.write(frames)
        except Exception as e:
            console.print(f"[red]Playback write failed: {e}[/red]")
            return PlaybackResult(bytes_written=0, error=DeviceIOError(f"Output write failed: {e}"))
        return PlaybackResult(bytes_written=frames.nbytes)

    def play_and_close(self, data: bytes) -> PlaybackResult:
        """Play *data* and close the output line afterwards."""
        result = self.play(data)
        self.stop_playback()
        return result
