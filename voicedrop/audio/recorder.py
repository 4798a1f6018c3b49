"""Audio capture functionality."""

from __future__ import annotations

import threading

import numpy as np
import sounddevice as sd
from rich.console import Console

from voicedrop.audio.types import PCM_DTYPE, SAMPLE_WIDTH, CaptureResult, CaptureState
from voicedrop.core.config import AudioConfig
from voicedrop.core.errors import AlreadyCapturing, DeviceIOError, DeviceUnavailable

console = Console()


class AudioRecorder:
    """Records raw PCM from the microphone into an in-memory buffer.

    One input line and at most one background capture loop exist at a time.
    The buffer is guarded by a lock, so ``snapshot()`` never observes a
    half-written chunk even while the loop is running.
    """

    def __init__(self, config: AudioConfig | None = None):
        """
        Initialize the audio recorder.

        Args:
            config: Audio configuration (format, chunk size, device).
        """
        self.config = config or AudioConfig()
        self.sample_rate = self.config.sample_rate
        self.channels = self.config.channels
        self.chunk_size = self.config.chunk_size
        self.last_error: DeviceIOError | None = None
        self._buffer = bytearray()
        self._buffer_lock = threading.Lock()
        self._stream_lock = threading.Lock()
        self._start_lock = threading.Lock()
        self._stream: sd.InputStream | None = None
        self._stop_event: threading.Event | None = None
        self._recording_thread: threading.Thread | None = None

    @property
    def frames_per_chunk(self) -> int:
        return max(1, self.chunk_size // (SAMPLE_WIDTH * self.channels))

    @property
    def state(self) -> CaptureState:
        thread = self._recording_thread
        if thread is not None and thread.is_alive():
            return CaptureState.CAPTURING
        return CaptureState.IDLE

    def _open_stream(self) -> sd.InputStream:
        try:
            stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype=PCM_DTYPE,
                device=self.config.input_device,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as e:
            raise DeviceUnavailable(f"No input line available: {e}") from e
        return stream

    def _close_stream(self) -> None:
        with self._stream_lock:
            stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except sd.PortAudioError as e:
            console.print(f"[yellow]Error closing input line: {e}[/yellow]")

    def _read_chunk(self, stream: sd.InputStream) -> bytes:
        data, overflowed = stream.read(self.frames_per_chunk)
        if overflowed:
            console.print("[yellow]Audio input overflow[/yellow]")
        return np.asarray(data, dtype=np.int16).tobytes()

    def _record_loop(self, stream: sd.InputStream, stop_event: threading.Event) -> None:
        """Capture loop that runs in a separate thread."""
        try:
            while not stop_event.is_set():
                chunk = self._read_chunk(stream)
                with self._buffer_lock:
                    self._buffer.extend(chunk)
        except Exception as e:
            self.last_error = DeviceIOError(f"Input read failed: {e}")
            console.print(f"[red]Capture stopped: {e}[/red]")
            self._close_stream()

    def start_capture(self) -> None:
        """
        Open the input line and start capturing in a background thread.

        Raises:
            AlreadyCapturing: If a capture session is already running.
            DeviceUnavailable: If no compatible input device exists.
        """
        with self._start_lock:
            if self.state is CaptureState.CAPTURING:
                raise AlreadyCapturing("Capture session already running")

            stream = self._open_stream()
            with self._stream_lock:
                self._stream = stream
            self.last_error = None
            self._stop_event = threading.Event()
            self._recording_thread = threading.Thread(
                target=self._record_loop,
                args=(stream, self._stop_event),
                daemon=True,
            )
            self._recording_thread.start()

    def stop_capture(self) -> CaptureResult:
        """Stop the capture loop, join it and close the input line."""
        with self._start_lock:
            if self._stop_event:
                self._stop_event.set()
            if self._recording_thread:
                self._recording_thread.join()
                self._recording_thread = None
            self._close_stream()
        with self._buffer_lock:
            captured = len(self._buffer)
        return CaptureResult(bytes_captured=captured, error=self.last_error)

    def capture_chunk(self) -> bytes:
        """
        Read a single chunk synchronously, independent of the capture loop.

        The input line belongs to the capture loop while a session is
        running, so nothing is read in that state.

        Returns:
            Up to ``chunk_size`` bytes, or empty bytes on no data or I/O error.
        """
        if self.state is CaptureState.CAPTURING:
            return b""
        stream = None
        try:
            stream = self._open_stream()
            return self._read_chunk(stream)
        except Exception as e:
            console.print(f"[yellow]Chunk capture failed: {e}[/yellow]")
            return b""
        finally:
            if stream is not None:
                try:
                    stream.stop()
                    stream.close()
                except Exception as e:
                    console.print(f"[yellow]Error closing input line: {e}[/yellow]")

    def snapshot(self) -> bytes:
        """Return an immutable copy of everything captured so far."""
        with self._buffer_lock:
            return bytes(self._buffer)

    def clear_buffer(self) -> None:
        """Drop all captured audio and release its storage."""
        with self._buffer_lock:
            self._buffer = bytearray()

