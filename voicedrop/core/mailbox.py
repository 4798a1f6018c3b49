"""Main VoiceDrop orchestrator: recorder -> codec -> store, and back."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from rich.console import Console

from voicedrop.audio.player import AudioPlayer
from voicedrop.audio.recorder import AudioRecorder
from voicedrop.audio.types import CaptureResult, PlaybackResult
from voicedrop.codec.compression import DecodeResult, compress, decode_payload
from voicedrop.core.config import StoreConfig, VoiceDropConfig
from voicedrop.core.errors import AlreadyCapturing, ConstraintViolation, NoCounterpartSelected
from voicedrop.core.session import SessionContext
from voicedrop.store.database import MailboxStore

console = Console()


def create_store(config: StoreConfig) -> MailboxStore:
    """
    Factory function to open the mailbox store.

    Args:
        config: Store configuration.

    Returns:
        Open MailboxStore with its tables created.
    """
    store = MailboxStore(config.db_path, wal=config.wal)
    store.open()
    store.create_tables()
    return store


@dataclass(frozen=True)
class Delivery:
    """A consumed message and what happened when it was played."""

    sender: str
    decoded: DecodeResult
    playback: PlaybackResult

    @property
    def ok(self) -> bool:
        return self.decoded.ok and self.playback.ok


class VoiceMailbox:
    """Records, stores and replays voice messages on behalf of callers.

    One recorder and one player are shared by all callers, so only one
    recording can be in progress at any time.
    """

    def __init__(
        self,
        config: VoiceDropConfig,
        *,
        store: MailboxStore | None = None,
        recorder: AudioRecorder | None = None,
        player: AudioPlayer | None = None,
    ):
        """
        Initialize the mailbox.

        Args:
            config: Full VoiceDrop configuration.
            store: Already-open store; one is created from config if omitted.
            recorder: Capture engine; built from config if omitted.
            player: Playback engine; built from config if omitted.
        """
        self.config = config
        self.store = store if store is not None else create_store(config.store)
        self.recorder = recorder if recorder is not None else AudioRecorder(config.audio)
        self.player = player if player is not None else AudioPlayer(config.audio)
        self._recording_session: SessionContext | None = None
        self._session_lock = threading.Lock()

    def register(self, ctx: SessionContext) -> None:
        """First-contact registration of the caller."""
        if self.store.register_identity(ctx.identity):
            console.print(f"[dim]New identity registered: {ctx.identity[:12]}…[/dim]")

    def users(self) -> list[str]:
        return self.store.list_identities()

    def inbox(self, ctx: SessionContext) -> list[str]:
        """Senders with messages waiting for the caller, blacklisted ones hidden."""
        self.register(ctx)
        return [
            sender
            for sender in self.store.list_counterparts(ctx.identity)
            if not ctx.is_blocked(sender)
        ]

    def start_recording(self, ctx: SessionContext) -> None:
        """
        Start capturing a message for the caller's selected recipient.

        Raises:
            NoCounterpartSelected: If no recipient was selected.
            ConstraintViolation: If the recipient has never made contact.
            AlreadyCapturing: If any caller is already recording.
            DeviceUnavailable: If the microphone cannot be opened.
        """
        if ctx.recipient is None:
            raise NoCounterpartSelected("Select a recipient before recording")
        self.register(ctx)
        if not self.store.has_identity(ctx.recipient):
            raise ConstraintViolation(f"Unknown recipient: {ctx.recipient}")
        with self._session_lock:
            if self._recording_session is not None:
                raise AlreadyCapturing("Another recording is in progress")
            self.recorder.clear_buffer()
            self.recorder.start_capture()
            self._recording_session = ctx
        console.print(f"[dim]Recording for {ctx.recipient[:12]}…[/dim]")

    def stop_recording(self, ctx: SessionContext) -> int:
        """
        Stop capturing and deliver the recording to the recipient's mailbox.

        Whatever was captured before a device error is still delivered.

        Returns:
            Row id of the stored message.

        Raises:
            NoCounterpartSelected: If the caller is not the one recording.
            ConstraintViolation: If the recipient has never made contact. The
                captured audio is kept in the recorder in that case.
        """
        with self._session_lock:
            active = self._recording_session
            if active is None or active.identity != ctx.identity:
                raise NoCounterpartSelected("No recording in progress for this caller")
            self._recording_session = None

        result: CaptureResult = self.recorder.stop_capture()
        if not result.ok:
            console.print(f"[yellow]Recording ended early: {result.error}[/yellow]")

        payload = compress(self.recorder.snapshot(), level=self.config.codec.compress_level)
        message_id = self.store.enqueue(
            owner=active.recipient,
            sender=active.identity,
            recipient=active.recipient,
            payload=payload,
        )
        self.recorder.clear_buffer()
        console.print(f"[green]Message {message_id} stored ({result.bytes_captured} bytes of audio)[/green]")
        return message_id

    def record_until_enter(self, ctx: SessionContext) -> int:
        """
        Record a message until user presses Enter, then deliver it.

        Returns:
            Row id of the stored message.
        """
        console.input("🎤 Press Enter to start recording, then press Enter again to stop.")
        self.start_recording(ctx)
        input()  # Wait for user to press Enter again
        return self.stop_recording(ctx)

    def play_message(self, ctx: SessionContext) -> Delivery | None:
        """
        Consume and play the oldest message from the caller's selected sender.

        Returns:
            Delivery describing decode and playback outcome, or None if the
            mailbox holds nothing from that sender.

        Raises:
            NoCounterpartSelected: If no sender was selected.
        """
        if ctx.sender is None:
            raise NoCounterpartSelected("Select a sender before playing")
        self.register(ctx)

        payload = self.store.pop_payload(ctx.identity, ctx.sender)
        if payload is None:
            return None

        decoded = decode_payload(payload)
        playback = self.player.play_and_close(decoded.data)
        return Delivery(sender=ctx.sender, decoded=decoded, playback=playback)

    def stop_audio(self) -> None:
        self.player.stop_playback()

    def close(self) -> None:
        """Stop any capture or playback and close the store."""
        if self._recording_session is not None:
            self.recorder.stop_capture()
            self._recording_session = None
        self.player.stop_playback()
        self.store.close()
