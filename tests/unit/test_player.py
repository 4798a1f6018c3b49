"""Unit tests for voicedrop.audio.player."""

from unittest.mock import patch

import numpy as np
import pytest

from voicedrop.audio.player import AudioPlayer
from voicedrop.audio.types import PlaybackState
from voicedrop.core.errors import DeviceIOError, DeviceUnavailable


class TestStartStopPlayback:
    def test_start_opens_output_line(self, mock_sd):
        player = AudioPlayer()
        with patch("voicedrop.audio.player.sd", mock_sd):
            player.start_playback()
        mock_sd.OutputStream.assert_called_once_with(
            samplerate=16000, channels=1, dtype="int16", device=None
        )
        mock_sd.OutputStream.return_value.start.assert_called_once()
        assert player.state is PlaybackState.OPEN

    def test_start_twice_keeps_single_line(self, mock_sd):
        player = AudioPlayer()
        with patch("voicedrop.audio.player.sd", mock_sd):
            player.start_playback()
            player.start_playback()
        assert mock_sd.OutputStream.call_count == 1

    def test_stop_closes_and_is_idempotent(self, mock_sd):
        player = AudioPlayer()
        with patch("voicedrop.audio.player.sd", mock_sd):
            player.start_playback()
            player.stop_playback()
            player.stop_playback()
        mock_sd.OutputStream.return_value.close.assert_called_once()
        assert player.state is PlaybackState.IDLE

    def test_no_device_raises(self, mock_sd):
        mock_sd.OutputStream.side_effect = mock_sd.PortAudioError("no output")
        player = AudioPlayer()
        with patch("voicedrop.audio.player.sd", mock_sd):
            with pytest.raises(DeviceUnavailable):
                player.start_playback()
        assert player.state is PlaybackState.IDLE


class TestPlay:
    def test_play_opens_line_and_writes_samples(self, mock_sd, tone_pcm):
        player = AudioPlayer()
        with patch("voicedrop.audio.player.sd", mock_sd):
            result = player.play(tone_pcm)
        written = mock_sd.OutputStream.return_value.write.call_args[0][0]
        assert written.shape == (16000, 1)
        assert written.tobytes() == tone_pcm
        assert result.ok
        assert result.bytes_written == len(tone_pcm)
        assert player.state is PlaybackState.OPEN

    def test_odd_trailing_byte_dropped(self, mock_sd):
        player = AudioPlayer()
        with patch("voicedrop.audio.player.sd", mock_sd):
            result = player.play(b"\x01\x00\x02\x00\x03")
        written = mock_sd.OutputStream.return_value.write.call_args[0][0]
        np.testing.assert_array_equal(written.ravel(), [1, 2])
        assert result.bytes_written == 4

    def test_empty_data_writes_nothing(self, mock_sd):
        player = AudioPlayer()
        with patch("voicedrop.audio.player.sd", mock_sd):
            result = player.play(b"")
        mock_sd.OutputStream.return_value.write.assert_not_called()
        assert result.ok
        assert result.bytes_written == 0

    def test_write_error_reported_without_state_change(self, mock_sd):
        mock_sd.OutputStream.return_value.write.side_effect = mock_sd.PortAudioError("underflow")
        player = AudioPlayer()
        with patch("voicedrop.audio.player.sd", mock_sd):
            result = player.play(b"\x00\x00")
        assert isinstance(result.error, DeviceIOError)
        assert not result.ok
        assert player.state is PlaybackState.OPEN

    def test_missing_device_reported(self, mock_sd):
        mock_sd.OutputStream.side_effect = mock_sd.PortAudioError("no output")
        player = AudioPlayer()
        with patch("voicedrop.audio.player.sd", mock_sd):
            result = player.play(b"\x00\x00")
        assert isinstance(result.error, DeviceUnavailable)
        assert result.bytes_written == 0

    def test_play_and_close(self, mock_sd):
        player = AudioPlayer()
        call_order = []
        stream = mock_sd.OutputStream.return_value
        stream.write.side_effect = lambda *args: call_order.append("write")
        stream.stop.side_effect = lambda: call_order.append("stop")
        stream.close.side_effect = lambda: call_order.append("close")
        with patch("voicedrop.audio.player.sd", mock_sd):
            result = player.play_and_close(b"\x00\x00" * 10)
        assert call_order == ["write", "stop", "close"]
        assert result.ok
        assert player.state is PlaybackState.IDLE
