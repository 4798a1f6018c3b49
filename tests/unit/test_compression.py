"""Unit tests for voicedrop.codec.compression."""

import base64
import gzip
from unittest.mock import patch

import pytest

from voicedrop.codec.compression import DecodeStatus, compress, decode_payload, decompress
from voicedrop.core.errors import CodecFailure


class TestRoundTrip:
    @pytest.mark.parametrize(
        "data",
        [b"", b"\x00", b"\x00" * 100, bytes(range(256)) * 8],
    )
    def test_round_trip(self, data):
        assert decompress(compress(data)) == data

    def test_round_trip_tone(self, tone_pcm):
        assert decompress(compress(tone_pcm)) == tone_pcm

    def test_empty_input(self):
        result = decode_payload(compress(b""))
        assert result.data == b""
        assert result.status is DecodeStatus.OK


class TestCompress:
    def test_output_is_ascii_text(self, tone_pcm):
        payload = compress(tone_pcm)
        assert isinstance(payload, str)
        payload.encode("ascii")

    def test_deterministic(self, tone_pcm):
        assert compress(tone_pcm) == compress(tone_pcm)

    def test_gzip_container(self):
        raw = base64.b64decode(compress(b"hello"))
        assert raw[:2] == b"\x1f\x8b"
        assert gzip.decompress(raw) == b"hello"

    def test_silence_compresses(self):
        assert len(compress(b"\x00" * 32000)) < 1000

    def test_level_is_honoured(self, tone_pcm):
        assert len(compress(tone_pcm, level=0)) > len(compress(tone_pcm, level=9))

    def test_failure_falls_back_to_raw_base64(self):
        with patch("voicedrop.codec.compression.gzip.compress", side_effect=OSError("boom")):
            payload = compress(b"raw audio")
        assert payload == base64.b64encode(b"raw audio").decode("ascii")


class TestDecodePayload:
    def test_ok(self):
        result = decode_payload(compress(b"abc"))
        assert result.ok
        assert result.error is None

    def test_malformed_text_fails(self):
        result = decode_payload("not base64 at all!")
        assert result.status is DecodeStatus.FAILED
        assert result.data == b""
        assert isinstance(result.error, CodecFailure)

    def test_corrupt_stream_degrades_to_decoded_bytes(self):
        text = base64.b64encode(b"not gzip").decode("ascii")
        result = decode_payload(text)
        assert result.status is DecodeStatus.DEGRADED
        assert result.data == b"not gzip"
        assert isinstance(result.error, CodecFailure)

    def test_raw_fallback_payload_decodes_degraded(self):
        with patch("voicedrop.codec.compression.gzip.compress", side_effect=OSError("boom")):
            payload = compress(b"raw audio")
        result = decode_payload(payload)
        assert result.status is DecodeStatus.DEGRADED
        assert result.data == b"raw audio"

    def test_truncated_stream_degrades(self, tone_pcm):
        raw = base64.b64decode(compress(tone_pcm))
        text = base64.b64encode(raw[: len(raw) // 2]).decode("ascii")
        assert decode_payload(text).status is DecodeStatus.DEGRADED


class TestDecompress:
    def test_never_raises(self):
        assert decompress("%%%") == b""
        assert decompress(base64.b64encode(b"xyz").decode("ascii")) == b"xyz"
