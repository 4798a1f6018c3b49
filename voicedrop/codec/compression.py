"""Gzip + base64 payload codec.

Payloads are a gzip container (DEFLATE) wrapped in standard base64 so they
fit a TEXT column. The header timestamp is pinned to zero, making
``compress`` deterministic for a given input and level.

Neither direction raises on bad data. ``compress`` falls back to plain
base64 of the raw bytes, and ``decode_payload`` reports how far decoding
got through ``DecodeStatus``. The raw fallback carries no marker, so such a
payload decodes as ``DEGRADED`` with the original bytes.
"""

from __future__ import annotations

import base64
import binascii
import gzip
import zlib
from dataclasses import dataclass
from enum import Enum

from rich.console import Console

from voicedrop.core.errors import CodecFailure

console = Console()


class DecodeStatus(Enum):
    OK = "ok"
    DEGRADED = "degraded"  # base64 decoded, inflate failed
    FAILED = "failed"  # not valid base64


@dataclass(frozen=True)
class DecodeResult:
    data: bytes
    status: DecodeStatus
    error: CodecFailure | None = None

    @property
    def ok(self) -> bool:
        return self.status is DecodeStatus.OK


def compress(data: bytes, level: int = 9) -> str:
    """
    Compress raw audio into a text-safe payload.

    Args:
        data: Raw bytes, possibly empty.
        level: Gzip compression level (0-9).

    Returns:
        Base64 text of the gzip stream, or of *data* itself if compression failed.
    """
    try:
        packed = gzip.compress(bytes(data), compresslevel=level, mtime=0)
    except (OSError, ValueError, zlib.error) as e:
        console.print(f"[yellow]Compression failed, storing raw audio: {e}[/yellow]")
        packed = bytes(data)
    return base64.b64encode(packed).decode("ascii")


def decode_payload(text: str) -> DecodeResult:
    """
    Decode a payload produced by :func:`compress`.

    Args:
        text: Base64 payload text.

    Returns:
        DecodeResult whose ``status`` tells a clean decode from a degraded
        (still-compressed bytes) or failed (empty bytes) one.
    """
    try:
        decoded = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        console.print(f"[red]Payload is not valid base64: {e}[/red]")
        return DecodeResult(b"", DecodeStatus.FAILED, CodecFailure(f"Malformed payload text: {e}"))

    try:
        return DecodeResult(gzip.decompress(decoded), DecodeStatus.OK)
    except (OSError, EOFError, zlib.error) as e:
        console.print(f"[yellow]Payload could not be inflated, returning decoded bytes: {e}[/yellow]")
        return DecodeResult(decoded, DecodeStatus.DEGRADED, CodecFailure(f"Corrupt compressed stream: {e}"))


def decompress(text: str) -> bytes:
    """Best-effort inverse of :func:`compress`; never raises."""
    return decode_payload(text).data
