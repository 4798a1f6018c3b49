"""Codec module - text-safe compression of PCM payloads."""

from voicedrop.codec.compression import DecodeResult, DecodeStatus, compress, decode_payload, decompress

__all__ = ["DecodeResult", "DecodeStatus", "compress", "decode_payload", "decompress"]
