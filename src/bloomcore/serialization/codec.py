"""Compact wire format for bit vectors.

A vector is carried as ``{"b": payload, "l": length}``. Vectors shorter than
:data:`COMPRESS_THRESHOLD` bits keep their packed bytes as-is; longer ones are
Brotli-compressed. The reader tells the two apart from ``l`` alone.
"""

from typing import Iterable, List

import brotli
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from bloomcore.errors import CompressionError, DecompressionError
from bloomcore.filter import Filter, packed_length

COMPRESS_THRESHOLD = 257
BROTLI_QUALITY = 11
BROTLI_WINDOW = 24


class BitVectorPayload(BaseModel):
    """Serialized bit vector. ``payload`` is base64 when rendered as JSON."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    payload: bytes = Field(alias="b")
    length: int = Field(alias="l", ge=0)

    @property
    def compressed(self) -> bool:
        return is_compressed(self.length)


def is_compressed(length: int) -> bool:
    return length >= COMPRESS_THRESHOLD


def pack_bits(bits: Iterable[bool]) -> bytes:
    """Pack booleans LSB-first: bit ``i`` lands in byte ``i // 8``, bit ``i % 8``."""
    packed = bytearray()
    for index, bit in enumerate(bits):
        if index % 8 == 0:
            packed.append(0)
        if bit:
            packed[-1] |= 1 << (index % 8)
    return bytes(packed)


def unpack_bits(packed: bytes, length: int) -> List[bool]:
    """Inverse of :func:`pack_bits`; pads with False past the end of ``packed``."""
    bits: List[bool] = []
    for index in range(length):
        byte_index = index >> 3
        byte = packed[byte_index] if byte_index < len(packed) else 0
        bits.append(bool(byte & (1 << (index & 7))))
    return bits


def _fit(packed: bytes, length: int) -> bytes:
    # Truncate or zero-pad to ceil(length / 8) bytes and clear padding bits.
    size = packed_length(length)
    fitted = bytearray(packed[:size])
    fitted.extend(bytes(size - len(fitted)))
    tail = length % 8
    if tail and fitted:
        fitted[-1] &= (1 << tail) - 1
    return bytes(fitted)


def encode_bits(packed: bytes, length: int) -> BitVectorPayload:
    """Wrap ``length`` packed bits into a wire payload."""
    value = _fit(packed, length)
    if not is_compressed(length):
        return BitVectorPayload(payload=value, length=length)

    try:
        compressed = brotli.compress(value, quality=BROTLI_QUALITY, lgwin=BROTLI_WINDOW)
    except brotli.error as exc:
        logger.warning("Brotli compression of {} bits failed: {}", length, exc)
        raise CompressionError(f"cannot compress {length}-bit vector") from exc

    logger.debug("Compressed {}-bit vector from {}B to {}B", length, len(value), len(compressed))
    return BitVectorPayload(payload=compressed, length=length)


def decode_bits(wire: BitVectorPayload) -> bytes:
    """Return exactly ``ceil(l / 8)`` packed bytes; bits past ``l`` are zero."""
    if not wire.compressed:
        return _fit(wire.payload, wire.length)

    expected = packed_length(wire.length)
    decompressor = brotli.Decompressor()
    try:
        # One byte past the vector size is enough to detect an oversized payload.
        value = decompressor.process(wire.payload, output_buffer_limit=expected + 1)
    except brotli.error as exc:
        logger.warning("Brotli payload for {}-bit vector is malformed: {}", wire.length, exc)
        raise DecompressionError(f"unable to decompress {wire.length}-bit vector") from exc

    if len(value) > expected:
        raise DecompressionError(
            f"payload inflates past the {expected}B a {wire.length}-bit vector holds"
        )
    if not decompressor.is_finished():
        raise DecompressionError(f"payload for {wire.length}-bit vector is truncated")
    return _fit(value, wire.length)


def encode_filter(bloom: Filter) -> BitVectorPayload:
    """Encode the filter's current bits; the snapshot is taken under its lock."""
    return encode_bits(bloom.bits, bloom.capacity)


def decode_filter(wire: BitVectorPayload, hash_count: int) -> Filter:
    """Rebuild a filter whose capacity is the payload's bit length."""
    return Filter.from_bits(decode_bits(wire), wire.length, hash_count)
