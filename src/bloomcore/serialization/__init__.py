"""Wire codec and JSON documents for persisting filters."""

from bloomcore.serialization.codec import (
    COMPRESS_THRESHOLD,
    BitVectorPayload,
    decode_bits,
    decode_filter,
    encode_bits,
    encode_filter,
    pack_bits,
    unpack_bits,
)
from bloomcore.serialization.document import FilterDocument, dumps, loads

__all__ = [
    "COMPRESS_THRESHOLD",
    "BitVectorPayload",
    "FilterDocument",
    "decode_bits",
    "decode_filter",
    "dumps",
    "encode_bits",
    "encode_filter",
    "loads",
    "pack_bits",
    "unpack_bits",
]
