"""JSON documents holding a whole filter: its parameters plus its bits.

Two flavours are supported for the ``HashBits`` field:

* the compact wire payload ``{"b": <base64>, "l": <bits>}`` (default);
* a plain ``"0101..."`` string with one character per bit, handy when a
  human needs to read the vector.
"""

from typing import Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from bloomcore.errors import DecompressionError
from bloomcore.filter import Filter
from bloomcore.serialization.codec import (
    BitVectorPayload,
    decode_bits,
    encode_filter,
    pack_bits,
    unpack_bits,
)


class FilterDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    capacity: int = Field(alias="Capacity", ge=1)
    hashes: int = Field(alias="Hashes", ge=1)
    expected_elements: int = Field(alias="ExpectedElements", ge=1)
    error_rate: float = Field(alias="ErrorRate", gt=0.0, lt=1.0)
    hash_bits: Union[BitVectorPayload, str] = Field(alias="HashBits")


def bits_to_string(bloom: Filter) -> str:
    return "".join("1" if bit else "0" for bit in bloom.to_bits())


def bits_from_string(text: str) -> bytes:
    if set(text) - {"0", "1"}:
        raise DecompressionError("bit string may only contain '0' and '1'")
    return pack_bits(char == "1" for char in text)


def to_document(bloom: Filter, *, string_bits: bool = False) -> FilterDocument:
    hash_bits: Union[BitVectorPayload, str]
    hash_bits = bits_to_string(bloom) if string_bits else encode_filter(bloom)
    return FilterDocument(
        capacity=bloom.capacity,
        hashes=bloom.hash_count,
        expected_elements=bloom.expected_elements,
        error_rate=bloom.error_rate,
        hash_bits=hash_bits,
    )


def from_document(document: FilterDocument) -> Filter:
    if isinstance(document.hash_bits, str):
        length = len(document.hash_bits)
        packed = bits_from_string(document.hash_bits)
    else:
        length = document.hash_bits.length
        packed = decode_bits(document.hash_bits)

    if length != document.capacity:
        raise DecompressionError(
            f"bit vector holds {length} bits but the filter capacity is {document.capacity}"
        )

    return Filter.from_bits(
        packed,
        document.capacity,
        document.hashes,
        expected_elements=document.expected_elements,
        error_rate=document.error_rate,
    )


def dumps(bloom: Filter, *, string_bits: bool = False) -> str:
    """Render ``bloom`` as a JSON document."""
    text = to_document(bloom, string_bits=string_bits).model_dump_json(by_alias=True)
    logger.debug("Serialized {} into {} characters", bloom, len(text))
    return text


def loads(text: str) -> Filter:
    """Parse a document produced by :func:`dumps`."""
    return from_document(FilterDocument.model_validate_json(text))
