"""Exception hierarchy shared by the filter, its parameters and the codecs."""

from typing import Any


class BloomFilterError(Exception):
    """Base class for every error raised by ``bloomcore``."""


class FilterParameterError(BloomFilterError, ValueError):
    """A construction argument is outside its valid range."""

    def __init__(self, argument: str, value: Any, message: str) -> None:
        super().__init__(f"{message} (got {argument}={value!r})")
        self.argument = argument
        self.value = value


class CodecError(BloomFilterError, RuntimeError):
    """Encoding or decoding a bit vector failed."""


class CompressionError(CodecError):
    """The compressor could not produce a payload."""


class DecompressionError(CodecError):
    """A payload is malformed or disagrees with its declared length."""
