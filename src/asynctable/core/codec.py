"""Byte/text conversion under named character encodings.

Filters and requests carry raw bytes. Some backend APIs only accept text, so
the adapter needs a single place that knows how to move between the two and
which encodings make that move lossless.

An encoding is round-trip safe here when it is single-byte and maps all 256
byte values: decode(encode(decode(b))) == decode(b) for every byte string b,
and encode(decode(b)) == b as well. ISO-8859-1 is the default because it is
the identity mapping between byte values and the first 256 code points.
"""

from __future__ import annotations

import codecs
from functools import lru_cache

from asynctable.contracts.errors import UnsupportedEncodingError

DEFAULT_CHARSET = "iso-8859-1"

_ALL_BYTES = bytes(range(256))


class ByteCodec:
    """Stateless encoder/decoder keyed by encoding name.

    Every method validates the encoding first and raises
    UnsupportedEncodingError for unknown names and for codecs that do not
    convert between str and bytes (rot13, base64, zlib, ...).

    Example:
        >>> ByteCodec.decode(b"\\xe9t\\xe9", "iso-8859-1")
        'été'
        >>> ByteCodec.encode("été", "latin-1")
        b'\\xe9t\\xe9'
    """

    @staticmethod
    def canonical_name(encoding: str) -> str:
        """Return Python's canonical name for an encoding.

        Raises:
            UnsupportedEncodingError: Unknown identifier or not a text encoding.
        """
        return _canonical_name(encoding)

    @staticmethod
    def encode(text: str, encoding: str, errors: str = "strict") -> bytes:
        """Encode text into bytes under the given encoding."""
        name = _canonical_name(encoding)
        return text.encode(name, errors)

    @staticmethod
    def decode(data: bytes, encoding: str, errors: str = "strict") -> str:
        """Decode bytes into text under the given encoding."""
        name = _canonical_name(encoding)
        return bytes(data).decode(name, errors)

    @staticmethod
    def is_single_byte(encoding: str) -> bool:
        """True when the encoding maps every byte value to exactly one character and back."""
        return _is_single_byte(_canonical_name(encoding))


@lru_cache(maxsize=64)
def _canonical_name(encoding: str) -> str:
    try:
        info = codecs.lookup(encoding)
    except LookupError as e:
        raise UnsupportedEncodingError(encoding) from e
    # Non-text codecs are registered too; str.encode refuses them.
    try:
        "".encode(info.name)
    except LookupError as e:
        raise UnsupportedEncodingError(encoding, "not a text encoding") from e
    return info.name


@lru_cache(maxsize=64)
def _is_single_byte(name: str) -> bool:
    try:
        text = _ALL_BYTES.decode(name)
    except UnicodeDecodeError:
        return False
    if len(text) != len(_ALL_BYTES):
        return False
    try:
        return text.encode(name) == _ALL_BYTES
    except UnicodeEncodeError:
        return False
