# tests/property/core/test_codec_properties.py
"""Property-based tests for ByteCodec.

Single-byte encodings relate every byte string to exactly one text and back,
so conversions through them must never lose information.
"""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from asynctable.core.codec import DEFAULT_CHARSET, ByteCodec

# Candidates are filtered through the codec itself, so the list stays valid
# whatever the interpreter's codec table holds.
SINGLE_BYTE_ENCODINGS = [
    name
    for name in ("iso-8859-1", "iso-8859-15", "cp437", "koi8-r", "mac-roman", "cp1252", "utf-8")
    if ByteCodec.is_single_byte(name)
]


class TestSingleByteRoundTrip:
    @given(data=st.binary(max_size=256))
    def test_default_charset_is_identity_on_bytes(self, data: bytes) -> None:
        text = ByteCodec.decode(data, DEFAULT_CHARSET)

        assert len(text) == len(data)
        assert ByteCodec.encode(text, DEFAULT_CHARSET) == data
        assert [ord(ch) for ch in text] == list(data)

    @given(data=st.binary(max_size=256), encoding=st.sampled_from(SINGLE_BYTE_ENCODINGS))
    def test_bytes_survive_text_form(self, data: bytes, encoding: str) -> None:
        assert ByteCodec.encode(ByteCodec.decode(data, encoding), encoding) == data

    @given(text=st.text(alphabet=st.characters(max_codepoint=0xFF), max_size=64))
    def test_latin_text_survives_bytes_form(self, text: str) -> None:
        assert ByteCodec.decode(ByteCodec.encode(text, DEFAULT_CHARSET), DEFAULT_CHARSET) == text


class TestMultiByteStability:
    @given(
        text=st.text(alphabet=st.characters(blacklist_categories=("Cs",)), max_size=64),
        encoding=st.sampled_from(["utf-8", "utf-16", "utf-32"]),
    )
    def test_decode_encode_decode_is_stable(self, text: str, encoding: str) -> None:
        decoded = ByteCodec.decode(ByteCodec.encode(text, encoding), encoding)

        assert ByteCodec.decode(ByteCodec.encode(decoded, encoding), encoding) == decoded


class TestCanonicalNames:
    @given(encoding=st.sampled_from(["latin-1", "Latin1", "ISO-8859-1", "iso8859_1", "l1"]))
    def test_aliases_share_one_name(self, encoding: str) -> None:
        assert ByteCodec.canonical_name(encoding) == "iso8859-1"

    def test_utf8_is_not_single_byte(self) -> None:
        assert "utf-8" not in SINGLE_BYTE_ENCODINGS
        assert DEFAULT_CHARSET in SINGLE_BYTE_ENCODINGS
