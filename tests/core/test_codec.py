# tests/core/test_codec.py
"""Tests for ByteCodec."""

import pytest

from asynctable.contracts.errors import UnsupportedEncodingError
from asynctable.core.codec import DEFAULT_CHARSET, ByteCodec


class TestCanonicalName:
    @pytest.mark.parametrize("alias", ["ISO-8859-1", "latin-1", "latin1", "iso8859_1", "L1"])
    def test_aliases_collapse_to_one_name(self, alias: str) -> None:
        assert ByteCodec.canonical_name(alias) == "iso8859-1"

    def test_default_charset_is_latin1(self) -> None:
        assert ByteCodec.canonical_name(DEFAULT_CHARSET) == "iso8859-1"

    def test_unknown_encoding(self) -> None:
        with pytest.raises(UnsupportedEncodingError) as exc_info:
            ByteCodec.canonical_name("no-such-charset")

        assert exc_info.value.encoding == "no-such-charset"

    @pytest.mark.parametrize("codec", ["rot13", "base64", "zlib", "hex"])
    def test_non_text_codecs_rejected(self, codec: str) -> None:
        with pytest.raises(UnsupportedEncodingError, match="not a text encoding"):
            ByteCodec.canonical_name(codec)


class TestEncodeDecode:
    def test_latin1_maps_bytes_to_code_points(self) -> None:
        assert ByteCodec.decode(b"\xe9t\xe9", "iso-8859-1") == "été"
        assert ByteCodec.encode("été", "latin-1") == b"\xe9t\xe9"

    def test_utf8(self) -> None:
        assert ByteCodec.encode("é", "utf-8") == b"\xc3\xa9"
        assert ByteCodec.decode(b"\xc3\xa9", "UTF8") == "é"

    def test_strict_decode_failure_propagates(self) -> None:
        with pytest.raises(UnicodeDecodeError):
            ByteCodec.decode(b"\xff", "utf-8")

    def test_replace_errors(self) -> None:
        assert ByteCodec.decode(b"a\xffb", "utf-8", errors="replace") == "a�b"

    def test_strict_encode_failure_propagates(self) -> None:
        with pytest.raises(UnicodeEncodeError):
            ByteCodec.encode("€", "iso-8859-1")

    def test_unknown_encoding_on_encode(self) -> None:
        with pytest.raises(UnsupportedEncodingError):
            ByteCodec.encode("x", "bogus")


class TestIsSingleByte:
    @pytest.mark.parametrize("encoding", ["iso-8859-1", "iso-8859-15", "cp437", "koi8-r"])
    def test_full_single_byte_tables(self, encoding: str) -> None:
        assert ByteCodec.is_single_byte(encoding) is True

    @pytest.mark.parametrize("encoding", ["utf-8", "utf-16", "ascii", "cp1252", "shift_jis"])
    def test_not_round_trip_safe(self, encoding: str) -> None:
        assert ByteCodec.is_single_byte(encoding) is False
