"""Tests for encoding detection and decoding."""

from __future__ import annotations

import codecs
from unittest.mock import MagicMock, patch

import pytest

from modsearch.ingestion.encoding import (
    DETECTION_SAMPLE_BYTES,
    EncodingGuess,
    decode,
    detect_and_decode,
    detect_encoding,
    incremental_decoder,
)


class TestDetectEncoding:
    """Test detect_encoding heuristics."""

    def test_empty(self) -> None:
        assert detect_encoding(b"") == EncodingGuess("ASCII", "utf-8")

    def test_ascii(self) -> None:
        assert detect_encoding(b'"hostname" "my server"\n').label == "ASCII"

    def test_utf8(self) -> None:
        guess = detect_encoding("sv_hostname \"Café ☕\"\n".encode("utf-8"))
        assert guess == EncodingGuess("UTF-8", "utf-8")

    @pytest.mark.parametrize(
        ("bom", "label"),
        [
            (codecs.BOM_UTF8, "UTF-8"),
            (codecs.BOM_UTF16_LE, "UTF-16LE"),
            (codecs.BOM_UTF16_BE, "UTF-16BE"),
            (codecs.BOM_UTF32_LE, "UTF-32LE"),
            (codecs.BOM_UTF32_BE, "UTF-32BE"),
        ],
    )
    def test_bom_sniffing(self, bom: bytes, label: str) -> None:
        assert detect_encoding(bom + b"x").label == label

    def test_binary(self) -> None:
        guess = detect_encoding(b"VTF\x00\x07\x00\x00\x00")
        assert guess.label == "Binary"
        assert guess.is_binary

    def test_utf8_cut_at_sample_edge(self) -> None:
        """A multi-byte sequence split by the sample boundary is still UTF-8."""
        data = b"a" * (DETECTION_SAMPLE_BYTES - 1) + "é".encode("utf-8")
        assert detect_encoding(data[:DETECTION_SAMPLE_BYTES]).label == "UTF-8"

    @patch("modsearch.ingestion.encoding.from_bytes")
    def test_statistical_detection_label_and_codec(self, mock_from_bytes: MagicMock) -> None:
        """GB2312 keeps its label but decodes with GB18030."""
        mock_from_bytes.return_value.best.return_value.encoding = "gb2312"

        guess = detect_encoding(b"\xd6\xd0\xce\xc4\xb2\xe2\xca\xd4")

        assert guess.label == "GB2312"
        assert guess.codec == "gb18030"

    @patch("modsearch.ingestion.encoding.from_bytes")
    def test_unrecognised_falls_back_to_utf8(self, mock_from_bytes: MagicMock) -> None:
        mock_from_bytes.return_value.best.return_value = None

        guess = detect_encoding(b"\xff\x80\x81 stuff")

        assert guess == EncodingGuess("unknown", "utf-8")

    @patch("modsearch.ingestion.encoding.from_bytes")
    def test_unmapped_encoding_label(self, mock_from_bytes: MagicMock) -> None:
        mock_from_bytes.return_value.best.return_value.encoding = "cp1250"

        guess = detect_encoding(b"\x8a\x9a\x8e\x9e text")

        assert guess.label == "CP1250"
        assert guess.codec == "cp1250"


class TestDecode:
    """Test decoding helpers."""

    def test_detect_and_decode_utf8(self) -> None:
        text, label = detect_and_decode("ünïcödé\n".encode("utf-8"))
        assert text == "ünïcödé\n"
        assert label == "UTF-8"

    def test_bom_is_stripped(self) -> None:
        text, label = detect_and_decode(codecs.BOM_UTF8 + b"abc")
        assert text == "abc"
        assert label == "UTF-8"

    def test_utf16le_with_bom(self) -> None:
        text, label = detect_and_decode(codecs.BOM_UTF16_LE + "foo\nbar".encode("utf-16-le"))
        assert text == "foo\nbar"
        assert label == "UTF-16LE"

    def test_utf16be_with_bom(self) -> None:
        text, _ = detect_and_decode(codecs.BOM_UTF16_BE + "foo".encode("utf-16-be"))
        assert text == "foo"

    def test_binary_decodes_to_empty(self) -> None:
        assert detect_and_decode(b"\x00\x01\x02foo") == ("", "Binary")

    def test_ascii_sample_non_ascii_tail(self) -> None:
        """Bytes past the detection sample still decode as UTF-8."""
        data = b"a" * DETECTION_SAMPLE_BYTES + "é".encode("utf-8")
        text, label = detect_and_decode(data)
        assert label == "ASCII"
        assert text.endswith("é")

    def test_malformed_input_never_raises(self) -> None:
        text, label = detect_and_decode(b"ok \xc3\x28 tail \xa0\xa1")
        assert isinstance(text, str)
        assert isinstance(label, str)

    def test_invalid_bytes_replaced(self) -> None:
        text = decode(b"abc\xffdef", EncodingGuess("UTF-8", "utf-8"))
        assert text == "abc\ufffddef"

    def test_incremental_decoder_handles_split_sequences(self) -> None:
        decoder = incremental_decoder(EncodingGuess("UTF-8", "utf-8"))
        data = "é".encode("utf-8")
        assert decoder.decode(data[:1]) == ""
        assert decoder.decode(data[1:], final=True) == "é"
