"""Text encoding detection and decoding.

Detection only ever inspects the head of a file (``DETECTION_SAMPLE_BYTES``),
so a file decoded in one piece and the same file decoded chunk by chunk
always end up with the same codec. Statistical detection is delegated to
charset-normalizer; BOMs, binary content and plain ASCII/UTF-8 are
recognised before it runs.
"""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass
from typing import Tuple

from charset_normalizer import from_bytes

LOGGER = logging.getLogger(__name__)

DETECTION_SAMPLE_BYTES = 64 * 1024
BINARY_SNIFF_BYTES = 2048

ASCII_LABEL = "ASCII"
UTF8_LABEL = "UTF-8"
BINARY_LABEL = "Binary"
UNKNOWN_LABEL = "unknown"

# UTF-32 BOMs must be checked before UTF-16 ones: FF FE 00 00 starts with FF FE.
_BOMS: Tuple[Tuple[bytes, str, str], ...] = (
    (codecs.BOM_UTF8, UTF8_LABEL, "utf-8-sig"),
    (codecs.BOM_UTF32_LE, "UTF-32LE", "utf-32"),
    (codecs.BOM_UTF32_BE, "UTF-32BE", "utf-32"),
    (codecs.BOM_UTF16_LE, "UTF-16LE", "utf-16"),
    (codecs.BOM_UTF16_BE, "UTF-16BE", "utf-16"),
)

_LABELS = {
    "ascii": ASCII_LABEL,
    "utf_8": UTF8_LABEL,
    "utf_16_le": "UTF-16LE",
    "utf_16_be": "UTF-16BE",
    "gb2312": "GB2312",
    "gbk": "GBK",
    "gb18030": "GB18030",
    "big5": "Big5",
    "shift_jis": "Shift_JIS",
    "euc_kr": "EUC-KR",
    "cp1252": "windows-1252",
    "cp1251": "windows-1251",
    "latin_1": "ISO-8859-1",
}

# Decode GB2312/GBK text with GB18030, a strict superset of both.
_CODEC_UPGRADES = {"gb2312": "gb18030", "gbk": "gb18030"}


@dataclass(frozen=True, slots=True)
class EncodingGuess:
    label: str
    codec: str

    @property
    def is_binary(self) -> bool:
        return self.label == BINARY_LABEL


def _looks_like_utf8(sample: bytes) -> bool:
    decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
    try:
        # final=False tolerates a multi-byte sequence cut at the sample edge
        decoder.decode(sample, final=False)
    except UnicodeDecodeError:
        return False
    return True


def _usable_codec(name: str) -> str:
    try:
        return codecs.lookup(name).name
    except LookupError:
        LOGGER.debug("No codec named %s, falling back to UTF-8", name)
        return "utf-8"


def detect_encoding(sample: bytes) -> EncodingGuess:
    """Classify the head of a file into an encoding label and codec."""
    sample = sample[:DETECTION_SAMPLE_BYTES]
    if not sample:
        return EncodingGuess(ASCII_LABEL, "utf-8")

    for bom, label, codec in _BOMS:
        if sample.startswith(bom):
            return EncodingGuess(label, codec)

    if b"\x00" in sample[:BINARY_SNIFF_BYTES]:
        return EncodingGuess(BINARY_LABEL, "utf-8")

    if sample.isascii():
        # Decode as UTF-8 so non-ASCII bytes past the sample still come out right
        return EncodingGuess(ASCII_LABEL, "utf-8")

    if _looks_like_utf8(sample):
        return EncodingGuess(UTF8_LABEL, "utf-8")

    best = from_bytes(sample).best()
    if best is None:
        return EncodingGuess(UNKNOWN_LABEL, "utf-8")

    detected = best.encoding
    label = _LABELS.get(detected, detected.upper().replace("_", "-"))
    codec = _usable_codec(_CODEC_UPGRADES.get(detected, detected))
    return EncodingGuess(label, codec)


def decode(data: bytes, guess: EncodingGuess) -> str:
    """Decode ``data``; invalid sequences become U+FFFD instead of raising."""
    if guess.is_binary:
        return ""
    return data.decode(guess.codec, errors="replace")


def incremental_decoder(guess: EncodingGuess) -> codecs.IncrementalDecoder:
    return codecs.getincrementaldecoder(guess.codec)(errors="replace")


def detect_and_decode(data: bytes) -> tuple[str, str]:
    """Return the decoded text of ``data`` and its encoding label."""
    guess = detect_encoding(data[:DETECTION_SAMPLE_BYTES])
    return decode(data, guess), guess.label
