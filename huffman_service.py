# filename: huffman_service.py

import logging
from dataclasses import dataclass
from typing import Optional

from bit_stream import BitStream
from huffman_core import HuffmanLogic, HuffmanTree, build_frequency_table
from huffman_errors import CorruptPayload
from huffman_format import (
    CODE_UNIT_SIZE,
    from_symbols,
    read_header,
    to_symbols,
    write_header,
)

logger = logging.getLogger(__name__)


def serialize_text(text: str) -> bytes:
    """
    Compress ``text`` into a self-describing Huffman payload.

    The frequency table travels in the header so the decoder can rebuild
    the exact same tree. The empty string becomes a bare header with no
    entries, no length and no bits.
    """
    symbols = to_symbols(text)
    frequency_table = build_frequency_table(symbols)
    out = bytearray()

    if not frequency_table:
        write_header(out, frequency_table, 0, 0)
        logger.debug("serialized empty text into %d header bytes", len(out))
        return bytes(out)

    tree = HuffmanTree(frequency_table)
    stream = tree.encode(symbols, BitStream(capacity=len(symbols) * 8))
    payload = stream.to_bytes()

    write_header(out, frequency_table, len(symbols), stream.written_bits)
    header_bytes = len(out)
    out += payload
    logger.debug(
        "serialized %d code units: %d entries, %d bits, %d header + %d payload bytes",
        len(symbols), len(frequency_table), stream.written_bits, header_bytes, len(payload),
    )
    return bytes(out)


def deserialize_text(data) -> str:
    """Rebuild the text written by :func:`serialize_text`."""
    data = bytes(data)
    frequency_table, text_length, written_bits, offset = read_header(data)

    if not frequency_table:
        if text_length or written_bits:
            raise CorruptPayload(
                f"empty frequency table with text_length={text_length}, written_bits={written_bits}"
            )
        return ""

    total = sum(frequency_table.values())
    if total != text_length:
        raise CorruptPayload(f"frequencies add up to {total} but text_length is {text_length}")

    payload_bytes = (written_bits + 7) // 8
    if len(data) - offset > payload_bytes:
        logger.warning("ignoring %d trailing byte(s) after the payload",
                       len(data) - offset - payload_bytes)
    logger.debug("deserializing %d code units: %d entries, %d bits",
                 text_length, len(frequency_table), written_bits)

    tree = HuffmanTree(frequency_table)

    if tree.root.is_leaf:
        # One distinct symbol: every path is empty, so text_length alone sizes the
        # output. A header can ask for up to 2**31 - 1 code units; payloads are trusted.
        if written_bits:
            raise CorruptPayload(f"{written_bits} bits present for a single-symbol tree")
        return from_symbols([tree.root.symbol] * text_length)

    stream = BitStream.from_bytes(data[offset:offset + payload_bytes], written_bits)
    # Bits come off the end of the stream, so flip it to read them in write order
    stream.reverse()

    symbols = []
    while stream.written_bits > 0:
        if len(symbols) == text_length:
            raise CorruptPayload(f"{stream.written_bits} bit(s) left after {text_length} code units")
        symbols.append(tree.decode_symbol(stream))

    if len(symbols) != text_length:
        raise CorruptPayload(f"decoded {len(symbols)} code units, header says {text_length}")
    return from_symbols(symbols)


@dataclass
class CompressionStats:
    original_bytes: int
    compressed_bytes: int
    unique_symbols: int
    written_bits: int

    @property
    def compression_ratio(self) -> Optional[float]:
        if self.original_bytes == 0:
            return None
        return self.compressed_bytes / self.original_bytes

    @property
    def space_saved_percent(self) -> Optional[float]:
        if self.original_bytes == 0:
            return None
        return (self.original_bytes - self.compressed_bytes) / self.original_bytes * 100.0


class HuffmanService:
    def __init__(self):
        self.logic = HuffmanLogic()

    def compress(self, text):
        if not isinstance(text, str):
            raise TypeError(f"compress expects str, got {type(text).__name__}")
        return serialize_text(text)

    def decompress(self, data):
        return deserialize_text(data)

    def code_table(self, text):
        """Return the ``{symbol: bits}`` table ``compress`` would use for ``text``."""
        frequency_table = self.logic.build_frequency_table(to_symbols(text))
        if not frequency_table:
            return {}
        return self.logic.generate_codes(self.logic.build_tree(frequency_table))

    def stats(self, text):
        compressed = self.compress(text)
        frequency_table, text_length, written_bits, _ = read_header(compressed)
        return CompressionStats(
            original_bytes=text_length * CODE_UNIT_SIZE,
            compressed_bytes=len(compressed),
            unique_symbols=len(frequency_table),
            written_bits=written_bits,
        )
