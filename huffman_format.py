# filename: huffman_format.py

import struct

from huffman_errors import CorruptPayload, TruncatedPayload

# Layout (all little-endian):
# entry_count(i32)
# entry_count x [symbol(u16 UTF-16 code unit) frequency(i32)]   in first-seen order
# text_length(i32)                                              code units in the text
# written_bits(u64)                                             significant payload bits
# payload                                                       rest of the buffer
ENTRY_COUNT = struct.Struct("<i")
ENTRY = struct.Struct("<Hi")
TEXT_LENGTH = struct.Struct("<i")
WRITTEN_BITS = struct.Struct("<Q")

TEXT_CODEC = "utf-16-le"
TEXT_ERRORS = "surrogatepass"
CODE_UNIT_SIZE = 2

INT32_MAX = 2 ** 31 - 1

# Header of the empty text: no entries, no code units, no bits
EMPTY_HEADER_SIZE = ENTRY_COUNT.size + TEXT_LENGTH.size + WRITTEN_BITS.size


def to_symbols(text):
    """Split text into UTF-16 code units, one single-character string each."""
    raw = text.encode(TEXT_CODEC, TEXT_ERRORS)
    return [chr(unit) for unit in struct.unpack(f"<{len(raw) // CODE_UNIT_SIZE}H", raw)]


def from_symbols(symbols):
    raw = struct.pack(f"<{len(symbols)}H", *map(ord, symbols))
    return raw.decode(TEXT_CODEC, TEXT_ERRORS)


def header_size(entry_count):
    return EMPTY_HEADER_SIZE + entry_count * ENTRY.size


def write_header(buf, frequency_table, text_length, written_bits):
    if len(frequency_table) > INT32_MAX:
        raise OverflowError(f"{len(frequency_table)} entries do not fit the entry count field")
    if text_length > INT32_MAX:
        raise OverflowError(f"text of {text_length} code units is too long for the length field")

    entries = []
    for symbol, frequency in frequency_table.items():
        code = ord(symbol)
        if code > 0xFFFF:
            raise ValueError(f"symbol {symbol!r} is not a single UTF-16 code unit")
        if frequency > INT32_MAX:
            raise OverflowError(f"frequency {frequency} of {symbol!r} does not fit the entry field")
        entries.append(ENTRY.pack(code, frequency))

    # Nothing reaches buf until every field is known to fit
    buf += ENTRY_COUNT.pack(len(frequency_table))
    for entry in entries:
        buf += entry
    buf += TEXT_LENGTH.pack(text_length)
    buf += WRITTEN_BITS.pack(written_bits)
    return buf


def _read(layout, data, offset, field):
    available = len(data) - offset
    if available < layout.size:
        raise TruncatedPayload(field, layout.size, available)
    return layout.unpack_from(data, offset), offset + layout.size


def read_header(data):
    """
    Parse the header at the start of ``data``.

    Returns ``(frequency_table, text_length, written_bits, offset)`` where
    ``offset`` is where the packed payload begins.
    """
    (entry_count,), offset = _read(ENTRY_COUNT, data, 0, "entry_count")
    if entry_count < 0:
        raise CorruptPayload(f"negative entry count {entry_count}")

    frequency_table = {}
    for index in range(entry_count):
        (code, frequency), offset = _read(ENTRY, data, offset, f"entries[{index}]")
        symbol = chr(code)
        if symbol in frequency_table:
            raise CorruptPayload(f"symbol {symbol!r} listed twice in the frequency table")
        if frequency <= 0:
            raise CorruptPayload(f"non-positive frequency {frequency} for symbol {symbol!r}")
        frequency_table[symbol] = frequency

    (text_length,), offset = _read(TEXT_LENGTH, data, offset, "text_length")
    if text_length < 0:
        raise CorruptPayload(f"negative text length {text_length}")

    (written_bits,), offset = _read(WRITTEN_BITS, data, offset, "written_bits")

    payload_bytes = (written_bits + 7) // 8
    available = len(data) - offset
    if available < payload_bytes:
        raise TruncatedPayload("payload", payload_bytes, available)

    return frequency_table, text_length, written_bits, offset
