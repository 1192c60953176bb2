# filename: bit_stream.py

from huffman_errors import BufferUnderflow, CorruptPayload


class BitStream:
    """
    Growable sequence of bits backed by a bytearray.

    Bit ``i`` lives in byte ``i // 8`` under mask ``1 << (i % 8)``, so the
    first bit written is the least significant bit of the first byte.
    Only ``written_bits`` bits are significant; anything past them in the
    last byte is ignored.
    """

    def __init__(self, capacity=0):
        if capacity < 0:
            raise ValueError("capacity must be non-negative")
        # Reserved bytes stay zero so that appending a 0 bit needs no write
        self._buf = bytearray((capacity + 7) // 8)
        self._written = 0

    @classmethod
    def from_bytes(cls, data, written_bits):
        """Load a stream for reading, ``written_bits`` of which are significant."""
        if written_bits < 0:
            raise CorruptPayload(f"negative bit count {written_bits}")
        if written_bits > len(data) * 8:
            raise CorruptPayload(
                f"{written_bits} bits declared but payload holds only {len(data) * 8}"
            )
        stream = cls()
        stream._buf = bytearray(data)
        stream._written = written_bits
        return stream

    @property
    def written_bits(self):
        return self._written

    @property
    def capacity(self):
        """Number of bits the stream can hold before it has to grow."""
        return len(self._buf) * 8

    def append_bit(self, bit):
        index, depth = divmod(self._written, 8)
        if index >= len(self._buf):
            self._buf.append(0)
        if bit:
            self._buf[index] |= 1 << depth
        else:
            # Reserved storage is zeroed, but a stream loaded with from_bytes
            # or shrunk by remove_last_bit can hold stale ones
            self._buf[index] &= ~(1 << depth) & 0xFF
        self._written += 1

    def remove_last_bit(self):
        if self._written == 0:
            raise BufferUnderflow()
        self._written -= 1
        index, depth = divmod(self._written, 8)
        return bool(self._buf[index] & (1 << depth))

    def reverse(self):
        """Reorder the written bits back to front in place."""
        total = self._written
        scratch = bytearray((total + 7) // 8)
        buf = self._buf
        for out_bit in range(total):
            src_bit = total - 1 - out_bit
            if buf[src_bit >> 3] & (1 << (src_bit & 7)):
                scratch[out_bit >> 3] |= 1 << (out_bit & 7)
        buf[:len(scratch)] = scratch

    def to_bytes(self):
        """Pack the written bits into ceil(written_bits / 8) bytes."""
        size = (self._written + 7) // 8
        out = bytearray(self._buf[:size])
        tail = self._written % 8
        if tail:
            out[-1] &= (1 << tail) - 1
        return bytes(out)

    def __len__(self):
        return self._written

    def __iter__(self):
        buf = self._buf
        for i in range(self._written):
            yield bool(buf[i >> 3] & (1 << (i & 7)))

    def __eq__(self, other):
        if not isinstance(other, BitStream):
            return NotImplemented
        return self._written == other._written and self.to_bytes() == other.to_bytes()

    __hash__ = None

    def __repr__(self):
        bits = "".join("1" if b else "0" for b in self)
        if len(bits) > 64:
            bits = bits[:64] + "..."
        return f"BitStream(written_bits={self._written}, bits={bits!r})"
