# filename: huffman_errors.py

class HuffmanError(ValueError):
    """Base class for every failure raised by the Huffman text codec."""


class EmptyAlphabet(HuffmanError):
    def __init__(self):
        super().__init__("cannot build a Huffman tree from an empty frequency table")


class InvalidFrequency(HuffmanError):
    def __init__(self, symbol, frequency):
        self.symbol = symbol
        self.frequency = frequency
        super().__init__(f"negative frequency {frequency} for symbol {symbol!r}")


class UnknownSymbol(HuffmanError, KeyError):
    def __init__(self, symbol):
        self.symbol = symbol
        super().__init__(f"symbol {symbol!r} is not in the tree")

    # KeyError quotes its argument; keep the plain message
    def __str__(self):
        return self.args[0]


class BufferUnderflow(HuffmanError, IndexError):
    def __init__(self):
        super().__init__("remove from an empty bit stream")


class BufferExhausted(HuffmanError, EOFError):
    def __init__(self, depth):
        self.depth = depth
        super().__init__(f"bit stream ran out {depth} level(s) below the root before reaching a leaf")


class TruncatedPayload(HuffmanError, EOFError):
    def __init__(self, field, needed, available):
        self.field = field
        self.needed = needed
        self.available = available
        super().__init__(
            f"payload truncated while reading {field}: need {needed} byte(s), {available} left"
        )


class CorruptPayload(HuffmanError):
    pass
