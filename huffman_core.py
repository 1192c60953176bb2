# filename: huffman_core.py

import heapq
import itertools
import logging
import weakref
from collections import Counter

from bit_stream import BitStream
from huffman_errors import BufferExhausted, EmptyAlphabet, InvalidFrequency, UnknownSymbol

logger = logging.getLogger(__name__)


def build_frequency_table(symbols):
    """
    Count how often each symbol occurs.

    Entries come out in first-seen order, which the tree depends on to
    break ties the same way on both sides of the wire.
    """
    return Counter(symbols)


class HuffmanNode:
    """
    A leaf (symbol + frequency) or an internal node owning two children.

    The ordering key of a leaf is ``(frequency << 32) | ord(symbol)`` so that
    equal frequencies are ordered by symbol code. An internal node's key is
    the sum of its children's keys. Keys and subtree heights are computed
    once, when the node is made.
    """

    def __init__(self, symbol=None, frequency=0, left=None, right=None):
        self.symbol = symbol
        self.frequency = frequency
        self.left = left
        self.right = right
        self._parent = None
        if left is None:
            self.key = (frequency << 32) | ord(symbol)
            self.height = 0
        else:
            self.frequency = left.frequency + right.frequency
            self.key = left.key + right.key
            self.height = 1 + max(left.height, right.height)
            left._parent = weakref.ref(self)
            right._parent = weakref.ref(self)

    @property
    def parent(self):
        # Back-link only; the parent itself is kept alive by its own parent or the tree
        return self._parent() if self._parent is not None else None

    @property
    def is_leaf(self):
        return self.left is None

    @property
    def is_root(self):
        return self.parent is None

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode(symbol={self.symbol!r}, frequency={self.frequency})"
        return f"HuffmanNode(frequency={self.frequency}, height={self.height})"


class HuffmanTree:
    """
    Huffman tree built from an ordered symbol -> frequency mapping.

    Building twice from the same mapping, iterated in the same order,
    yields the same tree: the queue is keyed by the node key and then by
    insertion sequence, and the first node popped becomes the left child.
    """

    def __init__(self, frequency_table):
        if not frequency_table:
            raise EmptyAlphabet()

        self._lookup = {}
        order = itertools.count()
        queue = []
        for symbol, frequency in frequency_table.items():
            if frequency < 0:
                raise InvalidFrequency(symbol, frequency)
            leaf = HuffmanNode(symbol, frequency)
            self._lookup[symbol] = leaf
            queue.append((leaf.key, next(order), leaf))
        heapq.heapify(queue)

        while len(queue) > 1:
            _, _, left = heapq.heappop(queue)
            _, _, right = heapq.heappop(queue)
            merged = HuffmanNode(left=left, right=right)
            heapq.heappush(queue, (merged.key, next(order), merged))

        self.root = queue[0][2]
        self.maximum_depth = self.root.height
        # Scratch space for leaf-to-root walks, reused by every encode call
        self._path = [None] * (self.maximum_depth + 1)
        logger.debug("built Huffman tree: %d leaves, maximum depth %d",
                     len(self._lookup), self.maximum_depth)

    @property
    def symbols(self):
        return list(self._lookup)

    def __len__(self):
        return len(self._lookup)

    def __contains__(self, symbol):
        return symbol in self._lookup

    def _trace(self, symbol):
        """Fill the scratch path leaf-first up to the root; return its length."""
        try:
            node = self._lookup[symbol]
        except KeyError:
            raise UnknownSymbol(symbol) from None
        path = self._path
        length = 0
        while node is not None:
            path[length] = node
            length += 1
            node = node.parent
        return length

    def encode_symbol(self, symbol, stream):
        """Append the root-to-leaf path of ``symbol`` to ``stream``, 1 for right, 0 for left."""
        length = self._trace(symbol)
        path = self._path
        # path[length - 1] is the root; a lone root leaf writes nothing
        for i in range(length - 1, 0, -1):
            stream.append_bit(path[i - 1] is path[i].right)

    def decode_symbol(self, stream):
        """Follow bits taken from the end of ``stream`` down to a leaf."""
        node = self.root
        depth = 0
        while not node.is_leaf:
            if stream.written_bits == 0:
                raise BufferExhausted(depth)
            node = node.right if stream.remove_last_bit() else node.left
            depth += 1
        return node.symbol

    def encode(self, symbols, stream=None):
        if stream is None:
            stream = BitStream()
        for symbol in symbols:
            self.encode_symbol(symbol, stream)
        return stream

    def decode(self, stream, count):
        """Decode ``count`` symbols; ``stream`` must already be in read order."""
        return [self.decode_symbol(stream) for _ in range(count)]

    def generate_codes(self):
        """Return ``{symbol: "0110"}`` for every leaf, in mapping order."""
        codes = {}
        path = self._path
        for symbol in self._lookup:
            length = self._trace(symbol)
            codes[symbol] = "".join(
                "1" if path[i - 1] is path[i].right else "0"
                for i in range(length - 1, 0, -1)
            )
        return codes


class HuffmanLogic:
    def build_frequency_table(self, symbols):
        return build_frequency_table(symbols)

    def build_tree(self, frequency_table):
        return HuffmanTree(frequency_table)

    def generate_codes(self, tree):
        return tree.generate_codes()
