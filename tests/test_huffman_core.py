import gc
import os
import sys
import random

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
	sys.path.insert(0, ROOT)

from bit_stream import BitStream
from huffman_core import HuffmanLogic, HuffmanNode, HuffmanTree, build_frequency_table
from huffman_errors import BufferExhausted, EmptyAlphabet, HuffmanError, InvalidFrequency, UnknownSymbol


def _tie_table():
	return {'a': 2, 'b': 2, 'c': 1, 'd': 1}


def test_frequency_table_keeps_first_seen_order():
	table = build_frequency_table("banana")
	assert list(table.items()) == [('b', 1), ('a', 3), ('n', 2)]


def test_frequency_table_of_empty_text_is_empty():
	assert len(build_frequency_table("")) == 0


def test_leaf_key_packs_symbol_code_below_frequency():
	leaf = HuffmanNode('a', 3)
	assert leaf.key == (3 << 32) | 97
	assert leaf.is_leaf
	assert leaf.is_root
	assert leaf.parent is None


def test_internal_key_is_sum_of_children():
	left = HuffmanNode('a', 1)
	right = HuffmanNode('b', 2)
	node = HuffmanNode(left=left, right=right)
	assert node.key == left.key + right.key
	assert node.frequency == 3
	assert not node.is_leaf
	assert left.parent is node
	assert right.parent is node
	assert not left.is_root


def test_empty_table_rejected():
	with pytest.raises(EmptyAlphabet):
		HuffmanTree({})


def test_tie_break_codes():
	tree = HuffmanTree(_tie_table())
	assert tree.generate_codes() == {'a': '10', 'b': '11', 'c': '00', 'd': '01'}
	assert tree.maximum_depth == 2


def test_tie_break_is_stable_across_builds():
	first = HuffmanTree(_tie_table()).generate_codes()
	for _ in range(5):
		assert HuffmanTree(_tie_table()).generate_codes() == first


def test_equal_frequency_orders_by_symbol_code():
	# lower code merges first and lands on the left
	tree = HuffmanTree({'y': 1, 'x': 1})
	assert tree.generate_codes() == {'y': '1', 'x': '0'}


def test_maximum_depth_of_skewed_tree():
	tree = HuffmanTree({'a': 1, 'b': 1, 'c': 2, 'd': 3, 'e': 5})
	assert tree.maximum_depth == 4
	assert tree.generate_codes() == {
		'a': '1110',
		'b': '1111',
		'c': '110',
		'd': '10',
		'e': '0',
	}


def test_single_symbol_tree_has_empty_path():
	tree = HuffmanTree({'q': 7})
	assert tree.maximum_depth == 0
	assert tree.root.is_leaf

	stream = BitStream()
	tree.encode_symbol('q', stream)
	assert stream.written_bits == 0
	assert tree.decode_symbol(stream) == 'q'
	assert tree.generate_codes() == {'q': ''}


def test_encode_writes_root_to_leaf_path():
	tree = HuffmanTree(_tie_table())
	stream = BitStream()
	tree.encode_symbol('a', stream)
	tree.encode_symbol('d', stream)
	assert list(stream) == [True, False, False, True]


def test_decode_reads_from_the_end():
	tree = HuffmanTree(_tie_table())
	text = "abcdcba"
	stream = tree.encode(text)
	stream.reverse()
	assert "".join(tree.decode(stream, len(text))) == text
	assert stream.written_bits == 0


def test_unknown_symbol():
	tree = HuffmanTree(_tie_table())
	with pytest.raises(UnknownSymbol) as excinfo:
		tree.encode_symbol('z', BitStream())
	assert excinfo.value.symbol == 'z'
	assert isinstance(excinfo.value, KeyError)
	assert "'z' is not in the tree" in str(excinfo.value)


def test_decode_runs_out_of_bits():
	tree = HuffmanTree(_tie_table())
	stream = BitStream()
	stream.append_bit(True)
	with pytest.raises(BufferExhausted) as excinfo:
		tree.decode_symbol(stream)
	assert excinfo.value.depth == 1
	assert isinstance(excinfo.value, HuffmanError)


def test_negative_frequency_rejected():
	with pytest.raises(InvalidFrequency) as excinfo:
		HuffmanTree({'a': -1})
	assert excinfo.value.frequency == -1
	assert isinstance(excinfo.value, HuffmanError)


def test_is_root_once_parent_is_released():
	left = HuffmanNode('a', 1)
	right = HuffmanNode('b', 1)
	parent = HuffmanNode(left=left, right=right)
	assert not left.is_root
	del parent
	gc.collect()
	assert left.parent is None
	assert left.is_root


def test_tree_metadata():
	tree = HuffmanTree(_tie_table())
	assert len(tree) == 4
	assert 'c' in tree
	assert 'z' not in tree
	assert tree.symbols == ['a', 'b', 'c', 'd']


def test_codes_are_prefix_free():
	rng = random.Random(1234)
	text = "".join(rng.choice("etaoinshrdlu ,.") for _ in range(2000))
	codes = HuffmanTree(build_frequency_table(text)).generate_codes()
	values = sorted(codes.values())
	for shorter, longer in zip(values, values[1:]):
		assert not longer.startswith(shorter)


def test_logic_wraps_tree_building():
	logic = HuffmanLogic()
	table = logic.build_frequency_table("aabbcd")
	tree = logic.build_tree(table)
	assert logic.generate_codes(tree) == tree.generate_codes()
	assert logic.generate_codes(tree) == {'a': '10', 'b': '11', 'c': '00', 'd': '01'}
