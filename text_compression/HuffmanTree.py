"""
File: HuffmanTree.py
Author: huffman-text-compression maintainers
Description: Frequency counting and Huffman tree construction by greedy weight merging.
"""

import heapq
from collections import Counter
from typing import Dict, List, Mapping, Optional

from text_compression.HuffmanErrors import EmptyInputError

# marks a missing child in the arena
NO_CHILD = -1


def count_frequencies(text: str) -> Dict[str, int]:
    # Counter keeps first occurrence order, which fixes the tie-breaking order later on
    return dict(Counter(text))


# The tree is stored as an arena: every node is an integer id indexing parallel lists.
# Internal nodes store the ids of their children instead of object references.
class HuffmanTree:
    def __init__(self):
        self._symbols: List[Optional[str]] = []
        self._weights: List[int] = []
        self._left: List[int] = []
        self._right: List[int] = []
        self._root: int = NO_CHILD
        self._frozen = False

    @property
    def root(self) -> int:
        return self._root

    @root.setter
    def root(self, node: int) -> None:
        self._check_mutable()
        self._root = node

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "HuffmanTree":
        # no more nodes can be added and the root stays where it is
        self._frozen = True
        return self

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("Huffman tree is frozen and cannot be modified")

    def add_leaf(self, symbol: str, weight: int) -> int:
        self._check_mutable()
        self._symbols.append(symbol)
        self._weights.append(weight)
        self._left.append(NO_CHILD)
        self._right.append(NO_CHILD)
        return len(self._weights) - 1

    def add_internal(self, left: int, right: int) -> int:
        self._check_mutable()
        self._symbols.append(None)
        self._weights.append(self._weights[left] + self._weights[right])
        self._left.append(left)
        self._right.append(right)
        return len(self._weights) - 1

    def is_leaf(self, node: int) -> bool:
        return self._left[node] == NO_CHILD and self._right[node] == NO_CHILD

    def left(self, node: int) -> int:
        return self._left[node]

    def right(self, node: int) -> int:
        return self._right[node]

    def symbol(self, node: int) -> Optional[str]:
        return self._symbols[node]

    def weight(self, node: int) -> int:
        return self._weights[node]

    @property
    def node_count(self) -> int:
        return len(self._weights)

    @property
    def leaf_count(self) -> int:
        return sum(1 for node in range(self.node_count) if self.is_leaf(node))

    @property
    def internal_count(self) -> int:
        return self.node_count - self.leaf_count

    def depths(self) -> Dict[str, int]:
        """Depth of every leaf symbol below the root (0 for a single-leaf tree)."""
        depths = {}
        stack = [(self.root, 0)]
        while stack:
            node, depth = stack.pop()
            if self.is_leaf(node):
                depths[self._symbols[node]] = depth
                continue
            stack.append((self._right[node], depth + 1))
            stack.append((self._left[node], depth + 1))
        return depths

    def __repr__(self):
        return (f"HuffmanTree(leaves={self.leaf_count}, internal={self.internal_count}, "
                f"root_weight={self._weights[self.root] if self.node_count else 0})")


class HuffmanTreeBuilder:
    def build(self, frequencies: Mapping[str, int]) -> HuffmanTree:
        if not frequencies:
            raise EmptyInputError()

        tree = HuffmanTree()

        # heap entries are (weight, sequence, node id); weights never change once pushed,
        # the sequence number keeps equal weights in insertion order
        priority_queue = []
        sequence = 0
        for symbol, count in frequencies.items():
            if isinstance(count, bool) or not isinstance(count, int) or count < 1:
                raise ValueError(f"Frequency of {symbol!r} must be a positive integer, got {count!r}")
            node = tree.add_leaf(symbol, count)
            priority_queue.append((count, sequence, node))
            sequence += 1
        heapq.heapify(priority_queue)

        while len(priority_queue) > 1:
            # first popped goes left, second goes right
            _, _, left_node = heapq.heappop(priority_queue)
            _, _, right_node = heapq.heappop(priority_queue)
            merged_node = tree.add_internal(left_node, right_node)
            heapq.heappush(priority_queue, (tree.weight(merged_node), sequence, merged_node))
            sequence += 1

        tree.root = priority_queue[0][2]
        return tree.freeze()


def build_tree(text: str) -> HuffmanTree:
    return HuffmanTreeBuilder().build(count_frequencies(text))
