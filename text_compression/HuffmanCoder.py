"""
File: HuffmanCoder.py
Author: huffman-text-compression maintainers
Description: Implements Huffman coding for text compression (code table derivation, encode, decode).
"""

import threading
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from text_compression.HuffmanErrors import (
    EmptyInputError,
    MissingTreeError,
    TruncatedStreamError,
    UnknownSymbolError,
)
from text_compression.HuffmanTree import HuffmanTree, HuffmanTreeBuilder, count_frequencies


def derive_codes(tree: Optional[HuffmanTree]) -> Dict[str, str]:
    codes: Dict[str, str] = {}
    if tree is None:
        return codes

    # explicit stack so very skewed trees do not hit the recursion limit
    stack = [(tree.root, "")]
    while stack:
        node, current_code = stack.pop()

        # if there is a symbol then we reached the end of a branch
        if tree.is_leaf(node):
            # a lone root leaf still needs a one bit code
            codes[tree.symbol(node)] = current_code or "0"
            continue

        # otherwise we are at a junction node
        stack.append((tree.right(node), current_code + "1"))
        stack.append((tree.left(node), current_code + "0"))

    return codes


def encode(text: str, codes: Mapping[str, str]) -> str:
    encoded = []
    for position, char in enumerate(text):
        code = codes.get(char)
        if code is None:
            raise UnknownSymbolError(char, position)
        encoded.append(code)
    return "".join(encoded)


def decode(bits: Optional[str], tree: Optional[HuffmanTree]) -> str:
    if not bits:
        return ""
    if tree is None:
        raise MissingTreeError()

    root = tree.root

    # Handle single symbol case, every bit is one occurrence
    if tree.is_leaf(root):
        for position, bit in enumerate(bits):
            if bit not in "01":
                raise ValueError(f"Invalid bit {bit!r} at position {position}")
        return tree.symbol(root) * len(bits)

    decoded = []
    node = root
    for position, bit in enumerate(bits):
        if bit == "0":
            node = tree.left(node)
        elif bit == "1":
            node = tree.right(node)
        else:
            raise ValueError(f"Invalid bit {bit!r} at position {position}")

        if tree.is_leaf(node):
            decoded.append(tree.symbol(node))
            node = root

    # stream must stop exactly on a leaf boundary
    if node != root:
        raise TruncatedStreamError(len(bits))

    return "".join(decoded)


class HuffmanSession:
    """A tree and the code table derived from it. The tree is frozen and the table is a read-only view."""

    def __init__(self, tree: HuffmanTree):
        self.tree = tree.freeze()
        self.codes: Mapping[str, str] = MappingProxyType(derive_codes(tree))

    def encode(self, text: str) -> str:
        return encode(text, self.codes)

    def decode(self, bits: Optional[str]) -> str:
        return decode(bits, self.tree)

    def __repr__(self):
        return f"HuffmanSession({self.tree!r}, symbols={len(self.codes)})"


def build_session(text: str) -> HuffmanSession:
    if not text:
        raise EmptyInputError()
    return HuffmanSession(HuffmanTreeBuilder().build(count_frequencies(text)))


class HuffmanCoder:
    def __init__(self):
        self._session: Optional[HuffmanSession] = None
        self._lock = threading.Lock()

    @property
    def session(self) -> Optional[HuffmanSession]:
        with self._lock:
            return self._session

    @property
    def tree(self) -> Optional[HuffmanTree]:
        session = self.session
        return session.tree if session is not None else None

    @property
    def codes(self) -> Mapping[str, str]:
        session = self.session
        return session.codes if session is not None else MappingProxyType({})

    def replace_session(self, session: Optional[HuffmanSession]) -> None:
        with self._lock:
            self._session = session

    def build_session(self, text: str) -> HuffmanSession:
        # build outside the lock, then swap the finished session in
        session = build_session(text)
        self.replace_session(session)
        return session

    def build_encoding_map(self, text: str) -> Optional[HuffmanSession]:
        try:
            return self.build_session(text)
        except EmptyInputError:
            # nothing to do, keep no tree around
            self.replace_session(None)
            return None

    def _require_session(self) -> HuffmanSession:
        session = self.session
        if session is None:
            raise MissingTreeError()
        return session

    def encode(self, text: str) -> str:
        return self._require_session().encode(text)

    def decode(self, bits: Optional[str]) -> str:
        return self._require_session().decode(bits)


# Example usage
if __name__ == "__main__":
    coder = HuffmanCoder()
    text = "hallihallo"

    coder.build_encoding_map(text)
    encoded = coder.encode(text)
    decoded = coder.decode(encoded)

    print(f"Original: {text}")
    print(f"Codes: {dict(coder.codes)}")
    print(f"Encoded bits: {encoded}")
    print(f"Encoded length: {len(encoded)} bits")
    print(f"Decoded: {decoded}")
    print(f"Lossless: {decoded == text}")
