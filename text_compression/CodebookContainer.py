"""
File: CodebookContainer.py
Author: huffman-text-compression maintainers
Description: Self-describing variant of the compressed stream. The code table is packed
             in front of the payload so a fresh decoder can rebuild the tree.
"""

from typing import Dict, List, Mapping, Tuple

import numpy as np

from text_compression.HuffmanCoder import decode
from text_compression.HuffmanErrors import ContainerLimitError, TruncatedStreamError
from text_compression.HuffmanTree import HuffmanTree

SYMBOL_COUNT_BITS = 16
CODE_POINT_BITS = 32
CODE_LENGTH_BITS = 8
PAYLOAD_LENGTH_BITS = 32


def _int_to_bits(value: int, width: int) -> List[int]:
    return [int(b) for b in format(value, f"0{width}b")]


def check_limits(codes: Mapping[str, str], bit_string: str) -> None:
    """Raise ContainerLimitError when the table or payload cannot be described by the header."""
    if len(codes) >= 1 << SYMBOL_COUNT_BITS:
        raise ContainerLimitError("Symbol count", len(codes), SYMBOL_COUNT_BITS)
    for char, code in codes.items():
        if ord(char) >= 1 << CODE_POINT_BITS:
            raise ContainerLimitError("Code point", ord(char), CODE_POINT_BITS)
        if len(code) >= 1 << CODE_LENGTH_BITS:
            raise ContainerLimitError(f"Code length of {char!r}", len(code), CODE_LENGTH_BITS)
    if len(bit_string) >= 1 << PAYLOAD_LENGTH_BITS:
        raise ContainerLimitError("Payload length", len(bit_string), PAYLOAD_LENGTH_BITS)


def _read_int(binary: np.ndarray, pos: int, width: int) -> Tuple[int, int]:
    if pos + width > len(binary):
        raise TruncatedStreamError(len(binary))
    return int("".join(str(int(b)) for b in binary[pos:pos + width]), 2), pos + width


def pack(codes: Mapping[str, str], bit_string: str) -> np.ndarray:
    """Encode the code table and message into one bit array.

    Format:
    - 16 bits: number of symbols
    - For each symbol:
      - 32 bits: code point
      - 8 bits: length of the code (max 255)
      - N bits: the code itself
    - 32 bits: length of the encoded message
    - Remaining bits: the encoded message
    """
    check_limits(codes, bit_string)

    bits = []
    bits.extend(_int_to_bits(len(codes), SYMBOL_COUNT_BITS))

    for char, code in codes.items():
        bits.extend(_int_to_bits(ord(char), CODE_POINT_BITS))
        bits.extend(_int_to_bits(len(code), CODE_LENGTH_BITS))
        bits.extend(int(b) for b in code)

    bits.extend(_int_to_bits(len(bit_string), PAYLOAD_LENGTH_BITS))
    bits.extend(int(b) for b in bit_string)

    return np.array(bits, dtype=np.int8)


def unpack(binary: np.ndarray) -> Tuple[Dict[str, str], str]:
    """Decode the code table and message bits from a packed array.

    Returns:
        tuple: (codes_dict, encoded_message_bits)
    """
    binary = np.asarray(binary).reshape(-1)
    pos = 0

    num_symbols, pos = _read_int(binary, pos, SYMBOL_COUNT_BITS)

    codes = {}
    for _ in range(num_symbols):
        code_point, pos = _read_int(binary, pos, CODE_POINT_BITS)
        code_length, pos = _read_int(binary, pos, CODE_LENGTH_BITS)
        if code_length == 0:
            raise ValueError(f"Symbol {chr(code_point)!r} has an empty code")
        if pos + code_length > len(binary):
            raise TruncatedStreamError(len(binary))
        codes[chr(code_point)] = "".join(str(int(b)) for b in binary[pos:pos + code_length])
        pos += code_length

    message_length, pos = _read_int(binary, pos, PAYLOAD_LENGTH_BITS)
    if pos + message_length > len(binary):
        raise TruncatedStreamError(len(binary))
    message_bits = "".join(str(int(b)) for b in binary[pos:pos + message_length])

    return codes, message_bits


def tree_from_codes(codes: Mapping[str, str]) -> HuffmanTree:
    """Rebuild a decoding tree from a complete prefix code. Leaf weights are not recoverable and set to 1."""
    if not codes:
        raise ValueError("Cannot rebuild a tree from an empty code table")

    tree = HuffmanTree()

    if len(codes) == 1:
        (symbol, code), = codes.items()
        if code != "0":
            raise ValueError(f"A single symbol table must use the code '0', got {code!r}")
        tree.root = tree.add_leaf(symbol, 1)
        return tree

    def build(items: List[Tuple[str, str]], depth: int) -> int:
        if len(items) == 1 and len(items[0][1]) == depth:
            return tree.add_leaf(items[0][0], 1)

        left_items = []
        right_items = []
        for symbol, code in items:
            if len(code) <= depth:
                raise ValueError(f"Code {code!r} of {symbol!r} is a prefix of another code")
            if code[depth] == "0":
                left_items.append((symbol, code))
            elif code[depth] == "1":
                right_items.append((symbol, code))
            else:
                raise ValueError(f"Invalid bit in code {code!r}")

        # every internal node needs exactly two children
        if not left_items or not right_items:
            raise ValueError("Code table is not a complete prefix code")

        return tree.add_internal(build(left_items, depth + 1), build(right_items, depth + 1))

    tree.root = build(list(codes.items()), 0)
    return tree


def decode_container(binary: np.ndarray) -> str:
    codes, message_bits = unpack(binary)
    if not codes:
        return ""
    return decode(message_bits, tree_from_codes(codes))
