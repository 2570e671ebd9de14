"""
File: EntropyCalculator.py
Author: huffman-text-compression maintainers
Description: Calculates entropy statistics and compression ratios for text.
"""

import heapq
import numpy as np
from collections import Counter
from typing import Mapping

# the uncompressed reference size of one symbol
BITS_PER_SYMBOL = 8


def compression_ratio(encoded_bits: int, symbol_count: int) -> float:
    """Encoded size as a percentage of symbol_count * 8 bits."""
    if symbol_count <= 0:
        raise ValueError("Symbol count must be positive to compute a ratio")
    return encoded_bits / (symbol_count * BITS_PER_SYMBOL) * 100


def huffman_bit_count(frequencies: Mapping[str, int]) -> int:
    # The optimal total length equals the sum of all merged weights
    if len(frequencies) == 1:
        return next(iter(frequencies.values()))

    weights = list(frequencies.values())
    heapq.heapify(weights)
    total = 0
    while len(weights) > 1:
        merged = heapq.heappop(weights) + heapq.heappop(weights)
        total += merged
        heapq.heappush(weights, merged)
    return total


class EntropyCalculator:
    def __init__(self, text: str):
        if not text:
            raise ValueError("Input string cannot be empty")

        self.frequencies = Counter(text)
        self.length = len(text)

        counts = np.array(list(self.frequencies.values()), dtype=float)
        p = counts / counts.sum()

        self.H = float(np.dot(p, np.log2(1 / p)))                 # entropy
        self.H0 = float(np.log2(len(p)))                          # max entropy
        self.R = self.H0 - self.H                                 # absolute redundancy
        self.r = self.R / self.H0 if self.H0 > 0 else 0.0         # relative redundancy

    @property
    def entropy_bits(self) -> float:
        # lower bound on the encoded size of the whole text
        return self.H * self.length

    @property
    def huffman_bits(self) -> int:
        return huffman_bit_count(self.frequencies)

    @property
    def huffman_ratio(self) -> float:
        return compression_ratio(self.huffman_bits, self.length)

    def __repr__(self):
        return (f"EntropyCalculator(H={self.H:.4f} bits/char, "
                f"H0={self.H0:.4f} bits/char, "
                f"R={self.R:.4f} bits/char, "
                f"r={self.r:.2%}, "
                f"huffman={self.huffman_bits} bits)")


# Example usage
if __name__ == "__main__":
    calc = EntropyCalculator("aaaabbbcc")
    print(calc)
    print(f"Ratio: {calc.huffman_ratio:.2f}%")
