"""
File: CompressionModule.py
Author: huffman-text-compression maintainers
Description: Main compression module. Compresses a text file with Huffman coding,
             writes the bit stream to disk and decompresses it again.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

import numpy as np

from text_compression.CodebookContainer import decode_container, pack
from text_compression.EntropyCalculator import EntropyCalculator, compression_ratio
from text_compression.HuffmanCoder import HuffmanCoder, build_session
from text_compression.HuffmanErrors import EmptyInputError, HuffmanError

COMPRESSED_FILE_NAME = "compressed.txt"
DECOMPRESSED_FILE_NAME = "decompressed.txt"


def _bits_preview(bits: str, max_bits: int = 512) -> str:
    if len(bits) <= max_bits:
        return bits
    return f"{bits[: max_bits // 2]}...{bits[-max_bits // 2 :]} (len={len(bits)})"


def read_text_file(file_path: str) -> str:
    # newline="" keeps \r\n line endings exactly as they are on disk
    with open(file_path, "r", encoding="utf-8", newline="") as f:
        return f.read()


class CompressionModule:
    def __init__(self, input_string: str, output_dir: str = "output", self_describing: bool = False):

        self.input_string: str = input_string
        self.entropyCalculator = EntropyCalculator(self.input_string) if self.input_string else None

        self.output_dir = output_dir
        self.compressed_path = os.path.join(output_dir, COMPRESSED_FILE_NAME)
        self.decompressed_path = os.path.join(output_dir, DECOMPRESSED_FILE_NAME)

        # with a self describing stream the code table travels in front of the payload
        self.self_describing = bool(self_describing)

        self.sourceCoder = HuffmanCoder()

        self.source_coded: str = ""
        self.output_string: Optional[str] = None
        self.lossless = False

    @property
    def encoded_bits(self) -> int:
        return len(self.source_coded)

    @property
    def ratio(self) -> Optional[float]:
        if not self.input_string or not self.source_coded:
            return None
        return compression_ratio(self.encoded_bits, len(self.input_string))

    def compress(self) -> str:
        if not self.input_string:
            raise EmptyInputError("Nothing to compress, the input text is empty")

        # everything is built first so a failure leaves the previous state untouched
        session = build_session(self.input_string)
        source_coded = session.encode(self.input_string)

        if self.self_describing:
            stored = "".join(map(str, pack(session.codes, source_coded).tolist()))
        else:
            stored = source_coded

        os.makedirs(self.output_dir, exist_ok=True)
        with open(self.compressed_path, "w", encoding="ascii") as f:
            f.write(stored)

        # a new tree replaces the one from any previous compress
        self.sourceCoder.replace_session(session)
        self.source_coded = source_coded
        return self.source_coded

    def decompress(self) -> str:
        with open(self.compressed_path, "r", encoding="ascii") as f:
            stored = f.read().strip()

        if self.self_describing:
            decoded = decode_container(np.array([int(b) for b in stored], dtype=np.int8))
        else:
            decoded = self.sourceCoder.decode(stored)

        os.makedirs(self.output_dir, exist_ok=True)
        with open(self.decompressed_path, "w", encoding="utf-8", newline="") as f:
            f.write(decoded)

        self.output_string = decoded
        self.lossless = self.input_string == decoded
        return decoded

    def run(self) -> bool:
        self.compress()

        # Decode the stored stream
        try:
            self.decompress()
        except ValueError as e:
            self.output_string = f"Decoding failed: {str(e)}"
            self.lossless = False

        return self.lossless

    def plot_code_lengths(self):
        import matplotlib.pyplot as plt

        codes = self.sourceCoder.codes
        symbols = sorted(codes, key=lambda s: (len(codes[s]), s))
        plt.figure(figsize=(12, 4))
        plt.bar([repr(s) for s in symbols], [len(codes[s]) for s in symbols])
        plt.title(f"Huffman code length per symbol ({len(symbols)} symbols)")
        plt.xlabel("Symbol")
        plt.ylabel("Code length [bits]")
        plt.xticks(rotation=90)
        plt.tight_layout()
        plt.show()

    def __repr__(self):
        ratio = f"{self.ratio:.2f}%" if self.ratio is not None else "N/A"
        codes = ", ".join(f"{s!r}: {c}" for s, c in sorted(self.sourceCoder.codes.items(), key=lambda i: (len(i[1]), i[1])))

        return (f"CompressionModule:\n"
                f"*****SUMMARY*******************************************************************\n\n"
                f"**  Input Length: {len(self.input_string)} symbols\n\n"
                f"**  Entropy Calculations: {self.entropyCalculator}\n\n"
                f"**  Huffman Codes: {{{codes}}}\n\n"
                f"**  Source Coded: \n'{_bits_preview(self.source_coded)}'\n\n"
                f"**  Compressed Size: {self.encoded_bits} bits\n\n"
                f"**  Compression Ratio: {ratio}\n\n"
                f"**  Compressed File: {os.path.abspath(self.compressed_path)}\n\n"
                f"**  Decompressed File: {os.path.abspath(self.decompressed_path)}\n\n"
                f"**  Lossless: {self.lossless}\n\n"
                f"******************************************************************************\n")


if __name__ == "__main__":
    def _get_arg(name: str, default=None):
        if name in sys.argv:
            i = sys.argv.index(name)
            if i + 1 < len(sys.argv):
                return sys.argv[i + 1]
        return default

    if len(sys.argv) < 2:
        print("Usage: python CompressionModule.py <textfile> [--output-dir DIR] [--self-describing] [--plot]")
        raise SystemExit(1)

    file_path = sys.argv[1]
    if not os.path.exists(file_path):
        print(f"File not found: {file_path}")
        raise SystemExit(1)

    text = read_text_file(file_path)

    cm = CompressionModule(
        input_string=text,
        output_dir=_get_arg("--output-dir", "output"),
        self_describing=("--self-describing" in sys.argv),
    )

    try:
        cm.run()
    except EmptyInputError as e:
        print(f"Nothing to do: {e}")
        raise SystemExit(1)
    except HuffmanError as e:
        print(f"Compression failed: {e}")
        raise SystemExit(1)

    print(cm)
    if cm.output_string is not None and not cm.lossless:
        print(cm.output_string)
    if "--plot" in sys.argv:
        cm.plot_code_lengths()
