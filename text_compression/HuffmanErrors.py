"""
File: HuffmanErrors.py
Author: huffman-text-compression maintainers
Description: Typed failures raised by the Huffman coding engine.
"""


# All engine errors are ValueErrors so callers can keep catching ValueError
class HuffmanError(ValueError):
    pass


class EmptyInputError(HuffmanError):
    def __init__(self, message: str = "Cannot build a Huffman tree from empty input"):
        super().__init__(message)


class UnknownSymbolError(HuffmanError):
    def __init__(self, symbol: str, position: int):
        self.symbol = symbol
        self.position = position
        super().__init__(f"Symbol {symbol!r} at position {position} has no code in the table")


class TruncatedStreamError(HuffmanError):
    def __init__(self, bits_consumed: int):
        self.bits_consumed = bits_consumed
        super().__init__(f"Bit stream ended in the middle of a code after {bits_consumed} bits")


class MissingTreeError(HuffmanError):
    def __init__(self, message: str = "No Huffman tree built yet, nothing to encode or decode"):
        super().__init__(message)


class ContainerLimitError(HuffmanError):
    def __init__(self, field: str, value: int, width: int):
        self.field = field
        self.value = value
        self.width = width
        super().__init__(f"{field} {value} does not fit in the {width} bit container header")
