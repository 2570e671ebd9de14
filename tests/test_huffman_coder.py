import random
import threading

import pytest

from text_compression.EntropyCalculator import huffman_bit_count
from text_compression.HuffmanCoder import (
    HuffmanCoder,
    build_session,
    decode,
    derive_codes,
    encode,
)
from text_compression.HuffmanErrors import (
    EmptyInputError,
    MissingTreeError,
    TruncatedStreamError,
    UnknownSymbolError,
)
from text_compression.HuffmanTree import build_tree, count_frequencies

SAMPLES = [
    "a",
    "ab",
    "aaaabbbcc",
    "hallihallo",
    "The quick brown fox jumps over the lazy dog.\n",
    "Grüße aus Bern, 你好, été \U0001F600",
    "".join(chr(c) for c in range(300)),
]


@pytest.mark.parametrize("text", SAMPLES)
def test_roundtrip(text):
    session = build_session(text)
    assert decode(encode(text, session.codes), session.tree) == text


@pytest.mark.parametrize("text", SAMPLES)
def test_codes_are_prefix_free(text):
    codes = list(derive_codes(build_tree(text)).values())
    for i, first in enumerate(codes):
        for j, second in enumerate(codes):
            if i != j:
                assert not second.startswith(first)


@pytest.mark.parametrize("text", SAMPLES)
def test_encoded_length_is_optimal(text):
    session = build_session(text)
    assert len(session.encode(text)) == huffman_bit_count(count_frequencies(text))


def test_single_symbol_text():
    session = build_session("aaaa")
    assert dict(session.codes) == {"a": "0"}
    assert session.encode("aaaa") == "0000"
    assert session.decode("0000") == "aaaa"


def test_derive_codes_without_tree_is_empty():
    assert derive_codes(None) == {}


def test_encode_unknown_symbol():
    session = build_session("abc")
    with pytest.raises(UnknownSymbolError) as excinfo:
        session.encode("abz")
    assert excinfo.value.symbol == "z"
    assert excinfo.value.position == 2


def test_decode_truncated_stream():
    session = build_session("aaaabbbcc")
    bits = session.encode("bc")
    assert len(bits) == 4
    with pytest.raises(TruncatedStreamError):
        session.decode(bits[:3])


def test_decode_truncated_two_symbol_stream():
    text = "abcabd"
    session = build_session(text)
    bits = session.encode(text)
    # drop the last bit so the stream stops inside a code
    with pytest.raises(TruncatedStreamError):
        session.decode(bits[:-1])


def test_decode_rejects_non_bit_characters():
    session = build_session("ab")
    with pytest.raises(ValueError):
        session.decode("01x")


def test_decode_empty_bits():
    session = build_session("ab")
    assert decode("", session.tree) == ""
    assert decode(None, session.tree) == ""


def test_decode_without_tree():
    with pytest.raises(MissingTreeError):
        decode("0101", None)


def test_code_lengths_are_deterministic():
    text = "abracadabra alakazam"
    first = build_session(text)
    second = build_session(text)
    assert {s: len(c) for s, c in first.codes.items()} == {s: len(c) for s, c in second.codes.items()}
    assert len(first.encode(text)) == len(second.encode(text))


def test_session_codes_are_read_only():
    session = build_session("ab")
    with pytest.raises(TypeError):
        session.codes["c"] = "11"


def test_build_session_rejects_empty_text():
    with pytest.raises(EmptyInputError):
        build_session("")


def test_coder_roundtrip():
    coder = HuffmanCoder()
    text = "hallihallo"
    coder.build_encoding_map(text)
    assert coder.decode(coder.encode(text)) == text


def test_coder_empty_build_is_noop():
    coder = HuffmanCoder()
    assert coder.build_encoding_map("") is None
    assert coder.tree is None
    assert dict(coder.codes) == {}
    with pytest.raises(MissingTreeError):
        coder.encode("a")
    with pytest.raises(MissingTreeError):
        coder.decode("0")
    with pytest.raises(MissingTreeError):
        coder.decode("")


def test_coder_empty_build_discards_previous_tree():
    coder = HuffmanCoder()
    coder.build_encoding_map("abc")
    coder.build_encoding_map("")
    with pytest.raises(MissingTreeError):
        coder.encode("abc")


def test_coder_rebuild_replaces_table():
    coder = HuffmanCoder()
    coder.build_encoding_map("abc")
    coder.build_encoding_map("xy")
    assert set(coder.codes) == {"x", "y"}
    with pytest.raises(UnknownSymbolError):
        coder.encode("abc")


def _outcome(session, bits):
    try:
        return session.decode(bits)
    except ValueError as e:
        return type(e)


def test_coder_reads_whole_sessions_while_rebuilding():
    # same alphabet, different frequencies, so every build gives a different tree
    texts = ["aaaabbbccd", "abbbbbbccd", "abcccccccd", "abcddddddd"]
    sample = "abcd"
    sessions = [build_session(text) for text in texts]
    valid_encodings = {session.encode(sample) for session in sessions}
    valid_outcomes = {
        bits: {_outcome(session, bits) for session in sessions} for bits in valid_encodings
    }

    coder = HuffmanCoder()
    coder.build_encoding_map(texts[0])
    stop = threading.Event()
    errors = []

    def rebuilder():
        rng = random.Random(0)
        while not stop.is_set():
            coder.build_encoding_map(rng.choice(texts))

    def reader():
        for _ in range(500):
            session = coder.session
            if session.decode(session.encode(sample)) != sample:
                errors.append(("session", session))

            bits = coder.encode(sample)
            if bits not in valid_encodings:
                errors.append(("encode", bits))
                continue

            try:
                decoded = coder.decode(bits)
            except ValueError as e:
                decoded = type(e)
            if decoded not in valid_outcomes[bits]:
                errors.append(("decode", bits, decoded))

    rebuild_thread = threading.Thread(target=rebuilder)
    readers = [threading.Thread(target=reader) for _ in range(4)]
    rebuild_thread.start()
    for thread in readers:
        thread.start()
    for thread in readers:
        thread.join()
    stop.set()
    rebuild_thread.join()

    assert errors == []


def test_session_tree_cannot_be_modified():
    session = build_session("aaaabbbcc")
    assert session.tree.frozen
    with pytest.raises(RuntimeError):
        session.tree.add_leaf("z", 1)
    with pytest.raises(RuntimeError):
        session.tree.add_internal(0, 1)
    with pytest.raises(RuntimeError):
        session.tree.root = 0
    assert session.decode(session.encode("abc")) == "abc"
