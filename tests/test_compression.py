"""
Unit tests for the bit writer and the LZW compressor.
"""

import random

import pytest

import compression
from compression import MAX_BITS, BitWriter, lzw_compress, minimum_code_size
from errors import ConfigError


def random_symbols(count, alphabet_size, seed=0):
    rng = random.Random(seed)
    return [rng.randrange(alphabet_size) for _ in range(count)]


def decode(data, code_size, count):
    # reads back the first count symbols the way GIF decoders do
    stream = int.from_bytes(data, "little")
    position = 0

    def read(width):
        nonlocal position
        value = (stream >> position) & ((1 << width) - 1)
        position += width
        return value

    clear_code = 1 << code_size
    width = code_size + 1
    assert read(width) == clear_code
    table = [[symbol] for symbol in range(clear_code)] + [None, None]
    output = []
    previous = None
    while len(output) < count:
        code = read(width)
        if code < len(table):
            entry = table[code]
        else:
            entry = table[previous] + [table[previous][0]]
        if previous is not None and len(table) < 1 << MAX_BITS:
            table.append(table[previous] + [entry[0]])
            if len(table) == 1 << width and width < MAX_BITS:
                width += 1
        output.extend(entry)
        previous = code
    return output


class TestBitWriter:
    """Tests for BitWriter.push_bits."""

    def test_least_significant_bit_first(self):
        writer = BitWriter()
        writer.push_bits(0b10000, 5)
        writer.push_bits(0b00000, 5)
        writer.push_bits(0b10010, 5)

        assert writer.getvalue() == bytes([0b00010000, 0b01001000])
        assert writer.bit_count == 15

    def test_partial_byte_is_flushed(self):
        writer = BitWriter()
        writer.push_bits(0b101, 3)

        assert writer.getvalue() == bytes([0b101])

    def test_value_too_wide(self):
        with pytest.raises(ConfigError):
            BitWriter().push_bits(8, 3)


class TestMinimumCodeSize:
    """Tests for minimum_code_size."""

    @pytest.mark.parametrize("alphabet, size", [(2, 1), (3, 2), (4, 2), (5, 3), (10, 4), (256, 8), (2048, 11)])
    def test_sizes(self, alphabet, size):
        assert minimum_code_size(alphabet) == size

    def test_alphabet_too_large(self):
        with pytest.raises(ConfigError):
            minimum_code_size(2049)

    def test_alphabet_too_small(self):
        with pytest.raises(ConfigError):
            minimum_code_size(1)


class TestLzwCompress:
    """Tests for lzw_compress."""

    def test_example_1(self):
        """AAABEFGAAB over a ten-symbol alphabet.

        Codes: Clear(16) A(0) AA(18) B(1) E(4) F(5) G(6) AAB(19) End(17), 5 bits each.
        """
        symbols = [ord(c) - ord("A") for c in "AAABEFGAAB"]

        output, code_size = lzw_compress(symbols, 10)

        assert code_size == 4
        assert output == bytes([0x10, 0xC8, 0x40, 0x8A, 0x99, 0x11])

    def test_example_2(self):
        symbols = [40, 255, 255, 255, 40] + [255] * 10

        output, code_size = lzw_compress(symbols, 256)

        assert code_size == 8
        assert output == bytes([0x00, 0x51, 0xFC, 0x1B, 0x28, 0x70, 0xA0, 0xC1, 0x83, 0x01, 0x01])

    def test_empty_input(self):
        """Only the clear and end codes are written."""
        output, code_size = lzw_compress([], 4)

        assert code_size == 2
        assert output == bytes([0b00101100])

    def test_code_width_grows(self):
        """The width grows to 4 bits once code 8 is assigned (see the 3x5 image vector)."""
        symbols = [0, 1, 1, 1, 2, 1, 1, 1, 3, 1, 1, 1, 1, 1, 1]

        output, code_size = lzw_compress(symbols, 4)

        assert code_size == 2
        assert output == bytes([0x44, 0x2E, 0x17, 0xA3, 0x5A])

    def test_width_transitions(self, monkeypatch):
        """Every code before the freeze adds one entry, so widths change at fixed emission counts."""
        writers = []

        class RecordingWriter(BitWriter):
            def __init__(self):
                super().__init__()
                self.widths = []
                writers.append(self)

            def push_bits(self, value, width):
                self.widths.append(width)
                super().push_bits(value, width)

        monkeypatch.setattr(compression, "BitWriter", RecordingWriter)
        symbols = random_symbols(8000, 256)

        lzw_compress(symbols, 256)

        widths = writers[0].widths
        # clear code, then entries 258.. are assigned one per emitted code
        assert widths[0] == 9
        assert widths[1:256] == [9] * 255
        assert widths[256:768] == [10] * 512
        assert widths[768:1792] == [11] * 1024
        assert len(widths) > 3842
        assert set(widths[1792:]) == {MAX_BITS}

    def test_frozen_dictionary_decodes(self):
        symbols = random_symbols(8000, 256)

        output, code_size = lzw_compress(symbols, 256)

        assert decode(output, code_size, len(symbols)) == symbols

    def test_small_alphabet_past_the_ceiling(self):
        symbols = random_symbols(30000, 4)

        output, code_size = lzw_compress(symbols, 4)

        assert decode(output, code_size, len(symbols)) == symbols

    def test_symbol_outside_alphabet(self):
        with pytest.raises(ConfigError):
            lzw_compress([0, 4], 4)

    def test_alphabet_too_large(self):
        with pytest.raises(ConfigError):
            lzw_compress([0], 4096)
