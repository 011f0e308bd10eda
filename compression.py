import logging
from typing import Sequence

from errors import ConfigError

logger = logging.getLogger(__name__)

# -------- variable-width LZW --------
# codes 0..alphabet-1        literal symbols
# clear = 2**minimum_code_size, end = clear + 1
# clear + 2 ..               dictionary entries
# code width starts at minimum_code_size + 1 bits and never exceeds MAX_BITS;
# the clear code is emitted once, at the start of the stream
MAX_BITS = 12
MAX_MINIMUM_CODE_SIZE = MAX_BITS - 1


class BitWriter:
    """Append-only byte buffer packing values least-significant-bit first."""

    def __init__(self):
        self._buffer = bytearray()
        self._pending = 0       # bits not yet flushed into the buffer (max. 7 + 12)
        self._pending_bits = 0
        self._bit_count = 0

    @property
    def bit_count(self) -> int:
        return self._bit_count

    def push_bits(self, value: int, width: int) -> None:
        if value < 0 or value >> width:
            raise ConfigError(f"value {value} does not fit in {width} bits")
        self._pending |= value << self._pending_bits
        self._pending_bits += width
        self._bit_count += width
        while self._pending_bits >= 8:
            self._buffer.append(self._pending & 0xFF)
            self._pending >>= 8
            self._pending_bits -= 8

    def getvalue(self) -> bytes:
        if self._pending_bits:
            return bytes(self._buffer) + bytes((self._pending,))
        return bytes(self._buffer)


def minimum_code_size(alphabet_size: int) -> int:
    # the end code must fit in the initial code width, which rules out a one-symbol alphabet
    if alphabet_size < 2:
        raise ConfigError(f"alphabet size must be at least 2, got {alphabet_size}")
    size = 0
    while (1 << size) < alphabet_size:
        size += 1
    if size > MAX_MINIMUM_CODE_SIZE:
        raise ConfigError(
            f"alphabet size {alphabet_size} is too large and requires {size} bits "
            f"thus exceeding the maximum of {MAX_MINIMUM_CODE_SIZE} bits"
        )
    return size


def lzw_compress(symbols: Sequence[int], alphabet_size: int) -> tuple[bytes, int]:
    code_size = minimum_code_size(alphabet_size)
    for symbol in symbols:
        if not 0 <= symbol < alphabet_size:
            raise ConfigError(f"symbol {symbol} is outside the alphabet of size {alphabet_size}")

    clear_code = 1 << code_size
    end_code = clear_code + 1
    width = code_size + 1

    # an entry is keyed by (code of its prefix, last symbol)
    dictionary: dict[tuple[int, int], int] = {}
    code = None  # code of the longest matched sequence, None when nothing is matched
    index = 0

    writer = BitWriter()
    writer.push_bits(clear_code, width)

    while index < len(symbols):
        symbol = symbols[index]
        if code is None:
            code = symbol
            index += 1
        elif (code, symbol) in dictionary:
            code = dictionary[(code, symbol)]
            index += 1
        else:
            writer.push_bits(code, width)
            next_code = end_code + 1 + len(dictionary)
            if (1 << width) <= next_code:
                # at the ceiling the dictionary is frozen
                if width < MAX_BITS:
                    dictionary[(code, symbol)] = next_code
                    width += 1
            else:
                dictionary[(code, symbol)] = next_code
            # the unmatched symbol starts the next sequence
            code = None

    if code is not None:
        writer.push_bits(code, width)
    writer.push_bits(end_code, width)

    output = writer.getvalue()
    logger.debug(
        f"lzw: {len(symbols)} symbols, minimum code size {code_size}, "
        f"{len(dictionary)} dictionary entries, {writer.bit_count} bits, {len(output)} bytes"
    )
    return output, code_size
