"""
Bit level access to compressed streams.
"""
from __future__ import annotations

from typing import Union

from hackpl.lib.structures import StructReader


class WordBitReader:
    """
    A helper class to read bitwise from a compressed input stream that stores its control bits in
    little endian 16-bit words, most significant bit first. The stream interleaves these words with
    raw data bytes: `hackpl.lib.decompression.WordBitReader.read_data_byte` and
    `hackpl.lib.decompression.WordBitReader.read_data_word` consume input directly and do not touch
    the bit cache.

    The next control word is fetched as soon as the last bit of the current one has been consumed,
    not when the next bit is requested. The position of data bytes in the stream depends on this
    refill order.
    """

    def __init__(self, buffer: Union[bytearray, StructReader]):
        if not isinstance(buffer, StructReader):
            buffer = StructReader(memoryview(buffer), bigendian=False)
        self._reader: StructReader[memoryview] = buffer
        self._bit_cache: int = 0
        self._bit_cache_size: int = 0
        self.fill()

    def __repr__(self):
        return (
            F'{self.__class__.__name__}(position=0x{self._reader.tell():X}, '
            F'cache=0x{self._bit_cache:04X}, bits={self._bit_cache_size})')

    def __getattr__(self, k):
        return getattr(self._reader, k)

    def __len__(self):
        return self._bit_cache_size

    @property
    def empty(self) -> bool:
        return self._reader.remaining_bytes == 0 and self._bit_cache_size == 0

    def fill(self):
        """
        Load the next 16-bit word into the bit cache. Raises `hackpl.lib.structures.EOF` when the
        underlying reader does not hold another word.
        """
        self._bit_cache = self._reader.u16(bigendian=False)
        self._bit_cache_size = 16

    def read_bit(self) -> int:
        if not self._bit_cache_size:
            self.fill()
        bit = self._bit_cache >> 15
        self._bit_cache = (self._bit_cache << 1) & 0xFFFF
        self._bit_cache_size -= 1
        if not self._bit_cache_size and self._reader.remaining_bytes >= 2:
            self.fill()
        return bit

    def read(self, count: int) -> int:
        result = 0
        for _ in range(count):
            result = result << 1 | self.read_bit()
        return result

    def read_ones(self, limit: int) -> int:
        """
        Count consecutive set bits, up to the given limit. The terminating zero bit is consumed
        unless the limit is reached first.
        """
        ones = 0
        while ones < limit and self.read_bit():
            ones += 1
        return ones

    def read_data_byte(self) -> int:
        return self._reader.u8()

    def read_data_word(self) -> int:
        return self._reader.u16(bigendian=False)
