"""
Decoders for the two kinds of blocks that occur in a packed body: compressed image data and a
compressed relocation table. Both read their control bits through a
`hackpl.lib.decompression.WordBitReader` and take literal bytes directly from the block.

A compressed data block starts with two tables, followed by the bit stream:

    u8[8]   T1: number of extra bits for each distance class
    u8[16]  T2: copy length for each length class
    u16     number of bytes produced by this block (the first 16 bits of the stream)

A relocation block starts with a single table of 16 extra bit counts, followed by groups of three
raw words (count, segment, first offset); the offsets that follow the first one in a group are
encoded as bit-packed increments.
"""
from __future__ import annotations

import logging

from typing import Iterable

from hackpl.lib.blocks import Block, BlockType
from hackpl.lib.decompression import WordBitReader
from hackpl.lib.exceptions import CorruptInput, Unsupported
from hackpl.lib.mz import SegmentedAddress
from hackpl.lib.structures import MemoryFile, StructReader

_log = logging.getLogger(__name__)

DISTANCE_TABLE_SIZE = 8
LENGTH_TABLE_SIZE = 16
RELOCATION_TABLE_SIZE = 16

STOP_LENGTH_OFFSET = 2 + DISTANCE_TABLE_SIZE + LENGTH_TABLE_SIZE

LENGTH_SHORT_MATCH = 0x00
LENGTH_EXTENDED = 0x0F

DISTANCE_CLASS_PREFIX_CODE = {
    (0, 0): 0,
    (0, 1, 0): 1,
    (0, 1, 1): 2,
    (1, 0, 0): 3,
    (1, 0, 1): 4,
    (1, 1, 0): 5,
    (1, 1, 1, 0): 6,
    (1, 1, 1, 1): 7,
}


def read_distance_class(bits: WordBitReader) -> int:
    code = (bits.read_bit(), bits.read_bit())
    while code not in DISTANCE_CLASS_PREFIX_CODE:
        code += (bits.read_bit(),)
    return DISTANCE_CLASS_PREFIX_CODE[code]


def read_length_extension(bits: WordBitReader) -> int:
    if not bits.read_bit():
        return bits.read(4)
    extension = bits.read_data_byte()
    if extension == 0xFF:
        raise Unsupported('two byte length extension in compressed block')
    return extension


def read_extra_bits(bits: WordBitReader, count: int) -> int:
    """
    Decode a value from the given number of extra bits: The value is zero for zero extra bits and
    otherwise has its most significant bit implied.
    """
    if count <= 0:
        return 0
    count -= 1
    if not count:
        return 1
    return 1 << count | bits.read(count)


def copy_match(output: MemoryFile[bytearray], source: int, length: int):
    """
    Append `length` bytes to the output by copying from the absolute position `source`. The bytes
    are copied one at a time so that the copy may overlap its own output.
    """
    position = output.tell()
    if not 0 <= source < position:
        raise CorruptInput(
            F'back-reference to 0x{source:X} at output position 0x{position:X}')
    data = output.getvalue()
    for k in range(source, source + length):
        output.write_byte(data[k])


def decompress_block(reader: StructReader, output: MemoryFile[bytearray]) -> int:
    """
    Decompress a single data block. The reader must be positioned directly after the size field of
    the block; the output is shared by all data blocks of one executable and its cursor is the
    absolute position that back-references are computed from. Returns the number of bytes that
    were written to the output.
    """
    distance_table = reader.read_exactly(DISTANCE_TABLE_SIZE)
    length_table = reader.read_exactly(LENGTH_TABLE_SIZE)
    bits = WordBitReader(reader)
    stop_length = bits.read(16)
    start = output.tell()

    while output.tell() - start < stop_length:
        if not bits.read_bit():
            output.write_byte(bits.read_data_byte())
            continue
        length_class = 2 * bits.read_ones(7) + bits.read_bit()
        length = length_table[length_class]
        if length == LENGTH_SHORT_MATCH:
            distance = bits.read_data_byte()
            if distance >= output.tell():
                raise CorruptInput(
                    F'short match distance 0x{distance:X} at output position 0x{output.tell():X}')
            copy_match(output, output.tell() - distance, 2)
            continue
        if length == LENGTH_EXTENDED:
            length += read_length_extension(bits)
        distance_class = read_distance_class(bits)
        distance = read_extra_bits(bits, distance_table[distance_class]) << 8
        distance |= bits.read_data_byte()
        copy_match(output, output.tell() - distance, length + 2)

    return output.tell() - start


def calc_uncompressed_size(blocks: Iterable[Block]) -> int:
    """
    Sum up the output sizes of all data blocks. The size of each block is read from the beginning
    of its bit stream, which follows the size field and both tables.
    """
    total = 0
    for block in blocks:
        if block.type != BlockType.DATA:
            continue
        with block.reader.detour(STOP_LENGTH_OFFSET):
            total += block.reader.u16()
    return total


def decode_relocations(reader: StructReader) -> list[SegmentedAddress]:
    """
    Decode a relocation block. The reader must be positioned directly after the size field of the
    block. The fixups are returned in the order in which they are encoded.
    """
    table = reader.read_exactly(RELOCATION_TABLE_SIZE)
    bits = WordBitReader(reader)
    relocations: list[SegmentedAddress] = []

    while True:
        counter = bits.read_data_word()
        if not counter:
            break
        segment = bits.read_data_word()
        address = bits.read_data_word()
        _log.debug(F'relocation group at segment 0x{segment:04X}, offset 0x{address:04X}, count {counter - 1}')
        for _ in range(counter - 1):
            relocations.append(SegmentedAddress(address & 0xFFFF, segment))
            index = bits.read(2)
            if index == 3:
                index += bits.read_ones(15)
            if index >= RELOCATION_TABLE_SIZE:
                raise CorruptInput(F'relocation table index {index} is out of range')
            extra = table[index]
            if extra:
                address += 1 << extra | bits.read(extra)
            else:
                address += 1

    return relocations
