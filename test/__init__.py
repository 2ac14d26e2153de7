import logging
import random
import string
import struct
import unittest

import hackpl

from hackpl.lib.blocks import BLOCK_CHAIN_PREFIX, BlockType, checksum
from hackpl.lib.crypto import encrypt, password_for
from hackpl.lib.mz import MZ_PARAGRAPH, MZExecutable, SegmentedAddress


__all__ = [
    'hackpl',
    'TestBase',
    'NameUnknownException',
    'BitWriter',
    'SampleIssue',
]


class NameUnknownException(Exception):
    def __init__(self, name):
        super().__init__('could not resolve: {}'.format(name))


class BitWriter:
    """
    Produces streams for `hackpl.lib.decompression.WordBitReader`. A slot for the next control word
    is reserved as soon as the current one is full, which is the moment the reader fetches it.
    """
    def __init__(self):
        self.output = bytearray()
        self._reserve()

    def _reserve(self):
        self._slot = len(self.output)
        self._word = 0
        self._size = 0
        self.output.extend(bytes(2))

    def write_bit(self, bit: int):
        self._word = self._word << 1 | (bit & 1)
        self._size += 1
        struct.pack_into('<H', self.output, self._slot, self._word << (16 - self._size))
        if self._size == 16:
            self._reserve()

    def write(self, value: int, count: int):
        for k in reversed(range(count)):
            self.write_bit(value >> k)

    def write_ones(self, count: int, limit: int):
        for _ in range(count):
            self.write_bit(1)
        if count < limit:
            self.write_bit(0)

    def write_byte(self, value: int):
        self.output.append(value)

    def write_word(self, value: int):
        self.output.extend(struct.pack('<H', value))

    def getvalue(self) -> bytes:
        return bytes(self.output)


DISTANCE_TABLE = bytes(range(8))
LENGTH_TABLE = bytes(range(16))
RELOCATION_TABLE = bytes(range(16))

DISTANCE_CODES = {
    0: (0, 0),
    1: (0, 1, 0),
    2: (0, 1, 1),
    3: (1, 0, 0),
    4: (1, 0, 1),
    5: (1, 1, 0),
    6: (1, 1, 1, 0),
    7: (1, 1, 1, 1),
}


class DataBlockWriter:
    """
    Emits a compressed data block payload that uses the tables `DISTANCE_TABLE` and `LENGTH_TABLE`:
    length class `k` copies `k + 2` bytes and distance class `c` has `c` extra bits.
    """
    def __init__(self, size: int):
        self.bits = BitWriter()
        self.bits.write(size, 16)

    def literal(self, byte: int):
        self.bits.write_bit(0)
        self.bits.write_byte(byte)
        return self

    def literals(self, data: bytes):
        for byte in data:
            self.literal(byte)
        return self

    def _length_class(self, length_class: int):
        self.bits.write_bit(1)
        self.bits.write_ones(length_class // 2, 7)
        self.bits.write_bit(length_class & 1)

    def short_match(self, distance: int):
        self._length_class(0)
        self.bits.write_byte(distance)
        return self

    def match(self, distance: int, length: int):
        code = length - 2
        if not 1 <= code < 0x0F:
            raise ValueError(code)
        self._length_class(code)
        self._distance(distance)
        return self

    def extended_match(self, distance: int, extension: int, from_byte: bool = False):
        self._length_class(0x0F)
        if from_byte:
            self.bits.write_bit(1)
            self.bits.write_byte(extension)
        else:
            self.bits.write_bit(0)
            self.bits.write(extension, 4)
        self._distance(distance)
        return self

    def _distance(self, distance: int):
        high, low = divmod(distance, 0x100)
        if not high:
            distance_class = 0
        else:
            distance_class = high.bit_length()
        for bit in DISTANCE_CODES[distance_class]:
            self.bits.write_bit(bit)
        if distance_class > 1:
            self.bits.write(high, distance_class - 1)
        self.bits.write_byte(low)

    def payload(self) -> bytes:
        return DISTANCE_TABLE + LENGTH_TABLE + self.bits.getvalue()


def relocation_payload(groups) -> bytes:
    """
    Encode relocation groups, each a segment followed by a list of ascending offsets, with the table
    `RELOCATION_TABLE`: index `i` adds an increment of `i` extra bits with an implied top bit.
    """
    bits = BitWriter()
    for segment, offsets in groups:
        bits.write_word(len(offsets) + 1)
        bits.write_word(segment)
        bits.write_word(offsets[0])
        increments = [b - a for a, b in zip(offsets, offsets[1:])] + [1]
        for increment in increments:
            index = increment.bit_length() - 1
            if index < 3:
                bits.write(index, 2)
            else:
                bits.write(3, 2)
                bits.write_ones(index - 3, 15)
            if index:
                bits.write(increment, index)
    bits.write_word(0)
    return RELOCATION_TABLE + bits.getvalue()


def block(kind: int, payload: bytes, corrupt: bool = False) -> bytes:
    region = struct.pack('<H', len(payload) + 2) + payload
    check = checksum(region)
    if corrupt:
        check ^= 0x0101
    return struct.pack('<BH', kind, check) + region


def block_chain(*blocks: bytes) -> bytes:
    return bytes(BLOCK_CHAIN_PREFIX) + B''.join(blocks) + B'\0'


def article_call(segment: int, length: int) -> bytes:
    return (
        B'\xB8' + struct.pack('<H', segment) + B'\x50\x57'
        B'\xB8' + struct.pack('<H', length) + B'\x50'
        B'\xBF\x58\x10\x1E\x57\x9A\x00\x00\x00\x00'
    )


def pad_to_paragraph(data: bytearray):
    data.extend(bytes(-len(data) % MZ_PARAGRAPH))


class SampleIssue:
    """
    A synthetic issue of the zine: an unpacked executable with encrypted articles and the packed
    executable that contains it.
    """
    CODE = B'\x0E\x1F\xBA\x0E\x00\xB4\x09\xCD\x21\xB8\x01\x4C\xCD\x21'

    def __init__(self, issue: int = 1, articles=None, relocations=None, password: bytes = None):
        self.issue = issue
        self.password = password or password_for(issue)
        self.articles = articles or [
            B'Witamy w kolejnym numerze! \x8f\xa5 To jest pierwszy artyku\x88.\r\n',
            B'Drugi artykul jest troche dluzszy i opowiada o kompresji danych.\r\n' * 3,
        ]
        self.relocations = relocations or [
            (0x0000, [0x0001, 0x0003, 0x0010, 0x0420]),
            (0x0002, [0x0008]),
        ]
        self.entry = SegmentedAddress(0x0005, 0x0000)
        self.stack = SegmentedAddress(0x0800, 0x0030)
        self.body = self._build_body()
        self.unpacked = MZExecutable.Build(
            self.body, self.relocation_list, self.entry, self.stack, 0x0010, 0xFFFF)

    @property
    def relocation_list(self):
        return [SegmentedAddress(offset, segment) for segment, offsets in self.relocations for offset in offsets]

    def _build_body(self) -> bytes:
        calls_size = len(self.CODE) + len(article_call(0, 0)) * len(self.articles)
        body = bytearray(self.CODE)
        position = calls_size + (-calls_size % MZ_PARAGRAPH)
        locations = []
        for article in self.articles:
            locations.append((position // MZ_PARAGRAPH, len(article)))
            position += len(article)
            position += -position % MZ_PARAGRAPH
        for segment, length in locations:
            body.extend(article_call(segment, length))
        for article in self.articles:
            pad_to_paragraph(body)
            stored = encrypt(article, self.password, self.issue)
            stored.reverse()
            body.extend(stored)
        return bytes(body)

    def data_blocks(self, split: int = 2):
        chunk = -(-len(self.body) // split)
        blocks = []
        for k in range(0, len(self.body), chunk):
            part = self.body[k:k + chunk]
            writer = DataBlockWriter(len(part))
            writer.literals(part)
            blocks.append(block(BlockType.DATA, writer.payload()))
        return blocks

    def packed(self, *blocks: bytes) -> bytes:
        if not blocks:
            blocks = (*self.data_blocks(), block(BlockType.RELOCATIONS, relocation_payload(self.relocations)))
        body = bytearray(block_chain(*blocks))
        pad_to_paragraph(body)
        stub_segment = len(body) // MZ_PARAGRAPH
        body.extend(B'\xEB\x08\x90\x90')
        body.extend(struct.pack('<3H', self.stack.offset, self.stack.segment, self.entry.offset))
        body.extend(B'\xFA\x8C\xC8\x8E\xD8\xFB\xCB')
        packed = MZExecutable.Build(
            body, [], SegmentedAddress(0, stub_segment), SegmentedAddress(0x100, stub_segment), 0x0010, 0xFFFF)
        return bytes(packed.render())


class TestBase(unittest.TestCase):

    def generate_random_buffer(self, size):
        return bytes(random.randrange(0, 0x100) for _ in range(size))

    def generate_random_text(self, size):
        return ''.join(string.printable[
            random.randrange(0, len(string.printable))] for _ in range(size)).encode('UTF8')

    def setUp(self):
        random.seed(0xBAADF00D)  # guarantee deterministic 'random' buffers
        logging.disable(logging.CRITICAL)

    def assertContains(self, container, member, msg=None):
        self.assertIn(member, container, msg)
