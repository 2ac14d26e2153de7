"""
The body of a packed executable begins with a short stub prefix, followed by a sequence of typed,
checksummed blocks. Each block has the following layout:

    u8  type        zero terminates the sequence
    u16 checksum    over the region described below
    u16 size        size of the region, which includes this field

The `hackpl.lib.blocks.BlockChain` class iterates these blocks.
"""
from __future__ import annotations

import enum
import logging

from typing import Iterator, NamedTuple

from hackpl.lib.exceptions import BlockChecksum
from hackpl.lib.structures import StructReader
from hackpl.lib.types import buf

_log = logging.getLogger(__name__)

BLOCK_CHAIN_PREFIX = 6


class BlockType(enum.IntEnum):
    END = 0
    DATA = 1
    RELOCATIONS = 2


class Block(NamedTuple):
    offset: int
    type: int
    reader: StructReader[memoryview]

    @property
    def size(self) -> int:
        return len(self.reader)


def checksum(data: buf | StructReader) -> int:
    """
    Compute the 16-bit rolling checksum of the given data. Each of the two running bytes absorbs
    the carry of its 8-bit addition back into itself.
    """
    if isinstance(data, StructReader):
        data = data.peek()
    bl = bh = 0
    for byte in data:
        bl += byte
        if bl > 0xFF:
            bl = (bl + 1) & 0xFF
        bh += bl
        if bh > 0xFF:
            bh = (bh + 1) & 0xFF
    return bh << 8 | bl


class BlockChain:
    """
    Iterates the blocks inside a packed body. Checksums are verified during the first complete
    iteration; once one pass has finished without error, the `validated` flag is set and later
    passes skip the verification. Every iteration starts from the beginning of the chain.
    """
    validated: bool

    def __init__(self, body: buf):
        self.body = memoryview(body)
        self.validated = False

    def __iter__(self) -> Iterator[Block]:
        reader = StructReader(self.body)
        reader.read_exactly(BLOCK_CHAIN_PREFIX)
        validate = not self.validated
        while True:
            offset = reader.tell()
            kind = reader.u8()
            if kind == BlockType.END:
                break
            expected = reader.u16()
            size = reader.u16(peek=True)
            region = reader.region(0, size)
            reader.seekrel(size)
            if validate:
                computed = checksum(region)
                if computed != expected:
                    raise BlockChecksum(offset, expected, computed)
            _log.debug(F'block at 0x{offset:04X}: type {kind}, size 0x{size:04X}, checksum 0x{expected:04X}')
            yield Block(offset, kind, region)
        self.validated = True

    def blocks(self, kind: BlockType) -> Iterator[Block]:
        for block in self:
            if block.type == kind:
                yield block
