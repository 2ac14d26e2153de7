"""
Location of the encrypted articles inside an unpacked executable. The viewer decrypts each article
with a far call that is prepared by the following instruction sequence:

    B8 ?? ??    MOV   AX, segment
    50          PUSH  AX
    57          PUSH  DI
    B8 ?? ??    MOV   AX, size
    50          PUSH  AX
    BF ?? ??    MOV   DI, buffer
    1E          PUSH  DS
    57          PUSH  DI
    9A          CALLF decrypt

The operands of the two `MOV AX` instructions describe the location of one article: It begins at
offset zero of the given segment and has the given size.
"""
from __future__ import annotations

import logging
import re

from typing import NamedTuple

from hackpl.lib.exceptions import PatternNotFound
from hackpl.lib.mz import SegmentedAddress
from hackpl.lib.structures import StructReader
from hackpl.lib.types import buf

_log = logging.getLogger(__name__)


class MaskedPattern:
    """
    A byte pattern with a wildcard mask. The mask applies to all bytes of the pattern after the
    first one, which always has to match literally. Mask bits that are set must match the pattern.
    """
    def __init__(self, pattern: bytes, mask: bytes):
        if not pattern or not mask:
            raise ValueError('pattern and mask must not be empty')
        if len(pattern) != len(mask) + 1:
            raise ValueError(
                F'a mask of length {len(mask)} requires a pattern of length {len(mask) + 1}, got {len(pattern)}')
        self.pattern = bytes(pattern)
        self.mask = bytes(mask)
        self.regex = re.compile(
            re.escape(self.pattern[:1]) + B''.join(
                self._byte_class(p, m) for p, m in zip(self.pattern[1:], self.mask)),
            flags=re.DOTALL)

    @staticmethod
    def _byte_class(value: int, mask: int) -> bytes:
        if mask == 0xFF:
            return re.escape(bytes((value,)))
        if mask == 0x00:
            return B'.'
        options = bytes(b for b in range(0x100) if b & mask == value & mask)
        return B'[%s]' % B''.join(re.escape(bytes((b,))) for b in options)

    def __len__(self):
        return len(self.pattern)

    def finditer(self, data: buf):
        """
        Yield all non-overlapping matches from left to right as regular expression match objects.
        """
        yield from self.regex.finditer(data)

    def findall(self, data: buf) -> list[bytes]:
        """
        Return the distinct matched byte sequences in the order of their first occurrence.
        """
        hits: dict[bytes, int] = {}
        for match in self.finditer(data):
            hit = bytes(match.group(0))
            if hit in hits:
                _log.debug(F'duplicate match at offset 0x{match.start():X}')
                continue
            _log.debug(F'pattern match at offset 0x{match.start():X}')
            hits[hit] = match.start()
        return list(hits)


DECRYPT_CALL = MaskedPattern(
    bytes.fromhex('B816265057B800F050BF58101E579A'),
    bytes.fromhex('0000FFFFFF0000FFFF0000FFFFFF'),
)


class ArticleRange(NamedTuple):
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length

    def __str__(self):
        return F'0x{self.offset:X}:0x{self.length:X}'


def find_article_ranges(body: buf, pattern: MaskedPattern = DECRYPT_CALL) -> list[ArticleRange]:
    """
    Find the locations of all encrypted articles in an unpacked body. Raises
    `hackpl.lib.exceptions.PatternNotFound` if there are none.
    """
    hits = pattern.findall(body)
    if not hits:
        raise PatternNotFound
    ranges = []
    for hit in hits:
        reader = StructReader(memoryview(hit))
        reader.u8()
        segment = reader.u16()
        reader.seekrel(3)
        length = reader.u16()
        ranges.append(ArticleRange(SegmentedAddress(0, segment).absolute, length))
    return ranges
