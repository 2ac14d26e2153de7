"""
A model of the DOS MZ executable container. The same model is used for the packed input and for
the rebuilt output: `hackpl.lib.mz.MZExecutable.Parse` reads an image and
`hackpl.lib.mz.MZExecutable.Build` assembles a new one from its logical fields. Rendering a built
executable and parsing the result again reproduces the same logical fields.
"""
from __future__ import annotations

import struct

from typing import Iterable, NamedTuple

from hackpl.lib.exceptions import BadMagic, InvalidHeaderSize, UnsupportedOverlay
from hackpl.lib.structures import StructReader, Struct

MZ_MAGIC = 0x5A4D
MZ_PAGE_SIZE = 0x200
MZ_PARAGRAPH = 0x10
MZ_FIXED_HEADER_SIZE = 0x1C


class SegmentedAddress(NamedTuple):
    """
    A 16-bit segment and 16-bit offset pair; the linear address is `segment * 16 + offset`.
    """
    offset: int
    segment: int

    @classmethod
    def At(cls, segment: int, offset: int) -> SegmentedAddress:
        return cls(offset & 0xFFFF, segment & 0xFFFF)

    @property
    def absolute(self) -> int:
        return self.segment * MZ_PARAGRAPH + self.offset

    def base(self) -> SegmentedAddress:
        return SegmentedAddress(0, self.segment)

    def __str__(self):
        return F'{self.segment:04X}:{self.offset:04X}'


class MZHeader(Struct):
    """
    The fixed 0x1C byte prefix of an MZ header.
    """
    def __init__(self, reader: StructReader[memoryview]):
        magic = reader.u16()
        if magic != MZ_MAGIC:
            raise BadMagic(magic)
        (
            self.last_page_bytes,
            self.pages,
            self.relocation_count,
            self.header_paragraphs,
            self.min_alloc,
            self.max_alloc,
            ss,
            sp,
            self.checksum,
            ip,
            cs,
            self.relocation_table_offset,
            self.overlay,
        ) = reader.read_struct('<13H')
        if self.overlay != 0:
            raise UnsupportedOverlay(self.overlay)
        self.stack = SegmentedAddress(sp, ss)
        self.entry = SegmentedAddress(ip, cs)

    @property
    def header_size(self) -> int:
        return self.header_paragraphs * MZ_PARAGRAPH

    @property
    def image_size(self) -> int:
        """
        The number of bytes that a DOS loader reads from the file, header included. A nonzero
        last page count replaces the final full page, so data appended behind the image is not
        counted. Adding `last` to `pages * 512` instead would overstate a partial last page by one
        full page and include appended data in the body.
        """
        size = self.pages * MZ_PAGE_SIZE
        if self.last_page_bytes:
            size -= MZ_PAGE_SIZE - self.last_page_bytes
        return size


class MZExecutable:
    """
    An MZ executable: the raw header bytes, the relocation list, and the load image (body). The body
    is always owned by exactly one executable; both `Parse` and `Build` copy it into a new buffer.
    """
    header: bytes
    body: bytearray
    relocations: list[SegmentedAddress]

    def __init__(
        self,
        header: bytes,
        body: bytearray,
        relocations: list[SegmentedAddress],
        entry: SegmentedAddress,
        stack: SegmentedAddress,
        min_alloc: int = 0,
        max_alloc: int = 0xFFFF,
    ):
        self.header = header
        self.body = body
        self.relocations = relocations
        self.entry = entry
        self.stack = stack
        self.min_alloc = min_alloc
        self.max_alloc = max_alloc

    @property
    def extra_header(self) -> bytes:
        """
        The header bytes that follow the fixed fields; they are retained but not interpreted.
        """
        return self.header[MZ_FIXED_HEADER_SIZE:]

    def body_reader(self) -> StructReader[memoryview]:
        return StructReader(memoryview(self.body))

    @classmethod
    def Parse(cls, data: bytes | bytearray | memoryview) -> MZExecutable:
        reader = StructReader(memoryview(data))
        mz = MZHeader.Parse(reader)
        header_size = mz.header_size
        if header_size < reader.tell():
            raise InvalidHeaderSize(header_size, reader.tell())
        reader.read_exactly(header_size - reader.tell())
        header = bytes(reader.getbuffer()[:header_size])
        relocations = []
        if mz.relocation_count:
            with reader.detour(mz.relocation_table_offset):
                if reader.tell() != mz.relocation_table_offset:
                    reader.read_exactly(mz.relocation_table_offset - reader.tell())
                for _ in range(mz.relocation_count):
                    offset, segment = reader.read_struct('<2H')
                    relocations.append(SegmentedAddress(offset, segment))
        # the last byte of the file is padding beyond the image
        body_size = min(reader.remaining_bytes - 1, mz.image_size - header_size)
        body = bytearray(reader.read_exactly(max(0, body_size)))
        return cls(
            header,
            body,
            relocations,
            mz.entry,
            mz.stack,
            mz.min_alloc,
            mz.max_alloc,
        )

    @classmethod
    def Build(
        cls,
        body: bytes | bytearray | memoryview,
        relocations: Iterable[SegmentedAddress],
        entry: SegmentedAddress,
        stack: SegmentedAddress,
        min_alloc: int = 0,
        max_alloc: int = 0xFFFF,
    ) -> MZExecutable:
        relocations = list(relocations)
        table = b''.join(struct.pack('<2H', r.offset, r.segment) for r in relocations)
        header_size = MZ_FIXED_HEADER_SIZE + len(table)
        header_size += -header_size % MZ_PARAGRAPH
        image_size = header_size + len(body)
        pages, last_page_bytes = divmod(image_size, MZ_PAGE_SIZE)
        if last_page_bytes:
            pages += 1
        header = bytearray(header_size)
        struct.pack_into(
            '<2s13H', header, 0,
            B'MZ',
            last_page_bytes,
            pages,
            len(relocations),
            header_size // MZ_PARAGRAPH,
            min_alloc,
            max_alloc,
            stack.segment,
            stack.offset,
            0,
            entry.offset,
            entry.segment,
            MZ_FIXED_HEADER_SIZE,
            0,
        )
        header[MZ_FIXED_HEADER_SIZE:MZ_FIXED_HEADER_SIZE + len(table)] = table
        return cls(
            bytes(header),
            bytearray(body),
            relocations,
            entry,
            stack,
            min_alloc,
            max_alloc,
        )

    def render(self) -> bytearray:
        """
        Serialize the executable. A single padding byte follows the image; it is the byte that
        `hackpl.lib.mz.MZExecutable.Parse` deliberately does not read.
        """
        output = bytearray(self.header)
        output.extend(self.body)
        output.append(0)
        return output

    def __bytes__(self):
        return bytes(self.render())
