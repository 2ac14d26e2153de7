"""
The decoding pipeline for packed issues of the zine. The packed executable contains a small
unpacker stub and a chain of blocks; `hackpl.lib.decoder.unpack` rebuilds the original executable
from it, `hackpl.lib.decoder.extract_articles` recovers the plaintext articles from the rebuilt
executable, and `hackpl.lib.decoder.decode` performs both steps.
"""
from __future__ import annotations

import logging

from typing import NamedTuple

from hackpl.lib.articles import find_article_ranges
from hackpl.lib.blocks import BlockChain, BlockType
from hackpl.lib.crypto import Issue, decrypt
from hackpl.lib.exceptions import CorruptInput, NotPacked
from hackpl.lib.mz import MZExecutable, SegmentedAddress
from hackpl.lib.structures import EOF, MemoryFile
from hackpl.lib.types import buf
from hackpl.lib.unpacker import calc_uncompressed_size, decode_relocations, decompress_block

_log = logging.getLogger(__name__)

STUB_ENTRY_META_OFFSET = 4


class DecodeResult(NamedTuple):
    executable: MZExecutable
    articles: list[bytes]


def read_entry_meta(packed: MZExecutable) -> tuple[SegmentedAddress, SegmentedAddress]:
    """
    The unpacker stub stores the initial stack pointer, stack segment, and instruction pointer of
    the original executable as three words, four bytes into the segment of its own entry point.
    Returns the original entry point and stack.
    """
    reader = packed.body_reader()
    reader.seekset(packed.entry.base().absolute)
    reader.read_exactly(STUB_ENTRY_META_OFFSET)
    sp, ss, ip = reader.read_struct('<3H')
    return SegmentedAddress(ip, 0), SegmentedAddress(sp, ss)


def unpack(data: buf | MZExecutable) -> MZExecutable:
    """
    Rebuild the original executable from a packed one.
    """
    packed = data if isinstance(data, MZExecutable) else MZExecutable.Parse(data)
    chain = BlockChain(packed.body)
    try:
        total = calc_uncompressed_size(chain)
    except EOF as E:
        raise NotPacked(str(E)) from E
    _log.debug(F'expecting 0x{total:X} bytes of decompressed image data')

    output = MemoryFile(bytearray(total))
    relocations: list[SegmentedAddress] = []

    for block in chain:
        block.reader.u16()
        if block.type == BlockType.DATA:
            produced = decompress_block(block.reader, output)
            _log.debug(F'block at 0x{block.offset:04X} decompressed to 0x{produced:X} bytes')
        elif block.type == BlockType.RELOCATIONS:
            fixups = decode_relocations(block.reader)
            _log.debug(F'block at 0x{block.offset:04X} contains {len(fixups)} relocations')
            relocations.extend(fixups)
        else:
            _log.info(F'skipping block at 0x{block.offset:04X} of unknown type {block.type}')

    if output.tell() != total:
        raise CorruptInput(
            F'decompressed 0x{output.tell():X} bytes, but the blocks declare 0x{total:X} bytes')

    entry, stack = read_entry_meta(packed)
    _log.debug(F'original entry point {entry}, stack {stack}')

    return MZExecutable.Build(
        output.getvalue(),
        relocations,
        entry,
        stack,
        packed.min_alloc,
        packed.max_alloc,
    )


def extract_articles(
    executable: MZExecutable,
    issue: int | str | Issue,
    password: buf | None = None,
    max_size: int | None = None,
) -> list[bytes]:
    """
    Locate and decrypt all articles in an unpacked executable. The password of the given issue is
    used unless an explicit password is specified.
    """
    issue = Issue.Get(issue)
    if password is None:
        password = issue.password
    reader = executable.body_reader()
    articles = []
    for article in find_article_ranges(executable.body):
        _log.debug(F'article at {article}')
        blob = bytes(reader.region(article.offset, article.length))
        articles.append(bytes(decrypt(blob[::-1], password, issue, max_size)))
    return articles


def decode(data: buf, issue: int | str | Issue) -> DecodeResult:
    """
    Unpack the given packed executable and decrypt its articles.
    """
    issue = Issue.Get(issue)
    executable = unpack(data)
    return DecodeResult(executable, extract_articles(executable, issue))
