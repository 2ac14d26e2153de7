"""
The exception hierarchy of the package. Every error that the decoder can raise on malformed input
is an instance of `hackpl.lib.exceptions.HackplException`. No error is ever recovered from inside
the library; the decode of the current container is aborted and the exception is surfaced to the
caller, who decides whether to continue with the next input.
"""
from __future__ import annotations


class HackplException(Exception):
    """
    Base class of all errors that are raised while decoding a container.
    """


class FormatError(HackplException, ValueError):
    """
    A structural problem with the container: The input is not a recognized variant of the format.
    """


class BadMagic(FormatError):
    def __init__(self, magic: int):
        super().__init__(F'invalid magic 0x{magic:04X}, expected the MZ signature 0x5A4D')
        self.magic = magic


class UnsupportedOverlay(FormatError):
    def __init__(self, overlay: int):
        super().__init__(F'executable not supported; overlay number is {overlay}, expected 0')
        self.overlay = overlay


class InvalidHeaderSize(FormatError):
    def __init__(self, declared: int, required: int):
        super().__init__(
            F'invalid header size: the header declares 0x{declared:X} bytes, but the fixed fields '
            F'already occupy 0x{required:X} bytes')
        self.declared = declared
        self.required = required


class BlockChecksum(FormatError):
    def __init__(self, offset: int, expected: int, actual: int):
        super().__init__(
            F'block checksum failed at offset 0x{offset:X}: expected 0x{expected:04X}, but got 0x{actual:04X}')
        self.offset = offset
        self.expected = expected
        self.actual = actual


class PatternNotFound(FormatError):
    def __init__(self):
        super().__init__('unable to locate encrypted article blocks in this binary')


class NotPacked(FormatError):
    def __init__(self, reason: str):
        super().__init__(
            F'the executable does not contain a valid block chain ({reason}); it is either truncated '
            F'or it was already unpacked')
        self.reason = reason


class CorruptInput(HackplException, ValueError):
    """
    A back-reference or a relocation table index resolved to an invalid location.
    """


class Unsupported(HackplException, NotImplementedError):
    """
    The input uses an encoding branch that is theoretically reachable but was never observed in any
    known input, so there is no model for it.
    """


class ResourceError(HackplException, EOFError):
    """
    An attempt was made to read past the end of the available data.
    """
