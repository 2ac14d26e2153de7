"""
Interfaces and classes to read structured data. This is the bounds-checked binary cursor that all
decoders of the package are built on: Every read either returns exactly the requested amount of
data or raises `hackpl.lib.structures.EOF`.
"""
from __future__ import annotations

import abc
import contextlib
import functools
import inspect
import io
import struct
import sys

from typing import (
    TYPE_CHECKING,
    Generic,
    Iterable,
    TypeVar,
    Union,
    cast,
    get_origin,
)

from hackpl.lib.exceptions import ResourceError

if TYPE_CHECKING:
    from typing import Self

    from hackpl.lib.types import buf

    T = TypeVar('T', bound=Union[bytearray, bytes, memoryview])
    R = TypeVar('R', bound=io.IOBase)
else:
    T = TypeVar('T')
    R = TypeVar('R')

if sys.version_info >= (3, 12):
    from collections.abc import Buffer
else:
    Buffer = object


def signed(k: int, bitsize: int):
    """
    If `k` is an integer of the given bit size, cast it to a signed one.
    """
    M = 1 << bitsize
    k = k & (M - 1)
    return k - M if k >> (bitsize - 1) else k


class EOF(ResourceError):
    """
    While reading from a `hackpl.lib.structures.MemoryFile`, less bytes were available than
    requested. The exception contains the data from the incomplete read.
    """
    def __init__(self, size: int, rest: buf = B''):
        super().__init__(F'Unexpected end of buffer; attempted to read {size} bytes, but got only {len(rest)}.')
        self.rest = rest
        self.size = size

    def __bytes__(self):
        return bytes(self.rest)


class StreamDetour(Generic[R]):
    """
    A stream detour is used as a context manager to temporarily read from a different location
    in the stream and then return to the original offset when the context ends.
    """
    def __init__(self, stream: R, offset: int | None = None, whence: int = io.SEEK_SET):
        self.stream = stream
        self.offset = offset
        self.whence = whence

    def __enter__(self):
        self.cursor = self.stream.tell()
        if self.offset is not None:
            self.stream.seek(self.offset, self.whence)
        return self

    def __exit__(self, *args):
        self.stream.seek(self.cursor, io.SEEK_SET)


class MemoryFileMethods(Generic[T]):
    """
    A thin wrapper around (potentially mutable) byte sequences which gives it the features of a
    file-like object.
    """
    _data: T
    _cursor: int
    _closed: bool

    def __bytes__(self):
        return bytes(self._data)

    def __init__(self, data: T | MemoryFileMethods[T] | None = None) -> None:
        if data is None:
            data = bytearray()
        if isinstance(data, (bytearray, bytes, memoryview)):
            self._cursor = 0
            self._closed = False
            self._data = data
        elif isinstance(data, MemoryFileMethods):
            self._cursor = data._cursor
            self._closed = data._closed
            self._data = data._data
        else:
            raise TypeError(F'Invalid input: {data!r}.')

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, ex_type, ex_value, trace) -> bool:
        return False

    def __len__(self):
        return len(self._data)

    def readable(self) -> bool:
        return not self._closed

    def seekable(self) -> bool:
        return not self._closed

    def writable(self) -> bool:
        if self._closed:
            return False
        if isinstance(self._data, memoryview):
            return not self._data.readonly
        return isinstance(self._data, bytearray)

    @property
    def eof(self) -> bool:
        return self._closed or self._cursor >= len(self._data)

    @property
    def remaining_bytes(self) -> int:
        return len(self._data) - self.tell()

    def detour(self, offset: int | None = None, whence: int = io.SEEK_SET):
        return StreamDetour(cast(io.IOBase, self), offset, whence=whence)

    def read(self, size: int | None = None, peek: bool = False) -> T:
        beginning = self._cursor
        if size is None or size < 0:
            end = len(self._data)
        else:
            end = min(self._cursor + size, len(self._data))
        result = self._data[beginning:end]
        if not peek:
            self._cursor = end
        return result

    def peek(self, size: int | None = None) -> memoryview:
        cursor = self._cursor
        mv = memoryview(self._data)
        if size is None or size < 0:
            return mv[cursor:]
        return mv[cursor:cursor + size]

    def tell(self) -> int:
        return self._cursor

    def seekrel(self, offset: int) -> int:
        return self.seek(offset, io.SEEK_CUR)

    def seekset(self, offset: int) -> int:
        if offset < 0:
            return self.seek(offset, io.SEEK_END)
        else:
            return self.seek(offset, io.SEEK_SET)

    def getbuffer(self) -> memoryview:
        return memoryview(self._data)

    def getvalue(self) -> T:
        return self._data

    def seek(self, offset: int, whence=io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            if offset < 0:
                raise ValueError('no negative offsets allowed for SEEK_SET.')
            self._cursor = offset
        elif whence == io.SEEK_CUR:
            self._cursor += offset
        elif whence == io.SEEK_END:
            self._cursor = len(self._data) + offset
        self._cursor = max(self._cursor, 0)
        self._cursor = min(self._cursor, len(self._data))
        return self._cursor

    def truncate(self, size: int | None = None) -> int:
        if not isinstance(self._data, bytearray):
            raise TypeError
        if size is not None:
            if not (0 <= size <= len(self._data)):
                raise ValueError('invalid size value')
            self._cursor = size
        del self._data[self._cursor:]
        return self.tell()

    def write_byte(self, byte: int) -> None:
        if not isinstance(self._data, bytearray):
            raise PermissionError
        cc = self._cursor
        if cc < len(self._data):
            self._data[cc] = byte
        else:
            self._data.append(byte)
        self._cursor = cc + 1

    def write(self, data: Buffer | Iterable[int]) -> int:
        out = self._data
        if not isinstance(out, bytearray):
            raise PermissionError
        data = bytes(data)
        beginning = self._cursor
        self._cursor += len(data)
        out[beginning:self._cursor] = data
        return len(data)

    def __getitem__(self, slice):
        return self._data[slice]


class MemoryFile(MemoryFileMethods[T], io.BytesIO):
    pass


class StructReader(MemoryFile[T]):
    """
    An extension of a `hackpl.lib.structures.MemoryFile` which provides methods to read structured
    data. The byte order is little endian unless the reader was created as a big endian reader or
    the `hackpl.lib.structures.StructReader.be` context is active; every integer read also accepts
    an explicit `bigendian` override for that single call.
    """
    __slots__ = 'bigendian',

    def __init__(self, data: T | StructReader[T], bigendian: bool | None = None):
        super().__init__(data)
        if bigendian is None:
            if isinstance(data, StructReader):
                bigendian = data.bigendian
            else:
                bigendian = False
        self.bigendian = bigendian

    def __enter__(self) -> StructReader:
        return super().__enter__()

    @property
    @contextlib.contextmanager
    def be(self):
        self.bigendian = True
        try:
            yield self
        finally:
            self.bigendian = False

    @property
    def byteorder_format(self) -> str:
        return '>' if self.bigendian else '<'

    @property
    def byteorder_name(self):
        return 'big' if self.bigendian else 'little'

    def region(self, offset: int, size: int) -> StructReader[memoryview]:
        """
        Returns a new reader over the `size` bytes that start at `offset`, relative to the current
        position of this reader. The region cannot extend beyond the end of the parent data; if it
        would, an `hackpl.lib.structures.EOF` exception is raised. The cursor of the parent is not
        moved.
        """
        start = self._cursor + offset
        if start < 0 or size < 0:
            raise ValueError(F'invalid region of size {size} at relative offset {offset}')
        view = memoryview(self._data)[start:start + size]
        if len(view) < size:
            raise EOF(size, view)
        return StructReader(view, self.bigendian)

    def read_exactly(self, size: int | None = None, peek: bool = False) -> T:
        """
        Read bytes from the underlying stream. Raises an exception of type
        `hackpl.lib.structures.EOF` when fewer data is available in the stream than requested via
        the `size` parameter. The remaining data can be extracted from the exception.
        """
        data = self.read(size, peek)
        if size and len(data) < size:
            raise EOF(size, data)
        return data

    def read_integer(
        self,
        size: int,
        peek: bool = False,
        signed: bool = False,
        bigendian: bool | None = None,
    ) -> int:
        """
        Read an integer of the given size (in bits) from the stream.
        """
        nbytes, rest = divmod(size, 8)
        if rest > 0:
            raise ValueError(
                F'A {self.__class__.__name__} cannot read {size} bit{"s" * (size > 1)}, only multiples of 8 are possible.')
        data = self.read(nbytes, peek)
        if len(data) < nbytes:
            raise EOF(nbytes, data)
        if bigendian is None:
            bigendian = self.bigendian
        return int.from_bytes(data, 'big' if bigendian else 'little', signed=signed)

    def read_bytes(self, size: int, peek: bool = False) -> bytes:
        """
        The method reads `size` many bytes from the underlying stream.
        """
        data = self.read_exactly(size, peek)
        if not isinstance(data, bytes):
            data = bytes(data)
        return data

    def read_struct(self, spec: str, peek=False) -> list[int]:
        """
        Read structured data from the stream in any format supported by the `struct` module. The
        current byte ordering is used unless the format begins with an explicit byte order symbol.
        """
        if not spec:
            raise ValueError('no format specified')
        byteorder = spec[:1]
        if byteorder in '<!=@>':
            spec = spec[1:]
        else:
            byteorder = self.byteorder_format
        spec = F'{byteorder}{spec}'
        return list(struct.unpack(spec, self.read_bytes(struct.calcsize(spec), peek)))

    def read_byte(self, peek: bool = False) -> int:
        try:
            b = self._data[self._cursor]
        except IndexError:
            raise EOF(1)
        if not peek:
            self._cursor += 1
        return b

    u8 = read_byte

    def i8(self, peek: bool = False) -> int:
        return signed(self.u8(peek), 8)

    def u16(self, peek: bool = False, bigendian: bool | None = None) -> int:
        return self.read_integer(16, peek, signed=False, bigendian=bigendian)

    def u32(self, peek: bool = False, bigendian: bool | None = None) -> int:
        return self.read_integer(32, peek, signed=False, bigendian=bigendian)

    def u64(self, peek: bool = False, bigendian: bool | None = None) -> int:
        return self.read_integer(64, peek, signed=False, bigendian=bigendian)

    def i16(self, peek: bool = False, bigendian: bool | None = None) -> int:
        return self.read_integer(16, peek, signed=True, bigendian=bigendian)

    def i32(self, peek: bool = False, bigendian: bool | None = None) -> int:
        return self.read_integer(32, peek, signed=True, bigendian=bigendian)

    def i64(self, peek: bool = False, bigendian: bool | None = None) -> int:
        return self.read_integer(64, peek, signed=True, bigendian=bigendian)


class StructMeta(abc.ABCMeta):
    """
    A metaclass to facilitate the behavior outlined for `hackpl.lib.structures.Struct`.
    """
    def __new__(mcls, name, bases, namespace: dict, interface: type[StructReader] | None = None):
        if interface is None:
            if init := namespace.get('__init__'):
                args = iter(inspect.signature(init).parameters.values())
                next(args)
                interface = next(args).annotation
                if isinstance(interface, str):
                    try:
                        module = sys.modules[namespace['__module__']]
                        interface = eval(interface, module.__dict__)
                    except Exception:
                        interface = None
                if not isinstance(interface, type):
                    interface = get_origin(interface)
                if not isinstance(interface, type) or not issubclass(interface, StructReader):
                    raise RuntimeError
            else:
                interface = StructReader

        def parse(cls, reader: T | StructReader[T], *args, **kwargs):
            if not isinstance(reader, interface):
                reader = interface(reader)
            return cls(reader, *args, **kwargs)

        namespace.update(Parse=classmethod(parse))
        return super().__new__(mcls, name, bases, namespace)

    def __init__(cls, name, bases, nmspc, **_):
        super().__init__(name, bases, nmspc)
        original__init__ = cls.__init__

        @functools.wraps(original__init__)
        def wrapped__init__(self: Struct, reader: StructReader, *args, **kwargs):
            start = reader.tell()
            view = reader.getbuffer()
            original__init__(self, reader, *args, **kwargs)
            self._data = view[start:reader.tell()]
            del view

        setattr(cls, '__init__', wrapped__init__)


class Struct(Generic[T], Buffer, metaclass=StructMeta):
    """
    A class to parse structured data. A `hackpl.lib.structures.Struct` class can be instantiated
    as follows:

        foo = Struct.Parse(data, bar=29)

    The initialization routine of the structure will be called with a single argument `reader`. If
    the object `data` is already a `hackpl.lib.structures.StructReader`, then it will be passed
    as `reader`. Otherwise, the argument will be wrapped in a `hackpl.lib.structures.StructReader`.
    Additional arguments to the struct are passed through.
    """
    _data: memoryview | bytearray

    @classmethod
    def Parse(cls, reader: T | StructReader[T], *args, **kwargs) -> Self:
        ...

    def __len__(self):
        return len(self._data)

    def __bytes__(self):
        return bytes(self._data)

    def __buffer__(self, flags: int, /):
        return memoryview(self._data)

    def __init__(self, reader: StructReader[T], *args, **kwargs):
        pass
