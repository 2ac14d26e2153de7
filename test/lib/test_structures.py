import io
import itertools

from hackpl.lib.structures import EOF, MemoryFile, StructReader

from .. import TestBase


class TestStructures(TestBase):

    def test_memoryfile_bytes(self):
        buffers: list[bytes | memoryview] = [
            B'H@CKPL issue one'
        ]
        buffers.append(memoryview(buffers[0]))
        buffers.append(memoryview(bytearray(buffers[0])).toreadonly())
        for b in buffers:
            with MemoryFile(b) as mem:
                self.assertFalse(mem.writable())
                self.assertTrue(mem.readable())
                with self.assertRaises(Exception):
                    mem.write(B'issue two')
                self.assertEqual(mem.read(6), B'H@CKPL')

    def test_memoryfile_seeking(self):
        with MemoryFile(B'0123456789') as mem:
            mem.seekrel(4)
            self.assertEqual(mem.tell(), 4)
            self.assertEqual(mem.read(2), B'45')
            mem.seek(0, io.SEEK_END)
            self.assertTrue(mem.eof)
            mem.seekrel(-3)
            self.assertEqual(mem.remaining_bytes, 3)
            mem.seekset(-1)
            self.assertEqual(mem.read(), B'9')
            mem.seek(100)
            self.assertEqual(mem.tell(), 10)
            with mem.detour(2):
                self.assertEqual(mem.read(3), B'234')
            self.assertEqual(mem.tell(), 10)

    def test_string_builder(self):
        builder = MemoryFile()
        self.assertTrue(builder.writable())
        builder.write(B'The zine ')
        builder.write(B'decrypts the articles.')
        builder.seekrel(-1)
        builder.write(B'!')
        self.assertEqual(builder.getvalue(), B'The zine decrypts the articles!')

    def test_write_byte_overwrites_and_appends(self):
        builder = MemoryFile(bytearray(B'ABC'))
        builder.seekset(1)
        builder.write_byte(0x58)
        builder.seekset(3)
        builder.write_byte(0x44)
        self.assertEqual(builder.getvalue(), B'AXCD')
        with self.assertRaises(PermissionError):
            MemoryFile(B'ABC').write_byte(0x41)

    def test_write_iterables(self):
        builder = MemoryFile()
        builder.write(B'FOO BAR BAR FOO FOO')
        builder.seek(4)
        builder.write(itertools.repeat(B'X'[0], 7))
        self.assertEqual(builder.getvalue(), B'FOO XXXXXXX FOO FOO')

    def test_integers_little_endian(self):
        reader = StructReader(bytes.fromhex('01 3412 78563412 FF FEFF'))
        self.assertEqual(reader.u8(), 1)
        self.assertEqual(reader.u16(peek=True), 0x1234)
        self.assertEqual(reader.u16(), 0x1234)
        self.assertEqual(reader.u32(), 0x12345678)
        self.assertEqual(reader.i8(), -1)
        self.assertEqual(reader.i16(), -2)
        self.assertTrue(reader.eof)
        self.assertRaises(EOF, reader.u8)

    def test_integers_byte_order(self):
        reader = StructReader(bytes.fromhex('1234 1234 1234'))
        self.assertEqual(reader.u16(bigendian=True), 0x1234)
        with reader.be:
            self.assertEqual(reader.u16(), 0x1234)
        self.assertEqual(reader.u16(), 0x3412)

    def test_read_struct(self):
        reader = StructReader(bytes.fromhex('0100 0200 0300 0004'))
        self.assertEqual(reader.read_struct('3H'), [1, 2, 3])
        self.assertEqual(reader.read_struct('>H'), [4])
        self.assertRaises(ValueError, lambda: reader.read_struct(''))

    def test_short_reads_raise(self):
        reader = StructReader(B'\x01\x02\x03')
        with self.assertRaises(EOF) as context:
            reader.read_exactly(5)
        self.assertEqual(bytes(context.exception), B'\x01\x02\x03')
        self.assertIsInstance(context.exception, EOFError)
        reader.seekset(2)
        self.assertRaises(EOF, reader.u16)

    def test_region_is_bounded_and_relative(self):
        reader = StructReader(B'ABCDEFGH')
        reader.seekset(2)
        region = reader.region(1, 3)
        self.assertEqual(reader.tell(), 2)
        self.assertEqual(bytes(region.read()), B'DEF')
        self.assertRaises(EOF, lambda: reader.region(4, 3))
        self.assertRaises(ValueError, lambda: reader.region(-3, 1))
