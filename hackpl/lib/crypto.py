"""
The password based stream cipher that protects the articles. A short password is first expanded
into a derived key by one of three rules, depending on the issue. The keystream byte at position
`i` of a blob of length `n` depends only on `n - i` and the derived key:

    pass_factor ^ key[(n - i) % len(key)] ^ ((n - i) % (len(key) + 0x6F))

Since the cipher is a plain XOR with this keystream, encryption and decryption are the same
operation. Stored articles are reversed; `hackpl.lib.crypto.decrypt` expects the reversed blob.
"""
from __future__ import annotations

import enum

import numpy

from hackpl.lib.types import buf

DERIVED_KEY_SIZE = 100
DERIVED_KEY_PAD_BASE = 0x43
PASS_FACTOR_BASE = 0xED
KEYSTREAM_MODULUS_BASE = 0x6F

PASSWORDS = (
    B'patience is a virtue',
    B'november rain',
    B'beta',
    B'FREE KEVIN MITNICK',
    B'beta',
)


class Issue(enum.IntEnum):
    """
    The supported issues of the zine. Each issue has its own password and key derivation rule;
    issues 3 and 4 share a rule.
    """
    I001 = 1
    I002 = 2
    I003 = 3
    I004 = 4

    @classmethod
    def Get(cls, issue: int | str | Issue) -> Issue:
        if isinstance(issue, str):
            name = issue.upper()
            if name in cls.__members__:
                return cls[name]
            try:
                issue = int(issue, 0)
            except ValueError:
                pass
        try:
            return cls(issue)
        except ValueError:
            raise ValueError(F'unsupported issue {issue!r}; only issues 1, 2, 3 and 4 are supported') from None

    @property
    def password(self) -> bytes:
        return PASSWORDS[self.value - 1]


def password_for(issue: int | str | Issue) -> bytes:
    """
    Return the password of the given issue. Raises `ValueError` for unsupported issues.
    """
    return Issue.Get(issue).password


def _derive_key_repeat(password: bytes) -> bytearray:
    key = bytearray(password)
    key.extend(bytes([password[-1] - DERIVED_KEY_PAD_BASE & 0xFF]) * len(password))
    return key


def _derive_key_padded(password: bytes) -> bytearray:
    if len(password) > DERIVED_KEY_SIZE:
        raise ValueError(F'password must not be longer than {DERIVED_KEY_SIZE} bytes')
    key = bytearray(password)
    key.extend(bytes([password[-1] - DERIVED_KEY_PAD_BASE & 0xFF]) * (DERIVED_KEY_SIZE - len(key)))
    return key


def _derive_key_folded(password: bytes) -> bytearray:
    n = len(password)
    h = n // 2
    key = bytearray(password[k] ^ password[n - 1 - k] for k in range(n - h))
    key.extend(password[h - k - 1] for k in range(h))
    last = key[-1] if h else 0
    if len(key) > DERIVED_KEY_SIZE:
        raise ValueError(F'password must not be longer than {DERIVED_KEY_SIZE} bytes')
    key.extend(bytes([abs(last - DERIVED_KEY_PAD_BASE)]) * (DERIVED_KEY_SIZE - len(key)))
    return key


def derive_key(password: buf, issue: int | Issue) -> bytes:
    """
    Expand a password into the derived key for the given issue:

    - Issue 1: The password is followed by as many copies of its last byte minus 0x43.
    - Issue 2: The password is padded with the same byte to a length of 100.
    - Issues 3 and 4: The password is folded by XOR with its mirror image, followed by the first
      half of the password in reverse order; then it is padded to a length of 100 with the absolute
      difference of the last byte and 0x43.
    """
    password = bytes(password)
    if not password:
        raise ValueError('the password must not be empty')
    issue = Issue.Get(issue)
    if issue == Issue.I001:
        key = _derive_key_repeat(password)
    elif issue == Issue.I002:
        key = _derive_key_padded(password)
    else:
        key = _derive_key_folded(password)
    return bytes(key)


def sum_byte(key: buf) -> int:
    return sum((3 * b + ((k + 1) & 0xFF) * 2) & 0xFF for k, b in enumerate(key)) & 0xFF


def pass_factor(key: buf) -> int:
    return sum_byte(key) ^ (PASS_FACTOR_BASE - len(key))


def keystream(key: buf, size: int, count: int | None = None) -> numpy.ndarray:
    """
    Generate the first `count` keystream bytes for a blob of the given size as a numpy array. When
    `count` is not given, the keystream has the same length as the blob.
    """
    if count is None:
        count = size
    count = max(0, min(count, size))
    k = numpy.frombuffer(bytes(key), dtype=numpy.uint8).astype(numpy.int64)
    n = size - numpy.arange(count, dtype=numpy.int64)
    stream = pass_factor(key) ^ k[n % len(k)] ^ (n % (len(k) + KEYSTREAM_MODULUS_BASE))
    return (stream & 0xFF).astype(numpy.uint8)


def decrypt(
    blob: buf,
    password: buf,
    issue: int | Issue,
    max_size: int | None = None,
) -> bytearray:
    """
    Decrypt a reversed article blob with the given password, using the key derivation rule of the
    given issue. When `max_size` is given, at most this many bytes are decrypted and returned.
    """
    key = derive_key(password, issue)
    size = len(blob)
    count = size if max_size is None else max(0, min(size, max_size))
    if not count:
        return bytearray()
    data = numpy.frombuffer(memoryview(blob), dtype=numpy.uint8, count=count).copy()
    data ^= keystream(key, size, count)
    return bytearray(data.tobytes())


encrypt = decrypt
