#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

from hackpl.lib.argformats import utf8
from hackpl.lib.crypto import decrypt, encrypt
from hackpl.lib.types import Param
from hackpl.units.crypto import Arg, Issue, Unit


class hpcrypt(Unit):
    """
    Decrypts a single article as it is stored inside an unpacked issue of the zine. Stored articles
    are reversed and encrypted with a keystream that is derived from a password; the password of the
    given issue is used unless one is specified. In reverse mode, the unit encrypts a plaintext into
    its stored form.
    """
    def __init__(
        self,
        issue: Param[int, Arg('issue', type=Issue.Get, metavar='issue', help=(
            'The number of the issue, which selects the key derivation and the default password.'))],
        password: Param[bytes, Arg('-p', type=utf8, metavar='PASSWORD', help=(
            'Use this password instead of the one that belongs to the issue.'))] = None,
    ):
        pass

    def _password(self) -> bytes:
        password = self.args.password
        if password is None:
            return Issue.Get(self.args.issue).password
        return utf8(password)

    def process(self, data: bytearray):
        return decrypt(data[::-1], self._password(), self.args.issue)

    def reverse(self, data: bytearray):
        stored = encrypt(data, self._password(), self.args.issue)
        stored.reverse()
        return stored
