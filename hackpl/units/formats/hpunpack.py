#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

from hackpl.lib.decoder import unpack
from hackpl.units.formats import Unit


class hpunpack(Unit):
    """
    Restores the original DOS executable from a packed issue of the zine. The packed body contains
    a chain of checksummed blocks holding the compressed program image and its relocations; the
    output is a plain MZ executable that can be analyzed or passed to hpxtract.
    """
    def process(self, data: bytearray):
        executable = unpack(data)
        self.log_info(
            F'unpacked 0x{len(executable.body):X} bytes of image data with {len(executable.relocations)} relocations;'
            F' entry point {executable.entry}, stack {executable.stack}')
        return executable.render()
