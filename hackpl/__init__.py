R"""
    ----------------------------------------------------------
        _   _    ____  ____ _  ______  _
       | | | |  / __ \/ ___| |/ /  _ \| |      unpacker and
       | |_| | / / _` | |   | ' /| |_) | |     decryptor for
       |  _  || | (_| | |___| . \|  __/| |___  the zine
       |_| |_| \ \__,_|\____|_|\_\_|   |_____|
                \____/
    ----------------------------------------------------------

This is the documentation of the hackpl package. It recovers the articles of the Polish DOS zine
H@CKPL from the original distribution files. Each issue is a packed MZ executable; the package
restores the original executable and decrypts the articles it contains.

The package `hackpl` exports all `hackpl.units.Unit`s which are of type `hackpl.units.Entry`;
this marker implies that the unit exposes a shell command:

- `hackpl.units.formats.hpunpack`: restore the original executable from a packed issue
- `hackpl.units.formats.hpxtract`: extract and decrypt all articles of an issue
- `hackpl.units.crypto.hpcrypt`: decrypt or encrypt a single stored article

For convenience, the `hackpl` module also exports the classes `hackpl.units.Unit` and
`hackpl.units.Arg`. The decoding pipeline itself is available without the unit interface in the
module `hackpl.lib.decoder`.
"""
from __future__ import annotations

__version__ = '0.3.1'
__distribution__ = 'hackpl'

from hackpl.units import Arg, Unit
from hackpl.units.crypto.hpcrypt import hpcrypt
from hackpl.units.formats.hpunpack import hpunpack
from hackpl.units.formats.hpxtract import hpxtract

__all__ = [
    'Arg',
    'Unit',
    'hpcrypt',
    'hpunpack',
    'hpxtract',
]
