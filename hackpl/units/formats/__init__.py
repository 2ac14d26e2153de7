"""
Units that take apart the executables of the zine: `hackpl.units.formats.hpunpack` restores the
original program from a packed issue and `hackpl.units.formats.hpxtract` extracts the articles.
"""
from __future__ import annotations

from hackpl.lib.crypto import Issue
from hackpl.units import Arg, Unit

__all__ = ['Arg', 'Issue', 'Unit']
