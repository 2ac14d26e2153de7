"""
Units that implement the cipher of the zine.
"""
from __future__ import annotations

from hackpl.lib.crypto import Issue
from hackpl.units import Arg, Unit

__all__ = ['Arg', 'Issue', 'Unit']
