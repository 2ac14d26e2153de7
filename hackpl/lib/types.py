"""
This module is used as a unified resource for types that are primarily used for type hints. The
`Param` type is used to annotate unit parameters with their command line specification: At runtime,
`Param[T, A]` evaluates to the argument specification `A`, while type checkers see `T`.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from typing import Annotated, Union

    Param = Annotated
    buf = Union[bytes, bytearray, memoryview]

else:
    class __P:
        def __getitem__(self, annotation):
            return annotation[1]

    Param = __P()
    buf = Any


__all__ = [
    'buf',
    'Param',
]
