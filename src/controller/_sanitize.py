from __future__ import annotations

import io
import mmap
import socket
from collections.abc import Mapping, Sequence, Set
from typing import Any

COMPOSITE = '[array]'
RESOURCE = '[resource]'


def type_name(obj: Any) -> str:
    cls = type(obj)
    module = cls.__module__
    if module in (None, 'builtins', '__builtin__'):
        return cls.__qualname__
    return f'{module}.{cls.__qualname__}'


def sanitize_value(value: Any) -> Any:
    """
    Map a captured local to a safe, JSON-friendly placeholder.

    Scalars pass through; containers, open handles and arbitrary
    objects are replaced. The mapping is one-way.
    """
    match value:
        case None | bool() | int() | float() | str():
            return value
        case bytes() | bytearray() | memoryview():
            return COMPOSITE
        case Mapping() | Sequence() | Set():
            return COMPOSITE
        case io.IOBase() | socket.socket() | mmap.mmap():
            return RESOURCE
        case _:
            return type_name(value)


def sanitize(raw_locals: Mapping[str, Any] | None) -> dict[str, Any]:
    if not raw_locals:
        return {}
    return {str(name): sanitize_value(v) for name, v in raw_locals.items()}
