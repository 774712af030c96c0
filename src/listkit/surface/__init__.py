"""List surfaces.

Exports
-------
ListSurface
    Protocol every list widget binding implements.
MemoryListSurface
    In-memory surface for tests and headless use.
"""

from .memory import MemoryListSurface
from .protocol import BatchCompletion, ListSurface

__all__ = [
    "BatchCompletion",
    "ListSurface",
    "MemoryListSurface",
]
