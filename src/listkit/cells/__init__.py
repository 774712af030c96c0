"""Cell classes and the kind → cell registry.

Exports
-------
CellRegistry
    Lookup table from item kind to cell class.
ModelableCell
    Base class for cells bound to one content type.
PlaceholderCell
    Stand-in for items whose kind is not registered.
ModelableSupplementaryView, TableSupplementaryView
    Section header/footer views.
"""

from .base import ModelableCell, PlaceholderCell, Size
from .registry import CellRegistry
from .supplementary import ModelableSupplementaryView, TableSupplementaryView

__all__ = [
    "CellRegistry",
    "ModelableCell",
    "ModelableSupplementaryView",
    "PlaceholderCell",
    "Size",
    "TableSupplementaryView",
]
