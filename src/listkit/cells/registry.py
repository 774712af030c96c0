"""Cell registry: maps item kinds to cell classes.

The registry is a lookup table with no ordering or diff semantics.  It is
filled at configuration time and consulted by the reconciler whenever an
item enters the list or is reloaded.
"""

from __future__ import annotations

from typing import Any

from listkit.errors import ListKitRegistrationError, ListKitUnresolvedKindError
from listkit.models import Item

from .base import ModelableCell


def _is_type_spec(value: Any) -> bool:
    if isinstance(value, type):
        return True
    return (
        isinstance(value, tuple)
        and len(value) > 0
        and all(isinstance(member, type) for member in value)
    )


class CellRegistry:
    """Kind → cell class lookup table."""

    def __init__(self) -> None:
        self._cells: dict[str, type[ModelableCell]] = {}

    def register(
        self,
        kind: str,
        cell_class: type[ModelableCell],
        *,
        replace: bool = False,
    ) -> None:
        """Register *cell_class* as the renderer of *kind*.

        Parameters
        ----------
        kind:
            Item kind tag.
        cell_class:
            A :class:`ModelableCell` subclass with a ``model_type``.
        replace:
            Allow overriding an existing, different registration.

        Raises
        ------
        ListKitRegistrationError
            If *kind* is not a non-empty string, *cell_class* is not a
            :class:`ModelableCell` subclass, its ``model_type`` is not a
            type (or tuple of types), or *kind* is already bound to another
            class and *replace* is false.
        """
        context = {"kind": kind, "cell_class": getattr(cell_class, "__name__", repr(cell_class))}

        if not isinstance(kind, str) or not kind:
            raise ListKitRegistrationError(
                message=f"Cell kind must be a non-empty string, got {kind!r}",
                context={**context, "reason": "invalid_kind"},
            )
        if not (isinstance(cell_class, type) and issubclass(cell_class, ModelableCell)):
            raise ListKitRegistrationError(
                message=f"{cell_class!r} is not a ModelableCell subclass",
                context={**context, "reason": "invalid_cell_class"},
            )
        if not _is_type_spec(cell_class.model_type):
            raise ListKitRegistrationError(
                message=(
                    f"{cell_class.__name__}.model_type must be a type or a tuple "
                    f"of types, got {cell_class.model_type!r}"
                ),
                context={**context, "reason": "invalid_model_type"},
            )
        existing = self._cells.get(kind)
        if existing is not None and existing is not cell_class and not replace:
            raise ListKitRegistrationError(
                message=f"Kind {kind!r} is already registered to {existing.__name__}",
                context={**context, "reason": "already_registered"},
            )

        self._cells[kind] = cell_class

    def unregister(self, kind: str) -> None:
        self._cells.pop(kind, None)

    def resolve(self, kind: str) -> type[ModelableCell] | None:
        return self._cells.get(kind)

    def make_cell(self, item: Item) -> ModelableCell:
        """Instantiate the cell for *item* and bind its model.

        Raises
        ------
        ListKitUnresolvedKindError
            If no cell class is registered for ``item.kind``.
        """
        cell_class = self.resolve(item.kind)
        if cell_class is None:
            raise ListKitUnresolvedKindError(
                message=f"No cell registered for kind {item.kind!r}",
                context={"kind": item.kind, "item": item, "registered_kinds": self.kinds()},
            )
        cell = cell_class()
        cell.set_model(item)
        return cell

    def kinds(self) -> list[str]:
        return sorted(self._cells)

    def __contains__(self, kind: object) -> bool:
        return kind in self._cells

    def __len__(self) -> int:
        return len(self._cells)
