"""Cell base classes.

A cell class renders one item kind.  It is bound to a single content type
through :attr:`ModelableCell.model_type`; the registry checks that binding
once, at registration time, and :meth:`ModelableCell.set_model` performs a
safe downcast of the item's value at dispatch.

Sizing and action hooks have no-op defaults so subclasses override only
what they need.
"""

from __future__ import annotations

from typing import Any, ClassVar

from listkit.models import Item

Size = tuple[float, float]


class ModelableCell:
    """Base class for cells bound to one content type.

    Subclasses set :attr:`model_type`::

        class ContactCell(ModelableCell):
            model_type = Contact

    After :meth:`set_model`, :attr:`model` holds the item's value when it
    is an instance of :attr:`model_type` and ``None`` otherwise.
    """

    model_type: ClassVar[type | tuple[type, ...] | None] = None

    def __init__(self) -> None:
        self.item: Item | None = None
        self.model: Any = None

    def set_model(self, item: Item) -> None:
        self.item = item
        self.model = item.value_as(self.model_type)

    # ── Sizing ─────────────────────────────────────────────────────────

    @classmethod
    def estimated_size(cls, model: Any, surface: Any) -> Size | None:
        return cls.size(model, surface)

    @classmethod
    def size(cls, model: Any, surface: Any) -> Size | None:
        """Return ``(width, height)`` or ``None`` to let the surface decide."""
        return None

    @classmethod
    def indentation_level(cls, model: Any, surface: Any) -> int:
        return 0

    # ── Actions ────────────────────────────────────────────────────────

    def leading_swipe_actions(self) -> list[Any] | None:
        return None

    def trailing_swipe_actions(self) -> list[Any] | None:
        return None

    def context_menu_configuration(self) -> Any | None:
        return None

    def context_menu_preview_view(self, configuration: Any) -> Any | None:
        return None

    def perform_preview_action(self, configuration: Any, animator: Any) -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"


class PlaceholderCell(ModelableCell):
    """Stand-in cell used when an item's kind is not registered and the
    ``"placeholder"`` policy is configured."""

    model_type = object
