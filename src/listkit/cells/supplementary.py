"""Section header and footer views."""

from __future__ import annotations

from typing import Any, ClassVar

from .base import Size


class ModelableSupplementaryView:
    """Base class for header/footer views bound to one content type."""

    model_type: ClassVar[type | tuple[type, ...]] = object

    def __init__(self) -> None:
        self.model: Any = None

    def set_model(self, content: Any) -> None:
        self.model = content if isinstance(content, self.model_type) else None

    @classmethod
    def size(cls, model: Any, surface: Any) -> Size | None:
        return None


class TableSupplementaryView(ModelableSupplementaryView):
    """Default header/footer: a single line of text, full surface width."""

    model_type = str
    height: ClassVar[float] = 22.0

    @property
    def text(self) -> str | None:
        return self.model

    @classmethod
    def size(cls, model: Any, surface: Any) -> Size:
        return (float(getattr(surface, "width", 0.0)), cls.height)
