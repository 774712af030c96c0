"""Full error hierarchy for listkit.

Every public error class inherits from ListKitError. Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

Error codes are defined as a :class:`str` enum so that they serialise
naturally to JSON and can be matched with simple ``==`` comparisons.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error listkit can raise."""

    DUPLICATE_IDENTITY = "DUPLICATE_IDENTITY"
    UNRESOLVED_KIND = "UNRESOLVED_KIND"
    WIDGET_APPLY_FAILURE = "WIDGET_APPLY_FAILURE"
    SURFACE_INCONSISTENCY = "SURFACE_INCONSISTENCY"
    STALE_SCRIPT = "STALE_SCRIPT"
    CYCLE_IN_FLIGHT = "CYCLE_IN_FLIGHT"
    WRONG_CONTEXT = "WRONG_CONTEXT"
    REGISTRATION_ERROR = "REGISTRATION_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class ListKitError(Exception):
    """Base exception for all listkit errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys and expected types are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Snapshot errors
# ---------------------------------------------------------------------------

class ListKitDuplicateIdentityError(ListKitError):
    """A snapshot contains two items with the same ``(kind, value)`` key or
    two sections with the same identifier.

    Raised before any widget mutation is attempted.

    Context keys: ``duplicate``, ``scope`` (``"item"`` or ``"section"``),
    ``first``, ``second``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_IDENTITY,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Reconciliation errors
# ---------------------------------------------------------------------------

class ListKitUnresolvedKindError(ListKitError):
    """An inserted or reloaded item's kind has no registered cell class and
    the configured policy is ``"raise"``.

    Context keys: ``kind``, ``item``, ``registered_kinds``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UNRESOLVED_KIND,
            message=message,
            context=context,
            cause=cause,
        )


class ListKitWidgetApplyError(ListKitError):
    """The list surface could not complete a batch.

    The baseline snapshot is not advanced.  Callers resynchronise by
    submitting a fresh, authoritative snapshot.

    Context keys: ``ops``, ``stage`` (``"batch"`` or ``"completion"``).
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.WIDGET_APPLY_FAILURE,
            message=message,
            context=context,
            cause=cause,
        )


class ListKitSurfaceInconsistencyError(ListKitError):
    """A surface rejected a batch whose operations do not describe a valid
    transition of its current content.

    Context keys: ``reason``, ``index``, ``index_path``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.SURFACE_INCONSISTENCY,
            message=message,
            context=context,
            cause=cause,
        )


class ListKitStaleScriptError(ListKitError):
    """An edit script was computed against a snapshot that is not the
    currently applied baseline.

    Context keys: ``baseline_sections``, ``script_sections``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.STALE_SCRIPT,
            message=message,
            context=context,
            cause=cause,
        )


class ListKitBusyError(ListKitError):
    """A reconciler was asked to open a batch while another one is still
    awaiting its completion signal.

    Context keys: ``pending_ops``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.CYCLE_IN_FLIGHT,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Adapter errors
# ---------------------------------------------------------------------------

class ListKitContextError(ListKitError):
    """A list adapter was used from a thread other than the one that owns it.

    Context keys: ``owner_thread``, ``caller_thread``, ``operation``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.WRONG_CONTEXT,
            message=message,
            context=context,
            cause=cause,
        )


class ListKitRegistrationError(ListKitError):
    """A cell class could not be registered for a kind.

    Context keys: ``kind``, ``cell_class``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_ERROR,
            message=message,
            context=context,
            cause=cause,
        )
