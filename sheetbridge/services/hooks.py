"""
Hook registry for observing and rewriting values during export and import.

Observers are registered per phase ("export" or "import") and are called in
registration order at each extension point. The in-flight value travels in
a ValueRef; an observer rewrites it by assigning ``ref.value``, and the next
observer (and then the orchestrator) sees the new value.

Events:
    export: "headers", "new sheet", "data", "pre cell", "post cell"
    import: "full", "sheet", "row", "pre cell", "post cell"

Example:
    registry = HookRegistry()

    def shout(event, ref, context, options, column=None, row=None):
        if event == HookEvent.PRE_CELL and isinstance(ref.value, str):
            ref.value = ref.value.upper()

    registry.register(HookPhase.EXPORT, shout)
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class HookPhase(str, Enum):
    """Processing phase an observer is registered for."""

    EXPORT = "export"
    IMPORT = "import"


class HookEvent(str, Enum):
    """Extension points dispatched by the orchestrators."""

    HEADERS = "headers"
    NEW_SHEET = "new sheet"
    DATA = "data"
    PRE_CELL = "pre cell"
    POST_CELL = "post cell"
    FULL = "full"
    SHEET = "sheet"
    ROW = "row"


@dataclass
class ValueRef:
    """Mutable holder for the value passed to observers."""

    value: Any


class HookObserver(Protocol):
    """Signature every observer must accept."""

    def __call__(
        self,
        event: HookEvent,
        ref: ValueRef,
        context: Any,
        options: Any,
        column: int | None = None,
        row: int | None = None,
    ) -> None: ...


class HookRegistry:
    """
    Ordered observer lists keyed by phase.

    Attributes:
        _observers: Mapping of phase to its observers, in registration order.
    """

    def __init__(self) -> None:
        self._observers: dict[HookPhase, list[Callable[..., None]]] = {
            phase: [] for phase in HookPhase
        }

    def register(self, phase: HookPhase | str, observer: Callable[..., None]) -> Callable[..., None]:
        """
        Register an observer for a phase.

        Returns the observer, so a registered function can be kept for a
        later ``unregister``.
        """
        self._observers[HookPhase(phase)].append(observer)
        return observer

    def unregister(self, phase: HookPhase | str, observer: Callable[..., None]) -> None:
        """Remove an observer; unknown observers are ignored."""
        observers = self._observers[HookPhase(phase)]
        if observer in observers:
            observers.remove(observer)

    def observers(self, phase: HookPhase | str) -> list[Callable[..., None]]:
        return list(self._observers[HookPhase(phase)])

    def dispatch(
        self,
        phase: HookPhase | str,
        event: HookEvent | str,
        ref: ValueRef,
        context: Any,
        options: Any,
        column: int | None = None,
        row: int | None = None,
    ) -> None:
        """
        Invoke every observer of a phase with the given payload.

        Args:
            phase: Phase whose observers are invoked.
            event: The extension point being reached.
            ref: Holder of the in-flight value; observers may rewrite it.
            context: Workbook or worksheet the value belongs to.
            options: Options of the running export or import.
            column: 0-based column index, for cell events.
            row: Row index, for row and cell events.
        """
        for observer in self._observers[HookPhase(phase)]:
            observer(HookEvent(event), ref, context, options, column, row)
