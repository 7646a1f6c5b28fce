# debounce.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from PySide6.QtCore import QObject, QTimer

from models import HostError
from restore import DefaultsHost
from slot_store import SlotStore
from store_config import DEFAULT_SAVE_INTERVAL


LOGGER = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


class _QtTimerHandle:
    def __init__(self, timer: QTimer) -> None:
        self._timer: Optional[QTimer] = timer

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None


class QtTimerFactory:
    """One-shot QTimers on the current thread's event loop."""

    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._parent = parent

    def __call__(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        t = QTimer(self._parent)
        t.setSingleShot(True)
        t.setInterval(max(0, int(delay * 1000)))
        t.timeout.connect(callback)
        t.start()
        return _QtTimerHandle(t)


@dataclass
class RestoreState:
    dirty: bool = False
    timer: Optional[TimerHandle] = None


class DebounceScheduler:
    """
    Coalesces change events into one delayed write of every slot.

    The first change after a save arms a single timer; later changes only mark
    the state dirty and never push the deadline back, so a steady stream of
    changes is still written once per interval.
    """

    def __init__(
        self,
        host: DefaultsHost,
        store: SlotStore,
        timer_factory: TimerFactory,
        interval: float = DEFAULT_SAVE_INTERVAL,
        state: Optional[RestoreState] = None,
    ) -> None:
        self._host = host
        self._store = store
        self._timer_factory = timer_factory
        self.interval = interval
        self.state = state if state is not None else RestoreState()

    @property
    def armed(self) -> bool:
        return self.state.timer is not None

    @property
    def dirty(self) -> bool:
        return self.state.dirty

    def mark_dirty_and_schedule(self) -> None:
        self.state.dirty = True
        if self.state.timer is None:
            LOGGER.debug("Default changed, saving in %.1fs.", self.interval)
            self.state.timer = self._timer_factory(self.interval, self._on_timer)

    def _on_timer(self) -> None:
        try:
            self.flush()
        except Exception:
            LOGGER.exception("Unexpected error while saving defaults.")
        finally:
            handle, self.state.timer = self.state.timer, None
            if handle is not None:
                handle.cancel()

    def _save_one(self, kind) -> None:
        try:
            name = self._host.current_default(kind)
        except HostError as e:
            LOGGER.error("Failed to query %s: %s", kind.label, e)
            return

        try:
            self._store.save(kind, name)
        except (OSError, ValueError) as e:
            LOGGER.error("Failed to save %s: %s", kind.label, e)
            return

        LOGGER.debug("Saved %s '%s' to %s.", kind.label, name or "", self._store.path(kind))

    def flush(self) -> bool:
        if not self.state.dirty:
            return False

        for kind in self._store.kinds:
            self._save_one(kind)

        # a failed class waits for the next change event
        self.state.dirty = False
        return True

    def cancel_pending(self) -> None:
        handle, self.state.timer = self.state.timer, None
        if handle is not None:
            handle.cancel()

    def shutdown_flush(self) -> bool:
        self.cancel_pending()
        return self.flush()
