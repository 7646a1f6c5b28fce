# lifecycle.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Protocol

from debounce import DebounceScheduler, QtTimerFactory, TimerFactory
from models import DefaultSlot, ResourceClass, RestoreOutcome
from restore import DefaultsHost, restore_defaults
from slot_store import SlotStore
from store_config import DEFAULT_SAVE_INTERVAL, state_path


LOGGER = logging.getLogger(__name__)


class StartupError(RuntimeError):
    pass


class Subscription(Protocol):
    def cancel(self) -> None: ...


SubscribeFactory = Callable[[Callable[[], None]], Subscription]


class DefaultRestoreService:
    """
    Restores saved defaults on start() and keeps them saved until stop().

    All state (dirty flag, pending timer, store, subscription) is built fresh
    by each start() and released by stop(), so start/stop cycles are isolated.
    """

    def __init__(
        self,
        host: DefaultsHost,
        *,
        subscribe: SubscribeFactory,
        timer_factory: Optional[TimerFactory] = None,
        interval: float = DEFAULT_SAVE_INTERVAL,
        state_dir: Optional[Path] = None,
        kinds: Iterable[ResourceClass] = tuple(ResourceClass),
    ) -> None:
        self._host = host
        self._subscribe = subscribe
        self._timer_factory = timer_factory
        self._interval = interval
        self._state_dir = state_dir
        self._kinds = tuple(kinds)

        self._store: Optional[SlotStore] = None
        self._scheduler: Optional[DebounceScheduler] = None
        self._subscription: Optional[Subscription] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def scheduler(self) -> Optional[DebounceScheduler]:
        return self._scheduler

    def _resolve_slots(self) -> list[DefaultSlot]:
        return [DefaultSlot(kind, state_path(kind.slot_name, self._state_dir)) for kind in self._kinds]

    def start(self) -> Dict[ResourceClass, RestoreOutcome]:
        if self._running:
            raise RuntimeError("Default restore service is already running.")

        try:
            slots = self._resolve_slots()
        except (OSError, ValueError) as e:
            self.stop()
            raise StartupError(f"Cannot resolve state files: {e}") from e

        self._store = SlotStore(slots)

        # restore before subscribing, so a live change is never clobbered
        outcomes = restore_defaults(self._host, self._store, self._kinds)

        self._scheduler = DebounceScheduler(
            self._host,
            self._store,
            self._timer_factory or QtTimerFactory(),
            interval=self._interval,
        )

        try:
            self._subscription = self._subscribe(self._scheduler.mark_dirty_and_schedule)
        except Exception as e:
            self.stop()
            raise StartupError(f"Cannot subscribe to server events: {e}") from e

        self._running = True
        LOGGER.info(
            "Watching defaults (%s), save interval %.1fs.",
            ", ".join(f"{k.value}={o.value}" for k, o in outcomes.items()),
            self._interval,
        )
        return outcomes

    def stop(self) -> None:
        sub, self._subscription = self._subscription, None
        sched, self._scheduler = self._scheduler, None
        try:
            if sub is not None:
                sub.cancel()
        finally:
            if sched is not None and sched.shutdown_flush():
                LOGGER.info("Saved defaults on shutdown.")

            self._store = None
            if self._running:
                LOGGER.info("Stopped watching defaults.")
            self._running = False

    def __enter__(self) -> "DefaultRestoreService":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
