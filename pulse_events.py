# pulse_events.py
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

import pulsectl
from PySide6.QtCore import QObject, QThread, Qt, Signal, Slot


LOGGER = logging.getLogger(__name__)

LISTEN_POLL_SECONDS = 1.0


class PulseEventListener(QThread):
    """
    Blocking pulsectl event loop on its own thread and connection.

    Only "server" facility events are forwarded; default sink/source changes
    are reported by the server as server change events.
    """

    server_changed = Signal()

    def __init__(self, client_name: str = "redefault-events", parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._client_name = client_name
        self._lock = threading.Lock()
        self._pulse: Optional[pulsectl.Pulse] = None
        self._stopping = False

    def run(self) -> None:
        try:
            with pulsectl.Pulse(self._client_name) as pulse:
                with self._lock:
                    if self._stopping:
                        return
                    self._pulse = pulse
                try:
                    pulse.event_mask_set("server")
                    pulse.event_callback_set(self._on_event)
                    while not self._stopping:
                        pulse.event_listen(timeout=LISTEN_POLL_SECONDS)
                finally:
                    # must be cleared before the connection is closed
                    with self._lock:
                        self._pulse = None
        except pulsectl.PulseError as e:
            LOGGER.error("Server event listener stopped: %s", e)

    def _on_event(self, ev) -> None:
        if ev.facility == pulsectl.PulseEventFacilityEnum.server:
            self.server_changed.emit()

    def stop(self, timeout_ms: int = 5000) -> None:
        with self._lock:
            self._stopping = True
            if self._pulse is not None:
                self._pulse.event_listen_stop()
        if not self.wait(timeout_ms):
            LOGGER.warning("Server event listener did not stop within %d ms.", timeout_ms)


class ChangeSubscription(QObject):
    """
    Delivers listener events to `callback` on the thread that owns this object.
    """

    def __init__(self, listener: PulseEventListener, callback: Callable[[], None], parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._listener = listener
        self._callback = callback
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        if self._active:
            return
        self._listener.server_changed.connect(self._on_server_changed, Qt.ConnectionType.QueuedConnection)
        self._listener.start()
        self._active = True

    @Slot()
    def _on_server_changed(self) -> None:
        if not self._active:
            return
        try:
            self._callback()
        except Exception:
            LOGGER.exception("Change handler failed.")

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        try:
            self._listener.server_changed.disconnect(self._on_server_changed)
        except (RuntimeError, TypeError):
            pass
        self._listener.stop()


def subscribe_server_changes(callback: Callable[[], None], client_name: str = "redefault-events") -> ChangeSubscription:
    sub = ChangeSubscription(PulseEventListener(client_name), callback)
    sub.start()
    return sub
