from __future__ import annotations

from typing import Callable, Dict, List, Optional, Set

from models import HostError, ResourceClass


class FakeHost:
    def __init__(
        self,
        devices: Optional[Dict[ResourceClass, Set[str]]] = None,
        configured: Optional[Dict[ResourceClass, str]] = None,
        current: Optional[Dict[ResourceClass, Optional[str]]] = None,
    ) -> None:
        self.devices = devices or {k: set() for k in ResourceClass}
        self.configured = configured or {}
        self.current: Dict[ResourceClass, Optional[str]] = dict(current or {})
        self.set_calls: List[tuple[ResourceClass, str]] = []
        self.fail_query: Set[ResourceClass] = set()

    def configured_default(self, kind: ResourceClass) -> Optional[str]:
        return self.configured.get(kind)

    def current_default(self, kind: ResourceClass) -> Optional[str]:
        if kind in self.fail_query:
            raise HostError("connection lost")
        return self.current.get(kind)

    def has_device(self, kind: ResourceClass, name: str) -> bool:
        return name in self.devices.get(kind, set())

    def set_default(self, kind: ResourceClass, name: str) -> None:
        self.set_calls.append((kind, name))
        self.current[kind] = name


class _FakeTimer:
    def __init__(self, deadline: float, callback: Callable[[], None]) -> None:
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeClock:
    """Manual timer factory: timers only fire from advance()."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: List[_FakeTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> _FakeTimer:
        t = _FakeTimer(self.now + delay, callback)
        self.timers.append(t)
        return t

    @property
    def pending(self) -> List[_FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        for t in sorted(self.pending, key=lambda x: x.deadline):
            if t.deadline <= self.now and not t.cancelled:
                t.fired = True
                t.callback()


class FakeSubscription:
    def __init__(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.cancel_count = 0

    def cancel(self) -> None:
        self.cancel_count += 1

    def fire(self) -> None:
        if self.cancel_count == 0:
            self.callback()


class FakeSubscriber:
    def __init__(self) -> None:
        self.subscriptions: List[FakeSubscription] = []

    def __call__(self, callback: Callable[[], None]) -> FakeSubscription:
        sub = FakeSubscription(callback)
        self.subscriptions.append(sub)
        return sub

    @property
    def last(self) -> FakeSubscription:
        return self.subscriptions[-1]
