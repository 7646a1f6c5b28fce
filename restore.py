# restore.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Protocol

from models import HostError, ResourceClass, RestoreOutcome
from slot_store import SlotStore


LOGGER = logging.getLogger(__name__)


class DefaultsHost(Protocol):
    def configured_default(self, kind: ResourceClass) -> Optional[str]: ...

    def current_default(self, kind: ResourceClass) -> Optional[str]: ...

    def has_device(self, kind: ResourceClass, name: str) -> bool: ...

    def set_default(self, kind: ResourceClass, name: str) -> None: ...


def restore_default(host: DefaultsHost, store: SlotStore, kind: ResourceClass) -> RestoreOutcome:
    if host.configured_default(kind):
        LOGGER.info("Manually configured %s, not overwriting.", kind.label)
        return RestoreOutcome.CONFIGURED

    try:
        name = store.load(kind)
    except (OSError, ValueError) as e:
        # ValueError covers undecodable bytes in the slot file
        LOGGER.error("Failed to load %s from %s: %s", kind.label, store.path(kind), e)
        return RestoreOutcome.FAILED

    if name is None:
        LOGGER.info("No previous %s setting, ignoring.", kind.label)
        return RestoreOutcome.EMPTY

    try:
        if not host.has_device(kind, name):
            LOGGER.info("Saved %s '%s' does not exist, not restoring %s setting.", kind.label, name, kind.label)
            return RestoreOutcome.STALE
        host.set_default(kind, name)
    except HostError as e:
        LOGGER.error("Failed to restore %s '%s': %s", kind.label, name, e)
        return RestoreOutcome.FAILED

    LOGGER.info("Restored %s '%s'.", kind.label, name)
    return RestoreOutcome.RESTORED


def restore_defaults(
    host: DefaultsHost,
    store: SlotStore,
    kinds: Optional[Iterable[ResourceClass]] = None,
) -> Dict[ResourceClass, RestoreOutcome]:
    out: Dict[ResourceClass, RestoreOutcome] = {}
    for kind in (kinds if kinds is not None else store.kinds):
        out[kind] = restore_default(host, store, kind)
    return out
