# backend.py
from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

import pulsectl

from models import HostError, ResourceClass, normalize_name


LOGGER = logging.getLogger(__name__)


class PulseDefaultsBackend:
    """
    Default sink/source access through pipewire-pulse or PulseAudio.

    Explicit defaults come from the user's config; they are pushed to the
    server once at startup and always win over restored state. Every
    pulsectl failure is re-raised as HostError.
    """

    def __init__(
        self,
        configured: Optional[Mapping[ResourceClass, str]] = None,
        pulse_client_name: str = "redefault",
    ) -> None:
        self._pulse_client_name = pulse_client_name
        self._pulse: Optional[pulsectl.Pulse] = None
        self._configured: Dict[ResourceClass, str] = {
            k: v.strip() for k, v in (configured or {}).items() if normalize_name(v)
        }

    def server_label(self) -> str:
        try:
            info = self._pulse_connect().server_info()
        except pulsectl.PulseError as e:
            raise HostError(f"Cannot query server info: {e}") from e
        return f"{info.server_name} {info.server_version}"

    def _pulse_connect(self) -> pulsectl.Pulse:
        if self._pulse is None:
            self._pulse = pulsectl.Pulse(self._pulse_client_name)
        return self._pulse

    def close(self) -> None:
        if self._pulse is not None:
            try:
                self._pulse.close()
            except Exception:
                pass
        self._pulse = None

    def configured_default(self, kind: ResourceClass) -> Optional[str]:
        return self._configured.get(kind)

    def apply_configured_defaults(self) -> None:
        for kind, name in self._configured.items():
            try:
                if not self.has_device(kind, name):
                    LOGGER.warning("Configured %s '%s' does not exist, leaving server default alone.", kind.label, name)
                    continue
                self.set_default(kind, name)
            except HostError as e:
                LOGGER.error("Failed to apply configured %s '%s': %s", kind.label, name, e)
                continue
            LOGGER.info("Applied configured %s '%s'.", kind.label, name)

    def current_default(self, kind: ResourceClass) -> Optional[str]:
        try:
            info = self._pulse_connect().server_info()
        except pulsectl.PulseError as e:
            raise HostError(f"Cannot query {kind.label}: {e}") from e
        if kind is ResourceClass.SINK:
            return normalize_name(info.default_sink_name)
        return normalize_name(info.default_source_name)

    def has_device(self, kind: ResourceClass, name: str) -> bool:
        try:
            pulse = self._pulse_connect()
            if kind is ResourceClass.SINK:
                pulse.get_sink_by_name(name)
            else:
                pulse.get_source_by_name(name)
        except pulsectl.PulseIndexError:
            return False
        except pulsectl.PulseError as e:
            raise HostError(f"Cannot look up {kind.value} '{name}': {e}") from e
        return True

    def set_default(self, kind: ResourceClass, name: str) -> None:
        try:
            pulse = self._pulse_connect()
            if kind is ResourceClass.SINK:
                pulse.sink_default_set(name)
            else:
                pulse.source_default_set(name)
        except pulsectl.PulseError as e:
            raise HostError(f"Cannot set {kind.label} '{name}': {e}") from e
