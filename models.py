# models.py
from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class ResourceClass(enum.Enum):
    SINK = "sink"
    SOURCE = "source"

    @property
    def slot_name(self) -> str:
        return f"default-{self.value}"

    @property
    def label(self) -> str:
        return f"default {self.value}"


@dataclass(frozen=True)
class DefaultSlot:
    kind: ResourceClass
    path: Path


class RestoreOutcome(enum.Enum):
    CONFIGURED = "configured"  # manual setting wins, nothing read
    EMPTY = "empty"            # no file or empty line
    RESTORED = "restored"
    STALE = "stale"            # saved device no longer exists
    FAILED = "failed"


def normalize_name(name: Optional[str]) -> Optional[str]:
    s = (name or "").strip()
    return s or None


class HostError(RuntimeError):
    """The sound server could not be queried or updated."""
