# slot_store.py
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Optional

from models import DefaultSlot, ResourceClass


class SlotStore:
    """
    One plain-text file per resource class, holding a single newline-terminated
    device name. A missing file or an empty line means "no default".

    OSError other than a missing file propagates, and so does
    UnicodeDecodeError for undecodable content; callers log both.
    """

    def __init__(self, slots: Iterable[DefaultSlot]) -> None:
        self._slots: Dict[ResourceClass, DefaultSlot] = {s.kind: s for s in slots}

    @property
    def kinds(self) -> list[ResourceClass]:
        return list(self._slots)

    def path(self, kind: ResourceClass) -> Path:
        return self._slots[kind].path

    def load(self, kind: ResourceClass) -> Optional[str]:
        try:
            with self.path(kind).open("r", encoding="utf-8") as f:
                line = f.readline()
        except FileNotFoundError:
            return None
        # only the line ending and trailing blanks are dropped
        return line.rstrip() or None

    def save(self, kind: ResourceClass, name: Optional[str]) -> None:
        value = name or ""
        if "\n" in value or "\r" in value:
            raise ValueError(f"Device name for {kind.label} contains a line break: {value!r}")
        with self.path(kind).open("w", encoding="utf-8") as f:
            f.write(f"{value}\n")
