from __future__ import annotations

from pathlib import Path

from fakes import FakeHost
from models import DefaultSlot, HostError, ResourceClass, RestoreOutcome
from restore import restore_defaults
from slot_store import SlotStore


class SpyStore(SlotStore):
    def __init__(self, slots) -> None:
        super().__init__(slots)
        self.loaded: list[ResourceClass] = []

    def load(self, kind):
        self.loaded.append(kind)
        return super().load(kind)


def _store(tmp_path: Path) -> SpyStore:
    return SpyStore([DefaultSlot(k, tmp_path / k.slot_name) for k in ResourceClass])


def test_restores_saved_device_that_exists(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.save(ResourceClass.SINK, "X")
    host = FakeHost(devices={ResourceClass.SINK: {"X"}, ResourceClass.SOURCE: set()})

    out = restore_defaults(host, store)

    assert out[ResourceClass.SINK] is RestoreOutcome.RESTORED
    assert out[ResourceClass.SOURCE] is RestoreOutcome.EMPTY
    assert host.set_calls == [(ResourceClass.SINK, "X")]


def test_configured_default_wins_and_file_is_never_read(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.save(ResourceClass.SINK, "X")
    store.save(ResourceClass.SOURCE, "mic")
    host = FakeHost(
        devices={ResourceClass.SINK: {"X"}, ResourceClass.SOURCE: {"mic"}},
        configured={ResourceClass.SINK: "manual"},
    )

    out = restore_defaults(host, store)

    assert out[ResourceClass.SINK] is RestoreOutcome.CONFIGURED
    assert ResourceClass.SINK not in store.loaded
    assert out[ResourceClass.SOURCE] is RestoreOutcome.RESTORED
    assert host.set_calls == [(ResourceClass.SOURCE, "mic")]


def test_stale_name_is_not_set_and_file_is_kept(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.save(ResourceClass.SINK, "Y")
    host = FakeHost()

    out = restore_defaults(host, store)

    assert out[ResourceClass.SINK] is RestoreOutcome.STALE
    assert host.set_calls == []
    assert (tmp_path / "default-sink").read_text(encoding="utf-8") == "Y\n"


def test_empty_slot_file_restores_nothing(tmp_path: Path) -> None:
    (tmp_path / "default-sink").write_text("\n", encoding="utf-8")
    host = FakeHost(devices={ResourceClass.SINK: {""}, ResourceClass.SOURCE: set()})

    out = restore_defaults(host, _store(tmp_path))

    assert out[ResourceClass.SINK] is RestoreOutcome.EMPTY
    assert host.set_calls == []


def test_io_error_is_logged_and_other_class_still_restored(tmp_path: Path, caplog) -> None:
    (tmp_path / "default-sink").mkdir()
    (tmp_path / "default-source").write_text("mic\n", encoding="utf-8")
    host = FakeHost(devices={ResourceClass.SINK: set(), ResourceClass.SOURCE: {"mic"}})

    out = restore_defaults(host, _store(tmp_path))

    assert out[ResourceClass.SINK] is RestoreOutcome.FAILED
    assert out[ResourceClass.SOURCE] is RestoreOutcome.RESTORED
    assert "Failed to load default sink" in caplog.text


def test_host_error_during_restore_is_not_fatal(tmp_path: Path) -> None:
    class BrokenHost(FakeHost):
        def has_device(self, kind, name):
            raise HostError("gone")

    store = _store(tmp_path)
    store.save(ResourceClass.SINK, "X")
    store.save(ResourceClass.SOURCE, "Y")

    out = restore_defaults(BrokenHost(), store)

    assert out == {ResourceClass.SINK: RestoreOutcome.FAILED, ResourceClass.SOURCE: RestoreOutcome.FAILED}


def test_undecodable_slot_file_is_logged_and_other_class_still_restored(tmp_path: Path, caplog) -> None:
    (tmp_path / "default-sink").write_bytes(b"\xff\xfe\n")
    (tmp_path / "default-source").write_text("mic\n", encoding="utf-8")
    host = FakeHost(devices={ResourceClass.SINK: set(), ResourceClass.SOURCE: {"mic"}})

    out = restore_defaults(host, _store(tmp_path))

    assert out[ResourceClass.SINK] is RestoreOutcome.FAILED
    assert out[ResourceClass.SOURCE] is RestoreOutcome.RESTORED
    assert host.set_calls == [(ResourceClass.SOURCE, "mic")]
    assert "Failed to load default sink" in caplog.text
