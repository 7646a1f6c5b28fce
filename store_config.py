# store_config.py
from __future__ import annotations

import configparser
import logging
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from app_meta import APP_NAME
from models import ResourceClass


LOGGER = logging.getLogger(__name__)

DEFAULT_SAVE_INTERVAL = 5.0

DEFAULT_CONFIG_TEXT = """\
[Restore]
save_interval = 5
state_dir =

[Defaults]
sink =
source =

[Logging]
level = INFO
file =
"""


def _windows_appdata_dir() -> Path:
    appdata = os.environ.get("APPDATA")
    if appdata:
        return Path(appdata)
    return Path.home() / "AppData" / "Roaming"


def _linux_xdg_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def _linux_xdg_state_dir() -> Path:
    xdg = os.environ.get("XDG_STATE_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".local" / "state"


def user_config_dir(app_name: str) -> Path:
    sysname = (platform.system() or "").lower()
    if sysname.startswith("windows"):
        return _windows_appdata_dir() / app_name
    if sysname.startswith("linux"):
        return _linux_xdg_config_dir() / app_name
    return Path.home() / ".config" / app_name


def user_state_dir(app_name: str) -> Path:
    sysname = (platform.system() or "").lower()
    if sysname.startswith("windows"):
        return _windows_appdata_dir() / app_name / "state"
    if sysname.startswith("linux"):
        return _linux_xdg_state_dir() / app_name
    return Path.home() / ".local" / "state" / app_name


def state_path(name: str, state_dir: Optional[Path] = None, create_dir: bool = True) -> Path:
    """
    Map a logical slot name to a stable file path under the state directory.

    Raises OSError when the directory cannot be created, or ValueError when
    `name` is not a plain file name.
    """
    if not name or "/" in name or "\\" in name or name in (".", ".."):
        raise ValueError(f"Invalid state file name: {name!r}")

    base = Path(state_dir).expanduser() if state_dir else user_state_dir(APP_NAME)
    if create_dir:
        base.mkdir(parents=True, exist_ok=True)
    return base / name


@dataclass(frozen=True)
class RestoreSettings:
    save_interval: float = DEFAULT_SAVE_INTERVAL
    state_dir: Optional[Path] = None
    configured: Dict[ResourceClass, str] = field(default_factory=dict)
    log_level: str = "INFO"
    log_file: Optional[Path] = None


@dataclass(frozen=True)
class ConfigStore:
    app_name: str = APP_NAME
    filename: str = "redefault.cfg"
    override_path: Optional[Path] = None

    @property
    def dir_path(self) -> Path:
        if self.override_path is not None:
            return self.override_path.parent
        return user_config_dir(self.app_name)

    @property
    def file_path(self) -> Path:
        if self.override_path is not None:
            return self.override_path
        return self.dir_path / self.filename

    def ensure_exists(self) -> None:
        self.dir_path.mkdir(parents=True, exist_ok=True)
        if not self.file_path.exists():
            self.file_path.write_text(DEFAULT_CONFIG_TEXT, encoding="utf-8")

    def load(self) -> configparser.ConfigParser:
        self.ensure_exists()
        cfg = configparser.ConfigParser()
        cfg.read(self.file_path, encoding="utf-8")

        for section, keys in (
            ("Restore", ("save_interval", "state_dir")),
            ("Defaults", ("sink", "source")),
            ("Logging", ("level", "file")),
        ):
            if not cfg.has_section(section):
                cfg.add_section(section)
            for key in keys:
                cfg.set(section, key, cfg.get(section, key, fallback=""))

        return cfg

    def settings(self) -> RestoreSettings:
        cfg = self.load()

        raw = cfg.get("Restore", "save_interval", fallback="").strip()
        interval = DEFAULT_SAVE_INTERVAL
        if raw:
            try:
                interval = float(raw)
            except ValueError:
                interval = -1.0
            if interval <= 0:
                LOGGER.warning("Invalid save_interval %r in %s, using %s.", raw, self.file_path, DEFAULT_SAVE_INTERVAL)
                interval = DEFAULT_SAVE_INTERVAL

        state_dir = cfg.get("Restore", "state_dir", fallback="").strip()

        configured: Dict[ResourceClass, str] = {}
        for kind in ResourceClass:
            v = cfg.get("Defaults", kind.value, fallback="").strip()
            if v:
                configured[kind] = v

        log_file = cfg.get("Logging", "file", fallback="").strip()

        return RestoreSettings(
            save_interval=interval,
            state_dir=Path(state_dir).expanduser() if state_dir else None,
            configured=configured,
            log_level=(cfg.get("Logging", "level", fallback="") or "INFO").strip().upper() or "INFO",
            log_file=Path(log_file).expanduser() if log_file else None,
        )
