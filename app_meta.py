# app_meta.py
from __future__ import annotations

from importlib import metadata


APP_NAME = "reDefault"
DIST_NAME = "redefault"


def detect_version() -> str:
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0+local"
