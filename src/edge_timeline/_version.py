"""Minimal version helper for the edge_timeline application."""

from importlib import metadata
import json
from os import PathLike
from pathlib import Path
import sys

PACKAGE_NAME = "edge_timeline"
DISTRIBUTION_NAME = "edge-timeline"
VERSION_FILENAME = "version.json"
FALLBACK_VERSION = "0.0.0"


def get_embedded_path(name: str | PathLike[str]) -> Path:
    """Return the path to an embedded resource shipped with the binary."""

    base = Path(getattr(sys, "_MEIPASS", Path(__file__).resolve().parent))
    return base / Path(name)


def get_version() -> str:
    """
    Get version for application.

    :return: Version number.
    """
    if getattr(sys, "frozen", False):  # *.exe
        with open(get_embedded_path(VERSION_FILENAME), "r") as f:
            return str(json.load(f)["version"])
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:  # running from a source checkout
        return FALLBACK_VERSION


__all__ = ["get_version", "get_embedded_path"]
