"""
Locating catalog files on disk.
"""

import os
from typing import Iterable, List, Optional

from .logging_setup import EventLogger, get_logger

logger = get_logger(__name__)

CATALOG_EXTENSION = ".lrcat"
CATALOG_DATA_DIR_EXTENSION = ".lrdata"


def is_catalog_file(path: str) -> bool:
    return path.endswith(CATALOG_EXTENSION)


def find_catalogs(paths: Iterable[str], recursive: bool = True,
                  events: Optional[EventLogger] = None) -> List[str]:
    """
    Expand a list of files and directories into the catalog files they
    contain. Directories are walked (when recursive) without descending
    into .lrdata directories, which hold the potentially huge preview
    caches. Paths that cannot be read are logged and skipped.
    """
    events = events or EventLogger(logger)
    found = []

    for path in paths:
        if not os.path.exists(path):
            events.warning("Cannot stat path", action="find_catalogs", status="stat_error", path=path)
            continue

        if not os.path.isdir(path):
            if is_catalog_file(path):
                found.append(path)
            else:
                events.debug("Not a catalog file", action="find_catalogs",
                             status="wrong_suffix", path=path)
            continue

        if recursive:
            found.extend(_find_catalogs_in_dir(path, events))
        else:
            for name in sorted(os.listdir(path)):
                child = os.path.join(path, name)
                if os.path.isfile(child) and is_catalog_file(child):
                    found.append(child)

    return found


def _find_catalogs_in_dir(path: str, events: EventLogger) -> List[str]:
    found = []

    def on_error(error: OSError) -> None:
        events.warning("Error walking path", action="find_catalogs", status="walk_error",
                       path=getattr(error, 'filename', path), error=error)

    for root, dirs, files in os.walk(path, onerror=on_error):
        dirs[:] = sorted(d for d in dirs if not d.endswith(CATALOG_DATA_DIR_EXTENSION))
        for name in sorted(files):
            if is_catalog_file(name):
                found.append(os.path.join(root, name))

    return found


def format_size(bytes_size: float) -> str:
    """Format bytes as human-readable size, e.g. "1.50 GB"."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_size < 1024.0:
            return f"{bytes_size:.2f} {unit}"
        bytes_size /= 1024.0
    return f"{bytes_size:.2f} PB"
