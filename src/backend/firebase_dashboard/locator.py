from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

OVERVIEW_PATTERN = "Firebase_overview"
EVENTS_PATTERN = "Events_Event_name"
SCREENS_PATTERN = "Pages_and_screens_Page_title_and_screen_class"
DATASET_PATTERNS = (OVERVIEW_PATTERN, EVENTS_PATTERN, SCREENS_PATTERN)

PathLike = Union[str, "os.PathLike[str]"]


def _strip_extension(pattern: str) -> str:
    if pattern.lower().endswith(".csv"):
        return pattern[: -len(".csv")]
    return pattern


class CSVFileLocator:
    """
    Resolve Firebase export base names to files inside one project folder.

    Firebase appends a running number to repeated exports
    (``Events_Event_name1.csv``) and folders copied between machines do not
    keep a consistent case, so matching falls back to a case-insensitive
    prefix scan.
    """

    def __init__(self, folder: PathLike):
        self.folder = Path(folder)

    def locate(self, base_pattern: str) -> Optional[Path]:
        if not self.folder.is_dir():
            return None

        base = _strip_extension(base_pattern)
        exact = self.folder / f"{base}.csv"
        entries = self._csv_entries()
        if exact.name in entries:
            return exact

        prefix = base.lower()
        for name in entries:
            if name.lower().startswith(prefix):
                logger.debug("Resolved %s to %s via prefix match", base, name)
                return self.folder / name
        return None

    def locate_first(self, *patterns: str) -> Optional[Path]:
        for pattern in patterns:
            path = self.locate(pattern)
            if path is not None:
                return path
        return None

    def _csv_entries(self) -> List[str]:
        return sorted(
            entry.name
            for entry in self.folder.iterdir()
            if entry.is_file() and entry.name.lower().endswith(".csv")
        )


def is_dataset_folder(folder: PathLike) -> bool:
    locator = CSVFileLocator(folder)
    return all(locator.locate(pattern) is not None for pattern in DATASET_PATTERNS)


def list_dataset_folders(data_dir: PathLike) -> List[str]:
    """Names of the sub-folders of ``data_dir`` holding a complete export set."""

    root = Path(data_dir)
    if not root.is_dir():
        return []
    return sorted(entry.name for entry in root.iterdir() if entry.is_dir() and is_dataset_folder(entry))


def is_folder_name(name: str) -> bool:
    """True for a single directory name: no separators, not absolute, not ``.`` or ``..``."""

    if name in ("", ".", "..") or os.path.isabs(name):
        return False
    return "/" not in name and "\\" not in name


def resolve_folder(folder: Optional[str], data_dir: PathLike, default_folder: str = "default") -> Path:
    """
    Map a request's folder argument to a directory.

    A bare name is looked up under ``data_dir``; an absolute path or one that
    contains a separator is used as given.
    """

    name = folder or default_folder
    if os.path.isabs(name) or os.sep in name or (os.altsep and os.altsep in name):
        return Path(name)
    return Path(data_dir) / name
