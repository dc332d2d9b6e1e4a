"""Bounded most-recently-used file list.

:class:`RecentFiles` keeps absolute paths, newest first.  It can be bound
to a ``list`` option, in which case it is filled from the option and every
change is written back to it::

    recent = RecentFiles(registry.find_option_spec("files", "rc", "[recent-files]"))
    recent.add("song.mid")
    registry.write_all()
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

from .options import Option

logger = logging.getLogger(__name__)

DEFAULT_RECENT_MAXIMUM = 12


def normalize_path(item: str | Path) -> str:
    """Absolute, ``/`` separated form of *item*; ``""`` for an empty name."""
    text = str(item).strip()
    if not text:
        return ""
    return Path(text).expanduser().resolve().as_posix()


def file_readable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.R_OK)


class RecentFiles:
    """Newest-first list of readable files holding at most :attr:`maximum` entries."""

    def __init__(self, option: Option | None = None, maximum: int = DEFAULT_RECENT_MAXIMUM) -> None:
        self._items: list[str] = []
        self._maximum = maximum
        self._option = option if option is not None and option.is_list() else None
        if self._option is not None:
            for item in self._option.list_value():
                if not self.append(item, sync=False):
                    logger.debug("dropping recent file %s", item)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __contains__(self, item: object) -> bool:
        return isinstance(item, (str, Path)) and normalize_path(item) in self._items

    @property
    def maximum(self) -> int:
        return self._maximum

    def count(self) -> int:
        return len(self._items)

    def items(self) -> list[str]:
        return list(self._items)

    def _sync(self) -> None:
        if self._option is not None:
            self._option.set_list_value(self._items)

    def append(self, item: str | Path, *, sync: bool = True) -> bool:
        """Add *item* at the end unless the list is full.

        The file must exist and be readable.  An entry already in the list
        stays where it is and ``True`` is returned.
        """
        if self.count() >= self._maximum:
            return False
        path = normalize_path(item)
        if not path or not file_readable(path):
            return False
        if path not in self._items:
            self._items.append(path)
            if sync:
                self._sync()
        return True

    def add(self, item: str | Path) -> bool:
        """Move or insert *item* at the front, dropping the oldest entry if full."""
        path = normalize_path(item)
        if not path or not file_readable(path):
            return False
        if path in self._items:
            self._items.remove(path)
        elif self.count() >= self._maximum:
            self._items.pop()
        self._items.insert(0, path)
        self._sync()
        return True

    def remove(self, item: str | Path) -> bool:
        path = normalize_path(item)
        if path not in self._items:
            return False
        self._items.remove(path)
        self._sync()
        return True

    def clear(self) -> None:
        self._items.clear()
        self._sync()

    def get(self, index: int) -> str:
        """The entry at *index*, or ``""`` when out of range."""
        if 0 <= index < len(self._items):
            return self._items[index]
        return ""

    def file(self, index: int, shorten: bool = False) -> str:
        """Like :meth:`get`; *shorten* returns only the file name."""
        path = self.get(index)
        if shorten and path:
            return Path(path).name
        return path


__all__ = ["DEFAULT_RECENT_MAXIMUM", "RecentFiles", "normalize_path"]
