"""Where each configuration file lives.

A session file may describe, one section per config type, the directory,
base name and extension of the file holding that type::

    [rc]

    active = true
    directory = "config"
    basename = "myapp"
    ext = "rc"

Relative directories are resolved against the session path, which defaults
to the application's home directory.
"""

from __future__ import annotations

import configparser
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .appinfo import AppInfo
from .codec import extract_value, make_parser
from .errors import SpecificationError
from .messages import Messages
from .options import to_bool
from .section import bracketed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryEntry:
    """File location for one config type."""

    section: str
    active: bool = False
    directory: str = ""
    basename: str = ""
    extension: str = ""

    @property
    def config_type(self) -> str:
        return self.section[1:-1]

    def file_spec(self, session_path: Path, app_name: str) -> Path | None:
        """Full path of the file, or ``None`` for an inactive entry."""
        if not self.active or not self.directory:
            return None
        directory = Path(self.directory).expanduser()
        if not directory.is_absolute():
            directory = session_path / directory
        base = self.basename or app_name
        ext = (self.extension or self.config_type).lstrip(".")
        return directory / f"{base}.{ext}"


class Directories:
    """Directory entries parsed from a session file."""

    def __init__(
        self,
        app: AppInfo | None = None,
        session_path: str | Path | None = None,
        messages: Messages | None = None,
    ) -> None:
        self.app = app or AppInfo.from_env()
        self._session_path = Path(session_path).expanduser() if session_path else None
        self.messages = messages or Messages()
        self._entries: dict[str, DirectoryEntry] = {}

    @property
    def session_path(self) -> Path:
        if self._session_path is not None:
            return self._session_path
        return self.app.home()

    @session_path.setter
    def session_path(self, path: str | Path) -> None:
        self._session_path = Path(path).expanduser()

    @property
    def entries(self) -> list[DirectoryEntry]:
        return list(self._entries.values())

    def add_entry(self, entry: DirectoryEntry) -> None:
        self._entries[entry.section] = entry

    def entry(self, section: str) -> DirectoryEntry | None:
        try:
            return self._entries.get(bracketed(section))
        except SpecificationError:
            return None

    # ----- parsing -----

    def parse_dir_entry(self, parser: configparser.ConfigParser, section: str) -> DirectoryEntry:
        """Read ``active``, ``directory``, ``basename`` and ``ext`` from *section*.

        A missing section or a missing ``directory`` yields an inactive
        entry and an error message.
        """
        try:
            section = bracketed(section)
        except SpecificationError:
            self.messages.error(f"invalid section name {section!r}")
            return DirectoryEntry(section or "[]")
        bare = section[1:-1]
        if not parser.has_section(bare):
            self.messages.error(f"{section}: section not found")
            return DirectoryEntry(section)

        def get(name: str) -> str:
            return extract_value(parser.get(bare, name, fallback=None)) or ""

        directory = get("directory")
        if not directory:
            self.messages.error(f"{section}: 'directory' missing")
            return DirectoryEntry(section)
        return DirectoryEntry(
            section,
            active=to_bool(get("active")),
            directory=directory,
            basename=get("basename"),
            extension=get("ext"),
        )

    def parse_text(self, text: str, sections: Iterable[str], source: str = "<string>") -> bool:
        parser = make_parser()
        try:
            parser.read_string(text, source=source)
        except configparser.Error as exc:
            return self.messages.error(f"{source}: cannot parse: {exc}")
        ok = True
        for name in sections:
            entry = self.parse_dir_entry(parser, name)
            self.add_entry(entry)
            ok = ok and (entry.active or bool(entry.directory))
        return ok

    def load(self, path: str | Path, sections: Iterable[str]) -> bool:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError:
            return self.messages.file_error("Cannot read", str(path))
        return self.parse_text(text, sections, str(path))

    # ----- results -----

    def file_spec(self, section: str) -> Path | None:
        entry = self.entry(section)
        if entry is None:
            return None
        return entry.file_spec(self.session_path, self.app.app_name)

    def file_specs(self) -> dict[str, Path]:
        specs: dict[str, Path] = {}
        for entry in self._entries.values():
            path = entry.file_spec(self.session_path, self.app.app_name)
            if path is not None:
                specs[entry.section] = path
        return specs

    def apply(self, registry) -> int:
        """Point each registered group at its active entry.  Returns the count."""
        count = 0
        for entry in self._entries.values():
            path = entry.file_spec(self.session_path, self.app.app_name)
            if path is None:
                continue
            group = registry.find(entry.config_type)
            if not group.active():
                logger.debug("%s: no such config type", entry.section)
                continue
            group.directory = str(path.parent)
            group.basename = path.stem
            group.extension = path.suffix.lstrip(".")
            count += 1
        return count


__all__ = ["DirectoryEntry", "Directories"]
