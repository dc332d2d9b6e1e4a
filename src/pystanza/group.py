"""Section groups: everything that lives in one configuration file.

A group is built from a :class:`SectionGroupSpec` and always begins with the
stock marker section (``[pystanza]`` unless the application renames it) that
records the file's ``config-type`` and ``version``.  Free-form user notes
live in the ``[comments]`` block and are kept in a :class:`Comments` object
rather than in an option.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

from .appinfo import AppInfo
from .errors import DuplicateSectionError, SpecificationError
from .options import INACTIVE_OPTION, Option
from .section import (
    COMMENTS_SECTION,
    INACTIVE_SECTION,
    Section,
    SectionSpec,
    bracketed,
    marker_section_spec,
)


@dataclass(frozen=True)
class SectionGroupSpec:
    """Declarative description of one configuration file."""

    config_type: str
    sections: tuple[SectionSpec, ...] = field(default_factory=tuple)
    version: int = 0
    directory: str = ""
    basename: str = ""
    extension: str = ""
    description: str = ""
    active: bool = True
    comments: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "config_type", str(self.config_type).strip())
        object.__setattr__(self, "sections", tuple(self.sections))
        object.__setattr__(self, "extension", str(self.extension).lstrip("."))
        try:
            version = int(self.version)
        except (TypeError, ValueError):
            raise SpecificationError(f"version must be an integer: {self.version!r}") from None
        if version < 0:
            raise SpecificationError(f"version must not be negative: {version}")
        object.__setattr__(self, "version", version)
        for sec in self.sections:
            if not isinstance(sec, SectionSpec):
                raise SpecificationError(f"not a SectionSpec: {sec!r}")

    def to_dict(self) -> dict:
        data: dict = {"config_type": self.config_type, "version": self.version}
        for key in ("directory", "basename", "extension", "description", "comments"):
            val = getattr(self, key)
            if val:
                data[key] = val
        if not self.active:
            data["active"] = False
        data["sections"] = [s.to_dict() for s in self.sections]
        return data


class Comments:
    """Contents of the ``[comments]`` block."""

    def __init__(self, text: str = "") -> None:
        self._text = text
        self._is_set = bool(text)
        self._modified = False

    def __repr__(self) -> str:
        return f"Comments({self._text!r})"

    @property
    def text(self) -> str:
        return self._text

    @property
    def is_set(self) -> bool:
        return self._is_set

    @property
    def modified(self) -> bool:
        return self._modified

    def load(self, text: str) -> None:
        self._text = text
        self._is_set = bool(text)

    def set(self, text: str) -> None:
        self.load(text)
        self._modified = True

    def clear(self) -> None:
        self.set("")

    def unmodify(self) -> None:
        self._modified = False

    def lines(self) -> list[str]:
        """Lines to write.  Empty lines become a single space so the block survives."""
        return [line if line.strip() else " " for line in self._text.splitlines()]


class SectionGroup:
    """Live sections of one config type."""

    def __init__(
        self,
        config_type: str,
        app: AppInfo | None = None,
        *,
        version: int = 0,
        directory: str = "",
        basename: str = "",
        extension: str = "",
        description: str = "",
        active: bool = True,
    ) -> None:
        self.app = app or AppInfo()
        self.config_type = config_type
        self.ordinal_version = version
        self.directory = directory
        self.basename = basename
        self.extension = extension.lstrip(".")
        self.description = description
        self._active = active
        self.marker = Section.from_spec(marker_section_spec(self.app.main_section, config_type))
        self.comments = Comments()
        self._sections: dict[str, Section] = {}
        self.legacy = False
        self._modified = False

    @classmethod
    def from_spec(cls, spec: SectionGroupSpec, app: AppInfo | None = None) -> "SectionGroup":
        """Build a group from *spec*.

        Raises :class:`DuplicateSectionError` or :class:`DuplicateOptionError`
        when names clash.
        """
        group = cls(
            spec.config_type,
            app,
            version=spec.version,
            directory=spec.directory,
            basename=spec.basename,
            extension=spec.extension,
            description=spec.description,
            active=spec.active,
        )
        if spec.comments:
            group.comments.load(spec.comments)
        for sec_spec in spec.sections:
            if not group.add_section(Section.from_spec(sec_spec)):
                raise DuplicateSectionError(
                    f"{spec.config_type}: duplicate section {sec_spec.name}"
                )
        return group

    def __repr__(self) -> str:
        return f"SectionGroup({self.config_type!r}, {list(self._sections)!r})"

    def __iter__(self) -> Iterator[Section]:
        return iter(self._sections.values())

    def active(self) -> bool:
        return self._active

    @property
    def sections(self) -> list[Section]:
        """Declared sections, without the marker section."""
        return list(self._sections.values())

    def all_sections(self) -> list[Section]:
        return [self.marker, *self._sections.values()]

    def add_section(self, section: Section) -> bool:
        name = section.name
        if name in self._sections or name in (self.marker.name, COMMENTS_SECTION):
            return False
        self._sections[name] = section
        return True

    def add_options(self, section_name: str, options: Iterable[Option]) -> bool:
        sec = self.find_inisection(section_name)
        if sec is self.marker:
            return False
        return sec.add_options(options)

    # ----- lookups -----

    def find_inisection(self, name: str) -> Section:
        try:
            key = bracketed(name)
        except SpecificationError:
            return INACTIVE_SECTION
        if key == self.marker.name:
            return self.marker
        return self._sections.get(key, INACTIVE_SECTION)

    def find_options(self, section_name: str) -> Section:
        """The options of a section.  A miss yields :data:`INACTIVE_SECTION`, which is empty."""
        return self.find_inisection(section_name)

    def find_option_spec(self, option_name: str, section_name: str | None = None) -> Option:
        """Find an option by name, searching every section when none is given."""
        if section_name is not None:
            return self.find_inisection(section_name).find_option_spec(option_name)
        for sec in self.all_sections():
            opt = sec.find_option_spec(option_name)
            if opt.active():
                return opt
        return INACTIVE_OPTION

    # ----- marker values -----

    @property
    def file_config_type(self) -> str:
        return self.marker.find_option_spec("config-type").value()

    @property
    def file_version(self) -> int:
        return self.marker.find_option_spec("version").integer_value()

    # ----- state -----

    @property
    def modified(self) -> bool:
        if self._modified or self.comments.modified:
            return True
        return any(sec.modified for sec in self._sections.values())

    def set_modified(self) -> None:
        self._modified = True

    def unmodify_all(self) -> None:
        self._modified = False
        self.comments.unmodify()
        for sec in self.all_sections():
            sec.unmodify_all()

    def reset(self) -> None:
        for sec in self._sections.values():
            sec.reset()

    def snapshot(self) -> dict[str, dict[str, str]]:
        return {name: sec.snapshot() for name, sec in self._sections.items()}

    def restore(self, values: dict[str, dict[str, str]] | None) -> int:
        """Apply a :meth:`snapshot`.  Unknown sections are ignored."""
        if not values:
            return 0
        return sum(
            self._sections[name].restore(section_values)
            for name, section_values in values.items()
            if name in self._sections
        )

    # ----- file location -----

    def file_specification(self, name: str | Path | None = None) -> Path:
        """Return the path of this group's file.

        Without *name* the path is ``directory/basename.extension``.  A
        relative *name* is placed under the directory and receives the
        extension when it has none.
        """
        directory = Path(self.directory).expanduser() if self.directory else self.app.home()
        ext = self.extension or self.config_type
        if name is None or str(name) == "":
            base = self.basename or self.app.app_name
            return directory / f"{base}.{ext}"
        path = Path(name).expanduser()
        if not path.is_absolute():
            path = directory / path
        if not path.suffix and ext:
            path = path.with_name(f"{path.name}.{ext}")
        return path

    def debug_text(self) -> str:
        lines = [f"{self.config_type} v{self.ordinal_version}"]
        if self.legacy:
            lines[0] += " (legacy)"
        for sec in self.all_sections():
            lines.append(sec.debug_text())
        return "\n".join(lines)


class _InactiveGroup(SectionGroup):
    def __init__(self) -> None:
        super().__init__("", active=False)

    def __repr__(self) -> str:
        return "INACTIVE_GROUP"

    def add_section(self, section: Section) -> bool:
        return False

    def add_options(self, section_name: str, options: Iterable[Option]) -> bool:
        return False

    def find_inisection(self, name: str) -> Section:
        return INACTIVE_SECTION

    def find_option_spec(self, option_name: str, section_name: str | None = None) -> Option:
        return INACTIVE_OPTION

    def set_modified(self) -> None:
        return None


INACTIVE_GROUP: SectionGroup = _InactiveGroup()


__all__ = [
    "Comments",
    "INACTIVE_GROUP",
    "SectionGroup",
    "SectionGroupSpec",
]
