from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .errors import DuplicateOptionError, SpecificationError
from .options import INACTIVE_OPTION, TERMINAL_WIDTH, Option, OptionKind, OptionSpec

COMMENTS_SECTION = "[comments]"

MARKER_DESCRIPTION = (
    "This file holds configuration data for pystanza applications. It follows "
    "a format similar to the old INI files of MS-DOS. 'config-type' makes sure "
    "the right kind of file is in use. 'version' helps the application to "
    "detect older configuration files."
)

COMMENTS_DESCRIPTION = (
    "[comments] holds user documentation for this file. The first empty, "
    "hash-commented, or tag line ends the comment."
)


def bracketed(name: str) -> str:
    """Return *name* wrapped in square brackets.

    >>> bracketed("rc"), bracketed("[rc]")
    ('[rc]', '[rc]')
    """
    inner = name.strip()
    if inner.startswith("[") and inner.endswith("]"):
        inner = inner[1:-1]
    if not inner or inner != inner.strip() or "[" in inner or "]" in inner:
        raise SpecificationError(f"invalid section name: {name!r}")
    return f"[{inner}]"


def unbracketed(name: str) -> str:
    return bracketed(name)[1:-1]


def comment_block(text: str, width: int = TERMINAL_WIDTH) -> str:
    """Wrap *text* into ``#`` prefixed lines.  Blank lines separate paragraphs."""
    if not text.strip():
        return ""
    lines: list[str] = []
    for para in text.strip().split("\n\n"):
        joined = " ".join(para.split())
        wrapped = textwrap.wrap(joined, width=width, initial_indent="# ", subsequent_indent="# ")
        if lines:
            lines.append("#")
        lines.extend(wrapped or ["#"])
    return "\n".join(lines)


@dataclass(frozen=True)
class SectionSpec:
    """Declarative description of a section and its options."""

    name: str
    description: str = ""
    options: tuple[OptionSpec, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", bracketed(self.name))
        object.__setattr__(self, "options", tuple(self.options))
        for opt in self.options:
            if not isinstance(opt, OptionSpec):
                raise SpecificationError(f"{self.name}: not an OptionSpec: {opt!r}")
        lists = [o.name for o in self.options if o.kind is OptionKind.LIST]
        if len(lists) > 1:
            raise SpecificationError(f"{self.name}: more than one list option: {', '.join(lists)}")

    def to_dict(self) -> dict:
        data: dict = {"name": self.name}
        if self.description:
            data["description"] = self.description
        data["options"] = [o.to_dict() for o in self.options]
        return data


class Section:
    """Ordered collection of live options under one ``[header]``."""

    def __init__(self, name: str, description: str = "") -> None:
        self._name = bracketed(name)
        self.description = description
        self._options: dict[str, Option] = {}

    @classmethod
    def from_spec(cls, spec: SectionSpec) -> "Section":
        """Build a section, raising :class:`DuplicateOptionError` on a name clash."""
        sec = cls(spec.name, spec.description)
        for opt_spec in spec.options:
            if not sec.add_option(Option(opt_spec)):
                raise DuplicateOptionError(f"{spec.name}: duplicate option {opt_spec.name!r}")
        return sec

    def __repr__(self) -> str:
        return f"Section({self._name!r}, {list(self._options)!r})"

    def __iter__(self) -> Iterator[Option]:
        return iter(self._options.values())

    def __len__(self) -> int:
        return len(self._options)

    def __contains__(self, name: object) -> bool:
        return name in self._options

    @property
    def name(self) -> str:
        return self._name

    @property
    def bare_name(self) -> str:
        return self._name[1:-1]

    def active(self) -> bool:
        return True

    # ----- options -----

    def add_option(self, option: Option) -> bool:
        """Add *option* unless its name is taken or it would be a second list."""
        if option.name in self._options:
            return False
        if option.is_list() and self.list_option() is not None:
            return False
        self._options[option.name] = option
        return True

    def add_options(self, options: Iterable[Option]) -> bool:
        """Add all *options* or none of them."""
        options = list(options)
        names = [o.name for o in options]
        if len(set(names)) != len(names) or any(n in self._options for n in names):
            return False
        lists = sum(1 for o in options if o.is_list())
        if lists and lists + (self.list_option() is not None) > 1:
            return False
        for opt in options:
            self._options[opt.name] = opt
        return True

    def option_pairs(self) -> list[tuple[str, Option]]:
        return list(self._options.items())

    def option_names(self) -> list[str]:
        return list(self._options)

    def find_option_spec(self, name: str) -> Option:
        """Return the option called *name*, or :data:`INACTIVE_OPTION`.

        A one character *name* is looked up as a short command-line code.
        """
        if len(name) == 1:
            for opt in self._options.values():
                if opt.code == name:
                    return opt
            return INACTIVE_OPTION
        return self._options.get(name, INACTIVE_OPTION)

    def list_option(self) -> Option | None:
        for opt in self._options.values():
            if opt.kind is OptionKind.LIST:
                return opt
        return None

    @staticmethod
    def is_section_marker(option: Option) -> bool:
        return option.kind is OptionKind.LIST

    def set_value(self, name: str, value: str) -> bool:
        opt = self.find_option_spec(name)
        if not opt.active():
            return False
        return opt.set_value(value)

    # ----- state -----

    @property
    def modified(self) -> bool:
        return any(o.modified for o in self._options.values())

    def unmodify_all(self) -> None:
        for opt in self._options.values():
            opt.unmodify()

    def reset(self) -> None:
        for opt in self._options.values():
            opt.reset()

    def snapshot(self) -> dict[str, str]:
        """Current values by option name, for :class:`~pystanza.history.History`."""
        return {name: opt.value() for name, opt in self._options.items()}

    def restore(self, values: dict[str, str]) -> int:
        """Set the options named in *values*.  Returns how many changed."""
        changed = 0
        for name, text in values.items():
            opt = self._options.get(name)
            if opt is None or opt.value() == text:
                continue
            if opt.set_value(text):
                changed += 1
        return changed

    # ----- rendering -----

    def setting_line(self, name: str) -> str:
        return self.find_option_spec(name).setting_line()

    def settings_text(self) -> str:
        lines = [opt.setting_line() for opt in self._options.values()]
        return "\n".join(line for line in lines if line)

    def description_commented(self) -> str:
        return comment_block(self.description)

    def debug_text(self) -> str:
        lines = [self._name]
        lines.extend(opt.debug_line() for opt in self._options.values())
        return "\n".join(lines)


class _InactiveSection(Section):
    def __init__(self) -> None:
        self._name = ""
        self.description = ""
        self._options = {}

    def __repr__(self) -> str:
        return "INACTIVE_SECTION"

    @property
    def bare_name(self) -> str:
        return ""

    def active(self) -> bool:
        return False

    def add_option(self, option: Option) -> bool:
        return False

    def add_options(self, options: Iterable[Option]) -> bool:
        return False


INACTIVE_SECTION: Section = _InactiveSection()


def marker_section_spec(name: str, config_type: str = "", version: int = 0) -> SectionSpec:
    """The stock section every file starts with."""
    return SectionSpec(
        name,
        MARKER_DESCRIPTION,
        (
            OptionSpec(
                "config-type",
                OptionKind.STRING,
                config_type,
                cli_enabled=False,
                description="The type of configuration file.",
                built_in=True,
            ),
            OptionSpec(
                "version",
                OptionKind.INTEGER,
                str(version),
                cli_enabled=False,
                description="Configuration file version.",
                built_in=True,
            ),
        ),
    )


__all__ = [
    "COMMENTS_SECTION",
    "INACTIVE_SECTION",
    "Section",
    "SectionSpec",
    "bracketed",
    "comment_block",
    "marker_section_spec",
    "unbracketed",
]
