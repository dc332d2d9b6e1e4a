from __future__ import annotations

from typing import Iterator, NamedTuple

from .errors import FlagCollisionError
from .group import SectionGroup


class OptionKey(NamedTuple):
    """Full address of an option."""

    config_type: str
    section: str
    option: str

    def __str__(self) -> str:
        return f"{self.config_type}:{self.section}:{self.option}"


class CliOverrideMap:
    """Maps ``-x`` and ``--long-name`` flags to :class:`OptionKey` values."""

    def __init__(self) -> None:
        self._flags: dict[str, OptionKey] = {}

    def __len__(self) -> int:
        return len(self._flags)

    def __contains__(self, flag: object) -> bool:
        return flag in self._flags

    def __iter__(self) -> Iterator[str]:
        return iter(self._flags)

    def items(self) -> list[tuple[str, OptionKey]]:
        return list(self._flags.items())

    @staticmethod
    def normalize(flag_or_name: str) -> str:
        """``"v"`` -> ``"-v"``, ``"verbose"`` -> ``"--verbose"``; flags pass through."""
        if flag_or_name.startswith("-"):
            return flag_or_name
        if len(flag_or_name) == 1:
            return f"-{flag_or_name}"
        return f"--{flag_or_name}"

    def lookup(self, flag_or_name: str) -> OptionKey | None:
        return self._flags.get(self.normalize(flag_or_name))

    def plan(
        self, group: SectionGroup, shadowed: list[tuple[str, OptionKey]] | None = None
    ) -> dict[str, OptionKey]:
        """Return the flags *group* would add without adding them.

        Option names only need to be unique within a section, so a long name
        that is already taken is left unmapped and appended to *shadowed*
        together with the key it would have pointed at.  The option stays
        reachable by its full address and by its short code.

        Raises :class:`FlagCollisionError` if a short flag is already taken
        or is claimed twice within *group*.
        """
        entries: dict[str, OptionKey] = {}
        for sec in group.sections:
            for opt in sec:
                if not opt.cli_enabled or opt.is_list():
                    continue
                key = OptionKey(group.config_type, sec.name, opt.name)
                flags = [f"--{opt.name}"]
                if opt.code:
                    flags.append(f"-{opt.code}")
                for flag in flags:
                    owner = self._flags.get(flag) or entries.get(flag)
                    if owner is not None and flag.startswith("--"):
                        if shadowed is not None:
                            shadowed.append((flag, key))
                        continue
                    if owner is not None:
                        raise FlagCollisionError(f"{flag} of {key} is already used by {owner}")
                    entries[flag] = key
        return entries

    def update(self, entries: dict[str, OptionKey]) -> None:
        self._flags.update(entries)

    def add_group(self, group: SectionGroup) -> None:
        self.update(self.plan(group))

    def short_flags(self) -> list[str]:
        return [f for f in self._flags if not f.startswith("--")]

    def long_flags(self) -> list[str]:
        return [f for f in self._flags if f.startswith("--")]

    def flags_for(self, key: OptionKey) -> list[str]:
        return [f for f, k in self._flags.items() if k == key]


__all__ = ["CliOverrideMap", "OptionKey"]
