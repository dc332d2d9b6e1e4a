"""The configuration registry.

:class:`ConfigRegistry` owns one :class:`~pystanza.group.SectionGroup` per
config type and the command-line override map built from them.  It is the
object applications construct at startup and pass around.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Iterator

from .appinfo import AppInfo
from .cli_map import CliOverrideMap, OptionKey
from .codec import IniCodec
from .errors import DuplicateConfigTypeError, RegistrationError, SpecificationError
from .group import INACTIVE_GROUP, SectionGroup, SectionGroupSpec
from .history import History
from .messages import MessageSink, Messages
from .options import INACTIVE_OPTION, Option, OptionKind
from .section import Section

logger = logging.getLogger(__name__)


class ConfigRegistry:
    """Registry of section groups keyed by config type.

    The registry is not thread-safe.  It is meant to be used from a single
    thread; callers sharing one between threads must synchronise access
    themselves.

    Failures never raise.  They are reported through the message sink,
    collected in :attr:`error_message` and signalled by a ``False`` return.
    Lookups that miss return the shared inactive placeholders.
    """

    def __init__(self, app: AppInfo | None = None, sink: MessageSink | None = None) -> None:
        self.app = app or AppInfo.from_env()
        self.messages = Messages(sink)
        self.cli_map = CliOverrideMap()
        self._groups: dict[str, SectionGroup] = {}
        self._histories: dict[str, History] = {}

    def __iter__(self) -> Iterator[SectionGroup]:
        return iter(self._groups.values())

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, config_type: object) -> bool:
        return config_type in self._groups

    @property
    def config_types(self) -> list[str]:
        return list(self._groups)

    @property
    def error_message(self) -> str:
        return self.messages.error_message

    @property
    def is_error(self) -> bool:
        return self.messages.is_error

    def clear_errors(self) -> None:
        self.messages.clear()

    # ------------------------------------------------------------------
    # registration
    # ------------------------------------------------------------------

    def register(self, config_type: str, spec: SectionGroupSpec) -> bool:
        """Build and add the group described by *spec*.

        Nothing is added unless the whole group is accepted.
        """
        config_type = (config_type or "").strip()
        try:
            if not config_type:
                raise RegistrationError("empty config type")
            if config_type in self._groups:
                raise DuplicateConfigTypeError(f"config type {config_type!r} already registered")
            if spec.config_type != config_type:
                spec = replace(spec, config_type=config_type)
            group = SectionGroup.from_spec(spec, self.app)
            shadowed: list[tuple[str, OptionKey]] = []
            entries = self.cli_map.plan(group, shadowed)
        except (RegistrationError, SpecificationError) as exc:
            return self.messages.error(f"cannot register {config_type or '<empty>'}: {exc}")
        self._groups[config_type] = group
        self.cli_map.update(entries)
        for flag, key in shadowed:
            self.messages.warn(f"{flag} already maps to {self.cli_map.lookup(flag)}; {key} has no long flag")
        logger.debug("registered %s with %d sections", config_type, len(group.sections))
        return True

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------

    def find(self, config_type: str) -> SectionGroup:
        return self._groups.get(config_type, INACTIVE_GROUP)

    def find_inisection(self, section: str, config_type: str) -> Section:
        return self.find(config_type).find_inisection(section)

    def find_options(self, section: str, config_type: str) -> Section:
        """Return the options of *section* as a :class:`Section`, which may be inactive."""
        return self.find(config_type).find_options(section)

    def find_option_spec(
        self, name: str, config_type: str | None = None, section: str | None = None
    ) -> Option:
        """Resolve *name* to a live option.

        With both *config_type* and *section* the lookup is direct.
        Otherwise the override map is consulted first and then the
        registered groups are searched in registration order.
        """
        if config_type is not None and section is not None:
            return self.find(config_type).find_option_spec(name, section)
        key = self.cli_map.lookup(name)
        if key is not None and config_type in (None, key.config_type) and section in (None, key.section):
            return self.find(key.config_type).find_option_spec(key.option, key.section)
        groups = [self.find(config_type)] if config_type is not None else list(self._groups.values())
        for group in groups:
            opt = group.find_option_spec(name, section)
            if opt.active():
                return opt
        return INACTIVE_OPTION

    def key_of(self, flag_or_name: str) -> OptionKey | None:
        return self.cli_map.lookup(flag_or_name)

    # ------------------------------------------------------------------
    # files
    # ------------------------------------------------------------------

    def file_specification(self, config_type: str, file_name: str | Path | None = None) -> Path:
        return self.find(config_type).file_specification(file_name)

    def read(self, file_name: str | Path | None, config_type: str) -> bool:
        group = self.find(config_type)
        if not group.active():
            return self.messages.error(f"cannot read: unknown config type {config_type!r}")
        path = group.file_specification(file_name)
        ok = IniCodec(group, self.messages).parse(path)
        if ok and group.legacy:
            group.set_modified()
        return ok

    def write(self, file_name: str | Path | None, config_type: str) -> bool:
        group = self.find(config_type)
        if not group.active():
            return self.messages.error(f"cannot write: unknown config type {config_type!r}")
        path = group.file_specification(file_name)
        return IniCodec(group, self.messages).write(path)

    def read_all(self) -> bool:
        ok = True
        for config_type, group in self._groups.items():
            if group.active():
                ok = self.read(None, config_type) and ok
        return ok

    def write_all(self, only_modified: bool = True) -> bool:
        ok = True
        for config_type, group in self._groups.items():
            if not group.active():
                continue
            if only_modified and not (group.modified or group.legacy):
                logger.debug("%s unchanged, not written", config_type)
                continue
            ok = self.write(None, config_type) and ok
        return ok

    # ------------------------------------------------------------------
    # values
    # ------------------------------------------------------------------

    def value(self, name: str, config_type: str | None = None, section: str | None = None) -> str:
        return self.find_option_spec(name, config_type, section).value()

    def boolean_value(self, name: str, config_type: str | None = None, section: str | None = None) -> bool:
        return self.find_option_spec(name, config_type, section).boolean_value()

    def integer_value(self, name: str, config_type: str | None = None, section: str | None = None) -> int:
        return self.find_option_spec(name, config_type, section).integer_value()

    def floating_value(self, name: str, config_type: str | None = None, section: str | None = None) -> float:
        return self.find_option_spec(name, config_type, section).floating_value()

    def list_value(self, name: str, config_type: str | None = None, section: str | None = None) -> list[str]:
        return self.find_option_spec(name, config_type, section).list_value()

    def set_value(self, name: str, value: str, config_type: str | None = None, section: str | None = None) -> bool:
        return self.find_option_spec(name, config_type, section).set_value(value)

    def set_boolean_value(self, name: str, value: bool, config_type: str | None = None, section: str | None = None) -> bool:
        return self.find_option_spec(name, config_type, section).set_boolean_value(value)

    def set_integer_value(self, name: str, value: int, config_type: str | None = None, section: str | None = None) -> bool:
        return self.find_option_spec(name, config_type, section).set_integer_value(value)

    def set_floating_value(self, name: str, value: float, config_type: str | None = None, section: str | None = None) -> bool:
        return self.find_option_spec(name, config_type, section).set_floating_value(value)

    def set_list_value(self, name: str, value: list[str], config_type: str | None = None, section: str | None = None) -> bool:
        return self.find_option_spec(name, config_type, section).set_list_value(value)

    def apply_override(self, flag_or_name: str, value: str | bool | None = None) -> bool:
        """Apply a command-line value to the option mapped to *flag_or_name*.

        A boolean option given without a value is switched on.
        """
        key = self.cli_map.lookup(flag_or_name)
        if key is None:
            self.messages.warn(f"no option for {flag_or_name}")
            return False
        opt = self.find_option_spec(key.option, key.config_type, key.section)
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif value is None:
            if opt.kind is not OptionKind.BOOLEAN:
                self.messages.warn(f"{flag_or_name} needs a value")
                return False
            value = "true"
        if not opt.change_value(value, from_cli=True):
            return self.messages.error(f"{flag_or_name}: value {value!r} rejected")
        return True

    # ------------------------------------------------------------------
    # undo / redo
    # ------------------------------------------------------------------

    def history(self, config_type: str) -> History:
        """The value history of *config_type*, empty until the first checkpoint."""
        history = self._histories.get(config_type)
        return history if history is not None else History()

    def checkpoint(self, config_type: str) -> bool:
        """Record the current values of *config_type* for later undo."""
        group = self.find(config_type)
        if not group.active():
            return self.messages.error(f"cannot checkpoint: unknown config type {config_type!r}")
        self._histories.setdefault(config_type, History()).add(group.snapshot())
        return True

    def undo(self, config_type: str) -> bool:
        """Restore the previous checkpoint.  ``False`` when there is none."""
        state = self.history(config_type).undo()
        if state is None:
            return False
        self.find(config_type).restore(state)
        return True

    def redo(self, config_type: str) -> bool:
        state = self.history(config_type).redo()
        if state is None:
            return False
        self.find(config_type).restore(state)
        return True

    def debug_text(self) -> str:
        return "\n\n".join(group.debug_text() for group in self._groups.values())


__all__ = ["ConfigRegistry"]
