from .appinfo import AppInfo
from .cli_map import CliOverrideMap, OptionKey
from .codec import IniCodec
from .directories import Directories, DirectoryEntry
from .errors import (
    DuplicateConfigTypeError,
    DuplicateOptionError,
    DuplicateSectionError,
    FlagCollisionError,
    RegistrationError,
    SpecificationError,
    SpecLoadError,
    StanzaError,
)
from .group import INACTIVE_GROUP, Comments, SectionGroup, SectionGroupSpec
from .history import History
from .messages import LoggingSink, MessageSink, Messages
from .options import INACTIVE_OPTION, Option, OptionKind, OptionSpec
from .recent import RecentFiles
from .registry import ConfigRegistry
from .section import INACTIVE_SECTION, Section, SectionSpec
from .spec_io import load_group_spec, save_group_spec


__all__ = [
    "AppInfo",
    "CliOverrideMap",
    "Comments",
    "ConfigRegistry",
    "Directories",
    "DirectoryEntry",
    "DuplicateConfigTypeError",
    "DuplicateOptionError",
    "DuplicateSectionError",
    "FlagCollisionError",
    "History",
    "INACTIVE_GROUP",
    "INACTIVE_OPTION",
    "INACTIVE_SECTION",
    "IniCodec",
    "LoggingSink",
    "MessageSink",
    "Messages",
    "Option",
    "OptionKey",
    "OptionKind",
    "OptionSpec",
    "RecentFiles",
    "RegistrationError",
    "Section",
    "SectionGroup",
    "SectionGroupSpec",
    "SectionSpec",
    "SpecLoadError",
    "SpecificationError",
    "StanzaError",
    "load_group_spec",
    "save_group_spec",
]
