from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir as _uc

DEFAULT_APP_NAME = "pystanza"
DEFAULT_MAIN_SECTION = "[pystanza]"


def _app_name(default: str) -> str:
    return os.getenv("PYSTANZA_APP_NAME", default)


def default_home_directory(app_name: str = DEFAULT_APP_NAME) -> Path:
    """Return the directory configuration files live in by default.

    ``PYSTANZA_HOME`` overrides the platform's per-user config directory.
    """
    env = os.getenv("PYSTANZA_HOME")
    if env:
        return Path(env).expanduser().resolve()
    return Path(_uc(appname=_app_name(app_name))).resolve()


@dataclass(frozen=True)
class AppInfo:
    """Application-wide settings shared by every registered group."""

    app_name: str = DEFAULT_APP_NAME
    version: str = ""
    main_section: str = DEFAULT_MAIN_SECTION
    home_directory: Path | None = None
    description: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        name = self.main_section
        if not (len(name) > 2 and name.startswith("[") and name.endswith("]")):
            object.__setattr__(self, "main_section", f"[{name.strip('[]')}]")
        if self.home_directory is not None:
            object.__setattr__(self, "home_directory", Path(self.home_directory))

    @classmethod
    def from_env(cls, app_name: str = DEFAULT_APP_NAME, **kw) -> "AppInfo":
        return cls(app_name=_app_name(app_name), **kw)

    @property
    def version_text(self) -> str:
        if self.version:
            return f"{self.app_name} {self.version}"
        return self.app_name

    def home(self) -> Path:
        if self.home_directory is not None:
            return self.home_directory
        return default_home_directory(self.app_name)


__all__ = ["AppInfo", "DEFAULT_MAIN_SECTION", "default_home_directory"]
