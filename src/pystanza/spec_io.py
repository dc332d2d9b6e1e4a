"""Persistence helpers for :class:`~pystanza.group.SectionGroupSpec`.

Group specifications can be kept in JSON, YAML or TOML files so that the
layout of a configuration file is data rather than code.  The loader is
chosen by file suffix.  TOML files are read only.

A minimal YAML spec::

    config_type: rc
    version: 2
    sections:
      - name: "[s1]"
        description: First section.
        options:
          - {name: alpha, kind: boolean, default: "true", code: a}
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

try:  # pragma: no cover - Python <3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback
    import tomli as tomllib  # type: ignore

from .errors import SpecLoadError, SpecificationError
from .group import SectionGroupSpec
from .options import OptionSpec
from .section import SectionSpec


def option_spec_from_dict(data: Mapping[str, Any]) -> OptionSpec:
    data = dict(data)
    if "type" in data and "kind" not in data:
        data["kind"] = data.pop("type")
    default = data.get("default", "")
    if isinstance(default, bool):
        data["default"] = "true" if default else "false"
    elif default is None:
        data["default"] = ""
    else:
        data["default"] = str(default)
    return OptionSpec(**data)


def section_spec_from_dict(data: Mapping[str, Any]) -> SectionSpec:
    return SectionSpec(
        name=data["name"],
        description=data.get("description", "") or "",
        options=[option_spec_from_dict(o) for o in data.get("options", [])],
    )


def group_spec_from_dict(data: Mapping[str, Any]) -> SectionGroupSpec:
    """Build a spec from plain data, raising :class:`SpecLoadError` on bad input."""
    if not isinstance(data, Mapping):
        raise SpecLoadError("root of a group spec must be a mapping")
    try:
        return SectionGroupSpec(
            config_type=data["config_type"],
            version=data.get("version", 0),
            directory=data.get("directory", "") or "",
            basename=data.get("basename", "") or "",
            extension=data.get("extension", "") or "",
            description=data.get("description", "") or "",
            active=bool(data.get("active", True)),
            comments=data.get("comments", "") or "",
            sections=[section_spec_from_dict(s) for s in data.get("sections", [])],
        )
    except KeyError as exc:
        raise SpecLoadError(f"missing key {exc.args[0]!r}") from exc
    except (TypeError, SpecificationError) as exc:
        raise SpecLoadError(str(exc)) from exc


####################
##### FORMATS ######
####################

class SpecFormat(ABC):
    suffixes: tuple[str, ...] = ()
    writable = True

    @abstractmethod
    def loads(self, text: str) -> Any:
        pass

    def dump(self, data: Mapping[str, Any], fh) -> None:
        raise SpecLoadError(f"{type(self).__name__} is read only")


_REGISTRY: dict[str, type[SpecFormat]] = {}


def register_format(fmt: type[SpecFormat]) -> type[SpecFormat]:
    """Register a format class and return it for decorator use."""
    for suf in fmt.suffixes:
        _REGISTRY[suf] = fmt
    return fmt


def get_format_for_path(path: Path) -> SpecFormat:
    fmt_cls = _REGISTRY.get(Path(path).suffix.lower())
    if fmt_cls is None:
        raise SpecLoadError(f"no spec format for {Path(path).suffix or path}")
    return fmt_cls()


@register_format
class JsonFormat(SpecFormat):
    suffixes = (".json",)

    def loads(self, text: str) -> Any:
        return json.loads(text)

    def dump(self, data: Mapping[str, Any], fh) -> None:
        json.dump(data, fh, indent=2)
        fh.write("\n")


@register_format
class YamlFormat(SpecFormat):
    suffixes = (".yaml", ".yml")

    def loads(self, text: str) -> Any:
        return yaml.safe_load(text)

    def dump(self, data: Mapping[str, Any], fh) -> None:
        yaml.safe_dump(dict(data), fh, sort_keys=False, allow_unicode=True)


@register_format
class TomlFormat(SpecFormat):
    suffixes = (".toml",)
    writable = False

    def loads(self, text: str) -> Any:
        return tomllib.loads(text)


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------

def load_group_spec(path: str | Path) -> SectionGroupSpec:
    """Load a :class:`SectionGroupSpec` from *path*."""
    path = Path(path)
    fmt = get_format_for_path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecLoadError(f"cannot read {path}: {exc}") from exc
    try:
        data = fmt.loads(raw)
    except (ValueError, yaml.YAMLError) as exc:
        raise SpecLoadError(f"{path}: {exc}") from exc
    return group_spec_from_dict(data or {})


def save_group_spec(path: str | Path, spec: SectionGroupSpec) -> None:
    """Persist *spec* at *path*.

    The file is written to a temporary file which is then moved into place.
    """
    path = Path(path)
    fmt = get_format_for_path(path)
    if not fmt.writable:
        raise SpecLoadError(f"cannot write {path.suffix} spec files")
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as fh:
        fmt.dump(spec.to_dict(), fh)
    tmp.replace(path)


def add_section_spec(path: str | Path, section: SectionSpec) -> SectionGroupSpec:
    """Append *section* to the group spec stored at *path* and re-save."""
    spec = load_group_spec(path)
    spec = SectionGroupSpec(
        config_type=spec.config_type,
        version=spec.version,
        directory=spec.directory,
        basename=spec.basename,
        extension=spec.extension,
        description=spec.description,
        active=spec.active,
        comments=spec.comments,
        sections=list(spec.sections) + [section],
    )
    save_group_spec(path, spec)
    return spec


__all__ = [
    "add_section_spec",
    "get_format_for_path",
    "group_spec_from_dict",
    "load_group_spec",
    "register_format",
    "save_group_spec",
]
