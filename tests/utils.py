from __future__ import annotations

from pathlib import Path

from pystanza.appinfo import AppInfo
from pystanza.group import SectionGroupSpec
from pystanza.options import OptionSpec
from pystanza.registry import ConfigRegistry
from pystanza.section import SectionSpec


def sample_spec(config_type: str = "rc", version: int = 2, **kw) -> SectionGroupSpec:
    """Two sections: ``[s1]`` with a flag and a count, ``[s2]`` with a string."""
    return SectionGroupSpec(
        config_type=config_type,
        version=version,
        sections=[
            SectionSpec(
                "[s1]",
                "First section.",
                [
                    OptionSpec("alpha", "boolean", "false", code="a", description="A flag."),
                    OptionSpec("beta", "integer", "0", description="A count."),
                ],
            ),
            SectionSpec(
                "[s2]",
                "Second section.",
                [OptionSpec("gamma", "string", "", description="A name.")],
            ),
        ],
        **kw,
    )


class RecordingSink:
    """Message sink that keeps everything it is given."""

    def __init__(self):
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def info(self, msg: str) -> None:
        self.infos.append(msg)

    def warn(self, msg: str) -> None:
        self.warnings.append(msg)

    def error(self, msg: str) -> None:
        self.errors.append(msg)

    def file_error(self, tag: str, path: str) -> None:
        self.errors.append(f"{tag}: {path}")


def make_registry(home: Path, *specs: SectionGroupSpec, sink=None) -> ConfigRegistry:
    registry = ConfigRegistry(AppInfo(app_name="testapp", version="1.0", home_directory=home), sink)
    for spec in specs:
        assert registry.register(spec.config_type, spec)
    return registry
