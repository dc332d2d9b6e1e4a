from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .appinfo import AppInfo
from .cli_map import CliOverrideMap
from .errors import SpecLoadError
from .options import OptionKind
from .registry import ConfigRegistry
from .spec_io import load_group_spec

# ---------------------------------------------------------------------------
# Override parser
# ---------------------------------------------------------------------------


def build_override_parser(
    registry: ConfigRegistry, parser: argparse.ArgumentParser | None = None
) -> argparse.ArgumentParser:
    """Add one argument per mapped option to *parser* and return it.

    Options that were not given are absent from the parsed namespace.  A
    boolean flag given without a value means ``true``.
    """
    if parser is None:
        parser = argparse.ArgumentParser(add_help=False)
    seen: set = set()
    for _flag, key in registry.cli_map.items():
        if key in seen:
            continue
        seen.add(key)
        opt = registry.find_option_spec(key.option, key.config_type, key.section)
        flags = sorted(registry.cli_map.flags_for(key), key=len)
        kw: dict = {
            "dest": str(key),
            "default": argparse.SUPPRESS,
            "help": opt.description or None,
        }
        if opt.kind is OptionKind.BOOLEAN:
            kw.update(nargs="?", const="true", metavar="BOOL")
        else:
            kw.update(metavar=opt.kind.value.upper())
        parser.add_argument(*flags, **kw)
    return parser


def override_argv(items: list[str]) -> list[str]:
    """Turn ``["--name=3", "-q"]`` into ``["--name", "3", "-q"]``."""
    argv: list[str] = []
    for item in items:
        flag, eq, value = item.partition("=")
        argv.append(CliOverrideMap.normalize(flag))
        if eq:
            argv.append(value)
    return argv


def apply_overrides(registry: ConfigRegistry, ns: argparse.Namespace) -> int:
    """Apply parsed override values.  Returns the number applied."""
    dests: dict[str, str] = {}
    for flag, key in registry.cli_map.items():
        if flag.startswith("--") or str(key) not in dests:
            dests[str(key)] = flag
    count = 0
    for dest, value in vars(ns).items():
        flag = dests.get(dest)
        if flag is None:
            continue
        if registry.apply_override(flag, value):
            count += 1
    return count


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _open(args: argparse.Namespace) -> tuple[ConfigRegistry, str] | None:
    if args.file is not None:
        args.file = Path(args.file).resolve()
    try:
        spec = load_group_spec(args.spec)
    except SpecLoadError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return None
    registry = ConfigRegistry(AppInfo.from_env(args.app))
    if not registry.register(spec.config_type, spec):
        print(registry.error_message, file=sys.stderr)
        return None
    path = registry.file_specification(spec.config_type, args.file)
    if path.exists() and not registry.read(path, spec.config_type):
        print(registry.error_message, file=sys.stderr)
        return None
    extra = override_argv(getattr(args, "overrides", None) or [])
    if extra:
        parser = build_override_parser(registry, argparse.ArgumentParser(prog="pystanza"))
        apply_overrides(registry, parser.parse_args(extra))
    return registry, spec.config_type


def _find(registry: ConfigRegistry, config_type: str, key: str):
    section, dot, name = key.rpartition(".")
    if dot and section:
        return registry.find_option_spec(name, config_type, section)
    return registry.find_option_spec(key, config_type)


def show_cmd(args: argparse.Namespace) -> int:
    opened = _open(args)
    if opened is None:
        return 2
    registry, config_type = opened
    group = registry.find(config_type)
    if args.as_json:
        data = {
            sec.name: {name: opt.value() for name, opt in sec.option_pairs()}
            for sec in group.all_sections()
        }
        print(json.dumps(data, indent=2))
        return 0
    for sec in group.all_sections():
        print(sec.name)
        text = sec.settings_text()
        if text:
            print(text)
        print()
    return 0


def get_cmd(args: argparse.Namespace) -> int:
    opened = _open(args)
    if opened is None:
        return 2
    registry, config_type = opened
    opt = _find(registry, config_type, args.key)
    if not opt.active():
        print(f"no option {args.key}", file=sys.stderr)
        return 1
    print(opt.value())
    return 0


def set_cmd(args: argparse.Namespace) -> int:
    opened = _open(args)
    if opened is None:
        return 2
    registry, config_type = opened
    opt = _find(registry, config_type, args.key)
    if not opt.active():
        print(f"no option {args.key}", file=sys.stderr)
        return 1
    if not opt.change_value(args.value):
        print(f"value {args.value!r} rejected for {args.key}", file=sys.stderr)
        return 1
    if not registry.write(args.file, config_type):
        print(registry.error_message, file=sys.stderr)
        return 2
    return 0


def write_cmd(args: argparse.Namespace) -> int:
    opened = _open(args)
    if opened is None:
        return 2
    registry, config_type = opened
    if not registry.write(args.file, config_type):
        print(registry.error_message, file=sys.stderr)
        return 2
    print(registry.file_specification(config_type, args.file))
    return 0


def flags_cmd(args: argparse.Namespace) -> int:
    opened = _open(args)
    if opened is None:
        return 2
    registry, _ = opened
    for flag, key in registry.cli_map.items():
        print(f"{flag:<24} {key}")
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pystanza", description="Inspect and edit INI configuration files.")
    parser.add_argument("--app", default="pystanza", help="Application name")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def common(p: argparse.ArgumentParser, with_file: bool = True) -> None:
        p.add_argument("spec", type=Path, help="Group spec file (.json, .yaml, .toml)")
        if with_file:
            p.add_argument("--file", type=Path, default=None, help="Configuration file")
        else:
            p.set_defaults(file=None)

    def overrides(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "-o",
            "--override",
            dest="overrides",
            action="append",
            default=[],
            metavar="FLAG[=VALUE]",
            help="Override an option, e.g. -o verbose=3 or -o q",
        )

    p_show = subparsers.add_parser("show", help="Show all values")
    common(p_show)
    p_show.add_argument("--json", dest="as_json", action="store_true")
    overrides(p_show)
    p_show.set_defaults(func=show_cmd)

    p_get = subparsers.add_parser("get", help="Print one value")
    common(p_get)
    p_get.add_argument("key", help="section.option or option name")
    p_get.set_defaults(func=get_cmd)

    p_set = subparsers.add_parser("set", help="Change one value and write the file")
    common(p_set)
    p_set.add_argument("key", help="section.option or option name")
    p_set.add_argument("value")
    p_set.set_defaults(func=set_cmd)

    p_write = subparsers.add_parser("write", help="Write the file, upgrading old versions")
    common(p_write)
    overrides(p_write)
    p_write.set_defaults(func=write_cmd)

    p_flags = subparsers.add_parser("flags", help="List command-line override flags")
    common(p_flags, with_file=False)
    p_flags.set_defaults(func=flags_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 1
    try:
        return int(func(args))
    except SystemExit as exc:  # pragma: no cover - argparse may raise
        return int(exc.code)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
