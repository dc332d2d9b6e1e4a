import pytest

from pystanza.appinfo import AppInfo
from pystanza.cli_map import CliOverrideMap, OptionKey
from pystanza.errors import FlagCollisionError
from pystanza.group import SectionGroup, SectionGroupSpec
from pystanza.options import OptionSpec
from pystanza.section import SectionSpec
from tests.utils import sample_spec


def group_of(spec, tmp_path):
    return SectionGroup.from_spec(spec, AppInfo(home_directory=tmp_path))


def test_normalize():
    assert CliOverrideMap.normalize("v") == "-v"
    assert CliOverrideMap.normalize("verbose") == "--verbose"
    assert CliOverrideMap.normalize("--verbose") == "--verbose"
    assert CliOverrideMap.normalize("-v") == "-v"


def test_add_group_maps_long_and_short_flags(tmp_path):
    cli_map = CliOverrideMap()
    cli_map.add_group(group_of(sample_spec(), tmp_path))
    key = OptionKey("rc", "[s1]", "alpha")
    assert cli_map.lookup("-a") == key
    assert cli_map.lookup("alpha") == key
    assert cli_map.lookup("--gamma") == OptionKey("rc", "[s2]", "gamma")
    assert sorted(cli_map.flags_for(key)) == ["--alpha", "-a"]
    assert cli_map.short_flags() == ["-a"]
    assert cli_map.lookup("nothing") is None


def test_collision_within_one_group(tmp_path):
    spec = SectionGroupSpec(
        "rc",
        [
            SectionSpec("[a]", options=[OptionSpec("first", code="x")]),
            SectionSpec("[b]", options=[OptionSpec("second", code="x")]),
        ],
    )
    cli_map = CliOverrideMap()
    with pytest.raises(FlagCollisionError):
        cli_map.plan(group_of(spec, tmp_path))
    assert len(cli_map) == 0


def test_list_and_disabled_options_are_not_mapped(tmp_path):
    spec = SectionGroupSpec(
        "rc",
        [
            SectionSpec(
                "[a]",
                options=[OptionSpec("files", "list"), OptionSpec("hidden", cli_enabled=False)],
            )
        ],
    )
    cli_map = CliOverrideMap()
    cli_map.add_group(group_of(spec, tmp_path))
    assert len(cli_map) == 0


def test_option_key_str():
    assert str(OptionKey("rc", "[s1]", "alpha")) == "rc:[s1]:alpha"


def test_repeated_long_name_is_shadowed(tmp_path):
    spec = SectionGroupSpec(
        "session",
        [
            SectionSpec("[rc]", options=[OptionSpec("directory")]),
            SectionSpec("[usr]", options=[OptionSpec("directory", code="u")]),
        ],
    )
    cli_map = CliOverrideMap()
    shadowed = []
    entries = cli_map.plan(group_of(spec, tmp_path), shadowed)
    assert entries["--directory"] == OptionKey("session", "[rc]", "directory")
    assert entries["-u"] == OptionKey("session", "[usr]", "directory")
    assert shadowed == [("--directory", OptionKey("session", "[usr]", "directory"))]
