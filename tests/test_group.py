from pathlib import Path

import pytest

from pystanza.appinfo import AppInfo
from pystanza.errors import DuplicateSectionError, SpecificationError
from pystanza.group import INACTIVE_GROUP, Comments, SectionGroup, SectionGroupSpec
from pystanza.options import INACTIVE_OPTION, OptionSpec, make_option
from pystanza.section import INACTIVE_SECTION, SectionSpec
from tests.utils import sample_spec


def make_group(tmp_path, **kw):
    app = AppInfo(app_name="testapp", home_directory=tmp_path)
    return SectionGroup.from_spec(sample_spec(**kw), app)


def test_group_has_marker_section(tmp_path):
    group = make_group(tmp_path)
    assert group.marker.name == "[pystanza]"
    assert group.find_inisection("[pystanza]") is group.marker
    assert group.find_option_spec("config-type").value() == "rc"
    assert [s.name for s in group.sections] == ["[s1]", "[s2]"]


def test_custom_main_section(tmp_path):
    app = AppInfo(app_name="testapp", main_section="myapp", home_directory=tmp_path)
    group = SectionGroup.from_spec(sample_spec(), app)
    assert group.marker.name == "[myapp]"


def test_duplicate_section_rejected(tmp_path):
    spec = SectionGroupSpec("rc", [SectionSpec("[s1]"), SectionSpec("s1")])
    with pytest.raises(DuplicateSectionError):
        SectionGroup.from_spec(spec, AppInfo(home_directory=tmp_path))


def test_comments_section_is_reserved(tmp_path):
    spec = SectionGroupSpec("rc", [SectionSpec("[comments]")])
    with pytest.raises(DuplicateSectionError):
        SectionGroup.from_spec(spec, AppInfo(home_directory=tmp_path))


def test_spec_rejects_negative_version():
    with pytest.raises(SpecificationError):
        SectionGroupSpec("rc", version=-1)


def test_lookup_chain_misses_are_inactive(tmp_path):
    group = make_group(tmp_path)
    assert group.find_inisection("[nope]") is INACTIVE_SECTION
    assert group.find_inisection("bad]name") is INACTIVE_SECTION
    assert group.find_options("[nope]") is INACTIVE_SECTION
    assert list(group.find_options("[nope]")) == []
    assert group.find_options("[s1]").active()
    assert group.find_option_spec("alpha", "[s2]") is INACTIVE_OPTION
    assert group.find_option_spec("missing") is INACTIVE_OPTION
    assert group.find_option_spec("alpha", "[s1]").name == "alpha"
    assert group.find_option_spec("gamma").name == "gamma"


def test_add_options_atomic(tmp_path):
    group = make_group(tmp_path)
    assert group.add_options("[s1]", [make_option("delta"), make_option("alpha")]) is False
    assert group.find_option_spec("delta") is INACTIVE_OPTION
    assert group.add_options("[s1]", [make_option("delta")])
    assert group.add_options("[missing]", [make_option("epsilon")]) is False
    assert group.add_options("[pystanza]", [make_option("epsilon")]) is False


def test_modified_tracks_options_and_comments(tmp_path):
    group = make_group(tmp_path)
    assert group.modified is False
    group.find_option_spec("beta").set_integer_value(4)
    assert group.modified is True
    group.unmodify_all()
    assert group.modified is False
    group.comments.set("note")
    assert group.modified is True
    group.unmodify_all()
    group.set_modified()
    assert group.modified is True


def test_file_specification_defaults(tmp_path):
    group = make_group(tmp_path)
    assert group.file_specification() == tmp_path / "testapp.rc"


def test_file_specification_from_metadata(tmp_path):
    group = make_group(tmp_path, directory=str(tmp_path / "cfg"), basename="main", extension=".ini")
    assert group.file_specification() == tmp_path / "cfg" / "main.ini"
    assert group.file_specification("other") == tmp_path / "cfg" / "other.ini"
    assert group.file_specification("other.txt") == tmp_path / "cfg" / "other.txt"
    absolute = tmp_path / "abs" / "x.rc"
    assert group.file_specification(absolute) == absolute


def test_comments_lines_keep_paragraph_breaks():
    comments = Comments()
    assert comments.is_set is False
    comments.set("first\n\nsecond")
    assert comments.is_set is True
    assert comments.lines() == ["first", " ", "second"]


def test_inactive_group():
    assert INACTIVE_GROUP.active() is False
    assert INACTIVE_GROUP.find_inisection("[s1]") is INACTIVE_SECTION
    assert INACTIVE_GROUP.find_option_spec("alpha", "[s1]") is INACTIVE_OPTION
    assert INACTIVE_GROUP.add_options("[s1]", [make_option("x1")]) is False


def test_spec_to_dict_round_trip():
    spec = sample_spec(description="Run commands.")
    data = spec.to_dict()
    assert data["config_type"] == "rc"
    assert data["sections"][0]["options"][0] == {
        "name": "alpha",
        "kind": "boolean",
        "default": "false",
        "code": "a",
        "description": "A flag.",
    }
    assert isinstance(OptionSpec(**data["sections"][0]["options"][1]), OptionSpec)


def test_snapshot_and_restore(tmp_path):
    group = make_group(tmp_path)
    before = group.snapshot()
    assert before["[s1]"] == {"alpha": "false", "beta": "0"}
    group.find_option_spec("beta").set_integer_value(7)
    group.find_option_spec("gamma").set_value("x")
    group.unmodify_all()
    assert group.restore(before) == 2
    assert group.find_option_spec("beta").integer_value() == 0
    assert group.find_option_spec("gamma").value() == ""
    assert group.modified is True
    assert group.restore({"[nope]": {"beta": "1"}}) == 0
    assert group.restore(None) == 0
