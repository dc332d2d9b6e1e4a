from pathlib import Path

from pystanza.appinfo import AppInfo
from pystanza.codec import IniCodec, data_block, extract_value
from pystanza.group import SectionGroup, SectionGroupSpec
from pystanza.messages import Messages
from pystanza.options import OptionSpec
from pystanza.section import SectionSpec
from tests.utils import RecordingSink, sample_spec

HAND_WRITTEN = """\
# edited by hand

[pystanza]
config-type = "rc"
version = 2

[s2]
gamma = "hello"   # trailing comment

[s1]
beta = 3
alpha = true
"""


def make_group(tmp_path, spec=None):
    app = AppInfo(app_name="testapp", version="1.0", home_directory=tmp_path)
    return SectionGroup.from_spec(spec or sample_spec(), app)


def test_extract_value():
    assert extract_value('"hello"   # greeting') == "hello"
    assert extract_value("'single'") == "single"
    assert extract_value("3   # count") == "3"
    assert extract_value("a#b") == "a#b"
    assert extract_value("") == ""
    assert extract_value(None) is None


def test_data_block_stops_at_blank_comment_or_header():
    lines = ["[x]", "", "# note", "one", "two", "", "three", "[y]"]
    assert data_block(lines, "[x]") == ["one", "two"]
    assert data_block(["[x]", "one", "[y]", "two"], "[x]") == ["one"]
    assert data_block(["[x]", "one", "# stop", "two"], "[x]") == ["one"]
    assert data_block(["[y]"], "[x]") is None


def test_round_trip(tmp_path):
    group = make_group(tmp_path)
    group.find_option_spec("alpha").set_boolean_value(True)
    group.find_option_spec("beta").set_integer_value(3)
    group.find_option_spec("gamma").set_value("hello")
    path = tmp_path / "out.rc"
    assert IniCodec(group).write(path)
    assert group.modified is False

    fresh = make_group(tmp_path)
    assert IniCodec(fresh).parse(path)
    assert fresh.find_option_spec("alpha").boolean_value() is True
    assert fresh.find_option_spec("beta").integer_value() == 3
    assert fresh.find_option_spec("gamma").value() == "hello"
    assert fresh.modified is False
    assert fresh.legacy is False


def test_written_layout(tmp_path):
    group = make_group(tmp_path)
    path = tmp_path / "out.rc"
    IniCodec(group).write(path)
    text = path.read_text(encoding="utf-8")
    lines = text.splitlines()
    assert lines[0] == "# pystanza configuration file for testapp 1.0"
    assert f"# File: {path}" in lines
    assert lines[-1] == f"# End of {path}"
    assert any(line.startswith('config-type = "rc"') for line in lines)
    assert any(line.startswith("version = 2") for line in lines)
    assert lines.index("[pystanza]") < lines.index("[comments]") < lines.index("[s1]")
    assert lines.index("# First section.") < lines.index("[s1]")
    assert lines[lines.index("[s1]") + 1] == ""


def test_sections_found_by_name_and_written_in_declared_order(tmp_path):
    group = make_group(tmp_path)
    assert IniCodec(group).parse_text(HAND_WRITTEN)
    assert group.find_option_spec("alpha").boolean_value() is True
    assert group.find_option_spec("beta").integer_value() == 3
    assert group.find_option_spec("gamma").value() == "hello"
    assert group.modified is False

    text = IniCodec(group).render(tmp_path / "x.rc")
    assert text.index("[s1]") < text.index("[s2]")
    s1 = text[text.index("[s1]"):text.index("[s2]")]
    assert s1.index("alpha") < s1.index("beta")


def test_missing_line_keeps_current_value(tmp_path):
    group = make_group(tmp_path)
    group.find_option_spec("beta").load_value("8")
    assert IniCodec(group).parse_text("[pystanza]\nversion = 2\n\n[s1]\nalpha = yes\n")
    assert group.find_option_spec("beta").integer_value() == 8
    assert group.find_option_spec("alpha").value() == "true"


def test_bad_number_is_zero_and_unmodified(tmp_path):
    group = make_group(tmp_path)
    assert IniCodec(group).parse_text("[pystanza]\nversion = 2\n\n[s1]\nbeta = not-a-number\n")
    beta = group.find_option_spec("beta")
    assert beta.integer_value() == 0
    assert beta.modified is False


def test_missing_version_is_legacy(tmp_path):
    group = make_group(tmp_path)
    assert IniCodec(group).parse_text("[s1]\nalpha = true\n")
    assert group.legacy is True
    assert group.find_option_spec("alpha").boolean_value() is True


def test_old_version_is_legacy_and_write_upgrades(tmp_path):
    group = make_group(tmp_path)
    path = tmp_path / "old.rc"
    path.write_text('[pystanza]\nconfig-type = "rc"\nversion = 0\n\n[s1]\nbeta = 5\n', encoding="utf-8")
    codec = IniCodec(group)
    assert codec.parse(path)
    assert group.legacy is True
    assert group.file_version == 0
    assert codec.write(path)
    assert group.legacy is False
    again = make_group(tmp_path)
    assert IniCodec(again).parse(path)
    assert again.legacy is False
    assert again.file_version == 2
    assert again.find_option_spec("beta").integer_value() == 5


def test_config_type_mismatch_is_warned(tmp_path):
    sink = RecordingSink()
    group = make_group(tmp_path)
    ok = IniCodec(group, Messages(sink)).parse_text('[pystanza]\nconfig-type = "usr"\nversion = 2\n')
    assert ok
    assert sink.warnings and "usr" in sink.warnings[0]


def test_missing_file_is_reported(tmp_path):
    messages = Messages(RecordingSink())
    assert IniCodec(make_group(tmp_path), messages).parse(tmp_path / "nope.rc") is False
    assert "Cannot read" in messages.error_message


def test_untokenisable_text_is_reported(tmp_path):
    messages = Messages(RecordingSink())
    assert IniCodec(make_group(tmp_path), messages).parse_text("stray = 1\n[s1]\n") is False
    assert messages.is_error


def test_write_failure_is_reported(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    messages = Messages(RecordingSink())
    assert IniCodec(make_group(tmp_path), messages).write(blocker / "x.rc") is False
    assert "Cannot write" in messages.error_message


def test_comments_round_trip(tmp_path):
    group = make_group(tmp_path)
    group.comments.set("Line one\n\nLine three")
    path = tmp_path / "c.rc"
    IniCodec(group).write(path)
    fresh = make_group(tmp_path)
    IniCodec(fresh).parse(path)
    assert fresh.comments.is_set
    assert fresh.comments.text == "Line one\n\nLine three"


def test_list_option_round_trip(tmp_path):
    spec = SectionGroupSpec(
        "rc",
        [
            SectionSpec("[recent]", "Recent files.", [OptionSpec("files", "list")]),
            SectionSpec("[s1]", options=[OptionSpec("alpha", "boolean", "false")]),
        ],
        version=1,
    )
    group = make_group(tmp_path, spec)
    group.find_option_spec("files").set_list_value(["a.txt", '"b c.txt"'])
    path = tmp_path / "l.rc"
    IniCodec(group).write(path)
    fresh = make_group(tmp_path, spec)
    IniCodec(fresh).parse(path)
    assert fresh.find_option_spec("files").list_value() == ["a.txt", "b c.txt"]
    assert fresh.find_option_spec("alpha").boolean_value() is False


def test_quotes_and_hashes_in_strings_round_trip(tmp_path):
    values = ['say "hi" now', "it's # not a comment", "both \" and ' ; here", "C:\\dir\\x.mid"]
    for index, text in enumerate(values):
        group = make_group(tmp_path)
        group.find_option_spec("gamma").set_value(text)
        path = tmp_path / f"q{index}.rc"
        assert IniCodec(group).write(path)
        fresh = make_group(tmp_path)
        assert IniCodec(fresh).parse(path)
        assert fresh.find_option_spec("gamma").value() == text


def test_extract_value_inner_quotes():
    assert extract_value('"say "hi" now"   # A name.') == 'say "hi" now'
    assert extract_value("'say \"hi\"'") == 'say "hi"'
    assert extract_value('"plain"   # says "hello"') == "plain"


RECENT_SPEC = SectionGroupSpec(
    "rc",
    [
        SectionSpec(
            "[recent-files]",
            "Most recently used files.",
            [
                OptionSpec("full-paths", "boolean", "false", description="Show full paths."),
                OptionSpec("load-most-recent", "boolean", "true"),
                OptionSpec("files", "list"),
            ],
        ),
    ],
    version=1,
)


def test_list_beside_scalars_is_stable_across_saves(tmp_path):
    group = make_group(tmp_path, RECENT_SPEC)
    group.find_option_spec("files").set_list_value(["a.mid", "b.mid"])
    group.find_option_spec("full-paths").set_boolean_value(True)
    path = tmp_path / "r.rc"
    for _ in range(3):
        assert IniCodec(group).write(path)
        group = make_group(tmp_path, RECENT_SPEC)
        assert IniCodec(group).parse(path)
        assert group.find_option_spec("files").list_value() == ["a.mid", "b.mid"]
    assert group.find_option_spec("full-paths").boolean_value() is True
    assert group.find_option_spec("load-most-recent").boolean_value() is True


def test_list_lines_may_come_before_scalars(tmp_path):
    text = (
        "[pystanza]\nversion = 1\n\n"
        "[recent-files]\n\nx.mid\ny.mid\nfull-paths = true\n\n# End\n"
    )
    group = make_group(tmp_path, RECENT_SPEC)
    assert IniCodec(group).parse_text(text)
    assert group.find_option_spec("files").list_value() == ["x.mid", "y.mid"]
    assert group.find_option_spec("full-paths").boolean_value() is True


def test_data_block_skips_scalar_lines():
    lines = ["[r]", "full-paths = false    # Show", "a.mid", "b.mid", "", "[next]"]
    assert data_block(lines, "[r]", ["full-paths"]) == ["a.mid", "b.mid"]
    assert data_block(lines, "[r]") == ["full-paths = false    # Show", "a.mid", "b.mid"]
