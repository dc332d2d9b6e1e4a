"""Reading and writing INI text for a :class:`~pystanza.group.SectionGroup`.

Scalar ``name = value`` lines are tokenised with :mod:`configparser`.  List
options and the ``[comments]`` block are multi-line values with no ``=``;
they are read by scanning the raw lines after their section header until a
blank line, a comment line or the next header.

Sections are always located by name, so the order of sections in a file
does not matter.
"""

from __future__ import annotations

import configparser
import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Iterable

from .group import SectionGroup
from .messages import Messages
from .section import COMMENTS_DESCRIPTION, COMMENTS_SECTION, comment_block

logger = logging.getLogger(__name__)

_INLINE_COMMENT = re.compile(r"\s+[#;]")
_QUOTES = "\"'"


def extract_value(raw: str | None) -> str | None:
    """Return the value part of a raw ``configparser`` value.

    Quoted text is returned without the quotes; otherwise a trailing
    ``# comment`` is removed.  A quote character inside quoted text only
    closes it when nothing but an inline comment follows.

    >>> extract_value('"hello"    # greeting'), extract_value("3  # count")
    ('hello', '3')
    >>> extract_value('"say "hi" now"')
    'say "hi" now'
    """
    if raw is None:
        return None
    text = raw.strip().splitlines()[0] if raw.strip() else ""
    if text and text[0] in _QUOTES:
        quote = text[0]
        end = text.find(quote, 1)
        while end > 0:
            rest = text[end + 1 :]
            if not rest.strip() or _INLINE_COMMENT.match(rest):
                return text[1:end]
            end = text.find(quote, end + 1)
        return text[1:]
    match = _INLINE_COMMENT.search(text)
    if match:
        text = text[: match.start()]
    return text.strip()


def unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] in _QUOTES and text[-1] == text[0]:
        return text[1:-1]
    return text


def data_block(lines: list[str], header: str, skip: Iterable[str] = ()) -> list[str] | None:
    """Return the data lines following *header*, or ``None`` if it is absent.

    Blank and comment lines directly after the header are skipped.  The
    block then runs until an empty line, a comment line or another header.
    Whitespace-only lines are kept as empty lines.  ``name = value`` lines
    whose name is in *skip* belong to scalar options and are left out.
    """
    skip = frozenset(skip)
    try:
        start = next(i for i, line in enumerate(lines) if line.strip() == header)
    except StopIteration:
        return None
    block: list[str] = []
    started = False
    for line in lines[start + 1 :]:
        stripped = line.strip()
        if "=" in stripped and stripped.partition("=")[0].strip() in skip:
            continue
        if not started:
            if not stripped or stripped.startswith(("#", ";")):
                continue
            started = True
        if line == "" or stripped.startswith(("#", ";")) or _is_header(stripped):
            break
        block.append(line.rstrip())
    return block


def _is_header(stripped: str) -> bool:
    return stripped.startswith("[") and stripped.endswith("]")


def make_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(
        strict=False,
        allow_no_value=True,
        interpolation=None,
        delimiters=("=",),
        comment_prefixes=("#", ";"),
        inline_comment_prefixes=None,
        empty_lines_in_values=False,
        default_section="\x00",
    )
    parser.optionxform = str  # type: ignore[assignment]
    return parser


class IniCodec:
    """Parse and write one group's file."""

    def __init__(self, group: SectionGroup, messages: Messages | None = None) -> None:
        self.group = group
        self.messages = messages or Messages()

    # ------------------------------------------------------------------
    # reading
    # ------------------------------------------------------------------

    def parse(self, path: str | Path) -> bool:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError:
            return self.messages.file_error("Cannot read", str(path))
        logger.debug("parsing %s as %s", path, self.group.config_type)
        return self.parse_text(text, str(path))

    def parse_text(self, text: str, source: str = "<string>") -> bool:
        """Load values from *text*.  Loaded values are not marked modified."""
        parser = make_parser()
        try:
            parser.read_string(text, source=source)
        except configparser.Error as exc:
            return self.messages.error(f"{source}: cannot parse: {exc}")
        lines = text.splitlines()
        self._check_marker(parser, source)
        for sec in self.group.sections:
            bare = sec.bare_name
            if not parser.has_section(bare):
                logger.debug("%s: no %s section, keeping defaults", source, sec.name)
                continue
            for opt in sec:
                if opt.is_list():
                    scalars = [o.name for o in sec if not o.is_list()]
                    block = data_block(lines, sec.name, scalars)
                    if block is not None:
                        opt.load_value("\n".join(unquote(line) for line in block))
                    continue
                if not parser.has_option(bare, opt.name):
                    continue
                value = extract_value(parser.get(bare, opt.name))
                if value is not None:
                    opt.load_value(value)
        block = data_block(lines, COMMENTS_SECTION)
        if block is not None:
            self.group.comments.load("\n".join(block))
        return True

    def _check_marker(self, parser: configparser.ConfigParser, source: str) -> None:
        group = self.group
        marker = group.marker
        bare = marker.bare_name
        expected = group.ordinal_version
        file_type = None
        raw_version = None
        if parser.has_section(bare):
            file_type = extract_value(parser.get(bare, "config-type", fallback=None))
            raw_version = extract_value(parser.get(bare, "version", fallback=None))
        if file_type:
            marker.find_option_spec("config-type").load_value(file_type)
            if file_type != group.config_type:
                self.messages.warn(
                    f"{source}: config-type {file_type!r} does not match {group.config_type!r}"
                )
        try:
            version = int(raw_version) if raw_version is not None else None
        except ValueError:
            version = None
        if version is not None:
            marker.find_option_spec("version").load_value(str(version))
        if version is None or version < expected:
            group.legacy = True
            found = "no version" if version is None else f"version {version}"
            self.messages.info(f"{source}: {found}, expected {expected}; file will be upgraded")
        else:
            group.legacy = False

    # ------------------------------------------------------------------
    # writing
    # ------------------------------------------------------------------

    def render(self, path: str | Path) -> str:
        group = self.group
        app = group.app
        marker = group.marker
        marker.find_option_spec("config-type").load_value(group.config_type)
        marker.find_option_spec("version").load_value(str(group.ordinal_version))

        out: list[str] = [
            f"# pystanza configuration file for {app.version_text}",
            "#",
        ]
        described = comment_block(group.description)
        if described:
            out.extend([described, "#"])
        out.append(f"# File: {path}")
        out.append(f"# Written: {datetime.now():%Y-%m-%d %H:%M:%S}")

        out.extend(["", marker.name, "", marker.settings_text()])

        out.extend(["", comment_block(COMMENTS_DESCRIPTION), "", COMMENTS_SECTION, ""])
        out.extend(group.comments.lines())

        for sec in group.sections:
            out.append("")
            described = sec.description_commented()
            if described:
                out.extend([described, ""])
            out.extend([sec.name, ""])
            settings = sec.settings_text()
            if settings:
                out.append(settings)

        out.extend(["", f"# End of {path}", ""])
        return "\n".join(out)

    def write(self, path: str | Path) -> bool:
        path = Path(path)
        text = self.render(path)
        tmp = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp, path)
        except OSError:
            try:
                tmp.unlink()
            except OSError:
                pass
            return self.messages.file_error("Cannot write", str(path))
        logger.debug("wrote %s", path)
        self.group.unmodify_all()
        self.group.legacy = False
        return True


__all__ = ["IniCodec", "data_block", "extract_value"]
