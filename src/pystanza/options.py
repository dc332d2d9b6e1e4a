"""Typed, named configuration values.

Every option keeps its value as text.  Typed accessors coerce on demand and
never fail: text that does not parse yields ``False``, ``0`` or ``0.0``.
Hand-edited configuration files are expected to contain the occasional typo
and one bad value must not take the rest of the file down with it.

Option kinds
------------

``boolean``
    ``name = true`` or ``name = false``.
``integer`` / ``floating``
    Numbers.  The default may carry a range, ``"min<default<max"`` for an
    open interval or ``"min<=default<=max"`` for a closed one.
``string`` / ``filename``
    Text, written with double quotes, or single quotes when the text holds
    a double quote and no single quote.
``list``
    A multi-line value occupying the data lines of its section, e.g. a list
    of recent files or a block of comments.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple, Protocol

from .errors import SpecificationError

# Layout of setting lines and help text.  No attempt is made to detect the
# terminal width.
FIELD_WIDTH = 40
TERMINAL_WIDTH = 78

_TRUE_WORDS = frozenset({"true", "yes", "on", "1"})


class OptionKind(str, Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOATING = "floating"
    STRING = "string"
    FILENAME = "filename"
    LIST = "list"
    DUMMY = "dummy"

    @classmethod
    def parse(cls, raw: "str | OptionKind") -> "OptionKind":
        """Return the kind named by *raw*, accepting a few common aliases."""
        if isinstance(raw, OptionKind):
            return raw
        key = str(raw).strip().lower()
        kind = _KIND_ALIASES.get(key)
        if kind is None:
            try:
                kind = cls(key)
            except ValueError:
                kind = None
        if kind is None or kind is cls.DUMMY:
            raise SpecificationError(f"unknown option kind: {raw!r}")
        return kind


_KIND_ALIASES = {
    "bool": OptionKind.BOOLEAN,
    "int": OptionKind.INTEGER,
    "float": OptionKind.FLOATING,
    "double": OptionKind.FLOATING,
    "str": OptionKind.STRING,
    "section": OptionKind.LIST,
}


# ---------------------------------------------------------------------------
# Tolerant coercion
# ---------------------------------------------------------------------------

def to_bool(raw: str | None) -> bool:
    if not raw:
        return False
    return raw.strip().lower() in _TRUE_WORDS


def to_int(raw: str | None) -> int:
    if raw is None:
        return 0
    text = raw.strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    if text.lower().startswith(("0x", "-0x")):
        try:
            return int(text, 16)
        except ValueError:
            return 0
    try:
        value = float(text)
    except ValueError:
        return 0
    if math.isfinite(value):
        return int(value)
    return 0


def to_float(raw: str | None) -> float:
    if raw is None:
        return 0.0
    try:
        value = float(raw.strip())
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def bool_text(value: bool) -> str:
    return "true" if value else "false"


def float_text(value: float) -> str:
    return repr(float(value))


####################
##### ADAPTERS #####
####################

class KindAdapter(Protocol):
    """Normalises text written through :meth:`Option.set_value`."""

    def normalize(self, raw: str) -> str:
        ...

    def coerce(self, raw: str) -> Any:
        ...


class TextAdapter:
    def normalize(self, raw: str) -> str:
        return raw

    def coerce(self, raw: str) -> str:
        return raw


class BooleanAdapter:
    def normalize(self, raw: str) -> str:
        return bool_text(to_bool(raw))

    def coerce(self, raw: str) -> bool:
        return to_bool(raw)


class IntegerAdapter:
    def normalize(self, raw: str) -> str:
        return raw.strip()

    def coerce(self, raw: str) -> int:
        return to_int(raw)


class FloatingAdapter:
    def normalize(self, raw: str) -> str:
        return raw.strip()

    def coerce(self, raw: str) -> float:
        return to_float(raw)


class ListAdapter:
    def normalize(self, raw: str) -> str:
        return "\n".join(line.rstrip() for line in raw.strip("\n").splitlines())

    def coerce(self, raw: str) -> list[str]:
        return [line for line in raw.splitlines() if line.strip()]


KIND_REGISTRY: dict[OptionKind, KindAdapter] = {
    OptionKind.BOOLEAN: BooleanAdapter(),
    OptionKind.INTEGER: IntegerAdapter(),
    OptionKind.FLOATING: FloatingAdapter(),
    OptionKind.STRING: TextAdapter(),
    OptionKind.FILENAME: TextAdapter(),
    OptionKind.LIST: ListAdapter(),
    OptionKind.DUMMY: TextAdapter(),
}


# ---------------------------------------------------------------------------
# Range defaults
# ---------------------------------------------------------------------------

class ValueRange(NamedTuple):
    """Default and limits decoded from a ``"min<default<max"`` string.

    A missing limit is ``None``.  Limits are inclusive; open integer
    intervals are narrowed by one on each side when decoded.
    """

    default: float
    minimum: float | None
    maximum: float | None

    def contains(self, value: float) -> bool:
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True


def split_range(text: str) -> tuple[str, ...]:
    cleaned = "".join(text.split())
    if not cleaned:
        return ()
    return tuple(cleaned.split("<"))


def decode_range(text: str, *, integral: bool) -> ValueRange:
    """Decode *text* into a :class:`ValueRange`.

    ``"5"`` is a plain default, ``"-5<0<5"`` the open interval (-5, 5) and
    ``"0<=1<=10"`` the closed interval [0, 10].  Anything else decodes to a
    default of ``0`` without limits.
    """
    coerce = to_int if integral else to_float
    tokens = split_range(text)
    if len(tokens) == 3:
        low, mid, high = tokens
        closed_low = mid.startswith("=")
        closed_high = high.startswith("=")
        minimum = coerce(low)
        maximum = coerce(high.lstrip("="))
        default = coerce(mid.lstrip("="))
        if integral:
            if not closed_low:
                minimum += 1
            if not closed_high:
                maximum -= 1
        else:
            if not closed_low:
                minimum = math.nextafter(minimum, math.inf)
            if not closed_high:
                maximum = math.nextafter(maximum, -math.inf)
        return ValueRange(default, minimum, maximum)
    if len(tokens) == 1:
        return ValueRange(coerce(tokens[0]), None, None)
    return ValueRange(coerce(""), None, None)


def effective_default(kind: OptionKind, default: str) -> str:
    """Return the default text with any range decoration removed."""
    if kind is OptionKind.INTEGER and "<" in default:
        return str(decode_range(default, integral=True).default)
    if kind is OptionKind.FLOATING and "<" in default:
        return float_text(decode_range(default, integral=False).default)
    return KIND_REGISTRY[kind].normalize(default)


######################
##### OPTION SPEC ####
######################

@dataclass(frozen=True)
class OptionSpec:
    """Declarative description of a single option."""

    name: str
    kind: OptionKind | str = OptionKind.STRING
    default: str = ""
    code: str = ""
    cli_enabled: bool = True
    description: str = ""
    built_in: bool = False

    def __post_init__(self) -> None:
        if not self.name or self.name != self.name.strip():
            raise SpecificationError(f"invalid option name: {self.name!r}")
        if len(self.name) < 2:
            raise SpecificationError(
                f"option name {self.name!r} must be longer than one character"
            )
        object.__setattr__(self, "kind", OptionKind.parse(self.kind))
        code = self.code or ""
        if len(code) > 1 or code.isspace():
            raise SpecificationError(f"option code must be one character: {code!r}")
        object.__setattr__(self, "code", code)
        object.__setattr__(self, "default", str(self.default))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "kind": self.kind.value}
        if self.default:
            data["default"] = self.default
        if self.code:
            data["code"] = self.code
        if not self.cli_enabled:
            data["cli_enabled"] = False
        if self.description:
            data["description"] = self.description
        if self.built_in:
            data["built_in"] = True
        return data


################
#### OPTION ####
################

class Option:
    """Live value of one option.

    Values are stored as canonical text.  Loading a value from a file does
    not mark the option modified; every setter does.
    """

    def __init__(self, spec: OptionSpec) -> None:
        self._spec = spec
        self._value = effective_default(spec.kind, spec.default)
        self._modified = False
        self._read_from_cli = False

    def __repr__(self) -> str:
        return f"Option({self.name!r}, {self.kind.value}, {self._value!r})"

    # ----- metadata -----

    @property
    def spec(self) -> OptionSpec:
        return self._spec

    @property
    def name(self) -> str:
        return self._spec.name

    @property
    def kind(self) -> OptionKind:
        return self._spec.kind

    @property
    def code(self) -> str:
        return self._spec.code

    @property
    def cli_enabled(self) -> bool:
        return self._spec.cli_enabled

    @property
    def description(self) -> str:
        return self._spec.description

    @property
    def built_in(self) -> bool:
        return self._spec.built_in

    @property
    def default(self) -> str:
        """The declared default, including any range decoration."""
        return self._spec.default

    @property
    def default_value(self) -> str:
        return effective_default(self.kind, self._spec.default)

    @property
    def modified(self) -> bool:
        return self._modified

    @property
    def read_from_cli(self) -> bool:
        return self._read_from_cli

    def active(self) -> bool:
        return True

    def is_list(self) -> bool:
        return self.kind is OptionKind.LIST

    def is_quotable(self) -> bool:
        return self.kind in (OptionKind.STRING, OptionKind.FILENAME)

    # ----- state -----

    def load_value(self, raw: str) -> None:
        """Store *raw* as read from a file, leaving ``modified`` alone."""
        self._value = KIND_REGISTRY[self.kind].normalize(raw)

    def reset(self) -> None:
        self._value = self.default_value
        self._modified = False
        self._read_from_cli = False

    def unmodify(self) -> None:
        self._modified = False

    def _store(self, text: str) -> bool:
        self._value = text
        self._modified = True
        return True

    # ----- text access -----

    def value(self) -> str:
        return self._value

    def set_value(self, raw: str) -> bool:
        return self._store(KIND_REGISTRY[self.kind].normalize(str(raw)))

    def change_value(self, raw: str, *, from_cli: bool = False) -> bool:
        """Set the value, honouring a numeric range in the default.

        An empty *raw* restores the default.  Out of range numbers are
        ignored and ``False`` is returned.  Numbers are stored in canonical
        form, so text that does not parse is stored as the zero it coerces to.
        """
        raw = str(raw)
        if self.kind in (OptionKind.INTEGER, OptionKind.FLOATING):
            rng = self.value_range()
            if raw.strip() == "":
                raw = self.default_value
            elif self.kind is OptionKind.INTEGER:
                number = to_int(raw)
                if not rng.contains(number):
                    return False
                raw = str(number)
            else:
                number = to_float(raw)
                if not rng.contains(number):
                    return False
                raw = float_text(number)
        result = self.set_value(raw)
        if from_cli:
            self._read_from_cli = True
        return result

    # ----- typed access -----

    def boolean_value(self) -> bool:
        return to_bool(self._value)

    def set_boolean_value(self, value: bool) -> bool:
        return self._store(bool_text(bool(value)))

    def integer_value(self) -> int:
        return to_int(self._value)

    def set_integer_value(self, value: int) -> bool:
        return self._store(str(int(value)))

    def floating_value(self) -> float:
        return to_float(self._value)

    def set_floating_value(self, value: float) -> bool:
        return self._store(float_text(value))

    def list_value(self) -> list[str]:
        return KIND_REGISTRY[OptionKind.LIST].coerce(self._value)

    def set_list_value(self, items: list[str]) -> bool:
        return self._store("\n".join(str(i) for i in items))

    def value_range(self) -> ValueRange:
        return decode_range(self._spec.default, integral=self.kind is not OptionKind.FLOATING)

    def integer_range(self) -> tuple[int, int | None, int | None]:
        return tuple(decode_range(self._spec.default, integral=True))

    def floating_range(self) -> tuple[float, float | None, float | None]:
        return tuple(decode_range(self._spec.default, integral=False))

    # ----- rendering -----

    def setting_line(self) -> str:
        """Render ``name = value`` with the description when it fits.

        List options render their lines verbatim.
        """
        if self.is_list():
            return self._value
        text = f"{self.name} = "
        if self.is_quotable():
            quote = "'" if '"' in self._value and "'" not in self._value else '"'
            text += f"{quote}{self._value}{quote}"
        else:
            text += self._value
        desc = self.description
        if desc and len(text) <= FIELD_WIDTH and len(desc) <= FIELD_WIDTH:
            return f"{text:<{FIELD_WIDTH}}# {desc}"
        return text

    def debug_line(self) -> str:
        line = f"   {self.name:<16} = {self._value!r:<20} [{self.default}]"
        if self._modified:
            line += " modified"
            if self._read_from_cli:
                line += " (on CLI)"
        if not self.cli_enabled:
            line += " CLI-disabled"
        return line


class _InactiveOption(Option):
    """Placeholder returned by failed lookups.

    Setters are refused so that the shared instance never changes.
    """

    def __init__(self) -> None:
        # bypass OptionSpec validation, the placeholder has no name
        spec = OptionSpec.__new__(OptionSpec)
        for attr, val in (
            ("name", ""),
            ("kind", OptionKind.DUMMY),
            ("default", ""),
            ("code", ""),
            ("cli_enabled", False),
            ("description", ""),
            ("built_in", False),
        ):
            object.__setattr__(spec, attr, val)
        self._spec = spec
        self._value = ""
        self._modified = False
        self._read_from_cli = False

    def __repr__(self) -> str:
        return "INACTIVE_OPTION"

    def active(self) -> bool:
        return False

    def load_value(self, raw: str) -> None:
        return None

    def _store(self, text: str) -> bool:
        return False

    def change_value(self, raw: str, *, from_cli: bool = False) -> bool:
        return False

    def setting_line(self) -> str:
        return ""


INACTIVE_OPTION: Option = _InactiveOption()


def make_option(name: str, kind: OptionKind | str = OptionKind.STRING, default: str = "", **kw) -> Option:
    return Option(OptionSpec(name, kind, default, **kw))


__all__ = [
    "FIELD_WIDTH",
    "INACTIVE_OPTION",
    "KIND_REGISTRY",
    "Option",
    "OptionKind",
    "OptionSpec",
    "TERMINAL_WIDTH",
    "ValueRange",
    "decode_range",
    "make_option",
    "to_bool",
    "to_float",
    "to_int",
]
