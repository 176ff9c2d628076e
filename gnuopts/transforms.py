"""
gnuopts value transforms.

A transform is a plain callable `str -> T` turning one raw token into a typed
value. Failure is signalled by raising ValueError (or TypeError); accumulators
translate that into a TransformError fault and keep their state untouched.

Every built-in kind comes with a zero value used as the accumulator default
when none is given explicitly:

    kind      transform    zero
    byte      to_byte      0
    short     to_short     0
    int       to_int       0
    long      to_long      0
    float     to_float     0.0
    double    to_double    0.0
    boolean   to_boolean   False
    char      to_char      "\\0"
    string    to_string    ""
    path      to_path      Path()
    flag      to_flag      True

Transforms are pure: path values are built with pathlib and never touch the
filesystem.
"""
import re
from pathlib import Path

from .utils import *


_INTEGER = re.compile(r"\s*[+-]?\d+\s*")


def _integer(bits, name):
    lower = -(1 << (bits - 1))
    upper = (1 << (bits - 1)) - 1

    @rename(name)
    def transform(raw, /):
        if not isinstance(raw, str):
            raise TypeError("%s() argument must be a string" % name)
        if not _INTEGER.fullmatch(raw):
            raise ValueError("invalid %d-bit integer literal: %r" % (bits, raw))
        value = int(raw)
        if not lower <= value <= upper:
            raise ValueError("%r is out of range [%d, %d]" % (raw, lower, upper))
        return value

    return transform


to_byte = _integer(8, "to_byte")
to_short = _integer(16, "to_short")
to_int = _integer(32, "to_int")
to_long = _integer(64, "to_long")


def to_float(raw, /):
    return float(raw)


def to_double(raw, /):
    return float(raw)


def to_boolean(raw, /):
    """
    accept 'true' or 'false' in any casing, surrounding whitespace ignored.
    """
    match raw.strip().lower():
        case "true":
            return True
        case "false":
            return False
    raise ValueError("invalid boolean literal: %r (expected 'true' or 'false')" % raw)


def to_char(raw, /):
    if len(raw) != 1:
        raise ValueError("expected exactly one character, got %r" % raw)
    return raw


def to_string(raw, /):
    if not isinstance(raw, str):
        raise TypeError("to_string() argument must be a string")
    return raw


def to_path(raw, /):
    return Path(raw)


def to_flag(raw, /):
    # The raw token is ignored, presence alone is the value.
    return True


_KINDS = {
    "byte": (to_byte, 0),
    "short": (to_short, 0),
    "int": (to_int, 0),
    "long": (to_long, 0),
    "float": (to_float, 0.0),
    "double": (to_double, 0.0),
    "boolean": (to_boolean, False),
    "char": (to_char, "\0"),
    "string": (to_string, ""),
    "path": (to_path, Path()),
    "flag": (to_flag, True),
}

_ALIASES = {
    int: "int",
    float: "double",
    bool: "boolean",
    str: "string",
    Path: "path",
}

_TYPENAMES = {transform: kind for kind, (transform, _) in _KINDS.items()}


def resolve(kind, /):
    """
    Resolve a kind into a (transform, zero) pair.

    Parameters
    - kind: str | type | Callable
      • a kind name from the table above ("int", "path", ...)
      • a Python type alias: int, float, bool, str, pathlib.Path
      • any other callable, used as a custom transform (zero is Unset)

    Raises
    - ValueError: unknown kind name.
    - TypeError: kind is neither a string nor a callable.
    """
    if isinstance(kind, str):
        try:
            return _KINDS[kind]
        except KeyError:
            raise ValueError("unknown value kind %r (expected one of: %s)" % (kind, ", ".join(_KINDS))) from None
    if isinstance(kind, type) and kind in _ALIASES:
        return _KINDS[_ALIASES[kind]]
    if not callable(kind):
        raise TypeError("resolve() argument must be a kind name or a callable")
    return kind, Unset


def typename(transform, /):
    """
    human name of the value type produced by a transform (used in faults).
    """
    try:
        return _TYPENAMES[transform]
    except (KeyError, TypeError):
        return getattr(transform, "__name__", type(transform).__name__)


__all__ = (
    "to_byte",
    "to_short",
    "to_int",
    "to_long",
    "to_float",
    "to_double",
    "to_boolean",
    "to_char",
    "to_string",
    "to_path",
    "to_flag",
    "resolve",
    "typename",
)
