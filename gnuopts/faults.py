"""
gnuopts faults (parse errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every reportable issue.
  Codes are grouped by domain to keep messages consistent and logs searchable.
- ParseFault: base type that carries a message + options and knows how to render
  itself with rich in a short, lowercased, actionable way.
- ParseExit: an exception group bundling all faults of one parse pass.
- trigger(): central entry point to surface a fault (raise it or print it).

Policy
- Parsing never raises: the strategy reports each fault through a single channel
  and keeps going (see gnuopts.strategy). Callers decide afterwards whether the
  collected faults are fatal, usually through ParseOutcome.raise_for_faults().
- InvalidOptionShapeError is the only build-time fault; it is raised directly.

Host integration (read from __main__ when present)
- __codes__: mapping FaultCode -> label, overrides the numeric code in headers.
- __styles__: mapping style-name -> rich style, overrides the default palette.
- __prog__: program name shown in fault headers.
"""
import copy
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import *

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping
    - tokens (2111x): UNRECOGNIZED_OPTION, AMBIGUOUS_OPTION, INVALID_FORMAT
    - arity (2112x): MISSING_REQUIRED_ARGUMENTS
    - values (2113x): TRANSFORM_ERROR
    - pass checks (2114x): MISSING_REQUIRED_OPTION, UNSATISFIED_DEPENDENCY
    - declarations (2121x): INVALID_OPTION_SHAPE
    - warnings (22xxx): EXCEEDED_MAXIMUM_ARGUMENTS
    """
    # --- token errors ---
    UNRECOGNIZED_OPTION         = 21111
    AMBIGUOUS_OPTION            = 21112
    INVALID_FORMAT              = 21113

    # --- arity errors ---
    MISSING_REQUIRED_ARGUMENTS  = 21121

    # --- value errors ---
    TRANSFORM_ERROR             = 21131

    # --- end of pass checks ---
    MISSING_REQUIRED_OPTION     = 21141
    UNSATISFIED_DEPENDENCY      = 21142

    # --- declaration errors ---
    INVALID_OPTION_SHAPE        = 21211

    # --- warnings ---
    EXCEEDED_MAXIMUM_ARGUMENTS  = 22121

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class ParseFault(Exception):
    """
    Base class of every parse fault.

    Subclasses declare:
    - code: the FaultCode of the fault.
    - title: short lowercased title used in the rendered header.
    - __fields__: names of the positional constructor parameters; they are stored
      as attributes and replayed by __replace__.

    Options (keyword arguments, all optional)
    - index: 1-based position of the offending token in the argument vector.
    - hint: one sentence telling the user what to do next.
    - any other context the reporter may want (token, exception, ...).
    """
    code = Unset
    title = Unset
    __fields__ = ()

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def index(self):
        return self.options.get("index")

    @property
    def hint(self):
        return self.options.get("hint")

    def __str__(self):
        if self.index is None:
            return self.message
        return "%s at %s position" % (self.message, _ordinal(self.index))

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400" if isinstance(self, Warning) else "bold #00E5FF",  # amber for warnings, neon cyan otherwise
            "fault-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "fault-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style] if colorful else "")

        prog = text(getattr(main, "__prog__", self.options.get("prog", "gnuopts")), "prog-name")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.title.title(), "fault-title"),
            " ]"
        )
        message = text(str(self), "fault-message")
        parts = [message]
        if self.hint:
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*parts), title=header, title_align="left")

        return Group(header, *parts)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fields = [overrides.pop(name, getattr(self, name)) for name in type(self).__fields__]
        return type(self)(*fields, **{**self.options, **overrides})

    def __reduce__(self):
        return _restore, (type(self), tuple(getattr(self, name) for name in type(self).__fields__), dict(self.options))


def _restore(cls, fields, options):
    return cls(*fields, **options)


class UnrecognizedOptionError(ParseFault):
    code = FaultCode.UNRECOGNIZED_OPTION
    title = "unrecognized option"
    __fields__ = ("name",)

    def __init__(self, name, /, **options):
        self.name = name
        options.setdefault("hint", "check the spelling of %r or remove it" % name)
        super().__init__("unrecognized option %r" % name, **options)


class AmbiguousOptionError(ParseFault):
    code = FaultCode.AMBIGUOUS_OPTION
    title = "ambiguous option"
    __fields__ = ("name", "candidates")

    def __init__(self, name, candidates, /, **options):
        self.name = name
        self.candidates = tuple(candidates)
        prefix = options.get("prefix", "--")
        options.setdefault("hint", "spell out one of: %s" % ", ".join(prefix + candidate for candidate in self.candidates))
        super().__init__("ambiguous option %r could match %s" % (name, ", ".join(map(repr, self.candidates))), **options)


class InvalidFormatError(ParseFault):
    code = FaultCode.INVALID_FORMAT
    title = "invalid option format"
    __fields__ = ("name", "reason")

    def __init__(self, name, reason, /, **options):
        self.name = name
        self.reason = reason
        super().__init__("invalid format for option %r: %s" % (name, reason), **options)


class MissingRequiredArgumentsError(ParseFault):
    code = FaultCode.MISSING_REQUIRED_ARGUMENTS
    title = "not enough values"
    __fields__ = ("name", "found", "minimum")

    def __init__(self, name, found, minimum, /, **options):
        self.name = name
        self.found = found
        self.minimum = minimum
        options.setdefault("hint", "pass at least %d value(s) after %r" % (minimum, name))
        super().__init__("option %r expects at least %d value(s) but got %d" % (name, minimum, found), **options)


class ParseWarning(ParseFault, Warning):
    """
    Non-fatal fault: reported and collected like any other, but ParseOutcome.ok
    ignores it and raise_for_faults() does not raise for it.

    Triggered outside shell mode it is emitted through warnings.warn().
    """

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)


class ExceededMaximumArgumentsWarning(ParseWarning):
    code = FaultCode.EXCEEDED_MAXIMUM_ARGUMENTS
    title = "too many values"
    __fields__ = ("name", "maximum")

    def __init__(self, name, maximum, /, **options):
        self.name = name
        self.maximum = maximum
        options.setdefault("hint", "extra values are left as non-option arguments")
        super().__init__("option %r accepts at most %d value(s)" % (name, maximum), **options)


class TransformError(ParseFault):
    """
    A raw token could not be converted into the option's value type.

    Raised by Accumulator.apply(); the strategy catches it, attaches the option
    name and position, and reports it.
    """
    code = FaultCode.TRANSFORM_ERROR
    title = "invalid value"
    __fields__ = ("raw", "typename")

    def __init__(self, raw, typename, /, **options):
        self.raw = raw
        self.typename = typename
        if "name" in options:
            message = "invalid %s value %r for option %r" % (typename, raw, options["name"])
        else:
            message = "invalid %s value %r" % (typename, raw)
        super().__init__(message, **options)

    @property
    def name(self):
        return self.options.get("name")


class MissingRequiredOptionError(ParseFault):
    code = FaultCode.MISSING_REQUIRED_OPTION
    title = "missing required option"
    __fields__ = ("name",)

    def __init__(self, name, /, **options):
        self.name = name
        super().__init__("required option %r was not given" % name, **options)


class UnsatisfiedDependencyError(ParseFault):
    code = FaultCode.UNSATISFIED_DEPENDENCY
    title = "unsatisfied dependency"
    __fields__ = ("name", "dependency")

    def __init__(self, name, dependency, /, **options):
        self.name = name
        self.dependency = dependency
        options.setdefault("hint", "add option %r as well" % dependency)
        super().__init__("option %r requires option %r" % (name, dependency), **options)


class InvalidOptionShapeError(ParseFault, ValueError):
    """
    An option declaration does not fit the naming rules of the parsing strategy.
    """
    code = FaultCode.INVALID_OPTION_SHAPE
    title = "invalid option shape"
    __fields__ = ("name", "detail")

    def __init__(self, name, detail, /, **options):
        self.name = name
        self.detail = detail
        super().__init__("option %r: %s" % (name, detail), **options)


class ParseExit(ExceptionGroup):
    """
    Bundle of every fault collected during one parse pass.
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad arguments", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad arguments", tuple(exceptions))
        self.options = MappingProxyType(options)

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "title": "bold #FF4DA6",  # friendly pinky group title
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            return Text(str(fragment), styles[style] if colorful else "")

        prog = text(getattr(main, "__prog__", self.options.get("prog", "gnuopts")), "prog-name")
        header = Text.assemble("[ ", prog, " — ", text(self.message.title(), "title"), " ]")

        renders = [copy.replace(exception, colorful=colorful) for exception in self.exceptions]

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(2)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ParseFault/ParseExit).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - shell=True prints the fault to stderr with rich (ParseExit then exits with status 2);
      otherwise the fault is raised.

    typical options
    - shell, fancy, colorful, prog, index, hint.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "ParseFault",
    "UnrecognizedOptionError",
    "AmbiguousOptionError",
    "InvalidFormatError",
    "MissingRequiredArgumentsError",
    "ParseWarning",
    "ExceededMaximumArgumentsWarning",
    "TransformError",
    "MissingRequiredOptionError",
    "UnsatisfiedDependencyError",
    "InvalidOptionShapeError",
    "ParseExit",
    "trigger",
)
