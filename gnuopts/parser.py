r"""
gnuopts parser facade.

Overview
- ParserConfiguration: immutable settings shared by every parse call (strategy,
  token prefixes, terminator, error policy, fault reporter).
- Parser: owns an OptionRegistry, validates it against the strategy at build time
  and runs parse passes over argument vectors.
- ParseOutcome: residual (non-option) tokens and faults of one pass, plus access
  to the accumulated results through the registry.
- arguments(*specs): build a registry and a parser in one call.

Usage constraint
- A Parser is single-writer. Its accumulators are mutated in place and are not
  synchronized: never run parse() on the same parser from several threads at
  once. Results of repeated parses add up; use registry.rebuild() (or a new
  Parser) for a fresh start.

Quick example:
    >>> parser = arguments(
    ...     OptionSpec("verbose", "-v", "--verbose", flag=True),
    ...     OptionSpec("jobs", "-j", "--jobs", accumulator=single("int")),
    ... )
    >>> outcome = parser.parse("-v -j4 build")
    >>> outcome.residuals, outcome.registry.value_of("jobs")
    (('build',), 4)
"""
import shlex
import sys
from collections.abc import Iterable

from .faults import *
from .registry import OptionRegistry
from .strategy import ParserStrategy, GNUParserStrategy
from .utils import *


def _sanitize_token(cls, name, value):
    if not isinstance(value, str):
        raise TypeError(f"{cls.__name__} {name!r} must be a string")
    elif not value:
        raise ValueError(f"{cls.__name__} {name!r} cannot be empty")
    return value


class ParserConfiguration:
    """
    Immutable parser settings.

    Parameters
    - strategy: ParserStrategy (default: a GNUParserStrategy).
    - short_prefix / long_prefix: prefixes of short and long options ("-" / "--").
    - non_option: lone token always treated as a non-option argument ("-").
    - terminator: token ending option interpretation ("--").
    - strict: when True, an unrecognized, ambiguous or malformed option stops
      option interpretation for the rest of the vector. Default False: report and
      continue with the next token.
    - abbreviations: accept unique prefixes of long names (GNU getopt_long style).
    - reporter: callable receiving every fault as soon as it is reported.

    Copies with changes are made with copy.replace(configuration, strict=True).
    """

    __introspectable__ = (
        "strategy",
        "short_prefix",
        "long_prefix",
        "non_option",
        "terminator",
        "strict",
        "abbreviations",
        "reporter",
    )

    strategy = mirror("strategy")
    short_prefix = mirror("short_prefix")
    long_prefix = mirror("long_prefix")
    non_option = mirror("non_option")
    terminator = mirror("terminator")
    strict = mirror("strict")
    abbreviations = mirror("abbreviations")
    reporter = mirror("reporter")

    def __init__(
            self,
            strategy=Unset,
            /,
            *,
            short_prefix="-",
            long_prefix="--",
            non_option="-",
            terminator="--",
            strict=False,
            abbreviations=False,
            reporter=Unset,
    ):
        strategy = coalesce(strategy, GNUParserStrategy())
        if not isinstance(strategy, ParserStrategy):
            raise TypeError("ParserConfiguration 'strategy' must be a parser strategy")
        if reporter is not Unset and not callable(reporter):
            raise TypeError("ParserConfiguration 'reporter' must be callable")

        self._strategy = strategy
        self._short_prefix = _sanitize_token(type(self), "short_prefix", short_prefix)
        self._long_prefix = _sanitize_token(type(self), "long_prefix", long_prefix)
        self._non_option = _sanitize_token(type(self), "non_option", non_option)
        self._terminator = _sanitize_token(type(self), "terminator", terminator)
        self._strict = bool(strict)
        self._abbreviations = bool(abbreviations)
        self._reporter = reporter

    def __replace__(self, *unused, **changes):
        assert not unused, "positional arguments are not allowed"
        parameters = {name: getattr(self, "_" + name) for name in self.__introspectable__}
        parameters |= changes
        return type(self)(parameters.pop("strategy"), **parameters)

    def __rich_repr__(self):
        for name in self.__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "parser-configuration(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


DEFAULT_CONFIGURATION = ParserConfiguration()


def _tokenize(args, /):
    """
    Normalize an argument vector into a list of strings.

    - Unset: sys.argv[1:].
    - str: shell-like string split with shlex.split (unbalanced quotes raise ValueError).
    - Iterable[str]: used as-is (empty tokens are kept, the strategy skips them).
    """
    if args is Unset:
        return sys.argv[1:]
    if isinstance(args, str):
        try:
            return shlex.split(args)
        except ValueError as error:
            raise ValueError("parse() argument is not a valid shell-like string: %s" % error) from error
    if isinstance(args, Iterable):
        tokens = list(args)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() argument must be a string or an iterable of strings")


class ParseOutcome:
    """
    Result of one parse pass.

    - residuals: non-option tokens in input order (also what iterating yields).
    - faults: every reported fault in report order; errors / warnings split them.
    - registry: the parser's registry, holding the accumulated values.
    """

    residuals = mirror("residuals")
    faults = mirror("faults")

    def __init__(self, residuals, faults, registry):
        self._residuals = tuple(residuals)
        self._faults = tuple(faults)
        self._registry = registry

    @property
    def registry(self):
        return self._registry

    @property
    def errors(self):
        return tuple(fault for fault in self._faults if not isinstance(fault, ParseWarning))

    @property
    def warnings(self):
        return tuple(fault for fault in self._faults if isinstance(fault, ParseWarning))

    @property
    def ok(self):
        return not self.errors

    def results(self):
        return self._registry.results()

    def raise_for_faults(self, **options):
        """
        Raise ParseExit grouping every error of the pass (warnings are left out).

        Options are forwarded to trigger(); shell=True prints the group and exits
        with status 2 instead of raising.
        """
        if errors := self.errors:
            trigger(ParseExit(errors), **options)

    def __iter__(self):
        return iter(self._residuals)

    def __len__(self):
        return len(self._residuals)

    def __repr__(self):
        return "parse-outcome(residuals=%r, faults=%r)" % (self._residuals, self._faults)


class Parser:
    """
    Entry point of the library: a configuration plus the option registry it drives.

    The registry is validated against the strategy's naming rules on construction
    (InvalidOptionShapeError). `registry` may also be an iterable of OptionSpec,
    which is built into a fresh OptionRegistry.
    """

    configuration = mirror("configuration")

    def __init__(self, registry, configuration=DEFAULT_CONFIGURATION, /):
        if not isinstance(configuration, ParserConfiguration):
            raise TypeError("Parser 'configuration' must be a parser configuration")
        if not isinstance(registry, OptionRegistry):
            registry = OptionRegistry(registry)
        configuration.strategy.validate(registry)
        self._configuration = configuration
        self._registry = registry

    @property
    def registry(self):
        return self._registry

    def validate(self):
        return self._configuration.strategy.validate(self._registry)

    def stream(self, args=Unset, /, *, report=Unset):
        """
        Lazy form of parse(): a generator over the residual tokens.

        Accumulation happens while the generator is consumed; required options,
        dependencies and async completion callbacks are handled once it is
        exhausted. Faults go to `report` (when given) and to the configured reporter.
        """
        reporters = [callback for callback in (report, self._configuration.reporter) if callback is not Unset]

        def dispatch(fault):
            for reporter in reporters:
                reporter(fault)

        strategy = self._configuration.strategy
        return strategy.process(_tokenize(args), self._registry, self._configuration, dispatch)

    def parse(self, args=Unset, /):
        """
        Run a full parse pass over `args` (default: sys.argv[1:]).

        Bad tokens never raise: their faults are collected on the returned outcome.
        A malformed vector does: TypeError for non-string items, ValueError for a
        string with unbalanced quotes.
        """
        faults = []
        residuals = tuple(self.stream(args, report=faults.append))
        return ParseOutcome(residuals, faults, self._registry)

    def __repr__(self):
        return "parser(registry=%r, configuration=%r)" % (self._registry, self._configuration)


def arguments(*specs, configuration=DEFAULT_CONFIGURATION):
    """
    Build an OptionRegistry from `specs` and wrap it in a Parser.
    """
    return Parser(OptionRegistry(specs), configuration)


__all__ = (
    "ParserConfiguration",
    "DEFAULT_CONFIGURATION",
    "ParseOutcome",
    "Parser",
    "arguments",
)
