r"""
gnuopts parsing strategies.

GNU has laid out a set of rules for options and non-options:

- Arguments are options if they begin with a hyphen delimiter ('-').
- Multiple options may follow a hyphen delimiter in a single token if the
  options do not take arguments. Thus, '-abc' is equivalent to '-a -b -c'.
- Option names are single alphanumeric characters.
- Certain options require an argument. An option and its argument may or may
  not appear as separate tokens: '-o foo' and '-ofoo' are equivalent.
- The argument '--' terminates all options; any following arguments are
  treated as non-option arguments, even if they begin with a hyphen.
- A token consisting of a single hyphen character is an ordinary non-option
  argument.
- Options may be supplied in any order, or appear multiple times. The
  interpretation is left up to the accumulator of the option.

GNU adds long options: '--' followed by a name made of alphanumeric characters
and dashes. An argument for a long option is written '--name=value' (or, for
options that require one, '--name value'). Unique abbreviations of long names
are accepted when the configuration enables them.

How a pass works
- An explicit cursor walks the token list left to right; each token is fed to
  an accumulator at most once, in input order.
- Tokens that are not options, or follow the terminator, are yielded as
  residual arguments while the pass progresses.
- Every problem is reported through the `report` callable and the pass goes on
  with the next token. With `configuration.strict`, an unrecognized, ambiguous
  or malformed option stops option interpretation: that token is dropped and
  every later token is yielded as residual.
- When the stream is exhausted, required options and dependencies are checked,
  then each matched accumulator gets its finish() call (async completion).
"""
import copy
import re
from abc import ABC, abstractmethod

from .faults import *
from .log import get_logger

logger = get_logger(__name__)


class ParserStrategy(ABC):
    """
    Interface of a parsing strategy.

    - validate(registry): build-time check of option names, raises
      InvalidOptionShapeError, returns True otherwise.
    - process(tokens, registry, configuration, report): generator over the
      residual (non-option) tokens; accumulators are driven as it is consumed.
    """

    @abstractmethod
    def validate(self, registry, /):
        raise NotImplementedError

    @abstractmethod
    def process(self, tokens, registry, configuration, report, /):
        raise NotImplementedError

    def __repr__(self):
        return "%s()" % type(self).__name__


class GNUParserStrategy(ParserStrategy):

    SHORT_NAME = re.compile(r"[A-Za-z0-9]")
    LONG_NAME = re.compile(r"[A-Za-z0-9-]+")

    def validate(self, registry, /):
        for name, entry in registry.items():
            for short in sorted(entry.spec.shorts):
                if not self.SHORT_NAME.fullmatch(short):
                    raise InvalidOptionShapeError(name, "short names must be exactly one alphanumeric character for "
                                                        "GNU-style parsing, got %r" % short)
            for long in sorted(entry.spec.longs):
                if not self.LONG_NAME.fullmatch(long):
                    raise InvalidOptionShapeError(name, "long names must be made of alphanumeric characters or "
                                                        "hyphens for GNU-style parsing, got %r" % long)
        return True

    def process(self, tokens, registry, configuration, report, /):
        return _Pass(list(tokens), registry, configuration, report).run()


class _Pass:
    """
    State of one parse pass: the token list, the cursor and the options matched so far.
    """

    def __init__(self, tokens, registry, configuration, report):
        self.tokens = tokens
        self.cursor = 0
        self.registry = registry
        self.configuration = configuration
        self.report = report
        self.matched = {}
        self.halted = False

    def run(self):
        configuration = self.configuration
        for entry in self.registry.values():
            entry.accumulator.rearm()

        while self.cursor < len(self.tokens):
            token = self.tokens[self.cursor]
            logger.debug("examining %r at position %d", token, self.cursor + 1)

            if not token:
                self.cursor += 1
            elif token == configuration.non_option:
                self.cursor += 1
                yield token
            elif token == configuration.terminator:
                logger.debug("found terminator, %d token(s) left uninterpreted", len(self.tokens) - self.cursor - 1)
                yield from self._drain(self.cursor + 1)
            elif token.startswith(configuration.long_prefix):
                self._long(token)
            elif token.startswith(configuration.short_prefix):
                self._short(token)
            else:
                self.cursor += 1
                yield token

            if self.halted:
                logger.debug("option processing halted at position %d", self.cursor)
                yield from self._drain(self.cursor)

        self._check()
        for entry in self.matched.values():
            entry.accumulator.finish()

    def _drain(self, start):
        self.cursor = len(self.tokens)
        return iter(self.tokens[start:])

    def _long(self, token):
        position = self.cursor + 1
        self.cursor += 1
        name, equals, value = token[len(self.configuration.long_prefix):].partition("=")

        if (entry := self._find_long(name, position, token)) is None:
            return
        spec = entry.spec
        self.matched.setdefault(spec.name, entry)

        if equals:
            if spec.flag:
                return self._fault(InvalidFormatError(
                    spec.name,
                    "flags do not take a value",
                    index=position,
                    token=token,
                    hint="remove everything from '=' (for example: %s%s)" % (self.configuration.long_prefix, name),
                ), halting=True)
            self._feed(entry, value, position)
            found = self._consume(entry, 1)
        elif spec.flag:
            return self._feed(entry, "", position)
        else:
            found = self._consume(entry, 0)
            if found == 0 and spec.minimum > 0:
                return self._fault(InvalidFormatError(
                    spec.name,
                    "missing value",
                    index=position,
                    token=token,
                    hint="write %s%s=<value> or pass the value after a space" % (self.configuration.long_prefix, name),
                ), halting=True)

        self._check_minimum(entry, found, position)

    def _find_long(self, name, position, token):
        if (entry := self.registry.long(name)) is not None:
            return entry

        if self.configuration.abbreviations and name:
            candidates = self.registry.complete(name)
            if len({self.registry.long(candidate).spec.name for candidate in candidates}) == 1:
                logger.debug("expanded abbreviation %r to %r", name, candidates[0])
                return self.registry.long(candidates[0])
            if candidates:
                return self._fault(AmbiguousOptionError(
                    name,
                    candidates,
                    index=position,
                    token=token,
                    prefix=self.configuration.long_prefix,
                ), halting=True)

        return self._fault(UnrecognizedOptionError(name, index=position, token=token), halting=True)

    def _short(self, token):
        position = self.cursor + 1
        self.cursor += 1
        cluster = token[len(self.configuration.short_prefix):]

        for offset, char in enumerate(cluster, 1):
            if (entry := self.registry.short(char)) is None:
                self._fault(UnrecognizedOptionError(char, index=position, token=token), halting=True)
                if self.halted:
                    return
                continue
            self.matched.setdefault(entry.spec.name, entry)

            if entry.spec.flag:
                self._feed(entry, "", position)
                continue

            # the rest of the cluster is the first value: -ofoo is -o foo
            found = 0
            if rest := cluster[offset:]:
                self._feed(entry, rest, position)
                found = 1
            found = self._consume(entry, found)
            return self._check_minimum(entry, found, position)

    def _consume(self, entry, found):
        """
        Feed trailing tokens to `entry` until its arity window is full, the next
        token looks like an option, or the stream ends. Returns the number of values
        taken by this invocation (including any inline value counted in `found`).
        """
        spec = entry.spec
        while self.cursor < len(self.tokens):
            token = self.tokens[self.cursor]
            if self._looks_like_option(token) or token in self.registry:
                break
            if not spec.unbounded and found >= spec.maximum:
                if spec.maximum > 0:
                    self._fault(ExceededMaximumArgumentsWarning(spec.name, spec.maximum, index=self.cursor + 1, token=token))
                break
            self.cursor += 1
            self._feed(entry, token, self.cursor)
            found += 1
        return found

    def _looks_like_option(self, token):
        configuration = self.configuration
        if token == configuration.non_option:
            return False
        return (
            token == configuration.terminator or
            token.startswith(configuration.long_prefix) or
            token.startswith(configuration.short_prefix)
        )

    def _feed(self, entry, raw, position):
        try:
            value = entry.accumulator.apply(raw)
        except TransformError as error:
            self._fault(copy.replace(error, name=entry.spec.name, index=position))
        else:
            logger.debug("accumulated %r for option %r", value, entry.spec.name)

    def _check_minimum(self, entry, found, position):
        if found < entry.spec.minimum:
            self._fault(MissingRequiredArgumentsError(entry.spec.name, found, entry.spec.minimum, index=position))

    def _check(self):
        for name, entry in self.registry.items():
            if entry.spec.required and name not in self.matched:
                self._fault(MissingRequiredOptionError(name))
        for name, entry in self.matched.items():
            for dependency in entry.spec.dependencies:
                if dependency not in self.matched:
                    self._fault(UnsatisfiedDependencyError(name, dependency))

    def _fault(self, fault, *, halting=False):
        logger.warning("%s", fault)
        self.report(fault)
        if halting and self.configuration.strict:
            self.halted = True


__all__ = (
    "ParserStrategy",
    "GNUParserStrategy",
)
