r"""
gnuopts accumulators.

Overview
- An accumulator is the stateful sink of one option: it receives the raw string
  values matched for that option, converts each through its transform, and keeps
  the typed result.
- One generic class per accumulation policy, parametrized by the transform:
  • SingleAccumulator[_T]: at most one value, last write wins.
  • ListAccumulator[_T]: every value, in encounter order.
  • AsyncAccumulator[_T]: a ListAccumulator that also hands each value to a
    callback the moment it is accumulated, plus an optional completion callback
    fired once at the end of a parse pass.

- Factories
  • single(kind, default): typed single accumulator (default falls back to the kind's zero).
  • many(kind, initial): typed list accumulator.
  • stream(kind, callback, done, initial): typed async accumulator.
  • flag(value, default): presence-only accumulator (implicit value, no input needed).
  • counter(): list of flag values, `count` tells how often the flag was given.

Contract
- apply(raw) converts and commits, returning the value. On failure it raises
  TransformError (carrying the raw string and the target type name) and leaves
  the state untouched.
- value / values read the result without mutating it.
- reset() restores the constructor defaults; the registry calls it at build time.
- copy.replace(accumulator) yields a fresh, reset accumulator with the same
  configuration; the registry uses it to allocate one accumulator per option.

Quick example:
    >>> numbers = many("int")
    >>> numbers.apply("1"), numbers.apply("2")
    (1, 2)
    >>> numbers.values
    (1, 2)
"""
from .faults import TransformError
from .transforms import resolve, typename, to_flag, to_string
from .utils import *


class Accumulator[_T]:
    """
    Base class for all accumulators.

    Subclasses implement _commit(value), _clear(), the `value`/`values`
    properties, and list their constructor parameters in __fields__ so
    __replace__ can rebuild them.
    """
    __fields__ = ("transform", "default")

    transform = mirror("transform")
    default = mirror("default")
    count = mirror("count")

    def __init__(self, transform=to_string, default=Unset):
        if not callable(transform):
            raise TypeError(f"{type(self).__name__} 'transform' must be callable")
        self._transform = transform
        self._default = default
        self._count = 0

    def apply(self, raw, /):
        try:
            value = self._transform(raw)
        except (ValueError, TypeError) as exception:
            raise TransformError(raw, typename(self._transform), exception=exception) from exception
        self._commit(value)
        self._count += 1
        return value

    def reset(self):
        self._count = 0
        self._clear()

    def rearm(self):
        """start-of-pass hook, see AsyncAccumulator."""

    def finish(self):
        """end-of-pass hook, see AsyncAccumulator."""

    def _commit(self, value):
        raise NotImplementedError

    def _clear(self):
        raise NotImplementedError

    def __replace__(self, *unused, **changes):
        assert not unused, "positional arguments are not allowed"
        parameters = {name: getattr(self, "_" + name) for name in type(self).__fields__}
        return type(self)(**(parameters | changes))

    def __repr__(self):
        return "%s(transform=%s, value=%r)" % (type(self).__name__, typename(self._transform), self.value)


class SingleAccumulator[_T](Accumulator[_T]):
    """
    Holds at most one value; every apply overwrites the previous one.
    """

    def __init__(self, transform=to_string, default=Unset):
        super().__init__(transform, default)
        self._value = Unset

    @property
    def value(self):
        return coalesce(self._value, coalesce(self._default))

    @property
    def values(self):
        return () if self._value is Unset else (self._value,)

    def _commit(self, value):
        self._value = value

    def _clear(self):
        self._value = Unset


class ListAccumulator[_T](Accumulator[_T]):
    """
    Appends every successfully transformed value, preserving encounter order.

    `initial` values come first and survive reset().
    """
    __fields__ = ("transform", "initial", "default")

    initial = mirror("initial")

    def __init__(self, transform=to_string, initial=(), default=Unset):
        super().__init__(transform, default)
        self._initial = tuple(initial)
        self._values = list(self._initial)

    @property
    def value(self):
        return self._values[-1] if self._values else coalesce(self._default)

    @property
    def values(self):
        return tuple(self._values)

    def _commit(self, value):
        self._values.append(value)

    def _clear(self):
        self._values = list(self._initial)


class AsyncAccumulator[_T](ListAccumulator[_T]):
    """
    A list accumulator that delivers values as they arrive.

    - callback(value) runs synchronously for every successfully accumulated value,
      in accumulation order, before the parser looks at the next token.
    - done() runs at most once per parse pass, after the last value of this option
      in that pass (the parser calls finish() when the pass ends).

    The callbacks must not mutate this same accumulator.
    """
    __fields__ = ("transform", "callback", "done", "initial", "default")

    callback = mirror("callback")
    done = mirror("done")

    def __init__(self, transform=to_string, callback=Unset, done=Unset, initial=(), default=Unset):
        if not callable(callback):
            raise TypeError(f"{type(self).__name__} 'callback' must be callable")
        if done is not Unset and not callable(done):
            raise TypeError(f"{type(self).__name__} 'done' must be callable")
        super().__init__(transform, initial, default)
        self._callback = callback
        self._done = done
        self._finished = False

    def apply(self, raw, /):
        value = super().apply(raw)
        self._callback(value)
        return value

    def rearm(self):
        self._finished = False

    def finish(self):
        if self._finished:
            return
        self._finished = True
        if self._done is not Unset:
            self._done()

    def _clear(self):
        super()._clear()
        self._finished = False


def single(kind="string", default=Unset):
    transform, zero = resolve(kind)
    return SingleAccumulator(transform, coalesce(default, zero))


def many(kind="string", initial=()):
    transform, _ = resolve(kind)
    return ListAccumulator(transform, initial)


def stream(kind="string", callback=Unset, done=Unset, initial=()):
    """
    typed async accumulator; `callback` is required, `done` optional.
    """
    transform, _ = resolve(kind)
    return AsyncAccumulator(transform, callback, done, initial)


def flag(value=True, default=False):
    """
    Presence-only accumulator.

    Applying any raw input (the parser passes an empty string) stores `value`;
    until then the result is `default`.
    """
    if value is True:
        transform = to_flag
    else:
        transform = rename(lambda raw, /: value, "to_flag")
    return SingleAccumulator(transform, default)


def counter():
    # read the number of occurrences from `count`, e.g. -vvv -> 3
    return ListAccumulator(to_flag)


__all__ = (
    "Accumulator",
    "SingleAccumulator",
    "ListAccumulator",
    "AsyncAccumulator",
    "single",
    "many",
    "stream",
    "flag",
    "counter",
)
