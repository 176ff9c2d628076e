r"""
gnuopts option declarations and registry.

Overview
- OptionSpec: immutable declaration of one option (canonical name, short/long
  aliases, arity bounds, flag-ness, required/dependencies, prototype accumulator).
- OptionRegistry: read-only mapping canonical name -> Entry(spec, accumulator),
  plus lookup indices by long name and by short name. Built once; every option
  gets its own fresh accumulator, so two registries built from the same specs
  never share state.

Metadata (sanitized on construction)
- name: non-empty string, the unique key of the option in a registry.
- aliases: spelled with their prefix, "-v" is the short name "v" and
  "--verbose" the long name "verbose". At least one, no duplicates.
- nargs: arity of the option
  • Unset  → (1, 1), or (0, 0) for flags
  • int n  → (n, n)
  • "?"    → (0, 1)
  • "*"    → (0, UNBOUNDED)
  • "+"    → (1, UNBOUNDED)
  • (min, max) with max an int or UNBOUNDED
- flag: presence-only option; its arity is always (0, 0).
- accumulator: prototype copied into each registry; defaults to flag() for
  flags and single("string") otherwise.
- required / dependencies / descr: checked after a parse pass, not per token.

Concurrency
- A registry is single-writer: accumulators are mutated in place while parsing and
  nothing is synchronized. Repeated parses add to the same accumulators; build a
  new registry (see rebuild()) for a fresh parse.

Quick example:
    >>> registry = OptionRegistry([
    ...     OptionSpec("verbose", "-v", "--verbose", flag=True),
    ...     OptionSpec("output", "-o", "--output", accumulator=single("path")),
    ... ])
    >>> registry.short("v").spec.name
    'verbose'
"""
import copy
from collections.abc import Iterable, Mapping
from typing import NamedTuple

from rich.text import Text

from .accumulators import Accumulator, ListAccumulator, flag as flag_accumulator, single
from .utils import *

# Upper arity bound meaning "as many values as follow".
UNBOUNDED = Ellipsis


def _sanitize_names(metadata, /):
    """
    Internal: validate the canonical name and split aliases into short and long names.

    Raises
    - TypeError: missing aliases, non-string name or alias.
    - ValueError: empty name, alias without a '-' prefix, empty alias body, duplicates.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError("option name must be a string")
    elif not (name := name.strip()):
        raise ValueError("option name cannot be empty")
    metadata["name"] = name

    if not metadata["aliases"]:
        raise TypeError(f"option {name!r} must specify at least one alias")

    longs = set()
    shorts = set()
    for alias in metadata["aliases"]:
        if not isinstance(alias, str):
            raise TypeError(f"option {name!r} aliases must be strings")
        elif not (alias := alias.strip()).startswith("-"):
            raise ValueError(f"option {name!r} alias {alias!r} must start with '-' or '--'")

        if alias.startswith("--"):
            names, body = longs, alias[2:]
        else:
            names, body = shorts, alias[1:]

        if not body:
            raise ValueError(f"option {name!r} alias {alias!r} has no name after its prefix")
        elif body in names:
            raise ValueError(f"option {name!r} aliases cannot contain duplicates")
        names.add(body)

    metadata["longs"] = frozenset(longs)
    metadata["shorts"] = frozenset(shorts)


def _sanitize_arity(metadata, /):
    """
    Internal: turn 'nargs' into (minimum, maximum) and check the flag invariants.
    """
    name = metadata["name"]
    match metadata["nargs"]:
        case UnsetType():
            bounds = (0, 0) if metadata["flag"] else (1, 1)
        case bool():
            raise TypeError(f"option {name!r} 'nargs' must be a string, an integer or a pair")
        case int(count):
            bounds = (count, count)
        case "?":
            bounds = (0, 1)
        case "*":
            bounds = (0, UNBOUNDED)
        case "+":
            bounds = (1, UNBOUNDED)
        case (minimum, maximum):
            bounds = (minimum, maximum)
        case str():
            raise ValueError(f"option {name!r} 'nargs' must be one of '?', '+', or '*'")
        case _:
            raise TypeError(f"option {name!r} 'nargs' must be a string, an integer or a pair")

    minimum, maximum = bounds
    if not isinstance(minimum, int) or isinstance(minimum, bool) or minimum < 0:
        raise ValueError(f"option {name!r} minimum arity must be a non-negative integer")
    if maximum is not UNBOUNDED:
        if not isinstance(maximum, int) or isinstance(maximum, bool):
            raise ValueError(f"option {name!r} maximum arity must be an integer or UNBOUNDED")
        if maximum < minimum:
            raise ValueError(f"option {name!r} maximum arity cannot be lower than its minimum")

    if metadata["flag"] and maximum != 0:
        raise ValueError(f"flag option {name!r} cannot take arguments")
    if not metadata["flag"] and maximum == 0:
        raise ValueError(f"option {name!r} must accept at least one argument (declare it with flag=True)")

    metadata["minimum"] = minimum
    metadata["maximum"] = maximum


def _sanitize_metadata(metadata, /):
    name = metadata["name"]

    if metadata["accumulator"] is Unset:
        metadata["accumulator"] = flag_accumulator() if metadata["flag"] else single()
    elif not isinstance(metadata["accumulator"], Accumulator):
        raise TypeError(f"option {name!r} 'accumulator' must be an accumulator")

    if isinstance(dependencies := metadata["dependencies"], str) or not isinstance(dependencies, Iterable):
        raise TypeError(f"option {name!r} 'dependencies' must be an iterable of names")
    sanitized = []
    for dependency in dependencies:
        if not isinstance(dependency, str):
            raise TypeError(f"option {name!r} dependencies must be strings")
        elif dependency == name:
            raise ValueError(f"option {name!r} cannot depend on itself")
        elif dependency in sanitized:
            raise ValueError(f"option {name!r} dependencies cannot contain duplicates")
        sanitized.append(dependency)
    metadata["dependencies"] = tuple(sanitized)

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"option {name!r} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"option {name!r} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class OptionSpec:
    """
    Immutable declaration of a command-line option.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes
      mirroring the sanitized metadata values.

    Invariants
    - flag implies maximum == 0; a non-flag option accepts at least one value.
    - minimum <= maximum (UNBOUNDED compares as infinite).
    """

    __introspectable__ = (
        "name",
        "longs",
        "shorts",
        "minimum",
        "maximum",
        "flag",
        "required",
        "dependencies",
        "descr",
        "accumulator",
    )

    name = mirror("name")
    longs = mirror("longs")
    shorts = mirror("shorts")
    minimum = mirror("minimum")
    maximum = mirror("maximum")
    flag = mirror("flag")
    required = mirror("required")
    dependencies = mirror("dependencies")
    descr = mirror("descr")
    accumulator = mirror("accumulator")

    def __init__(
            self,
            name,
            /,
            *aliases,
            accumulator=Unset,
            nargs=Unset,
            required=False,
            dependencies=(),
            descr=Unset,
            flag=False,
    ):
        metadata = {
            "name": name,
            "aliases": aliases,
            "accumulator": accumulator,
            "nargs": nargs,
            "required": bool(required),
            "dependencies": dependencies,
            "descr": descr,
            "flag": bool(flag),
        }
        _sanitize_names(metadata)
        _sanitize_arity(metadata)
        _sanitize_metadata(metadata)

        for field in self.__introspectable__:
            setattr(self, "_" + field, metadata[field])

    @property
    def unbounded(self):
        return self._maximum is UNBOUNDED

    def __rich_repr__(self):
        for name in self.__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "option-spec(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


class Entry(NamedTuple):
    spec: OptionSpec
    accumulator: Accumulator


class OptionRegistry(Mapping):
    """
    Read-only mapping canonical name -> Entry(spec, accumulator).

    Build-time errors (ValueError)
    - two options with the same canonical name;
    - a long or short name claimed by two distinct options;
    - a dependency naming an option that is not declared.
    """

    longs = mirror("longs")
    shorts = mirror("shorts")

    def __init__(self, specs=(), /):
        entries = {}
        longs = {}
        shorts = {}

        for spec in specs:
            if not isinstance(spec, OptionSpec):
                raise TypeError("option registry items must be option specs")
            if spec.name in entries:
                raise ValueError(f"option {spec.name!r} is declared more than once")

            accumulator = copy.replace(spec.accumulator)
            accumulator.reset()
            entries[spec.name] = entry = Entry(spec, accumulator)

            for index, prefix, names in ((longs, "--", spec.longs), (shorts, "-", spec.shorts)):
                for name in names:
                    if name in index:
                        raise ValueError(f"option name {prefix + name!r} is claimed by both {index[name].spec.name!r} and {spec.name!r}")
                    index[name] = entry

        for entry in entries.values():
            for dependency in entry.spec.dependencies:
                if dependency not in entries:
                    raise ValueError(f"option {entry.spec.name!r} depends on undeclared option {dependency!r}")

        self._entries = entries
        self._longs = longs
        self._shorts = shorts

    def __getitem__(self, name, /):
        return self._entries[name]

    def __iter__(self):
        return iter(self._entries)

    def __len__(self):
        return len(self._entries)

    def long(self, name, /):
        return self._longs.get(name)

    def short(self, name, /):
        return self._shorts.get(name)

    def complete(self, prefix, /):
        """
        long names starting with `prefix`, sorted (used for GNU abbreviations).
        """
        return sorted(name for name in self._longs if name.startswith(prefix))

    def value_of(self, name, /):
        return self._entries[name].accumulator.value

    def values_of(self, name, /):
        return self._entries[name].accumulator.values

    def results(self):
        """
        snapshot of every option's result: a tuple for list accumulators, the value otherwise.
        """
        return {
            name: entry.accumulator.values if isinstance(entry.accumulator, ListAccumulator) else entry.accumulator.value
            for name, entry in self._entries.items()
        }

    def rebuild(self):
        """
        a new registry over the same specs with fresh accumulators.
        """
        return type(self)(entry.spec for entry in self._entries.values())

    def __repr__(self):
        return "option-registry(%s)" % ", ".join(map(repr, self._entries))


__all__ = (
    "UNBOUNDED",
    "OptionSpec",
    "Entry",
    "OptionRegistry",
)
