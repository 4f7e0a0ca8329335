r"""
cflag flag specifications and flag sets.

Overview
- Specs
  • Option[_T]: named, value-bearing option with a long name and an optional
    single-character shorthand (e.g., -o/--output).
  • Flag: named boolean switch, e.g., -v/--verbose. Presence sets it to True,
    and the inline forms --verbose=false / -v=0 are accepted as well.

- FlagSet
  • Owns a collection of specs and their current values.
  • parse(tokens) consumes a token slice and reports what it recognized, which
    tokens looked like unknown flags, and which tokens were positional.
  • In lenient mode unknown flags do not abort parsing: they are recorded and
    skipped, together with a following non-flag token presumed to be their value.
    Commands rely on this to let tokens meant for another command level pass
    through untouched.
  • Values persist across parse() calls; positional args reflect the last call.

Token grammar
- "--name value", "--name=value"       long form (boolean flags take no value)
- "-x value", "-xvalue", "-x=value"    short form
- "-abc"                               clustered shorthands (booleans, last one may take a value)
- "--"                                 ends flag parsing; everything after is positional
- "-"                                  a plain positional token

Metadata (sanitized on construction)
- names: exactly one long name matching r"--[^\W\d_](-?[^\W_]+)*" and at most one
  short name of a single letter or digit. Duplicates are rejected.
- descr: Unset | str (short help), non-empty when provided.
- type (Option only): Callable converter applied to the raw token.
- metavar (Option only): Unset | str, label shown in usage instead of the type name.
- hidden / deprecated: suppress from usage; deprecated flags warn when used.

Quick example:
    >>> from cflag.flags import FlagSet
    >>> flags = FlagSet()
    >>> flags.option("-t", "--threads", type=int, default=1, descr="Worker threads.")
    >>> flags.flag("-v", "--verbose", descr="Verbose output.")
    >>> flags.parse(["-v", "--threads", "4", "input.txt"])
    ParseResult(recognized=('verbose', 'threads'), unknown=(), args=('input.txt',))
    >>> flags.get_int("threads")
    4
"""
import re
from collections import deque
from collections.abc import Iterable
from typing import NamedTuple

from .faults import *
from .internals import IntrospectableType
from .utils import *


# strconv.ParseBool spellings
_BOOLEANS = {
    "1": True, "t": True, "T": True, "TRUE": True, "true": True, "True": True,
    "0": False, "f": False, "F": False, "FALSE": False, "false": False, "False": False,
}

# Type names shown in usage tables when no metavar is given.
_TYPENAMES = {
    str: "string",
    int: "int",
    float: "float",
}


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the metadata shared by Option and Flag.

    - descr: optional short description. Unset becomes None; a provided string
      must be non-empty after trimming.
    - names: one long name ("--name") and at most one short name ("-n"). The
      canonical name is the long name without dashes and the shorthand is the
      single character of the short name (None when absent).

    Raises
    - TypeError: on non-string names/descr or when no names are given.
    - InvalidFlagError: on malformed, missing-long, extra or duplicated names.
    """
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise InvalidFlagError(f"{cls.__typename__} 'descr' cannot be empty", code=FaultCode.INVALID_FLAG)
    metadata["descr"] = coalesce(descr)

    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    longs = []
    shorts = []
    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif name in longs or name in shorts:
            raise InvalidFlagError(f"{cls.__typename__} names cannot contain duplicates", code=FaultCode.INVALID_FLAG)
        elif re.fullmatch(r"--[^\W\d_](-?[^\W_]+)*", name):
            longs.append(name)
        elif re.fullmatch(r"-[^\W_]", name):
            shorts.append(name)
        else:
            raise InvalidFlagError(
                f"{cls.__typename__} name {name!r} must be a long (--name) or a single-character short (-n) name",
                code=FaultCode.INVALID_FLAG,
            )

    if len(longs) != 1:
        raise InvalidFlagError(f"{cls.__typename__} must specify exactly one long name", code=FaultCode.INVALID_FLAG)
    if len(shorts) > 1:
        raise InvalidFlagError(f"{cls.__typename__} can specify at most one short name", code=FaultCode.INVALID_FLAG)

    metadata["names"] = set(longs + shorts)
    metadata["name"] = longs[0][2:]
    metadata["shorthand"] = shorts[0][1:] if shorts else None


class Option[_T](metaclass=IntrospectableType, sealed=True):
    """
    Named, value-bearing flag specification.

    The raw token is converted with `type` when the option is parsed; the
    converter's TypeError/ValueError surfaces as InvalidValueError.
    """

    __introspectable__ = (
        "names",
        "name",
        "shorthand",
        "type",
        "default",
        "metavar",
        "descr",
        "hidden",
        "deprecated",
    )

    def __init__(
            self,
            *names,
            type=str,
            default=None,
            metavar=Unset,
            descr=Unset,
            hidden=False,
            deprecated=False
    ):
        metadata = {
            "names": names,
            "type": type,
            "default": default,
            "metavar": metavar,
            "descr": descr,
            "hidden": bool(hidden),
            "deprecated": bool(deprecated),
        }
        _sanitize_metadata(Option, metadata)

        if not callable(metadata["type"]):
            raise TypeError(f"{Option.__typename__} 'type' must be callable")

        if not isinstance(metavar := metadata["metavar"], str | Unset):
            raise TypeError(f"{Option.__typename__} 'metavar' must be a string")
        elif isinstance(metavar, str) and not (metavar := metavar.strip()):
            raise InvalidFlagError(f"{Option.__typename__} 'metavar' cannot be empty", code=FaultCode.INVALID_FLAG)
        metadata["metavar"] = coalesce(metavar)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def convert(self, value, /):
        """
        Convert a raw token into this option's value.
        """
        try:
            return self._type(value)
        except (TypeError, ValueError) as exception:
            raise InvalidValueError(
                f"invalid value {value!r} for option '--{self._name}'",
                code=FaultCode.INVALID_VALUE,
                flag=self,
                hint=str(exception) or Unset,
            ) from exception


class Flag(metaclass=IntrospectableType, sealed=True):
    """
    Named boolean flag specification.
    """

    __introspectable__ = (
        "names",
        "name",
        "shorthand",
        "default",
        "descr",
        "hidden",
        "deprecated",
    )

    def __init__(
            self,
            *names,
            default=False,
            descr=Unset,
            hidden=False,
            deprecated=False
    ):
        if not isinstance(default, bool):
            raise TypeError(f"{Flag.__typename__} 'default' must be a boolean")

        metadata = {
            "names": names,
            "default": default,
            "descr": descr,
            "hidden": bool(hidden),
            "deprecated": bool(deprecated),
        }
        _sanitize_metadata(Flag, metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def type(self):
        return bool

    def convert(self, value, /):
        """
        Convert a raw token ("true", "0", "F", ...) into a boolean.
        """
        try:
            return _BOOLEANS[value]
        except KeyError:
            raise InvalidValueError(
                f"invalid value {value!r} for flag '--{self._name}'",
                code=FaultCode.INVALID_VALUE,
                flag=self,
                hint="use one of true/false, t/f or 1/0",
            ) from None


class ParseResult(NamedTuple):
    """
    Outcome of a single FlagSet.parse() call.

    - recognized: canonical names of the flags that were set, in order of appearance
    - unknown: tokens that looked like flags (and their presumed values) but are not defined
    - args: positional tokens
    """
    recognized: tuple[str, ...]
    unknown: tuple[str, ...]
    args: tuple[str, ...]


def _format(value, /):
    """
    Format a default value the way usage tables show it.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return '"%s"' % value
    return str(value)


class FlagSet(metaclass=IntrospectableType):
    """
    A named collection of flag specs together with their parsed values.

    Parameters
    - name: str
      Informational name (shown in messages).
    - lenient: bool
      Default mode of parse(): when True, unknown flags are recorded and skipped
      instead of raising UnknownFlagError.
    - sort: bool
      Whether usage tables list flags sorted by name (True) or in definition order.
    """

    __introspectable__ = (
        "name",
        "lenient",
        "sort",
        "args",
        "unknown",
    )

    def __init__(self, name="", /, *, lenient=False, sort=True):
        if not isinstance(name, str):
            raise TypeError(f"{FlagSet.__typename__} 'name' must be a string")
        self._name = name
        self._lenient = bool(lenient)
        self._sort = bool(sort)
        self._specs = {}
        self._shorthands = {}
        self._values = {}
        self._changed = set()
        self._args = []
        self._unknown = []

    def __contains__(self, name):
        return name in self._specs

    def __iter__(self):
        return iter(tuple(self._specs.values()))

    def __len__(self):
        return len(self._specs)

    def add(self, spec, /):
        """
        Register a spec and initialize its value to the spec's default.

        Raises
        - TypeError: when spec is not an Option or a Flag.
        - DuplicateFlagError: when its long name or shorthand is already defined.
        """
        if not isinstance(spec, Option | Flag):
            raise TypeError(f"{FlagSet.__typename__} can only add options or flags")
        if spec.name in self._specs:
            raise DuplicateFlagError(
                f"flag '--{spec.name}' is already defined",
                code=FaultCode.DUPLICATE_FLAG,
                flag=spec,
            )
        if spec.shorthand and spec.shorthand in self._shorthands:
            raise DuplicateFlagError(
                f"shorthand '-{spec.shorthand}' of flag '--{spec.name}' is already used by '--{self._shorthands[spec.shorthand].name}'",
                code=FaultCode.DUPLICATE_FLAG,
                flag=spec,
            )
        self._specs[spec.name] = spec
        if spec.shorthand:
            self._shorthands[spec.shorthand] = spec
        self._values[spec.name] = spec.default
        return spec

    def option(self, *names, **options):
        """
        Build an Option from the given names/metadata and register it.
        """
        return self.add(Option(*names, **options))

    def flag(self, *names, **options):
        """
        Build a Flag from the given names/metadata and register it.
        """
        return self.add(Flag(*names, **options))

    def lookup(self, name, /):
        """
        Return the spec registered under the canonical name, or None.
        """
        return self._specs.get(name)

    def shorthand(self, char, /):
        """
        Return the spec registered under the shorthand character, or None.
        """
        return self._shorthands.get(char)

    def _require(self, name):
        try:
            return self._specs[name]
        except KeyError:
            raise UnknownFlagError(
                f"flag '--{name}' is not defined",
                code=FaultCode.UNKNOWN_FLAG,
                input=name,
            ) from None

    def get(self, name, /):
        """
        Return the current value of a flag.

        Raises UnknownFlagError when the flag is not defined.
        """
        self._require(name)
        return self._values[name]

    def _typed(self, name, type):
        spec = self._require(name)
        if spec.type is not type:
            raise FlagTypeError(
                f"flag '--{name}' holds {_TYPENAMES.get(spec.type, getattr(spec.type, '__name__', 'value'))} values, "
                f"not {_TYPENAMES.get(type, 'bool')} values",
                code=FaultCode.FLAG_TYPE,
                flag=spec,
            )
        return self._values[name]

    def get_bool(self, name, /):
        return self._typed(name, bool)

    def get_int(self, name, /):
        return self._typed(name, int)

    def get_float(self, name, /):
        return self._typed(name, float)

    def get_string(self, name, /):
        return self._typed(name, str)

    def changed(self, name, /):
        """
        Report whether the flag was set by a parse() or set() call.
        """
        return name in self._changed

    def set(self, name, value, /):
        """
        Set a flag from its raw string form, as if it appeared on the command line.
        """
        if not isinstance(value, str):
            raise TypeError(f"{FlagSet.__typename__} values must be set from strings")
        self._assign(self._require(name), value)

    def _assign(self, spec, value, replay=False):
        self._values[spec.name] = spec.convert(value)
        self._changed.add(spec.name)
        if spec.deprecated and not replay:
            trigger(DeprecatedFlagWarning(
                f"flag '--{spec.name}' is deprecated",
                code=FaultCode.DEPRECATED_FLAG,
                flag=spec,
            ))

    def has_available_flags(self):
        """
        Report whether at least one flag would be listed in the usage table.
        """
        return any(not spec.hidden and not spec.deprecated for spec in self._specs.values())

    def parse(self, tokens, /, *, lenient=Unset, replay=False):
        """
        Parse a token slice, updating flag values.

        parameters
        - tokens: Iterable[str]
        - lenient: bool | Unset
          overrides the set's default mode for this call.
        - replay: bool
          values-only mode used when another command re-applies its segment:
          flag values change, but `args`, `unknown` and deprecation warnings
          are left alone.

        behavior
        - recognized flags are converted and stored; they stay set across calls.
        - positional tokens replace `args`; unknown flag tokens replace `unknown`.
        - strict mode raises UnknownFlagError on the first unknown flag.
        - a value-bearing flag at the end of the slice raises MissingValueError.

        returns
        - ParseResult(recognized, unknown, args)
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")

        lenient = bool(coalesce(lenient, self._lenient))
        tokens = deque(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be an iterable of strings")

        recognized = []
        unknown = []
        args = []

        while tokens:
            token = tokens.popleft()

            if token == "--":
                args.extend(tokens)
                break
            if len(token) < 2 or not token.startswith("-"):
                args.append(token)
                continue

            if token.startswith("--"):
                self._parse_long(token, tokens, lenient, replay, recognized, unknown)
            else:
                self._parse_short(token, tokens, lenient, replay, recognized, unknown)

        if not replay:
            self._args = args
            self._unknown = unknown
        return ParseResult(tuple(recognized), tuple(unknown), tuple(args))

    def _reject(self, token, lenient, unknown):
        if not lenient:
            raise UnknownFlagError(
                f"unknown flag {token!r}",
                code=FaultCode.UNKNOWN_FLAG,
                input=token,
            )
        unknown.append(token)

    def _parse_long(self, token, tokens, lenient, replay, recognized, unknown):
        name, separator, value = token[2:].partition("=")

        if (spec := self._specs.get(name)) is None:
            self._reject(token, lenient, unknown)
            # an unknown "--name value" presumably owns the next non-flag token
            if not separator and tokens and not tokens[0].startswith("-"):
                unknown.append(tokens.popleft())
            return

        if separator:
            self._assign(spec, value, replay)
        elif isinstance(spec, Flag):
            self._assign(spec, "true", replay)
        elif tokens:
            self._assign(spec, tokens.popleft(), replay)
        else:
            raise MissingValueError(
                f"flag '--{name}' needs a value",
                code=FaultCode.MISSING_VALUE,
                flag=spec,
                hint=f"pass it as --{name}=<value> or --{name} <value>",
            )
        recognized.append(spec.name)

    def _parse_short(self, token, tokens, lenient, replay, recognized, unknown):
        shorthands = token[1:]

        while shorthands:
            char, rest = shorthands[0], shorthands[1:]

            if (spec := self._shorthands.get(char)) is None:
                self._reject("-" + char, lenient, unknown)
                if rest.startswith("="):
                    return
                if not rest and tokens and not tokens[0].startswith("-"):
                    unknown.append(tokens.popleft())
                shorthands = rest
                continue

            if rest.startswith("="):
                value, rest = rest[1:], ""
            elif isinstance(spec, Flag):
                value = "true"
            elif rest:
                value, rest = rest, ""
            elif tokens:
                value = tokens.popleft()
            else:
                raise MissingValueError(
                    f"flag '-{char}' needs a value",
                    code=FaultCode.MISSING_VALUE,
                    flag=spec,
                    hint=f"pass it as -{char} <value> or -{char}<value>",
                )

            self._assign(spec, value, replay)
            recognized.append(spec.name)
            shorthands = rest

    def flag_usages(self, cols=0, /):
        """
        Return the usage table of every visible flag, wrapped to `cols` columns.

        Each line reads "  -x, --name type   description (default value)"; flags
        without a shorthand are aligned with "      --name". Defaults equal to the
        zero value of their type are not shown.
        """
        specs = self._specs.values()
        if self._sort:
            specs = sorted(specs, key=lambda spec: spec.name)

        rows = []
        for spec in specs:
            if spec.hidden or spec.deprecated:
                continue

            if spec.shorthand:
                names = f"  -{spec.shorthand}, --{spec.name}"
            else:
                names = f"      --{spec.name}"

            if isinstance(spec, Option):
                names += " " + (spec.metavar or _TYPENAMES.get(spec.type, getattr(spec.type, "__name__", "value")))

            descr = spec.descr or ""
            if spec.default:
                descr += " (default %s)" % _format(spec.default)

            rows.append((names, descr))

        if not rows:
            return ""

        width = max(len(names) for names, _ in rows)
        return "".join(
            (names.ljust(width) + "   " + wrap(width + 3, cols, descr.strip())).rstrip() + "\n"
            for names, descr in rows
        )


__all__ = (
    "Option",
    "Flag",
    "FlagSet",
    "ParseResult",
)
