"""
cflag utilities (internal helpers, carefully exposed)

Scope
- Core building blocks used across the package for consistent semantics and UX.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the flags/commands layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks and help.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) with copies
    for containers to discourage accidental mutation of public API state.

- wrap(indent, width, text)
  • Hanging-indent wrapper used by the usage tables of commands and flag sets.

Quick examples
    >>> one = coalesce(Unset, "fallback")  # "fallback"
    >>> two = coalesce(None, "fallback")    # None  (None is preserved)
    >>> class X:
    ...     _items = [1, 2]
    ...     items = mirror("items")
    ... X().items
    [1, 2]
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value, but the API needs a way
    to distinguish “not provided” from “provided as None”. A single instance,
    Unset, is exposed for use as the default in internal parameters.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when UnsetType appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve an internal Unset sentinel to a concrete default.

    This returns the given object unless it is the Unset sentinel, in which case
    the provided default is returned. Falsey values like None, 0, "", or [] are
    preserved as-is; they are not treated as “unset”.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - Function form: rename(callable, name) -> callable
    - Decorator form: rename(name) -> (decorator)

    Some built-in or C-implemented callables are not updatable and raise TypeError.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Recursively copy container values, processing nested items.

    - Sequence (non-string): new list with each element processed.
    - Mapping: new dict, keys preserved, values processed.
    - Set: new set with each element processed.
    - Anything else: returned as-is.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return set(map(_immortalize, object))
    else:
        return coalesce(object)


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads from "_{name}" on the instance and returns a
    fresh copy for container types, so callers cannot mutate internal state
    through the public API.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


def _split(text, limit, slop, /):
    """
    Split text on whitespace into a head of at most `limit` characters and the rest.

    The head may run `slop` characters over `limit` when that swallows the whole
    text, which avoids a short orphan word on the final line. An embedded newline
    before the last blank wins over the blank.
    """
    if limit + slop > len(text):
        return text, ""

    blank = max(text.rfind(char, 0, limit) for char in " \t\n")
    if blank <= 0:
        return text, ""

    newline = text.rfind("\n", 0, limit)
    if 0 < newline < blank:
        return text[:newline], text[newline + 1:]
    return text[:blank], text[blank + 1:]


def wrap(indent, width, text, /):
    """
    Wrap text to `width` columns with a hanging indent of `indent` spaces.

    Layout rules
    - The first line is not indented; the caller already positioned the cursor.
    - width == 0 disables wrapping; embedded newlines are still re-indented.
    - When fewer than 24 columns remain after the indent, the whole block moves
      to the next line with a fixed indent of 16; if even that leaves fewer than
      24 columns, the text is not wrapped at all.
    - Five columns of slop keep short trailing words on the previous line.

    Examples
    - wrap(4, 0, "a\\nb") -> "a\\n    b"
    """
    if width == 0:
        return text.replace("\n", "\n" + " " * indent)

    available = width - indent
    result = ""

    # Not enough room beside the names: put the text on its own block.
    if available < 24:
        indent = 16
        available = width - indent
        result += "\n" + " " * indent
    if available < 24:
        return text.replace("\n", result)

    slop = 5
    available -= slop

    head, text = _split(text, available, slop)
    result += head.replace("\n", "\n" + " " * indent)

    while text:
        head, text = _split(text, available, slop)
        result += "\n" + " " * indent + head.replace("\n", "\n" + " " * indent)

    return result


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you still
need to distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "wrap",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
