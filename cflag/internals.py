"""
Internal plumbing shared by flag specs and commands.

IntrospectableType turns a class into a self-describing one:
- __typename__ is derived from the class name (camel-case split with hyphens)
  and used in messages ("flag-set", "option", "command").
- every name listed in __introspectable__ becomes a read-only property that
  mirrors the private "_<name>" backing field.
- __repr__/__rich_repr__ are generated from __displayable__ (or
  __introspectable__ when no narrower selection is declared).
- sealed classes (sealed=True) refuse to be subclassed.
"""
import functools
import operator
import re

from .utils import Unset, coalesce, mirror, rename


class IntrospectableType(type):
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(names={'-t', '--test'}, type=<class 'int'>, default=1, ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers such as rich.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


__all__ = (
    "IntrospectableType",
)
