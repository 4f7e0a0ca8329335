"""
Process-wide command tree.

Small programs rarely need to hold on to a root command: the functions of this
module forward to one implicit, anonymous root that matches the program path.
reset() discards that tree together with the process-wide help function and
fallback callback, which is mostly useful between tests.

Quick example:
    >>> import cflag
    >>> flags = cflag.FlagSet()
    >>> flags.option("--test1", type=int, default=1)
    >>> foo = cflag.command("foo", "Run foo.", flags)
    >>> @cflag.fallback
    ... def run(command, flags):
    ...     print(command.name, flags.get_int("test1"))
    >>> cflag.parse(["prog", "foo", "--test1", "11"])
    foo 11
"""
import sys

from . import commands
from .commands import Command
from .flags import FlagSet
from .utils import Unset

_root = Command()


def root():
    """
    Return the implicit root command.
    """
    return _root


def reset():
    """
    Discard the process-wide tree, help function and fallback callback.
    """
    global _root
    _root = Command()
    commands._hooks.update(helper=None, fallback=None)


def add_command(command, /):
    return _root.add_command(command)


def command(name, usage="", flags=None, /):
    return _root.command(name, usage, flags)


def set_description(description, /):
    _root.set_description(description)


def get_description():
    return _root.description


def set_output(output, /):
    _root.set_output(output)


def is_active(name=Unset, /):
    return _root.is_active(name)


def lookup(name, /):
    return _root.lookup(name)


def command_usages(cols=0, /):
    return _root.command_usages(cols)


def flag_usages(cols=0, /):
    return _root.flag_usages(cols)


def command_usage(cols=Unset, /):
    return _root.command_usage(cols)


def fallback(callback, /):
    """
    Register the callback used when no matched command has one; usable as a decorator.

    The callback receives the deepest matched command and its flag set.
    """
    if not callable(callback):
        raise TypeError("fallback() argument must be callable")
    commands._hooks["fallback"] = callback
    return callback


def helper(function, /):
    """
    Replace the built-in help renderer for every command without its own helper.

    The function receives the command whose help was requested.
    """
    if not callable(function):
        raise TypeError("helper() argument must be callable")
    commands._hooks["helper"] = function
    return function


def parse(arguments=Unset, /, flags=Unset):
    """
    Parse the process arguments (or `arguments`) against the implicit tree.

    `flags` becomes the root's flag set when given. Shows help and exits when
    requested, otherwise dispatches and returns the resolution.
    """
    if flags is not Unset:
        if not isinstance(flags, FlagSet):
            raise TypeError("parse() flags must be a flag set")
        _root.set_flags(flags)
    return _root.parse(sys.argv if arguments is Unset else arguments)


__all__ = (
    "root",
    "reset",
    "add_command",
    "command",
    "set_description",
    "get_description",
    "set_output",
    "is_active",
    "lookup",
    "command_usages",
    "flag_usages",
    "command_usage",
    "fallback",
    "helper",
    "parse",
)
