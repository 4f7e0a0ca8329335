"""
cflag faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain to keep copy consistent
  and make logs/searches predictable.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault.

Integration
- Registration code raises structural errors (invalid/duplicate commands) to the
  immediate caller at configuration time.
- Flag sets raise flag errors from their own parse/query operations.
- Warnings are either rendered on a given rich console (command deprecation
  notices go to the command's output sink) or emitted through `warnings`.
"""
import inspect
import warnings
from abc import ABC
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes used across the package (stable identifiers).

    grouping (by high-level domain)
    - registration (2110x)
      • INVALID_COMMAND, DUPLICATE_COMMAND
    - flags (2111x)
      • INVALID_FLAG, DUPLICATE_FLAG, UNKNOWN_FLAG, MISSING_VALUE,
        INVALID_VALUE, FLAG_TYPE
    - warnings (2211x)
      • DEPRECATED_COMMAND, DEPRECATED_FLAG
    """
    # --- registration errors (21xxx) ---
    INVALID_COMMAND   = 21101
    DUPLICATE_COMMAND = 21102

    # --- flag errors (21xxx) ---
    INVALID_FLAG      = 21111
    DUPLICATE_FLAG    = 21112
    UNKNOWN_FLAG      = 21113
    MISSING_VALUE     = 21114
    INVALID_VALUE     = 21115
    FLAG_TYPE         = 21116

    # --- warnings (22xxx) ---
    DEPRECATED_COMMAND = 22111
    DEPRECATED_FLAG    = 22112


def _render(fault, kind, /):
    """
    build the plain renderable shared by exceptions and warnings.

    layout
    - "<kind>: <message>" on the first line
    - " → <hint>" on the second line when a hint was supplied
    """
    message = Text.assemble(f"{kind}: ", str(fault.message))
    if hint := fault.options.get("hint"):
        return Group(message, Text.assemble(" → ", str(hint)))
    return message


class CommandException(Exception):
    """
    base class of every error raised by cflag.

    the message is kept verbatim and the extra context (code, hint, command,
    flag, token, ...) is stored in a read-only `options` mapping.
    """
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _render(self, "error")

    def __trigger__(self, console=None):
        raise self from None


class InvalidCommandError(CommandException, ValueError): ...
class DuplicateCommandError(CommandException, ValueError): ...

class FlagError(CommandException): ...
class InvalidFlagError(FlagError, ValueError): ...
class DuplicateFlagError(FlagError, ValueError): ...
class UnknownFlagError(FlagError, LookupError): ...
class MissingValueError(FlagError, ValueError): ...
class InvalidValueError(FlagError, ValueError): ...
class FlagTypeError(FlagError, TypeError): ...


class CommandWarning(ABC, Warning):
    """
    base class of every warning emitted by cflag.

    warnings never stop parsing: they are printed on a console when one is given
    (the command's output sink) and go through `warnings.warn` otherwise.
    """
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _render(self, "warning")

    def __trigger__(self, console=None):
        if console is None:
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)


class DeprecatedCommandWarning(CommandWarning): ...
class DeprecatedFlagWarning(CommandWarning): ...


def trigger(fault, /, console=None):
    """
    surface a fault.

    contract
    - fault must provide a __trigger__ method (see base classes).
    - exceptions are always raised.
    - warnings are printed on `console` when given, or emitted via `warnings`.
    """
    if not hasattr(fault, "__trigger__") or not callable(fault.__trigger__):
        raise TypeError("trigger() argument must have a __trigger__ method")
    fault.__trigger__(console)


__all__ = (
    "FaultCode",
    "CommandException",
    "InvalidCommandError",
    "DuplicateCommandError",
    "FlagError",
    "InvalidFlagError",
    "DuplicateFlagError",
    "UnknownFlagError",
    "MissingValueError",
    "InvalidValueError",
    "FlagTypeError",
    "CommandWarning",
    "DeprecatedCommandWarning",
    "DeprecatedFlagWarning",
    "trigger",
)
