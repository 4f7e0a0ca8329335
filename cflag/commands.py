"""
cflag command tree: registration, resolution, dispatch and help.

Overview
- Command
  • A node of the subcommand tree. The root usually has an empty name and
    matches the program path implicitly; every other node matches the token
    equal to its name.
  • Each node owns an optional FlagSet, its ordered children, an optional
    callback, an optional output sink and an optional help function.

- Resolution
  • Immutable outcome of one resolve() pass: the chain of matched commands
    (root first) and the command whose --help flag was set, if any.

Pass semantics (resolve)
- The first token is consumed by the node itself (program path at the root).
- The remaining tokens are split at the first token naming a direct child:
  the "before" segment is parsed by the node's own flag set in lenient mode,
  the "after" segment (child name first) is handed to the child.
- A recursive node replays its "before" segment through every ancestor's flag
  set, nearest first, so flags of outer commands may appear after a subcommand.
  Replay only updates flag values: ancestors keep their positional args and
  never show help or deprecation notices because of it.
- A node whose --help flag was set ends the pass; parse() then prints its help
  and exits with status 0.
- A deprecated node writes a notice to its output sink and keeps going.

Dispatch
- The deepest command of the chain with a callback is called with the deepest
  command and its flag set; the process-wide fallback is used when no command
  in the chain has one.

Quick example:
    >>> from cflag.commands import Command
    >>> from cflag.flags import FlagSet
    >>> root = Command()
    >>> flags = FlagSet()
    >>> flags.option("--level", type=int, default=0)
    >>> build = root.command("build", "Build the project.", flags)
    >>> @build.callback
    ... def run(command, flags):
    ...     return flags.get_int("level")
    >>> root.dispatch(root.resolve(["prog", "build", "--level", "2"]))
    2
"""
import sys
from collections.abc import Iterable
from typing import NamedTuple

from rich.console import Console

from .faults import *
from .flags import Flag, FlagSet
from .internals import IntrospectableType
from .utils import *


# Process-wide hooks shared by every tree; registry.reset() restores them.
# - helper: help function used by commands without their own (None = built-in renderer)
# - fallback: callback used when no command of the chain has one
_hooks = {
    "helper": None,
    "fallback": None,
}


class Resolution(NamedTuple):
    """
    Outcome of a resolve() pass.

    - chain: commands matched in this pass, root first, deepest last.
    - helper: the command whose --help flag was set, or None.
    """
    chain: tuple
    helper: object = None

    @property
    def target(self):
        """
        The deepest matched command, or None when nothing matched.
        """
        return self.chain[-1] if self.chain else None

    @property
    def continues(self):
        """
        True when the pass should proceed to dispatch, False when help was requested.
        """
        return self.helper is None


def _render_help(command):
    """
    Built-in help function: write the command's usage block to its output sink.
    """
    command.console().out(command.command_usage(), end="", highlight=False)


class Command(metaclass=IntrospectableType):
    """
    A node of the subcommand tree.

    Parameters
    - name: str
      Token that selects this command. Empty for a root matching the program
      path implicitly; a non-empty root name must equal the first token.
    - usage: str
      One-line usage shown in the parent's command table and on top of help.
    - flags: FlagSet | None
      Flags parsed from this command's own segment. Created on demand.

    Notes
    - Nodes are attached to exactly one parent; attaching an already attached
      node or one of its own ancestors is rejected.
    - Activation is sticky: parsing never resets it.
    """

    __introspectable__ = (
        "name",
        "usage",
        "description",
        "flags",
        "parent",
        "recursive",
        "output",
    )

    __displayable__ = (
        "name",
        "usage",
        "description",
        "recursive",
    )

    def __init__(self, name="", usage="", flags=None, /):
        if not isinstance(name, str):
            raise TypeError(f"{Command.__typename__} 'name' must be a string")
        if not isinstance(usage, str):
            raise TypeError(f"{Command.__typename__} 'usage' must be a string")
        if flags is not None and not isinstance(flags, FlagSet):
            raise TypeError(f"{Command.__typename__} 'flags' must be a flag set or None")

        self._name = name
        self._usage = usage
        self._description = ""
        self._flags = flags
        self._parent = None
        self._children = {}
        self._active = False
        self._hidden = False
        self._deprecated = False
        self._recursive = False
        self._callback = None
        self._helper = None
        self._output = None

    @property
    def children(self):
        """
        Direct subcommands in registration order.
        """
        return tuple(self._children.values())

    @property
    def root(self):
        """
        Return the topmost command of this node's tree.
        """
        child, parent = self, self._parent
        while parent:
            child, parent = parent, parent._parent
        return child

    @property
    def path(self):
        """
        Return the ancestry from the root to this command as a tuple.
        """
        path = [command := self]
        while command._parent:
            path.append(command := command._parent)
        return tuple(reversed(path))

    def add_command(self, command, /):
        """
        Attach an existing command as a direct child.

        Raises
        - InvalidCommandError: when `command` is not a Command, has an empty name,
          already has a parent, or is this command or one of its ancestors.
        - DuplicateCommandError: when a sibling already uses the same name.

        Returns the attached command.
        """
        if not isinstance(command, Command):
            raise InvalidCommandError(
                f"{Command.__typename__} children must be commands",
                code=FaultCode.INVALID_COMMAND,
                command=command,
            )
        if not command._name:
            raise InvalidCommandError(
                "subcommands must have a name",
                code=FaultCode.INVALID_COMMAND,
                command=command,
            )
        if command._parent is not None:
            raise InvalidCommandError(
                f"command {command._name!r} is already attached to {command._parent._name or 'the root'!r}",
                code=FaultCode.INVALID_COMMAND,
                command=command,
            )
        if command in self.path:
            raise InvalidCommandError(
                f"command {command._name!r} cannot be attached below itself",
                code=FaultCode.INVALID_COMMAND,
                command=command,
            )

        if self._children.setdefault(command._name, command) is not command:
            raise DuplicateCommandError(
                f"command name {command._name!r} is already in use",
                code=FaultCode.DUPLICATE_COMMAND,
                command=command,
                hint=f"pick another name or look the existing one up with lookup({command._name!r})",
            )
        command._parent = self
        return command

    def command(self, name, usage="", flags=None, /):
        """
        Create a child command and attach it.

        Returns the new command; raises like add_command().
        """
        return self.add_command(Command(name, usage, flags))

    def lookup(self, name, /):
        """
        Return the direct child registered under `name`, or None.
        """
        if not isinstance(name, str) or not name:
            return None
        return self._children.get(name)

    def is_active(self, name=Unset, /):
        """
        Report whether this command (or its direct child `name`) was matched by a pass.
        """
        if name is Unset:
            return self._active
        return (child := self.lookup(name)) is not None and child._active

    def is_hidden(self):
        return self._hidden

    def is_deprecated(self):
        return self._deprecated

    def set_description(self, description, /):
        if not isinstance(description, str):
            raise TypeError(f"{Command.__typename__} 'description' must be a string")
        self._description = description

    def mark_hidden(self):
        """
        Leave this command out of its parent's command table.
        """
        self._hidden = True

    def mark_deprecated(self):
        """
        Mark this command deprecated: it is hidden and using it prints a notice.
        """
        self._deprecated = True
        self._hidden = True

    def set_flags(self, flags, /):
        """
        Replace the flag set parsed from this command's own segment.
        """
        if flags is not None and not isinstance(flags, FlagSet):
            raise TypeError(f"{Command.__typename__} 'flags' must be a flag set or None")
        self._flags = flags

    def set_recursive(self, recursive=True, /):
        """
        Replay this command's own segment through every ancestor's flag set.
        """
        self._recursive = bool(recursive)

    def set_output(self, output, /):
        """
        Set the text stream used for help and notices (None inherits it).
        """
        if output is not None and not callable(getattr(output, "write", None)):
            raise TypeError(f"{Command.__typename__} output must be a writable text stream or None")
        self._output = output

    def set_helper(self, helper, /):
        """
        Replace the help function of this command; usable as a decorator.

        The function receives the command whose help was requested.
        """
        if helper is not None and not callable(helper):
            raise TypeError(f"{Command.__typename__} helper must be callable or None")
        self._helper = helper
        return helper

    def callback(self, callback, /):
        """
        Register the function run when this command is the deepest one with a
        callback in a pass; usable as a decorator.

        The function receives the deepest matched command and its flag set.
        A callback can be set only once.
        """
        if not callable(callback):
            raise TypeError(f"{Command.__typename__} callback must be callable")
        if self._callback is not None:
            raise TypeError(f"{Command.__typename__} callback cannot be overridden")
        self._callback = callback
        return callback

    def out(self):
        """
        Return the output stream: own sink, else the nearest ancestor's, else sys.stderr.
        """
        command = self
        while command is not None:
            if command._output is not None:
                return command._output
            command = command._parent
        return sys.stderr

    def console(self):
        """
        Return a rich console bound to this command's output stream.
        """
        return Console(file=self.out(), highlight=False)

    def _prepare(self):
        """
        Return this command's flag set, creating it and its -h/--help flag on demand.
        """
        if self._flags is None:
            self._flags = FlagSet(self._name)
        if self._flags.lookup("help") is None:
            if self._flags.shorthand("h") is None:
                self._flags.flag("-h", "--help", descr="Display help.")
            else:
                self._flags.flag("--help", descr="Display help.")
        return self._flags

    def resolve(self, arguments, /):
        """
        Run one resolution pass over `arguments` (program path first).

        Behavior
        - activates every matched command and feeds its segment to its flag set.
        - stops at the first command whose --help flag is set.
        - never raises for unknown tokens; flag value errors propagate.

        Raises
        - TypeError: when arguments is not an iterable of strings.

        Returns
        - Resolution(chain, helper)
        """
        if isinstance(arguments, str) or not isinstance(arguments, Iterable):
            raise TypeError("resolve() argument must be an iterable of strings")
        tokens = list(arguments)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("resolve() argument must be an iterable of strings")

        chain = []
        command = self
        while command is not None and tokens:
            if command._name and command._name != tokens[0]:
                break
            command._active = True
            tokens = tokens[1:]

            # first token naming a direct child wins, wherever it sits
            for index, token in enumerate(tokens):
                if token in command._children:
                    child = command._children[token]
                    before, tokens = tokens[:index], tokens[index:]
                    break
            else:
                child = None
                before, tokens = tokens, []

            flags = command._prepare()
            result = flags.parse(before, lenient=True)
            # only a --help given in this very segment counts, values outlive passes
            if "help" in result.recognized and isinstance(flags.lookup("help"), Flag) and flags.get("help"):
                return Resolution(tuple(chain), command)

            if command._recursive and before:
                for ancestor in reversed(command.path[:-1]):
                    if ancestor._flags is not None:
                        ancestor._flags.parse(before, lenient=True, replay=True)

            if command._deprecated:
                trigger(DeprecatedCommandWarning(
                    f"command {command._name!r} is deprecated",
                    code=FaultCode.DEPRECATED_COMMAND,
                    command=command,
                ), command.console())

            chain.append(command)
            command = child

        return Resolution(tuple(chain))

    def dispatch(self, resolution, /):
        """
        Run the callback selected by a resolution and return its result.

        The deepest command of the chain with a callback wins; the process-wide
        fallback is used when none has one. Help resolutions and empty chains
        dispatch nothing.
        """
        if not isinstance(resolution, Resolution):
            raise TypeError("dispatch() argument must be a resolution")
        if not resolution.continues or (target := resolution.target) is None:
            return None

        for command in reversed(resolution.chain):
            if command._callback is not None:
                return command._callback(target, target._flags)
        if (fallback := _hooks["fallback"]) is not None:
            return fallback(target, target._flags)
        return None

    def help(self):
        """
        Show this command's help with its own helper, else the process-wide
        helper, else the built-in renderer.
        """
        (self._helper or _hooks["helper"] or _render_help)(self)

    def parse(self, arguments, /):
        """
        Resolve `arguments`, then either show help and exit 0 or dispatch.

        Returns the resolution when the pass was dispatched.
        """
        resolution = self.resolve(arguments)
        if not resolution.continues:
            resolution.helper.help()
            sys.exit(0)
        self.dispatch(resolution)
        return resolution

    def command_usages(self, cols=0, /):
        """
        Return the table of visible subcommands, wrapped to `cols` columns (0 = no wrapping).

        Format
        - "  <name><pad>   <usage>" per line; names are padded to the longest
          visible name and usages hang at that column when wrapped.
        """
        visible = [child for child in self._children.values() if not child._hidden]
        if not visible:
            return ""

        width = max(len(child._name) for child in visible)
        return "".join(
            "  " + child._name.ljust(width) + "   " + wrap(2 + width + 3, cols, child._usage) + "\n"
            for child in visible
        )

    def flag_usages(self, cols=0, /):
        """
        Return the usage table of this command's flags ("" without a flag set).
        """
        if self._flags is None:
            return ""
        return self._flags.flag_usages(cols)

    def command_usage(self, cols=Unset, /):
        """
        Return the full help block of this command.

        Layout
        - "! DEPRECATED !" when deprecated
        - usage, then description (each when non-empty)
        - "Commands:" and the command table when a visible subcommand exists
        - "Flags:" and the flag table when a visible flag exists

        `cols` defaults to the output console's width on a terminal and to 0
        (no wrapping) otherwise.
        """
        if cols is Unset:
            console = self.console()
            cols = console.width if console.is_terminal else 0

        lines = []
        if self._deprecated:
            lines.append("! DEPRECATED !\n")
        if self._usage:
            lines.append(self._usage + "\n")
        if self._description:
            lines.append(self._description + "\n")
        if commands := self.command_usages(cols):
            lines.append("Commands:\n")
            lines.append(commands)
        if self._flags is not None and self._flags.has_available_flags():
            lines.append("Flags:\n")
            lines.append(self._flags.flag_usages(cols))
        return "".join(lines)


__all__ = (
    "Command",
    "Resolution",
)
