"""
Positional command registry: line-oriented dispatch over uniquely named commands.

What this module provides
- CommandRegistry: owns a name -> Command mapping (insertion ordered) and
  dispatches whole command lines to it.

Dispatch (execute)
- A string is tokenized on whitespace; the first token names the command and
  the remaining tokens go to that command's execute().
- Unknown names go to the default handler, called as (tokens, *forward) with
  the full token list (command name included). Without a default handler an
  unknown command is a no-op.
- The synthesized help command receives the command mapping as an extra
  leading forwarded value: its handler is called as
  (parsed, commands, *forward).

Modes
- asynchronous() is pushed down to every owned command (and their
  arguments), now and on every later add(); last write wins.

Quick start
    from positional import Argument, Command, CommandRegistry

    registry = CommandRegistry()
    registry.add(Command("ping").handler(lambda args: "pong"))
    registry.default_handler()
    registry.help_handler()

    registry.execute("ping")        # 'pong'
    registry.execute("help ping")   # 'ping'
    registry.execute("pong")        # raises UnrecognizedCommandError
"""
import logging
from types import MappingProxyType

from .arguments import Argument
from .commands import Command
from .faults import *
from .internals import *
from .utils import *

logger = logging.getLogger(__name__)


class CommandRegistry(metaclass=SpecType):
    """
    Collection of uniquely named commands with dispatch and help pathways.

    Properties (read-only)
    - commands: copy of the name -> Command mapping, in insertion order.
    - is_async: current calling convention of execute()/help().
    """

    __introspectable__ = (
        "commands",
        "is_async",
    )

    def __init__(self):
        self._commands = {}
        self._default_handler = None
        self._help = None
        self._is_async = False

    def add(self, command, /):
        """
        Register a command under its name and apply the registry mode to it.

        Raises
        - SetupError when command is not a Command or its name is taken.
        """
        if not isinstance(command, Command):
            raise SetupError(
                f"{type(self).__typename__} 'command' was {type(command).__name__!r}, expected a command"
            )
        if command.name in self._commands:
            raise SetupError(f"Duplicate command {command.name!r}")
        self._commands[command.name] = command
        command.asynchronous(self._is_async)
        return self

    def asynchronous(self, enabled=True, /):
        """
        Switch the calling convention of the registry and every owned command.
        """
        if not isinstance(enabled, bool):
            raise SetupError(
                f"{type(self).__typename__} asynchronous() 'enabled' was {type(enabled).__name__!r}, expected 'bool'"
            )
        self._is_async = enabled
        for command in self._commands.values():
            command.asynchronous(enabled)
        return self

    def default_handler(self, func=Unset, /):
        """
        Install the handler for unrecognized command names.

        Without func, a built-in that raises UnrecognizedCommandError is
        installed.
        """
        if func is not Unset and not callable(func):
            raise SetupError(
                f"{type(self).__typename__} default_handler() 'func' was {type(func).__name__!r}, expected a callable"
            )
        self._default_handler = coalesce(func, _unrecognized)
        return self

    def help_handler(self, func=Unset, /):
        """
        Create (once) and configure the help command.

        The help command is a regular Command named "help" with one optional
        argument, "command". Without func, the built-in renders the usage of
        the named command, an "Unknown command" message, or the usage of every
        command when no name is given.
        """
        if func is not Unset and not callable(func):
            raise SetupError(
                f"{type(self).__typename__} help_handler() 'func' was {type(func).__name__!r}, expected a callable"
            )
        if self._help is None:
            helper = Command("help", description="show command usage")
            helper.add_argset([Argument("command").optional()])
            self.add(helper)
            self._help = helper
        self._help.handler(coalesce(func, _describe))
        return self

    def execute(self, parts, /, *forward):
        """
        Dispatch a command line.

        Parameters
        - parts: raw string, or list/tuple of tokens (first token is the name).
        - *forward: extra values passed untouched to the selected handler.

        Returns
        - the result of the selected command or default handler, None when
          nothing handles the line; a coroutine resolving to it in
          asynchronous mode.
        """
        return drive(self._execute(parts, forward), self._is_async)

    def help(self, name=None, /, *forward):
        """
        Shortcut for executing "help <name>" (or "help"); no-op without a help command.
        """
        return drive(self._show(name, forward), self._is_async)

    def _execute(self, parts, forward):
        if isinstance(parts, str):
            tokens = tokenize(parts)
        elif isinstance(parts, list | tuple) and all(isinstance(part, str) for part in parts):
            tokens = list(parts)
        else:
            raise MalformedInputError(f"command line was {type(parts).__name__!r}, expected 'str' or 'list[str]'")

        name = tokens[0] if tokens else None
        if (command := self._commands.get(name)) is not None:
            logger.debug("dispatching %r to command %r", tokens, name)
            if command is self._help:
                forward = (MappingProxyType(self._commands), *forward)
            return (yield from command._execute(tokens[1:], forward))

        if self._default_handler is None:
            logger.debug("no command named %r and no default handler", name)
            return None

        logger.debug("dispatching %r to the default handler", tokens)
        try:
            return (yield self._default_handler(tokens, *forward))
        except CommandError:
            raise
        except Exception as error:
            raise CommandFailedError("Default handler failed", nested=error) from error

    def _show(self, name, forward):
        if self._help is None:
            return None
        tokens = [self._help.name] if name is None else [self._help.name, name]
        return (yield from self._execute(tokens, forward))


def _unrecognized(tokens, /, *forward):
    raise UnrecognizedCommandError(f"Unrecognized command '{tokens[0] if tokens else ""}'")


def _describe(parsed, commands, /, *forward):
    if name := parsed["command"]:
        if (command := commands.get(name)) is None:
            return f"Unknown command '{name}'"
        return command.usage()
    return "\n".join(command.usage() for command in commands.values())


__all__ = (
    "CommandRegistry",
)
