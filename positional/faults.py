"""
Positional faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every run-time failure.
  Codes are grouped by domain to keep logs/searches predictable.
- SetupError: configuration-time mistakes (bad builder input, contradictory
  argument sets, duplicate command names). Always raised immediately.
- CommandError: run-time failures (bad input, failed preprocessing, failed
  handlers). Carries a message, the originating command, and the nested cause
  it wraps; full_message concatenates the chain.
- report(): render a fault on a rich console (stderr by default).

Host configuration (read from __main__, all optional)
- __prog__: program name shown in fault headers.
- __codes__: mapping FaultCode -> label, to relabel numeric codes.
- __styles__: mapping of style keys (see CommandError.render) to rich styles.

Wrapping rules
- Errors are never mutated in place. Adding context means wrapping: a new
  CommandError whose nested attribute holds the original. Attaching the
  originating command means copying: copy.replace(error, command=...).
"""
from collections import defaultdict
from enum import IntEnum

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the package (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • COMMAND_ERROR, UNRECOGNIZED_COMMAND
    - input shape and values (1111x/1112x)
      • MALFORMED_INPUT, MISSING_VALUES, WRONG_ARGUMENT_COUNT, BAD_VALUE, MISSING_ARGUMENT
    - delegated user-code failures (1113x)
      • COMMAND_FAILED
    - leftovers (1114x)
      • TOO_MANY_ARGUMENTS
    """
    # --- routing errors (11xxx) ---
    COMMAND_ERROR               = 11100
    UNRECOGNIZED_COMMAND        = 11101

    # --- input errors (11xxx) ---
    MALFORMED_INPUT             = 11111
    MISSING_VALUES              = 11119
    WRONG_ARGUMENT_COUNT        = 11122
    BAD_VALUE                   = 11123
    MISSING_ARGUMENT            = 11125

    # --- delegated errors (11xxx) ---
    COMMAND_FAILED              = 11131

    # --- leftovers (11xxx) ---
    TOO_MANY_ARGUMENTS          = 11141

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class SetupError(Exception):
    """
    Invalid configuration detected while building arguments, commands or registries.

    Never raised by parse/execute; always raised synchronously, whatever the
    asynchronous mode is.
    """


class CommandError(Exception):
    """
    Run-time failure of a parse or execute call.

    Attributes
    - message: this layer's message.
    - command: the Command the failure belongs to (None until tagged).
    - nested: the wrapped cause (any exception, possibly another CommandError).
    - full_message: message, followed by ": " and the nested full message.

    str(error) is the full message.
    """
    code = FaultCode.COMMAND_ERROR
    title = "command error"

    def __init__(self, message, /, command=None, nested=None):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.command = command
        self.nested = nested

    @property
    def full_message(self):
        if self.nested is None:
            return self.message
        if isinstance(self.nested, CommandError):
            nested = self.nested.full_message
        else:
            nested = str(self.nested)
        return f"{self.message}: {nested}" if nested else self.message

    def __str__(self):
        return self.full_message

    def __replace__(self, /, **overrides):
        """
        Return a copy of this fault with the given fields replaced.

        Supported fields are message, command and nested. The copy keeps the
        original cause and traceback so re-raising it reads naturally.
        """
        if unknown := overrides.keys() - {"message", "command", "nested"}:
            raise TypeError(f"unexpected field(s) for {type(self).__name__}: {", ".join(sorted(unknown))}")
        replaced = type(self)(
            overrides.get("message", self.message),
            command=overrides.get("command", self.command),
            nested=overrides.get("nested", self.nested),
        )
        replaced.__cause__ = self.__cause__
        return replaced.with_traceback(self.__traceback__)

    def render(self, *, colorful=False, fancy=False):
        """
        Build a rich renderable for this fault.

        Layout
        - header: "[ prog — code | title ]"
        - body: the full message
        - hint: the usage of the originating command, when known

        Palette keys
        - prog-name, code, error-title, error-message, hint-arrow, hint
        """
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        prog = coalesce(getattr(main, "__prog__", Unset), getattr(self.command, "name", "positional"))

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        parts = [text(self.full_message, "error-message")]
        if self.command is not None:
            for line in self.command.usage().splitlines():
                parts.append(Text.assemble(text(" → ", "hint-arrow"), text(line, "hint")))

        if fancy:
            return Panel(Group(*parts), title=header, title_align="left")
        return Group(header, *parts)

    def __rich__(self):
        return self.render()


class MalformedInputError(CommandError):
    code = FaultCode.MALFORMED_INPUT
    title = "malformed input"


class MissingArgumentError(CommandError):
    code = FaultCode.MISSING_ARGUMENT
    title = "missing argument"


class MissingValuesError(CommandError):
    code = FaultCode.MISSING_VALUES
    title = "missing values"


class BadValueError(CommandError):
    code = FaultCode.BAD_VALUE
    title = "bad value"


class WrongArgumentCountError(CommandError):
    code = FaultCode.WRONG_ARGUMENT_COUNT
    title = "wrong number of arguments"


class TooManyArgumentsError(CommandError):
    code = FaultCode.TOO_MANY_ARGUMENTS
    title = "too many arguments"


class UnrecognizedCommandError(CommandError):
    code = FaultCode.UNRECOGNIZED_COMMAND
    title = "unrecognized command"


class CommandFailedError(CommandError):
    code = FaultCode.COMMAND_FAILED
    title = "command failed"


def report(fault, /, *, file=Unset, colorful=False, fancy=False):
    """
    print a fault on a rich console.

    parameters
    - fault: CommandError (or subclass).
    - file: optional text stream; defaults to the package stderr console.
    - colorful: apply the style palette.
    - fancy: wrap the fault in a Panel titled with its header.
    """
    if not isinstance(fault, CommandError):
        raise TypeError("report() argument must be a command error")
    target = console if file is Unset else Console(file=file)
    target.print(fault.render(colorful=colorful, fancy=fancy))


__all__ = (
    "FaultCode",
    "SetupError",
    "CommandError",
    "MalformedInputError",
    "MissingArgumentError",
    "MissingValuesError",
    "BadValueError",
    "WrongArgumentCountError",
    "TooManyArgumentsError",
    "UnrecognizedCommandError",
    "CommandFailedError",
    "report",
)
