"""
Positional command layer: argument-set resolution, handlers and error routing.

What this module provides
- Command: a named unit owning one or more alternative argument sets. It
  resolves a token list to the right set, parses every argument, hands the
  result to its handler and routes any failure through one error path.

Argument sets
- Each set is an ordered list of Arguments describing one acceptable shape.
- add_argset() enforces, against every set already attached plus the new one:
  1. no two sets share the same length,
  2. at most one optional argument per set, and it is the last one,
  3. at most one varargs argument per set, and it is the last one,
  4. at most one set of the command holds a varargs argument,
  5. that set is strictly the largest of the command.

Resolution (parse)
- Zero or one set: used unconditionally; presence errors blame arguments.
- Several sets: the set whose length equals the token count exactly, else a
  coarse WrongArgumentCountError (positional ambiguity makes per-argument
  blame unreliable). A varargs set of several is therefore only reached with
  exactly as many tokens as it has arguments.
- Tokens left over after the matched set raise TooManyArgumentsError.

ParsedArguments
- A dict with one key per argument of the matched set, plus RAW ("_") holding
  the raw token list as given.

Execution (execute)
- Strings are tokenized (runs of whitespace, no empty tokens).
- Handler failures are wrapped as CommandFailedError("Command failed").
- Any failure goes to the error handler when one is configured (its return
  value becomes the result), otherwise to the caller.
- In asynchronous mode parse() and execute() return coroutines; every user
  function may return an awaitable, awaited in order, and even synchronous
  failures surface as rejections.

Quick start
    from positional import Argument, Command

    roll = (
        Command("roll", description="roll some dice")
        .add_argset([Argument("dice").preprocess(int)])
        .add_argset([Argument("dice").preprocess(int), Argument("sides").preprocess(int)])
        .handler(lambda args: f"{args['dice']}d{args.get('sides', 6)}")
    )
    roll.execute("roll 2 20".split()[1:])  # '2d20'
"""
import copy
import logging
from collections import deque

from .arguments import Argument, RAW
from .faults import *
from .internals import *
from .utils import *

logger = logging.getLogger(__name__)


class Command(metaclass=SpecType):
    """
    Named, invocable unit built from alternative argument sets.

    Properties (read-only)
    - name: non-empty string.
    - description: optional short description (None when not given).
    - argsets: copies of the attached argument sets, in attach order.
    - is_async: current calling convention of parse()/execute().

    Builder
    - add_argset(argset), handler(func), error_handler(func),
      asynchronous(enabled=True); each returns the Command.
    """

    __introspectable__ = (
        "name",
        "description",
        "argsets",
        "is_async",
    )

    def __init__(self, name, /, description=Unset):
        if not isinstance(name, str):
            raise SetupError(f"{type(self).__typename__} 'name' was {type(name).__name__!r}, expected 'str'")
        elif not name.strip():
            raise SetupError(f"{type(self).__typename__} 'name' cannot be empty")

        if not isinstance(description, str | None | Unset):
            raise SetupError(f"{type(self).__typename__} 'description' must be a string or None")
        elif isinstance(description, str) and not (description := description.strip()):
            raise SetupError(f"{type(self).__typename__} 'description' cannot be empty")

        self._name = name
        self._description = coalesce(description)
        self._argsets = []
        self._handler = None
        self._error_handler = None
        self._is_async = False

    def add_argset(self, argset, /):
        """
        Attach one more acceptable argument shape.

        Raises
        - SetupError when argset is not a list/tuple of Arguments, repeats an
          argument name, or breaks one of the module-level argument-set rules.
        """
        typename = type(self).__typename__
        if not isinstance(argset, list | tuple):
            raise SetupError(f"{typename} 'argset' was {type(argset).__name__!r}, expected a list of arguments")
        elif not all(isinstance(argument, Argument) for argument in argset):
            raise SetupError(f"{typename} 'argset' must only contain arguments")

        argset = list(argset)
        if claimed := [argument.name for argument in argset if argument._owner not in (None, self)]:
            raise SetupError(
                f"{typename} {self._name!r} argument(s) already attached to another command: {", ".join(claimed)}"
            )

        names = [argument.name for argument in argset]
        if len(set(names)) != len(names):
            raise SetupError(f"{typename} {self._name!r} argument set repeats an argument name")

        if any(len(existing) == len(argset) for existing in self._argsets):
            raise SetupError(
                f"{typename} {self._name!r} argument sets are ambiguous: "
                f"another set already takes {len(argset)} argument(s)"
            )

        for attribute, label in (("is_optional", "optional"), ("is_varargs", "varargs")):
            positions = [index for index, argument in enumerate(argset) if getattr(argument, attribute)]
            if len(positions) > 1:
                raise SetupError(f"{typename} {self._name!r} argument set has more than one {label} argument")
            if positions and positions[0] != len(argset) - 1:
                raise SetupError(f"{typename} {self._name!r} {label} argument must be the last of its set")

        argsets = [*self._argsets, argset]
        varsets = [candidate for candidate in argsets if _variadic(candidate)]
        if len(varsets) > 1:
            raise SetupError(f"{typename} {self._name!r} can only have one argument set with a varargs argument")
        if varsets and any(len(other) >= len(varsets[0]) for other in argsets if other is not varsets[0]):
            raise SetupError(
                f"{typename} {self._name!r} argument set with a varargs argument must be the largest set"
            )

        for argument in argset:
            argument._owner = self
        self._argsets.append(argset)
        self._propagate()
        return self

    def handler(self, func, /):
        """
        Install the function receiving (parsed, *forward) after a successful parse.
        """
        self._handler = _callable(self, "handler", func)
        return self

    def error_handler(self, func, /):
        """
        Install the function receiving (error, *forward) for any parse or handler failure.

        Its return value becomes the result of execute(); nothing is re-raised
        unless it raises itself.
        """
        self._error_handler = _callable(self, "error_handler", func)
        return self

    def asynchronous(self, enabled=True, /):
        """
        Switch the calling convention and push it down to every owned argument.
        """
        if not isinstance(enabled, bool):
            raise SetupError(
                f"{type(self).__typename__} asynchronous() 'enabled' was {type(enabled).__name__!r}, expected 'bool'"
            )
        self._is_async = enabled
        self._propagate()
        return self

    def parse(self, tokens, /):
        """
        Resolve tokens against the argument sets and return the ParsedArguments dict.

        The given list is never mutated. Failures are CommandErrors tagged with
        this command. In asynchronous mode a coroutine is returned instead.
        """
        return drive(self._parse(tokens), self._is_async)

    def execute(self, parts, /, *forward):
        """
        Parse parts (a token list or a raw string) and run the handler.

        Parameters
        - parts: list/tuple of tokens, or a string tokenized on whitespace.
        - *forward: extra values passed untouched to the handler or error handler.

        Returns
        - the handler's (or error handler's) result, None without a handler;
          a coroutine resolving to it in asynchronous mode.
        """
        return drive(self._execute(parts, forward), self._is_async)

    def usage(self):
        """
        Return one line per argument set: the name followed by each argument usage.
        """
        if not self._argsets:
            return self._name
        return "\n".join(
            " ".join([self._name, *(argument.usage() for argument in argset)]) for argset in self._argsets
        )

    def _propagate(self):
        for argset in self._argsets:
            for argument in argset:
                argument.asynchronous(self._is_async)

    def _tag(self, error):
        if error.command is not None:
            return error
        return copy.replace(error, command=self)

    def _select(self, count):
        if len(self._argsets) <= 1:
            return self._argsets[0] if self._argsets else []

        for argset in self._argsets:
            if len(argset) == count:
                return argset

        logger.debug("command %r has no argument set for %d token(s)", self._name, count)
        raise WrongArgumentCountError("Wrong number of arguments")

    def _parse(self, tokens):
        try:
            return (yield from self._resolve(tokens))
        except CommandError as error:
            raise self._tag(error) from error.__cause__

    def _resolve(self, tokens):
        if not isinstance(tokens, list | tuple):
            raise MalformedInputError(f"tokens was {type(tokens).__name__!r}, expected 'list[str]'")
        for token in tokens:
            if not isinstance(token, str):
                raise MalformedInputError(f"tokens must be strings, not {type(token).__name__!r}")

        remaining = deque(tokens)
        parsed = {RAW: list(tokens)}

        argset = self._select(len(tokens))
        logger.debug("command %r resolved %d token(s) to a set of %d argument(s)", self._name, len(tokens), len(argset))

        # Sequential on purpose: the varargs argument (always last) takes
        # whatever the previous arguments left in the buffer.
        for argument in argset:
            if argument.is_varargs:
                value = list(remaining)
                remaining.clear()
            else:
                value = remaining.popleft() if remaining else None
            parsed[argument.name] = yield from argument._parse(value)

        if remaining:
            raise TooManyArgumentsError(f"Too many arguments: {", ".join(f"'{token}'" for token in remaining)}")

        return parsed

    def _execute(self, parts, forward):
        try:
            parsed = yield from self._parse(tokenize(parts) if isinstance(parts, str) else parts)
            if self._handler is None:
                return None
            try:
                return (yield self._handler(parsed, *forward))
            except Exception as error:
                raise CommandFailedError("Command failed", command=self, nested=error) from error
        except CommandError as error:
            if self._error_handler is None:
                raise
            return (yield from self._route(error, forward))

    def _route(self, error, forward):
        logger.debug("command %r routes '%s' to its error handler", self._name, error)
        try:
            return (yield self._error_handler(error, *forward))
        except CommandError as failure:
            raise self._tag(failure) from failure.__cause__
        except Exception as failure:
            raise CommandFailedError("Error handler failed", command=self, nested=failure) from failure


def _variadic(argset, /):
    return any(argument.is_varargs for argument in argset)


def _callable(command, field, func, /):
    if not callable(func):
        raise SetupError(
            f"{type(command).__typename__} {field}() 'func' was {type(func).__name__!r}, expected a callable"
        )
    return func


__all__ = (
    "Command",
)
