r"""
Positional argument specifications.

Overview
- Argument: one named slot of a command's positional signature. It turns zero,
  one or many raw string tokens into zero, one or many final values, enforcing
  presence rules and applying an optional preprocessor per value.

Builder (each call validates its input, raises SetupError on mismatch, and
returns the Argument so calls chain)
  • optional(enabled=True): absence yields None (single) or [] (varargs).
  • varargs(enabled=True): consume the remaining tokens as a list.
  • preprocess(func): install a transform/validator for each raw value.
  • asynchronous(enabled=True): parse() returns a coroutine and preprocessor
    results may be awaitables.

Preprocessors
- Receive the raw string and return the value to store.
- Returning None keeps the raw value unchanged.
- Raising (or, asynchronously, failing the returned awaitable) rejects the
  value; the failure is wrapped into BadValueError:
    "Bad <name> value 'raw'"      (single)
    "Bad <name>(3) value 'raw'"   (third element of a varargs argument)

Usage strings
- <name>                           required
- [name]                           optional
- <name_1> [name_2] ... [name_n]   varargs
- [name_1] [name_2] ... [name_n]   optional varargs

Quick example:
    >>> from positional import Argument
    >>> count = Argument("count").preprocess(int)
    >>> count.parse("3")
    3
    >>> Argument("tags").varargs().optional().usage()
    '[tags_1] [tags_2] ... [tags_n]'
"""
import logging

from .faults import *
from .internals import *
from .utils import *

logger = logging.getLogger(__name__)

RAW = "_"
"""Reserved ParsedArguments key holding the raw token list as given."""


class Argument(metaclass=SpecType):
    """
    Named positional argument.

    Properties (read-only; change them through the builder calls)
    - name: non-empty string used in messages and as the ParsedArguments key.
    - is_optional, is_varargs, is_async: bool.
    - preprocessor: the installed callable, or None.

    Ownership
    - An Argument belongs to exactly one Command once attached; attaching it
      to a second Command raises SetupError. The owning Command re-applies its
      asynchronous mode to it on every add_argset().
    """

    __introspectable__ = (
        "name",
        "is_optional",
        "is_varargs",
        "is_async",
        "preprocessor",
    )

    def __init__(self, name, /):
        if not isinstance(name, str):
            raise SetupError(f"{type(self).__typename__} 'name' was {type(name).__name__!r}, expected 'str'")
        elif not name.strip():
            raise SetupError(f"{type(self).__typename__} 'name' cannot be empty")
        elif name == RAW:
            raise SetupError(f"{type(self).__typename__} 'name' cannot be the reserved key {RAW!r}")

        self._name = name
        self._is_optional = False
        self._is_varargs = False
        self._is_async = False
        self._preprocessor = None
        self._owner = None

    def optional(self, enabled=True, /):
        """
        Allow this argument to be absent.

        Absent optional arguments are still present in the parsed output, as
        None (single) or an empty list (varargs). Only the last argument of a
        set may be optional (enforced by Command.add_argset).
        """
        self._is_optional = _flag(self, "optional", enabled)
        return self

    def varargs(self, enabled=True, /):
        """
        Let this argument consume every remaining token as a list.

        Each element passes through the preprocessor on its own. A varargs
        argument must be the last one of its set (enforced by Command.add_argset).
        """
        self._is_varargs = _flag(self, "varargs", enabled)
        return self

    def asynchronous(self, enabled=True, /):
        """
        Switch parse() to the asynchronous calling convention.

        Owning commands and registries overwrite this setting whenever their
        own mode is applied.
        """
        self._is_async = _flag(self, "asynchronous", enabled)
        return self

    def preprocess(self, func, /):
        """
        Install the per-value transform/validator.

        The return value of func replaces the raw value, None keeps the raw
        value, and raising rejects it with a readable, argument-named error.
        """
        if not callable(func):
            raise SetupError(f"{type(self).__typename__} 'func' was {type(func).__name__!r}, expected a callable")
        self._preprocessor = func
        return self

    def parse(self, value=None, /):
        """
        Validate and transform raw input.

        Parameters
        - value: None (absent), a string, or, for varargs arguments, a list or
          tuple of strings. A bare string given to a varargs argument is
          treated as a one-element list.

        Returns
        - the preprocessed value, None, or a list of values (varargs); in
          asynchronous mode, a coroutine resolving to the same thing.

        Raises
        - MalformedInputError, MissingArgumentError, MissingValuesError,
          BadValueError. In asynchronous mode nothing is raised here; the
          returned coroutine fails instead.
        """
        return drive(self._parse(value), self._is_async)

    def usage(self):
        """
        Return the human-readable rendering of this argument.
        """
        name = self._name
        if self._is_varargs:
            first = f"[{name}_1]" if self._is_optional else f"<{name}_1>"
            return f"{first} [{name}_2] ... [{name}_n]"
        return f"[{name}]" if self._is_optional else f"<{name}>"

    def _parse(self, value):
        """
        Steps of parse(); see positional.internals for how they are driven.
        """
        if self._is_varargs:
            if isinstance(value, str):
                value = [value]
            elif value is not None and not isinstance(value, list | tuple):
                raise MalformedInputError(
                    f"<{self._name}> value was {type(value).__name__!r}, expected 'str' or 'list[str]'"
                )

            if not value:
                if not self._is_optional:
                    raise MissingValuesError(f"<{self._name}> requires at least one value")
                return []

            for item in value:
                if not isinstance(item, str):
                    raise MalformedInputError(
                        f"<{self._name}> values must be strings, not {type(item).__name__!r}"
                    )

            results = []
            for index, item in enumerate(value, 1):
                results.append((yield from self._preprocess(item, index)))
            return results

        if value is None:
            if not self._is_optional:
                raise MissingArgumentError(f"Missing argument <{self._name}>")
        elif not isinstance(value, str):
            raise MalformedInputError(f"<{self._name}> value was {type(value).__name__!r}, expected 'str'")

        return (yield from self._preprocess(value))

    def _preprocess(self, value, index=None):
        # Falsy input on an optional argument means "not given".
        if not value and self._is_optional:
            return None
        if self._preprocessor is None:
            return value

        try:
            returned = yield self._preprocessor(value)
        except Exception as error:
            position = "" if index is None else f"({index})"
            logger.debug("preprocessor of <%s>%s rejected %r: %r", self._name, position, value, error)
            raise BadValueError(f"Bad <{self._name}>{position} value '{value}'", nested=error) from error

        return value if returned is None else returned


def _flag(argument, builder, enabled, /):
    if not isinstance(enabled, bool):
        raise SetupError(
            f"{type(argument).__typename__} {builder}() 'enabled' was {type(enabled).__name__!r}, expected 'bool'"
        )
    return enabled


__all__ = (
    "Argument",
    "RAW",
)
