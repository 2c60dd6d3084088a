"""
Internal machinery shared by arguments, commands and registries.

SpecType
- Metaclass giving every spec class a hyphenated __typename__, read-only
  properties for the names in __introspectable__, and stable
  __repr__/__rich_repr__ implementations.

Step generators and strategies
- Every parse/execute algorithm in the package is written once, as a generator
  ("steps") that yields each value produced by user code (preprocessors,
  handlers, error handlers) and receives back the value to continue with.
- settle(steps) drives such a generator synchronously: yielded values are sent
  back unchanged, so results and exceptions surface immediately.
- asettle(steps) drives it inside a coroutine: yielded awaitables are awaited
  one at a time, in order, and their failures are thrown back into the
  generator at the point that produced them.
- drive(steps, asynchronous) picks the strategy. In asynchronous mode nothing
  runs before the returned coroutine is awaited, so even synchronous failures
  surface as rejections.
"""
import functools
import inspect
import operator
import re

from .utils import *


class SpecType(type):
    """
    Metaclass that makes specs introspectable.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __introspectable__ names are exposed as read-only properties over "_{name}".
    - __displayable__ (if set) narrows which properties __rich_repr__ shows.
    """
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
            **options
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - argument(name='target', is_optional=False, ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers such as rich.pretty.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def settle(steps, /):
    """
    Run a step generator to completion, returning its result directly.
    """
    try:
        pending = next(steps)
        while True:
            pending = steps.send(pending)
    except StopIteration as stop:
        return stop.value


async def asettle(steps, /):
    """
    Run a step generator to completion inside a coroutine.

    Awaitables yielded by the generator are awaited sequentially; a failure is
    thrown back into the generator so its own error handling applies.
    """
    try:
        pending = next(steps)
        while True:
            if inspect.isawaitable(pending):
                try:
                    pending = await pending
                except Exception as error:
                    pending = steps.throw(error)
                    continue
            pending = steps.send(pending)
    except StopIteration as stop:
        return stop.value


def drive(steps, asynchronous, /):
    """
    Drive steps with the strategy selected by the asynchronous flag.

    Returns the result itself, or a coroutine resolving to it.
    """
    return asettle(steps) if asynchronous else settle(steps)


__all__ = (
    "SpecType",
    "settle",
    "asettle",
    "drive",
)
