"""
Positional utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the argument, command and registry layers.

Overview
- UnsetType / Unset
  • Singleton sentinel for “value not provided”, distinct from None.
  • Falsey, printable as "Unset", sealed, and usable on the right of an
    isinstance() union (str | None | Unset).

- coalesce(value, default=None)
  • Replace Unset with a concrete default; None/0/""/[] are kept.

- @rename("name")
  • Give generated methods a stable __name__/__qualname__.

- mirror("attr")
  • Read-only property over self._attr handing out container copies.

- tokenize(line)
  • The one tokenization rule of the package: split on runs of whitespace, drop empty tokens.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> tokenize("  roll   2d6 ")
    ['roll', '2d6']
"""
import functools
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel.

    UnsetType() always returns the same instance, and the type refuses
    subclasses.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __ror__(self, other, /):
        # str | None | Unset -> str | None | UnsetType, for isinstance() checks
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return default when object is Unset, object otherwise.
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator setting __name__ and __qualname__ of a function to name.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorate(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorate


def _snapshot(value):
    # proxies are already read-only; other containers are copied one level
    # at a time so callers never reach the backing storage
    match value:
        case MappingProxyType():
            return value
        case dict():
            return {key: _snapshot(item) for key, item in value.items()}
        case list() | tuple():
            return [_snapshot(item) for item in value]
        case set() | frozenset():
            return set(value)
    return value


def mirror(name, /):
    """
    Read-only property exposing a copy of the private attribute "_{name}".
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _snapshot(getattr(self, "_" + name))

    return property(getter)


def tokenize(line, /):
    """
    Split a command line on runs of whitespace, discarding empty tokens.

    This is the tokenization rule used both by Command.execute (when given a
    string) and by CommandRegistry.execute. No quoting is recognized.
    """
    if not isinstance(line, str):
        raise TypeError("tokenize() argument must be a string")
    return line.split()


Unset = UnsetType()
"""Sentinel for “not provided”; resolve it with coalesce()."""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "tokenize",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
