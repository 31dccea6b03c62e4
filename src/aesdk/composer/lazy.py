"""Deferred-failure wrapper for optional subsystems.

A subsystem (selected node, default account, compiler) may legitimately be
missing. `acquire` tries to get it once and never raises; the stored failure
is raised again only when the value is unwrapped.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Available(Generic[T]):
    """A subsystem that was acquired successfully."""

    value: T

    @property
    def is_available(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Get the acquired value."""
        return self.value

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Unavailable:
    """A subsystem whose acquisition failed."""

    error: Exception

    @property
    def is_available(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        """Raise the failure captured at acquisition time."""
        raise self.error

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Unavailable({type(self.error).__name__}: {self.error})"


Lazy = Available[T] | Unavailable


def acquire(getter: Callable[[], T]) -> "Lazy[T]":
    """Run `getter` once, capturing any failure instead of raising it."""
    try:
        return Available(getter())
    except Exception as e:
        return Unavailable(e)
