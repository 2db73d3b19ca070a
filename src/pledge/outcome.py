"""Fallible-outcome (``Ok``/``Err``) and optional-value (``Some``/``None``) containers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pledge.errors import UnwrapError

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Success half of an outcome."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> Any:
        raise UnwrapError(f"called unwrap_err() on {self!r}")


@dataclass(frozen=True)
class Err(Generic[E]):
    """Error half of an outcome."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        raise UnwrapError(f"called unwrap() on {self!r}")

    def unwrap_err(self) -> E:
        return self.error


@dataclass(frozen=True)
class Some(Generic[T]):
    """A present optional value. Absence is spelled ``None``."""

    value: T

    def __repr__(self) -> str:
        return f"Some({self.value!r})"


Outcome = Ok | Err
Option = Some | None


def is_outcome(value: object) -> bool:
    return isinstance(value, (Ok, Err))


def is_option(value: object) -> bool:
    return value is None or isinstance(value, Some)


def unwrap_option(value: Some[T] | None) -> T:
    """Return the payload of ``Some``; raise :class:`UnwrapError` on ``None``."""
    if value is None:
        raise UnwrapError("called unwrap() on None")
    return value.value
