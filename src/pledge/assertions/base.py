"""Verdicts produced by evaluating a single assertion."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class Success:
    """The predicate held for the subject."""

    passed: ClassVar[bool] = True
    message: ClassVar[str] = ""

    def __bool__(self) -> bool:
        return True

    def raise_for_failure(self) -> None:
        return None


@dataclass(frozen=True)
class Failure:
    """The predicate applied but the subject did not satisfy it.

    Attributes:
        message: Human-readable description naming the predicate and,
            where it can be rendered, the actual value.
    """

    message: str
    passed: ClassVar[bool] = False

    def __bool__(self) -> bool:
        return False

    def raise_for_failure(self) -> None:
        """Turn the failure into an ``AssertionError`` for abort-on-failure callers."""
        raise AssertionError(self.message)


Verdict = Success | Failure
