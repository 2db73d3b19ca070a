"""The closed catalog of assertion predicates.

Every predicate knows three things, independently of negation:

* the shape its subject must have (``check_shape`` raises :class:`ShapeError`),
* the condition it checks when not negated (``holds``),
* how to phrase the expectation in a failure message (``expectation``).

Negation is applied by :meth:`BasePredicate.satisfied`, which selects the
complementary condition. ``Equality`` overrides it to flip the comparison
operator rather than the operand.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Sized
from dataclasses import dataclass
from typing import Any, ClassVar, Literal

from pledge.errors import ShapeError
from pledge.isolation import Termination
from pledge.outcome import Err, Ok, Some, is_option, is_outcome


def _type_name(value: object) -> str:
    return type(value).__name__


class BasePredicate(ABC):
    keyword: ClassVar[str]
    subject_noun: ClassVar[str] = "value"

    def check_shape(self, value: Any) -> None:
        """Raise :class:`ShapeError` when *value* cannot be checked by this predicate."""

    @abstractmethod
    def holds(self, value: Any) -> bool:
        """The non-negated condition."""

    @abstractmethod
    def expectation(self) -> str:
        """Verb phrase used in messages, e.g. ``be empty``."""

    def satisfied(self, value: Any, negate: bool) -> bool:
        return self.holds(value) != negate

    def describe_found(self, value: Any) -> str:
        return repr(value)

    def failure_message(self, value: Any, negate: bool) -> str:
        verb = f"not {self.expectation()}" if negate else self.expectation()
        return f"Expected {self.subject_noun} to {verb}, found {self.describe_found(value)}"


@dataclass(frozen=True)
class Equality(BasePredicate):
    rhs: Any
    keyword: ClassVar[str] = "equal"

    def holds(self, value: Any) -> bool:
        return bool(value == self.rhs)

    def satisfied(self, value: Any, negate: bool) -> bool:
        if negate:
            return bool(value != self.rhs)
        return bool(value == self.rhs)

    def expectation(self) -> str:
        return f"equal {self.rhs!r}"

    def failure_message(self, value: Any, negate: bool) -> str:
        verb = "not equal" if negate else "equal"
        return f"Expected {value!r} to {verb} {self.rhs!r}"


@dataclass(frozen=True)
class OutcomeIs(BasePredicate):
    variant: Literal["Ok", "Err"]
    keyword: ClassVar[str] = "be"

    def check_shape(self, value: Any) -> None:
        if not is_outcome(value):
            raise ShapeError(
                f"'be {self.variant}' requires an Ok/Err outcome, got {_type_name(value)}"
            )

    def holds(self, value: Ok | Err) -> bool:
        if self.variant == "Ok":
            return value.is_ok()
        return value.is_err()

    def expectation(self) -> str:
        return f"be {self.variant}"


@dataclass(frozen=True)
class OptionalIs(BasePredicate):
    variant: Literal["Some", "None"]
    keyword: ClassVar[str] = "be"

    def check_shape(self, value: Any) -> None:
        if not is_option(value):
            raise ShapeError(
                f"'be {self.variant}' requires a Some/None optional value, got {_type_name(value)}"
            )

    def holds(self, value: Some | None) -> bool:
        if self.variant == "Some":
            return value is not None
        return value is None

    def expectation(self) -> str:
        return f"be {self.variant}"


@dataclass(frozen=True)
class BooleanIs(BasePredicate):
    value: bool
    keyword: ClassVar[str] = "be"

    def check_shape(self, value: Any) -> None:
        if not isinstance(value, bool):
            raise ShapeError(
                f"'be {self._literal}' requires a bool, got {_type_name(value)}"
            )

    @property
    def _literal(self) -> str:
        return "true" if self.value else "false"

    def holds(self, value: bool) -> bool:
        return value == self.value

    def expectation(self) -> str:
        return f"be {self._literal}"


@dataclass(frozen=True)
class Emptiness(BasePredicate):
    keyword: ClassVar[str] = "be"

    def check_shape(self, value: Any) -> None:
        if not isinstance(value, Sized):
            raise ShapeError(f"'be empty' requires a sized value, got {_type_name(value)}")

    def holds(self, value: Sized) -> bool:
        return len(value) == 0

    def expectation(self) -> str:
        return "be empty"


@dataclass(frozen=True)
class Behavioral(BasePredicate):
    """``succeed`` / ``panic``. Checked against the :class:`Termination` of the computation."""

    variant: Literal["succeed", "panic"]
    keyword: ClassVar[str] = "behave"
    subject_noun: ClassVar[str] = "computation"

    def check_shape(self, value: Any) -> None:
        if not callable(value):
            raise ShapeError(f"'{self.variant}' requires a callable, got {_type_name(value)}")
        try:
            inspect.signature(value).bind()
        except TypeError:
            raise ShapeError(
                f"'{self.variant}' requires a zero-argument callable, got {value!r}"
            ) from None
        except ValueError:
            # Some builtins expose no signature; let them run.
            pass

    def holds(self, value: Termination) -> bool:
        if self.variant == "succeed":
            return value is Termination.COMPLETED_NORMALLY
        return value is Termination.ABORTED_ABNORMALLY

    def expectation(self) -> str:
        return self.variant

    def describe_found(self, value: Termination) -> str:
        if value is Termination.COMPLETED_NORMALLY:
            return "it completed normally"
        return "it aborted abnormally"

    def failure_message(self, value: Termination, negate: bool) -> str:
        verb = f"not {self.variant}" if negate else self.variant
        return f"Expected computation to {verb}, but {self.describe_found(value)}"


@dataclass(frozen=True)
class TypeTag(BasePredicate):
    """``a(int)`` / ``an(object)``: an ``isinstance`` check, fluent surface only."""

    expected: type
    article: Literal["a", "an"] = "a"
    keyword: ClassVar[str] = "be"

    def holds(self, value: Any) -> bool:
        return isinstance(value, self.expected)

    def expectation(self) -> str:
        return f"be {self.article} {self.expected.__name__}"

    def describe_found(self, value: Any) -> str:
        return f"{_type_name(value)} {value!r}"


@dataclass(frozen=True)
class Length(BasePredicate):
    """``have().length(n)``, fluent surface only."""

    expected: int
    keyword: ClassVar[str] = "have"

    def check_shape(self, value: Any) -> None:
        if not isinstance(value, Sized):
            raise ShapeError(f"'length' requires a sized value, got {_type_name(value)}")

    def holds(self, value: Sized) -> bool:
        return len(value) == self.expected

    def expectation(self) -> str:
        return f"have length {self.expected}"

    def describe_found(self, value: Sized) -> str:
        return f"length {len(value)}"


Predicate = (
    Equality
    | OutcomeIs
    | OptionalIs
    | BooleanIs
    | Emptiness
    | Behavioral
    | TypeTag
    | Length
)
