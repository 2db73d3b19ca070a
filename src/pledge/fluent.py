"""Chained-call notation for the same predicate catalog.

    expect(x).to().not_().be().some()
    expect(result).when().unwrapped().to().equal(3)
    expect(items).to().have().length(2)

Chain methods return the expectation; terminal methods return a verdict
produced by :func:`pledge.assertions.evaluator.evaluate_value`, so the
truth table and messages are identical to the statement form.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from pledge.assertions.base import Verdict
from pledge.assertions.evaluator import evaluate_value
from pledge.assertions.predicates import (
    BasePredicate,
    Behavioral,
    BooleanIs,
    Emptiness,
    Equality,
    Length,
    OptionalIs,
    OutcomeIs,
    TypeTag,
)
from pledge.dsl.ast import UnwrapMode
from pledge.isolation import Isolation


@dataclass(frozen=True)
class Expectation:
    value: Any
    negate: bool = False
    unwrap_mode: UnwrapMode = UnwrapMode.NONE
    isolation: Isolation | None = None
    logger: logging.Logger | None = None

    def to(self) -> Expectation:
        return self

    def be(self) -> Expectation:
        return self

    def have(self) -> Expectation:
        return self

    def not_(self) -> Expectation:
        return replace(self, negate=True)

    def when(self) -> Unwrapping:
        return Unwrapping(self)

    def _verdict(self, predicate: BasePredicate) -> Verdict:
        return evaluate_value(
            predicate,
            self.value,
            negate=self.negate,
            unwrap_mode=self.unwrap_mode,
            isolation=self.isolation,
            logger=self.logger,
        )

    def equal(self, other: Any) -> Verdict:
        return self._verdict(Equality(rhs=other))

    def ok(self) -> Verdict:
        return self._verdict(OutcomeIs(variant="Ok"))

    def err(self) -> Verdict:
        return self._verdict(OutcomeIs(variant="Err"))

    def some(self) -> Verdict:
        return self._verdict(OptionalIs(variant="Some"))

    def none(self) -> Verdict:
        return self._verdict(OptionalIs(variant="None"))

    def true(self) -> Verdict:
        return self._verdict(BooleanIs(value=True))

    def false(self) -> Verdict:
        return self._verdict(BooleanIs(value=False))

    def empty(self) -> Verdict:
        return self._verdict(Emptiness())

    def a(self, expected: type) -> Verdict:
        return self._verdict(TypeTag(expected=expected, article="a"))

    def an(self, expected: type) -> Verdict:
        return self._verdict(TypeTag(expected=expected, article="an"))

    def length(self, expected: int) -> Verdict:
        return self._verdict(Length(expected=expected))

    def succeed(self) -> Verdict:
        return self._verdict(Behavioral(variant="succeed"))

    def panic(self) -> Verdict:
        return self._verdict(Behavioral(variant="panic"))


@dataclass(frozen=True)
class Unwrapping:
    expectation: Expectation

    def unwrapped(self) -> Expectation:
        """Check the ``Ok``/``Some`` payload instead of the container."""
        return replace(self.expectation, unwrap_mode=UnwrapMode.EXTRACT_OK)

    def err_unwrapped(self) -> Expectation:
        """Check the ``Err`` payload instead of the container."""
        return replace(self.expectation, unwrap_mode=UnwrapMode.EXTRACT_ERR)


def expect(
    value: Any,
    *,
    isolation: Isolation | None = None,
    logger: logging.Logger | None = None,
) -> Expectation:
    return Expectation(value, isolation=isolation, logger=logger)
