"""Verdicts and the predicate catalog."""

from pledge.assertions.base import Failure, Success, Verdict
from pledge.assertions.predicates import (
    BasePredicate,
    Behavioral,
    BooleanIs,
    Emptiness,
    Equality,
    Length,
    OptionalIs,
    OutcomeIs,
    Predicate,
    TypeTag,
)

__all__ = [
    "Verdict",
    "Success",
    "Failure",
    "BasePredicate",
    "Predicate",
    "Equality",
    "OutcomeIs",
    "OptionalIs",
    "BooleanIs",
    "Emptiness",
    "Behavioral",
    "TypeTag",
    "Length",
]
