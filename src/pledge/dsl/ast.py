"""AST for assertion statements."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import CodeType
from typing import Any

from pledge.assertions.predicates import (
    BooleanIs,
    Behavioral,
    Emptiness,
    Equality,
    OptionalIs,
    OutcomeIs,
    Predicate,
)


class UnwrapMode(str, Enum):
    NONE = "none"
    EXTRACT_OK = "extract_ok"
    EXTRACT_ERR = "extract_err"


@dataclass(frozen=True)
class Operand:
    """A Python expression embedded in a statement, compiled once at parse time."""

    source: str
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)
    code: CodeType | None = field(default=None, compare=False, repr=False)
    # a name, dotted attribute, lambda or literal: evaluating it runs no code of its own
    reference: bool = field(default=False, compare=False, repr=False)

    def evaluate(self, scope: dict[str, Any]) -> Any:
        code = self.code
        if code is None:
            code = compile(f"({self.source}\n)", "<operand>", "eval")
        return eval(code, scope)


@dataclass(frozen=True)
class AssertionExpression:
    subject: Operand
    predicate: Predicate
    negate: bool = False
    unwrap_mode: UnwrapMode = UnwrapMode.NONE
    unwrap_keyword: str | None = None
    source: str = field(default="", compare=False)


def render_predicate(predicate: Predicate) -> str:
    if isinstance(predicate, Equality):
        rhs = predicate.rhs
        return f"equal {rhs.source if isinstance(rhs, Operand) else repr(rhs)}"
    if isinstance(predicate, (OutcomeIs, OptionalIs)):
        return f"be {predicate.variant}"
    if isinstance(predicate, BooleanIs):
        return f"be {'true' if predicate.value else 'false'}"
    if isinstance(predicate, Emptiness):
        return "be empty"
    if isinstance(predicate, Behavioral):
        return predicate.variant
    raise TypeError(f"{type(predicate).__name__} has no statement form")


def render(expr: AssertionExpression) -> str:
    """Canonical statement text for *expr*."""
    prefix = expr.unwrap_keyword or ""
    negation = "not " if expr.negate else ""
    return f"{prefix}({expr.subject.source}) to {negation}{render_predicate(expr.predicate)}"
