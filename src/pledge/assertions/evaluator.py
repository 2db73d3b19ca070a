"""Evaluate assertion expressions into verdicts.

The order of work for one expression is fixed: the subject is evaluated,
the unwrap qualifier (if any) extracts the inner value, the predicate's
shape constraint is checked, and only then is the predicate evaluated and
the verdict rendered.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Any, Callable

from pledge.assertions.base import Failure, Success, Verdict
from pledge.assertions.predicates import BasePredicate, Behavioral, Equality
from pledge.dsl.ast import AssertionExpression, Operand, UnwrapMode, render
from pledge.dsl.parser import parse
from pledge.errors import ShapeError
from pledge.isolation import Isolation, ThreadIsolation
from pledge.outcome import Err, Ok, Some, is_option, is_outcome, unwrap_option

_logger = logging.getLogger("pledge")


def base_scope() -> dict[str, Any]:
    """Names every statement can use without binding them."""
    return {"Ok": Ok, "Err": Err, "Some": Some}


def build_scope(namespace: Mapping[str, Any] | None) -> dict[str, Any]:
    scope = base_scope()
    if namespace:
        scope.update(namespace)
    return scope


def _frame_scope(frame) -> dict[str, Any]:
    scope = base_scope()
    scope.update(frame.f_globals)
    scope.update(frame.f_locals)
    return scope


def _caller_scope(depth: int) -> dict[str, Any]:
    frame = inspect.currentframe()
    try:
        for _ in range(depth + 1):
            frame = frame.f_back
        return _frame_scope(frame)
    finally:
        del frame


def apply_unwrap(value: Any, mode: UnwrapMode, keyword: str | None = None) -> Any:
    """Extract the payload selected by *mode*.

    Raises:
        ShapeError: *value* is not a container the qualifier applies to.
        UnwrapError: the container holds the other alternative. This is
            fatal and never turned into a failed verdict.
    """
    label = keyword or mode.value
    if mode is UnwrapMode.NONE:
        return value
    if mode is UnwrapMode.EXTRACT_OK:
        if is_outcome(value):
            return value.unwrap()
        if is_option(value):
            return unwrap_option(value)
        raise ShapeError(
            f"'{label}(...)' requires an Ok/Err outcome or Some/None optional value, "
            f"got {type(value).__name__}"
        )
    if is_outcome(value):
        return value.unwrap_err()
    raise ShapeError(f"'{label}(...)' requires an Ok/Err outcome, got {type(value).__name__}")


def evaluate_value(
    predicate: BasePredicate,
    value: Any,
    *,
    negate: bool = False,
    unwrap_mode: UnwrapMode = UnwrapMode.NONE,
    unwrap_keyword: str | None = None,
    isolation: Isolation | None = None,
    logger: logging.Logger | None = None,
) -> Verdict:
    """Check *predicate* against an already computed subject *value*."""
    logger = logger or _logger
    value = apply_unwrap(value, unwrap_mode, unwrap_keyword)
    predicate.check_shape(value)

    observed = value
    if isinstance(predicate, Behavioral):
        observed = (isolation or ThreadIsolation(logger=logger)).run(value)

    if predicate.satisfied(observed, negate):
        logger.debug(f"{type(predicate).__name__} satisfied (negate={negate})")
        return Success()

    message = predicate.failure_message(observed, negate)
    logger.debug(f"{type(predicate).__name__} failed: {message}")
    return Failure(message)


def _deferred_subject(subject: Operand, scope: dict[str, Any]) -> Callable[[], None]:
    """The computation run by ``succeed``/``panic`` for a non-reference subject.

    Evaluating the subject expression is the computation, so ``(1 / 0)``
    aborts inside the isolated context. Its result is discarded.
    """

    def computation() -> None:
        subject.evaluate(scope)

    return computation


def evaluate(
    expr: AssertionExpression,
    namespace: Mapping[str, Any] | None = None,
    *,
    isolation: Isolation | None = None,
    logger: logging.Logger | None = None,
) -> Verdict:
    """Evaluate a parsed statement.

    Args:
        expr: Statement produced by :func:`pledge.dsl.parser.parse`.
        namespace: Names visible to the subject and expected value. When
            omitted, the caller's globals and locals are used.
        isolation: Executor for ``succeed``/``panic``; a fresh
            :class:`ThreadIsolation` per call by default.
        logger: Destination for debug output.

    Returns:
        ``Success()`` or ``Failure(message)``.

    Raises:
        ShapeError: the predicate or unwrap qualifier does not fit the subject.
        UnwrapError: an unwrap qualifier met the other alternative.
    """
    logger = logger or _logger
    scope = build_scope(namespace) if namespace is not None else _caller_scope(1)
    return _evaluate_in_scope(expr, scope, isolation=isolation, logger=logger)


def _evaluate_in_scope(
    expr: AssertionExpression,
    scope: dict[str, Any],
    *,
    isolation: Isolation | None,
    logger: logging.Logger,
) -> Verdict:
    logger.debug(f"Evaluating: {render(expr)}")
    predicate = expr.predicate

    if (
        isinstance(predicate, Behavioral)
        and expr.unwrap_mode is UnwrapMode.NONE
        and not expr.subject.reference
    ):
        subject = _deferred_subject(expr.subject, scope)
    else:
        subject = expr.subject.evaluate(scope)

    if isinstance(predicate, Equality) and isinstance(predicate.rhs, Operand):
        predicate = Equality(rhs=predicate.rhs.evaluate(scope))

    return evaluate_value(
        predicate,
        subject,
        negate=expr.negate,
        unwrap_mode=expr.unwrap_mode,
        unwrap_keyword=expr.unwrap_keyword,
        isolation=isolation,
        logger=logger,
    )


def check(
    source: str,
    *,
    isolation: Isolation | None = None,
    logger: logging.Logger | None = None,
    **bindings: Any,
) -> Verdict:
    """Parse and evaluate one statement.

    Names come from *bindings* when given, otherwise from the caller's
    frame, so ``check("(x) to be Ok")`` sees the local ``x``.

    ``isolation`` and ``logger`` are options, never bindings. A statement
    that refers to a variable with one of those names needs
    ``evaluate(parse(source), {"logger": ...})`` instead.
    """
    expr = parse(source)
    scope = build_scope(bindings) if bindings else _caller_scope(1)
    return _evaluate_in_scope(expr, scope, isolation=isolation, logger=logger or _logger)
