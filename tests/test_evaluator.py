"""Tests for the evaluator: truth table, shape constraints, unwrap and messages."""

from dataclasses import dataclass

import pytest

from pledge.assertions.base import Failure, Success
from pledge.assertions.evaluator import apply_unwrap, check, evaluate, evaluate_value
from pledge.assertions.predicates import (
    Behavioral,
    BooleanIs,
    Emptiness,
    Equality,
    OptionalIs,
    OutcomeIs,
)
from pledge.dsl.ast import UnwrapMode
from pledge.dsl.parser import parse
from pledge.errors import ParseError, ShapeError, UnwrapError
from pledge.outcome import Err, Ok, Some


def _boom() -> None:
    raise RuntimeError("boom")


def _fine() -> None:
    return None


TRUTH_TABLE = [
    (Equality(rhs=4), 4, True),
    (Equality(rhs=5), 4, False),
    (OutcomeIs(variant="Ok"), Ok(1), True),
    (OutcomeIs(variant="Ok"), Err(1), False),
    (OutcomeIs(variant="Err"), Err(1), True),
    (OutcomeIs(variant="Err"), Ok(1), False),
    (OptionalIs(variant="Some"), Some(1), True),
    (OptionalIs(variant="Some"), None, False),
    (OptionalIs(variant="None"), None, True),
    (OptionalIs(variant="None"), Some(0), False),
    (BooleanIs(value=True), True, True),
    (BooleanIs(value=True), False, False),
    (BooleanIs(value=False), False, True),
    (BooleanIs(value=False), True, False),
    (Emptiness(), "", True),
    (Emptiness(), "x", False),
    (Emptiness(), [], True),
    (Emptiness(), {"k": 1}, False),
    (Behavioral(variant="succeed"), _fine, True),
    (Behavioral(variant="succeed"), _boom, False),
    (Behavioral(variant="panic"), _boom, True),
    (Behavioral(variant="panic"), _fine, False),
]


@pytest.mark.parametrize("predicate, subject, expected", TRUTH_TABLE)
def test_truth_table(predicate, subject, expected):
    assert evaluate_value(predicate, subject).passed is expected


@pytest.mark.parametrize("predicate, subject, expected", TRUTH_TABLE)
def test_negation_inverts_every_verdict(predicate, subject, expected):
    assert evaluate_value(predicate, subject, negate=True).passed is (not expected)


def test_negated_equality_flips_the_operator_not_the_operand():
    class Contrary:
        def __eq__(self, other):
            return True

        def __ne__(self, other):
            return True

    predicate = Equality(rhs=Contrary())
    assert evaluate_value(predicate, Contrary()).passed is True
    assert evaluate_value(predicate, Contrary(), negate=True).passed is True


# --- messages ---


def test_equality_failure_renders_both_values():
    verdict = evaluate_value(Equality(rhs=5), 4)
    assert isinstance(verdict, Failure)
    assert verdict.message == "Expected 4 to equal 5"


def test_negated_equality_failure_message():
    verdict = evaluate_value(Equality(rhs=4), 4, negate=True)
    assert verdict.message == "Expected 4 to not equal 4"


def test_emptiness_failure_shows_contents():
    verdict = evaluate_value(Emptiness(), [1, 2])
    assert verdict.message == "Expected value to be empty, found [1, 2]"


def test_negated_emptiness_failure_message():
    verdict = evaluate_value(Emptiness(), "", negate=True)
    assert verdict.message == "Expected value to not be empty, found ''"


def test_outcome_failure_message():
    verdict = evaluate_value(OutcomeIs(variant="Ok"), Err("boom"))
    assert verdict.message == "Expected value to be Ok, found Err('boom')"


def test_optional_failure_message():
    verdict = evaluate_value(OptionalIs(variant="None"), Some(3))
    assert verdict.message == "Expected value to be None, found Some(3)"


def test_boolean_failure_message():
    verdict = evaluate_value(BooleanIs(value=True), False)
    assert verdict.message == "Expected value to be true, found False"


def test_behavioral_failure_messages():
    assert evaluate_value(Behavioral(variant="succeed"), _boom).message == (
        "Expected computation to succeed, but it aborted abnormally"
    )
    assert evaluate_value(Behavioral(variant="panic"), _fine).message == (
        "Expected computation to panic, but it completed normally"
    )
    assert evaluate_value(Behavioral(variant="panic"), _boom, negate=True).message == (
        "Expected computation to not panic, but it aborted abnormally"
    )


def test_success_carries_no_message():
    verdict = evaluate_value(Equality(rhs=1), 1)
    assert verdict == Success()
    assert verdict.message == ""
    assert bool(verdict) is True


def test_failure_can_be_raised_at_the_call_site():
    verdict = evaluate_value(Equality(rhs=2), 1)
    with pytest.raises(AssertionError, match="Expected 1 to equal 2"):
        verdict.raise_for_failure()
    Success().raise_for_failure()


# --- shape constraints ---


@pytest.mark.parametrize(
    "predicate, subject",
    [
        (OutcomeIs(variant="Ok"), 3),
        (OutcomeIs(variant="Err"), Some(3)),
        (OptionalIs(variant="Some"), 3),
        (OptionalIs(variant="None"), Ok(1)),
        (BooleanIs(value=True), 1),
        (Emptiness(), 3),
        (Behavioral(variant="succeed"), 3),
        (Behavioral(variant="panic"), lambda x: x),
    ],
)
@pytest.mark.parametrize("negate", [False, True])
def test_shape_violations_raise_instead_of_failing(predicate, subject, negate):
    with pytest.raises(ShapeError):
        evaluate_value(predicate, subject, negate=negate)


def test_shape_error_is_a_type_error():
    with pytest.raises(TypeError, match="requires an Ok/Err outcome, got int"):
        evaluate_value(OutcomeIs(variant="Ok"), 3)


def test_shape_is_checked_before_running_a_computation():
    calls = []

    class NeedsArgument:
        def __call__(self, x):
            calls.append(x)

    with pytest.raises(ShapeError):
        evaluate_value(Behavioral(variant="succeed"), NeedsArgument())
    assert calls == []


# --- unwrap ---


def test_extract_ok_yields_the_success_value():
    verdict = evaluate_value(Equality(rhs=3), Ok(3), unwrap_mode=UnwrapMode.EXTRACT_OK)
    assert verdict.passed is True


def test_extract_ok_on_error_is_fatal():
    with pytest.raises(UnwrapError):
        evaluate_value(Equality(rhs=3), Err("nope"), unwrap_mode=UnwrapMode.EXTRACT_OK)


def test_extract_err_yields_the_error_value():
    verdict = evaluate_value(
        Equality(rhs="error message"),
        Err("error message"),
        unwrap_mode=UnwrapMode.EXTRACT_ERR,
    )
    assert verdict.passed is True


def test_extract_err_on_success_is_fatal():
    with pytest.raises(UnwrapError):
        evaluate_value(Equality(rhs=3), Ok(3), unwrap_mode=UnwrapMode.EXTRACT_ERR)


def test_extract_ok_on_optional_values():
    assert apply_unwrap(Some(3), UnwrapMode.EXTRACT_OK) == 3
    with pytest.raises(UnwrapError):
        apply_unwrap(None, UnwrapMode.EXTRACT_OK)


def test_unwrap_of_a_non_container_is_a_shape_error():
    with pytest.raises(ShapeError, match="Ok\\(...\\)"):
        apply_unwrap(3, UnwrapMode.EXTRACT_OK, "Ok")
    with pytest.raises(ShapeError):
        apply_unwrap(Some(1), UnwrapMode.EXTRACT_ERR, "Err")


def test_unwrap_feeds_the_downstream_predicate():
    verdict = evaluate_value(Emptiness(), Ok([1]), unwrap_mode=UnwrapMode.EXTRACT_OK)
    assert verdict.message == "Expected value to be empty, found [1]"


# --- statements ---


def test_equality_statements():
    assert check("(2 + 2) to equal 4")

    @dataclass
    class Point:
        x: int
        y: int

    a = Point(1, 2)
    b = Point(3, 4)
    assert check("(a) to not equal b", a=a, b=b)


def test_result_statements():
    x = Ok(0)
    assert check("(x) to be Ok")
    assert check("(x) to not be Err")

    y = Err(1)
    assert check("(y) to be Err")
    assert check("(y) to not be Ok")


def test_option_statements():
    x = Some(0)
    assert check("(x) to be Some")
    assert check("(x) to not be None")

    y = None
    assert check("(y) to be None")
    assert check("(y) to not be Some")


def test_unwrap_statements():
    x = Ok(3)
    assert check("Ok(x) to equal 3")

    y = Err("error message")
    assert check('Err(y) to equal "error message"')

    z = Some(3)
    assert check("Some(z) to equal 3")


def test_boolean_statements():
    assert check("(True) to be true")
    assert check("(True) to not be false")


def test_emptiness_statements():
    assert check('("") to be empty')
    assert not check('("x") to be empty')
    assert check('("x") to not be empty')


def test_statement_failure_message():
    verdict = check("(2 + 2) to equal 5")
    assert verdict == Failure("Expected 4 to equal 5")


def test_containers_are_always_in_scope():
    assert check("(Ok(1)) to be Ok", unrelated=None)
    assert check("(Some(1)) to be Some")


def test_explicit_namespace_wins_over_caller():
    x = Ok(1)
    assert check("(x) to be Err", x=Err(2))
    assert evaluate(parse("(x) to be Ok"), {"x": x})


def test_evaluate_reads_caller_frame_by_default():
    items = []
    assert evaluate(parse("(items) to be empty"))


def test_subject_expression_is_deferred_for_behavioral_predicates():
    assert check("(1 / 0) to panic")
    assert check("(1 + 1) to succeed")
    assert check("(1 / 0) to not succeed")


def test_callable_subject_is_invoked_for_behavioral_predicates():
    assert check("(boom) to panic", boom=_boom)
    assert check("(lambda: None) to succeed")
    assert check("(lambda: None) to not panic")


def test_behavioral_statement_with_unwrap():
    assert check("Ok(job) to succeed", job=Ok(_fine))
    with pytest.raises(UnwrapError):
        check("Ok(job) to succeed", job=Err(_fine))


def test_parse_error_happens_before_anything_runs():
    calls = []

    def explode():
        calls.append("ran")
        return 1

    with pytest.raises(ParseError):
        check("(explode()) to equa 1", explode=explode)
    assert calls == []


def test_shape_error_from_statement():
    with pytest.raises(ShapeError):
        check("(3) to be Ok")


def test_unwrap_error_from_statement():
    with pytest.raises(UnwrapError):
        check("Ok(x) to equal 3", x=Err("nope"))


def test_expression_can_be_evaluated_again_with_new_bindings():
    expr = parse("(n) to equal 2")
    assert evaluate(expr, {"n": 2})
    assert not evaluate(expr, {"n": 3})


def test_wrong_arity_callable_subject_is_a_shape_error():
    with pytest.raises(ShapeError, match="zero-argument"):
        check("(f) to panic", f=lambda x: x)
    with pytest.raises(ShapeError, match="zero-argument"):
        check("(f) to not succeed", f=lambda x: x)


def test_non_callable_reference_subject_is_a_shape_error():
    with pytest.raises(ShapeError, match="requires a callable, got int"):
        check("(5) to succeed")
    with pytest.raises(ShapeError):
        check("(n) to panic", n=5)


def test_attribute_subject_is_checked_like_a_name():
    class Job:
        def run(self):
            raise RuntimeError("boom")

        def step(self, n):
            return n

    job = Job()
    assert check("(job.run) to panic", job=job)
    with pytest.raises(ShapeError):
        check("(job.step) to succeed", job=job)


def test_expression_subject_result_is_not_invoked():
    assert check("(make()) to succeed", make=lambda: _boom)
    assert check("(make()) to not panic", make=lambda: _boom)


def test_names_shadowing_check_options_go_through_evaluate():
    assert evaluate(parse("(logger) to be Some"), {"logger": Some(1)})
    assert evaluate(parse("(isolation) to equal 'thread'"), {"isolation": "thread"})
