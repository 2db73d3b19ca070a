"""pledge: readable assertions compiled from statements like ``(x) to not be None``."""

from pledge.assertions.base import Failure, Success, Verdict
from pledge.assertions.evaluator import check, evaluate, evaluate_value
from pledge.dsl.ast import AssertionExpression, UnwrapMode, render
from pledge.dsl.parser import parse
from pledge.errors import ConfigError, ParseError, PledgeError, ShapeError, UnwrapError
from pledge.fluent import expect
from pledge.isolation import ProcessIsolation, Termination, ThreadIsolation
from pledge.outcome import Err, Ok, Some
from pledge.reporter import Reporter, describe, it

__all__ = [
    "parse",
    "render",
    "evaluate",
    "evaluate_value",
    "check",
    "expect",
    "describe",
    "it",
    "Reporter",
    "AssertionExpression",
    "UnwrapMode",
    "Verdict",
    "Success",
    "Failure",
    "Ok",
    "Err",
    "Some",
    "Termination",
    "ThreadIsolation",
    "ProcessIsolation",
    "PledgeError",
    "ParseError",
    "ShapeError",
    "UnwrapError",
    "ConfigError",
]
