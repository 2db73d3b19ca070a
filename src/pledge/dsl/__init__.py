"""The assertion statement language."""

from pledge.dsl.ast import AssertionExpression, Operand, UnwrapMode, render
from pledge.dsl.parser import parse

__all__ = ["parse", "render", "AssertionExpression", "Operand", "UnwrapMode"]
