"""Error tiers raised by pledge.

Assertion failures are not exceptions: they are returned as
:class:`pledge.assertions.base.Failure` verdicts. Everything here signals a
mistake in the test itself (bad statement text, wrong predicate for the
subject, unwrapping the wrong alternative, broken suite file).
"""

from __future__ import annotations


class PledgeError(Exception):
    """Base class for every error raised by pledge."""


class ParseError(PledgeError):
    """Statement text does not match the assertion grammar."""

    def __init__(
        self,
        message: str,
        start: int,
        end: int,
        expected: tuple[str, ...] = (),
        found: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.start = start
        self.end = end
        self.expected = expected
        self.found = found

    def __str__(self) -> str:
        expected_text = ""
        if len(self.expected) == 1:
            expected_text = f"; expected {self.expected[0]}"
        elif self.expected:
            expected_text = f"; expected one of {{{', '.join(self.expected)}}}"
        found_text = ""
        if self.found is not None:
            found_text = f"; found {self.found}"
        return f"{self.message} at span [{self.start}, {self.end}){expected_text}{found_text}"


class ShapeError(PledgeError, TypeError):
    """A predicate or unwrap qualifier was applied to a subject of the wrong shape."""


class UnwrapError(PledgeError):
    """A container did not hold the alternative an unwrap qualifier asked for."""


class ConfigError(PledgeError, ValueError):
    """A suite file could not be loaded."""
