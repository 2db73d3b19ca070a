"""BDD-style console reporter: nested ``describe`` groups of ``it`` cases.

All bookkeeping (nesting depth, pass/fail counts, recorded cases) lives in a
:class:`ReportContext` owned by one :class:`Reporter`. The summary is printed
when the outermost ``describe`` of that reporter closes.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Callable

import typer

from pledge.assertions.base import Failure, Success, Verdict

_logger = logging.getLogger("pledge.reporter")

_active: ContextVar[Reporter | None] = ContextVar("pledge_active_reporter", default=None)

TestOutcome = Verdict | bool


@dataclass
class CaseResult:
    """Outcome of one ``it`` case.

    Attributes:
        path: Descriptions of the enclosing ``describe`` groups, outermost first.
        name: The case description.
        passed: Whether the verdict was a success.
        message: Failure message, empty on success.
        error: Set when the case raised instead of returning a verdict
            (parse, shape or unwrap errors, or any other exception).
    """

    path: tuple[str, ...]
    name: str
    passed: bool
    message: str = ""
    error: str | None = None

    @property
    def status(self) -> str:
        if self.error is not None:
            return "error"
        return "passed" if self.passed else "failed"


@dataclass
class ReportContext:
    depth: int = 0
    path: list[str] = field(default_factory=list)
    passed: int = 0
    failed: int = 0
    errored: int = 0
    cases: list[CaseResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.errored

    @property
    def all_passed(self) -> bool:
        return self.failed == 0 and self.errored == 0


class Reporter:
    TAB_WIDTH = 2

    def __init__(
        self,
        *,
        catch_fatal: bool = False,
        color: bool | None = None,
        logger: logging.Logger | None = None,
    ):
        self.context = ReportContext()
        self.catch_fatal = catch_fatal
        self.color = color
        self.logger = logger or _logger

    def _echo(self, text: str) -> None:
        typer.echo(text, color=self.color)

    def _indent(self) -> str:
        return " " * (self.TAB_WIDTH * self.context.depth)

    def describe(self, description: str, body: Callable[[], object]) -> None:
        """Run *body* as a named group; nested calls indent further."""
        ctx = self.context
        ctx.depth += 1
        ctx.path.append(description)
        self._echo(f"{self._indent()}{description}")
        token = _active.set(self)
        try:
            body()
        finally:
            _active.reset(token)
            ctx.path.pop()
            ctx.depth -= 1

        if ctx.depth == 0:
            self.print_summary()

    def it(self, description: str, test: Callable[[], TestOutcome]) -> CaseResult:
        """Run one case. *test* returns a verdict or a bool."""
        ctx = self.context
        ctx.depth += 1
        try:
            case = self._run_case(description, test)
        finally:
            ctx.depth -= 1
        return case

    def _run_case(self, description: str, test: Callable[[], TestOutcome]) -> CaseResult:
        path = tuple(self.context.path)
        indent = self._indent()
        try:
            outcome = test()
            if not isinstance(outcome, (bool, Success, Failure)):
                raise TypeError(
                    f"test '{description}' returned {type(outcome).__name__}, "
                    "expected a verdict or bool"
                )
        except Exception as exc:
            if not self.catch_fatal:
                raise
            self.logger.error(f"Case '{description}' raised {exc!r}")
            case = CaseResult(
                path, description, passed=False, error=f"{type(exc).__name__}: {exc}"
            )
            mark = typer.style("!", fg=typer.colors.YELLOW, bold=True)
            self._echo(f"{indent}{mark} {typer.style(description, fg=typer.colors.YELLOW)}")
            self._echo(f"{indent}    {case.error}")
            self._record(case)
            return case

        message = "" if isinstance(outcome, bool) else outcome.message
        case = CaseResult(path, description, passed=bool(outcome), message=message)
        if case.passed:
            mark = typer.style("✔", fg=typer.colors.GREEN, bold=True)
            self._echo(f"{indent}{mark} {typer.style(description, fg=typer.colors.BRIGHT_BLACK)}")
        else:
            mark = typer.style("✘", fg=typer.colors.RED, bold=True)
            self._echo(f"{indent}{mark} {typer.style(description, fg=typer.colors.RED, dim=True)}")
            if message:
                self._echo(f"{indent}    {message}")
        self.logger.debug(f"Case '{' / '.join((*path, description))}': {case.status}")
        self._record(case)
        return case

    def _record(self, case: CaseResult) -> None:
        ctx = self.context
        if case.error is not None:
            ctx.errored += 1
        elif case.passed:
            ctx.passed += 1
        else:
            ctx.failed += 1
        ctx.cases.append(case)

    def print_summary(self) -> None:
        ctx = self.context
        parts = [
            f"{typer.style('SUCCEEDED', fg=typer.colors.GREEN, bold=True)}: {ctx.passed:<5}",
            f"{typer.style('FAILED', fg=typer.colors.RED, bold=True)}: {ctx.failed:<5}",
        ]
        if ctx.errored:
            parts.append(
                f"{typer.style('ERRORS', fg=typer.colors.YELLOW, bold=True)}: {ctx.errored:<5}"
            )
        parts.append(f"{typer.style('TOTAL', fg=typer.colors.BRIGHT_BLACK)}: {ctx.total}")
        self._echo("")
        self._echo("".join(parts))
        self._echo("")


def active_reporter() -> Reporter | None:
    return _active.get()


def describe(
    description: str, body: Callable[[], object], *, reporter: Reporter | None = None
) -> Reporter:
    """Open a group on *reporter*, the enclosing group's reporter, or a new one."""
    reporter = reporter or _active.get() or Reporter()
    reporter.describe(description, body)
    return reporter


def it(description: str, test: Callable[[], TestOutcome]) -> CaseResult:
    reporter = _active.get()
    if reporter is None:
        raise RuntimeError("it() must be called inside describe()")
    return reporter.it(description, test)
