"""Run a deferred computation in its own execution context.

Behavioral predicates (``succeed`` / ``panic``) only need to know whether a
computation completed normally or aborted. Running it inline would let an
abort tear down the evaluator, so each call gets a fresh thread (or process)
and the caller blocks until it finishes. There is no timeout: a computation
that never returns blocks evaluation forever.
"""

from __future__ import annotations

import itertools
import logging
import multiprocessing
import sys
import threading
import traceback
from enum import Enum
from typing import Callable, Protocol

_logger = logging.getLogger("pledge.isolation")

# Isolated contexts are named from a counter, never from subject text, so
# two behavioral assertions over similar source never share a name.
_context_ids = itertools.count(1)


def _next_context_name() -> str:
    return f"pledge-isolated-{next(_context_ids)}"


class Termination(str, Enum):
    COMPLETED_NORMALLY = "completed_normally"
    ABORTED_ABNORMALLY = "aborted_abnormally"


class Isolation(Protocol):
    def run(self, computation: Callable[[], object]) -> Termination: ...


class ThreadIsolation:
    """One thread per call. Any exception escaping the computation counts as an abort."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or _logger

    def run(self, computation: Callable[[], object]) -> Termination:
        name = _next_context_name()
        outcome: list[Termination] = []

        def _target() -> None:
            try:
                computation()
            except BaseException as exc:
                self.logger.debug(f"{name} aborted: {exc!r}")
                outcome.append(Termination.ABORTED_ABNORMALLY)
            else:
                outcome.append(Termination.COMPLETED_NORMALLY)

        thread = threading.Thread(target=_target, name=name, daemon=True)
        self.logger.debug(f"Starting {name}")
        thread.start()
        thread.join()

        # An empty outcome means the thread died before recording anything.
        termination = outcome[0] if outcome else Termination.ABORTED_ABNORMALLY
        self.logger.debug(f"{name} finished: {termination.value}")
        return termination


def _run_in_child(computation: Callable[[], object]) -> None:
    try:
        computation()
    except BaseException:
        traceback.print_exc()
        sys.exit(1)


def _default_start_method() -> str:
    # fork lets unpicklable computations (lambdas, closures) cross into the child
    if "fork" in multiprocessing.get_all_start_methods():
        return "fork"
    return "spawn"


class ProcessIsolation:
    """One process per call. Catches hard faults (signals, ``os.abort``) a thread cannot.

    A non-zero exit code, including death by signal, counts as an abort.
    """

    def __init__(
        self,
        start_method: str | None = None,
        logger: logging.Logger | None = None,
    ):
        self.start_method = start_method or _default_start_method()
        self.logger = logger or _logger

    def run(self, computation: Callable[[], object]) -> Termination:
        name = _next_context_name()
        ctx = multiprocessing.get_context(self.start_method)
        process = ctx.Process(target=_run_in_child, args=(computation,), name=name)
        self.logger.debug(f"Starting {name} ({self.start_method})")
        process.start()
        process.join()

        if process.exitcode == 0:
            termination = Termination.COMPLETED_NORMALLY
        else:
            termination = Termination.ABORTED_ABNORMALLY
        self.logger.debug(
            f"{name} finished with exit code {process.exitcode}: {termination.value}"
        )
        process.close()
        return termination


_ISOLATIONS: dict[str, type[ThreadIsolation] | type[ProcessIsolation]] = {
    "thread": ThreadIsolation,
    "process": ProcessIsolation,
}


def get_isolation(name: str, logger: logging.Logger | None = None) -> Isolation:
    """Return a fresh isolation executor by name (``thread`` or ``process``)."""
    try:
        factory = _ISOLATIONS[name]
    except KeyError:
        raise ValueError(
            f"Unknown isolation '{name}'. Choose one of: {', '.join(_ISOLATIONS)}"
        ) from None
    return factory(logger=logger)
