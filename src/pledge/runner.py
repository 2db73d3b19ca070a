from __future__ import annotations

import importlib.metadata
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from pledge.assertions.evaluator import evaluate
from pledge.config import (
    CaseConfig,
    GroupConfig,
    SuiteFile,
    build_namespace,
    evaluate_bindings,
)
from pledge.isolation import Isolation, get_isolation
from pledge.reporter import Reporter
from pledge.reporting.junit import write_junit
from pledge.verbose import setup_logger


class Runner:
    """Runs every case of a suite file and writes the run directory."""

    def __init__(
        self,
        config: SuiteFile,
        output_dir: Path,
        verbose: bool = False,
        isolation: str | None = None,
        color: bool | None = None,
    ):
        self.config = config
        self.output_dir = output_dir
        self.verbose = verbose
        self.isolation_name = isolation or config.isolation
        self.color = color
        self.reporter: Reporter | None = None

    @property
    def all_passed(self) -> bool:
        return self.reporter is not None and self.reporter.context.all_passed

    def execute(self) -> Path:
        """Run all suites. Returns the run directory."""
        run_id = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S_%f")
        run_dir = self.output_dir / run_id
        run_dir.mkdir(parents=True, exist_ok=True)

        logger = setup_logger(
            run_dir / "debug.log", verbose=self.verbose, logger_name=f"pledge_run_{run_id}"
        )
        logger.debug("Starting suite run")

        isolation = get_isolation(self.isolation_name, logger=logger)
        scope = build_namespace(self.config.imports, self.config.bindings)

        self.reporter = Reporter(catch_fatal=True, color=self.color, logger=logger)
        for group in self.config.suites:
            self._run_group(group, scope, isolation, logger)

        ctx = self.reporter.context
        logger.debug(f"Run finished: {ctx.passed}/{ctx.total} cases passed")

        write_junit(run_dir, ctx.cases)
        self._write_meta(run_dir)
        return run_dir

    def _run_group(
        self,
        group: GroupConfig,
        scope: dict[str, Any],
        isolation: Isolation,
        logger: logging.Logger,
    ) -> None:
        group_scope = evaluate_bindings(group.bindings, scope)

        def body() -> None:
            for case in group.cases:
                self._run_case(case, group_scope, isolation, logger)
            for nested in group.suites:
                self._run_group(nested, group_scope, isolation, logger)

        self.reporter.describe(group.describe, body)

    def _run_case(
        self,
        case: CaseConfig,
        scope: dict[str, Any],
        isolation: Isolation,
        logger: logging.Logger,
    ) -> None:
        expression = case.expression
        self.reporter.it(
            case.it,
            lambda: evaluate(expression, scope, isolation=isolation, logger=logger),
        )

    def _write_meta(self, run_dir: Path) -> None:
        try:
            pledge_version = importlib.metadata.version("pledge")
        except importlib.metadata.PackageNotFoundError:
            pledge_version = "unknown"

        ctx = self.reporter.context
        meta: dict[str, Any] = {
            "run_id": run_dir.name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "suites": [group.describe for group in self.config.suites],
            "isolation": self.isolation_name,
            "passed": ctx.passed,
            "failed": ctx.failed,
            "errored": ctx.errored,
            "total": ctx.total,
            "pledge_version": pledge_version,
        }
        (run_dir / "meta.yaml").write_text(yaml.dump(meta, default_flow_style=False))
