from __future__ import annotations

from pathlib import Path

from junitparser import Error, Failure, JUnitXml, TestCase, TestSuite

from pledge.reporter import CaseResult


def write_junit(run_dir: Path, cases: list[CaseResult]) -> Path:
    """Write junit.xml with one suite per top-level group, return path."""
    xml = JUnitXml()
    suites: dict[str, TestSuite] = {}

    for case in cases:
        suite_name = case.path[0] if case.path else "(ungrouped)"
        suite = suites.get(suite_name)
        if suite is None:
            suite = TestSuite(suite_name)
            suites[suite_name] = suite

        testcase = TestCase(case.name)
        testcase.classname = " / ".join(case.path)
        if case.error is not None:
            testcase.result = [Error(case.error)]
        elif not case.passed:
            testcase.result = [Failure(case.message)]
        suite.add_testcase(testcase)

    # Use append (not +=) to keep each suite's own statistics
    for suite in suites.values():
        xml.append(suite)

    junit_path = run_dir / "junit.xml"
    xml.write(str(junit_path), pretty=True)
    return junit_path


def read_junit_failures(junit_path: Path) -> int:
    """Count failed and errored cases in an existing junit.xml."""
    xml = JUnitXml.fromfile(str(junit_path))
    return sum(suite.failures + suite.errors for suite in xml)
