"""Parsers turning JUnit XML report documents into JUnitResults."""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from typing import List, Optional, Tuple

from .results import JUnitMethodResult, JUnitMethodResultType, JUnitResults

logger = logging.getLogger(__name__)


class ReportParseError(ValueError):
    """Raised when a report document cannot be turned into results."""


class JunitResultsParser:
    """Parses the JUnit XML report of a single test class.

    Subclasses adapt the quirks of the report generator of each build engine.
    """

    engine_name = "generic"

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def parse_xml(self, content: str) -> JUnitResults:
        """
        Parse the contents of a JUnit XML report.

        Args:
            content: XML text with exactly one test suite

        Returns:
            JUnitResults for the suite's test class

        Raises:
            ReportParseError: If the document is malformed or does not hold exactly one suite
        """
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise ReportParseError(f"Invalid JUnit XML report: {e}") from e

        suite = self._single_suite(root)

        cases = suite.findall("testcase")
        full_class_name, test_class_name = self._suite_names(suite, cases)
        junit_method_results = tuple(self._parse_test_case(case, full_class_name) for case in cases)

        num_skipped = _int_attribute(suite, "skipped")
        if num_skipped is None:
            num_skipped = sum(1 for r in junit_method_results if r.outcome == JUnitMethodResultType.IGNORED)
        num_errors = _int_attribute(suite, "errors")
        if num_errors is None:
            num_errors = sum(1 for r in junit_method_results if r.outcome == JUnitMethodResultType.ERROR)
        num_failures = _int_attribute(suite, "failures")
        if num_failures is None:
            num_failures = sum(1 for r in junit_method_results if r.outcome == JUnitMethodResultType.FAILURE)
        total = _int_attribute(suite, "tests")
        if total is None:
            total = len(junit_method_results)

        results = JUnitResults(
            test_class_name=test_class_name,
            full_class_name=full_class_name,
            num_tests=total - num_skipped,
            num_errors=num_errors,
            num_failures=num_failures,
            num_skipped=num_skipped,
            time_elapsed=_float_attribute(suite, "time"),
            junit_method_results=junit_method_results,
        )

        self.logger.debug(
            f"[{self.engine_name}] Parsed {full_class_name}: {results.num_tests} tests, "
            f"{num_failures} failures, {num_errors} errors, {num_skipped} skipped"
        )
        return results

    def _single_suite(self, root: ET.Element) -> ET.Element:
        if root.tag == "testsuite":
            return root
        if root.tag == "testsuites":
            suites = root.findall("testsuite")
            if len(suites) == 1:
                return suites[0]
            raise ReportParseError(f"Expected exactly one test suite per report, found {len(suites)}")
        raise ReportParseError(f"Unexpected root element <{root.tag}> in JUnit report")

    def _suite_names(self, suite: ET.Element, cases: List[ET.Element]) -> Tuple[str, str]:
        """Return (full class name, simple class name) of the suite's test class."""
        full_class_name = suite.get("name") or ""
        if not full_class_name and cases:
            full_class_name = cases[0].get("classname", "")
        return full_class_name, full_class_name.split(".")[-1]

    def _method_name(self, case: ET.Element) -> str:
        return case.get("name", "")

    def _parse_test_case(self, case: ET.Element, full_class_name: str) -> JUnitMethodResult:
        method_name = self._method_name(case)
        class_name = case.get("classname") or full_class_name

        # first matching condition wins
        detail_element = None
        if case.find("error") is not None:
            outcome = JUnitMethodResultType.ERROR
            detail_element = case.find("error")
        elif case.find("failure") is not None:
            outcome = JUnitMethodResultType.FAILURE
            detail_element = case.find("failure")
        elif case.find("skipped") is not None:
            outcome = JUnitMethodResultType.IGNORED
        else:
            outcome = JUnitMethodResultType.SUCCESS

        failure_type = None
        failure_detail = None
        failure_error_line = None
        if detail_element is not None:
            failure_type = detail_element.get("type")
            failure_detail = (detail_element.text or detail_element.get("message") or "").strip() or None
            failure_error_line = _failure_error_line(failure_detail, class_name, method_name)

        return JUnitMethodResult(
            method_name=method_name,
            full_method_name=f"{class_name}.{method_name}",
            outcome=outcome,
            failure_type=failure_type,
            failure_error_line=failure_error_line,
            failure_detail=failure_detail,
        )


class MavenJunitResultsParser(JunitResultsParser):
    """Parser for maven-surefire-plugin reports (target/surefire-reports/TEST-*.xml)."""

    engine_name = "maven"


class GradleJunitResultsParser(JunitResultsParser):
    """Parser for Gradle test reports (build/test-results/<task>/TEST-*.xml).

    Gradle reports JUnit 5 methods as ``name()`` and may name the suite after a
    display name, so the class is taken from the test cases when they disagree.
    """

    engine_name = "gradle"

    def _suite_names(self, suite: ET.Element, cases: List[ET.Element]) -> Tuple[str, str]:
        full_class_name = suite.get("name") or ""
        if cases and cases[0].get("classname") and "." not in full_class_name:
            full_class_name = cases[0].get("classname", "")
        return full_class_name, full_class_name.split(".")[-1]

    def _method_name(self, case: ET.Element) -> str:
        name = case.get("name", "")
        if name.endswith("()"):
            name = name[:-2]
        return name


def _int_attribute(element: ET.Element, name: str) -> Optional[int]:
    value = element.get(name)
    if value is None or not value.strip():
        return None
    try:
        return int(value.replace(",", ""))
    except ValueError:
        return None


def _float_attribute(element: ET.Element, name: str) -> float:
    # surefire formats times with grouping separators, e.g. "1,234.5"
    value = (element.get(name) or "").replace(",", "")
    try:
        return float(value) if value else 0.0
    except ValueError:
        return 0.0


def _failure_error_line(detail: Optional[str], class_name: str, method_name: str) -> Optional[str]:
    """Line number of the first stack frame inside the test method (or its class)."""
    if not detail:
        return None
    method_frame = re.search(
        rf"at {re.escape(class_name)}\.{re.escape(method_name)}\([^:)]*:(\d+)\)", detail
    )
    if method_frame:
        return method_frame.group(1)
    class_frame = re.search(rf"at {re.escape(class_name)}\.[\w$<>]+\([^:)]*:(\d+)\)", detail)
    if class_frame:
        return class_frame.group(1)
    return None
