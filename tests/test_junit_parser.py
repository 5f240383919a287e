"""Unit tests for the JUnit XML report parsers."""

import pytest

from conftest import PACKAGE, junit_xml
from dp_report.junit import (
    GradleJunitResultsParser,
    JUnitMethodResultType,
    MavenJunitResultsParser,
    ReportParseError,
)


@pytest.fixture
def parser():
    return MavenJunitResultsParser()


class TestMavenParser:
    """Tests for surefire report parsing."""

    def test_counts_exclude_skipped(self, parser):
        """Test that skipped tests are not counted as run."""
        content = junit_xml(
            f"{PACKAGE}.TestTeacherProject",
            [
                ("testA", "success"),
                ("testB", "success"),
                ("testC", "failure"),
                ("testD", "error"),
                ("testE", "skipped"),
            ],
        )

        results = parser.parse_xml(content)

        assert results.num_tests == 4
        assert results.num_errors == 1
        assert results.num_failures == 1
        assert results.num_skipped == 1
        assert results.test_class_name == "TestTeacherProject"
        assert results.full_class_name == f"{PACKAGE}.TestTeacherProject"
        assert results.time_elapsed == 0.5

    def test_method_outcomes_in_document_order(self, parser):
        """Test that each test case becomes a method result, keeping order."""
        content = junit_xml(
            f"{PACKAGE}.TestTeacherProject",
            [("testA", "success"), ("testB", "failure"), ("testC", "error"), ("testD", "skipped")],
        )

        results = parser.parse_xml(content)

        assert [m.method_name for m in results.junit_method_results] == ["testA", "testB", "testC", "testD"]
        assert [m.outcome for m in results.junit_method_results] == [
            JUnitMethodResultType.SUCCESS,
            JUnitMethodResultType.FAILURE,
            JUnitMethodResultType.ERROR,
            JUnitMethodResultType.IGNORED,
        ]
        assert results.junit_method_results[0].full_method_name == f"{PACKAGE}.TestTeacherProject.testA"

    def test_failure_details(self, parser):
        """Test that failure type, detail and line are extracted."""
        content = junit_xml(f"{PACKAGE}.TestTeacherProject", [("testB", "failure")])

        method = parser.parse_xml(content).junit_method_results[0]

        assert method.failure_type == "java.lang.AssertionError"
        assert method.failure_detail.startswith("java.lang.AssertionError: expected:<1> but was:<2>")
        assert method.failure_error_line == "12"

    def test_error_line_comes_from_test_method_frame(self, parser):
        """Test that the error line is the test method's frame, not the first frame."""
        content = junit_xml(f"{PACKAGE}.TestTeacherProject", [("testC", "error")])

        method = parser.parse_xml(content).junit_method_results[0]

        assert method.failure_error_line == "20"

    def test_error_wins_over_failure(self, parser):
        """Test outcome priority when a test case has both error and failure children."""
        content = """<testsuite name="a.TestX" tests="1" failures="1" errors="1" skipped="0" time="0.1">
  <testcase name="testBoth" classname="a.TestX">
    <failure type="AssertionError">failed</failure>
    <error type="RuntimeException">crashed</error>
  </testcase>
</testsuite>"""

        method = parser.parse_xml(content).junit_method_results[0]

        assert method.outcome == JUnitMethodResultType.ERROR
        assert method.failure_type == "RuntimeException"

    def test_missing_attributes_fall_back_to_cases(self, parser):
        """Test that counters are derived from test cases when attributes are missing."""
        content = """<testsuite name="a.TestX">
  <testcase name="t1" classname="a.TestX"/>
  <testcase name="t2" classname="a.TestX"><failure>no</failure></testcase>
  <testcase name="t3" classname="a.TestX"><skipped/></testcase>
</testsuite>"""

        results = parser.parse_xml(content)

        assert results.num_tests == 2
        assert results.num_failures == 1
        assert results.num_errors == 0
        assert results.num_skipped == 1
        assert results.time_elapsed == 0.0

    def test_time_with_grouping_separator(self, parser):
        """Test that times like 1,234.5 are parsed."""
        content = '<testsuite name="a.TestX" tests="0" time="1,234.5"></testsuite>'

        assert parser.parse_xml(content).time_elapsed == 1234.5

    def test_single_suite_inside_testsuites(self, parser):
        """Test that a <testsuites> root with one suite is accepted."""
        content = f"<testsuites>{junit_xml('a.TestX', [('t1', 'success')]).split('?>', 1)[1]}</testsuites>"

        assert parser.parse_xml(content).full_class_name == "a.TestX"


class TestMalformedReports:
    """Tests for documents that can't produce results."""

    def test_two_suites_rejected(self, parser):
        """Test that a document with two suites fails."""
        content = """<testsuites>
  <testsuite name="a.TestX" tests="0"/>
  <testsuite name="a.TestY" tests="0"/>
</testsuites>"""

        with pytest.raises(ReportParseError, match="exactly one test suite"):
            parser.parse_xml(content)

    def test_invalid_xml_rejected(self, parser):
        with pytest.raises(ReportParseError, match="Invalid JUnit XML"):
            parser.parse_xml("<testsuite name='a.TestX'>")

    def test_unexpected_root_rejected(self, parser):
        with pytest.raises(ReportParseError, match="Unexpected root element"):
            parser.parse_xml("<report/>")

    def test_parse_error_is_value_error(self):
        assert issubclass(ReportParseError, ValueError)


class TestGradleParser:
    """Tests for Gradle report quirks."""

    def test_strips_parentheses_from_method_names(self):
        """Test that JUnit 5 method names lose the trailing ()."""
        content = """<testsuite name="a.b.TestTeacherProject" tests="1" failures="0" errors="0" skipped="0" time="0.2">
  <testcase name="testSum()" classname="a.b.TestTeacherProject" time="0.1"/>
</testsuite>"""

        method = GradleJunitResultsParser().parse_xml(content).junit_method_results[0]

        assert method.method_name == "testSum"
        assert method.full_method_name == "a.b.TestTeacherProject.testSum"

    def test_display_name_suite_uses_case_classname(self):
        """Test that a suite named after a display name takes the class from its cases."""
        content = """<testsuite name="Project tests" tests="1" failures="0" errors="0" skipped="0" time="0.2">
  <testcase name="testSum()" classname="a.b.TestTeacherProject" time="0.1"/>
</testsuite>"""

        results = GradleJunitResultsParser().parse_xml(content)

        assert results.full_class_name == "a.b.TestTeacherProject"
        assert results.test_class_name == "TestTeacherProject"
