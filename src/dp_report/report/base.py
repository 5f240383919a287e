"""Abstract build report: assignment-aware aggregation of one build's results."""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional, Sequence

from dp_report.assignment import Assignment, AssignmentTestMethod
from dp_report.jacoco import JacocoResults
from dp_report.junit.results import (
    JUnitMethodResult,
    JUnitMethodResultType,
    JUnitResults,
    JUnitSummary,
    TestType,
)

from . import markers
from .markers import ToolchainMarkers


class BuildReport(ABC):
    """
    Evaluation of a submission's build, constructed once per build invocation.

    Every accessor is a pure function of the construction arguments; the report never
    touches the filesystem.

    Attributes:
        output_lines: Console output of the build tool, one entry per line
        project_folder: Absolute path of the built project (stripped from diagnostics)
        assignment: Assignment the submission targets
        junit_results: One JUnitResults per executed test class
        jacoco_results: Coverage reports (only when coverage was collected)
        assignment_test_methods: Test method inventory declared for the assignment
    """

    def __init__(
        self,
        output_lines: Sequence[str],
        project_folder: str,
        assignment: Assignment,
        junit_results: Sequence[JUnitResults],
        jacoco_results: Sequence[JacocoResults] = (),
        assignment_test_methods: Sequence[AssignmentTestMethod] = (),
        logger: Optional[logging.Logger] = None,
    ):
        self.output_lines = tuple(output_lines)
        self.project_folder = project_folder
        self.assignment = assignment
        self.junit_results = tuple(junit_results)
        self.jacoco_results = tuple(jacoco_results)
        self.assignment_test_methods = tuple(assignment_test_methods)
        self.logger = logger or logging.getLogger(__name__)

    @property
    def markers(self) -> ToolchainMarkers:
        return markers.markers_for(self.assignment.engine, self.assignment.language)

    def get_output(self) -> str:
        return "\n".join(self.output_lines)

    def _results_of_type(self, test_type: TestType) -> List[JUnitResults]:
        return [r for r in self.junit_results if r.is_of_type(test_type, self.assignment)]

    def junit_summary_as_object(self, test_type: TestType = TestType.TEACHER) -> Optional[JUnitSummary]:
        """
        Fold the results of every test class of a category.

        Args:
            test_type: Category of test classes to consider

        Returns:
            JUnitSummary, or None if no test class belongs to the category
        """
        matching = self._results_of_type(test_type)
        if not matching:
            return None

        suffix = self.assignment.mandatory_tests_suffix
        num_mandatory_ok = 0
        if suffix:
            num_mandatory_ok = sum(
                1
                for result in matching
                for method in result.junit_method_results
                if method.full_method_name.endswith(suffix) and method.outcome == JUnitMethodResultType.SUCCESS
            )

        return JUnitSummary(
            num_tests=sum(r.num_tests for r in matching),
            num_failures=sum(r.num_failures for r in matching),
            num_errors=sum(r.num_errors for r in matching),
            num_skipped=sum(r.num_skipped for r in matching),
            elapsed=sum((Decimal(str(r.time_elapsed)) for r in matching), Decimal(0)),
            num_mandatory_ok=num_mandatory_ok,
        )

    def junit_summary(self, test_type: TestType = TestType.TEACHER) -> Optional[str]:
        summary = self.junit_summary_as_object(test_type)
        if summary is None:
            return None
        return (
            f"Tests run: {summary.num_tests}, Failures: {summary.num_failures}, "
            f"Errors: {summary.num_errors}, Time elapsed: {summary.elapsed} sec"
        )

    def elapsed_time_junit(self) -> Optional[Decimal]:
        """Time spent running teacher tests, public and hidden.

        Hidden tests alone are never reported: None when there are no public teacher tests.
        """
        teacher = self.junit_summary_as_object(TestType.TEACHER)
        if teacher is None:
            return None

        total = teacher.elapsed
        hidden = self.junit_summary_as_object(TestType.HIDDEN)
        if hidden is not None:
            total += hidden.elapsed
        return total

    def has_junit_errors(self, test_type: TestType = TestType.TEACHER) -> Optional[bool]:
        summary = self.junit_summary_as_object(test_type)
        if summary is None:
            return None
        return summary.num_errors > 0 or summary.num_failures > 0

    def junit_errors(self, test_type: TestType = TestType.TEACHER) -> Optional[str]:
        """Render the failed and errored methods of a category, or None if there are none."""
        package_name = self.assignment.package_name or ""
        rendered = [
            str(method.filter_stacktrace(package_name))
            for result in self._results_of_type(test_type)
            for method in result.junit_method_results
            if method.outcome not in (JUnitMethodResultType.SUCCESS, JUnitMethodResultType.IGNORED)
        ]
        if not rendered:
            return None
        return "\n".join(rendered)

    def not_enough_student_tests_message(self) -> Optional[str]:
        """
        Check the submission's own tests against the assignment's minimum.

        Returns:
            Message describing the shortfall, or None when there are enough tests

        Raises:
            ValueError: If the assignment does not accept student tests
        """
        if not self.assignment.accepts_student_tests:
            raise ValueError(
                f"Assignment {self.assignment.id} does not accept student tests; "
                "not_enough_student_tests_message() must not be called"
            )

        minimum = self.assignment.min_student_tests or 0
        summary = self.junit_summary_as_object(TestType.STUDENT)

        if summary is None:
            return (
                "The submission doesn't include unit tests. "
                f"The assignment requires a minimum of {minimum} tests."
            )

        if summary.num_tests < minimum:
            return (
                f"The submission only includes {summary.num_tests} unit tests. "
                f"The assignment requires a minimum of {minimum} tests."
            )

        return None

    def test_results(self) -> Optional[List[JUnitMethodResult]]:
        """
        Results of the assignment's declared test methods, in declared order.

        Returns:
            One entry per inventory item (the empty sentinel when the method did not run),
            or None if the assignment declares no inventory
        """
        if not self.assignment_test_methods:
            return None

        pooled = [
            method
            for result in self.junit_results
            if result.is_teacher_public(self.assignment) or result.is_teacher_hidden()
            for method in result.junit_method_results
        ]

        matrix = []
        for expected in self.assignment_test_methods:
            match = next(
                (
                    method
                    for method in pooled
                    if method.method_name == expected.test_method and method.class_name == expected.test_class
                ),
                None,
            )
            # keep the matrix without holes
            matrix.append(match if match is not None else JUnitMethodResult.empty())

        return matrix

    def coverage(self) -> Optional[JacocoResults]:
        """Coverage counters summed over every JaCoCo report, or None if none was collected."""
        if not self.jacoco_results:
            return None
        return JacocoResults.merge(self.jacoco_results)

    @abstractmethod
    def execution_failed(self) -> bool:
        """Whether the build toolchain itself failed, making every other result untrustworthy."""

    @abstractmethod
    def compilation_errors(self) -> List[str]:
        """Compiler diagnostics, with project paths stripped."""

    @abstractmethod
    def checkstyle_validation_active(self) -> bool:
        """Whether a style-checking step ran in this build."""

    @abstractmethod
    def checkstyle_errors(self) -> List[str]:
        """Style-tool diagnostics, with project paths stripped."""


class MarkerBuildReport(BuildReport):
    """Build report whose diagnostics come from the (engine, language) marker table."""

    def compilation_errors(self) -> List[str]:
        errors = markers.compilation_errors(
            self.output_lines, self.markers, self.project_folder, self.assignment.language
        )
        if errors:
            self.logger.debug(f"[{self.assignment.id}] Found {len(errors)} compilation error lines")
        return errors

    def checkstyle_validation_active(self) -> bool:
        return markers.checkstyle_validation_active(self.output_lines, self.markers)

    def checkstyle_errors(self) -> List[str]:
        errors = markers.checkstyle_errors(
            self.output_lines, self.markers, self.project_folder, self.assignment.language
        )
        if errors:
            self.logger.debug(f"[{self.assignment.id}] Found {len(errors)} style errors")
        return errors
